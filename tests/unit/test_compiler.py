"""Unit tests for RemoteCompiler."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from remix_cairo.compiler import RemoteCompiler
from remix_cairo.config import CompilerConfig
from remix_cairo.errors import STAGE_TO_FINAL, STAGE_TO_INTERMEDIATE, RemoteCompilationError

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def config() -> CompilerConfig:
    """Return a config pointing at a fake compiler API."""
    return CompilerConfig(
        base_url="http://compiler.test",
        intermediate_route="compile-to-sierra",
        final_route="compile-to-casm",
    )


def make_compiler(config: CompilerConfig, handler: Handler) -> RemoteCompiler:
    """Build a compiler whose requests are answered by handler."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return RemoteCompiler(config, client=client)


class TestSuccessfulStages:
    """Tests for successful request/response round-trips."""

    def test_to_intermediate_posts_source(self, config: CompilerConfig) -> None:
        """Test stage 1 posts the raw source as an octet stream."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text='{"sierra_program": []}')

        compiler = make_compiler(config, handler)
        result = compiler.to_intermediate(b"mod counter {}")

        assert result == '{"sierra_program": []}'
        (request,) = requests
        assert request.method == "POST"
        assert str(request.url) == "http://compiler.test/compile-to-sierra"
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert request.content == b"mod counter {}"

    def test_to_final_posts_intermediate_verbatim(self, config: CompilerConfig) -> None:
        """Test stage 2 sends the Sierra text unmodified to the final route."""
        requests: list[httpx.Request] = []
        sierra = '{\n  "sierra_program": ["0x1"]\n}'

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text='{"bytecode": []}')

        compiler = make_compiler(config, handler)
        result = compiler.to_final(sierra)

        assert result == '{"bytecode": []}'
        assert requests[0].url.path == "/compile-to-casm"
        assert requests[0].content == sierra.encode("utf-8")

    def test_any_success_status_accepted(self, config: CompilerConfig) -> None:
        """Test 2xx statuses other than 200 are treated as success."""
        compiler = make_compiler(config, lambda request: httpx.Response(201, text="ok"))

        assert compiler.to_intermediate(b"x") == "ok"

    def test_no_caching_between_calls(self, config: CompilerConfig) -> None:
        """Test identical calls each reach the server."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, text="{}")

        compiler = make_compiler(config, handler)
        compiler.to_intermediate(b"x")
        compiler.to_intermediate(b"x")

        assert calls == 2


class TestStageFailures:
    """Tests for failure mapping to RemoteCompilationError."""

    def test_server_error(self, config: CompilerConfig) -> None:
        """Test a 500 response fails stage 1 with its status code."""
        compiler = make_compiler(
            config, lambda request: httpx.Response(500, text="compiler panicked")
        )

        with pytest.raises(RemoteCompilationError) as exc_info:
            compiler.to_intermediate(b"x")

        err = exc_info.value
        assert err.stage == STAGE_TO_INTERMEDIATE
        assert err.status_code == 500
        assert "500" in err.cause
        assert "stage=to-intermediate" in str(err)

    def test_client_error_on_final_stage(self, config: CompilerConfig) -> None:
        """Test a 4xx response fails stage 2 with stage to-final."""
        compiler = make_compiler(config, lambda request: httpx.Response(422, text="bad sierra"))

        with pytest.raises(RemoteCompilationError) as exc_info:
            compiler.to_final("{}")

        assert exc_info.value.stage == STAGE_TO_FINAL
        assert exc_info.value.status_code == 422

    def test_connection_error(self, config: CompilerConfig) -> None:
        """Test transport errors are wrapped without a status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        compiler = make_compiler(config, handler)

        with pytest.raises(RemoteCompilationError) as exc_info:
            compiler.to_intermediate(b"x")

        assert exc_info.value.status_code is None
        assert exc_info.value.cause.startswith("request failed")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self, config: CompilerConfig) -> None:
        """Test timeouts are reported as such."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        compiler = make_compiler(config, handler)

        with pytest.raises(RemoteCompilationError) as exc_info:
            compiler.to_final("{}")

        assert exc_info.value.stage == STAGE_TO_FINAL
        assert exc_info.value.cause.startswith("request timed out")

    def test_undecodable_body(self, config: CompilerConfig) -> None:
        """Test a body that does not decode with the declared charset fails the stage."""
        compiler = make_compiler(
            config,
            lambda request: httpx.Response(
                200,
                content=b"\xff\xfe\xfa",
                headers={"Content-Type": "application/json; charset=utf-8"},
            ),
        )

        with pytest.raises(RemoteCompilationError) as exc_info:
            compiler.to_intermediate(b"x")

        assert "unreadable response body" in exc_info.value.cause


class TestClientLifecycle:
    """Tests for client ownership."""

    def test_external_client_left_open(self, config: CompilerConfig) -> None:
        """Test close() does not close a caller-supplied client."""
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        with RemoteCompiler(config, client=client):
            pass

        assert client.is_closed is False
        client.close()

    def test_owned_client_closed(self, config: CompilerConfig) -> None:
        """Test close() closes the client the compiler created."""
        compiler = RemoteCompiler(config)
        compiler.close()

        assert compiler._client.is_closed is True

    def test_owned_client_uses_config(self) -> None:
        """Test the created client carries the configured timeout."""
        compiler = RemoteCompiler(CompilerConfig(timeout_seconds=5))

        assert compiler._client.timeout.read == 5
        assert compiler._client.follow_redirects is True
        compiler.close()
