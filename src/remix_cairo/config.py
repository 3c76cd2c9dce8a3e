"""Pydantic configuration for the remote compiler client.

This module provides:
- CompilerConfig: remote compilation endpoint settings, loadable from
  environment variables with the REMIX_CAIRO_ prefix
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "http://localhost:8000"


class CompilerConfig(BaseSettings):
    """Remote compilation endpoint configuration.

    Can be loaded from environment variables with the REMIX_CAIRO_ prefix.

    Attributes:
        base_url: Compiler API base URL (http:// or https://).
        intermediate_route: Route of the source -> Sierra stage.
        final_route: Route of the Sierra -> CASM stage.
        timeout_seconds: Per-request timeout (applies to each stage separately).
        follow_redirects: Follow HTTP redirects from the compiler API.

    Example:
        >>> # From environment (REMIX_CAIRO_BASE_URL=...)
        >>> config = CompilerConfig()
        >>>
        >>> # Explicit
        >>> config = CompilerConfig(
        ...     base_url="https://cairo-compile.example.org/",
        ...     intermediate_route="compile-to-sierra",
        ...     final_route="compile-to-casm",
        ... )
        >>> config.endpoint("intermediate")
        'https://cairo-compile.example.org/compile-to-sierra'
    """

    model_config = SettingsConfigDict(
        env_prefix="REMIX_CAIRO_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=1,
        description="Compiler API base URL",
    )
    intermediate_route: str = Field(
        default="compile-to-intermediate",
        min_length=1,
        description="Route compiling source to the intermediate representation",
    )
    final_route: str = Field(
        default="compile-to-final",
        min_length=1,
        description="Route compiling the intermediate representation to the final one",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Timeout for each remote compilation request",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects returned by the compiler API",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate URL format (must be http:// or https://)."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("intermediate_route", "final_route")
    @classmethod
    def normalize_route(cls, v: str) -> str:
        """Strip surrounding slashes so routes join cleanly onto base_url."""
        route = v.strip().strip("/")
        if not route:
            msg = "route cannot be empty"
            raise ValueError(msg)
        return route

    def endpoint(self, kind: str) -> str:
        """Return the full URL for a compilation stage.

        Args:
            kind: "intermediate" or "final".

        Returns:
            Absolute endpoint URL.

        Raises:
            ValueError: If kind is not a known stage.
        """
        if kind == "intermediate":
            return f"{self.base_url}/{self.intermediate_route}"
        if kind == "final":
            return f"{self.base_url}/{self.final_route}"
        msg = f"Unknown compilation stage: {kind}"
        raise ValueError(msg)
