from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, field_validator

_TRUE = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """
    Process configuration for the recognition gateway.

    Built once at startup and handed to `create_app` / `build_graph`.
    """

    input_dir: str = "/input"
    output_dir: str = "/output"
    recognizer_url: str = "http://darkflow:8000"

    # Skip TLS certificate checks when downloading images.
    insecure_skip_verify: bool = False
    # Fail a download on 4xx/5xx instead of saving the error body.
    fetch_check_status: bool = False

    fetch_timeout: Optional[float] = None
    recognizer_timeout: Optional[float] = None
    # Seconds to wait for the output directory to appear after the
    # recognition call returns. 0 disables waiting.
    result_wait: float = 0.0

    output_prefix: str = "/output"

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @field_validator("input_dir", "output_dir")
    @classmethod
    def _absolute(cls, v: str) -> str:
        return os.path.abspath(v)

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Read settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {}

        for field, var in (
            ("input_dir", "INPUT_DIR"),
            ("output_dir", "OUTPUT_DIR"),
            ("recognizer_url", "DARKFLOW_URL"),
            ("fetch_timeout", "FETCH_TIMEOUT"),
            ("recognizer_timeout", "RECOGNIZER_TIMEOUT"),
            ("result_wait", "RESULT_WAIT"),
            ("host", "HOST"),
            ("port", "PORT"),
            ("log_level", "LOG_LEVEL"),
        ):
            if env.get(var):
                values[field] = env[var]

        for field, var in (
            ("insecure_skip_verify", "INSECURE_SKIP_VERIFY"),
            ("fetch_check_status", "FETCH_CHECK_STATUS"),
        ):
            if env.get(var):
                values[field] = env[var].lower() in _TRUE

        return cls(**values)

    def ensure_dirs(self) -> None:
        """Create the input and output roots. Raises OSError on failure."""
        os.makedirs(self.input_dir, exist_ok=True)
        os.makedirs(self.output_dir, exist_ok=True)
