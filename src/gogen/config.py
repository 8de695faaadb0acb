from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class Settings:
    """Process-wide, read-only tool configuration.

    Override with `GOGEN_GO`, `GOGEN_FORMATTER` and `GOGEN_LOG_LEVEL`.
    """

    go: str = "go"
    formatter: str = "gofmt"
    log_level: str = "WARNING"


def default_formatter() -> str:
    """Prefer goimports, which also prunes unused imports, and fall back to gofmt."""
    if shutil.which("goimports") is not None:
        return "goimports"
    return "gofmt"


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    if env is None:
        env = os.environ
    defaults = Settings()
    return Settings(
        go=env.get("GOGEN_GO") or defaults.go,
        formatter=env.get("GOGEN_FORMATTER") or default_formatter(),
        log_level=(env.get("GOGEN_LOG_LEVEL") or defaults.log_level).upper(),
    )
