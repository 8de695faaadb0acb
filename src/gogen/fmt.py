from __future__ import annotations

import logging
import subprocess

from .config import Settings, load_settings
from .errors import FormatError

logger = logging.getLogger(__name__)


def format_source(output_path: str | None, source: str, *, settings: Settings | None = None) -> str:
    """Run generated Go source through the configured formatter (goimports or gofmt).

    The formatter reads the source on stdin and writes the result to stdout;
    `output_path` is only used to name the source in errors.
    """
    if settings is None:
        settings = load_settings()
    name = output_path or "<stdout>"
    logger.debug("formatting %s with %s", name, settings.formatter)

    try:
        proc = subprocess.run(
            [settings.formatter],
            input=source.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError as e:
        raise FormatError(
            f"formatter not found (`{settings.formatter}` is missing from PATH). "
            "Install Go or point GOGEN_FORMATTER at gofmt/goimports."
        ) from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace") if proc.stderr else ""
        # gofmt reports positions as <standard input>:line:col.
        raise FormatError(f"failed to format {name}\n{stderr.replace('<standard input>', name)}")
    return proc.stdout.decode("utf-8")
