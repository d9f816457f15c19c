from __future__ import annotations

import subprocess

from .config import gofmt_command
from .errors import FormatError, GoToolchainError


def format_source(src: str, *, gofmt: str | None = None) -> str:
    """Run generated Go source through gofmt and return the formatted text."""
    gofmt = gofmt or gofmt_command()
    try:
        proc = subprocess.run(
            [gofmt],
            input=src.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError as e:
        raise GoToolchainError(
            f"gofmt not found (`{gofmt}` is missing from PATH). "
            "Install Go, set GOMOQ_GOFMT, or pass --no-fmt."
        ) from e

    if proc.returncode != 0:
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        raise FormatError(f"gofmt failed\n{stderr}")
    return (proc.stdout or b"").decode("utf-8", errors="replace")
