from __future__ import annotations

import os


def go_command() -> str:
    """Return the Go binary used to run the resolver helper.

    Override with `GOMOQ_GO`.
    """
    return os.environ.get("GOMOQ_GO") or "go"


def gofmt_command() -> str:
    """Return the gofmt binary used to format generated mocks.

    Override with `GOMOQ_GOFMT`.
    """
    return os.environ.get("GOMOQ_GOFMT") or "gofmt"
