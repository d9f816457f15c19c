"""gomoq: generate Go interface mocks with per-method call tracking."""

from __future__ import annotations

from . import errors
from .mocker import Mocker, generate

__all__ = [
    "Mocker",
    "errors",
    "generate",
]
