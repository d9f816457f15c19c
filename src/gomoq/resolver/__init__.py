from __future__ import annotations

from .resolve import ResolvedPackage, TypeResolver, select_package
from .scan import scan_directory

__all__ = [
    "ResolvedPackage",
    "TypeResolver",
    "scan_directory",
    "select_package",
]
