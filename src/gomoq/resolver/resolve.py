from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import (
    DirectoryParseError,
    InterfaceNotFoundError,
    NoPackageFoundError,
    NotAnInterfaceError,
    TypeCheckError,
    UnsupportedInterfaceError,
)
from ..log import get_logger
from .scan import scan_directory
from .symbols import DirectoryScan, PackageScan, ScopeObject

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedPackage:
    """Type-checked scope of the package mocks are generated from."""

    name: str
    path: str
    objects: dict[str, ScopeObject]

    def lookup(self, name: str) -> ScopeObject | None:
        return self.objects.get(name)

    def is_interface(self, obj: ScopeObject) -> bool:
        return obj.kind == "type" and obj.is_interface

    def interface(self, name: str) -> ScopeObject:
        obj = self.lookup(name)
        if obj is None:
            raise InterfaceNotFoundError(f"cannot find interface {name}")
        if not self.is_interface(obj):
            raise NotAnInterfaceError(f"{name} ({obj.type_string}) not an interface")
        if obj.type_params:
            raise UnsupportedInterfaceError(
                f"{name} is generic ([{', '.join(obj.type_params)}]); generic interfaces cannot be mocked"
            )
        if not obj.method_set:
            raise UnsupportedInterfaceError(f"{name} is a type constraint, not a method set")
        return obj


class TypeResolver:
    """Resolve a Go source directory into a `ResolvedPackage`."""

    def __init__(self, *, go: str | None = None):
        self._go = go

    def resolve(self, src_dir: str | Path, package_name: str | None = None) -> ResolvedPackage:
        src_dir = Path(src_dir)
        if not src_dir.is_dir():
            raise DirectoryParseError(f"source directory not found: {src_dir}")
        scan = scan_directory(src_dir=src_dir, go=self._go)
        return select_package(scan, package_name)


def select_package(scan: DirectoryScan, package_name: str | None = None) -> ResolvedPackage:
    """Pick the package to mock from and surface its errors.

    `package_name` selects the parsed package of that name when there is one;
    otherwise the first non-test package (by name) is used.
    """
    if scan.error_kind is not None:
        raise DirectoryParseError(scan.error_message or f"failed to parse {scan.dir}")

    pkg: PackageScan | None = None
    if package_name:
        pkg = next((p for p in scan.packages if p.name == package_name), None)
    if pkg is None:
        candidates = sorted((p for p in scan.packages if "_test" not in p.name), key=lambda p: p.name)
        if candidates:
            pkg = candidates[0]
    if pkg is None:
        found = ", ".join(sorted(p.name for p in scan.packages)) or "none"
        raise NoPackageFoundError(f"failed to determine package name in {scan.dir or 'directory'} (found: {found})")
    logger.debug("selected package %s (%s) from %s", pkg.name, pkg.path, scan.dir)

    if pkg.error_kind is not None:
        raise TypeCheckError(pkg.error_message or f"package {pkg.name} failed to type-check", pkg.diagnostics)

    return ResolvedPackage(name=pkg.name, path=pkg.path, objects={o.name: o for o in pkg.objects})
