from __future__ import annotations

from dataclasses import dataclass

from .resolver.symbols import PackageRef

# Imports every generated file needs.
BASE_IMPORTS: tuple[str, ...] = ("sync",)


@dataclass(frozen=True)
class ImportSpec:
    path: str
    alias: str = ""

    def line(self) -> str:
        if self.alias:
            return f'{self.alias} "{self.path}"'
        return f'"{self.path}"'


class ImportTracker:
    """Package qualifier for type rendering plus the imports it implies.

    One tracker serves a whole generation request, so a foreign package is
    imported once and always written with the same qualifier.
    """

    def __init__(self, *, local_name: str, local_path: str | None = None):
        self._local_name = local_name
        self._local_path = local_path
        # path -> qualifier, in first-use order
        self._qualifiers: dict[str, str] = {}
        self._aliased: set[str] = set()
        self._taken: set[str] = {local_name}
        for path in BASE_IMPORTS:
            self._register(path, path.rsplit("/", 1)[-1])

    def is_local(self, pkg: PackageRef) -> bool:
        if self._local_path is not None:
            return pkg.path == self._local_path
        return pkg.name == self._local_name

    def qualifier(self, pkg: PackageRef) -> str:
        if self.is_local(pkg):
            return ""
        q = self._qualifiers.get(pkg.path)
        if q is not None:
            return q
        return self._register(pkg.path, pkg.name)

    def _register(self, path: str, name: str) -> str:
        q = name
        n = 0
        while q in self._taken:
            n += 1
            q = f"{name}{n}"
        if n:
            self._aliased.add(path)
        self._taken.add(q)
        self._qualifiers[path] = q
        return q

    def imports(self) -> list[ImportSpec]:
        """All imports, base set included, sorted by path."""
        out: list[ImportSpec] = []
        for path in sorted(self._qualifiers):
            alias = self._qualifiers[path] if path in self._aliased else ""
            out.append(ImportSpec(path=path, alias=alias))
        return out

    def paths(self) -> list[str]:
        return list(self._qualifiers)
