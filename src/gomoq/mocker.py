from __future__ import annotations

from pathlib import Path
from typing import Iterable, TextIO

from .errors import NoInterfaceSpecifiedError
from .extract import SignatureExtractor
from .imports import ImportTracker
from .log import get_logger
from .model import GenerationDocument
from .render import render
from .resolver.resolve import ResolvedPackage, TypeResolver

logger = get_logger(__name__)


class Mocker:
    """Generate mock structs for interfaces declared in one Go package directory.

    `package_name` names the package the mocks are written into. It defaults
    to the package found in `src`; when it names a different package, types
    from the source package are imported and qualified like any other.
    """

    def __init__(self, src: str | Path, package_name: str | None = None, *, resolver: TypeResolver | None = None):
        self.src = Path(src)
        self.package_name = package_name or None
        self._resolver = resolver or TypeResolver()

    def mock(self, out: TextIO, *names: str) -> None:
        """Write mocks for `names`, in order, to `out` with a single write."""
        out.write(self.render(*names))

    def render(self, *names: str) -> str:
        if not names:
            raise NoInterfaceSpecifiedError("must specify one interface")
        names = tuple(dict.fromkeys(names))

        pkg = self._resolver.resolve(self.src, self.package_name)
        return build_source(pkg, names, package_name=self.package_name)


def build_source(pkg: ResolvedPackage, names: Iterable[str], *, package_name: str | None = None) -> str:
    """Extract every interface in `names` from `pkg` and render the mock file."""
    out_name = package_name or pkg.name
    imports = ImportTracker(local_name=out_name, local_path=pkg.path if out_name == pkg.name else None)
    extractor = SignatureExtractor(imports)

    doc = GenerationDocument(package_name=out_name)
    for name in names:
        iface = pkg.interface(name)
        doc.objects.append(extractor.extract(iface))
        logger.debug("extracted %s with %d methods", name, len(iface.methods))
    doc.imports = imports.imports()
    return render(doc)


def generate(
    src: str | Path,
    names: Iterable[str],
    *,
    package_name: str | None = None,
    resolver: TypeResolver | None = None,
) -> str:
    return Mocker(src, package_name, resolver=resolver).render(*names)
