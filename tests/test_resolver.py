from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from gomoq.errors import (
    DirectoryParseError,
    GoToolchainError,
    InterfaceNotFoundError,
    NoPackageFoundError,
    NotAnInterfaceError,
    ResolverError,
    TypeCheckError,
    UnsupportedInterfaceError,
)
from gomoq.resolver.resolve import TypeResolver, select_package
from gomoq.resolver.scan import decode_scan, decode_type, scan_directory
from gomoq.resolver.symbols import Basic, Chan, Named, PackageRef, Signature, Slice


def _greeter_object() -> dict:
    return {
        "name": "Greeter",
        "kind": "type",
        "type_string": "interface{Greet(name string) string}",
        "is_interface": True,
        "method_set": True,
        "type_params": [],
        "methods": [
            {
                "name": "Greet",
                "signature": {
                    "kind": "signature",
                    "params": [{"name": "name", "type": {"kind": "basic", "name": "string"}}],
                    "results": [{"name": "", "type": {"kind": "basic", "name": "string"}}],
                },
            }
        ],
    }


def _scan_doc(*packages: dict, error: dict | None = None) -> dict:
    doc = {"dir": "/src/greet", "packages": list(packages)}
    if error is not None:
        doc["error"] = error
    return doc


def _package(name: str, *objects: dict, error: dict | None = None) -> dict:
    pkg = {"name": name, "path": f"example.com/{name}", "files": [f"/src/{name}/{name}.go"], "objects": list(objects)}
    if error is not None:
        pkg["error"] = error
    return pkg


def test_decode_type_tree():
    t = decode_type(
        {
            "kind": "signature",
            "variadic": True,
            "params": [
                {"name": "ctx", "type": {"kind": "named", "name": "Context", "pkg": {"name": "context", "path": "context"}}},
                {"name": "xs", "type": {"kind": "slice", "elem": {"kind": "named", "name": "any"}}},
            ],
            "results": [{"name": "", "type": {"kind": "chan", "dir": "recv", "elem": {"kind": "basic", "name": "int"}}}],
        }
    )
    assert isinstance(t, Signature)
    assert t.variadic is True
    assert t.params[0].type == Named("Context", PackageRef("context", "context"))
    assert t.params[1].type == Slice(Named("any"))
    assert t.results[0].type == Chan("recv", Basic("int"))


def test_decode_type_rejects_garbage():
    with pytest.raises(ResolverError):
        decode_type(None)
    with pytest.raises(ResolverError):
        decode_type({"kind": "pointer"})


def test_select_package_by_name_and_default():
    scan = decode_scan(_scan_doc(_package("greet", _greeter_object()), _package("alpha")))
    assert select_package(scan, "greet").name == "greet"
    # Default: first non-test package by name.
    assert select_package(scan).name == "alpha"
    # Unknown hint falls back to the default package.
    assert select_package(scan, "greetmock").name == "alpha"


def test_select_package_skips_test_packages():
    scan = decode_scan(_scan_doc(_package("greet_test"), _package("greet", _greeter_object())))
    pkg = select_package(scan)
    assert pkg.name == "greet"
    assert pkg.path == "example.com/greet"


def test_no_package_found():
    with pytest.raises(NoPackageFoundError):
        select_package(decode_scan(_scan_doc()))
    with pytest.raises(NoPackageFoundError):
        select_package(decode_scan(_scan_doc(_package("greet_test"))))


def test_parse_error_is_directory_parse_error():
    scan = decode_scan(_scan_doc(error={"kind": "parse", "message": "greet.go:3:1: expected declaration"}))
    with pytest.raises(DirectoryParseError, match="expected declaration"):
        select_package(scan)


def test_type_check_error_carries_diagnostics():
    err = {"kind": "typecheck", "message": "a.go:1: undefined: X", "diagnostics": ["a.go:1: undefined: X", "b.go:2: y"]}
    scan = decode_scan(_scan_doc(_package("greet", error=err), _package("other")))
    with pytest.raises(TypeCheckError) as ei:
        select_package(scan, "greet")
    assert ei.value.diagnostics == ["a.go:1: undefined: X", "b.go:2: y"]
    # A broken sibling package does not matter when another one is selected.
    assert select_package(scan, "other").name == "other"


def test_lookup_and_interface_errors():
    config = {"name": "Config", "kind": "type", "type_string": "struct{Name string}", "is_interface": False}
    reader_var = {"name": "DefaultReader", "kind": "var", "type_string": "io.Reader", "is_interface": True}
    generic = dict(_greeter_object(), name="Box", type_params=["T"])
    constraint = dict(_greeter_object(), name="Number", method_set=False, methods=[])
    pkg = select_package(
        decode_scan(_scan_doc(_package("greet", _greeter_object(), config, reader_var, generic, constraint)))
    )

    assert pkg.lookup("Missing") is None
    assert pkg.is_interface(pkg.lookup("Greeter"))
    assert not pkg.is_interface(pkg.lookup("DefaultReader"))
    assert pkg.interface("Greeter").methods[0].name == "Greet"

    with pytest.raises(InterfaceNotFoundError, match="cannot find interface Missing"):
        pkg.interface("Missing")
    with pytest.raises(NotAnInterfaceError, match=r"Config \(struct\{Name string\}\) not an interface"):
        pkg.interface("Config")
    with pytest.raises(NotAnInterfaceError):
        pkg.interface("DefaultReader")
    with pytest.raises(UnsupportedInterfaceError, match="generic"):
        pkg.interface("Box")
    with pytest.raises(UnsupportedInterfaceError, match="constraint"):
        pkg.interface("Number")


def test_missing_directory(tmp_path: Path):
    with pytest.raises(DirectoryParseError, match="not found"):
        TypeResolver().resolve(tmp_path / "nope")


def test_scan_missing_go_raises_toolchain_error(monkeypatch, tmp_path: Path):
    def fake_run(*args, **kwargs):  # noqa: ANN001
        raise FileNotFoundError("go")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(GoToolchainError, match=r"Go toolchain not found"):
        scan_directory(src_dir=tmp_path)


def test_scan_helper_failure_raises_resolver_error(monkeypatch, tmp_path: Path):
    def fake_run(*args, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(args=args[0], returncode=1, stdout=b"", stderr=b"go: cannot find main module")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(ResolverError, match="cannot find main module"):
        scan_directory(src_dir=tmp_path)


def test_scan_tolerates_non_utf8_and_notice_prefix(monkeypatch, tmp_path: Path):
    payload = b"\x88\x00go: downloading go1.22\n" + json.dumps(
        _scan_doc(_package("greet", _greeter_object()))
    ).encode("utf-8")
    seen: list[list[str]] = []

    def fake_run(*args, **kwargs):  # noqa: ANN001
        seen.append(list(args[0]))
        assert (Path(kwargs["cwd"]) / "main.go").exists()
        return subprocess.CompletedProcess(args=args[0], returncode=0, stdout=payload)

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setenv("GOMOQ_GO", "/opt/go/bin/go")

    scan = scan_directory(src_dir=tmp_path)
    assert [p.name for p in scan.packages] == ["greet"]
    assert scan.packages[0].objects[0].methods[0].signature.params[0].name == "name"
    assert seen[0][:3] == ["/opt/go/bin/go", "run", "."]
    assert seen[0][3:5] == ["--dir", str(tmp_path.resolve())]


def test_scan_rejects_unparseable_output(monkeypatch, tmp_path: Path):
    def fake_run(*args, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(args=args[0], returncode=0, stdout=b"no json here")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(ResolverError, match="failed to parse resolver output"):
        scan_directory(src_dir=tmp_path)


def test_resolver_uses_scan(monkeypatch, tmp_path: Path):
    from gomoq.resolver import resolve as rmod
    from gomoq.resolver.scan import decode_scan as _decode

    calls: list[tuple[Path, str | None]] = []

    def fake_scan(*, src_dir: Path, go: str | None = None):
        calls.append((src_dir, go))
        return _decode(_scan_doc(_package("greet", _greeter_object())))

    monkeypatch.setattr(rmod, "scan_directory", fake_scan)
    pkg = TypeResolver(go="go1.22").resolve(tmp_path)
    assert pkg.name == "greet"
    assert calls == [(tmp_path, "go1.22")]
