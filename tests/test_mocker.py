from __future__ import annotations

import io
from pathlib import Path

import pytest

from gomoq import Mocker, generate
from gomoq.errors import InterfaceNotFoundError, NoInterfaceSpecifiedError, NotAnInterfaceError
from gomoq.resolver.resolve import ResolvedPackage
from gomoq.resolver.symbols import Basic, Method, Named, PackageRef, Pointer, ScopeObject, Signature, Slice, Var

SVC = PackageRef("svc", "example.com/svc")
CONTEXT = PackageRef("context", "context")
STRING = Basic("string")


def _iface(name: str, *methods: Method) -> ScopeObject:
    return ScopeObject(name=name, kind="type", type_string="interface{...}", is_interface=True, methods=methods)


def _package() -> ResolvedPackage:
    ctx = Var("ctx", Named("Context", CONTEXT))
    greeter = _iface("Greeter", Method("Greet", Signature(params=(Var("name", STRING),), results=(Var("", STRING),))))
    store = _iface(
        "Store",
        # Close comes from an embedded io.Closer; the resolver hands over the flattened set.
        Method("Close", Signature(results=(Var("", Named("error")),))),
        Method("Get", Signature(params=(ctx, Var("key", STRING)), results=(Var("", Pointer(Named("Config", SVC))),))),
        Method("Put", Signature(params=(ctx, Var("", STRING), Var("", Slice(Basic("byte")))))),
    )
    config = ScopeObject(name="Config", kind="type", type_string="struct{Name string}")
    return ResolvedPackage(
        name="svc",
        path="example.com/svc",
        objects={o.name: o for o in (greeter, store, config)},
    )


class _FakeResolver:
    def __init__(self, pkg: ResolvedPackage):
        self.pkg = pkg
        self.calls: list[tuple[Path, str | None]] = []

    def resolve(self, src_dir, package_name=None):  # noqa: ANN001
        self.calls.append((Path(src_dir), package_name))
        return self.pkg


def test_no_interfaces_fails_before_resolving():
    resolver = _FakeResolver(_package())
    with pytest.raises(NoInterfaceSpecifiedError):
        Mocker("/src/svc", resolver=resolver).mock(io.StringIO())
    assert resolver.calls == []


def test_greeter_scenario_text():
    out = io.StringIO()
    Mocker("/src/svc", resolver=_FakeResolver(_package())).mock(out, "Greeter")
    src = out.getvalue()
    assert "\npackage svc\n" in src
    assert "\tGreetFunc func(name string) string\n" in src
    assert "func (mock *GreeterMock) Greet(name string) string {\n" in src
    assert "\t\tName: name,\n" in src
    assert "\treturn mock.GreetFunc(name)\n" in src


def test_every_method_rendered_once_and_imports_collected():
    src = generate("/src/svc", ["Store"], resolver=_FakeResolver(_package()))
    for name in ("Close", "Get", "Put"):
        assert src.count(f"\t{name}Func func(") == 1
        assert src.count(f"func (mock *StoreMock) {name}(") == 1
    assert 'import (\n\t"context"\n\t"sync"\n)\n' in src
    assert "\tGetFunc func(ctx context.Context, key string) *Config\n" in src
    assert "\tPutFunc func(ctx context.Context, in2 string, in3 []byte)\n" in src
    assert "\t\t\tIn2 string\n" in src


def test_request_order_and_duplicate_names():
    src = generate("/src/svc", ["Store", "Greeter", "Store"], resolver=_FakeResolver(_package()))
    assert src.count("type StoreMock struct") == 1
    assert src.index("type StoreMock struct") < src.index("type GreeterMock struct")


def test_generation_is_deterministic():
    a = generate("/src/svc", ["Store", "Greeter"], resolver=_FakeResolver(_package()))
    b = generate("/src/svc", ["Store", "Greeter"], resolver=_FakeResolver(_package()))
    assert a == b


def test_lookup_errors_propagate_and_nothing_is_written():
    out = io.StringIO()
    mocker = Mocker("/src/svc", resolver=_FakeResolver(_package()))
    with pytest.raises(InterfaceNotFoundError):
        mocker.mock(out, "Greeter", "Missing")
    with pytest.raises(NotAnInterfaceError):
        mocker.mock(out, "Config")
    assert out.getvalue() == ""


def test_other_output_package_qualifies_source_types():
    resolver = _FakeResolver(_package())
    src = generate("/src/svc", ["Store"], package_name="svcmock", resolver=resolver)
    assert resolver.calls == [(Path("/src/svc"), "svcmock")]
    assert "\npackage svcmock\n" in src
    assert 'import (\n\t"context"\n\t"example.com/svc"\n\t"sync"\n)\n' in src
    assert "\tGetFunc func(ctx context.Context, key string) *svc.Config\n" in src
