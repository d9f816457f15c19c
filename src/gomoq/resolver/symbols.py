from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class PackageRef:
    name: str
    path: str


@dataclass(frozen=True)
class Basic:
    name: str
    pkg: PackageRef | None = None  # only unsafe.Pointer


@dataclass(frozen=True)
class Named:
    # Defined types and aliases. `pkg` is None for universe names (error, any, comparable).
    name: str
    pkg: PackageRef | None = None
    args: tuple["GoType", ...] = ()


@dataclass(frozen=True)
class Pointer:
    elem: "GoType"


@dataclass(frozen=True)
class Slice:
    elem: "GoType"


@dataclass(frozen=True)
class Array:
    length: int
    elem: "GoType"


@dataclass(frozen=True)
class Map:
    key: "GoType"
    elem: "GoType"


@dataclass(frozen=True)
class Chan:
    dir: str  # "both" | "send" | "recv"
    elem: "GoType"


@dataclass(frozen=True)
class Var:
    name: str
    type: "GoType"


@dataclass(frozen=True)
class Signature:
    params: tuple[Var, ...] = ()
    results: tuple[Var, ...] = ()
    variadic: bool = False


@dataclass(frozen=True)
class StructField:
    name: str
    type: "GoType"
    embedded: bool = False
    tag: str = ""


@dataclass(frozen=True)
class Struct:
    fields: tuple[StructField, ...] = ()


@dataclass(frozen=True)
class Method:
    name: str
    signature: Signature


@dataclass(frozen=True)
class Interface:
    # Explicit methods and embedded types as written; used for interface literals.
    methods: tuple[Method, ...] = ()
    embeddeds: tuple["GoType", ...] = ()


@dataclass(frozen=True)
class Term:
    tilde: bool
    type: "GoType"


@dataclass(frozen=True)
class Union_:
    terms: tuple[Term, ...] = ()


@dataclass(frozen=True)
class TypeParam:
    name: str


@dataclass(frozen=True)
class Opaque:
    # Anything the helper could not describe structurally, kept as go/types text.
    text: str


GoType = Union[Basic, Named, Pointer, Slice, Array, Map, Chan, Signature, Struct, Interface, Union_, TypeParam, Opaque]


@dataclass(frozen=True)
class ScopeObject:
    name: str
    kind: str  # "type" | "func" | "var" | "const" | "other"
    type_string: str
    is_interface: bool = False
    method_set: bool = True
    type_params: tuple[str, ...] = ()
    # Completed method set, in go/types order. Empty for non-interfaces.
    methods: tuple[Method, ...] = ()


@dataclass(frozen=True)
class PackageScan:
    name: str
    path: str
    files: list[str]
    objects: list[ScopeObject]
    error_kind: str | None = None
    error_message: str | None = None
    diagnostics: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DirectoryScan:
    dir: str
    packages: list[PackageScan]
    error_kind: str | None = None
    error_message: str | None = None
