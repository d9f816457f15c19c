"""Render resolved Go types back into Go syntax.

Follows the rules of `go/types.TypeString`: package-level names are written
through a qualifier, which decides the prefix (and records imports).
"""

from __future__ import annotations

import json
from typing import Callable

from .resolver.symbols import (
    Array,
    Basic,
    Chan,
    GoType,
    Interface,
    Map,
    Named,
    Opaque,
    PackageRef,
    Pointer,
    Signature,
    Slice,
    Struct,
    TypeParam,
    Union_,
    Var,
)

Qualifier = Callable[[PackageRef], str]


def type_string(t: GoType, qualifier: Qualifier) -> str:
    parts: list[str] = []
    _write_type(parts, t, qualifier)
    return "".join(parts)


def signature_string(sig: Signature, qualifier: Qualifier) -> str:
    """Signature without the leading `func`, as written in interface bodies."""
    parts: list[str] = []
    _write_signature(parts, sig, qualifier)
    return "".join(parts)


def _write_type_name(parts: list[str], name: str, pkg: PackageRef | None, qualifier: Qualifier) -> None:
    if pkg is not None:
        q = qualifier(pkg)
        if q:
            parts.append(q)
            parts.append(".")
    parts.append(name)


def _write_type(parts: list[str], t: GoType, qualifier: Qualifier) -> None:
    if isinstance(t, Basic):
        _write_type_name(parts, t.name, t.pkg, qualifier)
    elif isinstance(t, Named):
        _write_type_name(parts, t.name, t.pkg, qualifier)
        if t.args:
            parts.append("[")
            for i, a in enumerate(t.args):
                if i:
                    parts.append(", ")
                _write_type(parts, a, qualifier)
            parts.append("]")
    elif isinstance(t, Pointer):
        parts.append("*")
        _write_type(parts, t.elem, qualifier)
    elif isinstance(t, Slice):
        parts.append("[]")
        _write_type(parts, t.elem, qualifier)
    elif isinstance(t, Array):
        parts.append(f"[{t.length}]")
        _write_type(parts, t.elem, qualifier)
    elif isinstance(t, Map):
        parts.append("map[")
        _write_type(parts, t.key, qualifier)
        parts.append("]")
        _write_type(parts, t.elem, qualifier)
    elif isinstance(t, Chan):
        parens = False
        if t.dir == "send":
            parts.append("chan<- ")
        elif t.dir == "recv":
            parts.append("<-chan ")
        else:
            parts.append("chan ")
            # chan (<-chan T) needs parentheses to stay unambiguous.
            parens = isinstance(t.elem, Chan) and t.elem.dir == "recv"
        if parens:
            parts.append("(")
        _write_type(parts, t.elem, qualifier)
        if parens:
            parts.append(")")
    elif isinstance(t, Signature):
        parts.append("func")
        _write_signature(parts, t, qualifier)
    elif isinstance(t, Struct):
        parts.append("struct{")
        for i, f in enumerate(t.fields):
            if i:
                parts.append("; ")
            if not f.embedded:
                parts.append(f.name)
                parts.append(" ")
            _write_type(parts, f.type, qualifier)
            if f.tag:
                parts.append(" ")
                parts.append(json.dumps(f.tag, ensure_ascii=False))
        parts.append("}")
    elif isinstance(t, Interface):
        parts.append("interface{")
        first = True
        for m in t.methods:
            if not first:
                parts.append("; ")
            first = False
            parts.append(m.name)
            _write_signature(parts, m.signature, qualifier)
        for e in t.embeddeds:
            if not first:
                parts.append("; ")
            first = False
            _write_type(parts, e, qualifier)
        parts.append("}")
    elif isinstance(t, Union_):
        for i, term in enumerate(t.terms):
            if i:
                parts.append(" | ")
            if term.tilde:
                parts.append("~")
            _write_type(parts, term.type, qualifier)
    elif isinstance(t, TypeParam):
        parts.append(t.name)
    elif isinstance(t, Opaque):
        parts.append(t.text)
    else:
        raise TypeError(f"unsupported type node: {t!r}")


def _write_signature(parts: list[str], sig: Signature, qualifier: Qualifier) -> None:
    _write_tuple(parts, sig.params, sig.variadic, qualifier)
    if not sig.results:
        return
    parts.append(" ")
    if len(sig.results) == 1 and not sig.results[0].name:
        _write_type(parts, sig.results[0].type, qualifier)
        return
    _write_tuple(parts, sig.results, False, qualifier)


def _write_tuple(parts: list[str], items: tuple[Var, ...], variadic: bool, qualifier: Qualifier) -> None:
    parts.append("(")
    for i, v in enumerate(items):
        if i:
            parts.append(", ")
        if v.name:
            parts.append(v.name)
            parts.append(" ")
        t = v.type
        if variadic and i == len(items) - 1:
            if isinstance(t, Slice):
                parts.append("...")
                t = t.elem
            else:
                # append(s, "x"...) style signatures: the variadic type is a string.
                _write_type(parts, t, qualifier)
                parts.append("...")
                continue
        _write_type(parts, t, qualifier)
    parts.append(")")
