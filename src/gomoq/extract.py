from __future__ import annotations

from .imports import ImportTracker
from .model import InterfaceDescriptor, MethodDescriptor, ParamDescriptor
from .resolver.symbols import ScopeObject, Slice, Var
from .typestring import type_string


class SignatureExtractor:
    """Turn resolved interface symbols into descriptors.

    Every type is written through `imports.qualifier`, so foreign packages
    land in the tracker as a side effect.
    """

    def __init__(self, imports: ImportTracker):
        self._imports = imports

    def extract(self, iface: ScopeObject) -> InterfaceDescriptor:
        methods: list[MethodDescriptor] = []
        for m in iface.methods:
            sig = m.signature
            methods.append(
                MethodDescriptor(
                    name=m.name,
                    params=self._extract_args(sig.params, "in%d", variadic=sig.variadic),
                    returns=self._extract_args(sig.results, "out%d"),
                )
            )
        return InterfaceDescriptor(name=iface.name, methods=methods)

    def _extract_args(
        self, items: tuple[Var, ...], name_format: str, *, variadic: bool = False
    ) -> list[ParamDescriptor]:
        params: list[ParamDescriptor] = []
        n = len(items)
        for i, v in enumerate(items):
            name = v.name
            if not name or name == "_":
                name = name_format % (i + 1)
            typename = type_string(v.type, self._imports.qualifier)
            # Only the final parameter of a variadic signature, and only when it is a slice.
            is_variadic = (
                variadic
                and i == n - 1
                and isinstance(v.type, Slice)
                and typename.startswith("[]")
            )
            params.append(ParamDescriptor(name=name, type=typename, variadic=is_variadic))
        return params
