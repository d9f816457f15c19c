from __future__ import annotations

from dataclasses import dataclass, field

from .imports import ImportSpec


@dataclass(frozen=True)
class ParamDescriptor:
    name: str
    type: str
    variadic: bool = False

    def type_string(self) -> str:
        """Type as written in a parameter list (`...T` for variadics)."""
        if self.variadic:
            return "..." + self.type[2:]
        return self.type

    def call_name(self) -> str:
        if self.variadic:
            return self.name + "..."
        return self.name

    def field_name(self) -> str:
        return exported(self.name)

    def __str__(self) -> str:
        return f"{self.name} {self.type_string()}"


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    params: list[ParamDescriptor] = field(default_factory=list)
    returns: list[ParamDescriptor] = field(default_factory=list)

    def arglist(self) -> str:
        return ", ".join(str(p) for p in self.params)

    def arg_call_list(self) -> str:
        return ", ".join(p.call_name() for p in self.params)

    def return_arglist(self) -> str:
        types = [p.type_string() for p in self.returns]
        if len(types) > 1:
            return f"({', '.join(types)})"
        return ", ".join(types)

    def func_type(self) -> str:
        ret = self.return_arglist()
        if ret:
            return f"func({self.arglist()}) {ret}"
        return f"func({self.arglist()})"


@dataclass(frozen=True)
class InterfaceDescriptor:
    name: str
    methods: list[MethodDescriptor] = field(default_factory=list)

    @property
    def mock_name(self) -> str:
        return f"{self.name}Mock"


@dataclass
class GenerationDocument:
    package_name: str
    objects: list[InterfaceDescriptor] = field(default_factory=list)
    imports: list[ImportSpec] = field(default_factory=list)


def exported(name: str) -> str:
    if not name:
        return ""
    return name[0].upper() + name[1:]
