from __future__ import annotations

from .model import GenerationDocument, InterfaceDescriptor, MethodDescriptor

GENERATED_MARKER = "// Code generated by gomoq; DO NOT EDIT."


def render(doc: GenerationDocument) -> str:
    """Render Go mock source for a generation document.

    Output depends only on `doc`: the same document always renders the same
    bytes.
    """
    sync = _sync_qualifier(doc)

    lines: list[str] = []
    lines.append(GENERATED_MARKER)
    lines.append("")
    lines.append(f"package {doc.package_name}")
    lines.append("")
    lines.append("import (")
    for spec in doc.imports:
        lines.append(f"\t{spec.line()}")
    lines.append(")")

    for obj in doc.objects:
        lines.append("")
        lines.extend(_usage_doc(obj))
        lines.extend(_mock_struct(obj, sync=sync))
        for m in obj.methods:
            lines.append("")
            lines.extend(_mock_method(obj, m))

    lines.append("")
    return "\n".join(lines)


def _sync_qualifier(doc: GenerationDocument) -> str:
    for spec in doc.imports:
        if spec.path == "sync":
            return spec.alias or "sync"
    raise ValueError("generation document is missing the sync import")


def _usage_doc(obj: InterfaceDescriptor) -> list[str]:
    name = obj.name
    mocked = f"mocked{name}"
    lines = [
        f"// {obj.mock_name} is a mock implementation of {name}.",
        "//",
        f"//\tfunc TestSomethingThatUses{name}(t *testing.T) {{",
        "//",
        f"//\t\t// make and configure a mocked {name}",
        f"//\t\t{mocked} := &{obj.mock_name}{{",
    ]
    for m in obj.methods:
        lines.append(f"//\t\t\t{m.name}Func: {m.func_type()} {{")
        lines.append(f'//\t\t\t\tpanic("mock out the {m.name} method")')
        lines.append("//\t\t\t},")
    lines.extend(
        [
            "//\t\t}",
            "//",
            f"//\t\t// use {mocked} in code that requires {name}",
            "//\t\t// and then make assertions.",
            "//",
            "//\t\t// Use the CallsTo structure to access details about what calls were made:",
            "//\t\t//",
            f"//\t\t//     if len({mocked}.CallsTo.MethodName) != 1 {{",
            f'//\t\t//         t.Errorf("expected 1 call there were %d", len({mocked}.CallsTo.MethodName))',
            "//\t\t//     }",
            "//\t}",
        ]
    )
    return lines


def _mock_struct(obj: InterfaceDescriptor, *, sync: str) -> list[str]:
    lines = [f"type {obj.mock_name} struct {{"]
    for m in obj.methods:
        lines.append(f"\t// {m.name}Func mocks the {m.name} method.")
        lines.append(f"\t{m.name}Func {m.func_type()}")
        lines.append("")
    lines.append("\t// CallsTo tracks calls to the methods.")
    lines.append("\tCallsTo struct {")
    for m in obj.methods:
        lines.append(f"\t\tlock{m.name} {sync}.Mutex // protects {m.name}")
        lines.append(f"\t\t// {m.name} holds details about calls to the {m.name} method.")
        if not m.params:
            lines.append(f"\t\t{m.name} []struct{{}}")
            continue
        lines.append(f"\t\t{m.name} []struct {{")
        for p in m.params:
            lines.append(f"\t\t\t// {p.field_name()} is the {p.name} argument value.")
            lines.append(f"\t\t\t{p.field_name()} {p.type}")
        lines.append("\t\t}")
    lines.append("\t}")
    lines.append("}")
    return lines


def _mock_method(obj: InterfaceDescriptor, m: MethodDescriptor) -> list[str]:
    ret = m.return_arglist()
    header = f"func (mock *{obj.mock_name}) {m.name}({m.arglist()})"
    if ret:
        header = f"{header} {ret}"
    lines = [
        f"// {m.name} calls {m.name}Func.",
        f"{header} {{",
        f"\tif mock.{m.name}Func == nil {{",
        f'\t\tpanic("gomoq: {obj.mock_name}.{m.name}Func is nil but {obj.mock_name}.{m.name} was just called")',
        "\t}",
        f"\tmock.CallsTo.lock{m.name}.Lock()",
    ]
    if m.params:
        lines.append(f"\tmock.CallsTo.{m.name} = append(mock.CallsTo.{m.name}, struct {{")
        for p in m.params:
            lines.append(f"\t\t{p.field_name()} {p.type}")
        lines.append("\t}{")
        for p in m.params:
            lines.append(f"\t\t{p.field_name()}: {p.name},")
        lines.append("\t})")
    else:
        lines.append(f"\tmock.CallsTo.{m.name} = append(mock.CallsTo.{m.name}, struct{{}}{{}})")
    lines.append(f"\tmock.CallsTo.lock{m.name}.Unlock()")
    if ret:
        lines.append(f"\treturn mock.{m.name}Func({m.arg_call_list()})")
    else:
        lines.append(f"\tmock.{m.name}Func({m.arg_call_list()})")
    lines.append("}")
    return lines
