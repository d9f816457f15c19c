from __future__ import annotations

import json
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from ..config import go_command
from ..errors import GoToolchainError, ResolverError
from ..log import get_logger
from .symbols import (
    Array,
    Basic,
    Chan,
    DirectoryScan,
    GoType,
    Interface,
    Map,
    Method,
    Named,
    Opaque,
    PackageRef,
    PackageScan,
    Pointer,
    ScopeObject,
    Signature,
    Slice,
    Struct,
    StructField,
    Term,
    TypeParam,
    Union_,
    Var,
)

logger = get_logger(__name__)


def scan_directory(*, src_dir: Path, go: str | None = None) -> DirectoryScan:
    """Parse and type-check every non-test Go package in `src_dir`.

    The work is done by a small Go program (go/parser + go/types) run with
    `go run`; its JSON report is decoded into `DirectoryScan`.
    """
    src_dir = Path(src_dir).resolve()
    go = go or go_command()

    with tempfile.TemporaryDirectory(prefix="gomoq-resolve-") as td:
        helper_dir = Path(td)
        (helper_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module gomoq.resolve",
                    "",
                    "go 1.22",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (helper_dir / "main.go").write_text(_resolver_go_source(), encoding="utf-8")

        cmd = [go, "run", ".", "--dir", str(src_dir), "--go", go]
        logger.debug("running resolver helper: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(helper_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=False,
                check=False,
            )
        except FileNotFoundError as e:
            raise GoToolchainError(
                f"Go toolchain not found (`{go}` is missing from PATH). "
                "Install Go, or set GOMOQ_GO to the go binary."
            ) from e

    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        out = "\n".join([s for s in [stdout.strip("\n"), stderr.strip("\n")] if s])
        raise ResolverError(f"go resolver helper failed\n{out}")

    return decode_scan(_decode_json_output(stdout))


def _decode_json_output(out: str) -> dict[str, Any]:
    try:
        obj = json.loads(out)
    except ValueError:
        # `go run` may print toolchain notices before the report; start at the first object.
        start = out.find("{")
        if start == -1:
            raise ResolverError(f"failed to parse resolver output\n{out}")
        try:
            obj = json.loads(out[start:])
        except ValueError as e:
            raise ResolverError(f"failed to parse resolver output: {e}\n{out}") from e
    if not isinstance(obj, dict):
        raise ResolverError("resolver output is not a JSON object")
    return obj


def decode_scan(obj: dict[str, Any]) -> DirectoryScan:
    err = obj.get("error")
    packages: list[PackageScan] = []
    for item in obj.get("packages") or []:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name:
            continue
        path = item.get("path")
        files = item.get("files")
        pkg_err = item.get("error")
        objects = [_decode_object(o) for o in item.get("objects") or [] if isinstance(o, dict)]
        packages.append(
            PackageScan(
                name=name,
                path=path if isinstance(path, str) and path else name,
                files=[f for f in files if isinstance(f, str)] if isinstance(files, list) else [],
                objects=objects,
                error_kind=_error_field(pkg_err, "kind"),
                error_message=_error_field(pkg_err, "message"),
                diagnostics=_error_diagnostics(pkg_err),
            )
        )
    d = obj.get("dir")
    return DirectoryScan(
        dir=d if isinstance(d, str) else "",
        packages=packages,
        error_kind=_error_field(err, "kind"),
        error_message=_error_field(err, "message"),
    )


def _error_field(err: Any, key: str) -> str | None:
    if not isinstance(err, dict):
        return None
    v = err.get(key)
    return v if isinstance(v, str) else None


def _error_diagnostics(err: Any) -> list[str]:
    if not isinstance(err, dict):
        return []
    diags = err.get("diagnostics")
    if not isinstance(diags, list):
        return []
    return [d for d in diags if isinstance(d, str)]


def _decode_object(obj: dict[str, Any]) -> ScopeObject:
    name = obj.get("name")
    if not isinstance(name, str):
        raise ResolverError(f"scope object without a name: {obj!r}")
    tparams = obj.get("type_params") or []
    method_set = obj.get("method_set")
    return ScopeObject(
        name=name,
        kind=str(obj.get("kind") or "other"),
        type_string=str(obj.get("type_string") or ""),
        is_interface=bool(obj.get("is_interface")),
        method_set=method_set if isinstance(method_set, bool) else True,
        type_params=tuple(t for t in tparams if isinstance(t, str)),
        methods=tuple(_decode_method(m) for m in obj.get("methods") or []),
    )


def _decode_method(obj: Any) -> Method:
    if not isinstance(obj, dict) or not isinstance(obj.get("name"), str):
        raise ResolverError(f"malformed method: {obj!r}")
    sig = decode_type(obj.get("signature"))
    if not isinstance(sig, Signature):
        raise ResolverError(f"method {obj['name']} has no signature")
    return Method(name=obj["name"], signature=sig)


def _decode_vars(items: Any) -> tuple[Var, ...]:
    out: list[Var] = []
    for v in items or []:
        if not isinstance(v, dict):
            raise ResolverError(f"malformed parameter: {v!r}")
        name = v.get("name")
        out.append(Var(name=name if isinstance(name, str) else "", type=decode_type(v.get("type"))))
    return tuple(out)


def _decode_pkg(obj: Any) -> PackageRef | None:
    if not isinstance(obj, dict):
        return None
    name = obj.get("name")
    path = obj.get("path")
    if not isinstance(name, str) or not isinstance(path, str):
        return None
    return PackageRef(name=name, path=path)


def decode_type(obj: Any) -> GoType:
    """Decode one node of the helper's type tree."""
    if not isinstance(obj, dict):
        raise ResolverError(f"malformed type: {obj!r}")
    kind = obj.get("kind")
    if kind == "basic":
        return Basic(name=str(obj.get("name") or ""), pkg=_decode_pkg(obj.get("pkg")))
    if kind == "named":
        return Named(
            name=str(obj.get("name") or ""),
            pkg=_decode_pkg(obj.get("pkg")),
            args=tuple(decode_type(a) for a in obj.get("args") or []),
        )
    if kind == "pointer":
        return Pointer(elem=decode_type(obj.get("elem")))
    if kind == "slice":
        return Slice(elem=decode_type(obj.get("elem")))
    if kind == "array":
        return Array(length=int(obj.get("len") or 0), elem=decode_type(obj.get("elem")))
    if kind == "map":
        return Map(key=decode_type(obj.get("key")), elem=decode_type(obj.get("elem")))
    if kind == "chan":
        return Chan(dir=str(obj.get("dir") or "both"), elem=decode_type(obj.get("elem")))
    if kind == "signature":
        return Signature(
            params=_decode_vars(obj.get("params")),
            results=_decode_vars(obj.get("results")),
            variadic=bool(obj.get("variadic")),
        )
    if kind == "struct":
        fields: list[StructField] = []
        for f in obj.get("fields") or []:
            if not isinstance(f, dict):
                raise ResolverError(f"malformed struct field: {f!r}")
            fields.append(
                StructField(
                    name=str(f.get("name") or ""),
                    type=decode_type(f.get("type")),
                    embedded=bool(f.get("embedded")),
                    tag=str(f.get("tag") or ""),
                )
            )
        return Struct(fields=tuple(fields))
    if kind == "interface":
        return Interface(
            methods=tuple(_decode_method(m) for m in obj.get("methods") or []),
            embeddeds=tuple(decode_type(e) for e in obj.get("embeddeds") or []),
        )
    if kind == "union":
        terms: list[Term] = []
        for t in obj.get("terms") or []:
            if not isinstance(t, dict):
                raise ResolverError(f"malformed union term: {t!r}")
            terms.append(Term(tilde=bool(t.get("tilde")), type=decode_type(t.get("type"))))
        return Union_(terms=tuple(terms))
    if kind == "typeparam":
        return TypeParam(name=str(obj.get("name") or ""))
    return Opaque(text=str(obj.get("text") or kind or "?"))


def _resolver_go_source() -> str:
    # Keep this file stdlib-only so `go run` doesn't need network access.
    return r'''
package main

import (
	"encoding/json"
	"flag"
	"fmt"
	"go/ast"
	"go/importer"
	"go/parser"
	"go/token"
	"go/types"
	"os"
	"os/exec"
	"sort"
	"strings"
)

type outPkgRef struct {
	Name string `json:"name"`
	Path string `json:"path"`
}

type outVar struct {
	Name string   `json:"name"`
	Type *outType `json:"type"`
}

type outField struct {
	Name     string   `json:"name"`
	Type     *outType `json:"type"`
	Embedded bool     `json:"embedded,omitempty"`
	Tag      string   `json:"tag,omitempty"`
}

type outMethod struct {
	Name      string   `json:"name"`
	Signature *outType `json:"signature"`
}

type outTerm struct {
	Tilde bool     `json:"tilde,omitempty"`
	Type  *outType `json:"type"`
}

type outType struct {
	Kind      string      `json:"kind"`
	Name      string      `json:"name,omitempty"`
	Pkg       *outPkgRef  `json:"pkg,omitempty"`
	Args      []*outType  `json:"args,omitempty"`
	Elem      *outType    `json:"elem,omitempty"`
	Key       *outType    `json:"key,omitempty"`
	Len       int64       `json:"len,omitempty"`
	Dir       string      `json:"dir,omitempty"`
	Variadic  bool        `json:"variadic,omitempty"`
	Params    []outVar    `json:"params,omitempty"`
	Results   []outVar    `json:"results,omitempty"`
	Fields    []outField  `json:"fields,omitempty"`
	Methods   []outMethod `json:"methods,omitempty"`
	Embeddeds []*outType  `json:"embeddeds,omitempty"`
	Terms     []outTerm   `json:"terms,omitempty"`
	Text      string      `json:"text,omitempty"`
}

type outObject struct {
	Name        string      `json:"name"`
	Kind        string      `json:"kind"`
	TypeString  string      `json:"type_string"`
	IsInterface bool        `json:"is_interface"`
	MethodSet   bool        `json:"method_set"`
	TypeParams  []string    `json:"type_params"`
	Methods     []outMethod `json:"methods"`
}

type outError struct {
	Kind        string   `json:"kind"`
	Message     string   `json:"message"`
	Diagnostics []string `json:"diagnostics,omitempty"`
}

type outPackage struct {
	Name    string      `json:"name"`
	Path    string      `json:"path"`
	Files   []string    `json:"files"`
	Error   *outError   `json:"error,omitempty"`
	Objects []outObject `json:"objects"`
}

type outDoc struct {
	Dir      string       `json:"dir"`
	Error    *outError    `json:"error,omitempty"`
	Packages []outPackage `json:"packages"`
}

var anyType = types.Universe.Lookup("any").Type()

func main() {
	var dir string
	var goBin string
	flag.StringVar(&dir, "dir", "", "Go package directory to resolve")
	flag.StringVar(&goBin, "go", "go", "go binary used for `go list`")
	flag.Parse()

	if dir == "" {
		fmt.Fprintln(os.Stderr, "missing --dir")
		os.Exit(2)
	}

	// The source importer resolves imports relative to the working directory's module.
	if err := os.Chdir(dir); err != nil {
		fmt.Fprintf(os.Stderr, "chdir: %v\n", err)
		os.Exit(2)
	}

	out := outDoc{Dir: dir, Packages: []outPackage{}}
	fset := token.NewFileSet()
	noTestFiles := func(fi os.FileInfo) bool {
		return !strings.HasSuffix(fi.Name(), "_test.go")
	}
	pkgs, err := parser.ParseDir(fset, dir, noTestFiles, parser.AllErrors)
	if err != nil {
		out.Error = &outError{Kind: "parse", Message: err.Error()}
		emit(out)
		return
	}

	importPath := listImportPath(goBin)
	names := make([]string, 0, len(pkgs))
	for name := range pkgs {
		names = append(names, name)
	}
	sort.Strings(names)
	for _, name := range names {
		out.Packages = append(out.Packages, checkPackage(fset, pkgs[name], importPath))
	}
	emit(out)
}

func emit(out outDoc) {
	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	_ = enc.Encode(out)
}

func listImportPath(goBin string) string {
	b, err := exec.Command(goBin, "list", "-e", "-f", "{{.ImportPath}}", ".").Output()
	if err != nil {
		return ""
	}
	p := strings.TrimSpace(string(b))
	if p == "" || strings.HasPrefix(p, "_") || strings.Contains(p, "\n") {
		return ""
	}
	return p
}

func checkPackage(fset *token.FileSet, pkg *ast.Package, importPath string) outPackage {
	path := importPath
	if path == "" {
		path = pkg.Name
	}
	fileNames := make([]string, 0, len(pkg.Files))
	for fn := range pkg.Files {
		fileNames = append(fileNames, fn)
	}
	sort.Strings(fileNames)
	files := make([]*ast.File, 0, len(fileNames))
	for _, fn := range fileNames {
		files = append(files, pkg.Files[fn])
	}
	res := outPackage{Name: pkg.Name, Path: path, Files: fileNames, Objects: []outObject{}}

	diags := []string{}
	conf := types.Config{
		Importer: importer.ForCompiler(fset, "source", nil),
		Error: func(err error) {
			diags = append(diags, err.Error())
		},
	}
	tpkg, err := conf.Check(path, fset, files, nil)
	if err != nil && len(diags) == 0 {
		diags = append(diags, err.Error())
	}
	if len(diags) > 0 {
		res.Error = &outError{Kind: "typecheck", Message: diags[0], Diagnostics: diags}
		return res
	}

	scope := tpkg.Scope()
	for _, name := range scope.Names() {
		res.Objects = append(res.Objects, encodeObject(tpkg, scope.Lookup(name)))
	}
	return res
}

func objectKind(obj types.Object) string {
	switch obj.(type) {
	case *types.TypeName:
		return "type"
	case *types.Func:
		return "func"
	case *types.Var:
		return "var"
	case *types.Const:
		return "const"
	default:
		return "other"
	}
}

func encodeObject(tpkg *types.Package, obj types.Object) outObject {
	o := outObject{
		Name:       obj.Name(),
		Kind:       objectKind(obj),
		TypeString: types.TypeString(obj.Type(), types.RelativeTo(tpkg)),
		MethodSet:  true,
		TypeParams: []string{},
		Methods:    []outMethod{},
	}
	if _, ok := obj.(*types.TypeName); !ok || !types.IsInterface(obj.Type()) {
		return o
	}
	o.IsInterface = true
	if named, ok := obj.Type().(*types.Named); ok {
		tparams := named.TypeParams()
		for i := 0; i < tparams.Len(); i++ {
			o.TypeParams = append(o.TypeParams, tparams.At(i).Obj().Name())
		}
	}
	iface := obj.Type().Underlying().(*types.Interface).Complete()
	o.MethodSet = iface.IsMethodSet()
	for i := 0; i < iface.NumMethods(); i++ {
		m := iface.Method(i)
		o.Methods = append(o.Methods, outMethod{Name: m.Name(), Signature: encodeSignature(m.Type().(*types.Signature))})
	}
	return o
}

func pkgRef(p *types.Package) *outPkgRef {
	if p == nil {
		return nil
	}
	return &outPkgRef{Name: p.Name(), Path: p.Path()}
}

func encodeSignature(sig *types.Signature) *outType {
	return &outType{
		Kind:     "signature",
		Variadic: sig.Variadic(),
		Params:   encodeTuple(sig.Params()),
		Results:  encodeTuple(sig.Results()),
	}
}

func encodeTuple(tup *types.Tuple) []outVar {
	out := []outVar{}
	for i := 0; i < tup.Len(); i++ {
		v := tup.At(i)
		out = append(out, outVar{Name: v.Name(), Type: encodeType(v.Type())})
	}
	return out
}

func encodeType(t types.Type) *outType {
	switch t := t.(type) {
	case *types.Basic:
		if t.Kind() == types.UnsafePointer {
			return &outType{Kind: "basic", Name: "Pointer", Pkg: &outPkgRef{Name: "unsafe", Path: "unsafe"}}
		}
		return &outType{Kind: "basic", Name: t.Name()}
	case *types.Named:
		o := &outType{Kind: "named", Name: t.Obj().Name(), Pkg: pkgRef(t.Obj().Pkg())}
		args := t.TypeArgs()
		for i := 0; i < args.Len(); i++ {
			o.Args = append(o.Args, encodeType(args.At(i)))
		}
		return o
	case *types.Alias:
		return &outType{Kind: "named", Name: t.Obj().Name(), Pkg: pkgRef(t.Obj().Pkg())}
	case *types.Pointer:
		return &outType{Kind: "pointer", Elem: encodeType(t.Elem())}
	case *types.Slice:
		return &outType{Kind: "slice", Elem: encodeType(t.Elem())}
	case *types.Array:
		return &outType{Kind: "array", Len: t.Len(), Elem: encodeType(t.Elem())}
	case *types.Map:
		return &outType{Kind: "map", Key: encodeType(t.Key()), Elem: encodeType(t.Elem())}
	case *types.Chan:
		dir := "both"
		switch t.Dir() {
		case types.SendOnly:
			dir = "send"
		case types.RecvOnly:
			dir = "recv"
		}
		return &outType{Kind: "chan", Dir: dir, Elem: encodeType(t.Elem())}
	case *types.Signature:
		return encodeSignature(t)
	case *types.Struct:
		o := &outType{Kind: "struct"}
		for i := 0; i < t.NumFields(); i++ {
			f := t.Field(i)
			o.Fields = append(o.Fields, outField{Name: f.Name(), Type: encodeType(f.Type()), Embedded: f.Embedded(), Tag: t.Tag(i)})
		}
		return o
	case *types.Interface:
		if types.Type(t) == anyType {
			return &outType{Kind: "named", Name: "any"}
		}
		o := &outType{Kind: "interface"}
		for i := 0; i < t.NumExplicitMethods(); i++ {
			m := t.ExplicitMethod(i)
			o.Methods = append(o.Methods, outMethod{Name: m.Name(), Signature: encodeSignature(m.Type().(*types.Signature))})
		}
		for i := 0; i < t.NumEmbeddeds(); i++ {
			o.Embeddeds = append(o.Embeddeds, encodeType(t.EmbeddedType(i)))
		}
		return o
	case *types.Union:
		o := &outType{Kind: "union"}
		for i := 0; i < t.Len(); i++ {
			term := t.Term(i)
			o.Terms = append(o.Terms, outTerm{Tilde: term.Tilde(), Type: encodeType(term.Type())})
		}
		return o
	case *types.TypeParam:
		return &outType{Kind: "typeparam", Name: t.Obj().Name()}
	default:
		return &outType{Kind: "opaque", Text: types.TypeString(t, nil)}
	}
}
'''
