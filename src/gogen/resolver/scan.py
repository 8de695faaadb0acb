from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from ..config import Settings, load_settings
from ..errors import ResolutionError
from .resolve import resolve_source_dir
from .symbols import (
    ImportedPackage,
    ResolvedDecl,
    ResolvedField,
    ResolvedInterface,
    ResolvedMethod,
    ResolvedOther,
    ResolvedSignature,
    ResolvedStruct,
    ResolvedType,
    ResolvedVar,
    TypeRef,
)

logger = logging.getLogger(__name__)


def resolve_declaration(
    directory: str | Path,
    type_name: str,
    *,
    settings: Settings | None = None,
) -> ResolvedDecl:
    """Type-check the Go package in `directory` and resolve the type `type_name`.

    The package is loaded and checked by a small Go program using `go/types`,
    so the display strings of types are exactly what the Go toolchain prints.
    """
    if settings is None:
        settings = load_settings()
    source = resolve_source_dir(directory)
    logger.info("Parsing %s (module %s)", source.package_dir, source.module_path)

    with tempfile.TemporaryDirectory(prefix="gogen-resolve-") as td:
        helper_dir = Path(td)
        (helper_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module gogen.resolve",
                    "",
                    "go 1.21",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (helper_dir / "main.go").write_text(_resolver_go_source(), encoding="utf-8")

        cmd = [settings.go, "run", ".", "--dir", str(source.package_dir), "--name", type_name]
        logger.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(helper_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except FileNotFoundError as e:
            raise ResolutionError(
                f"Go toolchain not found (`{settings.go}` is missing from PATH). "
                "Install Go or point GOGEN_GO at the go binary."
            ) from e

    stdout = _to_text(proc.stdout)
    if proc.returncode != 0:
        stderr = _to_text(proc.stderr)
        raise ResolutionError(f"resolving {type_name} in {source.package_dir} failed\n{stderr}{stdout}")

    obj = _decode_json(stdout)
    if not obj.get("found"):
        raise ResolutionError(f"type {type_name} not found in {source.package_dir}")
    return decode_resolved_decl(type_name, obj)


def decode_resolved_decl(type_name: str, obj: dict[str, Any]) -> ResolvedDecl:
    """Build a `ResolvedDecl` from the resolver helper's JSON document."""
    pkg = obj.get("package")
    if not isinstance(pkg, dict):
        raise ResolutionError("resolver output is missing package information")

    imports: list[ImportedPackage] = []
    for item in obj.get("imports") or []:
        if not isinstance(item, dict):
            raise ResolutionError(f"malformed import entry in resolver output: {item!r}")
        imports.append(ImportedPackage(name=str(item.get("name", "")), path=str(item.get("path", ""))))

    return ResolvedDecl(
        name=type_name,
        type=_decode_type(obj.get("type")),
        package_path=str(pkg.get("path", "")),
        package_name=str(pkg.get("name", "")),
        imports=imports,
    )


def _decode_type(t: Any) -> ResolvedType:
    if not isinstance(t, dict) or not isinstance(t.get("kind"), str):
        raise ResolutionError(f"malformed type in resolver output: {t!r}")
    kind = t["kind"]
    if kind == "interface":
        methods: list[ResolvedMethod] = []
        for m in t.get("methods") or []:
            if not isinstance(m, dict) or not isinstance(m.get("name"), str):
                raise ResolutionError(f"malformed method in resolver output: {m!r}")
            methods.append(
                ResolvedMethod(
                    name=m["name"],
                    signature=ResolvedSignature(
                        params=_decode_vars(m.get("params")),
                        results=_decode_vars(m.get("results")),
                        variadic=bool(m.get("variadic", False)),
                    ),
                )
            )
        return ResolvedInterface(explicit_methods=methods)
    if kind == "struct":
        fields: list[ResolvedField] = []
        for f in t.get("fields") or []:
            if not isinstance(f, dict) or not isinstance(f.get("name"), str):
                raise ResolutionError(f"malformed field in resolver output: {f!r}")
            fields.append(
                ResolvedField(
                    name=f["name"],
                    type=_decode_type_ref(f.get("type")),
                    tag=str(f.get("tag") or ""),
                    embedded=bool(f.get("embedded", False)),
                )
            )
        return ResolvedStruct(fields=fields)
    return ResolvedOther(kind=kind)


def _decode_vars(items: Any) -> list[ResolvedVar]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ResolutionError(f"malformed tuple in resolver output: {items!r}")
    out: list[ResolvedVar] = []
    for v in items:
        if not isinstance(v, dict):
            raise ResolutionError(f"malformed variable in resolver output: {v!r}")
        out.append(ResolvedVar(name=str(v.get("name") or ""), type=_decode_type_ref(v.get("type"))))
    return out


def _decode_type_ref(t: Any) -> TypeRef:
    if not isinstance(t, dict):
        raise ResolutionError(f"malformed type reference in resolver output: {t!r}")
    return TypeRef(
        repr=str(t.get("repr") or ""),
        kind=str(t.get("kind") or ""),
        short=str(t.get("short") or ""),
    )


def _to_text(out: bytes | str | None) -> str:
    if out is None:
        return ""
    if isinstance(out, str):
        return out
    return out.decode("utf-8", errors="replace")


def _decode_json(out: str) -> dict[str, Any]:
    # `go run` may print toolchain messages before the document.
    start = out.find("{")
    if start == -1:
        raise ResolutionError(f"failed to parse resolver output\n{out}")
    try:
        obj = json.loads(out[start:])
    except json.JSONDecodeError as e:
        raise ResolutionError(f"failed to parse resolver output: {e}\n{out}") from e
    if not isinstance(obj, dict):
        raise ResolutionError(f"unexpected resolver output\n{out}")
    return obj


def _resolver_go_source() -> str:
    # Keep this file stdlib-only so `go run` doesn't need network access.
    return r'''
package main

import (
	"bytes"
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
	"path/filepath"
)

type goListPkg struct {
	ImportPath string
	Name       string
	Dir        string
	GoFiles    []string
}

type outTypeRef struct {
	Repr  string `json:"repr"`
	Short string `json:"short"`
	Kind  string `json:"kind"`
}

type outVar struct {
	Name string     `json:"name"`
	Type outTypeRef `json:"type"`
}

type outMethod struct {
	Name     string   `json:"name"`
	Params   []outVar `json:"params"`
	Results  []outVar `json:"results"`
	Variadic bool     `json:"variadic"`
}

type outField struct {
	Name     string     `json:"name"`
	Type     outTypeRef `json:"type"`
	Tag      string     `json:"tag"`
	Embedded bool       `json:"embedded"`
}

type outType struct {
	Kind    string      `json:"kind"`
	Methods []outMethod `json:"methods,omitempty"`
	Fields  []outField  `json:"fields,omitempty"`
}

type outPkg struct {
	Name string `json:"name"`
	Path string `json:"path"`
}

var localQualifier types.Qualifier

type outObj struct {
	Found   bool     `json:"found"`
	Package *outPkg  `json:"package"`
	Imports []outPkg `json:"imports"`
	Type    *outType `json:"type"`
}

func main() {
	var dir, name string
	flag.StringVar(&dir, "dir", "", "Go package directory")
	flag.StringVar(&name, "name", "", "Name of the Go type to resolve")
	flag.Parse()

	if dir == "" || name == "" {
		fmt.Fprintln(os.Stderr, "missing --dir or --name")
		os.Exit(2)
	}
	if err := os.Chdir(dir); err != nil {
		fmt.Fprintf(os.Stderr, "chdir: %v\n", err)
		os.Exit(2)
	}

	p, err := listPkg()
	if err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}

	fset := token.NewFileSet()
	files := make([]*ast.File, 0, len(p.GoFiles))
	for _, fn := range p.GoFiles {
		af, err := parser.ParseFile(fset, filepath.Join(p.Dir, fn), nil, 0)
		if err != nil {
			fmt.Fprintln(os.Stderr, err.Error())
			os.Exit(1)
		}
		files = append(files, af)
	}

	info := &types.Info{Types: map[ast.Expr]types.TypeAndValue{}}
	conf := types.Config{
		Importer: importer.ForCompiler(fset, "source", nil),
		// Keep going on type errors; the declaration may still be usable.
		Error: func(error) {},
	}
	pkg, _ := conf.Check(p.ImportPath, fset, files, info)
	localQualifier = func(other *types.Package) string {
		if other == pkg {
			return ""
		}
		return other.Name()
	}

	out := outObj{Imports: []outPkg{}}
	out.Package = &outPkg{Name: pkg.Name(), Path: pkg.Path()}
	for _, imp := range pkg.Imports() {
		out.Imports = append(out.Imports, outPkg{Name: imp.Name(), Path: imp.Path()})
	}

	if spec := findTypeSpec(files, name); spec != nil {
		if t := info.TypeOf(spec.Type); t != nil {
			out.Found = true
			out.Type = describeType(t, spec)
		}
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	_ = enc.Encode(out)
}

func listPkg() (goListPkg, error) {
	var p goListPkg
	cmd := exec.Command("go", "list", "-json", ".")
	var stdout, stderr bytes.Buffer
	cmd.Stdout = &stdout
	cmd.Stderr = &stderr
	if err := cmd.Run(); err != nil {
		return p, fmt.Errorf("go list failed: %v\n%s", err, stderr.String())
	}
	if err := json.Unmarshal(stdout.Bytes(), &p); err != nil {
		return p, fmt.Errorf("failed to decode go list json: %v", err)
	}
	return p, nil
}

func findTypeSpec(files []*ast.File, name string) *ast.TypeSpec {
	for _, f := range files {
		for _, decl := range f.Decls {
			gd, ok := decl.(*ast.GenDecl)
			if !ok || gd.Tok != token.TYPE {
				continue
			}
			for _, spec := range gd.Specs {
				ts, ok := spec.(*ast.TypeSpec)
				if ok && ts.Name != nil && ts.Name.Name == name {
					return ts
				}
			}
		}
	}
	return nil
}

func describeType(t types.Type, spec *ast.TypeSpec) *outType {
	switch v := t.(type) {
	case *types.Interface:
		methods := make([]outMethod, 0, v.NumExplicitMethods())
		for _, fn := range explicitMethodsInSourceOrder(v, spec) {
			sig := fn.Type().(*types.Signature)
			methods = append(methods, outMethod{
				Name:     fn.Name(),
				Params:   tupleVars(sig.Params()),
				Results:  tupleVars(sig.Results()),
				Variadic: sig.Variadic(),
			})
		}
		return &outType{Kind: "interface", Methods: methods}
	case *types.Struct:
		fields := make([]outField, 0, v.NumFields())
		for i := 0; i < v.NumFields(); i++ {
			f := v.Field(i)
			fields = append(fields, outField{
				Name:     f.Name(),
				Type:     typeRef(f.Type()),
				Tag:      v.Tag(i),
				Embedded: f.Embedded(),
			})
		}
		return &outType{Kind: "struct", Fields: fields}
	default:
		return &outType{Kind: typeKind(t)}
	}
}

func tupleVars(tuple *types.Tuple) []outVar {
	vars := make([]outVar, 0, tuple.Len())
	for i := 0; i < tuple.Len(); i++ {
		v := tuple.At(i)
		vars = append(vars, outVar{Name: v.Name(), Type: typeRef(v.Type())})
	}
	return vars
}

func typeRef(t types.Type) outTypeRef {
	return outTypeRef{
		Repr:  types.TypeString(t, nil),
		Short: types.TypeString(t, localQualifier),
		Kind:  typeKind(t),
	}
}

// go/types keeps explicit methods sorted by name; recover declaration order from the AST.
func explicitMethodsInSourceOrder(iface *types.Interface, spec *ast.TypeSpec) []*types.Func {
	byName := make(map[string]*types.Func, iface.NumExplicitMethods())
	for i := 0; i < iface.NumExplicitMethods(); i++ {
		fn := iface.ExplicitMethod(i)
		byName[fn.Name()] = fn
	}

	it, ok := spec.Type.(*ast.InterfaceType)
	if !ok || it.Methods == nil {
		out := make([]*types.Func, 0, len(byName))
		for i := 0; i < iface.NumExplicitMethods(); i++ {
			out = append(out, iface.ExplicitMethod(i))
		}
		return out
	}

	out := make([]*types.Func, 0, len(byName))
	for _, f := range it.Methods.List {
		// Embedded interfaces and type-set terms have no names.
		for _, nm := range f.Names {
			if fn, ok := byName[nm.Name]; ok {
				out = append(out, fn)
			}
		}
	}
	return out
}

func typeKind(t types.Type) string {
	switch t.(type) {
	case *types.Pointer:
		return "pointer"
	case *types.Basic:
		return "basic"
	case *types.Named:
		return "named"
	case *types.Slice:
		return "slice"
	case *types.Array:
		return "array"
	case *types.Map:
		return "map"
	case *types.Chan:
		return "chan"
	case *types.Signature:
		return "func"
	case *types.Struct:
		return "struct"
	case *types.Interface:
		return "interface"
	case *types.TypeParam:
		return "typeparam"
	default:
		return "other"
	}
}
'''
