from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest


def _write_module(tmp_path: Path) -> Path:
    mod_dir = tmp_path / "gomod"
    mod_dir.mkdir()
    (mod_dir / "go.mod").write_text("module example.com/noop\n\ngo 1.22\n", encoding="utf-8")
    return mod_dir


def _fake_run(payload: bytes, *, returncode: int = 0, stderr: bytes = b"", seen: list | None = None):
    def fake_run(cmd, **kwargs):  # noqa: ANN001
        if seen is not None:
            seen.append((cmd, kwargs))
        return subprocess.CompletedProcess(args=cmd, returncode=returncode, stdout=payload, stderr=stderr)

    return fake_run


_INTERFACE_DOC = {
    "found": True,
    "package": {"name": "noop", "path": "example.com/noop"},
    "imports": [{"name": "context", "path": "context"}],
    "type": {
        "kind": "interface",
        "methods": [
            {
                "name": "Init",
                "params": [{"name": "ctx", "type": {"repr": "context.Context", "kind": "named"}}],
                "results": [{"name": "", "type": {"repr": "error", "kind": "named"}}],
                "variadic": False,
            }
        ],
    },
}


def test_resolve_declaration_decodes_interface(monkeypatch, tmp_path: Path):
    from gogen.resolver.scan import resolve_declaration
    from gogen.resolver.symbols import ResolvedInterface

    seen: list = []
    monkeypatch.setattr(subprocess, "run", _fake_run(json.dumps(_INTERFACE_DOC).encode("utf-8"), seen=seen))
    mod_dir = _write_module(tmp_path)

    decl = resolve_declaration(mod_dir, "Example")
    assert decl.package_name == "noop"
    assert decl.package_path == "example.com/noop"
    assert [(p.name, p.path) for p in decl.imports] == [("context", "context")]
    assert isinstance(decl.type, ResolvedInterface)
    method = decl.type.explicit_methods[0]
    assert method.name == "Init"
    assert method.signature.params[0].type.repr == "context.Context"
    assert method.signature.results[0].name == ""

    cmd, _ = seen[0]
    assert cmd[:3] == ["go", "run", "."]
    assert cmd[cmd.index("--dir") + 1] == str(mod_dir.resolve())
    assert cmd[cmd.index("--name") + 1] == "Example"


def test_resolve_declaration_uses_configured_go(monkeypatch, tmp_path: Path):
    from gogen.config import Settings
    from gogen.resolver.scan import resolve_declaration

    seen: list = []
    monkeypatch.setattr(subprocess, "run", _fake_run(json.dumps(_INTERFACE_DOC).encode("utf-8"), seen=seen))
    resolve_declaration(_write_module(tmp_path), "Example", settings=Settings(go="/opt/go/bin/go"))
    assert seen[0][0][0] == "/opt/go/bin/go"


def test_resolve_declaration_decodes_struct(monkeypatch, tmp_path: Path):
    from gogen.resolver.scan import resolve_declaration
    from gogen.resolver.symbols import ResolvedStruct

    doc = {
        "found": True,
        "package": {"name": "getter", "path": "example.com/getter"},
        "imports": [],
        "type": {
            "kind": "struct",
            "fields": [
                {"name": "Number", "type": {"repr": "int", "kind": "basic"}, "tag": "", "embedded": False},
                {"name": "StringPtr", "type": {"repr": "*string", "kind": "pointer"}, "tag": 'gogen:"skip"'},
            ],
        },
    }
    monkeypatch.setattr(subprocess, "run", _fake_run(json.dumps(doc).encode("utf-8")))

    decl = resolve_declaration(_write_module(tmp_path), "Example")
    assert isinstance(decl.type, ResolvedStruct)
    assert [f.name for f in decl.type.fields] == ["Number", "StringPtr"]
    assert decl.type.fields[1].type.kind == "pointer"
    assert decl.type.fields[1].tag == 'gogen:"skip"'


def test_resolve_declaration_tolerates_non_utf8_prefix(monkeypatch, tmp_path: Path):
    from gogen.resolver.scan import resolve_declaration

    payload = b"\x88\x00go: downloading toolchain\n" + json.dumps(_INTERFACE_DOC).encode("utf-8")
    monkeypatch.setattr(subprocess, "run", _fake_run(payload))

    decl = resolve_declaration(_write_module(tmp_path), "Example")
    assert decl.package_name == "noop"


def test_resolve_declaration_not_found(monkeypatch, tmp_path: Path):
    from gogen.errors import ResolutionError
    from gogen.resolver.scan import resolve_declaration

    doc = {"found": False, "package": {"name": "noop", "path": "example.com/noop"}, "imports": [], "type": None}
    monkeypatch.setattr(subprocess, "run", _fake_run(json.dumps(doc).encode("utf-8")))

    with pytest.raises(ResolutionError, match=r"type Missing not found"):
        resolve_declaration(_write_module(tmp_path), "Missing")


def test_resolve_declaration_helper_failure(monkeypatch, tmp_path: Path):
    from gogen.errors import ResolutionError
    from gogen.resolver.scan import resolve_declaration

    monkeypatch.setattr(subprocess, "run", _fake_run(b"", returncode=1, stderr=b"go list failed: boom"))

    with pytest.raises(ResolutionError, match=r"boom"):
        resolve_declaration(_write_module(tmp_path), "Example")


def test_resolve_declaration_garbage_output(monkeypatch, tmp_path: Path):
    from gogen.errors import ResolutionError
    from gogen.resolver.scan import resolve_declaration

    monkeypatch.setattr(subprocess, "run", _fake_run(b"not json at all"))

    with pytest.raises(ResolutionError, match=r"failed to parse resolver output"):
        resolve_declaration(_write_module(tmp_path), "Example")


def test_decode_other_kind():
    from gogen.resolver.scan import decode_resolved_decl
    from gogen.resolver.symbols import ResolvedOther

    decl = decode_resolved_decl(
        "ID",
        {"found": True, "package": {"name": "p", "path": "example.com/p"}, "imports": [], "type": {"kind": "basic"}},
    )
    assert decl.type == ResolvedOther(kind="basic")


def test_decode_keeps_method_order_variadic_and_short_names():
    from gogen.resolver.scan import decode_resolved_decl
    from gogen.resolver.symbols import ResolvedInterface

    doc = {
        "found": True,
        "package": {"name": "svc", "path": "example.com/p/svc"},
        "imports": [],
        "type": {
            "kind": "interface",
            "methods": [
                {
                    "name": "Logf",
                    "params": [
                        {"name": "format", "type": {"repr": "string", "short": "string", "kind": "basic"}},
                        {"name": "args", "type": {"repr": "[]any", "short": "[]any", "kind": "slice"}},
                    ],
                    "results": [],
                    "variadic": True,
                },
                {
                    "name": "Get",
                    "params": [],
                    "results": [
                        {"name": "", "type": {"repr": "*example.com/p/svc.Thing", "short": "*Thing", "kind": "pointer"}}
                    ],
                    "variadic": False,
                },
            ],
        },
    }
    decl = decode_resolved_decl("Logger", doc)
    assert isinstance(decl.type, ResolvedInterface)
    logf, get = decl.type.explicit_methods
    assert logf.name == "Logf" and logf.signature.variadic
    assert get.signature.results[0].type.short == "*Thing"
    assert get.signature.results[0].type.repr == "*example.com/p/svc.Thing"
