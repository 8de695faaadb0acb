from __future__ import annotations

import io
import subprocess
from pathlib import Path

import pytest

from gogen.errors import FileIOError, FormatError, GogenError, TemplateError
from gogen.generator import Generator
from gogen.resolver.symbols import ResolvedDecl, ResolvedOther


def test_generator_run_empty():
    buf = io.StringIO()
    g = Generator(name="Mock", template="{{ name }} is generated.", writer=buf)
    g.run()
    assert buf.getvalue() == "Mock is generated."


def test_generator_run_writes_stdout(capsys):
    Generator(name="Mock", template="{{ name }}!").run()
    assert capsys.readouterr().out == "Mock!"


def test_generator_writer_takes_precedence_over_output(tmp_path: Path):
    out = tmp_path / "out.go"
    buf = io.StringIO()
    Generator(name="Mock", template="x", writer=buf, output=out).run()
    assert buf.getvalue() == "x"
    assert not out.exists()


def test_generator_writes_output_file(tmp_path: Path):
    tmpl = tmp_path / "mock.tmpl"
    tmpl.write_text("package mocks\n\n// {{ name }}\n", encoding="utf-8")
    out = tmp_path / "mock_gen.go"
    out.write_text("stale content that is longer than the new output\n", encoding="utf-8")

    Generator(name="Mock", template_file=tmpl, output=out).run()
    assert out.read_text(encoding="utf-8") == "package mocks\n\n// Mock\n"


def test_generator_missing_template_file(tmp_path: Path):
    g = Generator(name="Mock", template_file=tmp_path / "missing.tmpl", writer=io.StringIO())
    with pytest.raises(FileIOError):
        g.run()


def test_generator_requires_a_template():
    with pytest.raises(GogenError):
        Generator(name="Mock", writer=io.StringIO()).run()


def test_generator_template_error_leaves_no_output(tmp_path: Path):
    out = tmp_path / "mock_gen.go"
    with pytest.raises(TemplateError):
        Generator(name="Mock", template="{{ missing }}", output=out).run()
    assert not out.exists()


def test_generator_format_error_leaves_no_output(monkeypatch, tmp_path: Path):
    def fake_run(cmd, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(args=cmd, returncode=2, stdout=b"", stderr=b"<standard input>:1:1: expected 'package'")

    monkeypatch.setattr(subprocess, "run", fake_run)
    out = tmp_path / "mock_gen.go"
    with pytest.raises(FormatError, match=r"mock_gen.go:1:1"):
        Generator(name="Mock", template="not go", output=out, format=True).run()
    assert not out.exists()


def test_generator_formats_output(monkeypatch):
    seen: list[bytes] = []

    def fake_run(cmd, **kwargs):  # noqa: ANN001
        seen.append(kwargs["input"])
        return subprocess.CompletedProcess(args=cmd, returncode=0, stdout=b"package mocks\n", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    buf = io.StringIO()
    Generator(name="Mock", template="  package   mocks", writer=buf, format=True).run()
    assert seen == [b"  package   mocks"]
    assert buf.getvalue() == "package mocks\n"


def test_generator_resolves_source_when_dir_is_set(monkeypatch, tmp_path: Path):
    calls: list[tuple[str, str]] = []

    def fake_resolve(directory, type_name, *, settings=None):  # noqa: ANN001
        calls.append((str(directory), type_name))
        return ResolvedDecl(
            name=type_name,
            type=ResolvedOther(kind="named"),
            package_path="example.com/mod",
            package_name="mod",
            imports=[],
        )

    import gogen.generator as gmod

    monkeypatch.setattr(gmod, "resolve_declaration", fake_resolve)
    buf = io.StringIO()
    g = Generator(name="Thing", dir=tmp_path, template="{{ package.name }}.{{ name }}", writer=buf)
    g.run()
    assert calls == [(str(tmp_path), "Thing")]
    assert buf.getvalue() == "mod.Thing"
    assert g.description is not None and g.description.package is not None


def test_generator_resolution_failure_stops_pipeline(tmp_path: Path):
    out = tmp_path / "out.go"
    g = Generator(name="Thing", dir=tmp_path / "nope", template="x", output=out)
    with pytest.raises(GogenError, match=r"source directory not found"):
        g.run()
    assert not out.exists()


def test_generator_execute_template_requires_prepared_description():
    g = Generator(name="Mock", template="{{ name }}", writer=io.StringIO())
    with pytest.raises(GogenError, match=r"prepare_description"):
        g.execute_template()
