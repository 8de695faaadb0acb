from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import ResolutionError


@dataclass(frozen=True)
class SourceDir:
    package_dir: Path
    module_dir: Path
    module_path: str


def resolve_source_dir(directory: str | Path) -> SourceDir:
    """Resolve a source directory to its package directory and enclosing module.

    The directory may be any package directory inside a module; the nearest
    parent containing go.mod is the module root.
    """
    p = Path(directory)
    if not p.exists() or not p.is_dir():
        raise ResolutionError(f"source directory not found: {directory}")
    package_dir = p.resolve()
    module_dir = find_module_root(package_dir)
    return SourceDir(
        package_dir=package_dir,
        module_dir=module_dir,
        module_path=read_module_path(module_dir),
    )


def read_module_path(module_dir: Path) -> str:
    go_mod = module_dir / "go.mod"
    if not go_mod.exists():
        raise ResolutionError(f"go.mod not found in {module_dir}")
    for line in go_mod.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line.split()[1].strip('"')
    raise ResolutionError(f"failed to parse module path from {go_mod}")


def find_module_root(start: Path) -> Path:
    p = start
    while True:
        if (p / "go.mod").exists():
            return p
        if p.parent == p:
            break
        p = p.parent
    raise ResolutionError(f"go.mod not found in {start} or any parent directory")
