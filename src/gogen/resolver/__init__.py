"""Loading and type-checking of Go source through the Go toolchain."""

from __future__ import annotations

from .scan import resolve_declaration
from .symbols import ResolvedDecl

__all__ = ["ResolvedDecl", "resolve_declaration"]
