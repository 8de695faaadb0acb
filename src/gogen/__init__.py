"""gogen: generate code from Go interface and struct declarations with templates."""

from __future__ import annotations

from . import errors
from .description import Description, Field, GoType, Method, Package, Var
from .extract import extract_description
from .generator import Generator
from .render import render
from .tags import extract_tags, flatten_tags, parse_tag_items

__all__ = [
    "Description",
    "Field",
    "Generator",
    "GoType",
    "Method",
    "Package",
    "Var",
    "errors",
    "extract_description",
    "extract_tags",
    "flatten_tags",
    "parse_tag_items",
    "render",
]
