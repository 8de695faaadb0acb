"""Template-facing description of a Go declaration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Package:
    path: str
    name: str


@dataclass(frozen=True)
class GoType:
    """A resolved Go type.

    `name` is fully qualified by import path (`example.com/m/svc.Thing`);
    `short_name` is what code inside the declaring package writes (`Thing`,
    `context.Context`) and defaults to `name`.
    """

    name: str
    is_pointer: bool = False
    short_name: str = ""

    def __post_init__(self) -> None:
        if not self.short_name:
            object.__setattr__(self, "short_name", self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Var:
    """A parameter or result. `name` is empty for unnamed ones.

    `variadic` marks the final `...T` parameter, whose `type` is `[]T`.
    """

    name: str
    type: GoType
    variadic: bool = False

    @property
    def decl_type(self) -> str:
        """The type as written in a parameter list (`...T` for variadics)."""
        if self.variadic and self.type.short_name.startswith("[]"):
            return "..." + self.type.short_name[2:]
        return self.type.short_name


@dataclass(frozen=True)
class Field:
    name: str
    type: GoType
    tags: dict[str, str] = field(default_factory=dict)
    embedded: bool = False


@dataclass(frozen=True)
class Method:
    name: str
    params: list[Var] = field(default_factory=list)
    results: list[Var] = field(default_factory=list)
    variadic: bool = False


@dataclass(frozen=True)
class InterfaceShape:
    methods: list[Method]


@dataclass(frozen=True)
class StructShape:
    fields: list[Field]


Shape = Union[InterfaceShape, StructShape, None]


@dataclass(frozen=True)
class Description:
    """Everything a template knows about the declaration being generated for.

    `shape` is `None` when no source was resolved or when the declaration is
    neither an interface nor a struct.
    """

    name: str
    package: Package | None = None
    imports: list[Package] = field(default_factory=list)
    shape: Shape = None

    @property
    def is_interface(self) -> bool:
        return isinstance(self.shape, InterfaceShape)

    @property
    def is_struct(self) -> bool:
        return isinstance(self.shape, StructShape)

    @property
    def methods(self) -> list[Method]:
        if isinstance(self.shape, InterfaceShape):
            return self.shape.methods
        return []

    @property
    def fields(self) -> list[Field]:
        if isinstance(self.shape, StructShape):
            return self.shape.fields
        return []

    def template_context(self) -> dict[str, object]:
        """Top-level names available to templates."""
        return {
            "description": self,
            "name": self.name,
            "package": self.package,
            "imports": self.imports,
            "is_interface": self.is_interface,
            "is_struct": self.is_struct,
            "methods": self.methods,
            "fields": self.fields,
        }
