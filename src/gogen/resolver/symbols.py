from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TypeRef:
    repr: str  # types.TypeString, e.g. "*string" or "context.Context"
    kind: str  # "pointer", "named", "basic", "slice", ...
    short: str = ""  # qualified by package name, unqualified inside the declaring package


@dataclass(frozen=True)
class ResolvedVar:
    name: str
    type: TypeRef


@dataclass(frozen=True)
class ResolvedSignature:
    params: list[ResolvedVar]
    results: list[ResolvedVar]
    variadic: bool = False


@dataclass(frozen=True)
class ResolvedMethod:
    name: str
    signature: ResolvedSignature


@dataclass(frozen=True)
class ResolvedInterface:
    explicit_methods: list[ResolvedMethod]


@dataclass(frozen=True)
class ResolvedField:
    name: str
    type: TypeRef
    tag: str = ""
    embedded: bool = False


@dataclass(frozen=True)
class ResolvedStruct:
    fields: list[ResolvedField]


@dataclass(frozen=True)
class ResolvedOther:
    kind: str


ResolvedType = Union[ResolvedInterface, ResolvedStruct, ResolvedOther]


@dataclass(frozen=True)
class ImportedPackage:
    name: str
    path: str


@dataclass(frozen=True)
class ResolvedDecl:
    name: str
    type: ResolvedType
    package_path: str
    package_name: str
    imports: list[ImportedPackage]
