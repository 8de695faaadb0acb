from __future__ import annotations

from .description import (
    Description,
    Field,
    GoType,
    InterfaceShape,
    Method,
    Package,
    Shape,
    StructShape,
    Var,
)
from .errors import AnnotationSyntaxError, ResolutionError
from .resolver.symbols import (
    ResolvedDecl,
    ResolvedInterface,
    ResolvedStruct,
    ResolvedType,
    ResolvedVar,
    TypeRef,
)
from .tags import DEFAULT_TAG_KEY, extract_tags


def extract_description(
    name: str,
    resolved: ResolvedDecl | None,
    *,
    tag_key: str = DEFAULT_TAG_KEY,
) -> Description:
    """Build the template description of `name` from its resolved declaration.

    With no resolved declaration the description only carries the name.
    Kinds other than interface and struct are accepted and produce a
    description with neither methods nor fields.
    """
    if resolved is None:
        return Description(name=name)

    # TODO: decide how to alias imports that share a package name.
    imports = [Package(path=p.path, name=p.name) for p in resolved.imports]
    return Description(
        name=name,
        package=Package(path=resolved.package_path, name=resolved.package_name),
        imports=imports,
        shape=extract_shape(resolved.type, tag_key=tag_key),
    )


def extract_shape(t: ResolvedType, *, tag_key: str = DEFAULT_TAG_KEY) -> Shape:
    if isinstance(t, ResolvedInterface):
        return InterfaceShape(methods=extract_methods(t))
    if isinstance(t, ResolvedStruct):
        return StructShape(fields=extract_fields(t, tag_key=tag_key))
    return None


def extract_methods(t: ResolvedInterface) -> list[Method]:
    """Explicit methods only, in declaration order."""
    return [
        Method(
            name=m.name,
            params=extract_vars(m.signature.params, variadic=m.signature.variadic),
            results=extract_vars(m.signature.results),
            variadic=m.signature.variadic,
        )
        for m in t.explicit_methods
    ]


def extract_vars(tuple_: list[ResolvedVar], *, variadic: bool = False) -> list[Var]:
    """Convert a tuple; with `variadic` the last entry is the `...T` parameter."""
    last = len(tuple_) - 1
    return [
        Var(name=v.name, type=extract_go_type(v.type), variadic=variadic and i == last)
        for i, v in enumerate(tuple_)
    ]


def extract_fields(t: ResolvedStruct, *, tag_key: str = DEFAULT_TAG_KEY) -> list[Field]:
    fields: list[Field] = []
    for f in t.fields:
        try:
            tags = extract_tags(f.tag, tag_key)
        except AnnotationSyntaxError as e:
            raise AnnotationSyntaxError(f"field {f.name}: {e}") from e
        fields.append(
            Field(name=f.name, type=extract_go_type(f.type), tags=tags, embedded=f.embedded)
        )
    return fields


def extract_go_type(ref: TypeRef) -> GoType:
    if not ref.repr:
        raise ResolutionError(f"type of kind {ref.kind or 'unknown'} has no display string")
    return GoType(name=ref.repr, is_pointer=ref.kind == "pointer", short_name=ref.short)
