from __future__ import annotations

from typing import Any, Callable

from jinja2 import Environment, StrictUndefined, TemplateError as JinjaTemplateError

from .description import Description
from .errors import TemplateError


_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\"": "\\\"",
    "\\": "\\\\",
}


def go_quote(s: Any) -> str:
    """Return `s` as a double-quoted Go string literal, escaped like strconv.Quote.

    Printable runes are kept; other runes use `\\xHH` below U+0080 and
    `\\uHHHH` or `\\UHHHHHHHH` above.
    """
    out = ['"']
    for ch in str(s):
        esc = _GO_ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
            continue
        if ch.isprintable():
            out.append(ch)
            continue
        cp = ord(ch)
        if cp < 0x80:
            out.append(f"\\x{cp:02x}")
        elif 0xD800 <= cp <= 0xDFFF:
            # Lone surrogates are not valid UTF-8; Go decodes them as RuneError.
            out.append("\\ufffd")
        elif cp < 0x10000:
            out.append(f"\\u{cp:04x}")
        else:
            out.append(f"\\U{cp:08x}")
    out.append('"')
    return "".join(out)


def default_functions() -> dict[str, Callable[..., Any]]:
    return {"quote": go_quote}


def create_environment(functions: dict[str, Callable[..., Any]] | None = None) -> Environment:
    """Create a template environment exposing `functions` as globals and filters."""
    if functions is None:
        functions = default_functions()
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.globals.update(functions)
    env.filters.update(functions)
    return env


def render(
    template_text: str,
    description: Description,
    *,
    functions: dict[str, Callable[..., Any]] | None = None,
) -> str:
    env = create_environment(functions)
    try:
        template = env.from_string(template_text)
        return template.render(description.template_context())
    except JinjaTemplateError as e:
        raise TemplateError(f"template error: {e}") from e
