"""Parsing of `gogen` struct tags.

A field opts into generator behaviour through a conventional struct tag:

    type Example struct {
        Secret *string `json:"secret" gogen:"skip,alias='foo,bar'"`
    }

The value of the `gogen` key is a comma-separated list of entries. An entry is
either a bare key (`skip`) or `key=value`; values may be wrapped in single
quotes so they can contain commas, and `\\'` inside a value is a literal quote.
"""

from __future__ import annotations

import ast

from .errors import AnnotationSyntaxError

DEFAULT_TAG_KEY = "gogen"

_SEP = ","
_QUOTE = "'"
_ASSIGN = "="
_ESCAPE = "\\"


def parse_tag_items(raw: str) -> dict[str, list[str]]:
    """Parse one annotation string into `key -> [values...]`.

    The last entry is always committed, so an empty string yields `{"": [""]}`.
    """
    items: dict[str, list[str]] = {}
    key: list[str] = []
    value: list[str] = []
    in_key = True
    quoted = False
    quote_pos = -1

    def commit() -> None:
        nonlocal in_key
        items.setdefault("".join(key), []).append("".join(value))
        key.clear()
        value.clear()
        in_key = True

    idx = 0
    n = len(raw)
    while idx < n:
        ch = raw[idx]
        eof = idx == n - 1
        nxt = "" if eof else raw[idx + 1]

        if not quoted and ch == _SEP:
            commit()
            idx += 1
            continue
        if in_key and ch == _ASSIGN:
            in_key = False
            idx += 1
            continue

        if ch == _ESCAPE:
            if nxt == _QUOTE:
                idx += 1
                ch = _QUOTE
        elif ch == _QUOTE and not in_key:
            if quoted:
                quoted = False
                if eof or nxt == _SEP:
                    idx += 1
                    continue
                raise AnnotationSyntaxError(
                    f"{raw!r} has an unexpected char {nxt!r} at pos {idx + 1}"
                )
            quoted = True
            quote_pos = idx
            idx += 1
            continue

        if in_key:
            key.append(ch)
        else:
            value.append(ch)
        idx += 1

    if quoted:
        raise AnnotationSyntaxError(
            f"{raw!r} is not quoted properly: quote at pos {quote_pos} is never closed"
        )

    commit()
    return items


def flatten_tags(parsed: dict[str, list[str]]) -> dict[str, str]:
    """Reduce parsed items to `key -> first value`, treating bare keys as `"true"`."""
    out: dict[str, str] = {}
    for k, values in parsed.items():
        if not values or not values[0]:
            out[k] = "true"
            continue
        out[k] = values[0]
    return out


def lookup_struct_tag(tag: str, key: str) -> str:
    """Return the value for `key` in a Go struct tag, or "" if absent.

    Follows `reflect.StructTag.Get`: the tag is a space separated list of
    `name:"quoted value"` pairs and scanning stops at the first malformed pair.
    """
    while tag:
        i = 0
        while i < len(tag) and tag[i] == " ":
            i += 1
        tag = tag[i:]
        if not tag:
            break

        i = 0
        while i < len(tag) and tag[i] > " " and tag[i] not in ':"\x7f':
            i += 1
        if i == 0 or i + 1 >= len(tag) or tag[i] != ":" or tag[i + 1] != '"':
            break
        name = tag[:i]
        tag = tag[i + 1 :]

        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= len(tag):
            break
        quoted_value = tag[: i + 1]
        tag = tag[i + 1 :]

        if name == key:
            try:
                value = ast.literal_eval(quoted_value)
            except (SyntaxError, ValueError):
                break
            return value if isinstance(value, str) else ""
    return ""


def extract_tags(tag: str, key: str = DEFAULT_TAG_KEY) -> dict[str, str]:
    """Parse the `key` entry of a raw struct tag into the flat map stored on fields."""
    return flatten_tags(parse_tag_items(lookup_struct_tag(tag, key)))
