"""Decoded Candid values and their textual rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Tuple

from .types import Label

LINE_WIDTH = 80
INDENT = "  "
SIZED_NUMBERS = {
    "nat8", "nat16", "nat32", "nat64", "int8", "int16", "int32", "int64", "float32", "float64",
}
KEYWORDS = {
    "blob", "bool", "composite_query", "empty", "false", "float32", "float64", "func",
    "import", "int", "int8", "int16", "int32", "int64", "nat", "nat8", "nat16", "nat32",
    "nat64", "null", "oneway", "opt", "principal", "query", "record", "reserved",
    "service", "text", "true", "type", "variant", "vec",
}
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")


@dataclass(frozen=True)
class IDLField:
    label: Label
    value: "IDLValue"


@dataclass(frozen=True)
class IDLValue:
    """A decoded value tagged with the kind of its wire type.

    ``value`` holds a Python scalar for primitives, an :class:`IDLValue` or
    ``None`` for ``opt``, a tuple of values for ``vec``, a tuple of
    :class:`IDLField` for ``record``, a single :class:`IDLField` for
    ``variant``, ``(Principal, method)`` for ``func`` and a
    :class:`Principal` for ``principal`` and ``service``.
    """

    kind: str
    value: Any = None

    def to_python(self) -> Any:
        kind = self.kind
        if kind in {"null", "reserved"}:
            return None
        if kind == "opt":
            return None if self.value is None else self.value.to_python()
        if kind == "vec":
            if self.value and all(item.kind == "nat8" for item in self.value):
                return bytes(item.value for item in self.value)
            return [item.to_python() for item in self.value]
        if kind == "record":
            return {_python_key(f.label): f.value.to_python() for f in self.value}
        if kind == "variant":
            return {_python_key(self.value.label): self.value.value.to_python()}
        return self.value

    def to_text(self, *, pretty: bool = False) -> str:
        return _render(self, 0, pretty)


@dataclass(frozen=True)
class IDLArgs:
    args: Tuple[IDLValue, ...]

    def to_python(self) -> List[Any]:
        return [arg.to_python() for arg in self.args]

    def to_text(self, *, pretty: bool = False) -> str:
        compact = "(" + ", ".join(_render(arg, 0, False) for arg in self.args) + ")"
        if not pretty or len(compact) <= LINE_WIDTH:
            return compact
        lines = ["("]
        for arg in self.args:
            lines.append(INDENT + _render(arg, 1, True) + ",")
        lines.append(")")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_text(pretty=True)


def _python_key(label: Label) -> Any:
    return label.name if label.name is not None else label.id


def _render_label(label: Label) -> str:
    if label.name is None:
        return str(label.id)
    if _IDENT_RE.match(label.name) and label.name not in KEYWORDS:
        return label.name
    return _quote(label.name)


def _quote(text: str) -> str:
    out = ['"']
    for char in text:
        if char == '"':
            out.append('\\"')
        elif char == "\\":
            out.append("\\\\")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\{ord(char):02x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def _quote_blob(data: bytes) -> str:
    out = ['"']
    for byte in data:
        if 0x20 <= byte < 0x7F and byte not in (0x22, 0x5C):
            out.append(chr(byte))
        else:
            out.append(f"\\{byte:02x}")
    out.append('"')
    return "".join(out)


def _render_scalar(value: IDLValue) -> str:
    kind = value.kind
    if kind in {"null", "reserved"}:
        return "null"
    if kind == "bool":
        return "true" if value.value else "false"
    if kind == "text":
        return _quote(value.value)
    if kind == "principal":
        return f"principal {_quote(value.value.to_text())}"
    if kind == "service":
        return f"service {_quote(value.value.to_text())}"
    if kind == "func":
        principal, method = value.value
        return f"func {_quote(principal.to_text())}.{_render_label(Label(0, method))}"
    if kind in {"float32", "float64"}:
        return f"{value.value!r} : {kind}"
    if kind in SIZED_NUMBERS:
        return f"{value.value:_} : {kind}"
    return f"{value.value:_}"


def _is_tuple(fields: Tuple[IDLField, ...]) -> bool:
    return all(f.label.name is None and f.label.id == index for index, f in enumerate(fields))


def _entries(value: IDLValue, depth: int, pretty: bool) -> List[str]:
    if value.kind == "vec":
        return [_render(item, depth, pretty) for item in value.value]
    fields = (value.value,) if value.kind == "variant" else value.value
    entries = []
    for item in fields:
        if value.kind == "variant" and item.value.kind == "null":
            entries.append(_render_label(item.label))
        elif value.kind == "record" and _is_tuple(fields):
            entries.append(_render(item.value, depth, pretty))
        else:
            entries.append(f"{_render_label(item.label)} = {_render(item.value, depth, pretty)}")
    return entries


def _render(value: IDLValue, depth: int, pretty: bool) -> str:
    kind = value.kind
    if kind == "opt":
        if value.value is None:
            return "null"
        return "opt " + _render(value.value, depth, pretty)
    if kind == "vec" and value.value and all(item.kind == "nat8" for item in value.value):
        return "blob " + _quote_blob(bytes(item.value for item in value.value))
    if kind not in {"vec", "record", "variant"}:
        return _render_scalar(value)

    entries = _entries(value, depth + 1, False)
    if not entries:
        return f"{kind} {{}}"
    compact = f"{kind} {{ " + "; ".join(entries) + " }"
    if not pretty or len(INDENT * depth) + len(compact) <= LINE_WIDTH:
        return compact
    inner = INDENT * (depth + 1)
    lines = [f"{kind} {{"]
    lines.extend(f"{inner}{entry};" for entry in _entries(value, depth + 1, True))
    lines.append(INDENT * depth + "}")
    return "\n".join(lines)
