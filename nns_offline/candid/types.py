"""Type model for the Candid interface description language."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterator, Tuple, Union


class CandidError(ValueError):
    """Base class for Candid parsing, checking and codec failures."""


class CandidTypeError(CandidError):
    """Raised when a type environment is inconsistent or a lookup fails."""


class Opcode(IntEnum):
    NULL = -1
    BOOL = -2
    NAT = -3
    INT = -4
    NAT8 = -5
    NAT16 = -6
    NAT32 = -7
    NAT64 = -8
    INT8 = -9
    INT16 = -10
    INT32 = -11
    INT64 = -12
    FLOAT32 = -13
    FLOAT64 = -14
    TEXT = -15
    RESERVED = -16
    EMPTY = -17
    OPT = -18
    VEC = -19
    RECORD = -20
    VARIANT = -21
    FUNC = -22
    SERVICE = -23
    PRINCIPAL = -24


def idl_hash(name: str) -> int:
    """Return the 32-bit field id of a textual label."""

    value = 0
    for byte in name.encode("utf-8"):
        value = (value * 223 + byte) & 0xFFFFFFFF
    return value


@dataclass(frozen=True)
class Label:
    """Record or variant label; ``name`` is ``None`` when only the id is known."""

    id: int
    name: str | None = None

    @classmethod
    def named(cls, name: str) -> "Label":
        return cls(idl_hash(name), name)

    def __str__(self) -> str:
        return self.name if self.name is not None else str(self.id)


@dataclass(frozen=True)
class PrimType:
    name: str
    opcode: Opcode

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class VarType:
    """Reference to a named type in a :class:`TypeEnv`."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class OptType:
    inner: "IDLType"

    def __str__(self) -> str:
        return f"opt {self.inner}"


@dataclass(frozen=True)
class VecType:
    inner: "IDLType"

    def __str__(self) -> str:
        if self.inner == NAT8:
            return "blob"
        return f"vec {self.inner}"


@dataclass(frozen=True)
class Field:
    label: Label
    type: "IDLType"


@dataclass(frozen=True)
class RecordType:
    fields: Tuple[Field, ...]

    def __str__(self) -> str:
        inner = "; ".join(f"{f.label} : {f.type}" for f in self.fields)
        return f"record {{ {inner} }}" if inner else "record {}"

    def field(self, label_id: int) -> Field | None:
        for item in self.fields:
            if item.label.id == label_id:
                return item
        return None


@dataclass(frozen=True)
class VariantType:
    fields: Tuple[Field, ...]

    def __str__(self) -> str:
        inner = "; ".join(
            str(f.label) if f.type == NULL else f"{f.label} : {f.type}" for f in self.fields
        )
        return f"variant {{ {inner} }}" if inner else "variant {}"

    def field(self, label_id: int) -> Field | None:
        for item in self.fields:
            if item.label.id == label_id:
                return item
        return None


@dataclass(frozen=True)
class FuncType:
    args: Tuple["IDLType", ...]
    rets: Tuple["IDLType", ...]
    modes: Tuple[str, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(t) for t in self.args)
        rets = ", ".join(str(t) for t in self.rets)
        modes = "".join(f" {mode}" for mode in self.modes)
        return f"({args}) -> ({rets}){modes}"


@dataclass(frozen=True)
class ServiceType:
    methods: Tuple[Tuple[str, "IDLType"], ...]

    def __str__(self) -> str:
        inner = "; ".join(f"{name} : {ty}" for name, ty in self.methods)
        return f"service {{ {inner} }}"


IDLType = Union[PrimType, VarType, OptType, VecType, RecordType, VariantType, FuncType, ServiceType]

NULL = PrimType("null", Opcode.NULL)
BOOL = PrimType("bool", Opcode.BOOL)
NAT = PrimType("nat", Opcode.NAT)
INT = PrimType("int", Opcode.INT)
NAT8 = PrimType("nat8", Opcode.NAT8)
NAT16 = PrimType("nat16", Opcode.NAT16)
NAT32 = PrimType("nat32", Opcode.NAT32)
NAT64 = PrimType("nat64", Opcode.NAT64)
INT8 = PrimType("int8", Opcode.INT8)
INT16 = PrimType("int16", Opcode.INT16)
INT32 = PrimType("int32", Opcode.INT32)
INT64 = PrimType("int64", Opcode.INT64)
FLOAT32 = PrimType("float32", Opcode.FLOAT32)
FLOAT64 = PrimType("float64", Opcode.FLOAT64)
TEXT = PrimType("text", Opcode.TEXT)
RESERVED = PrimType("reserved", Opcode.RESERVED)
EMPTY = PrimType("empty", Opcode.EMPTY)
PRINCIPAL = PrimType("principal", Opcode.PRINCIPAL)

PRIMITIVES: Dict[str, PrimType] = {
    prim.name: prim
    for prim in (
        NULL, BOOL, NAT, INT, NAT8, NAT16, NAT32, NAT64, INT8, INT16, INT32, INT64,
        FLOAT32, FLOAT64, TEXT, RESERVED, EMPTY, PRINCIPAL,
    )
}
PRIMITIVES_BY_OPCODE: Dict[int, PrimType] = {prim.opcode: prim for prim in PRIMITIVES.values()}

# (byte width, signed) for fixed-width integers
FIXED_WIDTH: Dict[str, Tuple[int, bool]] = {
    "nat8": (1, False),
    "nat16": (2, False),
    "nat32": (4, False),
    "nat64": (8, False),
    "int8": (1, True),
    "int16": (2, True),
    "int32": (4, True),
    "int64": (8, True),
}


def record(fields: Dict[str, IDLType] | None = None) -> RecordType:
    """Build a record type from a name → type mapping, sorted by field id."""

    items = [Field(Label.named(name), ty) for name, ty in (fields or {}).items()]
    return RecordType(tuple(sorted(items, key=lambda f: f.label.id)))


def tuple_record(*types: IDLType) -> RecordType:
    return RecordType(tuple(Field(Label(index), ty) for index, ty in enumerate(types)))


def variant(fields: Dict[str, IDLType]) -> VariantType:
    items = [Field(Label.named(name), ty) for name, ty in fields.items()]
    return VariantType(tuple(sorted(items, key=lambda f: f.label.id)))


@dataclass
class TypeEnv:
    """Mapping of type names to their definitions."""

    types: Dict[str, IDLType] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def define(self, name: str, ty: IDLType) -> None:
        if name in self.types:
            raise CandidTypeError(f"duplicate type definition: {name}")
        self.types[name] = ty

    def find(self, name: str) -> IDLType:
        try:
            return self.types[name]
        except KeyError:
            raise CandidTypeError(f"unbound type identifier: {name}") from None

    def trace(self, ty: IDLType) -> IDLType:
        """Follow named references until a structural type is reached."""

        seen: set[str] = set()
        while isinstance(ty, VarType):
            if ty.name in seen:
                raise CandidTypeError(f"cyclic type definition: {ty.name}")
            seen.add(ty.name)
            ty = self.find(ty.name)
        return ty

    def as_service(self, ty: IDLType) -> ServiceType:
        resolved = self.trace(ty)
        if not isinstance(resolved, ServiceType):
            raise CandidTypeError(f"not a service type: {ty}")
        return resolved

    def as_func(self, ty: IDLType) -> FuncType:
        resolved = self.trace(ty)
        if not isinstance(resolved, FuncType):
            raise CandidTypeError(f"not a function type: {ty}")
        return resolved

    def get_method(self, service: IDLType, name: str) -> FuncType:
        for method_name, method_type in self.as_service(service).methods:
            if method_name == name:
                return self.as_func(method_type)
        raise CandidTypeError(f"cannot find method {name}")
