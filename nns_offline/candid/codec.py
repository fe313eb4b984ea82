"""Binary encoding and decoding of Candid argument sequences.

Encoding is always driven by explicit types.  Decoding reads the
self-describing type table from the message; when expected types are supplied
the wire values are coerced to them (field names are recovered, missing
optional fields default to ``null`` and unknown fields are skipped), otherwise
the values are returned with numeric field ids only.
"""

from __future__ import annotations

import logging
import struct
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from ..principal import MAX_PRINCIPAL_LENGTH, Principal, PrincipalError
from .types import (
    FIXED_WIDTH,
    INT,
    NAT,
    NAT8,
    NULL,
    PRIMITIVES_BY_OPCODE,
    RESERVED,
    CandidError,
    CandidTypeError,
    Field,
    FuncType,
    IDLType,
    Label,
    Opcode,
    OptType,
    PrimType,
    RecordType,
    ServiceType,
    TypeEnv,
    VarType,
    VariantType,
    VecType,
)
from .values import IDLArgs, IDLField, IDLValue

logger = logging.getLogger(__name__)

MAGIC = b"DIDL"
FUNC_MODE_CODES = {"query": 1, "oneway": 2, "composite_query": 3}
FUNC_MODE_NAMES = {code: name for name, code in FUNC_MODE_CODES.items()}
MAX_DECODE_DEPTH = 128
# Elements of zero-sized types consume no input, so their count needs its own cap.
MAX_ZERO_SIZED_ELEMENTS = 100_000


class CandidEncodeError(CandidError):
    """Raised when a Python value does not fit the type it is encoded as."""


class CandidDecodeError(CandidError):
    """Raised when bytes are not a well-formed Candid message for the types."""


def encode_leb128(value: int) -> bytes:
    if value < 0:
        raise CandidEncodeError(f"cannot LEB128-encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_sleb128(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40):
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def read(self, size: int) -> bytes:
        if size > self.remaining:
            raise CandidDecodeError(
                f"unexpected end of input at offset {self.pos}: wanted {size} bytes"
            )
        chunk = self.data[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def byte(self) -> int:
        return self.read(1)[0]

    def leb128(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.byte()
            result |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                return result

    def sleb128(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.byte()
            result |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                if byte & 0x40:
                    result -= 1 << shift
                return result


# -- encoding ---------------------------------------------------------------


class _TypeTable:
    """Assigns type-table indices to the compound types of a message."""

    def __init__(self, env: TypeEnv) -> None:
        self.env = env
        self.entries: List[bytes] = []
        self.indices: Dict[Any, int] = {}

    def index(self, ty: IDLType) -> int:
        if isinstance(ty, PrimType):
            return int(ty.opcode)
        if isinstance(ty, VarType):
            target = self.env.trace(ty)
            if isinstance(target, PrimType):
                return int(target.opcode)
            key: Any = ("var", ty.name)
        else:
            target = ty
            key = ("type", ty)
        if key in self.indices:
            return self.indices[key]
        position = len(self.entries)
        self.indices[key] = position
        self.entries.append(b"")
        self.entries[position] = self._entry(target)
        return position

    def _entry(self, ty: IDLType) -> bytes:
        if isinstance(ty, OptType):
            return encode_sleb128(Opcode.OPT) + encode_sleb128(self.index(ty.inner))
        if isinstance(ty, VecType):
            return encode_sleb128(Opcode.VEC) + encode_sleb128(self.index(ty.inner))
        if isinstance(ty, (RecordType, VariantType)):
            opcode = Opcode.RECORD if isinstance(ty, RecordType) else Opcode.VARIANT
            out = bytearray(encode_sleb128(opcode) + encode_leb128(len(ty.fields)))
            for item in ty.fields:
                out += encode_leb128(item.label.id) + encode_sleb128(self.index(item.type))
            return bytes(out)
        if isinstance(ty, FuncType):
            out = bytearray(encode_sleb128(Opcode.FUNC))
            for group in (ty.args, ty.rets):
                out += encode_leb128(len(group))
                for arg in group:
                    out += encode_sleb128(self.index(arg))
            out += encode_leb128(len(ty.modes))
            out += bytes(FUNC_MODE_CODES[mode] for mode in ty.modes)
            return bytes(out)
        if isinstance(ty, ServiceType):
            out = bytearray(encode_sleb128(Opcode.SERVICE) + encode_leb128(len(ty.methods)))
            for name, method in sorted(ty.methods):
                raw = name.encode("utf-8")
                out += encode_leb128(len(raw)) + raw + encode_sleb128(self.index(method))
            return bytes(out)
        raise CandidEncodeError(f"cannot build a type table entry for {ty}")  # pragma: no cover


def _encode_principal(value: Any) -> bytes:
    if isinstance(value, str):
        try:
            value = Principal.from_text(value)
        except PrincipalError as exc:
            raise CandidEncodeError(str(exc)) from exc
    if not isinstance(value, Principal):
        raise CandidEncodeError(f"expected a principal, got {value!r}")
    return b"\x01" + encode_leb128(len(value.raw)) + value.raw


def _lookup_field(value: Dict[Any, Any], label: Label) -> Tuple[bool, Any]:
    if label.name is not None and label.name in value:
        return True, value[label.name]
    if label.id in value:
        return True, value[label.id]
    return False, None


class _Encoder:
    def __init__(self, env: TypeEnv) -> None:
        self.env = env

    def value(self, ty: IDLType, value: Any) -> bytes:
        resolved = self.env.trace(ty)
        if isinstance(resolved, PrimType):
            return self.primitive(resolved, value)
        if isinstance(resolved, OptType):
            if value is None:
                return b"\x00"
            return b"\x01" + self.value(resolved.inner, value)
        if isinstance(resolved, VecType):
            if isinstance(value, (bytes, bytearray)) and self.env.trace(resolved.inner) == NAT8:
                return encode_leb128(len(value)) + bytes(value)
            if not isinstance(value, (list, tuple)):
                raise CandidEncodeError(f"expected a sequence for {resolved}, got {value!r}")
            return encode_leb128(len(value)) + b"".join(
                self.value(resolved.inner, item) for item in value
            )
        if isinstance(resolved, RecordType):
            return self.record(resolved, value)
        if isinstance(resolved, VariantType):
            return self.variant(resolved, value)
        if isinstance(resolved, FuncType):
            try:
                principal, method = value
            except (TypeError, ValueError) as exc:
                raise CandidEncodeError(f"expected (principal, method) for func, got {value!r}") from exc
            raw = method.encode("utf-8")
            return b"\x01" + _encode_principal(principal) + encode_leb128(len(raw)) + raw
        if isinstance(resolved, ServiceType):
            return _encode_principal(value)
        raise CandidEncodeError(f"unsupported type {resolved}")  # pragma: no cover

    def primitive(self, ty: PrimType, value: Any) -> bytes:
        name = ty.name
        if name in {"null", "reserved"}:
            if value is not None and name == "null":
                raise CandidEncodeError(f"expected None for null, got {value!r}")
            return b""
        if name == "empty":
            raise CandidEncodeError("values of type empty cannot be encoded")
        if name == "bool":
            if not isinstance(value, bool):
                raise CandidEncodeError(f"expected a bool, got {value!r}")
            return b"\x01" if value else b"\x00"
        if name == "text":
            if not isinstance(value, str):
                raise CandidEncodeError(f"expected text, got {value!r}")
            raw = value.encode("utf-8")
            return encode_leb128(len(raw)) + raw
        if name == "principal":
            return _encode_principal(value)
        if name in {"float32", "float64"}:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise CandidEncodeError(f"expected a float, got {value!r}")
            return struct.pack("<f" if name == "float32" else "<d", value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise CandidEncodeError(f"expected an integer for {name}, got {value!r}")
        if name == "nat":
            if value < 0:
                raise CandidEncodeError(f"nat cannot be negative: {value}")
            return encode_leb128(value)
        if name == "int":
            return encode_sleb128(value)
        width, signed = FIXED_WIDTH[name]
        try:
            return value.to_bytes(width, "little", signed=signed)
        except OverflowError as exc:
            raise CandidEncodeError(f"{value} does not fit in {name}") from exc

    def record(self, ty: RecordType, value: Any) -> bytes:
        if isinstance(value, (list, tuple)):
            value = dict(enumerate(value))
        if not isinstance(value, dict):
            raise CandidEncodeError(f"expected a mapping for {ty}, got {value!r}")
        out = bytearray()
        for item in ty.fields:
            present, field_value = _lookup_field(value, item.label)
            if not present and _default_for_missing(self.env.trace(item.type)) is None:
                raise CandidEncodeError(f"missing record field {item.label}")
            out += self.value(item.type, field_value)
        return bytes(out)

    def variant(self, ty: VariantType, value: Any) -> bytes:
        if not isinstance(value, dict) or len(value) != 1:
            raise CandidEncodeError(f"expected a single-entry mapping for {ty}, got {value!r}")
        (tag, payload), = value.items()
        for index, item in enumerate(ty.fields):
            if tag in (item.label.name, item.label.id):
                return encode_leb128(index) + self.value(item.type, payload)
        raise CandidEncodeError(f"unknown variant tag {tag!r} for {ty}")


def encode(
    types: Sequence[IDLType], values: Sequence[Any], env: Optional[TypeEnv] = None
) -> bytes:
    """Encode *values* as a Candid message whose arguments have *types*."""

    if len(types) != len(values):
        raise CandidEncodeError(f"{len(values)} values supplied for {len(types)} types")
    env = env if env is not None else TypeEnv()
    try:
        table = _TypeTable(env)
        arg_indices = [table.index(ty) for ty in types]
    except CandidTypeError as exc:
        raise CandidEncodeError(str(exc)) from exc
    encoder = _Encoder(env)
    out = bytearray(MAGIC)
    out += encode_leb128(len(table.entries))
    for entry in table.entries:
        out += entry
    out += encode_leb128(len(arg_indices))
    for index in arg_indices:
        out += encode_sleb128(index)
    for ty, value in zip(types, values):
        out += encoder.value(ty, value)
    return bytes(out)


# -- decoding ---------------------------------------------------------------


def _table_name(index: int) -> str:
    return f"table{index}"


def _read_type_table(reader: _Reader) -> Tuple[TypeEnv, List[IDLType]]:
    count = reader.leb128()
    refs: List[int] = []

    def ref() -> IDLType:
        code = reader.sleb128()
        refs.append(code)
        if code >= 0:
            return VarType(_table_name(code))
        prim = PRIMITIVES_BY_OPCODE.get(code)
        if prim is None:
            raise CandidDecodeError(f"type opcode {code} cannot be used as a reference")
        return prim

    wire = TypeEnv()
    for index in range(count):
        opcode = reader.sleb128()
        entry: IDLType
        if opcode in (Opcode.OPT, Opcode.VEC):
            inner = ref()
            entry = OptType(inner) if opcode == Opcode.OPT else VecType(inner)
        elif opcode in (Opcode.RECORD, Opcode.VARIANT):
            fields: List[Field] = []
            last = -1
            for _ in range(reader.leb128()):
                field_id = reader.leb128()
                if field_id <= last:
                    raise CandidDecodeError("record/variant field ids must be strictly increasing")
                last = field_id
                fields.append(Field(Label(field_id), ref()))
            entry = RecordType(tuple(fields)) if opcode == Opcode.RECORD else VariantType(tuple(fields))
        elif opcode == Opcode.FUNC:
            args = tuple(ref() for _ in range(reader.leb128()))
            rets = tuple(ref() for _ in range(reader.leb128()))
            modes = []
            for _ in range(reader.leb128()):
                code = reader.byte()
                if code not in FUNC_MODE_NAMES:
                    raise CandidDecodeError(f"unknown function mode {code}")
                modes.append(FUNC_MODE_NAMES[code])
            entry = FuncType(args, rets, tuple(modes))
        elif opcode == Opcode.SERVICE:
            methods = []
            for _ in range(reader.leb128()):
                raw = reader.read(reader.leb128())
                try:
                    name = raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise CandidDecodeError("method name is not valid UTF-8") from exc
                methods.append((name, ref()))
            entry = ServiceType(tuple(methods))
        else:
            raise CandidDecodeError(f"unknown type table opcode {opcode}")
        wire.define(_table_name(index), entry)

    arg_types = [ref() for _ in range(reader.leb128())]
    for code in refs:
        if code >= count:
            raise CandidDecodeError(f"type table index {code} out of range ({count} entries)")
    _reject_record_cycles(wire, count)
    return wire, arg_types


def _reject_record_cycles(wire: TypeEnv, count: int) -> None:
    """Reject records that contain themselves with no opt, vec or variant in between.

    Such a type has no finite value, so decoding it could only recurse forever.
    """

    for index in range(count):
        start = _table_name(index)
        pending = [start]
        seen = {start}
        while pending:
            ty = wire.find(pending.pop())
            if not isinstance(ty, RecordType):
                continue
            for item in ty.fields:
                if not isinstance(item.type, VarType):
                    continue
                if item.type.name == start:
                    raise CandidDecodeError(f"type table entry {index} is a record that contains itself")
                if item.type.name not in seen:
                    seen.add(item.type.name)
                    pending.append(item.type.name)


def _default_for_missing(ty: IDLType) -> Optional[IDLValue]:
    if isinstance(ty, OptType):
        return IDLValue("opt", None)
    if ty == NULL:
        return IDLValue("null")
    if ty == RESERVED:
        return IDLValue("reserved")
    return None


class _Decoder:
    def __init__(self, reader: _Reader, wire: TypeEnv, env: TypeEnv) -> None:
        self.reader = reader
        self.wire = wire
        self.env = env
        self.depth = 0

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DECODE_DEPTH:
            raise CandidDecodeError(f"values nested deeper than {MAX_DECODE_DEPTH} levels")

    def vec_count(self, inner: IDLType) -> int:
        count = self.reader.leb128()
        if self.zero_sized(inner, frozenset()):
            if count > MAX_ZERO_SIZED_ELEMENTS:
                raise CandidDecodeError(
                    f"vector of {count} zero-sized elements exceeds {MAX_ZERO_SIZED_ELEMENTS}"
                )
        elif count > self.reader.remaining:
            raise CandidDecodeError(
                f"vector length {count} exceeds the {self.reader.remaining} bytes left"
            )
        return count

    def zero_sized(self, wire_ty: IDLType, path: FrozenSet[str]) -> bool:
        if isinstance(wire_ty, VarType):
            if wire_ty.name in path:
                return False
            path = path | {wire_ty.name}
        ty = self.wire.trace(wire_ty)
        if ty in (NULL, RESERVED):
            return True
        if isinstance(ty, RecordType):
            return all(self.zero_sized(item.type, path) for item in ty.fields)
        return False

    # untyped ---------------------------------------------------------------

    def value(self, wire_ty: IDLType) -> IDLValue:
        self.enter()
        try:
            return self._value(wire_ty)
        finally:
            self.depth -= 1

    def _value(self, wire_ty: IDLType) -> IDLValue:
        ty = self.wire.trace(wire_ty)
        if isinstance(ty, PrimType):
            return self.primitive(ty)
        if isinstance(ty, OptType):
            if self.flag("opt"):
                return IDLValue("opt", self.value(ty.inner))
            return IDLValue("opt", None)
        if isinstance(ty, VecType):
            count = self.vec_count(ty.inner)
            return IDLValue("vec", tuple(self.value(ty.inner) for _ in range(count)))
        if isinstance(ty, RecordType):
            return IDLValue(
                "record", tuple(IDLField(item.label, self.value(item.type)) for item in ty.fields)
            )
        if isinstance(ty, VariantType):
            item = self.variant_field(ty)
            return IDLValue("variant", IDLField(item.label, self.value(item.type)))
        if isinstance(ty, FuncType):
            if not self.flag("func"):
                raise CandidDecodeError("opaque function references are not supported")
            principal = self.principal()
            return IDLValue("func", (principal, self.text()))
        if isinstance(ty, ServiceType):
            return IDLValue("service", self.principal())
        raise CandidDecodeError(f"unsupported wire type {ty}")  # pragma: no cover

    def flag(self, what: str) -> bool:
        tag = self.reader.byte()
        if tag not in (0, 1):
            raise CandidDecodeError(f"invalid {what} tag {tag}")
        return tag == 1

    def variant_field(self, ty: VariantType) -> Field:
        index = self.reader.leb128()
        if index >= len(ty.fields):
            raise CandidDecodeError(f"variant index {index} out of range")
        return ty.fields[index]

    def text(self) -> str:
        raw = self.reader.read(self.reader.leb128())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CandidDecodeError(f"text is not valid UTF-8: {exc}") from exc

    def principal(self) -> Principal:
        if not self.flag("principal"):
            raise CandidDecodeError("opaque principal references are not supported")
        length = self.reader.leb128()
        if length > MAX_PRINCIPAL_LENGTH:
            raise CandidDecodeError(f"principal length {length} exceeds {MAX_PRINCIPAL_LENGTH}")
        return Principal(self.reader.read(length))

    def primitive(self, ty: PrimType) -> IDLValue:
        name = ty.name
        if name in {"null", "reserved"}:
            return IDLValue(name)
        if name == "empty":
            raise CandidDecodeError("cannot decode a value of type empty")
        if name == "bool":
            return IDLValue("bool", self.flag("bool"))
        if name == "text":
            return IDLValue("text", self.text())
        if name == "principal":
            return IDLValue("principal", self.principal())
        if name == "nat":
            return IDLValue("nat", self.reader.leb128())
        if name == "int":
            return IDLValue("int", self.reader.sleb128())
        if name == "float32":
            return IDLValue(name, struct.unpack("<f", self.reader.read(4))[0])
        if name == "float64":
            return IDLValue(name, struct.unpack("<d", self.reader.read(8))[0])
        width, signed = FIXED_WIDTH[name]
        return IDLValue(name, int.from_bytes(self.reader.read(width), "little", signed=signed))

    # typed -----------------------------------------------------------------

    def coerce(self, wire_ty: IDLType, expected: IDLType) -> IDLValue:
        self.enter()
        try:
            return self._coerce(wire_ty, expected)
        finally:
            self.depth -= 1

    def _coerce(self, wire_ty: IDLType, expected: IDLType) -> IDLValue:
        wire = self.wire.trace(wire_ty)
        target = self.env.trace(expected)
        if target == RESERVED:
            self.value(wire)
            return IDLValue("reserved")
        if isinstance(target, OptType):
            return self.coerce_opt(wire, target)
        if isinstance(target, PrimType):
            if wire == target:
                return self.primitive(wire)
            if wire == NAT and target == INT:
                return IDLValue("int", self.reader.leb128())
            raise self.mismatch(wire, target)
        if isinstance(target, VecType):
            if not isinstance(wire, VecType):
                raise self.mismatch(wire, target)
            count = self.vec_count(wire.inner)
            return IDLValue("vec", tuple(self.coerce(wire.inner, target.inner) for _ in range(count)))
        if isinstance(target, RecordType):
            return self.coerce_record(wire, target)
        if isinstance(target, VariantType):
            if not isinstance(wire, VariantType):
                raise self.mismatch(wire, target)
            item = self.variant_field(wire)
            expected_field = target.field(item.label.id)
            if expected_field is None:
                raise CandidDecodeError(f"unexpected variant tag {item.label} for {target}")
            return IDLValue(
                "variant",
                IDLField(expected_field.label, self.coerce(item.type, expected_field.type)),
            )
        if type(wire) is not type(target):
            raise self.mismatch(wire, target)
        return self.value(wire)

    def coerce_opt(self, wire: IDLType, target: OptType) -> IDLValue:
        if wire in (NULL, RESERVED):
            return IDLValue("opt", None)
        if isinstance(wire, OptType):
            if not self.flag("opt"):
                return IDLValue("opt", None)
            if self.compatible(wire.inner, target.inner):
                return IDLValue("opt", self.coerce(wire.inner, target.inner))
            self.value(wire.inner)
            return IDLValue("opt", None)
        if self.compatible(wire, target.inner):
            return IDLValue("opt", self.coerce(wire, target.inner))
        self.value(wire)
        return IDLValue("opt", None)

    def coerce_record(self, wire: IDLType, target: RecordType) -> IDLValue:
        if not isinstance(wire, RecordType):
            raise self.mismatch(wire, target)
        decoded: Dict[int, IDLField] = {}
        for item in wire.fields:
            expected_field = target.field(item.label.id)
            if expected_field is None:
                self.value(item.type)
                continue
            decoded[item.label.id] = IDLField(
                expected_field.label, self.coerce(item.type, expected_field.type)
            )
        fields = []
        for expected_field in target.fields:
            if expected_field.label.id in decoded:
                fields.append(decoded[expected_field.label.id])
                continue
            default = _default_for_missing(self.env.trace(expected_field.type))
            if default is None:
                raise CandidDecodeError(f"missing required record field {expected_field.label}")
            fields.append(IDLField(expected_field.label, default))
        return IDLValue("record", tuple(fields))

    def compatible(
        self, wire_ty: IDLType, expected: IDLType, assumed: Optional[Set[Tuple[Any, Any]]] = None
    ) -> bool:
        assumed = set() if assumed is None else assumed
        key = (wire_ty, expected)
        if key in assumed:
            return True
        assumed.add(key)
        wire = self.wire.trace(wire_ty)
        target = self.env.trace(expected)
        if target == RESERVED or isinstance(target, OptType):
            return True
        if isinstance(target, PrimType):
            return wire == target or (wire == NAT and target == INT)
        if isinstance(target, VecType):
            return isinstance(wire, VecType) and self.compatible(wire.inner, target.inner, assumed)
        if isinstance(target, RecordType):
            if not isinstance(wire, RecordType):
                return False
            for expected_field in target.fields:
                wire_field = wire.field(expected_field.label.id)
                if wire_field is None:
                    if _default_for_missing(self.env.trace(expected_field.type)) is None:
                        return False
                elif not self.compatible(wire_field.type, expected_field.type, assumed):
                    return False
            return True
        if isinstance(target, VariantType):
            if not isinstance(wire, VariantType):
                return False
            for wire_field in wire.fields:
                expected_field = target.field(wire_field.label.id)
                if expected_field is None:
                    return False
                if not self.compatible(wire_field.type, expected_field.type, assumed):
                    return False
            return True
        return type(wire) is type(target)

    def mismatch(self, wire: IDLType, target: IDLType) -> CandidDecodeError:
        return CandidDecodeError(f"type mismatch: wire type {wire} cannot be read as {target}")


def decode(
    data: bytes,
    types: Optional[Sequence[IDLType]] = None,
    env: Optional[TypeEnv] = None,
) -> IDLArgs:
    """Decode a Candid message, coercing it to *types* when they are given."""

    reader = _Reader(bytes(data))
    if reader.remaining < len(MAGIC) or reader.read(len(MAGIC)) != MAGIC:
        raise CandidDecodeError("missing DIDL magic header")
    wire, wire_args = _read_type_table(reader)
    decoder = _Decoder(reader, wire, env if env is not None else TypeEnv())

    if types is None:
        values = [decoder.value(arg) for arg in wire_args]
    else:
        values = []
        for index, expected in enumerate(types):
            if index < len(wire_args):
                values.append(decoder.coerce(wire_args[index], expected))
                continue
            default = _default_for_missing(decoder.env.trace(expected))
            if default is None:
                raise CandidDecodeError(
                    f"message has {len(wire_args)} arguments, expected at least {index + 1}"
                )
            values.append(default)
        for extra in wire_args[len(types):]:
            decoder.value(extra)

    if reader.remaining:
        raise CandidDecodeError(f"{reader.remaining} trailing bytes after the last argument")
    logger.debug("Decoded %d Candid arguments (%s)", len(values), "typed" if types else "untyped")
    return IDLArgs(tuple(values))
