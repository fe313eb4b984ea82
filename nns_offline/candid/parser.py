"""Parser and type checker for Candid interface-description texts (``.did``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .types import (
    NAT8,
    NULL,
    PRIMITIVES,
    CandidError,
    CandidTypeError,
    Field,
    FuncType,
    IDLType,
    Label,
    OptType,
    RecordType,
    ServiceType,
    TypeEnv,
    VarType,
    VariantType,
    VecType,
    idl_hash,
)


class CandidParseError(CandidError):
    """Raised when interface-description text is syntactically invalid."""


FUNC_MODES = {"query", "oneway", "composite_query"}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<line_comment>//[^\n]*)
  | (?P<block_comment>/\*.*?\*/)
  | (?P<text>"(?:[^"\\]|\\.)*")
  | (?P<number>0x[0-9a-fA-F_]+|[0-9][0-9_]*)
  | (?P<arrow>->)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<symbol>[{}();:,=])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int


def _unescape(body: str, line: int) -> str:
    out: List[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        nxt = body[index + 1 : index + 2]
        if nxt in _ESCAPES:
            out.append(_ESCAPES[nxt])
            index += 2
        elif nxt == "u" and body[index + 2 : index + 3] == "{":
            end = body.find("}", index)
            if end < 0:
                raise CandidParseError(f"line {line}: unterminated unicode escape")
            out.append(chr(int(body[index + 3 : end].replace("_", ""), 16)))
            index = end + 1
        elif re.match(r"[0-9a-fA-F]{2}", body[index + 1 : index + 3]):
            out.append(chr(int(body[index + 1 : index + 3], 16)))
            index += 3
        else:
            raise CandidParseError(f"line {line}: invalid escape sequence in string literal")
    return "".join(out)


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    position = 0
    line = 1
    while position < len(source):
        match = _TOKEN_RE.match(source, position)
        if match is None:
            raise CandidParseError(f"line {line}: unexpected character {source[position]!r}")
        kind = match.lastgroup or ""
        value = match.group()
        if kind == "text":
            tokens.append(Token("text", _unescape(value[1:-1], line), line))
        elif kind in {"number", "arrow", "ident", "symbol"}:
            tokens.append(Token(kind, value, line))
        line += value.count("\n")
        position = match.end()
    tokens.append(Token("eof", "", line))
    return tokens


@dataclass
class IDLProg:
    """Parsed but unchecked program: type definitions plus an optional actor."""

    definitions: List[Tuple[str, IDLType]]
    actor: Optional[IDLType] = None
    init_args: Tuple[IDLType, ...] = ()


class _Parser:
    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def peek(self, offset: int = 1) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.current
        self.index += 1
        return token

    def error(self, message: str) -> CandidParseError:
        token = self.current
        found = token.value or token.kind
        return CandidParseError(f"line {token.line}: {message}, found {found!r}")

    def at(self, value: str) -> bool:
        return self.current.kind in {"symbol", "arrow", "ident"} and self.current.value == value

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error(f"expected {value!r}")
        return self.advance()

    def accept(self, value: str) -> bool:
        if self.at(value):
            self.advance()
            return True
        return False

    def name(self) -> str:
        token = self.current
        if token.kind in {"ident", "text"}:
            self.advance()
            return token.value
        raise self.error("expected a name")

    def program(self) -> IDLProg:
        prog = IDLProg(definitions=[])
        while not self.at("service") and self.current.kind != "eof":
            if self.accept("import"):
                raise self.error("imports are not supported in bundled interfaces")
            self.expect("type")
            name = self.name()
            self.expect("=")
            prog.definitions.append((name, self.datatype()))
            self.expect(";")
        if self.accept("service"):
            if self.current.kind == "ident" and not self.at(":"):
                self.advance()
            self.expect(":")
            if self.at("("):
                prog.init_args = self.tuple_type()
                self.expect("->")
            if self.at("{"):
                prog.actor = self.actor_type()
            else:
                prog.actor = VarType(self.name())
            self.accept(";")
        if self.current.kind != "eof":
            raise self.error("expected end of input")
        return prog

    def datatype(self) -> IDLType:
        token = self.current
        if token.kind != "ident":
            raise self.error("expected a type")
        keyword = token.value
        if keyword == "opt":
            self.advance()
            return OptType(self.datatype())
        if keyword == "vec":
            self.advance()
            return VecType(self.datatype())
        if keyword == "blob":
            self.advance()
            return VecType(NAT8)
        if keyword == "record":
            self.advance()
            return RecordType(self.fields(is_variant=False))
        if keyword == "variant":
            self.advance()
            return VariantType(self.fields(is_variant=True))
        if keyword == "func":
            self.advance()
            return self.func_type()
        if keyword == "service":
            self.advance()
            return self.actor_type()
        self.advance()
        if keyword in PRIMITIVES:
            return PRIMITIVES[keyword]
        return VarType(keyword)

    def fields(self, *, is_variant: bool) -> Tuple[Field, ...]:
        self.expect("{")
        fields: List[Field] = []
        next_id = 0
        while not self.at("}"):
            token = self.current
            labelled = self.peek().kind == "symbol" and self.peek().value == ":"
            if token.kind == "number" and labelled:
                self.advance()
                label = Label(int(token.value.replace("_", ""), 0))
                self.expect(":")
                ty = self.datatype()
            elif token.kind in {"ident", "text"} and labelled:
                self.advance()
                label = Label(idl_hash(token.value), token.value)
                self.expect(":")
                ty = self.datatype()
            elif is_variant and token.kind in {"ident", "text", "number"}:
                self.advance()
                if token.kind == "number":
                    label = Label(int(token.value.replace("_", ""), 0))
                else:
                    label = Label(idl_hash(token.value), token.value)
                ty = NULL
            elif is_variant:
                raise self.error("expected a variant tag")
            else:
                label = Label(next_id)
                ty = self.datatype()
            next_id = label.id + 1
            fields.append(Field(label, ty))
            if not self.accept(";"):
                break
        self.expect("}")
        fields.sort(key=lambda f: f.label.id)
        return tuple(fields)

    def tuple_type(self) -> Tuple[IDLType, ...]:
        self.expect("(")
        types: List[IDLType] = []
        while not self.at(")"):
            named = self.peek().kind == "symbol" and self.peek().value == ":"
            if self.current.kind in {"ident", "text"} and named:
                self.advance()
                self.advance()
            types.append(self.datatype())
            if not self.accept(","):
                break
        self.expect(")")
        return tuple(types)

    def func_type(self) -> FuncType:
        args = self.tuple_type()
        self.expect("->")
        rets = self.tuple_type()
        modes: List[str] = []
        while self.current.kind == "ident" and self.current.value in FUNC_MODES:
            modes.append(self.advance().value)
        return FuncType(args, rets, tuple(modes))

    def actor_type(self) -> ServiceType:
        self.expect("{")
        methods: List[Tuple[str, IDLType]] = []
        while not self.at("}"):
            name = self.name()
            self.expect(":")
            if self.at("("):
                methods.append((name, self.func_type()))
            else:
                methods.append((name, VarType(self.name())))
            if not self.accept(";"):
                break
        self.expect("}")
        return ServiceType(tuple(methods))


def parse_prog(source: str) -> IDLProg:
    """Parse interface-description text without checking it."""

    return _Parser(tokenize(source)).program()


def _check_type(env: TypeEnv, ty: IDLType) -> None:
    if isinstance(ty, VarType):
        env.find(ty.name)
    elif isinstance(ty, (OptType, VecType)):
        _check_type(env, ty.inner)
    elif isinstance(ty, (RecordType, VariantType)):
        seen: dict[int, Label] = {}
        for item in ty.fields:
            if item.label.id in seen:
                raise CandidTypeError(
                    f"field name hash collision: {seen[item.label.id]} and {item.label}"
                )
            seen[item.label.id] = item.label
            _check_type(env, item.type)
    elif isinstance(ty, FuncType):
        for arg in ty.args + ty.rets:
            _check_type(env, arg)
        if "oneway" in ty.modes and ty.rets:
            raise CandidTypeError("oneway function must have no results")
    elif isinstance(ty, ServiceType):
        names = [name for name, _ in ty.methods]
        if len(names) != len(set(names)):
            raise CandidTypeError("duplicate method name in service")
        for _, method in ty.methods:
            _check_type(env, method)
            env.as_func(method)


def check_prog(env: TypeEnv, prog: IDLProg) -> Optional[IDLType]:
    """Load *prog*'s definitions into *env* and return its actor type, if any."""

    for name, ty in prog.definitions:
        env.define(name, ty)
    for name, ty in prog.definitions:
        _check_type(env, ty)
        env.trace(VarType(name))
    for arg in prog.init_args:
        _check_type(env, arg)
    if prog.actor is None:
        return None
    _check_type(env, prog.actor)
    env.as_service(prog.actor)
    return prog.actor
