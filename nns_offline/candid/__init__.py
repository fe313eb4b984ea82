"""Candid interface-description parsing and binary value codec."""

from .codec import CandidDecodeError, CandidEncodeError, decode, encode
from .parser import CandidParseError, IDLProg, check_prog, parse_prog
from .types import (
    CandidError,
    CandidTypeError,
    FuncType,
    IDLType,
    Label,
    TypeEnv,
    idl_hash,
)
from .values import IDLArgs, IDLField, IDLValue

__all__ = [
    "CandidDecodeError",
    "CandidEncodeError",
    "CandidError",
    "CandidParseError",
    "CandidTypeError",
    "FuncType",
    "IDLArgs",
    "IDLField",
    "IDLProg",
    "IDLType",
    "IDLValue",
    "Label",
    "TypeEnv",
    "check_prog",
    "decode",
    "encode",
    "idl_hash",
    "parse_prog",
]
