"""Principal identifiers and ledger account identifiers."""

from __future__ import annotations

import base64
import binascii
import hashlib
import zlib
from dataclasses import dataclass

MAX_PRINCIPAL_LENGTH = 29
SELF_AUTHENTICATING_SUFFIX = 0x02
ANONYMOUS_SUFFIX = 0x04
ACCOUNT_DOMAIN_SEPARATOR = b"\x0aaccount-id"


class PrincipalError(ValueError):
    """Raised when a principal or account identifier cannot be parsed."""


def _crc32_be(data: bytes) -> bytes:
    return (zlib.crc32(data) & 0xFFFFFFFF).to_bytes(4, "big")


@dataclass(frozen=True)
class Principal:
    """Opaque binary identifier of a canister or a user."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) > MAX_PRINCIPAL_LENGTH:
            raise PrincipalError(
                f"principal is {len(self.raw)} bytes, at most {MAX_PRINCIPAL_LENGTH} allowed"
            )

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(bytes([ANONYMOUS_SUFFIX]))

    @classmethod
    def management(cls) -> "Principal":
        return cls(b"")

    @classmethod
    def self_authenticating(cls, der_public_key: bytes) -> "Principal":
        """Derive the principal controlled by the given DER-encoded public key."""

        digest = hashlib.sha224(der_public_key).digest()
        return cls(digest + bytes([SELF_AUTHENTICATING_SUFFIX]))

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        """Parse the dashed base32 textual form, validating its checksum."""

        cleaned = text.strip().replace("-", "").upper()
        if not cleaned:
            raise PrincipalError(f"empty principal text: {text!r}")
        padding = "=" * (-len(cleaned) % 8)
        try:
            decoded = base64.b32decode(cleaned + padding)
        except binascii.Error as exc:
            raise PrincipalError(f"invalid principal text {text!r}: {exc}") from exc
        if len(decoded) < 4:
            raise PrincipalError(f"principal text {text!r} is too short")
        checksum, raw = decoded[:4], decoded[4:]
        if _crc32_be(raw) != checksum:
            raise PrincipalError(f"checksum mismatch in principal {text!r}")
        principal = cls(raw)
        if principal.to_text() != text.strip().lower():
            raise PrincipalError(f"principal {text!r} is not in canonical form")
        return principal

    def to_text(self) -> str:
        encoded = base64.b32encode(_crc32_be(self.raw) + self.raw).decode("ascii")
        encoded = encoded.rstrip("=").lower()
        return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))

    @property
    def is_anonymous(self) -> bool:
        return self.raw == bytes([ANONYMOUS_SUFFIX])

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class AccountIdentifier:
    """Ledger account derived from a principal and a 32-byte subaccount."""

    hash: bytes

    @classmethod
    def from_principal(
        cls, principal: Principal, subaccount: bytes | None = None
    ) -> "AccountIdentifier":
        if subaccount is None:
            subaccount = bytes(32)
        if len(subaccount) != 32:
            raise PrincipalError(f"subaccount must be 32 bytes, got {len(subaccount)}")
        hasher = hashlib.sha224()
        hasher.update(ACCOUNT_DOMAIN_SEPARATOR)
        hasher.update(principal.raw)
        hasher.update(subaccount)
        return cls(hasher.digest())

    @classmethod
    def from_hex(cls, value: str) -> "AccountIdentifier":
        try:
            data = bytes.fromhex(value)
        except ValueError as exc:
            raise PrincipalError(f"account identifier is not hex: {value!r}") from exc
        if len(data) != 32:
            raise PrincipalError(f"account identifier must be 32 bytes, got {len(data)}")
        if _crc32_be(data[4:]) != data[:4]:
            raise PrincipalError(f"checksum mismatch in account identifier {value!r}")
        return cls(data[4:])

    def to_hex(self) -> str:
        return (_crc32_be(self.hash) + self.hash).hex()

    def __str__(self) -> str:
        return self.to_hex()
