"""Offline signing of canister calls and request-status polls.

Messages are signed locally and rendered as JSON documents that carry the
CBOR-encoded envelope in hex, ready to be handed to a machine with network
access.  Nothing in this module talks to a replica.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from . import cbor
from .candid.codec import encode_leb128
from .config import SignerConfig
from .principal import Principal

logger = logging.getLogger(__name__)

COMPACT_JSON_SEPARATORS = (",", ":")
MESSAGE_VERSION = 1
IC_REQUEST_DOMAIN_SEPARATOR = b"\x0aic-request"
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# PKCS#8 v1 and v2 prefixes of an Ed25519 key; the 32-byte seed follows
_ED25519_PKCS8_PREFIXES = (
    bytes.fromhex("302e020100300506032b657004220420"),
    bytes.fromhex("3053020101300506032b657004220420"),
)
_PEM_BLOCK_RE = re.compile(
    r"-----BEGIN (?P<label>[A-Z ]*PRIVATE KEY)-----(?P<body>.*?)-----END (?P=label)-----",
    re.DOTALL,
)

PrivateKey = Union[ed25519.Ed25519PrivateKey, ec.EllipticCurvePrivateKey]


class IdentityError(ValueError):
    """Raised when key material cannot be loaded."""


@dataclass
class Identity:
    """Signing key of the sender; anonymous when ``private_key`` is ``None``."""

    private_key: Optional[PrivateKey] = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def from_pem(cls, pem: str) -> "Identity":
        """Load a secp256k1 or Ed25519 private key from PEM text."""

        match = _PEM_BLOCK_RE.search(pem)
        if match is None:
            raise IdentityError("Couldn't load identity from PEM file: no private key block")
        block = match.group(0).encode("ascii")
        try:
            key = serialization.load_pem_private_key(block, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm):
            return cls(_load_ed25519_seed(match.group("body")))
        if isinstance(key, ec.EllipticCurvePrivateKey):
            if not isinstance(key.curve, ec.SECP256K1):
                raise IdentityError(f"Unsupported elliptic curve {key.curve.name}")
            return cls(key)
        if isinstance(key, ed25519.Ed25519PrivateKey):
            return cls(key)
        raise IdentityError(f"Unsupported key type {type(key).__name__}")

    @property
    def is_anonymous(self) -> bool:
        return self.private_key is None

    @property
    def der_public_key(self) -> Optional[bytes]:
        if self.private_key is None:
            return None
        return self.private_key.public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )

    @property
    def principal(self) -> Principal:
        der = self.der_public_key
        if der is None:
            return Principal.anonymous()
        return Principal.self_authenticating(der)

    def sign(self, message: bytes) -> bytes:
        if self.private_key is None:
            raise IdentityError("The anonymous identity cannot sign")
        if isinstance(self.private_key, ed25519.Ed25519PrivateKey):
            return self.private_key.sign(message)
        der_signature = self.private_key.sign(message, ec.ECDSA(hashes.SHA256()))
        r, s = decode_dss_signature(der_signature)
        if s > SECP256K1_ORDER // 2:
            s = SECP256K1_ORDER - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")


def _load_ed25519_seed(body: str) -> ed25519.Ed25519PrivateKey:
    try:
        der = base64.b64decode("".join(body.split()), validate=True)
    except ValueError as exc:
        raise IdentityError(f"Couldn't load identity from PEM file: {exc}") from exc
    for prefix in _ED25519_PKCS8_PREFIXES:
        if der.startswith(prefix) and len(der) >= len(prefix) + 32:
            seed = der[len(prefix) : len(prefix) + 32]
            return ed25519.Ed25519PrivateKey.from_private_bytes(seed)
    raise IdentityError("Couldn't load identity from PEM file")


def get_identity(pem: Optional[str]) -> Identity:
    """Return the identity for *pem*, or the anonymous identity without one."""

    if pem is None:
        return Identity.anonymous()
    return Identity.from_pem(pem)


def _hash_value(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    elif isinstance(value, str):
        data = value.encode("utf-8")
    elif isinstance(value, int) and not isinstance(value, bool):
        data = encode_leb128(value)
    elif isinstance(value, (list, tuple)):
        data = b"".join(_hash_value(item) for item in value)
    elif isinstance(value, dict):
        return request_id(value)
    else:
        raise TypeError(f"cannot hash {type(value).__name__} into a request id")
    return hashlib.sha256(data).digest()


def request_id(content: Dict[str, Any]) -> bytes:
    """Representation-independent hash of a request's content map."""

    pairs = sorted(
        hashlib.sha256(key.encode("utf-8")).digest() + _hash_value(value)
        for key, value in content.items()
        if value is not None
    )
    return hashlib.sha256(b"".join(pairs)).digest()


@dataclass
class SignedMessageWithRequestId:
    """JSON rendering of a signed call plus the id needed to poll its status."""

    buffer: str
    request_id: Optional[bytes]


def _timestamps(config: SignerConfig, now: Optional[datetime]) -> tuple[datetime, datetime]:
    creation = now or datetime.now(timezone.utc)
    if creation.tzinfo is None:
        creation = creation.replace(tzinfo=timezone.utc)
    return creation, creation + timedelta(seconds=config.ingress_expiry_seconds)


def _nanos(moment: datetime) -> int:
    return (moment - _EPOCH) // timedelta(microseconds=1) * 1000


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _envelope(identity: Identity, content: Dict[str, Any], req_id: bytes) -> bytes:
    envelope: Dict[str, Any] = {"content": content}
    if not identity.is_anonymous:
        envelope["sender_pubkey"] = identity.der_public_key
        envelope["sender_sig"] = identity.sign(IC_REQUEST_DOMAIN_SEPARATOR + req_id)
    return cbor.dumps(envelope, self_describe=True)


def sign(
    pem: Optional[str],
    canister_id: Principal,
    method_name: str,
    args: bytes,
    *,
    config: Optional[SignerConfig] = None,
    now: Optional[datetime] = None,
) -> SignedMessageWithRequestId:
    """Sign an update call of *method_name* on *canister_id* with *args*."""

    config = config or SignerConfig()
    identity = get_identity(pem)
    creation, expiration = _timestamps(config, now)
    sender = identity.principal
    content = {
        "request_type": "call",
        "canister_id": canister_id.raw,
        "method_name": method_name,
        "arg": bytes(args),
        "sender": sender.raw,
        "ingress_expiry": _nanos(expiration),
    }
    req_id = request_id(content)
    message = {
        "version": MESSAGE_VERSION,
        "creation": _rfc3339(creation),
        "expiration": _rfc3339(expiration),
        "network": config.network,
        "call_type": "update",
        "sender": sender.to_text(),
        "canister_id": canister_id.to_text(),
        "method_name": method_name,
        "arg": bytes(args).hex(),
        "request_id": "0x" + req_id.hex(),
        "content": _envelope(identity, content, req_id).hex(),
    }
    logger.debug("Signed %s on %s as %s (request id 0x%s)", method_name, canister_id, sender, req_id.hex())
    return SignedMessageWithRequestId(
        buffer=json.dumps(message, separators=COMPACT_JSON_SEPARATORS),
        request_id=req_id,
    )


def sign_request_status(
    pem: Optional[str],
    req_id: bytes,
    canister_id: Principal,
    *,
    config: Optional[SignerConfig] = None,
    now: Optional[datetime] = None,
) -> str:
    """Sign a ``read_state`` query polling the status of request *req_id*."""

    config = config or SignerConfig()
    identity = get_identity(pem)
    creation, expiration = _timestamps(config, now)
    sender = identity.principal
    content = {
        "request_type": "read_state",
        "sender": sender.raw,
        "paths": [[b"request_status", bytes(req_id)]],
        "ingress_expiry": _nanos(expiration),
    }
    status_id = request_id(content)
    message = {
        "version": MESSAGE_VERSION,
        "creation": _rfc3339(creation),
        "expiration": _rfc3339(expiration),
        "network": config.network,
        "call_type": "request_status",
        "sender": sender.to_text(),
        "canister_id": canister_id.to_text(),
        "request_id": "0x" + bytes(req_id).hex(),
        "content": _envelope(identity, content, status_id).hex(),
    }
    return json.dumps(message, separators=COMPACT_JSON_SEPARATORS)
