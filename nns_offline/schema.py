"""Lookup of bundled interface descriptions and method signatures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from .candid import CandidError, FuncType, IDLType, TypeEnv, check_prog, parse_prog
from .constants import GOVERNANCE_CANISTER_ID, LEDGER_CANISTER_ID

logger = logging.getLogger(__name__)

CANDID_DIR = Path(__file__).resolve().parent / "candid_files"
BUNDLED_INTERFACES: Dict[str, str] = {
    GOVERNANCE_CANISTER_ID: "governance.did",
    LEDGER_CANISTER_ID: "ledger.did",
}


@dataclass(frozen=True)
class TypeBinding:
    """Type environment of an interface plus one of its method signatures."""

    env: TypeEnv
    method: FuncType

    def types_for(self, part: str) -> Tuple[IDLType, ...]:
        return self.method.args if part == "args" else self.method.rets


def get_local_candid(canister_id: str) -> Optional[str]:
    """Return the bundled interface text for *canister_id*, if one ships with us."""

    filename = BUNDLED_INTERFACES.get(canister_id)
    if filename is None:
        return None
    try:
        return (CANDID_DIR / filename).read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("Bundled interface %s is not valid UTF-8", filename)
        return None


def get_candid_type(idl: str, method_name: str) -> Optional[TypeBinding]:
    """Parse and check *idl*, then bind the signature of *method_name*.

    Returns ``None`` when the text does not parse or type-check, when it
    declares no service, or when the service has no such method.
    """

    try:
        prog = parse_prog(idl)
        env = TypeEnv()
        actor = check_prog(env, prog)
        if actor is None:
            logger.debug("Interface declares no service; cannot bind %s", method_name)
            return None
        method = env.get_method(actor, method_name)
    except CandidError as exc:
        logger.debug("No type binding for %s: %s", method_name, exc)
        return None
    return TypeBinding(env=env, method=method)


def resolve_binding(canister_id: str, method_name: str) -> Optional[TypeBinding]:
    idl = get_local_candid(canister_id)
    if idl is None:
        logger.debug("No bundled interface for canister %s", canister_id)
        return None
    return get_candid_type(idl, method_name)
