"""Governance request shapes accepted by ``manage_neuron``.

Each dataclass knows its Candid wire value; the module-level type constants
mirror the matching definitions in the bundled governance interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .candid.types import NAT8, NAT64, NAT32, PRINCIPAL, OptType, VecType, record, variant
from .principal import AccountIdentifier, Principal

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

NEURON_ID = record({"id": NAT64})
TOKENS = record({"e8s": NAT64})
ACCOUNT_IDENTIFIER = record({"hash": VecType(NAT8)})
OPERATION = variant(
    {
        "RemoveHotKey": record({"hot_key_to_remove": OptType(PRINCIPAL)}),
        "StartDissolving": record(),
        "StopDissolving": record(),
        "AddHotKey": record({"new_hot_key": OptType(PRINCIPAL)}),
        "IncreaseDissolveDelay": record({"additional_dissolve_delay_seconds": NAT32}),
    }
)
CONFIGURE = record({"operation": OptType(OPERATION)})
DISBURSE = record({"to_account": OptType(ACCOUNT_IDENTIFIER), "amount": OptType(TOKENS)})
COMMAND = variant({"Configure": CONFIGURE, "Disburse": DISBURSE})
MANAGE_NEURON = record({"id": OptType(NEURON_ID), "command": OptType(COMMAND)})


@dataclass(frozen=True)
class NeuronId:
    id: int

    def __post_init__(self) -> None:
        if not 0 <= self.id <= U64_MAX:
            raise ValueError(f"neuron id {self.id} does not fit in 64 bits")

    def candid_value(self) -> Dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class Tokens:
    """An ICP amount in e8s (10^-8 of a token)."""

    e8s: int

    def candid_value(self) -> Dict[str, Any]:
        return {"e8s": self.e8s}


@dataclass(frozen=True)
class RemoveHotKey:
    hot_key_to_remove: Optional[Principal] = None

    def candid_value(self) -> Dict[str, Any]:
        return {"RemoveHotKey": {"hot_key_to_remove": self.hot_key_to_remove}}


@dataclass(frozen=True)
class StartDissolving:
    def candid_value(self) -> Dict[str, Any]:
        return {"StartDissolving": {}}


@dataclass(frozen=True)
class StopDissolving:
    def candid_value(self) -> Dict[str, Any]:
        return {"StopDissolving": {}}


@dataclass(frozen=True)
class AddHotKey:
    new_hot_key: Optional[Principal] = None

    def candid_value(self) -> Dict[str, Any]:
        return {"AddHotKey": {"new_hot_key": self.new_hot_key}}


@dataclass(frozen=True)
class IncreaseDissolveDelay:
    additional_dissolve_delay_seconds: int

    def __post_init__(self) -> None:
        if not 0 <= self.additional_dissolve_delay_seconds <= U32_MAX:
            raise ValueError(
                f"dissolve delay {self.additional_dissolve_delay_seconds} does not fit in 32 bits"
            )

    def candid_value(self) -> Dict[str, Any]:
        return {
            "IncreaseDissolveDelay": {
                "additional_dissolve_delay_seconds": self.additional_dissolve_delay_seconds
            }
        }


Operation = Union[RemoveHotKey, StartDissolving, StopDissolving, AddHotKey, IncreaseDissolveDelay]


@dataclass(frozen=True)
class Configure:
    operation: Optional[Operation] = None

    def candid_value(self) -> Dict[str, Any]:
        operation = self.operation.candid_value() if self.operation is not None else None
        return {"Configure": {"operation": operation}}


@dataclass(frozen=True)
class Disburse:
    """Disburse a dissolved neuron; ``None`` fields let governance pick defaults."""

    to_account: Optional[AccountIdentifier] = None
    amount: Optional[Tokens] = None

    def candid_value(self) -> Dict[str, Any]:
        to_account = {"hash": self.to_account.hash} if self.to_account is not None else None
        amount = self.amount.candid_value() if self.amount is not None else None
        return {"Disburse": {"to_account": to_account, "amount": amount}}


Command = Union[Configure, Disburse]


@dataclass(frozen=True)
class ManageNeuron:
    id: Optional[NeuronId]
    command: Optional[Command]

    def candid_value(self) -> Dict[str, Any]:
        return {
            "id": self.id.candid_value() if self.id is not None else None,
            "command": self.command.candid_value() if self.command is not None else None,
        }
