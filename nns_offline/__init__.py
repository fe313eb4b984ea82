"""Offline construction of signed NNS neuron-management messages."""

from .constants import GOVERNANCE_CANISTER_ID, IC_URL, LEDGER_CANISTER_ID
from .neuron_manage import (
    InstructionError,
    ManageOpts,
    MissingRequestIdError,
    build_manage_requests,
    encode_manage_neuron,
    exec_neuron_manage,
    generate,
    require_requests,
)
from .nns_types import (
    AddHotKey,
    Configure,
    Disburse,
    IncreaseDissolveDelay,
    ManageNeuron,
    NeuronId,
    RemoveHotKey,
    StartDissolving,
    StopDissolving,
    Tokens,
)
from .principal import AccountIdentifier, Principal, PrincipalError
from .schema import TypeBinding, get_candid_type, get_local_candid, resolve_binding
from .signing import (
    Identity,
    IdentityError,
    SignedMessageWithRequestId,
    request_id,
    sign,
    sign_request_status,
)
from .value_codec import OutputTypeError, get_idl_string

__all__ = [
    "AccountIdentifier",
    "AddHotKey",
    "Configure",
    "Disburse",
    "GOVERNANCE_CANISTER_ID",
    "IC_URL",
    "Identity",
    "IdentityError",
    "IncreaseDissolveDelay",
    "InstructionError",
    "LEDGER_CANISTER_ID",
    "ManageNeuron",
    "ManageOpts",
    "MissingRequestIdError",
    "NeuronId",
    "OutputTypeError",
    "Principal",
    "PrincipalError",
    "RemoveHotKey",
    "SignedMessageWithRequestId",
    "StartDissolving",
    "StopDissolving",
    "Tokens",
    "TypeBinding",
    "build_manage_requests",
    "encode_manage_neuron",
    "exec_neuron_manage",
    "generate",
    "get_candid_type",
    "get_idl_string",
    "get_local_candid",
    "request_id",
    "resolve_binding",
    "sign",
    "sign_request_status",
]
