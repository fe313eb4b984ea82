"""Sign a batch of neuron configuration changes.

Every requested change becomes its own ``manage_neuron`` call, signed together
with the ``read_state`` request needed to poll its outcome.  The result is a
JSON array that can be carried to an online machine and submitted there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence

from . import candid
from .config import SignerConfig
from .constants import GOVERNANCE_CANISTER_ID
from .nns_types import (
    MANAGE_NEURON,
    AddHotKey,
    Command,
    Configure,
    Disburse,
    IncreaseDissolveDelay,
    ManageNeuron,
    NeuronId,
    RemoveHotKey,
    StartDissolving,
    StopDissolving,
)
from .principal import Principal
from .signing import SignedMessageWithRequestId, sign, sign_request_status

logger = logging.getLogger(__name__)

METHOD_NAME = "manage_neuron"

Signer = Callable[[Optional[str], Principal, str, bytes], SignedMessageWithRequestId]
StatusSigner = Callable[[Optional[str], bytes, Principal], str]


class InstructionError(ValueError):
    """Raised when the requested batch would contain no messages."""


class MissingRequestIdError(AssertionError):
    """Raised when a signer returns a call without its request id."""


@dataclass
class ManageOpts:
    """Neuron changes requested in one invocation; each one is independent."""

    neuron_id: int
    add_hot_key: Optional[Principal] = None
    remove_hot_key: Optional[Principal] = None
    additional_dissolve_delay_seconds: Optional[int] = None
    start_dissolving: bool = False
    stop_dissolving: bool = False
    disburse: bool = False


def _add_hot_key(opts: ManageOpts) -> Optional[Command]:
    if opts.add_hot_key is None:
        return None
    return Configure(AddHotKey(new_hot_key=opts.add_hot_key))


def _remove_hot_key(opts: ManageOpts) -> Optional[Command]:
    if opts.remove_hot_key is None:
        return None
    return Configure(RemoveHotKey(hot_key_to_remove=opts.remove_hot_key))


def _stop_dissolving(opts: ManageOpts) -> Optional[Command]:
    return Configure(StopDissolving()) if opts.stop_dissolving else None


def _start_dissolving(opts: ManageOpts) -> Optional[Command]:
    return Configure(StartDissolving()) if opts.start_dissolving else None


def _increase_dissolve_delay(opts: ManageOpts) -> Optional[Command]:
    if opts.additional_dissolve_delay_seconds is None:
        return None
    return Configure(IncreaseDissolveDelay(opts.additional_dissolve_delay_seconds))


def _disburse(opts: ManageOpts) -> Optional[Command]:
    return Disburse(to_account=None, amount=None) if opts.disburse else None


# Messages appear in the output in exactly this order.
COMMAND_BUILDERS: Sequence[Callable[[ManageOpts], Optional[Command]]] = (
    _add_hot_key,
    _remove_hot_key,
    _stop_dissolving,
    _start_dissolving,
    _increase_dissolve_delay,
    _disburse,
)


def build_manage_requests(opts: ManageOpts) -> List[ManageNeuron]:
    """Return one request per requested change, in output order."""

    neuron_id = NeuronId(opts.neuron_id)
    requests = []
    for builder in COMMAND_BUILDERS:
        command = builder(opts)
        if command is not None:
            requests.append(ManageNeuron(id=neuron_id, command=command))
    return requests


def require_requests(opts: ManageOpts) -> List[ManageNeuron]:
    """Like :func:`build_manage_requests`, but an empty batch is an :class:`InstructionError`."""

    requests = build_manage_requests(opts)
    if not requests:
        raise InstructionError("No instructions provided")
    return requests


def encode_manage_neuron(request: ManageNeuron) -> bytes:
    return candid.encode([MANAGE_NEURON], [request.candid_value()])


def generate(
    pem: Optional[str],
    args: bytes,
    *,
    signer: Signer = sign,
    status_signer: StatusSigner = sign_request_status,
) -> str:
    """Sign one ``manage_neuron`` call and its status poll as a JSON object."""

    canister_id = Principal.from_text(GOVERNANCE_CANISTER_ID)
    signed = signer(pem, canister_id, METHOD_NAME, args)
    if signed.request_id is None:
        raise MissingRequestIdError(f"No request id for {METHOD_NAME} call found")
    status = status_signer(pem, signed.request_id, canister_id)
    return '{"ingress": ' + signed.buffer + ', "request_status": ' + status + "}"


def exec_neuron_manage(
    pem: Optional[str],
    opts: ManageOpts,
    *,
    config: Optional[SignerConfig] = None,
    signer: Optional[Signer] = None,
    status_signer: Optional[StatusSigner] = None,
) -> str:
    """Build, encode and sign every requested change for ``opts.neuron_id``.

    Raises :class:`InstructionError` before anything is signed when no change
    was requested.  A signing failure aborts the whole batch.
    """

    requests = require_requests(opts)
    signer = signer or partial(sign, config=config)
    status_signer = status_signer or partial(sign_request_status, config=config)
    messages = []
    for request in requests:
        args = encode_manage_neuron(request)
        messages.append(generate(pem, args, signer=signer, status_signer=status_signer))
        logger.debug("Signed %s for neuron %d", type(request.command).__name__, opts.neuron_id)

    logger.info("Signed %d %s message(s) for neuron %d", len(messages), METHOD_NAME, opts.neuron_id)
    return "[" + ",".join(messages) + "]"
