from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pytest

from nns_offline.candid import decode
from nns_offline.constants import GOVERNANCE_CANISTER_ID
from nns_offline.neuron_manage import (
    InstructionError,
    ManageOpts,
    MissingRequestIdError,
    build_manage_requests,
    encode_manage_neuron,
    exec_neuron_manage,
    generate,
    require_requests,
)
from nns_offline.nns_types import (
    AddHotKey,
    Configure,
    Disburse,
    IncreaseDissolveDelay,
    RemoveHotKey,
    StartDissolving,
    StopDissolving,
)
from nns_offline.principal import Principal
from nns_offline.schema import resolve_binding
from nns_offline.signing import SignedMessageWithRequestId

HOT_KEY = Principal.from_text("2vxsx-fae")
OTHER_KEY = Principal.management()


@dataclass
class RecordingSigner:
    calls: List[Tuple[Optional[str], Principal, str, bytes]] = field(default_factory=list)
    request_id: Optional[bytes] = b"\x01" * 32

    def __call__(self, pem, canister_id, method_name, args):
        self.calls.append((pem, canister_id, method_name, args))
        index = len(self.calls)
        return SignedMessageWithRequestId(
            buffer=json.dumps({"call": index, "arg": args.hex()}),
            request_id=self.request_id,
        )


@dataclass
class RecordingStatusSigner:
    calls: List[Tuple[Optional[str], bytes, Principal]] = field(default_factory=list)

    def __call__(self, pem, req_id, canister_id):
        self.calls.append((pem, req_id, canister_id))
        return json.dumps({"status": len(self.calls)})


class FailingSigner:
    def __call__(self, pem, canister_id, method_name, args):
        raise RuntimeError("hardware wallet unplugged")


def _decode_request(args: bytes) -> dict:
    binding = resolve_binding(GOVERNANCE_CANISTER_ID, "manage_neuron")
    assert binding is not None
    return decode(args, binding.types_for("args"), binding.env).to_python()[0]


def test_hot_key_and_stop_dissolving_produce_two_messages_in_order() -> None:
    signer = RecordingSigner()
    status_signer = RecordingStatusSigner()
    opts = ManageOpts(neuron_id=42, add_hot_key=HOT_KEY, stop_dissolving=True)

    output = exec_neuron_manage(None, opts, signer=signer, status_signer=status_signer)

    entries = json.loads(output)
    assert len(entries) == 2
    assert [entry["request_status"]["status"] for entry in entries] == [1, 2]
    first, second = (_decode_request(call[3]) for call in signer.calls)
    assert first["id"] == {"id": 42}
    assert first["command"] == {
        "Configure": {"operation": {"AddHotKey": {"new_hot_key": HOT_KEY}}}
    }
    assert second["command"] == {"Configure": {"operation": {"StopDissolving": {}}}}


def test_dissolve_delay_produces_a_single_message() -> None:
    signer = RecordingSigner()
    opts = ManageOpts(neuron_id=7, additional_dissolve_delay_seconds=86400)

    output = exec_neuron_manage(None, opts, signer=signer, status_signer=RecordingStatusSigner())

    assert len(json.loads(output)) == 1
    request = _decode_request(signer.calls[0][3])
    assert request["id"] == {"id": 7}
    assert request["command"] == {
        "Configure": {
            "operation": {"IncreaseDissolveDelay": {"additional_dissolve_delay_seconds": 86400}}
        }
    }


def test_every_change_is_emitted_in_fixed_order() -> None:
    opts = ManageOpts(
        neuron_id=1,
        add_hot_key=HOT_KEY,
        remove_hot_key=OTHER_KEY,
        additional_dissolve_delay_seconds=10,
        start_dissolving=True,
        stop_dissolving=True,
        disburse=True,
    )

    commands = [request.command for request in build_manage_requests(opts)]

    assert commands == [
        Configure(AddHotKey(new_hot_key=HOT_KEY)),
        Configure(RemoveHotKey(hot_key_to_remove=OTHER_KEY)),
        Configure(StopDissolving()),
        Configure(StartDissolving()),
        Configure(IncreaseDissolveDelay(10)),
        Disburse(to_account=None, amount=None),
    ]


def test_disburse_leaves_account_and_amount_empty() -> None:
    (request,) = build_manage_requests(ManageOpts(neuron_id=3, disburse=True))

    decoded = _decode_request(encode_manage_neuron(request))

    assert decoded["command"] == {"Disburse": {"to_account": None, "amount": None}}


def test_no_changes_is_rejected_before_signing() -> None:
    signer = RecordingSigner()
    status_signer = RecordingStatusSigner()

    with pytest.raises(InstructionError, match="No instructions provided"):
        exec_neuron_manage(None, ManageOpts(neuron_id=42), signer=signer, status_signer=status_signer)

    assert signer.calls == []
    assert status_signer.calls == []


def test_status_poll_uses_the_call_request_id() -> None:
    signer = RecordingSigner(request_id=b"\xab" * 32)
    status_signer = RecordingStatusSigner()

    generate("pem", b"DIDL\x00\x00", signer=signer, status_signer=status_signer)

    pem, canister_id, method_name, args = signer.calls[0]
    assert (pem, method_name, args) == ("pem", "manage_neuron", b"DIDL\x00\x00")
    assert canister_id.to_text() == GOVERNANCE_CANISTER_ID
    assert status_signer.calls == [("pem", b"\xab" * 32, canister_id)]


def test_missing_request_id_is_fatal() -> None:
    signer = RecordingSigner(request_id=None)
    status_signer = RecordingStatusSigner()

    with pytest.raises(MissingRequestIdError, match="No request id for manage_neuron call found"):
        exec_neuron_manage(
            None,
            ManageOpts(neuron_id=1, start_dissolving=True),
            signer=signer,
            status_signer=status_signer,
        )

    assert status_signer.calls == []


def test_signing_failure_aborts_the_batch() -> None:
    with pytest.raises(RuntimeError, match="unplugged"):
        exec_neuron_manage(
            None,
            ManageOpts(neuron_id=1, start_dissolving=True, disburse=True),
            signer=FailingSigner(),
            status_signer=RecordingStatusSigner(),
        )


def test_anonymous_signing_end_to_end() -> None:
    output = exec_neuron_manage(None, ManageOpts(neuron_id=42, start_dissolving=True))

    (entry,) = json.loads(output)
    ingress = entry["ingress"]
    status = entry["request_status"]
    assert ingress["method_name"] == "manage_neuron"
    assert ingress["canister_id"] == GOVERNANCE_CANISTER_ID
    assert ingress["sender"] == "2vxsx-fae"
    assert status["call_type"] == "request_status"
    assert status["request_id"] == ingress["request_id"]
    request = _decode_request(bytes.fromhex(ingress["arg"]))
    assert request["command"] == {"Configure": {"operation": {"StartDissolving": {}}}}


def test_require_requests_rejects_an_empty_batch() -> None:
    with pytest.raises(InstructionError, match="No instructions provided"):
        require_requests(ManageOpts(neuron_id=5))

    (request,) = require_requests(ManageOpts(neuron_id=5, stop_dissolving=True))
    assert request.command == Configure(StopDissolving())
