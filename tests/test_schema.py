import pytest

from nns_offline.candid.types import FuncType
from nns_offline.constants import GOVERNANCE_CANISTER_ID, LEDGER_CANISTER_ID
from nns_offline.schema import TypeBinding, get_candid_type, get_local_candid, resolve_binding


@pytest.mark.parametrize(
    "canister_id, method_name",
    [
        (GOVERNANCE_CANISTER_ID, "manage_neuron"),
        (GOVERNANCE_CANISTER_ID, "get_neuron_info"),
        (GOVERNANCE_CANISTER_ID, "list_neurons"),
        (LEDGER_CANISTER_ID, "send_dfx"),
        (LEDGER_CANISTER_ID, "account_balance_dfx"),
    ],
)
def test_bundled_interfaces_bind_known_methods(canister_id: str, method_name: str) -> None:
    binding = resolve_binding(canister_id, method_name)

    assert isinstance(binding, TypeBinding)
    assert isinstance(binding.method, FuncType)
    assert binding.types_for("args") == binding.method.args
    assert binding.types_for("rets") == binding.method.rets


def test_unknown_canister_has_no_interface() -> None:
    assert get_local_candid("aaaaa-aa") is None
    assert resolve_binding("aaaaa-aa", "manage_neuron") is None


def test_unknown_method_yields_no_binding() -> None:
    assert resolve_binding(GOVERNANCE_CANISTER_ID, "no_such_method") is None


@pytest.mark.parametrize(
    "idl",
    [
        "service : { f : ( -> () }",
        "type A = Missing; service : { f : (A) -> () }",
        "type A = nat;",
    ],
)
def test_unusable_interface_text_yields_no_binding(idl: str) -> None:
    assert get_candid_type(idl, "f") is None


def test_binding_is_resolved_per_call() -> None:
    first = resolve_binding(GOVERNANCE_CANISTER_ID, "manage_neuron")
    second = resolve_binding(GOVERNANCE_CANISTER_ID, "manage_neuron")

    assert first is not None and second is not None
    assert first.env is not second.env
    assert first.method == second.method
