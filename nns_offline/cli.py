"""Command-line interface for offline neuron management.

``neuron-manage`` signs a batch of neuron changes without network access and
prints the resulting JSON bundle; ``decode`` renders a binary call argument or
result using the bundled interface descriptions.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .candid import CandidError
from .config import ConfigurationError, load_signer_config
from .constants import GOVERNANCE_CANISTER_ID
from .neuron_manage import InstructionError, ManageOpts, exec_neuron_manage, require_requests
from .nns_types import U32_MAX, U64_MAX
from .principal import Principal, PrincipalError
from .signing import IdentityError
from .value_codec import OutputTypeError, get_idl_string

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def _principal_arg(raw: str) -> Principal:
    try:
        return Principal.from_text(raw)
    except PrincipalError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _u32_arg(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw}") from exc
    if not 0 <= value <= U32_MAX:
        raise argparse.ArgumentTypeError(f"{raw} does not fit in an unsigned 32-bit integer")
    return value


def _u64_arg(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid neuron id: {raw}") from exc
    if not 0 <= value <= U64_MAX:
        raise argparse.ArgumentTypeError(f"{raw} does not fit in an unsigned 64-bit integer")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline NNS neuron signing tool")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--pem-file",
        default=None,
        help="PEM file with the signing key (anonymous identity when omitted)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    manage_parser = subparsers.add_parser(
        "neuron-manage", help="sign a neuron configuration change"
    )
    manage_parser.add_argument("neuron_id", type=_u64_arg, help="Neuron to configure")
    manage_parser.add_argument(
        "--add-hot-key", type=_principal_arg, default=None, help="Principal to be used as a hot key"
    )
    manage_parser.add_argument(
        "--remove-hot-key", type=_principal_arg, default=None, help="Principal hot key to be removed"
    )
    manage_parser.add_argument(
        "-a",
        "--additional-dissolve-delay-seconds",
        type=_u32_arg,
        default=None,
        help="Amount of dissolve seconds to add",
    )
    manage_parser.add_argument("--start-dissolving", action="store_true", help="Start dissolving")
    manage_parser.add_argument("--stop-dissolving", action="store_true", help="Stop dissolving")
    manage_parser.add_argument(
        "--disburse",
        action="store_true",
        help="Disburse the entire staked amount to the controller's account",
    )

    decode_parser = subparsers.add_parser(
        "decode", help="render a hex-encoded Candid argument or result"
    )
    decode_parser.add_argument("blob", help="Hex-encoded bytes, or '-' to read them from stdin")
    decode_parser.add_argument(
        "--canister-id",
        default=GOVERNANCE_CANISTER_ID,
        help="Canister whose bundled interface types the value (default: governance)",
    )
    decode_parser.add_argument("--method", required=True, help="Method the value belongs to")
    decode_parser.add_argument(
        "--part",
        choices=("args", "rets"),
        default="rets",
        help="Whether the bytes are the method's arguments or results (default: %(default)s)",
    )
    decode_parser.add_argument(
        "--output",
        default="pp",
        help="raw (hex), idl (debug) or pp (candid text) (default: %(default)s)",
    )
    return parser


def cmd_neuron_manage(args: argparse.Namespace) -> None:
    opts = ManageOpts(
        neuron_id=args.neuron_id,
        add_hot_key=args.add_hot_key,
        remove_hot_key=args.remove_hot_key,
        additional_dissolve_delay_seconds=args.additional_dissolve_delay_seconds,
        start_dissolving=args.start_dissolving,
        stop_dissolving=args.stop_dissolving,
        disburse=args.disburse,
    )
    require_requests(opts)
    config = load_signer_config(config_path=args.config, overrides={"pem_file": args.pem_file})
    print(exec_neuron_manage(config.read_pem(), opts, config=config))


def _read_blob(raw: str) -> bytes:
    text = sys.stdin.read() if raw == "-" else raw
    text = "".join(text.split())
    if text.startswith(("0x", "0X")):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise CLIError(f"blob is not valid hex: {exc}") from exc


def cmd_decode(args: argparse.Namespace) -> None:
    blob = _read_blob(args.blob)
    print(get_idl_string(blob, args.canister_id, args.method, args.part, args.output))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "neuron-manage":
            cmd_neuron_manage(args)
        elif args.command == "decode":
            cmd_decode(args)
        else:  # pragma: no cover - argparse enforces choices
            raise CLIError(f"Unknown command: {args.command}")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
    except (
        CLIError,
        ConfigurationError,
        IdentityError,
        InstructionError,
        OutputTypeError,
        CandidError,
        PrincipalError,
    ) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
