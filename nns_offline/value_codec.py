"""Operator-facing rendering of binary call arguments and results."""

from __future__ import annotations

import logging

from .candid import decode
from .schema import resolve_binding

logger = logging.getLogger(__name__)

OUTPUT_TYPES = ("raw", "idl", "pp")


class OutputTypeError(ValueError):
    """Raised when an unknown rendering mode is requested."""


def get_idl_string(
    blob: bytes, canister_id: str, method_name: str, part: str, output_type: str
) -> str:
    """Render *blob* as hex (``raw``), debug (``idl``) or candid text (``pp``).

    The ``idl`` and ``pp`` modes decode against the bundled interface of
    *canister_id* when one is available and fall back to the self-describing
    wire types otherwise.  *part* selects the method's ``args`` or ``rets``.
    """

    if output_type == "raw":
        return blob.hex()
    if output_type not in OUTPUT_TYPES:
        raise OutputTypeError(f"Invalid output type: {output_type}")

    binding = resolve_binding(canister_id, method_name)
    if binding is None:
        logger.debug("Decoding %s.%s %s without a schema", canister_id, method_name, part)
        result = decode(blob)
    else:
        result = decode(blob, binding.types_for(part), binding.env)
    if output_type == "idl":
        return repr(result)
    return result.to_text(pretty=True)
