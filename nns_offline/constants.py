"""Well-known canister identifiers and signing defaults."""

from __future__ import annotations

LEDGER_CANISTER_ID = "ryjl3-tyaaa-aaaaa-aaaba-cai"
GOVERNANCE_CANISTER_ID = "rrkah-fqaaa-aaaaa-aaaaq-cai"
IC_URL = "https://ic0.app"

DEFAULT_INGRESS_EXPIRY_SECONDS = 5 * 60
