"""Shared configuration loader for offline signing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

from .constants import DEFAULT_INGRESS_EXPIRY_SECONDS, IC_URL


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".nns_offline.yaml"


@dataclass
class SignerConfig:
    """Settings that shape the messages produced by the signer."""

    pem_file: Path | None = None
    network: str = IC_URL
    ingress_expiry_seconds: int = DEFAULT_INGRESS_EXPIRY_SECONDS

    def read_pem(self) -> str | None:
        """Return the PEM text referenced by ``pem_file``, if any."""

        if self.pem_file is None:
            return None
        try:
            return self.pem_file.read_text()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read PEM file {self.pem_file}: {exc}") from exc


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'signer' section")
    return loaded


def _coerce_expiry(raw: Any, *, source: str) -> int | None:
    if raw is None:
        return None
    try:
        seconds = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid ingress expiry in {source}: {raw}") from exc
    if seconds <= 0:
        raise ConfigurationError(f"Ingress expiry in {source} must be positive: {raw}")
    return seconds


def _coerce_network(raw: Any, *, source: str) -> str | None:
    if raw is None:
        return None
    parsed = urlparse(str(raw))
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ConfigurationError(f"Invalid network URL in {source}: {raw}")
    return str(raw).rstrip("/")


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def load_signer_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> SignerConfig:
    """Load signer configuration from overrides, environment variables and YAML."""

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None
    path = Path(config_path).expanduser() if config_path is not None else DEFAULT_CONFIG_PATH

    file_config = _load_config_file(path, required=explicit_path)
    signer_section = file_config.get("signer") or {}
    if not isinstance(signer_section, dict):
        raise ConfigurationError(f"Expected 'signer' to be a mapping in {path}")

    override_map = dict(overrides or {})

    resolved_pem = _first_value(
        override_map.get("pem_file"),
        env_map.get("NNS_OFFLINE_PEM_FILE"),
        signer_section.get("pem_file"),
    )
    resolved_network = _first_value(
        _coerce_network(override_map.get("network"), source="overrides"),
        _coerce_network(env_map.get("NNS_OFFLINE_NETWORK"), source="environment"),
        _coerce_network(signer_section.get("network"), source=f"{path} signer.network"),
        IC_URL,
    )
    resolved_expiry = _first_value(
        _coerce_expiry(override_map.get("ingress_expiry_seconds"), source="overrides"),
        _coerce_expiry(env_map.get("NNS_OFFLINE_INGRESS_EXPIRY"), source="environment"),
        _coerce_expiry(
            signer_section.get("ingress_expiry_seconds"),
            source=f"{path} signer.ingress_expiry_seconds",
        ),
        DEFAULT_INGRESS_EXPIRY_SECONDS,
    )

    return SignerConfig(
        pem_file=Path(resolved_pem).expanduser() if resolved_pem else None,
        network=resolved_network,
        ingress_expiry_seconds=resolved_expiry,
    )
