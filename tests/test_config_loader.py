from pathlib import Path

import pytest

from nns_offline.config import ConfigurationError, SignerConfig, load_signer_config
from nns_offline.constants import DEFAULT_INGRESS_EXPIRY_SECONDS, IC_URL


def test_load_signer_config_prefers_environment_over_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
        signer:
          pem_file: /keys/file.pem
          network: https://filehost.example
          ingress_expiry_seconds: 120
        """
    )

    env_map = {
        "NNS_OFFLINE_PEM_FILE": "/keys/env.pem",
        "NNS_OFFLINE_NETWORK": "http://localhost:8000/",
        "NNS_OFFLINE_INGRESS_EXPIRY": "240",
    }

    config = load_signer_config(config_path=config_path, env=env_map)

    assert isinstance(config, SignerConfig)
    assert config.pem_file == Path("/keys/env.pem")
    assert config.network == "http://localhost:8000"
    assert config.ingress_expiry_seconds == 240


def test_load_signer_config_reads_yaml_when_env_missing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / ".nns_offline.yaml"
    monkeypatch.setattr("nns_offline.config.DEFAULT_CONFIG_PATH", config_path)

    config_path.write_text(
        """
        signer:
          pem_file: /keys/yaml.pem
          ingress_expiry_seconds: 90
        """
    )

    config = load_signer_config(env={})

    assert config.pem_file == Path("/keys/yaml.pem")
    assert config.network == IC_URL
    assert config.ingress_expiry_seconds == 90


def test_load_signer_config_overrides_win(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("signer:\n  pem_file: /keys/file.pem\n")

    config = load_signer_config(
        config_path=config_path,
        env={"NNS_OFFLINE_PEM_FILE": "/keys/env.pem"},
        overrides={"pem_file": "/keys/cli.pem", "ingress_expiry_seconds": 30},
    )

    assert config.pem_file == Path("/keys/cli.pem")
    assert config.ingress_expiry_seconds == 30


def test_load_signer_config_defaults_without_any_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("nns_offline.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    config = load_signer_config(env={})

    assert config == SignerConfig()
    assert config.ingress_expiry_seconds == DEFAULT_INGRESS_EXPIRY_SECONDS
    assert config.read_pem() is None


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Config file not found"):
        load_signer_config(config_path=tmp_path / "missing.yaml", env={})


@pytest.mark.parametrize(
    "env_map",
    [
        {"NNS_OFFLINE_INGRESS_EXPIRY": "soon"},
        {"NNS_OFFLINE_INGRESS_EXPIRY": "0"},
        {"NNS_OFFLINE_NETWORK": "ftp://example.org"},
        {"NNS_OFFLINE_NETWORK": "not a url"},
    ],
)
def test_invalid_values_are_rejected(
    env_map: dict, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("nns_offline.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    with pytest.raises(ConfigurationError):
        load_signer_config(env=env_map)


def test_signer_section_must_be_a_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("signer: [1, 2]\n")

    with pytest.raises(ConfigurationError):
        load_signer_config(config_path=config_path, env={})


def test_unreadable_pem_file_is_reported(tmp_path: Path) -> None:
    config = SignerConfig(pem_file=tmp_path / "missing.pem")

    with pytest.raises(ConfigurationError, match="Cannot read PEM file"):
        config.read_pem()
