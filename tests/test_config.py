from pathlib import Path

import pytest

from zkmint.config import DEFAULT_METADATA_URI, DEFAULT_MIN_BALANCE, GateConfig, KeyPaths
from zkmint.errors import ConfigError

BASE = {
    "PROVING_KEY": "keys/pk.bin",
    "VERIFYING_KEY": "keys/vk.bin",
    "PROOF_PATH": "proof.bin",
}


class TestKeyPaths:
    def test_from_mapping(self):
        paths = KeyPaths.from_mapping(BASE)
        assert paths.proving_key == Path("keys/pk.bin")
        assert paths.verifying_key == Path("keys/vk.bin")

    def test_explicit_arguments_win(self):
        paths = KeyPaths.from_mapping(BASE, proving_key="other.bin")
        assert paths.proving_key == Path("other.bin")
        assert paths.verifying_key == Path("keys/vk.bin")

    @pytest.mark.parametrize("missing", ["PROVING_KEY", "VERIFYING_KEY"])
    def test_no_default_location(self, missing):
        mapping = {k: v for k, v in BASE.items() if k != missing}
        with pytest.raises(ConfigError, match="ZKMINT_" + missing):
            KeyPaths.from_mapping(mapping)


class TestGateConfig:
    def test_defaults(self):
        config = GateConfig.from_mapping(BASE)
        assert config.proof_path == Path("proof.bin")
        assert config.min_balance == DEFAULT_MIN_BALANCE
        assert config.metadata_uri == DEFAULT_METADATA_URI

    def test_overrides(self):
        config = GateConfig.from_mapping(dict(BASE, MIN_BALANCE="2.5", METADATA_URI="ipfs://x"))
        assert config.min_balance == 2.5
        assert config.metadata_uri == "ipfs://x"

    def test_bad_min_balance(self):
        with pytest.raises(ConfigError):
            GateConfig.from_mapping(dict(BASE, MIN_BALANCE="lots"))

    def test_missing_proof_path(self):
        mapping = {k: v for k, v in BASE.items() if k != "PROOF_PATH"}
        with pytest.raises(ConfigError):
            GateConfig.from_mapping(mapping)
