"""
Runtime configuration.

Values come from a mapping (Flask's ``app.config``, filled from ``ZKMINT_*``
environment variables). Key and proof locations have no defaults.
"""

from dataclasses import dataclass
from pathlib import Path

from zkmint.errors import ConfigError

DEFAULT_MIN_BALANCE = 0.1
DEFAULT_METADATA_URI = "ipfs://QmPhPb2Cp59ZfbmP2ZuoANghBTxF7KiBFJLZMZAES4evC2"


@dataclass(frozen=True)
class KeyPaths:
    proving_key: Path
    verifying_key: Path

    def __post_init__(self):
        object.__setattr__(self, "proving_key", Path(str(self.proving_key)))
        object.__setattr__(self, "verifying_key", Path(str(self.verifying_key)))

    @classmethod
    def from_mapping(cls, mapping, proving_key=None, verifying_key=None):
        """Explicit arguments win over the mapping; a missing path is an error."""
        return cls(
            proving_key=proving_key or _require(mapping, "PROVING_KEY"),
            verifying_key=verifying_key or _require(mapping, "VERIFYING_KEY"),
        )


@dataclass(frozen=True)
class GateConfig:
    keys: KeyPaths
    proof_path: Path
    min_balance: float = DEFAULT_MIN_BALANCE
    metadata_uri: str = DEFAULT_METADATA_URI

    def __post_init__(self):
        object.__setattr__(self, "proof_path", Path(str(self.proof_path)))

    @classmethod
    def from_mapping(cls, mapping):
        try:
            min_balance = float(mapping.get("MIN_BALANCE", DEFAULT_MIN_BALANCE))
        except (TypeError, ValueError) as exc:
            raise ConfigError("MIN_BALANCE must be a number") from exc
        return cls(
            keys=KeyPaths.from_mapping(mapping),
            proof_path=_require(mapping, "PROOF_PATH"),
            min_balance=min_balance,
            metadata_uri=mapping.get("METADATA_URI") or DEFAULT_METADATA_URI,
        )


def _require(mapping, key):
    value = mapping.get(key)
    if not value:
        raise ConfigError("{} is not configured (set ZKMINT_{})".format(key, key))
    return value


def verifying_key_path(mapping):
    """Only the verifying key location, for callers that never prove."""
    return Path(str(_require(mapping, "VERIFYING_KEY")))
