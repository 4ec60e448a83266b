"""
zkmint errors
=============

Every failure the proof subsystem can raise derives from ``ZkMintError``.
A negative verification verdict is *not* an error: ``verify`` returns
``False`` for it.
"""


class ZkMintError(Exception):
    """Base class for every zkmint failure."""


class KeyLoadError(ZkMintError):
    """Key file missing, truncated, or in the wrong format."""


class SynthesisError(ZkMintError):
    """Constraint synthesis failed."""


class AssignmentMissing(SynthesisError):
    """A value closure was evaluated without an assignment."""

    def __init__(self, what="variable"):
        super().__init__("missing assignment for {}".format(what))
        self.what = what


class SetupError(ZkMintError):
    """Randomness or backend failure during key generation."""


class SerializationError(ZkMintError):
    """Bytes could not be decoded into the requested object."""


class VerificationInternalError(ZkMintError):
    """Verification could not produce a verdict."""


class ConfigError(ZkMintError):
    """A required configuration value is missing or malformed."""


class LedgerError(ZkMintError):
    """The ledger collaborator failed to perform an action."""
