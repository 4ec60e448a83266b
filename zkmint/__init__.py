"""Zero-knowledge commitment proofs gating token issuance."""

__version__ = "0.1.0"
