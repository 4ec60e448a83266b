"""
Commitment circuit
===================

Proves knowledge of a secret s with hash(s) == commitment, where the
commitment is the only public input.

The hash is computed twice, natively (``hash_native``) and as constraints
(``hash_gadget``). The two must agree on every field element, otherwise
honest proofs fail to verify.

**hash(x) = x³** is a placeholder with no preimage or collision resistance.
Swapping in a ZK-friendly permutation changes the circuit shape, so every
existing key pair has to be regenerated with a fresh setup.

Constraint layout (3 gates, wires [1, c, s, s², s³]):
  | gate | A        | B | C   |
  |------|----------|---|-----|
  | 0    | s        | s | s²  |
  | 1    | s²       | s | s³  |
  | 2    | s³ - c   | 1 | 0   |
"""

from zkmint.errors import AssignmentMissing
from zkmint.field import FR
from zkmint.groth16.r1cs import FieldVar


def hash_native(secret):
    """Native commitment hash; must match ``hash_gadget``."""
    secret = secret if isinstance(secret, FR) else FR(secret)
    squared = secret * secret
    return squared * secret


def hash_gadget(secret_var):
    """In-circuit commitment hash of a ``FieldVar``; must match ``hash_native``."""
    squared = secret_var * secret_var
    return squared * secret_var


class CommitmentCircuit:
    """hash(secret) == commitment, with the secret private and the commitment public.

    Both values None: structure-only (setup). Both set: assigned (proving).
    """

    def __init__(self, secret=None, commitment=None):
        self.secret = secret
        self.commitment = commitment

    def _secret(self):
        if self.secret is None:
            raise AssignmentMissing("secret")
        return self.secret

    def _commitment(self):
        if self.commitment is None:
            raise AssignmentMissing("commitment")
        return self.commitment

    def generate_constraints(self, cs):
        secret_var = FieldVar.new_witness(cs, self._secret)
        commitment_var = FieldVar.new_input(cs, self._commitment)

        computed_hash = hash_gadget(secret_var)
        computed_hash.enforce_equal(commitment_var)
