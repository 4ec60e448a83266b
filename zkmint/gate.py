"""
Proof-gated token issuance
===========================

``MintGate.run(secret)`` is the prove-and-gate flow:

  1. load the proving key and the verifying key
  2. prove knowledge of the secret → (proof, commitment)
  3. verify the proof against the prepared verifying key
  4. persist the proof
  5. check the ledger balance
  6. issue the token

Every step reports through a ``GateResult``. ``issue_token`` is reached only
after step 3 returned VALID in the same run; a failure or a negative verdict
anywhere stops the flow before the ledger is asked to issue anything.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from zkmint.errors import KeyLoadError, LedgerError, SynthesisError
from zkmint.field import to_fr
from zkmint.groth16.proving import prove
from zkmint.groth16.verifying import VerificationStatus, check_proof, prepare
from zkmint.serializers import serialize_commitment, serialize_proof
from zkmint.storage import load_proving_key, load_verifying_key, write_proof

logger = logging.getLogger(__name__)


class GateStatus(Enum):
    ISSUED = "issued"
    REJECTED = "rejected"
    LOW_BALANCE = "low_balance"
    FAILED = "failed"


@dataclass(frozen=True)
class GateResult:
    status: GateStatus
    commitment: Optional[object] = None
    proof_bytes: Optional[bytes] = None
    token_id: Optional[str] = None
    balance: Optional[float] = None
    error: Optional[Exception] = None

    @property
    def issued(self):
        return self.status is GateStatus.ISSUED

    def to_dict(self):
        return {
            "status": self.status.value,
            "commitment": serialize_commitment(self.commitment).hex() if self.commitment is not None else None,
            "proof": self.proof_bytes.hex() if self.proof_bytes is not None else None,
            "token_id": self.token_id,
            "balance": self.balance,
            "error": str(self.error) if self.error is not None else None,
        }


class MintGate:
    """Runs prove-and-gate against one ledger, optionally recording each run in TinyDB."""

    def __init__(self, config, ledger, db=None):
        self.config = config
        self.ledger = ledger
        self.runs = db.table("gate_runs") if db is not None else None

    def run(self, secret):
        """Prove, verify and, only on a valid proof, issue a token.

        Raises:
            ValueError: ``secret`` is not a canonical field element
        """
        secret = to_fr(secret)
        result = self._run(secret)
        if self.runs is not None:
            self.runs.insert(dict(result.to_dict(), finished_at=time.time()))
        return result

    def _run(self, secret):
        keys = self.config.keys
        try:
            pk = load_proving_key(keys.proving_key)
            vk = load_verifying_key(keys.verifying_key)
        except KeyLoadError as exc:
            logger.error("key load failed: %s", exc)
            return GateResult(GateStatus.FAILED, error=exc)

        try:
            proof, commitment = prove(pk, secret)
        except SynthesisError as exc:
            logger.error("proof generation failed: %s", exc)
            return GateResult(GateStatus.FAILED, error=exc)
        proof_bytes = serialize_proof(proof)

        verdict = check_proof(prepare(vk), proof, commitment)
        if verdict.status is VerificationStatus.ERROR:
            return GateResult(GateStatus.FAILED, commitment, proof_bytes, error=verdict.error)
        if verdict.status is VerificationStatus.INVALID:
            logger.warning("invalid proof for commitment %s, nothing issued", int(commitment))
            return GateResult(GateStatus.REJECTED, commitment, proof_bytes)

        try:
            write_proof(proof, self.config.proof_path)
        except OSError as exc:
            logger.error("could not persist proof: %s", exc)
            return GateResult(GateStatus.FAILED, commitment, proof_bytes, error=exc)

        try:
            balance = self.ledger.check_balance()
            if balance < self.config.min_balance:
                logger.warning("balance %s below minimum %s, nothing issued",
                               balance, self.config.min_balance)
                return GateResult(GateStatus.LOW_BALANCE, commitment, proof_bytes, balance=balance)
            token_id = self.ledger.issue_token(self.config.metadata_uri)
        except LedgerError as exc:
            logger.error("ledger failure: %s", exc)
            return GateResult(GateStatus.FAILED, commitment, proof_bytes, error=exc)

        return GateResult(GateStatus.ISSUED, commitment, proof_bytes, token_id=token_id, balance=balance)

    def history(self):
        if self.runs is None:
            return []
        return sorted(self.runs.all(), key=lambda row: row["finished_at"])
