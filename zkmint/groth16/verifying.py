"""
Groth16 verifier.

  e(A, B) == e(α, β) · e(Σ a_i·γ_abc_i, γ) · e(C, δ)

where a = [1, public inputs...]. ``prepare`` computes e(α, β) once per key.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from zkmint.errors import SerializationError, VerificationInternalError, ZkMintError
from zkmint.field import FR, ec_add, ec_mul, ec_pairing
from zkmint.serializers import deserialize_proof

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedVerifyingKey:
    vk: object
    alpha_g1_beta_g2: object
    gamma_g2: tuple
    delta_g2: tuple


def prepare(vk):
    return PreparedVerifyingKey(
        vk=vk,
        alpha_g1_beta_g2=ec_pairing(vk.beta_g2, vk.alpha_g1),
        gamma_g2=vk.gamma_g2,
        delta_g2=vk.delta_g2,
    )


def prepare_inputs(pvk, public_inputs):
    """Σ a_i·γ_abc_i with a_0 = 1."""
    gamma_abc = pvk.vk.gamma_abc_g1
    if len(public_inputs) + 1 != len(gamma_abc):
        raise VerificationInternalError(
            "expected {} public inputs, got {}".format(len(gamma_abc) - 1, len(public_inputs)))
    acc = gamma_abc[0]
    for base, value in zip(gamma_abc[1:], public_inputs):
        acc = ec_add(acc, ec_mul(base, value))
    return acc


def lhs(prf_A, prf_B):
    return ec_pairing(prf_B, prf_A)


def rhs(pvk, prepared_inputs, prf_C):
    return (pvk.alpha_g1_beta_g2
            * ec_pairing(pvk.gamma_g2, prepared_inputs)
            * ec_pairing(pvk.delta_g2, prf_C))


def verify_with_public_inputs(pvk, proof, public_inputs):
    acc = prepare_inputs(pvk, public_inputs)
    try:
        return lhs(proof.a, proof.b) == rhs(pvk, acc, proof.c)
    except (AssertionError, ZeroDivisionError, TypeError) as exc:
        raise VerificationInternalError("pairing check failed: {!r}".format(exc)) from exc


def verify(pvk, proof, commitment):
    """True iff ``proof`` attests knowledge of a preimage of ``commitment``.

    A well-formed proof that does not check out returns False.

    Raises:
        VerificationInternalError: the pairing check could not be evaluated
    """
    commitment = commitment if isinstance(commitment, FR) else FR(commitment)
    result = verify_with_public_inputs(pvk, proof, [commitment])
    logger.debug("verification verdict for commitment %s: %s", int(commitment), result)
    return result


def verify_proof_bytes(pvk, data, commitment):
    """Decode ``data`` and verify it; undecodable bytes are an error, not a False verdict."""
    try:
        proof = deserialize_proof(data)
    except SerializationError as exc:
        raise VerificationInternalError("proof bytes do not decode: {}".format(exc)) from exc
    return verify(pvk, proof, commitment)


class VerificationStatus(Enum):
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification attempt; INVALID and ERROR never pass the gate."""
    status: VerificationStatus
    error: Optional[ZkMintError] = None

    @property
    def ok(self):
        return self.status is VerificationStatus.VALID


def check_proof(pvk, proof, commitment):
    """``verify`` / ``verify_proof_bytes`` folded into a ``VerificationResult``.

    ``proof`` is either a ``Proof`` or its serialized bytes.
    """
    try:
        if isinstance(proof, (bytes, bytearray, memoryview)):
            valid = verify_proof_bytes(pvk, bytes(proof), commitment)
        else:
            valid = verify(pvk, proof, commitment)
    except VerificationInternalError as exc:
        logger.warning("verification error: %s", exc)
        return VerificationResult(VerificationStatus.ERROR, exc)
    return VerificationResult(VerificationStatus.VALID if valid else VerificationStatus.INVALID)
