"""
Groth16 prover.

With wire assignment w (w_0 = 1), fresh blinding r, s and H = (A·B - C)/Z:

  A = α + Σ w_i·A_i(x) + r·δ                       (G1)
  B = β + Σ w_i·B_i(x) + s·δ                       (G2, and G1 for C)
  C = Σ_{private} w_j·L_j + Σ h_i·x^i·Z(x)/δ + s·A + r·B - r·s·δ   (G1)
"""

import logging
from dataclasses import dataclass

from zkmint.circuit import CommitmentCircuit, hash_native
from zkmint.errors import SynthesisError
from zkmint.field import ec_add, ec_mul, ec_neg, random_fr, to_fr
from zkmint.groth16.poly_utils import hxr
from zkmint.groth16.qap import r1cs_to_qap
from zkmint.groth16.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proof:
    a: tuple
    b: tuple
    c: tuple


def _msm(bases, scalars):
    """Σ scalars_i · bases_i"""
    acc = None
    for base, scalar in zip(bases, scalars):
        if scalar == 0:
            continue
        acc = ec_add(acc, ec_mul(base, scalar))
    return acc


def proof_a(pk, Rx, r):
    prf_A = ec_add(pk.vk.alpha_g1, _msm(pk.a_query, Rx))
    return ec_add(prf_A, ec_mul(pk.delta_g1, r))


def proof_b(pk, Rx, s):
    prf_B = ec_add(pk.vk.beta_g2, _msm(pk.b_g2_query, Rx))
    return ec_add(prf_B, ec_mul(pk.vk.delta_g2, s))


def proof_c(pk, Rx, Hx, r, s, prf_A, num_public):
    # B again, in G1
    temp_proof_B = ec_add(pk.beta_g1, _msm(pk.b_g1_query, Rx))
    temp_proof_B = ec_add(temp_proof_B, ec_mul(pk.delta_g1, s))

    prf_C = ec_add(ec_mul(prf_A, s), ec_mul(temp_proof_B, r))
    prf_C = ec_add(prf_C, ec_neg(ec_mul(pk.delta_g1, r * s)))
    prf_C = ec_add(prf_C, _msm(pk.l_query, Rx[num_public:]))
    prf_C = ec_add(prf_C, _msm(pk.h_query, Hx))
    return prf_C


def create_proof(pk, circuit):
    """Prove an assigned circuit with fresh blinding factors.

    Raises:
        SynthesisError: missing assignment, unsatisfied constraints, or a key
            generated for a different circuit shape
    """
    cs = ConstraintSystem()
    circuit.generate_constraints(cs)
    if not cs.is_satisfied():
        raise SynthesisError("constraint {} is not satisfied".format(cs.which_is_unsatisfied()))

    if (cs.num_wires != pk.num_wires or cs.num_constraints != pk.num_gates
            or cs.num_instance_variables != len(pk.vk.gamma_abc_g1)):
        raise SynthesisError(
            "proving key shape ({} wires, {} gates) does not match circuit ({} wires, {} gates)".format(
                pk.num_wires, pk.num_gates, cs.num_wires, cs.num_constraints))

    A, B, C = cs.to_matrices()
    Ax, Bx, Cx, Zx = r1cs_to_qap(A, B, C)
    Rx = cs.full_assignment()
    Hx, remainder = hxr(Ax, Bx, Cx, Zx, Rx)
    if any(v != 0 for v in remainder):
        raise SynthesisError("QAP division left a non-zero remainder")

    r = random_fr()
    s = random_fr()
    prf_A = proof_a(pk, Rx, r)
    prf_B = proof_b(pk, Rx, s)
    prf_C = proof_c(pk, Rx, Hx, r, s, prf_A, cs.num_instance_variables)
    return Proof(a=prf_A, b=prf_B, c=prf_C)


def prove(pk, secret):
    """Prove knowledge of ``secret`` for its commitment.

    Returns:
        (Proof, commitment) so the proof is never paired with a recomputed value
    """
    secret = to_fr(secret)
    commitment = hash_native(secret)
    proof = create_proof(pk, CommitmentCircuit(secret=secret, commitment=commitment))
    logger.info("proof generated for commitment %s", int(commitment))
    return proof, commitment
