"""
Groth16 verification: completeness, soundness against the wrong statement,
cross-setup rejection and malformed input.
"""

import pytest

from zkmint.errors import VerificationInternalError
from zkmint.field import FR, G1, G2, ec_mul
from zkmint.groth16.proving import Proof, prove
from zkmint.groth16.verifying import (
    VerificationStatus, check_proof, prepare, verify, verify_proof_bytes,
    verify_with_public_inputs,
)
from zkmint.serializers import serialize_proof

SECRET = 12345
WRONG_COMMITMENT = 99999


class TestVerify:
    def test_honest_proof(self, pvk, honest_proof):
        proof, commitment = honest_proof
        assert verify(pvk, proof, commitment) is True

    def test_wrong_commitment(self, pvk, honest_proof):
        proof, _ = honest_proof
        assert verify(pvk, proof, FR(WRONG_COMMITMENT)) is False

    def test_int_commitment(self, pvk, honest_proof):
        proof, commitment = honest_proof
        assert verify(pvk, proof, int(commitment)) is True

    def test_other_setup_rejects(self, other_key_pair, honest_proof):
        proof, commitment = honest_proof
        assert verify(prepare(other_key_pair[1]), proof, commitment) is False

    def test_proof_from_other_setup(self, pvk, other_key_pair):
        proof, commitment = prove(other_key_pair[0], SECRET)
        assert verify(pvk, proof, commitment) is False

    def test_two_proofs_both_verify(self, key_pair, pvk, honest_proof):
        proof, commitment = prove(key_pair[0], SECRET)
        assert proof != honest_proof[0]
        assert verify(pvk, proof, commitment)

    def test_forged_points(self, pvk, honest_proof):
        _, commitment = honest_proof
        forged = Proof(a=ec_mul(G1, 5), b=ec_mul(G2, 7), c=ec_mul(G1, 11))
        assert verify(pvk, forged, commitment) is False


class TestPreparedKey:
    def test_prepare_caches_alpha_beta(self, key_pair, pvk):
        _, vk = key_pair
        assert pvk.vk == vk
        assert pvk.gamma_g2 == vk.gamma_g2
        assert pvk.delta_g2 == vk.delta_g2

    def test_input_count_mismatch(self, pvk, honest_proof):
        proof, commitment = honest_proof
        with pytest.raises(VerificationInternalError):
            verify_with_public_inputs(pvk, proof, [commitment, commitment])
        with pytest.raises(VerificationInternalError):
            verify_with_public_inputs(pvk, proof, [])


class TestProofBytes:
    def test_round_trip_verifies(self, pvk, honest_proof):
        proof, commitment = honest_proof
        assert verify_proof_bytes(pvk, serialize_proof(proof), commitment) is True

    def test_truncated(self, pvk, honest_proof):
        proof, commitment = honest_proof
        with pytest.raises(VerificationInternalError):
            verify_proof_bytes(pvk, serialize_proof(proof)[:-1], commitment)

    @pytest.mark.parametrize("offset", [0, 5, 36, 40, 120])
    def test_flipped_byte_never_verifies(self, pvk, honest_proof, offset):
        proof, commitment = honest_proof
        data = bytearray(serialize_proof(proof))
        data[offset] ^= 0x01
        result = check_proof(pvk, bytes(data), commitment)
        assert result.status in (VerificationStatus.INVALID, VerificationStatus.ERROR)
        assert not result.ok


class TestCheckProof:
    def test_valid(self, pvk, honest_proof):
        proof, commitment = honest_proof
        result = check_proof(pvk, proof, commitment)
        assert result.status is VerificationStatus.VALID
        assert result.ok
        assert result.error is None

    def test_invalid(self, pvk, honest_proof):
        proof, _ = honest_proof
        result = check_proof(pvk, proof, FR(WRONG_COMMITMENT))
        assert result.status is VerificationStatus.INVALID
        assert result.error is None

    def test_error_is_not_invalid(self, pvk, honest_proof):
        _, commitment = honest_proof
        result = check_proof(pvk, b"not a proof", commitment)
        assert result.status is VerificationStatus.ERROR
        assert isinstance(result.error, VerificationInternalError)
