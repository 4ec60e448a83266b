import pytest

from zkmint.circuit import CommitmentCircuit, hash_native
from zkmint.errors import SynthesisError
from zkmint.field import FR, CURVE_ORDER, is_on_g1, is_on_g2
from zkmint.groth16.proving import Proof, create_proof, prove
from zkmint.groth16.setup import ProvingKey

SECRET = 12345


class TestProve:
    def test_returns_commitment(self, honest_proof):
        _, commitment = honest_proof
        assert commitment == hash_native(SECRET)

    def test_points_on_curve(self, honest_proof):
        proof, _ = honest_proof
        assert isinstance(proof, Proof)
        assert proof.a is not None and is_on_g1(proof.a)
        assert proof.b is not None and is_on_g2(proof.b)
        assert is_on_g1(proof.c)

    def test_fresh_randomness(self, key_pair, honest_proof):
        pk, _ = key_pair
        again, commitment = prove(pk, SECRET)
        assert commitment == honest_proof[1]
        assert again.a != honest_proof[0].a
        assert again.c != honest_proof[0].c

    @pytest.mark.parametrize("secret", [-1, CURVE_ORDER, "12345", 1.5, True])
    def test_rejects_non_canonical_secret(self, key_pair, secret):
        pk, _ = key_pair
        with pytest.raises(ValueError):
            prove(pk, secret)


class TestCreateProof:
    def test_unsatisfied_circuit(self, key_pair):
        pk, _ = key_pair
        with pytest.raises(SynthesisError):
            create_proof(pk, CommitmentCircuit(FR(SECRET), FR(99999)))

    def test_missing_assignment(self, key_pair):
        pk, _ = key_pair
        with pytest.raises(SynthesisError):
            create_proof(pk, CommitmentCircuit(secret=FR(SECRET)))

    def test_key_for_other_shape(self, key_pair):
        pk, _ = key_pair
        truncated = ProvingKey(
            vk=pk.vk,
            beta_g1=pk.beta_g1,
            delta_g1=pk.delta_g1,
            a_query=pk.a_query[:4],
            b_g1_query=pk.b_g1_query[:4],
            b_g2_query=pk.b_g2_query[:4],
            h_query=pk.h_query,
            l_query=pk.l_query[:2],
        )
        with pytest.raises(SynthesisError):
            create_proof(pk=truncated, circuit=CommitmentCircuit(FR(3), FR(27)))
