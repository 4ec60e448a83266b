import pytest

from zkmint.circuit import CommitmentCircuit, hash_native
from zkmint.field import FR
from zkmint.groth16.poly_utils import (
    eval_wire_polys, getNumGates, getNumWires, hxr,
)
from zkmint.groth16.qap import (
    add_polys, combine, div_polys, eval_poly, lagrange_interp, multiply_polys,
    r1cs_to_qap, subtract_polys, vanishing_poly,
)
from zkmint.groth16.r1cs import ConstraintSystem


def inner(r, values):
    """<r, values>"""
    return sum((a * b for a, b in zip(r, values)), FR(0))


def qap_for(secret, commitment):
    cs = ConstraintSystem()
    CommitmentCircuit(FR(secret), FR(commitment)).generate_constraints(cs)
    A, B, C = cs.to_matrices()
    return r1cs_to_qap(A, B, C), cs.full_assignment()


# ── FR polynomials ──
class TestPolynomials:
    def test_multiply_polys(self):
        result = multiply_polys([FR(1), FR(1)], [FR(1), FR(1)])
        assert result == [FR(1), FR(2), FR(1)]

    def test_add_polys(self):
        assert add_polys([FR(1), FR(2)], [FR(3)]) == [FR(4), FR(2)]

    def test_subtract_polys(self):
        assert subtract_polys([FR(5), FR(3)], [FR(1), FR(1)]) == [FR(4), FR(2)]

    def test_div_polys(self):
        # (x^2 - 1) / (x - 1) = (x + 1)
        q, r = div_polys([FR(-1), FR(0), FR(1)], [FR(-1), FR(1)])
        assert q == [FR(1), FR(1)]
        assert all(v == 0 for v in r)

    def test_div_polys_remainder(self):
        # (x^2 + 1) / (x - 1) = (x + 1) ... 2
        q, r = div_polys([FR(1), FR(0), FR(1)], [FR(-1), FR(1)])
        assert q == [FR(1), FR(1)]
        assert r == [FR(2)]

    def test_eval_poly(self):
        # 3 + 2x at x=4 => 11
        assert eval_poly([FR(3), FR(2)], FR(4)) == FR(11)

    def test_eval_poly_empty(self):
        assert eval_poly([], FR(7)) == FR(0)

    def test_div_polys_by_zero_leading(self):
        with pytest.raises(ZeroDivisionError):
            div_polys([FR(1), FR(1)], [FR(1), FR(0)])

    def test_combine(self):
        # 2·(1 + x) + 3·(x²) = 2 + 2x + 3x²
        polys = [[FR(1), FR(1)], [FR(0), FR(0), FR(1)]]
        assert combine([FR(2), FR(3)], polys) == [FR(2), FR(2), FR(3)]

    def test_combine_skips_zero_weights(self):
        assert combine([FR(0), FR(1)], [[FR(9)], [FR(4)]]) == [FR(4)]

    def test_lagrange_interp(self):
        vec = [FR(5), FR(0), FR(7)]
        poly = lagrange_interp(vec)
        for i, v in enumerate(vec):
            assert eval_poly(poly, FR(i + 1)) == v

    def test_vanishing_poly_roots(self):
        Z = vanishing_poly(3)
        assert len(Z) == 4
        for i in range(1, 4):
            assert eval_poly(Z, FR(i)) == 0
        assert eval_poly(Z, FR(4)) == FR(6)


# ── R1CS → QAP ──
class TestR1csToQap:
    def test_dimensions(self):
        (Ax, Bx, Cx, Zx), _ = qap_for(3, 27)
        assert getNumWires(Ax) == 5
        assert getNumGates(Ax) == 3
        assert len(Zx) == 4

    def test_interpolates_matrices(self):
        cs = ConstraintSystem()
        CommitmentCircuit(FR(3), FR(27)).generate_constraints(cs)
        A, _, _ = cs.to_matrices()
        Ax, _, _, _ = r1cs_to_qap(*cs.to_matrices())
        for gate in range(3):
            evaluated = eval_wire_polys(Ax, FR(gate + 1))
            assert evaluated == A[gate]

    def test_satisfying_assignment_divides(self):
        (Ax, Bx, Cx, Zx), R = qap_for(12345, int(hash_native(12345)))
        Hx, remainder = hxr(Ax, Bx, Cx, Zx, R)
        assert len(Hx) == 2
        assert all(v == 0 for v in remainder)

    def test_unsatisfying_assignment_leaves_remainder(self):
        (Ax, Bx, Cx, Zx), R = qap_for(12345, 99999)
        _, remainder = hxr(Ax, Bx, Cx, Zx, R)
        assert any(v != 0 for v in remainder)

    @pytest.mark.parametrize("x", [FR(10), FR(987654321)])
    def test_divisibility_identity(self, x):
        """A(x)·B(x) - C(x) == H(x)·Z(x) at arbitrary points"""
        (Ax, Bx, Cx, Zx), R = qap_for(7, 343)
        Hx, _ = hxr(Ax, Bx, Cx, Zx, R)
        a = inner(R, eval_wire_polys(Ax, x))
        b = inner(R, eval_wire_polys(Bx, x))
        c = inner(R, eval_wire_polys(Cx, x))
        assert a * b - c == eval_poly(Hx, x) * eval_poly(Zx, x)
