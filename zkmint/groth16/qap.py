"""
R1CS → QAP over FR.

Each wire column of A, B, C is interpolated over the gate points 1..n, so
wire i gets polynomials A_i, B_i, C_i of degree < n. Polynomials are
coefficient lists, lowest degree first.
"""

from itertools import zip_longest

from zkmint.field import FR

ZERO = FR(0)


def multiply_polys(a, b):
    """Product of two coefficient lists (schoolbook)."""
    out = [ZERO] * (len(a) + len(b) - 1)
    for i, ai in enumerate(a):
        if ai == 0:
            continue
        for j, bj in enumerate(b):
            out[i + j] += ai * bj
    return out


def scale_poly(poly, k):
    return [k * c for c in poly]


def add_polys(a, b):
    """a + b; the result has the length of the longer operand."""
    return [x + y for x, y in zip_longest(a, b, fillvalue=ZERO)]


def subtract_polys(a, b):
    """a - b; the result has the length of the longer operand."""
    return [x - y for x, y in zip_longest(a, b, fillvalue=ZERO)]


def div_polys(a, b):
    """Long division a / b.

    Returns:
        (quotient, remainder) with ``len(remainder) == len(b) - 1`` once
        ``a`` is at least as long as ``b``

    Raises:
        ZeroDivisionError: the leading coefficient of ``b`` is zero
    """
    if b[-1] == 0:
        raise ZeroDivisionError("Division by zero polynomial")
    inv_lead = FR(1) / b[-1]
    remainder = list(a)
    quotient = [ZERO] * max(len(a) - len(b) + 1, 0)
    for pos in reversed(range(len(quotient))):
        factor = remainder[pos + len(b) - 1] * inv_lead
        quotient[pos] = factor
        for j, bj in enumerate(b):
            remainder[pos + j] -= factor * bj
        remainder.pop()
    return quotient, remainder


def eval_poly(poly, x):
    """Horner evaluation at ``x``."""
    acc = ZERO
    for coeff in reversed(poly):
        acc = acc * x + coeff
    return acc


def vanishing_poly(num_gates):
    """Z(x) = (x - 1)(x - 2)...(x - n)"""
    Z = [FR(1)]
    for i in range(1, num_gates + 1):
        Z = multiply_polys(Z, [FR(-i), FR(1)])
    return Z


def mk_singleton(point_loc, height, total_pts):
    """``height`` at ``point_loc`` and 0 at every other point of 1..total_pts."""
    numerator = [FR(1)]
    denominator = FR(1)
    for i in range(1, total_pts + 1):
        if i == point_loc:
            continue
        numerator = multiply_polys(numerator, [FR(-i), FR(1)])
        denominator *= FR(point_loc - i)
    return scale_poly(numerator, FR(height) / denominator)


def lagrange_interp(vec):
    """Polynomial of degree < len(vec) through (i + 1, vec[i])."""
    out = [ZERO] * len(vec)
    for i, value in enumerate(vec):
        if value != 0:
            out = add_polys(out, mk_singleton(i + 1, value, len(vec)))
    return out


def transpose(matrix):
    return [list(col) for col in zip(*matrix)]


def r1cs_to_qap(A, B, C):
    """Gate-major R1CS matrices → wire-major polynomials and Z."""
    num_gates = len(A)
    polys = tuple(
        [lagrange_interp(column) for column in transpose(matrix)]
        for matrix in (A, B, C)
    )
    return polys + (vanishing_poly(num_gates),)


def combine(r, polys):
    """Σ r_i · polys_i"""
    acc = []
    for rval, poly in zip(r, polys):
        if rval != 0:
            acc = add_polys(acc, scale_poly(poly, rval))
    return acc


def create_solution_polynomials(r, new_A, new_B, new_C):
    """A(x)·B(x) - C(x) for the wire assignment r."""
    Apoly = combine(r, new_A)
    Bpoly = combine(r, new_B)
    Cpoly = combine(r, new_C)
    return subtract_polys(multiply_polys(Apoly, Bpoly), Cpoly)


def create_divisor_polynomial(sol, Z):
    """H = sol / Z; the remainder is zero exactly when the assignment satisfies the R1CS."""
    return div_polys(sol, Z)
