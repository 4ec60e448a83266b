"""
Finite field and elliptic curve operations
===========================================

Basic algebra shared by the circuit, the Groth16 backend and the serializers.

**Scalar field FR**:
  The scalar field of the bn128 (BN254) curve. Circuit values, witness
  assignments and the toxic waste all live here.
  - order r ≈ 2^254, prime

**Curve operations**:
  G1 / G2 group arithmetic and the optimal Ate pairing from ``py_ecc.bn128``.
  The point at infinity is ``None``.

Example:
    >>> from zkmint.field import FR, G1, ec_mul
    >>> c = FR(3) ** 3     # FR(27)
    >>> P = ec_mul(G1, 5)  # 5·G1
"""

import secrets

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


class FR(FQ):
    """Element of the bn128 scalar field (modulus ``bn128.curve_order``)."""
    field_modulus = bn128.curve_order


# curve order r (size of FR)
CURVE_ORDER = bn128.curve_order

# base field modulus p (coordinates of G1 points)
FIELD_MODULUS = bn128.field_modulus

G1 = bn128.G1
G2 = bn128.G2


def to_fr(value):
    """Convert a canonical integer (or FR) into an FR element.

    Raises:
        ValueError: the integer is negative or not below ``CURVE_ORDER``
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("field element must be an int, got {!r}".format(type(value).__name__))
    if not 0 <= value < CURVE_ORDER:
        raise ValueError("field element out of range: {}".format(value))
    return FR(value)


def random_fr():
    """Uniform non-zero FR element from the OS CSPRNG."""
    return FR(secrets.randbelow(CURVE_ORDER - 1) + 1)


def ec_mul(point, scalar):
    """Scalar multiplication ``scalar · point``; the scalar is reduced mod r.

    Example:
        >>> P = ec_mul(G1, FR(5))  # 5·G1
        >>> Q = ec_mul(G2, 3)       # 3·G2
    """
    if point is None:
        return None
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """Point addition ``p1 + p2`` in the same group."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """Point negation ``-point``."""
    return bn128.neg(point)


def ec_pairing(g2_point, g1_point):
    """Optimal Ate pairing e(G1, G2) → GT.

    Note:
        ``py_ecc.bn128.pairing`` takes its arguments as (G2, G1).
    """
    return bn128.pairing(g2_point, g1_point)


def is_on_g1(point):
    return bn128.is_on_curve(point, bn128.b)


def is_on_g2(point):
    """Curve equation on the twist plus membership in the order-r subgroup."""
    if point is None:
        return True
    if not bn128.is_on_curve(point, bn128.b2):
        return False
    return bn128.multiply(point, CURVE_ORDER) is None
