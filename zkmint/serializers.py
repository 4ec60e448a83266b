"""
Canonical binary encoding of keys, proofs and commitments
==========================================================

Every artifact written to disk goes through this module. Encoding is
deterministic: equal objects give equal bytes, and decode(encode(x)) == x.

**Envelope** (keys and proofs):
  b"ZKM" | version (1 byte) | kind (1 byte) | body

**Primitives**:
  FR scalar  32 bytes big-endian, must be < r
  G1 point   32 bytes: x big-endian, flag bits in the first byte
  G2 point   64 bytes: x.c1 | x.c0, flag bits in the first byte
  vector     4-byte big-endian count, then the items

  flags: 0x80 point at infinity (every other bit zero)
         0x40 y is the larger of the two square roots

Decoding rejects truncated input, trailing bytes, coordinates >= p, points
off the curve and G2 points outside the order-r subgroup.

A commitment is a bare scalar, without envelope.
"""

import struct

from py_ecc import bn128

from zkmint.errors import SerializationError
from zkmint.field import FR, CURVE_ORDER, FIELD_MODULUS, is_on_g1, is_on_g2
from zkmint.groth16.proving import Proof
from zkmint.groth16.setup import ProvingKey, VerifyingKey

FQ = bn128.FQ
FQ2 = bn128.FQ2

MAGIC = b"ZKM"
FORMAT_VERSION = 1

KIND_PROVING_KEY = 0x01
KIND_VERIFYING_KEY = 0x02
KIND_PROOF = 0x03

FLAG_INFINITY = 0x80
FLAG_Y_LARGER = 0x40
FLAG_MASK = FLAG_INFINITY | FLAG_Y_LARGER

SCALAR_SIZE = 32
G1_SIZE = 32
G2_SIZE = 64


class _Reader:
    """Cursor over an immutable byte string."""

    def __init__(self, data):
        self.data = bytes(data)
        self.pos = 0

    def take(self, n):
        if self.pos + n > len(self.data):
            raise SerializationError(
                "truncated input: need {} bytes at offset {}, have {}".format(
                    n, self.pos, len(self.data) - self.pos))
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def finish(self):
        if self.pos != len(self.data):
            raise SerializationError("{} trailing bytes".format(len(self.data) - self.pos))


# ─── FR ───

def serialize_fr(val):
    """FR → 32 bytes"""
    return int(val).to_bytes(SCALAR_SIZE, "big")


def _read_fr(reader):
    n = int.from_bytes(reader.take(SCALAR_SIZE), "big")
    if n >= CURVE_ORDER:
        raise SerializationError("scalar is not reduced modulo the curve order")
    return FR(n)


def deserialize_fr(data):
    """32 bytes → FR"""
    reader = _Reader(data)
    val = _read_fr(reader)
    reader.finish()
    return val


serialize_commitment = serialize_fr
deserialize_commitment = deserialize_fr


# ─── square roots ───

def _sqrt_fq(a):
    # p ≡ 3 (mod 4)
    root = a ** ((FIELD_MODULUS + 1) // 4)
    return root if root * root == a else None


def _sqrt_fq2(a):
    # Adj, Rodríguez-Henríquez: square roots in F_p² for p ≡ 3 (mod 4), u² = -1
    minus_one = FQ2([-1, 0])
    a1 = a ** ((FIELD_MODULUS - 3) // 4)
    alpha = a1 * a1 * a
    if _conjugate(alpha) * alpha == minus_one:
        return None
    x0 = a1 * a
    if alpha == minus_one:
        root = FQ2([0, 1]) * x0
    else:
        root = (FQ2.one() + alpha) ** ((FIELD_MODULUS - 1) // 2) * x0
    return root if root * root == a else None


def _conjugate(a):
    return FQ2([int(a.coeffs[0]), -int(a.coeffs[1])])


def _fq_is_larger(y):
    return int(y) > FIELD_MODULUS - int(y)


def _fq2_key(y):
    return (int(y.coeffs[1]), int(y.coeffs[0]))


def _fq2_is_larger(y):
    return _fq2_key(y) > _fq2_key(-y)


def _split_flags(raw):
    flags = raw[0] & FLAG_MASK
    body = bytes([raw[0] & ~FLAG_MASK & 0xFF]) + raw[1:]
    return flags, body


def _check_infinity(flags, body):
    if flags & FLAG_INFINITY:
        if flags != FLAG_INFINITY or any(body):
            raise SerializationError("non-canonical encoding of the point at infinity")
        return True
    return False


def _read_coordinate(chunk):
    n = int.from_bytes(chunk, "big")
    if n >= FIELD_MODULUS:
        raise SerializationError("coordinate is not reduced modulo the field modulus")
    return n


# ─── G1 point ───

def serialize_g1(point):
    """G1 point → 32 bytes"""
    if point is None:
        return bytes([FLAG_INFINITY]) + bytes(G1_SIZE - 1)
    x, y = point
    out = bytearray(int(x).to_bytes(G1_SIZE, "big"))
    if _fq_is_larger(y):
        out[0] |= FLAG_Y_LARGER
    return bytes(out)


def _read_g1(reader):
    flags, body = _split_flags(reader.take(G1_SIZE))
    if _check_infinity(flags, body):
        return None
    x = FQ(_read_coordinate(body))
    y = _sqrt_fq(x ** 3 + bn128.b)
    if y is None:
        raise SerializationError("x is not the abscissa of a G1 point")
    if _fq_is_larger(y) != bool(flags & FLAG_Y_LARGER):
        y = -y
    point = (x, y)
    if not is_on_g1(point):
        raise SerializationError("point is not on G1")
    return point


def deserialize_g1(data):
    """32 bytes → G1 point"""
    reader = _Reader(data)
    point = _read_g1(reader)
    reader.finish()
    return point


# ─── G2 point ───

def serialize_g2(point):
    """G2 point → 64 bytes"""
    if point is None:
        return bytes([FLAG_INFINITY]) + bytes(G2_SIZE - 1)
    x, y = point
    out = bytearray(int(x.coeffs[1]).to_bytes(32, "big") + int(x.coeffs[0]).to_bytes(32, "big"))
    if _fq2_is_larger(y):
        out[0] |= FLAG_Y_LARGER
    return bytes(out)


def _read_g2(reader):
    flags, body = _split_flags(reader.take(G2_SIZE))
    if _check_infinity(flags, body):
        return None
    c1 = _read_coordinate(body[:32])
    c0 = _read_coordinate(body[32:])
    x = FQ2([c0, c1])
    y = _sqrt_fq2(x ** 3 + bn128.b2)
    if y is None:
        raise SerializationError("x is not the abscissa of a G2 point")
    if _fq2_is_larger(y) != bool(flags & FLAG_Y_LARGER):
        y = -y
    point = (x, y)
    if not is_on_g2(point):
        raise SerializationError("point is not in the G2 subgroup")
    return point


def deserialize_g2(data):
    """64 bytes → G2 point"""
    reader = _Reader(data)
    point = _read_g2(reader)
    reader.finish()
    return point


# ─── vectors ───

def _write_vec(points, write_point):
    return struct.pack(">I", len(points)) + b"".join(write_point(p) for p in points)


def _read_vec(reader, read_point, item_size):
    (count,) = struct.unpack(">I", reader.take(4))
    if count * item_size > len(reader.data) - reader.pos:
        raise SerializationError("vector length {} exceeds the remaining input".format(count))
    return tuple(read_point(reader) for _ in range(count))


# ─── envelope ───

def _header(kind):
    return MAGIC + bytes([FORMAT_VERSION, kind])


def _open(data, kind):
    reader = _Reader(data)
    if reader.take(len(MAGIC)) != MAGIC:
        raise SerializationError("bad magic")
    version, got_kind = reader.take(2)
    if version != FORMAT_VERSION:
        raise SerializationError("unsupported format version {}".format(version))
    if got_kind != kind:
        raise SerializationError("expected object kind {:#04x}, found {:#04x}".format(kind, got_kind))
    return reader


# ─── VerifyingKey ───

def _write_vk_body(vk):
    return (serialize_g1(vk.alpha_g1)
            + serialize_g2(vk.beta_g2)
            + serialize_g2(vk.gamma_g2)
            + serialize_g2(vk.delta_g2)
            + _write_vec(vk.gamma_abc_g1, serialize_g1))


def _read_vk_body(reader):
    return VerifyingKey(
        alpha_g1=_read_g1(reader),
        beta_g2=_read_g2(reader),
        gamma_g2=_read_g2(reader),
        delta_g2=_read_g2(reader),
        gamma_abc_g1=_read_vec(reader, _read_g1, G1_SIZE),
    )


def serialize_verifying_key(vk):
    return _header(KIND_VERIFYING_KEY) + _write_vk_body(vk)


def deserialize_verifying_key(data):
    reader = _open(data, KIND_VERIFYING_KEY)
    vk = _read_vk_body(reader)
    reader.finish()
    return vk


# ─── ProvingKey ───

def serialize_proving_key(pk):
    return (_header(KIND_PROVING_KEY)
            + _write_vk_body(pk.vk)
            + serialize_g1(pk.beta_g1)
            + serialize_g1(pk.delta_g1)
            + _write_vec(pk.a_query, serialize_g1)
            + _write_vec(pk.b_g1_query, serialize_g1)
            + _write_vec(pk.b_g2_query, serialize_g2)
            + _write_vec(pk.h_query, serialize_g1)
            + _write_vec(pk.l_query, serialize_g1))


def deserialize_proving_key(data):
    reader = _open(data, KIND_PROVING_KEY)
    pk = ProvingKey(
        vk=_read_vk_body(reader),
        beta_g1=_read_g1(reader),
        delta_g1=_read_g1(reader),
        a_query=_read_vec(reader, _read_g1, G1_SIZE),
        b_g1_query=_read_vec(reader, _read_g1, G1_SIZE),
        b_g2_query=_read_vec(reader, _read_g2, G2_SIZE),
        h_query=_read_vec(reader, _read_g1, G1_SIZE),
        l_query=_read_vec(reader, _read_g1, G1_SIZE),
    )
    reader.finish()
    wires = len(pk.a_query)
    if len(pk.b_g1_query) != wires or len(pk.b_g2_query) != wires:
        raise SerializationError("query vectors disagree on the number of wires")
    if len(pk.vk.gamma_abc_g1) + len(pk.l_query) != wires:
        raise SerializationError("public and private queries do not cover every wire")
    return pk


# ─── Proof ───

def serialize_proof(proof):
    return (_header(KIND_PROOF)
            + serialize_g1(proof.a)
            + serialize_g2(proof.b)
            + serialize_g1(proof.c))


def deserialize_proof(data):
    reader = _open(data, KIND_PROOF)
    proof = Proof(a=_read_g1(reader), b=_read_g2(reader), c=_read_g1(reader))
    reader.finish()
    return proof


# ─── display helpers ───

def _shorten(s):
    if len(s) <= 12:
        return s
    return s[:6] + "..." + s[-6:]


def fr_short(val):
    """FR → abbreviated hex (for logs and CLI output)"""
    if val is None:
        return "None"
    return _shorten(serialize_fr(val).hex())


def bytes_short(data):
    return _shorten(bytes(data).hex())
