"""
Groth16 circuit-specific setup
===============================

Derives a matched (ProvingKey, VerifyingKey) pair for one constraint shape.

**Toxic waste**:
  Setup samples five secrets τ = (α, β, γ, δ, x). Anyone holding them can
  forge proofs for this circuit forever. They only exist inside the
  ``toxic_waste()`` context, which wipes them on exit whether the setup
  succeeded or not, and are never returned to the caller.

  This is a local single-party setup and is only adequate for development.
  Production keys need a ceremony in which no party retains τ.

**Key material** (n gates, m wires, l public wires including the constant 1):
  vk.alpha_g1    = α·G1
  vk.beta_g2     = β·G2,  vk.gamma_g2 = γ·G2,  vk.delta_g2 = δ·G2
  vk.gamma_abc_g1[i] = (β·A_i(x) + α·B_i(x) + C_i(x)) / γ · G1    i < l
  pk.a_query[i]  = A_i(x)·G1                                       i < m
  pk.b_g1_query[i], pk.b_g2_query[i] = B_i(x)·G1, B_i(x)·G2        i < m
  pk.h_query[i]  = x^i·Z(x) / δ · G1                               i < n-1
  pk.l_query[j]  = (β·A_j(x) + α·B_j(x) + C_j(x)) / δ · G1         l <= j < m

Example:
    >>> pk, vk = setup()
"""

import hashlib
import logging
from contextlib import contextmanager
from dataclasses import dataclass

from zkmint.circuit import CommitmentCircuit
from zkmint.errors import SetupError
from zkmint.field import FR, CURVE_ORDER, G1, G2, ec_mul, random_fr
from zkmint.groth16.poly_utils import eval_wire_polys, getNumGates, getNumWires
from zkmint.groth16.qap import eval_poly, r1cs_to_qap
from zkmint.groth16.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: tuple
    beta_g2: tuple
    gamma_g2: tuple
    delta_g2: tuple
    gamma_abc_g1: tuple

    @property
    def num_public_inputs(self):
        # gamma_abc_g1[0] belongs to the constant-one wire
        return len(self.gamma_abc_g1) - 1


@dataclass(frozen=True)
class ProvingKey:
    vk: VerifyingKey
    beta_g1: tuple
    delta_g1: tuple
    a_query: tuple
    b_g1_query: tuple
    b_g2_query: tuple
    h_query: tuple
    l_query: tuple

    @property
    def num_wires(self):
        return len(self.a_query)

    @property
    def num_gates(self):
        return len(self.h_query) + 1


class ToxicWaste:
    """The setup secrets τ = (α, β, γ, δ, x). Use through ``toxic_waste()``."""

    __slots__ = ("alpha", "beta", "gamma", "delta", "x_val")

    def __init__(self, alpha, beta, gamma, delta, x_val):
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.delta = delta
        self.x_val = x_val

    @classmethod
    def sample(cls, seed=None):
        if seed is not None:
            return cls(*(_seeded_fr(seed, label) for label in cls.__slots__))
        try:
            return cls(*(random_fr() for _ in cls.__slots__))
        except (OSError, NotImplementedError) as exc:
            raise SetupError("secure randomness unavailable: {}".format(exc)) from exc

    @property
    def destroyed(self):
        return all(getattr(self, name) is None for name in self.__slots__)

    def destroy(self):
        for name in self.__slots__:
            setattr(self, name, None)

    def __repr__(self):
        return "<ToxicWaste {}>".format("destroyed" if self.destroyed else "live")


def _seeded_fr(seed, label):
    h = hashlib.sha256("{}:{}".format(seed, label).encode()).digest()
    return FR(int.from_bytes(h, "big") % (CURVE_ORDER - 1) + 1)


@contextmanager
def toxic_waste(seed=None):
    """Sample τ for the duration of the block, then wipe it.

    ``seed`` derives τ deterministically and exists for tests and demos only.
    """
    if seed is not None:
        logger.warning("deterministic setup from a seed: keys are for development only")
    waste = ToxicWaste.sample(seed)
    try:
        yield waste
    finally:
        waste.destroy()


def g1_query(values):
    return tuple(ec_mul(G1, v) for v in values)


def g2_query(values):
    return tuple(ec_mul(G2, v) for v in values)


def gamma_abc_query(num_public, alpha, beta, gamma, Ax_val, Bx_val, Cx_val):
    query = []
    for i in range(num_public):
        val = (beta * Ax_val[i] + alpha * Bx_val[i] + Cx_val[i]) / gamma
        query.append(ec_mul(G1, val))
    return tuple(query)


def l_query(num_public, numWires, alpha, beta, delta, Ax_val, Bx_val, Cx_val):
    query = []
    for i in range(num_public, numWires):
        val = (beta * Ax_val[i] + alpha * Bx_val[i] + Cx_val[i]) / delta
        query.append(ec_mul(G1, val))
    return tuple(query)


def h_query(numGates, delta, x_val, Zx_val):
    query = []
    for i in range(numGates - 1):
        query.append(ec_mul(G1, (x_val**i * Zx_val) / delta))
    return tuple(query)


def synthesize_shape(circuit):
    """Run the circuit in setup mode; only the constraint shape is recorded."""
    cs = ConstraintSystem(setup_mode=True)
    circuit.generate_constraints(cs)
    return cs


def circuit_specific_setup(circuit, seed=None):
    """Generate a key pair bound to the shape of ``circuit``.

    Raises:
        SynthesisError: the circuit could not be synthesized
        SetupError: randomness failure or a degenerate evaluation point
    """
    cs = synthesize_shape(circuit)
    A, B, C = cs.to_matrices()
    Ax, Bx, Cx, Zx = r1cs_to_qap(A, B, C)

    numGates = getNumGates(Ax)
    numWires = getNumWires(Ax)
    num_public = cs.num_instance_variables
    logger.info("setup: %d constraints, %d wires, %d public inputs",
                numGates, numWires, num_public - 1)

    with toxic_waste(seed) as tau:
        Zx_val = eval_poly(Zx, tau.x_val)
        if Zx_val == 0:
            raise SetupError("evaluation point is a root of the vanishing polynomial")

        Ax_val = eval_wire_polys(Ax, tau.x_val)
        Bx_val = eval_wire_polys(Bx, tau.x_val)
        Cx_val = eval_wire_polys(Cx, tau.x_val)

        vk = VerifyingKey(
            alpha_g1=ec_mul(G1, tau.alpha),
            beta_g2=ec_mul(G2, tau.beta),
            gamma_g2=ec_mul(G2, tau.gamma),
            delta_g2=ec_mul(G2, tau.delta),
            gamma_abc_g1=gamma_abc_query(num_public, tau.alpha, tau.beta, tau.gamma,
                                         Ax_val, Bx_val, Cx_val),
        )
        pk = ProvingKey(
            vk=vk,
            beta_g1=ec_mul(G1, tau.beta),
            delta_g1=ec_mul(G1, tau.delta),
            a_query=g1_query(Ax_val),
            b_g1_query=g1_query(Bx_val),
            b_g2_query=g2_query(Bx_val),
            h_query=h_query(numGates, tau.delta, tau.x_val, Zx_val),
            l_query=l_query(num_public, numWires, tau.alpha, tau.beta, tau.delta,
                            Ax_val, Bx_val, Cx_val),
        )
        del Ax_val, Bx_val, Cx_val, Zx_val

    return pk, vk


def setup(seed=None):
    """Key pair for the commitment circuit."""
    return circuit_specific_setup(CommitmentCircuit(), seed=seed)
