"""
Rank-1 constraint system
=========================

A constraint system is a list of gates ``<A, w> · <B, w> = <C, w>`` over the
wire vector ``w``. Wires are laid out as

    w = [1, public inputs..., private witnesses...]

which is the order the Groth16 setup and prover index them in.

The system runs in one of two modes:

* setup mode: only the shape is recorded. Value closures are never called,
  so a circuit can be synthesized without any assignment.
* proving mode: every allocation evaluates its closure. A closure that has
  nothing to return raises ``AssignmentMissing``.

Example (x * x = y):
    >>> cs = ConstraintSystem()
    >>> x = FieldVar.new_witness(cs, lambda: FR(3))
    >>> y = x * x
    >>> cs.is_satisfied()
    True
"""

import logging

from zkmint.errors import AssignmentMissing, SynthesisError
from zkmint.field import FR

logger = logging.getLogger(__name__)

ONE = ("instance", 0)


def _lc(*terms):
    """Linear combination as {variable: coefficient}; zero terms are dropped."""
    out = {}
    for var, coeff in terms:
        coeff = coeff if isinstance(coeff, FR) else FR(coeff)
        out[var] = out.get(var, FR(0)) + coeff
    return {var: coeff for var, coeff in out.items() if coeff != FR(0)}


class ConstraintSystem:
    """R1CS builder.

    Attributes:
        setup_mode: True when only the constraint shape is being recorded
        instance_assignment: [1, public input values...] (proving mode)
        witness_assignment: private witness values (proving mode)
        constraints: list of (a_lc, b_lc, c_lc)
    """

    def __init__(self, setup_mode=False):
        self.setup_mode = setup_mode
        self.num_instance_variables = 1
        self.num_witness_variables = 0
        self.instance_assignment = [FR(1)]
        self.witness_assignment = []
        self.constraints = []

    @property
    def num_constraints(self):
        return len(self.constraints)

    @property
    def num_wires(self):
        return self.num_instance_variables + self.num_witness_variables

    def _assign(self, value_fn):
        if self.setup_mode:
            return None
        value = value_fn()
        if value is None:
            raise AssignmentMissing()
        return value if isinstance(value, FR) else FR(value)

    def new_input_variable(self, value_fn):
        value = self._assign(value_fn)
        var = ("instance", self.num_instance_variables)
        self.num_instance_variables += 1
        if not self.setup_mode:
            self.instance_assignment.append(value)
        return var, value

    def new_witness_variable(self, value_fn):
        value = self._assign(value_fn)
        var = ("witness", self.num_witness_variables)
        self.num_witness_variables += 1
        if not self.setup_mode:
            self.witness_assignment.append(value)
        return var, value

    def enforce_constraint(self, a, b, c):
        """Add the gate <a, w> · <b, w> = <c, w>; each argument is a linear combination."""
        self.constraints.append((a, b, c))

    def wire_index(self, var):
        kind, idx = var
        if kind == "instance":
            return idx
        if kind == "witness":
            return self.num_instance_variables + idx
        raise SynthesisError("unknown variable kind: {}".format(kind))

    def full_assignment(self):
        """Wire values [1, inputs..., witnesses...]."""
        if self.setup_mode:
            raise AssignmentMissing("wire vector in setup mode")
        return self.instance_assignment + self.witness_assignment

    def _eval_lc(self, lc, assignment):
        total = FR(0)
        for var, coeff in lc.items():
            total += coeff * assignment[self.wire_index(var)]
        return total

    def which_is_unsatisfied(self):
        """Index of the first violated constraint, or None."""
        assignment = self.full_assignment()
        for i, (a, b, c) in enumerate(self.constraints):
            lhs = self._eval_lc(a, assignment) * self._eval_lc(b, assignment)
            if lhs != self._eval_lc(c, assignment):
                return i
        return None

    def is_satisfied(self):
        unsatisfied = self.which_is_unsatisfied()
        if unsatisfied is not None:
            logger.debug("constraint %d is not satisfied", unsatisfied)
        return unsatisfied is None

    def to_matrices(self):
        """R1CS matrices A, B, C with one row per gate and one column per wire."""
        numWires = self.num_wires
        matrices = ([], [], [])
        for gate in self.constraints:
            for matrix, lc in zip(matrices, gate):
                row = [FR(0)] * numWires
                for var, coeff in lc.items():
                    row[self.wire_index(var)] += coeff
                matrix.append(row)
        return matrices


class FieldVar:
    """A field element living on a wire of a ``ConstraintSystem``.

    ``value`` is None in setup mode.
    """

    def __init__(self, cs, variable, value):
        self.cs = cs
        self.variable = variable
        self.value = value

    @classmethod
    def new_input(cls, cs, value_fn):
        var, value = cs.new_input_variable(value_fn)
        return cls(cs, var, value)

    @classmethod
    def new_witness(cls, cs, value_fn):
        var, value = cs.new_witness_variable(value_fn)
        return cls(cs, var, value)

    def __mul__(self, other):
        """Allocate the product as a new witness and constrain self · other = product."""
        if self.cs is not other.cs:
            raise SynthesisError("variables belong to different constraint systems")

        def product():
            return self.value * other.value

        out = FieldVar.new_witness(self.cs, product)
        self.cs.enforce_constraint(
            _lc((self.variable, 1)),
            _lc((other.variable, 1)),
            _lc((out.variable, 1)),
        )
        return out

    def enforce_equal(self, other):
        """(self - other) · 1 = 0"""
        self.cs.enforce_constraint(
            _lc((self.variable, 1), (other.variable, -1)),
            _lc((ONE, 1)),
            {},
        )
