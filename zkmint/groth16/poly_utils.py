from zkmint.groth16.qap import (
    create_divisor_polynomial,
    create_solution_polynomials,
    eval_poly,
)


def getNumWires(Ax):
    return len(Ax)


def getNumGates(Ax):
    return len(Ax[0])


# [A_0(x), A_1(x), ...] for wire polynomials A_i
def eval_wire_polys(polys, x_val):
    return [eval_poly(poly, x_val) for poly in polys]


# (Ax.R * Bx.R - Cx.R) / Zx = Hx .... r
def hxr(Ax, Bx, Cx, Zx, R):
    sol = create_solution_polynomials(R, Ax, Bx, Cx)
    return create_divisor_polynomial(sol, Zx)
