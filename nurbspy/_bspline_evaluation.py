import numpy as np
from nurbspy.error import ArgumentOutsideDomainError

def bspline_values(knot, knots, splineOrder, u, derivativeOrder = 0):
    basis = np.zeros(splineOrder, knots.dtype)
    if knot is None:
        knot = np.searchsorted(knots, u, side = 'right')
        knot = min(knot, len(knots) - splineOrder)
    if derivativeOrder >= splineOrder:
        return knot, basis
    basis[-1] = 1.0
    for degree in range(1, splineOrder - derivativeOrder):
        b = splineOrder - degree
        for i in range(knot - degree, knot):
            alpha = (u - knots[i]) / (knots[i + degree] - knots[i])
            basis[b - 1] += (1.0 - alpha) * basis[b]
            basis[b] *= alpha
            b += 1
    for degree in range(splineOrder - derivativeOrder, splineOrder):
        b = splineOrder - degree
        for i in range(knot - degree, knot):
            alpha = degree / (knots[i + degree] - knots[i])
            basis[b - 1] += -alpha * basis[b]
            basis[b] *= alpha
            b += 1
    return knot, basis

def derivative(self, with_respect_to, t):
    self._validate()

    # Check for evaluation point inside domain
    u = self._clamp_parameter(t)
    if u is None:
        raise ArgumentOutsideDomainError(t, f"B-spline evaluation outside domain: {t}")

    # Grab all of the appropriate coefficients
    order = self.get_degree() + 1
    ix, values = bspline_values(None, self.knots, order, u, with_respect_to)
    return self.coefs[:, ix - order : ix] @ values

def evaluate(self, t):
    return derivative(self, 0, t)
