import numpy as np
from nurbspy.error import ArgumentOutsideDomainError

def domain(self):
    order = self.get_degree() + 1
    return np.array([self.knots[order - 1], self.knots[len(self.knots) - order]])

def insert_knot(self, knot, multiplicity = 1):
    if not(multiplicity >= 1): raise ValueError("Knot multiplicity must be at least 1")
    order = self.get_degree() + 1
    knots = self.knots
    if knot < knots[order - 1] or knot > knots[-order]:
        raise ArgumentOutsideDomainError(knot, f"Knot insertion outside domain: {knot}")
    coefs = self.coefs.T # One row per coefficient (swap back later)
    for _ in range(multiplicity):
        if knot == knots[-order]:
            position = len(knots) - order
        else:
            position = np.searchsorted(knots, knot, 'right')
        newCoefs = np.insert(coefs, position - 1, 0.0, axis=0)
        for i in range(position - order + 1, position):
            alpha = (knot - knots[i]) / (knots[i + order - 1] - knots[i])
            newCoefs[i] = (1.0 - alpha) * coefs[i - 1] + alpha * coefs[i]
        knots = np.insert(knots, position, knot)
        coefs = newCoefs
    self.knots = knots
    self.coefs = np.ascontiguousarray(coefs.T)

def validate_knots(knots, nCoef, order):
    if not(len(knots) == nCoef + order):
        raise ValueError(f"Knots array should have length {nCoef + order}")
    if np.any(np.diff(knots) < 0.0):
        raise ValueError("Improperly ordered knot sequence")
    if not(knots[order - 1] < knots[nCoef]):
        raise ValueError("Knot sequence has an empty domain")
