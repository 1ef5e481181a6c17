import numpy as np
from enum import Enum
from nurbspy.error import NotSupportedError

class CurveType(Enum):
    """Tag identifying the concrete variant of a `Curve`."""
    BSPLINE = "bspline"
    NURBS = "nurbs"

class Curve:
    """
    A curve is an abstract base class for differentiable functions of one parameter
    whose values are points in space.

    Notes
    -----
    Subclasses override the evaluation methods they support. The base implementations
    raise `NotSupportedError`, which callers must treat as a permanent failure.
    """

    domainTolerance = 1.0e-12
    """Parameter values within 1.0e-12 (scaled by the domain length) outside the domain are clamped, not rejected."""

    def __init__(self):
        self._periodic = False

    def clone(self):
        """
        Deep copy the curve.

        Returns
        -------
        curve : `Curve`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support clone")

    def get_curve_type(self):
        """
        Return the tag identifying the concrete curve variant.

        Returns
        -------
        curveType : `CurveType`
        """
        raise NotSupportedError(f"{type(self).__name__} has no curve type")

    def get_periodic(self):
        """
        Return True if the curve is periodic (its parameter wraps from the upper to the lower bound).

        Returns
        -------
        periodic : `bool`
        """
        return self._periodic

    def set_periodic(self, periodic):
        self._periodic = bool(periodic)

    def get_degree(self):
        raise NotSupportedError(f"{type(self).__name__} has no degree")

    def get_num_control_points(self):
        """
        Return the number of control points of the curve.

        Returns
        -------
        count : `int`
        """
        raise NotSupportedError(f"{type(self).__name__} has no control points")

    def get_domain(self):
        """
        Return the parameter domain of the curve.

        Returns
        -------
        domain : `numpy.array`
            An array of length 2 holding the lower and upper parameter bounds.
        """
        raise NotSupportedError(f"{type(self).__name__} has no domain")

    def evaluate(self, t):
        """
        Return the point on the curve at parameter `t`.

        Parameters
        ----------
        t : scalar
            The parameter value.

        Returns
        -------
        point : `numpy.array`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate")

    def evaluate_derivative(self, t):
        """
        Return the first derivative of the curve at parameter `t`.

        Parameters
        ----------
        t : scalar
            The parameter value.

        Returns
        -------
        derivative : `numpy.array`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_derivative")

    def evaluate_2nd_derivative(self, t):
        """
        Return the second derivative of the curve at parameter `t`.

        Parameters
        ----------
        t : scalar
            The parameter value.

        Returns
        -------
        derivative : `numpy.array`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_2nd_derivative")

    def inverse_evaluate(self, point, lower = None, upper = None):
        """
        Return the parameter value whose point is closest to the given point.

        Parameters
        ----------
        point : array-like
            The point to invert.

        lower, upper : scalar, optional
            Bounds on the returned parameter. Default to the curve's domain.

        Returns
        -------
        t : scalar
        """
        raise NotSupportedError(f"{type(self).__name__} does not support inverse_evaluate")

    def insert_knot(self, t, multiplicity = 1):
        """
        Insert a knot without changing the shape of the curve.

        Parameters
        ----------
        t : scalar
            The knot value.

        multiplicity : `int`, optional
            The number of times to insert the knot. Default is 1.
        """
        raise NotSupportedError(f"{type(self).__name__} does not support insert_knot")

    def _clamp_parameter(self, t):
        dom = self.get_domain()
        slack = self.domainTolerance * max(1.0, dom[1] - dom[0])
        if t < dom[0] - slack or t > dom[1] + slack:
            return None
        return float(np.clip(t, dom[0], dom[1]))
