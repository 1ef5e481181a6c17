import numpy as np
from nurbspy.curve import Curve, CurveType
from nurbspy.error import InvalidSettingError
import nurbspy._bspline_domain
import nurbspy._bspline_evaluation
import nurbspy._inversion

class BSpline(Curve):
    """
    A non-rational (piecewise polynomial) B-spline curve of any dimension.

    Parameters
    ----------
    controlPoints : array-like, optional
        An array of shape (nCoef, dimension) holding one control point per row.

    knots : array-like, optional
        A non-decreasing sequence of nCoef + degree + 1 knots.

    degree : `int`, optional
        The polynomial degree. Defaults to len(knots) - nCoef - 1.

    Notes
    -----
    The curve may be built empty and filled in with `set_control_points` and `set_knots`.
    Queries on an incomplete curve raise `InvalidSettingError`.

    Coefficients are stored as an array of shape (dimension, nCoef), matching the
    layout used by the evaluation routines.
    """

    minimumInverseSamples = 7
    """Inverse evaluation samples at least this many parameter values (plus one) on each pass."""

    inverseRefinementPasses = 10
    """Number of shrinking sampling passes used to seed inverse evaluation."""

    newtonIterations = 20
    """Maximum number of Newton iterations used by inverse evaluation."""

    newtonTolerance = 100.0 * np.finfo(float).eps
    """Distance and step tolerance for Newton convergence."""

    def __init__(self, controlPoints = None, knots = None, degree = None):
        super().__init__()
        self.coefs = None
        self.knots = None
        self.order = None if degree is None else int(degree) + 1
        if controlPoints is not None:
            self.set_control_points(controlPoints)
        if knots is not None:
            self.set_knots(knots)

    def __repr__(self):
        return f"BSpline({self.get_control_points()}, {self.knots}, {self.get_degree()})"

    def __call__(self, t):
        return self.evaluate(t)

    def clone(self):
        """
        Deep copy the B-spline.

        Returns
        -------
        spline : `BSpline`
        """
        spline = type(self)()
        spline.coefs = None if self.coefs is None else self.coefs.copy()
        spline.knots = None if self.knots is None else self.knots.copy()
        spline.order = self.order
        spline._periodic = self._periodic
        return spline

    def get_curve_type(self):
        return CurveType.BSPLINE

    def get_control_points(self):
        """
        Return the control points.

        Returns
        -------
        controlPoints : `numpy.array`
            An array of shape (nCoef, dimension), or None if not set.
        """
        return None if self.coefs is None else self.coefs.T.copy()

    def set_control_points(self, controlPoints):
        controlPoints = np.array(controlPoints, float)
        if controlPoints.ndim == 1:
            controlPoints = controlPoints.reshape((-1, 1))
        if not(controlPoints.ndim == 2): raise ValueError("Control points must be a 2D array (one point per row)")
        self.coefs = np.ascontiguousarray(controlPoints.T)

    def get_knots(self):
        return None if self.knots is None else self.knots.copy()

    def set_knots(self, knots):
        knots = np.array(knots, float)
        if not(knots.ndim == 1): raise ValueError("Knots must be a 1D array")
        self.knots = knots

    def get_degree(self):
        """
        Return the polynomial degree, inferring it from the knot and control point counts if it was never set.
        """
        if self.order is None:
            if self.knots is None or self.coefs is None:
                return None
            return len(self.knots) - self.coefs.shape[1] - 1
        return self.order - 1

    def set_degree(self, degree):
        self.order = int(degree) + 1

    def get_dimension(self):
        return None if self.coefs is None else self.coefs.shape[0]

    def get_num_control_points(self):
        return 0 if self.coefs is None else self.coefs.shape[1]

    def get_domain(self):
        self._validate()
        return nurbspy._bspline_domain.domain(self)

    def evaluate(self, t):
        """
        Compute the point on the B-spline at a parameter value.

        Parameters
        ----------
        t : scalar
            The parameter value, inside the domain.

        Returns
        -------
        point : `numpy.array`
            An array of length `dimension`.

        Notes
        -----
        Uses the de Boor recurrence relations to evaluate the non-zero B-splines,
        then takes the dot product of those B-splines with the coefficients.
        """
        return nurbspy._bspline_evaluation.evaluate(self, t)

    def evaluate_derivative(self, t):
        return nurbspy._bspline_evaluation.derivative(self, 1, t)

    def evaluate_2nd_derivative(self, t):
        return nurbspy._bspline_evaluation.derivative(self, 2, t)

    def evaluate_derivatives(self, t, order):
        """
        Compute the derivative of any order at a parameter value. Derivatives above the degree are zero.
        """
        if not(order >= 0): raise ValueError("Derivative order must be non-negative")
        return nurbspy._bspline_evaluation.derivative(self, int(order), t)

    def insert_knot(self, t, multiplicity = 1):
        """
        Insert a knot into the B-spline in place.

        Parameters
        ----------
        t : scalar
            The knot value, inside the domain.

        multiplicity : `int`, optional
            The number of times to insert the knot. Default is 1.

        Notes
        -----
        Implements Boehm's standard knot insertion algorithm. The curve's shape is unchanged.
        """
        self._validate()
        nurbspy._bspline_domain.insert_knot(self, t, multiplicity)

    def inverse_evaluate(self, point, lower = None, upper = None):
        """
        Find the parameter value whose point is closest to the given point.

        Parameters
        ----------
        point : array-like
            The point to invert.

        lower, upper : scalar, optional
            Bounds on the returned parameter. Default to the domain.

        Returns
        -------
        t : scalar
            A parameter in [lower, upper] whose point is locally closest to the given point.

        Notes
        -----
        Samples the curve on shrinking intervals to find a seed, then refines the seed with
        Newton iterations. No global optimality is guaranteed.
        """
        dom = self.get_domain()
        lower = dom[0] if lower is None else lower
        upper = dom[1] if upper is None else upper
        if not(lower <= upper): raise ValueError("Inverse evaluation bounds are inverted")
        numSamples = max(self.get_num_control_points(), self.minimumInverseSamples) + 1
        t = nurbspy._inversion.approximate_curve_inverse(self, point, numSamples, lower, upper, self.inverseRefinementPasses)
        t = nurbspy._inversion.curve_newton_raphson(self, point, t, self.newtonIterations, self.newtonTolerance, lower, upper)
        assert lower <= t <= upper
        return t

    def _validate(self):
        if self.coefs is None:
            raise InvalidSettingError("B-spline control points are not set")
        if self.knots is None:
            raise InvalidSettingError("B-spline knots are not set")
        nCoef = self.coefs.shape[1]
        order = self.get_degree() + 1
        if not(order >= 1):
            raise InvalidSettingError("B-spline degree must be non-negative")
        try:
            nurbspy._bspline_domain.validate_knots(self.knots, nCoef, order)
        except ValueError as error:
            raise InvalidSettingError(f"B-spline knots are inconsistent: {error}") from error
