import numpy as np
from nurbspy.curve import Curve, CurveType
from nurbspy.bspline import BSpline
from nurbspy.error import InvalidSettingError, NotSupportedError

class NURBS(Curve):
    """
    A non-uniform rational B-spline curve.

    Parameters
    ----------
    controlPoints : array-like, optional
        An array of shape (nCoef, dimension) holding one control point per row.

    weights : array-like, optional
        A positive weight for each control point.

    knots : array-like, optional
        A non-decreasing sequence of nCoef + degree + 1 knots.

    degree : `int`, optional
        The polynomial degree. Defaults to len(knots) - nCoef - 1.

    Notes
    -----
    The curve is represented by a non-rational `BSpline` one dimension higher whose control
    points are the homogeneous points (weight * point, weight). Evaluation, differentiation,
    and knot insertion are delegated to that homogeneous B-spline and the results are projected
    back by dividing out the last coordinate.

    Every setter rebuilds the homogeneous B-spline when control points, weights, and knots are
    consistent with each other. While they are not (for instance between setting new control
    points and setting their weights), every query raises `InvalidSettingError`.
    """

    def __init__(self, controlPoints = None, weights = None, knots = None, degree = None):
        super().__init__()
        self._controlPoints = None
        self._weights = None
        self._knots = None
        self._degree = None if degree is None else int(degree)
        self._homogeneous = None
        if controlPoints is not None:
            self._controlPoints = self._as_points(controlPoints)
        if weights is not None:
            self._weights = self._as_weights(weights)
        if knots is not None:
            self._knots = np.array(knots, float)
        self._rebuild()

    def __repr__(self):
        return f"NURBS({self._controlPoints}, {self._weights}, {self._knots}, {self.get_degree()})"

    def __call__(self, t):
        return self.evaluate(t)

    def clone(self):
        """
        Deep copy the NURBS curve, including its homogeneous B-spline.

        Returns
        -------
        curve : `NURBS`
        """
        curve = type(self)()
        curve._controlPoints = None if self._controlPoints is None else self._controlPoints.copy()
        curve._weights = None if self._weights is None else self._weights.copy()
        curve._knots = None if self._knots is None else self._knots.copy()
        curve._degree = self._degree
        curve._homogeneous = None if self._homogeneous is None else self._homogeneous.clone()
        curve._periodic = self._periodic
        return curve

    def get_curve_type(self):
        return CurveType.NURBS

    def initialize(self):
        """
        Build the homogeneous B-spline from the control points, weights, and knots.

        Raises
        ------
        InvalidSettingError
            If control points, weights, or knots are missing or inconsistent, or a weight is not positive.
        """
        if self._controlPoints is None or self._weights is None or self._knots is None:
            raise InvalidSettingError("NURBS curve needs control points, weights, and knots")
        if len(self._controlPoints) != len(self._weights):
            raise InvalidSettingError(f"NURBS curve has {len(self._controlPoints)} control points but {len(self._weights)} weights")
        if np.any(self._weights <= 0.0):
            raise InvalidSettingError("NURBS weights must be positive")
        homogeneousPoints = np.empty((len(self._controlPoints), self._controlPoints.shape[1] + 1))
        homogeneousPoints[:, :-1] = self._controlPoints * self._weights[:, np.newaxis]
        homogeneousPoints[:, -1] = self._weights
        homogeneous = BSpline(homogeneousPoints, self._knots, self._degree)
        homogeneous.get_domain() # Validates the knots against the control points
        self._homogeneous = homogeneous

    def get_control_points(self):
        return None if self._controlPoints is None else self._controlPoints.copy()

    def set_control_points(self, controlPoints):
        self._controlPoints = self._as_points(controlPoints)
        self._rebuild()

    def get_weights(self):
        return None if self._weights is None else self._weights.copy()

    def set_weights(self, weights):
        self._weights = self._as_weights(weights)
        self._rebuild()

    def get_knots(self):
        return None if self._knots is None else self._knots.copy()

    def set_knots(self, knots):
        self._knots = np.array(knots, float)
        self._rebuild()

    def get_degree(self):
        if self._degree is None:
            if self._knots is None or self._controlPoints is None:
                return None
            return len(self._knots) - len(self._controlPoints) - 1
        return self._degree

    def set_degree(self, degree):
        self._degree = int(degree)
        self._rebuild()

    def get_dimension(self):
        return None if self._controlPoints is None else self._controlPoints.shape[1]

    def get_num_control_points(self):
        return 0 if self._controlPoints is None else len(self._controlPoints)

    def get_homogeneous(self):
        """
        Return a copy of the homogeneous B-spline (one dimension higher) that represents the curve.

        Returns
        -------
        homogeneous : `BSpline`
        """
        self._validate_initialization()
        return self._homogeneous.clone()

    def set_homogeneous(self, homogeneous):
        """
        Set the curve from a homogeneous B-spline whose last coordinate holds the weights.

        Parameters
        ----------
        homogeneous : `BSpline`
            The homogeneous B-spline. It is copied, not shared.
        """
        homogeneous = homogeneous.clone()
        homogeneousPoints = homogeneous.get_control_points()
        if homogeneousPoints is None or homogeneousPoints.shape[1] < 2:
            raise InvalidSettingError("Homogeneous B-spline must have at least two coordinates")
        self._homogeneous = homogeneous
        self._weights = homogeneousPoints[:, -1].copy()
        self._controlPoints = homogeneousPoints[:, :-1] / self._weights[:, np.newaxis]
        self._knots = homogeneous.get_knots()
        self._degree = homogeneous.get_degree()
        self._validate_initialization()

    def get_domain(self):
        self._validate_initialization()
        return self._homogeneous.get_domain()

    def evaluate(self, t):
        """
        Compute the point on the curve at a parameter value.

        Parameters
        ----------
        t : scalar
            The parameter value, inside the domain.

        Returns
        -------
        point : `numpy.array`

        Notes
        -----
        Weights are required to be positive, so the homogeneous weight coordinate is never zero.
        """
        self._validate_initialization()
        p = self._homogeneous.evaluate(t)
        return p[:-1] / p[-1]

    def evaluate_derivative(self, t):
        """
        Compute the first derivative of the curve at a parameter value.

        Parameters
        ----------
        t : scalar
            The parameter value, inside the domain.

        Returns
        -------
        derivative : `numpy.array`

        Notes
        -----
        With homogeneous point p = (A, w) and derivative d = (A', w'), the quotient rule
        gives C' = (A' - A * w' / w) / w.
        """
        self._validate_initialization()
        p = self._homogeneous.evaluate(t)
        d = self._homogeneous.evaluate_derivative(t)
        return (d[:-1] - p[:-1] * d[-1] / p[-1]) / p[-1]

    def evaluate_2nd_derivative(self, t):
        raise NotSupportedError("NURBS curves do not support second derivatives")

    def inverse_evaluate(self, point, lower = None, upper = None):
        raise NotSupportedError("NURBS curves do not support inverse evaluation")

    def insert_knot(self, t, multiplicity = 1):
        """
        Insert a knot without changing the shape of the curve.

        Parameters
        ----------
        t : scalar
            The knot value, inside the domain.

        multiplicity : `int`, optional
            The number of times to insert the knot. Default is 1.

        Notes
        -----
        The knot is inserted into the homogeneous B-spline; control points, weights, and knots
        are then re-derived from it.
        """
        self._validate_initialization()
        self._homogeneous.insert_knot(t, multiplicity)
        homogeneousPoints = self._homogeneous.get_control_points()
        self._weights = homogeneousPoints[:, -1].copy()
        self._controlPoints = homogeneousPoints[:, :-1] / self._weights[:, np.newaxis]
        self._knots = self._homogeneous.get_knots()

    def _rebuild(self):
        self._homogeneous = None
        if self._controlPoints is None or self._weights is None or self._knots is None:
            return
        if len(self._controlPoints) != len(self._weights):
            return
        degree = self.get_degree()
        if degree < 0 or len(self._knots) != len(self._controlPoints) + degree + 1:
            return
        self.initialize()

    def _validate_initialization(self):
        if self._homogeneous is None or self._controlPoints is None or self._weights is None:
            raise InvalidSettingError("NURBS curve is not initialized")
        nCoef = self._homogeneous.get_num_control_points()
        if nCoef != len(self._controlPoints) or nCoef != len(self._weights):
            raise InvalidSettingError("NURBS curve is not initialized")

    @staticmethod
    def _as_points(controlPoints):
        controlPoints = np.array(controlPoints, float)
        if controlPoints.ndim == 1:
            controlPoints = controlPoints.reshape((-1, 1))
        if not(controlPoints.ndim == 2): raise ValueError("Control points must be a 2D array (one point per row)")
        return controlPoints

    @staticmethod
    def _as_weights(weights):
        weights = np.array(weights, float)
        if not(weights.ndim == 1): raise ValueError("Weights must be a 1D array")
        return weights
