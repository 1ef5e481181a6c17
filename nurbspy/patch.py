import numpy as np
from enum import Enum
from nurbspy.error import NotSupportedError
import nurbspy._inversion

class PatchType(Enum):
    """Tag identifying the concrete variant of a `Patch`, for dispatch by generic patch processing code."""
    EXTRUSION = "extrusion"
    REVOLUTION = "revolution"

class Patch:
    """
    A patch is an abstract base class for parametric surfaces S(u, v) in 3D.

    It stores the bookkeeping shared by all patch variants (degrees, periodicity, parameter bounds)
    and provides the two-phase inverse evaluation (coarse sampling followed by Newton iterations)
    that every variant reuses.

    Notes
    -----
    Operations a variant does not support raise `NotSupportedError`. In particular, patches that
    are not control point based fail on every weight, knot, and control point accessor, so generic
    code must branch on `get_patch_type()` rather than rely on degenerate values.
    """

    minimumInverseSamples = 7
    """Inverse evaluation samples at least this many (plus one) parameter values along each direction."""

    inverseRefinementPasses = 10
    """Number of shrinking sampling passes used to seed inverse evaluation."""

    newtonIterations = 20
    """Maximum number of Newton iterations used by inverse evaluation."""

    newtonTolerance = 100.0 * np.finfo(float).eps
    """Distance and step tolerance for Newton convergence."""

    def __init__(self):
        self._degreeU = 0
        self._degreeV = 0
        self._periodicU = False
        self._periodicV = False

    def clone(self):
        """
        Deep copy the patch.

        Returns
        -------
        patch : `Patch`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support clone")

    def get_patch_type(self):
        """
        Return the tag identifying the concrete patch variant.

        Returns
        -------
        patchType : `PatchType`
        """
        raise NotSupportedError(f"{type(self).__name__} has no patch type")

    def initialize(self):
        """
        Validate the patch settings and derive its periodicity.
        """
        raise NotSupportedError(f"{type(self).__name__} does not support initialize")

    def get_degree_u(self):
        return self._degreeU

    def set_degree_u(self, degree):
        self._degreeU = int(degree)

    def get_degree_v(self):
        return self._degreeV

    def set_degree_v(self, degree):
        self._degreeV = int(degree)

    def get_periodic_u(self):
        return self._periodicU

    def set_periodic_u(self, periodic):
        self._periodicU = bool(periodic)

    def get_periodic_v(self):
        return self._periodicV

    def set_periodic_v(self, periodic):
        self._periodicV = bool(periodic)

    def get_u_lower_bound(self):
        raise NotSupportedError(f"{type(self).__name__} has no bounds")

    def get_u_upper_bound(self):
        raise NotSupportedError(f"{type(self).__name__} has no bounds")

    def get_v_lower_bound(self):
        raise NotSupportedError(f"{type(self).__name__} has no bounds")

    def get_v_upper_bound(self):
        raise NotSupportedError(f"{type(self).__name__} has no bounds")

    def evaluate(self, u, v):
        """
        Return the point on the patch at parameters (u, v).

        Parameters
        ----------
        u, v : scalar
            The parameter values.

        Returns
        -------
        point : `numpy.array`
        """
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate")

    def evaluate_derivative_u(self, u, v):
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_derivative_u")

    def evaluate_derivative_v(self, u, v):
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_derivative_v")

    def evaluate_2nd_derivative_uu(self, u, v):
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_2nd_derivative_uu")

    def evaluate_2nd_derivative_vv(self, u, v):
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_2nd_derivative_vv")

    def evaluate_2nd_derivative_uv(self, u, v):
        raise NotSupportedError(f"{type(self).__name__} does not support evaluate_2nd_derivative_uv")

    def evaluate_normal(self, u, v):
        """
        Return the unit normal (the normalized cross product of the first partials) at parameters (u, v).

        Returns
        -------
        normal : `numpy.array`
            The unit normal, or the unnormalized cross product when it vanishes (degenerate point).
        """
        normal = np.cross(self.evaluate_derivative_u(u, v), self.evaluate_derivative_v(u, v))
        length = np.linalg.norm(normal)
        if length > 0.0:
            normal /= length
        return normal

    def inverse_evaluate(self, point, uMin = None, uMax = None, vMin = None, vMax = None):
        """
        Find parameters (u, v) in the given box whose point is closest to the given point.

        Parameters
        ----------
        point : array-like
            The point to invert.

        uMin, uMax, vMin, vMax : scalar, optional
            The parameter box. Each bound defaults to the patch's own bound.

        Returns
        -------
        uv : `numpy.array`
            An array of length 2 inside the box.
        """
        raise NotSupportedError(f"{type(self).__name__} does not support inverse_evaluate")

    def approximate_inverse_evaluate(self, point, numSamples, uMin, uMax, vMin, vMax, numIterations):
        """
        Seed inverse evaluation by sampling the patch on a grid and repeatedly shrinking the grid around the closest sample.

        Parameters
        ----------
        point : array-like
            The point to invert.

        numSamples : `int`
            The number of samples along each parameter direction on each pass.

        uMin, uMax, vMin, vMax : scalar
            The parameter box to search.

        numIterations : `int`
            The number of shrinking passes after the initial coarse pass.

        Returns
        -------
        uv : `numpy.array`
            The closest sample found.
        """
        if not(numSamples >= 2): raise ValueError("Inverse evaluation needs at least two samples")
        return nurbspy._inversion.approximate_patch_inverse(self, point, numSamples, uMin, uMax, vMin, vMax, numIterations)

    def newton_raphson(self, point, uv, numIterations, tolerance, uMin, uMax, vMin, vMax):
        """
        Refine a seed with Newton iterations on S(u, v) - point, keeping every iterate inside the box.

        Parameters
        ----------
        point : array-like
            The point to invert.

        uv : array-like
            The seed parameters.

        numIterations : `int`
            The maximum number of iterations.

        tolerance : scalar
            Convergence tolerance on the distance and on the step length.

        uMin, uMax, vMin, vMax : scalar
            The parameter box. Periodic directions wrap around the patch bounds before being clamped.

        Returns
        -------
        uv : `numpy.array`
            The last accepted iterate. Running out of iterations is not an error.

        Notes
        -----
        Minimizes half the squared distance with Newton steps whose Hessian is J^T J plus the
        residual weighted second partials. Variants without second partials (NURBS profiles) get them
        by differencing the first partials. Where that Hessian is not positive definite the step falls
        back to Gauss-Newton, and every step is halved until it does not increase the distance.
        Steps are solved by least squares so a singular Jacobian does not break the iteration.
        """
        return nurbspy._inversion.patch_newton_raphson(self, point, uv, numIterations, tolerance, uMin, uMax, vMin, vMax)

    def get_num_weights_u(self):
        return 0

    def get_num_weights_v(self):
        return 0

    def get_weight(self, i, j):
        raise NotSupportedError(f"{type(self).__name__} does not support weights")

    def set_weight(self, i, j, weight):
        raise NotSupportedError(f"{type(self).__name__} does not support weights")

    def get_num_knots_u(self):
        return 0

    def get_num_knots_v(self):
        return 0

    def get_knot_u(self, i):
        raise NotSupportedError(f"{type(self).__name__} does not support knots")

    def set_knot_u(self, i, knot):
        raise NotSupportedError(f"{type(self).__name__} does not support knots")

    def get_knot_v(self, i):
        raise NotSupportedError(f"{type(self).__name__} does not support knots")

    def set_knot_v(self, i, knot):
        raise NotSupportedError(f"{type(self).__name__} does not support knots")

    def num_control_points_u(self):
        return 0

    def num_control_points_v(self):
        return 0

    def get_control_point_preimage(self, i, j):
        raise NotSupportedError(f"{type(self).__name__} does not support control points")

    def _resolve_box(self, uMin, uMax, vMin, vMax):
        uMin = self.get_u_lower_bound() if uMin is None else float(uMin)
        uMax = self.get_u_upper_bound() if uMax is None else float(uMax)
        vMin = self.get_v_lower_bound() if vMin is None else float(vMin)
        vMax = self.get_v_upper_bound() if vMax is None else float(vMax)
        if not(uMin <= uMax and vMin <= vMax): raise ValueError("Inverse evaluation box is inverted")
        return uMin, uMax, vMin, vMax
