import numpy as np
from nurbspy.curve import Curve
from nurbspy.patch import Patch, PatchType
from nurbspy.error import InvalidSettingError

def rotation_matrix(axis, angle):
    """Return the matrix rotating by `angle` radians about the unit vector `axis` (Rodrigues' formula)."""
    cost = np.cos(angle)
    sint = np.sin(angle)
    kMat = np.array([[0.0, -axis[2], axis[1]],
                     [axis[2], 0.0, -axis[0]],
                     [-axis[1], axis[0], 0.0]])
    return np.identity(3) + sint * kMat + (1.0 - cost) * kMat @ kMat

class RevolutionPatch(Patch):
    """
    A surface of revolution: a profile curve swept about an axis.

    S(u, v) = location + R(v) (profile(u) - location), where R(v) rotates by v radians about
    the third row of the frame.

    Parameters
    ----------
    profile : `Curve`, optional
        The profile curve. It is referenced, not copied, and must stay alive (and unchanged)
        while the patch is used.

    location : array-like, optional
        A point on the rotation axis. Default is the origin.

    frame : array-like, optional
        A 3 x 3 orthonormal, right-handed frame (one axis per row); row 2 is the rotation axis.
        Default is the identity.

    Notes
    -----
    Call `initialize` after configuring the patch: it validates the frame and bounds and derives
    periodicity. Forward evaluation only needs a profile.
    """

    frameTolerance = 1.0e-12
    """Tolerance on the unit length and mutual orthogonality of the frame rows."""

    axisTolerance = 10.0 * np.finfo(float).eps
    """Cross products shorter than this are treated as lying on the rotation axis (no rescaling)."""

    periodTolerance = 10.0 * np.finfo(float).eps
    """A v range within this of a full turn makes the patch periodic in v."""

    def __init__(self, profile = None, location = None, frame = None):
        super().__init__()
        self._location = np.zeros(3)
        self._frame = np.identity(3)
        self._profile = None
        self._profileBoundsPending = False
        self._uLower = 0.0
        self._uUpper = 1.0
        self._vLower = 0.0
        self._vUpper = 2.0 * np.pi
        self.set_degree_u(2)
        self.set_degree_v(2)
        if location is not None:
            self.set_location(location)
        if frame is not None:
            self.set_frame(frame)
        if profile is not None:
            self.set_profile(profile)

    def __repr__(self):
        return f"RevolutionPatch({self._profile}, {self._location}, {self._frame})"

    def clone(self):
        """
        Copy the patch. The copy references the same profile curve.

        Returns
        -------
        patch : `RevolutionPatch`
        """
        patch = type(self)()
        patch.__dict__.update(self.__dict__)
        patch._location = self._location.copy()
        patch._frame = self._frame.copy()
        return patch

    def get_patch_type(self):
        return PatchType.REVOLUTION

    def get_location(self):
        return self._location.copy()

    def set_location(self, location):
        location = np.array(location, float)
        if not(location.shape == (3,)): raise ValueError("Location must be a 3D point")
        self._location = location

    def get_frame(self):
        return self._frame.copy()

    def set_frame(self, frame):
        frame = np.array(frame, float)
        if not(frame.shape == (3, 3)): raise ValueError("Frame must be a 3 x 3 matrix")
        self._frame = frame

    def get_profile(self):
        return self._profile

    def set_profile(self, profile):
        """
        Set the profile curve (or None to clear it). A `Curve` profile also sets the u bounds to its domain.
        A profile that is not yet consistent (a NURBS curve part way through an update) has its domain
        read by `initialize` instead.
        """
        self._profile = profile
        self._profileBoundsPending = False
        if isinstance(profile, Curve):
            try:
                self._uLower, self._uUpper = (float(x) for x in profile.get_domain())
            except InvalidSettingError:
                self._profileBoundsPending = True

    def get_u_lower_bound(self):
        return self._uLower

    def get_u_upper_bound(self):
        return self._uUpper

    def get_v_lower_bound(self):
        return self._vLower

    def get_v_upper_bound(self):
        return self._vUpper

    def set_u_lower_bound(self, t):
        self._profileBoundsPending = False
        self._uLower = float(t)

    def set_u_upper_bound(self, t):
        self._profileBoundsPending = False
        self._uUpper = float(t)

    def set_v_lower_bound(self, t):
        self._vLower = float(t)

    def set_v_upper_bound(self, t):
        self._vUpper = float(t)

    def initialize(self):
        """
        Validate the frame and bounds, then derive periodicity.

        Raises
        ------
        InvalidSettingError
            If the profile is missing, the frame is not orthonormal, or a bound range is empty.
        """
        self._assert_valid_profile()
        if self._profileBoundsPending:
            self._uLower, self._uUpper = (float(x) for x in self._profile.get_domain())
            self._profileBoundsPending = False
        tol = self.frameTolerance
        for i in range(3):
            if abs(self._frame[i] @ self._frame[i] - 1.0) > tol:
                raise InvalidSettingError(f"Frame row {i} is not unit length")
            j = (i + 1) % 3
            if abs(self._frame[i] @ self._frame[j]) > tol:
                raise InvalidSettingError(f"Frame rows {i} and {j} are not orthogonal")
        if not(self._uUpper > self._uLower):
            raise InvalidSettingError("u upper bound must exceed u lower bound")
        if not(self._vUpper > self._vLower):
            raise InvalidSettingError("v upper bound must exceed v lower bound")

        self.set_periodic_u(self._profile.get_periodic())
        self.set_periodic_v(self._vUpper - self._vLower > 2.0 * np.pi - self.periodTolerance)

    def evaluate(self, u, v):
        """
        Compute the point on the patch: the profile point at u rotated by v radians about the axis.

        Parameters
        ----------
        u : scalar
            The profile parameter.

        v : scalar
            The rotation angle in radians. Any angle is accepted; angles beyond a turn sweep again.

        Returns
        -------
        point : `numpy.array`
        """
        self._assert_valid_profile()
        p = np.asarray(self._profile.evaluate(u), float)
        return self._location + rotation_matrix(self._frame[2], v) @ (p - self._location)

    def evaluate_derivative_u(self, u, v):
        self._assert_valid_profile()
        d = np.asarray(self._profile.evaluate_derivative(u), float)
        return rotation_matrix(self._frame[2], v) @ d

    def evaluate_derivative_v(self, u, v):
        """
        Compute the tangent of the circle traced by the point at (u, v) as v varies.

        Notes
        -----
        The tangent is axis x (point - location), scaled to the point's distance from the axis.
        On the axis the (near) zero cross product is returned as is.
        """
        self._assert_valid_profile()
        axis = self._frame[2]
        offset = self.evaluate(u, v) - self._location
        d = np.cross(axis, offset)
        length = np.linalg.norm(d)
        if length > self.axisTolerance:
            r = np.linalg.norm(offset - (offset @ axis) * axis)
            d = d / length * r
        return d

    def evaluate_2nd_derivative_uu(self, u, v):
        self._assert_valid_profile()
        d = np.asarray(self._profile.evaluate_2nd_derivative(u), float)
        return rotation_matrix(self._frame[2], v) @ d

    def evaluate_2nd_derivative_vv(self, u, v):
        # Centripetal acceleration: minus the radial component of the offset from the axis.
        self._assert_valid_profile()
        axis = self._frame[2]
        d = self.evaluate(u, v) - self._location
        return -d + (d @ axis) * axis

    def evaluate_2nd_derivative_uv(self, u, v):
        self._assert_valid_profile()
        axis = self._frame[2]
        duv = np.cross(axis, self.evaluate_derivative_u(u, v))
        length = np.linalg.norm(duv)
        if length > self.axisTolerance:
            r = np.linalg.norm(duv - (duv @ axis) * axis)
            duv = duv / length * r
        return duv

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

        Notes
        -----
        The seed comes from a sampling grid sized by the profile's control point count
        (at least `minimumInverseSamples` plus one) refined over `inverseRefinementPasses`
        passes; Newton iterations then polish it. Points on the axis have no unique v.
        """
        self._assert_valid_profile()
        uMin, uMax, vMin, vMax = self._resolve_box(uMin, uMax, vMin, vMax)
        numSamples = max(self._profile.get_num_control_points(), self.minimumInverseSamples) + 1
        uv = self.approximate_inverse_evaluate(point, numSamples, uMin, uMax, vMin, vMax, self.inverseRefinementPasses)
        uv = self.newton_raphson(point, uv, self.newtonIterations, self.newtonTolerance, uMin, uMax, vMin, vMax)
        assert uMin <= uv[0] <= uMax
        assert vMin <= uv[1] <= vMax
        return uv

    def _assert_valid_profile(self):
        if self._profile is None:
            raise InvalidSettingError("Profile not set")
