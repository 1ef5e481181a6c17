import numpy as np
from nurbspy.curve import Curve
from nurbspy.patch import Patch, PatchType
from nurbspy.error import InvalidSettingError

class ExtrusionPatch(Patch):
    """
    A profile curve swept along a straight direction: S(u, v) = profile(u) + v * direction.

    Parameters
    ----------
    profile : `Curve`, optional
        The profile curve. It is referenced, not copied.

    direction : array-like, optional
        The non-zero extrusion direction. Default is (0, 0, 1).
    """

    def __init__(self, profile = None, direction = None):
        super().__init__()
        self._direction = np.array([0.0, 0.0, 1.0])
        self._profile = None
        self._profileBoundsPending = False
        self._uLower = 0.0
        self._uUpper = 1.0
        self._vLower = 0.0
        self._vUpper = 1.0
        self.set_degree_v(1)
        if direction is not None:
            self.set_direction(direction)
        if profile is not None:
            self.set_profile(profile)

    def __repr__(self):
        return f"ExtrusionPatch({self._profile}, {self._direction})"

    def clone(self):
        patch = type(self)()
        patch.__dict__.update(self.__dict__)
        patch._direction = self._direction.copy()
        return patch

    def get_patch_type(self):
        return PatchType.EXTRUSION

    def get_direction(self):
        return self._direction.copy()

    def set_direction(self, direction):
        direction = np.array(direction, float)
        if not(direction.shape == (3,)): raise ValueError("Direction must be a 3D vector")
        self._direction = direction

    def get_profile(self):
        return self._profile

    def set_profile(self, profile):
        self._profile = profile
        self._profileBoundsPending = False
        if isinstance(profile, Curve):
            try:
                self._read_profile_bounds()
            except InvalidSettingError:
                # Not yet consistent; initialize reads the domain.
                self._profileBoundsPending = True

    def _read_profile_bounds(self):
        self._uLower, self._uUpper = (float(x) for x in self._profile.get_domain())
        self.set_degree_u(self._profile.get_degree())
        self._profileBoundsPending = False

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
        self._assert_valid_profile()
        if self._profileBoundsPending:
            self._read_profile_bounds()
        if not(np.linalg.norm(self._direction) > 0.0):
            raise InvalidSettingError("Extrusion direction must be non-zero")
        if not(self._uUpper > self._uLower):
            raise InvalidSettingError("u upper bound must exceed u lower bound")
        if not(self._vUpper > self._vLower):
            raise InvalidSettingError("v upper bound must exceed v lower bound")
        self.set_periodic_u(self._profile.get_periodic())
        self.set_periodic_v(False)

    def evaluate(self, u, v):
        self._assert_valid_profile()
        return np.asarray(self._profile.evaluate(u), float) + v * self._direction

    def evaluate_derivative_u(self, u, v):
        self._assert_valid_profile()
        return np.asarray(self._profile.evaluate_derivative(u), float)

    def evaluate_derivative_v(self, u, v):
        self._assert_valid_profile()
        return self._direction.copy()

    def evaluate_2nd_derivative_uu(self, u, v):
        self._assert_valid_profile()
        return np.asarray(self._profile.evaluate_2nd_derivative(u), float)

    def evaluate_2nd_derivative_vv(self, u, v):
        self._assert_valid_profile()
        return np.zeros(3)

    def evaluate_2nd_derivative_uv(self, u, v):
        self._assert_valid_profile()
        return np.zeros(3)

    def inverse_evaluate(self, point, uMin = None, uMax = None, vMin = None, vMax = None):
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
