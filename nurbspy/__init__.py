"""
nurbspy is a python library for evaluating rational B-spline curves and parametric surface patches,
forward (parameter to point) and inverse (point to parameter).

Available subpackages
---------------------
`nurbspy.curve` : Provides the `Curve` base class for curves and the `CurveType` tag.

`nurbspy.bspline` : Provides the `BSpline` subclass of `Curve` that models non-rational B-spline curves of any dimension.

`nurbspy.nurbs` : Provides the `NURBS` subclass of `Curve` that models rational B-spline curves through
    a homogeneous `BSpline` one dimension higher.

`nurbspy.patch` : Provides the `Patch` base class for surface patches, with the generic inverse evaluation,
    and the `PatchType` tag.

`nurbspy.revolution` : Provides the `RevolutionPatch` subclass of `Patch` that sweeps a profile curve about an axis.

`nurbspy.extrusion` : Provides the `ExtrusionPatch` subclass of `Patch` that sweeps a profile curve along a direction.

`nurbspy.error` : Provides the exceptions raised by the library.
"""
from nurbspy.error import ArgumentOutsideDomainError, InvalidSettingError, NotSupportedError
from nurbspy.curve import Curve, CurveType
from nurbspy.bspline import BSpline
from nurbspy.nurbs import NURBS
from nurbspy.patch import Patch, PatchType
from nurbspy.revolution import RevolutionPatch
from nurbspy.extrusion import ExtrusionPatch
