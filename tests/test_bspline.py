import numpy as np
import pytest

from nurbspy import ArgumentOutsideDomainError, BSpline, CurveType, InvalidSettingError


def _close(a, b, tol=1e-10):
    assert np.linalg.norm(np.asarray(a) - np.asarray(b)) <= tol


def _quadratic_bezier():
    return BSpline([[0.0, 0.0], [1.0, 2.0], [2.0, 0.0]], [0.0, 0.0, 0.0, 1.0, 1.0, 1.0])


def _cubic_3d():
    ctrl = [
        [0.0, 0.0, 0.0],
        [1.0, 2.0, 0.5],
        [2.0, -1.0, 1.0],
        [3.0, 0.5, -0.5],
        [4.0, 2.0, 0.0],
        [5.0, 0.0, 1.0],
    ]
    knots = [0.0, 0.0, 0.0, 0.0, 0.3, 0.7, 1.0, 1.0, 1.0, 1.0]
    return BSpline(ctrl, knots, 3)


def test_linear_evaluation():
    line = BSpline([[0.0, 0.0], [2.0, 4.0]], [0.0, 0.0, 1.0, 1.0])
    assert line.get_degree() == 1
    _close(line.evaluate(0.0), [0.0, 0.0])
    _close(line.evaluate(0.5), [1.0, 2.0])
    _close(line(1.0), [2.0, 4.0])
    _close(line.evaluate_derivative(0.3), [2.0, 4.0])
    _close(line.evaluate_2nd_derivative(0.3), [0.0, 0.0])


def test_bezier_matches_bernstein_form():
    curve = _quadratic_bezier()
    for t in np.linspace(0.0, 1.0, 11):
        expected = np.array([2.0 * t, 4.0 * t * (1.0 - t)])
        _close(curve.evaluate(t), expected)
    _close(curve.evaluate_derivative(0.25), [2.0, 2.0])
    _close(curve.evaluate_2nd_derivative(0.6), [0.0, -8.0])
    _close(curve.evaluate_derivatives(0.6, 3), [0.0, 0.0])


def test_matches_scipy_reference():
    interpolate = pytest.importorskip("scipy.interpolate")
    curve = _cubic_3d()
    reference = interpolate.BSpline(curve.get_knots(), curve.get_control_points(), 3)
    first = reference.derivative(1)
    second = reference.derivative(2)
    for t in np.linspace(0.0, 1.0, 23):
        _close(curve.evaluate(t), reference(t), 1e-12)
        _close(curve.evaluate_derivative(t), first(t), 1e-9)
        _close(curve.evaluate_2nd_derivative(t), second(t), 1e-8)


def test_knot_insertion_preserves_shape():
    curve = _cubic_3d()
    before = [curve.evaluate(t) for t in np.linspace(0.0, 1.0, 31)]
    curve.insert_knot(0.5, 2)
    assert curve.get_num_control_points() == 8
    assert len(curve.get_knots()) == 12
    assert np.count_nonzero(curve.get_knots() == 0.5) == 2
    after = [curve.evaluate(t) for t in np.linspace(0.0, 1.0, 31)]
    for a, b in zip(before, after):
        _close(a, b, 1e-12)


def test_knot_insertion_at_existing_knot():
    curve = _cubic_3d()
    before = [curve.evaluate(t) for t in np.linspace(0.0, 1.0, 17)]
    curve.insert_knot(0.3)
    assert np.count_nonzero(curve.get_knots() == 0.3) == 2
    for t, point in zip(np.linspace(0.0, 1.0, 17), before):
        _close(curve.evaluate(t), point, 1e-12)


def test_outside_domain():
    curve = _quadratic_bezier()
    with pytest.raises(ArgumentOutsideDomainError):
        curve.evaluate(1.5)
    with pytest.raises(ArgumentOutsideDomainError):
        curve.evaluate_derivative(-0.1)
    with pytest.raises(ArgumentOutsideDomainError):
        curve.insert_knot(2.0)
    # Round-off just past the end is clamped
    _close(curve.evaluate(1.0 + 1e-15), [2.0, 0.0])


def test_invalid_settings():
    with pytest.raises(InvalidSettingError):
        BSpline().evaluate(0.0)
    with pytest.raises(InvalidSettingError):
        BSpline([[0.0], [1.0]]).evaluate(0.0)
    with pytest.raises(InvalidSettingError):
        BSpline([[0.0], [1.0]], [0.0, 0.0, 1.0, 1.0], 2).evaluate(0.5)
    with pytest.raises(InvalidSettingError):
        BSpline([[0.0], [1.0]], [0.0, 1.0, 0.5, 1.0]).evaluate(0.5)
    with pytest.raises(ValueError):
        BSpline([[[0.0]]])


def test_inverse_evaluate_on_curve():
    curve = _cubic_3d()
    for t in (0.05, 0.31, 0.5, 0.82, 1.0):
        found = curve.inverse_evaluate(curve.evaluate(t))
        _close(curve.evaluate(found), curve.evaluate(t), 1e-9)


def test_inverse_evaluate_projects_and_respects_bounds():
    line = BSpline([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]], [0.0, 0.0, 1.0, 1.0])
    assert line.inverse_evaluate([0.5, 1.0, 0.0]) == pytest.approx(0.25, abs=1e-12)
    t = line.inverse_evaluate([1.8, 1.0, 0.0], 0.0, 0.5)
    assert 0.0 <= t <= 0.5
    assert t == pytest.approx(0.5)
    with pytest.raises(ValueError):
        line.inverse_evaluate([0.0, 0.0, 0.0], 0.6, 0.4)


def test_clone_is_independent():
    curve = _cubic_3d()
    copy = curve.clone()
    copy.insert_knot(0.5)
    assert curve.get_num_control_points() == 6
    assert copy.get_num_control_points() == 7
    assert copy.get_curve_type() is CurveType.BSPLINE
    assert copy.get_degree() == 3


@pytest.mark.parametrize("target", [[1.0, 3.0], [1.0, 0.9], [1.0, 5.0]])
def test_inverse_evaluate_off_curve_at_apex(target):
    # The parabola (2t, 4t(1 - t)) is symmetric about t = 0.5, so targets above or just below its apex project there.
    curve = _quadratic_bezier()
    t = curve.inverse_evaluate(target)
    assert t == pytest.approx(0.5, abs=1e-12)
    residual = curve.evaluate(t) - np.array(target)
    assert curve.evaluate_derivative(t) @ residual == pytest.approx(0.0, abs=1e-12)


def test_inverse_evaluate_off_curve_matches_foot_point():
    curve = _cubic_3d()
    t0 = 0.41
    tangent = curve.evaluate_derivative(t0)
    normal = np.cross(tangent, [0.0, 0.0, 1.0])
    normal -= (normal @ tangent) / (tangent @ tangent) * tangent
    target = curve.evaluate(t0) + 1.0e-3 * normal / np.linalg.norm(normal)
    t = curve.inverse_evaluate(target, 0.3, 0.5)
    assert t == pytest.approx(t0, abs=1e-10)
