import math

import numpy as np
import pytest

from nurbspy import NURBS, BSpline, CurveType, InvalidSettingError, NotSupportedError


def _close(a, b, tol=1e-10):
    assert np.linalg.norm(np.asarray(a) - np.asarray(b)) <= tol


def _quarter_circle():
    ctrl = [[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    weights = [1.0, math.sqrt(0.5), 1.0]
    return NURBS(ctrl, weights, [0.0, 0.0, 0.0, 1.0, 1.0, 1.0], 2)


def _rational_cubic():
    ctrl = [
        [0.0, 0.0, 0.0],
        [1.0, 2.0, 0.5],
        [2.0, -1.0, 1.0],
        [3.0, 0.5, -0.5],
        [4.0, 2.0, 0.0],
    ]
    weights = [1.0, 2.0, 0.5, 1.5, 1.0]
    knots = [0.0, 0.0, 0.0, 0.0, 0.4, 1.0, 1.0, 1.0, 1.0]
    return NURBS(ctrl, weights, knots, 3)


def test_unit_weights_match_polynomial_bspline():
    ctrl = [[0.0, 0.0, 0.0], [1.0, 2.0, 0.5], [2.0, -1.0, 1.0], [3.0, 0.5, -0.5]]
    knots = [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0]
    curve = NURBS(ctrl, np.ones(4), knots)
    polynomial = BSpline(ctrl, knots)
    for t in np.linspace(0.0, 1.0, 21):
        _close(curve.evaluate(t), polynomial.evaluate(t), 1e-12)
        _close(curve.evaluate_derivative(t), polynomial.evaluate_derivative(t), 1e-10)


def test_unit_weights_match_scipy_reference():
    interpolate = pytest.importorskip("scipy.interpolate")
    ctrl = np.array([[0.0, 1.0], [1.0, 3.0], [2.0, -1.0], [4.0, 0.0], [5.0, 2.0]])
    knots = np.array([0.0, 0.0, 0.0, 0.3, 0.6, 1.0, 1.0, 1.0])
    curve = NURBS(ctrl, np.ones(5), knots)
    reference = interpolate.BSpline(knots, ctrl, 2)
    for t in np.linspace(0.0, 1.0, 13):
        _close(curve.evaluate(t), reference(t), 1e-12)


def test_quarter_circle_is_exact():
    curve = _quarter_circle()
    for t in np.linspace(0.0, 1.0, 25):
        assert np.linalg.norm(curve.evaluate(t)) == pytest.approx(1.0, abs=1e-14)
    _close(curve.evaluate(0.5), [math.sqrt(0.5), math.sqrt(0.5)], 1e-14)
    _close(curve.evaluate_derivative(0.0), [0.0, math.sqrt(2.0)], 1e-12)
    _close(curve.evaluate_derivative(1.0), [-math.sqrt(2.0), 0.0], 1e-12)


def test_derivative_matches_finite_differences():
    curve = _rational_cubic()
    for t in (0.1, 0.35, 0.4, 0.62, 0.9):
        h = 1.0e-6
        estimate = (curve.evaluate(t + h) - curve.evaluate(t - h)) / (2.0 * h)
        _close(curve.evaluate_derivative(t), estimate, 1e-6)


def test_finite_difference_error_shrinks():
    curve = _quarter_circle()
    t = 0.3
    derivative = curve.evaluate_derivative(t)
    errors = [np.linalg.norm((curve.evaluate(t + h) - curve.evaluate(t)) / h - derivative) for h in (1e-2, 1e-3, 1e-4)]
    assert errors[0] > errors[1] > errors[2]


def test_knot_insertion_preserves_shape():
    for curve in (_quarter_circle(), _rational_cubic()):
        samples = np.linspace(0.0, 1.0, 29)
        before = [curve.evaluate(t) for t in samples]
        count = curve.get_num_control_points()
        curve.insert_knot(0.55, 2)
        assert curve.get_num_control_points() == count + 2
        assert len(curve.get_weights()) == count + 2
        assert len(curve.get_knots()) == count + 2 + curve.get_degree() + 1
        assert np.all(curve.get_weights() > 0.0)
        for t, point in zip(samples, before):
            _close(curve.evaluate(t), point, 1e-12)


def test_knot_insertion_keeps_homogeneous_consistent():
    curve = _quarter_circle()
    curve.insert_knot(0.25)
    homogeneous = curve.get_homogeneous().get_control_points()
    _close(homogeneous[:, :-1], curve.get_control_points() * curve.get_weights()[:, np.newaxis], 1e-14)
    _close(homogeneous[:, -1], curve.get_weights(), 1e-14)
    _close(curve.get_homogeneous().get_knots(), curve.get_knots(), 0.0)


def test_homogeneous_round_trip():
    curve = _rational_cubic()
    homogeneous = curve.get_homogeneous()
    assert homogeneous.get_dimension() == 4
    _close(homogeneous.get_control_points()[:, 3], curve.get_weights(), 0.0)

    other = NURBS()
    other.set_homogeneous(homogeneous)
    _close(other.get_control_points(), curve.get_control_points(), 1e-14)
    _close(other.get_weights(), curve.get_weights(), 1e-14)
    _close(other.get_knots(), curve.get_knots(), 0.0)
    for t in np.linspace(0.0, 1.0, 9):
        _close(other.evaluate(t), curve.evaluate(t), 1e-14)


def test_homogeneous_is_not_shared():
    curve = _quarter_circle()
    homogeneous = curve.get_homogeneous()
    homogeneous.insert_knot(0.5)
    assert curve.get_num_control_points() == 3


def test_unsupported_operations():
    curve = _quarter_circle()
    with pytest.raises(NotSupportedError):
        curve.evaluate_2nd_derivative(0.5)
    with pytest.raises(NotImplementedError):
        curve.inverse_evaluate([1.0, 0.0])


def test_uninitialized_queries_fail():
    curve = NURBS()
    with pytest.raises(InvalidSettingError):
        curve.evaluate(0.0)
    with pytest.raises(InvalidSettingError):
        curve.insert_knot(0.5)
    with pytest.raises(InvalidSettingError):
        curve.initialize()

    mismatched = NURBS([[0.0, 0.0], [1.0, 1.0], [2.0, 0.0]], [1.0, 1.0], [0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
    with pytest.raises(InvalidSettingError):
        mismatched.evaluate(0.5)
    with pytest.raises(InvalidSettingError):
        mismatched.evaluate_derivative(0.5)
    with pytest.raises(InvalidSettingError):
        mismatched.initialize()
    mismatched.set_weights([1.0, 1.0, 1.0])
    _close(mismatched.evaluate(0.5), [1.0, 0.5])


def test_staged_updates_rebuild_homogeneous():
    curve = _quarter_circle()
    curve.set_control_points([[0.0, 0.0], [1.0, 1.0], [2.0, 1.0], [3.0, 0.0]])
    with pytest.raises(InvalidSettingError):
        curve.evaluate(0.5)
    curve.set_weights([1.0, 1.0, 1.0, 1.0])
    with pytest.raises(InvalidSettingError):
        curve.evaluate(0.5)
    curve.set_knots([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
    assert curve.get_homogeneous().get_num_control_points() == 4
    _close(curve.evaluate(0.0), [0.0, 0.0])
    _close(curve.evaluate(1.0), [3.0, 0.0])


def test_weights_must_be_positive():
    with pytest.raises(InvalidSettingError):
        NURBS([[0.0], [1.0]], [1.0, 0.0], [0.0, 0.0, 1.0, 1.0])
    curve = _quarter_circle()
    with pytest.raises(InvalidSettingError):
        curve.set_weights([1.0, -1.0, 1.0])


def test_clone_and_type():
    curve = _quarter_circle()
    copy = curve.clone()
    copy.insert_knot(0.5)
    assert curve.get_num_control_points() == 3
    assert copy.get_num_control_points() == 4
    assert copy.get_curve_type() is CurveType.NURBS
    _close(copy.evaluate(0.7), curve.evaluate(0.7), 1e-14)
