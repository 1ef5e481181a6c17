import logging
import numpy as np
from nurbspy.error import NotSupportedError

zeroCosineTolerance = 1.0e-12
"""Iteration stops once the residual is this close to perpendicular to every tangent (a local closest point)."""

lineSearchHalvings = 30
"""A refinement step is halved at most this many times while it increases the distance."""

def constrain(value, lower, upper, periodic = False, periodLower = None, periodUpper = None):
    # Periodic values outside the box shift by whole periods to the representative nearest the box, then everything is clamped.
    if periodic and periodLower is not None and periodUpper is not None and (value < lower or value > upper):
        period = periodUpper - periodLower
        if period > 0.0:
            value = lower + (value - lower) % period
            if value > upper and value - upper > lower - (value - period):
                value -= period
    return float(min(upper, max(lower, value)))

def _perpendicular(tangent, residual, distance):
    length = np.linalg.norm(tangent)
    return length == 0.0 or abs(tangent @ residual) <= zeroCosineTolerance * length * distance

def _difference_step(x, lower, upper):
    h = np.sqrt(np.finfo(float).eps) * max(1.0, abs(x))
    return h if x + h <= upper else -h

def _curve_second_derivative(curve, t, d, dom):
    try:
        return curve.evaluate_2nd_derivative(t)
    except NotSupportedError:
        # Rational curves have no analytic second derivative here: difference the first derivative.
        h = _difference_step(t, dom[0], dom[1])
        return (curve.evaluate_derivative(t + h) - d) / h

def _patch_second_partials(patch, uv, jacobian):
    try:
        return (patch.evaluate_2nd_derivative_uu(*uv), patch.evaluate_2nd_derivative_uv(*uv),
            patch.evaluate_2nd_derivative_vv(*uv))
    except NotSupportedError:
        # Profiles without second derivatives (NURBS): difference the first partials.
        hu = _difference_step(uv[0], patch.get_u_lower_bound(), patch.get_u_upper_bound())
        hv = _difference_step(uv[1], patch.get_v_lower_bound(), patch.get_v_upper_bound())
        uu = (patch.evaluate_derivative_u(uv[0] + hu, uv[1]) - jacobian[:, 0]) / hu
        uvTerm = (patch.evaluate_derivative_v(uv[0] + hu, uv[1]) - jacobian[:, 1]) / hu
        vv = (patch.evaluate_derivative_v(uv[0], uv[1] + hv) - jacobian[:, 1]) / hv
        return uu, uvTerm, vv

def approximate_curve_inverse(curve, point, numSamples, lower, upper, numIterations):
    point = np.asarray(point, float)
    left, right = lower, upper
    bestT = lower
    for _ in range(numIterations + 1):
        ts = np.linspace(left, right, numSamples)
        distances = [np.linalg.norm(curve.evaluate(t) - point) for t in ts]
        i = int(np.argmin(distances))
        bestT = float(ts[i])
        step = (right - left) / (numSamples - 1)
        left, right = max(lower, bestT - step), min(upper, bestT + step)
        if right - left <= 0.0:
            break
    return bestT

def curve_newton_raphson(curve, point, t, numIterations, tolerance, lower, upper):
    point = np.asarray(point, float)
    dom = curve.get_domain()
    periodic = curve.get_periodic()
    slack = tolerance * (1.0 + np.linalg.norm(point))
    t = constrain(t, lower, upper)
    residual = curve.evaluate(t) - point
    distance = np.linalg.norm(residual)
    for iteration in range(numIterations):
        if distance <= tolerance:
            break
        d = curve.evaluate_derivative(t)
        if _perpendicular(d, residual, distance):
            break

        # Newton step on half the squared distance, or Gauss-Newton where the curvature term makes it non-convex.
        dd = d @ d
        hessian = dd + residual @ _curve_second_derivative(curve, t, d, dom)
        step = -(d @ residual) / (hessian if hessian > 0.0 else dd)
        for _ in range(lineSearchHalvings):
            nextT = constrain(t + step, lower, upper, periodic, dom[0], dom[1])
            nextResidual = curve.evaluate(nextT) - point
            nextDistance = np.linalg.norm(nextResidual)
            if nextDistance <= distance + slack:
                break
            step *= 0.5
        else:
            logging.debug(f"curve inverse line search stalled at {t}, distance {distance}")
            break
        moved = abs(nextT - t) * np.sqrt(dd)
        t, residual, distance = nextT, nextResidual, nextDistance
        if moved <= tolerance:
            break
    else:
        logging.info(f"curve inverse did not converge in {numIterations} iterations, distance {distance}")
    return t

def approximate_patch_inverse(patch, point, numSamples, uMin, uMax, vMin, vMax, numIterations):
    point = np.asarray(point, float)
    uLeft, uRight, vLeft, vRight = uMin, uMax, vMin, vMax
    best = np.array([uMin, vMin])
    for _ in range(numIterations + 1):
        us = np.linspace(uLeft, uRight, numSamples)
        vs = np.linspace(vLeft, vRight, numSamples)
        bestDistance = np.inf
        for u in us:
            for v in vs:
                distance = np.linalg.norm(patch.evaluate(u, v) - point)
                if distance < bestDistance:
                    bestDistance = distance
                    best = np.array([u, v])
        uStep = (uRight - uLeft) / (numSamples - 1)
        vStep = (vRight - vLeft) / (numSamples - 1)
        uLeft, uRight = max(uMin, best[0] - uStep), min(uMax, best[0] + uStep)
        vLeft, vRight = max(vMin, best[1] - vStep), min(vMax, best[1] + vStep)
    logging.debug(f"patch inverse seed {best}, distance {bestDistance}")
    return best

def patch_newton_raphson(patch, point, uv, numIterations, tolerance, uMin, uMax, vMin, vMax):
    point = np.asarray(point, float)
    uPeriodic = (patch.get_periodic_u(), patch.get_u_lower_bound(), patch.get_u_upper_bound())
    vPeriodic = (patch.get_periodic_v(), patch.get_v_lower_bound(), patch.get_v_upper_bound())
    slack = tolerance * (1.0 + np.linalg.norm(point))
    uv = np.array([constrain(uv[0], uMin, uMax), constrain(uv[1], vMin, vMax)])
    residual = patch.evaluate(*uv) - point
    distance = np.linalg.norm(residual)
    for iteration in range(numIterations):
        if distance <= tolerance:
            break
        jacobian = np.column_stack((patch.evaluate_derivative_u(*uv), patch.evaluate_derivative_v(*uv)))
        if _perpendicular(jacobian[:, 0], residual, distance) and _perpendicular(jacobian[:, 1], residual, distance):
            break

        # Newton step on half the squared distance: J^T J plus the residual weighted second partials.
        uu, uvTerm, vv = _patch_second_partials(patch, uv, jacobian)
        hessian = jacobian.T @ jacobian + np.array([[residual @ uu, residual @ uvTerm],
                                                    [residual @ uvTerm, residual @ vv]])
        try:
            np.linalg.cholesky(hessian)
            system = (hessian, -(jacobian.T @ residual))
        except np.linalg.LinAlgError:
            # Not positive definite (far from a minimum, or a singular Jacobian on a rotation axis): Gauss-Newton.
            system = (jacobian, -residual)
        step = np.linalg.lstsq(*system, rcond = None)[0]
        for _ in range(lineSearchHalvings):
            nextUV = np.array([constrain(uv[0] + step[0], uMin, uMax, *uPeriodic),
                               constrain(uv[1] + step[1], vMin, vMax, *vPeriodic)])
            nextResidual = patch.evaluate(*nextUV) - point
            nextDistance = np.linalg.norm(nextResidual)
            if nextDistance <= distance + slack:
                break
            step = 0.5 * step
        else:
            logging.debug(f"patch inverse line search stalled at {uv}, distance {distance}")
            break
        moved = np.linalg.norm(jacobian @ (nextUV - uv))
        uv, residual, distance = nextUV, nextResidual, nextDistance
        if moved <= tolerance:
            break
    else:
        logging.info(f"patch inverse did not converge in {numIterations} iterations, distance {distance}")

    logging.debug(f"patch inverse result {uv}, distance {distance}")
    return uv
