"""Geodesic distance on the WGS84 ellipsoid.

Uses Vincenty's inverse formula. The iteration on lambda can fail to settle
for nearly antipodal points, which surfaces as ConvergenceError instead of a
silently wrong distance.
"""

from __future__ import annotations

import math

from pyproj import Geod

from designee_finder.common.constants import METERS_PER_STATUTE_MILE
from designee_finder.common.errors import ConvergenceError
from designee_finder.common.models import Coordinate

WGS84 = Geod(ellps="WGS84")
MAX_ITERATIONS = 200
CONVERGENCE_THRESHOLD = 1e-12


def vincenty_meters(
    origin: Coordinate,
    destination: Coordinate,
    *,
    geod: Geod = WGS84,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    a = geod.a
    f = geod.f
    b = geod.b

    big_l = math.radians(destination.longitude - origin.longitude)
    u1 = math.atan((1 - f) * math.tan(math.radians(origin.latitude)))
    u2 = math.atan((1 - f) * math.tan(math.radians(destination.latitude)))
    sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
    sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

    lam = big_l
    for _ in range(max_iterations):
        sin_lam, cos_lam = math.sin(lam), math.cos(lam)
        sin_sigma = math.hypot(cos_u2 * sin_lam, cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam)
        if sin_sigma == 0:
            # Coincident points.
            return 0.0
        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)
        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos_sq_alpha = 1 - sin_alpha**2
        # Equatorial line: cos_sq_alpha is zero.
        cos_2sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha if cos_sq_alpha != 0 else 0.0
        c = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
        lam_prev = lam
        lam = big_l + (1 - c) * f * sin_alpha * (
            sigma + c * sin_sigma * (cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m**2))
        )
        if abs(lam - lam_prev) < CONVERGENCE_THRESHOLD:
            break
    else:
        raise ConvergenceError(
            f"Vincenty formula failed to converge between "
            f"({origin.latitude}, {origin.longitude}) and ({destination.latitude}, {destination.longitude})"
        )

    u_sq = cos_sq_alpha * (a**2 - b**2) / b**2
    big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
    delta_sigma = big_b * sin_sigma * (
        cos_2sigma_m
        + big_b
        / 4
        * (
            cos_sigma * (-1 + 2 * cos_2sigma_m**2)
            - big_b / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma**2) * (-3 + 4 * cos_2sigma_m**2)
        )
    )
    return b * big_a * (sigma - delta_sigma)


def vincenty_miles(origin: Coordinate, destination: Coordinate, **kwargs) -> float:
    return vincenty_meters(origin, destination, **kwargs) / METERS_PER_STATUTE_MILE
