import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

"""
PHYSICS MODULE
--------------
This module turns observed sky positions into 3D points the renderer can place.

Key Concepts:
1.  **Right Ascension (RA)**: The celestial "longitude". Ephemeris services give it in
    hours, minutes and seconds of time ("10 20 30.0"). One hour of RA is 15 degrees,
    so a full day of 24h sweeps the full 360 degrees.
    - RA is used as the azimuth angle, measured counter-clockwise from +X in the XY plane.

2.  **Declination (Dec)**: The celestial "latitude", in degrees with optional arcminutes
    and arcseconds ("+5 00 00" or just "+5").
    - Dec is used as the elevation angle above the XY plane.

3.  **Projection**: With both angles in radians and a radial distance d:
        x = d * cos(dec) * cos(ra)
        y = d * cos(dec) * sin(ra)
        z = d * sin(dec)
    Every result lies on a sphere of radius d around the origin.

4.  **Orbit Rings**: Orbits are drawn as flat circles in the XY plane. After a body moves,
    its ring is spun about the Z axis so that the ring's start point faces the body.
"""

logger = logging.getLogger(__name__)

HOURS_TO_DEGREES = 15.0
ORIGIN = np.array([0.0, 0.0, 0.0])
INVALID_POINT = np.array([np.nan, np.nan, np.nan])


class CoordinateFormatError(ValueError):
    """Raised when an RA or Dec string cannot be read as sexagesimal components."""


@dataclass(frozen=True)
class Conversion:
    """
    Result of a sexagesimal conversion.

    Either `ok` is True and `point` holds finite (x, y, z), or `ok` is False,
    `error` says why and `point` is the all-NaN sentinel.
    """
    point: np.ndarray
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None

    @classmethod
    def failed(cls, error):
        return cls(point=INVALID_POINT.copy(), error=error)


def _split_components(text, label):
    if text is None:
        raise CoordinateFormatError(f"{label} is missing")
    parts = str(text).split()
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise CoordinateFormatError(f"{label} has a non-numeric component: {text!r}") from None
    # float() happily reads "nan" and "inf"
    if not all(math.isfinite(v) for v in values):
        raise CoordinateFormatError(f"{label} has a non-finite component: {text!r}")
    return parts, values


def parse_right_ascension(ra):
    """
    Reads an RA string "H M S" and returns the total in hours.

    Raises:
        CoordinateFormatError: fewer than three components, or one of them is not a number.
    """
    parts, values = _split_components(ra, "RA")
    if len(values) < 3:
        raise CoordinateFormatError(f"RA needs hours, minutes and seconds, got {ra!r}")
    hours, minutes, seconds = values[:3]
    return hours + minutes / 60 + seconds / 3600


def parse_declination(dec):
    """
    Reads a Dec string "D", "D M" or "D M S" and returns the total in degrees.

    The sign written on the degrees token applies to the whole value, so "-0 30 00"
    is half a degree south, not half a degree north.

    Raises:
        CoordinateFormatError: no components, or one of them is not a number.
    """
    parts, values = _split_components(dec, "Dec")
    if len(values) < 1:
        raise CoordinateFormatError(f"Dec needs at least degrees, got {dec!r}")

    degrees = abs(values[0])
    if len(values) > 1:
        degrees += abs(values[1]) / 60
    if len(values) > 2:
        degrees += abs(values[2]) / 3600

    # math.copysign would miss "-0", so read the sign off the text itself
    if parts[0].startswith("-"):
        degrees = -degrees
    return degrees


def spherical_to_cartesian(ra_rad, dec_rad, distance):
    """Projects an (azimuth, elevation) pair in radians onto a sphere of radius `distance`."""
    cos_dec = np.cos(dec_rad)
    x = distance * cos_dec * np.cos(ra_rad)
    y = distance * cos_dec * np.sin(ra_rad)
    z = distance * np.sin(dec_rad)
    return np.array([x, y, z], dtype=float)


def convert_string_to_cartesian(ra, dec, distance):
    """
    Converts sexagesimal RA/Dec strings into a 3D point at `distance` from the origin.

    Steps:
    1. Parse RA into decimal hours, then hours * 15 -> degrees -> radians.
    2. Parse Dec into decimal degrees -> radians.
    3. Project onto the sphere.

    Never raises for badly formatted text. Check `result.ok` before using `result.point`.

    Args:
        ra (str): Right ascension, "H M S".
        dec (str): Declination, "D", "D M" or "D M S" (signed degrees).
        distance (float): Radius of the sphere in scene units.

    Returns:
        Conversion: tagged result holding the point or the format error.
    """
    try:
        ra_hours = parse_right_ascension(ra)
        dec_degrees = parse_declination(dec)
    except CoordinateFormatError as e:
        logger.warning(f"Invalid RA or Dec format: RA={ra}, Dec={dec} ({e})")
        return Conversion.failed(str(e))

    ra_rad = np.radians(ra_hours * HOURS_TO_DEGREES)
    dec_rad = np.radians(dec_degrees)
    return Conversion(point=spherical_to_cartesian(ra_rad, dec_rad, distance))


def convert_degrees_to_cartesian(ra_deg, dec_deg, distance):
    """Same projection as above, for RA and Dec already given in decimal degrees."""
    return spherical_to_cartesian(np.radians(ra_deg), np.radians(dec_deg), distance)


def is_valid_point(point):
    """True when the point has three components and all of them are finite."""
    if point is None:
        return False
    arr = np.asarray(point, dtype=float)
    return arr.shape == (3,) and bool(np.all(np.isfinite(arr)))


def orbit_angle(point):
    """Azimuth of a point around the Z axis, i.e. atan2(y, x), in radians."""
    return math.atan2(point[1], point[0])


def calculate_orbit_points(radius, rotation_rad=0.0, num_points=64, center=ORIGIN):
    """
    Generates the points of a circular orbit ring in the XY plane.

    The ring is sampled at `num_points` evenly spaced angles (the last point is not a
    repeat of the first; draw it as a closed loop), then rotated about Z by
    `rotation_rad` and shifted to `center`.

    Returns:
        np.ndarray: shape (num_points, 3).
    """
    if radius is None or num_points < 3:
        return np.empty((0, 3))

    angles = np.linspace(0, 2 * np.pi, num_points, endpoint=False) + rotation_rad
    x_coords = radius * np.cos(angles)
    y_coords = radius * np.sin(angles)
    z_coords = np.zeros(num_points)
    return np.array([x_coords, y_coords, z_coords]).T + np.asarray(center, dtype=float)
