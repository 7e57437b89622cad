import math

import numpy as np
import pytest

from physics import (
    CoordinateFormatError,
    calculate_orbit_points,
    convert_degrees_to_cartesian,
    convert_string_to_cartesian,
    is_valid_point,
    orbit_angle,
    parse_declination,
    parse_right_ascension,
)


def test_zero_ra_dec_lies_on_x_axis():
    result = convert_string_to_cartesian("0 0 0", "0", 10)
    assert result.ok
    assert np.allclose(result.point, [10, 0, 0])


def test_zero_dec_with_arcminutes_and_arcseconds():
    result = convert_string_to_cartesian("0 0 0", "0 0 0", 10)
    assert np.allclose(result.point, [10, 0, 0])


def test_six_hours_is_quarter_turn_counter_clockwise():
    # 6h * 15 = 90 degrees -> +Y
    result = convert_string_to_cartesian("6 0 0", "0", 7)
    assert result.ok
    assert np.allclose(result.point, [0, 7, 0], atol=1e-9)


def test_twelve_hours_points_to_negative_x():
    result = convert_string_to_cartesian("12 0 0", "0", 3)
    assert np.allclose(result.point, [-3, 0, 0], atol=1e-9)


def test_dec_ninety_is_pole():
    result = convert_string_to_cartesian("5 30 0", "+90", 4)
    assert np.allclose(result.point, [0, 0, 4], atol=1e-9)


@pytest.mark.parametrize("ra,dec,distance", [
    ("10 20 30.0", "+5", 50.0),
    ("23 59 59.9", "-89 59 59", 1.0),
    ("3 07 12.5", "-12 30 00", 2105.0),
    ("18 00 00", "+66 33 38.6", 0.25),
])
def test_result_lies_on_sphere_of_given_radius(ra, dec, distance):
    result = convert_string_to_cartesian(ra, dec, distance)
    assert result.ok
    assert np.linalg.norm(result.point) == pytest.approx(distance)


def test_malformed_ra_returns_nan_sentinel():
    result = convert_string_to_cartesian("10 20", "+5", 10)
    assert not result.ok
    assert "RA" in result.error
    assert np.all(np.isnan(result.point))


def test_empty_dec_returns_nan_sentinel():
    result = convert_string_to_cartesian("10 20 30", "", 10)
    assert not result.ok
    assert np.all(np.isnan(result.point))


def test_non_numeric_component_returns_nan_sentinel():
    result = convert_string_to_cartesian("10 20 xx", "+5", 10)
    assert not result.ok
    assert not is_valid_point(result.point)


@pytest.mark.parametrize("ra,dec", [
    ("nan 0 0", "+5"),
    ("10 20 30", "inf"),
    ("10 infinity 30", "+5"),
    ("10 20 30", "-5 NaN 0"),
])
def test_non_finite_component_is_a_format_error(ra, dec):
    result = convert_string_to_cartesian(ra, dec, 10)
    assert not result.ok
    assert "non-finite" in result.error
    assert np.all(np.isnan(result.point))


def test_parsers_reject_non_finite_components():
    with pytest.raises(CoordinateFormatError):
        parse_right_ascension("1 2 inf")
    with pytest.raises(CoordinateFormatError):
        parse_declination("nan")


def test_none_input_does_not_raise():
    result = convert_string_to_cartesian(None, None, 10)
    assert not result.ok


def test_conversion_is_deterministic():
    first = convert_string_to_cartesian("10 20 30.0", "+5 00 00", 50)
    second = convert_string_to_cartesian("10 20 30.0", "+5 00 00", 50)
    assert np.array_equal(first.point, second.point)


def test_string_and_degree_entry_points_agree():
    from_strings = convert_string_to_cartesian("12 0 0", "+45", 9)
    from_degrees = convert_degrees_to_cartesian(180, 45, 9)
    assert np.allclose(from_strings.point, from_degrees)


def test_degrees_entry_point():
    assert np.allclose(convert_degrees_to_cartesian(90, 0, 5), [0, 5, 0], atol=1e-9)
    assert np.allclose(convert_degrees_to_cartesian(0, -90, 5), [0, 0, -5], atol=1e-9)


def test_parse_right_ascension():
    assert parse_right_ascension("10 20 30.0") == pytest.approx(10 + 20 / 60 + 30 / 3600)
    with pytest.raises(CoordinateFormatError):
        parse_right_ascension("10")


def test_parse_declination_sign_applies_to_all_components():
    assert parse_declination("-0 30 00") == pytest.approx(-0.5)
    assert parse_declination("-12 30 00") == pytest.approx(-12.5)
    assert parse_declination("+5") == pytest.approx(5.0)
    assert parse_declination("+05 30") == pytest.approx(5.5)


def test_is_valid_point():
    assert is_valid_point(np.array([1.0, 2.0, 3.0]))
    assert not is_valid_point(np.array([1.0, np.nan, 3.0]))
    assert not is_valid_point(np.array([np.inf, 0.0, 0.0]))
    assert not is_valid_point(None)


def test_orbit_angle():
    assert orbit_angle([0, 1, 0]) == pytest.approx(math.pi / 2)
    assert orbit_angle([-1, 0, 5]) == pytest.approx(math.pi)


def test_orbit_points_ring():
    points = calculate_orbit_points(20, rotation_rad=math.pi / 2, num_points=64)
    assert points.shape == (64, 3)
    assert np.allclose(np.linalg.norm(points, axis=1), 20)
    assert np.allclose(points[:, 2], 0)
    # First sample is rotated onto +Y
    assert np.allclose(points[0], [0, 20, 0], atol=1e-9)
    # Ring is centered on the origin
    assert np.allclose(points.mean(axis=0), [0, 0, 0], atol=1e-9)


def test_orbit_points_degenerate():
    assert calculate_orbit_points(None).shape == (0, 3)
    assert calculate_orbit_points(5, num_points=2).shape == (0, 3)
