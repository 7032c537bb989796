################################################################################
# Copyright (c) 2026, National Research Foundation (SARAO)
#
# Licensed under the BSD 3-Clause License (the "License"); you may not use
# this file except in compliance with the License. You may obtain a copy
# of the License at
#
#   https://opensource.org/licenses/BSD-3-Clause
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
################################################################################

"""Tests for the tropospheric delay module."""

import math
from dataclasses import FrozenInstanceError

import astropy.units as u
import numpy as np
import pytest
from astropy.coordinates import EarthLocation

import gnsstropo
from gnsstropo import GeodeticPosition, LookAngle, Timestamp
from gnsstropo.troposphere.delay import (
    DELAY_MAX_HEIGHT,
    DELAY_MIN_HEIGHT,
    SaastamoinenZenithDelay,
    TroposphericDelay,
    saastamoinen_delay,
    standard_atmosphere,
)


def _reference_delay(latitude, height, elevation, humidity):
    """Evaluate standard atmosphere and Saastamoinen model one step at a time."""
    hgt = max(height, 0.0)
    pres = 1013.25 * math.pow(1.0 - 2.2557e-5 * hgt, 5.2568)
    temp = 15.0 - 6.5e-3 * hgt + 273.16
    e = 6.108 * humidity * math.exp((17.15 * temp - 4684.0) / (temp - 38.45))
    z = math.pi / 2.0 - elevation
    trph = (
        0.0022768
        * pres
        / (1.0 - 0.00266 * math.cos(2.0 * latitude) - 0.00028 * hgt / 1e3)
        / math.cos(z)
    )
    trpw = 0.002277 * (1255.0 / temp + 0.05) * e / math.cos(z)
    return trph + trpw


def test_standard_atmosphere_at_sea_level():
    """The standard atmosphere has textbook values at sea level."""
    pressure, temperature, vapour_pressure = standard_atmosphere(0.0, 0.0)
    assert pressure == 1013.25
    assert temperature == pytest.approx(288.16, abs=1e-12)
    assert vapour_pressure == 0.0
    # Sites below the ellipsoid get the sea-level atmosphere
    assert standard_atmosphere(-50.0, 0.5) == standard_atmosphere(0.0, 0.5)


def test_standard_atmosphere_profile():
    """Pressure and temperature drop with height, vapour pressure scales with RH."""
    heights = np.array([0.0, 500.0, 2000.0, 8000.0])
    pressure, temperature, vapour_pressure = standard_atmosphere(heights, 0.5)
    assert np.all(np.diff(pressure) < 0)
    assert np.all(np.diff(temperature) < 0)
    _, _, saturated = standard_atmosphere(heights, 1.0)
    np.testing.assert_allclose(vapour_pressure, 0.5 * saturated, rtol=1e-15)


def test_delay_fixture():
    """Check delay at mid-latitude site against a step-by-step evaluation."""
    position = GeodeticPosition.from_degrees(45.0, 0.0, 0.0)
    look_angle = LookAngle.from_degrees(0.0, 30.0)
    timestamp = Timestamp("2021-04-10")
    assert timestamp.day_of_year == pytest.approx(100.0, abs=1e-9)
    actual = saastamoinen_delay(timestamp, position, look_angle, 0.7)
    expected = _reference_delay(np.radians(45.0), 0.0, np.radians(30.0), 0.7)
    assert actual == pytest.approx(expected, abs=1e-6)
    # About 2.3 m hydrostatic + 0.12 m wet at zenith, doubled at 30 degrees
    assert 4.8 < actual < 4.9


@pytest.mark.parametrize(
    "latitude,height,elevation,humidity",
    [
        (-30.7, 1086.6, 15.0, 0.2),
        (0.0, 9999.0, 5.0, 1.0),
        (78.2, -80.0, 60.0, 0.5),
        (-89.0, 10.0, 89.0, 0.0),
    ],
)
def test_delay_against_reference(latitude, height, elevation, humidity):
    """Check delay for a variety of sites against a step-by-step evaluation."""
    position = GeodeticPosition.from_degrees(latitude, 20.0, height)
    look_angle = LookAngle.from_degrees(123.0, elevation)
    actual = saastamoinen_delay(None, position, look_angle, humidity)
    expected = _reference_delay(
        np.radians(latitude), height, np.radians(elevation), humidity
    )
    assert actual == pytest.approx(expected, rel=1e-12)


@pytest.mark.parametrize("elevation", [0.0, -1e-9, -0.1, -np.pi / 2])
def test_delay_below_horizon(elevation):
    """Satellites that are not above the horizon get no correction."""
    position = GeodeticPosition.from_degrees(45.0, 0.0, 100.0)
    look_angle = LookAngle(0.0, elevation)
    assert saastamoinen_delay(None, position, look_angle, 0.5) == 0.0


@pytest.mark.parametrize("height", [-100.001, -1000.0, 10000.001, 5e4, 1e6])
@pytest.mark.parametrize("humidity", [0.0, 0.5, 1.0])
def test_delay_height_out_of_range(height, humidity):
    """Receivers outside the valid height range get no correction."""
    position = GeodeticPosition.from_degrees(-20.0, 100.0, height)
    look_angle = LookAngle.from_degrees(0.0, 45.0)
    assert saastamoinen_delay(None, position, look_angle, humidity) == 0.0


def test_delay_height_limits():
    """The valid height range includes its end points."""
    look_angle = LookAngle.from_degrees(0.0, 45.0)
    for height in (-100.0, 10000.0):
        position = GeodeticPosition.from_degrees(-20.0, 100.0, height)
        assert saastamoinen_delay(None, position, look_angle, 0.5) > 0.0


def test_delay_arrays():
    """Array inputs are evaluated element-wise without floating-point warnings."""
    heights = np.array([0.0, -200.0, 500.0, 2e4, 1500.0])
    elevations = np.radians([30.0, 30.0, -10.0, 30.0, 0.0])
    position = GeodeticPosition(np.radians(-33.9), np.radians(18.4), heights)
    look_angle = LookAngle(np.zeros_like(elevations), elevations)
    with np.errstate(divide="raise", invalid="raise"):
        actual = saastamoinen_delay(None, position, look_angle, 0.6)
    assert actual.shape == heights.shape
    np.testing.assert_array_equal(actual[1:], 0.0)
    expected = _reference_delay(np.radians(-33.9), 0.0, np.radians(30.0), 0.6)
    assert actual[0] == pytest.approx(expected, rel=1e-12)


def test_delay_increases_towards_horizon():
    """Delay grows strictly as the satellite sinks towards the horizon."""
    position = GeodeticPosition.from_degrees(52.0, 5.0, 30.0)
    elevations = np.radians(np.arange(90.0, 0.0, -0.5))
    look_angle = LookAngle(np.zeros_like(elevations), elevations)
    delays = saastamoinen_delay(None, position, look_angle, 0.7)
    assert np.all(np.diff(delays) > 0)
    assert np.all(np.isfinite(delays))


def test_delay_alias():
    """The package exposes the Saastamoinen model as its delay function."""
    assert gnsstropo.delay is saastamoinen_delay


def test_zenith_delay():
    """Zenith delays of the Quantity class match the plain function."""
    location = EarthLocation.from_geodetic(18.4 * u.deg, -33.9 * u.deg, 250 * u.m)
    zd = SaastamoinenZenithDelay(location)
    pressure, temperature, _ = standard_atmosphere(250.0, 0.0)
    position = GeodeticPosition.from_earth_location(location)
    zenith = LookAngle(0.0, np.pi / 2)
    expected_hydrostatic = saastamoinen_delay(None, position, zenith, 0.0)
    expected_total = saastamoinen_delay(None, position, zenith, 0.8)
    expected_wet = expected_total - expected_hydrostatic
    hydrostatic = zd.hydrostatic(pressure * u.hPa)
    assert hydrostatic.unit == u.m
    assert hydrostatic.value == pytest.approx(expected_hydrostatic, rel=1e-9)
    wet = zd.wet(temperature * u.K, 0.8)
    assert wet.unit == u.m
    assert wet.value == pytest.approx(expected_wet, rel=1e-9)
    # Check alternative units
    hydrostatic = zd.hydrostatic((pressure / 1000.0) * u.bar)
    assert hydrostatic.value == pytest.approx(expected_hydrostatic, rel=1e-9)
    wet = zd.wet((temperature - 273.15) * u.deg_C, 80 * u.percent)
    assert wet.to_value(u.m) == pytest.approx(expected_wet, rel=1e-9)


def test_tropospheric_delay_basic():
    """Test basic tropospheric delay properties."""
    with pytest.raises(TypeError):
        TroposphericDelay()  # pylint: disable=no-value-for-parameter
    location = EarthLocation.from_geodetic("18:25:00.0", "-33:55:00.0", "250.0")
    with pytest.raises(ValueError):
        TroposphericDelay(location, "bad_format")
    with pytest.raises(ValueError):
        TroposphericDelay(location, "unknown-components")
    with pytest.raises(ValueError):
        TroposphericDelay(location, "SaastamoinenZenithDelay-NiellMappingFunction-dry")
    tropo = TroposphericDelay(location)
    print(repr(tropo))
    location2 = EarthLocation.from_geodetic("18:25:00.0", "-33:55:00.0", "250.0")
    tropo2 = TroposphericDelay(location2)
    assert tropo == tropo2, "Tropospheric delay models should be equal by value"
    with pytest.raises(TypeError):
        hash(tropo)
    with pytest.raises(FrozenInstanceError):
        tropo.model_id = "it's frozen, so the model_id can't be changed"


_default_model = "SaastamoinenZenithDelay-NiellMappingFunction"


@pytest.mark.parametrize(
    "model_id", [_default_model, "SaastamoinenZenithDelay-GlobalMappingFunction"]
)
def test_tropospheric_delay_at_zenith(model_id):
    """At zenith the mapped delay equals the plain Saastamoinen delay."""
    location = EarthLocation.from_geodetic(27.7 * u.deg, -25.9 * u.deg, 0.0 * u.m)
    position = GeodeticPosition.from_earth_location(location)
    td = TroposphericDelay(location, model_id)
    actual = td(90 * u.deg, "2020-12-25", 0.4)
    expected = saastamoinen_delay(None, position, LookAngle(0.0, np.pi / 2), 0.4)
    assert actual.unit == u.m
    assert actual.value == pytest.approx(expected, rel=1e-9)


def test_tropospheric_delay_components():
    """Total delay is the sum of hydrostatic and wet delays."""
    location = EarthLocation.from_geodetic(-40.0 * u.deg, 35.0 * u.deg, 600.0 * u.m)
    elevation = np.arange(5.0, 91.0, 5.0) * u.deg
    timestamp = Timestamp("2019-01-28")
    total = TroposphericDelay(location)(elevation, timestamp, 0.5)
    hydrostatic = TroposphericDelay(location, _default_model + "-hydrostatic")
    wet = TroposphericDelay(location, _default_model + "-wet")
    parts = hydrostatic(elevation, timestamp, 0.5) + wet(elevation, timestamp, 0.5)
    np.testing.assert_allclose(total.value, parts.to_value(u.m), rtol=1e-12)
    # The wet delay vanishes in dry air
    dry_air = wet(elevation, timestamp, 0.0)
    np.testing.assert_array_equal(dry_air.value, 0.0)


def test_tropospheric_delay_mapping():
    """Mapped delay is close to plain Saastamoinen delay away from the horizon."""
    location = EarthLocation.from_geodetic(5.0 * u.deg, 52.0 * u.deg, 30.0 * u.m)
    position = GeodeticPosition.from_earth_location(location)
    elevation = np.arange(20.0, 90.0, 10.0) * u.deg
    actual = TroposphericDelay(location)(elevation, "2021-06-01", 0.7)
    look_angle = LookAngle(0.0, elevation.to_value(u.rad))
    expected = saastamoinen_delay(None, position, look_angle, 0.7)
    np.testing.assert_allclose(actual.to_value(u.m), expected, rtol=0.01)
    # No delay below the horizon
    assert TroposphericDelay(location)(-5 * u.deg, "2021-06-01", 0.7) == 0 * u.m


@pytest.mark.parametrize("height", [-150.0, 10500.0, 15000.0, 50000.0])
@pytest.mark.parametrize("component", ["", "-hydrostatic", "-wet"])
def test_tropospheric_delay_site_height_out_of_range(height, component):
    """Sites outside the valid height range get zero delay, not NaN."""
    location = EarthLocation.from_geodetic(0.0 * u.deg, 45.0 * u.deg, height * u.m)
    elevation = np.array([-5.0, 30.0, 90.0]) * u.deg
    with np.errstate(divide="raise", invalid="raise", over="raise"):
        td = TroposphericDelay(location, _default_model + component)
        actual = td(elevation, "2021-04-10", 0.5)
    assert actual.unit == u.m
    np.testing.assert_array_equal(actual.value, 0.0)


def test_tropospheric_delay_site_height_limits():
    """Sites at the edges of the valid height range still get a delay."""
    for height in (DELAY_MIN_HEIGHT, DELAY_MAX_HEIGHT):
        location = EarthLocation.from_geodetic(0.0 * u.deg, 45.0 * u.deg, height * u.m)
        actual = TroposphericDelay(location)(30.0 * u.deg, "2021-04-10", 0.5)
        assert np.isfinite(actual.value)
        assert actual.value > 0.0
