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

"""Tropospheric delay model.

This predicts the excess path length of a satellite signal due to neutral
gas in the troposphere and stratosphere as a function of elevation angle,
based on a standard atmosphere at the receiver height and the formulas of
Saastamoinen.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

import astropy.units as u
import numpy as np
from astropy.coordinates import EarthLocation

from .mapping import GlobalMappingFunction, NiellMappingFunction

logger = logging.getLogger(__name__)

# Valid range of receiver heights above the ellipsoid, in metres
DELAY_MIN_HEIGHT = -100.0
DELAY_MAX_HEIGHT = 10000.0

_HYDROSTATIC_PATH_PER_PRESSURE = 2.2768 * u.m / u.bar
_WET_PATH_PER_PRESSURE = 2.277 * u.m / u.bar


def _saturation_pressure_hPa(temperature_K):
    """Saturation pressure of water vapour (Magnus-type formula), in hPa."""
    return 6.108 * np.exp((17.15 * temperature_K - 4684.0) / (temperature_K - 38.45))


def standard_atmosphere(height_m, relative_humidity):
    """Surface weather of the standard atmosphere at a given height.

    Parameters
    ----------
    height_m : float or array
        Height of receiver, in metres (negative heights are treated as zero)
    relative_humidity : float or array
        Relative humidity, as a fraction in range [0, 1]

    Returns
    -------
    pressure_hPa : float or array
        Total barometric pressure, in hectopascal
    temperature_K : float or array
        Air temperature, in kelvin
    vapour_pressure_hPa : float or array
        Partial pressure of water vapour, in hectopascal
    """
    height = np.maximum(height_m, 0.0)
    pressure = 1013.25 * (1.0 - 2.2557e-5 * height) ** 5.2568
    temperature = 15.0 - 6.5e-3 * height + 273.16
    vapour_pressure = relative_humidity * _saturation_pressure_hPa(temperature)
    return pressure, temperature, vapour_pressure


def saastamoinen_delay(timestamp, position, look_angle, relative_humidity):
    """Slant tropospheric delay of standard atmosphere and Saastamoinen model.

    Parameters
    ----------
    timestamp : :class:`~gnsstropo.Timestamp` or equivalent
        Epoch of observation (not used by this model)
    position : :class:`~gnsstropo.GeodeticPosition`
        Receiver position
    look_angle : :class:`~gnsstropo.LookAngle`
        Direction to satellite
    relative_humidity : float or array
        Relative humidity at receiver, as a fraction in range [0, 1]

    Returns
    -------
    delay : float or array
        Tropospheric delay, in metres. This is zero if the elevation is not
        positive or the height is outside the range `DELAY_MIN_HEIGHT` to
        `DELAY_MAX_HEIGHT`, which signals that no correction is available.

    Notes
    -----
    The slant delay is the zenith delay divided by the sine of the elevation,
    which grows without bound towards the horizon. Combine zenith delays with
    a proper mapping function (see :class:`TroposphericDelay`) for low
    elevations.
    """
    height = np.asarray(position.height, dtype=float)
    elevation = np.asarray(look_angle.elevation, dtype=float)
    in_range = (height >= DELAY_MIN_HEIGHT) & (height <= DELAY_MAX_HEIGHT)
    valid = in_range & (elevation > 0.0)
    # Evaluate rejected inputs at a harmless place and zero them afterwards
    height = np.clip(height, 0.0, DELAY_MAX_HEIGHT)
    elevation = np.where(valid, elevation, np.pi / 2)
    pressure, temperature, vapour_pressure = standard_atmosphere(
        height, relative_humidity
    )
    cos_z = np.cos(np.pi / 2 - elevation)
    gravity_correction = (
        1.0 - 0.00266 * np.cos(2.0 * position.latitude) - 0.00028 * height / 1e3
    )
    hydrostatic = 0.0022768 * pressure / gravity_correction / cos_z
    wet = 0.002277 * (1255.0 / temperature + 0.05) * vapour_pressure / cos_z
    return np.where(valid, hydrostatic + wet, 0.0)[()]


class SaastamoinenZenithDelay:
    """Zenith delay due to the neutral gas in the troposphere and stratosphere.

    This provides separate methods for the "dry" (hydrostatic) and "wet"
    (non-hydrostatic) components of the atmosphere.

    Parameters
    ----------
    location : :class:`~astropy.coordinates.EarthLocation`
        Location on Earth of receiver (used to correct local gravity)

    Notes
    -----
    This is based on the formulas of Saastamoinen [Saas1972]_. The saturation
    water vapour pressure follows a Magnus-type formula in terms of absolute
    temperature.

    References
    ----------
    .. [Saas1972] J. Saastamoinen, “Atmospheric correction for the troposphere
       and stratosphere in radio ranging satellites,” in The Use of Artificial
       Satellites for Geodesy (Geophysical Monograph Series), edited by
       S. W. Henriksen et al, Washington, D.C., vol. 15, pp. 247-251, 1972.
       DOI: 10.1029/GM015p0247
    """

    def __init__(self, location):
        # Reduce local gravity to the value at the centroid of the atmospheric column
        self._gravity_correction = (
            1.0 - 0.00266 * np.cos(2 * location.lat) - 0.00028 / u.km * location.height
        )

    @u.quantity_input
    def hydrostatic(self, pressure: u.hPa) -> u.m:
        """Zenith delay due to "dry" (hydrostatic) component of the atmosphere.

        Parameters
        ----------
        pressure : :class:`~astropy.units.Quantity`
            Total barometric pressure at surface

        Returns
        -------
        delay : :class:`~astropy.units.Quantity`
            Zenith delay due to hydrostatic component, as excess path length
        """
        return _HYDROSTATIC_PATH_PER_PRESSURE * pressure / self._gravity_correction

    @u.quantity_input(equivalencies=u.temperature())
    def wet(self, temperature: u.K, relative_humidity: u.dimensionless_unscaled) -> u.m:
        """Zenith delay due to "wet" (non-hydrostatic) component of atmosphere.

        Parameters
        ----------
        temperature : :class:`~astropy.units.Quantity`
            Ambient air temperature at surface
        relative_humidity : :class:`~astropy.units.Quantity` or float or array
            Relative humidity at surface, as a fraction in range [0, 1]

        Returns
        -------
        delay : :class:`~astropy.units.Quantity`
            Zenith delay due to non-hydrostatic component, as excess path length
        """
        temp_K = temperature.to_value(u.K, equivalencies=u.temperature())
        partial_pressure = relative_humidity * _saturation_pressure_hPa(temp_K) * u.hPa
        excess_path_per_pressure = _WET_PATH_PER_PRESSURE * (1255.0 / temp_K + 0.05)
        return excess_path_per_pressure * partial_pressure


_ZENITH_DELAY = {"SaastamoinenZenithDelay": SaastamoinenZenithDelay}
_MAPPING_FUNCTION = {
    "NiellMappingFunction": NiellMappingFunction,
    "GlobalMappingFunction": GlobalMappingFunction,
}


@dataclass(frozen=True)
class TroposphericDelay:
    """Propagation delay due to neutral gas in the troposphere and stratosphere.

    Set up a tropospheric delay model as specified by the model ID with format::

         "<zenith delay>-<mapping function>[-<hydrostatic/wet>]"

    This picks an appropriate zenith delay formula and mapping function, and
    optionally restricts the delays to hydrostatic or wet components only.
    The surface pressure and temperature come from the standard atmosphere
    at the height of the receiver. The delays are calculated by calling this
    object like a function.

    Parameters
    ----------
    location : :class:`~astropy.coordinates.EarthLocation`
        Location on Earth of receiver
    model_id : str, optional
        Unique identifier of tropospheric model (defaults to Saastamoinen
        zenith delays mapped by the Niell Mapping Function)

    Raises
    ------
    ValueError
        If the specified tropospheric model is unknown or has wrong format
    """

    location: EarthLocation
    model_id: str = "SaastamoinenZenithDelay-NiellMappingFunction"
    _delay: Callable = field(init=False, repr=False, compare=False)
    # EarthLocation is not hashable, but dataclass assumes it is, so disable it
    __hash__ = None

    def __post_init__(self):
        """Initialise main function `_delay` from `location` and `model_id`."""
        model_parts = self.model_id.split("-")
        if len(model_parts) == 2:
            model_parts.append("total")
        if len(model_parts) != 3:
            raise ValueError(
                f"Format for tropospheric delay model ID is '<zenith delay>-"
                f"<mapping function>[-<hydrostatic/wet>]', not {self.model_id!r}"
            )

        def get(mapping, key, name):
            try:
                return mapping[key]
            except KeyError as err:
                raise ValueError(
                    f"Tropospheric delay model {self.model_id!r} has unknown {name} "
                    f"{key!r}, available ones are {list(mapping.keys())}"
                ) from err

        location = self.location
        height = location.height.to_value(u.m)
        in_range = (height >= DELAY_MIN_HEIGHT) & (height <= DELAY_MAX_HEIGHT)
        if not np.all(in_range):
            logger.debug("Receiver height %s m out of range, delay is zero", height)
            # Evaluate the models at a valid height and zero the delays afterwards
            lon, lat, _ = location.to_geodetic()
            height = np.clip(height, DELAY_MIN_HEIGHT, DELAY_MAX_HEIGHT)
            location = EarthLocation.from_geodetic(lon, lat, height * u.m)
        in_range = np.where(in_range, 1.0, 0.0)
        zenith_delay = get(_ZENITH_DELAY, model_parts[0], "zenith delay function")(
            location
        )
        mapping_function = get(_MAPPING_FUNCTION, model_parts[1], "mapping function")(
            location
        )
        pressure, temperature, _ = standard_atmosphere(height, 0.0)
        pressure = pressure * u.hPa
        temperature = temperature * u.K

        def hydrostatic(rh, el, ts):  # pylint: disable=unused-argument
            return zenith_delay.hydrostatic(pressure) * mapping_function.hydrostatic(
                el, ts
            )

        def wet(rh, el, ts):
            return zenith_delay.wet(temperature, rh) * mapping_function.wet(el, ts)

        def total(rh, el, ts):
            return hydrostatic(rh, el, ts) + wet(rh, el, ts)

        model_types = {"hydrostatic": hydrostatic, "wet": wet, "total": total}
        logger.debug(
            "Tropospheric delay at %s uses %s", self.location.geodetic, model_parts
        )
        delay = get(model_types, model_parts[2], "type")

        def guarded_delay(rh, el, ts):
            return in_range * delay(rh, el, ts)

        # Set attribute on base class because this class is frozen
        super().__setattr__("_delay", guarded_delay)

    @u.quantity_input
    def __call__(
        self,
        elevation: u.rad,
        timestamp,
        relative_humidity: u.dimensionless_unscaled,
    ) -> u.m:
        """Propagation delay due to neutral gas in the troposphere and stratosphere.

        Parameters
        ----------
        elevation : :class:`~astropy.units.Quantity` or
            :class:`~astropy.coordinates.Angle`
            Elevation angle
        timestamp : :class:`~astropy.time.Time`, :class:`Timestamp` or equivalent
            Observation time (to incorporate seasonal weather patterns)
        relative_humidity : :class:`~astropy.units.Quantity` or float or array
            Relative humidity at surface, as a fraction in range [0, 1]

        Returns
        -------
        delay : :class:`~astropy.units.Quantity`
            Tropospheric propagation delay, as excess path length (zero where
            the satellite is below the horizon or the receiver height is
            outside the range `DELAY_MIN_HEIGHT` to `DELAY_MAX_HEIGHT`)
        """
        return self._delay(relative_humidity, elevation, timestamp)
