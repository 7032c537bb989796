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

"""Receiver position and line-of-sight geometry.

These are plain value types in radians and metres, the units used by the
low-level models. Each field may be a float or a NumPy array.
"""

from dataclasses import dataclass

import astropy.units as u
import numpy as np
from astropy.coordinates import EarthLocation


@dataclass(frozen=True)
class GeodeticPosition:
    """Receiver position in geodetic coordinates.

    Parameters
    ----------
    latitude : float or array
        Geodetic latitude, in radians
    longitude : float or array
        Longitude, in radians
    height : float or array
        Height above the WGS84 ellipsoid, in metres (may be negative)
    """

    latitude: float
    longitude: float
    height: float

    @classmethod
    def from_degrees(cls, latitude_deg, longitude_deg, height_m=0.0):
        """Position from latitude and longitude in degrees."""
        return cls(np.radians(latitude_deg), np.radians(longitude_deg), height_m)

    @classmethod
    def from_earth_location(cls, location):
        """Position of an :class:`~astropy.coordinates.EarthLocation`."""
        lon, lat, height = location.to_geodetic()
        return cls(lat.rad, lon.rad, height.to_value(u.m))

    def to_earth_location(self):
        """Equivalent :class:`~astropy.coordinates.EarthLocation`."""
        return EarthLocation.from_geodetic(
            self.longitude * u.rad, self.latitude * u.rad, self.height * u.m
        )


@dataclass(frozen=True)
class LookAngle:
    """Direction from receiver to satellite.

    Parameters
    ----------
    azimuth : float or array
        Azimuth angle east of north, in radians
    elevation : float or array
        Elevation angle above the horizon, in radians (<= 0 is not observable)
    """

    azimuth: float
    elevation: float

    @classmethod
    def from_degrees(cls, azimuth_deg, elevation_deg):
        """Look angle from azimuth and elevation in degrees."""
        return cls(np.radians(azimuth_deg), np.radians(elevation_deg))

    @property
    def zenith_distance(self):
        """Angle between the line of sight and the local vertical, in radians."""
        return np.pi / 2.0 - self.elevation
