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

"""Geoid height models.

A geoid model turns ellipsoidal heights into heights above mean sea level,
which is what the global mapping function expects. Each model is called
with geodetic latitude and longitude in radians and returns the geoid
undulation (height of the geoid above the ellipsoid) in metres.
"""

import numpy as np
from scipy.interpolate import RegularGridInterpolator


class EllipsoidGeoid:
    """Geoid that coincides with the reference ellipsoid (zero undulation)."""

    def __call__(self, latitude_rad, longitude_rad):
        return np.zeros(np.broadcast(latitude_rad, longitude_rad).shape)[()]

    def __repr__(self):
        return f"{self.__class__.__name__}()"

    def __eq__(self, other):
        return isinstance(other, EllipsoidGeoid)

    def __hash__(self):
        return hash(self.__class__.__name__)


class GridGeoid:
    """Geoid undulations bilinearly interpolated on a regular grid.

    Parameters
    ----------
    latitudes_deg : array of float, shape (M,)
        Grid latitudes in degrees, strictly increasing
    longitudes_deg : array of float, shape (N,)
        Grid longitudes in degrees, strictly increasing and spanning
        less than 360 degrees (the grid wraps around in longitude)
    undulations_m : array of float, shape (M, N)
        Geoid height above the ellipsoid at each grid node, in metres

    Raises
    ------
    ValueError
        If the grid axes are not sorted or do not match the undulation array

    Notes
    -----
    Latitudes outside the grid are clamped to its edges. A typical grid is
    the EGM96 1 x 1 degree table, which is not distributed with this package.
    """

    def __init__(self, latitudes_deg, longitudes_deg, undulations_m):
        lat = np.array(latitudes_deg, dtype=float)
        lon = np.array(longitudes_deg, dtype=float)
        grid = np.array(undulations_m, dtype=float)
        if lat.ndim != 1 or lon.ndim != 1 or len(lat) < 2 or len(lon) < 2:
            raise ValueError("Geoid grid axes should be 1-D with at least 2 nodes")
        if grid.shape != (len(lat), len(lon)):
            raise ValueError(
                f"Geoid grid has shape {grid.shape}, expected {(len(lat), len(lon))}"
            )
        if np.any(np.diff(lat) <= 0) or np.any(np.diff(lon) <= 0):
            raise ValueError("Geoid grid axes should be strictly increasing")
        if lon[-1] - lon[0] >= 360.0:
            raise ValueError("Geoid grid longitudes should span less than 360 degrees")
        # Close the grid in longitude so that interpolation wraps around
        self._latitudes = lat
        self._longitudes = np.r_[lon, lon[0] + 360.0]
        self._interpolator = RegularGridInterpolator(
            (self._latitudes, self._longitudes),
            np.c_[grid, grid[:, :1]],
            method="linear",
        )

    def __call__(self, latitude_rad, longitude_rad):
        lat = np.clip(np.degrees(latitude_rad), self._latitudes[0], self._latitudes[-1])
        lon0 = self._longitudes[0]
        lon = np.clip(
            (np.degrees(longitude_rad) - lon0) % 360.0 + lon0,
            lon0,
            self._longitudes[-1],
        )
        points = np.stack(np.broadcast_arrays(lat, lon), axis=-1)
        return self._interpolator(points)[()]

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(<{len(self._latitudes)} x "
            f"{len(self._longitudes) - 1} grid>)"
        )
