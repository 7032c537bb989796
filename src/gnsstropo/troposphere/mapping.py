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

"""Tropospheric mapping functions.

A mapping function scales the zenith delay of the "dry" (hydrostatic) or
"wet" (non-hydrostatic) component of the neutral atmosphere to the slant
delay along a line of sight at a given elevation angle. The built-in model
is the Niell Mapping Function (NMF). An alternative backend feeds the
site height above the geoid to an external routine with the signature of
the Global Mapping Function (GMF), which is also provided here.

The low-level functions operate on floats and arrays in radians and metres,
while the mapping function classes take Astropy Quantities.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

import astropy.units as u
import numpy as np

from ..geoid import EllipsoidGeoid
from ..geometry import GeodeticPosition, LookAngle
from ..timestamp import Timestamp

logger = logging.getLogger(__name__)

# Valid range of receiver heights above the ellipsoid, in metres
MAPPING_MIN_HEIGHT = -1000.0
MAPPING_MAX_HEIGHT = 20000.0


def _read_only(array):
    """Lock `array` against modification and return it."""
    array.flags.writeable = False
    return array


# Reference latitudes of the NMF coefficient table, in degrees
_NMF_LATITUDES = _read_only(np.array([15.0, 30.0, 45.0, 60.0, 75.0]))

# Niell (1996), table 3: rows are hydrostatic average a, b, c,
# hydrostatic amplitude a, b, c and wet average a, b, c
_NMF_COEFS = _read_only(
    np.array(
        [
            [1.2769934e-3, 1.2683230e-3, 1.2465397e-3, 1.2196049e-3, 1.2045996e-3],
            [2.9153695e-3, 2.9152299e-3, 2.9288445e-3, 2.9022565e-3, 2.9024912e-3],
            [62.610505e-3, 62.837393e-3, 63.721774e-3, 63.824265e-3, 64.258455e-3],
            [0.0000000e-0, 1.2709626e-5, 2.6523662e-5, 3.4000452e-5, 4.1202191e-5],
            [0.0000000e-0, 2.1414979e-5, 3.0160779e-5, 7.2562722e-5, 11.723375e-5],
            [0.0000000e-0, 9.0128400e-5, 4.3497037e-5, 84.795348e-5, 170.37206e-5],
            [5.8021897e-4, 5.6794847e-4, 5.8118019e-4, 5.9727542e-4, 6.1641693e-4],
            [1.4275268e-3, 1.5138625e-3, 1.4572752e-3, 1.5007428e-3, 1.7599082e-3],
            [4.3472961e-2, 4.6729510e-2, 4.3908931e-2, 4.4626982e-2, 5.4736038e-2],
        ]
    )
)

# Niell's hydrostatic height correction a, b, c
_HEIGHT_CORRECTION_COEFS = (2.53e-5, 5.49e-3, 1.14e-3)

# Spherical harmonic expansions of GMF a coefficients (Boehm et al, 2006),
# the first 55 terms multiply cosines and the last 55 terms multiply sines
_GMF_H_MEAN_COEFS = _read_only(
    np.array(
        [
            +1.2517e02, +8.503e-01, +6.936e-02, -6.760e00, +1.771e-01, +1.130e-02,
            +5.963e-01, +1.808e-02, +2.801e-03, -1.414e-03, -1.212e00, +9.300e-02,
            +3.683e-03, +1.095e-03, +4.671e-05, +3.959e-01, -3.867e-02, +5.413e-03,
            -5.289e-04, +3.229e-04, +2.067e-05, +3.000e-01, +2.031e-02, +5.900e-03,
            +4.573e-04, -7.619e-05, +2.327e-06, +3.845e-06, +1.182e-01, +1.158e-02,
            +5.445e-03, +6.219e-05, +4.204e-06, -2.093e-06, +1.540e-07, -4.280e-08,
            -4.751e-01, -3.490e-02, +1.758e-03, +4.019e-04, -2.799e-06, -1.287e-06,
            +5.468e-07, +7.580e-08, -6.300e-09, -1.160e-01, +8.301e-03, +8.771e-04,
            +9.955e-05, -1.718e-06, -2.012e-06, +1.170e-08, +1.790e-08, -1.300e-09,
            +1.000e-10, +0.000e00, +0.000e00, +3.249e-02, +0.000e00, +3.324e-02,
            +1.850e-02, +0.000e00, -1.115e-01, +2.519e-02, +4.923e-03, +0.000e00,
            +2.737e-02, +1.595e-02, -7.332e-04, +1.933e-04, +0.000e00, -4.796e-02,
            +6.381e-03, -1.599e-04, -3.685e-04, +1.815e-05, +0.000e00, +7.033e-02,
            +2.426e-03, -1.111e-03, -1.357e-04, -7.828e-06, +2.547e-06, +0.000e00,
            +5.779e-03, +3.133e-03, -5.312e-04, -2.028e-05, +2.323e-07, -9.100e-08,
            -1.650e-08, +0.000e00, +3.688e-02, -8.638e-04, -8.514e-05, -2.828e-05,
            +5.403e-07, +4.390e-07, +1.350e-08, +1.800e-09, +0.000e00, -2.736e-02,
            -2.977e-04, +8.113e-05, +2.329e-07, +8.451e-07, +4.490e-08, -8.100e-09,
            -1.500e-09, +2.000e-10,
        ]
    )
)

_GMF_H_AMPLITUDE_COEFS = _read_only(
    np.array(
        [
            -2.738e-01, -2.837e00, +1.298e-02, -3.588e-01, +2.413e-02, +3.427e-02,
            -7.624e-01, +7.272e-02, +2.160e-02, -3.385e-03, +4.424e-01, +3.722e-02,
            +2.195e-02, -1.503e-03, +2.426e-04, +3.013e-01, +5.762e-02, +1.019e-02,
            -4.476e-04, +6.790e-05, +3.227e-05, +3.123e-01, -3.535e-02, +4.840e-03,
            +3.025e-06, -4.363e-05, +2.854e-07, -1.286e-06, -6.725e-01, -3.730e-02,
            +8.964e-04, +1.399e-04, -3.990e-06, +7.431e-06, -2.796e-07, -1.601e-07,
            +4.068e-02, -1.352e-02, +7.282e-04, +9.594e-05, +2.070e-06, -9.620e-08,
            -2.742e-07, -6.370e-08, -6.300e-09, +8.625e-02, -5.971e-03, +4.705e-04,
            +2.335e-05, +4.226e-06, +2.475e-07, -8.850e-08, -3.600e-08, -2.900e-09,
            +0.000e00, +0.000e00, +0.000e00, -1.136e-01, +0.000e00, -1.868e-01,
            -1.399e-02, +0.000e00, -1.043e-01, +1.175e-02, -2.240e-03, +0.000e00,
            -3.222e-02, +1.333e-02, -2.647e-03, -2.316e-05, +0.000e00, +5.339e-02,
            +1.107e-02, -3.116e-03, -1.079e-04, -1.299e-05, +0.000e00, +4.861e-03,
            +8.891e-03, -6.448e-04, -1.279e-05, +6.358e-06, -1.417e-07, +0.000e00,
            +3.041e-02, +1.150e-03, -8.743e-04, -2.781e-05, +6.367e-07, -1.140e-08,
            -4.200e-08, +0.000e00, -2.982e-02, -3.000e-03, +1.394e-05, -3.290e-05,
            -1.705e-07, +7.440e-08, +2.720e-08, -6.600e-09, +0.000e00, +1.236e-02,
            -9.981e-04, -3.792e-05, -1.355e-05, +1.162e-06, -1.789e-07, +1.470e-08,
            -2.400e-09, -4.000e-10,
        ]
    )
)

_GMF_W_MEAN_COEFS = _read_only(
    np.array(
        [
            +5.640e01, +1.555e00, -1.011e00, -3.975e00, +3.171e-02, +1.065e-01,
            +6.175e-01, +1.376e-01, +4.229e-02, +3.028e-03, +1.688e00, -1.692e-01,
            +5.478e-02, +2.473e-02, +6.059e-04, +2.278e00, +6.614e-03, -3.505e-04,
            -6.697e-03, +8.402e-04, +7.033e-04, -3.236e00, +2.184e-01, -4.611e-02,
            -1.613e-02, -1.604e-03, +5.420e-05, +7.922e-05, -2.711e-01, -4.406e-01,
            -3.376e-02, -2.801e-03, -4.090e-04, -2.056e-05, +6.894e-06, +2.317e-06,
            +1.941e00, -2.562e-01, +1.598e-02, +5.449e-03, +3.544e-04, +1.148e-05,
            +7.503e-06, -5.667e-07, -3.660e-08, +8.683e-01, -5.931e-02, -1.864e-03,
            -1.277e-04, +2.029e-04, +1.269e-05, +1.629e-06, +9.660e-08, -1.015e-07,
            -5.000e-10, +0.000e00, +0.000e00, +2.592e-01, +0.000e00, +2.974e-02,
            -5.471e-01, +0.000e00, -5.926e-01, -1.030e-01, -1.567e-02, +0.000e00,
            +1.710e-01, +9.025e-02, +2.689e-02, +2.243e-03, +0.000e00, +3.439e-01,
            +2.402e-02, +5.410e-03, +1.601e-03, +9.669e-05, +0.000e00, +9.502e-02,
            -3.063e-02, -1.055e-03, -1.067e-04, -1.130e-04, +2.124e-05, +0.000e00,
            -3.129e-01, +8.463e-03, +2.253e-04, +7.413e-05, -9.376e-05, -1.606e-06,
            +2.060e-06, +0.000e00, +2.739e-01, +1.167e-03, -2.246e-05, -1.287e-04,
            -2.438e-05, -7.561e-07, +1.158e-06, +4.950e-08, +0.000e00, -1.344e-01,
            +5.342e-03, +3.775e-04, -6.756e-05, -1.686e-06, -1.184e-06, +2.768e-07,
            +2.730e-08, +5.700e-09,
        ]
    )
)

_GMF_W_AMPLITUDE_COEFS = _read_only(
    np.array(
        [
            +1.023e-01, -2.695e00, +3.417e-01, -1.405e-01, +3.175e-01, +2.116e-01,
            +3.536e00, -1.505e-01, -1.660e-02, +2.967e-02, +3.819e-01, -1.695e-01,
            -7.444e-02, +7.409e-03, -6.262e-03, -1.836e00, -1.759e-02, -6.256e-02,
            -2.371e-03, +7.947e-04, +1.501e-04, -8.603e-01, -1.360e-01, -3.629e-02,
            -3.706e-03, -2.976e-04, +1.857e-05, +3.021e-05, +2.248e00, -1.178e-01,
            +1.255e-02, +1.134e-03, -2.161e-04, -5.817e-06, +8.836e-07, -1.769e-07,
            +7.313e-01, -1.188e-01, +1.145e-02, +1.011e-03, +1.083e-04, +2.570e-06,
            -2.140e-06, -5.710e-08, +2.000e-08, -1.632e00, -6.948e-03, -3.893e-03,
            +8.592e-04, +7.577e-05, +4.539e-06, -3.852e-07, -2.213e-07, -1.370e-08,
            +5.800e-09, +0.000e00, +0.000e00, -8.865e-02, +0.000e00, -4.309e-01,
            +6.340e-02, +0.000e00, +1.162e-01, +6.176e-02, -4.234e-03, +0.000e00,
            +2.530e-01, +4.017e-02, -6.204e-03, +4.977e-03, +0.000e00, -1.737e-01,
            -5.638e-03, +1.488e-04, +4.857e-04, -1.809e-04, +0.000e00, -1.514e-01,
            -1.685e-02, +5.333e-03, -7.611e-05, +2.394e-05, +8.195e-06, +0.000e00,
            +9.326e-02, -1.275e-02, -3.071e-04, +5.374e-05, -3.391e-05, -7.436e-06,
            +6.747e-07, +0.000e00, -8.637e-02, -3.807e-03, -6.833e-04, -3.861e-05,
            -2.268e-05, +1.454e-06, +3.860e-07, -1.068e-07, +0.000e00, -2.658e-02,
            -1.947e-03, +7.131e-04, -3.506e-05, +1.885e-07, +5.792e-07, +3.990e-08,
            +2.000e-08, -5.700e-09,
        ]
    )
)

def _continued_fraction(elevation, a, b, c):
    """Marini-style continued fraction evaluated at given elevation angle."""
    sin_el = np.sin(elevation)
    topcon = 1.0 + a / (1.0 + b / (1.0 + c))
    return topcon / (sin_el + a / (sin_el + b / (sin_el + c)))


def _height_correction(elevation, height_m):
    """Niell's correction to hydrostatic mapping for height above sea level."""
    excess = 1.0 / np.sin(elevation) - _continued_fraction(
        elevation, *_HEIGHT_CORRECTION_COEFS
    )
    return excess * height_m / 1e3


def _interpolate_latitude(coefs, latitude_deg):
    """Interpolate rows of the NMF coefficient table at given latitude.

    The coefficients vary linearly between the tabulated latitudes and are
    held constant poleward of 75 degrees and equatorward of 15 degrees. The
    table is symmetric about the equator.

    Parameters
    ----------
    coefs : array of float, shape (K, 5)
        Rows of coefficients at the reference latitudes
    latitude_deg : float or array
        Geodetic latitude, in degrees

    Returns
    -------
    values : array of float, shape (K,) + shape of `latitude_deg`
        Interpolated coefficients
    """
    lat = np.abs(latitude_deg)
    return np.array([np.interp(lat, _NMF_LATITUDES, row) for row in coefs])


def _niell_season(timestamp, latitude):
    """Annual cosine term of the NMF hydrostatic coefficients.

    This peaks on 28 January in the Northern hemisphere and half a year
    later in the Southern hemisphere.
    """
    day_of_year = Timestamp(timestamp).day_of_year
    years = (day_of_year - 28.0) / 365.25 + np.where(latitude < 0, 0.5, 0.0)
    return np.cos(2.0 * np.pi * years)


def niell_mapping(timestamp, position, look_angle):
    """Hydrostatic and wet mapping factors of the Niell Mapping Function.

    Parameters
    ----------
    timestamp : :class:`~gnsstropo.Timestamp` or equivalent
        Epoch of observation (for seasonal variation)
    position : :class:`~gnsstropo.GeodeticPosition`
        Receiver position (ellipsoidal height is used in place of height
        above sea level)
    look_angle : :class:`~gnsstropo.LookAngle`
        Direction to satellite

    Returns
    -------
    dry, wet : float or array
        Scale factors turning zenith delays into slant delays, which are
        zero where the elevation is not positive

    Notes
    -----
    This follows [Niell1996]_, with the corrected equations (4) and (5).

    References
    ----------
    .. [Niell1996] A.E. Niell, “Global mapping functions for the atmosphere delay
       at radio wavelengths,” Journal of Geophysical Research: Solid Earth, vol.
       101, no. B2, pp. 3227–3246, Feb 1996. DOI: 10.1029/95JB03048
    """
    elevation = np.asarray(look_angle.elevation, dtype=float)
    visible = elevation > 0.0
    # Evaluate the hidden directions at the zenith and zero them afterwards
    elevation = np.where(visible, elevation, np.pi / 2)
    latitude_deg = np.degrees(position.latitude)
    season = _niell_season(timestamp, latitude_deg)
    coefs = _interpolate_latitude(_NMF_COEFS, latitude_deg)
    average, amplitude = coefs[0:3], coefs[3:6]
    a_h, b_h, c_h = [ave - amp * season for ave, amp in zip(average, amplitude)]
    a_w, b_w, c_w = coefs[6:9]
    dry = _continued_fraction(elevation, a_h, b_h, c_h)
    dry = dry + _height_correction(elevation, position.height)
    wet = _continued_fraction(elevation, a_w, b_w, c_w)
    return np.where(visible, dry, 0.0)[()], np.where(visible, wet, 0.0)[()]


def _associated_legendre_polynomials(n, m, x):
    """Matrix of associated Legendre polynomials.

    This computes the associated Legendre polynomials :math:`P_n^m(x)` of
    degrees ``0..n`` and orders ``0..m``, evaluated at the real value `x`,
    without the Condon–Shortley phase term, following equation 1-62 of
    Heiskanen & Moritz, "Physical Geodesy" (1967).

    Returns
    -------
    Pnm_x : array of float, shape (n+1, m+1)
        Values for all degrees 0..n and orders 0..m
    """
    fact = np.ones(2 * n + 2)
    fact[2:] = np.cumprod(np.arange(2.0, len(fact)))
    P = np.zeros((n + 1, m + 1))
    for i in range(n + 1):
        for j in range(min(i, m) + 1):
            terms = [
                (-1) ** k
                * fact[2 * i - 2 * k]
                / (fact[k] * fact[i - k] * fact[i - j - 2 * k])
                * x ** (i - j - 2 * k)
                for k in range((i - j) // 2 + 1)
            ]
            P[i, j] = np.sqrt((1 - x**2) ** j) * sum(terms) / 2**i
    return P


def _spherical_harmonic_basis(latitude, longitude):
    """Basis vector of length 110 for the GMF coefficient expansions."""
    P = _associated_legendre_polynomials(n=9, m=9, x=np.sin(latitude))
    m_longitude = np.arange(P.shape[1]) * longitude
    tril = np.tril_indices_from(P)
    aP = (P * np.cos(m_longitude))[tril]
    bP = (P * np.sin(m_longitude))[tril]
    return 1e-5 * np.r_[aP, bP]


def global_mapping(mjd, latitude, longitude, height, zenith_distance):
    """Hydrostatic and wet mapping factors of the Global Mapping Function.

    Parameters
    ----------
    mjd : float or array
        Modified Julian Date of observation
    latitude, longitude : float
        Geodetic latitude and longitude of the site, in radians
    height : float
        Height of the site above the geoid (mean sea level), in metres
    zenith_distance : float or array
        Zenith distance of the line of sight, in radians

    Returns
    -------
    dry, wet : float or array
        Scale factors turning zenith delays into slant delays

    Notes
    -----
    The GMF of [Boehm2006]_ is a static model of average weather conditions
    as a function of latitude, longitude, height and day of year, fit to
    three years of global weather data. It refines Niell's mapping function
    and shares its continued fraction and height correction.

    References
    ----------
    .. [Boehm2006] J. Boehm, A. Niell, P. Tregoning, H. Schuh, “Global Mapping
       Function (GMF): A new empirical mapping function based on numerical
       weather model data,” Geophysical Research Letters, vol. 33, no. L07304,
       Apr 2006. DOI: 10.1029/2005GL025546
    """
    basis = _spherical_harmonic_basis(latitude, longitude)
    elevation = np.pi / 2 - zenith_distance
    # Reference day is 28 January, counted from the start of 1980
    day_of_year = mjd - 44239.0 + 1 - 28
    season = np.cos(2.0 * np.pi * day_of_year / 365.25)
    a_h = _GMF_H_MEAN_COEFS @ basis + _GMF_H_AMPLITUDE_COEFS @ basis * season
    if latitude < 0:
        # Southern hemisphere has the opposite season for c
        local_season = -season
        c11, c10 = 0.007, 0.002
    else:
        local_season = season
        c11, c10 = 0.005, 0.001
    c_h = 0.062 + ((local_season + 1) * c11 / 2 + c10) * (1 - np.cos(latitude))
    dry = _continued_fraction(elevation, a_h, 0.0029, c_h)
    dry = dry + _height_correction(elevation, height)
    a_w = _GMF_W_MEAN_COEFS @ basis + _GMF_W_AMPLITUDE_COEFS @ basis * season
    wet = _continued_fraction(elevation, a_w, 0.00146, 0.04391)
    return dry, wet


class _MappingModel:
    """Mapping function backend operating on floats, radians and metres."""

    def map(self, timestamp, position, look_angle):
        """Hydrostatic and wet mapping factors for the given geometry.

        Parameters
        ----------
        timestamp : :class:`~gnsstropo.Timestamp` or equivalent
            Epoch of observation
        position : :class:`~gnsstropo.GeodeticPosition`
            Receiver position
        look_angle : :class:`~gnsstropo.LookAngle`
            Direction to satellite

        Returns
        -------
        dry, wet : float or array
            Mapping factors, zero where the elevation is not positive
        """
        raise NotImplementedError


class NiellMapping(_MappingModel):
    """The Niell Mapping Function with its built-in coefficient table."""

    def map(self, timestamp, position, look_angle):  # noqa: D102
        return niell_mapping(timestamp, position, look_angle)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class GeodeticMapping(_MappingModel):
    """Mapping by an external routine of time, site and zenith distance.

    Parameters
    ----------
    routine : callable, optional
        Function with signature ``routine(mjd, lat, lon, height, zd) ->
        (dry, wet)`` taking scalar UTC MJD, latitude and longitude in radians,
        height above the geoid in metres and zenith distance in radians
        (defaults to :func:`global_mapping`)
    geoid : callable, optional
        Geoid model returning undulation in metres given latitude and
        longitude in radians (defaults to :class:`~gnsstropo.EllipsoidGeoid`)
    """

    def __init__(self, routine=None, geoid=None):
        self.routine = global_mapping if routine is None else routine
        self.geoid = EllipsoidGeoid() if geoid is None else geoid
        self._vectorized_routine = np.vectorize(self.routine, otypes=[float, float])

    def map(self, timestamp, position, look_angle):  # noqa: D102
        elevation = np.asarray(look_angle.elevation, dtype=float)
        visible = elevation > 0.0
        mjd = Timestamp(timestamp).to_mjd()
        height = position.height - self.geoid(position.latitude, position.longitude)
        zenith_distance = np.pi / 2 - np.where(visible, elevation, np.pi / 2)
        dry, wet = self._vectorized_routine(
            mjd, position.latitude, position.longitude, height, zenith_distance
        )
        return np.where(visible, dry, 0.0)[()], np.where(visible, wet, 0.0)[()]

    def __repr__(self):
        routine = getattr(self.routine, "__name__", repr(self.routine))
        return f"{self.__class__.__name__}(routine={routine}, geoid={self.geoid!r})"


_MAPPING_MODELS = {
    "NiellMappingFunction": NiellMapping,
    "GlobalMappingFunction": GeodeticMapping,
}


@dataclass(frozen=True)
class TroposphericMapping:
    """Hydrostatic and wet mapping factors from a configurable backend.

    The backend is picked once from the model ID and then used for every
    call. Call this object like a function to get the mapping factors.

    Parameters
    ----------
    model_id : {'NiellMappingFunction', 'GlobalMappingFunction'}, optional
        Name of mapping function backend
    geoid : callable, optional
        Geoid model for backends that need height above sea level
    routine : callable, optional
        External mapping routine replacing the GMF in the geodetic backend

    Raises
    ------
    ValueError
        If the backend is unknown or does not accept `geoid` / `routine`
    """

    model_id: str = "NiellMappingFunction"
    geoid: Optional[Callable] = None
    routine: Optional[Callable] = None
    _model: _MappingModel = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Set up underlying `_model` backend based on `model_id`."""
        try:
            model_class = _MAPPING_MODELS[self.model_id]
        except KeyError as err:
            raise ValueError(
                f"Unknown tropospheric mapping function {self.model_id!r}, "
                f"available ones are {list(_MAPPING_MODELS.keys())}"
            ) from err
        options = {"geoid": self.geoid, "routine": self.routine}
        kwargs = {key: value for key, value in options.items() if value is not None}
        try:
            model = model_class(**kwargs)
        except TypeError as err:
            raise ValueError(
                f"Tropospheric mapping function {self.model_id!r} does not "
                f"accept {sorted(kwargs)}"
            ) from err
        logger.debug("Using tropospheric mapping backend %r", model)
        # Set attribute on base class because this class is frozen
        super().__setattr__("_model", model)

    def __call__(self, timestamp, position, look_angle):
        """Map zenith delays to the given line of sight.

        Parameters
        ----------
        timestamp : :class:`~gnsstropo.Timestamp` or equivalent
            Epoch of observation (for seasonal variation)
        position : :class:`~gnsstropo.GeodeticPosition`
            Receiver position
        look_angle : :class:`~gnsstropo.LookAngle`
            Direction to satellite

        Returns
        -------
        dry, wet : float or array
            Hydrostatic and wet mapping factors, which are both zero if the
            elevation is not positive or the height is outside the valid
            range of `MAPPING_MIN_HEIGHT` to `MAPPING_MAX_HEIGHT`
        """
        height = np.asarray(position.height, dtype=float)
        valid = (height >= MAPPING_MIN_HEIGHT) & (height <= MAPPING_MAX_HEIGHT)
        if not np.any(valid):
            logger.debug("Receiver height %s m out of range, no mapping", height)
            zeros = np.zeros(np.broadcast(height, look_angle.elevation).shape)[()]
            return zeros, zeros
        position = replace(position, height=np.where(valid, height, 0.0)[()])
        dry, wet = self._model.map(timestamp, position, look_angle)
        return np.where(valid, dry, 0.0)[()], np.where(valid, wet, 0.0)[()]


class _SiteMappingFunction:
    """Mapping function of a fixed site, using Astropy Quantities."""

    model_id = None

    def __init__(self, location, **kwargs):
        self.location = location
        self._position = GeodeticPosition.from_earth_location(location)
        self._mapping = TroposphericMapping(self.model_id, **kwargs)

    def _map(self, elevation, timestamp):
        look_angle = LookAngle(0.0, elevation.to_value(u.rad))
        return self._mapping(timestamp, self._position, look_angle)

    @u.quantity_input
    def hydrostatic(self, elevation: u.rad, timestamp) -> u.dimensionless_unscaled:
        """Perform mapping for "dry" (hydrostatic) component of the atmosphere.

        Parameters
        ----------
        elevation : :class:`~astropy.units.Quantity` or
            :class:`~astropy.coordinates.Angle`
            Elevation angle
        timestamp : :class:`~astropy.time.Time`, :class:`Timestamp` or equivalent
            Observation time (to incorporate seasonal weather patterns)

        Returns
        -------
        mf : :class:`~astropy.units.Quantity`
            Scale factor that turns zenith delay into delay at elevation angle
        """
        return self._map(elevation, timestamp)[0] * u.dimensionless_unscaled

    @u.quantity_input
    def wet(self, elevation: u.rad, timestamp) -> u.dimensionless_unscaled:
        """Perform mapping for "wet" (non-hydrostatic) component of the atmosphere.

        Parameters
        ----------
        elevation : :class:`~astropy.units.Quantity` or
            :class:`~astropy.coordinates.Angle`
            Elevation angle
        timestamp : :class:`~astropy.time.Time`, :class:`Timestamp` or equivalent
            Observation time (to incorporate seasonal weather patterns)

        Returns
        -------
        mf : :class:`~astropy.units.Quantity`
            Scale factor that turns zenith delay into delay at elevation angle
        """
        return self._map(elevation, timestamp)[1] * u.dimensionless_unscaled


class NiellMappingFunction(_SiteMappingFunction):
    """Niell Mapping Function at a site.

    Parameters
    ----------
    location : :class:`~astropy.coordinates.EarthLocation`
        Location on Earth of receiver
    """

    model_id = "NiellMappingFunction"


class GlobalMappingFunction(_SiteMappingFunction):
    """Global Mapping Function at a site.

    Parameters
    ----------
    location : :class:`~astropy.coordinates.EarthLocation`
        Location on Earth of receiver
    geoid : callable, optional
        Geoid model used to turn ellipsoidal height into height above sea level
    """

    model_id = "GlobalMappingFunction"

    def __init__(self, location, geoid=None):
        super().__init__(location, geoid=geoid)
