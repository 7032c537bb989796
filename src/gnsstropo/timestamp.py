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

"""Observation epochs for the seasonal terms of the tropospheric models."""

import numpy as np
from astropy.time import Time, TimeDelta


def delta_seconds(x):
    """Construct a `TimeDelta` in TAI seconds."""
    return TimeDelta(x, format="sec", scale="tai")


class Timestamp:
    """Epoch of a measurement, in UTC seconds since the Unix epoch.

    This wraps an Astropy `Time` object and can contain a multi-dimensional
    array of epochs. The following input formats are accepted:

    - A floating-point number, directly representing the number of UTC seconds
      since the Unix epoch. Fractional seconds are allowed.

    - A string or bytes with format 'YYYY-MM-DD HH:MM:SS.SSS' (Astropy 'iso'
      format) or 'YYYY/MM/DD HH:MM:SS.SSS', where the time part is optional.
      It is always in UTC.

    - A :class:`~astropy.time.Time` object (NOT :class:`~astropy.time.TimeDelta`).

    - Another :class:`Timestamp` object, which will result in a copy.

    - A sequence or NumPy array of one of the above types.

    - None, which uses the current time (the default).

    Parameters
    ----------
    timestamp : :class:`~astropy.time.Time`, :class:`Timestamp`, float, string,
                bytes, sequence or array of any of the former, or None, optional
        Timestamp, in various formats (if None, defaults to now)

    Raises
    ------
    ValueError
        If `timestamp` is not in a supported format

    Attributes
    ----------
    time : :class:`~astropy.time.Time`
        Underlying `Time` object
    """

    def __init__(self, timestamp=None):
        if timestamp is None:
            self.time = Time.now()
        elif isinstance(timestamp, Timestamp):
            self.time = timestamp.time.replicate()
        elif isinstance(timestamp, TimeDelta):
            raise ValueError(f"Cannot construct Timestamp from TimeDelta {timestamp}")
        elif isinstance(timestamp, Time):
            self.time = timestamp.replicate()
        else:
            val = np.asarray(timestamp)
            time_format = None
            if val.dtype.kind == "U":
                val = np.char.replace(np.char.strip(val), "/", "-")
                time_format = "iso"
            elif val.dtype.kind == "S":
                val = np.char.replace(np.char.strip(val), b"/", b"-")
                time_format = "iso"
            elif val.dtype.kind in "iuf":
                # Any number is a Unix timestamp
                time_format = "unix"
            self.time = Time(val, format=time_format, scale="utc", precision=3)

    @property
    def secs(self):
        """Timestamp as UTC seconds since Unix epoch."""
        return self.time.utc.unix

    @property
    def day_of_year(self):
        """Fractional day of the year in UTC, starting at 1.0 on 1 January."""
        utc = self.time.utc.datetime64
        start_of_year = utc.astype("datetime64[Y]").astype(utc.dtype)
        return (utc - start_of_year) / np.timedelta64(1, "D") + 1.0

    def __repr__(self):
        """Short machine-friendly string representation of timestamp object."""
        formatter = f"{{:.{self.time.precision:d}f}}".format
        with np.printoptions(threshold=2, edgeitems=1, formatter={"float": formatter}):
            return f"Timestamp({self.secs})"

    def __str__(self):
        """Verbose human-friendly string representation of timestamp object."""
        return str(self.to_string())

    def __eq__(self, other):
        """Test for equality."""
        return self.time == Timestamp(other).time

    def __hash__(self):
        """Compute hash on internal timestamp, just like equality operator."""
        return hash(self.time)

    def __add__(self, other):
        """Add seconds (as floating-point number) to timestamp and return result."""
        return Timestamp(self.time + delta_seconds(other))

    def __sub__(self, other):
        """Subtract seconds (floating-point time interval) from timestamp.

        If used for the difference between two epochs then the result is an
        interval in seconds (a floating-point number).
        """
        if isinstance(other, Timestamp):
            return (self.time - other.time).sec
        if isinstance(other, Time) and not isinstance(other, TimeDelta):
            return (self.time - other).sec
        return Timestamp(self.time - delta_seconds(other))

    def to_string(self):
        """UTC string representation (str or array of str)."""
        return self.time.iso

    def to_mjd(self):
        """Convert timestamp to Modified Julian Date (MJD) in UTC."""
        return self.time.utc.mjd
