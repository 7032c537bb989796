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

"""
Tropospheric corrections for satellite navigation.

This provides the slant delay of a standard atmosphere via the Saastamoinen
model and the Niell and Global mapping functions, as correction terms for
GNSS positioning engines, using NumPy and Astropy for the low-level work.
"""

import logging as _logging
from types import ModuleType as _ModuleType

from ._version import __version__
from .geoid import EllipsoidGeoid, GridGeoid
from .geometry import GeodeticPosition, LookAngle
from .timestamp import Timestamp
from .troposphere.delay import (
    SaastamoinenZenithDelay,
    TroposphericDelay,
    saastamoinen_delay,
    standard_atmosphere,
)
from .troposphere.mapping import (
    GeodeticMapping,
    GlobalMappingFunction,
    NiellMapping,
    NiellMappingFunction,
    TroposphericMapping,
    global_mapping,
    niell_mapping,
)

# The two correction functions offered to positioning engines
delay = saastamoinen_delay
mapping = TroposphericMapping()


# Setup library logger and add a print-like handler used when no logging is configured
class _NoConfigFilter(_logging.Filter):
    """Filter which only allows event if top-level logging is not configured."""

    def filter(self, record):
        return 1 if not _logging.root.handlers else 0


_no_config_handler = _logging.StreamHandler()
_no_config_handler.setFormatter(_logging.Formatter(_logging.BASIC_FORMAT))
_no_config_handler.addFilter(_NoConfigFilter())
logger = _logging.getLogger(__name__)
logger.addHandler(_no_config_handler)

# Document public API in __all__ / __dir__ by discarding modules and private variables
__all__ = [
    n
    for n, o in globals().items()
    if not isinstance(o, _ModuleType) and not n.startswith("_")
]
__all__ += ["__version__"]


def __dir__():
    """Tab completion in IPython seems to respect this."""
    return __all__
