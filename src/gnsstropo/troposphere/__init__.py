"""Tropospheric propagation models.

This implements the propagation delay of satellite signals in the electrically
neutral atmosphere (mostly the troposphere and stratosphere) and the mapping
functions that project zenith delays onto the line of sight.
"""
