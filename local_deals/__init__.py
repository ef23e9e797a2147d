"""
Local Deals Discovery

Geospatial filtering, ranking and map clustering for a local-deals
marketplace: turns raw deal rows into distance-bounded, ranked lists and
zoom-dependent map pins.
"""

__version__ = "0.1.0"
__author__ = "Local Deals Team"
