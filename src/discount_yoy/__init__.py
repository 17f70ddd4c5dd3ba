"""Discount year-on-year comparison of sales transactions."""

from ._version import VERSION
from .aggregator import aggregate_year_on_year

__version__ = VERSION
__all__ = ['aggregate_year_on_year', '__version__']
