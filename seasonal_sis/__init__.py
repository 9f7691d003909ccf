"""Seasonal SIS epidemic simulation package"""

from . import core
from . import network

__all__ = ['core', 'network']
