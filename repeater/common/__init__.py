"""
Common utilities for the repeater.
"""

from .dispatcher import Dispatcher
from .resolver_factory import create_host_resolver

__all__ = ['Dispatcher', 'create_host_resolver']
