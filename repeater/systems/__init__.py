"""
Host resolution modes.
"""

from .base import HostResolver
from .mapping import MappingHostResolver
from .uniform import UniformHostResolver

__all__ = ['HostResolver', 'MappingHostResolver', 'UniformHostResolver']
