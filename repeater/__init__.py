"""
Replay recorded GET requests of an access-log export against another host.
"""

__version__ = "0.1.0"
