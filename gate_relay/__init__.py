"""Gate Relay: signed access-control command relay."""

__version__ = "1.0.0"
