"""Robot models, constraint sets, command helpers and a keyboard editor for legged trajectory optimization."""

__version__ = "0.1.0"