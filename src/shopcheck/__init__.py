"""shopcheck - selector resolution engine for browser tests of the demo web shop."""

__version__ = "0.1.0"
