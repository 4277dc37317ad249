"""Prompt management service with a local-first store and a remote mirror."""

__version__ = "0.1.0"
