"""Prepare git repositories for build-time version calculation."""

__version__ = "0.1.0"
