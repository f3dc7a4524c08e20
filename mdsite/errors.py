from __future__ import annotations


class MdsiteError(Exception):
    """Base class for errors raised by the site generator."""


class ConfigError(MdsiteError):
    pass


class BuildError(MdsiteError):
    """A fatal build failure. The whole build stops when one is raised."""
