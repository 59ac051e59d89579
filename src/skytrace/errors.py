"""Exception hierarchy for skytrace.

The render kernel itself has no error paths. Everything here is raised on
the Python side, before the kernel runs, when an external resource or a
configuration value is unusable.
"""


class SkytraceError(Exception):
    """Base class for all skytrace errors."""


class ConfigurationError(SkytraceError):
    """A fatal configuration problem that aborts the render."""


class SkyboxLoadError(ConfigurationError):
    """The skybox resource is missing, unreadable or too short."""


class OutputError(ConfigurationError):
    """The output image cannot be written."""
