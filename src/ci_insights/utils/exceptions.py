"""
Error taxonomy for the CI insights pipeline.

Every failure is fatal for the current invocation: errors propagate to the
command-line entry point, which logs them and exits with status 1. The only
failures that are tolerated are unreadable metadata files met while
enumerating a project's history.
"""


class AnalyzerError(Exception):
    """Base class for all errors raised by the analyzer."""


class ConfigurationError(AnalyzerError):
    """A required argument, setting or configuration file is missing or invalid."""


class AuthError(ConfigurationError):
    """No credential is configured for the generation endpoint."""


class NotFoundError(AnalyzerError):
    """A project directory or a requested metadata file does not exist."""


class EmptyWindowError(AnalyzerError):
    """No metadata records fall inside the requested trend window."""


class UpstreamError(AnalyzerError):
    """The generation endpoint rejected the request or could not be reached."""


class ParseError(AnalyzerError):
    """The generation endpoint answered but carried no usable text."""
