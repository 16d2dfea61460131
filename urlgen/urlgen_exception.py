# -*- encoding: utf-8 -*-

class UrlgenException(Exception):
    """Base exception class for all errors raised by urlgen."""
    pass


class CannotGenerateUrl(UrlgenException):
    """Raised when no public URL can be built for a repository path.

    Attributes:
        repository_path (str): the path the URL was requested for.
    """
    def __init__(self, message, repository_path=None):
        super(CannotGenerateUrl, self).__init__(message)
        self.repository_path = repository_path


class DiscoveryException(UrlgenException):
    pass


class InvalidGlob(UrlgenException):
    pass


class ConfigError(UrlgenException):
    """Raised for errors in the user config."""
    pass
