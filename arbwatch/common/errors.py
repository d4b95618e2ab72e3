"""Errors raised across the application."""


class ArbitrageError(Exception):
    """Base of every error the application raises on purpose."""


class JsonError(ArbitrageError):
    """A document could not be encoded or decoded."""


class ArbitrageWarning(ArbitrageError):
    """A recoverable problem; the caller may retry."""


class UnrecoverableError(ArbitrageError):
    """A problem after which the component must stop."""


class ExitRequested(ArbitrageError):
    """The application asked the component to exit."""

    def __init__(self) -> None:
        super().__init__("exit")


class GenericError(ArbitrageError):
    """Any other failure."""


class ConfigError(ArbitrageError):
    """A configuration value is missing or malformed."""