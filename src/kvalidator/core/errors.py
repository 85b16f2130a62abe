"""Exceptions raised past the KValidator boundary."""


class KValidatorError(Exception):
    """Base class for errors the CLI reports without a traceback."""


class ConfigError(KValidatorError):
    """The validation config file exists but cannot be read or written."""


class ReadOnlyRuleError(KValidatorError):
    """Attempt to remove one of the built-in default ignore rules."""


class BaselineError(KValidatorError):
    """No usable baseline label could be established for a run."""
