"""
Error taxonomy for expense parsing and record construction.
"""


class CostOfLifeError(Exception):
    """Base class for every error raised while handling expenses."""


class InvalidLifetimeFormat(CostOfLifeError):
    """The lifetime token could not be understood."""


class InvalidDateFormat(CostOfLifeError):
    """A date or timestamp is malformed or does not exist."""


class InvalidAmount(CostOfLifeError):
    """The amount is not a number or is not positive."""


class GenericError(CostOfLifeError):
    """Anything else, e.g. a log line with a broken structure."""
