"""
Error Taxonomy
==============
Exceptions raised by the seasonal SIS engine
"""


class SeasonalSISError(Exception):
    """Base class for all simulation errors"""


class ConfigurationError(SeasonalSISError, ValueError):
    """Invalid model or simulation parameters, raised at construction time"""


class PreconditionViolation(SeasonalSISError, RuntimeError):
    """An operation was called in a state where it is not defined"""


class DegenerateRateError(SeasonalSISError, ArithmeticError):
    """Total propensity (or integrated rate) is zero, so no event time exists"""
