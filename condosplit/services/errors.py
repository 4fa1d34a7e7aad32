"""Exception classes for the apportionment engine.

Every fatal failure aborts the calculation; no partial result is returned.
Messages carry the offending numeric values so they can be shown to the user.
"""


class SplitError(Exception):
    """Base exception for apportionment errors."""

    pass


class ConfigurationError(SplitError):
    """Settings are missing, malformed or the percentages do not close to 100%."""

    pass


class InsufficientDataError(SplitError):
    """No bills for a requested fuel, or no units/consumption data at all."""

    pass


class DeductionOverflowError(SplitError):
    """A fixed deduction exceeds the amount still left on the bill."""

    pass


class ConservationViolation(SplitError):
    """Per-unit costs do not add up to the billed total within tolerance."""

    pass


__all__ = [
    "SplitError",
    "ConfigurationError",
    "InsufficientDataError",
    "DeductionOverflowError",
    "ConservationViolation",
]
