"""
Exception types raised by the discounting and sensitivity core.

- ConfigurationError: malformed curve metadata or mismatched inputs at construction
- DomainError: request outside what an object supports
- RuntimeCalculationError: missing historical fixing for an elapsed date

All three derive from the builtin exception the rest of the library already
raises for the same class of problem, so ``except ValueError`` keeps working.
"""


class ConfigurationError(ValueError):
    """Invalid configuration detected when building a curve-based object."""


class DomainError(ValueError):
    """Rate, currency or settlement type not supported by the receiving object."""


class RuntimeCalculationError(RuntimeError):
    """
    Pricing failure caused by missing market data at calculation time.

    Raised when a fixing date is before the valuation date (or has been
    published) but the time series holds no value for it.
    """


__all__ = [
    "ConfigurationError",
    "DomainError",
    "RuntimeCalculationError",
]
