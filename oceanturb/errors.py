"""
Exceptions raised by oceanturb. None are caught inside the package.
"""


class OceanTurbError(Exception):
    """Base class for all oceanturb errors."""


class ConfigurationError(OceanTurbError, ValueError):
    """Invalid grid, parameter or model construction."""


class DimensionMismatch(OceanTurbError, ValueError):
    """Data assigned to a field does not match the field's length."""


class InvalidTimeStep(OceanTurbError, ValueError):
    """Non-positive time step, or a run target earlier than the current time."""


class NumericalInstability(OceanTurbError, ArithmeticError):
    """Non-finite values in the solution or in diagnosed state."""
