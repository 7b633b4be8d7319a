import pytest

from oceanturb.errors import (
    ConfigurationError, DimensionMismatch, InvalidTimeStep, NumericalInstability, OceanTurbError,
)


@pytest.mark.parametrize("error, base", [
    (ConfigurationError, ValueError),
    (DimensionMismatch, ValueError),
    (InvalidTimeStep, ValueError),
    (NumericalInstability, ArithmeticError),
])
def test_error_hierarchy(error, base):
    assert issubclass(error, OceanTurbError)
    assert issubclass(error, base)
    with pytest.raises(OceanTurbError):
        raise error("message")


def test_errors_raised_by_package():
    from oceanturb.errors import ConfigurationError, DimensionMismatch, InvalidTimeStep
    from oceanturb import Grid
    from oceanturb.diffusion import Model
    from oceanturb.model import step

    with pytest.raises(ConfigurationError):
        Grid.uniform(0, 1.0)
    model = Model(N=4)
    with pytest.raises(DimensionMismatch):
        model.solution.c = [1.0, 2.0]
    with pytest.raises(InvalidTimeStep):
        step(model, 0.0)
