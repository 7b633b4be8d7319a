import jax.numpy as jnp
import numpy as np
import pytest

from oceanturb.boundary_conditions import (
    FieldBoundaryConditions, FluxBoundaryCondition, GradientBoundaryCondition, ValueBoundaryCondition,
)
from oceanturb.diffusion import Model
from oceanturb.equations import boundary_coefficients, diffusion_operator
from oceanturb.model import step
from oceanturb.timesteppers import BackwardEuler, ForwardEuler, get_timestepper
from oceanturb.tridiagonal import tridiagonal_matvec

steppers = ["ForwardEuler", "BackwardEuler"]


def test_get_timestepper():
    assert isinstance(get_timestepper("ForwardEuler"), ForwardEuler)
    assert isinstance(get_timestepper("BackwardEuler"), BackwardEuler)
    stepper = BackwardEuler()
    assert get_timestepper(stepper) is stepper


@pytest.mark.parametrize("stepper", steppers)
def test_value_conditions_hold_linear_profile(stepper):
    """A linear profile between two fixed boundary values is a steady state."""
    H = 2.0
    bcs = {"c": FieldBoundaryConditions(top=ValueBoundaryCondition(1.0), bottom=ValueBoundaryCondition(0.0))}
    model = Model(N=8, H=H, K=0.5, stepper=stepper, bcs=bcs)
    model.solution.c = lambda z: (z + H) / H
    c0 = np.asarray(model.solution.c.data)

    step(model, 1e-2, 20)

    assert np.allclose(np.asarray(model.solution.c.data), c0, atol=1e-12)


@pytest.mark.parametrize("stepper", steppers)
def test_value_condition_relaxes_toward_boundary_value(stepper):
    bcs = {"c": FieldBoundaryConditions(top=ValueBoundaryCondition(1.0))}
    model = Model(N=8, H=1.0, K=1.0, stepper=stepper, bcs=bcs)
    step(model, 1e-3, 10)
    c = np.asarray(model.solution.c.data)
    assert np.all(c > 0)
    assert np.all(np.diff(c) > 0)
    assert np.all(c < 1)


def test_operator_matches_explicit_rhs():
    bcs = {"c": FieldBoundaryConditions(top=ValueBoundaryCondition(2.0), bottom=GradientBoundaryCondition(0.3))}
    model = Model(N=6, H=3.0, K=0.7, mu=0.2, bcs=bcs)
    model.solution.c = lambda z: np.sin(z)

    K = model.equation.diffusivity(model)["c"]
    lower, diag, upper, source = diffusion_operator(
        K, model.grid.dzf, model.grid.dzc, *boundary_coefficients(model, "c", K))
    c = model.solution.c.data
    implicit_form = tridiagonal_matvec(lower, diag, upper, c) + source - 0.2 * c

    assert jnp.allclose(implicit_form, model.equation.rhs(model)["c"])


@pytest.mark.parametrize("stepper", steppers)
def test_callable_flux_is_evaluated_every_step(stepper):
    calls = []

    def flux(model):
        calls.append(model.clock.iter)
        return 0.1

    bcs = {"c": FieldBoundaryConditions(top=FluxBoundaryCondition(flux))}
    model = Model(N=4, H=1.0, stepper=stepper, bcs=bcs)
    step(model, 1e-3, 3)
    assert sorted(set(calls)) == [0, 1, 2]
