"""
Time integration schemes.

Each stepper advances every field of a model's solution by one step and the
clock by exactly dt. Diagnostic state is refreshed once, at the start of the
step, and every tendency is evaluated from the state at the start of the step
before any field is overwritten.
"""

import abc
import jax
import jax.numpy as jnp

from oceanturb.equations import boundary_coefficients, diffusion_operator
from oceanturb.errors import ConfigurationError
from oceanturb.tridiagonal import solve_tridiagonal


class Timestepper(abc.ABC):
    """Advance a model by one time step."""

    @abc.abstractmethod
    def step(self, model, dt: float) -> None:
        ...

    def __repr__(self):
        return type(self).__name__


class ForwardEuler(Timestepper):
    """Explicit Euler, c <- c + dt * rhs(c). No stability check is made."""

    def step(self, model, dt: float) -> None:
        model.equation.update(model)
        tendencies = model.equation.rhs(model)
        for name, field in model.solution.items():
            field.data = field.data + dt * tendencies[name]
        model.clock.tick(dt)


@jax.jit
def backward_euler_update(c, dt, lower, diag, upper, source, forcing):
    """Solve (I - dt L) c_new = c + dt (forcing + source) for c_new."""
    rhs = c + dt * (forcing + source)
    return solve_tridiagonal(-dt * lower, 1.0 - dt * diag, -dt * upper, rhs)


class BackwardEuler(Timestepper):
    """
    Semi-implicit Euler.

    Diffusion, including the linear part of value boundary conditions, is
    implicit; the diffusivity itself and the forcing are taken from the start
    of the step.
    """

    def step(self, model, dt: float) -> None:
        equation = model.equation
        equation.update(model)
        K = equation.diffusivity(model)
        forcing = equation.forcing(model)
        dzf, dzc = model.grid.dzf, model.grid.dzc

        systems = {
            name: diffusion_operator(K[name], dzf, dzc, *boundary_coefficients(model, name, K[name]))
            for name in model.solution
        }
        for name, field in model.solution.items():
            field_forcing = forcing.get(name, jnp.zeros_like(field.data))
            field.data = backward_euler_update(field.data, dt, *systems[name], field_forcing)
        model.clock.tick(dt)


TIMESTEPPERS = {
    "ForwardEuler": ForwardEuler,
    "BackwardEuler": BackwardEuler,
}


def get_timestepper(stepper) -> Timestepper:
    """Look up a stepper by name, or pass an instance through."""
    if isinstance(stepper, Timestepper):
        return stepper
    try:
        return TIMESTEPPERS[stepper]()
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown timestepper {stepper!r}. Must be one of: {list(TIMESTEPPERS)}") from None
