"""
Advection and diffusion of a single tracer c with constant coefficients and
linear damping,

    dc/dt = K d²c/dz² - W dc/dz - mu c.

Advection is first-order upwind and explicit in both steppers. Its flux
vanishes at the boundaries, where the boundary conditions set the total flux.
"""

from typing import NamedTuple
import jax
import jax.numpy as jnp

from oceanturb.equations import Equation
from oceanturb.errors import ConfigurationError
from oceanturb.fields import face_divergence
from oceanturb.grid import Grid
from oceanturb import model as base


class Parameters(NamedTuple):
    K: float = 1.0    # Diffusivity (m² s⁻¹)
    mu: float = 0.0   # Damping rate (s⁻¹)
    W: float = 0.0    # Vertical velocity (m s⁻¹), positive upward


@jax.jit
def advective_flux(c, W):
    """Upwind flux W c at all N+1 faces; zero at the two boundary faces."""
    upwind = jnp.where(W > 0, c[:-1], c[1:])
    zero = jnp.zeros(1, dtype=c.dtype)
    return jnp.concatenate([zero, W * upwind, zero])


def diffusivity(model):
    return {"c": jnp.full(model.grid.N + 1, model.parameters.K)}


def forcing(model):
    p, c = model.parameters, model.solution.c.data
    tendency = -p.mu * c
    if p.W != 0:
        tendency = tendency - face_divergence(advective_flux(c, p.W), model.grid.dzf)
    return {"c": tendency}


class Model(base.Model):
    """Single-column advection-diffusion model with solution field `c`."""

    def __init__(self, N: int = 10, H: float = 1.0, K: float = 1.0, mu: float = 0.0, W: float = 0.0,
                 grid: Grid = None, stepper="ForwardEuler", bcs: dict = None) -> None:
        if K < 0 or mu < 0:
            raise ConfigurationError(f"Diffusivity and damping rate must be >= 0, got K={K}, mu={mu}")
        self.parameters = Parameters(K=K, mu=mu, W=W)
        super().__init__(
            grid=grid or Grid.uniform(N, H),
            solution_names=("c",),
            equation=Equation(diffusivity=diffusivity, forcing=forcing),
            bcs=bcs,
            stepper=stepper,
        )

    def set_diffusivity(self, K: float):
        self.parameters = self.parameters._replace(K=K)
