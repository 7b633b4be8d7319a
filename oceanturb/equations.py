"""
Equations: the time derivative of a model's solution.

An Equation splits the derivative into a diffusive part div(K grad c), which
BackwardEuler can treat implicitly, and an explicit forcing remainder. The
diffusive part is closed at the boundaries by the fluxes of the field's
boundary conditions.
"""

from typing import Callable, Dict
import jax
import jax.numpy as jnp

from oceanturb.boundary_conditions import TOP, BOTTOM, flux_coefficients, getbc
from oceanturb.fields import face_divergence


def _no_update(model):
    return None


class Equation:
    """
    Time derivative of a solution.

    Attributes:
        update: Called once at the start of every step to refresh diagnostic state.
        diffusivity: model -> {field name: diffusivity at faces, shape (N+1,)}
        forcing: model -> {field name: explicit tendency at cells, shape (N,)}.
            Fields that are missing from the mapping get no forcing.
    """

    def __init__(
        self,
        update: Callable = None,
        diffusivity: Callable[..., Dict[str, jnp.ndarray]] = None,
        forcing: Callable[..., Dict[str, jnp.ndarray]] = None
    ):
        self.update = update or _no_update
        self._diffusivity = diffusivity
        self._forcing = forcing

    def diffusivity(self, model) -> Dict[str, jnp.ndarray]:
        if self._diffusivity is None:
            N = model.grid.N
            return {name: jnp.zeros(N + 1) for name in model.solution}
        return self._diffusivity(model)

    def forcing(self, model) -> Dict[str, jnp.ndarray]:
        if self._forcing is None:
            return {}
        return self._forcing(model)

    def rhs(self, model) -> Dict[str, jnp.ndarray]:
        """Full explicit derivative of every field, evaluated at the current state.

        Does not call `update`; timesteppers do that once per step.
        """
        K = self.diffusivity(model)
        forcing = self.forcing(model)
        dzf, dzc = model.grid.dzf, model.grid.dzc
        tendencies = {}
        for name, field in model.solution.items():
            coeffs = boundary_coefficients(model, name, K[name])
            F = diffusive_flux(field.data, K[name], dzc, *coeffs)
            tendency = -face_divergence(F, dzf)
            if name in forcing:
                tendency = tendency + forcing[name]
            tendencies[name] = tendency
        return tendencies


def boundary_coefficients(model, name: str, K: jnp.ndarray):
    """Resolve the boundary conditions of field `name` to affine flux coefficients.

    Returns:
        (top_a, top_b, bottom_a, bottom_b) such that the flux through the
        surface face is top_a * c[N-1] + top_b and through the bottom face
        bottom_a * c[0] + bottom_b.
    """
    bcs = model.bcs[name]
    dzf = model.grid.dzf
    top_a, top_b = flux_coefficients(bcs.top.kind, getbc(model, bcs.top), TOP, K[-1], dzf)
    bottom_a, bottom_b = flux_coefficients(bcs.bottom.kind, getbc(model, bcs.bottom), BOTTOM, K[0], dzf)
    return top_a, top_b, bottom_a, bottom_b


@jax.jit
def diffusive_flux(c, K, dzc, top_a, top_b, bottom_a, bottom_b):
    """Upward diffusive flux -K dc/dz at all N+1 faces."""
    interior = -K[1:-1] * (c[1:] - c[:-1]) / dzc
    top = jnp.asarray(top_a * c[-1] + top_b, dtype=c.dtype)
    bottom = jnp.asarray(bottom_a * c[0] + bottom_b, dtype=c.dtype)
    return jnp.concatenate([bottom[None], interior, top[None]])


@jax.jit
def diffusion_operator(K, dzf, dzc, top_a, top_b, bottom_a, bottom_b):
    """
    Tridiagonal form of the diffusive tendency, L c + source.

    Args:
        K: Diffusivity at faces [N+1]
        dzf: Cell thickness
        dzc: Center spacing
        top_a, top_b, bottom_a, bottom_b: Boundary flux coefficients

    Returns:
        lower, diag, upper, source, each [N]
    """
    scale = 1.0 / (dzf * dzc)
    k_interior = K[1:-1] * scale
    zero = jnp.zeros(1, dtype=K.dtype)

    # Cell i couples to i-1 through face i and to i+1 through face i+1
    lower = jnp.concatenate([zero, k_interior])
    upper = jnp.concatenate([k_interior, zero])
    diag = -(lower + upper)

    diag = diag.at[0].add(bottom_a / dzf)
    diag = diag.at[-1].add(-top_a / dzf)

    source = jnp.zeros_like(diag)
    source = source.at[0].add(bottom_b / dzf)
    source = source.at[-1].add(-top_b / dzf)

    return lower, diag, upper, source
