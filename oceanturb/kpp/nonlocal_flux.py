"""
Non-local tracer fluxes.

The LMD non-local flux of a tracer with surface flux F is N(d) = F shape(d) at
faces. Fluxes point upward, so a positive surface flux carries tracer from the
base of the mixing layer toward the surface. The flux vanishes at both ends of
the mixing layer and so redistributes the tracer without changing its column
integral.
"""

import abc
import jax
import jax.numpy as jnp

from oceanturb.fields import face_divergence
from oceanturb.kpp.diffusivity import nondimensional_depth, shape


@jax.jit
def nonlocal_flux(flux, d):
    return flux * shape(d)


class NonlocalFluxModel(abc.ABC):
    """Non-local fluxes of T and S at cell faces."""

    @abc.abstractmethod
    def nonlocal_fluxes(self, model) -> dict:
        ...

    def tendencies(self, model) -> dict:
        """Minus the divergence of each non-local flux, at cells."""
        dzf = model.grid.dzf
        return {name: -face_divergence(N, dzf) for name, N in self.nonlocal_fluxes(model).items()}


class LMDNonlocalFlux(NonlocalFluxModel):
    """Surface flux times the KPP shape function, applied at every stability."""

    def nonlocal_fluxes(self, model) -> dict:
        d = nondimensional_depth(model.grid.zf, model.state.h)
        return {
            "T": nonlocal_flux(model.state.Ftheta, d),
            "S": nonlocal_flux(model.state.Fs, d),
        }

    def __repr__(self):
        return "LMDNonlocalFlux()"


class NoNonlocalFlux(NonlocalFluxModel):
    """Local diffusion only."""

    def nonlocal_fluxes(self, model) -> dict:
        zero = jnp.zeros(model.grid.N + 1)
        return {"T": zero, "S": zero}

    def __repr__(self):
        return "NoNonlocalFlux()"
