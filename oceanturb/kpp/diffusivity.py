"""
Turbulent velocity scales and KPP diffusivities.

The diffusivity at a face with non-dimensional depth d = -z/h is

    K(d) = max(0, h w(d) shape(d)) + K0

where w is a turbulent velocity scale set by the surface wind stress and
buoyancy flux. Momentum (U, V) and tracers (T, S) have separate velocity
scales and background values K0.
"""

import abc
from functools import partial
import jax
import jax.numpy as jnp

from oceanturb.kpp.kpp_types import Parameters, State

# Exponents of the wind-driven unstable velocity scale
n_U = 1 / 4
n_T = 1 / 2


def omega_tau(Fu, Fv):
    """Turbulent velocity scale of the wind stress, i.e. the friction velocity."""
    return (Fu ** 2 + Fv ** 2) ** (1 / 4)


def omega_b(Fb, h):
    """Turbulent velocity scale of convection, i.e. the convective velocity."""
    return jnp.cbrt(jnp.abs(h * Fb))


def isunstable(Fb) -> bool:
    """True if the surface buoyancy flux drives convection."""
    return Fb > 0


def shape(d):
    """Cubic profile d (1-d)² inside the mixing layer.

    Zero outside 0 <= d <= 1, so the diffusivity below h is the background K0
    rather than a d³ growth. The clamp is intentional.
    """
    d = jnp.asarray(d)
    inside = (d >= 0) & (d <= 1)
    return jnp.where(inside, d * (1 - jnp.where(inside, d, 0.0)) ** 2, 0.0)


def _ratio_cubed(num, den):
    """(num/den)³, or +inf where den vanishes."""
    safe = jnp.where(den > 0, den, 1.0)
    return jnp.where(den > 0, (num / safe) ** 3, jnp.inf)


def w_scale_stable(Ckappa, Cstab, omega_tau, omega_b, d):
    """Velocity scale at depth d under a stabilizing (or zero) buoyancy flux."""
    rb = _ratio_cubed(omega_b, omega_tau)
    w = Ckappa * omega_tau / (1 + Cstab * d * jnp.where(omega_tau > 0, rb, 0.0))
    return jnp.where(omega_tau > 0, w, 0.0)


def w_scale_unstable(Cd, Ckappa, Cunst, Cb, Ctau, omega_tau, omega_b, d_eps, n):
    """Velocity scale at truncated depth d_eps under a destabilizing buoyancy flux.

    Wind-dominated near the surface, where d_eps < Cd (omega_tau/omega_b)³,
    convection-dominated below.
    """
    rb = jnp.where(omega_tau > 0, _ratio_cubed(omega_b, omega_tau), 0.0)
    rtau = jnp.where(omega_b > 0, _ratio_cubed(omega_tau, omega_b), 0.0)
    wind = Ckappa * omega_tau * (1 + Cunst * rb * d_eps) ** n
    convective = Cb * omega_b * jnp.cbrt(d_eps + Ctau * rtau)
    use_wind = (omega_b == 0) | (d_eps < Cd * rtau)
    return jnp.where(use_wind, wind, convective)


@partial(jax.jit, static_argnames=("tracer",))
def velocity_scale(state: State, params: Parameters, d, tracer: bool = False):
    """
    Turbulent velocity scale for momentum (tracer=False) or tracers (tracer=True).

    Args:
        state: Surface fluxes and mixing depth
        params: KPP parameters
        d: Non-dimensional depth -z/h, scalar or array

    Returns:
        w, with the shape of d. Zero when there is neither wind nor convection.
    """
    if tracer:
        Cd, Cb, Ctau, n = params.Cd_T, params.Cb_T, params.Ctau_T, n_T
    else:
        Cd, Cb, Ctau, n = params.Cd_U, params.Cb_U, params.Ctau_U, n_U

    wt = omega_tau(state.Fu, state.Fv)
    wb = omega_b(state.Fb, state.h)
    d = jnp.asarray(d)

    stable = w_scale_stable(params.Ckappa, params.Cstab, wt, wb, d)
    unstable = w_scale_unstable(Cd, params.Ckappa, params.Cunst, Cb, Ctau, wt, wb,
                                jnp.minimum(params.Ceps, d), n)
    w = jnp.where(isunstable(state.Fb), unstable, stable)
    return jnp.where((wt == 0) & (wb == 0), 0.0, w)


def nondimensional_depth(zf, h):
    """d = -z/h at each face; +inf everywhere when h = 0."""
    safe = jnp.where(h > 0, h, 1.0)
    return jnp.where(h > 0, -zf / safe, jnp.inf)


@partial(jax.jit, static_argnames=("tracer",))
def kpp_diffusivity(state: State, params: Parameters, zf, K0, tracer: bool = False):
    """KPP diffusivity at every face."""
    d = nondimensional_depth(zf, state.h)
    # w only matters where shape(d) is non-zero
    w = velocity_scale(state, params, jnp.clip(d, 0.0, 1.0), tracer=tracer)
    return jnp.maximum(0.0, state.h * w * shape(d)) + K0


class DiffusivityModel(abc.ABC):
    """Eddy diffusivities of U, V, T and S at cell faces."""

    @abc.abstractmethod
    def diffusivities(self, model) -> dict:
        ...


class LMDDiffusivity(DiffusivityModel):
    """Velocity-scale times shape-function diffusivity of Large, McWilliams and Doney (1994)."""

    def diffusivities(self, model) -> dict:
        p, state, zf = model.parameters, model.state, model.grid.zf
        KU = kpp_diffusivity(state, p, zf, p.KU0, tracer=False)
        KT = kpp_diffusivity(state, p, zf, p.KT0, tracer=True)
        KS = KT if p.KS0 == p.KT0 else kpp_diffusivity(state, p, zf, p.KS0, tracer=True)
        return {"U": KU, "V": KU, "T": KT, "S": KS}

    def __repr__(self):
        return "LMDDiffusivity()"
