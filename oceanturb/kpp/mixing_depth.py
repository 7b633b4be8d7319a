"""
Diagnosis of the mixing depth h.

The mixing depth is the shallowest depth at which the bulk Richardson number,
computed between the surface layer and the local flow, reaches its critical
value CRi. All kernels evaluate every face of the column at once; face
quantities are arrays of length N+1, indexed from the bottom (face 0) to the
surface (face N).
"""

import abc
import logging
import jax
import jax.numpy as jnp

from oceanturb.fields import Field, cell_to_face

logger = logging.getLogger(__name__)


@jax.jit
def _surface_layer_average(c, Ceps, zf, dzf):
    N = c.shape[0]
    face = jnp.arange(N + 1)

    # Fractional face index of the bottom of the surface layer, and the
    # fraction of the cell below the next face up that lies inside it
    ie = N - Ceps * (N - face)
    above = jnp.clip(jnp.ceil(ie).astype(face.dtype), 0, N)
    frac = above - ie

    partial = jnp.where(frac > 0, frac * dzf * c[jnp.clip(above - 1, 0, N - 1)], 0.0)
    # tail[k] = integral of c over cells k..N-1
    tail = dzf * jnp.concatenate([jnp.cumsum(c[::-1])[::-1], jnp.zeros(1, dtype=c.dtype)])
    integral = partial + tail[above]

    h = -zf
    safe = jnp.where(h > 0, Ceps * h, 1.0)
    return jnp.where(h > 0, integral / safe, c[-1])


def surface_layer_average(c: Field, Ceps: float, i: int = None):
    """
    Average of c over the surface layer of thickness Ceps * h, for h = -zf[i].

    At the surface face h vanishes and the average is the top cell value.

    Args:
        c: Cell field
        Ceps: Surface layer fraction
        i: Face index; all faces if None

    Returns:
        Scalar average at face i, or an array of averages at every face
    """
    avg = _surface_layer_average(c.data, Ceps, c.grid.zf, c.grid.dzf)
    return avg if i is None else avg[i]


@jax.jit
def _delta(c, Ceps, zf, dzf):
    return _surface_layer_average(c, Ceps, zf, dzf) - cell_to_face(c)


def delta(c: Field, Ceps: float, i: int = None):
    """Surface layer average of c minus c interpolated to face i."""
    d = _delta(c.data, Ceps, c.grid.zf, c.grid.dzf)
    return d if i is None else d[i]


@jax.jit
def _buoyancy_gradient(T, S, g, alpha, beta, dzc):
    interior = g * (alpha * (T[1:] - T[:-1]) - beta * (S[1:] - S[:-1])) / dzc
    zero = jnp.zeros(1, dtype=interior.dtype)
    return jnp.concatenate([zero, interior, zero])


def buoyancy_gradient(T: Field, S: Field, g: float, alpha: float, beta: float, i: int = None):
    """dB/dz = g (alpha dT/dz - beta dS/dz) at faces. Boundary faces carry 0."""
    Bz = _buoyancy_gradient(T.data, S.data, g, alpha, beta, T.grid.dzc)
    return Bz if i is None else Bz[i]


def unresolved_kinetic_energy(h, Bz, Fb, CKE, CKE0=0.0):
    """Velocity shear squared of turbulence the grid does not resolve, plus a background CKE0."""
    return CKE * h ** (4 / 3) * jnp.sqrt(jnp.maximum(0.0, Bz)) * jnp.cbrt(jnp.maximum(0.0, Fb)) + CKE0


@jax.jit
def richardson_number(U, V, T, S, Fb, Ceps, CKE, CKE0, g, alpha, beta, zf, dzf, dzc):
    """
    Bulk Richardson number at every face.

    Returns:
        Ri [N+1]. The boundary faces are set to 0, as is any face where both
        numerator and denominator vanish.
    """
    h = -zf
    hdB = h * g * (alpha * _delta(T, Ceps, zf, dzf) - beta * _delta(S, Ceps, zf, dzf))
    Bz = _buoyancy_gradient(T, S, g, alpha, beta, dzc)
    KE = (_delta(U, Ceps, zf, dzf) ** 2 + _delta(V, Ceps, zf, dzf) ** 2
          + unresolved_kinetic_energy(h, Bz, Fb, CKE, CKE0))

    indeterminate = (KE == 0) & (hdB == 0)
    Ri = jnp.where(indeterminate, 0.0, hdB / jnp.where(indeterminate, 1.0, KE))
    return Ri.at[0].set(0.0).at[-1].set(0.0)


def bulk_richardson_number(model, i: int = None):
    """Bulk Richardson number of `model` at face i, or at every face."""
    U, V, T, S = (model.solution[name].data for name in ("U", "V", "T", "S"))
    p, c, grid = model.parameters, model.constants, model.grid
    Ri = richardson_number(U, V, T, S, model.state.Fb, p.Ceps, p.CKE, p.CKE0,
                           c.g, c.alpha, c.beta, grid.zf, grid.dzf, grid.dzc)
    return Ri if i is None else Ri[i]


@jax.jit
def _mixing_depth(Ri, CRi, zf, dzf):
    N = zf.shape[0] - 1
    face = jnp.arange(N + 1)

    # Descend from face N-1; the search stops at the highest face where
    # Ri < CRi fails, which includes a NaN Ri
    candidate = (face >= 1) & (face <= N - 1)
    stop = candidate & ~(Ri < CRi)
    ih = jnp.where(jnp.any(stop), jnp.max(jnp.where(stop, face, 0)), 1)

    Ri_h = Ri[ih]
    Ri_above = Ri[ih + 1]
    crossing = zf[ih] + dzf * (CRi - Ri_h) / (Ri_above - Ri_h)
    z_star = jnp.where(~jnp.isfinite(Ri_h), zf[ih + 1],
                       jnp.where(Ri_h < CRi, zf[0], crossing))
    return -z_star


def mixing_depth(model) -> float:
    """Depth h >= 0 at which the bulk Richardson number first reaches CRi."""
    grid = model.grid
    if grid.N == 1:
        return grid.H
    Ri = bulk_richardson_number(model)
    h = float(_mixing_depth(Ri, model.parameters.CRi, grid.zf, grid.dzf))
    logger.debug("mixing depth h = %g", h)
    return h


class MixingDepthModel(abc.ABC):
    """Diagnoses the mixing depth from a model's solution and surface fluxes."""

    @abc.abstractmethod
    def mixing_depth(self, model) -> float:
        ...


class LMDMixingDepth(MixingDepthModel):
    """Bulk Richardson number criterion of Large, McWilliams and Doney (1994)."""

    def mixing_depth(self, model) -> float:
        return mixing_depth(model)

    def __repr__(self):
        return "LMDMixingDepth()"
