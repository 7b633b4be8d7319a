"""
Single-column model closed with the K-Profile Parameterization.

    dU/dt =  f V + d/dz (K_U dU/dz)
    dV/dt = -f U + d/dz (K_U dV/dz)
    dT/dt =        d/dz (K_T dT/dz) - dN_T/dz
    dS/dt =        d/dz (K_S dS/dz) - dN_S/dz

The diffusivities K and non-local fluxes N are diagnosed every step from the
surface fluxes and the mixing depth. Any field may carry an extra user
forcing term. The diffusivity, mixing depth and non-local flux closures are
interchangeable.
"""

import logging
import math
import jax.numpy as jnp

from oceanturb import model as base
from oceanturb.boundary_conditions import Flux, getbc
from oceanturb.equations import Equation
from oceanturb.errors import ConfigurationError, NumericalInstability
from oceanturb.grid import Grid
from oceanturb.kpp.diffusivity import (
    DiffusivityModel, LMDDiffusivity, isunstable as _isunstable, omega_b, omega_tau,
    velocity_scale, nondimensional_depth,
)
from oceanturb.kpp.kpp_types import Constants, Parameters, State
from oceanturb.kpp.mixing_depth import LMDMixingDepth, MixingDepthModel
from oceanturb.kpp.nonlocal_flux import LMDNonlocalFlux, NonlocalFluxModel

logger = logging.getLogger(__name__)

SOLUTION_NAMES = ("U", "V", "T", "S")


class Model(base.Model):
    """
    KPP single-column model with solution fields U, V, T and S.

    The surface fluxes that drive the closure are read from the top boundary
    conditions, which must therefore be flux conditions.
    """

    def __init__(self, N: int = 10, H: float = 1.0, grid: Grid = None,
                 parameters: Parameters = None, constants: Constants = None,
                 stepper="ForwardEuler", bcs: dict = None,
                 diffusivity: DiffusivityModel = None,
                 mixing_depth: MixingDepthModel = None,
                 nonlocal_flux: NonlocalFluxModel = None,
                 forcing: dict = None) -> None:
        """
        Args:
            N, H:
                Cell count and height of a uniform grid, used when grid is None
            grid:
                Vertical grid
            parameters:
                KPP coefficients; defaults to Parameters.default()
            constants:
                Physical constants; defaults to Constants.default()
            stepper:
                "ForwardEuler" or "BackwardEuler"
            bcs:
                Mapping of field name to FieldBoundaryConditions
            diffusivity, mixing_depth, nonlocal_flux:
                Closure components; default to the LMD variants
            forcing:
                Mapping of field name to an extra tendency at cells, either a
                constant, an array of length N or a callable of the model
        """
        self.parameters = (parameters if parameters is not None else Parameters.default()).validate()
        self.constants = constants if constants is not None else Constants.default()
        self.state = State.zeros()

        self.diffusivity_model = diffusivity if diffusivity is not None else LMDDiffusivity()
        self.mixing_depth_model = mixing_depth if mixing_depth is not None else LMDMixingDepth()
        self.nonlocal_flux_model = nonlocal_flux if nonlocal_flux is not None else LMDNonlocalFlux()
        for slot, role in ((self.diffusivity_model, DiffusivityModel),
                           (self.mixing_depth_model, MixingDepthModel),
                           (self.nonlocal_flux_model, NonlocalFluxModel)):
            if not isinstance(slot, role):
                raise ConfigurationError(f"{slot!r} is not a {role.__name__}")

        self.forcing = dict(forcing or {})
        unknown = set(self.forcing) - set(SOLUTION_NAMES)
        if unknown:
            raise ConfigurationError(f"Forcing given for unknown fields {sorted(unknown)}; fields are {SOLUTION_NAMES}")

        super().__init__(
            grid=grid or Grid.uniform(N, H),
            solution_names=SOLUTION_NAMES,
            equation=Equation(update=update_state, diffusivity=diffusivities, forcing=explicit_forcing),
            bcs=bcs,
            stepper=stepper,
        )


def update_state(model: Model):
    """
    Refresh the surface fluxes and mixing depth of `model` from its top
    boundary conditions and current solution.
    """
    for name in SOLUTION_NAMES:
        if model.bcs[name].top.kind is not Flux:
            raise ConfigurationError(
                f"KPP requires a flux condition at the top of {name}, got {model.bcs[name].top.kind.value}")

    Fu, Fv, Ftheta, Fs = (float(getbc(model, model.bcs[name].top)) for name in SOLUTION_NAMES)
    c = model.constants
    Fb = c.g * (c.alpha * Ftheta - c.beta * Fs)
    for name, value in (("Fu", Fu), ("Fv", Fv), ("Ftheta", Ftheta), ("Fs", Fs), ("Fb", Fb)):
        if not math.isfinite(value):
            raise NumericalInstability(f"Surface flux {name} = {value} at t={model.clock.time}")

    model.state = State(Fu=Fu, Fv=Fv, Ftheta=Ftheta, Fs=Fs, Fb=Fb, h=model.state.h)
    h = float(model.mixing_depth_model.mixing_depth(model))
    if not math.isfinite(h):
        raise NumericalInstability(f"Mixing depth h = {h} at t={model.clock.time}")
    model.state = model.state.copy(h=h)


def diffusivities(model: Model) -> dict:
    return model.diffusivity_model.diffusivities(model)


def explicit_forcing(model: Model) -> dict:
    """Coriolis, non-local flux and user forcing tendencies at cells."""
    f = model.constants.f
    U, V = model.solution.U.data, model.solution.V.data
    tendencies = {"U": f * V, "V": -f * U}
    tendencies.update(model.nonlocal_flux_model.tendencies(model))
    N = model.grid.N
    for name, term in model.forcing.items():
        value = term(model) if callable(term) else term
        tendencies[name] = tendencies.get(name, 0.0) + jnp.broadcast_to(jnp.asarray(value, dtype=float), (N,))
    return tendencies


# Diagnostics of a model's current state

def isunstable(model: Model) -> bool:
    return bool(_isunstable(model.state.Fb))


def friction_velocity(model: Model):
    return omega_tau(model.state.Fu, model.state.Fv)


def convective_velocity(model: Model):
    return omega_b(model.state.Fb, model.state.h)


def w_scale_U(model: Model, i: int = None):
    """Momentum velocity scale at face i, or at every face."""
    d = nondimensional_depth(model.grid.zf, model.state.h)
    w = velocity_scale(model.state, model.parameters, d, tracer=False)
    return w if i is None else w[i]


def w_scale_T(model: Model, i: int = None):
    """Tracer velocity scale at face i, or at every face."""
    d = nondimensional_depth(model.grid.zf, model.state.h)
    w = velocity_scale(model.state, model.parameters, d, tracer=True)
    return w if i is None else w[i]


w_scale_V = w_scale_U
w_scale_S = w_scale_T


def K_U(model: Model, i: int = None):
    K = model.diffusivity_model.diffusivities(model)["U"]
    return K if i is None else K[i]


def K_T(model: Model, i: int = None):
    K = model.diffusivity_model.diffusivities(model)["T"]
    return K if i is None else K[i]


K_V = K_U


def K_S(model: Model, i: int = None):
    K = model.diffusivity_model.diffusivities(model)["S"]
    return K if i is None else K[i]


def log_state(model: Model):
    s = model.state
    logger.info("t=%g: h=%.4g m, Fb=%.3g, unstable=%s", model.clock.time, s.h, s.Fb, isunstable(model))
