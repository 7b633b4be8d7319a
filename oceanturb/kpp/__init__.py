"""
K-Profile Parameterization (KPP) for the ocean surface boundary layer

Large, McWilliams and Doney (1994), split into three interchangeable parts:

- mixing_depth: bulk Richardson number search for the mixing depth h
- diffusivity: turbulent velocity scales and the K-profile diffusivities
- nonlocal_flux: non-local (counter-gradient) tracer fluxes

kpp_model assembles them into a single-column Model for U, V, T and S.
"""

from oceanturb.kpp.kpp_types import Parameters, Constants, State
from oceanturb.kpp.mixing_depth import (
    MixingDepthModel, LMDMixingDepth, surface_layer_average, delta, buoyancy_gradient,
    unresolved_kinetic_energy, bulk_richardson_number, mixing_depth,
)
from oceanturb.kpp.diffusivity import (
    DiffusivityModel, LMDDiffusivity, omega_tau, omega_b, shape,
    w_scale_stable, w_scale_unstable, velocity_scale,
)
from oceanturb.kpp.nonlocal_flux import NonlocalFluxModel, LMDNonlocalFlux, NoNonlocalFlux, nonlocal_flux
from oceanturb.kpp.kpp_model import (
    Model, update_state, isunstable, friction_velocity, convective_velocity,
    w_scale_U, w_scale_V, w_scale_T, w_scale_S, K_U, K_V, K_T, K_S,
)

__all__ = [
    'Parameters', 'Constants', 'State', 'Model', 'update_state',
    'MixingDepthModel', 'LMDMixingDepth', 'DiffusivityModel', 'LMDDiffusivity',
    'NonlocalFluxModel', 'LMDNonlocalFlux', 'NoNonlocalFlux',
    'surface_layer_average', 'delta', 'buoyancy_gradient', 'unresolved_kinetic_energy',
    'bulk_richardson_number', 'mixing_depth', 'isunstable', 'omega_tau', 'omega_b',
    'friction_velocity', 'convective_velocity', 'shape', 'nonlocal_flux',
    'w_scale_stable', 'w_scale_unstable', 'velocity_scale',
    'w_scale_U', 'w_scale_V', 'w_scale_T', 'w_scale_S', 'K_U', 'K_V', 'K_T', 'K_S',
]
