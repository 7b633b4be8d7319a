"""
oceanturb: single-column models of ocean surface boundary layer turbulence

A staggered finite-volume grid, fields with flux, value and gradient boundary
conditions, explicit and semi-implicit Euler time stepping, and two closures:

- diffusion: constant diffusivity with optional linear damping
- kpp: the K-Profile Parameterization

Double precision is enabled on import; the closures' tolerances depend on it.
"""

import jax

jax.config.update("jax_enable_x64", True)

from oceanturb.errors import (
    OceanTurbError, ConfigurationError, DimensionMismatch, InvalidTimeStep, NumericalInstability,
)
from oceanturb.grid import Grid, UniformGrid
from oceanturb.fields import Field, CellField, FaceField, Cell, Face
from oceanturb.boundary_conditions import (
    BoundaryCondition, FluxBoundaryCondition, ValueBoundaryCondition, GradientBoundaryCondition,
    FieldBoundaryConditions, ZeroFluxBoundaryConditions, BoundaryConditions, getbc,
    set_boundary_condition, Flux, Value, Gradient,
)
from oceanturb.equations import Equation
from oceanturb.timesteppers import ForwardEuler, BackwardEuler
from oceanturb.model import Model, Clock, Solution, step, run_until, time, iteration

__all__ = [
    'OceanTurbError', 'ConfigurationError', 'DimensionMismatch', 'InvalidTimeStep',
    'NumericalInstability', 'Grid', 'UniformGrid', 'Field', 'CellField', 'FaceField',
    'Cell', 'Face', 'BoundaryCondition', 'FluxBoundaryCondition', 'ValueBoundaryCondition',
    'GradientBoundaryCondition', 'FieldBoundaryConditions', 'ZeroFluxBoundaryConditions',
    'BoundaryConditions', 'getbc', 'set_boundary_condition', 'Flux', 'Value', 'Gradient',
    'Equation', 'ForwardEuler', 'BackwardEuler', 'Model', 'Clock', 'Solution',
    'step', 'run_until', 'time', 'iteration',
]
