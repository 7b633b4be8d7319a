"""
Boundary conditions at the top and bottom of a column.

A condition stores either a constant or a function of the model. It is
resolved by `getbc` at the point of use, every step, so a condition may feed
back on the model's current state.

Fluxes are positive upward throughout: a positive top flux carries the
quantity out of the ocean surface.
"""

import enum
from typing import Any, Callable, NamedTuple, Union

from oceanturb.errors import ConfigurationError

TOP = "top"
BOTTOM = "bottom"
SIDES = (TOP, BOTTOM)


class BoundaryKind(enum.Enum):
    FLUX = "flux"
    VALUE = "value"
    GRADIENT = "gradient"


Flux = BoundaryKind.FLUX
Value = BoundaryKind.VALUE
Gradient = BoundaryKind.GRADIENT


class BoundaryCondition(NamedTuple):
    """A flux, value or gradient condition with a constant or model-dependent payload."""
    kind: BoundaryKind
    payload: Union[float, Callable[[Any], float]]


def FluxBoundaryCondition(flux) -> BoundaryCondition:
    return BoundaryCondition(Flux, flux)


def ValueBoundaryCondition(value) -> BoundaryCondition:
    return BoundaryCondition(Value, value)


def GradientBoundaryCondition(gradient) -> BoundaryCondition:
    return BoundaryCondition(Gradient, gradient)


def getbc(model, bc: BoundaryCondition):
    """Resolve the payload of `bc` for the current state of `model`."""
    return bc.payload(model) if callable(bc.payload) else bc.payload


class FieldBoundaryConditions:
    """Top and bottom conditions for one field."""

    def __init__(self, top: BoundaryCondition = None, bottom: BoundaryCondition = None):
        self.top = top if top is not None else FluxBoundaryCondition(0.0)
        self.bottom = bottom if bottom is not None else FluxBoundaryCondition(0.0)

    def __getitem__(self, side: str) -> BoundaryCondition:
        return getattr(self, _check_side(side))

    def __setitem__(self, side: str, bc: BoundaryCondition):
        setattr(self, _check_side(side), bc)

    def __repr__(self):
        return f"FieldBoundaryConditions(top={self.top}, bottom={self.bottom})"


def ZeroFluxBoundaryConditions() -> FieldBoundaryConditions:
    return FieldBoundaryConditions(FluxBoundaryCondition(0.0), FluxBoundaryCondition(0.0))


class BoundaryConditions:
    """Boundary conditions for every field of a solution, addressed by field name."""

    def __init__(self, names, **field_bcs):
        unknown = set(field_bcs) - set(names)
        if unknown:
            raise ConfigurationError(f"Boundary conditions given for unknown fields {sorted(unknown)}")
        object.__setattr__(self, "_names", tuple(names))
        object.__setattr__(self, "_bcs", {
            name: field_bcs.get(name) or ZeroFluxBoundaryConditions() for name in names
        })

    def __getattr__(self, name) -> FieldBoundaryConditions:
        try:
            return self._bcs[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name, field_bcs: FieldBoundaryConditions):
        if name not in self._bcs:
            raise ConfigurationError(f"No field named {name!r}; fields are {self._names}")
        self._bcs[name] = field_bcs

    def __getitem__(self, name) -> FieldBoundaryConditions:
        return self._bcs[name]

    def __iter__(self):
        return iter(self._names)

    def items(self):
        return ((name, self._bcs[name]) for name in self._names)


def _check_side(side: str) -> str:
    if side not in SIDES:
        raise ConfigurationError(f"Boundary side must be one of {SIDES}, got {side!r}")
    return side


def set_boundary_condition(model, field: str, side: str, bc: BoundaryCondition):
    """Attach `bc` to the `side` ('top' or 'bottom') of `field` in `model`."""
    if field not in model.bcs._bcs:
        raise ConfigurationError(f"Model has no field named {field!r}")
    model.bcs[field][side] = bc


def flux_coefficients(kind: BoundaryKind, value, side: str, K, dzf):
    """Affine form F = a * c_b + b of the boundary flux.

    c_b is the value in the cell adjacent to the boundary. Value conditions
    estimate -K dc/dz with a centered difference over half that cell, so
    the estimate is first-order accurate.

    Args:
        kind: Boundary condition kind
        value: Resolved payload (flux, boundary value or gradient)
        side: 'top' or 'bottom'
        K: Diffusivity at the boundary face
        dzf: Cell thickness

    Returns:
        (a, b)
    """
    if kind is Flux:
        return 0.0, value
    if kind is Gradient:
        return 0.0, -K * value
    if kind is Value:
        if side == TOP:
            # F = -2K (value - c_top) / dzf
            return 2 * K / dzf, -2 * K * value / dzf
        # F = -2K (c_bottom - value) / dzf
        return -2 * K / dzf, 2 * K * value / dzf
    raise ConfigurationError(f"Unknown boundary condition kind {kind!r}")


def boundary_flux(kind: BoundaryKind, value, side: str, K, c_b, dzf):
    """Flux through the boundary face implied by a resolved condition."""
    a, b = flux_coefficients(kind, value, side, K, dzf)
    return a * c_b + b
