import logging
import jax.numpy as jnp

from oceanturb.boundary_conditions import BoundaryConditions, FieldBoundaryConditions
from oceanturb.equations import Equation
from oceanturb.errors import ConfigurationError, InvalidTimeStep, NumericalInstability
from oceanturb.fields import CellField, Field
from oceanturb.grid import Grid
from oceanturb.timesteppers import Timestepper, get_timestepper

logger = logging.getLogger(__name__)


class Clock:
    """Model time and iteration count. Only timesteppers advance it."""

    def __init__(self, time: float = 0.0, iter: int = 0):
        self.time = time
        self.iter = iter

    def tick(self, dt: float):
        self.time += dt
        self.iter += 1

    def reset(self):
        self.time = 0.0
        self.iter = 0

    def __repr__(self):
        return f"Clock(time={self.time}, iter={self.iter})"


class Solution:
    """
    Named cell fields of a model, in a fixed order.

    `solution.T` returns the Field; `solution.T = value` sets it in place, so
    the assignment accepts anything Field.set does.
    """

    def __init__(self, grid: Grid, names):
        if len(set(names)) != len(names) or not names:
            raise ConfigurationError(f"Solution field names must be unique and non-empty, got {names}")
        object.__setattr__(self, "_names", tuple(names))
        object.__setattr__(self, "_fields", {name: CellField(grid) for name in names})

    def __getattr__(self, name) -> Field:
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name, value):
        if name not in self._fields:
            raise ConfigurationError(f"No field named {name!r}; fields are {self._names}")
        self._fields[name].set(value)

    def __getitem__(self, name) -> Field:
        return self._fields[name]

    def __iter__(self):
        return iter(self._names)

    def __len__(self):
        return len(self._names)

    def items(self):
        return ((name, self._fields[name]) for name in self._names)

    def set(self, **values):
        """Set several fields at once, e.g. solution.set(T=1.0, S=lambda z: 35 + z)."""
        for name, value in values.items():
            setattr(self, name, value)
        return self


class Model:
    """
    A single-column model: grid, solution, boundary conditions, equation,
    timestepper and clock.

    Closures build one of these (or a subclass) and supply the Equation.
    """

    def __init__(self, grid: Grid, solution_names, equation: Equation,
                 bcs: dict = None, stepper="BackwardEuler") -> None:
        """
        Args:
            grid:
                Vertical grid
            solution_names:
                Names of the prognostic cell fields
            equation:
                Time derivative of the solution
            bcs:
                Mapping of field name to FieldBoundaryConditions. Unlisted fields
                have zero flux at both ends.
            stepper:
                "ForwardEuler", "BackwardEuler" or a Timestepper instance
        """
        self.grid = grid
        self.solution = Solution(grid, solution_names)
        self.bcs = BoundaryConditions(self.solution, **(bcs or {}))
        for name, field_bcs in self.bcs.items():
            if not isinstance(field_bcs, FieldBoundaryConditions):
                raise ConfigurationError(f"Boundary conditions for {name!r} must be FieldBoundaryConditions")
        self.equation = equation
        self.timestepper: Timestepper = get_timestepper(stepper)
        self.clock = Clock()

    def __repr__(self):
        return (f"{type(self).__name__}(N={self.grid.N}, H={self.grid.H}, "
                f"fields={tuple(self.solution)}, stepper={self.timestepper}, {self.clock})")


def time(model: Model) -> float:
    return model.clock.time


def iteration(model: Model) -> int:
    return model.clock.iter


def check_finite(model: Model):
    """Raise NumericalInstability if any field holds a NaN or infinity."""
    for name, field in model.solution.items():
        if not bool(jnp.all(jnp.isfinite(field.data))):
            raise NumericalInstability(
                f"Non-finite values in {name} at t={model.clock.time} (iteration {model.clock.iter})")


def step(model: Model, dt: float, nsteps: int = 1):
    """Take nsteps steps of size dt."""
    if not dt > 0:
        raise InvalidTimeStep(f"Time step must be > 0, got {dt}")
    if nsteps < 1:
        raise InvalidTimeStep(f"Number of steps must be >= 1, got {nsteps}")
    for _ in range(nsteps):
        model.timestepper.step(model, dt)
        check_finite(model)
        logger.debug("step %d: t = %g", model.clock.iter, model.clock.time)


def run_until(model: Model, dt: float, t_final: float):
    """
    Step with dt until time(model) == t_final.

    If dt does not divide the remaining interval the last step is shortened,
    and the clock lands on t_final exactly.
    """
    if not dt > 0:
        raise InvalidTimeStep(f"Time step must be > 0, got {dt}")
    t0 = model.clock.time
    if t_final < t0:
        raise InvalidTimeStep(f"Cannot run backwards from t={t0} to t={t_final}")

    span = t_final - t0
    nfull = int(span // dt)
    remainder = span - nfull * dt
    # Absorb rounding in span // dt; a span shorter than the tolerance is still stepped
    tolerance = 1e-10 * dt
    if remainder >= dt - tolerance:
        nfull += 1
        remainder = 0.0
    elif remainder <= tolerance and nfull:
        remainder = 0.0

    logger.info("Running %s from t=%g to t=%g: %d steps of %g%s", type(model).__name__, t0, t_final,
                nfull, dt, f" and one of {remainder:g}" if remainder else "")
    if nfull:
        step(model, dt, nfull)
    if remainder:
        step(model, remainder)
    if span:
        model.clock.time = t_final
    return model
