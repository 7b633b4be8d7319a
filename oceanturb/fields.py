"""
Fields on staggered vertical grids.

A Field is a flat array of N cell values or N+1 face values bound to a grid.
The Field class is the mutable, user-facing container; the array operators at
the bottom of the module are pure and jittable and are what the closures use
to build tendencies.
"""

import enum
import operator
import jax
import jax.numpy as jnp
import numpy as np

from oceanturb.errors import DimensionMismatch
from oceanturb.grid import Grid


class FieldLocation(enum.Enum):
    CELL = "cell"
    FACE = "face"


Cell = FieldLocation.CELL
Face = FieldLocation.FACE


class Field:
    """Scalar quantity sampled at the cells or faces of a grid."""

    def __init__(self, grid: Grid, location: FieldLocation = Cell, data=None):
        self.grid = grid
        self.location = location
        self.data = jnp.zeros(self.size)
        if data is not None:
            self.set(data)

    @property
    def size(self) -> int:
        return self.grid.N if self.location is Cell else self.grid.N + 1

    def __len__(self):
        return self.size

    def _check_index(self, i):
        # jax clamps out-of-range reads and drops out-of-range writes
        if isinstance(i, slice):
            return i
        i = operator.index(i)
        if not -self.size <= i < self.size:
            raise IndexError(f"Index {i} out of range for a {self.location.value} field of length {self.size}")
        return i

    def __getitem__(self, i):
        return self.data[self._check_index(i)]

    def __setitem__(self, i, value):
        self.data = self.data.at[self._check_index(i)].set(value)

    def __repr__(self):
        return f"Field(location={self.location.value}, N={self.grid.N}, H={self.grid.H})"

    def nodes(self) -> jnp.ndarray:
        """Heights of the points where the field is defined."""
        return self.grid.zc if self.location is Cell else self.grid.zf

    def spacing(self) -> float:
        """Distance between neighbouring nodes."""
        return self.grid.dzc if self.location is Cell else self.grid.dzf

    def set(self, value):
        """Overwrite the field with a constant, an array or a function of z.

        Args:
            value: A number (every node gets it), an array of length len(self),
                or a callable evaluated at the height of each node.
        """
        if callable(value):
            z = np.asarray(self.nodes())
            self.data = jnp.asarray([value(float(zi)) for zi in z], dtype=self.data.dtype)
        elif np.ndim(value) == 0:
            self.data = jnp.full(self.size, value, dtype=self.data.dtype)
        else:
            value = jnp.asarray(value, dtype=self.data.dtype)
            if value.shape != (self.size,):
                raise DimensionMismatch(
                    f"Cannot set a {self.location.value} field of length {self.size} "
                    f"from data of shape {value.shape}")
            self.data = value
        return self

    def top(self):
        """Value at the node nearest the surface."""
        return self.data[-1]

    def bottom(self):
        """Value at the node nearest the bottom."""
        return self.data[0]

    def interior(self) -> range:
        """Indices that have a neighbour on both sides."""
        return range(1, self.size - 1)

    def dz(self, i: int):
        """First difference across index i, divided by the node spacing.

        For a cell field, i is an interior face index (1..N-1); for a face
        field, i is a cell index (0..N-1). Boundary faces of a cell field have
        no neighbour below or above and are handled by the boundary operators.
        """
        N = self.grid.N
        if self.location is Cell:
            if not 1 <= i <= N - 1:
                raise IndexError(f"dz of a cell field is defined on interior faces 1..{N - 1}, got {i}")
            return (self.data[i] - self.data[i - 1]) / self.grid.dzc
        if not 0 <= i <= N - 1:
            raise IndexError(f"dz of a face field is defined on cells 0..{N - 1}, got {i}")
        return (self.data[i + 1] - self.data[i]) / self.grid.dzf

    def onface(self, i: int):
        """Linear interpolation of a cell field to face i."""
        if self.location is not Cell:
            raise TypeError("onface interpolates a cell field to faces")
        N = self.grid.N
        if i <= 0:
            return self.data[0]
        if i >= N:
            return self.data[N - 1]
        return 0.5 * (self.data[i - 1] + self.data[i])

    def oncell(self, i: int):
        """Linear interpolation of a face field to cell i."""
        if self.location is not Face:
            raise TypeError("oncell interpolates a face field to cells")
        return 0.5 * (self.data[i] + self.data[i + 1])

    def interpolate(self, i: int):
        """Interpolate to node i of the opposite location."""
        return self.onface(i) if self.location is Cell else self.oncell(i)

    def integral(self):
        """Vertical integral of the field over the column."""
        dzf = self.grid.dzf
        if self.location is Cell:
            return jnp.sum(self.data) * dzf
        return dzf * (jnp.sum(self.data) - 0.5 * (self.data[0] + self.data[-1]))

    def copy(self) -> 'Field':
        return Field(self.grid, self.location, self.data)


def CellField(grid: Grid, data=None) -> Field:
    return Field(grid, Cell, data)


def FaceField(grid: Grid, data=None) -> Field:
    return Field(grid, Face, data)


# Array operators. Cell arrays have shape (N,), face arrays (N+1,).

@jax.jit
def cell_to_face(c: jnp.ndarray) -> jnp.ndarray:
    """Interpolate cell data to faces; the boundary faces take the nearest cell value."""
    interior = 0.5 * (c[1:] + c[:-1])
    return jnp.concatenate([c[:1], interior, c[-1:]])


@jax.jit
def face_to_cell(f: jnp.ndarray) -> jnp.ndarray:
    return 0.5 * (f[1:] + f[:-1])


@jax.jit
def face_gradient(c: jnp.ndarray, dzc: float) -> jnp.ndarray:
    """Gradient of cell data at the N-1 interior faces."""
    return (c[1:] - c[:-1]) / dzc


@jax.jit
def face_divergence(F: jnp.ndarray, dzf: float) -> jnp.ndarray:
    """Divergence of face data in each of the N cells."""
    return (F[1:] - F[:-1]) / dzf
