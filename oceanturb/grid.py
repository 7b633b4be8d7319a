"""
Staggered one-dimensional vertical grids.

Cells are indexed 0..N-1 from the bottom (z = -H) to the surface, faces
0..N with face i directly below cell i, so face 0 is the bottom boundary and
face N is the surface z = 0.
"""

import dataclasses
import numbers
import jax.numpy as jnp

from oceanturb.errors import ConfigurationError


@dataclasses.dataclass(frozen=True)
class Grid:
    """Uniform staggered grid on -H <= z <= 0."""
    N: int     # Number of cells, an integer >= 1
    H: float   # Domain height (m), > 0

    def __post_init__(self):
        N, H = self.N, self.H
        if isinstance(N, bool) or not isinstance(N, numbers.Integral):
            raise ConfigurationError(f"Grid cell count must be an integer, got {N!r}")
        if N < 1:
            raise ConfigurationError(f"Grid cell count must be >= 1, got {N}")
        if not isinstance(H, numbers.Real) or not H > 0:
            raise ConfigurationError(f"Grid height must be > 0, got {H!r}")
        object.__setattr__(self, "N", int(N))
        object.__setattr__(self, "H", float(H))

    @classmethod
    def uniform(cls, N: int, H: float) -> 'Grid':
        """Build a uniform grid with N cells spanning a column of height H."""
        return cls(N=N, H=H)

    @property
    def dzf(self) -> float:
        """Face-to-face spacing, i.e. cell thickness."""
        return self.H / self.N

    @property
    def dzc(self) -> float:
        """Center-to-center spacing."""
        return self.H / self.N

    @property
    def zf(self) -> jnp.ndarray:
        """Face heights (N+1,), from -H up to 0."""
        return jnp.linspace(-self.H, 0.0, self.N + 1)

    @property
    def zc(self) -> jnp.ndarray:
        """Cell center heights (N,)."""
        zf = self.zf
        return 0.5 * (zf[1:] + zf[:-1])

    def __len__(self):
        return self.N


def UniformGrid(N: int = 10, H: float = 1.0) -> Grid:
    return Grid.uniform(N, H)
