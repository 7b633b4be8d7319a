"""
Parameters, constants and diagnostic state for the K-Profile Parameterization

Coefficient defaults follow Large, McWilliams and Doney (1994).
"""

import math
from typing import NamedTuple
import tree_math

from oceanturb.errors import ConfigurationError


class Parameters(NamedTuple):
    """KPP coefficients"""

    # Surface layer and mixing depth
    Ceps: float = 0.1             # Surface layer fraction
    CRi: float = 4.32             # Critical bulk Richardson number
    CKE: float = 0.3              # Unresolved turbulence coefficient
    CKE0: float = 0.0             # Background unresolved kinetic energy (m²/s²)

    # Turbulent velocity scales
    Ckappa: float = 0.4           # von Kármán constant
    Cstab: float = 2.0            # Reduction of wind-driven mixing under stable buoyancy flux
    Cunst: float = 6.4            # Enhancement of wind-driven mixing under unstable buoyancy flux
    Cb_U: float = 0.599           # Buoyancy flux viscosity proportionality in convection
    Ctau_U: float = 0.135         # Wind stress viscosity proportionality in convection
    Cb_T: float = 1.36            # Buoyancy flux diffusivity proportionality in convection
    Ctau_T: float = -1.85         # Wind stress diffusivity proportionality in convection
    Cd_U: float = 0.5             # Wind/convection transition for momentum
    Cd_T: float = 2.5             # Wind/convection transition for tracers

    # Non-local flux
    CNL: float = 6.33             # Counter-gradient flux proportionality; unused by the LMD flux

    # Background diffusivities (m²/s)
    KU0: float = 1e-5
    KT0: float = 1e-5
    KS0: float = 1e-5

    @classmethod
    def default(cls, K0: float = None, **overrides) -> 'Parameters':
        """Default parameters. K0 sets all three background diffusivities at once;
        individual KU0, KT0 or KS0 overrides take precedence."""
        if K0 is not None:
            overrides = {"KU0": K0, "KT0": K0, "KS0": K0, **overrides}
        unknown = set(overrides) - set(cls._fields)
        if unknown:
            raise ConfigurationError(f"Unknown KPP parameters {sorted(unknown)}")
        return cls(**overrides).validate()

    def validate(self) -> 'Parameters':
        for name, value in self._asdict().items():
            if math.isnan(value):
                raise ConfigurationError(f"KPP parameter {name} is NaN")
        if not 0 < self.Ceps <= 1:
            raise ConfigurationError(f"Surface layer fraction Ceps must be in (0, 1], got {self.Ceps}")
        if not self.CRi > 0:
            raise ConfigurationError(f"Critical Richardson number CRi must be > 0, got {self.CRi}")
        for name in ("CKE", "CKE0"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("KU0", "KT0", "KS0"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Background diffusivity {name} must be >= 0, got {getattr(self, name)}")
        return self


class Constants(NamedTuple):
    """Physical constants for the ocean column"""
    g: float = 9.81               # Gravitational acceleration (m/s²)
    cP: float = 3992.0            # Heat capacity of seawater (J/kg/K)
    rho0: float = 1035.0          # Reference density (kg/m³)
    alpha: float = 2.5e-4         # Thermal expansion coefficient (1/K)
    beta: float = 8e-5            # Haline contraction coefficient (1/psu)
    f: float = 0.0                # Coriolis parameter (1/s)

    @classmethod
    def default(cls, **overrides) -> 'Constants':
        return cls(**overrides)


@tree_math.struct
class State:
    Fu: float       # Surface x-momentum flux (m²/s²)
    Fv: float       # Surface y-momentum flux (m²/s²)
    Ftheta: float   # Surface temperature flux (K m/s)
    Fs: float       # Surface salinity flux (psu m/s)
    Fb: float       # Surface buoyancy flux (m²/s³), positive is destabilizing
    h: float        # Mixing depth (m)

    @classmethod
    def zeros(cls):
        return cls(Fu=0.0, Fv=0.0, Ftheta=0.0, Fs=0.0, Fb=0.0, h=0.0)

    def copy(self, Fu=None, Fv=None, Ftheta=None, Fs=None, Fb=None, h=None):
        return State(
            Fu=Fu if Fu is not None else self.Fu,
            Fv=Fv if Fv is not None else self.Fv,
            Ftheta=Ftheta if Ftheta is not None else self.Ftheta,
            Fs=Fs if Fs is not None else self.Fs,
            Fb=Fb if Fb is not None else self.Fb,
            h=h if h is not None else self.h,
        )
