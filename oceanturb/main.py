import logging
import hydra
from omegaconf import DictConfig, OmegaConf

from oceanturb import diffusion, kpp
from oceanturb.boundary_conditions import FluxBoundaryCondition, GradientBoundaryCondition
from oceanturb.errors import ConfigurationError
from oceanturb.grid import Grid
from oceanturb.kpp.kpp_model import log_state
from oceanturb.model import run_until

logger = logging.getLogger(__name__)


def build_model(cfg: DictConfig):
    """
    Build and initialize a model from a composed config.

    The column starts with uniform salinity and a linear temperature profile
    with buoyancy frequency N2, and is forced at the surface by a wind stress
    and a buoyancy flux carried by temperature. The bottom temperature
    gradient is held at its initial value.
    """
    grid = Grid.uniform(cfg.model.N, cfg.model.H)
    constants = kpp.Constants(**OmegaConf.to_container(cfg.constants))
    dTdz = cfg.forcing.N2 / (constants.alpha * constants.g)
    T0 = cfg.forcing.surface_temperature
    temperature_flux = cfg.forcing.buoyancy_flux / (constants.alpha * constants.g)

    def initial_temperature(z):
        return T0 + dTdz * z

    closure = cfg.model.closure
    if closure == "kpp":
        parameters = kpp.Parameters.default(**OmegaConf.to_container(cfg.parameters))
        model = kpp.Model(grid=grid, parameters=parameters, constants=constants,
                          stepper=cfg.model.stepper)
        model.solution.set(T=initial_temperature, S=cfg.forcing.salinity)
        model.bcs.U.top = FluxBoundaryCondition(cfg.forcing.wind_stress)
        model.bcs.T.top = FluxBoundaryCondition(temperature_flux)
        model.bcs.T.bottom = GradientBoundaryCondition(dTdz)
    elif closure == "diffusion":
        model = diffusion.Model(grid=grid, K=cfg.diffusion.K, mu=cfg.diffusion.mu, W=cfg.diffusion.W,
                                stepper=cfg.model.stepper)
        model.solution.c = initial_temperature
        model.bcs.c.top = FluxBoundaryCondition(temperature_flux)
        model.bcs.c.bottom = GradientBoundaryCondition(dTdz)
    else:
        raise ConfigurationError(f"Unknown closure: {closure}. Must be one of: kpp, diffusion")

    logger.info("Built %r", model)
    return model


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig):
    """
    Run a single-column model with configurable forcing

    Example:
        python -m oceanturb.main
        python -m oceanturb.main model.stepper=ForwardEuler run.dt=10
        python -m oceanturb.main model.closure=diffusion diffusion.K=1e-3
        python -m oceanturb.main -m forcing.buoyancy_flux=1e-8,1e-7 +parameters.CRi=0.3
    """
    logging.getLogger("oceanturb").setLevel(cfg.logging.level)
    model = build_model(cfg)
    run_until(model, cfg.run.dt, cfg.run.t_final)

    if isinstance(model, kpp.Model):
        kpp.update_state(model)
        log_state(model)
    else:
        logger.info("t=%g: column integral of c = %.6g", model.clock.time, float(model.solution.c.integral()))
    return model


if __name__ == "__main__":
    main()
