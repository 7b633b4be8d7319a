import unittest
import numpy as np
import pytest

steppers = ["ForwardEuler", "BackwardEuler"]


class TestDiffusionModel(unittest.TestCase):

    def setUp(self):
        global Model, FieldBoundaryConditions, FluxBoundaryCondition, GradientBoundaryCondition
        global step, run_until, time, ConfigurationError
        from oceanturb.diffusion import Model
        from oceanturb.boundary_conditions import (
            FieldBoundaryConditions, FluxBoundaryCondition, GradientBoundaryCondition
        )
        from oceanturb.model import step, run_until, time
        from oceanturb.errors import ConfigurationError

    def test_basic(self):
        model = Model(N=4, H=2, K=0.1)
        self.assertEqual(model.parameters.K, 0.1)
        self.assertEqual(model.grid.N, 4)
        self.assertEqual(model.grid.H, 2.0)

    def test_set_c(self):
        model = Model(N=4, H=2, K=0.1)
        c0 = [1.0, 2.0, 3.0, 4.0]
        model.solution.c = c0
        self.assertTrue(np.array_equal(model.solution.c.data, c0))

    def test_set_diffusivity(self):
        model = Model(N=4, H=2, K=0.1)
        model.set_diffusivity(0.3)
        self.assertEqual(model.parameters.K, 0.3)

    def test_negative_coefficients(self):
        with self.assertRaises(ConfigurationError):
            Model(K=-1.0)
        with self.assertRaises(ConfigurationError):
            Model(mu=-0.1)

    def test_diffusive_flux_conservation(self):
        for stepper in steppers:
            for top_flux, bottom_flux in ((0.3, 0.13), (0.0, 0.0), (-0.2, 0.4)):
                model = Model(N=10, H=1, K=1.0, stepper=stepper)
                model.bcs.c.top = FluxBoundaryCondition(top_flux)
                model.bcs.c.bottom = FluxBoundaryCondition(bottom_flux)
                model.solution.c = lambda z: np.exp(z)

                C0 = float(model.solution.c.integral())
                step(model, 1e-6, 10)
                C = C0 - (top_flux - bottom_flux) * time(model)

                self.assertAlmostEqual(float(model.solution.c.integral()), C, places=12)

    def test_damping(self):
        mu = 0.1
        for stepper in steppers:
            bcs = {"c": FieldBoundaryConditions(GradientBoundaryCondition(0.0), GradientBoundaryCondition(0.0))}
            model = Model(N=3, H=1.0, K=0.0, mu=mu, stepper=stepper, bcs=bcs)
            model.solution.c = 1.0

            step(model, 1e-3, 100)

            c_answer = np.exp(-mu * time(model))
            self.assertTrue(np.all(np.abs(np.asarray(model.solution.c.data) - c_answer) < 1e-6))

    def test_advection(self):
        H, W, width, depth = 1.0, -1.0, 0.1, 0.5

        def gaussian(z, t):
            return np.exp(-(z + depth - W * t) ** 2 / (2 * width ** 2))

        for stepper in steppers:
            bcs = {"c": FieldBoundaryConditions(GradientBoundaryCondition(0.0), GradientBoundaryCondition(0.0))}
            model = Model(N=100, H=H, K=0.0, W=W, stepper=stepper, bcs=bcs)
            model.solution.c = lambda z: gaussian(z, 0.0)

            step(model, 1e-3, 10)

            c_answer = gaussian(np.asarray(model.grid.zc), time(model))
            self.assertLess(np.linalg.norm(c_answer - np.asarray(model.solution.c.data)), 0.05)

    def test_advection_conserves_tracer(self):
        for W in (-0.5, 0.5):
            model = Model(N=20, H=1.0, K=0.1, W=W)
            model.solution.c = lambda z: np.exp(4 * z)
            C0 = float(model.solution.c.integral())
            step(model, 1e-3, 20)
            self.assertAlmostEqual(float(model.solution.c.integral()), C0, places=12)
            self.assertEqual(model.parameters.W, W)


def cosine_error(model, t):
    z = np.asarray(model.grid.zc)
    c_answer = np.exp(-4 * t) * np.cos(2 * z)
    return np.linalg.norm(c_answer - np.asarray(model.solution.c.data))


@pytest.mark.parametrize("stepper", steppers)
def test_diffusion_cosine(stepper):
    from oceanturb.diffusion import Model
    from oceanturb.model import step, time

    model = Model(N=100, H=np.pi / 2, K=1.0, stepper=stepper)
    model.solution.c = lambda z: np.cos(2 * z)

    step(model, 1e-3)

    assert cosine_error(model, time(model)) < model.grid.N * 1e-6


@pytest.mark.parametrize("stepper", steppers)
def test_diffusion_cosine_run_until(stepper):
    from oceanturb.diffusion import Model
    from oceanturb.model import run_until, time

    model = Model(N=100, H=np.pi / 2, K=1.0, stepper=stepper)
    model.solution.c = lambda z: np.cos(2 * z)

    dt = 1e-3
    t_final = 3 * dt / 2
    run_until(model, dt, t_final)

    assert time(model) == t_final
    assert cosine_error(model, t_final) < model.grid.N * 1e-6
