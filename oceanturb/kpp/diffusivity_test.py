import jax.numpy as jnp
import numpy as np
import pytest

from oceanturb.kpp.diffusivity import (
    omega_b, omega_tau, isunstable, nondimensional_depth, shape, velocity_scale,
    w_scale_stable, w_scale_unstable, n_U, n_T,
)
from oceanturb.kpp.kpp_types import Parameters, State


class TestVelocityScales:

    def test_omega_tau(self):
        assert omega_tau(np.sqrt(8), -np.sqrt(8)) == pytest.approx(2.0)
        assert omega_tau(0.0, 0.0) == 0.0

    def test_omega_b(self):
        assert float(omega_b(2.1, 10.0)) == pytest.approx(21.0 ** (1 / 3))
        assert float(omega_b(-2.1, 10.0)) == pytest.approx(21.0 ** (1 / 3))
        assert float(omega_b(2.1, 0.0)) == 0.0

    def test_isunstable(self):
        assert isunstable(1e-8)
        assert not isunstable(0.0)
        assert not isunstable(-1e-8)

    def test_zero_forcing(self):
        state = State.zeros().copy(h=10.0)
        d = jnp.linspace(0.0, 1.0, 11)
        for tracer in (False, True):
            w = velocity_scale(state, Parameters(), d, tracer=tracer)
            assert jnp.all(w == 0)

    def test_pure_wind(self):
        Ckappa, Fu = 0.7, 2.1
        params = Parameters(Ckappa=Ckappa)
        state = State.zeros().copy(Fu=Fu, h=9.0)
        for tracer in (False, True):
            w = velocity_scale(state, params, 0.3, tracer=tracer)
            assert float(w) == pytest.approx(Ckappa * np.sqrt(Fu))

    def test_stable_wind(self):
        Ckappa, Cstab, Fu, Fb, h, d = 0.7, 0.3, 2.1, -1.3, 9.0, 5 / 9
        params = Parameters(Ckappa=Ckappa, Cstab=Cstab)
        state = State.zeros().copy(Fu=Fu, Fb=Fb, h=h)
        rb = abs(h * Fb) / Fu ** (3 / 2)
        w_answer = Ckappa * np.sqrt(Fu) / (1 + Cstab * rb * d)
        for tracer in (False, True):
            assert float(velocity_scale(state, params, d, tracer=tracer)) == pytest.approx(w_answer)

    def test_unstable_wind(self):
        Ckappa, Cunst, Ceps, Fu, Fb, h = 0.7, 0.3, 0.5, 2.1, 1.1, 9.0
        params = Parameters(Ckappa=Ckappa, Cunst=Cunst, Ceps=Ceps, Cd_U=np.inf, Cd_T=np.inf)
        state = State.zeros().copy(Fu=Fu, Fb=Fb, h=h)
        rb = abs(h * Fb) / Fu ** (3 / 2)

        for d, d_eps in ((5 / 9, Ceps), (3 / 9, 3 / 9)):
            w_U = Ckappa * np.sqrt(Fu) * (1 + Cunst * rb * d_eps) ** (1 / 4)
            w_T = Ckappa * np.sqrt(Fu) * (1 + Cunst * rb * d_eps) ** (1 / 2)
            assert float(velocity_scale(state, params, d, tracer=False)) == pytest.approx(w_U)
            assert float(velocity_scale(state, params, d, tracer=True)) == pytest.approx(w_T)

    def test_unstable_convective(self):
        Ceps, Cb_U, Cb_T, Fu, Fb, h = 0.5, 1.1, 0.1, -2.1, 0.5, 9.0
        params = Parameters(Ceps=Ceps, Cd_U=0.0, Cd_T=0.0, Cb_U=Cb_U, Cb_T=Cb_T)
        state = State.zeros().copy(Fu=Fu, Fb=Fb, h=h)
        rtau = abs(Fu) ** (3 / 2) / abs(h * Fb)
        wb = abs(h * Fb) ** (1 / 3)

        for d, d_eps in ((5 / 9, Ceps), (3 / 9, 3 / 9)):
            w_U = Cb_U * wb * (d_eps + params.Ctau_U * rtau) ** (1 / 3)
            w_T = Cb_T * wb * np.cbrt(d_eps + params.Ctau_T * rtau)
            assert float(velocity_scale(state, params, d, tracer=False)) == pytest.approx(w_U)
            assert float(velocity_scale(state, params, d, tracer=True)) == pytest.approx(w_T)

    def test_pure_convection(self):
        Ceps, Cb_U, Cb_T, Fb, h = 1e-3, 3.1, 1.7, 100.0, 10.0
        params = Parameters(Ceps=Ceps, Cb_U=Cb_U, Cb_T=Cb_T)
        state = State.zeros().copy(Fb=Fb, h=h)
        w_star = (h * Fb) ** (1 / 3)
        d = 0.4
        assert float(velocity_scale(state, params, d, tracer=False)) == pytest.approx(Cb_U * Ceps ** (1 / 3) * w_star)
        assert float(velocity_scale(state, params, d, tracer=True)) == pytest.approx(Cb_T * Ceps ** (1 / 3) * w_star)

    def test_wind_to_convection_transition(self):
        # Near the surface the wind branch applies, below Cd (omega_tau/omega_b)³ convection does
        params = Parameters(Ceps=1.0)
        Fu, Fb, h = 1e-4, 1e-7, 50.0
        state = State.zeros().copy(Fu=Fu, Fb=Fb, h=h)
        wt, wb = omega_tau(Fu, 0.0), float(omega_b(Fb, h))
        d_switch = params.Cd_U * (wt / wb) ** 3
        assert 0 < d_switch < 1

        above = w_scale_unstable(params.Cd_U, params.Ckappa, params.Cunst, params.Cb_U, params.Ctau_U,
                                 wt, wb, 0.5 * d_switch, n_U)
        below = w_scale_unstable(params.Cd_U, params.Ckappa, params.Cunst, params.Cb_U, params.Ctau_U,
                                 wt, wb, min(1.0, 2 * d_switch), n_U)
        assert float(above) == pytest.approx(params.Ckappa * wt * (1 + params.Cunst * (wb / wt) ** 3 * 0.5 * d_switch) ** n_U)
        assert float(below) == pytest.approx(params.Cb_U * wb * np.cbrt(min(1.0, 2 * d_switch) + params.Ctau_U * (wt / wb) ** 3))

    def test_stable_without_wind(self):
        assert float(w_scale_stable(0.4, 2.0, 0.0, 1.0, 0.5)) == 0.0
        assert float(w_scale_unstable(0.5, 0.4, 6.4, 0.6, 0.1, 0.0, 0.0, 0.1, n_T)) == 0.0


class TestShape:

    def test_shape(self):
        d = jnp.array([-0.5, 0.0, 1 / 3, 0.5, 1.0, 1.5, jnp.inf])
        expected = jnp.array([0.0, 0.0, 4 / 27, 0.125, 0.0, 0.0, 0.0])
        assert jnp.allclose(shape(d), expected)

    def test_nondimensional_depth(self):
        zf = jnp.linspace(-10.0, 0.0, 11)
        assert jnp.allclose(nondimensional_depth(zf, 5.0), -zf / 5.0)
        assert jnp.all(jnp.isinf(nondimensional_depth(zf, 0.0)))
