"""Pytest fixtures for specfit tests."""

import pytest

import numpy as np

from specfit.core.domain.signals import KineticTrace, Spectrum
from specfit.core.lineshapes.functions import irf_exp_decay, lorentzian


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def lorentzian_spectrum(rng):
    """Lorentzian (A=1, center 2060, fwhm 20) on a 0.01 baseline, 200 points."""
    x = np.linspace(1950.0, 2150.0, 200)
    y = lorentzian([1.0, 2060.0, 20.0, 0.01], x)
    y = y + rng.normal(0.0, 0.002, x.size)
    return Spectrum(x, y, {"sample_id": "cn-stretch"})


@pytest.fixture
def doublet_spectrum(rng):
    """Two partially overlapping Gaussians on a sloped baseline."""
    x = np.linspace(0.0, 100.0, 400)
    y = (
        0.8 * np.exp(-4 * np.log(2) * (x - 40.0) ** 2 / 8.0**2)
        + 0.5 * np.exp(-4 * np.log(2) * (x - 55.0) ** 2 / 10.0**2)
        + 0.05
        + 0.001 * x
    )
    y = y + rng.normal(0.0, 0.003, x.size)
    return Spectrum(x, y)


@pytest.fixture
def biexp_trace(rng):
    """Bi-exponential IRF-convolved trace: taus 1.5 and 15, amplitudes 0.3 and -0.2."""
    t = np.linspace(-5.0, 80.0, 600)
    s = irf_exp_decay([0.3, 1.5, 0.0, 0.25, 0.0], t) + irf_exp_decay(
        [-0.2, 15.0, 0.0, 0.25, 0.0], t
    )
    s = s + rng.normal(0.0, 0.002, t.size)
    return KineticTrace(t, s, {"sample_id": "biexp"})


@pytest.fixture
def global_traces(rng):
    """ESA and GSB traces sharing tau=5 and sigma=0.2, amplitudes 0.4 and -0.3."""
    t = np.linspace(-2.0, 30.0, 400)
    traces = []
    for amplitude in (0.4, -0.3):
        s = irf_exp_decay([amplitude, 5.0, 0.0, 0.2, 0.0], t)
        traces.append(KineticTrace(t, s + rng.normal(0.0, 0.002, t.size)))
    return traces


@pytest.fixture
def sample_config_file(tmp_path):
    """Create a sample TOML configuration file."""
    config_content = """
[solver]
max_nfev = 2000

[baseline]
method = "snip"
iterations = 30

[peaks]
model = "gaussian"
n_peaks = 2
baseline_order = 0
region = [1950.0, 2150.0]

[decay]
n_exp = 2
irf = false
t_start = 0.0
"""
    config_path = tmp_path / "specfit.toml"
    config_path.write_text(config_content)
    return config_path
