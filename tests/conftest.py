"""
Shared pytest fixtures for the estimator and gallery tests.
"""

import logging

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from distviz.config_manager import ConfigManager
from distviz.datasets import load_dataset

# Standard tolerance levels for assertions
STRICT_RTOL = 1e-10    # Closed-form values computed two ways
NORMAL_RTOL = 1e-8     # Agreement with an independent implementation
DENSITY_TOL = 1e-3     # Hand-computed density values
INTEGRAL_TOL = 1e-2    # Trapezoid integral of a density over a finite grid

SCENARIO_SAMPLES = [1, 2, 2, 3, 5, 8, 8, 8]
SCENARIO_EDGES = [0, 2, 4, 6, 8, 10]


@pytest.fixture
def scenario_samples():
    return list(SCENARIO_SAMPLES)


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def cars():
    return load_dataset()


@pytest.fixture
def gallery_config(tmp_path):
    config = ConfigManager(load_env=False)
    config.set("output_dir", str(tmp_path / "charts"))
    config.set("dpi", 40)
    return config


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
