import numpy as np
import pytest


@pytest.fixture(scope="session")
def pulse():
    # zero baseline, fast rise and exponential decay
    wf = np.zeros(500, dtype="int16")
    t = np.arange(200)
    wf[150:350] = 400 * np.exp(-t / 60) * (1 - np.exp(-t / 5))
    return wf


@pytest.fixture(scope="session")
def noisy_pulse(pulse):
    rng = np.random.default_rng(1234)
    return (pulse + rng.integers(-1, 2, len(pulse))).astype("int16")
