import numpy as np
import pytest

@pytest.fixture(scope="session")
def seed():
    return 12345

@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)
