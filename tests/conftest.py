import numpy as np
import pytest

from simplecnn import SimpleCNN
from simplecnn.helpers.Backend import backend


@pytest.fixture(autouse=True)
def seeded():
    backend.seed(1234)


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def image(rng):
    return rng.uniform(0.0, 1.0, size=(28, 28))


@pytest.fixture
def target():
    t = np.zeros(10)
    t[3] = 1.0
    return t


@pytest.fixture
def small_net():
    """
    Default topology with the dense weights scaled down, so the softmax starts
    near uniform instead of saturated.
    """
    net = SimpleCNN(seed=7, verbose=0)
    net.dense.weights *= 0.01
    net.dense.biases *= 0.01
    return net


def numeric_grad(f, array, index, h=1e-5):
    """Central finite difference of scalar f() w.r.t. array[index]."""
    old = array[index]
    array[index] = old + h
    plus = f()
    array[index] = old - h
    minus = f()
    array[index] = old
    return (plus - minus) / (2 * h)


def assert_grad_close(numeric, analytic, rtol=1e-4, atol=1e-7):
    assert abs(numeric - analytic) <= rtol * max(abs(numeric), abs(analytic)) + atol, (
        f"numeric {numeric!r} vs analytic {analytic!r}"
    )
