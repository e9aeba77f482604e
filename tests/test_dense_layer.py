import numpy as np
import pytest

from conftest import numeric_grad, assert_grad_close
from simplecnn.exceptions import InvalidStateError, ShapeMismatchError
from simplecnn.layers import DenseLayer


def test_forward(rng):
    dense = DenseLayer(5, 3)
    x = rng.normal(size=5)
    out = dense.forward(x)
    expected = [dense.biases[i] + sum(dense.weights[i, j] * x[j] for j in range(5)) for i in range(3)]
    assert np.allclose(out, expected)


def test_parameter_shapes():
    dense = DenseLayer(1352, 10)
    assert dense.weights.shape == (10, 1352)
    assert dense.biases.shape == (10,)
    assert abs(dense.weights.mean()) < 0.05
    assert abs(dense.weights.std() - 1.0) < 0.05


def test_backward(rng):
    dense = DenseLayer(4, 3)
    x = rng.normal(size=4)
    g = rng.normal(size=3)
    dense.forward(x)
    grad_x = dense.backward(g)
    assert np.allclose(dense.grad_biases, g)
    assert np.allclose(dense.grad_weights, np.outer(g, x))
    assert np.allclose(grad_x, [sum(dense.weights[i, j] * g[i] for i in range(3)) for j in range(4)])


def test_gradients_match_finite_differences(rng):
    dense = DenseLayer(6, 4)
    x = rng.normal(size=6)
    g = rng.normal(size=4)

    def objective():
        return float(np.dot(dense.forward(x), g))

    dense.forward(x)
    grad_x = dense.backward(g)
    grad_weights = dense.grad_weights.copy()
    for index in [(0, 0), (3, 5), (2, 1)]:
        assert_grad_close(numeric_grad(objective, dense.weights, index), grad_weights[index])
    for j in range(6):
        assert_grad_close(numeric_grad(objective, x, (j,)), grad_x[j])


def test_update_params(rng):
    dense = DenseLayer(4, 2)
    dense.forward(rng.normal(size=4))
    dense.backward(rng.normal(size=2))
    w, b = dense.weights.copy(), dense.biases.copy()
    gw, gb = dense.grad_weights.copy(), dense.grad_biases.copy()
    dense.update_params(0.5)
    assert np.allclose(dense.weights, w - 0.5 * gw)
    assert np.allclose(dense.biases, b - 0.5 * gb)


def test_update_twice_without_backward(rng):
    dense = DenseLayer(4, 2)
    dense.forward(rng.normal(size=4))
    dense.backward(rng.normal(size=2))
    dense.update_params(0.1)
    assert dense.grads() == [None, None]
    w = dense.weights.copy()
    with pytest.raises(InvalidStateError):
        dense.update_params(0.1)
    assert np.array_equal(dense.weights, w)


def test_update_after_new_forward_without_backward(rng):
    dense = DenseLayer(4, 2)
    x = rng.normal(size=4)
    dense.forward(x)
    dense.backward(rng.normal(size=2))
    dense.forward(x)
    w = dense.weights.copy()
    with pytest.raises(InvalidStateError):
        dense.update_params(0.1)
    assert np.array_equal(dense.weights, w)


def test_forward_wrong_length():
    with pytest.raises(ShapeMismatchError):
        DenseLayer(4, 2).forward(np.zeros(5))


def test_backward_wrong_length(rng):
    dense = DenseLayer(4, 2)
    dense.forward(rng.normal(size=4))
    with pytest.raises(ShapeMismatchError):
        dense.backward(np.zeros(3))


def test_backward_before_forward():
    with pytest.raises(InvalidStateError):
        DenseLayer(4, 2).backward(np.zeros(2))


def test_update_before_backward():
    with pytest.raises(InvalidStateError):
        DenseLayer(4, 2).update_params(0.1)
