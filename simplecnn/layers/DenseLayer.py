from .Layer import Layer
from ..helpers.Backend import backend
from ..exceptions import ShapeMismatchError


class DenseLayer(Layer):
    grad_names = ("grad_weights", "grad_biases")

    def __init__(self, input_size, output_size):
        # weights: (output_size, input_size)
        # biases: (output_size,)
        for name, value in (("input_size", input_size), ("output_size", output_size)):
            if int(value) != value or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        self.input_size = int(input_size)
        self.output_size = int(output_size)

        # standard normal initialization
        self.weights = backend.randn(self.output_size, self.input_size)
        self.biases = backend.randn(self.output_size)

        self.grad_weights = None
        self.grad_biases = None
        self.x = None

    def forward(self, x):
        # x shape: (input_size,)
        # return: (output_size,)
        self._clear_grads()
        x = backend.ensure_array(x)
        self._check_shape(x, (self.input_size,), "input")
        self.x = x  # cache for backward
        return backend.matmul(self.weights, x) + self.biases

    def backward(self, grad_out):
        x = self._require(self.x)
        grad_out = backend.ensure_array(grad_out)
        self._check_shape(grad_out, (self.output_size,), "grad_out")
        self.grad_weights = backend.outer(grad_out, x)  # (out, in)
        self.grad_biases = grad_out.copy()
        return backend.matmul(backend.transpose(self.weights), grad_out)  # (in,)

    def params(self):
        return [self.weights, self.biases]

    def grads(self):
        return [self.grad_weights, self.grad_biases]
