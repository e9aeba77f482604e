from .Layer import Layer
from ..helpers.Backend import backend
from ..exceptions import ShapeMismatchError


class FlattenLayer(Layer):
    def __init__(self):
        self.in_shape = None

    def forward(self, x):
        # x shape: (filters, H, W)
        # return: (filters*H*W,) in filter, row, column order
        x = backend.ensure_array(x)
        if x.ndim != 3:
            raise ShapeMismatchError(
                f"FlattenLayer expects (filters, H, W), got shape {tuple(x.shape)}"
            )
        self.in_shape = x.shape
        return backend.reshape(x, (-1,))

    def backward(self, grad_out):
        in_shape = self._require(self.in_shape)
        grad_out = backend.ensure_array(grad_out)
        size = in_shape[0] * in_shape[1] * in_shape[2]
        self._check_shape(grad_out, (size,), "grad_out")
        return backend.reshape(grad_out, in_shape)
