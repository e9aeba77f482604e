from ..exceptions import InvalidStateError, ShapeMismatchError


class Layer:
    # attribute names of the gradient buffers, reset to None once consumed
    grad_names = ()

    # Subclasses override as needed
    def forward(self, x):
        raise NotImplementedError

    def backward(self, grad_out):
        # Return grad wrt input
        raise NotImplementedError

    def params(self):
        # Return list of parameter ndarrays (e.g., [W, b])
        return []

    def grads(self):
        # Return list of gradient ndarrays matching params(); None until backward()
        return []

    def update_params(self, learning_rate):
        """Plain gradient descent, in place: param -= learning_rate * grad."""
        grads = self.grads()
        if any(g is None for g in grads):
            raise InvalidStateError(
                f"{type(self).__name__}: backward() must run before update_params()"
            )
        for p, g in zip(self.params(), grads):
            p -= learning_rate * g
        # each gradient is applied exactly once
        self._clear_grads()

    # ----- helpers -----
    def _clear_grads(self):
        for name in self.grad_names:
            setattr(self, name, None)

    def _require(self, cached, what="forward()"):
        if cached is None:
            raise InvalidStateError(
                f"{type(self).__name__}: {what} must run before backward()"
            )
        return cached

    def _check_shape(self, x, expected, name):
        if tuple(x.shape) != tuple(expected):
            raise ShapeMismatchError(
                f"{type(self).__name__}: {name} has shape {tuple(x.shape)}, "
                f"expected {tuple(expected)}"
            )
