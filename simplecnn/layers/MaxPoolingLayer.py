from .Layer import Layer
from ..helpers.Backend import backend
from ..exceptions import ShapeMismatchError


class MaxPoolingLayer(Layer):
    def __init__(self, pool_size=2):
        if int(pool_size) != pool_size or pool_size < 1:
            raise ValueError(f"pool_size must be a positive integer, got {pool_size!r}")
        # non-overlapping windows: stride == pool_size
        self.pool_size = int(pool_size)

        # Need to store input shape and max indices during forward pass
        self.in_shape = None
        self.max_rows = None
        self.max_cols = None

    def forward(self, x):
        # x shape: (num_filters, H, W)
        # return: (num_filters, H // pool_size, W // pool_size)
        x = backend.ensure_array(x)
        if x.ndim != 3:
            raise ShapeMismatchError(
                f"MaxPoolingLayer expects (filters, H, W), got shape {tuple(x.shape)}"
            )
        F, H_in, W_in = x.shape
        p = self.pool_size

        # remainder rows/cols are dropped
        H_out = H_in // p
        W_out = W_in // p

        # # Loop version (clear but slow)
        # for f in range(F):
        #     for i in range(H_out):
        #         for j in range(W_out):
        #             region = x[f, i*p:(i+1)*p, j*p:(j+1)*p]
        #             out[f, i, j] = np.max(region)

        # (F, H_out, p, W_out, p) -> (F, H_out, W_out, p*p), window cells in row-major order
        cropped = x[:, :H_out * p, :W_out * p]
        windows = backend.reshape(cropped, (F, H_out, p, W_out, p))
        windows = backend.reshape(backend.transpose(windows, (0, 1, 3, 2, 4)), (F, H_out, W_out, p * p))

        # argmax returns the first occurrence, so the earliest-scanned cell wins ties
        argmax = backend.argmax(windows, axis=-1)  # (F, H_out, W_out)

        # absolute (row, col) of each winner inside its filter plane
        rows = backend.arange(H_out)[None, :, None] * p + argmax // p
        cols = backend.arange(W_out)[None, None, :] * p + argmax % p

        self.in_shape = x.shape
        self.max_rows = rows
        self.max_cols = cols

        return backend.max(windows, axis=-1)

    def backward(self, grad_out):
        in_shape = self._require(self.in_shape)
        grad_out = backend.ensure_array(grad_out)
        self._check_shape(grad_out, self.max_rows.shape, "grad_out")

        F = in_shape[0]
        grad_x = backend.zeros(in_shape)
        filter_idx = backend.arange(F)[:, None, None]
        # windows never overlap, so plain assignment routes each gradient to one cell
        grad_x[filter_idx, self.max_rows, self.max_cols] = grad_out
        return grad_x
