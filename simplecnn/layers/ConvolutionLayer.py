from .Layer import Layer
from ..helpers.Backend import backend
from ..helpers.activations import relu, relu_prime
from ..exceptions import ShapeMismatchError


class ConvolutionLayer(Layer):
    """
    Single-channel convolution followed by ReLU.

    filters: (num_filters, filter_size, filter_size)
    biases:  (num_filters,)
    """

    grad_names = ("grad_filters", "grad_biases")

    def __init__(self, num_filters, filter_size, stride=1):
        for name, value in (("num_filters", num_filters), ("filter_size", filter_size), ("stride", stride)):
            if int(value) != value or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        self.num_filters = int(num_filters)
        self.filter_size = int(filter_size)
        self.stride = int(stride)

        # standard normal initialization for filters and biases
        self.filters = backend.randn(self.num_filters, self.filter_size, self.filter_size)
        self.biases = backend.randn(self.num_filters)

        # grads (filled during backward)
        self.grad_filters = None
        self.grad_biases = None

        # cache (filled during forward)
        self.x = None
        self.z = None
        self.cols = None

    def output_shape(self, H_in, W_in):
        # H_out = (H - filter_size)//stride + 1
        H_out = (H_in - self.filter_size) // self.stride + 1
        W_out = (W_in - self.filter_size) // self.stride + 1
        return self.num_filters, H_out, W_out

    def forward(self, x):
        # x shape: (H, W)
        # return: (num_filters, H_out, W_out)
        # gradients from an earlier cycle must not be applied to this one
        self._clear_grads()
        x = backend.ensure_array(x)
        if x.ndim != 2:
            raise ShapeMismatchError(
                f"ConvolutionLayer expects a 2D image, got shape {tuple(x.shape)}"
            )
        H_in, W_in = x.shape
        F, H_out, W_out = self.output_shape(H_in, W_in)
        if H_out <= 0 or W_out <= 0:
            raise ShapeMismatchError(
                f"filter {self.filter_size}x{self.filter_size} with stride {self.stride} "
                f"does not fit a {H_in}x{W_in} image"
            )
        k, s = self.filter_size, self.stride

        # Window top-left corners: (H_out, W_out)
        h_grid, w_grid = backend.meshgrid(backend.arange(H_out), backend.arange(W_out), indexing="ij")
        # Kernel offsets: (k, k)
        kh_grid, kw_grid = backend.meshgrid(backend.arange(k), backend.arange(k), indexing="ij")

        # Absolute pixel positions of every window cell: (H_out, W_out, k, k)
        h_all = (h_grid * s)[:, :, None, None] + kh_grid[None, None, :, :]
        w_all = (w_grid * s)[:, :, None, None] + kw_grid[None, None, :, :]

        # each row of cols is one window in row-major order: (H_out*W_out, k*k)
        cols = backend.reshape(x[h_all, w_all], (H_out * W_out, k * k))

        # each filter is flattened into a row vector: (F, k*k)
        W_col = backend.reshape(self.filters, (F, k * k))

        # (HW, F) -> (F, H_out, W_out)
        z = backend.matmul(cols, backend.transpose(W_col)) + self.biases
        z = backend.reshape(backend.transpose(z), (F, H_out, W_out))

        self.x = x
        self.z = z
        self.cols = cols
        return relu(z)

    def backward(self, grad_out):
        """
        grad_out: (num_filters, H_out, W_out)
        returns:  grad_input of shape like the cached image
        """
        z = self._require(self.z)
        grad_out = backend.ensure_array(grad_out)
        self._check_shape(grad_out, z.shape, "grad_out")

        F, H_out, W_out = z.shape
        k, s = self.filter_size, self.stride

        # gradient through ReLU
        dZ = grad_out * relu_prime(z)
        go = backend.reshape(dZ, (F, H_out * W_out))  # (F, HW)

        # ---- dW and db ----
        self.grad_filters = backend.reshape(backend.matmul(go, self.cols), (F, k, k))
        self.grad_biases = backend.sum(go, axis=1)

        # ---- dX: scatter each window gradient back onto the image ----
        W_col = backend.reshape(self.filters, (F, k * k))
        cols_grad = backend.reshape(
            backend.matmul(backend.transpose(go), W_col), (H_out, W_out, k, k)
        )
        grad_x = backend.zeros(self.x.shape)
        # one strided slice per kernel offset; windows overlap, slices within one offset do not
        for ki in range(k):
            for kj in range(k):
                grad_x[ki:ki + s * (H_out - 1) + 1:s, kj:kj + s * (W_out - 1) + 1:s] += cols_grad[:, :, ki, kj]

        return grad_x

    # expose params / grads for updates
    def params(self):
        return [self.filters, self.biases]

    def grads(self):
        return [self.grad_filters, self.grad_biases]
