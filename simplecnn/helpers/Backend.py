# simplecnn/helpers/Backend.py
import os
import numpy as np

VERBOSE_STARTUP = False  # set True to print device info on import

try:
    import cupy as cp
    # Quick runtime check
    try:
        _ = (cp.array([1, 2, 3]) + 1).sum()
        CUPY_AVAILABLE = True
        if VERBOSE_STARTUP:
            print("CuPy:", cp.__version__)
            print("GPU count:", cp.cuda.runtime.getDeviceCount())
    except Exception as e:
        if VERBOSE_STARTUP:
            print(f"CuPy installed but CUDA runtime error: {e}")
        cp = None
        CUPY_AVAILABLE = False
except ImportError:
    cp = None
    CUPY_AVAILABLE = False


class Backend:
    """Backend abstraction for NumPy/CuPy compatibility."""
    def __init__(self, use_gpu=False, default_float=np.float64):
        self.use_gpu = bool(use_gpu and CUPY_AVAILABLE)
        self.default_float = default_float
        self.xp = cp if self.use_gpu else np
        if VERBOSE_STARTUP:
            print("Using GPU backend (CuPy)" if self.use_gpu else "Using CPU backend (NumPy)")

    # -------- device transfer --------
    def to_cpu(self, x):
        """Move array to CPU (NumPy)."""
        if self.use_gpu and x is not None and not isinstance(x, np.ndarray):
            return cp.asnumpy(x)
        return x

    def ensure_array(self, x, dtype=None):
        """
        Ensure 'x' is an array of the current backend.
        Accepts list/tuple/np/cp arrays; returns xp.ndarray of default_float
        unless another dtype is requested.
        """
        dtype = self.default_float if dtype is None else dtype
        if self.use_gpu and isinstance(x, np.ndarray):
            return cp.asarray(x, dtype=dtype)
        if (not self.use_gpu) and (cp is not None) and isinstance(x, cp.ndarray):
            return cp.asnumpy(x).astype(dtype, copy=False)
        return self.xp.asarray(x, dtype=dtype)

    def to_scalar(self, x):
        """Python float from a 0-d array on either backend."""
        return float(self.to_cpu(x))

    # -------- array creation --------
    def zeros(self, shape, dtype=None):
        return self.xp.zeros(shape, dtype=self.default_float if dtype is None else dtype)

    def randn(self, *shape):
        """Standard normal samples in the default float dtype."""
        return self.xp.random.randn(*shape).astype(self.default_float)

    def permutation(self, n):
        # indices are always host-side, they drive Python-level loops
        return np.random.permutation(n)

    # -------- math / linalg (thin wrappers) --------
    def maximum(self, a, b):return self.xp.maximum(a, b)
    def sum(self, x, axis=None, keepdims=False):  return self.xp.sum(x, axis=axis, keepdims=keepdims)
    def max(self, x, axis=None, keepdims=False):  return self.xp.max(x, axis=axis, keepdims=keepdims)
    def argmax(self, x, axis=None):               return self.xp.argmax(x, axis=axis)
    def exp(self, x):                              return self.xp.exp(x)
    def log(self, x):                              return self.xp.log(x)
    def transpose(self, x, axes=None):            return self.xp.transpose(x, axes)
    def reshape(self, x, shape):                   return self.xp.reshape(x, shape)
    def matmul(self, a, b):                        return self.xp.matmul(a, b)
    def outer(self, a, b):                         return self.xp.outer(a, b)
    def arange(self, *args, **kwargs):             return self.xp.arange(*args, **kwargs)
    def meshgrid(self, *args, **kwargs):           return self.xp.meshgrid(*args, **kwargs)

    # -------- randomness --------
    def seed(self, seed=42):
        """Seed RNG for reproducibility."""
        if self.use_gpu:
            cp.random.seed(seed)
        np.random.seed(seed)  # keep NumPy seeded too (for shuffling indices)

    # -------- delegate unknown attrs to xp --------
    def __getattr__(self, name):
        return getattr(self.xp, name)


def _env_flag(name):
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


# Global backend instance, GPU only on request
backend = Backend(use_gpu=_env_flag("SIMPLECNN_USE_GPU"))
