from .SimpleCNN import SimpleCNN
from .exceptions import (
    SimpleCNNError,
    ShapeMismatchError,
    InvalidStateError,
    ModelFormatError,
)

__all__ = [
    "SimpleCNN",
    "SimpleCNNError",
    "ShapeMismatchError",
    "InvalidStateError",
    "ModelFormatError",
]
