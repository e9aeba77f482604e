class SimpleCNNError(Exception):
    """Base class for errors raised by simplecnn."""


class ShapeMismatchError(SimpleCNNError, ValueError):
    """An array does not have the shape a layer expects."""


class InvalidStateError(SimpleCNNError, RuntimeError):
    """A layer was used out of order, e.g. backward() before forward()."""


class ModelFormatError(SimpleCNNError, ValueError):
    """A persisted model file could not be parsed."""
