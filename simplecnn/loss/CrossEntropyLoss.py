from ..helpers.Backend import backend
from ..helpers.activations import softmax, cross_entropy_loss
from ..exceptions import InvalidStateError, ShapeMismatchError


class CrossEntropyLoss:
    def __init__(self, eps=1e-15):
        self.eps = eps
        # cache from forward
        self.probs = None
        self.target = None

    def forward(self, logits, target):
        """
        logits: (num_classes,)  -- pre-softmax
        target: (num_classes,)  -- one-hot
        returns: (loss_scalar, probs)
        """
        logits = backend.ensure_array(logits)
        target = backend.ensure_array(target)
        if target.shape != logits.shape:
            raise ShapeMismatchError(
                f"target shape {target.shape} does not match logits shape {logits.shape}"
            )

        probs = softmax(logits)
        loss = cross_entropy_loss(probs, target, eps=self.eps)

        self.probs = probs
        self.target = target
        return loss, probs

    def backward(self):
        """
        dL/dlogits = probs - target
        This is the fused softmax+CE gradient; it only holds because softmax
        and cross-entropy are applied together.
        """
        if self.probs is None or self.target is None:
            raise InvalidStateError("Must call forward() before backward()")
        return self.probs - self.target
