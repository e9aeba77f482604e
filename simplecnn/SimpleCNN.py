import time
import numpy as np

from .layers import (
    ConvolutionLayer,
    MaxPoolingLayer,
    FlattenLayer,
    DenseLayer,
)
from .loss.CrossEntropyLoss import CrossEntropyLoss
from .helpers.activations import softmax
from .helpers.model_io import save_model, load_model
from .helpers.Backend import backend
from .exceptions import ShapeMismatchError


class SimpleCNN:
    """
    Conv(ReLU) -> MaxPool -> Flatten -> Dense -> softmax, trained one example
    at a time with plain gradient descent.

    With the defaults (28x28 input, 8 filters 3x3, stride 1, pool 2):
        (28, 28) -> (8, 26, 26) -> (8, 13, 13) -> (1352,) -> (10,)
    """

    def __init__(
        self,
        num_filters=8,
        filter_size=3,
        stride=1,
        pool_size=2,
        image_size=28,
        num_classes=10,
        seed=None,
        verbose=1,
    ):
        if seed is not None:
            backend.seed(seed)

        self.image_size = image_size
        self.num_classes = num_classes
        self.verbose = verbose

        self.conv = ConvolutionLayer(num_filters, filter_size, stride=stride)
        _, conv_h, conv_w = self.conv.output_shape(image_size, image_size)
        if conv_h <= 0 or conv_w <= 0:
            raise ValueError(
                f"filter_size={filter_size}, stride={stride} do not fit a {image_size}x{image_size} image"
            )
        self.pool = MaxPoolingLayer(pool_size)
        self.flatten = FlattenLayer()
        flat_size = num_filters * (conv_h // pool_size) * (conv_w // pool_size)
        if flat_size == 0:
            raise ValueError(f"pool_size={pool_size} is larger than the {conv_h}x{conv_w} feature maps")
        self.dense = DenseLayer(flat_size, num_classes)

        self.layers = [self.conv, self.pool, self.flatten, self.dense]
        self.loss_fn = CrossEntropyLoss()

    def forward(self, image):
        """
        image: (image_size, image_size)
        returns: (probs, logits), both (num_classes,)
        """
        x = backend.ensure_array(image)
        for layer in self.layers:
            x = layer.forward(x)
        logits = x
        return softmax(logits), logits

    def backward(self, grad_logits, learning_rate):
        """
        Backprop from the logits down to the image, updating dense and conv
        parameters right after their own backward call.
        """
        grad = self.dense.backward(grad_logits)
        self.dense.update_params(learning_rate)
        grad = self.flatten.backward(grad)
        grad = self.pool.backward(grad)
        grad = self.conv.backward(grad)
        self.conv.update_params(learning_rate)
        return grad

    def train_example(self, image, target, learning_rate):
        """Forward, loss, backward and update on a single example. Returns the loss."""
        target = backend.ensure_array(target)
        if target.shape != (self.num_classes,):
            raise ShapeMismatchError(
                f"target has shape {tuple(target.shape)}, expected ({self.num_classes},)"
            )
        # probs - target is only the loss gradient for a one-hot target
        binary = bool(backend.xp.all((target == 0.0) | (target == 1.0)))
        if not binary or backend.to_scalar(backend.sum(target)) != 1.0:
            raise ValueError(f"target must be one-hot, got {backend.to_cpu(target).tolist()}")
        _, logits = self.forward(image)
        loss, _ = self.loss_fn.forward(logits, target)
        # softmax + cross-entropy: dL/dlogits = probs - target
        self.backward(self.loss_fn.backward(), learning_rate)
        return loss

    def predict_proba(self, image):
        probs, _ = self.forward(image)
        return backend.to_cpu(probs)

    def predict(self, image):
        # np.argmax keeps the first index on ties
        return int(np.argmax(self.predict_proba(image)))

    def evaluate(self, images, targets):
        """Mean cross-entropy and accuracy over a dataset, without updating."""
        loss_fn = CrossEntropyLoss()
        N = len(images)
        if N == 0:
            return 0.0, 0.0
        total_loss = 0.0
        correct = 0
        for image, target in zip(images, targets):
            _, logits = self.forward(image)
            loss, probs = loss_fn.forward(logits, target)
            total_loss += loss
            if int(np.argmax(backend.to_cpu(probs))) == int(np.argmax(target)):
                correct += 1
        return total_loss / N, correct / N

    def fit(
        self,
        x,
        y_onehot,
        epochs=5,
        learning_rate=0.01,
        shuffle=True,
        x_val=None,
        y_val=None,
        logger=None,
    ):
        """
        Per-example gradient descent: every epoch visits each example once
        (in a fresh random order when shuffle is set) and updates after each.
        """
        N = len(x)
        if N == 0:
            raise ValueError("cannot fit on an empty dataset")
        if len(y_onehot) != N:
            raise ValueError(f"{N} images but {len(y_onehot)} targets")

        history = {"loss": []}
        if x_val is not None:
            history["val_loss"] = []
            history["val_acc"] = []

        if self.verbose > 0:
            print(f"Starting training for {epochs} epochs on {N} examples...")
        for ep in range(1, epochs + 1):
            t0 = time.time()
            idx = backend.permutation(N) if shuffle else np.arange(N)

            total_loss = 0.0
            for i in idx:
                total_loss += self.train_example(x[i], y_onehot[i], learning_rate)
            train_loss = total_loss / N
            history["loss"].append(train_loss)
            metrics = {"loss": train_loss}

            if x_val is not None and y_val is not None:
                val_loss, val_acc = self.evaluate(x_val, y_val)
                history["val_loss"].append(val_loss)
                history["val_acc"].append(val_acc)
                metrics.update({"val_loss": val_loss, "val_acc": val_acc})

            elapsed = time.time() - t0
            if self.verbose > 0:
                line = f"Epoch {ep}/{epochs} - loss: {train_loss:.4f}"
                if "val_loss" in metrics:
                    line += f" - val_loss: {val_loss:.4f} - val_acc: {val_acc:.4f}"
                print(line + f" - {elapsed:.1f}s")

            if logger is not None:
                logger.log_epoch(ep, time_s=elapsed, **metrics)
                logger.save_checkpoint(self, best=False)
                if "val_loss" in metrics and val_loss <= min(history["val_loss"]):
                    logger.save_checkpoint(self, best=True)

        if logger is not None:
            logger.save_json()
        return history

    # model I/O
    def save(self, path):
        return save_model(self, path)

    def load(self, path):
        load_model(self, path)
        return self
