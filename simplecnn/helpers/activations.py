from .Backend import backend


def relu(x):
    return backend.maximum(0.0, x)


def relu_prime(x):
    # derivative at exactly 0 is taken as 0
    return (x > 0).astype(backend.default_float)


def softmax(x):
    # x shape: (num_classes,)
    # subtracting the max keeps exp() from overflowing
    exp_x = backend.exp(x - backend.max(x))
    return exp_x / backend.sum(exp_x)


def cross_entropy_loss(probs, target, eps=1e-15):
    """
    probs:  (num_classes,) softmax output
    target: (num_classes,) one-hot vector
    eps keeps log() away from 0 when a probability underflows.
    """
    return -backend.to_scalar(backend.sum(target * backend.log(probs + eps)))
