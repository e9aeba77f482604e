import csv
import numpy as np

IMAGE_SIDE = 28
NUM_PIXELS = IMAGE_SIDE * IMAGE_SIDE
NUM_CLASSES = 10


def one_hot(y, num_classes=NUM_CLASSES):
    y = np.asarray(y).astype(int).ravel()
    oh = np.zeros((y.size, num_classes), dtype=np.float64)
    oh[np.arange(y.size), y] = 1.0
    return oh   # (N, num_classes)


def load_mnist_csv(path, skip_header=True, limit=None):
    """
    Load an MNIST CSV file: one label followed by 784 pixel values per row.

    Rows with the wrong number of fields, blank rows and rows whose label is
    outside [0, 9] are skipped. A non-numeric field raises ValueError.

    Returns:
        images:  (N, 28, 28) float64, normalized to [0, 1]
        targets: (N, 10) one-hot
    """
    labels = []
    pixels = []
    with open(path, newline="") as f:
        reader = csv.reader(f)
        if skip_header:
            next(reader, None)
        for row in reader:
            if len(row) != NUM_PIXELS + 1:
                continue
            try:
                values = [int(v) for v in row]
            except ValueError as e:
                raise ValueError(f"{path}, line {reader.line_num}: {e}") from e
            if not 0 <= values[0] < NUM_CLASSES:
                continue
            labels.append(values[0])
            pixels.append(values[1:])
            if limit is not None and len(labels) >= limit:
                break

    images = np.asarray(pixels, dtype=np.float64).reshape(-1, IMAGE_SIDE, IMAGE_SIDE) / 255.0
    return images, one_hot(labels)


def load_mnist_keras():
    """
    Keras MNIST in the same layout as load_mnist_csv().

    Returns:
        (x_train, y_train), (x_test, y_test)
    """
    from tensorflow import keras

    (x_train, y_train), (x_test, y_test) = keras.datasets.mnist.load_data()

    # Normalize to [0,1] but keep 2D structure
    x_train = x_train.astype(np.float64) / 255.0  # (60000, 28, 28)
    x_test = x_test.astype(np.float64) / 255.0    # (10000, 28, 28)
    return (x_train, one_hot(y_train)), (x_test, one_hot(y_test))
