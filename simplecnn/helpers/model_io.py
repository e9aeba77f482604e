"""
Plain-text model format.

    ConvFilters
    <filter_size comma-separated rows>
    EndFilter                          (filter rows + EndFilter, once per filter)
    ConvBiases
    <num_filters comma-separated values>
    DenseWeights
    <output_size lines of input_size comma-separated values>
    DenseBiases
    <output_size comma-separated values>

Values are written with repr() so a save/load round trip is exact.
"""
import numpy as np

from .Backend import backend
from ..exceptions import ModelFormatError


def _format_row(values):
    return ",".join(repr(v) for v in values)


def save_model(model, path):
    filters = backend.to_cpu(model.conv.filters)
    conv_biases = backend.to_cpu(model.conv.biases)
    weights = backend.to_cpu(model.dense.weights)
    dense_biases = backend.to_cpu(model.dense.biases)

    lines = ["ConvFilters"]
    for kernel in filters.tolist():
        for row in kernel:
            lines.append(_format_row(row))
        lines.append("EndFilter")
    lines.append("ConvBiases")
    lines.append(_format_row(conv_biases.tolist()))
    lines.append("DenseWeights")
    for row in weights.tolist():
        lines.append(_format_row(row))
    lines.append("DenseBiases")
    lines.append(_format_row(dense_biases.tolist()))

    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return str(path)


class _LineReader:
    def __init__(self, lines, path):
        self.lines = lines
        self.path = path
        self.index = 0

    def _fail(self, message):
        raise ModelFormatError(f"{self.path}, line {self.index}: {message}")

    def next_line(self, expecting):
        if self.index >= len(self.lines):
            self.index += 1
            self._fail(f"unexpected end of file, expected {expecting}")
        line = self.lines[self.index]
        self.index += 1
        return line

    def marker(self, name):
        line = self.next_line(repr(name))
        if line != name:
            self._fail(f"expected marker {name!r}, found {line!r}")

    def row(self, length, what):
        line = self.next_line(what)
        fields = line.split(",")
        if len(fields) != length:
            self._fail(f"{what}: expected {length} values, found {len(fields)}")
        try:
            return [float(v) for v in fields]
        except ValueError as e:
            self._fail(f"{what}: {e}")

    def finish(self):
        for line in self.lines[self.index:]:
            self.index += 1
            if line.strip():
                self._fail(f"unexpected trailing content {line!r}")


def load_model(model, path):
    """
    Parse and validate the whole file, then copy the values into the model.
    A malformed file raises ModelFormatError and leaves the model untouched.
    """
    with open(path) as f:
        reader = _LineReader(f.read().splitlines(), path)

    conv, dense = model.conv, model.dense
    k = conv.filter_size

    reader.marker("ConvFilters")
    filters = []
    for i in range(conv.num_filters):
        filters.append([reader.row(k, f"filter {i} row {r}") for r in range(k)])
        reader.marker("EndFilter")
    reader.marker("ConvBiases")
    conv_biases = reader.row(conv.num_filters, "conv biases")
    reader.marker("DenseWeights")
    weights = [reader.row(dense.input_size, f"dense weights row {i}") for i in range(dense.output_size)]
    reader.marker("DenseBiases")
    dense_biases = reader.row(dense.output_size, "dense biases")
    reader.finish()

    conv.filters[...] = backend.ensure_array(np.asarray(filters))
    conv.biases[...] = backend.ensure_array(np.asarray(conv_biases))
    dense.weights[...] = backend.ensure_array(np.asarray(weights))
    dense.biases[...] = backend.ensure_array(np.asarray(dense_biases))
    return model
