import json

import numpy as np
import pytest

from simplecnn import SimpleCNN
from simplecnn.helpers.logger import RunLogger


@pytest.fixture
def logger(tmp_path):
    return RunLogger(root=tmp_path, tag="test")


def test_log_epoch_writes_csv_and_json(logger):
    logger.log_epoch(1, loss=0.5, time_s=1.0)
    logger.log_epoch(2, loss=0.25, time_s=1.0)
    logger.save_json()

    rows = logger.csv_path.read_text().splitlines()
    assert rows[0] == "epoch,loss,time_s"
    assert len(rows) == 3
    assert json.loads(logger.json_path.read_text())[1] == {"epoch": 2, "loss": 0.25, "time_s": 1.0}


def test_checkpoint_is_a_loadable_model(logger):
    net = SimpleCNN(seed=1, verbose=0)
    path = logger.save_checkpoint(net, best=True)
    assert path.endswith("checkpoint_best.txt")
    other = SimpleCNN(seed=2, verbose=0).load(path)
    assert np.array_equal(other.dense.weights, net.dense.weights)


def test_metrics_from_predictions(logger):
    metrics = logger.calculate_metrics_from_predictions([0, 0, 1, 1], [0, 1, 1, 1], num_classes=2)
    assert metrics["confusion_matrix"].tolist() == [[1, 1], [0, 2]]
    assert metrics["accuracy"] == pytest.approx(0.75)
    assert metrics["precision_per_class"] == pytest.approx([1.0, 2 / 3])
    assert metrics["recall_per_class"] == pytest.approx([0.5, 1.0])
    assert metrics["macro_f1"] == pytest.approx((2 / 3 + 0.8) / 2)


def test_metrics_summary_and_plots(logger):
    metrics = logger.calculate_metrics_from_predictions([0, 1, 2], [0, 1, 1], num_classes=3)
    summary_path = logger.save_metrics_summary(metrics, tag="test")
    summary = json.loads(open(summary_path).read())
    assert summary["confusion_matrix"][2] == [0, 1, 0]

    assert logger.plot_loss({"loss": [1.0, 0.5], "val_loss": [1.1, 0.7]}, tag="test").exists()
    assert logger.plot_val_metrics({"val_acc": [0.4, 0.6]}, tag="test").exists()
    assert logger.plot_val_metrics({}, tag="test") is None
    assert logger.plot_confusion_matrix(metrics["confusion_matrix"], tag="test").exists()
