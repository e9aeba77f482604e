import numpy as np

import train_mnist


def _write_csv(path, rows):
    lines = ["label," + ",".join(f"p{i}" for i in range(784))]
    for label, pixels in rows:
        lines.append(",".join([str(label)] + [str(p) for p in pixels]))
    path.write_text("\n".join(lines) + "\n")


def test_end_to_end_run(tmp_path):
    rng = np.random.default_rng(0)
    rows = [(label, rng.integers(0, 256, size=784)) for label in [0, 1, 2, 3]]
    train_csv = tmp_path / "train.csv"
    test_csv = tmp_path / "test.csv"
    _write_csv(train_csv, rows)
    _write_csv(test_csv, rows[:2])
    model_out = tmp_path / "model.txt"

    args = train_mnist.parse_args([
        "--train-csv", str(train_csv),
        "--test-csv", str(test_csv),
        "--epochs", "1",
        "--lr", "0.001",
        "--seed", "0",
        "--model-out", str(model_out),
        "--runs-root", str(tmp_path / "runs"),
        "--tag", "e2e",
    ])
    metrics = train_mnist.run(args)

    assert model_out.exists()
    assert metrics["confusion_matrix"].sum() == 2
    assert 0.0 <= metrics["accuracy"] <= 1.0
    run_dirs = list((tmp_path / "runs").glob("e2e_*"))
    assert len(run_dirs) == 1
    assert (run_dirs[0] / "metrics_summary.json").exists()
    assert (run_dirs[0] / "plots" / "loss_curve_e2e.png").exists()
