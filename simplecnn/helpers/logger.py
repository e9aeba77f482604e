# helpers/logger.py
import numpy as np
import csv, json, datetime, pathlib
import matplotlib.pyplot as plt
import matplotlib.cm as colormap

from .model_io import save_model


class RunLogger:
    def __init__(self, root="runs", tag="run"):
        ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        self.root = pathlib.Path(root)
        self.dir = self.root / f"{tag}_{ts}"
        self.dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.dir / "history.csv"
        self.json_path = self.dir / "history.json"
        self.best_ckpt = self.dir / "checkpoint_best.txt"
        self.last_ckpt = self.dir / "checkpoint_last.txt"
        self.metrics = []  # list of dicts per epoch
        self._csv_header_written = False

    # ---------- logging ----------
    def log_epoch(self, epoch, **kwargs):
        row = {"epoch": int(epoch), **{k: float(v) for k, v in kwargs.items()}}
        self.metrics.append(row)
        with open(self.csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(row.keys()))
            if not self._csv_header_written:
                writer.writeheader()
                self._csv_header_written = True
            writer.writerow(row)

    def save_json(self):
        with open(self.json_path, "w") as f:
            json.dump(self.metrics, f, indent=2)

    def save_checkpoint(self, model, best=False):
        path = self.best_ckpt if best else self.last_ckpt
        return save_model(model, path)

    # ---------- plotting ----------
    def _plots_dir(self, subdir):
        out = self.dir / subdir
        out.mkdir(parents=True, exist_ok=True)
        return out

    def plot_loss(self, history, tag="run", subdir="plots"):
        """
        Saves loss curve as loss_curve_<tag>.png.
        history: {'loss': [...]} with an optional 'val_loss' list.
        """
        train = history.get("loss", [])
        val = history.get("val_loss", [])

        outdir = self._plots_dir(subdir)
        plt.figure()
        if len(train) > 0:
            plt.plot(range(1, len(train) + 1), train, label="train loss")
        if len(val) > 0:
            plt.plot(range(1, len(val) + 1), val, label="val loss")
        plt.xlabel("Epoch")
        plt.ylabel("Cross-Entropy Loss")
        plt.title(f"Loss vs Epochs ({tag})")
        if len(train) > 0 or len(val) > 0:
            plt.legend()
        plt.tight_layout()
        path = outdir / f"loss_curve_{tag}.png"
        plt.savefig(path, dpi=160)
        plt.close()
        return path

    def plot_val_metrics(self, history, tag="run", subdir="plots"):
        """
        Saves validation accuracy curve as val_metrics_<tag>.png if 'val_acc' is present.
        """
        val_acc = history.get("val_acc", [])
        if len(val_acc) == 0:
            return None
        outdir = self._plots_dir(subdir)
        plt.figure()
        plt.plot(range(1, len(val_acc) + 1), val_acc, label="val accuracy")
        plt.xlabel("Epoch")
        plt.ylabel("Accuracy")
        plt.title(f"Validation Accuracy vs Epochs ({tag})")
        plt.legend()
        plt.tight_layout()
        path = outdir / f"val_metrics_{tag}.png"
        plt.savefig(path, dpi=160)
        plt.close()
        return path

    def plot_confusion_matrix(self, cm, tag="run", subdir="plots", class_names=None):
        """
        Saves confusion matrix heatmap as confusion_matrix_<tag>.png
        cm: (num_classes, num_classes) integer matrix
        """
        outdir = self._plots_dir(subdir)
        plt.figure(figsize=(8, 6))
        plt.imshow(cm, interpolation="nearest", cmap=colormap.Blues)
        plt.title(f"Confusion Matrix ({tag})")
        plt.colorbar()
        n_classes = cm.shape[0]
        ticks = np.arange(n_classes)
        if class_names is None:
            class_names = ticks
        plt.xticks(ticks, class_names, rotation=0)
        plt.yticks(ticks, class_names)

        thresh = cm.max() / 2.0 if cm.size > 0 else 0
        for i, j in np.ndindex(cm.shape):
            plt.text(
                j, i, format(cm[i, j], "d"),
                horizontalalignment="center",
                color="white" if cm[i, j] > thresh else "black",
            )

        plt.ylabel("True label")
        plt.xlabel("Predicted label")
        plt.tight_layout()
        path = outdir / f"confusion_matrix_{tag}.png"
        plt.savefig(path, dpi=160)
        plt.close()
        return path

    # ---------- metrics calculation ----------
    def calculate_metrics_from_confusion_matrix(self, cm, eps=1e-12):
        """
        Macro precision/recall/F1 and accuracy from a confusion matrix where
        cm[i, j] counts samples of true class i predicted as j.
        """
        tp = np.diag(cm).astype(np.float64)
        fp = cm.sum(axis=0) - tp
        fn = cm.sum(axis=1) - tp

        precision = tp / (tp + fp + eps)
        recall = tp / (tp + fn + eps)
        f1 = 2 * precision * recall / (precision + recall + eps)
        total = cm.sum()

        return {
            "macro_precision": float(np.mean(precision)),
            "macro_recall": float(np.mean(recall)),
            "macro_f1": float(np.mean(f1)),
            "accuracy": float(np.trace(cm) / total) if total > 0 else 0.0,
            "precision_per_class": precision.tolist(),
            "recall_per_class": recall.tolist(),
            "f1_per_class": f1.tolist(),
        }

    def calculate_metrics_from_predictions(self, y_true, y_pred, num_classes=10, eps=1e-12):
        """
        Build the confusion matrix from integer labels, then compute metrics.
        The returned dict also carries the matrix under 'confusion_matrix'.
        """
        cm = np.zeros((num_classes, num_classes), dtype=np.int64)
        for true_label, pred_label in zip(y_true, y_pred):
            cm[int(true_label), int(pred_label)] += 1

        metrics = self.calculate_metrics_from_confusion_matrix(cm, eps=eps)
        metrics["confusion_matrix"] = cm
        return metrics

    def save_metrics_summary(self, metrics, tag="run", filename="metrics_summary.json"):
        summary = {
            "experiment_tag": tag,
            "timestamp": datetime.datetime.now().isoformat(),
            "overall_metrics": {
                "accuracy": metrics.get("accuracy", 0.0),
                "macro_precision": metrics.get("macro_precision", 0.0),
                "macro_recall": metrics.get("macro_recall", 0.0),
                "macro_f1": metrics.get("macro_f1", 0.0),
            },
            "per_class_metrics": {
                "precision": metrics.get("precision_per_class", []),
                "recall": metrics.get("recall_per_class", []),
                "f1": metrics.get("f1_per_class", []),
            },
        }

        if "confusion_matrix" in metrics:
            summary["confusion_matrix"] = metrics["confusion_matrix"].tolist()

        output_path = self.dir / filename
        with open(output_path, "w") as f:
            json.dump(summary, f, indent=2)

        return str(output_path)
