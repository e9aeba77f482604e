# train_mnist.py
import argparse
import numpy as np

from simplecnn import SimpleCNN
from simplecnn.helpers.logger import RunLogger
from simplecnn.helpers.mnist_data import load_mnist_csv, load_mnist_keras


def load_data(args):
    if args.source == "keras":
        (x_train, y_train), (x_test, y_test) = load_mnist_keras()
        if args.limit is not None:
            x_train, y_train = x_train[:args.limit], y_train[:args.limit]
            x_test, y_test = x_test[:args.limit], y_test[:args.limit]
        return x_train, y_train, x_test, y_test

    skip_header = not args.no_header
    x_train, y_train = load_mnist_csv(args.train_csv, skip_header=skip_header, limit=args.limit)
    x_test, y_test = load_mnist_csv(args.test_csv, skip_header=skip_header, limit=args.limit)
    return x_train, y_train, x_test, y_test


def run(args):
    x_train, y_train, x_test, y_test = load_data(args)
    print(f"Loaded {len(x_train)} training and {len(x_test)} test examples")

    tag = args.tag or f"SimpleCNN_epochs_{args.epochs}_lr_{args.lr}"
    logger = RunLogger(root=args.runs_root, tag=tag)

    model = SimpleCNN(seed=args.seed, verbose=1)

    print("Training started...")
    history = model.fit(
        x_train, y_train,
        epochs=args.epochs,
        learning_rate=args.lr,
        shuffle=True,
        logger=logger,
    )
    print("Training finished.")

    model.save(args.model_out)
    print(f"Model saved to {args.model_out}")

    # Evaluate
    y_true = np.argmax(y_test, axis=1)
    y_pred = np.array([model.predict(image) for image in x_test], dtype=np.int64)
    metrics = logger.calculate_metrics_from_predictions(y_true, y_pred, num_classes=10)
    cm = metrics["confusion_matrix"]

    print(f"Test accuracy: {metrics['accuracy']:.4f}")
    print("Confusion matrix:\n", cm)
    print(f"\nMacro Metrics:")
    print(f"Macro Precision: {metrics['macro_precision']:.4f}")
    print(f"Macro Recall: {metrics['macro_recall']:.4f}")
    print(f"Macro F1-Score: {metrics['macro_f1']:.4f}")

    print(f"\nPer-class metrics:")
    for i in range(10):
        print(
            f"Class {i}: Precision={metrics['precision_per_class'][i]:.4f}, "
            f"Recall={metrics['recall_per_class'][i]:.4f}, F1={metrics['f1_per_class'][i]:.4f}"
        )

    logger.save_metrics_summary(metrics, tag=tag)
    if not args.no_plots:
        logger.plot_loss(history, tag=tag)
        logger.plot_confusion_matrix(cm, tag=tag)
    print(f"Run artifacts written to {logger.dir}")
    return metrics


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Train and evaluate a from-scratch CNN on MNIST, one example at a time."
    )
    parser.add_argument(
        "--source",
        type=str,
        default="csv",
        choices=["csv", "keras"],
        help="Read MNIST from CSV files or download it through Keras.",
    )
    parser.add_argument(
        "--train-csv", type=str, default="mnist_train.csv", help="Training CSV path."
    )
    parser.add_argument(
        "--test-csv", type=str, default="mnist_test.csv", help="Test CSV path."
    )
    parser.add_argument(
        "--no-header", action="store_true", help="CSV files have no header line."
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Use at most this many examples from each split.",
    )
    parser.add_argument("--epochs", type=int, default=5, help="Number of epochs.")
    parser.add_argument("--lr", type=float, default=0.01, help="Learning rate.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument(
        "--model-out", type=str, default="cnn_model.txt", help="Where to save the model."
    )
    parser.add_argument(
        "--runs-root", type=str, default="runs", help="Directory for run logs."
    )
    parser.add_argument("--tag", type=str, default=None, help="Run name.")
    parser.add_argument(
        "--no-plots", action="store_true", help="Skip writing matplotlib plots."
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    run(parse_args())
