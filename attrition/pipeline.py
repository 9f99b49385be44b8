"""
=============================================================================
Employee Attrition Prediction — model comparison report

Dataset : IBM HR Analytics Employee Attrition & Performance (CSV)
Target  : Attrition (Yes / No), "Yes" is the positive class.
Metric  : recall on a held-out stratified 30 % split.
=============================================================================
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass

import pandas as pd

from .comparison import compare, mcnemar, metrics_table
from .config import (
    CV_FOLDS, DATA_PATH, K_RANGE, KNN_K, LAPLACE, LR_EXCLUDE, MIN_SPLIT,
    N_TREES, PRUNE_ALPHA, RES_DIR, SEED, SPLIT_RATIO, TARGET,
)
from .data import encode, load_dataset, split_dataset
from .errors import AttritionError
from .evaluation import evaluate
from .explore import class_distribution, rank_attrition_drivers
from .features import feature_ranges, variance_inflation
from .models import (
    k_sweep, knn, logistic_regression, logit_summary, naive_bayes, train,
)
from .tree import (
    decision_tree, forest_importance, n_leaves, oob_error, pruning_table,
    random_forest, tree_importance, tree_text,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# MODEL DEFINITIONS
# ═══════════════════════════════════════════════════════════════════════════
def get_models(frame, seed=SEED, k=KNN_K, laplace=LAPLACE,
               prune_alpha=PRUNE_ALPHA, n_trees=N_TREES,
               exclude=LR_EXCLUDE, min_split=MIN_SPLIT):
    """The five compared models, unfitted. frame is the full encoded table."""
    return {
        "Logistic Regression":   logistic_regression(frame, exclude=exclude),
        "Naive Bayes (Laplace)": naive_bayes(frame, laplace=laplace),
        "KNN":                   knn(frame, k=k, ranges=feature_ranges(frame)),
        "Pruned Decision Tree":  decision_tree(frame, min_samples_split=min_split,
                                               ccp_alpha=prune_alpha, seed=seed),
        "Random Forest":         random_forest(frame, n_trees=n_trees, seed=seed),
    }


def get_variants(frame, seed=SEED, min_split=MIN_SPLIT):
    """Alternative configurations reported beside the compared models."""
    return {
        "Logistic Regression (all)": logistic_regression(frame),
        "Naive Bayes (Gaussian)":    naive_bayes(frame),
        "Naive Bayes (kernel)":      naive_bayes(frame, use_kernel=True),
        "KNN (k=1)":                 knn(frame, k=1, ranges=feature_ranges(frame)),
        "Decision Tree":             decision_tree(frame, min_samples_split=min_split,
                                                   seed=seed),
    }


# ═══════════════════════════════════════════════════════════════════════════
# RUN
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class Report:
    data: pd.DataFrame
    split: object
    fitted: dict
    evaluations: list
    variants: list
    comparison: object
    k_sweep: pd.DataFrame
    pruning: pd.DataFrame
    tree_importance: pd.DataFrame
    forest_importance: pd.Series
    tree_text: str
    logit: pd.DataFrame
    vif: pd.Series
    drivers: pd.DataFrame


def run(data_path=DATA_PATH, seed=SEED, ratio=SPLIT_RATIO, k=KNN_K,
        laplace=LAPLACE, prune_alpha=PRUNE_ALPHA, n_trees=N_TREES,
        exclude=LR_EXCLUDE, k_values=K_RANGE, folds=CV_FOLDS,
        min_split=MIN_SPLIT):
    """Load, encode, split, fit every model and collect the report pieces."""
    data = encode(load_dataset(data_path))
    split = split_dataset(data, ratio=ratio, seed=seed)

    fitted, evaluations = {}, []
    for name, model in get_models(data, seed, k, laplace, prune_alpha,
                                  n_trees, exclude, min_split).items():
        fitted[name] = train(name, model, split.train)
        evaluations.append(evaluate(fitted[name], split.test))

    variants = []
    for name, model in get_variants(data, seed, min_split).items():
        fitted[name] = train(name, model, split.train)
        variants.append(evaluate(fitted[name], split.test))

    pruned = fitted["Pruned Decision Tree"]
    return Report(
        data=data,
        split=split,
        fitted=fitted,
        evaluations=evaluations,
        variants=variants,
        comparison=compare(evaluations),
        k_sweep=k_sweep(split.train, split.test, k_values,
                        ranges=feature_ranges(data)),
        pruning=pruning_table(split.train, folds=folds, seed=seed,
                              min_samples_split=min_split),
        tree_importance=tree_importance(pruned, split.train),
        forest_importance=forest_importance(fitted["Random Forest"]),
        tree_text=tree_text(pruned),
        logit=logit_summary(split.train, exclude=exclude),
        vif=variance_inflation(split.train, exclude=exclude),
        drivers=rank_attrition_drivers(data),
    )


# ═══════════════════════════════════════════════════════════════════════════
# CONSOLE REPORT
# ═══════════════════════════════════════════════════════════════════════════
def _section(title):
    print("\n" + "=" * 72)
    print(title)
    print("=" * 72)


def show_class_dist(labels, label=""):
    dist = class_distribution(labels)
    print(f"  Class distribution ({label}):")
    for cls, row in dist.iterrows():
        print(f"    {cls}: {int(row['count'])}  ({row['proportion']*100:.1f}%)")


def print_report(report):
    pd.set_option("display.max_columns", None)
    pd.set_option("display.width", 220)
    pd.set_option("display.float_format", "{:.4f}".format)

    _section("STEP 1-3 : LOAD, ENCODE, SPLIT")
    print(f"  Rows : {len(report.data)}   Train : {len(report.split.train)}"
          f"   Test : {len(report.split.test)}   (seed={report.split.seed})")
    show_class_dist(report.data[TARGET], "Full dataset")
    show_class_dist(report.split.train[TARGET], "Train")
    show_class_dist(report.split.test[TARGET], "Test")

    _section("EXPLORATION : ATTRITION RATE SPREAD BY ATTRIBUTE")
    print(report.drivers.head(10).to_string(index=False))

    _section("STEP 4-5 : MODEL EVALUATION")
    cols = ["Model", "Accuracy", "Recall", "Specificity", "No Information Rate",
            "Kappa", "Degraded"]
    print(metrics_table(report.evaluations)[cols].to_string(index=False))
    print("\n  ── Variants ──")
    print(metrics_table(report.variants)[cols].to_string(index=False))

    _section("STEP 6 : RECALL COMPARISON")
    print(report.comparison.table.to_string(index=False))
    print(f"\n  Best model : {report.comparison.best}")

    ranked = [e for e in report.evaluations if pd.notna(e.recall)]
    ranked.sort(key=lambda e: e.recall, reverse=True)
    if len(ranked) >= 2:
        a, b = ranked[0].name, ranked[1].name
        test = report.split.test
        res = mcnemar(test[TARGET], report.fitted[a].predict(test),
                      report.fitted[b].predict(test))
        print(f"  McNemar {a} vs {b}: chi2={res.chi2:.4f}  p={res.p_value:.4f}")

    _section("LOGISTIC REGRESSION : FEATURE ELIMINATION AIDS")
    if report.logit["degraded"].any():
        print("  (logit fit did not converge; coefficients are unreliable)")
    print(report.logit.sort_values("p_value").head(15).to_string())
    print("\n  ── Variance inflation (top 10) ──")
    print(report.vif.head(10).to_string())

    _section("KNN : ERROR RATE BY k")
    print(report.k_sweep.to_string(index=False))

    _section("DECISION TREE : PRUNING")
    tree = report.fitted["Decision Tree"]
    pruned = report.fitted["Pruned Decision Tree"]
    print(f"  Leaves : unpruned {n_leaves(tree)}  pruned {n_leaves(pruned)}")
    print(report.pruning.to_string(index=False))
    print("\n" + report.tree_text)
    print(report.tree_importance.to_string())

    _section("RANDOM FOREST : IMPORTANCE")
    print(f"  OOB error : {oob_error(report.fitted['Random Forest']):.4f}")
    print(report.forest_importance.to_string())


def save_report(report, out_dir=RES_DIR):
    os.makedirs(out_dir, exist_ok=True)
    report.comparison.table.to_csv(os.path.join(out_dir, "model_comparison.csv"), index=False)
    metrics_table(report.evaluations + report.variants).to_csv(
        os.path.join(out_dir, "metrics.csv"), index=False)
    report.k_sweep.to_csv(os.path.join(out_dir, "k_sweep.csv"), index=False)
    report.logit.to_csv(os.path.join(out_dir, "logit_summary.csv"), index_label="term")
    report.vif.to_csv(os.path.join(out_dir, "vif.csv"), index_label="term")
    report.pruning.to_csv(os.path.join(out_dir, "pruning_table.csv"), index=False)
    report.tree_importance.to_csv(os.path.join(out_dir, "tree_importance.csv"),
                                  index_label="attribute")
    report.forest_importance.rename("importance").to_csv(
        os.path.join(out_dir, "forest_importance.csv"), index_label="attribute")
    with open(os.path.join(out_dir, "pruned_tree.txt"), "w") as f:
        f.write(report.tree_text)
    print(f"\n  Saved → {out_dir}/")


# ═══════════════════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════════════════
def build_parser():
    parser = argparse.ArgumentParser(
        prog="attrition-report",
        description="Compare attrition classifiers by recall on a stratified split.")
    parser.add_argument("--data", default=DATA_PATH, help="attrition CSV")
    parser.add_argument("--seed", type=int, default=SEED)
    parser.add_argument("--ratio", type=float, default=SPLIT_RATIO,
                        help="share of rows used for training")
    parser.add_argument("--output-dir", default=RES_DIR)
    parser.add_argument("--k", type=int, default=KNN_K, help="neighbours for KNN")
    parser.add_argument("--laplace", type=float, default=LAPLACE)
    parser.add_argument("--prune-alpha", type=float, default=PRUNE_ALPHA)
    parser.add_argument("--trees", type=int, default=N_TREES)
    parser.add_argument("--folds", type=int, default=CV_FOLDS)
    parser.add_argument("--max-k", type=int, default=max(K_RANGE),
                        help="largest k in the error-rate sweep")
    parser.add_argument("--exclude", action="append", default=None,
                        help="column left out of the logistic regression (repeatable)")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    print("=" * 72)
    print("  Employee Attrition Prediction — Model Comparison")
    print("=" * 72)
    try:
        report = run(
            data_path=args.data, seed=args.seed, ratio=args.ratio, k=args.k,
            laplace=args.laplace, prune_alpha=args.prune_alpha,
            n_trees=args.trees, folds=args.folds,
            exclude=tuple(args.exclude) if args.exclude is not None else LR_EXCLUDE,
            k_values=range(1, args.max_k + 1),
        )
    except AttritionError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print_report(report)
    save_report(report, args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
