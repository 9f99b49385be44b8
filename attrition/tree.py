"""
Decision tree and random forest builders plus their diagnostics.

Trees see the continuous columns as they are and every categorical level
as its own dummy column. Importances are reported per source attribute.
"""

import logging

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier, export_text

from .config import CV_FOLDS, MIN_SPLIT, N_TREES, SEED
from .data import split_xy
from .features import (
    aggregate_importance, column_transformer, feature_columns, one_hot,
    source_attribute,
)
from .models import train

logger = logging.getLogger(__name__)

# Surrogates credited per split, as in rpart's default maxsurrogate
MAX_SURROGATES = 5


def _tree_preprocessor(frame, exclude):
    cat, num = feature_columns(frame, exclude)
    return column_transformer("passthrough", num,
                              one_hot(frame, cat, drop_first=False), cat)


# ═══════════════════════════════════════════════════════════════════════════
# DECISION TREE
# ═══════════════════════════════════════════════════════════════════════════
def decision_tree(frame, min_samples_split=MIN_SPLIT, ccp_alpha=0.0,
                  seed=SEED, exclude=()):
    """Entropy-split tree grown until nodes fall below min_samples_split."""
    return Pipeline([
        ("prep", _tree_preprocessor(frame, exclude)),
        ("clf",  DecisionTreeClassifier(criterion="entropy",
                                        min_samples_split=min_samples_split,
                                        ccp_alpha=ccp_alpha,
                                        random_state=seed)),
    ])


def n_leaves(fitted):
    return fitted.estimator.named_steps["clf"].get_n_leaves()


def prune(fitted, train_frame, ccp_alpha, name=None):
    """Minimal cost-complexity pruning of a fitted tree.

    The tree is regrown from the same data and seed, so train_frame must be
    the frame it was fitted on. Every subtree whose effective alpha falls
    at or below the larger of ccp_alpha and the alpha the tree was already
    pruned with is collapsed, so the result never has more leaves.
    """
    ccp_alpha = max(ccp_alpha, fitted.estimator.named_steps["clf"].ccp_alpha)
    estimator = clone(fitted.estimator).set_params(clf__ccp_alpha=ccp_alpha)
    pruned = train(name or f"{fitted.name} (pruned)", estimator, train_frame)
    logger.info("Pruned %s at alpha=%.4g: %d -> %d leaves",
                fitted.name, ccp_alpha, n_leaves(fitted), n_leaves(pruned))
    return pruned


def pruning_table(train_frame, folds=CV_FOLDS, seed=SEED,
                  min_samples_split=MIN_SPLIT, exclude=()):
    """Leaves, impurity and cross-validated error along the pruning path."""
    model = decision_tree(train_frame, min_samples_split, seed=seed, exclude=exclude)
    X, y = split_xy(train_frame)
    y = np.asarray(y).astype(str)

    Xt = model.named_steps["prep"].fit_transform(X)
    path = model.named_steps["clf"].cost_complexity_pruning_path(Xt, y)
    cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed)

    rows = []
    for alpha, impurity in zip(path.ccp_alphas, path.impurities):
        est = clone(model).set_params(clf__ccp_alpha=max(alpha, 0.0))
        scores = cross_val_score(est, X, y, cv=cv, scoring="accuracy")
        leaves = est.fit(X, y).named_steps["clf"].get_n_leaves()
        rows.append({
            "ccp_alpha": alpha,
            "leaves":    leaves,
            "impurity":  impurity,
            "cv_error":  1 - scores.mean(),
            "cv_std":    scores.std(),
        })
    return pd.DataFrame(rows)


def tree_text(fitted):
    prep = fitted.estimator.named_steps["prep"]
    clf = fitted.estimator.named_steps["clf"]
    return export_text(clf, feature_names=list(prep.get_feature_names_out()))


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTANCE
# ═══════════════════════════════════════════════════════════════════════════
def _best_agreement(x, goes_left):
    """Most rows any threshold on x sends to the same side as goes_left."""
    order = np.argsort(x, kind="mergesort")
    xs, gl = x[order], goes_left[order]
    n = len(xs)

    cum_left = np.cumsum(gl)
    below = np.arange(1, n + 1)
    forward = cum_left + (n - below) - (gl.sum() - cum_left)
    cuts = np.append(xs[1:] != xs[:-1], False)
    if not cuts.any():
        return 0
    return max(forward[cuts].max(), (n - forward[cuts]).max())


def tree_importance(fitted, train_frame, surrogates=True):
    """Primary and surrogate importance of each attribute in a fitted tree.

    Primary importance sums the weighted impurity decrease of every split
    on the attribute. For each split, the best threshold on every other
    attribute is scored by its adjusted agreement with the split,
    (agree - majority) / (n - majority); the top MAX_SURROGATES with
    positive agreement are credited improvement * agreement.
    """
    prep = fitted.estimator.named_steps["prep"]
    clf = fitted.estimator.named_steps["clf"]
    X, _ = split_xy(train_frame)
    Xt = np.asarray(prep.transform(X), dtype=float)

    names = list(prep.get_feature_names_out())
    attributes = list(fitted.features)
    owners = [source_attribute(n, attributes) for n in names]

    tree = clf.tree_
    weight, impurity = tree.weighted_n_node_samples, tree.impurity
    paths = clf.decision_path(Xt).tocsc()

    primary = pd.Series(0.0, index=attributes)
    surrogate = pd.Series(0.0, index=attributes)
    for node in range(tree.node_count):
        left, right = tree.children_left[node], tree.children_right[node]
        if left == right:
            continue
        gain = (weight[node] * impurity[node]
                - weight[left] * impurity[left]
                - weight[right] * impurity[right])
        owner = owners[tree.feature[node]]
        primary[owner] += gain
        if not surrogates:
            continue

        rows = paths[:, node].toarray().ravel().astype(bool)
        xs = Xt[rows]
        goes_left = xs[:, tree.feature[node]] <= tree.threshold[node]
        n = len(goes_left)
        majority = max(goes_left.sum(), n - goes_left.sum())
        if majority == n:
            continue

        scores = {}
        for j, other in enumerate(owners):
            if other == owner:
                continue
            adj = (_best_agreement(xs[:, j], goes_left) - majority) / (n - majority)
            if adj > scores.get(other, 0):
                scores[other] = adj
        for other, adj in sorted(scores.items(), key=lambda kv: -kv[1])[:MAX_SURROGATES]:
            surrogate[other] += gain * adj

    table = pd.DataFrame({"primary": primary, "surrogate": surrogate})
    table["importance"] = table["primary"] + table["surrogate"]
    table = table[table["importance"] > 0].sort_values("importance", ascending=False)
    table["scaled"] = 100 * table["importance"] / table["importance"].sum()
    return table


# ═══════════════════════════════════════════════════════════════════════════
# RANDOM FOREST
# ═══════════════════════════════════════════════════════════════════════════
def random_forest(frame, n_trees=N_TREES, seed=SEED, max_features="sqrt", exclude=()):
    """Bootstrap forest with a random feature subset tried at every split."""
    return Pipeline([
        ("prep", _tree_preprocessor(frame, exclude)),
        ("clf",  RandomForestClassifier(n_estimators=n_trees,
                                        max_features=max_features,
                                        bootstrap=True, oob_score=True,
                                        random_state=seed)),
    ])


def oob_error(fitted):
    return 1 - fitted.estimator.named_steps["clf"].oob_score_


def forest_importance(fitted, top=None):
    """Mean impurity decrease per source attribute, descending."""
    prep = fitted.estimator.named_steps["prep"]
    clf = fitted.estimator.named_steps["clf"]
    importance = aggregate_importance(clf.feature_importances_,
                                      prep.get_feature_names_out(),
                                      list(fitted.features))
    return importance if top is None else importance.head(top)
