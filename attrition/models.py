"""
Model builders and the shared fit/predict harness.

Every builder returns an unfitted scikit-learn estimator that accepts the
encoded frame (minus the label) directly, so the evaluator and comparator
treat all models alike.
"""

import logging
import warnings
from contextlib import contextmanager
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from statsmodels.tools.sm_exceptions import ConvergenceWarning as SmConvergenceWarning

from .config import K_RANGE, KNN_K, MAX_ITER, POSITIVE, TARGET
from .data import split_xy
from .errors import ZeroVarianceWarning
from .evaluation import evaluate
from .features import (
    MinMaxRange, column_transformer, design_matrix, feature_columns, one_hot,
)
from .naive_bayes import MixedNaiveBayes

logger = logging.getLogger(__name__)

# Warnings that leave a usable but suspect model behind
DEGRADING = (ConvergenceWarning, SmConvergenceWarning, ZeroVarianceWarning)


# ═══════════════════════════════════════════════════════════════════════════
# FIT HARNESS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class FittedModel:
    name: str
    estimator: object
    features: tuple
    warnings: tuple = ()

    @property
    def degraded(self):
        return bool(self.warnings)

    def predict(self, frame):
        return np.asarray(self.estimator.predict(frame.drop(columns=[TARGET], errors="ignore")))


@contextmanager
def capture_warnings(name):
    """Collect degrading warnings raised inside the block; re-emit the rest."""
    notes = []
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        yield notes
    for w in caught:
        if issubclass(w.category, DEGRADING):
            notes.append(f"{w.category.__name__}: {w.message}")
            logger.warning("%s degraded: %s", name, w.message)
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)


def train(name, estimator, frame):
    """Fit estimator on a (train) frame and wrap it as a FittedModel."""
    X, y = split_xy(frame)
    with capture_warnings(name) as notes:
        estimator.fit(X, np.asarray(y).astype(str))
    logger.info("Fitted %-28s on %d rows%s", name, len(X),
                " (degraded)" if notes else "")
    return FittedModel(name=name, estimator=estimator,
                       features=tuple(X.columns), warnings=tuple(notes))


# ═══════════════════════════════════════════════════════════════════════════
# LOGISTIC REGRESSION
# ═══════════════════════════════════════════════════════════════════════════
def logistic_regression(frame, exclude=(), max_iter=MAX_ITER):
    """Unpenalised (maximum-likelihood) logit over treatment-coded dummies.

    Continuous columns are standardised, which leaves the fitted
    probabilities unchanged but helps the solver converge.
    """
    cat, num = feature_columns(frame, exclude)
    prep = column_transformer(StandardScaler(), num,
                              one_hot(frame, cat, drop_first=True), cat)
    return Pipeline([
        ("prep", prep),
        ("clf",  LogisticRegression(C=np.inf, max_iter=max_iter)),
    ])


def logit_summary(frame, exclude=(), max_iter=MAX_ITER):
    """Coefficient table of log-odds of attrition, with Wald p-values.

    The degraded column is True on every row when the fit did not converge.
    """
    X = sm.add_constant(design_matrix(frame, exclude), has_constant="add")
    y = (np.asarray(frame[TARGET]).astype(str) == POSITIVE).astype(int)
    with capture_warnings("Logit summary") as notes:
        res = sm.Logit(y, X).fit(disp=False, maxiter=max_iter)
    return pd.DataFrame({
        "coef":    res.params,
        "std_err": res.bse,
        "z":       res.tvalues,
        "p_value": res.pvalues,
        "degraded": bool(notes),
    })


# ═══════════════════════════════════════════════════════════════════════════
# NAIVE BAYES
# ═══════════════════════════════════════════════════════════════════════════
def naive_bayes(frame, laplace=0, use_kernel=False, exclude=()):
    cat, num = feature_columns(frame, exclude)
    return MixedNaiveBayes(categorical=cat, continuous=num,
                           laplace=laplace, use_kernel=use_kernel)


# ═══════════════════════════════════════════════════════════════════════════
# K-NEAREST NEIGHBOURS
# ═══════════════════════════════════════════════════════════════════════════
def knn(frame, k=KNN_K, ranges=None, exclude=()):
    """Euclidean k-NN over min-max scaled numbers and treatment dummies.

    Pass ranges=feature_ranges(full_dataset) to scale with statistics of the
    whole table rather than of the training rows. Brute-force search keeps
    neighbour order stable: equidistant points are taken in training-row
    order, and a tied vote goes to the first label in sorted order ("No").
    """
    cat, num = feature_columns(frame, exclude)
    if ranges is not None:
        ranges = ranges.loc[num]
    prep = column_transformer(MinMaxRange(ranges), num,
                              one_hot(frame, cat, drop_first=True), cat)
    return Pipeline([
        ("prep", prep),
        ("clf",  KNeighborsClassifier(n_neighbors=k, weights="uniform",
                                      algorithm="brute", metric="euclidean")),
    ])


def k_sweep(train_frame, test_frame, k_values=K_RANGE, ranges=None, exclude=()):
    """Test error rate and recall of k-NN for every k in k_values."""
    rows = []
    for k in k_values:
        fitted = train(f"KNN (k={k})", knn(train_frame, k, ranges, exclude), train_frame)
        matrix = evaluate(fitted, test_frame).matrix
        rows.append({"k": k, "error_rate": 1 - matrix.accuracy,
                     "recall": matrix.recall})
    return pd.DataFrame(rows, columns=["k", "error_rate", "recall"])
