"""
Naive Bayes over mixed categorical / continuous attributes.

Categorical attributes use CategoricalNB with additive (Laplace) smoothing,
continuous attributes either per-class Gaussians (GaussianNB) or per-class
Gaussian kernel density estimates. The per-attribute log-likelihoods are
summed with a single class log-prior.
"""

import warnings

import numpy as np
import pandas as pd
from scipy.special import logsumexp
from scipy.stats import gaussian_kde
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.naive_bayes import CategoricalNB, GaussianNB

from .errors import ZeroVarianceWarning

# Smallest pseudo-count; keeps log-likelihoods finite when laplace=0
ALPHA_FLOOR = 1e-10


class MixedNaiveBayes(ClassifierMixin, BaseEstimator):
    """Naive Bayes classifier for a frame of category and numeric columns.

    Parameters
    ----------
    categorical : list of str
        Columns with a pandas categorical dtype.
    continuous : list of str
        Numeric columns.
    laplace : float, default 0
        Pseudo-count added to every categorical level count.
    use_kernel : bool, default False
        Model continuous columns with a Gaussian KDE (Silverman bandwidth)
        instead of a single Gaussian per class.
    """

    def __init__(self, categorical=(), continuous=(), laplace=0.0, use_kernel=False):
        self.categorical = categorical
        self.continuous = continuous
        self.laplace = laplace
        self.use_kernel = use_kernel

    # ── helpers ────────────────────────────────────────────────────────────
    def _codes(self, X):
        return np.column_stack([
            pd.Categorical(X[col], categories=levels).codes
            for col, levels in zip(self.categorical, self.levels_)
        ])

    def _numeric(self, X):
        return X[list(self.continuous)].to_numpy(dtype=float)

    def _fit_kernels(self, X_num, y):
        keep = []
        for j, col in enumerate(self.continuous):
            flat = [c for c in self.classes_ if np.ptp(X_num[y == c, j]) == 0]
            if flat:
                warnings.warn(
                    f"{col} has zero variance within class {flat[0]!r}; "
                    "left out of the kernel likelihood", ZeroVarianceWarning)
            else:
                keep.append(j)
        self.kernel_columns_ = keep
        self.kernels_ = [
            [gaussian_kde(X_num[y == c, j], bw_method="silverman") for j in keep]
            for c in self.classes_
        ]

    # ── estimator API ──────────────────────────────────────────────────────
    def fit(self, X, y):
        if self.laplace < 0:
            raise ValueError(f"laplace must be >= 0, got {self.laplace}")
        y = np.asarray(y).astype(str)
        self.classes_, counts = np.unique(y, return_counts=True)
        self.class_log_prior_ = np.log(counts / counts.sum())

        self.levels_ = [list(X[c].cat.categories) for c in self.categorical]
        if self.categorical:
            self.categorical_nb_ = CategoricalNB(
                alpha=max(self.laplace, ALPHA_FLOOR),
                force_alpha=True,
                min_categories=[len(levels) for levels in self.levels_],
            ).fit(self._codes(X), y)

        if self.continuous:
            X_num = self._numeric(X)
            if self.use_kernel:
                self._fit_kernels(X_num, y)
            else:
                self.gaussian_nb_ = GaussianNB().fit(X_num, y)
        return self

    def _joint_log_likelihood(self, X):
        jll = np.tile(self.class_log_prior_, (len(X), 1))
        if self.categorical:
            nb = self.categorical_nb_
            jll += nb.predict_joint_log_proba(self._codes(X)) - nb.class_log_prior_
        if self.continuous:
            X_num = self._numeric(X)
            if self.use_kernel:
                for i, kernels in enumerate(self.kernels_):
                    for j, kde in zip(self.kernel_columns_, kernels):
                        jll[:, i] += kde.logpdf(X_num[:, j])
            else:
                nb = self.gaussian_nb_
                jll += nb.predict_joint_log_proba(X_num) - np.log(nb.class_prior_)
        return jll

    def predict_log_proba(self, X):
        jll = self._joint_log_likelihood(X)
        return jll - logsumexp(jll, axis=1, keepdims=True)

    def predict_proba(self, X):
        return np.exp(self.predict_log_proba(X))

    def predict(self, X):
        return self.classes_[np.argmax(self._joint_log_likelihood(X), axis=1)]
