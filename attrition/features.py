"""
Design-matrix helpers shared by the model builders.

Column roles are read from the encoded frame: category dtype columns are
nominal/ordinal attributes, numeric columns are continuous.
"""

import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.base import BaseEstimator, OneToOneFeatureMixin, TransformerMixin
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder
from statsmodels.stats.outliers_influence import variance_inflation_factor

from .config import TARGET
from .errors import ZeroVarianceWarning


def feature_columns(frame, exclude=()):
    """Return (categorical, continuous) feature names of an encoded frame."""
    unknown = [c for c in exclude if c not in frame.columns]
    if unknown:
        raise KeyError(f"Cannot exclude unknown columns: {unknown}")

    cat, num = [], []
    for col in frame.columns:
        if col == TARGET or col in exclude:
            continue
        dtype = frame[col].dtype
        if isinstance(dtype, pd.CategoricalDtype):
            cat.append(col)
        elif pd.api.types.is_numeric_dtype(dtype):
            num.append(col)
        else:
            raise TypeError(f"Column {col!r} has raw dtype {dtype}; encode the frame first")
    return cat, num


def one_hot(frame, categorical, drop_first):
    """OneHotEncoder fixed to the levels recorded in the categorical dtypes."""
    return OneHotEncoder(
        categories=[list(frame[c].cat.categories) for c in categorical],
        drop="first" if drop_first else None,
        sparse_output=False,
    )


def column_transformer(num_step, num, cat_step, cat):
    """ColumnTransformer over whichever of the two column groups is non-empty."""
    steps = []
    if num:
        steps.append(("num", num_step, num))
    if cat:
        steps.append(("cat", cat_step, cat))
    return ColumnTransformer(steps, remainder="drop",
                             verbose_feature_names_out=False)


def feature_ranges(frame, columns=None):
    """(min, max) of every continuous column, one row per column."""
    if columns is None:
        _, columns = feature_columns(frame)
    return frame[columns].agg(["min", "max"]).T


class MinMaxRange(OneToOneFeatureMixin, TransformerMixin, BaseEstimator):
    """Min-max scaling to [0, 1] with ranges taken from a fixed table.

    With ranges=None the ranges are learned from the data passed to fit, as
    MinMaxScaler would. Passing the ranges of the full dataset keeps the
    scaling identical however the rows are later split.
    """

    def __init__(self, ranges=None):
        self.ranges = ranges

    def fit(self, X, y=None):
        X = pd.DataFrame(X)
        self.n_features_in_ = X.shape[1]
        if all(isinstance(c, str) for c in X.columns):
            self.feature_names_in_ = np.asarray(X.columns, dtype=object)

        ranges = feature_ranges(X, list(X.columns)) if self.ranges is None else self.ranges
        ranges = ranges.loc[list(X.columns)]
        self.data_min_ = ranges["min"].to_numpy(dtype=float)
        span = ranges["max"].to_numpy(dtype=float) - self.data_min_

        flat = span == 0
        for col in X.columns[flat]:
            warnings.warn(f"{col} is constant; scaled to 0", ZeroVarianceWarning)
        self.data_range_ = np.where(flat, 1.0, span)
        return self

    def transform(self, X):
        values = pd.DataFrame(X).to_numpy(dtype=float)
        return (values - self.data_min_) / self.data_range_


# ═══════════════════════════════════════════════════════════════════════════
# SOURCE ATTRIBUTES
# ═══════════════════════════════════════════════════════════════════════════
def source_attribute(feature_name, attributes):
    """Attribute a (possibly one-hot) feature name was derived from."""
    name = feature_name.split("__", 1)[-1]
    if name in attributes:
        return name
    owners = [a for a in attributes if name.startswith(f"{a}_")]
    if not owners:
        raise KeyError(f"No source attribute for feature {feature_name!r}")
    return max(owners, key=len)


def aggregate_importance(values, feature_names, attributes):
    """Sum per-feature scores onto their source attributes, descending."""
    owners = [source_attribute(n, attributes) for n in feature_names]
    return (pd.Series(np.asarray(values, dtype=float), index=owners)
            .groupby(level=0).sum()
            .sort_values(ascending=False))


# ═══════════════════════════════════════════════════════════════════════════
# DESIGN MATRIX & COLLINEARITY
# ═══════════════════════════════════════════════════════════════════════════
def design_matrix(frame, exclude=()):
    """Continuous columns plus treatment-coded dummies, as floats.

    Dummies of levels absent from frame are left out.
    """
    cat, num = feature_columns(frame, exclude)
    X = pd.get_dummies(frame[num + cat], columns=cat,
                       drop_first=True, dtype=float)
    empty = [c for c in X.columns if c not in num and X[c].sum() == 0]
    return X.drop(columns=empty)


def variance_inflation(frame, exclude=()):
    """Variance inflation factor of every design-matrix column, descending."""
    X = sm.add_constant(design_matrix(frame, exclude), has_constant="add")
    values = X.to_numpy()
    vif = [variance_inflation_factor(values, i)
           for i in range(1, values.shape[1])]
    return (pd.Series(vif, index=X.columns[1:], name="VIF")
            .sort_values(ascending=False))
