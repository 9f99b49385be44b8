"""Cross-tabulations behind the exploratory part of the attrition report."""

import pandas as pd

from .config import CONTINUOUS_COLS, POSITIVE, TARGET


def class_distribution(labels):
    """Count and share of each label value."""
    counts = pd.Series(labels).value_counts(sort=False)
    return pd.DataFrame({
        "count":      counts,
        "proportion": counts / counts.sum(),
    })


def attrition_rates(frame, column, margin="index"):
    """Proportional cross-tabulation of column against the label.

    margin="index" gives the attrition rate within each level of column,
    margin="columns" the make-up of the leavers and of the stayers.
    """
    if margin not in ("index", "columns"):
        raise ValueError(f"margin must be 'index' or 'columns', got {margin!r}")
    return pd.crosstab(frame[column], frame[TARGET], normalize=margin)


def rank_attrition_drivers(frame, columns=None):
    """Spread between the highest and lowest attrition rate per column."""
    if columns is None:
        columns = [c for c in frame.columns
                   if c != TARGET and isinstance(frame[c].dtype, pd.CategoricalDtype)]
    rows = []
    for col in columns:
        rates = attrition_rates(frame, col)[POSITIVE]
        rows.append({
            "attribute":    col,
            "riskiest":     rates.idxmax(),
            "highest_rate": rates.max(),
            "lowest_rate":  rates.min(),
            "spread":       rates.max() - rates.min(),
        })
    return (pd.DataFrame(rows)
            .sort_values("spread", ascending=False)
            .reset_index(drop=True))


def correlations(frame, columns=CONTINUOUS_COLS):
    cols = [c for c in columns if c in frame.columns]
    return frame[cols].corr()
