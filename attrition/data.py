"""
Loading, encoding and splitting of the employee attrition table.

Every function returns a new frame; inputs are never modified in place.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .config import (
    CATEGORICAL_COLS, DATA_PATH, DROP_COLS, HEADER_FIXES, LABELS,
    REQUIRED_COLS, SEED, SPLIT_RATIO, TARGET,
)
from .errors import InsufficientDataError, SchemaError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# LOADER
# ═══════════════════════════════════════════════════════════════════════════
def check_schema(frame, required=REQUIRED_COLS):
    """Raise SchemaError naming every required column absent from frame."""
    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise SchemaError(missing)


def missing_values(frame):
    """Per-column count of missing cells, non-zero columns only."""
    counts = frame.isna().sum()
    return counts[counts > 0]


def load_dataset(path=DATA_PATH):
    """Read the attrition CSV, repair the Age header and drop unused columns."""
    df = pd.read_csv(path, encoding="utf-8-sig")
    df = df.rename(columns=lambda c: HEADER_FIXES.get(c.strip(), c.strip()))
    logger.info("Loaded %s: %d rows x %d columns", path, *df.shape)

    check_schema(df)

    to_drop = [c for c in DROP_COLS if c in df.columns]
    df = df.drop(columns=to_drop)
    logger.info("Dropped %d uninformative columns, %d remaining",
                len(to_drop), df.shape[1])

    gaps = missing_values(df)
    if gaps.empty:
        logger.info("No missing values found")
    else:
        logger.warning("Missing values in %d columns: %s",
                       len(gaps), gaps.to_dict())
    return df


# ═══════════════════════════════════════════════════════════════════════════
# ENCODER
# ═══════════════════════════════════════════════════════════════════════════
def encode(frame, categorical=CATEGORICAL_COLS):
    """Cast nominal/ordinal columns to category and the label to Yes/No.

    Levels are the sorted distinct values of each column. Columns already
    holding a categorical dtype keep their levels, so encoding twice is
    the same as encoding once.
    """
    out = frame.copy()
    for col in categorical:
        if col not in out.columns or isinstance(out[col].dtype, pd.CategoricalDtype):
            continue
        levels = sorted(out[col].dropna().unique())
        out[col] = pd.Categorical(out[col], categories=levels)

    if TARGET not in out.columns:
        raise SchemaError([TARGET])
    label = out[TARGET].astype(str)
    unknown = sorted(set(label.unique()) - set(LABELS))
    if unknown:
        raise SchemaError(
            [], f"Unexpected {TARGET} values: {', '.join(unknown)}")
    out[TARGET] = pd.Categorical(label, categories=list(LABELS), ordered=True)
    return out


def split_xy(frame):
    """Separate the feature columns from the label."""
    return frame.drop(columns=[TARGET]), frame[TARGET]


# ═══════════════════════════════════════════════════════════════════════════
# SPLITTER
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class Split:
    train: pd.DataFrame
    test: pd.DataFrame
    ratio: float
    seed: int


def _check_strata(labels, n_train, n_test):
    counts = pd.Series(labels).value_counts()
    strata = {k: int(counts.get(k, 0)) for k in LABELS}
    strata.update({k: int(v) for k, v in counts.items() if k not in strata})
    if min(strata.values()) < 2:
        raise InsufficientDataError(strata)
    n_classes = len(strata)
    if n_train < n_classes or n_test < n_classes:
        raise InsufficientDataError(
            strata, f"Split of {n_train}/{n_test} rows cannot hold "
                    f"{n_classes} classes in each subset")


def split_dataset(frame, ratio=SPLIT_RATIO, seed=SEED):
    """Stratified train/test partition, reproducible from (frame, ratio, seed).

    The train subset receives floor(ratio * n) rows, the class counts of each
    subset follow the full table's proportions up to rounding. Both subsets
    keep the input's index labels and row order.
    """
    if not 0 < ratio < 1:
        raise ValueError(f"Split ratio must lie in (0, 1), got {ratio}")

    labels = np.asarray(frame[TARGET]).astype(str)
    n_train = int(np.floor(ratio * len(frame)))
    _check_strata(labels, n_train, len(frame) - n_train)

    positions = np.arange(len(frame))
    tr_pos, te_pos = train_test_split(
        positions, train_size=ratio, stratify=labels,
        random_state=seed, shuffle=True)

    train = frame.iloc[np.sort(tr_pos)].copy()
    test = frame.iloc[np.sort(te_pos)].copy()
    logger.info("Split %d rows -> train %d / test %d (seed=%s)",
                len(frame), len(train), len(test), seed)
    return Split(train=train, test=test, ratio=ratio, seed=seed)
