"""Recall comparison across models and pairwise significance testing."""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from mlxtend.evaluate import mcnemar_table
from scipy.stats import chi2 as chi2_dist

from .evaluation import Evaluation


@dataclass(frozen=True)
class Comparison:
    table: pd.DataFrame
    best: object


def compare(results):
    """Tabulate (model, recall) pairs in the given order and flag the best.

    results holds Evaluations or (name, recall) pairs. The best entry is the
    first with the highest defined recall; None when no recall is defined.
    """
    pairs = [(r.name, r.recall) if isinstance(r, Evaluation) else tuple(r)
             for r in results]
    table = pd.DataFrame(pairs, columns=["Model", "Recall"])
    table["Recall"] = pd.to_numeric(table["Recall"], errors="coerce").astype(float)

    defined = table["Recall"].dropna()
    best_idx = defined.idxmax() if not defined.empty else None
    table["Best"] = table.index == best_idx
    best = table.at[best_idx, "Model"] if best_idx is not None else None
    return Comparison(table=table, best=best)


def metrics_table(evaluations):
    return pd.DataFrame([e.as_row() for e in evaluations])


@dataclass(frozen=True)
class McNemarResult:
    chi2: float
    p_value: float
    b: int
    c: int

    def significant(self, alpha=0.05):
        return self.p_value < alpha


def mcnemar(actual, predicted_a, predicted_b):
    """McNemar's test on where two models' correctness disagrees.

    b counts rows only model A gets right, c rows only model B gets right.
    """
    tb = mcnemar_table(y_target=np.asarray(actual).astype(str),
                       y_model1=np.asarray(predicted_a).astype(str),
                       y_model2=np.asarray(predicted_b).astype(str))
    b, c = int(tb[0, 1]), int(tb[1, 0])
    if (b + c) == 0:
        return McNemarResult(chi2=0.0, p_value=1.0, b=b, c=c)
    stat = (abs(b - c) - 1) ** 2 / (b + c)
    return McNemarResult(chi2=stat, p_value=float(chi2_dist.sf(stat, df=1)), b=b, c=c)
