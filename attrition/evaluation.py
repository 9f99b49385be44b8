"""
Confusion-matrix statistics with "Yes" (attrition) as the positive class.

Ratios whose denominator is zero are undefined and reported as nan.
"""

from dataclasses import dataclass

import numpy as np
from scipy.stats import binomtest
from scipy.stats import chi2 as chi2_dist
from sklearn.metrics import confusion_matrix

from .config import LABELS, TARGET


def _ratio(num, den):
    return num / den if den else np.nan


def error_rate(actual, predicted):
    actual = np.asarray(actual).astype(str)
    predicted = np.asarray(predicted).astype(str)
    return float(np.mean(actual != predicted))


@dataclass(frozen=True)
class ConfusionMatrix:
    tp: int
    fp: int
    fn: int
    tn: int

    @classmethod
    def from_labels(cls, actual, predicted):
        """Count (actual, predicted) pairs over the Yes/No labels."""
        cm = confusion_matrix(np.asarray(actual).astype(str),
                              np.asarray(predicted).astype(str),
                              labels=list(LABELS))
        (tp, fn), (fp, tn) = cm
        return cls(tp=int(tp), fp=int(fp), fn=int(fn), tn=int(tn))

    @property
    def n(self):
        return self.tp + self.fp + self.fn + self.tn

    @property
    def accuracy(self):
        return _ratio(self.tp + self.tn, self.n)

    @property
    def recall(self):
        """Sensitivity: TP / (TP + FN)."""
        return _ratio(self.tp, self.tp + self.fn)

    sensitivity = recall

    @property
    def specificity(self):
        return _ratio(self.tn, self.tn + self.fp)

    @property
    def precision(self):
        return _ratio(self.tp, self.tp + self.fp)

    @property
    def npv(self):
        return _ratio(self.tn, self.tn + self.fn)

    @property
    def prevalence(self):
        return _ratio(self.tp + self.fn, self.n)

    @property
    def balanced_accuracy(self):
        return (self.recall + self.specificity) / 2

    @property
    def f1(self):
        return _ratio(2 * self.tp, 2 * self.tp + self.fp + self.fn)

    @property
    def no_information_rate(self):
        """Accuracy of always predicting the majority actual class."""
        return _ratio(max(self.tp + self.fn, self.fp + self.tn), self.n)

    @property
    def kappa(self):
        n = self.n
        if not n:
            return np.nan
        expected = ((self.tp + self.fp) * (self.tp + self.fn)
                    + (self.fn + self.tn) * (self.fp + self.tn)) / n ** 2
        return _ratio(self.accuracy - expected, 1 - expected)

    def accuracy_ci(self, level=0.95):
        """Exact (Clopper-Pearson) confidence interval of the accuracy."""
        if not self.n:
            return (np.nan, np.nan)
        ci = binomtest(self.tp + self.tn, self.n).proportion_ci(level, method="exact")
        return (ci.low, ci.high)

    @property
    def p_value_acc_gt_nir(self):
        """One-sided binomial test that accuracy exceeds the NIR."""
        if not self.n:
            return np.nan
        return binomtest(self.tp + self.tn, self.n, p=self.no_information_rate,
                         alternative="greater").pvalue

    @property
    def mcnemar_p_value(self):
        """Continuity-corrected McNemar test on the off-diagonal cells."""
        off = self.fp + self.fn
        if not off:
            return np.nan
        stat = (abs(self.fp - self.fn) - 1) ** 2 / off
        return float(chi2_dist.sf(stat, df=1))

    def as_dict(self):
        low, high = self.accuracy_ci()
        return {
            "TP": self.tp, "FP": self.fp, "FN": self.fn, "TN": self.tn,
            "Accuracy":            self.accuracy,
            "Accuracy 95% low":    low,
            "Accuracy 95% high":   high,
            "No Information Rate": self.no_information_rate,
            "P [Acc > NIR]":       self.p_value_acc_gt_nir,
            "Kappa":               self.kappa,
            "McNemar p":           self.mcnemar_p_value,
            "Recall":              self.recall,
            "Specificity":         self.specificity,
            "Precision":           self.precision,
            "NPV":                 self.npv,
            "F1-score":            self.f1,
            "Prevalence":          self.prevalence,
            "Balanced Accuracy":   self.balanced_accuracy,
        }


@dataclass(frozen=True)
class Evaluation:
    name: str
    matrix: ConfusionMatrix
    degraded: bool = False

    @property
    def recall(self):
        return self.matrix.recall

    def as_row(self):
        return {"Model": self.name, **self.matrix.as_dict(),
                "Degraded": self.degraded}


def evaluate(fitted, test):
    """Score a FittedModel on the test frame."""
    predicted = fitted.predict(test)
    matrix = ConfusionMatrix.from_labels(test[TARGET], predicted)
    return Evaluation(name=fitted.name, matrix=matrix, degraded=fitted.degraded)
