"""Checks against the published IBM HR attrition file, when it is present."""

import numpy as np
import pytest

from attrition.config import TARGET
from attrition.data import encode, load_dataset, split_dataset
from attrition.evaluation import evaluate
from attrition.features import feature_ranges
from attrition.models import k_sweep, naive_bayes, train


@pytest.fixture
def real_data(real_data_path):
    return encode(load_dataset(real_data_path))


@pytest.fixture
def real_split(real_data):
    return split_dataset(real_data, ratio=0.7, seed=100)


def _yes_share(frame):
    return (np.asarray(frame[TARGET]).astype(str) == "Yes").mean()


def test_full_table(real_data):
    assert len(real_data) == 1470
    assert (real_data[TARGET] == "Yes").sum() == 237


def test_stratified_split(real_split):
    assert len(real_split.train) == 1029
    assert len(real_split.test) == 441
    assert abs(_yes_share(real_split.train) - 0.161) <= 0.01
    assert abs(_yes_share(real_split.test) - 0.161) <= 0.01


def test_laplace_naive_bayes_recall(real_split):
    fitted = train("Naive Bayes (Laplace)", naive_bayes(real_split.train, laplace=2),
                   real_split.train)
    assert evaluate(fitted, real_split.test).recall > 0.60


def test_k_sweep_on_real_data(real_data, real_split):
    sweep = k_sweep(real_split.train, real_split.test, range(1, 31),
                    ranges=feature_ranges(real_data))
    assert len(sweep) == 30
    assert sweep["recall"].between(0, 1).all()
