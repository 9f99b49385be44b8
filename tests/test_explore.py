"""Tests for the exploratory cross-tabulations."""

import numpy as np
import pandas as pd
import pytest

from attrition.config import CONTINUOUS_COLS, TARGET
from attrition.explore import (
    attrition_rates, class_distribution, correlations, rank_attrition_drivers,
)


def test_class_distribution(encoded):
    dist = class_distribution(encoded[TARGET])
    assert dist.loc["Yes", "count"] == 96
    assert dist.loc["No", "count"] == 504
    assert dist["proportion"].sum() == pytest.approx(1)


class TestAttritionRates:
    def test_rows_sum_to_one(self, encoded):
        rates = attrition_rates(encoded, "OverTime")
        assert np.allclose(rates.sum(axis=1), 1)
        assert set(rates.columns) == {"Yes", "No"}

    def test_overtime_raises_attrition(self, encoded):
        rates = attrition_rates(encoded, "OverTime")["Yes"]
        assert rates["Yes"] > rates["No"]

    def test_column_margin(self, encoded):
        rates = attrition_rates(encoded, "MaritalStatus", margin="columns")
        assert np.allclose(rates.sum(axis=0), 1)

    def test_rate_matches_counts(self):
        frame = pd.DataFrame({
            "Gender": pd.Categorical(["Female", "Female", "Male", "Male", "Male"]),
            TARGET: pd.Categorical(["Yes", "No", "No", "No", "Yes"],
                                   categories=["Yes", "No"], ordered=True),
        })
        rates = attrition_rates(frame, "Gender")["Yes"]
        assert rates["Female"] == pytest.approx(0.5)
        assert rates["Male"] == pytest.approx(1 / 3)

    def test_bad_margin(self, encoded):
        with pytest.raises(ValueError):
            attrition_rates(encoded, "OverTime", margin="all")


def test_rank_attrition_drivers(encoded):
    drivers = rank_attrition_drivers(encoded)
    assert len(drivers) == 16
    assert drivers["spread"].is_monotonic_decreasing
    assert (drivers["highest_rate"] >= drivers["lowest_rate"]).all()
    overtime = drivers.set_index("attribute").loc["OverTime"]
    assert overtime["riskiest"] == "Yes"


def test_correlations_cover_continuous_columns(encoded):
    corr = correlations(encoded)
    assert list(corr.columns) == CONTINUOUS_COLS
    assert np.allclose(np.diag(corr), 1)
