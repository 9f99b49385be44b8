"""Shared fixtures: a synthetic employee table with the raw IBM HR schema."""

import os

import numpy as np
import pandas as pd
import pytest

from attrition.config import DATA_PATH
from attrition.data import encode, split_dataset

JOB_ROLES = [
    "Healthcare Representative", "Human Resources", "Laboratory Technician",
    "Manager", "Manufacturing Director", "Research Director",
    "Research Scientist", "Sales Executive", "Sales Representative",
]


def make_employees(n=600, seed=7, attrition_share=0.16):
    """Employee rows whose attrition depends on overtime, level, pay and tenure."""
    rng = np.random.default_rng(seed)
    age = rng.integers(18, 61, n)
    job_level = rng.integers(1, 6, n)
    overtime = rng.choice(["Yes", "No"], n, p=[0.3, 0.7])
    years = rng.integers(0, 21, n)
    income = 1000 + job_level * 3000 + rng.integers(0, 2500, n)

    risk = (
        1.5 * (overtime == "Yes")
        - 0.25 * job_level
        - 0.05 * years
        - 0.02 * (age - 18)
        + rng.normal(0, 1.0, n)
    )
    n_yes = int(round(attrition_share * n))
    attrition = np.where(risk >= np.sort(risk)[-n_yes], "Yes", "No")

    return pd.DataFrame({
        "Age":                      age,
        "Attrition":                attrition,
        "BusinessTravel":           rng.choice(["Non-Travel", "Travel_Frequently", "Travel_Rarely"], n),
        "DailyRate":                rng.integers(100, 1500, n),
        "Department":               rng.choice(["Human Resources", "Research & Development", "Sales"], n),
        "DistanceFromHome":         rng.integers(1, 30, n),
        "Education":                rng.integers(1, 6, n),
        "EducationField":           rng.choice(["Human Resources", "Life Sciences", "Marketing",
                                                "Medical", "Other", "Technical Degree"], n),
        "EmployeeCount":            1,
        "EmployeeNumber":           np.arange(1, n + 1),
        "EnvironmentSatisfaction":  rng.integers(1, 5, n),
        "Gender":                   rng.choice(["Female", "Male"], n),
        "HourlyRate":               rng.integers(30, 101, n),
        "JobInvolvement":           rng.integers(1, 5, n),
        "JobLevel":                 job_level,
        "JobRole":                  rng.choice(JOB_ROLES, n),
        "JobSatisfaction":          rng.integers(1, 5, n),
        "MaritalStatus":            rng.choice(["Divorced", "Married", "Single"], n),
        "MonthlyIncome":            income,
        "MonthlyRate":              rng.integers(2000, 27000, n),
        "NumCompaniesWorked":       rng.integers(0, 10, n),
        "Over18":                   "Y",
        "OverTime":                 overtime,
        "PercentSalaryHike":        rng.integers(11, 26, n),
        "PerformanceRating":        rng.choice([3, 4], n, p=[0.85, 0.15]),
        "RelationshipSatisfaction": rng.integers(1, 5, n),
        "StandardHours":            80,
        "StockOptionLevel":         rng.integers(0, 4, n),
        "TotalWorkingYears":        years + rng.integers(0, 15, n),
        "TrainingTimesLastYear":    rng.integers(0, 7, n),
        "WorkLifeBalance":          rng.integers(1, 5, n),
        "YearsAtCompany":           years,
        "YearsInCurrentRole":       np.minimum(years, rng.integers(0, 12, n)),
        "YearsSinceLastPromotion":  np.minimum(years, rng.integers(0, 8, n)),
        "YearsWithCurrManager":     np.minimum(years, rng.integers(0, 12, n)),
    })


@pytest.fixture
def raw_frame():
    return make_employees()


@pytest.fixture
def csv_path(tmp_path, raw_frame):
    path = tmp_path / "employees.csv"
    raw_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def encoded(raw_frame):
    return encode(raw_frame.drop(columns=["DailyRate", "HourlyRate", "EmployeeCount",
                                          "EmployeeNumber", "Over18", "StandardHours"]))


@pytest.fixture
def split(encoded):
    return split_dataset(encoded, ratio=0.7, seed=100)


@pytest.fixture
def real_data_path():
    if not os.path.exists(DATA_PATH):
        pytest.skip(f"IBM attrition data not found at {DATA_PATH}")
    return DATA_PATH
