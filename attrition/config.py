"""Constants shared by the attrition analysis."""

import os

# ── Run settings ────────────────────────────────────────────────────────────
SEED          = 100
SPLIT_RATIO   = 0.70
CV_FOLDS      = 10
DATA_PATH     = os.environ.get(
    "ATTRITION_DATA", os.path.join("data", "Employee-Attrition.csv"))
RES_DIR       = "results"

# ── Label ───────────────────────────────────────────────────────────────────
TARGET        = "Attrition"
POSITIVE      = "Yes"
NEGATIVE      = "No"
LABELS        = (POSITIVE, NEGATIVE)

# Read but discarded: constants, row identifiers and two unused pay rates
DROP_COLS = [
    "DailyRate", "HourlyRate", "EmployeeCount",
    "EmployeeNumber", "Over18", "StandardHours",
]

# Spellings of the first header when the file's BOM is decoded wrongly
HEADER_FIXES = {
    "\ufeffAge": "Age",
    "ï»¿Age":    "Age",
    "ï..Age":    "Age",
}

# ── Schema ──────────────────────────────────────────────────────────────────
CATEGORICAL_COLS = [
    "Gender", "MaritalStatus", "Education", "EducationField",
    "BusinessTravel", "Department", "OverTime", "PerformanceRating",
    "StockOptionLevel", "JobLevel", "JobRole",
    "EnvironmentSatisfaction", "JobInvolvement",
    "RelationshipSatisfaction", "WorkLifeBalance", "JobSatisfaction",
]

CONTINUOUS_COLS = [
    "Age", "DistanceFromHome", "MonthlyIncome", "MonthlyRate",
    "NumCompaniesWorked", "PercentSalaryHike", "TotalWorkingYears",
    "TrainingTimesLastYear", "YearsAtCompany", "YearsInCurrentRole",
    "YearsSinceLastPromotion", "YearsWithCurrManager",
]

REQUIRED_COLS = [TARGET] + CATEGORICAL_COLS + CONTINUOUS_COLS

# ── Model defaults ──────────────────────────────────────────────────────────
MAX_ITER      = 1000
LR_EXCLUDE    = ("Department",)
LAPLACE       = 2
KNN_K         = 12
K_RANGE       = range(1, 31)
MIN_SPLIT     = 2
PRUNE_ALPHA   = 0.01
N_TREES       = 500
