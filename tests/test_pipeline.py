"""Tests for the model line-up, the full run and the command line."""

import os

import pytest

from attrition.config import TARGET
from attrition.models import train
from attrition.pipeline import get_models, get_variants, main, run, save_report
from attrition.tree import n_leaves, prune

FAST = dict(n_trees=20, k_values=range(1, 4), folds=3)


@pytest.fixture
def report(csv_path):
    return run(csv_path, **FAST)


class TestModelLineUp:
    def test_compared_models(self, encoded):
        assert list(get_models(encoded)) == [
            "Logistic Regression", "Naive Bayes (Laplace)", "KNN",
            "Pruned Decision Tree", "Random Forest",
        ]

    def test_variants_do_not_shadow_models(self, encoded):
        assert not set(get_models(encoded)) & set(get_variants(encoded))

    def test_pruned_tree_equals_pruning_the_full_tree(self, encoded, split):
        built = train("built", get_models(encoded)["Pruned Decision Tree"], split.train)
        full = train("full", get_variants(encoded)["Decision Tree"], split.train)
        assert n_leaves(built) == n_leaves(prune(full, split.train, 0.01))


class TestRun:
    def test_split_sizes(self, report):
        assert len(report.split.train) == 420
        assert len(report.split.test) == 180

    def test_every_model_scored_on_every_test_row(self, report):
        assert [e.name for e in report.evaluations] == list(report.comparison.table["Model"])
        for e in report.evaluations + report.variants:
            m = e.matrix
            assert m.tp + m.fp + m.fn + m.tn == 180

    def test_best_has_highest_recall(self, report):
        recalls = {e.name: e.recall for e in report.evaluations}
        assert recalls[report.comparison.best] == max(recalls.values())

    def test_side_tables(self, report):
        assert list(report.k_sweep["k"]) == [1, 2, 3]
        assert report.pruning["leaves"].iloc[-1] == 1
        assert "const" in report.logit.index
        assert not any(t.startswith("Department") for t in report.logit.index)
        assert report.tree_importance["scaled"].sum() == pytest.approx(100)
        assert len(report.drivers) == 16

    def test_data_is_encoded(self, report):
        assert list(report.data[TARGET].cat.categories) == ["Yes", "No"]

    def test_save_report(self, report, tmp_path):
        out = tmp_path / "results"
        save_report(report, str(out))
        for name in ("model_comparison.csv", "metrics.csv", "k_sweep.csv",
                     "logit_summary.csv", "vif.csv", "pruning_table.csv",
                     "tree_importance.csv", "forest_importance.csv", "pruned_tree.txt"):
            assert os.path.exists(out / name), name


class TestMain:
    def test_writes_report(self, csv_path, tmp_path, capsys):
        out = tmp_path / "out"
        code = main(["--data", str(csv_path), "--output-dir", str(out),
                     "--trees", "20", "--max-k", "3", "--folds", "3"])
        assert code == 0
        assert (out / "model_comparison.csv").exists()
        printed = capsys.readouterr().out
        assert "Best model" in printed
        assert "McNemar" in printed

    def test_schema_error_exit_code(self, raw_frame, tmp_path, capsys):
        path = tmp_path / "broken.csv"
        raw_frame.drop(columns=["OverTime"]).to_csv(path, index=False)
        code = main(["--data", str(path), "--output-dir", str(tmp_path / "out")])
        assert code == 2
        assert "OverTime" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_exclude_flag(self, csv_path, tmp_path):
        out = tmp_path / "out"
        code = main(["--data", str(csv_path), "--output-dir", str(out),
                     "--trees", "10", "--max-k", "2", "--folds", "3",
                     "--exclude", "Department", "--exclude", "EducationField"])
        assert code == 0
        terms = (out / "logit_summary.csv").read_text()
        assert "EducationField_" not in terms
