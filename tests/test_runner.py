"""
Integration tests for src/analysis/runner.py.

Covers:
- run_full_analysis end to end: returned tables, summary contents, exports.
- output_dir=None writes nothing.
- CLI exit codes: success, ModelingError, invalid input.
- setup_logging: handler replacement and optional log file.
"""

from __future__ import annotations

import json
import logging

import pytest

from src.analysis.intervals import COEFFICIENT_COLUMNS
from src.analysis.marginal import PREDICTION_COLUMNS
from src.analysis.runner import main, run_full_analysis
from src.logging_config import LOGGER_NAMESPACE, setup_logging


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to per-test capture streams."""
    yield
    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Class: run_full_analysis
# ---------------------------------------------------------------------------

class TestRunFullAnalysis:

    @pytest.fixture(scope="class")
    def exported(self, tmp_path_factory):
        out = tmp_path_factory.mktemp("results")
        return out, run_full_analysis(n=1000, seed=123, output_dir=out)

    def test_result_keys(self, exported):
        _, results = exported
        assert set(results) == {
            "dataset", "model", "coefficients", "odds_ratios",
            "intercept_probability", "predictions", "recovery", "summary",
        }

    def test_tables_have_fixed_columns(self, exported):
        _, results = exported
        assert list(results["coefficients"].columns) == COEFFICIENT_COLUMNS
        for table in results["predictions"].values():
            assert list(table.columns) == PREDICTION_COLUMNS

    def test_default_groupings(self, exported):
        _, results = exported
        assert list(results["predictions"]) == [
            "overall", "by_shape_indicator_coating_indicator", "size_quantiles",
        ]

    def test_files_written(self, exported):
        out, _ = exported
        for name in (
            "coefficients.csv",
            "odds_ratios.csv",
            "predictions_overall.csv",
            "predictions_by_shape_indicator_coating_indicator.csv",
            "predictions_size_quantiles.csv",
            "summary.json",
        ):
            assert (out / name).exists(), name

    def test_summary_json(self, exported):
        out, _ = exported
        summary = json.loads((out / "summary.json").read_text(encoding="utf-8"))
        assert summary["n_items"] == 1000
        assert summary["seed"] == 123
        assert summary["fit"]["converged"] is True
        assert summary["average_probability_in_range"] is True
        assert [c["term"] for c in summary["coefficients"]][0] == "(Intercept)"
        assert len(summary["predictions"]["by_shape_indicator_coating_indicator"]) == 4

    def test_no_export(self, monkeypatch):
        def _fail(*args, **kwargs):
            raise AssertionError("export called with output_dir=None")

        monkeypatch.setattr("src.analysis.runner._export", _fail)
        results = run_full_analysis(n=300, seed=1, output_dir=None)
        assert len(results["dataset"]) == 300


# ---------------------------------------------------------------------------
# Class: CLI
# ---------------------------------------------------------------------------

class TestCli:

    def test_success(self, capsys):
        assert main(["--n", "500", "--seed", "3", "--no-export"]) == 0
        assert "COEFFICIENTS" in capsys.readouterr().out

    def test_modeling_error_exit_code(self, capsys):
        """Two items cannot support four terms → SingularDesign → exit 1."""
        assert main(["--n", "2", "--no-export"]) == 1
        assert "SingularDesign" in capsys.readouterr().out

    def test_invalid_count_exit_code(self):
        assert main(["--n", "0", "--no-export"]) == 2

    def test_invalid_confidence_exit_code(self):
        assert main(["--confidence", "1.5", "--no-export"]) == 2

    def test_writes_to_output_dir(self, tmp_path):
        assert main(["--n", "400", "--seed", "8", "--output-dir", str(tmp_path)]) == 0
        assert (tmp_path / "summary.json").exists()


# ---------------------------------------------------------------------------
# Class: logging setup
# ---------------------------------------------------------------------------

class TestSetupLogging:

    def test_single_console_handler_after_repeat_calls(self):
        setup_logging(logging.INFO)
        logger = setup_logging(logging.DEBUG)
        assert logger.name == LOGGER_NAMESPACE
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_does_not_propagate_to_root(self):
        assert setup_logging(logging.INFO).propagate is False

    def test_log_file(self, tmp_path):
        log_path = tmp_path / "pipeline.log"
        logger = setup_logging(logging.INFO, log_file=str(log_path))
        logging.getLogger("src.modeling.logit").info("fit finished")
        for handler in logger.handlers:
            handler.flush()
        assert "fit finished" in log_path.read_text(encoding="utf-8")
