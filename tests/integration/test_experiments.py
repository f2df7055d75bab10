"""Tests for the replication harness in experiments/."""

from __future__ import annotations

import pytest

from drivethru.config import DEFAULT_CONFIG, apply_overrides
from experiments.run_experiments import (
    aggregate_time_series,
    avg_nested,
    plot_all_scenarios,
    run_scenario,
)
from experiments.scenarios import SCENARIOS


def _short_cfg():
    return apply_overrides(DEFAULT_CONFIG, {"sim": {"day_minutes": 20.0, "seed": 40}})


class TestRunScenario:
    def test_replications_use_consecutive_seeds(self):
        cfg = _short_cfg()
        results = run_scenario(cfg, {"name": "t", "overrides": {}}, replications=3)
        assert len(results) == 3
        assert all(r["arrivals"] == r["served"] + r["wip"] for r in results)
        # different seeds give different arrival streams
        assert len({tuple(pt["wip"] for pt in r["time_series"]) for r in results}) > 1

    def test_scenario_overrides_apply(self):
        cfg = _short_cfg()
        sc = {"name": "busy", "overrides": {"capacities": {"pay": 2}, "rebalance": {"auto": False}}}
        (res,) = run_scenario(cfg, sc, replications=1)
        assert res["parameters"]["pay_servers"] == 2

    def test_all_named_scenarios_are_runnable(self):
        cfg = _short_cfg()
        names = [sc["name"] for sc in SCENARIOS]
        assert len(names) == len(set(names))
        for sc in SCENARIOS:
            (res,) = run_scenario(cfg, sc, replications=1)
            assert res["arrivals"] >= 0


class TestAggregation:
    def test_time_series_grid_average(self):
        results = [
            {"time_series": [{"time_minutes": 1.0, "wip": 2, "avg_wait": 1.0},
                             {"time_minutes": 6.0, "wip": 4, "avg_wait": 3.0}]},
            {"time_series": [{"time_minutes": 1.0, "wip": 0, "avg_wait": 0.0},
                             {"time_minutes": 6.0, "wip": 2, "avg_wait": 1.0}]},
        ]
        agg = aggregate_time_series(results, day_minutes=10.0, interval_minutes=5.0)
        assert [pt["time_minutes"] for pt in agg] == [0.0, 5.0, 10.0]
        assert agg[0]["wip"] == 0.0
        assert agg[1]["wip"] == pytest.approx(1.0)
        assert agg[2]["wip"] == pytest.approx(3.0)
        assert agg[2]["avg_wait"] == pytest.approx(2.0)

    def test_empty(self):
        assert aggregate_time_series([], 10.0) == []

    def test_avg_nested(self):
        results = [{"u": {"pay": 0.5, "pickup": 1.0}}, {"u": {"pay": 0.7, "pickup": 0.0}}]
        assert avg_nested(results, "u") == pytest.approx({"pay": 0.6, "pickup": 0.5})


class TestPlot:
    def test_writes_png(self, tmp_path):
        curves = [{"name": "a", "series": [{"time_minutes": 0.0, "wip": 0, "avg_wait": 0.0},
                                           {"time_minutes": 5.0, "wip": 3, "avg_wait": 1.5}]}]
        path = plot_all_scenarios(curves, out_dir=str(tmp_path))
        assert path is not None
        assert (tmp_path / "all_scenarios_wip_wait.png").exists()

    def test_nothing_to_plot(self, tmp_path):
        assert plot_all_scenarios([], out_dir=str(tmp_path)) is None
