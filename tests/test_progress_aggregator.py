from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from utils.progress_aggregator import (
    ProgressAggregator,
    action_weight,
    compute_project_progress,
    compute_strategy_progress,
    round_half_up,
)


def _action(status: str, archived: bool = False) -> SimpleNamespace:
    return SimpleNamespace(status=status, is_archived=archived)


def _project(progress: int, archived: bool = False) -> SimpleNamespace:
    return SimpleNamespace(progress=progress, is_archived=archived)


@pytest.mark.parametrize("value, expected", [(2.5, 3), (62.5, 63), (33.5, 34), (0.49, 0), (100, 100)])
def test_round_half_up(value, expected) -> None:
    assert round_half_up(value) == expected


def test_action_weight_uses_configured_in_progress_weight() -> None:
    assert action_weight("achieved", 50) == 100
    assert action_weight("in_progress", 50) == 50
    assert action_weight("in_progress", 30) == 30
    assert action_weight("at_risk", 50) == 0
    assert action_weight("not_started", 50) == 0


def test_action_weight_rejects_unknown_status() -> None:
    with pytest.raises(ValueError):
        action_weight("done", 50)


def test_project_progress_three_achieved_one_not_started() -> None:
    actions = [_action("achieved")] * 3 + [_action("not_started")]
    assert compute_project_progress(actions, 50) == 75


def test_project_progress_ignores_archived_and_defaults_to_zero() -> None:
    assert compute_project_progress([], 50) == 0
    assert compute_project_progress([_action("achieved", archived=True)], 50) == 0
    assert compute_project_progress([_action("achieved"), _action("not_started", archived=True)], 50) == 100


def test_strategy_progress_mean_of_projects() -> None:
    assert compute_strategy_progress([]) == 0
    assert compute_strategy_progress([_project(100), _project(50)]) == 75
    assert compute_strategy_progress([_project(33), _project(34)]) == 34
    assert compute_strategy_progress([_project(100), _project(0, archived=True)]) == 100


def test_recalculate_missing_entities_returns_none(aggregator: ProgressAggregator) -> None:
    assert aggregator.recalculate_project_progress("missing") is None
    assert aggregator.recalculate_strategy_progress("missing") is None


def test_rollup_after_action_changes(service, strategy, project) -> None:
    for _ in range(3):
        service.create_action({
            "strategy_id": strategy["id"], "project_id": project["id"],
            "title": "Hire", "status": "achieved",
        })
    service.create_action({
        "strategy_id": strategy["id"], "project_id": project["id"],
        "title": "Sign lease", "status": "not_started",
    })

    assert service.get_project(project["id"])["progress"] == 75
    assert service.get_strategy(strategy["id"])["progress"] == 75


def test_default_action_status_counts_as_partial(service, strategy, project) -> None:
    action = service.create_action({"strategy_id": strategy["id"], "project_id": project["id"], "title": "Draft"})

    assert action["status"] == "in_progress"
    assert service.get_project(project["id"])["progress"] == 50


def test_strategy_level_actions_do_not_count(service, strategy) -> None:
    service.create_action({"strategy_id": strategy["id"], "title": "Direct", "status": "achieved"})

    assert service.get_strategy(strategy["id"])["progress"] == 0


def test_strategy_auto_completes_and_reverts(service, strategy) -> None:
    project = service.create_project({"strategy_id": strategy["id"], "title": "Done", "status": "C"})
    service.create_action({
        "strategy_id": strategy["id"], "project_id": project["id"],
        "title": "Ship", "status": "achieved",
    })

    completed = service.get_strategy(strategy["id"])
    assert completed["progress"] == 100
    assert completed["status"] == "Completed"
    assert completed["completion_date"] is not None

    service.create_action({
        "strategy_id": strategy["id"], "project_id": project["id"],
        "title": "Follow-up", "status": "not_started",
    })

    reverted = service.get_strategy(strategy["id"])
    assert reverted["progress"] == 50
    assert reverted["status"] == "Active"
    assert reverted["completion_date"] is None


def test_no_auto_complete_while_project_open(service, strategy, project) -> None:
    service.create_action({
        "strategy_id": strategy["id"], "project_id": project["id"],
        "title": "Ship", "status": "achieved",
    })

    result = service.get_strategy(strategy["id"])
    assert result["progress"] == 100
    assert result["status"] == "Active"


def test_recalculation_failure_does_not_fail_mutation(service, strategy, project, monkeypatch, caplog) -> None:
    def boom(project_id):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(service.aggregator, "recalculate_project_progress", boom)

    with caplog.at_level(logging.ERROR, logger="utils.progress_aggregator"):
        action = service.create_action({
            "strategy_id": strategy["id"], "project_id": project["id"],
            "title": "Ship", "status": "achieved",
        })

    assert service.get_action(action["id"])["status"] == "achieved"
    assert service.get_project(project["id"])["progress"] == 0
    assert any("重新计算项目进度失败" in record.getMessage() for record in caplog.records)


def test_refresh_logs_each_failure_independently(aggregator, monkeypatch, caplog) -> None:
    calls = []

    def boom(entity_id):
        calls.append(entity_id)
        raise RuntimeError("boom")

    monkeypatch.setattr(aggregator, "recalculate_project_progress", boom)
    monkeypatch.setattr(aggregator, "recalculate_strategy_progress", boom)

    with caplog.at_level(logging.ERROR, logger="utils.progress_aggregator"):
        ok = aggregator.refresh(project_ids=["p1", None, "p1", "p2"], strategy_ids=["s1"])

    assert ok is False
    assert calls == ["p1", "p2", "s1"]
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 3
