from __future__ import annotations

import plotly.graph_objects as go

from utils.progress_report import SUMMARY_COLUMNS, ProgressReport


def test_build_summary_counts_active_children(service, strategy, project) -> None:
    second = service.create_strategy({"title": "Second", "display_order": 0})
    service.update_strategy(strategy["id"], {"display_order": 1})
    done = service.create_project({"strategy_id": strategy["id"], "title": "Done", "status": "C"})
    service.create_action({"strategy_id": strategy["id"], "project_id": done["id"], "title": "A", "status": "achieved"})
    service.create_action({"strategy_id": strategy["id"], "project_id": project["id"], "title": "B", "status": "at_risk"})
    service.create_action({"strategy_id": strategy["id"], "title": "C", "status": "achieved", "is_archived": True})

    summary = ProgressReport.build_summary(
        service.list_strategies(), service.list_projects(), service.list_actions()
    )

    assert list(summary.columns) == SUMMARY_COLUMNS
    assert list(summary['strategy_id']) == [second["id"], strategy["id"]]

    row = summary.iloc[1]
    assert row['projects'] == 2
    assert row['completed_projects'] == 1
    assert row['actions'] == 2
    assert row['achieved_actions'] == 1
    assert row['at_risk_actions'] == 1
    assert row['progress'] == 50

    empty = summary.iloc[0]
    assert empty['projects'] == 0
    assert empty['actions'] == 0


def test_build_summary_without_strategies() -> None:
    summary = ProgressReport.build_summary([], [], [])

    assert summary.empty
    assert list(summary.columns) == SUMMARY_COLUMNS


def test_status_breakdown_skips_archived() -> None:
    actions = [
        {"status": "achieved", "is_archived": False},
        {"status": "achieved", "is_archived": False},
        {"status": "at_risk", "is_archived": False},
        {"status": "not_started", "is_archived": True},
    ]

    breakdown = ProgressReport.status_breakdown(actions)

    assert breakdown.to_dict() == {"achieved": 2, "at_risk": 1}


def test_charts() -> None:
    summary = ProgressReport.build_summary(
        [{"id": "s1", "title": "Alpha", "status": "Active", "progress": 40,
          "color_code": "#3B82F6", "display_order": 0}],
        [], []
    )

    bar = ProgressReport.create_progress_chart(summary)
    pie = ProgressReport.create_status_chart(ProgressReport.status_breakdown([]))

    assert isinstance(bar, go.Figure)
    assert list(bar.data[0].x) == [40]
    assert isinstance(pie, go.Figure)
