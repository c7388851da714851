from __future__ import annotations

import plotly.graph_objects as go
import pytest

from utils.graph_layout import (
    COLUMN_PADDING,
    COLUMN_WIDTH,
    HEADER_HEIGHT,
    MIN_HEIGHT,
    NODE_HEIGHT,
    NODE_PADDING,
    build_graph_layout,
    create_graph_figure,
    status_color,
    status_label,
)


def _strategy(sid, title, status="Active", color="#3B82F6"):
    return {"id": sid, "title": title, "status": status, "progress": 0, "color_code": color}


def _project(pid, sid, title, archived=False):
    return {"id": pid, "strategy_id": sid, "title": title, "status": "NYS", "progress": 0, "is_archived": archived}


def _action(aid, sid, title, pid=None, archived=False):
    return {
        "id": aid, "strategy_id": sid, "project_id": pid, "title": title,
        "status": "in_progress", "is_archived": archived,
    }


def _edge(eid, source, target):
    (source_type, source_id), (target_type, target_id) = source, target
    return {
        "id": eid, "source_type": source_type, "source_id": source_id,
        "target_type": target_type, "target_id": target_id,
    }


@pytest.fixture()
def fixture_data():
    strategies = [
        _strategy("s2", "beta", color="#EF4444"),
        _strategy("s1", "Alpha"),
        _strategy("s3", "Gamma", status="Archived"),
    ]
    projects = [
        _project("p1", "s2", "Zeta"),
        _project("p2", "s1", "Omega"),
        _project("p3", "s1", "Old", archived=True),
        _project("p4", "s3", "Hidden"),
    ]
    actions = [
        _action("a1", "s1", "Do", pid="p2"),
        _action("a2", "s2", "Direct"),
        _action("a3", "s1", "Under archived", pid="p3"),
    ]
    return strategies, projects, actions


def test_archived_entities_are_hidden(fixture_data) -> None:
    layout = build_graph_layout(*fixture_data)

    assert set(layout["nodes"]) == {
        "strategy-s1", "strategy-s2", "project-p1", "project-p2",
        "action-a1", "action-a2", "action-a3",
    }


def test_columns_sorted_and_positioned(fixture_data) -> None:
    nodes = build_graph_layout(*fixture_data)["nodes"]

    # 标题不区分大小写排序：Alpha 在 beta 之前
    assert nodes["strategy-s1"]["y"] == HEADER_HEIGHT
    assert nodes["strategy-s2"]["y"] == HEADER_HEIGHT + NODE_HEIGHT + NODE_PADDING
    # 项目按所属战略顺序排序
    assert nodes["project-p2"]["y"] < nodes["project-p1"]["y"]

    assert nodes["strategy-s1"]["x"] == COLUMN_PADDING
    assert nodes["project-p1"]["x"] == COLUMN_WIDTH + COLUMN_PADDING
    assert nodes["action-a1"]["x"] == COLUMN_WIDTH * 2 + COLUMN_PADDING
    assert nodes["action-a1"]["width"] == COLUMN_WIDTH - COLUMN_PADDING * 2
    assert nodes["project-p1"]["color"] == "#EF4444"


def test_hierarchy_links(fixture_data) -> None:
    # a3 的项目已归档：节点可见但不画层级线
    links = {(l["source"], l["target"]) for l in build_graph_layout(*fixture_data)["hierarchy_links"]}

    assert links == {
        ("strategy-s2", "project-p1"),
        ("strategy-s1", "project-p2"),
        ("project-p2", "action-a1"),
        ("strategy-s2", "action-a2"),
    }


def test_dependency_links_need_both_endpoints_visible(fixture_data) -> None:
    dependencies = [
        _edge("e1", ("project", "p1"), ("action", "a1")),
        _edge("e2", ("project", "p1"), ("project", "p3")),
        _edge("e3", ("action", "a2"), ("project", "deleted")),
    ]

    layout = build_graph_layout(*fixture_data, dependencies)

    assert [(l["source"], l["target"], l["ids"]) for l in layout["dependency_links"]] == [
        ("project-p1", "action-a1", ["e1"]),
    ]
    assert layout["nodes"]["project-p1"]["depends_on"] == 2
    assert layout["nodes"]["action-a1"]["blocking"] == 1


def test_strategy_filter(fixture_data) -> None:
    layout = build_graph_layout(*fixture_data, strategy_filter="s2")

    assert set(layout["nodes"]) == {"strategy-s2", "project-p1", "action-a2"}


def test_height(fixture_data) -> None:
    assert build_graph_layout(*fixture_data)["height"] == MIN_HEIGHT

    projects = [_project(f"p{i}", "s1", f"P{i}") for i in range(10)]
    layout = build_graph_layout([_strategy("s1", "Alpha")], projects, [])
    assert layout["height"] == HEADER_HEIGHT + 10 * (NODE_HEIGHT + NODE_PADDING)


def test_empty_layout() -> None:
    layout = build_graph_layout([], [], [], [])

    assert layout["nodes"] == {}
    assert layout["height"] == MIN_HEIGHT
    assert layout["cycles"] == []


def test_cycles_reported(fixture_data) -> None:
    dependencies = [
        _edge("e1", ("project", "p1"), ("project", "p2")),
        _edge("e2", ("project", "p2"), ("project", "p1")),
    ]

    assert len(build_graph_layout(*fixture_data, dependencies)["cycles"]) == 1


@pytest.mark.parametrize("status, color, label", [
    ("achieved", "#22C55E", "DONE"),
    ("C", "#22C55E", "DONE"),
    ("in_progress", "#3B82F6", "ON TRACK"),
    ("OT", "#3B82F6", "ON TRACK"),
    ("B", "#EF4444", "BEHIND"),
    ("at_risk", "#EF4444", "AT RISK"),
    ("not_started", "#9CA3AF", "NOT STARTED"),
    ("OH", "#9CA3AF", "OH"),
])
def test_status_badges(status, color, label) -> None:
    assert status_color(status) == color
    assert status_label(status) == label


def test_create_graph_figure(fixture_data) -> None:
    dependencies = [_edge("e1", ("project", "p1"), ("action", "a1"))]
    layout = build_graph_layout(*fixture_data, dependencies)

    fig = create_graph_figure(layout)

    assert isinstance(fig, go.Figure)
    assert len(fig.layout.shapes) == len(layout["nodes"])
    assert fig.layout.height == layout["height"]
    # 层级连线各一条 trace，外加悬停点
    assert len(fig.data) == len(layout["hierarchy_links"]) + 1
