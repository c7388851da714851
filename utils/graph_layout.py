"""
战略图布局引擎

三列布局：战略 | 项目 | 行动，附层级连线与依赖连线。
默认视图排除已归档战略及已归档项目/行动；依赖边只有两端都可见时才绘制。
"""
from typing import Any, Dict, List, Optional

import networkx as nx
import plotly.graph_objects as go

from utils.dependency_store import build_dependency_graph, node_key

COLUMN_WIDTH = 280
NODE_HEIGHT = 75
NODE_PADDING = 12
COLUMN_PADDING = 40
HEADER_HEIGHT = 80
MIN_HEIGHT = 600
DEFAULT_COLOR = "#6B7280"

COLUMNS = [
    ("strategy", "Strategies"),
    ("project", "Projects"),
    ("action", "Actions"),
]

_DONE = {"achieved", "c", "completed", "done"}
_ON_TRACK = {"in_progress", "ot", "on track", "ontrack", "inprogress"}
_BEHIND = {"behind", "b", "at risk", "at_risk", "blocked"}


def status_color(status: Optional[str]) -> str:
    """状态对应的颜色"""
    s = (status or "").lower()
    if s in _DONE:
        return "#22C55E"
    if s in _ON_TRACK:
        return "#3B82F6"
    if s in _BEHIND:
        return "#EF4444"
    return "#9CA3AF"


def status_label(status: Optional[str]) -> str:
    """状态对应的徽标文字"""
    s = (status or "").lower()
    if s in _DONE:
        return "DONE"
    if s in ("in_progress", "ot", "ontrack", "inprogress"):
        return "ON TRACK"
    if s in ("behind", "b"):
        return "BEHIND"
    if s in ("at risk", "at_risk"):
        return "AT RISK"
    if s == "blocked":
        return "BLOCKED"
    if s in ("not_started", "nys", "notstarted"):
        return "NOT STARTED"
    return (status or "").upper()


def _sorted_children(items: List[Dict], strategy_order: Dict[str, int]) -> List[Dict]:
    """按所属战略顺序、再按标题排序"""
    return sorted(
        items,
        key=lambda item: (strategy_order.get(item["strategy_id"], 999), item["title"].lower())
    )


def build_graph_layout(
    strategies: List[Dict[str, Any]],
    projects: List[Dict[str, Any]],
    actions: List[Dict[str, Any]],
    dependencies: Optional[List[Dict[str, Any]]] = None,
    strategy_filter: str = "all",
) -> Dict[str, Any]:
    """
    计算三列图的节点位置与连线

    Args:
        strategies/projects/actions: 服务层返回的实体字典
        dependencies: 依赖边字典
        strategy_filter: "all" 或某个战略ID

    Returns:
        {
            'nodes': {key: {...}},
            'hierarchy_links': [...],
            'dependency_links': [...],
            'height': int,
            'cycles': [[key, ...], ...],
        }
    """
    dependencies = dependencies or []

    visible_strategies = sorted(
        (
            s for s in strategies
            if s["status"] != "Archived" and (strategy_filter == "all" or s["id"] == strategy_filter)
        ),
        key=lambda s: s["title"].lower()
    )
    strategy_order = {s["id"]: i for i, s in enumerate(visible_strategies)}
    colors = {s["id"]: s.get("color_code") or DEFAULT_COLOR for s in strategies}

    visible_projects = _sorted_children(
        [p for p in projects if p["strategy_id"] in strategy_order and not p["is_archived"]],
        strategy_order
    )
    visible_actions = _sorted_children(
        [a for a in actions if a["strategy_id"] in strategy_order and not a["is_archived"]],
        strategy_order
    )

    nodes: Dict[str, Dict[str, Any]] = {}
    for column, (kind, items) in enumerate((
        ("strategy", visible_strategies),
        ("project", visible_projects),
        ("action", visible_actions),
    )):
        y = HEADER_HEIGHT
        for item in items:
            strategy_id = item["id"] if kind == "strategy" else item["strategy_id"]
            nodes[node_key(kind, item["id"])] = {
                "kind": kind,
                "id": item["id"],
                "title": item["title"],
                "status": item.get("status"),
                "progress": item.get("progress"),
                "strategy_id": strategy_id,
                "project_id": item.get("project_id"),
                "color": colors.get(strategy_id, DEFAULT_COLOR),
                "x": COLUMN_WIDTH * column + COLUMN_PADDING,
                "y": y,
                "width": COLUMN_WIDTH - COLUMN_PADDING * 2,
                "height": NODE_HEIGHT,
            }
            y += NODE_HEIGHT + NODE_PADDING

    hierarchy_links = []
    for project in visible_projects:
        hierarchy_links.append({
            "source": node_key("strategy", project["strategy_id"]),
            "target": node_key("project", project["id"]),
            "color": colors.get(project["strategy_id"], DEFAULT_COLOR),
        })
    for action in visible_actions:
        project_key = node_key("project", action["project_id"]) if action.get("project_id") else None
        if project_key and project_key in nodes:
            source = project_key
        elif project_key:
            # 所属项目不可见（如已归档），不画层级线
            continue
        else:
            source = node_key("strategy", action["strategy_id"])
        hierarchy_links.append({
            "source": source,
            "target": node_key("action", action["id"]),
            "color": colors.get(action["strategy_id"], DEFAULT_COLOR),
        })

    graph = build_dependency_graph(dependencies)
    dependency_links = [
        {"source": source, "target": target, "ids": data["ids"]}
        for source, target, data in graph.edges(data=True)
        if source in nodes and target in nodes
    ]
    for key, node in nodes.items():
        node["depends_on"] = graph.out_degree(key) if key in graph else 0
        node["blocking"] = graph.in_degree(key) if key in graph else 0

    column_heights = [
        HEADER_HEIGHT + len(items) * (NODE_HEIGHT + NODE_PADDING)
        for items in (visible_strategies, visible_projects, visible_actions)
    ]

    return {
        "nodes": nodes,
        "hierarchy_links": hierarchy_links,
        "dependency_links": dependency_links,
        "height": max(column_heights + [MIN_HEIGHT]),
        "cycles": [cycle for cycle in nx.simple_cycles(graph)],
    }


def _anchor(node: Dict[str, Any], side: str):
    """节点左/右边中点"""
    x = node["x"] + node["width"] if side == "right" else node["x"]
    return x, node["y"] + node["height"] / 2


def create_graph_figure(layout: Dict[str, Any]) -> go.Figure:
    """
    使用 Plotly 绘制三列战略图

    Args:
        layout: build_graph_layout 的返回值

    Returns:
        Plotly Figure
    """
    nodes = layout["nodes"]
    fig = go.Figure()
    shapes = []
    annotations = []

    # 列标题
    for column, (_, label) in enumerate(COLUMNS):
        annotations.append(dict(
            x=COLUMN_WIDTH * column + COLUMN_WIDTH / 2, y=HEADER_HEIGHT / 2,
            text=f"<b>{label}</b>", showarrow=False, font=dict(size=14)
        ))

    # 层级连线（虚线）
    for link in layout["hierarchy_links"]:
        source, target = nodes.get(link["source"]), nodes.get(link["target"])
        if not source or not target:
            continue
        x0, y0 = _anchor(source, "right")
        x1, y1 = _anchor(target, "left")
        fig.add_trace(go.Scatter(
            x=[x0, (x0 + x1) / 2, (x0 + x1) / 2, x1], y=[y0, y0, y1, y1],
            mode="lines", line=dict(color=link["color"], width=1, dash="dash"),
            opacity=0.4, hoverinfo="skip", showlegend=False
        ))

    # 依赖连线（实线，带箭头）
    for link in layout["dependency_links"]:
        source, target = nodes[link["source"]], nodes[link["target"]]
        x0, y0 = _anchor(source, "left")
        x1, y1 = _anchor(target, "left")
        annotations.append(dict(
            x=x1, y=y1, ax=x0, ay=y0, xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=3, arrowwidth=1.5, arrowcolor="#F59E0B", text=""
        ))

    # 节点
    hover_x, hover_y, hover_text = [], [], []
    for node in nodes.values():
        shapes.append(dict(
            type="rect",
            x0=node["x"], y0=node["y"],
            x1=node["x"] + node["width"], y1=node["y"] + node["height"],
            line=dict(color=node["color"], width=2),
            fillcolor="white",
        ))
        badge = status_label(node["status"])
        progress = f" · {node['progress']}%" if node["progress"] is not None else ""
        annotations.append(dict(
            x=node["x"] + node["width"] / 2, y=node["y"] + node["height"] / 2,
            text=f"{node['title']}<br><span style='color:{status_color(node['status'])}'>{badge}</span>{progress}",
            showarrow=False, font=dict(size=11)
        ))
        hover_x.append(node["x"] + node["width"] / 2)
        hover_y.append(node["y"] + node["height"] / 2)
        hover_text.append(
            f"{node['kind'].title()}: {node['title']}<br>"
            f"依赖: {node['depends_on']} · 阻塞: {node['blocking']}"
        )

    fig.add_trace(go.Scatter(
        x=hover_x, y=hover_y, mode="markers",
        marker=dict(size=1, opacity=0), text=hover_text,
        hoverinfo="text", showlegend=False
    ))

    fig.update_layout(
        shapes=shapes,
        annotations=annotations,
        height=layout["height"],
        margin=dict(l=10, r=10, t=10, b=10),
        plot_bgcolor="white",
        xaxis=dict(visible=False, range=[0, COLUMN_WIDTH * len(COLUMNS)]),
        yaxis=dict(visible=False, range=[layout["height"], 0]),
    )
    return fig
