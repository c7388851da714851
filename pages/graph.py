"""
战略图页面 - 战略 | 项目 | 行动 三列图及依赖关系
"""

import logging

from dash import html, dcc, callback, Input, Output
import dash_bootstrap_components as dbc

from database.engine import default_database
from utils.dependency_store import DependencyStore
from utils.graph_layout import build_graph_layout, create_graph_figure
from utils.hierarchy_service import HierarchyService

logger = logging.getLogger(__name__)

service = HierarchyService(default_database)
store = DependencyStore(default_database)

# 页面布局
layout = dbc.Container([
    dbc.Row([
        dbc.Col([
            html.H3([
                html.I(className="fas fa-project-diagram me-2 text-primary"),
                "战略图"
            ], className="mb-3")
        ], md=8),
        dbc.Col([
            dcc.Dropdown(
                id='graph-strategy-filter',
                options=[{'label': '全部战略', 'value': 'all'}],
                value='all',
                clearable=False
            )
        ], md=4)
    ], className="mb-3"),

    html.Div(id='graph-cycle-warning'),

    dbc.Card([
        dbc.CardBody([
            dcc.Loading(dcc.Graph(id='strategy-graph', config={'displayModeBar': False}))
        ])
    ], className="shadow-sm mb-4"),

    dbc.Card([
        dbc.CardHeader(html.H5([
            html.I(className="fas fa-link me-2"),
            "依赖关系"
        ], className="mb-0")),
        dbc.CardBody(html.Div(id='dependency-list'))
    ], className="shadow-sm"),

    dcc.Interval(id='interval-graph-update', interval=10000, n_intervals=0)
], fluid=True)


@callback(
    Output('graph-strategy-filter', 'options'),
    Input('interval-graph-update', 'n_intervals')
)
def update_strategy_options(n_intervals):
    """下拉框：全部战略 + 未归档战略"""
    strategies = service.list_strategies(include_archived=False)
    return [{'label': '全部战略', 'value': 'all'}] + [
        {'label': s['title'], 'value': s['id']} for s in sorted(strategies, key=lambda s: s['title'].lower())
    ]


@callback(
    [Output('strategy-graph', 'figure'),
     Output('graph-cycle-warning', 'children')],
    [Input('graph-strategy-filter', 'value'),
     Input('interval-graph-update', 'n_intervals')]
)
def render_graph(strategy_filter, n_intervals):
    """根据筛选条件重新计算布局并绘图"""
    graph_layout = build_graph_layout(
        service.list_strategies(),
        service.list_projects(),
        service.list_actions(),
        store.list_dependencies(),
        strategy_filter=strategy_filter or 'all'
    )

    warning = None
    if graph_layout['cycles']:
        logger.warning("依赖关系存在 %d 个环", len(graph_layout['cycles']))
        warning = dbc.Alert([
            html.I(className="fas fa-exclamation-triangle me-2"),
            f"检测到 {len(graph_layout['cycles'])} 个循环依赖"
        ], color="warning")

    return create_graph_figure(graph_layout), warning


@callback(
    Output('dependency-list', 'children'),
    Input('interval-graph-update', 'n_intervals')
)
def render_dependency_list(n_intervals):
    """依赖列表，已删除的端点显示为 Unknown"""
    edges = [store.describe_dependency(edge) for edge in store.list_dependencies()]
    if not edges:
        return dbc.Alert("暂无依赖关系", color="light", className="text-center mb-0")

    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Span(edge['source_title'],
                      className="fw-bold" if edge['source_resolved'] else "text-muted fst-italic"),
            html.Span(" 依赖于 ", className="text-muted mx-2"),
            html.Span(edge['target_title'],
                      className="fw-bold" if edge['target_resolved'] else "text-muted fst-italic"),
        ])
        for edge in edges
    ], flush=True)
