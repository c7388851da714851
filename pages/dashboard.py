"""
仪表盘页面 - 战略概览、进度汇总和最近活动
"""

import logging

from dash import html, dcc, callback, ctx, Input, Output, State, no_update
import dash_bootstrap_components as dbc

from database.engine import default_database
from database.schemas import StrategyCreate
from utils.hierarchy_service import HierarchyService
from utils.progress_report import ProgressReport
from utils.validation_helpers import create_success_alert, validate_and_create_alert

logger = logging.getLogger(__name__)

service = HierarchyService(default_database)

STATUS_BADGES = {
    'Completed': 'success',
    'Archived': 'secondary',
    'Behind': 'danger',
    'OnTrack': 'primary',
}

# 页面布局
layout = dbc.Container([
    # 欢迎横幅
    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardBody([
                    html.H2([
                        html.I(className="fas fa-chess me-3 text-primary"),
                        "战略规划"
                    ], className="mb-3"),
                    html.P(
                        "战略 → 项目 → 行动，进度自动逐级汇总。",
                        className="lead"
                    ),
                    html.Hr(),
                    html.Div([
                        dbc.Button([
                            html.I(className="fas fa-plus-circle me-2"),
                            "新建战略"
                        ], id="btn-new-strategy", color="primary", size="lg", className="me-2"),
                        dbc.Button([
                            html.I(className="fas fa-project-diagram me-2"),
                            "查看战略图"
                        ], href="/graph", color="info", size="lg", outline=True)
                    ])
                ])
            ], className="shadow-sm border-0 bg-light")
        ])
    ], className="mb-4"),

    html.Div(id='strategy-form-feedback'),

    # 快速统计
    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardBody([
                    html.H3("0", className="mb-0 text-primary", id="stat-strategies"),
                    html.Small("进行中战略", className="text-muted")
                ], className="text-center")
            ], className="shadow-sm")
        ], md=4),
        dbc.Col([
            dbc.Card([
                dbc.CardBody([
                    html.H3("0", className="mb-0 text-success", id="stat-projects"),
                    html.Small("项目", className="text-muted")
                ], className="text-center")
            ], className="shadow-sm")
        ], md=4),
        dbc.Col([
            dbc.Card([
                dbc.CardBody([
                    html.H3("0", className="mb-0 text-info", id="stat-actions"),
                    html.Small("行动", className="text-muted")
                ], className="text-center")
            ], className="shadow-sm")
        ], md=4)
    ], className="mb-4"),

    # 战略进度
    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader(html.H5([
                    html.I(className="fas fa-tasks me-2"),
                    "战略进度"
                ], className="mb-0")),
                dbc.CardBody(html.Div(id='strategy-progress-list'))
            ], className="shadow-sm")
        ], md=7),
        dbc.Col([
            dbc.Card([
                dbc.CardBody(dcc.Graph(id='action-status-chart', config={'displayModeBar': False}))
            ], className="shadow-sm")
        ], md=5)
    ], className="mb-4"),

    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardBody(dcc.Graph(id='strategy-progress-chart', config={'displayModeBar': False}))
            ], className="shadow-sm")
        ])
    ], className="mb-4"),

    # 最近活动
    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader(html.H5([
                    html.I(className="fas fa-history me-2"),
                    "最近活动"
                ], className="mb-0")),
                dbc.CardBody(html.Div(id='activity-log'))
            ], className="shadow-sm")
        ])
    ]),

    # 新建战略模态框
    dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle("新建战略")),
        dbc.ModalBody([
            html.Div(id='strategy-form-errors'),
            dbc.Label("战略标题"),
            dbc.Input(id="input-strategy-title", placeholder="例如：拓展海外市场", className="mb-3"),
            dbc.Label("描述"),
            dbc.Textarea(id="input-strategy-desc", rows=3, className="mb-3"),
            dbc.Label("目标"),
            dbc.Input(id="input-strategy-goal", className="mb-3"),
            dbc.Label("颜色"),
            dbc.Input(id="input-strategy-color", type="color", value="#3B82F6")
        ]),
        dbc.ModalFooter([
            dbc.Button("取消", id="btn-cancel-new-strategy", color="secondary", className="me-2"),
            dbc.Button("创建", id="btn-create-strategy", color="primary")
        ])
    ], id="modal-new-strategy", size="lg", is_open=False),

    dcc.Store(id='strategy-refresh-trigger', data=0),

    # 定时刷新组件（每5秒更新统计）
    dcc.Interval(
        id='interval-dashboard-update',
        interval=5000,
        n_intervals=0
    )

], fluid=True)


def _strategy_row(row):
    """单个战略的进度条"""
    return dbc.Row([
        dbc.Col([
            html.Div([
                html.Span("●", style={'color': row['color_code']}, className="me-2"),
                html.Span(row['title'], className="fw-bold"),
                dbc.Badge(row['status'], color=STATUS_BADGES.get(row['status'], 'info'), className="ms-2")
            ]),
            html.Small(
                f"{row['completed_projects']}/{row['projects']} 个项目已完成 · "
                f"{row['achieved_actions']}/{row['actions']} 个行动已达成",
                className="text-muted"
            )
        ], md=5),
        dbc.Col([
            dbc.Progress(value=row['progress'], label=f"{row['progress']}%", className="mt-2")
        ], md=7)
    ], className="mb-3")


@callback(
    [Output('modal-new-strategy', 'is_open'),
     Output('strategy-form-errors', 'children'),
     Output('strategy-form-feedback', 'children'),
     Output('strategy-refresh-trigger', 'data')],
    [Input('btn-new-strategy', 'n_clicks'),
     Input('btn-cancel-new-strategy', 'n_clicks'),
     Input('btn-create-strategy', 'n_clicks')],
    [State('input-strategy-title', 'value'),
     State('input-strategy-desc', 'value'),
     State('input-strategy-goal', 'value'),
     State('input-strategy-color', 'value'),
     State('strategy-refresh-trigger', 'data')],
    prevent_initial_call=True
)
def handle_new_strategy(n_open, n_cancel, n_create, title, description, goal, color, trigger):
    """打开/关闭模态框，校验并创建战略"""
    if ctx.triggered_id == 'btn-new-strategy':
        return True, None, no_update, no_update
    if ctx.triggered_id == 'btn-cancel-new-strategy':
        return False, None, no_update, no_update

    payload, alert = validate_and_create_alert(StrategyCreate, {
        'title': title or '',
        'description': description or '',
        'goal': goal or None,
        'color_code': (color or '#3B82F6').upper(),
    })
    if payload is None:
        return True, alert, no_update, no_update

    strategy = service.create_strategy(payload)
    return False, None, create_success_alert(f"✅ 战略「{strategy['title']}」已创建"), (trigger or 0) + 1


@callback(
    [Output('stat-strategies', 'children'),
     Output('stat-projects', 'children'),
     Output('stat-actions', 'children'),
     Output('strategy-progress-list', 'children'),
     Output('strategy-progress-chart', 'figure'),
     Output('action-status-chart', 'figure')],
    [Input('interval-dashboard-update', 'n_intervals'),
     Input('strategy-refresh-trigger', 'data')]
)
def update_dashboard(n_intervals, trigger):
    """刷新统计、进度条和图表"""
    strategies = service.list_strategies(include_archived=False)
    projects = service.list_projects(include_archived=False)
    actions = service.list_actions(include_archived=False)

    summary = ProgressReport.build_summary(strategies, projects, actions)
    if len(summary) == 0:
        progress_list = dbc.Alert([
            html.I(className="fas fa-exclamation-circle me-2"),
            "暂无战略。请新建战略。"
        ], color="warning")
    else:
        progress_list = [_strategy_row(row) for row in summary.to_dict('records')]

    active_count = sum(1 for s in strategies if s['status'] != 'Completed')
    return (
        str(active_count),
        str(len(projects)),
        str(len(actions)),
        progress_list,
        ProgressReport.create_progress_chart(summary),
        ProgressReport.create_status_chart(ProgressReport.status_breakdown(actions)),
    )


@callback(
    Output('activity-log', 'children'),
    [Input('interval-dashboard-update', 'n_intervals'),
     Input('strategy-refresh-trigger', 'data')]
)
def update_activity_log(n_intervals, trigger):
    """最近 20 条活动"""
    activities = service.list_activities(limit=20)
    if not activities:
        return dbc.ListGroup([
            dbc.ListGroupItem([
                html.I(className="fas fa-info-circle text-secondary me-2"),
                "暂无活动记录。"
            ])
        ], flush=True)

    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Div([
                html.Span(activity['description']),
                html.Small(activity['created_at'][:19].replace('T', ' '), className="text-muted ms-auto")
            ], className="d-flex"),
            html.Small(f"{activity['type']} · {activity['user_id']}", className="text-muted")
        ])
        for activity in activities
    ], flush=True)
