"""
战略规划平台 - Web界面主应用
Strategic Planning Platform - Web Application

基于Dash框架的交互式Web界面；REST API 以 Blueprint 形式挂载在同一 Flask 服务器的 /api 下。
"""

import dash
from dash import dcc, html, Input, Output
import dash_bootstrap_components as dbc
from flask import Flask

from api import create_api_blueprint
from database.engine import default_database, init_database

# 创建Flask服务器
server = Flask(__name__)

init_database(default_database)
server.register_blueprint(create_api_blueprint(default_database))

# 创建Dash应用
app = dash.Dash(
    __name__,
    server=server,
    external_stylesheets=[dbc.themes.BOOTSTRAP, dbc.icons.FONT_AWESOME],
    suppress_callback_exceptions=True,
    title="战略规划平台",
    update_title="加载中...",
)

# 导入所有页面模块（必须在app创建后导入，以便注册回调）
from pages import dashboard, graph

# 应用布局
app.layout = dbc.Container([
    # 页面标题栏
    dbc.Navbar(
        dbc.Container([
            dbc.Row([
                dbc.Col([
                    html.Div([
                        html.I(className="fas fa-chess fa-2x text-primary me-3"),
                        html.Span("战略规划平台", className="h3 mb-0 fw-bold")
                    ], className="d-flex align-items-center")
                ], width="auto"),
                dbc.Col([
                    html.Div([
                        dbc.Badge("v1.0", color="success", className="me-2"),
                        dbc.Badge("Web界面", color="info")
                    ], className="d-flex justify-content-end align-items-center")
                ], width="auto")
            ], justify="between", className="w-100")
        ], fluid=True),
        color="light",
        className="mb-4 shadow-sm"
    ),

    dcc.Location(id='url', refresh=False),

    dbc.Row([
        # 左侧导航
        dbc.Col([
            dbc.Card([
                dbc.CardHeader(html.H5("导航", className="mb-0")),
                dbc.CardBody([
                    dbc.Nav([
                        dbc.NavLink([
                            html.I(className="fas fa-home me-2"),
                            "仪表盘"
                        ], href="/", id="nav-dashboard", active=True),

                        dbc.NavLink([
                            html.I(className="fas fa-project-diagram me-2"),
                            "战略图"
                        ], href="/graph", id="nav-graph"),

                    ], vertical=True, pills=True)
                ], className="p-0")
            ], className="shadow-sm")
        ], md=3, className="mb-4"),

        # 右侧内容区
        dbc.Col([
            html.Div(id='page-content')
        ], md=9)
    ]),

    # 页脚
    html.Footer([
        html.Hr(),
        html.P("战略规划平台 © 2025", className="text-muted text-center mb-0")
    ], className="mt-5")

], fluid=True, className="px-4 py-3")

# 路由回调
@app.callback(
    Output('page-content', 'children'),
    [Input('url', 'pathname')]
)
def display_page(pathname):
    """根据URL路径显示对应页面"""
    if pathname == '/' or pathname is None:
        return dashboard.layout
    elif pathname == '/graph':
        return graph.layout
    else:
        return html.Div([
            html.H1("404: 页面未找到", className="text-danger"),
            html.P("您访问的页面不存在"),
            dbc.Button("返回首页", href="/", color="primary")
        ], className="text-center mt-5")

# 导航激活状态回调
@app.callback(
    [Output(f'nav-{page}', 'active') for page in ['dashboard', 'graph']],
    [Input('url', 'pathname')]
)
def update_nav_active(pathname):
    """更新导航栏激活状态"""
    pages = ['/', '/graph']
    return [pathname == page for page in pages]

if __name__ == '__main__':
    app.run(debug=True, host='127.0.0.1', port=8050)
