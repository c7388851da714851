"""
进度报表与可视化
"""
import pandas as pd
import plotly.graph_objects as go
from typing import Dict, List

from utils.graph_layout import status_color

SUMMARY_COLUMNS = [
    'strategy_id', 'title', 'status', 'progress', 'color_code',
    'projects', 'completed_projects', 'actions', 'achieved_actions', 'at_risk_actions'
]


class ProgressReport:
    """战略进度汇总报表"""

    @staticmethod
    def build_summary(
        strategies: List[Dict],
        projects: List[Dict],
        actions: List[Dict]
    ) -> pd.DataFrame:
        """
        每个战略一行的汇总表（仅统计未归档的项目与行动）

        Args:
            strategies/projects/actions: 服务层返回的实体字典

        Returns:
            列为 SUMMARY_COLUMNS 的 DataFrame，按 display_order 排序
        """
        if not strategies:
            return pd.DataFrame(columns=SUMMARY_COLUMNS)

        df = pd.DataFrame(strategies).rename(columns={'id': 'strategy_id'})
        df = df.sort_values('display_order', kind='stable')

        project_df = pd.DataFrame(projects, columns=['strategy_id', 'status', 'is_archived'])
        project_df = project_df[~project_df['is_archived'].astype(bool)]
        action_df = pd.DataFrame(actions, columns=['strategy_id', 'status', 'is_archived'])
        action_df = action_df[~action_df['is_archived'].astype(bool)]

        df['projects'] = df['strategy_id'].map(project_df.groupby('strategy_id').size())
        df['completed_projects'] = df['strategy_id'].map(
            project_df[project_df['status'] == 'C'].groupby('strategy_id').size()
        )
        df['actions'] = df['strategy_id'].map(action_df.groupby('strategy_id').size())
        df['achieved_actions'] = df['strategy_id'].map(
            action_df[action_df['status'] == 'achieved'].groupby('strategy_id').size()
        )
        df['at_risk_actions'] = df['strategy_id'].map(
            action_df[action_df['status'] == 'at_risk'].groupby('strategy_id').size()
        )

        count_columns = ['projects', 'completed_projects', 'actions', 'achieved_actions', 'at_risk_actions']
        df[count_columns] = df[count_columns].fillna(0).astype(int)
        return df[SUMMARY_COLUMNS].reset_index(drop=True)

    @staticmethod
    def status_breakdown(actions: List[Dict]) -> pd.Series:
        """未归档行动按状态计数"""
        df = pd.DataFrame(actions, columns=['status', 'is_archived'])
        df = df[~df['is_archived'].astype(bool)]
        return df['status'].value_counts()

    @staticmethod
    def create_progress_chart(summary: pd.DataFrame) -> go.Figure:
        """
        战略进度横向条形图

        Args:
            summary: build_summary 的返回值

        Returns:
            Plotly Figure对象
        """
        fig = go.Figure()

        if len(summary) > 0:
            fig.add_trace(go.Bar(
                x=summary['progress'],
                y=summary['title'],
                orientation='h',
                marker=dict(color=summary['color_code']),
                text=[f"{p}%" for p in summary['progress']],
                textposition='auto',
                customdata=summary[['status', 'projects', 'actions']].values,
                hovertemplate='<b>%{y}</b><br>' +
                              '进度: %{x}%<br>' +
                              '状态: %{customdata[0]}<br>' +
                              '项目: %{customdata[1]} · 行动: %{customdata[2]}<extra></extra>'
            ))

        fig.update_layout(
            title='战略进度',
            xaxis=dict(range=[0, 100], title='进度 (%)'),
            yaxis=dict(autorange='reversed'),
            height=max(300, 60 * len(summary) + 120),
            template='plotly_white'
        )

        return fig

    @staticmethod
    def create_status_chart(breakdown: pd.Series) -> go.Figure:
        """行动状态分布饼图"""
        fig = go.Figure(go.Pie(
            labels=list(breakdown.index),
            values=list(breakdown.values),
            marker=dict(colors=[status_color(s) for s in breakdown.index]),
            hole=0.4
        ))
        fig.update_layout(title='行动状态分布', height=320, template='plotly_white')
        return fig
