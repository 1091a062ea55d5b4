"""
图表构建器模块
将引擎产出的数据转为Plotly.js图表配置（JSON字符串），渲染由前端自行决定
"""

import json
from typing import Any, Dict, List, Sequence

from commerce_pulse.data.models import (
    DailyMetric, Rollup, PlatformShare, AudienceSegment,
    KeywordSentimentEntry, SessionFrame, Annotation, Sentiment
)
from commerce_pulse.analyzers.category_aggregator import rollup_to_series
from commerce_pulse.utils.logger import get_logger


SENTIMENT_COLORS = {
    Sentiment.POSITIVE: '#10b981',
    Sentiment.NEUTRAL: '#94a3b8',
    Sentiment.NEGATIVE: '#f43f5e',
}

ANNOTATION_COLORS = {
    'ar': '#8b5cf6',
    'luckybag': '#ec4899',
}


class ChartBuilder:
    """图表构建器"""

    def __init__(self):
        """初始化图表构建器"""
        self.logger = get_logger()

    def _to_json(self, chart_name: str, chart_config: Dict[str, Any]) -> str:
        """序列化图表配置并记录数据点数量"""
        points = sum(len(trace.get('x') or trace.get('values') or []) for trace in chart_config['data'])
        self.logger.debug(f"[ChartBuilder] 生成图表 {chart_name}: {len(chart_config['data'])} 条序列, {points} 个数据点")
        return json.dumps(chart_config, ensure_ascii=False)

    def build_trend_chart(self, series: List[DailyMetric], keyword: str = '') -> str:
        """
        构建热度/发帖双轴趋势图

        Args:
            series: 逐日指标
            keyword: 关键词（用于标题）

        Returns:
            Plotly图表JSON字符串
        """
        dates = [m.date for m in series]

        chart_config = {
            'data': [
                {
                    'type': 'scatter',
                    'mode': 'lines',
                    'name': '热度',
                    'x': dates,
                    'y': [m.heat for m in series],
                    'fill': 'tozeroy',
                    'line': {'color': '#3b82f6'}
                },
                {
                    'type': 'scatter',
                    'mode': 'lines+markers',
                    'name': '发帖量',
                    'x': dates,
                    'y': [m.posts for m in series],
                    'yaxis': 'y2',
                    'line': {'color': '#fb923c'}
                }
            ],
            'layout': {
                'title': f'{keyword} 话题趋势'.strip(),
                'xaxis': {'title': '日期'},
                'yaxis': {'title': '热度'},
                'yaxis2': {'title': '发帖量', 'overlaying': 'y', 'side': 'right'},
                'hovermode': 'x unified'
            }
        }

        return self._to_json('trend', chart_config)

    def build_category_pie(self, category_rollup: Dict[str, Rollup]) -> str:
        """
        构建品类销售额饼图

        Args:
            category_rollup: 品类汇总

        Returns:
            Plotly图表JSON字符串
        """
        series = rollup_to_series(category_rollup, 'revenue')

        chart_config = {
            'data': [{
                'type': 'pie',
                'labels': [item['name'] for item in series],
                'values': [item['value'] for item in series],
                'hole': 0.5,
                'textinfo': 'label+percent',
                'hoverinfo': 'label+value+percent'
            }],
            'layout': {
                'title': '品类销售额占比'
            }
        }

        return self._to_json('category', chart_config)

    def build_platform_bar(self, platform_rollup: Dict[str, Rollup]) -> str:
        """
        构建平台销售额/销量对比柱状图

        Args:
            platform_rollup: 平台汇总

        Returns:
            Plotly图表JSON字符串
        """
        platforms = list(platform_rollup.keys())

        chart_config = {
            'data': [
                {
                    'type': 'bar',
                    'name': '销售额',
                    'x': platforms,
                    'y': [round(v.revenue, 2) for v in platform_rollup.values()],
                    'marker': {'color': '#3b82f6'}
                },
                {
                    'type': 'bar',
                    'name': '销量',
                    'x': platforms,
                    'y': [round(v.units, 2) for v in platform_rollup.values()],
                    'yaxis': 'y2',
                    'marker': {'color': '#10b981'}
                }
            ],
            'layout': {
                'title': '电商平台对比',
                'barmode': 'group',
                'yaxis': {'title': '销售额'},
                'yaxis2': {'title': '销量', 'overlaying': 'y', 'side': 'right'}
            }
        }

        return self._to_json('platform', chart_config)

    def build_platform_share_pie(self, shares: List[PlatformShare]) -> str:
        """构建社交平台声量分布饼图"""
        chart_config = {
            'data': [{
                'type': 'pie',
                'labels': [s.platform.value for s in shares],
                'values': [s.value for s in shares],
                'textinfo': 'label+percent'
            }],
            'layout': {
                'title': '社交平台声量分布'
            }
        }

        return self._to_json('social', chart_config)

    def build_audience_chart(self, segments: List[AudienceSegment]) -> str:
        """
        构建年龄段占比柱状图

        Args:
            segments: 人群分段

        Returns:
            Plotly图表JSON字符串
        """
        chart_config = {
            'data': [{
                'type': 'bar',
                'x': [s.age_group for s in segments],
                'y': [s.percentage for s in segments],
                'text': [f"{s.percentage}%" for s in segments],
                'textposition': 'auto',
                'customdata': [', '.join(s.top_interests) for s in segments],
                'hovertemplate': '%{x}: %{y}%<br>兴趣: %{customdata}<extra></extra>',
                'marker': {'color': '#8b5cf6'}
            }],
            'layout': {
                'title': '人群年龄分布',
                'xaxis': {'title': '年龄段'},
                'yaxis': {'title': '占比 (%)', 'range': [0, 100]}
            }
        }

        return self._to_json('audience', chart_config)

    def build_keyword_chart(self, entries: List[KeywordSentimentEntry], top_n: int = 10) -> str:
        """
        构建评论关键词横向柱状图（按情感着色）

        Args:
            entries: 已按词频降序排列的词条
            top_n: 显示前N个

        Returns:
            Plotly图表JSON字符串
        """
        top_entries = entries[:top_n]

        chart_config = {
            'data': [{
                'type': 'bar',
                'orientation': 'h',
                # 横向柱状图自下而上绘制，反转使最高频在上
                'x': [e.count for e in reversed(top_entries)],
                'y': [e.word for e in reversed(top_entries)],
                'marker': {'color': [SENTIMENT_COLORS[e.sentiment] for e in reversed(top_entries)]}
            }],
            'layout': {
                'title': f'评论关键词 (Top {top_n})',
                'xaxis': {'title': '提及次数'}
            }
        }

        return self._to_json('keywords', chart_config)

    def build_session_chart(
        self,
        frames: Sequence[SessionFrame],
        annotations: Sequence[Annotation] = ()
    ) -> str:
        """
        构建直播复盘组合图（在线人数面积 + 转化率折线 + 参考标注）

        Args:
            frames: 已回放的帧
            annotations: 需要渲染的参考标注

        Returns:
            Plotly图表JSON字符串
        """
        labels = [f.time_label for f in frames]

        shapes = []
        layout_annotations = []
        for annotation in annotations:
            color = ANNOTATION_COLORS.get(annotation.key, '#64748b')
            shapes.append({
                'type': 'line',
                'x0': annotation.time_label,
                'x1': annotation.time_label,
                'yref': 'paper',
                'y0': 0,
                'y1': 1,
                'line': {'color': color, 'dash': 'dash'}
            })
            layout_annotations.append({
                'x': annotation.time_label,
                'yref': 'paper',
                'y': 1,
                'text': annotation.text,
                'showarrow': False,
                'font': {'color': color, 'size': 12}
            })

        chart_config = {
            'data': [
                {
                    'type': 'scatter',
                    'mode': 'lines',
                    'name': '实时在线',
                    'x': labels,
                    'y': [f.traffic for f in frames],
                    'fill': 'tozeroy',
                    'line': {'color': '#3b82f6', 'width': 3}
                },
                {
                    'type': 'scatter',
                    'mode': 'lines',
                    'name': '转化率',
                    'x': labels,
                    'y': [f.conversion for f in frames],
                    'yaxis': 'y2',
                    'line': {'color': '#fb923c', 'width': 3}
                }
            ],
            'layout': {
                'title': '直播流量与转化复盘',
                'xaxis': {'title': '时间'},
                'yaxis': {'title': '在线人数'},
                'yaxis2': {'title': '转化率', 'ticksuffix': '%', 'overlaying': 'y', 'side': 'right'},
                'shapes': shapes,
                'annotations': layout_annotations
            }
        }

        return self._to_json('session', chart_config)
