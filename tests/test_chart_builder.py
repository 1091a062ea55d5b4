"""
测试图表构建器
"""

import json
import random
import unittest
from unittest import mock
from datetime import date

from commerce_pulse.analyzers.category_aggregator import aggregate_by_category, aggregate_by_platform
from commerce_pulse.generators.series_generator import generate_series
from commerce_pulse.generators.sales_generator import SalesGenerator, get_platform_distribution
from commerce_pulse.generators.audience_synthesizer import synthesize_audience
from commerce_pulse.generators.sentiment_ranker import rank_keywords
from commerce_pulse.replay.highlights import ANNOTATIONS, Highlight
from commerce_pulse.replay.session_generator import generate_session_frames
from commerce_pulse.reporters.chart_builder import ChartBuilder


class TestChartBuilder(unittest.TestCase):
    """测试ChartBuilder"""

    def setUp(self):
        self.builder = ChartBuilder()
        self.records = SalesGenerator(rng=random.Random(8)).generate('非遗')

    def test_trend_chart(self):
        """测试趋势图"""
        series = generate_series(5, '潮玩', rng=random.Random(1), today=date(2026, 10, 19))
        chart = json.loads(self.builder.build_trend_chart(series, '潮玩'))

        self.assertEqual(len(chart['data']), 2)
        self.assertEqual(chart['data'][0]['x'][-1], '2026-10-19')
        self.assertEqual(chart['data'][1]['yaxis'], 'y2')
        self.assertIn('潮玩', chart['layout']['title'])

    def test_build_logs_chart_summary(self):
        """测试构建图表时记录序列与数据点数量"""
        series = generate_series(5, '潮玩', rng=random.Random(1), today=date(2026, 10, 19))
        with mock.patch.object(self.builder.logger, 'debug') as debug:
            self.builder.build_trend_chart(series, '潮玩')

        debug.assert_called_once()
        message = debug.call_args[0][0]
        self.assertIn('trend', message)
        self.assertIn('2 条序列', message)
        self.assertIn('12 个数据点', message)

    def test_category_pie(self):
        """测试品类饼图"""
        chart = json.loads(self.builder.build_category_pie(aggregate_by_category(self.records)))
        self.assertEqual(chart['data'][0]['labels'], ['首饰', '摆件', '日用品', '文具', '收藏品'])

    def test_platform_charts(self):
        """测试平台柱状图与声量饼图"""
        bar = json.loads(self.builder.build_platform_bar(aggregate_by_platform(self.records)))
        self.assertEqual(bar['data'][0]['x'], ['抖音商城', '天猫/京东', '微店'])

        pie = json.loads(self.builder.build_platform_share_pie(get_platform_distribution('非遗')))
        self.assertEqual(sum(pie['data'][0]['values']), 100)

    def test_audience_chart(self):
        """测试人群分布图"""
        chart = json.loads(self.builder.build_audience_chart(synthesize_audience('盲盒')))
        self.assertEqual(chart['data'][0]['y'], [45, 35, 15, 5])

    def test_keyword_chart_top_first(self):
        """测试关键词图最高频位于顶部"""
        entries = rank_keywords('螺钿', rng=random.Random(4))
        chart = json.loads(self.builder.build_keyword_chart(entries, top_n=5))

        self.assertEqual(len(chart['data'][0]['y']), 5)
        self.assertEqual(chart['data'][0]['y'][-1], entries[0].word)

    def test_session_chart_annotations(self):
        """测试复盘图参考标注"""
        frames = generate_session_frames(random.Random(2))
        chart = json.loads(self.builder.build_session_chart(frames, [ANNOTATIONS[Highlight.AR]]))

        self.assertEqual(len(chart['data'][0]['x']), 25)
        self.assertEqual(chart['layout']['shapes'][0]['x0'], '00:40')
        self.assertEqual(chart['layout']['annotations'][0]['text'], 'AR互动开启')

        empty = json.loads(self.builder.build_session_chart(frames[:3]))
        self.assertEqual(empty['layout']['shapes'], [])


if __name__ == '__main__':
    unittest.main()
