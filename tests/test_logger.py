"""
日志工具测试模块
"""

import json
import logging
import tempfile
import unittest
from pathlib import Path

from commerce_pulse.utils.logger import Logger, JsonFormatter, performance_tracker, init_logger, get_logger


class TestLogger(unittest.TestCase):
    """测试Logger"""

    def setUp(self):
        self.logger = Logger(name="commerce_pulse.test", console_output=False)

    def test_track_performance_records_metrics(self):
        """测试耗时统计"""
        with self.logger.track_performance("生成", {"keyword": "螺钿"}) as metrics:
            pass
        self.assertTrue(metrics.success)
        self.assertEqual(self.logger.recent_metrics[-1].metadata, {"keyword": "螺钿"})

        with self.assertRaises(ValueError):
            with self.logger.track_performance("生成"):
                raise ValueError("boom")

        summary = self.logger.get_performance_summary()
        self.assertEqual(summary['total_operations'], 2)
        self.assertEqual(summary['failed'], 1)
        self.assertEqual(summary['by_operation']['生成']['count'], 2)

        self.logger.clear_performance_metrics()
        self.assertEqual(self.logger.get_performance_summary()['total_operations'], 0)

    def test_level_by_name(self):
        """测试级别名解析"""
        self.assertEqual(Logger(name="commerce_pulse.test2", console_output=False, log_level="debug").log_level,
                         logging.DEBUG)
        self.assertEqual(Logger(name="commerce_pulse.test3", console_output=False, log_level="nope").log_level,
                         logging.INFO)

    def test_json_formatter_includes_data(self):
        """测试JSON格式包含结构化字段"""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "消息", (), None)
        record.extra_data = {'api': 'Gemini'}
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload['message'], "消息")
        self.assertEqual(payload['data'], {'api': 'Gemini'})

    def test_file_outputs(self):
        """测试文件与JSON日志输出"""
        with tempfile.TemporaryDirectory() as tmp:
            logger = Logger(name="commerce_pulse.files", log_dir=Path(tmp), console_output=False,
                            file_output=True, json_output=True)
            logger.log_api_call("Gemini/test", False, 0.5)
            for handler in logger.logger.handlers:
                handler.flush()

            json_logs = list(Path(tmp).glob("*.jsonl"))
            self.assertEqual(len(json_logs), 1)
            line = json_logs[0].read_text(encoding='utf-8').strip().splitlines()[-1]
            self.assertEqual(json.loads(line)['data']['success'], False)

            for handler in list(logger.logger.handlers):
                handler.close()
            logger.logger.handlers.clear()


class TestPerformanceTracker(unittest.TestCase):
    """测试全局耗时装饰器"""

    def test_decorator_uses_global_logger(self):
        init_logger(name="commerce_pulse.tracker", console_output=False, file_output=False)

        @performance_tracker("加法")
        def add(a, b):
            return a + b

        self.assertEqual(add(1, 2), 3)
        self.assertEqual(get_logger().recent_metrics[-1].operation, "加法")


if __name__ == '__main__':
    unittest.main()
