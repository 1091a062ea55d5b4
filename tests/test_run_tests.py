"""
测试运行脚本的用例收集
"""

import unittest

from run_tests import build_suite


def iter_tests(suite):
    for item in suite:
        if isinstance(item, unittest.TestSuite):
            yield from iter_tests(item)
        else:
            yield item


class TestBuildSuite(unittest.TestCase):
    """测试 build_suite"""

    def test_module_filter(self):
        """测试只收集文件名匹配的模块"""
        suite = build_suite('session_replay')
        self.assertGreater(suite.countTestCases(), 0)
        for test in iter_tests(suite):
            self.assertTrue(test.id().startswith('test_session_replay.'), test.id())

    def test_no_match(self):
        """测试没有匹配模块时为空套件"""
        self.assertEqual(build_suite('no_such_module').countTestCases(), 0)


if __name__ == '__main__':
    unittest.main()
