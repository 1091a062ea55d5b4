# 测试运行脚本
# 用法: python tests/run_tests.py [-k 模块名片段] [-q]

import argparse
import unittest
import sys
from pathlib import Path

# 添加项目根目录到sys.path，未安装包时也能导入 commerce_pulse
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def build_suite(module_filter: str = '') -> unittest.TestSuite:
    """
    收集测试用例

    Args:
        module_filter: 只运行文件名包含该片段的测试模块（如 replay、session）

    Returns:
        测试套件
    """
    pattern = f'test_*{module_filter}*.py' if module_filter else 'test_*.py'
    return unittest.TestLoader().discover(str(Path(__file__).parent), pattern=pattern)


def main() -> int:
    parser = argparse.ArgumentParser(description='运行 commerce_pulse 单元测试')
    parser.add_argument('-k', '--module', default='', help='只运行文件名包含该片段的测试模块')
    parser.add_argument('-q', '--quiet', action='store_true', help='只输出汇总结果')
    args = parser.parse_args()

    suite = build_suite(args.module)
    if suite.countTestCases() == 0:
        print(f"没有匹配 '{args.module}' 的测试模块")
        return 1

    result = unittest.TextTestRunner(verbosity=1 if args.quiet else 2).run(suite)
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(main())
