"""
直播电商数据看板引擎 - 主入口程序
提供CLI接口，支持命令行参数
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path

# 添加项目根目录到sys.path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from commerce_pulse.core.config_manager import get_config, init_config
from commerce_pulse.core.dashboard_session import DashboardSession
from commerce_pulse.data.keyword_profiles import KEYWORDS
from commerce_pulse.replay.playback_engine import PlaybackState
from commerce_pulse.replay.scheduler import AsyncioScheduler
from commerce_pulse.reporters.chart_builder import ChartBuilder
from commerce_pulse.utils.logger import get_logger, init_logger


def parse_arguments():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description='直播电商数据看板引擎',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  # 使用配置文件中的默认关键词生成看板摘要
  python main.py

  # 指定关键词和天数
  python main.py --keyword 3C数码 --days 7

  # 固定随机种子（结果可复现）
  python main.py --keyword 螺钿 --seed 42

  # 回放直播复盘时间线
  python main.py --replay

  # 生成经营洞察
  python main.py --keyword 非遗 --insights

  # 输出Plotly图表配置
  python main.py --charts
        """
    )

    parser.add_argument('--keyword', '-k', type=str,
                        help='关键词（如果不指定则使用配置文件中的默认关键词）')
    parser.add_argument('--days', '-d', type=int,
                        help='趋势回溯天数（默认读取配置）')
    parser.add_argument('--seed', type=int,
                        help='随机种子')
    parser.add_argument('--replay', action='store_true',
                        help='回放直播复盘时间线')
    parser.add_argument('--insights', action='store_true',
                        help='生成经营洞察')
    parser.add_argument('--charts', action='store_true',
                        help='输出Plotly图表配置JSON')
    parser.add_argument('--list-keywords', action='store_true',
                        help='列出可选关键词')
    parser.add_argument('--config', '-c', type=str,
                        help='配置文件路径（默认: config/config.json）')
    parser.add_argument('--env', '-e', type=str,
                        help='环境变量文件路径（默认: config/.env）')
    parser.add_argument('--validate-config', action='store_true',
                        help='验证配置文件是否完整')
    parser.add_argument('--version', '-v', action='version',
                        version='直播电商数据看板引擎 v1.0.0')

    return parser.parse_args()


def print_summary(dataset) -> None:
    """打印关键词数据摘要"""
    series = dataset.series
    summary = dataset.sales_summary

    print("\n" + "=" * 60)
    print(f"关键词: {dataset.keyword} (层级: {dataset.profile.demand_tier.value})")
    print("=" * 60)
    print(f"趋势: {series[0].date} ~ {series[-1].date}，共 {len(series)} 天")
    print(f"  最新热度: {series[-1].heat:,}  发帖: {series[-1].posts:,}  单帖播放: {series[-1].engagement:,.2f}")
    print(f"销售总额: {summary.total_revenue:,.2f}  总销量: {summary.total_units:,.0f}")
    print("品类销售额:")
    for category, rollup in dataset.category_rollup.items():
        print(f"  - {category}: {rollup.revenue:,.2f}")
    print("平台声量: " + ", ".join(f"{s.platform.value} {s.value}%" for s in dataset.platform_shares))
    print(f"核心人群: {dataset.persona}")
    print("评论热词: " + ", ".join(f"{e.word}({e.count})" for e in dataset.comment_keywords[:5]))


async def run_replay(session: DashboardSession) -> None:
    """以实时定时器回放直播时间线"""
    engine = session.replay_engine
    engine.start()
    while engine.state == PlaybackState.PLAYING:
        await asyncio.sleep(engine.interval)
        frames = engine.displayed_frames
        if frames:
            frame = frames[-1]
            flags = []
            if frame.ar_active:
                flags.append("AR")
            if frame.lucky_bag_active:
                flags.append("福袋")
            print(f"  [{engine.cursor:02d}/{len(engine.frames)}] {frame.time_label} "
                  f"在线 {frame.traffic:>5}  转化 {frame.conversion:.2f}% {' '.join(flags)}")
    print("回放结束")


def main():
    """主函数"""
    args = parse_arguments()

    if args.list_keywords:
        for keyword in KEYWORDS:
            print(keyword)
        return 0

    try:
        if args.config or args.env:
            config = init_config(args.config, args.env)
        else:
            config = get_config()

        init_logger(log_level=config.log_level, log_dir=config.logs_dir)
        logger = get_logger()

        if args.validate_config:
            if config.validate():
                print("✓ 配置验证通过")
                return 0
            print("✗ 配置验证失败")
            return 1

        if not config.validate():
            logger.error("✗ 配置验证失败，请检查配置文件和环境变量")
            return 1

        session = DashboardSession(config, seed=args.seed, scheduler=AsyncioScheduler())
        dataset = session.select_keyword(args.keyword or config.default_keyword, days=args.days)
        print_summary(dataset)

        if args.replay:
            print("\n直播复盘回放:")
            asyncio.run(run_replay(session))

        if args.insights:
            print("\n经营洞察:")
            for insight in asyncio.run(session.refresh_insights()):
                print(f"  - {insight}")

        if args.charts:
            builder = ChartBuilder()
            engine = session.replay_engine
            charts = {
                'trend': builder.build_trend_chart(dataset.series, dataset.keyword),
                'category': builder.build_category_pie(dataset.category_rollup),
                'platform': builder.build_platform_bar(dataset.platform_rollup),
                'social': builder.build_platform_share_pie(dataset.platform_shares),
                'audience': builder.build_audience_chart(dataset.audience),
                'keywords': builder.build_keyword_chart(dataset.comment_keywords),
                'session': builder.build_session_chart(engine.displayed_frames, engine.visible_annotations()),
            }
            print(json.dumps({name: json.loads(chart) for name, chart in charts.items()},
                             ensure_ascii=False, indent=2))

        logger.debug(f"[性能] 汇总: {json.dumps(logger.get_performance_summary(), ensure_ascii=False)}")
        return 0

    except KeyboardInterrupt:
        print("\n\n用户中断执行")
        return 130

    except Exception as e:
        logger = get_logger()
        logger.error(f"程序执行失败: {e}", exc_info=True)
        print(f"\n✗ 错误: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
