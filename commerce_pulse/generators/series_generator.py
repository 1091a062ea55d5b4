"""
趋势序列生成器模块
按关键词需求层级生成逐日社媒指标（热度、发帖、播放、互动）
"""

import math
import random
from datetime import date, timedelta
from typing import List, Optional

from commerce_pulse.data.models import DailyMetric, DataShapeError
from commerce_pulse.generators.base_generator import BaseGenerator


class SeriesGenerator(BaseGenerator):
    """
    趋势序列生成器

    算法：
    - 每日趋势因子 trend = 1 + (days - i) * 0.01，i 从 days 倒数到 0
    - 每日噪声独立抽取，范围 [-10%, +20%]，不做序列相关
    - 热度为发帖基数的 5 倍量级
    """

    DAILY_TREND = 0.01
    NOISE_RANGE = (-10, 20)              # 百分比
    PLAYS_PER_POST_RANGE = (500, 2000)   # 每批帖子的平均播放
    HEAT_MULTIPLIER = 5

    def __init__(self, rng: Optional[random.Random] = None, today: Optional[date] = None):
        """
        初始化趋势序列生成器

        Args:
            rng: 随机源
            today: 序列的最后一天，默认为当天
        """
        super().__init__(name="SeriesGenerator", rng=rng)
        self.today = today

    def generate(self, keyword: str, days: int = 30) -> List[DailyMetric]:
        """
        生成逐日指标序列

        Args:
            keyword: 关键词
            days: 回溯天数（>= 0）

        Returns:
            长度为 days + 1 的序列，按日期升序，最后一天为今天

        Raises:
            DataShapeError: days 为负数或非整数
        """
        if isinstance(days, bool) or not isinstance(days, int):
            raise DataShapeError(f"days 必须为整数: {days!r}")
        if days < 0:
            raise DataShapeError(f"days 不能为负数: {days}")

        profile = self.resolve_profile(keyword)
        today = self.today or date.today()

        series = []
        for i in range(days, -1, -1):
            trend_factor = 1 + (days - i) * self.DAILY_TREND
            noise = self.random_int(*self.NOISE_RANGE) / 100

            posts = math.floor(profile.base_posts * trend_factor * (1 + noise))
            heat = math.floor(profile.base_heat * trend_factor * (1 + noise) * self.HEAT_MULTIPLIER)
            play_count = posts * self.random_int(*self.PLAYS_PER_POST_RANGE)

            series.append(DailyMetric(
                date=(today - timedelta(days=i)).isoformat(),
                heat=heat,
                posts=posts,
                play_count=play_count,
                engagement=round(self.safe_divide(play_count, max(posts, 1)), 2)
            ))

        self.logger.debug(f"[{self.name}] 生成 {keyword} 趋势序列 {len(series)} 天 (层级: {profile.demand_tier.value})")
        return series


def generate_series(days: int, keyword: str, rng: Optional[random.Random] = None,
                    today: Optional[date] = None) -> List[DailyMetric]:
    """便捷函数：生成逐日指标序列"""
    return SeriesGenerator(rng=rng, today=today).generate(keyword, days)
