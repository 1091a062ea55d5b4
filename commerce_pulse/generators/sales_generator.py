"""
销售记录生成器模块
生成 品类 × 电商平台 的销售记录，以及社交平台声量分布
"""

import random
from typing import List, Optional

from commerce_pulse.data.keyword_profiles import PLATFORM_MIXES, get_profile
from commerce_pulse.data.models import SalesRecord, EcommercePlatform, PlatformShare
from commerce_pulse.generators.base_generator import BaseGenerator


SALES_PLATFORMS = [EcommercePlatform.DOUYIN_MALL, EcommercePlatform.TMALL_JD, EcommercePlatform.WEIDIAN]
SALES_CATEGORIES = ['首饰', '摆件', '日用品', '文具', '收藏品']


class SalesGenerator(BaseGenerator):
    """销售记录生成器"""

    REVENUE_RANGE = (10000, 50000)
    UNITS_RANGE = (100, 1000)
    AVG_PRICE_RANGE = (50, 500)

    TMALL_JD_MULTIPLIER = 1.5
    WEIDIAN_NICHE_MULTIPLIER = 0.8

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__(name="SalesGenerator", rng=rng)

    def generate(self, keyword: str) -> List[SalesRecord]:
        """
        生成销售记录

        Args:
            keyword: 关键词

        Returns:
            按平台优先顺序排列的 |平台| × |品类| 条记录
        """
        profile = self.resolve_profile(keyword)

        records = []
        for platform in SALES_PLATFORMS:
            multiplier = self._platform_multiplier(platform, profile.weidian_niche)
            for category in SALES_CATEGORIES:
                records.append(SalesRecord(
                    category=category,
                    platform=platform,
                    revenue=self.random_int(*self.REVENUE_RANGE) * multiplier,
                    units=self.random_int(*self.UNITS_RANGE) * multiplier,
                    avg_price=self.random_int(*self.AVG_PRICE_RANGE)
                ))

        self.logger.debug(f"[{self.name}] 生成 {keyword} 销售记录 {len(records)} 条")
        return records

    def _platform_multiplier(self, platform: EcommercePlatform, weidian_niche: bool) -> float:
        if platform == EcommercePlatform.TMALL_JD:
            return self.TMALL_JD_MULTIPLIER
        # 非遗/螺钿在微店属于小众渠道
        if platform == EcommercePlatform.WEIDIAN and weidian_niche:
            return self.WEIDIAN_NICHE_MULTIPLIER
        return 1


def generate_sales_records(keyword: str, rng: Optional[random.Random] = None) -> List[SalesRecord]:
    """便捷函数：生成 品类 × 平台 销售记录"""
    return SalesGenerator(rng=rng).generate(keyword)


def get_platform_distribution(keyword: str) -> List[PlatformShare]:
    """
    获取社交平台声量分布

    Args:
        keyword: 关键词

    Returns:
        各平台占比（总和为100），按占比从高到低
    """
    mix = PLATFORM_MIXES[get_profile(keyword).platform_mix]
    return [PlatformShare(platform=platform, value=value) for platform, value in mix]
