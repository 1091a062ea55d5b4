"""
关键词画像表
静态定义可选关键词的需求层级、人群倾向和渠道特征
"""

from typing import Dict, List, Tuple

from commerce_pulse.data.models import (
    KeywordProfile, DemandTier, AudienceSkew, SocialPlatform
)


# 可选关键词（封闭集合，顺序即下拉框展示顺序）
KEYWORDS: List[str] = [
    '3C数码',
    '潮玩',
    '环保',
    '非遗',
    '漆器',
    '螺钿',
    '装饰',
    '盲盒'
]

MAINSTREAM_KEYWORDS = frozenset(['3C数码', '盲盒', '潮玩'])
NICHE_KEYWORDS = frozenset(['非遗', '螺钿', '漆器'])
YOUNG_SKEW_KEYWORDS = frozenset(['潮玩', '盲盒', '3C数码'])
WEIDIAN_NICHE_KEYWORDS = frozenset(['非遗', '螺钿'])

NEWS_MIX_KEYWORDS = frozenset(['3C数码', '环保'])
AESTHETIC_MIX_KEYWORDS = frozenset(['非遗', '漆器', '螺钿', '装饰'])

# 层级 -> (基础热度, 基础发帖量)
TIER_BASELINES: Dict[DemandTier, Tuple[int, int]] = {
    DemandTier.MAINSTREAM: (15000, 500),
    DemandTier.NICHE: (8000, 150),
    DemandTier.DEFAULT: (5000, 100),
}

# 社交平台声量分布，每组总和为100
PLATFORM_MIXES: Dict[str, List[Tuple[SocialPlatform, int]]] = {
    # 3C/环保类资讯多在微博发布
    'news': [
        (SocialPlatform.DOUYIN, 40),
        (SocialPlatform.WEIBO, 30),
        (SocialPlatform.RED, 20),
        (SocialPlatform.VIDEO_ACCOUNT, 10),
    ],
    # 工艺类偏重审美内容
    'aesthetic': [
        (SocialPlatform.RED, 45),
        (SocialPlatform.DOUYIN, 35),
        (SocialPlatform.VIDEO_ACCOUNT, 15),
        (SocialPlatform.WEIBO, 5),
    ],
    'default': [
        (SocialPlatform.RED, 40),
        (SocialPlatform.DOUYIN, 40),
        (SocialPlatform.WEIBO, 10),
        (SocialPlatform.VIDEO_ACCOUNT, 10),
    ],
}


def _classify_tier(keyword: str) -> DemandTier:
    if keyword in MAINSTREAM_KEYWORDS:
        return DemandTier.MAINSTREAM
    if keyword in NICHE_KEYWORDS:
        return DemandTier.NICHE
    return DemandTier.DEFAULT


def _classify_mix(keyword: str) -> str:
    if keyword in NEWS_MIX_KEYWORDS:
        return 'news'
    if keyword in AESTHETIC_MIX_KEYWORDS:
        return 'aesthetic'
    return 'default'


def _build_profile(keyword: str) -> KeywordProfile:
    tier = _classify_tier(keyword)
    base_heat, base_posts = TIER_BASELINES[tier]
    return KeywordProfile(
        keyword=keyword,
        demand_tier=tier,
        base_heat=base_heat,
        base_posts=base_posts,
        audience_skew=AudienceSkew.YOUNG if keyword in YOUNG_SKEW_KEYWORDS else AudienceSkew.MIXED,
        platform_mix=_classify_mix(keyword),
        weidian_niche=keyword in WEIDIAN_NICHE_KEYWORDS
    )


# 进程级画像表，导入时构建一次
PROFILES: Dict[str, KeywordProfile] = {kw: _build_profile(kw) for kw in KEYWORDS}


def is_known_keyword(keyword: str) -> bool:
    """关键词是否在可选集合内"""
    return keyword in PROFILES


def get_profile(keyword: str) -> KeywordProfile:
    """
    获取关键词画像

    Args:
        keyword: 关键词

    Returns:
        KeywordProfile，未知关键词返回默认层级画像（保留原关键词）
    """
    profile = PROFILES.get(keyword)
    if profile is None:
        profile = _build_profile(keyword)
    return profile
