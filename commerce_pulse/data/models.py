"""
数据模型定义
定义看板引擎产出的数据类和异常类型

数据流向说明：
=============

关键词选择 → KeywordProfile（静态画像表）
         → 趋势序列生成 → DailyMetric
         → 销售记录生成 → SalesRecord → 品类/平台汇总 → Rollup
         → 人群画像合成 → AudienceSegment
         → 评论关键词排序 → KeywordSentimentEntry

直播复盘引擎独立于关键词：
         会话生成（一次） → SessionFrame × 25 → 回放状态机 → PlaybackSnapshot

所有数据类均为只读（frozen），每次切换关键词重新生成，不做增量更新。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple


# ==================== 异常定义 ====================

class EngineError(Exception):
    """引擎异常基类"""


class DataShapeError(EngineError, ValueError):
    """生成参数非法（如负数天数、分布表总和不为100）"""


class InsightProviderError(EngineError):
    """洞察服务返回异常（在服务边界被捕获并转为兜底文案）"""


# ==================== 枚举定义 ====================

class DemandTier(Enum):
    """关键词需求层级"""
    MAINSTREAM = 'mainstream'   # 大众热门
    NICHE = 'niche'             # 小众/非遗
    DEFAULT = 'default'         # 未归类关键词


class AudienceSkew(Enum):
    """人群年龄倾向"""
    YOUNG = 'young'
    MIXED = 'mixed'


class Sentiment(Enum):
    """评论情感"""
    POSITIVE = 'positive'
    NEUTRAL = 'neutral'
    NEGATIVE = 'negative'


class SocialPlatform(Enum):
    """社交内容平台"""
    DOUYIN = '抖音'
    RED = '小红书'
    WEIBO = '微博'
    VIDEO_ACCOUNT = '视频号'


class EcommercePlatform(Enum):
    """电商平台"""
    DOUYIN_MALL = '抖音商城'
    TMALL_JD = '天猫/京东'
    WEIDIAN = '微店'


# ==================== 关键词画像 ====================

@dataclass(frozen=True)
class KeywordProfile:
    """
    关键词画像

    进程级静态配置，加载后不再修改
    未知关键词使用默认画像（保留原关键词）
    """
    keyword: str                                   # 关键词
    demand_tier: DemandTier                        # 需求层级
    base_heat: int                                 # 基础热度
    base_posts: int                                # 基础日发帖量
    audience_skew: AudienceSkew                    # 人群年龄倾向
    platform_mix: str = 'default'                  # 社交平台分布类型
    weidian_niche: bool = False                    # 微店是否为小众渠道

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'keyword': self.keyword,
            'demand_tier': self.demand_tier.value,
            'base_heat': self.base_heat,
            'base_posts': self.base_posts,
            'audience_skew': self.audience_skew.value,
            'platform_mix': self.platform_mix,
            'weidian_niche': self.weidian_niche
        }


# ==================== 趋势数据 ====================

@dataclass(frozen=True)
class DailyMetric:
    """
    每日社媒指标

    engagement = play_count / max(posts, 1)，保留两位小数
    """
    date: str                                      # ISO日期（YYYY-MM-DD）
    heat: int                                      # 话题热度
    posts: int                                     # 发帖量
    play_count: int                                # 播放量
    engagement: float                              # 单帖平均播放

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'date': self.date,
            'heat': self.heat,
            'posts': self.posts,
            'play_count': self.play_count,
            'engagement': self.engagement
        }


@dataclass(frozen=True)
class PlatformShare:
    """社交平台声量占比"""
    platform: SocialPlatform
    value: int                                     # 百分比

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.platform.value, 'value': self.value}


# ==================== 销售数据 ====================

@dataclass(frozen=True)
class SalesRecord:
    """
    销售记录

    每次生成的记录数 = 品类数 × 平台数
    """
    category: str                                  # 商品品类
    platform: EcommercePlatform                    # 电商平台
    revenue: float                                 # 销售额
    units: float                                   # 销量
    avg_price: int                                 # 客单价

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'category': self.category,
            'platform': self.platform.value,
            'revenue': self.revenue,
            'units': self.units,
            'avg_price': self.avg_price
        }


@dataclass(frozen=True)
class Rollup:
    """汇总值（按品类或平台）"""
    revenue: float = 0.0
    units: float = 0.0

    def add(self, record: SalesRecord) -> 'Rollup':
        """累加一条记录，返回新的汇总值"""
        return Rollup(revenue=self.revenue + record.revenue, units=self.units + record.units)

    def to_dict(self) -> Dict[str, Any]:
        return {'revenue': round(self.revenue, 2), 'units': round(self.units, 2)}


@dataclass(frozen=True)
class SalesSummary:
    """销售总览"""
    total_revenue: float
    total_units: float
    record_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_revenue': round(self.total_revenue, 2),
            'total_units': round(self.total_units, 2),
            'record_count': self.record_count
        }


# ==================== 人群数据 ====================

@dataclass(frozen=True)
class GenderRatio:
    """性别比例（male + female = 100）"""
    male: int
    female: int

    def to_dict(self) -> Dict[str, int]:
        return {'male': self.male, 'female': self.female}


@dataclass(frozen=True)
class AudienceSegment:
    """
    人群分段

    四个固定年龄段的 percentage 之和为 100
    只有 percentage 随关键词变化，性别比例和兴趣标签按年龄段固定
    """
    age_group: str                                 # 年龄段
    percentage: int                                # 占比（%）
    gender_ratio: GenderRatio                      # 性别比例
    top_interests: Tuple[str, ...]                 # 兴趣标签（有序）

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'age_group': self.age_group,
            'percentage': self.percentage,
            'gender_ratio': self.gender_ratio.to_dict(),
            'top_interests': list(self.top_interests)
        }


# ==================== 评论关键词 ====================

@dataclass(frozen=True)
class KeywordSentimentEntry:
    """评论关键词词频"""
    word: str
    count: int
    sentiment: Sentiment

    def to_dict(self) -> Dict[str, Any]:
        return {'word': self.word, 'count': self.count, 'sentiment': self.sentiment.value}


# ==================== 直播复盘 ====================

@dataclass(frozen=True)
class SessionFrame:
    """
    直播会话帧

    0..120 分钟，每 5 分钟一帧，生成后不可变
    """
    minute: int                                    # 开播后分钟数
    time_label: str                                # HH:MM
    traffic: int                                   # 实时在线
    conversion: float                              # 转化率（%）
    ar_active: bool                                # AR 试戴是否开启
    lucky_bag_active: bool                         # 福袋是否发放

    def __post_init__(self):
        if not 0 <= self.minute <= 120:
            raise DataShapeError(f"会话帧分钟数越界: {self.minute}")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'minute': self.minute,
            'time': self.time_label,
            'traffic': self.traffic,
            'conversion': self.conversion,
            'ar_active': self.ar_active,
            'lucky_bag_active': self.lucky_bag_active
        }


@dataclass(frozen=True)
class Annotation:
    """图表参考线标注"""
    key: str                                       # 对应高亮选项
    time_label: str                                # 标注位置（HH:MM）
    text: str                                      # 标注文字

    def to_dict(self) -> Dict[str, str]:
        return {'key': self.key, 'time': self.time_label, 'text': self.text}


@dataclass(frozen=True)
class SessionMetric:
    """复盘核心指标卡片"""
    id: str
    title: str
    value: str
    unit: str
    trend: str
    trend_up: bool
    desc: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'value': self.value,
            'unit': self.unit,
            'trend': self.trend,
            'trend_up': self.trend_up,
            'desc': self.desc
        }


@dataclass(frozen=True)
class PlaybackSnapshot:
    """回放状态只读快照"""
    state: str
    cursor: int
    total: int
    playing: bool
    displayed_frames: Tuple[SessionFrame, ...] = field(default_factory=tuple)
    highlight: Optional[str] = None

    @property
    def progress(self) -> float:
        """回放进度（0-1）"""
        return self.cursor / self.total if self.total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'state': self.state,
            'cursor': self.cursor,
            'total': self.total,
            'playing': self.playing,
            'progress': round(self.progress, 4),
            'highlight': self.highlight,
            'displayed_frames': [f.to_dict() for f in self.displayed_frames]
        }


# ==================== 关键词数据集 ====================

@dataclass(frozen=True)
class KeywordDataset:
    """
    单个关键词的完整看板数据

    每次切换关键词都重新生成一个新的实例
    """
    keyword: str
    profile: KeywordProfile
    series: List[DailyMetric]
    sales_records: List[SalesRecord]
    category_rollup: Dict[str, Rollup]
    platform_rollup: Dict[str, Rollup]
    sales_summary: SalesSummary
    platform_shares: List[PlatformShare]
    audience: List[AudienceSegment]
    persona: str
    comment_keywords: List[KeywordSentimentEntry]

    def to_dict(self) -> Dict[str, Any]:
        """转换为可JSON序列化的字典"""
        return {
            'keyword': self.keyword,
            'profile': self.profile.to_dict(),
            'series': [m.to_dict() for m in self.series],
            'sales_records': [r.to_dict() for r in self.sales_records],
            'category_rollup': {k: v.to_dict() for k, v in self.category_rollup.items()},
            'platform_rollup': {k: v.to_dict() for k, v in self.platform_rollup.items()},
            'sales_summary': self.sales_summary.to_dict(),
            'platform_shares': [s.to_dict() for s in self.platform_shares],
            'audience': [s.to_dict() for s in self.audience],
            'persona': self.persona,
            'comment_keywords': [e.to_dict() for e in self.comment_keywords]
        }
