"""
看板会话模块
持有当前选中的关键词，协调各生成器产出看板数据，并向洞察服务提供数据快照
"""

import random
from datetime import date
from typing import Any, Dict, List, Optional

from commerce_pulse.core.config_manager import ConfigManager
from commerce_pulse.data.models import KeywordDataset
from commerce_pulse.data.keyword_profiles import get_profile, is_known_keyword
from commerce_pulse.generators.series_generator import SeriesGenerator
from commerce_pulse.generators.sales_generator import SalesGenerator, get_platform_distribution
from commerce_pulse.generators.audience_synthesizer import AudienceSynthesizer, describe_persona
from commerce_pulse.generators.sentiment_ranker import SentimentRanker
from commerce_pulse.analyzers.category_aggregator import CategoryAggregator
from commerce_pulse.insights.insight_provider import (
    InsightProvider, FALLBACK_INSIGHTS, create_insight_provider
)
from commerce_pulse.replay.playback_engine import SessionReplayEngine
from commerce_pulse.replay.highlights import SESSION_METRICS
from commerce_pulse.replay.scheduler import Scheduler
from commerce_pulse.utils.logger import get_logger, performance_tracker


class DashboardSession:
    """
    看板会话

    切换关键词时整体重新生成数据集，不做增量更新；
    回放引擎与关键词无关，会话内只创建一次。
    """

    def __init__(
        self,
        config: ConfigManager,
        seed: Optional[int] = None,
        insight_provider: Optional[InsightProvider] = None,
        replay_engine: Optional[SessionReplayEngine] = None,
        scheduler: Optional[Scheduler] = None,
        today: Optional[date] = None
    ):
        """
        初始化看板会话

        Args:
            config: 配置管理器
            seed: 随机种子（默认读取配置，None表示使用系统熵源）
            insight_provider: 洞察服务（默认按配置创建）
            replay_engine: 回放引擎（默认新建）
            scheduler: 回放调度器（仅在新建回放引擎时使用）
            today: 趋势序列的最后一天
        """
        self.config = config
        self.logger = get_logger()
        self.seed = seed if seed is not None else config.random_seed
        self.today = today

        self.aggregator = CategoryAggregator()
        self.audience_synthesizer = AudienceSynthesizer()
        self.insight_provider = insight_provider or create_insight_provider(config)

        self.replay_engine = replay_engine or SessionReplayEngine(
            scheduler=scheduler,
            interval=config.playback_interval,
            rng=self._make_rng('session')
        )

        self._keyword: Optional[str] = None
        self._dataset: Optional[KeywordDataset] = None
        self.insights: List[str] = []

    def _make_rng(self, scope: str) -> random.Random:
        """按作用域派生随机源，固定种子时同一关键词的结果与选择顺序无关"""
        if self.seed is None:
            return random.Random()
        return random.Random(f"{self.seed}:{scope}")

    @property
    def keyword(self) -> Optional[str]:
        return self._keyword

    @property
    def dataset(self) -> KeywordDataset:
        """当前数据集（首次访问时按默认关键词生成）"""
        if self._dataset is None:
            self.select_keyword(self.config.default_keyword)
        return self._dataset

    @performance_tracker("关键词数据生成")
    def select_keyword(self, keyword: str, days: Optional[int] = None) -> KeywordDataset:
        """
        选择关键词并重新生成全部数据

        Args:
            keyword: 关键词（未知关键词使用默认画像）
            days: 趋势天数（默认读取配置）

        Returns:
            新的 KeywordDataset
        """
        days = self.config.trend_days if days is None else days
        if not is_known_keyword(keyword):
            self.logger.debug(f"[Session] 关键词 '{keyword}' 不在可选范围内，按默认层级生成")

        rng = self._make_rng(keyword)
        series = SeriesGenerator(rng=rng, today=self.today).generate(keyword, days)
        records = SalesGenerator(rng=rng).generate(keyword)
        comment_keywords = SentimentRanker(rng=rng).generate(keyword)
        audience = self.audience_synthesizer.generate(keyword)

        dataset = KeywordDataset(
            keyword=keyword,
            profile=get_profile(keyword),
            series=series,
            sales_records=records,
            category_rollup=self.aggregator.aggregate_by_category(records),
            platform_rollup=self.aggregator.aggregate_by_platform(records),
            sales_summary=self.aggregator.summarize(records),
            platform_shares=get_platform_distribution(keyword),
            audience=audience,
            persona=describe_persona(audience),
            comment_keywords=comment_keywords
        )

        self._keyword = keyword
        self._dataset = dataset
        self.insights = []
        self.logger.info(f"[Session] 已切换关键词: {keyword} (层级: {dataset.profile.demand_tier.value}, {len(series)} 天)")
        return dataset

    def snapshot(self) -> Dict[str, Any]:
        """
        获取可JSON序列化的看板快照

        Returns:
            关键词数据 + 回放快照 + 复盘指标
        """
        return {
            'keyword_data': self.dataset.to_dict(),
            'replay': self.replay_engine.snapshot().to_dict(),
            'session_metrics': [m.to_dict() for m in SESSION_METRICS]
        }

    async def refresh_insights(self) -> List[str]:
        """
        以当前快照请求洞察

        Returns:
            3条洞察文案；洞察服务异常时返回兜底文案，不向上抛出
        """
        snapshot = self.snapshot()
        requested_dataset = self._dataset
        try:
            insights = await self.insight_provider.get_insights(snapshot)
        except Exception as e:
            self.logger.error(f"[Session] 洞察服务异常，使用兜底文案: {e}")
            insights = list(FALLBACK_INSIGHTS)

        # 等待期间重新生成过数据集（包括重选同一关键词）时不覆盖洞察
        if self._dataset is requested_dataset:
            self.insights = insights
        return insights
