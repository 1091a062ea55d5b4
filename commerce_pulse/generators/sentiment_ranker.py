"""
评论关键词情感排序模块
生成评论高频词词频表，附情感标签，按词频降序排列
"""

import random
from typing import List, Optional

from commerce_pulse.data.models import KeywordSentimentEntry, Sentiment
from commerce_pulse.generators.base_generator import BaseGenerator


COMMON_WORDS = ['好看', '值得', '一般', '推荐', '太贵了', '精致', '喜欢']
CRAFT_WORDS = ['工艺', '传承', '匠心', '绝美', '手工', '瑕疵', '等待时间长']
TECH_WORDS = ['科技感', '复购', '隐藏款', '手感', '甚至', '溢价']

# 命中工艺词库的关键词片段
CRAFT_MARKERS = ('螺钿', '漆器')

NEGATIVE_WORDS = frozenset(['瑕疵', '太贵了', '一般', '等待时间长', '溢价'])


class SentimentRanker(BaseGenerator):
    """
    评论关键词排序器

    并列词频的排序规则：稳定排序，保持词池枚举顺序（通用词在前，细分词在后）
    """

    COUNT_RANGE = (100, 5000)

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__(name="SentimentRanker", rng=rng)

    def build_word_pool(self, keyword: str) -> List[str]:
        """
        构建词池

        Args:
            keyword: 关键词

        Returns:
            通用词 ∪ 细分词，去重并保持首次出现顺序
        """
        if any(marker in keyword for marker in CRAFT_MARKERS):
            niche_words = CRAFT_WORDS
        else:
            niche_words = TECH_WORDS
        return list(dict.fromkeys(COMMON_WORDS + niche_words))

    @staticmethod
    def classify(word: str) -> Sentiment:
        """负面词表命中为负面，否则为正面"""
        return Sentiment.NEGATIVE if word in NEGATIVE_WORDS else Sentiment.POSITIVE

    def generate(self, keyword: str) -> List[KeywordSentimentEntry]:
        """
        生成评论关键词词频表

        Args:
            keyword: 关键词

        Returns:
            按词频降序排列的词条
        """
        entries = [
            KeywordSentimentEntry(word=word, count=self.random_int(*self.COUNT_RANGE), sentiment=self.classify(word))
            for word in self.build_word_pool(keyword)
        ]
        # sorted 为稳定排序
        return sorted(entries, key=lambda e: e.count, reverse=True)


def rank_keywords(keyword: str, rng: Optional[random.Random] = None) -> List[KeywordSentimentEntry]:
    """便捷函数：生成评论关键词词频表"""
    return SentimentRanker(rng=rng).generate(keyword)
