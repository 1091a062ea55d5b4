"""
生成器基类模块
提供所有数据生成器的公共功能和工具方法
"""

import random
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from commerce_pulse.data.keyword_profiles import get_profile, is_known_keyword
from commerce_pulse.data.models import KeywordProfile
from commerce_pulse.utils.logger import get_logger


class BaseGenerator(ABC):
    """
    生成器基类

    提供所有生成器共用的工具方法：
    - 可注入的随机源（测试时传入固定种子）
    - 闭区间随机整数
    - 关键词画像解析
    - 安全除法
    """

    def __init__(self, name: str = "BaseGenerator", rng: Optional[random.Random] = None):
        """
        初始化生成器

        Args:
            name: 生成器名称
            rng: 随机源，None时使用系统熵源
        """
        self.name = name
        self.rng = rng if rng is not None else random.Random()
        self.logger = get_logger()

    @abstractmethod
    def generate(self, keyword: str) -> Any:
        """
        生成数据（子类必须实现）

        Args:
            keyword: 关键词

        Returns:
            新分配的数据序列，每次调用互不共享
        """
        pass

    def random_int(self, low: int, high: int) -> int:
        """闭区间 [low, high] 随机整数"""
        return self.rng.randint(low, high)

    def resolve_profile(self, keyword: str) -> KeywordProfile:
        """解析关键词画像，未知关键词静默回落到默认画像"""
        if not is_known_keyword(keyword):
            self.logger.debug(f"[{self.name}] 未知关键词 '{keyword}'，使用默认画像")
        return get_profile(keyword)

    @staticmethod
    def safe_divide(
        numerator: Union[int, float],
        denominator: Union[int, float],
        default: float = 0.0
    ) -> float:
        """
        安全除法

        Args:
            numerator: 分子
            denominator: 分母
            default: 分母为0时的默认值

        Returns:
            除法结果
        """
        if not denominator:
            return default
        return numerator / denominator
