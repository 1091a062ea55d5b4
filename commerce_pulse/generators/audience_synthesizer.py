"""
人群画像合成器模块
按关键词的人群倾向选择固定年龄分布，无随机性
"""

from typing import Dict, List, Tuple

from commerce_pulse.data.models import (
    AudienceSegment, AudienceSkew, GenderRatio, DataShapeError
)
from commerce_pulse.generators.base_generator import BaseGenerator


AGE_GROUPS: Tuple[str, ...] = ('18-24', '25-34', '35-44', '45+')

# 年龄段 -> 占比，每组总和必须为100
DISTRIBUTIONS: Dict[AudienceSkew, Tuple[int, ...]] = {
    AudienceSkew.YOUNG: (45, 35, 15, 5),
    AudienceSkew.MIXED: (20, 40, 25, 15),
}

# 性别比例与兴趣标签按年龄段固定，与关键词无关
SEGMENT_TRAITS: Dict[str, Tuple[GenderRatio, Tuple[str, ...]]] = {
    '18-24': (GenderRatio(male=40, female=60), ('Gaming', 'Fashion', 'Tech')),
    '25-34': (GenderRatio(male=50, female=50), ('Travel', 'Home Decor', 'Invest')),
    '35-44': (GenderRatio(male=60, female=40), ('Culture', 'Tea', 'Family')),
    '45+': (GenderRatio(male=55, female=45), ('Health', 'History', 'News')),
}

YOUNG_PERSONA = 'Z世代潮流先锋'
MATURE_PERSONA = '新中产文化爱好者'


class AudienceSynthesizer(BaseGenerator):
    """人群画像合成器"""

    def __init__(
        self,
        distributions: Dict[AudienceSkew, Tuple[int, ...]] = None,
        traits: Dict[str, Tuple[GenderRatio, Tuple[str, ...]]] = None
    ):
        """
        初始化人群画像合成器

        Args:
            distributions: 年龄分布表（默认使用内置表）
            traits: 年龄段特征表（默认使用内置表）

        Raises:
            DataShapeError: 分布表形状不正确或总和不为100
        """
        super().__init__(name="AudienceSynthesizer")
        self.distributions = distributions or DISTRIBUTIONS
        self.traits = traits or SEGMENT_TRAITS
        self._validate_tables()

    def _validate_tables(self) -> None:
        """构造时校验分布表，保证每组占比总和为100"""
        for skew, percentages in self.distributions.items():
            if len(percentages) != len(AGE_GROUPS):
                raise DataShapeError(f"{skew.value} 分布应有 {len(AGE_GROUPS)} 个年龄段，实际 {len(percentages)}")
            if sum(percentages) != 100:
                raise DataShapeError(f"{skew.value} 分布总和为 {sum(percentages)}，应为100")

        for age_group in AGE_GROUPS:
            if age_group not in self.traits:
                raise DataShapeError(f"缺少年龄段特征: {age_group}")
            ratio = self.traits[age_group][0]
            if ratio.male + ratio.female != 100:
                raise DataShapeError(f"{age_group} 性别比例总和不为100")

        missing = set(AudienceSkew) - set(self.distributions)
        if missing:
            raise DataShapeError(f"缺少人群分布: {', '.join(s.value for s in missing)}")

    def generate(self, keyword: str) -> List[AudienceSegment]:
        """
        合成人群画像

        Args:
            keyword: 关键词

        Returns:
            4个固定年龄段，占比总和为100
        """
        profile = self.resolve_profile(keyword)
        percentages = self.distributions[profile.audience_skew]

        segments = []
        for age_group, percentage in zip(AGE_GROUPS, percentages):
            gender_ratio, interests = self.traits[age_group]
            segments.append(AudienceSegment(
                age_group=age_group,
                percentage=percentage,
                gender_ratio=gender_ratio,
                top_interests=tuple(interests)
            ))
        return segments


def describe_persona(segments: List[AudienceSegment]) -> str:
    """
    根据占比最高的年龄段给出人群标签

    Args:
        segments: 人群分段

    Returns:
        人群标签，主力为18-24岁时为Z世代标签
    """
    if not segments:
        return MATURE_PERSONA
    # max 在并列时返回第一个
    dominant = max(segments, key=lambda s: s.percentage)
    return YOUNG_PERSONA if dominant.age_group == '18-24' else MATURE_PERSONA


def synthesize_audience(keyword: str) -> List[AudienceSegment]:
    """便捷函数：合成人群画像"""
    return AudienceSynthesizer().generate(keyword)
