"""
复盘高亮选择器模块
高亮只决定图表上渲染哪条参考标注，不影响回放游标和帧数据
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from commerce_pulse.data.models import Annotation, SessionFrame, SessionMetric


class Highlight(Enum):
    """可选高亮"""
    NONE = 'none'
    AR = 'ar'
    LUCKY_BAG = 'luckybag'


ANNOTATIONS: Dict[Highlight, Annotation] = {
    Highlight.AR: Annotation(key='ar', time_label='00:40', text='AR互动开启'),
    Highlight.LUCKY_BAG: Annotation(key='luckybag', time_label='01:40', text='福袋发放'),
}

SESSION_METRICS: List[SessionMetric] = [
    SessionMetric(
        id='retention', title='平均停留时长', value='2.5', unit='min',
        trend='+40%', trend_up=True, desc='高于行业均值 (1.8min)'
    ),
    SessionMetric(
        id='ar', title='AR 试戴互动率', value='15.2', unit='%',
        trend='+8.5%', trend_up=True, desc='本场核心互动亮点'
    ),
    SessionMetric(
        id='luckybag', title='福袋挽留转化', value='High', unit='',
        trend='Effective', trend_up=True, desc='下播前成功拉回流量'
    ),
]


class HighlightSelector:
    """高亮选择器（界面状态，与回放状态相互独立）"""

    def __init__(self, initial: Highlight = Highlight.NONE):
        self._active = initial

    @property
    def active(self) -> Highlight:
        return self._active

    @staticmethod
    def _coerce(value: Union[Highlight, str, None]) -> Highlight:
        if value is None:
            return Highlight.NONE
        if isinstance(value, Highlight):
            return value
        return Highlight(value)

    def select(self, value: Union[Highlight, str, None]) -> Highlight:
        """选中高亮（接受枚举或 'ar' / 'luckybag' / 'none'）"""
        self._active = self._coerce(value)
        return self._active

    def toggle(self, value: Union[Highlight, str, None]) -> Highlight:
        """切换高亮：再次选中当前项则取消"""
        target = self._coerce(value)
        self._active = Highlight.NONE if target == self._active else target
        return self._active

    def clear(self) -> None:
        self._active = Highlight.NONE

    def annotation(self) -> Optional[Annotation]:
        """当前高亮对应的标注"""
        return ANNOTATIONS.get(self._active)

    def visible_annotations(self, displayed_frames: Sequence[SessionFrame]) -> List[Annotation]:
        """
        过滤出需要渲染的标注

        Args:
            displayed_frames: 当前已回放的帧

        Returns:
            当前高亮的标注（仅当其位置已出现在已回放帧中）
        """
        annotation = self.annotation()
        if annotation is None:
            return []
        labels = {frame.time_label for frame in displayed_frames}
        return [annotation] if annotation.time_label in labels else []
