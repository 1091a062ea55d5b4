"""
直播复盘回放引擎模块
在固定的会话时间线上提供回放状态机（开始、暂停、继续、拖动、重置）

状态转换：
    Idle     --start-->  Playing   （游标归零）
    Playing  --tick-->   Playing   （游标 +1）
    Playing  --游标到末尾--> Complete （自动停止）
    Idle     --tick-->   Complete （游标已在末尾，不前进）
    Playing  --pause-->  Paused
    Paused   --resume--> Playing
    任意状态  --reset-->  Idle      （游标回到完整时间线）

构造后游标预置为帧数，静止时展示完整时间线。
"""

import random
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from commerce_pulse.data.models import SessionFrame, PlaybackSnapshot, Annotation
from commerce_pulse.replay.highlights import HighlightSelector, Highlight
from commerce_pulse.replay.scheduler import Scheduler, ManualScheduler
from commerce_pulse.replay.session_generator import generate_session_frames
from commerce_pulse.utils.logger import get_logger


DEFAULT_INTERVAL = 0.2  # 秒


class PlaybackState(Enum):
    """回放状态"""
    IDLE = 'idle'
    PLAYING = 'playing'
    PAUSED = 'paused'
    COMPLETE = 'complete'


class SessionReplayEngine:
    """
    直播复盘回放引擎

    帧序列在构造时生成一次，之后不可变；重放只重置游标。
    游标是回放过程中唯一可变的字段，displayed_frames = frames[0:cursor]。
    """

    def __init__(
        self,
        frames: Optional[Sequence[SessionFrame]] = None,
        scheduler: Optional[Scheduler] = None,
        interval: float = DEFAULT_INTERVAL,
        rng: Optional[random.Random] = None,
        highlight_selector: Optional[HighlightSelector] = None
    ):
        """
        初始化回放引擎

        Args:
            frames: 会话帧（默认生成新的会话）
            scheduler: 定时调度器（默认手动调度器）
            interval: 帧间隔（秒）
            rng: 生成会话使用的随机源
            highlight_selector: 高亮选择器（引擎只读）
        """
        self.logger = get_logger()
        self._frames: Tuple[SessionFrame, ...] = tuple(frames) if frames is not None else generate_session_frames(rng)
        self.scheduler = scheduler or ManualScheduler()
        self.interval = interval
        self._highlight_selector = highlight_selector or HighlightSelector()

        self._cursor = len(self._frames)
        self._state = PlaybackState.IDLE

    # ==================== 只读属性 ====================

    @property
    def frames(self) -> Tuple[SessionFrame, ...]:
        return self._frames

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def playing(self) -> bool:
        return self._state == PlaybackState.PLAYING

    @property
    def displayed_frames(self) -> Tuple[SessionFrame, ...]:
        return self._frames[:self._cursor]

    @property
    def highlight(self) -> Highlight:
        """当前高亮（由外部选择器维护，引擎不修改）"""
        return self._highlight_selector.active

    @property
    def highlight_selector(self) -> HighlightSelector:
        return self._highlight_selector

    # ==================== 状态转换 ====================

    def start(self) -> bool:
        """
        开始回放（游标归零）

        Returns:
            是否发生了状态转换，播放中再次调用为空操作
        """
        if self._state == PlaybackState.PLAYING:
            self.logger.debug("[Replay] 已在回放中，忽略 start")
            return False

        # 定时器启动失败时状态保持不变
        self.scheduler.start(self.interval, self.tick)
        self._cursor = 0
        self._state = PlaybackState.PLAYING
        self.logger.info(f"[Replay] 开始回放，共 {len(self._frames)} 帧")
        return True

    def tick(self) -> bool:
        """
        推进一帧

        Returns:
            游标是否前进；非播放状态或已到末尾时为空操作（末尾时转为 Complete）
        """
        if self._cursor >= len(self._frames):
            if self._state in (PlaybackState.IDLE, PlaybackState.PLAYING):
                self._complete()
            return False

        if self._state != PlaybackState.PLAYING:
            return False

        self._cursor += 1
        if self._cursor >= len(self._frames):
            self._complete()
        return True

    def pause(self) -> bool:
        """暂停回放（先取消定时器再更新状态）"""
        if self._state != PlaybackState.PLAYING:
            return False
        self.scheduler.stop()
        self._state = PlaybackState.PAUSED
        self.logger.debug(f"[Replay] 暂停于第 {self._cursor} 帧")
        return True

    def resume(self) -> bool:
        """从暂停处继续"""
        if self._state != PlaybackState.PAUSED:
            return False
        if self._cursor >= len(self._frames):
            self._complete()
            return False
        self.scheduler.start(self.interval, self.tick)
        self._state = PlaybackState.PLAYING
        self.logger.debug(f"[Replay] 从第 {self._cursor} 帧继续")
        return True

    def reset(self) -> None:
        """任意状态重置为 Idle，游标回到完整时间线"""
        self.scheduler.stop()
        self._cursor = len(self._frames)
        self._state = PlaybackState.IDLE
        self.logger.debug("[Replay] 已重置")

    def seek(self, position: int) -> int:
        """
        拖动游标

        Args:
            position: 目标位置，超出范围时截断到 [0, 帧数]

        Returns:
            实际游标位置
        """
        total = len(self._frames)
        self._cursor = max(0, min(int(position), total))

        if self._state == PlaybackState.PLAYING:
            if self._cursor >= total:
                self._complete()
        elif self._cursor < total:
            # 停在中途，可继续回放
            self._state = PlaybackState.PAUSED
        elif self._state == PlaybackState.PAUSED:
            self._state = PlaybackState.COMPLETE
        return self._cursor

    def _complete(self) -> None:
        self.scheduler.stop()
        self._cursor = len(self._frames)
        self._state = PlaybackState.COMPLETE
        self.logger.info("[Replay] 回放结束")

    # ==================== 快照 ====================

    def visible_annotations(self) -> List[Annotation]:
        """当前高亮下需要渲染的参考标注"""
        return self._highlight_selector.visible_annotations(self.displayed_frames)

    def snapshot(self) -> PlaybackSnapshot:
        """获取只读快照"""
        highlight = self.highlight
        return PlaybackSnapshot(
            state=self._state.value,
            cursor=self._cursor,
            total=len(self._frames),
            playing=self.playing,
            displayed_frames=self.displayed_frames,
            highlight=None if highlight == Highlight.NONE else highlight.value
        )
