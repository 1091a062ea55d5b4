"""
直播会话生成器模块
生成固定 2 小时的直播复盘时间线（每 5 分钟一帧）

剧本窗口（在带噪声的基线上叠加，可重叠）：
- 开播爬坡：minute < 30，流量 += minute * 50
- 中段疲劳：60 < minute < 90，转化 -= 1.2，流量 -= 300
- AR 试戴：minute ∈ {40, 45}，流量 += 800，转化 += 1.5
- 福袋发放：minute >= 100，流量 += 1500，转化 += 2.0
"""

import math
import random
from typing import List, Optional, Tuple

from commerce_pulse.data.models import SessionFrame


SESSION_MINUTES = 120
FRAME_STEP = 5

BASE_TRAFFIC = 2000
TRAFFIC_NOISE = 500
BASE_CONVERSION = 2.5
CONVERSION_NOISE = 0.5

RAMP_END = 30
RAMP_TRAFFIC_PER_MINUTE = 50

FATIGUE_WINDOW: Tuple[int, int] = (60, 90)      # 开区间
FATIGUE_TRAFFIC = -300
FATIGUE_CONVERSION = -1.2

AR_BOOST_MINUTES: Tuple[int, ...] = (40, 45)
AR_WINDOW: Tuple[int, int] = (40, 50)           # 闭区间，用于 ar_active 标记
AR_TRAFFIC = 800
AR_CONVERSION = 1.5

LUCKY_BAG_START = 100
LUCKY_BAG_TRAFFIC = 1500
LUCKY_BAG_CONVERSION = 2.0


def format_time_label(minute: int) -> str:
    """分钟数转 HH:MM"""
    return f"{minute // 60:02d}:{minute % 60:02d}"


def is_ar_active(minute: int) -> bool:
    return AR_WINDOW[0] <= minute <= AR_WINDOW[1]


def is_lucky_bag_active(minute: int) -> bool:
    return minute >= LUCKY_BAG_START


def build_frame(minute: int, traffic_noise: float, conversion_noise: float) -> SessionFrame:
    """
    构建单帧

    Args:
        minute: 开播后分钟数
        traffic_noise: 流量噪声 [0, 1)
        conversion_noise: 转化噪声 [0, 1)

    Returns:
        SessionFrame
    """
    traffic = BASE_TRAFFIC + traffic_noise * TRAFFIC_NOISE
    conversion = BASE_CONVERSION + conversion_noise * CONVERSION_NOISE

    if minute < RAMP_END:
        traffic += minute * RAMP_TRAFFIC_PER_MINUTE

    if FATIGUE_WINDOW[0] < minute < FATIGUE_WINDOW[1]:
        traffic += FATIGUE_TRAFFIC
        conversion += FATIGUE_CONVERSION

    if minute in AR_BOOST_MINUTES:
        traffic += AR_TRAFFIC
        conversion += AR_CONVERSION

    if is_lucky_bag_active(minute):
        traffic += LUCKY_BAG_TRAFFIC
        conversion += LUCKY_BAG_CONVERSION

    return SessionFrame(
        minute=minute,
        time_label=format_time_label(minute),
        traffic=max(0, math.floor(traffic)),
        conversion=max(0.0, round(conversion, 2)),
        ar_active=is_ar_active(minute),
        lucky_bag_active=is_lucky_bag_active(minute)
    )


def generate_session_frames(rng: Optional[random.Random] = None) -> Tuple[SessionFrame, ...]:
    """
    生成完整会话时间线

    Args:
        rng: 随机源

    Returns:
        25 帧（0, 5, ..., 120 分钟）的不可变序列
    """
    rng = rng if rng is not None else random.Random()
    frames: List[SessionFrame] = []
    for minute in range(0, SESSION_MINUTES + 1, FRAME_STEP):
        frames.append(build_frame(minute, rng.random(), rng.random()))
    return tuple(frames)
