"""
直播复盘测试模块
测试会话帧生成、回放状态机、调度器和高亮标注
"""

import asyncio
import random
import unittest

from commerce_pulse.replay.session_generator import generate_session_frames, build_frame, format_time_label
from commerce_pulse.replay.playback_engine import SessionReplayEngine, PlaybackState
from commerce_pulse.replay.scheduler import ManualScheduler, AsyncioScheduler
from commerce_pulse.replay.highlights import HighlightSelector, Highlight, SESSION_METRICS


class TestSessionGenerator(unittest.TestCase):
    """会话帧生成测试"""

    def setUp(self):
        self.frames = generate_session_frames(random.Random(99))

    def test_frame_grid(self):
        """测试 25 帧，分钟 0..120 步长 5"""
        self.assertEqual(len(self.frames), 25)
        self.assertEqual([f.minute for f in self.frames], list(range(0, 121, 5)))
        self.assertEqual(self.frames[0].time_label, "00:00")
        self.assertEqual(self.frames[-1].time_label, "02:00")
        self.assertEqual(format_time_label(65), "01:05")

    def test_event_flags(self):
        """测试 AR 与福袋标记"""
        for frame in self.frames:
            self.assertEqual(frame.ar_active, 40 <= frame.minute <= 50)
            self.assertEqual(frame.lucky_bag_active, frame.minute >= 100)

    def test_non_negative(self):
        """测试流量与转化非负"""
        for frame in self.frames:
            self.assertGreaterEqual(frame.traffic, 0)
            self.assertGreaterEqual(frame.conversion, 0)

    def test_scripted_adjustments(self):
        """测试剧本窗口叠加（噪声固定为0）"""
        self.assertEqual(build_frame(0, 0, 0).traffic, 2000)
        self.assertEqual(build_frame(25, 0, 0).traffic, 2000 + 25 * 50)
        self.assertEqual(build_frame(30, 0, 0).traffic, 2000)

        ar = build_frame(40, 0, 0)
        self.assertEqual(ar.traffic, 2800)
        self.assertAlmostEqual(ar.conversion, 4.0)
        # 50 分钟仍标记 AR 但没有加成
        self.assertEqual(build_frame(50, 0, 0).traffic, 2000)

        dip = build_frame(75, 0, 0)
        self.assertEqual(dip.traffic, 1700)
        self.assertAlmostEqual(dip.conversion, 1.3)
        # 窗口为开区间
        self.assertEqual(build_frame(60, 0, 0).traffic, 2000)
        self.assertEqual(build_frame(90, 0, 0).traffic, 2000)

        lucky = build_frame(100, 0, 0)
        self.assertEqual(lucky.traffic, 3500)
        self.assertAlmostEqual(lucky.conversion, 4.5)

    def test_spikes_align_with_windows(self):
        """测试流量尖峰与事件窗口对齐"""
        baseline_max = 2000 + 500
        for frame in self.frames:
            if frame.minute in (40, 45) or frame.minute >= 100:
                self.assertGreater(frame.traffic, baseline_max)


class TestPlaybackEngine(unittest.TestCase):
    """回放状态机测试"""

    def setUp(self):
        self.scheduler = ManualScheduler()
        self.engine = SessionReplayEngine(scheduler=self.scheduler, rng=random.Random(1))

    def test_initial_full_timeline(self):
        """测试构造后展示完整时间线"""
        self.assertEqual(self.engine.state, PlaybackState.IDLE)
        self.assertEqual(self.engine.cursor, 25)
        self.assertEqual(len(self.engine.displayed_frames), 25)
        self.assertFalse(self.scheduler.running)

    def test_tick_at_end_from_idle_completes(self):
        """测试空闲状态下游标已在末尾时 tick 转为完成"""
        self.assertFalse(self.engine.tick())
        self.assertEqual(self.engine.state, PlaybackState.COMPLETE)
        self.assertEqual(self.engine.cursor, 25)

        self.engine.seek(3)
        self.assertFalse(self.engine.tick())
        self.assertEqual(self.engine.state, PlaybackState.PAUSED)
        self.assertEqual(self.engine.cursor, 3)

    def test_start_and_ticks(self):
        """测试开始后逐帧推进"""
        self.engine.start()
        self.assertEqual(self.engine.cursor, 0)
        self.assertEqual(self.engine.state, PlaybackState.PLAYING)
        self.assertEqual(self.scheduler.interval, 0.2)

        for n in range(1, 25):
            self.scheduler.advance()
            self.assertEqual(self.engine.cursor, n)
            self.assertEqual(self.engine.state, PlaybackState.PLAYING)
            self.assertEqual(len(self.engine.displayed_frames), n)

        self.scheduler.advance()
        self.assertEqual(self.engine.cursor, 25)
        self.assertEqual(self.engine.state, PlaybackState.COMPLETE)
        self.assertFalse(self.engine.playing)
        self.assertFalse(self.scheduler.running)

    def test_overrun_is_noop(self):
        """测试到达末尾后 tick 为空操作"""
        self.engine.start()
        self.assertEqual(self.scheduler.advance(40), 25)
        for _ in range(5):
            self.assertFalse(self.engine.tick())
        self.assertEqual(self.engine.cursor, 25)
        self.assertEqual(self.engine.state, PlaybackState.COMPLETE)

    def test_start_while_playing_is_noop(self):
        """测试播放中再次开始不产生第二个定时器"""
        self.engine.start()
        self.scheduler.advance(3)
        self.assertFalse(self.engine.start())
        self.assertEqual(self.engine.cursor, 3)
        self.assertEqual(self.scheduler.start_count, 1)

    def test_pause_freezes_cursor(self):
        """测试暂停后经过任意周期游标不变"""
        self.engine.start()
        self.scheduler.advance(5)
        self.engine.pause()

        self.assertEqual(self.engine.state, PlaybackState.PAUSED)
        self.assertEqual(self.scheduler.advance(10), 0)
        self.engine.tick()
        self.assertEqual(self.engine.cursor, 5)

    def test_resume(self):
        """测试暂停后继续"""
        self.engine.start()
        self.scheduler.advance(5)
        self.engine.pause()
        self.assertTrue(self.engine.resume())
        self.scheduler.advance(2)
        self.assertEqual(self.engine.cursor, 7)
        self.assertFalse(self.engine.resume())

    def test_reset_from_any_state(self):
        """测试任意状态重置"""
        self.engine.start()
        self.scheduler.advance(4)
        self.engine.reset()
        self.assertEqual(self.engine.state, PlaybackState.IDLE)
        self.assertEqual(self.engine.cursor, 25)
        self.assertEqual(self.scheduler.advance(3), 0)

        self.engine.start()
        self.engine.pause()
        self.engine.reset()
        self.assertEqual(self.engine.cursor, 25)

        self.engine.start()
        self.scheduler.advance(25)
        self.engine.reset()
        self.assertEqual(self.engine.state, PlaybackState.IDLE)

    def test_replay_keeps_frames(self):
        """测试重放不重新生成帧"""
        frames = self.engine.frames
        self.engine.start()
        self.scheduler.advance(25)
        self.engine.start()
        self.scheduler.advance(25)
        self.assertIs(self.engine.frames, frames)

    def test_seek(self):
        """测试拖动游标"""
        self.assertEqual(self.engine.seek(10), 10)
        self.assertEqual(self.engine.state, PlaybackState.PAUSED)
        self.engine.resume()
        self.scheduler.advance()
        self.assertEqual(self.engine.cursor, 11)

        self.assertEqual(self.engine.seek(99), 25)
        self.assertEqual(self.engine.state, PlaybackState.COMPLETE)
        self.assertEqual(self.engine.seek(-3), 0)

    def test_snapshot(self):
        """测试快照"""
        self.engine.start()
        self.scheduler.advance(2)
        snapshot = self.engine.snapshot()
        self.assertEqual(snapshot.state, 'playing')
        self.assertEqual(snapshot.cursor, 2)
        self.assertEqual(len(snapshot.displayed_frames), 2)
        self.assertIsNone(snapshot.highlight)


class TestHighlights(unittest.TestCase):
    """高亮标注测试"""

    def setUp(self):
        self.selector = HighlightSelector()
        self.scheduler = ManualScheduler()
        self.engine = SessionReplayEngine(scheduler=self.scheduler, highlight_selector=self.selector,
                                          rng=random.Random(3))

    def test_toggle(self):
        """测试切换高亮"""
        self.assertEqual(self.selector.toggle('ar'), Highlight.AR)
        self.assertEqual(self.selector.toggle('ar'), Highlight.NONE)
        self.assertEqual(self.selector.select(Highlight.LUCKY_BAG), Highlight.LUCKY_BAG)
        self.selector.clear()
        self.assertEqual(self.engine.highlight, Highlight.NONE)

    def test_annotations_follow_displayed_frames(self):
        """测试标注只在已回放到对应时间后出现"""
        self.selector.select('ar')
        self.assertEqual([a.text for a in self.engine.visible_annotations()], ['AR互动开启'])

        self.engine.start()
        self.scheduler.advance(8)
        self.assertEqual(self.engine.visible_annotations(), [])
        self.scheduler.advance(1)
        self.assertEqual(self.engine.visible_annotations()[0].time_label, '00:40')

    def test_highlight_does_not_touch_playback(self):
        """测试高亮不影响游标和帧"""
        self.engine.start()
        self.scheduler.advance(3)
        frames = self.engine.frames
        self.selector.select('luckybag')
        self.assertEqual(self.engine.cursor, 3)
        self.assertIs(self.engine.frames, frames)
        self.assertEqual(self.engine.snapshot().highlight, 'luckybag')
        self.assertEqual(self.engine.visible_annotations(), [])

    def test_session_metrics(self):
        """测试复盘指标卡片"""
        self.assertEqual([m.id for m in SESSION_METRICS], ['retention', 'ar', 'luckybag'])


class TestAsyncioScheduler(unittest.TestCase):
    """asyncio 调度器测试"""

    def test_plays_to_completion(self):
        """测试真实定时器回放到结束"""

        async def scenario():
            engine = SessionReplayEngine(scheduler=AsyncioScheduler(), interval=0.001, rng=random.Random(5))
            engine.start()
            for _ in range(500):
                if engine.state == PlaybackState.COMPLETE:
                    break
                await asyncio.sleep(0.005)
            return engine

        engine = asyncio.run(scenario())
        self.assertEqual(engine.state, PlaybackState.COMPLETE)
        self.assertEqual(engine.cursor, 25)
        self.assertFalse(engine.scheduler.running)

    def test_no_tick_after_pause(self):
        """测试暂停后不再触发"""

        async def scenario():
            engine = SessionReplayEngine(scheduler=AsyncioScheduler(), interval=0.001, rng=random.Random(5))
            engine.start()
            await asyncio.sleep(0.01)
            engine.pause()
            paused_at = engine.cursor
            await asyncio.sleep(0.05)
            return paused_at, engine.cursor

        paused_at, cursor = asyncio.run(scenario())
        self.assertEqual(paused_at, cursor)

    def test_replay_across_event_loops(self):
        """测试同一引擎在两个事件循环中先后完整回放"""
        engine = SessionReplayEngine(scheduler=AsyncioScheduler(), interval=0.001, rng=random.Random(5))
        frames = engine.frames

        async def play():
            engine.start()
            for _ in range(500):
                if engine.state == PlaybackState.COMPLETE:
                    break
                await asyncio.sleep(0.005)
            return engine.state, engine.cursor

        self.assertEqual(asyncio.run(play()), (PlaybackState.COMPLETE, 25))
        self.assertEqual(asyncio.run(play()), (PlaybackState.COMPLETE, 25))
        self.assertIs(engine.frames, frames)

    def test_failed_start_keeps_state(self):
        """测试没有运行中的事件循环时 start 失败且状态不变"""
        engine = SessionReplayEngine(scheduler=AsyncioScheduler(), rng=random.Random(5))
        with self.assertRaises(RuntimeError):
            engine.start()
        self.assertEqual(engine.state, PlaybackState.IDLE)
        self.assertEqual(engine.cursor, 25)
        self.assertFalse(engine.scheduler.running)

        async def play_briefly():
            self.assertTrue(engine.start())
            engine.pause()
            return engine.cursor

        self.assertEqual(asyncio.run(play_briefly()), 0)


if __name__ == '__main__':
    unittest.main()
