"""
Layer 1: RecordingSession — 录制状态机与计时

状态:  IDLE ⇄ RECORDING  (无终态, 可无限循环)

两种计时方式:
- 快照模式 (persistent=False, 默认):
    每次 start 都是独立的测量窗口, 之前的数据由监视器自动清空
- 持续模式 (persistent=True):
    多次 start/stop 累积成一个连续窗口, start_time 只在第一次 start 时设定

    start ──┐        stop          start ──┐        stop
            │<─ probe 1 ─>│                │<─ probe 2 ─>│
    total_time = (stop_2 - last_start_2) + accumulated(= total_1)

所有时间单位为 ms, -1 表示"未设定"。
"""

from enum import IntEnum

from spikemon.errors import MonitorStateError, TimingConsistencyError


UNSET = -1


class RecordingState(IntEnum):
    IDLE = 0
    RECORDING = 1


class RecordingSession:
    """start/stop 循环的状态机与时间累积

    不变量:
        - 一次 stop 完成后 total_time >= 0
        - persistent 模式下 start_time 一旦设定不再改变 (直到 reset)
    """

    def __init__(self, persistent: bool = False):
        self.persistent = persistent
        self.state = RecordingState.IDLE
        self.reset()

    # =========================================================================
    # 状态查询 / 前置条件
    # =========================================================================

    @property
    def is_recording(self) -> bool:
        return self.state == RecordingState.RECORDING

    def require_idle(self, op: str) -> None:
        if self.is_recording:
            raise MonitorStateError(f"{op} 只能在录制停止时调用")

    def require_recording(self, op: str) -> None:
        if not self.is_recording:
            raise MonitorStateError(f"{op} 只能在录制进行中调用")

    # =========================================================================
    # 状态转移
    # =========================================================================

    def reset(self) -> None:
        """所有计时字段恢复为未设定"""
        self.require_idle("reset")
        self.start_time = UNSET
        self.last_start_time = UNSET
        self.stop_time = UNSET
        self.accumulated_time = 0
        self.total_time = UNSET

    def start(self, now: int) -> None:
        """IDLE → RECORDING

        快照模式下调用方应先清空数据 (SpikeMonitor.start_recording 负责)。
        """
        self.require_idle("start")

        if self.persistent:
            # 只有第一次 start 设定起点
            if self.start_time < 0:
                self.start_time = now
            self.last_start_time = now
            self.accumulated_time = self.total_time if self.total_time > 0 else 0
        else:
            self.start_time = now
            self.last_start_time = now
            self.accumulated_time = 0

        self.state = RecordingState.RECORDING

    def stop(self, now: int) -> int:
        """RECORDING → IDLE

        Returns:
            本次 stop 后的 total_time (ms)
        """
        self.require_recording("stop")
        if self.start_time < 0 or self.last_start_time < 0 or self.accumulated_time < 0:
            raise TimingConsistencyError(
                f"计时字段未初始化: start={self.start_time}, "
                f"last_start={self.last_start_time}, accum={self.accumulated_time}"
            )

        total = now - self.last_start_time + self.accumulated_time
        if total < 0:
            raise TimingConsistencyError(
                f"total_time < 0: stop={now}, last_start={self.last_start_time}, "
                f"accum={self.accumulated_time}"
            )

        self.stop_time = now
        self.total_time = total
        self.state = RecordingState.IDLE
        return total

    def __repr__(self) -> str:
        return (f"RecordingSession(state={self.state.name}, "
                f"persistent={self.persistent}, total={self.total_time}ms)")
