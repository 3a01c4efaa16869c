"""
Layer 2: SpikeMonitor — 单个神经元组的脉冲监视器

把四个组件绑定到一个神经元组和一个仿真上下文:

    SimulationContext ──(now / flush)──┐
                                       ▼
    SpikeEventStore ←─ push ─── SpikeMonitor ──→ SpikeLogWriter
           │                      │
           └──→ FiringRateAnalyzer ←── RecordingSession

状态切换顺序 (必须严格遵守):
    start_recording: [clear] → context.flush → 切换为 RECORDING
    stop_recording:  context.flush → 切换为 IDLE

flush 必须发生在状态翻转之前, 否则已经产生的脉冲与计时窗口不一致。

典型使用模式:
```python
bus = SpikeBus()
g = bus.register_group(100, "exc")
mon = bus.set_spike_monitor(g)

mon.start_recording()
for t in range(1000):
    ...                       # 神经元 step → bus.emit(Spike(i, t, g))
    bus.step(t + 1)
mon.stop_recording()

print(mon.get_population_mean_rate())
```
"""

import logging
from os import PathLike
from typing import BinaryIO, List, Optional, Union

import numpy as np

from spikemon.spike.spike import EventMode
from spikemon.spike.spike_store import SpikeEventStore
from spikemon.monitor.analyzer import FiringRateAnalyzer
from spikemon.monitor.config import MonitorConfig
from spikemon.monitor.context import SimulationContext
from spikemon.monitor.log_writer import SpikeLogWriter
from spikemon.monitor.session import RecordingSession


class SpikeMonitor:
    """单个神经元组的录制 + 发放率查询接口

    除 push_spike 外, 所有查询都要求录制处于停止状态;
    违反时抛出 MonitorStateError, 监视器状态保持不变。
    """

    def __init__(self, context: SimulationContext, group_id: int,
                 config: Optional[MonitorConfig] = None, monitor_id: int = 0):
        self.context = context
        self.config = config or MonitorConfig()
        self.monitor_id = monitor_id
        self._group_id = group_id
        self.log: logging.Logger = context.diagnostic_sink()

        n = context.neuron_count_of(group_id)
        if n <= 0:
            raise ValueError(f"神经元组 {group_id} 的神经元数必须 > 0, 得到 {n}")
        self._neuron_count = n

        self.store = SpikeEventStore(n, self.config.event_mode)
        self.session = RecordingSession(persistent=self.config.persistent)
        self.analyzer = FiringRateAnalyzer(self.store, self.session, self.log)
        self.writer = SpikeLogWriter(self.log)

    # =========================================================================
    # 基本属性
    # =========================================================================

    @property
    def group_id(self) -> int:
        return self._group_id

    @property
    def neuron_count(self) -> int:
        return self._neuron_count

    @property
    def mode(self) -> EventMode:
        return self.store.mode

    @property
    def is_recording(self) -> bool:
        return self.session.is_recording

    @property
    def persistent_mode(self) -> bool:
        return self.session.persistent

    @persistent_mode.setter
    def persistent_mode(self, value: bool) -> None:
        self.session.persistent = bool(value)

    # =========================================================================
    # 录制控制
    # =========================================================================

    def clear(self) -> None:
        """清空所有脉冲数据和计时, 缓存清零并标脏"""
        self.session.require_idle("clear")
        self.session.reset()
        self.store.clear()
        self.analyzer.reset()

    def start_recording(self) -> None:
        self.session.require_idle("start_recording")

        if not self.session.persistent:
            self.clear()

        # 必须在切换为 RECORDING 之前
        self.context.flush(self._group_id)

        self.analyzer.invalidate()
        self.session.start(self.context.now())

    def stop_recording(self) -> None:
        self.session.require_recording("stop_recording")

        # 必须在切换为 IDLE 之前
        self.context.flush(self._group_id)

        self.session.stop(self.context.now())

    def push_spike(self, neuron_id: int, time: int) -> None:
        """记录一个脉冲 (只能在录制中调用)"""
        self.session.require_recording("push_spike")
        self.store.push(neuron_id, time)

    # =========================================================================
    # 日志文件
    # =========================================================================

    def set_spike_file(self, sink: Union[BinaryIO, str, PathLike]) -> None:
        """绑定二进制日志输出并写文件头

        Args:
            sink: 已打开的二进制对象, 或文件路径 (以 'wb' 打开, 归监视器所有)
        """
        self.session.require_idle("set_spike_file")
        if isinstance(sink, (str, PathLike)):
            sink = open(sink, "wb")
        self.writer.bind(sink)

    def close(self) -> None:
        """关闭仍然打开的日志 sink"""
        self.writer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # =========================================================================
    # 计时查询
    # =========================================================================

    def get_recording_total_time(self) -> int:
        self.session.require_idle("get_recording_total_time")
        return self.session.total_time

    def get_recording_start_time(self) -> int:
        self.session.require_idle("get_recording_start_time")
        return self.session.start_time

    def get_recording_last_start_time(self) -> int:
        self.session.require_idle("get_recording_last_start_time")
        return self.session.last_start_time

    def get_recording_stop_time(self) -> int:
        self.session.require_idle("get_recording_stop_time")
        return self.session.stop_time

    # =========================================================================
    # 发放率查询
    # =========================================================================

    def get_population_mean_rate(self) -> float:
        return self.analyzer.mean_rate()

    def get_population_std_rate(self) -> float:
        return self.analyzer.std_rate()

    def get_population_spike_count(self) -> int:
        return self.analyzer.population_spike_count()

    def get_all_rates(self) -> np.ndarray:
        return self.analyzer.all_rates()

    def get_all_rates_sorted(self) -> np.ndarray:
        return self.analyzer.all_rates_sorted()

    def get_max_rate(self) -> float:
        return self.analyzer.max_rate()

    def get_min_rate(self) -> float:
        return self.analyzer.min_rate()

    def get_neuron_mean_rate(self, neuron_id: int) -> float:
        return self.analyzer.neuron_mean_rate(neuron_id)

    def get_neuron_spike_count(self, neuron_id: int) -> int:
        return self.analyzer.neuron_spike_count(neuron_id)

    def get_count_in_range(self, min_rate: float, max_rate: float) -> int:
        return self.analyzer.count_in_range(min_rate, max_rate)

    def get_silent_count(self) -> int:
        return self.analyzer.silent_count()

    def get_percent_in_range(self, min_rate: float, max_rate: float) -> float:
        return self.analyzer.percent_in_range(min_rate, max_rate)

    def get_percent_silent(self) -> float:
        return self.analyzer.percent_silent()

    def get_spike_times(self) -> List[np.ndarray]:
        """逐神经元脉冲时间的只读快照 (二维: 神经元 × 时间)"""
        self.session.require_idle("get_spike_times")
        return self.store.snapshot()

    # =========================================================================
    # 诊断输出
    # =========================================================================

    def print(self, include_spike_times: bool = False) -> None:
        """输出群体汇总; 可选逐神经元发放率和脉冲时间列表"""
        self.session.require_idle("print")

        self.log.info(
            "(t=%.3fs) SpikeMonitor #%d for group %s(%d) has %d spikes in %d ms "
            "(%.2f +/- %.2f Hz)",
            self.context.now() / 1000.0,
            self.monitor_id,
            self.context.group_name(self._group_id),
            self._group_id,
            self.get_population_spike_count(),
            self.session.total_time,
            self.get_population_mean_rate(),
            self.get_population_std_rate(),
        )

        if not (include_spike_times and self.mode.has_spike_times):
            return

        per_row = self.config.spike_times_per_row
        self.log.info("| Neur ID | Rate (Hz) | Spike Times (ms)")
        self.log.info("|- - - - -|- - - - - -|- - - - - - - - - - - - - - - - -")
        for i, times in enumerate(self.store.snapshot()):
            prefix = f"| {i:7d} | {self.get_neuron_mean_rate(i):9.2f} | "
            rows = [times[j:j + per_row] for j in range(0, len(times), per_row)] or [times]
            for k, row in enumerate(rows):
                lead = prefix if k == 0 else "|         |           | "
                self.log.info("%s%s", lead, "".join(f"{t:8d}" for t in row))

    def __repr__(self) -> str:
        return (f"SpikeMonitor(id={self.monitor_id}, group={self._group_id}, "
                f"neurons={self._neuron_count}, "
                f"recording={self.is_recording}, persistent={self.persistent_mode})")
