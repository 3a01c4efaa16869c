"""
Layer 3: SpikeBus — 仿真时钟 + 脉冲缓冲

SpikeBus 是 SpikeMonitor 的参考驱动方 (实现 SimulationContext):
1. 神经元组注册到总线, 获得 group_id
2. 神经元发放时, 将 Spike 事件提交到总线 (emit), 先进入该组的缓冲
3. 总线自己决定何时 flush: 每 flush_interval ms 仿真时间一次,
   或者监视器在状态切换前主动调用 flush(group_id)

flush 时:
- 缓冲中的脉冲作为 AER 记录追加到监视器的日志文件 (如已绑定)
- 监视器在录制中时, 脉冲被推入其 store; 否则丢弃
- 缓冲清空

设计原则:
- 分发顺序 = emit 顺序 (FIFO)
- 总线只做转发, 不修改 Spike 内容

典型使用模式:
```python
bus = SpikeBus()
g = bus.register_group(n_neurons=100, name="exc")
mon = bus.set_spike_monitor(g)
mon.start_recording()

for t in range(duration):
    for i in np.flatnonzero(pop.step(t)):
        bus.emit(Spike(int(i), t, g))
    bus.step(t + 1)

mon.stop_recording()
```
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from spikemon.errors import NeuronIndexError
from spikemon.spike.spike import Spike
from spikemon.monitor.config import MonitorConfig
from spikemon.monitor.spike_monitor import SpikeMonitor

logger = logging.getLogger(__name__)


class SpikeBus:
    """仿真时钟 + 按组缓冲的脉冲总线

    核心数据结构:
        _groups: list[(n_neurons, name)]
            group_id = 注册顺序下标

        _pending: dict[int, list[Spike]]
            group_id → 尚未 flush 的脉冲

        _monitors: dict[int, SpikeMonitor]
            group_id → 该组的监视器 (每组至多一个)
    """

    def __init__(self, flush_interval: int = 1000):
        if flush_interval <= 0:
            raise ValueError(f"flush_interval 必须 > 0, 得到 {flush_interval}")
        self.flush_interval = flush_interval

        self._time: int = 0
        self._last_flush: int = 0
        self._groups: List[tuple] = []
        self._pending: Dict[int, List[Spike]] = defaultdict(list)
        self._monitors: Dict[int, SpikeMonitor] = {}

        # 统计计数器
        self._total_emitted: int = 0
        self._total_delivered: int = 0

    # =========================================================================
    # 神经元组 / 监视器注册
    # =========================================================================

    def register_group(self, n_neurons: int, name: str = "") -> int:
        """注册一个神经元组, 返回 group_id"""
        if n_neurons <= 0:
            raise ValueError(f"n_neurons 必须 > 0, 得到 {n_neurons}")
        group_id = len(self._groups)
        self._groups.append((n_neurons, name or f"group{group_id}"))
        return group_id

    def set_spike_monitor(self, group_id: int,
                          config: Optional[MonitorConfig] = None) -> SpikeMonitor:
        """为神经元组创建监视器 (已存在则直接返回)"""
        self._check_group(group_id)
        if group_id in self._monitors:
            logger.warning("SpikeBus: group %d 已有监视器, 忽略新配置", group_id)
            return self._monitors[group_id]
        monitor = SpikeMonitor(self, group_id, config, monitor_id=len(self._monitors))
        self._monitors[group_id] = monitor
        return monitor

    def get_spike_monitor(self, group_id: int) -> Optional[SpikeMonitor]:
        return self._monitors.get(group_id)

    def _check_group(self, group_id: int) -> None:
        if not 0 <= group_id < len(self._groups):
            raise KeyError(f"未注册的 group_id: {group_id}")

    # =========================================================================
    # SimulationContext 接口
    # =========================================================================

    def now(self) -> int:
        return self._time

    def neuron_count_of(self, group_id: int) -> int:
        self._check_group(group_id)
        return self._groups[group_id][0]

    def group_name(self, group_id: int) -> str:
        self._check_group(group_id)
        return self._groups[group_id][1]

    def diagnostic_sink(self) -> logging.Logger:
        return logger

    def flush(self, group_id: int) -> int:
        """把该组缓冲的脉冲送入其监视器和日志

        Returns:
            推入监视器 store 的脉冲数
        """
        pending = self._pending.pop(group_id, None)
        if not pending:
            return 0

        monitor = self._monitors.get(group_id)
        if monitor is None:
            return 0

        monitor.writer.write_records(
            [s.timestamp for s in pending],
            [s.source_id for s in pending],
        )

        if not monitor.is_recording:
            return 0

        for spike in pending:
            monitor.push_spike(spike.source_id, spike.timestamp)
        self._total_delivered += len(pending)
        return len(pending)

    # =========================================================================
    # 脉冲提交与时钟
    # =========================================================================

    def emit(self, spike: Spike) -> None:
        """神经元发放后调用: 暂存到该组缓冲, 等待 flush

        source_id 在这里校验, 保证 flush 时整批脉冲都能被接受。
        """
        self._check_group(spike.group_id)
        n = self._groups[spike.group_id][0]
        if not 0 <= spike.source_id < n:
            raise NeuronIndexError(
                f"source_id {spike.source_id} 超出 group {spike.group_id} 的范围 [0, {n})"
            )
        self._pending[spike.group_id].append(spike)
        self._total_emitted += 1

    def flush_all(self) -> int:
        count = 0
        for group_id in list(self._pending):
            count += self.flush(group_id)
        self._last_flush = self._time
        return count

    def step(self, current_time: int) -> int:
        """把时钟推进到 current_time; 每 flush_interval ms 统一 flush

        Returns:
            本次推入监视器的脉冲数
        """
        if current_time < self._time:
            raise ValueError(f"时钟不能倒退: {self._time} → {current_time}")
        self._time = current_time
        if self._time - self._last_flush >= self.flush_interval:
            return self.flush_all()
        return 0

    def close(self) -> None:
        """关闭所有监视器的日志 sink"""
        for monitor in self._monitors.values():
            monitor.close()

    # =========================================================================
    # 状态查询
    # =========================================================================

    @property
    def pending_count(self) -> int:
        """当前待 flush 的脉冲数量"""
        return sum(len(spikes) for spikes in self._pending.values())

    @property
    def group_count(self) -> int:
        return len(self._groups)

    @property
    def total_emitted(self) -> int:
        return self._total_emitted

    @property
    def total_delivered(self) -> int:
        """累计推入监视器 store 的脉冲数"""
        return self._total_delivered

    def __repr__(self) -> str:
        return (
            f"SpikeBus(t={self._time}, groups={self.group_count}, "
            f"pending={self.pending_count}, "
            f"emitted={self.total_emitted}, "
            f"delivered={self.total_delivered})"
        )
