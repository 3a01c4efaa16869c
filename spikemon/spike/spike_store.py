"""
Layer 0: SpikeEventStore — 逐神经元脉冲时间存储

一个神经元组对应一个 store:
    _times[i] = 神经元 i 的脉冲时间列表 (ms, 按到达顺序 = 时间顺序)

store 本身不知道录制状态, 状态前置条件由 SpikeMonitor 检查;
这里只负责 ID 范围和事件表示的校验。
"""

from typing import List, Tuple
import numpy as np

from spikemon.errors import NeuronIndexError, EventModeError
from spikemon.spike.spike import EventMode


class SpikeEventStore:
    """单个神经元组的 AER 脉冲存储

    不变量:
        - len(_times) == neuron_count, 构造后不变
        - 不去重, 不排序 (调用方保证每个神经元的时间非递减)
    """

    def __init__(self, neuron_count: int, mode: EventMode = EventMode.AER):
        if neuron_count <= 0:
            raise ValueError(f"neuron_count 必须 > 0, 得到 {neuron_count}")
        self.neuron_count = neuron_count
        self.mode = mode
        self._times: List[List[int]] = [[] for _ in range(neuron_count)]

    # =========================================================================
    # 校验
    # =========================================================================

    def check_neuron_id(self, neuron_id: int) -> None:
        if not 0 <= neuron_id < self.neuron_count:
            raise NeuronIndexError(
                f"neuron_id {neuron_id} 超出范围 [0, {self.neuron_count})"
            )

    def _require_aer(self, op: str) -> None:
        if not self.mode.has_spike_times:
            raise EventModeError(f"{op} 需要 AER 模式, 当前为 {self.mode.name}")

    # =========================================================================
    # 写入
    # =========================================================================

    def push(self, neuron_id: int, time: int) -> None:
        """追加一个脉冲时间到指定神经元"""
        self._require_aer("push")
        self.check_neuron_id(neuron_id)
        self._times[neuron_id].append(int(time))

    def clear(self) -> None:
        """清空所有神经元的脉冲序列 (保留神经元数)"""
        for times in self._times:
            times.clear()

    # =========================================================================
    # 查询
    # =========================================================================

    def neuron_spike_count(self, neuron_id: int) -> int:
        self._require_aer("neuron_spike_count")
        self.check_neuron_id(neuron_id)
        return len(self._times[neuron_id])

    def total_spike_count(self) -> int:
        return sum(len(times) for times in self._times)

    def spike_counts(self) -> np.ndarray:
        """所有神经元的脉冲数, int64[N]"""
        self._require_aer("spike_counts")
        return np.fromiter((len(t) for t in self._times),
                           dtype=np.int64, count=self.neuron_count)

    def neuron_spike_times(self, neuron_id: int) -> List[int]:
        self._require_aer("neuron_spike_times")
        self.check_neuron_id(neuron_id)
        return list(self._times[neuron_id])

    def snapshot(self) -> List[np.ndarray]:
        """逐神经元脉冲时间的只读副本

        Returns:
            长度为 N 的列表, 每项是 int64 数组 (writeable=False)。
            之后的录制不会反映到返回值中。
        """
        self._require_aer("snapshot")
        out = []
        for times in self._times:
            arr = np.array(times, dtype=np.int64)
            arr.flags.writeable = False
            out.append(arr)
        return out

    def to_raster(self) -> Tuple[np.ndarray, np.ndarray]:
        """展平为 (times, neuron_ids), 用于 raster 绘图"""
        self._require_aer("to_raster")
        counts = self.spike_counts()
        if counts.sum() == 0:
            return np.zeros(0, dtype=np.int64), np.zeros(0, dtype=np.int64)
        times = np.concatenate([np.asarray(t, dtype=np.int64) for t in self._times])
        ids = np.repeat(np.arange(self.neuron_count, dtype=np.int64), counts)
        return times, ids

    def __len__(self) -> int:
        return self.neuron_count

    def __repr__(self) -> str:
        return (f"SpikeEventStore(neurons={self.neuron_count}, "
                f"spikes={self.total_spike_count()}, mode={self.mode.name})")
