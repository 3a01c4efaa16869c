"""
Layer 1: FiringRateAnalyzer — 发放率统计

从 (SpikeEventStore, RecordingSession.total_time) 派生:
- 逐神经元平均发放率 rates[i] = count[i] * 1000 / total_time  (ms → Hz)
- 排序后的发放率 (用于 max/min/区间计数)
- 群体均值 / 标准差 / 沉默比例

两级缓存, 用两个显式脏标志维护:
    rates_dirty  ──→  sorted_dirty
    (排序缓存依赖未排序缓存, 所以 rates_dirty 时 sorted_dirty 必为 True)

缓存重算只依赖 store 中的事件和 total_time, 不产生其他副作用。
"""

import logging
from typing import Optional

import numpy as np

from spikemon.errors import InvalidRangeError
from spikemon.spike.spike_store import SpikeEventStore
from spikemon.monitor.session import RecordingSession

logger = logging.getLogger(__name__)


class FiringRateAnalyzer:
    """发放率统计 + 脏标志缓存

    所有统计查询都要求录制处于停止状态。
    """

    def __init__(self, store: SpikeEventStore, session: RecordingSession,
                 log: Optional[logging.Logger] = None):
        self.store = store
        self.session = session
        self.log = log or logger

        n = store.neuron_count
        self._rates = np.zeros(n)
        self._rates_sorted = np.zeros(n)
        self.rates_dirty = True
        self.sorted_dirty = True

    @property
    def neuron_count(self) -> int:
        return self.store.neuron_count

    @property
    def total_time(self) -> int:
        return self.session.total_time

    # =========================================================================
    # 缓存维护
    # =========================================================================

    def invalidate(self) -> None:
        """标记两级缓存都需要重算"""
        self.rates_dirty = True
        self.sorted_dirty = True

    def reset(self) -> None:
        """缓存清零并标脏 (用于 clear)"""
        self._rates.fill(0.0)
        self._rates_sorted.fill(0.0)
        self.invalidate()

    def compute_rates(self) -> None:
        """必要时重算逐神经元发放率"""
        if not self.rates_dirty:
            return

        counts = self.store.spike_counts()

        # 每次都从零开始, 保证结果可重复
        self._rates = np.zeros(self.neuron_count)
        self.sorted_dirty = True

        if self.total_time == 0:
            self.log.warning("FiringRateAnalyzer: compute_rates 遇到 total_time == 0, "
                             "发放率全部置 0")
        elif self.total_time > 0:
            self._rates = counts * 1000.0 / self.total_time

        self.rates_dirty = False

    def compute_sorted_rates(self) -> None:
        """必要时重算排序后的发放率 (升序)"""
        if not self.sorted_dirty:
            return
        self.compute_rates()
        self._rates_sorted = np.sort(self._rates)
        self.sorted_dirty = False

    # =========================================================================
    # 群体统计
    # =========================================================================

    def all_rates(self) -> np.ndarray:
        self.session.require_idle("all_rates")
        self.compute_rates()
        return self._rates.copy()

    def all_rates_sorted(self) -> np.ndarray:
        self.session.require_idle("all_rates_sorted")
        self.compute_sorted_rates()
        return self._rates_sorted.copy()

    def population_spike_count(self) -> int:
        self.session.require_idle("population_spike_count")
        return self.store.total_spike_count()

    def mean_rate(self) -> float:
        """群体平均发放率 (Hz); total_time <= 0 时返回 0"""
        self.session.require_idle("mean_rate")
        if self.total_time <= 0:
            return 0.0
        return self.store.total_spike_count() * 1000.0 / (self.total_time * self.neuron_count)

    def std_rate(self) -> float:
        """逐神经元发放率的样本标准差 (除以 N-1); N <= 1 时返回 0"""
        self.session.require_idle("std_rate")
        if self.total_time <= 0 or self.neuron_count <= 1:
            return 0.0
        self.compute_rates()
        return float(np.std(self._rates, ddof=1))

    def max_rate(self) -> float:
        self.session.require_idle("max_rate")
        self.compute_sorted_rates()
        return float(self._rates_sorted[-1])

    def min_rate(self) -> float:
        self.session.require_idle("min_rate")
        self.compute_sorted_rates()
        return float(self._rates_sorted[0])

    # =========================================================================
    # 单神经元统计
    # =========================================================================

    def neuron_spike_count(self, neuron_id: int) -> int:
        self.session.require_idle("neuron_spike_count")
        return self.store.neuron_spike_count(neuron_id)

    def neuron_mean_rate(self, neuron_id: int) -> float:
        self.session.require_idle("neuron_mean_rate")
        count = self.store.neuron_spike_count(neuron_id)
        if self.total_time <= 0:
            return 0.0
        return count * 1000.0 / self.total_time

    # =========================================================================
    # 区间计数
    # =========================================================================

    def count_in_range(self, min_rate: float, max_rate: float) -> int:
        """发放率落在 [min_rate, max_rate] (闭区间) 的神经元数

        排序缓存上二分查找, 结果与线性扫描一致。
        """
        self.session.require_idle("count_in_range")
        if not (np.isfinite(min_rate) and np.isfinite(max_rate)):
            raise InvalidRangeError(f"区间端点必须是有限值, 得到 min={min_rate}, max={max_rate}")
        if min_rate < 0 or max_rate < 0 or max_rate < min_rate:
            raise InvalidRangeError(
                f"需要 max >= min >= 0, 得到 min={min_rate}, max={max_rate}"
            )
        self.compute_sorted_rates()
        lo = np.searchsorted(self._rates_sorted, min_rate, side="left")
        hi = np.searchsorted(self._rates_sorted, max_rate, side="right")
        return int(hi - lo)

    def silent_count(self) -> int:
        return self.count_in_range(0.0, 0.0)

    def percent_in_range(self, min_rate: float, max_rate: float) -> float:
        return self.count_in_range(min_rate, max_rate) * 100.0 / self.neuron_count

    def percent_silent(self) -> float:
        return self.silent_count() * 100.0 / self.neuron_count

    def __repr__(self) -> str:
        return (f"FiringRateAnalyzer(neurons={self.neuron_count}, "
                f"rates_dirty={self.rates_dirty}, sorted_dirty={self.sorted_dirty})")
