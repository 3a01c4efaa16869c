"""
Layer 0: Spike — 脉冲事件与存储

不依赖任何其他 spikemon 子包 (errors 除外)。

主要组件:
- EventMode: 事件表示枚举 (目前只有 AER)
- Spike: 脉冲事件数据结构
- SpikeEventStore: 逐神经元脉冲时间存储
"""

from spikemon.spike.spike import EventMode, Spike
from spikemon.spike.spike_store import SpikeEventStore

__all__ = [
    "EventMode",
    "Spike",
    "SpikeEventStore",
]
