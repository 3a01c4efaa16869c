"""
Layer 0: Spike 事件定义

Spike 是监视器接收的"原子"信号单元。

每个 Spike 携带:
- 源神经元在组内的 ID
- 时间戳 (ms)
- 所属神经元组 ID

EventMode 描述监视器内部的事件表示方式。
"""

from dataclasses import dataclass
from enum import IntEnum


# =============================================================================
# 事件表示
# =============================================================================

class EventMode(IntEnum):
    """脉冲事件表示方式

    - AER: Address Event Representation, 每个脉冲是一个 (神经元, 时间) 对,
           逐神经元保存完整脉冲时间列表

    预留扩展点: 分箱计数 (rate code) 之类的表示不支持逐神经元时间查询。
    """
    AER = 0

    @property
    def has_spike_times(self) -> bool:
        """该表示是否保留逐神经元的脉冲时间"""
        return self == EventMode.AER


# =============================================================================
# Spike 事件
# =============================================================================

@dataclass(frozen=True, slots=True)
class Spike:
    """单个脉冲事件

    frozen=True 确保 Spike 一旦创建不可修改 (事件不可变)。

    Attributes:
        source_id: 发放神经元在组内的 ID
        timestamp: 发放时间 (ms, 1步 = 1ms)
        group_id: 神经元组 ID
    """
    source_id: int
    timestamp: int
    group_id: int = 0
