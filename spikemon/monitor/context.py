"""
仿真上下文协议 (依赖反转: monitor/ 不导入 sim/ 的具体实现)

SpikeMonitor 只依赖这组窄接口:
- now():               当前仿真时间 (ms)
- neuron_count_of(g):  神经元组 g 的神经元数
- group_name(g):       组名 (仅用于诊断输出)
- flush(g):            把组 g 缓冲中的脉冲送进监视器 (状态切换前必须调用)
- diagnostic_sink():   诊断日志
"""

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class SimulationContext(Protocol):
    """任何能驱动 SpikeMonitor 的仿真对象 (如 SpikeBus)"""

    def now(self) -> int: ...

    def neuron_count_of(self, group_id: int) -> int: ...

    def group_name(self, group_id: int) -> str: ...

    def flush(self, group_id: int) -> None: ...

    def diagnostic_sink(self) -> logging.Logger: ...
