"""
契约违规异常

监视器只有两类错误:
- 契约违规 (调用状态错误 / 神经元 ID 越界 / 区间参数非法 / 计时不一致):
  立即抛出, 调用方必须修正驱动逻辑
- 环境错误 (日志文件写失败 / 重复绑定): 只记录日志, 不抛出

本模块只定义第一类。
"""


class ContractViolation(RuntimeError):
    """驱动方违反了 SpikeMonitor 的调用契约"""


class MonitorStateError(ContractViolation):
    """在错误的录制状态下调用 (如录制中查询统计, 空闲时推送脉冲)"""


class NeuronIndexError(ContractViolation, IndexError):
    """神经元 ID 不在 [0, neuron_count) 内"""


class InvalidRangeError(ContractViolation, ValueError):
    """发放率区间非法 (要求 max >= min >= 0)"""


class EventModeError(ContractViolation):
    """当前事件表示不支持该操作 (如非 AER 模式下查询脉冲时间)"""


class TimingConsistencyError(ContractViolation):
    """录制计时字段内部不一致 (如 total_time < 0)"""
