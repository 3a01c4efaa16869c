"""
Layer 1-2: Monitor — 录制状态机, 发放率统计, 日志文件头

主要组件:
- RecordingSession: start/stop 状态机 + 计时 (快照/持续两种模式)
- FiringRateAnalyzer: 发放率统计 (双脏标志缓存)
- SpikeLogWriter: 二进制日志文件头
- SpikeMonitor: 单个神经元组的查询接口
- SimulationContext: 仿真上下文协议
"""

from spikemon.monitor.config import MonitorConfig
from spikemon.monitor.context import SimulationContext
from spikemon.monitor.session import RecordingSession, RecordingState
from spikemon.monitor.analyzer import FiringRateAnalyzer
from spikemon.monitor.log_writer import (
    SpikeLogWriter,
    SPIKE_FILE_SIGNATURE,
    SPIKE_FILE_VERSION,
    HEADER_DTYPE,
    AER_RECORD_DTYPE,
)
from spikemon.monitor.spike_monitor import SpikeMonitor

__all__ = [
    "MonitorConfig",
    "SimulationContext",
    "RecordingSession",
    "RecordingState",
    "FiringRateAnalyzer",
    "SpikeLogWriter",
    "SPIKE_FILE_SIGNATURE",
    "SPIKE_FILE_VERSION",
    "HEADER_DTYPE",
    "AER_RECORD_DTYPE",
    "SpikeMonitor",
]
