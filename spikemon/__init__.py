"""
spikemon — 神经元组脉冲录制与发放率分析

分层结构:
- Layer 0 spike/:   Spike 事件, EventMode, SpikeEventStore
- Layer 1 monitor/: RecordingSession, FiringRateAnalyzer, SpikeLogWriter
- Layer 2 monitor/: SpikeMonitor (查询接口)
- Layer 3 sim/:     SpikeBus (参考仿真驱动)
- io/:              SpikeReader (读取脉冲文件)
- viz:              raster / 发放率直方图 (matplotlib, 需显式导入)
"""

from spikemon.errors import (
    ContractViolation,
    MonitorStateError,
    NeuronIndexError,
    InvalidRangeError,
    EventModeError,
    TimingConsistencyError,
)
from spikemon.spike import EventMode, Spike, SpikeEventStore
from spikemon.monitor import (
    MonitorConfig,
    SimulationContext,
    RecordingSession,
    FiringRateAnalyzer,
    SpikeLogWriter,
    SpikeMonitor,
)
from spikemon.sim import SpikeBus
from spikemon.io import SpikeReader, SpikeFileFormatError

__version__ = "0.1.0"

__all__ = [
    "ContractViolation",
    "MonitorStateError",
    "NeuronIndexError",
    "InvalidRangeError",
    "EventModeError",
    "TimingConsistencyError",
    "EventMode",
    "Spike",
    "SpikeEventStore",
    "MonitorConfig",
    "SimulationContext",
    "RecordingSession",
    "FiringRateAnalyzer",
    "SpikeLogWriter",
    "SpikeMonitor",
    "SpikeBus",
    "SpikeReader",
    "SpikeFileFormatError",
]
