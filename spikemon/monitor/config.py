"""
SpikeMonitor 参数包
"""

from dataclasses import dataclass

from spikemon.spike.spike import EventMode


@dataclass
class MonitorConfig:
    """监视器参数包

    persistent:
      False: 快照模式, 每次 start_recording 自动 clear, 只统计最后一个窗口
      True:  持续模式, 多个 start/stop 窗口累积为一次连续估计
    """
    persistent: bool = False
    event_mode: EventMode = EventMode.AER
    spike_times_per_row: int = 7     # print() 每行显示的脉冲时间数
