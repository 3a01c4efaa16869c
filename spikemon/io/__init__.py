"""
IO: 脉冲文件读取
"""

from spikemon.io.spike_reader import SpikeReader, SpikeFileFormatError

__all__ = [
    "SpikeReader",
    "SpikeFileFormatError",
]
