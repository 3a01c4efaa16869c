"""
Layer 3: Sim — 参考仿真驱动

SpikeBus 实现 SimulationContext: 时钟, 神经元组注册, 脉冲缓冲与 flush。
"""

from spikemon.sim.spike_bus import SpikeBus

__all__ = [
    "SpikeBus",
]
