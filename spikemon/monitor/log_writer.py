"""
Layer 1: SpikeLogWriter — 脉冲日志文件头

脉冲文件布局 (全部小端):

    偏移  类型      内容
    0     int32     签名 206661989
    4     float32   版本号 1.0
    8     int32[2]  AER 记录 (time_ms, neuron_id), 重复直到文件结束

Writer 只负责文件头; AER 记录由仿真驱动方 (SpikeBus) 追加。
每个 sink 文件头至多写一次。
"""

import logging
from typing import BinaryIO, Optional

import numpy as np

logger = logging.getLogger(__name__)


SPIKE_FILE_SIGNATURE = 206661989
SPIKE_FILE_VERSION = 1.0

HEADER_DTYPE = np.dtype([("signature", "<i4"), ("version", "<f4")])
AER_RECORD_DTYPE = np.dtype([("time", "<i4"), ("neuron_id", "<i4")])


def encode_header(signature: int = SPIKE_FILE_SIGNATURE,
                  version: float = SPIKE_FILE_VERSION) -> bytes:
    return np.array([(signature, version)], dtype=HEADER_DTYPE).tobytes()


def encode_aer_records(times, neuron_ids) -> bytes:
    records = np.empty(len(times), dtype=AER_RECORD_DTYPE)
    records["time"] = times
    records["neuron_id"] = neuron_ids
    return records.tobytes()


class SpikeLogWriter:
    """独占持有一个二进制输出 sink, 负责写文件头

    sink 是任何带 write() 的二进制对象 (打开的文件, BytesIO, ...)。
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.sink: Optional[BinaryIO] = None
        self.header_written = False

    @property
    def is_bound(self) -> bool:
        return self.sink is not None

    def bind(self, sink: BinaryIO) -> None:
        """绑定新的 sink 并立即写文件头

        已绑定时只报错不抛出: 关闭旧 sink, 换成新的, 文件头重新写。
        重复绑定同一个 sink 时不关闭, 文件头也不重复写。
        前置条件 (录制停止) 由 SpikeMonitor 检查。
        """
        if self.sink is not None:
            self.log.error("SpikeLogWriter: bind 已经被调用过")
            if sink is self.sink:
                self.write_header()
                return
            self.close()

        self.sink = sink
        self.header_written = False
        self.write_header()

    def write_header(self) -> None:
        """写文件头; 当前 sink 已写过则跳过"""
        if self.header_written or self.sink is None:
            return

        try:
            self.sink.write(encode_header())
        except (OSError, ValueError) as e:
            # ValueError: sink 已关闭
            self.log.error("SpikeLogWriter: write_header 写入失败: %s", e)

        # 写失败也不重试
        self.header_written = True

    def write_records(self, times, neuron_ids) -> None:
        """追加 AER 记录 (由驱动方调用)"""
        if self.sink is None or len(times) == 0:
            return
        try:
            self.sink.write(encode_aer_records(times, neuron_ids))
        except (OSError, ValueError) as e:
            self.log.error("SpikeLogWriter: write_records 写入失败: %s", e)

    def close(self) -> None:
        if self.sink is None:
            return
        try:
            self.sink.close()
        except OSError as e:
            self.log.error("SpikeLogWriter: 关闭 sink 失败: %s", e)
        self.sink = None
        self.header_written = False

    def __repr__(self) -> str:
        return (f"SpikeLogWriter(bound={self.is_bound}, "
                f"header_written={self.header_written})")
