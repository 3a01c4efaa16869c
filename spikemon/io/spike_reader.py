"""
SpikeReader — 读取 SpikeMonitor 生成的脉冲文件

文件布局见 spikemon.monitor.log_writer:
    int32 签名 + float32 版本号, 之后是 (time_ms, neuron_id) int32 对。

读取结果两种形式:
- AER:    int32[2, n_spikes], 第 0 行时间, 第 1 行神经元 ID
- 分箱:   int64[n_bins, n_neurons], 每 frame_dur ms 一个时间箱
"""

import logging
from os import PathLike
from typing import Union

import numpy as np

from spikemon.monitor.log_writer import (
    SPIKE_FILE_SIGNATURE,
    SPIKE_FILE_VERSION,
    HEADER_DTYPE,
    AER_RECORD_DTYPE,
)

logger = logging.getLogger(__name__)


class SpikeFileFormatError(ValueError):
    """文件签名或版本号不匹配, 或记录被截断"""


class SpikeReader:
    """脉冲文件读取器

    构造时打开文件并校验文件头, close() 或 with 块结束时关闭。
    """

    def __init__(self, path: Union[str, PathLike]):
        self.path = path
        self._fh = open(path, "rb")
        try:
            self.signature, self.version = self._read_header()
        except SpikeFileFormatError:
            self._fh.close()
            raise

    def _read_header(self):
        raw = self._fh.read(HEADER_DTYPE.itemsize)
        if len(raw) < HEADER_DTYPE.itemsize:
            raise SpikeFileFormatError(f"{self.path}: 文件头不完整")
        header = np.frombuffer(raw, dtype=HEADER_DTYPE)[0]

        signature = int(header["signature"])
        if signature != SPIKE_FILE_SIGNATURE:
            raise SpikeFileFormatError("Unknown file type")

        version = float(header["version"])
        if version != SPIKE_FILE_VERSION:
            raise SpikeFileFormatError(
                f"Unknown file version, must have Version {SPIKE_FILE_VERSION} "
                f"(Version {version} found)"
            )
        return signature, version

    def read_aer(self) -> np.ndarray:
        """读取全部记录, 返回 int32[2, n]"""
        self._fh.seek(HEADER_DTYPE.itemsize)
        raw = self._fh.read()
        extra = len(raw) % AER_RECORD_DTYPE.itemsize
        if extra:
            logger.warning("SpikeReader: %s 末尾有 %d 字节不完整记录, 已忽略", self.path, extra)
            raw = raw[:len(raw) - extra]
        records = np.frombuffer(raw, dtype=AER_RECORD_DTYPE)
        return np.vstack([records["time"], records["neuron_id"]]).astype(np.int32)

    def read_spikes(self, frame_dur: int = 1000) -> np.ndarray:
        """读取脉冲并按 frame_dur ms 分箱

        Args:
            frame_dur: 时间箱宽度 (ms); < 0 时返回 AER 形式 [times; ids]

        Returns:
            frame_dur < 0: int32[2, n_spikes]
            否则:          int64[n_bins, n_neurons], 元素为该箱内的脉冲数
        """
        aer = self.read_aer()
        if frame_dur < 0:
            return aer
        if frame_dur == 0:
            raise ValueError("frame_dur 不能为 0")
        if aer.shape[1] == 0:
            return np.zeros((0, 0), dtype=np.int64)

        bins = aer[0] // frame_dur
        ids = aer[1]
        spk = np.zeros((int(bins.max()) + 1, int(ids.max()) + 1), dtype=np.int64)
        np.add.at(spk, (bins, ids), 1)
        return spk

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"SpikeReader({self.path!r}, version={self.version})"
