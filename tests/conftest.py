"""
测试共用工具

- ManualContext: 手动推进时钟的 SimulationContext 替身
- capture_logs: 收集指定 logger 的日志记录
- run_cases: 脚本方式运行时的结果汇总
"""

import sys
import os
import logging
from contextlib import contextmanager
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class ManualContext:
    """手动推进时钟的最小 SimulationContext

    flush 调用时记录监视器当时的录制状态, 用于验证 flush 先于状态翻转。
    """

    def __init__(self, n_neurons: int = 4, name: str = "test"):
        self.t = 0
        self.n_neurons = n_neurons
        self.name = name
        self.monitor = None
        self.flush_log = []
        self.buffered = []

    def now(self) -> int:
        return self.t

    def neuron_count_of(self, group_id: int) -> int:
        return self.n_neurons

    def group_name(self, group_id: int) -> str:
        return self.name

    def flush(self, group_id: int) -> None:
        recording = self.monitor.is_recording if self.monitor else None
        self.flush_log.append((self.t, recording))
        if self.monitor is not None and recording:
            for neuron_id, time in self.buffered:
                self.monitor.push_spike(neuron_id, time)
        self.buffered.clear()

    def diagnostic_sink(self) -> logging.Logger:
        return logging.getLogger("spikemon.tests")


class LogCapture(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)

    @property
    def messages(self):
        return [r.getMessage() for r in self.records]

    def has_level(self, level: int) -> bool:
        return any(r.levelno == level for r in self.records)


@contextmanager
def capture_logs(name=None, level=logging.DEBUG):
    """临时挂一个 handler 到 logger 上 (name=None 为 root)"""
    log = logging.getLogger(name)
    handler = LogCapture()
    old_level = log.level
    log.addHandler(handler)
    log.setLevel(level)
    try:
        yield handler
    finally:
        log.removeHandler(handler)
        log.setLevel(old_level)


def print_header(title: str):
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def run_cases(banner: str, tests) -> None:
    """依次运行 (name, fn), 打印汇总; 有失败时以状态码 1 退出"""
    print("╔══════════════════════════════════════════════════════════╗")
    print(f"║  {banner}")
    print("╚══════════════════════════════════════════════════════════╝")

    results = {}
    for name, test_fn in tests:
        try:
            test_fn()
            results[name] = "PASS"
        except Exception as e:
            results[name] = f"ERROR: {e!r}"
            import traceback
            traceback.print_exc()

    print_header("总结")
    all_pass = True
    for name, result in results.items():
        icon = "✅" if result == "PASS" else "❌"
        if result != "PASS":
            all_pass = False
        print(f"  {icon} {result}: {name}")

    print()
    if all_pass:
        print("🎉 所有测试通过!")
    else:
        print("❌ 存在失败的测试，请检查。")
        sys.exit(1)
