"""
FiringRateAnalyzer 验证测试

测试发放率计算与双脏标志缓存:
1. 单神经元 3 个脉冲 / 1000ms → 3.0 Hz
2. 排序缓存非递减, max/min 与未排序结果一致
3. 缓存幂等, 脏标志依赖顺序
4. total_time == 0 → 全零 + 警告
5. 区间计数 / 沉默比例 / 非法区间
6. 样本标准差
7. 录制中查询被拒绝
8. 非有限区间端点被拒绝
"""

import sys
import os
import logging
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from conftest import capture_logs, print_header, run_cases

from spikemon.errors import InvalidRangeError, MonitorStateError
from spikemon.spike.spike_store import SpikeEventStore
from spikemon.monitor.session import RecordingSession
from spikemon.monitor.analyzer import FiringRateAnalyzer


def make_analyzer(spike_times, duration, start=0):
    """按 {neuron_id: [times]} 录制一个窗口, 返回停止后的 analyzer"""
    n = len(spike_times)
    store = SpikeEventStore(n)
    session = RecordingSession()
    analyzer = FiringRateAnalyzer(store, session)
    session.start(start)
    for i, times in enumerate(spike_times):
        for t in times:
            store.push(i, t)
    session.stop(start + duration)
    analyzer.invalidate()
    return analyzer


def test_case_1_single_neuron_rate():
    """Case 1: 单神经元 [10, 20, 30] / 1000ms"""
    print_header("Case 1: 单神经元发放率")

    an = make_analyzer([[10, 20, 30]], 1000)
    assert an.neuron_spike_count(0) == 3
    assert an.neuron_mean_rate(0) == pytest.approx(3.0)
    assert an.mean_rate() == pytest.approx(3.0)
    assert an.std_rate() == 0.0, "单神经元标准差应为 0"
    print(f"  rate = {an.neuron_mean_rate(0):.2f} Hz")
    print(f"  ✅ PASS")


def test_case_2_sorted_rates():
    """Case 2: 排序缓存"""
    print_header("Case 2: 排序发放率")

    an = make_analyzer([[1, 2, 3, 4], [], [5], [6, 7]], 500)
    rates = an.all_rates()
    srt = an.all_rates_sorted()

    np.testing.assert_allclose(rates, [8.0, 0.0, 2.0, 4.0])
    assert np.all(np.diff(srt) >= 0), "排序结果必须非递减"
    assert an.max_rate() == pytest.approx(rates.max())
    assert an.min_rate() == pytest.approx(rates.min())
    print(f"  rates  = {rates}")
    print(f"  sorted = {srt}")
    print(f"  ✅ PASS")


def test_case_3_cache_flags():
    """Case 3: 缓存幂等 + 脏标志依赖顺序"""
    print_header("Case 3: 缓存")

    an = make_analyzer([[1], [2, 3], []], 1000)
    assert an.rates_dirty and an.sorted_dirty

    an.compute_rates()
    assert not an.rates_dirty
    assert an.sorted_dirty, "rates 重算后 sorted 仍需重算"

    first = an.all_rates_sorted()
    second = an.all_rates_sorted()
    np.testing.assert_array_equal(first, second)
    assert not an.sorted_dirty

    # 返回副本, 调用方修改不影响缓存
    first[:] = -1
    np.testing.assert_array_equal(an.all_rates_sorted(), second)

    an.invalidate()
    assert an.rates_dirty and an.sorted_dirty
    print(f"  ✅ PASS")


def test_case_4_zero_duration():
    """Case 4: 零时长窗口不除零"""
    print_header("Case 4: total_time == 0")

    with capture_logs("spikemon.monitor.analyzer", logging.WARNING) as logs:
        an = make_analyzer([[5], [5, 5]], 0)
        rates = an.all_rates()

    assert an.total_time == 0
    np.testing.assert_array_equal(rates, [0.0, 0.0])
    assert an.mean_rate() == 0.0
    assert an.std_rate() == 0.0
    assert an.neuron_mean_rate(1) == 0.0
    assert not an.rates_dirty
    assert any("total_time == 0" in m for m in logs.messages)
    print(f"  ✅ PASS: 零时长返回 0 并记录警告")


def test_case_5_range_counts():
    """Case 5: 区间计数"""
    print_header("Case 5: 区间计数")

    # 1000ms 窗口: rates = [0, 1, 2, 2, 5]
    an = make_analyzer([[], [1], [1, 2], [3, 4], [1, 2, 3, 4, 5]], 1000)

    assert an.count_in_range(0, 0) == 1
    assert an.silent_count() == 1
    assert an.count_in_range(1, 2) == 3, "闭区间两端都包含"
    assert an.count_in_range(2, 2) == 2
    assert an.count_in_range(2.5, 4.9) == 0
    assert an.count_in_range(0, 100) == 5

    # 与线性扫描一致
    rates = an.all_rates()
    for lo, hi in [(0, 0), (0.5, 2), (2, 5), (3, 3)]:
        expected = int(np.sum((rates >= lo) & (rates <= hi)))
        assert an.count_in_range(lo, hi) == expected

    assert an.percent_silent() == pytest.approx(20.0)
    assert an.percent_silent() == pytest.approx(an.count_in_range(0, 0) * 100.0 / 5)
    assert an.percent_in_range(1, 2) == pytest.approx(60.0)

    with pytest.raises(InvalidRangeError):
        an.count_in_range(3, 1)
    with pytest.raises(ValueError):
        an.count_in_range(-1, 1)
    print(f"  ✅ PASS")


def test_case_6_sample_std():
    """Case 6: 样本标准差 (ddof=1)"""
    print_header("Case 6: 标准差")

    an = make_analyzer([[1], [1, 2, 3]], 1000)
    # rates = [1, 3], mean 2, 样本方差 = (1 + 1) / 1 = 2
    assert an.std_rate() == pytest.approx(np.sqrt(2.0))
    print(f"  std = {an.std_rate():.4f}")
    print(f"  ✅ PASS")


def test_case_7_queries_need_idle():
    """Case 7: 录制中查询被拒绝"""
    print_header("Case 7: 录制中查询")

    store = SpikeEventStore(2)
    session = RecordingSession()
    an = FiringRateAnalyzer(store, session)
    session.start(0)
    for query in (an.mean_rate, an.std_rate, an.all_rates, an.all_rates_sorted,
                  an.max_rate, an.min_rate, an.silent_count, an.percent_silent,
                  an.population_spike_count):
        with pytest.raises(MonitorStateError):
            query()
    with pytest.raises(MonitorStateError):
        an.neuron_mean_rate(0)
    with pytest.raises(MonitorStateError):
        an.count_in_range(0, 1)
    print(f"  ✅ PASS")


def test_case_8_non_finite_bounds():
    """Case 8: NaN / inf 区间端点被拒绝"""
    print_header("Case 8: 非有限区间端点")

    an = make_analyzer([[1], []], 1000)
    for lo, hi in [(float("nan"), 1.0), (0.0, float("nan")),
                   (float("nan"), float("nan")), (0.0, float("inf"))]:
        with pytest.raises(InvalidRangeError):
            an.count_in_range(lo, hi)
        with pytest.raises(InvalidRangeError):
            an.percent_in_range(lo, hi)
    assert an.count_in_range(0, 1) == 2
    print(f"  ✅ PASS")


if __name__ == "__main__":
    run_cases("spikemon FiringRateAnalyzer 发放率统计验证测试", [
        ("Case 1: 单神经元发放率", test_case_1_single_neuron_rate),
        ("Case 2: 排序发放率", test_case_2_sorted_rates),
        ("Case 3: 缓存", test_case_3_cache_flags),
        ("Case 4: total_time == 0", test_case_4_zero_duration),
        ("Case 5: 区间计数", test_case_5_range_counts),
        ("Case 6: 标准差", test_case_6_sample_std),
        ("Case 7: 录制中查询", test_case_7_queries_need_idle),
        ("Case 8: 非有限区间端点", test_case_8_non_finite_bounds),
    ])
