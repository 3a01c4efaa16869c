"""
spikemon Visualization Tools

Spike raster plots and firing-rate histograms for idle SpikeMonitors.
"""

import logging

import numpy as np
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


GROUP_COLORS = ['#1f77b4', '#F44336', '#4CAF50', '#FF9800',
                '#9C27B0', '#009688', '#795548', '#607D8B']


def _get_color(i):
    return GROUP_COLORS[i % len(GROUP_COLORS)]


# =============================================================================
# Spike Raster Plot
# =============================================================================
def plot_raster(monitors, duration=None, figsize=(14, 8), save_path=None):
    """
    Plot spike raster for multiple neuron groups.

    Args:
        monitors: dict of {group_name: SpikeMonitor}, all stopped
        duration: total timesteps (for x-axis)
        figsize: figure size
        save_path: if provided, save figure to this path
    """
    n_groups = len(monitors)
    fig, axes = plt.subplots(n_groups, 1, figsize=figsize, sharex=True, squeeze=False)
    axes = axes[:, 0]

    for i, (ax, (name, mon)) in enumerate(zip(axes, monitors.items())):
        times, neurons = mon.store.to_raster()
        color = _get_color(i)
        n_neurons = mon.neuron_count

        ax.scatter(times, neurons, s=0.3, c=color, alpha=0.6, rasterized=True)
        ax.set_ylabel(f'{name}\n({n_neurons}n)', fontsize=8, rotation=0,
                      ha='right', va='center')
        ax.set_ylim(-1, n_neurons)
        ax.set_yticks([])
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)

        total = mon.get_population_spike_count()
        rate = mon.get_population_mean_rate()
        ax.text(0.98, 0.85, f'{total} ({rate:.1f} Hz)', transform=ax.transAxes,
                fontsize=7, ha='right', color=color, alpha=0.8)

    if duration:
        axes[-1].set_xlim(0, duration)
    axes[-1].set_xlabel('Time (ms)')
    fig.suptitle('Spike Raster', fontsize=12, fontweight='bold')
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info('Saved: %s', save_path)
    return fig


# =============================================================================
# Firing Rate Histogram
# =============================================================================
def plot_rate_histogram(monitor, bins=20, figsize=(6, 4), save_path=None):
    """
    Histogram of per-neuron mean firing rates for one group.

    Args:
        monitor: stopped SpikeMonitor
        bins: number of histogram bins
    """
    rates = monitor.get_all_rates()
    fig, ax = plt.subplots(figsize=figsize)

    ax.hist(rates, bins=bins, color=_get_color(monitor.group_id), alpha=0.8)
    ax.axvline(np.mean(rates), color='k', linestyle='--', linewidth=1)
    ax.set_xlabel('Firing rate (Hz)')
    ax.set_ylabel('Neurons')
    ax.set_title(f'{monitor.context.group_name(monitor.group_id)}: '
                 f'{monitor.get_percent_silent():.1f}% silent', fontsize=10)
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info('Saved: %s', save_path)
    return fig
