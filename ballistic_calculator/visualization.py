"""
Visualization Engine
====================
Plots for a TrajectoryResult:
  1. Trajectory (altitude vs downrange)
  2. Velocity components and speed vs time
  3. Timestep comparison (same launch, several dt)
  4. Drag deceleration vs speed
  5. Animated trajectory (saved as GIF)

Non-finite samples (diverged runs) are dropped before plotting.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Dict
import os

from .drag_model import drag_curve
from .integrator import TrajectoryResult, GRAVITY
from .projectile import BallisticParameters, MUZZLE_VELOCITY


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
}

_LEGEND = dict(facecolor='#1a1a1a', edgecolor='#444',
               labelcolor=STYLE['text_color'])


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def finite_mask(result: TrajectoryResult) -> np.ndarray:
    """Boolean mask of samples whose position and velocity are finite."""
    return (np.isfinite(result.x) & np.isfinite(result.y)
            & np.isfinite(result.vx) & np.isfinite(result.vy))


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Trajectory
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult, save_path: str = None,
                    show: bool = False) -> plt.Figure:
    """Altitude vs downrange for a single run."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    ok = finite_mask(result)
    x, y = result.x[ok], result.y[ok]

    ax.plot(x, y, color=STYLE['accent_colors'][0], linewidth=2.5,
            label=f'dt={result.dt:g} s')
    ax.plot(0, 0, 'o', color='#00e676', markersize=10, label='Launch', zorder=5)
    if x.size:
        ax.plot(x[-1], y[-1], 'x', color='#ff5252', markersize=12,
                markeredgewidth=3, label='Last finite', zorder=5)
        idx_max = np.argmax(y)
        ax.plot(x[idx_max], y[idx_max], '^', color='#ffeb3b',
                markersize=10, label='Apex', zorder=5)

    title = (f'Trajectory — θ={result.conditions.elevation_deg:.1f}°, '
             f'v₀={result.conditions.muzzle_velocity:.0f} m/s, '
             f'BC={result.parameters.ballistic_coefficient:g}, '
             f'd={result.parameters.caliber:g} m')
    if result.diverged:
        title += f'  [diverged at step {result.divergence_index}]'
    ax.set_xlabel('Downrange (m)', fontsize=12)
    ax.set_ylabel('Altitude (m)', fontsize=12)
    ax.set_title(title, fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **_LEGEND)

    plt.tight_layout()
    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Velocity vs Time
# ══════════════════════════════════════════════════════════════════════════

def plot_velocity(result: TrajectoryResult, save_path: str = None) -> plt.Figure:
    """Speed and velocity components vs time."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 5))
    _apply_dark_style(fig, axes)
    ok = finite_mask(result)
    t = result.time[ok]

    ax = axes[0]
    ax.plot(t, result.speed[ok], color='#ff6b35', linewidth=2)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Speed (m/s)')
    ax.set_title('SPEED', fontweight='bold')

    ax = axes[1]
    ax.plot(t, result.vx[ok], label='vx (range)', color='#00d4ff', linewidth=1.5)
    ax.plot(t, result.vy[ok], label='vy (vertical)', color='#e040fb', linewidth=1.5)
    ax.axhline(y=0, color='#555', linestyle='--', alpha=0.5)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Velocity (m/s)')
    ax.set_title('VELOCITY COMPONENTS', fontweight='bold')
    ax.legend(fontsize=9, **_LEGEND)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Timestep Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_dt_comparison(results: Dict[float, TrajectoryResult],
                       save_path: str = None) -> plt.Figure:
    """Overlay runs of the same launch at different timesteps."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    for (dt, res), color in zip(sorted(results.items()),
                                STYLE['accent_colors']):
        ok = finite_mask(res)
        label = f'dt={dt:g} s' + (' (diverged)' if res.diverged else '')
        ax.plot(res.x[ok], res.y[ok], color=color, linewidth=2, label=label)

    ax.set_xlabel('Downrange (m)')
    ax.set_ylabel('Altitude (m)')
    ax.set_title('Timestep Comparison — Semi-Implicit Euler', fontweight='bold')
    ax.legend(fontsize=10, **_LEGEND)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Drag vs Speed
# ══════════════════════════════════════════════════════════════════════════

def plot_drag_curve(params: Dict[str, BallisticParameters],
                    max_speed: float = MUZZLE_VELOCITY,
                    save_path: str = None) -> plt.Figure:
    """Drag deceleration magnitude vs speed, one curve per parameter set."""
    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    speeds = np.linspace(1.0, max_speed, 500)
    for (label, p), color in zip(params.items(), STYLE['accent_colors']):
        decel = -drag_curve(speeds, p.caliber, p.ballistic_coefficient)
        ax.plot(speeds, decel, color=color, linewidth=2.5,
                label=f'{label} (d={p.caliber:g} m, BC={p.ballistic_coefficient:g})')

    ax.axhline(y=GRAVITY, color='#ff5252', linestyle='--', alpha=0.6, label='g')
    ax.set_yscale('log')
    ax.set_xlabel('Speed (m/s)', fontsize=12)
    ax.set_ylabel('|Drag deceleration| (m/s²)', fontsize=12)
    ax.set_title('Quadratic Drag vs Speed', fontsize=14, fontweight='bold')
    ax.legend(fontsize=10, **_LEGEND)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Animated Trajectory (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_trajectory_animation(result: TrajectoryResult,
                                save_path: str = 'outputs/trajectory_anim.gif',
                                frames: int = 100, fps: int = 20) -> str:
    """Create animated GIF of the trajectory with trail."""
    from matplotlib.animation import FuncAnimation, PillowWriter

    ok = finite_mask(result)
    x, y, t, spd = result.x[ok], result.y[ok], result.time[ok], result.speed[ok]
    if x.size == 0:
        raise ValueError("No finite samples to animate")

    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    pad_x = max(np.ptp(x) * 0.05, 1.0)
    pad_y = max(np.ptp(y) * 0.15, 1.0)
    ax.set_xlim(np.min(x) - pad_x, np.max(x) + pad_x)
    ax.set_ylim(np.min(y) - pad_y, np.max(y) + pad_y)
    ax.set_xlabel('Downrange (m)', fontsize=12)
    ax.set_ylabel('Altitude (m)', fontsize=12)
    ax.set_title(f'Trajectory Animation — θ={result.conditions.elevation_deg:.1f}°',
                 fontsize=14, fontweight='bold')

    trail_line, = ax.plot([], [], color='#00d4ff', linewidth=1.5, alpha=0.6)
    point, = ax.plot([], [], 'o', color='#00d4ff', markersize=8)
    time_text = ax.text(0.02, 0.95, '', transform=ax.transAxes,
                        color=STYLE['text_color'], fontsize=11, fontfamily='monospace')

    # Subsample for animation
    total_pts = len(x)
    stride = max(1, total_pts // frames)
    indices = list(range(0, total_pts, stride))
    if indices[-1] != total_pts - 1:
        indices.append(total_pts - 1)

    def animate(frame_idx):
        idx = indices[min(frame_idx, len(indices) - 1)]
        trail_line.set_data(x[:idx+1], y[:idx+1])
        point.set_data([x[idx]], [y[idx]])
        time_text.set_text(
            f't={t[idx]:.2f}s | v={spd[idx]:.1f} m/s | '
            f'Position: ({x[idx]:.2f}, {y[idx]:.2f})'
        )
        return trail_line, point, time_text

    anim = FuncAnimation(fig, animate, frames=len(indices), interval=50, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    print(f"  Animation saved: {save_path}")
    return save_path
