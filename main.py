#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  BALLISTIC CALCULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the simulation pipeline:
    1. Parameter entry (text values, unparsable input keeps the default)
       and drag-vs-speed curve
    2. Fire + fixed-step run, printed position readouts
    3. Trajectory and velocity plots
    4. Timestep comparison
    5. Validation against closed-form and ODE references
    6. Animated trajectory GIF

  Usage:
    python main.py                              # defaults (7.62 mm, BC 0.4)
    python main.py --elevation 30 --caliber 1 --bc 100 --steps 500
    python main.py --realtime --steps 300       # tick every 10 ms of wall time
    python main.py --quick                      # skip animation
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import os
import sys
import time

from ballistic_calculator.driver import (
    BallisticCalculator, ManualTicker, FixedCadenceTicker,
)
from ballistic_calculator.integrator import simulate, DEFAULT_DT, TICK_INTERVAL_MS
from ballistic_calculator.projectile import BallisticParameters
from ballistic_calculator.validation import run_all_validations
from ballistic_calculator.visualization import (
    plot_trajectory, plot_velocity, plot_dt_comparison, plot_drag_curve,
    create_trajectory_animation, ensure_output_dir,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="2D drag + gravity trajectory stepper")
    # values stay text: BallisticCalculator.set_parameter does the parsing
    parser.add_argument('--wind', default=None)
    parser.add_argument('--elevation', default=None)
    parser.add_argument('--caliber', default=None)
    parser.add_argument('--bc', dest='ballistic_coefficient', default=None)
    parser.add_argument('--steps', type=int, default=100)
    parser.add_argument('--dt', type=float, default=DEFAULT_DT)
    parser.add_argument('--every', type=int, default=10,
                        help="print a readout every N ticks")
    parser.add_argument('--realtime', action='store_true')
    parser.add_argument('--quick', action='store_true', help="skip animation")
    parser.add_argument('--output', default='outputs')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    start_time = time.time()
    out = ensure_output_dir(args.output)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Parameters
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Parameters")
    calc = BallisticCalculator(dt=args.dt)
    for name in BallisticCalculator.PARAMETERS:
        text = getattr(args, name)
        if text is None:
            continue
        if not calc.set_parameter(name, text):
            print(f"  ! ignored unparsable {name}={text!r}")
    p = calc.params
    print(f"  Wind        : {p.wind} m/s²")
    print(f"  Elevation   : {calc.elevation_deg} °")
    print(f"  Caliber     : {p.caliber} m")
    print(f"  Ballistic C : {p.ballistic_coefficient}")
    print(f"  Timestep    : {args.dt} s")
    try:
        p.validate()
        if not args.dt > 0.0:
            raise ValueError(f"dt must be > 0, got {args.dt!r}")
        if args.steps < 0:
            raise ValueError(f"steps must be >= 0, got {args.steps!r}")
    except ValueError as exc:
        print(f"  ! {exc}")
        return 1

    fig = plot_drag_curve({'current': p, 'default': BallisticParameters()},
                          save_path=f'{out}/00_drag_curve.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/00_drag_curve.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Fire + run
    # ══════════════════════════════════════════════════════════════════════
    section(f"PHASE 2: Fire ({args.steps} steps, dt={args.dt} s)")
    calc.fire()
    if args.realtime:
        ticker = FixedCadenceTicker(interval=TICK_INTERVAL_MS / 1000.0,
                                    max_ticks=args.steps)
    else:
        ticker = ManualTicker(args.steps)

    def tick_and_report():
        calc.tick()
        if args.every > 0 and calc.ticks % args.every == 0:
            print(f"  t={calc.ticks * calc.dt:>7.2f}s  {calc.readout()}")

    ticker.run(tick_and_report)
    print(f"\n  Final: {calc.readout()}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Trajectory plots
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Trajectory Plots")
    result = simulate(calc.conditions, calc.params, dt=args.dt, steps=args.steps)
    print(result.summary())

    fig = plot_trajectory(result, save_path=f'{out}/01_trajectory.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/01_trajectory.png")
    fig = plot_velocity(result, save_path=f'{out}/02_velocity.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/02_velocity.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Timestep comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Timestep Comparison")
    duration = args.steps * args.dt
    dt_results = {}
    for dt in (args.dt, args.dt / 10, args.dt / 100):
        r = simulate(calc.conditions, calc.params, dt=dt,
                     steps=int(round(duration / dt)))
        dt_results[dt] = r
        x_f, y_f = r.final_position
        status = f"diverged at step {r.divergence_index}" if r.diverged else "stable"
        print(f"  dt={dt:<10g} final=({x_f:.4g}, {y_f:.4g})  {status}")
    fig = plot_dt_comparison(dt_results, save_path=f'{out}/03_dt_comparison.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/03_dt_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Validation")
    validations = run_all_validations(dt=args.dt)
    worst = max(validations.values(), key=lambda r: r.position_error)
    print(f"  Largest deviation: {worst.name} ({worst.position_error:.4f} m)")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Animation
    # ══════════════════════════════════════════════════════════════════════
    if not args.quick:
        section("PHASE 6: Trajectory Animation (GIF)")
        try:
            create_trajectory_animation(result,
                                        save_path=f'{out}/04_trajectory_animation.gif')
        except ValueError as exc:
            print(f"  Animation skipped: {exc}")
    else:
        section("PHASE 6: Animation SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
