"""CLI entry point for the lattice Monte Carlo programs."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import platform
import shutil
import tempfile
import time
from typing import Any, Callable

import numpy as np
from lattice.config import DiffusionConfig, MasterSeedConfig, RenderConfig, Walk1DConfig, Walk2DConfig
from lattice.diffusion import run_diffusion, validate_config
from lattice.io import (
    move_tree_contents,
    resolve_output_dir,
    safe_clean_output_dir,
    write_json,
    write_png_rgb,
    write_table,
)
from lattice.render import density_colormap_rgb, occupancy_rgb, trace_density
from lattice.rng import SeedGenerator
from lattice.seed import SeedParseError, default_master_seed, parse_master_seed
from lattice.stats import SampleSummary
from lattice.walk1d import run_walk_1d
from lattice.walk2d import run_walk_2d

DIFFUSION_HEADER = (
    "L = {size}  rho_input = {density:.3f}  num_sweeps = {num_sweeps}    num_samples = {num_samples}\n"
    "sweep   deltaR2_mean      D_t_mean        err_deltaR2     err_D_t"
)

Runner = Callable[[Path], tuple[dict[str, Any], list[str]]]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lattice random walks and lattice-gas diffusion driven by PCG32")
    parser.add_argument(
        "--master-seed",
        default=default_master_seed().canonical,
        help="Seed generator state and sequence as STATE,SEQ (decimal or 0x-prefixed hex)",
    )
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument(
        "--png",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write PNG previews (walk2d trace, diffusion occupancy)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    walk1d = commands.add_parser("walk1d", help="Ensemble of +/-1 walks on a line")
    walk1d.add_argument("--runs", type=int, default=Walk1DConfig.runs, help="Number of independent runs")
    walk1d.add_argument("--steps", type=int, default=Walk1DConfig.steps, help="Steps per run")

    walk2d = commands.add_parser("walk2d", help="Ensemble of unit-step walks on the square lattice")
    walk2d.add_argument("--runs", type=int, default=Walk2DConfig.runs, help="Number of independent runs")
    walk2d.add_argument("--steps", type=int, default=Walk2DConfig.steps, help="Steps per run")
    walk2d.add_argument(
        "--t-target",
        type=int,
        default=None,
        help="Time at which every run is sampled (defaults to --steps)",
    )
    walk2d.add_argument("--trace-run", type=int, default=Walk2DConfig.trace_run, help="Run whose full path is saved")

    diffusion = commands.add_parser(
        "diffusion",
        help="Lattice-gas diffusion coefficient",
        description=(
            "Lattice-gas diffusion coefficient. Hops run one at a time in Python, so the cost grows as "
            "samples x sweeps x rho x L^2 per density: the defaults make about 384 million hop attempts "
            "per density and take hours. Use smaller --size, --sweeps or --samples for quick runs."
        ),
    )
    diffusion.add_argument("--size", type=int, default=DiffusionConfig.size, help="Lattice side length L")
    diffusion.add_argument(
        "--density",
        type=float,
        nargs="+",
        default=[DiffusionConfig.density],
        help="Site occupation probability rho in (0, 1); several distinct values run one after another",
    )
    diffusion.add_argument("--sweeps", type=int, default=DiffusionConfig.num_sweeps, help="Sweeps per sample")
    diffusion.add_argument(
        "--measurements",
        type=int,
        default=DiffusionConfig.num_measurements,
        help="Measurements per sample; must divide --sweeps",
    )
    diffusion.add_argument("--samples", type=int, default=DiffusionConfig.num_samples, help="Independent samples")

    seeds = commands.add_parser("seeds", help="Print the next seeds of the seed generator")
    seeds.add_argument("--count", type=int, default=10, help="Number of seeds to print")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        parsed_seed = parse_master_seed(args.master_seed)
    except SeedParseError as exc:
        parser.error(str(exc))

    seed_config = MasterSeedConfig(state=parsed_seed.state, sequence=parsed_seed.sequence)
    master = SeedGenerator(seed_config.state, seed_config.sequence)

    if args.command == "seeds":
        if args.count < 0:
            parser.error("--count must be non-negative")
        for index, seed in enumerate(master.seeds(args.count), start=1):
            print(f"Seed {index}: {seed}")
        return 0

    render = RenderConfig()
    try:
        program, label, runner = _select_program(args, master, render)
    except ValueError as exc:
        parser.error(str(exc))

    out_dir = resolve_output_dir(args.out, program, label, overwrite=args.overwrite)
    stage_dir = Path(tempfile.mkdtemp(prefix=".staging-", dir=str(out_dir.parent)))
    try:
        start = time.perf_counter()
        summary, lines = runner(stage_dir)
        elapsed = time.perf_counter() - start

        if args.json:
            deterministic_meta = {
                "program": program,
                "master_seed": seed_config.to_dict(),
                **summary,
            }
            meta = {
                **deterministic_meta,
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "original_master_seed": parsed_seed.original,
                "elapsed_seconds": elapsed,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(stage_dir / "deterministic_meta.json", deterministic_meta)
            write_json(stage_dir / "meta.json", meta)

        safe_clean_output_dir(out_dir, out_root=Path(args.out))
        move_tree_contents(stage_dir, out_dir)
    finally:
        shutil.rmtree(stage_dir, ignore_errors=True)

    print(f"Generated {program}: {out_dir}")
    for line in lines:
        print(line)
    print(f"Elapsed: {elapsed:.3f} s")
    file_count = sum(1 for child in out_dir.iterdir() if child.is_file())
    print(f"Output files: {file_count}")
    return 0


def _select_program(args: argparse.Namespace, master: SeedGenerator, render: RenderConfig) -> tuple[str, str, Runner]:
    if args.command == "walk1d":
        config = Walk1DConfig(runs=args.runs, steps=args.steps)
        if config.runs <= 0 or config.steps <= 0:
            raise ValueError("--runs and --steps must be positive")
        label = f"runs{config.runs}_steps{config.steps}"
        return "walk1d", label, lambda stage: _run_walk1d(stage, config, master)

    if args.command == "walk2d":
        t_target = args.steps if args.t_target is None else args.t_target
        config = Walk2DConfig(runs=args.runs, steps=args.steps, t_target=t_target, trace_run=args.trace_run)
        if config.runs <= 0 or config.steps <= 0:
            raise ValueError("--runs and --steps must be positive")
        if not 1 <= config.t_target <= config.steps:
            raise ValueError(f"--t-target must be in 1..{config.steps}")
        if not 0 <= config.trace_run < config.runs:
            raise ValueError(f"--trace-run must be in 0..{config.runs - 1}")
        label = f"runs{config.runs}_steps{config.steps}_t{config.t_target}"
        return "walk2d", label, lambda stage: _run_walk2d(stage, config, master, render, png=args.png)

    configs = [
        DiffusionConfig(
            size=args.size,
            density=density,
            num_sweeps=args.sweeps,
            num_measurements=args.measurements,
            num_samples=args.samples,
        )
        for density in args.density
    ]
    for config in configs:
        validate_config(config)
    densities = [f"{config.density:g}" for config in configs]
    repeated = sorted({value for value in densities if densities.count(value) > 1})
    if repeated:
        raise ValueError(f"--density values must be distinct, got {', '.join(repeated)} more than once")
    label = (
        f"L{args.size}_rho{'-'.join(densities)}"
        f"_sweeps{args.sweeps}_meas{args.measurements}_samples{args.samples}"
    )
    return "diffusion", label, lambda stage: _run_diffusion(stage, configs, master, render, png=args.png)


def _run_walk1d(stage_dir: Path, config: Walk1DConfig, master: SeedGenerator) -> tuple[dict[str, Any], list[str]]:
    result = run_walk_1d(config, master)

    steps = np.arange(config.steps, dtype=np.int64)
    position = result.positions.ravel()
    step_col = np.tile(steps, config.runs)
    trajectories = np.column_stack((step_col, position, position * position, step_col))
    write_table(stage_dir / "ran_gen.dat", trajectories, fmt="%d")
    write_table(stage_dir / "x2_mean.dat", np.column_stack((steps, result.x2_mean)), fmt=["%d", "%f"])

    fit = result.fit
    summary = {
        "config": config.to_dict(),
        "first_run_seeds": [result.seeds[0].seed_a, result.seeds[0].seed_b],
        "x2_mean_final": float(result.x2_mean[-1]),
        "diffusion_fit": None
        if fit is None
        else {"slope": fit.slope, "intercept": fit.intercept, "coefficient": fit.coefficient},
    }
    lines = [f"Runs: {config.runs}, steps per run: {config.steps}"]
    lines.append(f"<x^2> at t={config.steps}: {result.x2_mean[-1]:.3f}")
    if fit is not None:
        lines.append(f"Fitted <x^2> slope: {fit.slope:.4f} (D={fit.coefficient:.4f})")
    return summary, lines


def _run_walk2d(
    stage_dir: Path,
    config: Walk2DConfig,
    master: SeedGenerator,
    render: RenderConfig,
    *,
    png: bool,
) -> tuple[dict[str, Any], list[str]]:
    result = run_walk_2d(config, master)

    runs = np.arange(config.runs, dtype=np.int64)
    samples = np.column_stack(
        (
            runs,
            np.full(config.runs, config.t_target, dtype=np.int64),
            np.full(config.runs, config.t_target - 1, dtype=np.int64),
            result.samples,
        )
    )
    write_table(stage_dir / f"2d_ran_gen_t_{config.t_target}.dat", samples, fmt="%d")
    times = np.arange(1, config.steps + 1, dtype=np.int64)
    write_table(stage_dir / "2d_ran_walk_trace.dat", np.column_stack((times, result.trace)), fmt="%d")
    if png:
        counts = trace_density(result.trace, size=render.trace_image_size)
        write_png_rgb(stage_dir / "2d_ran_walk_trace.png", density_colormap_rgb(counts, colormap=render.colormap))

    summary = {
        "config": config.to_dict(),
        "first_run_seeds": [result.seeds[0].seed_a, result.seeds[0].seed_b],
        "x": _summary_dict(result.x),
        "y": _summary_dict(result.y),
    }
    lines = [
        f"MEAN (x position) = {result.x.mean:g}",
        f"MEAN (y position) = {result.y.mean:g}",
        f"x - VAR = {result.x.variance:g}",
        f"y - VAR = {result.y.variance:g}",
        f"Processed data points: {result.x.count}",
    ]
    return summary, lines


def _density_stem(config: DiffusionConfig) -> str:
    return f"rho{config.density:g}_L{config.size}"


def _run_diffusion(
    stage_dir: Path,
    configs: list[DiffusionConfig],
    master: SeedGenerator,
    render: RenderConfig,
    *,
    png: bool,
) -> tuple[dict[str, Any], list[str]]:
    entries: list[dict[str, Any]] = []
    lines: list[str] = []
    for config in configs:
        run_seeds, worker = master.spawn_worker()
        result = run_diffusion(config, worker)

        stem = _density_stem(config)
        write_table(
            stage_dir / f"out_{stem}.dat",
            result.table(),
            fmt=["%d", "%.12f", "%.12f", "%.12f", "%.12f"],
            header=DIFFUSION_HEADER.format(**config.to_dict()),
        )
        if png:
            write_png_rgb(
                stage_dir / f"lattice_{stem}.png",
                occupancy_rgb(result.final_occupancy, scale=render.occupancy_scale),
            )

        fit = result.fit
        mean_particles = float(result.particle_counts.mean())
        entries.append(
            {
                "config": config.to_dict(),
                "run_seeds": [run_seeds.seed_a, run_seeds.seed_b],
                "mean_particle_count": mean_particles,
                "observed_density": mean_particles / float(config.size * config.size),
                "d_t_final": float(result.diffusion_t[-1]),
                "diffusion_fit": None
                if fit is None
                else {"slope": fit.slope, "intercept": fit.intercept, "coefficient": fit.coefficient},
            }
        )
        fitted = "n/a" if fit is None else f"{fit.coefficient:.6f}"
        lines.append(
            f"rho={config.density:g}: particles={mean_particles:.1f}, "
            f"D(t={int(result.sweeps[-1])})={result.diffusion_t[-1]:.6f}, fitted D={fitted}"
        )
    return {"densities": entries}, lines


def _summary_dict(summary: SampleSummary) -> dict[str, Any]:
    return {
        "count": summary.count,
        "mean": summary.mean,
        "variance": None if np.isnan(summary.variance) else summary.variance,
        "std_error": None if np.isnan(summary.std_error) else summary.std_error,
    }


if __name__ == "__main__":
    raise SystemExit(main())
