"""
CLI entry point for the spectral frame engine.

Usage:
    spectrascope [options]
    python -m spectrascope [options]
"""

import argparse
import sys
import time

import numpy as np

from spectrascope.core.analyzer import find_peaks
from spectrascope.core.synthesizer import SynthesisParams, randomize_params
from spectrascope.engine import EngineConfig, FrameEngine

PROFILES = {
    "low": {"n": 256, "grid_size": 64},
    "medium": {"n": 1024, "grid_size": 128},
    "high": {"n": 4096, "grid_size": 512},
}


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def _describe(index: int, phase: float, result, n_peaks: int) -> str:
    peaks = ", ".join(str(int(p)) for p in find_peaks(result.spectrum, count=n_peaks))
    g = result.grid_size
    return (
        f"frame {index:4d}  phase {phase:7.3f}  "
        f"peaks [{peaks}]  "
        f"signal [{result.signal.min():+.3f}, {result.signal.max():+.3f}]  "
        f"grid centre {result.grid_spectrum[g // 2, g // 2]:.3f}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectrascope",
        description="Synthesize test signals and print their spectra frame by frame",
    )

    # Sizes & Profile
    parser.add_argument(
        "-p", "--profile", type=str, default="medium",
        choices=sorted(PROFILES),
        help="Size preset (low: 256/64, medium: 1024/128, high: 4096/512)",
    )
    parser.add_argument("--n", type=int, default=None, help="Signal length (overrides profile)")
    parser.add_argument("--grid-size", type=int, default=None, help="Grid side length (overrides profile)")

    # Signal
    defaults = SynthesisParams()
    parser.add_argument("--freq-a", type=float, default=defaults.freq_a, help="First tone, cycles per window")
    parser.add_argument("--freq-b", type=float, default=defaults.freq_b, help="Second tone, cycles per window")
    parser.add_argument("--noise", type=float, default=defaults.noise, help="Noise amplitude in [0, 1]")
    parser.add_argument("--phase", type=float, default=0.0, help="Starting phase")
    parser.add_argument(
        "--randomize", action="store_true",
        help="Pick random tones and noise (use --seed for repeatable picks)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for --randomize")

    # Animation
    parser.add_argument("-f", "--frames", type=int, default=1, help="Number of frames to compute")
    parser.add_argument(
        "--phase-step", type=float, default=EngineConfig.phase_step,
        help="Phase advance per frame (default: 0.04)",
    )

    # Output
    parser.add_argument("--peaks", type=int, default=2, help="Spectrum peaks to report per frame")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print the summary")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    p_cfg = PROFILES[args.profile]
    params = SynthesisParams(
        n=p_cfg["n"] if args.n is None else args.n,
        grid_size=p_cfg["grid_size"] if args.grid_size is None else args.grid_size,
        freq_a=args.freq_a,
        freq_b=args.freq_b,
        noise=args.noise,
        phase=args.phase,
    )
    if args.randomize:
        params = randomize_params(np.random.default_rng(args.seed), params)

    print(
        f"n={params.n} gridSize={params.grid_size} "
        f"freqA={params.freq_a:g} freqB={params.freq_b:g} noise={params.noise:g}"
    )

    engine = FrameEngine()
    total = max(args.frames, 0)
    t0 = time.time()

    for i, result in enumerate(engine.frames(params, total, phase_step=args.phase_step)):
        if not result.ok:
            print(f"Error: {result.error}", file=sys.stderr)
            return 1

        if not args.quiet:
            phase = params.phase + i * args.phase_step
            if total <= 20:
                print(_describe(i, phase, result, args.peaks))
            else:
                _progress_bar(i + 1, total)

    elapsed = time.time() - t0
    print(f"\nDone! {total} frames in {elapsed:.2f}s ({total / max(elapsed, 1e-6):.1f} fps)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
