"""Train both network architectures on the same collected data and compare.

Collects random slider settings for an experiment, trains the simple and the
deep network on identical samples, and saves loss curves plus a summary.

Usage:
    python scripts/compare_architectures.py [--experiment pendulum|separation|all] [--samples N]
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def compare_experiment(name: str, n_samples: int | None = None, seed: int = 42) -> dict:
    """Train both architectures on one set of samples.

    Args:
        name: Experiment name.
        n_samples: Number of random samples (default: 3x the experiment minimum).
        seed: Seed for slider sampling and generator noise.

    Returns:
        Per-architecture results with loss curves and a held-out error.
    """
    from physlab.experiments import get_experiment_class
    from physlab.session import ExperimentSession
    from physlab.types.experiment import Architecture
    from physlab.utils.config import load_experiment_config

    config = load_experiment_config(name)
    experiment = get_experiment_class(name)(config)
    if n_samples is None:
        n_samples = 3 * config.min_samples

    rng = np.random.default_rng(seed)
    collected = [experiment.catalog.sample_uniform(rng) for _ in range(n_samples)]
    held_out = [experiment.catalog.sample_uniform(rng) for _ in range(50)]
    truth = np.array([experiment.realistic_output(p, noise_scale=0.0) for p in held_out])
    formula = np.array([experiment.ideal_output(experiment.full_params(p)) for p in held_out])

    results = {
        "experiment": name,
        "n_samples": n_samples,
        "formula_mae": float(np.mean(np.abs(formula - truth))),
        "architectures": {},
    }

    for arch in Architecture:
        session = ExperimentSession(experiment, seed=seed)
        for params in collected:
            session.add_sample(params)

        t0 = time.time()
        result = session.fit(arch)
        elapsed = time.time() - t0

        preds = np.array([session.predict(p) for p in held_out])
        mae = float(np.mean(np.abs(preds - truth)))
        logger.info(
            f"  [{name}/{arch.value}] {result.epochs_run} epochs in {elapsed:.1f}s, "
            f"final_loss={result.final_loss:.6f}, held-out MAE={mae:.4f}"
        )

        results["architectures"][arch.value] = {
            **result.model_dump(mode="json"),
            "training_time_s": elapsed,
            "held_out_mae": mae,
            "loss": [r.loss for r in session.loss_history],
            "val_loss": [r.val_loss for r in session.loss_history],
        }

    return results


def main():
    parser = argparse.ArgumentParser(description="Compare simple and deep networks")
    parser.add_argument("--experiment", default="all",
                        choices=["all", "pendulum", "separation"])
    parser.add_argument("--samples", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    from physlab.utils.config import load_config

    lab = load_config()
    seed = args.seed if args.seed is not None else lab.seed
    if seed is None:
        seed = 42
    output_dir = Path(lab.output_dir) / "architecture_comparison"
    output_dir.mkdir(parents=True, exist_ok=True)
    experiments = (["pendulum", "separation"]
                   if args.experiment == "all" else [args.experiment])

    summary = {}
    for name in experiments:
        logger.info(f"\n{'='*60}")
        logger.info(f"EXPERIMENT: {name}")
        logger.info(f"{'='*60}")
        results = compare_experiment(name, n_samples=args.samples, seed=seed)

        out_dir = output_dir / name
        out_dir.mkdir(parents=True, exist_ok=True)
        curves = {}
        for arch, data in results["architectures"].items():
            curves[f"{arch}_loss"] = np.array(data.pop("loss"))
            curves[f"{arch}_val_loss"] = np.array(data.pop("val_loss"))
        np.savez(out_dir / "loss_curves.npz", **curves)
        summary[name] = results

    with open(output_dir / "summary.json", "w") as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Summary saved to {output_dir / 'summary.json'}")


if __name__ == "__main__":
    main()
