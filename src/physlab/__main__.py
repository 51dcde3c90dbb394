"""CLI entry point for physlab.

Usage:
    physlab catalog <experiment>                      List the ten experiment parameters
    physlab formula <experiment> [key=value ...]      Formula baseline for given parameters
    physlab demo <experiment> [simple|deep] [n]       Collect n random samples, train, compare
    physlab version                                   Show version

Experiments: pendulum, separation
"""
from __future__ import annotations

import sys


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(0)

    command = sys.argv[1].lower()
    args = sys.argv[2:]

    try:
        if command == "catalog":
            _run_catalog(args)
        elif command == "formula":
            _run_formula(args)
        elif command == "demo":
            _run_demo(args)
        elif command in ("version", "--version", "-v"):
            from physlab import __version__
            print(f"physlab {__version__}")
        elif command in ("help", "--help", "-h"):
            print(__doc__)
        else:
            print(f"Unknown command: {command}")
            print(__doc__)
            sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _experiment_name(args: list[str]) -> str:
    if not args:
        raise ValueError("Missing experiment name (pendulum or separation)")
    return args[0].lower()


def _parse_assignments(args: list[str]) -> dict[str, float]:
    params = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got '{arg}'")
        params[key] = float(value)
    return params


def _run_catalog(args: list[str]) -> None:
    """Print the parameter catalog of an experiment."""
    from physlab.experiments import get_experiment_class

    experiment = get_experiment_class(_experiment_name(args))()
    print(f"\n{experiment.name} parameters:")
    for d in experiment.catalog:
        kind = "FORMULA" if d.formula else "REAL-LIFE"
        print(f"  {d.key:<18} {kind:<10} [{d.min:g}, {d.max:g}] step={d.step:g} "
              f"default={d.default:g}  {d.name}")


def _run_formula(args: list[str]) -> None:
    """Print the formula baseline and its breakdown."""
    from physlab.experiments import get_experiment_class

    experiment = get_experiment_class(_experiment_name(args))()
    params = experiment.full_params(_parse_assignments(args[1:]))
    value = experiment.ideal_output(params)
    print(f"\nFormula {experiment.name}: {value:.4f}{experiment.output_unit}")
    for key, detail in experiment.comparison_details(value, params).items():
        print(f"  {key}: {detail:.4f}")


def _run_demo(args: list[str]) -> None:
    """Collect random samples, train a network, and compare it with the formula."""
    import logging

    import numpy as np

    from physlab.experiments import get_experiment_class
    from physlab.session import ExperimentSession
    from physlab.utils.config import load_config, load_experiment_config

    lab = load_config()
    logging.basicConfig(
        level=getattr(logging, lab.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    name = _experiment_name(args)
    architecture = args[1] if len(args) > 1 else "simple"
    config = load_experiment_config(name)
    n_samples = int(args[2]) if len(args) > 2 else 3 * config.min_samples

    experiment = get_experiment_class(name)(config)
    session = ExperimentSession(experiment, seed=lab.seed)
    rng = np.random.default_rng(lab.seed)
    for _ in range(n_samples):
        session.add_sample(experiment.catalog.sample_uniform(rng))
    print(f"\nCollected {session.n_samples} samples for {name}")

    def _report(event) -> None:
        if event.display and (event.epoch % 100 == 0 or event.epoch == event.n_epochs):
            print(f"  epoch {event.epoch}/{event.n_epochs}: "
                  f"loss={event.loss:.6f} val_loss={event.val_loss:.6f}")

    result = session.fit(architecture, observer=_report)
    print(f"\nTrained {result.architecture.value} network in {result.epochs_run} epochs"
          f"{' (early stop)' if result.stopped_early else ''}: "
          f"final loss {result.final_loss:.6f}")

    comparison = session.compare(experiment.catalog.defaults())
    unit = experiment.output_unit
    print("\nAt default parameters:")
    print(f"  AI model: {comparison.predicted:.4f}{unit}")
    print(f"  Formula:  {comparison.formula:.4f}{unit}")
    print(f"  Difference: {comparison.difference:.4f}{unit}")
    for key, detail in comparison.details.items():
        print(f"  {key}: {detail:.4f}")


if __name__ == "__main__":
    main()
