"""
Command-line driver
===================
Builds a contact network, runs seasonal SIS trials and writes the
tab-separated time series (or the Monte Carlo mean)
"""

import logging
import sys
from argparse import ArgumentParser

from .core.disease_params import CONTINUOUS_SCENARIO, SeasonalParameters
from .core.exceptions import ConfigurationError
from .core.sis_model import RateMode, SimulationConfig, write_header
from .core.trials import TrialRunner
from .network.generators import build_network

logger = logging.getLogger("seasonal_sis")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="seasonal_sis", description="Seasonal SIS simulation on contact networks")

    graph = parser.add_argument_group("network")
    graph.add_argument("--graph", choices=["complete", "lattice", "random", "regular"], default="complete")
    graph.add_argument("--nodes", type=int, default=200, help="node count (complete, random, regular)")
    graph.add_argument("--lx", type=int, default=10, help="lattice width")
    graph.add_argument("--ly", type=int, default=10, help="lattice height")
    graph.add_argument("--p", type=float, default=0.05, help="edge probability (random)")
    graph.add_argument("--k", type=int, default=4, help="degree (regular)")

    model = parser.add_argument_group("model")
    model.add_argument("--t1", type=float, default=CONTINUOUS_SCENARIO.t1)
    model.add_argument("--t2", type=float, default=CONTINUOUS_SCENARIO.t2)
    model.add_argument("--lambda", dest="base_rate", type=float, default=CONTINUOUS_SCENARIO.base_rate)
    model.add_argument("--dlambda", dest="rate_boost", type=float, default=CONTINUOUS_SCENARIO.rate_boost)
    model.add_argument("--recovery", type=float, default=CONTINUOUS_SCENARIO.recovery_rate)
    model.add_argument("--rate-mode", choices=[mode.value for mode in RateMode], default=RateMode.CONSTANT.value)

    run = parser.add_argument_group("run")
    run.add_argument("--fraction", type=float, default=1.0, help="initially infected fraction")
    run.add_argument("--tmax", type=float, default=100.0)
    run.add_argument("--trials", type=int, default=1)
    run.add_argument("--workers", type=int, default=1)
    run.add_argument("--label", default="Cont")
    run.add_argument("--output", default="temp.txt")
    run.add_argument("--snapshot-interval", type=int, default=50)
    run.add_argument("--seed", type=int, default=None)
    run.add_argument("--asymptotic", action="store_true", help="print the mean final infected count only")
    run.add_argument("--table", default=None, help="also write the transmissibility table to this path")
    run.add_argument("--verbose", action="store_true")

    return parser


def _network_kwargs(args) -> dict:
    if args.graph == "lattice":
        return {"lx": args.lx, "ly": args.ly}
    if args.graph == "random":
        return {"n": args.nodes, "p": args.p, "seed": args.seed}
    if args.graph == "regular":
        return {"n": args.nodes, "k": args.k, "seed": args.seed}
    return {"n": args.nodes}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        params = SeasonalParameters(args.t1, args.t2, args.base_rate, args.rate_boost, args.recovery)
        config = SimulationConfig(
            rate_mode=args.rate_mode,
            snapshot_interval=args.snapshot_interval,
            seed=args.seed,
        )
        network = build_network(args.graph, **_network_kwargs(args))
        runner = TrialRunner(params, config, n_workers=args.workers)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    if args.verbose:
        print(network.summary())
        print(f"Mean transmissibility: {params.mean_rate:.3f}")
        print(f"Rate mode: {config.rate_mode.value}\n")

    if args.table:
        params.transmissibility().write_table(args.table)

    if args.asymptotic:
        result = runner.run(args.fraction, network, args.trials, args.tmax)
        print(f"{result.mean:.5f}")
        if args.verbose:
            for name, value in result.get_statistics().items():
                print(f"  {name}: {value:.5f}")
        return 0

    with open(args.output, "w") as sink:
        write_header(sink)
        results = runner.run_time_series(args.fraction, network, args.trials, args.tmax,
                                         output=sink, label=args.label)

    if args.verbose:
        print(f"Wrote {len(results)} snapshots to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
