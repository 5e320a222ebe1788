"""
Lunar Lander Simulation - CLI

Runs a single headless round and prints the landing summary.
"""

import argparse
import logging
import sys
from dataclasses import replace

from lander_sim import constants as C
from lander_sim.config import ConfigurationError, create_default_config
from lander_sim.controls import Controls, Gamepad
from lander_sim.main import run_simulation
from lander_sim.mass import get_fuel_fraction

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Lunar Lander Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Round seed (random when omitted)"
    )
    parser.add_argument(
        "--target-rate",
        type=float,
        default=None,
        help="Initial vertical velocity target in m/s (negative is down)"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write per-tick telemetry to this CSV file"
    )
    parser.add_argument(
        "--gamepad",
        type=str,
        default=None,
        help="Gamepad JSON config (dead zone override)"
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace ticks at wall-clock rate"
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the vehicle configuration summary and exit"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    return parser.parse_args(argv)


def build_config(args):
    """Turn parsed arguments into a SimulationConfig."""
    config = create_default_config()
    overrides = {'realtime': args.realtime, 'verbose': not args.quiet}
    if args.seed is not None:
        overrides.update(seed=args.seed, regenerate_seed=False)
    if args.target_rate is not None:
        overrides['init_vertical_velocity_target'] = args.target_rate
    return replace(config, **overrides)


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    # Configure verbosity
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.show_config:
        C.print_config()
        return None

    try:
        config = build_config(args)
        gamepad = Gamepad.from_json_file(args.gamepad) if args.gamepad else None
        controls = Controls.from_config(config, gamepad=gamepad)

        logger.info("Starting round...")
        result = run_simulation(config, controls=controls)

        print("\n" + "=" * 60)
        print("ROUND SUMMARY")
        print("=" * 60)
        print(f"Seed: {result.seed}")
        print(f"Termination reason: {result.reason}")
        print(f"Final time: {result.state.t:.2f} s")
        print(f"Fuel remaining: {result.state.fuel_mass:.1f} kg "
              f"({100 * get_fuel_fraction(result.state.fuel_mass):.0f}%)")
        if result.report is not None:
            print(f"Status: {result.report.banner}")
            print(f"Score: {result.report.score:.2f}")
            print(f"Remark: {result.report.remark}")
        print("=" * 60 + "\n")

        if args.csv:
            result.log.to_csv(args.csv)
            logger.info(f"Telemetry written to {args.csv}")

    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\n[ERROR] Invalid configuration: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)

    return result


if __name__ == "__main__":
    main()
