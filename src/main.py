import argparse
import logging
import sys

from config import DisputePolicy, EngineConfig, LockedAccountPolicy
from csv_io import write_accounts
from exceptions import PaymentsError
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toy-ledger",
        description="Replay a transactions CSV and print the final client accounts.",
    )
    parser.add_argument("input", help="transactions CSV file")
    parser.add_argument(
        "--strict-disputes",
        action="store_true",
        help="track open disputes; ignore resolves and chargebacks without one",
    )
    parser.add_argument(
        "--reject-locked",
        action="store_true",
        help="ignore every transaction for an account locked by a chargeback",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log each parsed record to stderr")
    return parser


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        dispute_policy=DisputePolicy.STRICT if args.strict_disputes else DisputePolicy.LENIENT,
        locked_policy=LockedAccountPolicy.REJECT if args.reject_locked else LockedAccountPolicy.PASS_THROUGH,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config_from_args(args))
    try:
        accounts = engine.process_file(args.input)
    except (PaymentsError, OSError) as e:
        logger.error(f"Failed to process {args.input}: {e}")
        return 1

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
