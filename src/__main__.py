"""Entry point of the src package. Allows python -m src."""

import argparse
import sys


def run_etl(args: argparse.Namespace) -> int:
    """Run the ETL pipeline."""
    from src.etl.pipeline.cli import run_etl as run_pipeline

    result = run_pipeline(args)
    return 0 if result.succeeded else 1


def run_init_db(args: argparse.Namespace) -> int:
    """Create the database schema."""
    from src.scripts.init_database import main as init_database

    argv = [flag for flag, enabled in (("--drop", args.drop), ("--seed", args.seed)) if enabled]
    return init_database(argv)


def main() -> None:
    """Main CLI."""
    from src.etl.pipeline.cli import add_etl_arguments

    parser = argparse.ArgumentParser(
        description="Movie XML dump ETL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src init-db --seed                 # Create tables and genres
  python -m src etl --input-dir data/xml       # Run the ETL
  python -m src etl --threads 4 --row-tag actor
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    # ETL
    etl_parser = subparsers.add_parser("etl", help="Run the XML ETL pipeline")
    add_etl_arguments(etl_parser)

    # Schema
    init_parser = subparsers.add_parser("init-db", help="Create the database schema")
    init_parser.add_argument("--drop", action="store_true", help="Drop tables first")
    init_parser.add_argument("--seed", action="store_true", help="Seed canonical genres")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "etl":
            sys.exit(run_etl(args))
        elif args.command == "init-db":
            sys.exit(run_init_db(args))

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted")
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
