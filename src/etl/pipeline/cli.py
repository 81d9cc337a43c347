"""Command Line Interface for the ETL pipeline.

Provides the CLI entry point: argument parsing, configuration
overrides, pipeline execution and exit codes (0 success, 1 failure,
130 interrupted).
"""

import argparse
import dataclasses
import sys
import traceback
from collections.abc import Sequence
from pathlib import Path

from src.etl.errors import ConfigurationError
from src.etl.pipeline.orchestrator import PipelineOrchestrator
from src.etl.types import PipelineConfig, PipelineRunResult, StructureOverride
from src.etl.utils.logger import setup_logger
from src.settings import Settings, settings

logger = setup_logger("etl.pipeline.cli")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================


def add_etl_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the ETL options on parser.

    Args:
        parser: Parser or subparser receiving the options.
    """
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=None,
        help="Directory scanned recursively for XML files (default: ETL_INPUT_DIR or data/xml)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Worker threads (default: ETL_MAX_WORKERS, 0 means one per CPU)",
    )
    parser.add_argument(
        "--row-tag",
        type=str,
        default=None,
        help="Record element name, skips structure inference",
    )
    parser.add_argument(
        "--root-tag",
        type=str,
        default=None,
        help="Expected root element name",
    )


def _parse_cli_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments (sys.argv[1:] by default).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="Movie XML dump ETL: mains, actors and casts files into a relational store"
    )
    add_etl_arguments(parser)
    return parser.parse_args(argv)


# =============================================================================
# CONFIGURATION
# =============================================================================


def build_config(args: argparse.Namespace, app_settings: Settings = settings) -> PipelineConfig:
    """Build the run configuration, command line options winning over settings.

    Args:
        args: Parsed arguments.
        app_settings: Loaded settings.

    Returns:
        Pipeline configuration.

    Raises:
        ConfigurationError: If --threads is negative.
    """
    config = PipelineConfig.from_settings(app_settings)
    overrides: dict[str, object] = {}

    if args.input_dir is not None:
        overrides["input_dir"] = args.input_dir
    if args.threads is not None:
        if args.threads < 0:
            raise ConfigurationError("--threads must be >= 0")
        overrides["max_workers"] = args.threads or app_settings.etl.effective_workers
    if args.row_tag or args.root_tag:
        overrides["structure"] = StructureOverride(
            root_tag=args.root_tag or config.structure.root_tag,
            row_tag=args.row_tag or config.structure.row_tag,
        )

    return dataclasses.replace(config, **overrides)


# =============================================================================
# COMMAND HANDLERS
# =============================================================================


def run_etl(args: argparse.Namespace) -> PipelineRunResult:
    """Run the pipeline once and print its report.

    Args:
        args: Parsed arguments.

    Returns:
        Run report.
    """
    config = build_config(args)
    logger.info(
        f"Starting ETL: input={config.input_dir}, threads={config.max_workers}, "
        f"quality log={config.quality_log_path}"
    )

    result = PipelineOrchestrator(config).run()

    print("\n📊 ETL report")
    for line in result.summary_lines():
        print(f"  {line}")
    return result


def _handle_fatal_error(error: Exception) -> None:
    """Handle fatal pipeline error.

    Args:
        error: Exception that caused the failure.
    """
    print(f"\n❌ FATAL ERROR: {error}", file=sys.stderr)
    if not isinstance(error, ConfigurationError):
        traceback.print_exc()
    logger.error(f"Pipeline failed: {error}")
    sys.exit(1)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for the ETL pipeline."""
    try:
        args = _parse_cli_arguments(argv)
        result = run_etl(args)
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        sys.exit(130)
    except Exception as e:
        _handle_fatal_error(e)
        return

    sys.exit(0 if result.succeeded else 1)


if __name__ == "__main__":
    main()
