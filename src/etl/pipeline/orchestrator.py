"""Pipeline orchestration.

Runs one ETL pass over a directory of XML dumps:
    1. Discover XML files
    2. Parse them on the worker pool, wait for all (first barrier)
    3. Transform the parsed files on the same pool, wait for all (second barrier)
    4. Aggregate the per-file batches
    5. Write the aggregate in foreign key order
    6. Report

A file failing to parse or transform is logged and left out; the other
files still contribute their records.
"""

import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path

from src.etl.aggregation import BatchAggregator
from src.etl.errors import ConfigurationError, StructuralParseError
from src.etl.extractors import StreamingRecordParser
from src.etl.loaders import DatabaseWriter
from src.etl.pipeline.discovery import discover_xml_files
from src.etl.quality import QualityServices
from src.etl.transformers import Transformer
from src.etl.types import (
    PipelineConfig,
    PipelineRunResult,
    PipelineState,
    RawFileResult,
    TransformedBatch,
)
from src.etl.utils.logger import setup_logger

logger = setup_logger("etl.pipeline.orchestrator")


class PipelineOrchestrator:
    """Two-barrier fan-out/fan-in scheduler over a bounded thread pool.

    Quality services (log sink, genre evidence) are created per run and
    shared by the workers of that run only.

    Attributes:
        config: Run configuration.
        state: Current state.
        last_result: Report of the latest run, also kept when it failed.
    """

    def __init__(
        self,
        config: PipelineConfig,
        writer: DatabaseWriter | None = None,
        parser: StreamingRecordParser | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Run configuration.
            writer: Writer to use (one is built from config.database otherwise).
            parser: Parser to use (one is built from config.dtd_dirs otherwise).
        """
        self.config = config
        self.state = PipelineState.IDLE
        self.last_result: PipelineRunResult | None = None
        self._writer = writer
        self._parser = parser
        self._aggregator = BatchAggregator()

    # =========================================================================
    # Public API
    # =========================================================================

    def run(self, input_dir: Path | None = None) -> PipelineRunResult:
        """Discover XML files and process them.

        Args:
            input_dir: Directory to scan (config.input_dir by default).

        Returns:
            Run report.

        Raises:
            ConfigurationError: No input directory, or no XML file in it.
        """
        directory = input_dir or self.config.input_dir
        self._transition(PipelineState.DISCOVERING)
        try:
            if directory is None:
                raise ConfigurationError("No input directory configured")
            paths = discover_xml_files(Path(directory))
        except ConfigurationError as e:
            self._fail(PipelineRunResult(), e)
            raise

        logger.info(f"Discovered {len(paths)} XML files under {directory}")
        return self.process_files(paths)

    def process_files(self, paths: Sequence[Path]) -> PipelineRunResult:
        """Process an explicit list of XML files.

        Args:
            paths: Files in submission order.

        Returns:
            Run report.

        Raises:
            ConfigurationError: If the writer cannot be configured.
            KeyboardInterrupt: After a forced pool shutdown.
        """
        start = time.perf_counter()
        result = PipelineRunResult(files_discovered=len(paths))
        self.last_result = result

        quality = QualityServices.create(
            self.config.quality_log_path, echo=self.config.quality_echo
        )
        transformer = Transformer(quality)
        parser = self._parser or StreamingRecordParser(dtd_dirs=self.config.dtd_dirs)
        writer = self._writer or DatabaseWriter(db_settings=self.config.database)
        workers = max(1, self.config.max_workers)
        logger.info(f"Processing {len(paths)} files with {workers} worker threads")

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="etl-worker")
        futures: list[Future] = []
        interrupted = False
        try:
            parsed = self._parse_phase(executor, futures, parser, paths, result)
            batches = self._transform_phase(executor, futures, transformer, parsed, result)

            self._transition(PipelineState.AGGREGATING)
            aggregate = self._aggregator.aggregate(batches)
            self._record_aggregate(aggregate, result)

            self._transition(PipelineState.WRITING)
            result.load_stats = writer.write_all(aggregate)

            self._transition(PipelineState.REPORTING)
            result.elapsed_seconds = time.perf_counter() - start
            self._report(result, quality)
            self._transition(PipelineState.DONE)
            result.state = PipelineState.DONE
            return result

        except KeyboardInterrupt:
            logger.warning("Interrupted: cancelling pending tasks")
            interrupted = True
            executor.shutdown(wait=False, cancel_futures=True)
            result.elapsed_seconds = time.perf_counter() - start
            self._fail(result, "interrupted")
            raise
        except Exception as e:
            result.elapsed_seconds = time.perf_counter() - start
            self._fail(result, e)
            raise
        finally:
            if not interrupted:
                self._shutdown(executor, futures)
            if self._parser is None:
                parser.close()
            if self._writer is None:
                writer.close()

    # =========================================================================
    # Phases
    # =========================================================================

    def _parse_phase(
        self,
        executor: ThreadPoolExecutor,
        futures: list[Future],
        parser: StreamingRecordParser,
        paths: Sequence[Path],
        result: PipelineRunResult,
    ) -> list[RawFileResult]:
        self._transition(PipelineState.PARSING)
        override = None if self.config.structure.is_empty else self.config.structure
        submitted = [executor.submit(parser.parse, path, override) for path in paths]
        futures.extend(submitted)

        self._transition(PipelineState.PARSE_BARRIER)
        parsed = self._collect(submitted, [str(path) for path in paths], "parse", result)
        logger.info(f"Parse barrier reached: {len(parsed)}/{len(paths)} files parsed")
        return parsed

    def _transform_phase(
        self,
        executor: ThreadPoolExecutor,
        futures: list[Future],
        transformer: Transformer,
        parsed: list[RawFileResult],
        result: PipelineRunResult,
    ) -> list[TransformedBatch]:
        self._transition(PipelineState.TRANSFORMING)
        submitted = [executor.submit(transformer.transform, raw) for raw in parsed]
        futures.extend(submitted)

        self._transition(PipelineState.TRANSFORM_BARRIER)
        sources = [str(raw.source_path) for raw in parsed]
        failed_before = len(result.failed_files)
        batches = self._collect(submitted, sources, "transform", result)

        failed = set(result.failed_files[failed_before:])
        transformed = [raw for raw in parsed if str(raw.source_path) not in failed]
        result.files_processed = len(transformed)
        result.total_records_processed = sum(raw.record_count for raw in transformed)
        logger.info(f"Transform barrier reached: {len(batches)}/{len(parsed)} files transformed")
        return batches

    @staticmethod
    def _collect(
        futures: list[Future],
        sources: list[str],
        phase: str,
        result: PipelineRunResult,
    ) -> list:
        """Wait for every future and return the successful results in order.

        Failed tasks are logged and recorded in result.failed_files.
        """
        wait(futures)
        collected = []
        for future, source in zip(futures, sources):
            try:
                collected.append(future.result())
            except StructuralParseError as e:
                logger.error(f"Skipping {source}: {e}")
                result.failed_files.append(source)
            except Exception as e:
                logger.exception(f"{phase.capitalize()} task failed for {source}: {e}")
                result.failed_files.append(source)
        return collected

    # =========================================================================
    # Reporting
    # =========================================================================

    def _record_aggregate(self, aggregate: TransformedBatch, result: PipelineRunResult) -> None:
        stats = self._aggregator.stats
        result.movies = len(aggregate.movies)
        result.stars = len(aggregate.stars)
        result.star_relations = len(aggregate.star_relations)
        result.genres = len(aggregate.genres)
        result.genre_relations = len(aggregate.genre_relations)
        result.orphan_movies_removed = stats.orphan_movies_removed
        result.dangling_relations_removed = stats.dangling_relations_removed

    @staticmethod
    def _report(result: PipelineRunResult, quality: QualityServices) -> None:
        unknown = quality.evidence.snapshot()
        if unknown:
            logger.info(f"Unknown genre keys seen: {len(unknown)}")
        for line in result.summary_lines():
            logger.info(line)

    # =========================================================================
    # State and shutdown
    # =========================================================================

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, result: PipelineRunResult, error: Exception | str) -> None:
        logger.error(f"Pipeline failed during {self.state.value}: {error}")
        self.state = PipelineState.FAILED
        result.state = PipelineState.FAILED
        result.error = str(error)
        self.last_result = result

    def _shutdown(self, executor: ThreadPoolExecutor, futures: list[Future]) -> None:
        """Graceful shutdown bounded by config.shutdown_timeout, then forced."""
        _, pending = wait(futures, timeout=self.config.shutdown_timeout)
        if pending:
            logger.warning(
                f"{len(pending)} tasks still running after "
                f"{self.config.shutdown_timeout:.0f}s, forcing shutdown"
            )
            executor.shutdown(wait=False, cancel_futures=True)
            return
        executor.shutdown(wait=True)

