"""Pipeline control structures: configuration, states, and run results."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.etl.loaders.base import LoaderStats
    from src.settings import Settings
    from src.settings.database import DatabaseSettings


class PipelineState(Enum):
    """Orchestrator run states, in execution order."""

    IDLE = "idle"
    DISCOVERING = "discovering"
    PARSING = "parsing"
    PARSE_BARRIER = "parse_barrier"
    TRANSFORMING = "transforming"
    TRANSFORM_BARRIER = "transform_barrier"
    AGGREGATING = "aggregating"
    WRITING = "writing"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class StructureOverride:
    """Explicit root/row element names, bypassing structure inference.

    Attributes:
        root_tag: Expected root element name.
        row_tag: Repeating record element name.
    """

    root_tag: str | None = None
    row_tag: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither tag is set."""
        return not self.root_tag and not self.row_tag


@dataclass(frozen=True)
class PipelineConfig:
    """Run configuration built once by the bootstrap layer.

    Attributes:
        input_dir: Directory scanned for XML files.
        max_workers: Worker pool size.
        structure: Optional root/row override for every file.
        shutdown_timeout: Seconds to wait for a graceful pool shutdown.
        quality_log_path: Append-only data quality log.
        quality_echo: Echo quality rejections to stderr.
        database: Target database settings (None for a lazily built default).
        dtd_dirs: Extra directories searched for DTD files.
    """

    input_dir: Path | None = None
    max_workers: int = 1
    structure: StructureOverride = field(default_factory=StructureOverride)
    shutdown_timeout: float = 60.0
    quality_log_path: Path = Path("data-quality.log")
    quality_echo: bool = False
    database: "DatabaseSettings | None" = None
    dtd_dirs: tuple[Path, ...] = ()

    @classmethod
    def from_settings(cls, app_settings: "Settings") -> "PipelineConfig":
        """Build configuration from the application settings.

        Args:
            app_settings: Loaded global settings.

        Returns:
            Immutable pipeline configuration.
        """
        etl = app_settings.etl
        input_dir = Path(etl.input_dir) if etl.input_dir else app_settings.paths.xml_dir
        return cls(
            input_dir=input_dir,
            max_workers=etl.effective_workers,
            structure=StructureOverride(
                root_tag=etl.root_tag or None,
                row_tag=etl.row_tag or None,
            ),
            shutdown_timeout=etl.shutdown_timeout,
            quality_log_path=Path(etl.quality_log),
            quality_echo=etl.quality_echo,
            database=app_settings.database,
            dtd_dirs=(app_settings.paths.data_dir,),
        )


@dataclass
class PipelineRunResult:
    """Report of one orchestrator run.

    Attributes:
        elapsed_seconds: Wall time of the run.
        files_processed: Files parsed successfully.
        total_records_processed: Row elements parsed across those files.
        files_discovered: XML files found under the input directory.
        failed_files: Files that failed to parse or transform.
        movies: Movies in the final batch.
        stars: Stars in the final batch.
        star_relations: Star/movie pairs in the final batch.
        genres: Distinct genres in the final batch.
        genre_relations: Movie/genre pairs in the final batch.
        orphan_movies_removed: Movies dropped for having no star relation.
        dangling_relations_removed: Star relations naming an unknown movie.
        load_stats: Writer statistics per table.
        state: Final orchestrator state.
        error: Fatal error message when the run failed.
    """

    elapsed_seconds: float = 0.0
    files_processed: int = 0
    total_records_processed: int = 0
    files_discovered: int = 0
    failed_files: list[str] = field(default_factory=list)
    movies: int = 0
    stars: int = 0
    star_relations: int = 0
    genres: int = 0
    genre_relations: int = 0
    orphan_movies_removed: int = 0
    dangling_relations_removed: int = 0
    load_stats: dict[str, "LoaderStats"] = field(default_factory=dict)
    state: PipelineState = PipelineState.IDLE
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Run reached the DONE state."""
        return self.state is PipelineState.DONE

    def summary_lines(self) -> list[str]:
        """Format the run report, one line per figure."""
        lines = [
            f"State: {self.state.value}",
            f"Elapsed: {self.elapsed_seconds:.2f}s",
            f"Files processed: {self.files_processed}/{self.files_discovered}",
            f"Total records processed: {self.total_records_processed}",
            f"Movies: {self.movies} (orphans removed: {self.orphan_movies_removed})",
            f"Stars: {self.stars}",
            f"Star relations: {self.star_relations} "
            f"(dangling removed: {self.dangling_relations_removed})",
            f"Genres: {self.genres}",
            f"Genre relations: {self.genre_relations}",
        ]
        total = None
        for table, stats in self.load_stats.items():
            lines.append(
                f"Table {table}: inserted={stats.inserted}, skipped={stats.skipped}, "
                f"errors={stats.errors}"
            )
            total = stats if total is None else total.merge(stats)
        if total is not None:
            lines.append(
                f"Load total: {total.total_processed} rows, "
                f"success rate {total.success_rate:.2f}%"
            )
        for failed in self.failed_files:
            lines.append(f"Failed file: {failed}")
        if self.error:
            lines.append(f"Error: {self.error}")
        return lines
