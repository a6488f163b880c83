"""
Shrine Ontology - Converter.

============================================================
PURPOSE
============================================================
Pipeline driver for one shrine.csv conversion.

    raw rows -> classify (+ surrogate IDs) -> OntologyIndex
             -> link ancestors -> rename version node -> emit

============================================================
DESIGN
============================================================
- Single-threaded, one pass per stage
- The index is created per run and owned by the driver
- Per-record errors follow the configured ErrorPolicy
- Stage failures are re-raised as typed exceptions carrying
  the file name and stage

============================================================
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from core.exceptions import LoaderException, PipelineError, RowError

from .classifier import PathClassifier
from .config import EmissionPolicy, ErrorPolicy, OntologyConfig
from .emitter import EmissionReport, RowSink, emit_ontology, rename_version_nodes
from .index import IndexBuildResult, OntologyIndex, RowRejection, build_index
from .linker import LinkReport, link_ancestors


logger = logging.getLogger(__name__)


class RowSource(Protocol):
    name: str

    def read(self) -> Tuple[List[str], List[List[str]]]: ...


# ============================================================
# RESULT TYPES
# ============================================================

class ConversionStage(str, Enum):
    PARSE = "parse"
    LINK = "link"
    EMIT = "emit"


class ConversionStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class StageMetrics:
    """Metrics for a single conversion stage."""

    stage: ConversionStage
    records_processed: int = 0
    records_succeeded: int = 0
    records_failed: int = 0
    duration_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.records_processed == 0:
            return 0.0
        return self.records_succeeded / self.records_processed


@dataclass
class ConversionResult:
    """Result of a complete shrine ontology conversion."""

    source_name: str
    status: ConversionStatus = ConversionStatus.SUCCESS
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    stage_metrics: Dict[ConversionStage, StageMetrics] = field(default_factory=dict)
    rejections: List[RowRejection] = field(default_factory=list)
    index: Optional[OntologyIndex] = None
    link_report: Optional[LinkReport] = None
    emission_report: Optional[EmissionReport] = None
    versions_renamed: int = 0

    @property
    def rows_rejected(self) -> int:
        return len(self.rejections)

    def summary(self) -> Dict[str, object]:
        return {
            "source": self.source_name,
            "status": self.status.value,
            "rows_rejected": self.rows_rejected,
            "rows_emitted": self.emission_report.total_rows if self.emission_report else 0,
            "links": self.link_report.total_links if self.link_report else 0,
            "versions_renamed": self.versions_renamed,
        }


# ============================================================
# CONVERTER
# ============================================================

class ShrineOntologyConverter:
    """
    Converts a shrine ontology table into its redacted form.

    Each call to convert() builds a fresh index, so one
    converter can be reused across runs.
    """

    def __init__(self, config: OntologyConfig):
        self._config = config
        self._classifier = PathClassifier(config.sensitive_paths)

    @property
    def config(self) -> OntologyConfig:
        return self._config

    def parse(
        self,
        source: RowSource,
        metrics: Optional[StageMetrics] = None,
    ) -> Tuple[List[str], IndexBuildResult]:
        """Read and classify the source rows."""
        metrics = metrics or StageMetrics(stage=ConversionStage.PARSE)
        start = time.monotonic()

        try:
            header, rows = source.read()
            built = build_index(rows, self._classifier, error_policy=self._config.error_policy)
        except RowError as e:
            raise PipelineError(
                f"Error parsing [{source.name}]: {e.message}",
                stage=ConversionStage.PARSE.value,
                file_name=source.name,
                context=dict(e.context),
                cause=e,
            ) from e
        except LoaderException as e:
            _tag_stage(e, ConversionStage.PARSE)
            raise
        finally:
            metrics.duration_seconds = time.monotonic() - start

        metrics.records_processed = built.rows_read
        metrics.records_succeeded = built.rows_classified
        metrics.records_failed = built.rows_rejected
        metrics.errors = [r.error.to_log_format() for r in built.rejections]
        return header, built

    def convert(self, source: RowSource, sink: RowSink) -> ConversionResult:
        """
        Run parse, link and emit for one source.

        Errors carry the failing stage in their context.

        Raises:
            SourceReadError: source missing or unreadable
            SinkWriteError: destination not writable
            PipelineError: a row error under ErrorPolicy.ABORT
        """
        result = ConversionResult(source_name=source.name)
        logger.info(f"Converting shrine ontology [{source.name}]")
        stage = ConversionStage.PARSE

        try:
            parse_metrics = StageMetrics(stage=ConversionStage.PARSE)
            result.stage_metrics[ConversionStage.PARSE] = parse_metrics
            header, built = self.parse(source, parse_metrics)
            result.index = built.index
            result.rejections = built.rejections

            stage = ConversionStage.LINK
            link_metrics = StageMetrics(stage=ConversionStage.LINK)
            result.stage_metrics[ConversionStage.LINK] = link_metrics
            start = time.monotonic()
            result.link_report = link_ancestors(
                built.index,
                dedupe_modifier_rows=self._config.dedupe_modifier_rows,
            )
            link_metrics.records_processed = len(built.index.concepts) + len(built.index.modifiers)
            link_metrics.records_succeeded = link_metrics.records_processed
            link_metrics.duration_seconds = time.monotonic() - start

            stage = ConversionStage.EMIT
            emit_metrics = StageMetrics(stage=ConversionStage.EMIT)
            result.stage_metrics[ConversionStage.EMIT] = emit_metrics
            start = time.monotonic()
            result.versions_renamed = rename_version_nodes(built.index, self._config.ontology_root)
            result.emission_report = emit_ontology(
                built.index,
                header,
                sink,
                policy=self._config.emission_policy,
            )
            emit_metrics.records_processed = result.emission_report.total_rows
            emit_metrics.records_succeeded = result.emission_report.total_rows
            emit_metrics.duration_seconds = time.monotonic() - start
        except LoaderException as e:
            _tag_stage(e, stage)
            result.status = ConversionStatus.FAILED
            result.completed_at = datetime.now(timezone.utc)
            logger.error(f"Shrine ontology conversion failed: {e.to_log_format()}")
            raise

        result.status = ConversionStatus.PARTIAL if result.rejections else ConversionStatus.SUCCESS
        result.completed_at = datetime.now(timezone.utc)
        logger.info(f"Shrine ontology conversion finished: {result.summary()}")
        return result


def _tag_stage(error: LoaderException, stage: ConversionStage) -> None:
    """Record the failing stage unless the error already names one."""
    error.context.setdefault("stage", stage.value)



def create_converter(
    sensitive_paths: Sequence[str],
    emission_policy: EmissionPolicy = EmissionPolicy.SENSITIVE_ONLY,
    error_policy: ErrorPolicy = ErrorPolicy.ABORT,
) -> ShrineOntologyConverter:
    """Factory function to create a converter."""
    return ShrineOntologyConverter(
        OntologyConfig(
            sensitive_paths=set(sensitive_paths),
            emission_policy=emission_policy,
            error_policy=error_policy,
        )
    )
