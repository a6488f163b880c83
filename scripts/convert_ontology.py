#!/usr/bin/env python3
"""
Scripts - Convert Ontology.

============================================================
USAGE
============================================================
    python -m scripts.convert_ontology --sensitive-concepts sensitive.yaml
    python -m scripts.convert_ontology --config loader.yaml --only ontology
    python -m scripts.convert_ontology --emit-public --skip-bad-rows

============================================================
PURPOSE
============================================================
Runs the one-shot conversion of an i2b2/shrine dataset into
its publishable form:

- shrine.csv: sensitive concepts replaced by surrogate IDs
  with descendant links
- AdapterMappings.xml: sensitive entries removed
- patient_dimension.csv: copied with the dummy flag column

Exit codes: 0 success, 1 conversion failure, 2 usage error.

============================================================
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from converters.adapter_mappings import convert_adapter_mappings
from converters.patient_dimension import convert_patient_dimension
from converters.tabular import TabularSink, TabularSource
from core.config import LoaderConfig, load_config
from core.constants import ADAPTER_MAPPINGS, PATIENT_DIMENSION, SHRINE_ONTOLOGY
from core.exceptions import LoaderException
from shrine_ontology.config import EmissionPolicy, ErrorPolicy, load_sensitive_paths
from shrine_ontology.converter import ShrineOntologyConverter


# ============================================================
# LOGGING
# ============================================================

def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

logger = logging.getLogger(__name__)


# ============================================================
# CONVERSIONS
# ============================================================

TARGETS = {
    "ontology": SHRINE_ONTOLOGY,
    "adapter-mappings": ADAPTER_MAPPINGS,
    "patient-dimension": PATIENT_DIMENSION,
}


def run_ontology(config: LoaderConfig) -> None:
    source = TabularSource(config.input_paths[SHRINE_ONTOLOGY], name="shrine.csv")
    converter = ShrineOntologyConverter(config.ontology)
    with TabularSink(config.output_paths[SHRINE_ONTOLOGY], name="shrine.csv") as sink:
        result = converter.convert(source, sink)
    for rejection in result.rejections:
        logger.warning(f"Rejected line {rejection.line_number}: {rejection.reason}")


def run_adapter_mappings(config: LoaderConfig) -> None:
    convert_adapter_mappings(
        config.input_paths[ADAPTER_MAPPINGS],
        config.output_paths[ADAPTER_MAPPINGS],
        config.ontology.sensitive_paths,
    )


def run_patient_dimension(config: LoaderConfig) -> None:
    source = TabularSource(config.input_paths[PATIENT_DIMENSION], name="patient_dimension.csv")
    with TabularSink(config.output_paths[PATIENT_DIMENSION], name="patient_dimension.csv") as sink:
        convert_patient_dimension(source, sink, public_key=config.public_key)


RUNNERS = {
    ADAPTER_MAPPINGS: run_adapter_mappings,
    PATIENT_DIMENSION: run_patient_dimension,
    SHRINE_ONTOLOGY: run_ontology,
}


# ============================================================
# ENTRY POINT
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a shrine ontology dataset into its redacted form",
    )

    parser.add_argument("--config", type=Path, help="YAML loader configuration")
    parser.add_argument("--sensitive-concepts", type=Path, help="YAML list of sensitive concept paths")
    parser.add_argument(
        "--only",
        action="append",
        choices=sorted(TARGETS),
        help="Restrict to one conversion (repeatable)",
    )
    parser.add_argument("--emit-public", action="store_true", help="Also write public ontology rows")
    parser.add_argument("--skip-bad-rows", action="store_true", help="Skip malformed rows instead of aborting")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        if args.sensitive_concepts:
            config.ontology.sensitive_paths |= load_sensitive_paths(args.sensitive_concepts)
        if args.emit_public:
            config.ontology.emission_policy = EmissionPolicy.ALL
        if args.skip_bad_rows:
            config.ontology.error_policy = ErrorPolicy.SKIP
        if args.log_level:
            config.log_level = args.log_level
    except LoaderException as e:
        setup_logging("INFO")
        logger.error(f"Configuration failed: {e.to_log_format()}")
        return 1

    setup_logging(config.log_level)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Invalid configuration: {error}")
        return 1

    if not config.ontology.sensitive_paths:
        logger.warning("No sensitive concepts configured; every row is public")

    selected = [TARGETS[t] for t in args.only] if args.only else list(RUNNERS)

    for key in selected:
        try:
            RUNNERS[key](config)
        except LoaderException as e:
            logger.error(f"Conversion of {key} failed: {e.to_log_format()}")
            return 1
        logger.info(f"Converted {key} -> {config.output_paths[key]}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
