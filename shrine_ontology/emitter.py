"""
Shrine Ontology - Emitter.

============================================================
PURPOSE
============================================================
Serializes the classified, linked index into the converted
shrine.csv.

Output layout:
- Header: source columns + node_surrogate_id, child_surrogate_ids
- Public rows (EmissionPolicy.ALL only)
- Sensitive concepts, first-seen order
- Sensitive modifiers, buckets flattened, first-seen order

Before emission the public ONTOLOGYVERSION node
(\\<root>\\ONTOLOGYVERSION\\<label>\\) is renamed to
<label>_Converted so the converted ontology is told apart
from the source one.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from converters.tabular import format_csv_line
from core.constants import (
    CONVERTED_SUFFIX,
    DEFAULT_ONTOLOGY_ROOT,
    LINK_COLUMNS,
    ONTOLOGY_VERSION_MARKER,
)

from .config import EmissionPolicy
from .index import OntologyIndex
from .models import OntologyNode, is_wrapped_path, join_path, split_path


logger = logging.getLogger(__name__)


class RowSink(Protocol):
    def write_header(self, columns: Sequence[str]) -> None: ...

    def write_line(self, fields: Sequence[object]) -> None: ...


@dataclass
class EmissionReport:
    """Rows written per partition."""
    public_rows: int = 0
    concept_rows: int = 0
    modifier_rows: int = 0

    @property
    def total_rows(self) -> int:
        return self.public_rows + self.concept_rows + self.modifier_rows


# ============================================================
# HEADER
# ============================================================

def render_header(columns: Sequence[str]) -> str:
    """Quoted, comma-joined header line without trailing separator."""
    return format_csv_line(columns)


def output_columns(header: Sequence[str]) -> List[str]:
    """Source header followed by the link columns."""
    return list(header) + list(LINK_COLUMNS)


# ============================================================
# VERSION RENAME
# ============================================================

def is_version_node_path(path: str, root: str = DEFAULT_ONTOLOGY_ROOT) -> bool:
    r"""True for exactly \<root>\ONTOLOGYVERSION\<label>\."""
    if not is_wrapped_path(path):
        return False
    segments = split_path(path)
    return (
        len(segments) == 3
        and segments[0] == root
        and segments[1] == ONTOLOGY_VERSION_MARKER
        and segments[2] != ""
    )


def converted_version_path(path: str) -> str:
    segments = split_path(path)
    segments[-1] = segments[-1] + CONVERTED_SUFFIX
    return join_path(segments)


def rename_version_nodes(index: OntologyIndex, root: str = DEFAULT_ONTOLOGY_ROOT) -> int:
    """
    Rename the public ontology version node(s).

    path, name, dim_code and tooltip all become the converted
    path. The public container is rekeyed in place, keeping
    its order.

    Returns:
        Number of renamed nodes
    """
    renamed = 0
    rekeyed = {}
    for path, node in index.public.items():
        if is_version_node_path(path, root):
            new_path = converted_version_path(path)
            node.path = new_path
            node.name = new_path
            node.dim_code = new_path
            node.tooltip = new_path
            renamed += 1
            logger.info(f"Renamed ontology version node {path} -> {new_path}")
        rekeyed[node.path] = node

    if renamed:
        index.public.clear()
        index.public.update(rekeyed)
    return renamed


# ============================================================
# ROWS
# ============================================================

def node_output_fields(node: OntologyNode) -> List[str]:
    """Schema columns plus surrogate ID and comma-joined child IDs."""
    surrogate = "" if node.surrogate_id is None else str(node.surrogate_id)
    children = ",".join(str(c) for c in node.child_surrogate_ids)
    return node.to_fields() + [surrogate, children]


def emit_ontology(
    index: OntologyIndex,
    header: Sequence[str],
    sink: RowSink,
    policy: EmissionPolicy = EmissionPolicy.SENSITIVE_ONLY,
) -> EmissionReport:
    """
    Write header and rows to the sink.

    Under SENSITIVE_ONLY public rows are not written at all.
    """
    report = EmissionReport()
    sink.write_header(output_columns(header))

    if policy == EmissionPolicy.ALL:
        for node in index.iter_public():
            sink.write_line(node_output_fields(node))
            report.public_rows += 1

    for node in index.iter_concepts():
        logger.debug(f"{node.path} {node.surrogate_id} {node.child_surrogate_ids} {node.visual_attributes}")
        sink.write_line(node_output_fields(node))
        report.concept_rows += 1

    for node in index.iter_modifier_rows():
        logger.debug(f"{node.path} {node.surrogate_id} {node.child_surrogate_ids} {node.visual_attributes}")
        sink.write_line(node_output_fields(node))
        report.modifier_rows += 1

    logger.info(
        f"Emitted {report.total_rows} rows ({policy.value}): "
        f"{report.public_rows} public, {report.concept_rows} concepts, "
        f"{report.modifier_rows} modifiers"
    )
    return report
