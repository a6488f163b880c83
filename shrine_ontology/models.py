"""
Shrine Ontology Models.

============================================================
PURPOSE
============================================================
Core data models for the shrine ontology conversion.

This module defines:
1. Node kinds (concept vs. modifier taxonomies)
2. Sensitivity classes (public vs. sensitive)
3. The OntologyNode record, one per shrine.csv row

A node's full ancestry is embedded in its backslash-delimited
path (c_fullname), e.g. \\SHRINE\\Diagnoses\\Neoplasms\\.

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from core.constants import (
    CONCEPT_FACT_COLUMN,
    MODIFIER_FACT_COLUMN,
    PATH_DELIMITER,
    SHRINE_ONTOLOGY_COLUMNS,
)
from core.exceptions import MalformedRowError, UnknownNodeKindError


# ============================================================
# ENUMS
# ============================================================

class NodeKind(str, Enum):
    """
    The two parallel taxonomies of an ontology.

    Each kind owns its own surrogate ID space.
    """
    CONCEPT = CONCEPT_FACT_COLUMN
    MODIFIER = MODIFIER_FACT_COLUMN

    @classmethod
    def from_fact_table_column(cls, value: str) -> "NodeKind":
        """Parse a c_facttablecolumn value, case-insensitive."""
        normalized = (value or "").strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise UnknownNodeKindError(value or "")


class SensitivityClass(str, Enum):
    """Whether a node may appear in the public release."""
    PUBLIC = "public"
    SENSITIVE = "sensitive"


# ============================================================
# ONTOLOGY NODE
# ============================================================

@dataclass
class OntologyNode:
    """
    One shrine ontology entry.

    Column values are kept as text so that emission reproduces
    the source bytes; numeric columns are only validated.
    """
    hlevel: str
    path: str
    name: str
    synonym_cd: str = ""
    visual_attributes: str = ""
    total_num: str = ""
    base_code: str = ""
    metadata_xml: str = ""
    fact_table_column: str = ""
    table_name: str = ""
    column_name: str = ""
    column_data_type: str = ""
    operator: str = ""
    dim_code: str = ""
    comment: str = ""
    tooltip: str = ""
    update_date: str = ""
    download_date: str = ""
    import_date: str = ""
    sourcesystem_cd: str = ""
    valuetype_cd: str = ""
    m_applied_path: str = ""
    m_exclusion_cd: str = ""

    # Set only for sensitive nodes
    surrogate_id: Optional[int] = None
    child_surrogate_ids: List[int] = field(default_factory=list)

    line_number: Optional[int] = field(default=None, compare=False)

    @classmethod
    def from_row(cls, fields: Sequence[str], line_number: Optional[int] = None) -> "OntologyNode":
        """
        Build a node from one parsed shrine.csv row.

        Raises:
            MalformedRowError: wrong column count or non-integer
                c_hlevel / c_totalnum
        """
        if len(fields) != len(SHRINE_ONTOLOGY_COLUMNS):
            raise MalformedRowError(
                f"Expected {len(SHRINE_ONTOLOGY_COLUMNS)} columns, got {len(fields)}",
                field="columns",
                actual=len(fields),
                line_number=line_number,
            )

        path = fields[1]
        _require_int(fields[0], "c_hlevel", line_number, path, allow_empty=False)
        _require_int(fields[5], "c_totalnum", line_number, path, allow_empty=True)

        return cls(*fields, line_number=line_number)

    def to_fields(self) -> List[str]:
        """Return the schema columns in order."""
        return [
            self.hlevel,
            self.path,
            self.name,
            self.synonym_cd,
            self.visual_attributes,
            self.total_num,
            self.base_code,
            self.metadata_xml,
            self.fact_table_column,
            self.table_name,
            self.column_name,
            self.column_data_type,
            self.operator,
            self.dim_code,
            self.comment,
            self.tooltip,
            self.update_date,
            self.download_date,
            self.import_date,
            self.sourcesystem_cd,
            self.valuetype_cd,
            self.m_applied_path,
            self.m_exclusion_cd,
        ]

    @property
    def is_sensitive(self) -> bool:
        return self.surrogate_id is not None

    @property
    def segments(self) -> List[str]:
        """Path segments without the wrapping delimiters."""
        return split_path(self.path)


# ============================================================
# PATH HELPERS
# ============================================================

def is_wrapped_path(path: str) -> bool:
    """Check the path starts and ends with the delimiter."""
    return (
        len(path) >= 2
        and path.startswith(PATH_DELIMITER)
        and path.endswith(PATH_DELIMITER)
    )


def split_path(path: str) -> List[str]:
    r"""Split \A\B\ into ['A', 'B']."""
    inner = path[1:-1]
    if not inner:
        return []
    return inner.split(PATH_DELIMITER)


def join_path(segments: Sequence[str]) -> str:
    r"""Join ['A', 'B'] into \A\B\."""
    return PATH_DELIMITER + PATH_DELIMITER.join(segments) + PATH_DELIMITER


def _require_int(
    value: str,
    column: str,
    line_number: Optional[int],
    path: str,
    allow_empty: bool,
) -> None:
    if allow_empty and value.strip() == "":
        return
    try:
        int(value.strip())
    except ValueError:
        raise MalformedRowError(
            f"Column {column} is not an integer",
            field=column,
            actual=value,
            line_number=line_number,
            path=path,
        ) from None
