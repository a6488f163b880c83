"""
Shrine Ontology - Path Classifier.

============================================================
PURPOSE
============================================================
Decides, for each ontology row, whether it is public or
sensitive.

- Sensitivity is EXACT membership in the configured set
  (\\A\\B\\ being sensitive says nothing about \\A\\B\\C\\)
- Node kind is read only for sensitive rows
- Errors are raised per record; the caller decides
  whether to skip or abort

Prefix matching is the linker's job, not this module's.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from core.exceptions import MalformedRowError, UnknownNodeKindError

from .models import NodeKind, OntologyNode, SensitivityClass, is_wrapped_path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Classification outcome for one node."""
    sensitivity: SensitivityClass
    node_kind: Optional[NodeKind] = None

    @property
    def is_sensitive(self) -> bool:
        return self.sensitivity == SensitivityClass.SENSITIVE


PUBLIC = Classification(SensitivityClass.PUBLIC)


class PathClassifier:
    """
    Exact-match sensitivity classifier.

    Lookup is a frozenset membership test, O(1) per row.
    """

    def __init__(self, sensitive_paths: Iterable[str]):
        self._sensitive_paths: FrozenSet[str] = frozenset(sensitive_paths)
        logger.debug(f"Classifier loaded with {len(self._sensitive_paths)} sensitive paths")

    @property
    def sensitive_paths(self) -> FrozenSet[str]:
        return self._sensitive_paths

    def is_sensitive_path(self, path: str) -> bool:
        return path in self._sensitive_paths

    def classify(self, node: OntologyNode) -> Classification:
        """
        Classify a node.

        Raises:
            UnknownNodeKindError: sensitive row with a fact table
                column other than concept_cd / modifier_cd
            MalformedRowError: sensitive row whose path is not
                wrapped in delimiters
        """
        if not self.is_sensitive_path(node.path):
            return PUBLIC

        if not is_wrapped_path(node.path):
            raise MalformedRowError(
                "Sensitive path must start and end with the delimiter",
                field="c_fullname",
                actual=node.path,
                line_number=node.line_number,
                path=node.path,
            )

        try:
            kind = NodeKind.from_fact_table_column(node.fact_table_column)
        except UnknownNodeKindError as e:
            raise UnknownNodeKindError(
                e.value,
                line_number=node.line_number,
                path=node.path,
            ) from None

        return Classification(SensitivityClass.SENSITIVE, kind)
