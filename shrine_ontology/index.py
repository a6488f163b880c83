"""
Shrine Ontology - Index.

============================================================
PURPOSE
============================================================
Holds classified nodes in three keyed containers:

- public:    path -> node
- concepts:  path -> node            (sensitive, concept_cd)
- modifiers: path -> [node, ...]     (sensitive, modifier_cd)

Several modifier rows may share one path (one value-row per
applied path); they form a bucket sharing one surrogate ID.

The index is an explicit object owned by the pipeline
driver; nothing here is module-level state.

============================================================
INDEX CONSTRUCTION
============================================================
For each row:
1. Parse into an OntologyNode (column count, numeric fields)
2. Classify (exact path membership, node kind)
3. Allocate a surrogate ID (sensitive rows only)
4. Insert into the matching container

IDs are allocated only after steps 1-2 succeed, so a rejected
row never consumes an ID.

============================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from core.exceptions import RowError

from .allocator import SurrogateIdAllocator, create_allocator
from .classifier import PathClassifier
from .config import ErrorPolicy
from .models import NodeKind, OntologyNode


logger = logging.getLogger(__name__)


# ============================================================
# ONTOLOGY INDEX
# ============================================================

class OntologyIndex:
    """Classified ontology nodes, insertion ordered."""

    def __init__(self):
        self.public: Dict[str, OntologyNode] = {}
        self.concepts: Dict[str, OntologyNode] = {}
        self.modifiers: Dict[str, List[OntologyNode]] = {}

    # ---------------------------------------------------------
    # INSERTION
    # ---------------------------------------------------------

    def add_public(self, node: OntologyNode) -> None:
        if node.path in self.public:
            logger.debug(f"Public path {node.path} seen again, keeping last row")
        self.public[node.path] = node

    def add_concept(self, node: OntologyNode) -> bool:
        """
        Insert a sensitive concept. Last write wins.

        Returns:
            False if the path was already present
        """
        is_new = node.path not in self.concepts
        if not is_new:
            logger.warning(
                f"Duplicate sensitive concept path {node.path} "
                f"(line {node.line_number}), overwriting previous row"
            )
        self.concepts[node.path] = node
        return is_new

    def add_modifier(self, node: OntologyNode) -> bool:
        """
        Append a sensitive modifier row to its path bucket.

        Returns:
            True if this row opened a new bucket
        """
        bucket = self.modifiers.get(node.path)
        if bucket is None:
            self.modifiers[node.path] = [node]
            return True
        bucket.append(node)
        return False

    # ---------------------------------------------------------
    # QUERIES
    # ---------------------------------------------------------

    def lookup(self, kind: NodeKind, path: str) -> List[OntologyNode]:
        """All sensitive rows of a kind registered at exactly this path."""
        if kind == NodeKind.CONCEPT:
            node = self.concepts.get(path)
            return [node] if node is not None else []
        return self.modifiers.get(path, [])

    def sensitive_nodes(self, kind: NodeKind) -> List[OntologyNode]:
        """Every sensitive row of a kind, modifier buckets flattened."""
        if kind == NodeKind.CONCEPT:
            return list(self.concepts.values())
        return list(self.iter_modifier_rows())

    def iter_public(self) -> Iterator[OntologyNode]:
        return iter(list(self.public.values()))

    def iter_concepts(self) -> Iterator[OntologyNode]:
        return iter(list(self.concepts.values()))

    def iter_modifier_rows(self) -> Iterator[OntologyNode]:
        """All modifier rows, buckets flattened in first-seen order."""
        for bucket in list(self.modifiers.values()):
            yield from bucket

    def counts(self) -> Dict[str, int]:
        return {
            "public": len(self.public),
            "sensitive_concepts": len(self.concepts),
            "sensitive_modifier_paths": len(self.modifiers),
            "sensitive_modifier_rows": sum(len(b) for b in self.modifiers.values()),
        }


# ============================================================
# BUILD RESULT
# ============================================================

@dataclass
class RowRejection:
    """A row that could not be indexed."""
    line_number: Optional[int]
    path: Optional[str]
    error: RowError

    @property
    def reason(self) -> str:
        return self.error.message


@dataclass
class IndexBuildResult:
    """Outcome of classifying a batch of rows."""
    index: OntologyIndex
    allocator: SurrogateIdAllocator
    rows_read: int = 0
    rows_public: int = 0
    rows_sensitive_concept: int = 0
    rows_sensitive_modifier: int = 0
    rejections: List[RowRejection] = field(default_factory=list)

    @property
    def rows_classified(self) -> int:
        return self.rows_public + self.rows_sensitive_concept + self.rows_sensitive_modifier

    @property
    def rows_rejected(self) -> int:
        return len(self.rejections)


# ============================================================
# INDEX CONSTRUCTION
# ============================================================

def index_node(
    node: OntologyNode,
    classifier: PathClassifier,
    allocator: SurrogateIdAllocator,
    index: OntologyIndex,
) -> Optional[NodeKind]:
    """
    Classify one parsed node and insert it into the index.

    Returns:
        The node kind for sensitive nodes, None for public ones
    """
    classification = classifier.classify(node)

    if not classification.is_sensitive:
        index.add_public(node)
        return None

    kind = classification.node_kind
    node.surrogate_id, _ = allocator.allocate(kind, node.path)
    node.child_surrogate_ids = []

    if kind == NodeKind.MODIFIER:
        index.add_modifier(node)
    else:
        index.add_concept(node)

    return kind


def build_index(
    rows: Iterable[Sequence[str]],
    classifier: PathClassifier,
    allocator: Optional[SurrogateIdAllocator] = None,
    error_policy: ErrorPolicy = ErrorPolicy.ABORT,
    start_line: int = 2,
) -> IndexBuildResult:
    """
    Parse and classify header-stripped shrine.csv rows.

    Args:
        rows: Parsed rows in schema column order
        classifier: Exact-match sensitivity classifier
        allocator: ID allocator (a fresh one if omitted)
        error_policy: ABORT raises the first RowError,
            SKIP records it and continues
        start_line: Line number of the first row (header is 1)

    Returns:
        IndexBuildResult with the populated index and counts
    """
    allocator = allocator or create_allocator()
    result = IndexBuildResult(index=OntologyIndex(), allocator=allocator)

    for offset, fields in enumerate(rows):
        line_number = start_line + offset
        result.rows_read += 1

        try:
            node = OntologyNode.from_row(fields, line_number=line_number)
            kind = index_node(node, classifier, allocator, result.index)
        except RowError as e:
            if error_policy == ErrorPolicy.ABORT:
                raise
            logger.warning(f"Skipping row: {e.to_log_format()}")
            result.rejections.append(RowRejection(line_number, e.path, e))
            continue

        if kind is None:
            result.rows_public += 1
        elif kind == NodeKind.CONCEPT:
            result.rows_sensitive_concept += 1
        else:
            result.rows_sensitive_modifier += 1

    logger.info(
        f"Classified {result.rows_classified}/{result.rows_read} rows: "
        f"{result.rows_public} public, "
        f"{result.rows_sensitive_concept} sensitive concepts, "
        f"{result.rows_sensitive_modifier} sensitive modifiers, "
        f"{result.rows_rejected} rejected"
    )
    return result
