"""
Shrine Ontology - Ancestor Linker.

============================================================
PURPOSE
============================================================
Once the human-readable hierarchy is stripped from the
sensitive rows, the only structure left is the list of
descendant surrogate IDs stored on each sensitive node.

For every sensitive node N with path P:
1. Split P into segments
2. Drop the last segment, rebuild the ancestor path
3. If that ancestor is a sensitive node of the same kind,
   append N's surrogate ID to its child list
4. Repeat until no segments remain; the last probe is the
   root address \\\\ (empty segment list)

Linking is TRANSITIVE: a node is linked to every sensitive
ancestor on its path, not just the nearest one, so each
ancestor ends up with all sensitive descendants below it.
Concepts and modifiers are linked within their own kind.

Must run after classification has completed.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Set

from .index import OntologyIndex
from .models import NodeKind, join_path, split_path


logger = logging.getLogger(__name__)


@dataclass
class LinkReport:
    """Number of child-ID appends made per kind."""
    concept_links: int = 0
    modifier_links: int = 0

    @property
    def total_links(self) -> int:
        return self.concept_links + self.modifier_links


def ancestor_paths(path: str) -> Iterator[str]:
    r"""
    Yield every strict ancestor of a path, nearest first, ending
    with the root address.

    \A\B\C\ -> \A\B\, \A\, \\
    """
    segments = split_path(path)
    while segments:
        segments = segments[:-1]
        yield join_path(segments)


def link_node(index: OntologyIndex, kind: NodeKind, path: str, surrogate_id: int) -> int:
    """
    Append a descendant's ID to all of its sensitive ancestors.

    Every row of an ancestor modifier bucket receives the ID.

    Returns:
        Number of appends made
    """
    appended = 0
    for ancestor in ancestor_paths(path):
        for node in index.lookup(kind, ancestor):
            node.child_surrogate_ids.append(surrogate_id)
            appended += 1
    return appended


def link_ancestors(index: OntologyIndex, dedupe_modifier_rows: bool = True) -> LinkReport:
    """
    Populate child_surrogate_ids across the sensitive partitions.

    Args:
        index: Fully classified index, mutated in place
        dedupe_modifier_rows: Link each distinct modifier path once.
            When False every row of a bucket is linked, so an
            ancestor receives the same ID once per sibling row.

    Returns:
        LinkReport with append counts
    """
    report = LinkReport()

    for node in index.sensitive_nodes(NodeKind.CONCEPT):
        report.concept_links += link_node(index, NodeKind.CONCEPT, node.path, node.surrogate_id)

    linked: Set[str] = set()
    for node in index.sensitive_nodes(NodeKind.MODIFIER):
        if dedupe_modifier_rows and node.path in linked:
            continue
        linked.add(node.path)
        report.modifier_links += link_node(index, NodeKind.MODIFIER, node.path, node.surrogate_id)

    logger.info(
        f"Linked sensitive ancestors: {report.concept_links} concept links, "
        f"{report.modifier_links} modifier links"
    )
    return report
