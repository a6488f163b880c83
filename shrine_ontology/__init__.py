"""
Shrine Ontology Package.

Classifies, relinks and emits a path-encoded shrine ontology
so a redacted copy can be published.

Modules:
- models: NodeKind, SensitivityClass, OntologyNode
- classifier: Exact-match sensitivity classification
- allocator: Per-kind surrogate ID counters
- index: OntologyIndex and index construction
- linker: Transitive ancestor linking
- emitter: Version rename and CSV emission
- converter: Pipeline driver
- config: Policies and sensitive path loading
"""

from .models import NodeKind, SensitivityClass, OntologyNode
from .classifier import Classification, PathClassifier
from .allocator import SurrogateIdAllocator
from .index import OntologyIndex, IndexBuildResult, RowRejection, build_index
from .linker import LinkReport, ancestor_paths, link_ancestors
from .emitter import EmissionReport, emit_ontology, render_header, rename_version_nodes
from .config import EmissionPolicy, ErrorPolicy, OntologyConfig, load_sensitive_paths
from .converter import ConversionResult, ConversionStatus, ShrineOntologyConverter

__all__ = [
    # Models
    "NodeKind",
    "SensitivityClass",
    "OntologyNode",
    # Stages
    "Classification",
    "PathClassifier",
    "SurrogateIdAllocator",
    "OntologyIndex",
    "IndexBuildResult",
    "RowRejection",
    "build_index",
    "LinkReport",
    "ancestor_paths",
    "link_ancestors",
    "EmissionReport",
    "emit_ontology",
    "render_header",
    "rename_version_nodes",
    # Config
    "EmissionPolicy",
    "ErrorPolicy",
    "OntologyConfig",
    "load_sensitive_paths",
    # Driver
    "ConversionResult",
    "ConversionStatus",
    "ShrineOntologyConverter",
]
