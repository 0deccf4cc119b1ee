"""Generation pass: record extraction, validation, grouping and emission."""

from .diagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind, DiagnosticSink
from .emitter import DispatchBranch, DispatchPlan, FactoryEmitter, GeneratedArtifact, ImportSpec
from .filer import SourceFiler
from .processor import FactoryProcessor, PassResult, generate, generate_from_modules
from .records import AnnotatedRecord, resolve_group_type
from .registry import Group, GroupRegistry, RegistryState
from .validation import DEFAULT_MAX_SUPERCLASS_DEPTH, RecordValidator

__all__ = [
    # Records
    "AnnotatedRecord", "resolve_group_type",
    # Validation
    "RecordValidator", "DEFAULT_MAX_SUPERCLASS_DEPTH",
    # Registry
    "Group", "GroupRegistry", "RegistryState",
    # Emission
    "DispatchBranch", "DispatchPlan", "FactoryEmitter", "GeneratedArtifact", "ImportSpec", "SourceFiler",
    # Diagnostics
    "Diagnostic", "DiagnosticCollector", "DiagnosticKind", "DiagnosticSink",
    # Orchestration
    "FactoryProcessor", "PassResult", "generate", "generate_from_modules",
]
