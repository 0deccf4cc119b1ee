# factorygen/processing/processor.py
"""Generation pass orchestration.

A pass has a predictable lifecycle:

1. ``process(declarations)``  -> one discovery round: extract, validate, add.
   The host may call it any number of times while new declarations appear.
2. ``process(..., processing_over=True)`` / ``finish()`` -> emit one factory
   per group, then ``clear()`` unconditionally so nothing is emitted twice.
3. ``run()`` -> single-round convenience over ``provider.iter_annotated()``.

Failures are reported through the diagnostic sink and never stop other
declarations (continue-on-error). ``FAIL_FAST=True`` restores abort-on-first
failure: the rest of the round is skipped and the pass emits nothing.
Anything other than a :class:`ProcessingError` (a bug in a provider or a
sink) aborts the pass: its state is cleared and the exception propagates.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from factorygen.conf import GeneratorConfig, Settings
from factorygen.exceptions import ProcessingError
from factorygen.metadata import Declaration, MetadataProvider, ReflectionMetadataProvider, SourceMetadataProvider
from factorygen.tracing import trace_span

from .diagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind, DiagnosticSink
from .emitter import FactoryEmitter, GeneratedArtifact
from .filer import SourceFiler
from .records import AnnotatedRecord
from .registry import GroupRegistry
from .validation import RecordValidator

logger = logging.getLogger(__name__)

__all__ = ["FactoryProcessor", "PassResult", "generate", "generate_from_modules"]


@dataclass(frozen=True)
class PassResult:
    artifacts: tuple[GeneratedArtifact, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.kind is DiagnosticKind.ERROR)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class FactoryProcessor:
    provider: MetadataProvider
    conf: Settings = field(default_factory=Settings)
    diagnostics: DiagnosticSink = field(default_factory=DiagnosticCollector)
    filer: SourceFiler | None = None

    config: GeneratorConfig = field(init=False, repr=False)
    registry: GroupRegistry = field(default_factory=GroupRegistry, init=False, repr=False)
    validator: RecordValidator = field(init=False, repr=False)
    emitter: FactoryEmitter = field(init=False, repr=False)

    _round: int = field(default=0, init=False, repr=False)
    _failed: bool = field(default=False, init=False, repr=False)
    _reported: list[Diagnostic] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.config = GeneratorConfig.from_settings(self.conf)
        if self.filer is None:
            self.filer = SourceFiler(self.config.output_dir, encoding=self.config.encoding)
        self.validator = RecordValidator(self.provider, max_superclass_depth=self.config.max_superclass_depth)
        self.emitter = FactoryEmitter(
            self.provider,
            self.filer,
            factory_suffix=self.config.factory_suffix,
            module_suffix=self.config.module_suffix,
            generated_package=self.config.generated_package,
            runtime_module=self.config.runtime_module,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def report(self, error: ProcessingError) -> None:
        """Send ``error`` to the diagnostic sink and record it for the pass result."""
        self._failed = True
        self._reported.append(
            Diagnostic(
                kind=DiagnosticKind.ERROR,
                message=error.message,
                declaration=error.declaration,
                code=error.code,
            )
        )
        self.diagnostics.report(error.declaration, error.message, kind=DiagnosticKind.ERROR, code=error.code)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def process_declaration(self, declaration: Declaration) -> AnnotatedRecord:
        """Extract, validate and register one declaration (raises on failure)."""
        record = AnnotatedRecord.from_declaration(declaration, self.provider)
        self.validator.validate(record)
        self.registry.add(record)
        return record

    def process(self, declarations: Iterable[Declaration], *, processing_over: bool = False) -> PassResult | None:
        """
        Run one discovery round.

        Returns the :class:`PassResult` when ``processing_over`` is set (the
        host's last round), otherwise ``None`` and records keep accumulating.
        """
        self._round += 1
        accepted = rejected = 0
        try:
            with trace_span("factorygen.process", attributes={"factorygen.round": self._round}) as span:
                for declaration in declarations:
                    try:
                        self.process_declaration(declaration)
                    except ProcessingError as exc:
                        rejected += 1
                        self.report(exc)
                        if self.config.fail_fast:
                            logger.info("fail-fast: skipping the rest of round %d", self._round)
                            break
                    else:
                        accepted += 1
                span.set_attribute("factorygen.accepted", accepted)
                span.set_attribute("factorygen.rejected", rejected)
        except Exception:
            # Partial pass state never survives an aborted round.
            logger.exception("round %d aborted by an unexpected error; pass state cleared", self._round)
            self.clear()
            raise

        logger.info(
            "round %d: %d record(s) accepted, %d rejected, %d group(s) pending",
            self._round, accepted, rejected, len(self.registry),
        )
        if processing_over:
            return self.finish()
        return None

    def finish(self) -> PassResult:
        """Emit every group, then clear the pass state (always)."""
        artifacts: list[GeneratedArtifact] = []
        try:
            groups = self.registry.begin_emission()
            if self.config.fail_fast and self._failed:
                logger.warning("pass failed; no factories emitted for %d group(s)", len(groups))
            else:
                for group in groups:
                    try:
                        artifacts.append(self.emitter.emit(group))
                    except ProcessingError as exc:
                        self.report(exc)
                        if self.config.fail_fast:
                            break
        finally:
            self.registry.end_emission()
            result = PassResult(artifacts=tuple(artifacts), diagnostics=tuple(self._reported))
            self.clear()
        logger.info(
            "pass finished: %d factory module(s) written, %d error(s)", len(result.artifacts), len(result.errors)
        )
        return result

    def run(self) -> PassResult:
        """Single-round pass over everything the provider discovers."""
        self.process(self.provider.iter_annotated())
        return self.finish()

    def clear(self) -> None:
        self.registry.clear()
        if self.filer is not None:
            self.filer.reset()
        self._reported = []
        self._failed = False
        self._round = 0


def _settings(conf: Settings | Mapping[str, Any] | None) -> Settings:
    if isinstance(conf, Settings):
        return conf
    return Settings.from_environment(conf)


def generate(
    source_roots: Iterable[str | Path] | None = None,
    *,
    conf: Settings | Mapping[str, Any] | None = None,
    diagnostics: DiagnosticSink | None = None,
) -> PassResult:
    """
    Analyze the sources under ``source_roots`` statically and write one factory
    module per group.

    Settings precedence: ``conf`` -> ``FACTORYGEN_CONFIG_MODULE`` -> defaults.
    ``source_roots`` falls back to the ``SOURCE_ROOTS`` setting.
    """
    settings = _settings(conf)
    config = GeneratorConfig.from_settings(settings)

    roots = list(source_roots) if source_roots is not None else list(config.source_roots)
    provider = SourceMetadataProvider.from_paths(
        roots,
        annotation_names=config.annotation_names,
        encoding=config.encoding,
    )
    processor = FactoryProcessor(
        provider,
        conf=settings,
        diagnostics=diagnostics if diagnostics is not None else DiagnosticCollector(),
    )
    for path, exc in provider.parse_errors:
        processor.report(ProcessingError(f"Cannot parse {path}: {exc.msg} (line {exc.lineno})"))
    return processor.run()


def generate_from_modules(
    modules: Iterable[str] | None = None,
    *,
    conf: Settings | Mapping[str, Any] | None = None,
    diagnostics: DiagnosticSink | None = None,
) -> PassResult:
    """Import ``modules`` (names or glob patterns) and run a pass over their live classes.

    ``modules`` falls back to the ``DISCOVERY_PATHS`` setting.
    """
    settings = _settings(conf)
    config = GeneratorConfig.from_settings(settings)
    names = list(modules) if modules is not None else list(config.discovery_paths)
    provider = ReflectionMetadataProvider(names)
    processor = FactoryProcessor(
        provider,
        conf=settings,
        diagnostics=diagnostics if diagnostics is not None else DiagnosticCollector(),
    )
    return processor.run()
