# factorygen/processing/emitter.py
"""
Factory emission.

Emission is split in two steps so the dispatch semantics can be checked
without comparing text:

1. ``plan(group)`` builds a :class:`DispatchPlan` - factory/module names, a
   collision-free import table and one :class:`DispatchBranch` per member in
   group order.
2. ``render(plan)`` serializes the plan to Python source.

``emit(group)`` does both and hands the text to the :class:`SourceFiler`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from factorygen.exceptions import UnresolvableGroupTypeError
from factorygen.metadata import MetadataProvider
from factorygen.naming import QualifiedName, snake_case
from factorygen.tracing import trace_span

from .filer import SourceFiler
from .registry import Group

logger = logging.getLogger(__name__)

__all__ = [
    "DispatchBranch",
    "DispatchPlan",
    "FactoryEmitter",
    "GeneratedArtifact",
    "ImportSpec",
]

RUNTIME_ERROR_NAME = "UnknownIdentifierError"


@dataclass(frozen=True, slots=True)
class ImportSpec:
    module: str
    name: str
    alias: str | None = None

    @property
    def local(self) -> str:
        return self.alias or self.name

    def render(self) -> str:
        if self.alias and self.alias != self.name:
            return f"from {self.module} import {self.name} as {self.alias}"
        return f"from {self.module} import {self.name}"


@dataclass(frozen=True, slots=True)
class DispatchBranch:
    """One ``identifier -> construct target`` arm of the generated dispatcher."""

    identifier: str
    target: QualifiedName
    local: str

    @property
    def expression(self) -> str:
        return f"{self.local}()"

    def matches(self, identifier: object) -> bool:
        return identifier == self.identifier


@dataclass(frozen=True, slots=True)
class DispatchPlan:
    group: QualifiedName
    group_local: str
    factory_name: str
    module_name: str
    imports: tuple[ImportSpec, ...]
    branches: tuple[DispatchBranch, ...]

    @property
    def identifiers(self) -> tuple[str, ...]:
        return tuple(branch.identifier for branch in self.branches)

    def match(self, identifier: object) -> DispatchBranch | None:
        """The branch the generated ``create()`` takes for ``identifier``, if any."""
        return next((branch for branch in self.branches if branch.matches(identifier)), None)


@dataclass(frozen=True, slots=True)
class GeneratedArtifact:
    module_name: str
    path: Path
    plan: DispatchPlan


class _ImportTable:
    """Allocates unique module-level names for imported classes."""

    def __init__(self, reserved: set[str]) -> None:
        self._taken = set(reserved)
        self._bound: dict[tuple[str, str], ImportSpec] = {}

    def bind(self, target: QualifiedName) -> str:
        """Import ``target``'s top-level class and return the expression naming ``target``."""
        key = (target.module, target.top_level)
        spec = self._bound.get(key)
        if spec is None:
            local = target.top_level
            n = 2
            while local in self._taken:
                local = f"{target.top_level}_{n}"
                n += 1
            self._taken.add(local)
            alias = local if local != target.top_level else None
            spec = ImportSpec(module=target.module, name=target.top_level, alias=alias)
            self._bound[key] = spec
        rest = target.qualname.partition(".")[2]
        return f"{spec.local}.{rest}" if rest else spec.local

    def specs(self) -> tuple[ImportSpec, ...]:
        return tuple(sorted(self._bound.values(), key=lambda s: (s.module, s.name)))


class FactoryEmitter:
    """Turns a completed :class:`Group` into a generated factory module."""

    header = "# Generated by factorygen. Do not edit."

    def __init__(
        self,
        provider: MetadataProvider,
        filer: SourceFiler,
        *,
        factory_suffix: str = "Factory",
        module_suffix: str = "_factory",
        generated_package: str | None = None,
        runtime_module: str = "factorygen.runtime",
    ) -> None:
        self.provider = provider
        self.filer = filer
        self.factory_suffix = factory_suffix
        self.module_suffix = module_suffix
        self.generated_package = generated_package
        self.runtime_module = runtime_module

    # --- naming ---

    def factory_name(self, group: QualifiedName) -> str:
        return f"{group.simple_name}{self.factory_suffix}"

    def module_name(self, group: QualifiedName) -> str:
        leaf = f"{snake_case(group.simple_name)}{self.module_suffix}"
        package = self.generated_package if self.generated_package is not None else group.package
        return f"{package}.{leaf}" if package else leaf

    # --- planning ---

    def plan(self, group: Group) -> DispatchPlan:
        if not group.members:
            raise ValueError(f"Cannot emit a factory for empty group {group.name}")
        declaration = self.provider.get_declaration(group.name)
        if declaration is None:
            raise UnresolvableGroupTypeError(f"The group type {group.name} cannot be resolved")

        group_name = declaration.name
        factory_name = self.factory_name(group_name)
        table = _ImportTable(reserved={factory_name, RUNTIME_ERROR_NAME})
        group_local = table.bind(group_name)
        branches = tuple(
            DispatchBranch(
                identifier=record.identifier,
                target=record.declaration.name,
                local=table.bind(record.declaration.name),
            )
            for record in group.records()
        )
        return DispatchPlan(
            group=group_name,
            group_local=group_local,
            factory_name=factory_name,
            module_name=self.module_name(group_name),
            imports=table.specs(),
            branches=branches,
        )

    # --- rendering ---

    def render(self, plan: DispatchPlan) -> str:
        group = plan.group.as_str
        lines = [
            self.header,
            f"# Group: {group}",
            f'"""Factory for :class:`{group}` implementations."""',
            "",
            f"from {self.runtime_module} import {RUNTIME_ERROR_NAME}",
            *(spec.render() for spec in plan.imports),
            "",
            "",
            f"class {plan.factory_name}:",
            f'    """Create :class:`{group}` instances by identifier."""',
            "",
            f"    group = {group!r}",
            f"    identifiers = {plan.identifiers!r}",
            "",
            f"    def create(self, identifier: str) -> {plan.group_local}:",
        ]
        for branch in plan.branches:
            lines.append(f"        if identifier == {branch.identifier!r}:")
            lines.append(f"            return {branch.expression}")
        lines += [
            f"        raise {RUNTIME_ERROR_NAME}(identifier, {group!r})",
            "",
            "",
            f"__all__ = [{plan.factory_name!r}]",
            "",
        ]
        return "\n".join(lines)

    # --- emission ---

    def emit(self, group: Group) -> GeneratedArtifact:
        plan = self.plan(group)
        with trace_span(
            "factorygen.emit",
            attributes={
                "factorygen.group": plan.group.as_str,
                "factorygen.factory": plan.factory_name,
                "factorygen.members": len(plan.branches),
            },
        ):
            text = self.render(plan)
            path = self.filer.write(plan.module_name, text)
        logger.info(
            "[FACTORY] generated %s.%s with %d branch(es)", plan.module_name, plan.factory_name, len(plan.branches)
        )
        return GeneratedArtifact(module_name=plan.module_name, path=path, plan=plan)
