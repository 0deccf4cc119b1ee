# factorygen/metadata/source.py
"""
Static metadata provider built on :mod:`ast`.

Source files are parsed, never imported, so discovery works on code whose
dependencies (or generated factories) are not importable yet.

Name resolution
---------------
Every module gets a symbol table of its top-level classes and imports
(absolute, relative, aliased, star). A dotted name written in a module is
resolved through that table and then canonicalized: names that point at a
package re-export (``pkg.drinks.Drink`` imported in ``pkg/drinks/__init__``)
are followed to the defining module.

Python rendition of declaration metadata
----------------------------------------
- kind: ``typing.Protocol`` among the bases -> interface; ``enum.*`` or an
  enum base -> enum; a decorated ``def`` -> function; otherwise class.
- public: no ``_``-prefixed segment in the qualname.
- abstract: ABCMeta-based class with unimplemented ``abstractmethod``s,
  inherited ones included.
- interfaces: direct bases that are interfaces.
- bases: direct bases that are neither interfaces nor one of
  ``object``/``Generic``/``ABC``/``Protocol``, in order; the first is the
  superclass.
- constructors: own ``__init__``, a ``@dataclass`` generated ``__init__``,
  the nearest inherited one, or the implicit zero-argument default.
"""
from __future__ import annotations

import ast
import builtins
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

from factorygen.loaders import SourceLoader
from factorygen.naming import QualifiedName, is_public_path

from .model import (
    DEFAULT_CONSTRUCTOR,
    ConstructorInfo,
    Declaration,
    DeclarationKind,
    FactoryAnnotation,
    Modifier,
    SourceLocation,
    TypeReference,
    UnevaluatedExpression,
)

logger = logging.getLogger(__name__)

__all__ = ["SourceMetadataProvider"]

_PROTOCOL_BASES = frozenset({"typing.Protocol", "typing_extensions.Protocol"})
_ENUM_BASES = frozenset(
    {"enum.Enum", "enum.IntEnum", "enum.StrEnum", "enum.Flag", "enum.IntFlag", "enum.ReprEnum"}
)
_IGNORED_BASES = _PROTOCOL_BASES | frozenset(
    {"builtins.object", "typing.Generic", "typing_extensions.Generic", "abc.ABC"}
)
_ABSTRACT_DECORATORS = frozenset(
    {"abc.abstractmethod", "abc.abstractproperty", "abc.abstractclassmethod", "abc.abstractstaticmethod"}
)
_ABC_META = frozenset({"abc.ABCMeta"})
_DATACLASS_DECORATORS = frozenset({"dataclasses.dataclass"})
_DATACLASS_FIELD = frozenset({"dataclasses.field"})
_DATACLASS_NON_FIELDS = frozenset({"typing.ClassVar", "dataclasses.KW_ONLY"})
_OVERLOAD = frozenset({"typing.overload", "typing_extensions.overload"})
_BUILTINS = frozenset(dir(builtins))
_MAX_ALIAS_HOPS = 16


@dataclass
class _Module:
    name: str
    path: Path
    is_package: bool
    tree: ast.Module
    imports: dict[str, str] = field(default_factory=dict)
    star_imports: list[str] = field(default_factory=list)
    classes: dict[str, str] = field(default_factory=dict)


@dataclass
class _Node:
    module: _Module
    qualname: str
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef

    @property
    def qualified_name(self) -> str:
        return f"{self.module.name}.{self.qualname}"

    @property
    def is_class(self) -> bool:
        return isinstance(self.node, ast.ClassDef)


def _dotted(expr: ast.expr | None) -> str | None:
    """Render a Name/Attribute chain as a dotted string; generics are stripped."""
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        head = _dotted(expr.value)
        return f"{head}.{expr.attr}" if head else None
    if isinstance(expr, ast.Subscript):
        return _dotted(expr.value)
    if isinstance(expr, ast.Constant) and isinstance(expr.value, str):
        return expr.value.strip() or None
    return None


def _iter_module_statements(body: Iterable[ast.stmt]) -> Iterator[ast.stmt]:
    """Module-level statements, descending into if/try/with blocks."""
    for stmt in body:
        yield stmt
        if isinstance(stmt, ast.If):
            yield from _iter_module_statements(stmt.body)
            yield from _iter_module_statements(stmt.orelse)
        elif isinstance(stmt, ast.Try):
            yield from _iter_module_statements(stmt.body)
            for handler in stmt.handlers:
                yield from _iter_module_statements(handler.body)
            yield from _iter_module_statements(stmt.orelse)
            yield from _iter_module_statements(stmt.finalbody)
        elif isinstance(stmt, ast.With):
            yield from _iter_module_statements(stmt.body)


def _required_parameters(fn: ast.FunctionDef | ast.AsyncFunctionDef, *, skip_first: bool) -> int:
    args = fn.args
    positional = list(args.posonlyargs) + list(args.args)
    required = len(positional) - len(args.defaults)
    if skip_first and positional:
        required -= 1
    required += sum(1 for default in args.kw_defaults if default is None)
    return max(required, 0)


class SourceMetadataProvider:
    """:class:`~factorygen.metadata.protocols.MetadataProvider` over Python source files."""

    def __init__(
        self,
        modules: Iterable[tuple[str, Path]],
        *,
        annotation_names: Iterable[str] = ("factorygen.factory", "factorygen.decorators.factory"),
        encoding: str = "utf-8",
    ) -> None:
        self.annotation_names = frozenset(annotation_names)
        self.encoding = encoding
        self.parse_errors: list[tuple[Path, SyntaxError]] = []
        self._modules: dict[str, _Module] = {}
        self._nodes: dict[str, _Node] = {}
        self._declarations: dict[str, Declaration] = {}
        self._abstract_cache: dict[str, frozenset[str]] = {}

        for module_name, path in modules:
            self._load(module_name, Path(path))
        # Symbol tables first: annotation lookups during indexing may follow
        # names into any other module.
        for module in self._modules.values():
            self._index_symbols(module)
        for module in self._modules.values():
            for stmt in module.tree.body:
                self._index_node(module, stmt, prefix="")
        logger.debug(
            "indexed %d modules, %d declarations", len(self._modules), len(self._nodes)
        )

    @classmethod
    def from_paths(
        cls,
        roots: Iterable[str | Path],
        *,
        loader: SourceLoader | None = None,
        **kwargs,
    ) -> SourceMetadataProvider:
        loader = loader or SourceLoader()
        return cls(loader.find_sources(roots), **kwargs)

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------
    def _load(self, module_name: str, path: Path) -> None:
        try:
            source = path.read_text(encoding=self.encoding)
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as exc:
            logger.error("cannot parse %s: %s", path, exc)
            self.parse_errors.append((path, exc))
            return
        self._modules[module_name] = _Module(
            name=module_name,
            path=path,
            is_package=path.name == "__init__.py",
            tree=tree,
        )

    def _index_symbols(self, module: _Module) -> None:
        for stmt in _iter_module_statements(module.tree.body):
            if isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        module.imports[alias.asname] = alias.name
                    else:
                        head = alias.name.partition(".")[0]
                        module.imports[head] = head
            elif isinstance(stmt, ast.ImportFrom):
                source = self._import_source(module, stmt)
                if source is None:
                    continue
                for alias in stmt.names:
                    if alias.name == "*":
                        module.star_imports.append(source)
                    else:
                        module.imports[alias.asname or alias.name] = f"{source}.{alias.name}"
            elif isinstance(stmt, ast.ClassDef):
                module.classes[stmt.name] = f"{module.name}.{stmt.name}"

    def _index_node(self, module: _Module, stmt: ast.stmt, *, prefix: str) -> None:
        if isinstance(stmt, ast.ClassDef):
            qualname = f"{prefix}{stmt.name}"
            node = _Node(module=module, qualname=qualname, node=stmt)
            self._nodes[node.qualified_name] = node
            for child in stmt.body:
                self._index_node(module, child, prefix=f"{qualname}.")
        elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
            node = _Node(module=module, qualname=f"{prefix}{stmt.name}", node=stmt)
            if self._find_annotation(node) is not None:
                self._nodes[node.qualified_name] = node

    @staticmethod
    def _import_source(module: _Module, stmt: ast.ImportFrom) -> str | None:
        if not stmt.level:
            return stmt.module
        package = module.name if module.is_package else module.name.rpartition(".")[0]
        parts = package.split(".") if package else []
        drop = stmt.level - 1
        if drop > len(parts):
            logger.debug("relative import beyond top-level package in %s", module.name)
            return None
        base = ".".join(parts[: len(parts) - drop])
        if stmt.module:
            return f"{base}.{stmt.module}" if base else stmt.module
        return base or None

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------
    def resolve_name(self, module_name: str, dotted: str) -> str | None:
        """Resolve ``dotted`` as written in ``module_name`` to a canonical name."""
        module = self._modules.get(module_name)
        if module is None:
            return self._canonical(dotted) if dotted in self._nodes else None
        return self._resolve_in(module, dotted)

    def _resolve_in(self, module: _Module, dotted: str) -> str | None:
        head, _, rest = dotted.partition(".")
        if head in module.classes:
            base = module.classes[head]
        elif head in module.imports:
            base = module.imports[head]
        else:
            base = None
            for star in module.star_imports:
                candidate = self._canonical(f"{star}.{head}")
                if candidate in self._nodes:
                    base = candidate
                    break
            if base is None:
                if head not in _BUILTINS:
                    return None
                base = f"builtins.{head}"
        return self._canonical(f"{base}.{rest}" if rest else base)

    def _canonical(self, name: str, hops: int = 0) -> str:
        if name in self._nodes or hops > _MAX_ALIAS_HOPS:
            return name
        parts = name.split(".")
        for i in range(len(parts) - 1, 0, -1):
            module = self._modules.get(".".join(parts[:i]))
            if module is None:
                continue
            head, tail = parts[i], parts[i + 1 :]
            if head in module.classes:
                return ".".join([module.classes[head], *tail])
            if head in module.imports:
                return self._canonical(".".join([module.imports[head], *tail]), hops + 1)
            for star in module.star_imports:
                candidate = self._canonical(".".join([star, head, *tail]), hops + 1)
                if candidate in self._nodes:
                    return candidate
            break
        return name

    def _resolve_expr(self, node: _Node, expr: ast.expr | None) -> str | None:
        dotted = _dotted(expr)
        if dotted is None:
            return None
        return self._resolve_in(node.module, dotted) or dotted

    # ------------------------------------------------------------------
    # MetadataProvider
    # ------------------------------------------------------------------
    def get_declaration(self, qualified_name: str) -> Declaration | None:
        name = self._canonical(qualified_name)
        node = self._nodes.get(name)
        if node is None:
            return None
        if name not in self._declarations:
            self._declarations[name] = self._build(node)
        return self._declarations[name]

    def resolve_reference(self, reference: TypeReference) -> str | None:
        if reference.module is not None:
            resolved = self.resolve_name(reference.module, reference.name) or self._canonical(reference.name)
        else:
            resolved = self._canonical(reference.name)
        if resolved is None or resolved not in self._nodes:
            logger.debug("unresolved reference %s", reference)
            return None
        return resolved

    def iter_annotated(self) -> Iterator[Declaration]:
        for name, node in list(self._nodes.items()):
            if self._find_annotation(node) is None:
                continue
            declaration = self.get_declaration(name)
            if declaration is not None:
                yield declaration

    # ------------------------------------------------------------------
    # Declaration building
    # ------------------------------------------------------------------
    def _build(self, node: _Node) -> Declaration:
        location = SourceLocation(path=node.module.path, line=node.node.lineno)
        annotation = self._find_annotation(node)
        name = QualifiedName(module=node.module.name, qualname=node.qualname)
        public = is_public_path(node.qualname)

        if not node.is_class:
            return Declaration(
                name=name,
                kind=DeclarationKind.FUNCTION,
                modifiers=frozenset({Modifier.PUBLIC}) if public else frozenset(),
                constructors=(),
                annotation=annotation,
                location=location,
            )

        bases = self._bases(node)
        kind = self._kind(node, frozenset())
        interfaces = tuple(b for b in bases if self._is_interface(b))
        parents: tuple[str, ...] = ()
        if kind is not DeclarationKind.INTERFACE:
            parents = tuple(b for b in bases if b not in _IGNORED_BASES and not self._is_interface(b))

        modifiers = set()
        if public:
            modifiers.add(Modifier.PUBLIC)
        if self._uses_abc_meta(node, frozenset()) and self._abstract_methods(node, frozenset()):
            modifiers.add(Modifier.ABSTRACT)

        return Declaration(
            name=name,
            kind=kind,
            modifiers=frozenset(modifiers),
            interfaces=interfaces,
            superclass=parents[0] if parents else None,
            bases=parents,
            constructors=self._constructors(node, frozenset()) or (DEFAULT_CONSTRUCTOR,),
            annotation=annotation,
            location=location,
        )

    def _bases(self, node: _Node) -> list[str]:
        assert isinstance(node.node, ast.ClassDef)
        resolved = []
        for expr in node.node.bases:
            name = self._resolve_expr(node, expr)
            if name is not None:
                resolved.append(name)
        return resolved

    def _known_bases(self, node: _Node) -> list[_Node]:
        return [self._nodes[b] for b in self._bases(node) if b in self._nodes and self._nodes[b].is_class]

    def _kind(self, node: _Node, seen: frozenset[str]) -> DeclarationKind:
        bases = self._bases(node)
        if any(b in _PROTOCOL_BASES for b in bases):
            return DeclarationKind.INTERFACE
        if any(b in _ENUM_BASES for b in bases):
            return DeclarationKind.ENUM
        seen = seen | {node.qualified_name}
        for base in self._known_bases(node):
            if base.qualified_name not in seen and self._kind(base, seen) is DeclarationKind.ENUM:
                return DeclarationKind.ENUM
        return DeclarationKind.CLASS

    def _is_interface(self, name: str) -> bool:
        node = self._nodes.get(name)
        return node is not None and node.is_class and self._kind(node, frozenset()) is DeclarationKind.INTERFACE

    def _decorator_names(self, node: _Node, fn: ast.AST) -> set[str]:
        names = set()
        for deco in getattr(fn, "decorator_list", ()):
            target = deco.func if isinstance(deco, ast.Call) else deco
            resolved = self._resolve_expr(node, target)
            if resolved:
                names.add(resolved)
        return names

    def _uses_abc_meta(self, node: _Node, seen: frozenset[str]) -> bool:
        assert isinstance(node.node, ast.ClassDef)
        bases = self._bases(node)
        if "abc.ABC" in bases or any(b in _PROTOCOL_BASES for b in bases):
            return True
        for kw in node.node.keywords:
            if kw.arg == "metaclass" and self._resolve_expr(node, kw.value) in _ABC_META:
                return True
        seen = seen | {node.qualified_name}
        return any(
            self._uses_abc_meta(base, seen)
            for base in self._known_bases(node)
            if base.qualified_name not in seen
        )

    def _abstract_methods(self, node: _Node, seen: frozenset[str]) -> frozenset[str]:
        cached = self._abstract_cache.get(node.qualified_name)
        if cached is not None:
            return cached
        assert isinstance(node.node, ast.ClassDef)
        own_abstract: set[str] = set()
        own_concrete: set[str] = set()
        for stmt in node.node.body:
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if self._decorator_names(node, stmt) & _ABSTRACT_DECORATORS:
                    own_abstract.add(stmt.name)
                else:
                    own_concrete.add(stmt.name)
            elif isinstance(stmt, ast.Assign):
                own_concrete.update(t.id for t in stmt.targets if isinstance(t, ast.Name))
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None and isinstance(stmt.target, ast.Name):
                own_concrete.add(stmt.target.id)

        inherited: set[str] = set()
        seen = seen | {node.qualified_name}
        for base in self._known_bases(node):
            if base.qualified_name not in seen:
                inherited |= self._abstract_methods(base, seen)

        result = frozenset(own_abstract | (inherited - own_concrete))
        self._abstract_cache[node.qualified_name] = result
        return result

    def _constructors(self, node: _Node, seen: frozenset[str]) -> tuple[ConstructorInfo, ...]:
        """Constructor shape, or ``()`` when this class does not define one itself."""
        assert isinstance(node.node, ast.ClassDef)
        inits = [
            stmt
            for stmt in node.node.body
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef))
            and stmt.name == "__init__"
            and not (self._decorator_names(node, stmt) & _OVERLOAD)
        ]
        if inits:
            return (ConstructorInfo(parameter_count=_required_parameters(inits[-1], skip_first=True)),)

        if self._is_dataclass_with_init(node):
            fields = self._dataclass_fields(node, frozenset())
            return (ConstructorInfo(parameter_count=sum(1 for has_default in fields.values() if not has_default)),)

        seen = seen | {node.qualified_name}
        for base in self._known_bases(node):
            if base.qualified_name in seen:
                continue
            inherited = self._constructors(base, seen)
            if inherited:
                return inherited
        return ()

    def _dataclass_decorator(self, node: _Node) -> ast.expr | None:
        for deco in node.node.decorator_list:
            target = deco.func if isinstance(deco, ast.Call) else deco
            if self._resolve_expr(node, target) in _DATACLASS_DECORATORS:
                return deco
        return None

    def _is_dataclass_with_init(self, node: _Node) -> bool:
        deco = self._dataclass_decorator(node)
        if deco is None:
            return False
        if isinstance(deco, ast.Call):
            for kw in deco.keywords:
                if kw.arg == "init" and isinstance(kw.value, ast.Constant) and kw.value.value is False:
                    return False
        return True

    def _dataclass_fields(self, node: _Node, seen: frozenset[str]) -> dict[str, bool]:
        """Ordered ``field name -> has default`` over the dataclass hierarchy."""
        assert isinstance(node.node, ast.ClassDef)
        fields: dict[str, bool] = {}
        seen = seen | {node.qualified_name}
        for base in reversed(self._known_bases(node)):
            if base.qualified_name not in seen and self._dataclass_decorator(base) is not None:
                fields.update(self._dataclass_fields(base, seen))

        for stmt in node.node.body:
            if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
                continue
            if self._resolve_expr(node, stmt.annotation) in _DATACLASS_NON_FIELDS:
                continue
            value = stmt.value
            if isinstance(value, ast.Call) and self._resolve_expr(node, value.func) in _DATACLASS_FIELD:
                options = {kw.arg: kw.value for kw in value.keywords}
                init = options.get("init")
                if isinstance(init, ast.Constant) and init.value is False:
                    fields.pop(stmt.target.id, None)
                    continue
                fields[stmt.target.id] = "default" in options or "default_factory" in options
            else:
                fields[stmt.target.id] = value is not None
        return fields

    # ------------------------------------------------------------------
    # Annotation
    # ------------------------------------------------------------------
    def _find_annotation(self, node: _Node) -> FactoryAnnotation | None:
        for deco in node.node.decorator_list:
            target = deco.func if isinstance(deco, ast.Call) else deco
            if self._resolve_expr(node, target) not in self.annotation_names:
                continue
            if not isinstance(deco, ast.Call):
                return FactoryAnnotation()
            return self._read_annotation(node, deco)
        return None

    def _read_annotation(self, node: _Node, call: ast.Call) -> FactoryAnnotation:
        values: dict[str, ast.expr] = dict(zip(("identifier", "type"), call.args))
        values.update({kw.arg: kw.value for kw in call.keywords if kw.arg})

        identifier_expr = values.get("identifier")
        identifier: Any = None
        if isinstance(identifier_expr, ast.Constant):
            identifier = identifier_expr.value
        elif identifier_expr is not None:
            identifier = UnevaluatedExpression(ast.unparse(identifier_expr))

        type_name = _dotted(values.get("type"))
        type_ref = TypeReference(name=type_name, module=node.module.name) if type_name else None
        return FactoryAnnotation(identifier=identifier, type=type_ref)
