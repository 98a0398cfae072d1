"""Tree-sitter powered declaration and bundle extractors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..errors import ExtractorError, SymbolNotFoundError
from ..logging import get_logger
from ..models import ExportData, MemberList, SymbolTypeIndex
from .base import DeclarationExtractor, DependencyExtractor

_TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
_JAVASCRIPT = Language(tree_sitter_javascript.language())

_CLASS_NODES = {"class_declaration", "abstract_class_declaration"}
_FUNCTION_NODES = {
    "function_signature",
    "function_declaration",
    "generator_function_declaration",
}
_VARIABLE_NODES = {"lexical_declaration", "variable_declaration"}
_BINDING_NODES = {"identifier", "shorthand_property_identifier_pattern"}
_REFERENCE_NODES = {"identifier", "shorthand_property_identifier"}
_DEFAULTED_PATTERNS = {"assignment_pattern", "object_assignment_pattern"}
_NAMED_DECLARATIONS = {"function_declaration", "generator_function_declaration", "class_declaration"}
_FUNCTION_EXPRESSIONS = {"function_expression", "function", "generator_function"}
_FUNCTION_SCOPES = _FUNCTION_EXPRESSIONS | {
    "function_declaration",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
}

logger = get_logger("extractors.tree_sitter")


def _node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _string_value(node: Node, source: bytes) -> str:
    return _node_text(node, source).strip("'\"`")


def _named_children(node: Node) -> Iterator[Node]:
    for child in node.named_children:
        if child.type != "comment":
            yield child


def _child_of_type(node: Node, kind: str) -> Optional[Node]:
    for child in node.children:
        if child.type == kind:
            return child
    return None


def _has_keyword(node: Node, keyword: str) -> bool:
    return any(not child.is_named and child.type == keyword for child in node.children)


def _export_specifiers(clause: Node, source: bytes) -> Iterator[Tuple[str, str]]:
    """Yield ``(local name, exported name)`` pairs from an export clause."""
    for specifier in _named_children(clause):
        if specifier.type != "export_specifier" or _has_keyword(specifier, "type"):
            continue
        name_node = specifier.child_by_field_name("name")
        if name_node is None:
            continue
        alias_node = specifier.child_by_field_name("alias")
        local = _string_value(name_node, source)
        exported = _string_value(alias_node, source) if alias_node is not None else local
        yield local, exported


def _declared_names(node: Node, source: bytes) -> List[Tuple[str, str]]:
    """Return ``(name, category)`` pairs introduced by a declaration node."""
    kind = node.type
    if kind == "ambient_declaration":
        for child in _named_children(node):
            return _declared_names(child, source)
        return []
    if kind in _CLASS_NODES or kind in _FUNCTION_NODES or kind == "enum_declaration":
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return []
        if kind in _CLASS_NODES:
            category = "classes"
        elif kind in _FUNCTION_NODES:
            category = "functions"
        else:
            category = "enums"
        return [(_node_text(name_node, source), category)]
    if kind in _VARIABLE_NODES:
        names: List[Tuple[str, str]] = []
        for declarator in _named_children(node):
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                names.append((_node_text(name_node, source), "variables"))
        return names
    return []


class TypeScriptDeclarationExtractor(DeclarationExtractor):
    """Lists the runtime exports of a ``.d.ts`` file.

    Interfaces, type aliases and namespaces carry no bundle weight and are
    skipped. Re-exports from relative declaration files are followed.
    """

    def __init__(self) -> None:
        self._parser = Parser(_TYPESCRIPT)

    def extract(self, declaration_file: Path) -> MemberList:
        exports = self._file_exports(declaration_file.resolve(), {})
        members = MemberList()
        for name, category in exports.items():
            getattr(members, category).append(name)
        logger.debug(
            "Extracted %d exports from %s", len(exports), declaration_file
        )
        return members

    def _file_exports(
        self, path: Path, visited: Dict[Path, Dict[str, str]]
    ) -> Dict[str, str]:
        if path in visited:
            return visited[path]
        # Placeholder guards against cyclic re-exports.
        visited[path] = {}
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise ExtractorError(f"Unable to read declaration file {path}: {exc}") from exc
        tree = self._parser.parse(source)

        local: Dict[str, str] = {}
        for node in _named_children(tree.root_node):
            target = node
            if node.type == "export_statement":
                target = node.child_by_field_name("declaration")
                if target is None:
                    continue
            for name, category in _declared_names(target, source):
                local.setdefault(name, category)

        exports: Dict[str, str] = {}
        for node in _named_children(tree.root_node):
            if node.type != "export_statement" or _has_keyword(node, "default"):
                continue
            for name, category in self._statement_exports(node, source, path, local, visited):
                exports.setdefault(name, category)

        visited[path] = exports
        return exports

    def _statement_exports(
        self,
        node: Node,
        source: bytes,
        path: Path,
        local: Dict[str, str],
        visited: Dict[Path, Dict[str, str]],
    ) -> List[Tuple[str, str]]:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            return _declared_names(declaration, source)
        if _has_keyword(node, "type"):
            return []

        source_node = node.child_by_field_name("source")
        clause = _child_of_type(node, "export_clause")
        if source_node is None:
            if clause is None:
                return []
            return [
                (exported, local[name])
                for name, exported in _export_specifiers(clause, source)
                if name in local
            ]

        target = self._resolve_module(path, _string_value(source_node, source))
        if target is None:
            return []
        available = self._file_exports(target, visited)
        if clause is not None:
            return [
                (exported, available[name])
                for name, exported in _export_specifiers(clause, source)
                if name in available
            ]
        if _child_of_type(node, "namespace_export") is not None:
            return []
        return list(available.items())

    @staticmethod
    def _resolve_module(path: Path, specifier: str) -> Optional[Path]:
        if not specifier.startswith("."):
            logger.debug("Skipping non-relative re-export '%s' in %s", specifier, path)
            return None
        base = path.parent / specifier
        stem = str(base)
        for suffix in (".js", ".mjs"):
            if stem.endswith(suffix):
                stem = stem[: -len(suffix)]
        candidates = [
            Path(f"{stem}.d.ts"),
            Path(stem) / "index.d.ts",
        ]
        if stem.endswith(".d.ts"):
            candidates.insert(0, Path(stem))
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        logger.debug("Unable to resolve re-export '%s' from %s", specifier, path)
        return None


def _pattern_names(node: Node, source: bytes) -> Iterator[str]:
    """Yield the names bound by a binding pattern or a parameter list."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _BINDING_NODES:
            yield _node_text(current, source)
        elif current.type in _DEFAULTED_PATTERNS:
            left = current.child_by_field_name("left")
            if left is not None:
                stack.append(left)
        elif current.type == "pair_pattern":
            value = current.child_by_field_name("value")
            if value is not None:
                stack.append(value)
        else:
            stack.extend(reversed(current.named_children))


def _nested_declarations(node: Node, source: bytes) -> Set[str]:
    """Names declared below ``node`` without entering nested functions.

    Block scoping is flattened: a ``let`` inside a block shadows for the whole
    enclosing function.
    """
    names: Set[str] = set()
    stack = list(node.children)
    while stack:
        current = stack.pop()
        kind = current.type
        if kind in _NAMED_DECLARATIONS:
            name_node = current.child_by_field_name("name")
            if name_node is not None:
                names.add(_node_text(name_node, source))
            if kind != "class_declaration":
                continue
        elif kind in _FUNCTION_SCOPES:
            continue
        elif kind == "variable_declarator":
            name_node = current.child_by_field_name("name")
            if name_node is not None:
                names.update(_pattern_names(name_node, source))
            value = current.child_by_field_name("value")
            if value is not None:
                stack.append(value)
            continue
        elif kind == "catch_clause":
            parameter = current.child_by_field_name("parameter")
            if parameter is not None:
                names.update(_pattern_names(parameter, source))
        elif kind == "for_in_statement" and current.child_by_field_name("kind") is not None:
            left = current.child_by_field_name("left")
            if left is not None:
                names.update(_pattern_names(left, source))
        stack.extend(current.children)
    return names


def _function_locals(node: Node, source: bytes) -> Set[str]:
    names: Set[str] = set()
    if node.type in _FUNCTION_EXPRESSIONS:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            names.add(_node_text(name_node, source))
    # Arrow functions with a single bare parameter use the singular field.
    for field_name in ("parameters", "parameter"):
        parameters = node.child_by_field_name(field_name)
        if parameters is not None:
            names.update(_pattern_names(parameters, source))
    body = node.child_by_field_name("body")
    if body is not None:
        names.update(_nested_declarations(body, source))
    return names


def _resolve_chunk(path: Path, specifier: str) -> Optional[Path]:
    """Locate a relative chunk next to a bundle; bare specifiers stay external."""
    if not specifier.startswith("."):
        return None
    base = path.parent / specifier
    for candidate in (base, Path(f"{base}.js"), Path(f"{base}.mjs"), base / "index.js"):
        if candidate.is_file():
            return candidate.resolve()
    logger.debug("Unable to resolve chunk '%s' from %s", specifier, path)
    return None


# (file, top-level name)
_Binding = Tuple[Path, str]


@dataclass
class _Statement:
    size: int
    references: Tuple[str, ...]


@dataclass
class _BundleGraph:
    statements: List[_Statement] = field(default_factory=list)
    # local binding -> indices of the statements that define it
    bindings: Dict[str, List[int]] = field(default_factory=dict)
    # exported name -> local binding
    exports: Dict[str, str] = field(default_factory=dict)
    # exported name -> (chunk, name exported by that chunk)
    re_exports: Dict[str, Tuple[Path, str]] = field(default_factory=dict)
    star_exports: List[Path] = field(default_factory=list)
    # local name -> (chunk, name exported by that chunk)
    imports: Dict[str, Tuple[Path, str]] = field(default_factory=dict)


class BundleDependencyExtractor(DependencyExtractor):
    """Statically measures an export by walking top-level bindings of a bundle.

    The size of a symbol is the byte length of every top-level statement it
    transitively reaches. Imports and re-exports of relative chunks are
    followed into those chunks. Bare module imports are external and not
    counted. Names bound by parameters or local declarations shadow top-level
    bindings of the same name.
    """

    def __init__(self) -> None:
        self._parser = Parser(_JAVASCRIPT)
        self._graphs: Dict[Path, _BundleGraph] = {}

    def extract(self, symbol: str, bundle_file: Path, index: SymbolTypeIndex) -> ExportData:
        entry = bundle_file.resolve()
        root = self._resolve_entry(entry, symbol)
        if root is None:
            raise SymbolNotFoundError(symbol, bundle_file)

        ranks: Dict[Path, int] = {entry: 0}
        reached: Set[_Binding] = {root}
        included: Set[Tuple[Path, int]] = set()
        pending = [root]
        while pending:
            path, name = pending.pop()
            ranks.setdefault(path, len(ranks))
            graph = self._graph_for(path)
            for position in graph.bindings[name]:
                if (path, position) in included:
                    continue
                included.add((path, position))
                for reference in graph.statements[position].references:
                    target = self._resolve_local(path, reference, set())
                    if target is not None and target not in reached:
                        reached.add(target)
                        pending.append(target)

        size = sum(self._graph_for(path).statements[position].size for path, position in included)
        public = self._public_names(entry, index)
        ordered = sorted(
            reached,
            key=lambda binding: (
                ranks[binding[0]],
                self._graph_for(binding[0]).bindings[binding[1]][0],
                binding[1],
            ),
        )
        dependencies: List[str] = []
        for binding in ordered:
            if binding == root:
                continue
            for name in public.get(binding, []):
                if name != symbol and name not in dependencies:
                    dependencies.append(name)
        logger.debug("%s: %d bytes, %d dependencies", symbol, size, len(dependencies))
        return ExportData(dependencies=dependencies, size=size)

    def _public_names(self, entry: Path, index: SymbolTypeIndex) -> Dict[_Binding, List[str]]:
        public: Dict[_Binding, List[str]] = {}
        for name in index:
            binding = self._resolve_entry(entry, name)
            if binding is not None:
                public.setdefault(binding, []).append(name)
        return public

    def _resolve_entry(self, entry: Path, name: str) -> Optional[_Binding]:
        binding = self._resolve_export(entry, name, set())
        if binding is None and name in self._graph_for(entry).bindings:
            return entry, name
        return binding

    def _resolve_export(
        self, path: Path, name: str, seen: Set[_Binding]
    ) -> Optional[_Binding]:
        if (path, name) in seen:
            return None
        seen.add((path, name))
        graph = self._graph_for(path)
        if name in graph.exports:
            return self._resolve_local(path, graph.exports[name], seen)
        if name in graph.re_exports:
            chunk, imported = graph.re_exports[name]
            return self._resolve_export(chunk, imported, seen)
        if name == "default":
            return None
        for chunk in graph.star_exports:
            binding = self._resolve_export(chunk, name, seen)
            if binding is not None:
                return binding
        return None

    def _resolve_local(
        self, path: Path, name: str, seen: Set[_Binding]
    ) -> Optional[_Binding]:
        graph = self._graph_for(path)
        if name in graph.bindings:
            return path, name
        if name in graph.imports:
            chunk, imported = graph.imports[name]
            return self._resolve_export(chunk, imported, seen)
        return None

    def _graph_for(self, bundle_file: Path) -> _BundleGraph:
        graph = self._graphs.get(bundle_file)
        if graph is None:
            graph = self._parse_bundle(bundle_file)
            self._graphs[bundle_file] = graph
        return graph

    def _parse_bundle(self, bundle_file: Path) -> _BundleGraph:
        try:
            source = bundle_file.read_bytes()
        except OSError as exc:
            raise ExtractorError(f"Unable to read bundle file {bundle_file}: {exc}") from exc
        tree = self._parser.parse(source)
        graph = _BundleGraph()
        unattached: List[int] = []

        for node in _named_children(tree.root_node):
            if node.type == "empty_statement":
                continue
            if node.type == "import_statement":
                self._record_imports(node, source, bundle_file, graph)
                continue
            if node.type == "export_statement":
                if self._record_exports(node, source, bundle_file, graph):
                    continue
                declaration = node.child_by_field_name("declaration")
                if declaration is not None:
                    node = declaration
            declares = tuple(self._bound_names(node, source))
            statement = _Statement(
                size=node.end_byte - node.start_byte,
                references=tuple(self._references(node, source, declares)),
            )
            position = len(graph.statements)
            graph.statements.append(statement)
            if declares:
                for name in declares:
                    graph.bindings.setdefault(name, []).append(position)
            else:
                unattached.append(position)

        # Side-effect statements belong to the first binding they mention.
        for position in unattached:
            for reference in graph.statements[position].references:
                if reference in graph.bindings:
                    graph.bindings[reference].append(position)
                    break
        return graph

    @staticmethod
    def _record_imports(node: Node, source: bytes, path: Path, graph: _BundleGraph) -> None:
        source_node = node.child_by_field_name("source")
        clause = _child_of_type(node, "import_clause")
        if source_node is None or clause is None:
            return
        chunk = _resolve_chunk(path, _string_value(source_node, source))
        if chunk is None:
            return
        for child in _named_children(clause):
            if child.type == "identifier":
                graph.imports[_node_text(child, source)] = (chunk, "default")
            elif child.type == "named_imports":
                for specifier in _named_children(child):
                    if specifier.type != "import_specifier":
                        continue
                    name_node = specifier.child_by_field_name("name")
                    if name_node is None:
                        continue
                    alias_node = specifier.child_by_field_name("alias")
                    imported = _string_value(name_node, source)
                    local = _string_value(alias_node, source) if alias_node is not None else imported
                    graph.imports[local] = (chunk, imported)
            else:
                logger.debug("Namespace import from %s is not followed", chunk)

    @staticmethod
    def _record_exports(node: Node, source: bytes, path: Path, graph: _BundleGraph) -> bool:
        """Record export names; return True when the statement carries no code."""
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            names = [name for name, _ in _declared_names(declaration, source)]
            if _has_keyword(node, "default"):
                if names:
                    graph.exports["default"] = names[0]
            else:
                for name in names:
                    graph.exports[name] = name
            return False
        clause = _child_of_type(node, "export_clause")
        source_node = node.child_by_field_name("source")
        if source_node is not None:
            chunk = _resolve_chunk(path, _string_value(source_node, source))
            if chunk is None:
                return True
            if clause is not None:
                for imported, exported in _export_specifiers(clause, source):
                    graph.re_exports[exported] = (chunk, imported)
            elif _child_of_type(node, "namespace_export") is None:
                graph.star_exports.append(chunk)
            return True
        if clause is not None:
            for local, exported in _export_specifiers(clause, source):
                graph.exports[exported] = local
            return True
        # export default <expression>
        return node.child_by_field_name("value") is None

    @staticmethod
    def _bound_names(node: Node, source: bytes) -> Iterator[str]:
        if node.type in _NAMED_DECLARATIONS:
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                yield _node_text(name_node, source)
            return
        if node.type not in _VARIABLE_NODES:
            return
        for declarator in _named_children(node):
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None:
                yield from _pattern_names(name_node, source)

    @staticmethod
    def _references(node: Node, source: bytes, declares: Tuple[str, ...]) -> Iterator[str]:
        """Yield identifiers that can resolve to a top-level binding."""
        seen: Set[str] = set()
        outer = frozenset(_nested_declarations(node, source).difference(declares))
        stack: List[Tuple[Node, FrozenSet[str]]] = [(node, outer)]
        while stack:
            current, local = stack.pop()
            if current.type in _REFERENCE_NODES:
                name = _node_text(current, source)
                if name not in local and name not in seen:
                    seen.add(name)
                    yield name
                continue
            if current.type in _FUNCTION_SCOPES:
                local = local | _function_locals(current, source)
            stack.extend((child, local) for child in reversed(current.children))


__all__ = ["BundleDependencyExtractor", "TypeScriptDeclarationExtractor"]
