"""Locate ``require()`` call sites and classify them for the rewrite engines.

Call sites are reported in source order (pre-order walk), each with the
ancestor chain of its ``call_expression`` node, the shape of its module id and,
when the call makes up a whole top-level statement, the statement to replace.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tree_sitter import Node, Tree

from require_rewriter.core.ast import named_children, node_text

_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
_MEMBER_TYPES = frozenset({"member_expression", "subscript_expression"})


class TopScopeKind(Enum):
    EXPRESSION_STATEMENT = "ExpressionStatement"
    VARIABLE_DECLARATION = "VariableDeclaration"


@dataclass(frozen=True)
class TopScopeBinding:
    kind: TopScopeKind
    node: Node

    @property
    def start(self) -> int:
        return self.node.start_byte

    @property
    def end(self) -> int:
        return self.node.end_byte


@dataclass(frozen=True)
class StaticId:
    """``require('x')``"""

    value: str


@dataclass(frozen=True)
class TemplateId:
    """``require(`x`)``: a template literal whose literal head is the whole id."""

    value: str


@dataclass(frozen=True)
class DynamicId:
    """Module id computed at runtime, e.g. ``require(`./views/${name}`)``."""

    argument: Node
    snippet: str


ModuleId = StaticId | TemplateId | DynamicId


@dataclass(frozen=True)
class CallSite:
    node: Node
    ancestors: tuple[Node, ...]
    module_id: ModuleId | None
    top_scope: TopScopeBinding | None

    @property
    def literal_id(self) -> str | None:
        if isinstance(self.module_id, StaticId | TemplateId):
            return self.module_id.value
        return None

    @property
    def callee(self) -> Node:
        callee = self.node.child_by_field_name("function")
        assert callee is not None
        return callee


@dataclass(frozen=True)
class Analyzed:
    source: bytes
    require: list[CallSite]


def analyze(tree: Tree, source: bytes) -> Analyzed:
    sites: list[CallSite] = []
    stack: list[tuple[Node, tuple[Node, ...]]] = [(tree.root_node, ())]
    while stack:
        node, ancestors = stack.pop()
        if _is_require_call(node, source):
            sites.append(
                CallSite(
                    node=node,
                    ancestors=ancestors,
                    module_id=_classify_argument(node, source),
                    top_scope=_find_top_scope(node, ancestors),
                )
            )
        child_ancestors = (*ancestors, node)
        stack.extend((child, child_ancestors) for child in reversed(node.children))
    return Analyzed(source=source, require=sites)


def _is_require_call(node: Node, source: bytes) -> bool:
    if node.type != "call_expression":
        return False
    callee = node.child_by_field_name("function")
    arguments = node.child_by_field_name("arguments")
    return (
        callee is not None
        and callee.type == "identifier"
        and node_text(callee, source) == "require"
        # require`x` is a tagged template, not a call
        and arguments is not None
        and arguments.type == "arguments"
    )


def _classify_argument(node: Node, source: bytes) -> ModuleId | None:
    arguments = node.child_by_field_name("arguments")
    assert arguments is not None
    args = named_children(arguments)
    if not args:
        return None
    argument = args[0]
    if argument.type == "string":
        return StaticId(node_text(argument, source)[1:-1])
    if argument.type == "template_string" and not any(
        child.type == "template_substitution" for child in argument.named_children
    ):
        return TemplateId(node_text(argument, source)[1:-1])
    return DynamicId(argument=argument, snippet=node_text(node, source))


def _find_top_scope(node: Node, ancestors: tuple[Node, ...]) -> TopScopeBinding | None:
    """Return the top-level statement made up entirely of this call.

    The call may be wrapped in member accesses (``require('x').default``); the
    static engine decides which member shapes it supports.
    """
    child = node
    index = len(ancestors) - 1
    while index >= 0 and ancestors[index].type in _MEMBER_TYPES:
        if ancestors[index].child_by_field_name("object") != child:
            return None
        child = ancestors[index]
        index -= 1

    if index < 1 or ancestors[0].type != "program":
        return None

    parent = ancestors[index]
    if index == 1 and parent.type == "expression_statement":
        return TopScopeBinding(TopScopeKind.EXPRESSION_STATEMENT, parent)
    if (
        index == 2
        and parent.type == "variable_declarator"
        and ancestors[1].type in _DECLARATION_TYPES
        and parent.child_by_field_name("value") == child
    ):
        return TopScopeBinding(TopScopeKind.VARIABLE_DECLARATION, ancestors[1])
    return None
