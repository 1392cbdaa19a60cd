from pathlib import Path
from typing import cast

from tree_sitter import Node, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from require_rewriter.core.errors import SourceParseError
from require_rewriter.core.languages import grammar_for_path


def parse_source(source_bytes: bytes, grammar: str) -> Tree:
    parser = get_parser(cast(SupportedLanguage, grammar))
    return parser.parse(source_bytes)


def parse_module(source_bytes: bytes, file_path: Path) -> Tree:
    """Parse a module with the grammar matching its extension.

    Raises ``SourceParseError`` when the tree contains error or missing nodes,
    since byte offsets inside a recovered tree cannot be trusted for rewriting.
    """
    tree = parse_source(source_bytes, grammar_for_path(file_path))
    if tree.root_node.has_error:
        error = _first_error(tree.root_node)
        row = error.start_point[0] + 1 if error is not None else 0
        raise SourceParseError(f"Syntax error in {file_path} near line {row}")
    return tree


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def named_children(node: Node) -> list[Node]:
    """Named children without interleaved comments."""
    return [child for child in node.named_children if child.type != "comment"]


def _first_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None
