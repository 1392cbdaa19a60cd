from __future__ import annotations

from dataclasses import dataclass, field

from tree_sitter import Node

from require_rewriter.core.analyze import Analyzed
from require_rewriter.core.ast import node_text
from require_rewriter.core.edits import EditBuffer
from require_rewriter.core.errors import RequireConversionError
from require_rewriter.core.ports.resolver import SpecifierResolver
from require_rewriter.models import Options


@dataclass
class TransformContext:
    """Mutable state of a single file transform, threaded through the router and the engines."""

    importer: str
    analyzed: Analyzed
    options: Options
    resolver: SpecifierResolver
    buffer: EditBuffer
    # resolved local file -> hoisted binding name
    import_cache: dict[str, str] = field(default_factory=dict)
    counter: int = 0

    @classmethod
    def create(
        cls, importer: str, analyzed: Analyzed, options: Options, resolver: SpecifierResolver
    ) -> TransformContext:
        return cls(
            importer=importer,
            analyzed=analyzed,
            options=options,
            resolver=resolver,
            buffer=EditBuffer(analyzed.source),
        )

    def next_counter(self) -> int:
        self.counter += 1
        return self.counter

    def text(self, node: Node) -> str:
        return node_text(node, self.analyzed.source)

    def conversion_error(self, node: Node) -> RequireConversionError:
        row, column = node.start_point
        return RequireConversionError(self.text(node), file_path=self.importer, line=row + 1, column=column + 1)
