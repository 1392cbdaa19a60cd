from require_rewriter.core.analyze import CallSite
from require_rewriter.core.codegen import namespace_import, quote
from require_rewriter.core.context import TransformContext


def promote_inline(site: CallSite, module_id: str, counter: int, context: TransformContext) -> None:
    """Replace a nested ``require('x')`` with a reference to a hoisted namespace import.

    Every call site gets its own binding, even for a module imported elsewhere.
    """
    binding = f"__require2import__{counter}__"
    context.buffer.prepend(namespace_import(binding, quote(module_id)))
    context.buffer.overwrite(site.node.start_byte, site.node.end_byte, binding)
