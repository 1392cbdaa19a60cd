import logging

from require_rewriter.core.analyze import CallSite, DynamicId
from require_rewriter.core.context import TransformContext
from require_rewriter.core.dynamic import promote_dynamic
from require_rewriter.core.inline import promote_inline
from require_rewriter.core.languages import is_builtin
from require_rewriter.core.static import promote_static

logger = logging.getLogger(__name__)


async def route(site: CallSite, context: TransformContext) -> None:
    """Send one call site to exactly one rewrite engine.

    The counter advances for every call site, skipped ones included, so
    generated names stay stable against the call's position in the file.
    """
    counter = context.next_counter()

    if site.module_id is None:
        logger.debug("Skipping argument-less require in %s", context.importer)
        return

    literal = site.literal_id
    if literal is not None and is_builtin(literal):
        logger.debug("Skipping builtin %r in %s", literal, context.importer)
        return

    if site.top_scope is not None:
        if literal is None:
            raise context.conversion_error(site.node)
        if _encloses_other_call(site, context):
            raise context.conversion_error(site.top_scope.node)
        promote_static(site, literal, counter, context)
    elif literal is not None:
        promote_inline(site, literal, counter, context)
    else:
        assert isinstance(site.module_id, DynamicId)
        await promote_dynamic(site, site.module_id, counter, context)


def _encloses_other_call(site: CallSite, context: TransformContext) -> bool:
    # A statement rewritten as a whole cannot also have a require inside it rewritten
    scope = site.top_scope
    assert scope is not None
    return any(
        other is not site and scope.start <= other.node.start_byte and other.node.end_byte <= scope.end
        for other in context.analyzed.require
    )
