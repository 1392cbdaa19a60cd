"""Rewrite a top-level ``require`` statement into an ``import`` declaration in place.

Supported shapes::

    require('x')                      -> import 'x';
    const a = require('x')            -> import * as a from 'x'
    const { a, b: c } = require('x')  -> import { a, b as c } from 'x'
    const a = require('x').default    -> import a from 'x'
    const a = require('x').b          -> import { b as a } from 'x'
    const { a } = require('x').b      -> import { b as __syn } from 'x'; const { a } = __syn

Anything else raises ``RequireConversionError``: leaving a module-level
``require`` behind would break the ES module output.
"""

from tree_sitter import Node

from require_rewriter.core.analyze import CallSite, TopScopeKind
from require_rewriter.core.ast import named_children
from require_rewriter.core.codegen import destructure_specifiers, import_specifiers, quote
from require_rewriter.core.context import TransformContext

Binding = str | list[tuple[str, str]]


def promote_static(site: CallSite, module_id: str, counter: int, context: TransformContext) -> None:
    top_scope = site.top_scope
    assert top_scope is not None
    statement = top_scope.node

    if top_scope.kind is TopScopeKind.EXPRESSION_STATEMENT:
        context.buffer.overwrite(top_scope.start, top_scope.end, f"import {quote(module_id)};")
        return

    declarators = [child for child in named_children(statement) if child.type == "variable_declarator"]
    if len(declarators) != 1:
        raise context.conversion_error(statement)
    declarator = declarators[0]
    name = declarator.child_by_field_name("name")
    value = declarator.child_by_field_name("value")
    if name is None or value is None:
        raise context.conversion_error(statement)

    binding = _left_value(name, statement, context)
    member = _member_name(site, value, statement, context)
    source = quote(module_id)

    if member is None:
        if isinstance(binding, str):
            text = f"import * as {binding} from {source}"
        else:
            text = f"import {{ {import_specifiers(binding)} }} from {source}"
    elif isinstance(binding, str):
        if member == "default":
            text = f"import {binding} from {source}"
        elif member == binding:
            text = f"import {{ {binding} }} from {source}"
        else:
            text = f"import {{ {member} as {binding} }} from {source}"
    else:
        synthetic = f"__require2import__{counter}__"
        if member == "default":
            text = f"import {synthetic} from {source}"
        else:
            text = f"import {{ {member} as {synthetic} }} from {source}"
        text += f"; const {{ {destructure_specifiers(binding)} }} = {synthetic}"

    if context.text(statement).rstrip().endswith(";"):
        text += ";"
    context.buffer.overwrite(top_scope.start, top_scope.end, text)


def _left_value(name: Node, statement: Node, context: TransformContext) -> Binding:
    if name.type == "identifier":
        return context.text(name)
    if name.type != "object_pattern":
        raise context.conversion_error(statement)

    pairs: list[tuple[str, str]] = []
    for prop in named_children(name):
        if prop.type == "shorthand_property_identifier_pattern":
            local = context.text(prop)
            pairs.append((local, local))
            continue
        if prop.type == "pair_pattern":
            key = prop.child_by_field_name("key")
            value = prop.child_by_field_name("value")
            if key is not None and value is not None and key.type == "property_identifier" and value.type == "identifier":
                pairs.append((context.text(key), context.text(value)))
                continue
        raise context.conversion_error(statement)
    return pairs


def _member_name(site: CallSite, value: Node, statement: Node, context: TransformContext) -> str | None:
    """Property read directly off the call, or None when the declarator holds the call itself."""
    if value == site.node:
        return None
    member = site.ancestors[-1]
    prop = member.child_by_field_name("property")
    # Only one level: `require('x').a` is fine, `require('x').a.b` and `require('x')[a]` are not
    if member != value or member.type != "member_expression" or prop is None or prop.type != "property_identifier":
        raise context.conversion_error(statement)
    return context.text(prop)
