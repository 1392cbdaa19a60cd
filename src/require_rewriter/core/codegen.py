from collections.abc import Sequence

_LINE_BREAK_ESCAPES = {"\n": "\\n", "\r": "\\r", "'": "\\'"}
_PATH_ESCAPES = {"\\": "\\\\", **_LINE_BREAK_ESCAPES}


def quote(body: str) -> str:
    """Single-quoted JavaScript string literal from a string or template body as written in source.

    Existing escape sequences are kept; raw line breaks (legal in a template
    literal) and bare single quotes are escaped.
    """
    out: list[str] = []
    chars = iter(body)
    for char in chars:
        if char == "\\":
            out.append(char + next(chars, ""))
        else:
            out.append(_LINE_BREAK_ESCAPES.get(char, char))
    return "'" + "".join(out) + "'"


def quote_path(value: str) -> str:
    """Single-quoted JavaScript string literal whose runtime value is exactly ``value``."""
    return "'" + "".join(_PATH_ESCAPES.get(char, char) for char in value) + "'"


def namespace_import(binding: str, literal: str) -> str:
    """``literal`` is an already quoted module id."""
    return f"import * as {binding} from {literal}"


def import_specifiers(pairs: Sequence[tuple[str, str]]) -> str:
    """``a, b as c``"""
    return ", ".join(key if key == value else f"{key} as {value}" for key, value in pairs)


def destructure_specifiers(pairs: Sequence[tuple[str, str]]) -> str:
    """``a, b: c``"""
    return ", ".join(key if key == value else f"{key}: {value}" for key, value in pairs)


def dispatch_function(name: str, cases: Sequence[tuple[Sequence[str], str]]) -> str:
    """A closed-world ``switch`` from every runtime key to the binding of its module."""
    lines = [f"function {name}(path) {{", "  switch(path) {"]
    for keys, binding in cases:
        lines.extend(f"    case {quote_path(key)}:" for key in keys)
        lines.append(f"      return {binding};")
    lines.append('    default: throw new Error("Cannot find module: " + path);')
    lines.append("  }")
    lines.append("}")
    return "\n".join(lines)
