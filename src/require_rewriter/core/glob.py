"""Turn dynamic ``require`` arguments into filesystem globs and expand them.

``derive_glob`` follows the same conversion rules bundlers apply to variable
dynamic ``import()`` expressions: literal parts are kept (glob-escaped), every
runtime-computed part becomes ``*``. ``expand_glob`` is a small matcher for
the glob shapes produced here (``*``, ``**``, ``?`` and ``{a,b}``).
"""

import os
import posixpath
import re
from collections.abc import Awaitable, Callable
from pathlib import Path

from tree_sitter import Node

from require_rewriter.core.ast import named_children, node_text
from require_rewriter.core.errors import GlobDerivationError

# Head of the glob as written -> replacement head, or None to keep it
GlobResolver = Callable[[str], Awaitable[str | None]]

_GLOB_SPECIAL_RE = re.compile(r"([()\[\]{}!?])")
_OWN_DIRECTORY_STAR_EXTENSION_RE = re.compile(r"^\./\*\.\w+$")
_MISSING_SLASH_RE = re.compile(r"(?<![*/])(\*)")
_SINGLE_LEVEL_RE = re.compile(r"^(.*)/\*(?!\*)")
_MAGIC_RE = re.compile(r"(?<!\\)[*?{]")

_EXAMPLE = "For example: require(`./foo/${bar}.js`)."


async def derive_glob(
    argument: Node,
    snippet: str,
    source: bytes,
    resolver: GlobResolver | None = None,
) -> str | None:
    """Return the glob for a dynamic require argument.

    Returns ``None`` when the argument has no runtime part (nothing to
    discover). Raises ``GlobDerivationError`` when the argument cannot be
    confined to a directory relative to the importer.
    """
    glob = expression_to_glob(argument, source)
    if resolver is not None:
        glob = await resolver(glob) or glob

    if "*" not in glob or glob.startswith("data:"):
        return None

    glob = glob.replace("**", "*")

    if glob.startswith("*"):
        raise GlobDerivationError(
            f'invalid require "{snippet}". It cannot be statically analyzed. '
            f"Variable dynamic requires must start with ./ and be limited to a specific directory. {_EXAMPLE}"
        )
    if glob.startswith("/"):
        raise GlobDerivationError(
            f'invalid require "{snippet}". Variable absolute requires are not supported, '
            f"requires must start with ./ in the static part of the require. {_EXAMPLE}"
        )
    if not glob.startswith(("./", "../")):
        raise GlobDerivationError(
            f'invalid require "{snippet}". Variable bare requires are not supported, '
            f"requires must start with ./ in the static part of the require. {_EXAMPLE}"
        )
    if _OWN_DIRECTORY_STAR_EXTENSION_RE.match(glob):
        raise GlobDerivationError(
            f'invalid require "{snippet}". Variable requires cannot require their own directory, '
            "place requires in a separate directory or make the require filename more specific."
        )
    return glob


def expression_to_glob(node: Node, source: bytes) -> str:
    if node.type == "template_string":
        return _template_to_glob(node, source)
    if node.type == "call_expression":
        return _call_to_glob(node, source)
    if node.type == "binary_expression":
        return _binary_to_glob(node, source)
    if node.type == "parenthesized_expression":
        return expression_to_glob(named_children(node)[0], source)
    if node.type == "string":
        return sanitize_string(node_text(node, source)[1:-1])
    return "*"


def sanitize_string(value: str) -> str:
    if value == "":
        return ""
    if "*" in value:
        raise GlobDerivationError("A dynamic require cannot contain * characters.")
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)


def _template_to_glob(node: Node, source: bytes) -> str:
    glob = ""
    cursor = node.start_byte + 1
    for child in node.named_children:
        if child.type != "template_substitution":
            continue
        glob += sanitize_string(source[cursor : child.start_byte].decode("utf-8"))
        glob += expression_to_glob(named_children(child)[0], source)
        cursor = child.end_byte
    glob += sanitize_string(source[cursor : node.end_byte - 1].decode("utf-8"))
    return glob


def _call_to_glob(node: Node, source: bytes) -> str:
    callee = node.child_by_field_name("function")
    arguments = node.child_by_field_name("arguments")
    if callee is None or arguments is None or callee.type != "member_expression":
        return "*"
    prop = callee.child_by_field_name("property")
    target = callee.child_by_field_name("object")
    if prop is None or target is None or node_text(prop, source) != "concat":
        return "*"
    return expression_to_glob(target, source) + "".join(
        expression_to_glob(arg, source) for arg in named_children(arguments)
    )


def _binary_to_glob(node: Node, source: bytes) -> str:
    operator = node.child_by_field_name("operator")
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")
    if operator is None or operator.type != "+" or left is None or right is None:
        op = operator.type if operator is not None else "?"
        raise GlobDerivationError(f"{op} operator is not supported.")
    return expression_to_glob(left, source) + expression_to_glob(right, source)


def fix_glob_slash(glob: str) -> str:
    """``./foo*`` -> ``./foo/*``, ``./foo*.js`` -> ``./foo/*.js``"""
    return _MISSING_SLASH_RE.sub(r"/\1", glob)


def to_depth_glob(glob: str) -> str:
    """``./foo/*`` -> ``./foo/**/*``, ``./foo/*.js`` -> ``./foo/**/*.js``"""
    return _SINGLE_LEVEL_RE.sub(r"\1/**/*", glob, count=1)


def normalize_glob(glob: str, loose: bool = True) -> str:
    glob = fix_glob_slash(glob)
    return to_depth_glob(glob) if loose else glob


def has_extension(glob: str) -> bool:
    return posixpath.splitext(glob.rsplit("/", 1)[-1])[1] != ""


def with_extensions(glob: str, extensions: list[str]) -> str:
    """Append ``.{js,ts,...}`` to a glob whose last segment names no extension."""
    if has_extension(glob) or not extensions:
        return glob
    return glob + ".{" + ",".join(ext.lstrip(".") for ext in extensions) + "}"


def expand_glob(pattern: str, base_dir: str | Path) -> list[str]:
    """List files under ``base_dir`` matching ``pattern``, in filesystem order.

    Paths are returned in the form of the pattern (``./views/Home.vue`` for
    ``./views/**/*.vue``). Dot files and dot directories are not matched.
    """
    segments = pattern.split("/")
    static: list[str] = []
    for segment in segments[:-1]:
        if _MAGIC_RE.search(segment):
            break
        static.append(unescape_glob(segment))
    prefix = "/".join(static)
    walk_root = Path(base_dir) / prefix if prefix else Path(base_dir)
    if not walk_root.is_dir():
        return []

    max_depth = None if "**" in pattern else len(segments) - len(static) - 1
    regex = glob_to_regex(pattern)

    matches: list[str] = []
    for dirpath, dirnames, filenames in os.walk(walk_root):
        rel_dir = os.path.relpath(dirpath, walk_root).replace(os.sep, "/")
        depth = 0 if rel_dir == "." else rel_dir.count("/") + 1
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for name in filenames:
            if name.startswith("."):
                continue
            rel = name if rel_dir == "." else f"{rel_dir}/{name}"
            candidate = f"{prefix}/{rel}" if prefix else rel
            if regex.fullmatch(candidate):
                matches.append(candidate)
    return matches


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    depth = 0
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if pattern.startswith("**/", i):
            out.append(r"(?:[^/]+/)*")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(r".*")
            i += 2
            continue
        if char == "*":
            out.append(r"[^/]*")
        elif char == "?":
            out.append(r"[^/]")
        elif char == "{":
            out.append("(?:")
            depth += 1
        elif char == "}" and depth:
            out.append(")")
            depth -= 1
        elif char == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out))


def unescape_glob(glob: str) -> str:
    """``./\\(group\\)/*`` -> ``./(group)/*``"""
    return re.sub(r"\\(.)", r"\1", glob)
