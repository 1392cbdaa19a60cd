import re
from pathlib import Path

_EXTENSION_GRAMMAR_MAP = {
    ".cjs": "javascript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".mts": "typescript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

JS_EXTENSIONS = (".mjs", ".js", ".mts", ".ts", ".jsx", ".tsx", ".cjs", ".cts", ".json")

KNOWN_SFC_EXTENSIONS = (".vue", ".svelte")

KNOWN_ASSET_TYPES = (
    # images
    ".png",
    ".jpg",
    ".jpeg",
    ".jfif",
    ".pjpeg",
    ".pjp",
    ".gif",
    ".svg",
    ".ico",
    ".webp",
    ".avif",
    # media
    ".mp4",
    ".webm",
    ".ogg",
    ".mp3",
    ".wav",
    ".flac",
    ".aac",
    # fonts
    ".woff",
    ".woff2",
    ".eot",
    ".ttf",
    ".otf",
    # other
    ".webmanifest",
    ".pdf",
    ".txt",
)

KNOWN_CSS_TYPES = (".css", ".less", ".sass", ".scss", ".styl", ".stylus", ".pcss", ".postcss")

DEFAULT_EXTENSIONS: tuple[str, ...] = JS_EXTENSIONS + KNOWN_SFC_EXTENSIONS + KNOWN_ASSET_TYPES + KNOWN_CSS_TYPES

# Source files the rewriter can parse
SOURCE_EXTENSIONS: frozenset[str] = frozenset(_EXTENSION_GRAMMAR_MAP)

_NODE_BUILTINS = frozenset(
    {
        "assert",
        "assert/strict",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "dns/promises",
        "domain",
        "events",
        "fs",
        "fs/promises",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "path/posix",
        "path/win32",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "readline/promises",
        "repl",
        "stream",
        "stream/consumers",
        "stream/promises",
        "stream/web",
        "string_decoder",
        "sys",
        "timers",
        "timers/promises",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "util/types",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)

_MULTILINE_COMMENTS_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_SINGLELINE_COMMENTS_RE = re.compile(r"//.*")
_COMMONJS_RE = re.compile(r"\b(?:require|module|exports)\b")
_QUERY_HASH_RE = re.compile(r"[?#].*$", re.DOTALL)


def grammar_for_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_GRAMMAR_MAP:
        return _EXTENSION_GRAMMAR_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def is_builtin(module_id: str) -> bool:
    return module_id.startswith("node:") or module_id in _NODE_BUILTINS


def is_commonjs(code: str) -> bool:
    """Return True if ``require``, ``module`` or ``exports`` appears outside comments."""
    code = _MULTILINE_COMMENTS_RE.sub("", code)
    code = _SINGLELINE_COMMENTS_RE.sub("", code)
    return _COMMONJS_RE.search(code) is not None


def clean_url(url: str) -> str:
    return _QUERY_HASH_RE.sub("", url)


def normalize_extensions(extensions: list[str] | tuple[str, ...]) -> list[str]:
    """Dot-prefix and deduplicate extensions, keeping first-seen order."""
    seen: dict[str, None] = {}
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        seen.setdefault(ext if ext.startswith(".") else f".{ext}", None)
    return list(seen)
