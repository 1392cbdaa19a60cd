import logging
import re
from pathlib import Path

from require_rewriter.core.analyze import analyze
from require_rewriter.core.ast import parse_module
from require_rewriter.core.context import TransformContext
from require_rewriter.core.languages import SOURCE_EXTENSIONS, clean_url, is_commonjs
from require_rewriter.core.ports.resolver import SpecifierResolver
from require_rewriter.core.resolve import AliasResolver
from require_rewriter.core.router import route
from require_rewriter.models import Options

logger = logging.getLogger(__name__)

_NODE_MODULES_RE = re.compile(r"node_modules/(?!\.vite/)")


class RequireTransformer:
    """Rewrite ``require()`` call sites of one file at a time into ES module syntax.

    A transformer holds no per-file state, so several files can be transformed
    concurrently; only the resolver's lookup cache is shared between them.
    """

    def __init__(self, options: Options | None = None, resolver: SpecifierResolver | None = None) -> None:
        self.options = options or Options()
        self.resolver = resolver or AliasResolver(self.options.alias, self.options.root)
        self._include = [re.compile(pattern) for pattern in self.options.include]
        self._exclude = [re.compile(pattern) for pattern in self.options.exclude]

    def should_transform(self, code: str, file_id: str) -> bool:
        pure_id = clean_url(file_id)
        if _NODE_MODULES_RE.search(pure_id.replace("\\", "/")):
            return False
        suffix = Path(pure_id).suffix
        if suffix not in self.options.extensions or suffix not in SOURCE_EXTENSIONS:
            return False
        if not is_commonjs(code):
            return False
        return self._passes_filter(file_id) and self._passes_filter(pure_id)

    async def transform(self, code: str, file_id: str) -> str | None:
        """Return the rewritten source, or ``None`` when nothing changed."""
        if not self.should_transform(code, file_id):
            return None

        importer = clean_url(file_id)
        source = code.encode("utf-8")
        analyzed = analyze(parse_module(source, Path(importer)), source)
        if not analyzed.require:
            return None

        context = TransformContext.create(importer, analyzed, self.options, self.resolver)
        for site in analyzed.require:
            await route(site, context)

        rendered = context.buffer.render()
        logger.debug(
            "%s %s (%d require call site(s))",
            "Rewrote" if rendered is not None else "Left unchanged",
            importer,
            len(analyzed.require),
        )
        return rendered

    async def transform_file(self, path: str | Path) -> str | None:
        file_path = Path(path)
        try:
            code = file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {path}") from None
        return await self.transform(code, str(file_path))

    def _passes_filter(self, file_id: str) -> bool:
        if any(pattern.search(file_id) for pattern in self._exclude):
            return False
        return not self._include or any(pattern.search(file_id) for pattern in self._include)
