"""Resolve alias and bare specifiers at the head of a dynamic require glob.

Implements the ``SpecifierResolver`` port. Results are cached per
(specifier, importer directory); the cache is only read and filled from the
event loop thread, so concurrent transforms can share one resolver.
"""

import asyncio
import logging
import os
import re
from pathlib import Path

from require_rewriter.models import ResolvedAlias

logger = logging.getLogger(__name__)

_BARE_RE = re.compile(r"^[\w@]")


class AliasResolver:
    def __init__(self, alias: dict[str, str] | None = None, root: str | Path = ".") -> None:
        root_path = Path(root).resolve()
        entries = [(find, (root_path / replacement).resolve()) for find, replacement in (alias or {}).items()]
        # Longest alias wins: "@/components" before "@"
        self._aliases = sorted(entries, key=lambda entry: len(entry[0]), reverse=True)
        self._cache: dict[tuple[str, str], ResolvedAlias | None] = {}

    async def try_resolve(self, specifier: str, importer: str) -> ResolvedAlias | None:
        importer_dir = Path(importer).resolve().parent
        key = (specifier, str(importer_dir))
        if key in self._cache:
            return self._cache[key]

        resolved = self._resolve_alias(specifier, importer_dir)
        if resolved is None:
            resolved = await asyncio.to_thread(self._resolve_bare, specifier, importer_dir)
        if resolved is None:
            logger.debug("Could not resolve %r from %s", specifier, importer)
        self._cache[key] = resolved
        return resolved

    def _resolve_alias(self, specifier: str, importer_dir: Path) -> ResolvedAlias | None:
        for find, replacement in self._aliases:
            if specifier == find or specifier.startswith(find.rstrip("/") + "/"):
                rest = specifier[len(find.rstrip("/")) :]
                target = str(replacement) + rest
                return ResolvedAlias(kind="alias", importee=specifier, resolved=_relative_to(target, importer_dir))
        return None

    def _resolve_bare(self, specifier: str, importer_dir: Path) -> ResolvedAlias | None:
        if not _BARE_RE.match(specifier):
            return None
        segments = specifier.split("/")
        depth = 2 if specifier.startswith("@") else 1
        if len(segments) < depth or "*" in "/".join(segments[:depth]):
            return None
        package = "/".join(segments[:depth])
        rest = specifier[len(package) :]

        for directory in (importer_dir, *importer_dir.parents):
            package_dir = directory / "node_modules" / package
            if package_dir.is_dir():
                target = str(package_dir) + rest
                return ResolvedAlias(kind="bare", importee=specifier, resolved=_relative_to(target, importer_dir))
        return None


def _relative_to(target: str, importer_dir: Path) -> str:
    relative = os.path.relpath(target, importer_dir).replace(os.sep, "/")
    if target.endswith("/") and not relative.endswith("/"):
        relative += "/"
    return relative if relative.startswith(("./", "../")) else f"./{relative}"
