from typing import Protocol

from require_rewriter.models import ResolvedAlias


class SpecifierResolver(Protocol):
    async def try_resolve(self, specifier: str, importer: str) -> ResolvedAlias | None: ...
