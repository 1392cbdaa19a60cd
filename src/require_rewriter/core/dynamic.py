"""Rewrite ``require()`` calls whose module id is computed at runtime.

Every file the argument could name is discovered at build time through a glob,
imported once per transform, and reachable through a generated dispatch
function that replaces the ``require`` callee::

    require(`./views/${name}`)
    ->
    __matchRequireRuntime1__(`./views/${name}`)

    function __matchRequireRuntime1__(path) {
      switch(path) {
        case './views/Home':
        case './views/Home.vue':
          return __dynamic_require2import__1__0;
        default: throw new Error("Cannot find module: " + path);
      }
    }

Files that do not exist at build time cannot be required at runtime.
"""

import asyncio
import logging
import posixpath
from pathlib import Path

from require_rewriter.core.analyze import CallSite, DynamicId
from require_rewriter.core.codegen import dispatch_function, namespace_import, quote_path
from require_rewriter.core.context import TransformContext
from require_rewriter.core.errors import GlobDerivationError
from require_rewriter.core.glob import derive_glob, expand_glob, normalize_glob, with_extensions
from require_rewriter.models import ResolvedAlias

logger = logging.getLogger(__name__)


async def promote_dynamic(site: CallSite, module_id: DynamicId, counter: int, context: TransformContext) -> None:
    resolved: ResolvedAlias | None = None
    unresolved = False

    async def resolve_head(glob: str) -> str | None:
        nonlocal resolved, unresolved
        # Relative, absolute, or no static head at all
        if glob.startswith((".", "/", "*")):
            return None
        resolved = await context.resolver.try_resolve(glob, context.importer)
        if resolved is None:
            unresolved = True
            return None
        return resolved.resolved

    try:
        glob = await derive_glob(module_id.argument, module_id.snippet, context.analyzed.source, resolve_head)
    except GlobDerivationError as exc:
        if unresolved:
            logger.debug("Skipping %s in %s: unresolved specifier", module_id.snippet, context.importer)
        else:
            logger.warning("Skipping %s in %s: %s", module_id.snippet, context.importer, exc)
        return
    if glob is None or unresolved:
        logger.debug("Skipping %s in %s: no glob", module_id.snippet, context.importer)
        return

    glob = with_extensions(normalize_glob(glob, context.options.dynamic.loose), context.options.extensions)
    matches = await asyncio.to_thread(expand_glob, glob, Path(context.importer).parent)
    files = [path if path.startswith(".") else f"./{path}" for path in matches]
    if context.options.on_files is not None:
        files = _narrow(files, context.options.on_files(list(files), context.importer))
    if not files:
        logger.debug("Skipping %s in %s: %s matched no files", module_id.snippet, context.importer, glob)
        return

    dispatch_name = f"__matchRequireRuntime{counter}__"
    fresh = 0
    cases: list[tuple[list[str], str]] = []
    for local_file in files:
        binding = context.import_cache.get(local_file)
        if binding is None:
            binding = f"__dynamic_require2import__{counter}__{fresh}"
            fresh += 1
            context.import_cache[local_file] = binding
            context.buffer.prepend(namespace_import(binding, quote_path(local_file)))
        cases.append((runtime_keys(local_file, resolved), binding))

    callee = site.callee
    context.buffer.overwrite(callee.start_byte, callee.end_byte, dispatch_name)
    context.buffer.append(dispatch_function(dispatch_name, cases))
    logger.debug("Dispatching %s in %s over %d file(s)", module_id.snippet, context.importer, len(files))


def runtime_keys(local_file: str, resolved: ResolvedAlias | None = None) -> list[str]:
    """Every string the original require argument can evaluate to for this file.

    ``./views/about/index.vue`` -> ``./views/about``, ``./views/about/index``,
    ``./views/about/index.vue``. With an alias the static prefix is written the
    way the source wrote it (``@/views/...``).
    """
    importee = local_file
    if resolved is not None and importee.startswith(resolved.resolved_prefix):
        importee = resolved.alias_prefix + importee[len(resolved.resolved_prefix) :]
    stem, _ = posixpath.splitext(importee)
    keys = [stem, importee]
    if posixpath.basename(stem) == "index":
        keys.insert(0, posixpath.dirname(stem))
    return keys


def _narrow(files: list[str], selected: list[str] | None) -> list[str]:
    # The hook can only remove matches, never add new ones
    if selected is None:
        return files
    allowed = set(selected)
    return [path for path in files if path in allowed]
