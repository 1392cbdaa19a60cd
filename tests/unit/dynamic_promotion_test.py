"""Runtime-computed require ids turned into glob discovery plus a dispatch function."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from require_rewriter.core.dynamic import runtime_keys
from require_rewriter.core.edits import RUNTIME_END, RUNTIME_START
from require_rewriter.core.glob import expand_glob
from require_rewriter.core.transform import RequireTransformer
from require_rewriter.models import DynamicOptions, Options, ResolvedAlias

_PAGE = "function page(name) {\n  return require(`./views/${name}`);\n}\n"


async def _transform(project: Path, code: str, options: Options | None = None) -> str | None:
    transformer = RequireTransformer(options or Options(root=str(project)))
    return await transformer.transform(code, str(project / "src" / "main.js"))


@pytest.mark.asyncio
async def test_template_literal_dispatches_over_discovered_files(views_project: Path) -> None:
    result = await _transform(views_project, _PAGE)

    assert result is not None
    assert "import * as __dynamic_require2import__1__0 from './views/Home.vue';" in result
    assert "import * as __dynamic_require2import__1__1 from './views/about/index.vue';" in result
    assert "return __matchRequireRuntime1__(`./views/${name}`);" in result
    assert (
        "function __matchRequireRuntime1__(path) {\n"
        "  switch(path) {\n"
        "    case './views/Home':\n"
        "    case './views/Home.vue':\n"
        "      return __dynamic_require2import__1__0;\n"
        "    case './views/about':\n"
        "    case './views/about/index':\n"
        "    case './views/about/index.vue':\n"
        "      return __dynamic_require2import__1__1;\n"
        '    default: throw new Error("Cannot find module: " + path);\n'
        "  }\n"
        "}"
    ) in result
    assert result.rstrip().endswith(RUNTIME_END)
    assert f"}}\n{RUNTIME_START}\n" in result


@pytest.mark.asyncio
async def test_strict_matching_stays_at_literal_depth(views_project: Path) -> None:
    options = Options(root=str(views_project), dynamic=DynamicOptions(loose=False))
    result = await _transform(views_project, _PAGE, options)

    assert result is not None
    assert "'./views/Home.vue'" in result
    assert "about" not in result


@pytest.mark.asyncio
async def test_same_file_is_imported_once_across_call_sites(views_project: Path) -> None:
    code = (
        "function a(n) {\n  return require(`./views/${n}`);\n}\n"
        "function b(n) {\n  return require('./views/' + n + '.vue');\n}\n"
    )
    result = await _transform(views_project, code)

    assert result is not None
    assert result.count("from './views/Home.vue'") == 1
    assert result.count("from './views/about/index.vue'") == 1
    assert "function __matchRequireRuntime1__(path)" in result
    assert "function __matchRequireRuntime2__(path)" in result
    assert result.count("return __dynamic_require2import__1__0;") == 2
    assert result.count("return __dynamic_require2import__1__1;") == 2
    assert "__dynamic_require2import__2__" not in result


@pytest.mark.asyncio
async def test_concat_call_is_supported(views_project: Path) -> None:
    code = "export const load = (n) => require('./views/'.concat(n, '.vue'));\n"
    result = await _transform(views_project, code)

    assert result is not None
    assert "__matchRequireRuntime1__('./views/'.concat(n, '.vue'))" in result


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code",
    [
        "function f(n) { return require(`./missing/${n}`); }\n",
        "function f(n) { return require(n); }\n",
        "function f(n) { return require(`${n}/index.js`); }\n",
        "function f(n) { return require(`/abs/${n}`); }\n",
        "function f(n) { return require(`~/views/${n}`); }\n",
        "function f(n) { return require('./views/' - n); }\n",
    ],
    ids=["no-matches", "bare-variable", "variable-head", "absolute", "unknown-alias", "minus-operator"],
)
async def test_unresolvable_dynamic_ids_are_skipped(views_project: Path, code: str) -> None:
    assert await _transform(views_project, code) is None


@pytest.mark.asyncio
async def test_alias_keys_keep_the_source_prefix(views_project: Path) -> None:
    pages = views_project / "src" / "pages"
    pages.mkdir()
    options = Options(root=str(views_project), alias={"@": "./src"})
    transformer = RequireTransformer(options)
    code = "function page(name) {\n  return require(`@/views/${name}`);\n}\n"

    result = await transformer.transform(code, str(pages / "index.js"))

    assert result is not None
    assert "from '../views/Home.vue'" in result
    assert "case '@/views/Home':" in result
    assert "case '@/views/about':" in result
    assert "case '../views/Home'" not in result


@pytest.mark.asyncio
async def test_files_hook_narrows_matches(views_project: Path) -> None:
    seen: list[str] = []

    def only_home(files: list[str], importer: str) -> list[str]:
        seen.extend(files)
        return [path for path in files if "Home" in path] + ["./views/Injected.vue"]

    options = Options(root=str(views_project), on_files=only_home)
    result = await _transform(views_project, _PAGE, options)

    assert sorted(seen) == ["./views/Home.vue", "./views/about/index.vue"]
    assert result is not None
    assert "Home.vue" in result
    assert "about" not in result
    assert "Injected" not in result


def test_runtime_keys_for_plain_and_index_files() -> None:
    assert runtime_keys("./views/Home.vue") == ["./views/Home", "./views/Home.vue"]
    assert runtime_keys("./views/about/index.vue") == [
        "./views/about",
        "./views/about/index",
        "./views/about/index.vue",
    ]


def test_runtime_keys_restore_alias_prefix() -> None:
    resolved = ResolvedAlias(kind="alias", importee="@/views/*", resolved="../views/*")
    assert runtime_keys("../views/a/index.js", resolved) == ["@/views/a", "@/views/a/index", "@/views/a/index.js"]


@pytest.mark.asyncio
async def test_alias_keys_keep_glob_special_directory_names(views_project: Path) -> None:
    group = views_project / "src" / "v(1)"
    group.mkdir()
    (group / "Home.vue").write_text("<template />\n")
    options = Options(root=str(views_project), alias={"@": "./src"})
    code = "function page(name) {\n  return require(`@/v(1)/${name}`);\n}\n"

    result = await _transform(views_project, code, options)

    assert result is not None
    assert "from './v(1)/Home.vue'" in result
    assert "case '@/v(1)/Home':" in result
    assert "case '@/v(1)/Home.vue':" in result
    assert "case './v(1)/Home'" not in result


@pytest.mark.asyncio
async def test_file_names_are_escaped_as_string_values(views_project: Path) -> None:
    (views_project / "src" / "views" / "a\\b.vue").write_text("<template />\n")
    result = await _transform(views_project, _PAGE)

    assert result is not None
    assert "from './views/a\\\\b.vue';" in result
    assert "case './views/a\\\\b':" in result


@pytest.mark.asyncio
async def test_file_discovery_runs_off_the_event_loop(views_project: Path) -> None:
    real_to_thread = asyncio.to_thread
    with patch("require_rewriter.core.dynamic.asyncio.to_thread", side_effect=real_to_thread) as to_thread:
        result = await _transform(views_project, _PAGE)

    assert result is not None
    assert to_thread.call_args.args[0] is expand_glob
