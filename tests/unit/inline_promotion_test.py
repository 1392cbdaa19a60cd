import pytest

from require_rewriter.core.edits import HOIST_END, HOIST_START
from require_rewriter.core.transform import RequireTransformer


@pytest.mark.asyncio
async def test_nested_require_becomes_hoisted_reference(transformer: RequireTransformer) -> None:
    code = "function load() {\n  return require('./a');\n}\n"
    result = await transformer.transform(code, "src/main.js")
    assert result == (
        f"{HOIST_START} import * as __require2import__1__ from './a'; {HOIST_END}"
        "function load() {\n  return __require2import__1__;\n}\n"
    )


@pytest.mark.asyncio
async def test_each_call_site_gets_its_own_binding(transformer: RequireTransformer) -> None:
    code = "if (a) { require('./a'); }\nif (b) { require('./a'); }\n"
    result = await transformer.transform(code, "src/main.js")
    assert result is not None
    assert "import * as __require2import__1__ from './a';" in result
    assert "import * as __require2import__2__ from './a';" in result
    assert "if (a) { __require2import__1__; }\nif (b) { __require2import__2__; }\n" in result


@pytest.mark.asyncio
async def test_inline_binding_is_distinct_from_top_level_import(transformer: RequireTransformer) -> None:
    code = "const a = require('./a');\nfunction f() {\n  return require('./a').value;\n}\n"
    result = await transformer.transform(code, "src/main.js")
    assert result is not None
    assert "import * as a from './a';" in result
    assert "return __require2import__2__.value;" in result
    assert result.count("import * as __require2import__2__ from './a'") == 1


@pytest.mark.asyncio
async def test_line_numbers_are_preserved(transformer: RequireTransformer) -> None:
    code = "export function f() {\n  return require('./a');\n}\n"
    result = await transformer.transform(code, "src/main.js")
    assert result is not None
    assert result.count("\n") == code.count("\n")


@pytest.mark.asyncio
async def test_exported_declaration_is_not_top_scope(transformer: RequireTransformer) -> None:
    code = "export const a = require('./a');\n"
    result = await transformer.transform(code, "src/main.js")
    assert result is not None
    assert result.endswith("export const a = __require2import__1__;\n")


@pytest.mark.asyncio
async def test_typescript_source(transformer: RequireTransformer) -> None:
    code = "export function f(): number {\n  const m: { n: number } = require('./m');\n  return m.n;\n}\n"
    result = await transformer.transform(code, "src/main.ts")
    assert result is not None
    assert "const m: { n: number } = __require2import__1__;" in result


@pytest.mark.asyncio
async def test_rewritten_output_is_unchanged_on_second_pass(transformer: RequireTransformer) -> None:
    code = "const a = require('./a');\nfunction f() {\n  return require('./b');\n}\n"
    first = await transformer.transform(code, "src/main.js")
    assert first is not None
    assert await transformer.transform(first, "src/main.js") is None


@pytest.mark.asyncio
async def test_hashbang_stays_on_the_first_line(transformer: RequireTransformer) -> None:
    code = "#!/usr/bin/env node\nfunction f() { return require('./a'); }\n"
    result = await transformer.transform(code, "bin/cli.js")
    assert result == (
        "#!/usr/bin/env node\n"
        f"{HOIST_START} import * as __require2import__1__ from './a'; {HOIST_END}"
        "function f() { return __require2import__1__; }\n"
    )


@pytest.mark.asyncio
async def test_template_id_with_line_break_is_requoted(transformer: RequireTransformer) -> None:
    code = "function f() { return require(`./a\nb`); }\n"
    result = await transformer.transform(code, "src/main.js")
    assert result is not None
    assert "import * as __require2import__1__ from './a\\nb';" in result
