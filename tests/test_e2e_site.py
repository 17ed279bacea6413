"""
End-to-end site build tests

Tests the full pipeline: markdown pages -> hooks -> grammar aliases ->
highlighted HTML output, including _config.yml handling and the CLI.
"""

import re

import pytest

from lexalias.__main__ import main
from lexalias.config import AppSettings
from lexalias.lib.hooks import HookRegistry
from lexalias.lib.plugin import hooks_register
from lexalias.lib.registry import MissingBaseGrammar, AliasCollision
from lexalias.lib.site import Site, SiteError
from lexalias.models import AliasSpec, CollisionPolicy, HookOwner, HookEvent


PAGE = """# Types

```ps
const x: number = 1;
```

Same code, tagged as TypeScript:

```typescript
const x: number = 1;
```
"""

HIGHLIGHT_BLOCK = re.compile(r'<div class="highlight">.*?</div>', re.DOTALL)


@pytest.fixture
def source(tmp_path):
    src = tmp_path / "site"
    src.mkdir()
    (src / "index.md").write_text(PAGE, encoding="utf-8")
    return src


@pytest.fixture
def destination(tmp_path):
    return tmp_path / "_site"


@pytest.fixture
def hooks():
    registry = HookRegistry()
    hooks_register(registry)
    return registry


class TestSiteBuild:
    """Test building a site with the aliases plugin attached"""

    def test_ps_highlighted_like_typescript(self, source, destination, hooks):
        """ps and typescript fences produce identical HTML"""
        result = Site(source, destination, hooks=hooks).process()

        assert result['status'] is True
        assert result['page_count'] == 1
        assert result['aliases'] == {"ps": "Purescript"}

        html = (destination / "index.html").read_text(encoding="utf-8")
        blocks = HIGHLIGHT_BLOCK.findall(html)
        assert len(blocks) == 2
        assert blocks[0] == blocks[1]
        assert "```" not in html
        assert "Same code, tagged as TypeScript:" in html

    def test_without_plugin_ps_is_plain_text(self, source, destination):
        """Without the plugin, ps fences fall back to plain text"""
        Site(source, destination).process()

        html = (destination / "index.html").read_text(encoding="utf-8")
        blocks = HIGHLIGHT_BLOCK.findall(html)
        assert len(blocks) == 2
        assert blocks[0] != blocks[1]

    def test_stylesheet_written(self, source, destination, hooks):
        """css/highlight.css holds the Pygments style"""
        result = Site(source, destination, hooks=hooks).process()

        stylesheet = destination / "css" / "highlight.css"
        assert stylesheet.exists()
        assert ".highlight" in stylesheet.read_text(encoding="utf-8")
        assert str(stylesheet) in result['written']

    def test_registry_populated_before_pages_render(self, source, destination, hooks):
        """Page pre_render hooks already see the alias"""
        seen = []
        site = Site(source, destination, hooks=hooks)
        hooks.register(HookOwner.PAGES, HookEvent.PRE_RENDER, lambda page: seen.append("ps" in site.grammars))

        site.process()
        assert seen == [True]

    def test_rebuild_starts_fresh(self, source, destination, hooks):
        """Each build gets a new registry, so rebuilding does not collide"""
        site = Site(source, destination, hooks=hooks)
        first = site.grammars
        site.process()
        site.process()

        assert site.grammars is not first
        assert list(site.grammars.aliases_list()) == ["ps"]

    def test_lifecycle_order(self, source, destination):
        """Site hooks fire in build order"""
        events = []
        hooks = HookRegistry()
        for event in (HookEvent.AFTER_INIT, HookEvent.POST_READ, HookEvent.PRE_RENDER,
                      HookEvent.POST_RENDER, HookEvent.POST_WRITE):
            hooks.register(HookOwner.SITE, event, lambda site, event=event: events.append(event))

        Site(source, destination, hooks=hooks).process()
        assert events == [
            HookEvent.AFTER_INIT,
            HookEvent.POST_READ,
            HookEvent.PRE_RENDER,
            HookEvent.POST_RENDER,
            HookEvent.POST_WRITE,
        ]

    def test_skips_underscore_and_destination(self, source, hooks):
        """_-prefixed paths and the destination are not read as pages"""
        (source / "_drafts").mkdir()
        (source / "_drafts" / "draft.md").write_text("draft", encoding="utf-8")
        (source / "notes.txt").write_text("not a page", encoding="utf-8")
        destination = source / "out"
        destination.mkdir()
        (destination / "stale.md").write_text("stale", encoding="utf-8")

        site = Site(source, destination, hooks=hooks)
        site.process()
        assert [str(page.path) for page in site.pages] == ["index.md"]

    def test_nested_pages(self, source, destination, hooks):
        """Pages keep their relative path"""
        (source / "guide").mkdir()
        (source / "guide" / "intro.markdown").write_text("```ps\nlet a = 1;\n```\n", encoding="utf-8")

        Site(source, destination, hooks=hooks).process()
        assert (destination / "guide" / "intro.html").exists()

    def test_missing_source(self, tmp_path, hooks):
        """Missing source directory is a SiteError"""
        with pytest.raises(SiteError):
            Site(tmp_path / "missing", tmp_path / "out", hooks=hooks).process()

    def test_destination_same_as_source(self, source, hooks):
        """Building into the source directory is refused"""
        with pytest.raises(SiteError):
            Site(source, source, hooks=hooks).process()

    def test_source_inside_destination(self, tmp_path, hooks):
        """Pages are read when the destination contains the source"""
        src = tmp_path / "public" / "src"
        src.mkdir(parents=True)
        (src / "index.md").write_text(PAGE, encoding="utf-8")

        result = Site(src, tmp_path / "public", hooks=hooks).process()
        assert result['page_count'] == 1
        assert (tmp_path / "public" / "index.html").exists()


class TestCodeBlocks:
    """Test fenced code block highlighting"""

    def test_tilde_fence_and_info_string(self, source, destination, hooks):
        """~~~ fences and extra info words are accepted"""
        site = Site(source, destination, hooks=hooks)
        site.process()

        text = "~~~ps title=example\nconst y = 2;\n~~~\n"
        html = site.codeblocks_highlight(text, site.formatter_make())
        assert html.startswith('<div class="highlight">')
        assert "~~~" not in html

    def test_longer_closing_fence(self, source, destination, hooks):
        """A closing fence longer than the opening one ends the block"""
        site = Site(source, destination, hooks=hooks)
        site.process()

        html = site.codeblocks_highlight("```ps\nconst y = 2;\n`````\nafter\n", site.formatter_make())
        assert html.startswith('<div class="highlight">')
        assert "`" not in html
        assert html.endswith("\nafter\n")

    def test_shorter_closing_fence_does_not_close(self, source, destination):
        """A shorter fence stays inside the block as code"""
        site = Site(source, destination)
        html = site.codeblocks_highlight("````\n```\ninner\n````\n", site.formatter_make())

        assert len(HIGHLIGHT_BLOCK.findall(html)) == 1
        assert "```" in html
        assert "````" not in html

    def test_no_language_plain_text(self, source, destination):
        """Fence without a language is still rendered"""
        site = Site(source, destination)
        html = site.codeblocks_highlight("```\n<b>raw</b>\n```", site.formatter_make())

        assert '<div class="highlight">' in html
        assert "&lt;b&gt;" in html

    def test_text_outside_fences_unchanged(self, source, destination):
        """Prose is passed through untouched"""
        site = Site(source, destination)
        assert site.codeblocks_highlight("plain `inline` text", site.formatter_make()) == "plain `inline` text"


class TestSiteConfig:
    """Test _config.yml handling"""

    def test_default_specs_from_settings(self, source, destination):
        """Without a config the settings default applies"""
        site = Site(source, destination)
        assert site.alias_specs == [AliasSpec(base="typescript", title="Purescript", aliases=["ps"])]
        assert site.collision_policy is CollisionPolicy.ERROR

    def test_settings_override(self, source, destination, monkeypatch):
        """LEXALIAS_ environment variables change the default spec"""
        monkeypatch.setenv("LEXALIAS_BASE_GRAMMAR", "javascript")
        monkeypatch.setenv("LEXALIAS_COLLISION_POLICY", "overwrite")
        site = Site(source, destination, settings=AppSettings())

        assert site.alias_specs[0].base == "javascript"
        assert site.collision_policy is CollisionPolicy.OVERWRITE

    def test_config_aliases(self, source, destination, hooks):
        """grammar_aliases in _config.yml replace the default"""
        (source / "_config.yml").write_text(
            "grammar_aliases:\n"
            "  - base: typescript\n"
            "    title: Purescript\n"
            "    aliases: [ps, psc]\n"
            "pygments_style: friendly\n",
            encoding="utf-8",
        )
        site = Site(source, destination, hooks=hooks)
        result = site.process()

        assert result['aliases'] == {"ps": "Purescript", "psc": "Purescript"}
        assert site.pygments_style == "friendly"

    def test_style_argument_wins(self, source, destination):
        """Explicit style overrides the config"""
        (source / "_config.yml").write_text("pygments_style: friendly\n", encoding="utf-8")
        assert Site(source, destination, style="emacs").pygments_style == "emacs"

    def test_missing_base_aborts_build(self, source, destination, hooks):
        """Unknown base grammar fails the build, nothing is written"""
        (source / "_config.yml").write_text(
            "grammar_aliases:\n  - {base: no-such-grammar, title: Purescript, aliases: ps}\n",
            encoding="utf-8",
        )
        site = Site(source, destination, hooks=hooks)

        with pytest.raises(MissingBaseGrammar):
            site.process()
        assert len(site.grammars) == 0
        assert not (destination / "index.html").exists()

    def test_collision_policy_from_config(self, source, destination, hooks):
        """collision: overwrite lets a site shadow a built-in alias"""
        (source / "_config.yml").write_text(
            "collision: overwrite\n"
            "grammar_aliases:\n  - {base: typescript, title: Purescript, aliases: [ts]}\n",
            encoding="utf-8",
        )
        site = Site(source, destination, hooks=hooks)
        site.process()
        assert site.grammars.grammar_get("ts").title == "Purescript"

    def test_builtin_collision_errors_by_default(self, source, destination, hooks):
        """Claiming a built-in alias fails under the default policy"""
        (source / "_config.yml").write_text(
            "grammar_aliases:\n  - {base: typescript, title: Purescript, aliases: [python]}\n",
            encoding="utf-8",
        )
        with pytest.raises(AliasCollision):
            Site(source, destination, hooks=hooks).process()

    def test_invalid_yaml(self, source, destination):
        """Broken YAML is a SiteError"""
        (source / "_config.yml").write_text("grammar_aliases: [unclosed\n", encoding="utf-8")
        with pytest.raises(SiteError):
            Site(source, destination)

    def test_invalid_alias_entry(self, source, destination):
        """Entries need base and title"""
        (source / "_config.yml").write_text("grammar_aliases:\n  - {aliases: [ps]}\n", encoding="utf-8")
        with pytest.raises(SiteError):
            Site(source, destination)

    def test_unknown_collision_policy(self, source, destination):
        """Unknown collision value is a SiteError"""
        (source / "_config.yml").write_text("collision: shrug\n", encoding="utf-8")
        with pytest.raises(SiteError):
            Site(source, destination)

    def test_unknown_style(self, source, destination, hooks):
        """Unknown Pygments style is a SiteError"""
        with pytest.raises(SiteError):
            Site(source, destination, hooks=hooks, style="no-such-style").process()


class TestCli:
    """Test the command line pipeline"""

    def test_build(self, source, destination):
        """CLI builds the site with the plugin attached"""
        state = main([str(source), str(destination)])

        assert state.envOK is True
        assert state.buildResult['aliases'] == {"ps": "Purescript"}
        assert (destination / "index.html").exists()

    def test_list_aliases(self, source, destination, capsys):
        """--listAliases prints the registered aliases"""
        main([str(source), str(destination), "--listAliases"])

        out = capsys.readouterr().out
        assert "Registered grammar aliases:" in out
        assert "Purescript" in out

    def test_missing_source_exits(self, tmp_path):
        """Missing inputdir exits with status 1"""
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing"), str(tmp_path / "out")])
        assert excinfo.value.code == 1

    def test_missing_config_exits(self, source, destination):
        """Explicit --config must exist"""
        with pytest.raises(SystemExit) as excinfo:
            main([str(source), str(destination), "--config", str(source / "nope.yml")])
        assert excinfo.value.code == 1

    def test_missing_base_exits(self, source, destination, capsys):
        """Registration errors abort the CLI build"""
        config = source / "site.yml"
        config.write_text("grammar_aliases:\n  - {base: no-such-grammar, title: X, aliases: [x]}\n", encoding="utf-8")

        with pytest.raises(SystemExit) as excinfo:
            main([str(source), str(destination), "--config", str(config)])
        assert excinfo.value.code == 1
        assert "no-such-grammar" in capsys.readouterr().err
