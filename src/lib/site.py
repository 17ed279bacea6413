"""
Site build context

A Site reads markdown pages from a source directory, fires lifecycle hooks,
highlights fenced code blocks with its own GrammarRegistry and writes one
HTML file per page. The registry is created fresh by reset() at the start
of every build, so grammars registered by hooks never leak between builds.

Build sequence (Site.process):
    reset -> read (post_read) -> render (pre_render, post_render) -> write (post_write)
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from ..config import AppSettings, appsettings
from ..models.grammar import AliasSpec, CollisionPolicy
from ..models.hooks import HookOwner, HookEvent
from .hooks import HookRegistry
from .log import LOG
from .registry import GrammarRegistry


class SiteError(Exception):
    """Raised when the site source or its configuration is unusable"""
    pass


# ```lang ... ``` or ~~~lang ... ~~~, closed by a fence of the same character
# at least as long as the opening one
FENCE_PATTERN = re.compile(
    r'^(?P<fence>(?P<char>[`~])(?P=char){2,})(?!(?P=char))[ \t]*(?P<info>[^\n`]*)\n(?P<code>.*?)^(?P=fence)(?P=char)*[ \t]*$',
    re.MULTILINE | re.DOTALL,
)


@dataclass
class Page:
    """A markdown source file and its rendered output"""
    path: Path  # relative to the site source
    content: str
    output: str = ""

    @property
    def output_path(self) -> Path:
        return self.path.with_suffix(".html")


class Site:
    """
    One site build

    Attributes:
        source: Directory holding pages and the site config
        destination: Directory rendered pages are written to
        settings: Application settings
        hooks: Lifecycle callbacks fired during the build
        config: Parsed site config (empty when the file is absent)
        alias_specs: Grammar aliases the pre-render plugin registers
        collision_policy: Policy handed to each build's GrammarRegistry
        pygments_style: Style for highlight.css
        grammars: Grammar registry for the current build
        pages: Pages read by the current build
    """

    def __init__(
        self,
        source: Path,
        destination: Path,
        settings: Optional[AppSettings] = None,
        hooks: Optional[HookRegistry] = None,
        config_path: Optional[Path] = None,
        style: Optional[str] = None,
    ) -> None:
        self.source = Path(source)
        self.destination = Path(destination)
        self.settings = settings or appsettings
        self.hooks = hooks if hooks is not None else HookRegistry()

        self.config = self.config_load(config_path or self.source / self.settings.config_filename)
        self.alias_specs = self.aliasSpecs_resolve()
        self.collision_policy = self.collisionPolicy_resolve()
        self.pygments_style = style or self.config.get("pygments_style") or self.settings.pygments_style

        self.grammars = GrammarRegistry(self.collision_policy)
        self.pages: List[Page] = []

        self.hooks.trigger(HookOwner.SITE, HookEvent.AFTER_INIT, self)

    def config_load(self, path: Path) -> Dict[str, Any]:
        """
        Load the YAML site config

        Returns:
            Parsed mapping, {} when the file does not exist or is empty

        Raises:
            SiteError: if the file is not valid YAML or not a mapping
        """
        if not path.exists():
            LOG(f"No site config at {path}, using defaults", level=2)
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SiteError(f"Invalid YAML in {path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise SiteError(f"Site config {path} must be a mapping")
        LOG(f"Loaded site config {path}", level=2)
        return config

    def aliasSpecs_resolve(self) -> List[AliasSpec]:
        """Alias registrations from the site config, else from settings"""
        entries = self.config.get("grammar_aliases")
        if entries is None:
            return self.settings.aliasSpecs_default()
        if not isinstance(entries, list):
            raise SiteError("'grammar_aliases' must be a list")

        try:
            return [AliasSpec.from_dict(entry) for entry in entries]
        except ValueError as e:
            raise SiteError(f"Invalid 'grammar_aliases' entry: {e}") from e

    def collisionPolicy_resolve(self) -> CollisionPolicy:
        value = self.config.get("collision")
        if value is None:
            return self.settings.collision_policy
        try:
            return CollisionPolicy(str(value).lower())
        except ValueError as e:
            choices = ", ".join(policy.value for policy in CollisionPolicy)
            raise SiteError(f"Unknown collision policy {value!r} (expected one of: {choices})") from e

    def formatter_make(self) -> HtmlFormatter:
        try:
            return HtmlFormatter(style=self.pygments_style, cssclass="highlight")
        except ClassNotFound as e:
            raise SiteError(f"Unknown Pygments style {self.pygments_style!r}") from e

    def process(self) -> Dict[str, Any]:
        """
        Run a full build

        Errors raised by hooks propagate unchanged and abort the build.

        Returns:
            dict with status, page_count, written (output paths) and
            aliases (registered alias -> grammar title)
        """
        self.reset()
        self.read()
        self.render()
        written = self.write()

        return {
            'status': True,
            'page_count': len(self.pages),
            'written': [str(path) for path in written],
            'aliases': {alias: grammar.title for alias, grammar in self.grammars.aliases_list().items()},
        }

    def reset(self) -> None:
        """Start a build with an empty grammar registry and no pages"""
        self.grammars = GrammarRegistry(self.collision_policy)
        self.pages = []

    def read(self) -> None:
        """
        Collect pages from the source directory

        Paths with a component starting with '_' or '.' are skipped, as is
        the destination when it lives inside the source.

        Raises:
            SiteError: if the source is missing or is also the destination
        """
        if not self.source.is_dir():
            raise SiteError(f"Site source not found: {self.source}")

        source = self.source.resolve()
        destination = self.destination.resolve()
        if destination == source:
            raise SiteError(f"Destination must differ from the site source: {self.destination}")
        destination_nested = destination.is_relative_to(source)
        suffixes = {suffix.lower() for suffix in self.settings.markdown_extensions}

        for path in sorted(self.source.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in suffixes:
                continue
            relative = path.relative_to(self.source)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            if destination_nested and path.resolve().is_relative_to(destination):
                continue
            self.pages.append(Page(path=relative, content=path.read_text(encoding="utf-8")))

        LOG(f"Read {len(self.pages)} page(s) from {self.source}", level=2)

        self.hooks.trigger(HookOwner.SITE, HookEvent.POST_READ, self)
        for page in self.pages:
            self.hooks.trigger(HookOwner.PAGES, HookEvent.POST_READ, page)

    def render(self) -> None:
        """Fire pre_render, then highlight every page's fenced code blocks"""
        self.hooks.trigger(HookOwner.SITE, HookEvent.PRE_RENDER, self)

        formatter = self.formatter_make()
        for page in self.pages:
            self.hooks.trigger(HookOwner.PAGES, HookEvent.PRE_RENDER, page)
            page.output = self.codeblocks_highlight(page.content, formatter)
            self.hooks.trigger(HookOwner.PAGES, HookEvent.POST_RENDER, page)

        self.hooks.trigger(HookOwner.SITE, HookEvent.POST_RENDER, self)

    def codeblocks_highlight(self, text: str, formatter: HtmlFormatter) -> str:
        """
        Replace fenced code blocks with highlighted HTML

        The first word of the fence's info string selects the grammar;
        unknown or missing languages are highlighted as plain text.
        Text outside fences is returned unchanged.
        """
        def block_highlight(match: re.Match[str]) -> str:
            info = match.group('info').split()
            language = info[0] if info else None
            return self.grammars.highlight(match.group('code'), language, formatter).rstrip("\n")

        return FENCE_PATTERN.sub(block_highlight, text)

    def write(self) -> List[Path]:
        """
        Write rendered pages and css/highlight.css to the destination

        Returns:
            Paths written, pages first
        """
        written: List[Path] = []
        self.destination.mkdir(parents=True, exist_ok=True)

        for page in self.pages:
            output_file = self.destination / page.output_path
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(page.output, encoding='utf-8')
            written.append(output_file)
            LOG(f"Wrote {output_file}", level=2)

        stylesheet = self.destination / "css" / "highlight.css"
        stylesheet.parent.mkdir(parents=True, exist_ok=True)
        stylesheet.write_text(self.formatter_make().get_style_defs(".highlight"), encoding='utf-8')
        written.append(stylesheet)

        for page in self.pages:
            self.hooks.trigger(HookOwner.PAGES, HookEvent.POST_WRITE, page)
        self.hooks.trigger(HookOwner.SITE, HookEvent.POST_WRITE, self)
        return written
