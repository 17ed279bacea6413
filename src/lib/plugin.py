"""
PureScript aliases plugin

Runs right before a site's pages are rendered and registers the site's
grammar aliases. With the default settings that is one grammar titled
"Purescript", selected by ```ps fences and tokenized by the TypeScript
lexer, so PureScript snippets get highlighting from TypeScript's grammar.
"""

from typing import Any

from ..models.hooks import HookOwner, HookEvent, HookPriority
from .hooks import HookRegistry
from .log import LOG

ANNOUNCEMENT = "Adding more PureScript Markdown aliases..."


def purescriptAliases_add(site: Any) -> None:
    """
    site:pre_render hook - register every alias spec of `site`

    Errors from the registry (MissingBaseGrammar, AliasCollision) are
    not caught; they abort the build.
    """
    LOG(ANNOUNCEMENT, level=1)
    for spec in site.alias_specs:
        site.grammars.register_alias(spec.base, spec.title, spec.aliases)


def hooks_register(hooks: HookRegistry, priority: HookPriority = HookPriority.NORMAL) -> None:
    """Attach the plugin to the site's pre-render point"""
    hooks.register(HookOwner.SITE, HookEvent.PRE_RENDER, purescriptAliases_add, priority)
