"""
lexalias - Grammar aliases for static site builds

Registers syntax-highlighting grammars that reuse an existing lexer under a
new title and alias, before a site's pages are rendered.
"""

__version__ = "1.0.0"

from .grammar import Grammar, GrammarLexer
from .registry import GrammarRegistry, GrammarError, MissingBaseGrammar, AliasCollision
from .hooks import HookRegistry, HookError
from .site import Site, SiteError, Page
from .plugin import purescriptAliases_add, hooks_register
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "Grammar",
    "GrammarLexer",
    "GrammarRegistry",
    "GrammarError",
    "MissingBaseGrammar",
    "AliasCollision",
    "HookRegistry",
    "HookError",
    "Site",
    "SiteError",
    "Page",
    "purescriptAliases_add",
    "hooks_register",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
