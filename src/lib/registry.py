"""
Grammar registry for a site build

Maps alias strings to Grammar values. Pygments' built-in lexers are
always resolvable (looked up lazily, never stored); grammars added with
register_alias() are stored here and live as long as the registry, which
belongs to one build context.
"""

from typing import Any, Dict, Iterable, List, Optional

from pygments import highlight as pygments_highlight
from pygments.formatter import Formatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, find_lexer_class_by_name
from pygments.util import ClassNotFound

from ..models.grammar import CollisionPolicy
from .grammar import Grammar
from .log import LOG, WARN


class GrammarError(Exception):
    """Raised when a grammar registration is rejected"""
    pass


class MissingBaseGrammar(GrammarError):
    """Raised when the grammar being aliased is not known to the registry"""
    pass


class AliasCollision(GrammarError):
    """Raised when an alias is already claimed by a different grammar"""
    pass


def alias_normalize(alias: str) -> str:
    """Aliases are matched case-insensitively, like Pygments does"""
    return alias.strip().lower()


class GrammarRegistry:
    """
    Registry of grammars selectable by alias

    Lookup order for an alias: grammars registered here, then Pygments
    built-in lexers.
    """

    def __init__(self, collision_policy: CollisionPolicy = CollisionPolicy.ERROR) -> None:
        self.grammars: Dict[str, Grammar] = {}
        self.collision_policy = collision_policy

    def __contains__(self, alias: str) -> bool:
        return self.grammar_find(alias) is not None

    def __len__(self) -> int:
        return len(self.grammars)

    def builtin_find(self, alias: str) -> Optional[Grammar]:
        """Look up a Pygments built-in (or plugin) lexer by alias"""
        try:
            lexer_class = find_lexer_class_by_name(alias)
        except ClassNotFound:
            return None
        return Grammar.from_lexerClass(lexer_class)

    def grammar_find(self, alias: str) -> Optional[Grammar]:
        """
        Resolve an alias to a Grammar

        Returns:
            Registered grammar, else built-in grammar, else None
        """
        key = alias_normalize(alias)
        if not key:
            return None
        if key in self.grammars:
            return self.grammars[key]
        return self.builtin_find(key)

    def grammar_get(self, alias: str) -> Grammar:
        """
        Resolve an alias to a Grammar

        Raises:
            MissingBaseGrammar: if nothing answers to `alias`
        """
        grammar = self.grammar_find(alias)
        if grammar is None:
            raise MissingBaseGrammar(f"No grammar found for alias {alias!r}")
        return grammar

    def register_alias(self, base_grammar_id: str, new_title: str, new_aliases: Iterable[str]) -> None:
        """
        Register a grammar that tokenizes exactly like `base_grammar_id`

        The new grammar reports `new_title` and answers to every alias in
        `new_aliases`. Registration is all-or-nothing: on any error the
        registry is left unchanged.

        Args:
            base_grammar_id: Alias of an existing grammar (e.g. "typescript")
            new_title: Title of the new grammar (e.g. "Purescript")
            new_aliases: Selector strings (e.g. {"ps"})

        Raises:
            MissingBaseGrammar: `base_grammar_id` does not resolve
            GrammarError: `new_aliases` is empty
            AliasCollision: an alias belongs to a different grammar and the
                collision policy is ERROR
        """
        base = self.grammar_get(base_grammar_id)

        if isinstance(new_aliases, str):
            new_aliases = [new_aliases]
        aliases: List[str] = []
        for alias in new_aliases:
            key = alias_normalize(alias)
            if key and key not in aliases:
                aliases.append(key)
        if not aliases:
            raise GrammarError(f"No aliases given for grammar {new_title!r}")

        grammar = base.derive(title=new_title, aliases=aliases, base=alias_normalize(base_grammar_id))

        claimed: Dict[str, Grammar] = {}
        for alias in aliases:
            existing = self.grammar_find(alias)
            if existing is None:
                continue
            if existing.same_as(grammar):
                LOG(f"Alias '{alias}' already selects {new_title}, nothing to do", level=2)
                continue
            claimed[alias] = existing

        if claimed and self.collision_policy is CollisionPolicy.ERROR:
            owners = ", ".join(f"'{alias}' ({existing.title})" for alias, existing in claimed.items())
            raise AliasCollision(f"Cannot register {new_title}: aliases already claimed: {owners}")

        for alias, existing in claimed.items():
            WARN(f"Alias '{alias}' now selects {new_title} instead of {existing.title}")
        self.grammars_shrink(claimed.values(), aliases)

        for alias in aliases:
            self.grammars[alias] = grammar
        LOG(f"Registered {new_title} ({', '.join(aliases)}) as {base.title}", level=2)

    def grammars_shrink(self, losers: Iterable[Grammar], taken: List[str]) -> None:
        """
        Drop `taken` aliases from registered grammars that lose them

        Each remaining alias of a loser is pointed at the shrunk copy, so
        Grammar.aliases always lists exactly the aliases selecting it.
        Built-in grammars are never stored and need no update.
        """
        shrunk: Dict[int, Grammar] = {}
        for loser in losers:
            if id(loser) in shrunk:
                continue
            replacement = loser.without(taken)
            shrunk[id(loser)] = replacement
            for alias in replacement.aliases:
                if self.grammars.get(alias) is loser:
                    self.grammars[alias] = replacement

    def aliases_list(self) -> Dict[str, Grammar]:
        """Aliases registered in this build, sorted by alias"""
        return dict(sorted(self.grammars.items()))

    def lexer_get(self, alias: Optional[str], **options: Any) -> Lexer:
        """
        Get a lexer for a code block language

        Unknown or empty languages fall back to plain text.
        """
        grammar = self.grammar_find(alias or "")
        if grammar is None:
            if alias:
                LOG(f"No grammar for '{alias}', highlighting as plain text", level=2)
            return TextLexer(**options)
        return grammar.lexer_make(**options)

    def highlight(self, code: str, alias: Optional[str], formatter: Formatter) -> str:
        """Highlight `code` with the grammar selected by `alias`"""
        return pygments_highlight(code, self.lexer_get(alias), formatter)
