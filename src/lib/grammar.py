"""
Grammar values and the delegating Pygments lexer

A Grammar is a title plus a set of aliases plus a reference to an existing
Pygments lexer class that owns the tokenization rules. Aliasing a grammar
creates a new Grammar pointing at the same lexer class; no rules are
copied or overridden, so the token stream is identical to the base.

Example:
    >>> from pygments.lexers.javascript import TypeScriptLexer
    >>> ts = Grammar.from_lexerClass(TypeScriptLexer)
    >>> ps = ts.derive(title="Purescript", aliases={"ps"}, base="typescript")
    >>> ps.tokens_get("let a = 1;") == ts.tokens_get("let a = 1;")
    True
"""

from dataclasses import dataclass, replace
from typing import Any, FrozenSet, Iterable, Iterator, List, Tuple, Type

from pygments.lexer import Lexer
from pygments.token import _TokenType


Token = Tuple[_TokenType, str]


class GrammarLexer(Lexer):
    """
    Pygments lexer reporting a grammar's title and aliases

    Tokenization is forwarded to an instance of the grammar's base lexer
    class built with the same options, so stripping, tab expansion and
    filters behave exactly as they would on the base lexer.
    """

    def __init__(self, grammar: "Grammar", **options: Any) -> None:
        super().__init__(**options)
        self.grammar = grammar
        self.name = grammar.title
        self.aliases = sorted(grammar.aliases)
        self.delegate: Lexer = grammar.lexer_class(**options)

    def get_tokens_unprocessed(self, text: str) -> Iterator[Tuple[int, _TokenType, str]]:
        return self.delegate.get_tokens_unprocessed(text)

    def __repr__(self) -> str:
        return f"<GrammarLexer {self.name!r} -> {self.grammar.lexer_class.__name__}>"


@dataclass(frozen=True)
class Grammar:
    """
    Named grammar whose rules live in a Pygments lexer class

    Attributes:
        title: Display title (e.g. "Purescript")
        aliases: Lower-cased selector strings (e.g. {"ps"})
        lexer_class: Pygments lexer class providing the tokenization rules
        base: Alias this grammar was derived from, "" for built-in grammars
    """
    title: str
    aliases: FrozenSet[str]
    lexer_class: Type[Lexer]
    base: str = ""

    @classmethod
    def from_lexerClass(cls, lexer_class: Type[Lexer]) -> "Grammar":
        """Wrap a built-in Pygments lexer class as a Grammar"""
        return cls(
            title=lexer_class.name,
            aliases=frozenset(alias.lower() for alias in lexer_class.aliases),
            lexer_class=lexer_class,
        )

    def derive(self, title: str, aliases: Iterable[str], base: str) -> "Grammar":
        """
        Create a grammar that tokenizes like this one under a new title

        Args:
            title: Title reported by the new grammar
            aliases: Selector strings for the new grammar
            base: Alias the caller used to select this grammar

        Returns:
            New Grammar sharing this grammar's lexer class
        """
        return Grammar(
            title=title,
            aliases=frozenset(alias.lower() for alias in aliases),
            lexer_class=self.lexer_class,
            base=base,
        )

    def lexer_make(self, **options: Any) -> GrammarLexer:
        """Instantiate a lexer for this grammar, passing Pygments lexer options"""
        return GrammarLexer(self, **options)

    def tokens_get(self, text: str, **options: Any) -> List[Token]:
        """Tokenize `text` into a list of (tokentype, value) pairs"""
        return list(self.lexer_make(**options).get_tokens(text))

    def tokenizes_like(self, other: "Grammar") -> bool:
        """True when both grammars delegate to the same lexer class"""
        return self.lexer_class is other.lexer_class

    def same_as(self, other: "Grammar") -> bool:
        """True when `other` is an identical registration (title and rules)"""
        return self.title == other.title and self.tokenizes_like(other)

    def without(self, aliases: Iterable[str]) -> "Grammar":
        """Copy of this grammar that no longer answers to `aliases`"""
        return replace(self, aliases=self.aliases - frozenset(aliases))
