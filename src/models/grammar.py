"""
Grammar alias specification models

Declarative descriptions of the lexer aliases a site build registers,
and the policy applied when an alias is already claimed.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List


class CollisionPolicy(Enum):
    """
    What register_alias does when an alias is already claimed

    A re-registration that is identical (same title, same base lexer)
    is always accepted as a no-op, whatever the policy.
    """
    ERROR = "error"          # raise AliasCollision, register nothing
    OVERWRITE = "overwrite"  # replace the previous entry, log a warning


@dataclass
class AliasSpec:
    """
    One alias registration: "grammar `base`, titled `title`, under `aliases`"

    Attributes:
        base: Alias or name of an existing grammar (e.g. "typescript")
        title: Display title reported by the new grammar (e.g. "Purescript")
        aliases: Selector strings for fenced code blocks (e.g. ["ps"])

    Example:
        AliasSpec(base="typescript", title="Purescript", aliases=["ps"])
    """
    base: str
    title: str
    aliases: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AliasSpec":
        """
        Build an AliasSpec from a `_config.yml` mapping.

        A single string for `aliases` is accepted as a one-element list.

        Raises:
            ValueError: if `base` or `title` is missing
        """
        if not isinstance(data, dict):
            raise ValueError(f"alias entry must be a mapping, got {type(data).__name__}")

        base = str(data.get("base", "")).strip()
        title = str(data.get("title", "")).strip()
        if not base or not title:
            raise ValueError(f"alias entry needs both 'base' and 'title': {data!r}")

        aliases = data.get("aliases", [])
        if isinstance(aliases, str):
            aliases = [aliases]
        return cls(base=base, title=title, aliases=[str(a) for a in aliases])
