"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use LEXALIAS_ prefix (e.g., LEXALIAS_PYGMENTS_STYLE=friendly).

Settings can also be loaded from a .env file in the project root. A site's
own _config.yml takes precedence over these defaults for alias declarations.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.grammar import AliasSpec, CollisionPolicy


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use LEXALIAS_ prefix.

    Examples:
        LEXALIAS_BASE_GRAMMAR=javascript
        LEXALIAS_ALIASES='["ps", "psc"]'
        LEXALIAS_COLLISION_POLICY=overwrite
    """

    model_config = SettingsConfigDict(
        env_prefix="LEXALIAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Default alias registration
    base_grammar: str = Field(
        default="typescript",
        description="Existing grammar whose tokenization the alias reuses",
    )

    alias_title: str = Field(
        default="Purescript",
        description="Title reported by the aliased grammar",
    )

    aliases: List[str] = Field(
        default_factory=lambda: ["ps"],
        description="Fenced code block languages that select the aliased grammar",
    )

    collision_policy: CollisionPolicy = Field(
        default=CollisionPolicy.ERROR,
        description="What to do when an alias is already claimed by another grammar",
    )

    # Rendering configuration
    pygments_style: str = Field(
        default="monokai",
        description="Pygments style used for highlight.css",
    )

    markdown_extensions: List[str] = Field(
        default_factory=lambda: [".md", ".markdown"],
        description="File suffixes read as pages",
    )

    config_filename: str = Field(
        default="_config.yml",
        description="Site configuration file looked up in the source directory",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during the build",
    )

    def aliasSpecs_default(self) -> List[AliasSpec]:
        """
        Build the alias registrations used when a site declares none.

        Example:
            >>> AppSettings().aliasSpecs_default()
            [AliasSpec(base='typescript', title='Purescript', aliases=['ps'])]
        """
        return [AliasSpec(base=self.base_grammar, title=self.alias_title, aliases=list(self.aliases))]


# Singleton instance - import this in your code
appsettings = AppSettings()
