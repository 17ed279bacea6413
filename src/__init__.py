"""
lexalias - Grammar aliases for static site builds

Highlights ```ps fences with TypeScript's grammar under the title "Purescript".
"""

__version__ = "1.0.0"

from .lib import GrammarRegistry, MissingBaseGrammar, Site, hooks_register, LOG, state_connectToLogger

__all__ = ["GrammarRegistry", "MissingBaseGrammar", "Site", "hooks_register", "LOG", "state_connectToLogger", "__version__"]
