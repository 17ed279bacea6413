"""
Models package for lexalias

Contains data structures and type definitions for the build pipeline.
"""

from .state import ProgramState, pipeline
from .grammar import AliasSpec, CollisionPolicy
from .hooks import HookOwner, HookEvent, HookPriority, OWNER_EVENTS

__all__ = [
    "ProgramState",
    "pipeline",
    "AliasSpec",
    "CollisionPolicy",
    "HookOwner",
    "HookEvent",
    "HookPriority",
    "OWNER_EVENTS",
]
