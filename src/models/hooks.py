"""
Build lifecycle hook models

Owners, events and priorities accepted by the hook registry.
"""

from enum import Enum
from typing import Dict, FrozenSet


class HookOwner(Enum):
    """Subject a hook callback is attached to"""
    SITE = "site"
    PAGES = "pages"


class HookEvent(Enum):
    """
    Points in the site build where callbacks fire

    Order during Site.process():
        AFTER_INIT -> POST_READ -> PRE_RENDER -> POST_RENDER -> POST_WRITE
    """
    AFTER_INIT = "after_init"
    POST_READ = "post_read"
    PRE_RENDER = "pre_render"
    POST_RENDER = "post_render"
    POST_WRITE = "post_write"


class HookPriority(Enum):
    """Higher values run first; equal priorities keep registration order"""
    LOW = 10
    NORMAL = 20
    HIGH = 30


# Events each owner supports
OWNER_EVENTS: Dict[HookOwner, FrozenSet[HookEvent]] = {
    HookOwner.SITE: frozenset(HookEvent),
    HookOwner.PAGES: frozenset({
        HookEvent.POST_READ,
        HookEvent.PRE_RENDER,
        HookEvent.POST_RENDER,
        HookEvent.POST_WRITE,
    }),
}
