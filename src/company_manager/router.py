"""
Path-based view routing.

Routes:
    /list         list view
    /new          form view, create mode
    /edit/<id>    form view, edit mode
    /delete/<id>  delete confirmation

Anything else, including an empty path, resolves to /list.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

LIST = "list"
NEW = "new"
EDIT = "edit"
DELETE = "delete"

# Routes that take an id segment
PARAM_ROUTES = {EDIT, DELETE}
PLAIN_ROUTES = {LIST, NEW}


@dataclass
class Route:
    key: str
    record_id: Optional[str] = None
    fallback: bool = False

    @property
    def path(self) -> str:
        if self.record_id is not None:
            return f"/{self.key}/{self.record_id}"
        return f"/{self.key}"


def resolve_route(path: Optional[str]) -> Route:
    """
    Map a path such as ``/edit/ab12cd34`` (or ``#/edit/ab12cd34``) to a Route.

    The id segment is matched verbatim. Unknown paths give the list route
    with ``fallback`` set.
    """
    parts = [p for p in (path or "").lstrip("#").split("/") if p]

    if len(parts) == 2 and parts[0] in PARAM_ROUTES:
        return Route(parts[0], parts[1])
    if len(parts) == 1 and parts[0] in PLAIN_ROUTES:
        return Route(parts[0])

    logger.debug(f"Unrecognized route {path!r}; falling back to /list")
    return Route(LIST, fallback=True)


class Router:
    """Dispatches a path to the handler registered for its route key."""

    def __init__(self) -> None:
        self.handlers: Dict[str, Callable[[Route], Any]] = {}

    def add(self, key: str, handler: Callable[[Route], Any]) -> None:
        self.handlers[key] = handler

    def dispatch(self, path: Optional[str]) -> Any:
        route = resolve_route(path)
        handler = self.handlers.get(route.key)
        if handler is None:
            route = Route(LIST, fallback=True)
            handler = self.handlers[LIST]
        return handler(route)
