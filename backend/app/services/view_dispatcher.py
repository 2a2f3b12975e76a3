from dataclasses import dataclass, field
import logging

from fastapi.responses import JSONResponse, RedirectResponse

from .page_registry import NOT_FOUND_PAGE, Page, PageRegistry, default_registry
from .route_authorization import RedirectTo, RenderPage, RouteDecision, ShowLoading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewAction:
    kind: str  # loading | navigate | render
    path: str
    target: str | None = None
    page: Page | None = None
    params: dict = field(default_factory=dict)

    @property
    def not_found(self) -> bool:
        return self.kind == "render" and self.page is NOT_FOUND_PAGE

    def to_public(self) -> dict:
        payload = {"action": self.kind, "path": self.path}
        if self.target is not None:
            payload["redirect"] = self.target
        if self.page is not None:
            payload["page"] = {
                "name": self.page.name,
                "title": self.page.title,
                "pattern": self.page.pattern,
                "params": dict(self.params),
            }
        return payload


class ViewDispatcher:
    """Turns a route decision into something to show."""

    def __init__(self, registry: PageRegistry | None = None):
        self.registry = registry or default_registry()

    def dispatch(self, decision: RouteDecision, path: str) -> ViewAction:
        if isinstance(decision, ShowLoading):
            return ViewAction(kind="loading", path=path)
        if isinstance(decision, RedirectTo):
            return ViewAction(kind="navigate", path=path, target=decision.path)
        if isinstance(decision, RenderPage):
            found = self.registry.resolve(path)
            return ViewAction(kind="render", path=found.path, page=found.page, params=found.params)
        # Unreachable for well-typed input; render nothing rather than raise.
        logger.error("Unknown route decision %r for %s", decision, path)
        return ViewAction(kind="render", path=path, page=NOT_FOUND_PAGE)


def to_response(action: ViewAction, *, prefer_json: bool = False):
    """HTTP rendition of a view action."""
    if action.kind == "loading":
        return JSONResponse(status_code=202, content=action.to_public())
    if action.kind == "navigate":
        if prefer_json:
            return JSONResponse(status_code=200, content=action.to_public())
        return RedirectResponse(url=f"/pages{action.target}", status_code=307)
    status_code = 404 if action.not_found else 200
    return JSONResponse(status_code=status_code, content=action.to_public())
