from fastapi import APIRouter, Depends, Query, Request
import logging

from ..services.auth_adapters import IdentityProviderAdapter, SessionAdapter
from ..services.route_authorization import RedirectTo
from ..services.route_guard import evaluate, follow_redirects
from ..services.view_dispatcher import ViewAction, ViewDispatcher, to_response
from ..utils.dependencies import get_identity_adapter, get_session_adapter
from ..utils.error_handlers import create_error_response, get_error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["Pages"])

_dispatcher = ViewDispatcher()


def get_dispatcher() -> ViewDispatcher:
    return _dispatcher


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("Accept") or ""
    return "application/json" in accept and "text/html" not in accept


def _page_response(
    path: str,
    request: Request,
    session: SessionAdapter,
    identity: IdentityProviderAdapter,
    dispatcher: ViewDispatcher,
):
    # Redirects are resolved here so the client only ever gets one hop.
    chain = follow_redirects(path, session, identity, dispatcher)
    if chain.looped:
        return create_error_response(
            409,
            get_error_message("redirect_loop"),
            {"chain": [*chain.paths, chain.action.target]},
        )
    if len(chain.paths) > 1:
        logger.info("Redirecting %s -> %s", chain.paths[0], chain.final_path)
        action = ViewAction(kind="navigate", path=chain.paths[0], target=chain.final_path)
        return to_response(action, prefer_json=_wants_json(request))
    return to_response(chain.action, prefer_json=_wants_json(request))


@router.get("/decision")
def route_decision(
    path: str = Query("/"),
    session: SessionAdapter = Depends(get_session_adapter),
    identity: IdentityProviderAdapter = Depends(get_identity_adapter),
    dispatcher: ViewDispatcher = Depends(get_dispatcher),
):
    """Raw authorization decision for `path`, without following redirects."""
    decision, action = evaluate(path, session, identity, dispatcher)
    payload = {"path": action.path, "decision": decision.kind}
    if isinstance(decision, RedirectTo):
        payload["redirect"] = decision.path
    if action.page is not None:
        payload["page"] = action.page.name
    return payload


@router.get("/")
def root_page(
    request: Request,
    session: SessionAdapter = Depends(get_session_adapter),
    identity: IdentityProviderAdapter = Depends(get_identity_adapter),
    dispatcher: ViewDispatcher = Depends(get_dispatcher),
):
    return _page_response("/", request, session, identity, dispatcher)


@router.get("/{page_path:path}")
def page(
    page_path: str,
    request: Request,
    session: SessionAdapter = Depends(get_session_adapter),
    identity: IdentityProviderAdapter = Depends(get_identity_adapter),
    dispatcher: ViewDispatcher = Depends(get_dispatcher),
):
    return _page_response(f"/{page_path}", request, session, identity, dispatcher)
