from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from core.config import get_settings
from core.errors import StoreError
from core.rate_limit import api_limit
from schemas.waitlist import LaunchNotificationResponse, WaitlistCountResponse, WaitlistEntryRead
from services.notifier import Notifier, get_notifier
from services.waitlist import build_dashboard_context, notify_launch
from services.waitlist_store import WaitlistStore, get_store
from utils.templates import render_admin_dashboard

# Admin routes are unauthenticated; deploy behind a trusted network.
api_router = APIRouter(prefix="/api/admin", tags=["admin"])
page_router = APIRouter(prefix="/admin", tags=["admin"])


@api_router.get("/waitlist-count", response_model=WaitlistCountResponse)
@api_limit
def waitlist_count(request: Request, store: WaitlistStore = Depends(get_store)) -> WaitlistCountResponse:
    try:
        return WaitlistCountResponse(count=store.count())
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=exc.message) from exc


@api_router.get("/waitlist", response_model=list[WaitlistEntryRead])
@api_limit
def waitlist_entries(request: Request, store: WaitlistStore = Depends(get_store)) -> list[WaitlistEntryRead]:
    try:
        entries = store.list_entries()
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=exc.message) from exc
    return [WaitlistEntryRead.model_validate(entry) for entry in entries]


@api_router.post("/notify-launch", response_model=LaunchNotificationResponse)
@api_limit
def notify_launch_members(
    request: Request,
    store: WaitlistStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> LaunchNotificationResponse:
    try:
        report = notify_launch(store, notifier)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=exc.message) from exc
    return LaunchNotificationResponse(
        message="Launch notification process completed",
        success=report.success,
        errors=report.errors,
        total=report.total,
    )


@page_router.get("", response_class=HTMLResponse)
def admin_dashboard(store: WaitlistStore = Depends(get_store)) -> Response:
    settings = get_settings()
    try:
        entries = store.list_entries()
    except StoreError:
        return PlainTextResponse("Database error", status_code=500)
    context = build_dashboard_context(entries, settings.brand_name, settings.admin_timezone)
    return HTMLResponse(render_admin_dashboard(context))


@page_router.post("/clear")
def clear_waitlist(store: WaitlistStore = Depends(get_store)) -> Response:
    try:
        store.clear()
    except StoreError:
        return PlainTextResponse("Error clearing database", status_code=500)
    return RedirectResponse(url="/admin", status_code=status.HTTP_302_FOUND)
