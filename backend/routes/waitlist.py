from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from core.errors import DuplicateEmailError, StoreError, WaitlistValidationError
from core.rate_limit import api_limit
from schemas.waitlist import WaitlistCreatedResponse, WaitlistRequest
from services.notifier import Notifier, get_notifier
from services.waitlist import send_welcome_in_background, submit_waitlist_entry
from services.waitlist_store import WaitlistStore, get_store

router = APIRouter(prefix="/api", tags=["waitlist"])


@router.post("/waitlist", response_model=WaitlistCreatedResponse, status_code=status.HTTP_201_CREATED)
@api_limit
def join_waitlist(
    request: Request,
    payload: WaitlistRequest,
    background_tasks: BackgroundTasks,
    store: WaitlistStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> WaitlistCreatedResponse:
    try:
        entry = submit_waitlist_entry(store, payload.model_dump())
    except (WaitlistValidationError, DuplicateEmailError) as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail="Failed to add to waitlist") from exc

    # Runs after the response is sent; the row is already committed.
    background_tasks.add_task(send_welcome_in_background, notifier, entry.email, entry.role)
    return WaitlistCreatedResponse(message="Successfully added to waitlist", id=entry.id)
