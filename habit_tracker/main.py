"""Main FastAPI application."""

import logging
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from .config import settings
from .dashboard.renderer import DashboardRenderer
from .dashboard.service import HabitService
from .errors import HabitTrackerError, ValidationError
from .store.base import RecordStore
from .store.database import HabitDatabase
from .store.models import (
    CheckInRequest,
    DashboardMove,
    DashboardSettingsUpdate,
    DashboardToggle,
    EntryUpsert,
    GoalCreate,
    GoalUpdate,
    NotesUpdate,
    TrackableCreate,
    TrackableUpdate,
)
from .store.selector import Session, select_store

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Habit Tracker",
    description="Trackables, daily check-ins, goals and streak analytics",
    version="1.0.0",
)

# Initialize components
db = HabitDatabase(settings.database_path)
renderer = DashboardRenderer(settings.image_width, settings.image_height)


def get_database() -> RecordStore:
    """Live record store."""
    return db


def get_renderer() -> DashboardRenderer:
    """Image renderer."""
    return renderer


def local_today(tz_name: str, now: Optional[datetime] = None) -> date:
    """
    Calendar date in the named IANA zone.

    Args:
        tz_name: Zone name such as "Pacific/Auckland"
        now: Aware instant to convert, defaults to the current time

    Raises:
        ValidationError: If the zone is unknown
    """
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {tz_name}") from e

    now = now or datetime.now(timezone.utc)
    return now.astimezone(zone).date()


def get_today(
    tz_name: Optional[str] = Header(None, alias="X-Timezone"),
) -> date:
    """The user's local calendar date, read once per request."""
    return local_today(tz_name or settings.timezone)


def get_session(
    owner_id: Optional[str] = Header(None, alias="X-Owner-Id"),
    email: Optional[str] = Header(None, alias="X-Owner-Email"),
) -> Session:
    """Identify the account a request acts for."""
    if not owner_id:
        raise HTTPException(status_code=401, detail="Missing X-Owner-Id header")
    return Session(owner_id=owner_id, email=email)


def get_service(
    session: Session = Depends(get_session),
    live: RecordStore = Depends(get_database),
    today: date = Depends(get_today),
) -> HabitService:
    """Habit service bound to the session's store."""
    return HabitService(select_store(session, settings, live, today))


@app.exception_handler(HabitTrackerError)
async def habit_error_handler(request: Request, exc: HabitTrackerError):
    """Report store and validation errors to the caller."""
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "detail": exc.message},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Habit Tracker",
        "version": "1.0.0",
        "endpoints": {
            "trackables": "/api/trackables",
            "dashboard": "/api/dashboard",
            "calendar": "/api/calendar",
            "status": "/status",
        },
    }


@app.get("/status")
async def status():
    """Server status endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "timezone": settings.timezone,
    }


# Trackables


@app.get("/api/trackables")
def list_trackables(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """List trackables in creation order."""
    return service.store.list_trackables(session.owner_id)


@app.post("/api/trackables", status_code=201)
def create_trackable(
    data: TrackableCreate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Create a trackable."""
    return service.store.create_trackable(session.owner_id, data)


@app.get("/api/trackables/{trackable_id}")
def get_trackable(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Get one trackable."""
    return service.store.get_trackable(session.owner_id, trackable_id)


@app.patch("/api/trackables/{trackable_id}")
def update_trackable(
    trackable_id: str,
    data: TrackableUpdate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Update a trackable's name, description, color or icon."""
    return service.store.update_trackable(session.owner_id, trackable_id, data)


@app.delete("/api/trackables/{trackable_id}")
def delete_trackable(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Delete a trackable with its entries and goals."""
    service.delete_trackable(session.owner_id, trackable_id)
    return {"status": "success", "message": "Trackable deleted"}


# Entries


@app.get("/api/entries")
def list_entries(
    trackable_id: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """List entries, newest first."""
    return service.store.list_entries(session.owner_id, trackable_id, start, end)


@app.put("/api/trackables/{trackable_id}/entries/{day}")
def upsert_entry(
    trackable_id: str,
    day: date,
    data: EntryUpsert,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Check in a trackable for a date, replacing any existing entry."""
    return service.check_in(
        session.owner_id, trackable_id, day, today, data.completed, data.notes
    )


@app.delete("/api/trackables/{trackable_id}/entries/{day}")
def delete_entry(
    trackable_id: str,
    day: date,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Remove the entry for a date."""
    service.uncheck(session.owner_id, trackable_id, day)
    return {"status": "success", "message": "Entry deleted"}


@app.post("/api/trackables/{trackable_id}/entries/{day}/toggle")
def toggle_entry(
    trackable_id: str,
    day: date,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Check a date if unchecked, uncheck it otherwise."""
    entry = service.toggle_entry(session.owner_id, trackable_id, day, today)
    return {"completed": entry is not None, "entry": entry}


@app.put("/api/trackables/{trackable_id}/entries/{day}/notes")
def update_notes(
    trackable_id: str,
    day: date,
    data: NotesUpdate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Edit the notes of a date's entry."""
    return service.update_notes(session.owner_id, trackable_id, day, today, data.notes)


@app.post("/api/check-in")
def check_in(
    data: CheckInRequest,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Check in several trackables for today."""
    entries = service.submit_check_in(session.owner_id, data.trackable_ids, today)
    return {"status": "success", "date": today, "entries": entries}


# Goals


@app.get("/api/trackables/{trackable_id}/goals")
def list_goals(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """List a trackable's goals, newest first."""
    service.store.get_trackable(session.owner_id, trackable_id)
    return service.store.list_goals(session.owner_id, trackable_id)


@app.post("/api/trackables/{trackable_id}/goals", status_code=201)
def create_goal(
    trackable_id: str,
    data: GoalCreate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Create a goal for a trackable."""
    return service.store.create_goal(session.owner_id, trackable_id, data)


@app.patch("/api/goals/{goal_id}")
def update_goal(
    goal_id: str,
    data: GoalUpdate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Change a goal's target or period."""
    return service.store.update_goal(session.owner_id, goal_id, data)


@app.delete("/api/goals/{goal_id}")
def delete_goal(
    goal_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Delete a goal."""
    service.store.delete_goal(session.owner_id, goal_id)
    return {"status": "success", "message": "Goal deleted"}


# Analytics


@app.get("/api/trackables/{trackable_id}/stats")
def trackable_stats(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Current streak, best streak, 30-day rate and total completions."""
    return service.trackable_stats(session.owner_id, trackable_id, today)


@app.get("/api/trackables/{trackable_id}/goal-progress")
def goal_progress(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Active goal progress with its trend series."""
    report = service.trackable_goal_report(session.owner_id, trackable_id, today)
    if report is None:
        return {"goal": None, "progress": None, "series": []}
    return report


@app.get("/api/trackables/{trackable_id}/calendar")
def trackable_calendar(
    trackable_id: str,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Year-to-date calendar for one trackable."""
    return service.trackable_calendar(session.owner_id, trackable_id, today)


@app.get("/api/calendar")
def overview_calendar(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Year-to-date calendar across all trackables."""
    return service.overview_calendar(session.owner_id, today)


# Dashboard


@app.get("/api/dashboard")
def dashboard(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    today: date = Depends(get_today),
):
    """Selected trackables in display order with their stats."""
    return {
        "date": today,
        "read_only": service.store.read_only,
        "cards": service.dashboard(session.owner_id, today),
    }


@app.get("/api/dashboard/settings")
def get_dashboard_settings(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Saved dashboard customization, or the default."""
    return service.dashboard_settings(session.owner_id)


@app.put("/api/dashboard/settings")
def save_dashboard_settings(
    data: DashboardSettingsUpdate,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Save which trackables are shown and their order."""
    return service.save_dashboard_settings(
        session.owner_id, data.selected_trackables, data.trackable_order
    )


@app.post("/api/dashboard/settings/toggle")
def toggle_dashboard_trackable(
    data: DashboardToggle,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Show or hide one trackable on the dashboard."""
    return service.toggle_dashboard_trackable(session.owner_id, data.trackable_id, data.checked)


@app.post("/api/dashboard/settings/move")
def move_dashboard_trackable(
    data: DashboardMove,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Move a trackable to where another one sits in the order."""
    return service.move_dashboard_trackable(session.owner_id, data.dragged_id, data.target_id)


@app.post("/api/dashboard/settings/reset")
def reset_dashboard_settings(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
):
    """Show every trackable again, in creation order."""
    return service.reset_dashboard_settings(session.owner_id)


@app.get("/api/dashboard.png")
def dashboard_image(
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    renderer: DashboardRenderer = Depends(get_renderer),
    today: date = Depends(get_today),
):
    """Dashboard rendered as an image."""
    cards = service.dashboard(session.owner_id, today)
    return Response(content=renderer.render_dashboard(cards, today), media_type="image/png")


@app.get("/api/calendar.png")
def calendar_image(
    trackable_id: Optional[str] = None,
    session: Session = Depends(get_session),
    service: HabitService = Depends(get_service),
    renderer: DashboardRenderer = Depends(get_renderer),
    today: date = Depends(get_today),
):
    """Activity calendar rendered as an image."""
    if trackable_id:
        grid = service.trackable_calendar(session.owner_id, trackable_id, today)
    else:
        grid = service.overview_calendar(session.owner_id, today)
    return Response(content=renderer.render_calendar(grid), media_type="image/png")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
