"""Manual trigger for the today-fixtures sync."""

from fastapi import APIRouter, Depends

from matchday.routes.deps import get_scheduler
from matchday.scheduler import FixtureSyncScheduler
from matchday.security import verify_admin_key

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/today")
async def trigger_today_sync(
    scheduler: FixtureSyncScheduler = Depends(get_scheduler),
    _: bool = Depends(verify_admin_key),
):
    """
    Run one sync cycle now, outside the schedule.

    Returns the cycle summary. Failures are reported in the ``error`` field of
    the summary rather than as an HTTP error, same as scheduled runs.
    """
    return await scheduler.run_once()
