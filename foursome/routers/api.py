# foursome/routers/api.py

import asyncio
import json
import math
import logging

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from foursome.db import SessionLocal, get_db
from foursome import crud, schemas
from foursome.golf_calc import DAYS
from foursome.live import GroupSession, feed
from foursome.normalize import GroupView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["groups"])

KEEPALIVE_SECONDS = 15


def _get_or_404(db: Session, group_id: str):
    group = crud.find_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def _row(row):
    # older records can carry fractional handicaps
    return schemas.LeaderboardRow(
        **{**row, "handicap": math.floor(row["handicap"]), "adjustment": math.floor(row["adjustment"])}
    )


def leaderboard_payload(view: GroupView, day) -> schemas.Leaderboard:
    return schemas.Leaderboard(
        group_id=view.id,
        day=day,
        course=view.courses[day],
        rows=[_row(row) for row in view.leaderboard(day)],
    )


def snapshot(group_id: str):
    """Both days' leaderboards for one group, as sent over the event stream."""
    db = SessionLocal()
    try:
        group = crud.get_group(db, group_id)
        if not group:
            return None
        view = GroupView.from_group(group)
        return {
            "group_id": view.id,
            "day1_locked": view.day1_locked,
            "leaderboards": {
                day: leaderboard_payload(view, day).model_dump() for day in DAYS
            },
        }
    finally:
        db.close()


def _event(data) -> str:
    return f"data: {json.dumps(data)}\n\n"


@router.get("/{group_id}/leaderboard", response_model=schemas.Leaderboard)
def leaderboard(group_id: str, day: schemas.DayKey = "day1", db: Session = Depends(get_db)):
    view = GroupView.from_group(_get_or_404(db, group_id))
    return leaderboard_payload(view, day)


@router.patch("/{group_id}/scores", response_model=schemas.Leaderboard)
def patch_score(group_id: str, data: schemas.ScorePatch, db: Session = Depends(get_db)):
    group = _get_or_404(db, group_id)
    try:
        crud.set_score(db, group, data.day, data.player, data.hole, data.value)
    except crud.RosterError as e:
        status = 409 if GroupView.from_group(group).is_locked(data.day) else 400
        raise HTTPException(status_code=status, detail=str(e))
    return leaderboard_payload(GroupView.from_group(group), data.day)


@router.get("/{group_id}/events")
async def events(group_id: str, request: Request, db: Session = Depends(get_db)):
    group_id = _get_or_404(db, group_id).id
    loop = asyncio.get_running_loop()
    queue = asyncio.Queue()

    def on_change(changed_id):
        # debounce timers fire on their own thread
        loop.call_soon_threadsafe(queue.put_nowait, changed_id)

    async def stream():
        with GroupSession(feed, group_id, on_change):
            logger.info("Live reader joined group %s (%d open)", group_id, feed.subscriber_count(group_id))
            try:
                yield _event(await run_in_threadpool(snapshot, group_id))
                while not await request.is_disconnected():
                    try:
                        await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                    except asyncio.TimeoutError:
                        yield ": keepalive\n\n"
                        continue
                    data = await run_in_threadpool(snapshot, group_id)
                    if data is None:
                        break
                    yield _event(data)
            finally:
                logger.info("Live reader left group %s", group_id)

    return StreamingResponse(stream(), media_type="text/event-stream")
