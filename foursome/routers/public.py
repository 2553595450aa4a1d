# foursome/routers/public.py

import logging
import re
from urllib.parse import urlencode

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from foursome.db import get_db
from foursome.rendering import templates
from foursome import crud
from foursome.distance import format_feet_inches
from foursome.golf_calc import DAYS, HOLE_COUNT
from foursome.normalize import GroupView

logger = logging.getLogger(__name__)

router = APIRouter()


def _day(day):
    return day if day in DAYS else "day1"


def _back(group_id, day, error=None):
    params = {"day": _day(day)}
    if error:
        params["error"] = error
    return RedirectResponse(f"/group/{group_id}?{urlencode(params)}", status_code=303)


# -----------------------------------------------------------------------------------------
# ---------------------------------------- PIN --------------------------------------------
# -----------------------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return templates.TemplateResponse(request, "home.html", {"request": request})


@router.post("/")
def home_enter(request: Request, pin: str = Form(""), db: Session = Depends(get_db)):
    normalized = re.sub(r"\s+", "", pin)
    if len(normalized) < 4:
        return templates.TemplateResponse(
            request,
            "home.html",
            {"request": request, "error": "Enter a valid PIN.", "pin": pin},
            status_code=400,
        )

    group = crud.get_group_by_pin(db, normalized)
    if not group:
        return templates.TemplateResponse(
            request,
            "home.html",
            {"request": request, "error": "Invalid PIN.", "pin": pin},
            status_code=404,
        )

    return RedirectResponse(f"/group/{group.id}", status_code=303)


# -----------------------------------------------------------------------------------------
# -------------------------------------- SCORING ------------------------------------------
# -----------------------------------------------------------------------------------------

@router.get("/group/{group_id}", response_class=HTMLResponse)
def group_page(
    group_id: str,
    request: Request,
    day: str = "day1",
    error: str | None = None,
    db: Session = Depends(get_db),
):
    day = _day(day)
    group = crud.get_group(db, group_id)
    if not group:
        by_pin = crud.get_group_by_pin(db, group_id)
        if not by_pin:
            return HTMLResponse("No group found for that PIN.", status_code=404)
        return RedirectResponse(f"/group/{by_pin.id}", status_code=303)

    view = GroupView.from_group(group)
    leaderboards = {d: view.leaderboard(d) for d in DAYS}
    totals = {row["player"]: row for row in leaderboards[day]}

    return templates.TemplateResponse(
        request,
        "group.html",
        {
            "request": request,
            "view": view,
            "day": day,
            "days": DAYS,
            "holes": range(1, HOLE_COUNT + 1),
            "players": view.players[day],
            "card": view.card(day),
            "totals": totals,
            "net_to_par": view.net_to_par(day),
            "leaderboards": leaderboards,
            "par3_holes": view.par3_holes(day),
            "contest": view.contests[day],
            "locked": view.is_locked(day),
            "error": error,
        }
    )


@router.post("/group/{group_id}/score")
def score_save(
    group_id: str,
    day: str = Form("day1"),
    player: str = Form(...),
    hole: int = Form(...),
    value: str = Form(""),
    db: Session = Depends(get_db),
):
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    try:
        crud.set_score(db, group, _day(day), player, hole, value)
    except crud.RosterError as e:
        return _back(group_id, day, str(e))
    return _back(group_id, day)


@router.post("/group/{group_id}/card")
async def card_save(group_id: str, request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    day = _day(form.get("day"))
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    # inputs are g_<player index>_<hole>
    players = GroupView.from_group(group).players[day]
    table = {}
    for i, p in enumerate(players):
        table[p] = [form.get(f"g_{i}_{h}") for h in range(1, HOLE_COUNT + 1)]

    try:
        crud.save_card(db, group, day, table)
    except crud.RosterError as e:
        return _back(group_id, day, str(e))
    return _back(group_id, day)


# -----------------------------------------------------------------------------------------
# -------------------------------------- CONTESTS -----------------------------------------
# -----------------------------------------------------------------------------------------

@router.post("/group/{group_id}/contest/closest/{hole}")
def closest_to_pin_save(
    group_id: str,
    hole: int,
    day: str = Form("day1"),
    winner: str = Form(""),
    feet: str = Form(""),
    inches: str = Form(""),
    db: Session = Depends(get_db),
):
    day = _day(day)
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    note = format_feet_inches(feet, inches)
    try:
        crud.set_closest_to_pin(db, group, day, hole, winner, note)
        crud.propagate_closest_to_pin(db, group, day, hole, winner, note)
    except crud.RosterError as e:
        logger.warning("Closest-to-Pin hole %s for %s: %s", hole, group_id, e)
        return _back(group_id, day, str(e))
    return _back(group_id, day)


@router.post("/group/{group_id}/contest/longest-drive")
def longest_drive_save(
    group_id: str,
    day: str = Form("day1"),
    hole: str = Form(""),
    winner: str = Form(""),
    note: str = Form(""),
    db: Session = Depends(get_db),
):
    day = _day(day)
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    try:
        crud.set_longest_drive(db, group, day, hole, winner, note)
        crud.propagate_longest_drive(db, group, day, winner)
    except crud.RosterError as e:
        logger.warning("Longest Drive for %s: %s", group_id, e)
        return _back(group_id, day, str(e))
    return _back(group_id, day)


@router.post("/group/{group_id}/contest/legacy-closest")
def legacy_closest_save(
    group_id: str,
    day: str = Form("day1"),
    hole: str = Form(""),
    winner: str = Form(""),
    note: str = Form(""),
    db: Session = Depends(get_db),
):
    day = _day(day)
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    try:
        crud.set_legacy_closest_to_pin(db, group, day, hole, winner, note)
    except crud.RosterError as e:
        return _back(group_id, day, str(e))
    return _back(group_id, day)
