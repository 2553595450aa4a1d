# foursome/routers/admin.py

from urllib.parse import urlencode

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from foursome.db import get_db
from foursome.rendering import templates
from foursome import crud, schemas
from foursome.golf_calc import DAYS
from foursome.normalize import (
    DEFAULT_TEE,
    TEES,
    GroupView,
    foursome_number,
    parse_int_draft,
    parse_players_draft,
)

router = APIRouter(prefix="/admin")


def _back(group_id, error=None, roster_day="day1"):
    params = {"roster_day": roster_day if roster_day in DAYS else "day1"}
    if error:
        params["error"] = error
    return RedirectResponse(f"/admin/group/{group_id}?{urlencode(params)}", status_code=303)


def _tee(raw, day):
    return raw if raw in TEES else DEFAULT_TEE[day]


def _settings(handicap, day2_adj, tee_day1, tee_day2, charity, tree):
    return dict(
        handicap=parse_int_draft(handicap),
        day2_adjustment=parse_int_draft(day2_adj),
        tee_day1=_tee(tee_day1, "day1"),
        tee_day2=_tee(tee_day2, "day2"),
        charity=parse_int_draft(charity),
        tree=parse_int_draft(tree),
    )


# =================================================================================
# ============================== ADMIN: GROUP PANEL ===============================
# =================================================================================

@router.get("", response_class=HTMLResponse)
def admin_index(request: Request, error: str | None = None, db: Session = Depends(get_db)):
    views = [GroupView.from_group(g) for g in crud.get_groups(db)]
    return templates.TemplateResponse(
        request,
        "admin_index.html",
        {"request": request, "views": views, "error": error}
    )


@router.get("/group/{group_id}", response_class=HTMLResponse)
def group_admin(
    group_id: str,
    request: Request,
    roster_day: str = "day1",
    error: str | None = None,
    db: Session = Depends(get_db),
):
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    roster_day = roster_day if roster_day in DAYS else "day1"
    view = GroupView.from_group(group)

    # every foursome, for the roster table and the move-to selector
    all_views = [GroupView.from_group(g) for g in crud.get_groups(db)]
    foursomes = sorted(
        [(n, v) for v in all_views if (n := foursome_number(v.title)) is not None],
        key=lambda x: x[0],
    )

    drafts = {
        f"{day}_{kind}": ",".join(str(x) for x in (table[day] or []))
        for kind, table in (("pars", view.pars), ("hcps", view.hcps))
        for day in DAYS
    }

    return templates.TemplateResponse(
        request,
        "group_admin.html",
        {
            "request": request,
            "view": view,
            "all_views": all_views,
            "foursomes": foursomes,
            "roster_day": roster_day,
            "days": DAYS,
            "tees": TEES,
            "drafts": drafts,
            "error": error,
        }
    )


@router.post("/group/{group_id}/lock")
def group_lock(group_id: str, locked: str = Form("1"), db: Session = Depends(get_db)):
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    try:
        crud.set_day1_locked(db, group, locked in ("1", "true", "on"))
    except crud.RosterError as e:
        return _back(group_id, str(e))
    return _back(group_id)


@router.post("/group/{group_id}/scorecards")
def group_scorecards(
    group_id: str,
    day1_pars: str = Form(""),
    day2_pars: str = Form(""),
    day1_hcps: str = Form(""),
    day2_hcps: str = Form(""),
    db: Session = Depends(get_db),
):
    group = crud.get_group(db, group_id)
    if not group:
        return HTMLResponse("Group not found.", status_code=404)

    try:
        crud.save_scorecards(db, group, day1_pars, day2_pars, day1_hcps, day2_hcps)
    except crud.RosterError as e:
        return _back(group_id, str(e))
    return _back(group_id)


# ------------------------------------------------------------------------------------------
# -------------------------------------- ADMIN: ROSTER -------------------------------------
# ------------------------------------------------------------------------------------------

@router.post("/group/{group_id}/players/add")
def player_add(
    group_id: str,
    name: str = Form(""),
    foursome: str = Form(""),
    handicap: str = Form("0"),
    day2_adj: str = Form("0"),
    tee_day1: str = Form("combo"),
    tee_day2: str = Form("stampede"),
    charity: str = Form("0"),
    tree: str = Form("0"),
    db: Session = Depends(get_db),
):
    data = schemas.PlayerAdd(
        name=name,
        foursome=parse_int_draft(foursome),
        **_settings(handicap, day2_adj, tee_day1, tee_day2, charity, tree),
    )
    try:
        crud.add_player(db, crud.get_groups(db), data)
    except crud.RosterError as e:
        return _back(group_id, str(e))
    return _back(group_id)


@router.post("/group/{group_id}/players/edit")
def player_edit(
    group_id: str,
    target_group_id: str = Form(...),
    player: str = Form(...),
    day: str = Form("day1"),
    name: str = Form(""),
    move_to: str = Form(""),
    handicap: str = Form("0"),
    day2_adj: str = Form("0"),
    tee_day1: str = Form("combo"),
    tee_day2: str = Form("stampede"),
    charity: str = Form("0"),
    tree: str = Form("0"),
    db: Session = Depends(get_db),
):
    day = day if day in DAYS else "day1"
    group = crud.get_group(db, target_group_id)
    if not group:
        return _back(group_id, "Group not found", day)

    data = schemas.PlayerEdit(
        player=player,
        day=day,
        name=name or None,
        move_to_group_id=move_to or None,
        **_settings(handicap, day2_adj, tee_day1, tee_day2, charity, tree),
    )
    try:
        crud.edit_player(db, crud.get_groups(db), group, data)
    except crud.RosterError as e:
        return _back(group_id, f"Could not save player: {e}", day)
    return _back(group_id, roster_day=day)


@router.post("/group/{group_id}/players/delete")
def player_delete(
    group_id: str,
    target_group_id: str = Form(...),
    player: str = Form(...),
    db: Session = Depends(get_db),
):
    group = crud.get_group(db, target_group_id)
    if not group:
        return _back(group_id, "Group not found")

    try:
        crud.delete_player(db, group, player)
    except crud.RosterError as e:
        return _back(group_id, f"Could not delete player: {e}")
    return _back(group_id)


def _create(db, number, pin, players, template=None, tournament_id=None):
    data = schemas.GroupCreate(
        number=parse_int_draft(number),
        pin=pin,
        players=parse_players_draft(players),
        tournament_id=tournament_id or None,
    )
    return crud.create_group(db, data, template)


@router.post("/groups/new")
def group_first(
    number: str = Form(""),
    pin: str = Form(""),
    players: str = Form(""),
    tournament_id: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        g = _create(db, number, pin, players, tournament_id=tournament_id)
    except crud.RosterError as e:
        return RedirectResponse(f"/admin?{urlencode({'error': str(e)})}", status_code=303)
    return RedirectResponse(f"/admin/group/{g.id}", status_code=303)


@router.post("/group/{group_id}/groups/new")
def group_new(
    group_id: str,
    number: str = Form(""),
    pin: str = Form(""),
    players: str = Form(""),
    open_after: str = Form(""),
    db: Session = Depends(get_db),
):
    # the new foursome copies this one's tournament and scorecards
    template = crud.get_group(db, group_id)
    try:
        g = _create(db, number, pin, players, template)
    except crud.RosterError as e:
        return _back(group_id, str(e))

    if open_after:
        return RedirectResponse(f"/admin/group/{g.id}", status_code=303)
    return _back(group_id)
