import copy
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .golf_calc import DAYS, HOLE_COUNT
from .live import feed
from .normalize import (
    DEFAULT_TEE,
    GroupView,
    coerce_score,
    coerce_scores_by_day,
    find_player_key,
    foursome_number,
    normalize_closest_to_pin_by_hole,
    normalize_contest_entry,
    normalize_winner_note,
    parse_hcps_draft,
    parse_pars_draft,
    uniq_preserve_order,
)

logger = logging.getLogger(__name__)


class RosterError(ValueError):
    """A change that cannot be applied; the message is shown to the user."""


def _other_day(day):
    return "day2" if day == "day1" else "day1"


def _commit(db: Session, groups, what):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not save %s: %s", what, e)
        raise RosterError(f"Could not save {what}: {e}") from e

    for g in groups:
        db.refresh(g)
        feed.publish(g.id)


#---------------------------------------------------------------------------------
# ---------------------------------- Groups --------------------------------------
# --------------------------------------------------------------------------------

def get_groups(db: Session):
    return db.query(models.Group).order_by(models.Group.created_at, models.Group.id).all()

def get_group(db: Session, group_id: str):
    return db.query(models.Group).filter(models.Group.id == group_id).first()

def get_group_by_pin(db: Session, pin: str):
    return db.query(models.Group).filter(models.Group.pin == pin).first()

def find_group(db: Session, id_or_pin: str):
    # links carry the id; people type the PIN
    return get_group(db, id_or_pin) or get_group_by_pin(db, id_or_pin)

def get_groups_by_tournament(db: Session, tournament_id: str):
    return (
        db.query(models.Group)
        .filter(models.Group.tournament_id == tournament_id)
        .order_by(models.Group.created_at, models.Group.id)
        .all()
    )


def update_group(db: Session, group: models.Group, **fields):
    """Whole-field patch, last write wins."""
    for k, v in fields.items():
        setattr(group, k, v)
    group.updated_at = datetime.utcnow()
    _commit(db, [group], "changes")
    return group


def group_for_foursome(groups, number: int):
    matches = sorted(
        (n, g.created_at or datetime.min, g.id, g)
        for g in groups
        if (n := foursome_number(g.group_name)) is not None
    )
    for n, _, _, g in matches:
        if n == number:
            return g
    return None


def create_group(db: Session, data: schemas.GroupCreate, template: models.Group | None = None):
    pin = data.pin.strip()
    if not pin:
        raise RosterError("Enter a PIN for the new group.")
    if data.number <= 0:
        raise RosterError("Enter a foursome number (1,2,3,…).")
    players = uniq_preserve_order(data.players)
    if not players:
        raise RosterError("Enter at least one player for the new group.")

    tournament = copy.deepcopy(template.tournament) if template and isinstance(template.tournament, dict) else {}
    tournament_id = (data.tournament_id or "").strip() or (template.tournament_id if template else None)

    g = models.Group(
        group_name=f"Foursome {data.number}",
        pin=pin,
        tournament_id=tournament_id,
        day1_scores_locked=False,
        player_names=players,
        player_names_by_day={"day1": list(players), "day2": list(players)},
        scores=coerce_scores_by_day(players, None),
        handicaps={p: 0 for p in players},
        day2_handicap_adjustments={p: 0 for p in players},
        tee_choices={day: {p: DEFAULT_TEE[day] for p in players} for day in DAYS},
        charity_strokes={p: 0 for p in players},
        tree_strokes={p: 0 for p in players},
        contest={},
        tournament=tournament,
    )
    db.add(g)
    _commit(db, [g], "group")
    logger.info("Created %s (%s) with %d players", g.group_name, g.id, len(players))
    return g


#---------------------------------------------------------------------------------
# ---------------------------------- Scores --------------------------------------
# --------------------------------------------------------------------------------

def _check_unlocked(view: GroupView, day):
    if view.is_locked(day):
        raise RosterError("Day 1 scores are locked.")


def set_score(db: Session, group: models.Group, day, player, hole: int, value):
    view = GroupView.from_group(group)
    _check_unlocked(view, day)
    if hole < 1 or hole > HOLE_COUNT:
        raise RosterError(f"Hole must be between 1 and {HOLE_COUNT}.")
    key = find_player_key(view.players[day], player)
    if key is None:
        raise RosterError(f"{player} is not in this foursome.")

    scores = copy.deepcopy(view.scores)
    scores[day][key][hole - 1] = coerce_score(value)
    return update_group(db, group, scores=scores)


def save_card(db: Session, group: models.Group, day, table):
    """table: {player: [18 raw values]} for one day."""
    view = GroupView.from_group(group)
    _check_unlocked(view, day)

    scores = copy.deepcopy(view.scores)
    for p in view.players[day]:
        raw = table.get(p)
        if raw is None:
            continue
        scores[day][p] = [coerce_score(raw[i]) if i < len(raw) else None for i in range(HOLE_COUNT)]
    return update_group(db, group, scores=scores)


def set_day1_locked(db: Session, group: models.Group, locked: bool):
    update_group(db, group, day1_scores_locked=bool(locked))
    logger.info("Day 1 %s for group %s", "locked" if locked else "unlocked", group.id)
    return group


def save_scorecards(db: Session, group: models.Group, day1_pars="", day2_pars="", day1_hcps="", day2_hcps=""):
    has_pars = bool(day1_pars.strip() or day2_pars.strip())
    has_hcps = bool(day1_hcps.strip() or day2_hcps.strip())
    if not has_pars and not has_hcps:
        raise RosterError("Enter pars and/or HCP (stroke index) values to save.")

    p1 = parse_pars_draft(day1_pars) if day1_pars.strip() else None
    p2 = parse_pars_draft(day2_pars) if day2_pars.strip() else None
    h1 = parse_hcps_draft(day1_hcps) if day1_hcps.strip() else None
    h2 = parse_hcps_draft(day2_hcps) if day2_hcps.strip() else None

    if has_pars and (p1 is None or p2 is None):
        raise RosterError(f"Enter {HOLE_COUNT} pars per day (comma-separated). Allowed: 3-6.")
    if has_hcps and (h1 is None or h2 is None):
        raise RosterError(f"Enter {HOLE_COUNT} HCP values per day (1-18 each, no repeats).")

    tournament = copy.deepcopy(group.tournament) if isinstance(group.tournament, dict) else {}
    for key, value in (("day1_pars", p1), ("day2_pars", p2), ("day1_hcps", h1), ("day2_hcps", h2)):
        if value is not None:
            tournament[key] = value
    return update_group(db, group, tournament=tournament)


#---------------------------------------------------------------------------------
# ---------------------------------- Roster --------------------------------------
# --------------------------------------------------------------------------------

def _roster_patch(day1, day2, scores_by_day, handicaps, day2_adj, charity, tree, tees):
    players = uniq_preserve_order(day1 + day2)
    return dict(
        player_names=players,
        player_names_by_day={"day1": day1, "day2": day2},
        scores=coerce_scores_by_day(players, scores_by_day),
        handicaps=handicaps,
        day2_handicap_adjustments=day2_adj,
        charity_strokes=charity,
        tree_strokes=tree,
        tee_choices=tees,
    )


def _maps(group: models.Group):
    """Copies of the per-player maps, as stored."""
    def m(v):
        return dict(v) if isinstance(v, dict) else {}

    tees = group.tee_choices if isinstance(group.tee_choices, dict) else {}
    return (
        m(group.handicaps),
        m(group.day2_handicap_adjustments),
        m(group.charity_strokes),
        m(group.tree_strokes),
        {day: m(tees.get(day)) for day in DAYS},
    )


def _apply(fields, group: models.Group):
    for k, v in fields.items():
        setattr(group, k, v)
    group.updated_at = datetime.utcnow()


def add_player(db: Session, groups, data: schemas.PlayerAdd):
    name = data.name.strip()
    if not name:
        raise RosterError("Enter a player name.")
    if data.foursome <= 0:
        raise RosterError("Enter a valid foursome number (1,2,3,…).")
    group = group_for_foursome(groups, data.foursome)
    if group is None:
        raise RosterError(f"Foursome {data.foursome} not found. Create it first.")

    view = GroupView.from_group(group)
    existing = find_player_key(view.all_players, name)
    if existing:
        raise RosterError(f"Player already exists ({existing}).")

    handicaps, day2_adj, charity, tree, tees = _maps(group)
    handicaps[name] = data.handicap
    day2_adj[name] = data.day2_adjustment
    charity[name] = data.charity
    tree[name] = data.tree
    tees["day1"][name] = data.tee_day1
    tees["day2"][name] = data.tee_day2

    day1 = uniq_preserve_order(view.players["day1"] + [name])
    day2 = uniq_preserve_order(view.players["day2"] + [name])
    _apply(_roster_patch(day1, day2, view.scores, handicaps, day2_adj, charity, tree, tees), group)
    _commit(db, [group], "player")
    logger.info("Added %s to %s", name, group.group_name)
    return group


def delete_player(db: Session, group: models.Group, player):
    view = GroupView.from_group(group)
    key = find_player_key(view.all_players, player)
    if key is None:
        return group
    lowered = key.lower()

    day1 = [p for p in view.players["day1"] if p.lower() != lowered]
    day2 = [p for p in view.players["day2"] if p.lower() != lowered]

    handicaps, day2_adj, charity, tree, tees = _maps(group)
    for m in (handicaps, day2_adj, charity, tree, tees["day1"], tees["day2"]):
        m.pop(key, None)

    _apply(_roster_patch(day1, day2, view.scores, handicaps, day2_adj, charity, tree, tees), group)
    _commit(db, [group], "player")
    logger.info("Removed %s from %s", key, group.group_name)
    return group


def _move_player(db, source, target, player, data: schemas.PlayerEdit, next_name):
    day = data.day
    src = GroupView.from_group(source)
    dst = GroupView.from_group(target)

    from_key = find_player_key(src.players[day], player)
    if from_key is None:
        return source
    if not next_name:
        raise RosterError("Player name is required.")
    clash = find_player_key(dst.players[day], next_name)
    if clash:
        raise RosterError(f"Player already exists in target foursome ({clash}).")

    lowered = from_key.lower()
    from_days = dict(src.players)
    from_days[day] = [p for p in src.players[day] if p.lower() != lowered]
    to_days = dict(dst.players)
    to_days[day] = dst.players[day] + [next_name]
    still_in_source = any(p.lower() == lowered for p in from_days["day1"] + from_days["day2"])

    # the day's card travels with the player
    from_scores = copy.deepcopy(src.scores)
    to_scores = copy.deepcopy(dst.scores)
    to_scores[day][next_name] = from_scores[day].pop(from_key)

    handicaps, day2_adj, charity, tree, tees = _maps(source)
    tees[day].pop(from_key, None)
    if not still_in_source:
        for m in (handicaps, day2_adj, charity, tree, tees[_other_day(day)]):
            m.pop(from_key, None)
    _apply(_roster_patch(from_days["day1"], from_days["day2"], from_scores,
                         handicaps, day2_adj, charity, tree, tees), source)

    handicaps, day2_adj, charity, tree, tees = _maps(target)
    handicaps[next_name] = data.handicap
    day2_adj[next_name] = data.day2_adjustment
    charity[next_name] = data.charity
    tree[next_name] = data.tree
    tees[day][next_name] = data.tee_day1 if day == "day1" else data.tee_day2
    _apply(_roster_patch(to_days["day1"], to_days["day2"], to_scores,
                         handicaps, day2_adj, charity, tree, tees), target)

    # both records in one transaction
    _commit(db, [source, target], "player")
    logger.info("Moved %s (%s) from %s to %s", from_key, day, source.group_name, target.group_name)
    return target


def _rename_player(db, group, player, data: schemas.PlayerEdit, next_name):
    view = GroupView.from_group(group)
    cur_key = find_player_key(view.all_players, player)
    if cur_key is None:
        return group
    if not next_name:
        raise RosterError("Player name is required.")
    exists = find_player_key(view.all_players, next_name)
    if exists:
        raise RosterError(f"Player already exists ({exists}).")

    lowered = cur_key.lower()

    def renamed(names):
        return [next_name if p.lower() == lowered else p for p in names]

    scores = copy.deepcopy(view.scores)
    for day in DAYS:
        scores[day][next_name] = scores[day].pop(cur_key)

    handicaps, day2_adj, charity, tree, tees = _maps(group)
    for m in (handicaps, day2_adj, charity, tree, tees["day1"], tees["day2"]):
        m.pop(cur_key, None)
    handicaps[next_name] = data.handicap
    day2_adj[next_name] = data.day2_adjustment
    charity[next_name] = data.charity
    tree[next_name] = data.tree
    tees["day1"][next_name] = data.tee_day1
    tees["day2"][next_name] = data.tee_day2

    _apply(_roster_patch(renamed(view.players["day1"]), renamed(view.players["day2"]), scores,
                         handicaps, day2_adj, charity, tree, tees), group)
    _commit(db, [group], "player")
    logger.info("Renamed %s to %s in %s", cur_key, next_name, group.group_name)
    return group


def _update_player_everywhere(db, groups, group, player, data: schemas.PlayerEdit):
    # handicaps and penalties follow the player into every foursome they play in
    targets = [g for g in groups if find_player_key(GroupView.from_group(g).all_players, player)]
    if not targets:
        targets = [group]

    for g in targets:
        key = find_player_key(GroupView.from_group(g).all_players, player) or player
        handicaps, day2_adj, charity, tree, tees = _maps(g)
        handicaps[key] = data.handicap
        day2_adj[key] = data.day2_adjustment
        charity[key] = data.charity
        tree[key] = data.tree
        tees["day1"][key] = data.tee_day1
        tees["day2"][key] = data.tee_day2
        _apply(dict(
            handicaps=handicaps,
            day2_handicap_adjustments=day2_adj,
            charity_strokes=charity,
            tree_strokes=tree,
            tee_choices=tees,
        ), g)

    _commit(db, targets, "player")
    logger.info("Updated %s in %d foursome(s)", player, len(targets))
    return group


def edit_player(db: Session, groups, group: models.Group, data: schemas.PlayerEdit):
    player = data.player
    next_name = (data.name or player).strip() or player
    move_to = (data.move_to_group_id or "").strip()

    if move_to and move_to != group.id:
        target = get_group(db, move_to)
        if target is None:
            raise RosterError("Target group not found")
        return _move_player(db, group, target, player, data, next_name)

    if next_name.lower() != player.strip().lower():
        return _rename_player(db, group, player, data, next_name)

    return _update_player_everywhere(db, groups, group, player, data)


#---------------------------------------------------------------------------------
# ---------------------------------- Contests ------------------------------------
# --------------------------------------------------------------------------------

def _contest_copy(group: models.Group):
    return copy.deepcopy(group.contest) if isinstance(group.contest, dict) else {}


def _save_contest(db, group, day, by_hole=None, legacy=None, longest=None):
    current = GroupView.from_group(group).contests[day]
    by_hole = by_hole if by_hole is not None else current["closest_to_pin_by_hole"]
    legacy = legacy if legacy is not None else current["legacy_closest_to_pin"]
    longest = longest if longest is not None else current["longest_drive"]

    contest = _contest_copy(group)
    day_contest = dict(contest.get(day) or {})
    day_contest.update(
        closest_to_pin_by_hole=normalize_closest_to_pin_by_hole(by_hole),
        closest_to_pin=normalize_contest_entry(legacy["hole"], legacy["winner"], legacy["note"]),
        longest_drive=normalize_contest_entry(longest["hole"], longest["winner"], longest["note"]),
    )
    contest[day] = day_contest
    return update_group(db, group, contest=contest)


def set_closest_to_pin(db: Session, group: models.Group, day, hole: int, winner, note):
    by_hole = dict(GroupView.from_group(group).contests[day]["closest_to_pin_by_hole"])
    by_hole[str(hole)] = {"winner": winner or "", "note": note or ""}
    return _save_contest(db, group, day, by_hole=by_hole)


def set_legacy_closest_to_pin(db: Session, group: models.Group, day, hole, winner, note):
    return _save_contest(db, group, day, legacy={"hole": hole or "", "winner": winner or "", "note": note or ""})


def set_longest_drive(db: Session, group: models.Group, day, hole, winner, note):
    return _save_contest(db, group, day, longest={"hole": hole or "", "winner": winner or "", "note": note or ""})


def _fan_out(db, group, what, patch_contest):
    """
    One write per foursome in the tournament. Writes are independent: a
    failure leaves the others updated and is reported, not retried.
    """
    tournament_id = (group.tournament_id or "").strip()
    if not tournament_id:
        return []

    siblings = get_groups_by_tournament(db, tournament_id)
    failed = []
    for g in siblings:
        contest = _contest_copy(g)
        patch_contest(contest)
        try:
            update_group(db, g, contest=contest)
        except RosterError:
            failed.append(g)

    logger.info("Propagated %s to %d/%d foursomes of tournament %s",
                what, len(siblings) - len(failed), len(siblings), tournament_id)
    if failed:
        names = ", ".join(g.group_name or g.id for g in failed)
        raise RosterError(f"Could not propagate {what}: {names} not updated.")
    return siblings


def propagate_closest_to_pin(db: Session, group: models.Group, day, hole: int, winner, note):
    normalized = normalize_winner_note(winner, note)
    # nothing to broadcast until a distance is posted
    if normalized["note"] is None:
        return []

    def patch(contest):
        day_contest = dict(contest.get(day) or {})
        by_hole = dict(day_contest.get("closest_to_pin_by_hole") or {})
        by_hole[str(hole)] = normalized
        day_contest["closest_to_pin_by_hole"] = by_hole
        contest[day] = day_contest

    return _fan_out(db, group, "Closest-to-Pin", patch)


def propagate_longest_drive(db: Session, group: models.Group, day, winner):
    winner = (winner or "").strip()
    if not winner:
        return []

    def patch(contest):
        day_contest = dict(contest.get(day) or {})
        day_contest["longest_drive"] = {"hole": None, "winner": winner, "note": None}
        contest[day] = day_contest

    return _fan_out(db, group, "Longest Drive", patch)
