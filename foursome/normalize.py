"""
Boundary between the stored group record and the scoring engine.

Group records have gone through a few shapes (flat score maps before scores
were split per day, a single closest-to-pin entry before there was one per
par 3). Everything read from storage passes through here once, so the engine
only ever sees 18-slot score lists and plain maps keyed by player name.
"""
import math
import re
from dataclasses import dataclass, field

from .golf_calc import (
    DAYS,
    HOLE_COUNT,
    allocation_strokes,
    build_leaderboard,
    net_hole_scores,
    net_to_par_by_player,
)

TEES = ("combo", "three", "four", "stampede", "tips")
DEFAULT_TEE = {"day1": "combo", "day2": "stampede"}

DEFAULT_COURSES = {"day1": "Old Greenwood", "day2": "Grays Crossing"}


def uniq_preserve_order(values):
    out = []
    seen = set()
    for v in values or []:
        if not isinstance(v, str):
            continue
        key = v.strip()
        if not key or key.lower() in seen:
            continue
        seen.add(key.lower())
        out.append(key)
    return out


def find_player_key(players, player):
    lowered = (player or "").strip().lower()
    for p in players:
        if p.strip().lower() == lowered:
            return p
    return None


def players_for_day(player_names_by_day, player_names, day):
    by_day = (player_names_by_day or {}).get(day) if isinstance(player_names_by_day, dict) else None
    base = by_day if isinstance(by_day, list) else player_names
    if not isinstance(base, list):
        return []
    return [p for p in base if isinstance(p, str) and p]


def coerce_score(v):
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
        try:
            v = float(v)
        except ValueError:
            return None
    if not isinstance(v, (int, float)) or not math.isfinite(v) or v < 0:
        return None
    return int(math.floor(v))


def coerce_score_table(players, raw):
    raw = raw if isinstance(raw, dict) else {}
    table = {}
    for p in players:
        existing = raw.get(p)
        if isinstance(existing, list):
            table[p] = [coerce_score(existing[i]) if i < len(existing) else None for i in range(HOLE_COUNT)]
        else:
            table[p] = [None] * HOLE_COUNT
    return table


def is_legacy_scores(raw) -> bool:
    return isinstance(raw, dict) and "day1" not in raw and "day2" not in raw


def coerce_scores_by_day(players, raw):
    # old records: {player: [...]} meant day 1
    if is_legacy_scores(raw):
        day1, day2 = raw, None
    elif isinstance(raw, dict):
        day1, day2 = raw.get("day1"), raw.get("day2")
    else:
        day1 = day2 = None
    return {
        "day1": coerce_score_table(players, day1),
        "day2": coerce_score_table(players, day2),
    }


def coerce_number_map(players, raw, default=0):
    raw = raw if isinstance(raw, dict) else {}
    out = {}
    for p in players:
        v = raw.get(p)
        ok = isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        out[p] = v if ok else default
    return out


def coerce_tee_map(players, raw, default="combo"):
    raw = raw if isinstance(raw, dict) else {}
    return {p: raw.get(p) if raw.get(p) in TEES else default for p in players}


def valid_table(raw):
    if not isinstance(raw, list) or len(raw) != HOLE_COUNT:
        return None
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in raw):
        return None
    return list(raw)


# ---------------------------------------------------------------------------
# Contests
# ---------------------------------------------------------------------------

def _clean(s):
    s = (s or "").strip() if isinstance(s, str) else ""
    return s or None


def hole_string_to_number(s):
    try:
        n = float(s)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(n) or n <= 0:
        return None
    return int(math.floor(n))


def normalize_winner_note(winner, note):
    return {"winner": _clean(winner), "note": _clean(note)}


def normalize_contest_entry(hole, winner, note):
    return {
        "hole": hole_string_to_number(hole),
        "winner": _clean(winner),
        "note": _clean(note),
    }


def normalize_closest_to_pin_by_hole(entries):
    out = {}
    for hole, entry in (entries or {}).items():
        normalized = normalize_winner_note(entry.get("winner"), entry.get("note"))
        if normalized["winner"] is not None or normalized["note"] is not None:
            out[str(hole)] = normalized
    return out


def coerce_closest_to_pin_by_hole(day_contest):
    """
    {hole: {"winner": str, "note": str}} for one day.

    Falls back to the single legacy closest_to_pin entry, keyed by its hole.
    """
    day_contest = day_contest if isinstance(day_contest, dict) else {}
    by_hole = day_contest.get("closest_to_pin_by_hole")
    if isinstance(by_hole, dict):
        return {
            str(hole): {"winner": (v or {}).get("winner") or "", "note": (v or {}).get("note") or ""}
            for hole, v in by_hole.items()
        }

    legacy = day_contest.get("closest_to_pin")
    if isinstance(legacy, dict) and legacy.get("hole") is not None:
        return {str(legacy["hole"]): {"winner": legacy.get("winner") or "", "note": legacy.get("note") or ""}}
    return {}


def _entry_form(entry):
    entry = entry if isinstance(entry, dict) else {}
    return {
        "hole": str(entry["hole"]) if entry.get("hole") is not None else "",
        "winner": entry.get("winner") or "",
        "note": entry.get("note") or "",
    }


def coerce_contest_day(day_contest):
    day_contest = day_contest if isinstance(day_contest, dict) else {}
    return {
        "closest_to_pin_by_hole": coerce_closest_to_pin_by_hole(day_contest),
        "legacy_closest_to_pin": _entry_form(day_contest.get("closest_to_pin")),
        "longest_drive": _entry_form(day_contest.get("longest_drive")),
    }


# ---------------------------------------------------------------------------
# Admin drafts
# ---------------------------------------------------------------------------

def parse_players_draft(raw):
    return [s.strip() for s in re.split(r",|\n", raw or "") if s.strip()]


def _parse_hole_numbers(raw):
    parts = [s for s in re.split(r"[,\s]+", raw or "") if s]
    nums = []
    for p in parts:
        try:
            n = float(p)
        except ValueError:
            return None
        if not math.isfinite(n):
            return None
        nums.append(int(math.floor(n)))
    if len(nums) != HOLE_COUNT:
        return None
    return nums


def parse_pars_draft(raw):
    nums = _parse_hole_numbers(raw)
    if nums is None or any(n < 3 or n > 6 for n in nums):
        return None
    return nums


def parse_hcps_draft(raw):
    nums = _parse_hole_numbers(raw)
    if nums is None or any(n < 1 or n > HOLE_COUNT for n in nums):
        return None
    if len(set(nums)) != HOLE_COUNT:
        return None
    return nums


def parse_int_draft(raw, default=0):
    try:
        n = float(raw) if raw not in (None, "", " ") else default
    except (TypeError, ValueError):
        return default
    if not math.isfinite(n):
        return default
    return int(math.floor(n))


def foursome_number(title):
    m = re.search(r"(\d+)", title or "")
    return int(m.group(1)) if m else None


# ---------------------------------------------------------------------------
# Normalized snapshot
# ---------------------------------------------------------------------------

@dataclass
class GroupView:
    id: str
    title: str
    pin: str
    tournament_id: str | None
    day1_locked: bool
    players: dict
    all_players: list
    scores: dict
    handicaps: dict
    day2_adjustments: dict
    tees: dict
    charity: dict
    tree: dict
    courses: dict
    pars: dict
    hcps: dict
    contests: dict = field(default_factory=dict)

    @classmethod
    def from_group(cls, group):
        players = {
            day: players_for_day(group.player_names_by_day, group.player_names, day)
            for day in DAYS
        }
        all_players = uniq_preserve_order(players["day1"] + players["day2"])
        tournament = group.tournament if isinstance(group.tournament, dict) else {}
        tees = group.tee_choices if isinstance(group.tee_choices, dict) else {}
        contest = group.contest if isinstance(group.contest, dict) else {}

        return cls(
            id=group.id,
            title=group.group_name or "Foursome",
            pin=group.pin,
            tournament_id=(group.tournament_id or "").strip() or None,
            day1_locked=bool(group.day1_scores_locked),
            players=players,
            all_players=all_players,
            scores=coerce_scores_by_day(all_players, group.scores),
            handicaps=coerce_number_map(all_players, group.handicaps),
            day2_adjustments=coerce_number_map(all_players, group.day2_handicap_adjustments),
            tees={day: coerce_tee_map(all_players, tees.get(day), "combo") for day in DAYS},
            charity=coerce_number_map(all_players, group.charity_strokes),
            tree=coerce_number_map(all_players, group.tree_strokes),
            courses={day: tournament.get(f"{day}_course") or DEFAULT_COURSES[day] for day in DAYS},
            pars={day: valid_table(tournament.get(f"{day}_pars")) for day in DAYS},
            hcps={day: valid_table(tournament.get(f"{day}_hcps")) for day in DAYS},
            contests={day: coerce_contest_day(contest.get(day)) for day in DAYS},
        )

    def par3_holes(self, day):
        pars = self.pars[day]
        if not pars:
            return []
        return [i + 1 for i, p in enumerate(pars) if p == 3]

    def is_locked(self, day):
        return day == "day1" and self.day1_locked

    # engine inputs for one day

    def _engine_args(self, day):
        return dict(
            day=day,
            players=self.players[day],
            scores_by_player=self.scores[day],
            handicaps=self.handicaps,
            day2_adjustments=self.day2_adjustments,
            tee_choices=self.tees[day],
            charity=self.charity,
            tree=self.tree,
            pars=self.pars[day],
            stroke_index=self.hcps[day],
        )

    def leaderboard(self, day):
        return build_leaderboard(**self._engine_args(day))

    def net_to_par(self, day):
        return net_to_par_by_player(**self._engine_args(day))

    def allocation(self, day, player):
        return allocation_strokes(
            day,
            self.handicaps.get(player, 0),
            self.day2_adjustments.get(player, 0),
            self.tees[day].get(player),
        )

    def card(self, day):
        """{player: [(gross, net, strokes) x 18]} for the scoring grid."""
        out = {}
        for p in self.players[day]:
            scores = self.scores[day].get(p) or [None] * HOLE_COUNT
            nets = net_hole_scores(scores, self.hcps[day], self.allocation(day, p))
            out[p] = [(scores[i], net, strokes) for i, (net, strokes) in enumerate(nets)]
        return out
