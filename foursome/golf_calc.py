import math

HOLE_COUNT = 18

DAYS = ("day1", "day2")


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _scored(v) -> bool:
    return _is_number(v) and v >= 0


def _table(values):
    # 18 entries or nothing
    if isinstance(values, (list, tuple)) and len(values) == HOLE_COUNT:
        return values
    return None


def is_complete_round(scores) -> bool:
    if not isinstance(scores, (list, tuple)) or len(scores) != HOLE_COUNT:
        return False
    return all(_scored(v) for v in scores)


def gross_total(scores) -> int:
    return sum(v for v in (scores or []) if _scored(v))


def strokes_for_hole(hole_stroke_index, total_strokes) -> int:
    """
    Strokes received on one hole.

    The first 18 strokes go one per hole from stroke index 1 upwards; strokes
    beyond 18 wrap round and add a second (third, ...) stroke in the same order.
    """
    if not _is_number(hole_stroke_index) or hole_stroke_index < 1 or hole_stroke_index > HOLE_COUNT:
        return 0
    if not _is_number(total_strokes):
        return 0
    s = math.floor(total_strokes)
    if s <= 0 or s < hole_stroke_index:
        return 0
    return 1 + math.floor((s - hole_stroke_index) / HOLE_COUNT)


def compute_net_running_total(scores, stroke_index, total_strokes) -> int:
    scores = scores or []
    gross = gross_total(scores)
    hcps = _table(stroke_index)

    if hcps is None:
        # Without stroke index per hole there is no fair way to spread the
        # handicap over a partial round: deduct it only once the card is full.
        if is_complete_round(scores):
            return gross - math.floor(total_strokes) if _is_number(total_strokes) else gross
        return gross

    used = 0
    for i, v in enumerate(scores[:HOLE_COUNT]):
        if not _scored(v):
            continue
        used += strokes_for_hole(hcps[i], total_strokes)
    return gross - used


def compute_net_to_par(scores, pars, stroke_index, total_strokes):
    if not is_complete_round(scores):
        return None
    pars = _table(pars)
    if pars is None:
        return None
    pars_total = sum(p for p in pars if _is_number(p))

    hcps = _table(stroke_index)
    if hcps is not None:
        net = 0
        for i in range(HOLE_COUNT):
            net += scores[i] - strokes_for_hole(hcps[i], total_strokes)
        return net - pars_total

    allowance = math.floor(total_strokes) if _is_number(total_strokes) else 0
    return gross_total(scores) - allowance - pars_total


def compute_to_par_so_far(scores, pars):
    pars = _table(pars)
    if pars is None:
        return None

    gross = par = counted = 0
    for i, v in enumerate((scores or [])[:HOLE_COUNT]):
        if not _scored(v):
            continue
        gross += v
        par += pars[i] if _is_number(pars[i]) else 0
        counted += 1

    if counted == 0:
        return None
    return gross - par


def apply_charity_at_end(net, scores, penalty_strokes) -> int:
    # charity + tree strokes come off once, when the card is finished
    if not _is_number(penalty_strokes):
        return net
    c = math.floor(penalty_strokes)
    if c <= 0:
        return net
    return net - c if is_complete_round(scores) else net


def tee_bonus_for_day(day, tee) -> int:
    if day == "day1":
        if tee == "three":
            return 1
        if tee == "four":
            return 2
    return 0


def allocation_strokes(day, handicap, day2_adjustment, tee) -> int:
    adj = day2_adjustment if day == "day2" else 0
    return handicap + adj + tee_bonus_for_day(day, tee)


def net_hole_scores(scores, stroke_index, total_strokes):
    """
    returns 18 (net, strokes) tuples for the scorecard view
    net is None on holes not played yet
    """
    hcps = _table(stroke_index)
    out = []
    for i in range(HOLE_COUNT):
        v = scores[i] if scores and i < len(scores) else None
        strokes = strokes_for_hole(hcps[i], total_strokes) if hcps is not None else 0
        out.append((v - strokes if _scored(v) else None, strokes))
    return out


def _empty_round():
    return [None] * HOLE_COUNT


def net_to_par_by_player(day, players, scores_by_player, handicaps, day2_adjustments,
                         tee_choices, charity, tree, pars, stroke_index):
    out = {}
    for p in players:
        scores = scores_by_player.get(p) or _empty_round()
        strokes = allocation_strokes(
            day,
            handicaps.get(p, 0),
            day2_adjustments.get(p, 0),
            tee_choices.get(p),
        )
        to_par = compute_net_to_par(scores, pars, stroke_index, strokes)
        if to_par is None:
            out[p] = None
        else:
            out[p] = apply_charity_at_end(to_par, scores, charity.get(p, 0) + tree.get(p, 0))
    return out


def build_leaderboard(day, players, scores_by_player, handicaps, day2_adjustments,
                      tee_choices, charity, tree, pars, stroke_index):
    rows = []
    for p in players:
        scores = scores_by_player.get(p) or _empty_round()
        handicap = handicaps.get(p, 0)
        adjustment = day2_adjustments.get(p, 0) if day == "day2" else 0
        strokes = allocation_strokes(day, handicap, adjustment, tee_choices.get(p))

        net = compute_net_running_total(scores, stroke_index, strokes)
        net = apply_charity_at_end(net, scores, charity.get(p, 0) + tree.get(p, 0))

        rows.append({
            "player": p,
            "handicap": handicap,
            "adjustment": adjustment,
            "gross": gross_total(scores),
            "net": net,
            "to_par": compute_to_par_so_far(scores, pars),
        })

    return sorted(rows, key=lambda row: (row["net"], row["gross"], row["player"]))
