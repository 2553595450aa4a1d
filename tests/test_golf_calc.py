import pytest

from foursome import golf_calc as gc

ALL_FOURS = [4] * 18


@pytest.mark.parametrize("idx", [0, -1, 19, 25, None, "3"])
def test_strokes_for_hole_zero_outside_index_range(idx):
    assert gc.strokes_for_hole(idx, 36) == 0


@pytest.mark.parametrize("total", [0, -4, 0.9, None, float("nan")])
def test_strokes_for_hole_zero_without_positive_total(total):
    assert gc.strokes_for_hole(1, total) == 0


def test_strokes_for_hole_first_cycle():
    for idx in range(1, 19):
        for total in range(1, 19):
            expected = 1 if total >= idx else 0
            assert gc.strokes_for_hole(idx, total) == expected


def test_strokes_for_hole_wraps_past_eighteen():
    assert gc.strokes_for_hole(5, 23) == 2
    assert gc.strokes_for_hole(6, 23) == 1
    assert gc.strokes_for_hole(1, 37) == 3
    # totals are floored
    assert gc.strokes_for_hole(5, 4.9) == 0
    assert gc.strokes_for_hole(5, 5.9) == 1


def test_is_complete_round():
    assert gc.is_complete_round(ALL_FOURS)
    assert not gc.is_complete_round(ALL_FOURS[:17] + [None])
    assert not gc.is_complete_round(ALL_FOURS[:17])
    assert not gc.is_complete_round(None)


def test_net_running_total_without_index_incomplete_is_gross():
    scores = [5, 4, 6] + [None] * 15
    assert gc.compute_net_running_total(scores, None, 10) == 15


def test_net_running_total_without_index_complete_deducts_once():
    assert gc.compute_net_running_total(ALL_FOURS, None, 10) == 62


def test_net_running_total_ignores_short_index_table():
    assert gc.compute_net_running_total(ALL_FOURS, list(range(1, 18)), 10) == 62


def test_net_running_total_with_index_counts_played_holes(hcps):
    # holes 1-3 played, 2 strokes: hcp 1 and 2 get one each
    scores = [5, 5, 4] + [None] * 15
    assert gc.compute_net_running_total(scores, hcps, 2) == 12


def test_net_to_par_none_when_incomplete(pars, hcps):
    scores = ALL_FOURS[:17] + [None]
    assert gc.compute_net_to_par(scores, pars, hcps, 10) is None
    assert gc.compute_net_to_par(scores, pars, None, 0) is None


def test_net_to_par_none_without_pars(hcps):
    assert gc.compute_net_to_par(ALL_FOURS, None, hcps, 10) is None


def test_net_to_par_one_stroke_every_hole(hcps):
    assert gc.compute_net_running_total(ALL_FOURS, hcps, 18) == 54
    assert gc.compute_net_to_par(ALL_FOURS, [4] * 18, hcps, 18) == -18


def test_net_to_par_without_index_uses_whole_handicap():
    assert gc.compute_net_to_par(ALL_FOURS, [4] * 18, None, 7) == -7


def test_to_par_so_far_is_gross(pars):
    scores = [5, 4, 3] + [None] * 15
    assert gc.compute_to_par_so_far(scores, pars) == 1
    assert gc.compute_to_par_so_far([None] * 18, pars) is None
    assert gc.compute_to_par_so_far(scores, None) is None


def test_charity_only_applies_to_finished_cards():
    incomplete = ALL_FOURS[:17] + [None]
    assert gc.apply_charity_at_end(68, incomplete, 3) == 68
    assert gc.apply_charity_at_end(72, ALL_FOURS, 3) == 69
    assert gc.apply_charity_at_end(72, ALL_FOURS, 2.7) == 70
    assert gc.apply_charity_at_end(72, ALL_FOURS, 0) == 72
    assert gc.apply_charity_at_end(72, ALL_FOURS, float("inf")) == 72


def test_tee_bonus_is_day_one_only():
    assert gc.allocation_strokes("day1", 10, 3, "three") == 11
    assert gc.allocation_strokes("day1", 10, 3, "four") == 12
    assert gc.allocation_strokes("day1", 10, 3, "combo") == 10
    assert gc.allocation_strokes("day2", 10, 3, "four") == 13


def test_net_hole_scores(hcps):
    scores = [5, None] + [4] * 16
    out = gc.net_hole_scores(scores, hcps, 19)
    assert out[0] == (3, 2)
    assert out[1] == (None, 1)
    assert out[17] == (3, 1)


def _board(players, scores, handicaps=None, tees=None, charity=None, day="day1", pars=None, hcps=None):
    return gc.build_leaderboard(
        day=day,
        players=players,
        scores_by_player=scores,
        handicaps=handicaps or {},
        day2_adjustments={},
        tee_choices=tees or {},
        charity=charity or {},
        tree={},
        pars=pars,
        stroke_index=hcps,
    )


def test_leaderboard_tie_breaks_on_name():
    scores = {"Zed": ALL_FOURS, "Amy": ALL_FOURS}
    for _ in range(3):
        rows = _board(["Zed", "Amy"], scores)
        assert [r["player"] for r in rows] == ["Amy", "Zed"]


def test_leaderboard_sorts_net_then_gross():
    scores = {
        "A": [5] * 18,   # 90 gross, 72 net
        "B": [4] * 18,   # 72 gross, 72 net
        "C": [4] * 18,   # 72 gross, 70 net
    }
    rows = _board(["A", "B", "C"], scores, handicaps={"A": 18, "C": 2})
    assert [r["player"] for r in rows] == ["C", "B", "A"]
    assert rows[0]["net"] == 70
    assert rows[2]["gross"] == 90


def test_leaderboard_row_shape(pars, hcps):
    rows = _board(["Amy"], {"Amy": [5] + [None] * 17}, handicaps={"Amy": 4},
                  tees={"Amy": "four"}, pars=pars, hcps=hcps)
    assert rows == [{
        "player": "Amy",
        "handicap": 4,
        "adjustment": 0,
        "gross": 5,
        "net": 4,
        "to_par": 1,
    }]


def test_leaderboard_missing_card_is_empty():
    rows = _board(["Amy"], {})
    assert rows[0]["gross"] == 0
    assert rows[0]["net"] == 0
    assert rows[0]["to_par"] is None


def test_net_to_par_by_player_applies_penalties_at_end(hcps):
    out = gc.net_to_par_by_player(
        day="day2",
        players=["Amy", "Bo"],
        scores_by_player={"Amy": ALL_FOURS, "Bo": ALL_FOURS[:10]},
        handicaps={"Amy": 10, "Bo": 10},
        day2_adjustments={"Amy": 2},
        tee_choices={},
        charity={"Amy": 1},
        tree={"Amy": 1},
        pars=[4] * 18,
        stroke_index=hcps,
    )
    assert out == {"Amy": -14, "Bo": None}


def test_negative_scores_count_as_unscored(pars):
    scores = [-5, 4] + [None] * 16
    assert gc.gross_total(scores) == 4
    assert gc.compute_net_running_total(scores, None, 0) == 4
    assert gc.compute_to_par_so_far(scores, pars) == 0


def test_strokes_for_hole_fractional_index_matches_whole_formula():
    assert gc.strokes_for_hole(5.5, 23) == 1
    assert gc.strokes_for_hole(5.5, 5) == 0
    assert gc.strokes_for_hole(5.5, 6) == 1


def test_duplicate_stroke_index_used_as_stored():
    # index 1 twice, index 2 missing
    hcps = [1, 1] + list(range(3, 19))
    assert gc.compute_net_running_total(ALL_FOURS, hcps, 2) == 70
    # 19 strokes: both index-1 holes get two, every other listed hole one
    assert gc.compute_net_running_total(ALL_FOURS, hcps, 19) == 52
    nets = gc.net_hole_scores(ALL_FOURS, hcps, 19)
    assert [s for _, s in nets[:3]] == [2, 2, 1]
