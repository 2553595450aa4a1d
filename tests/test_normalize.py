from types import SimpleNamespace

from foursome import normalize as nz


def _record(**overrides):
    base = dict(
        id="g1",
        group_name="Foursome 2",
        pin="2222",
        tournament_id=None,
        day1_scores_locked=False,
        player_names=["Amy", "Bo"],
        player_names_by_day=None,
        scores=None,
        handicaps=None,
        day2_handicap_adjustments=None,
        tee_choices=None,
        charity_strokes=None,
        tree_strokes=None,
        contest=None,
        tournament=None,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def test_coerce_score():
    assert nz.coerce_score(4) == 4
    assert nz.coerce_score(4.7) == 4
    assert nz.coerce_score(" 5 ") == 5
    assert nz.coerce_score(-1) is None
    assert nz.coerce_score("x") is None
    assert nz.coerce_score("") is None
    assert nz.coerce_score(True) is None
    assert nz.coerce_score(float("nan")) is None


def test_legacy_flat_scores_become_day_one():
    raw = {"Amy": [4, 5, "x"], "Bo": [3] * 18}
    out = nz.coerce_scores_by_day(["Amy", "Bo"], raw)
    assert out["day1"]["Amy"][:4] == [4, 5, None, None]
    assert len(out["day1"]["Amy"]) == 18
    assert out["day1"]["Bo"] == [3] * 18
    assert out["day2"]["Amy"] == [None] * 18


def test_per_day_scores_kept():
    raw = {"day2": {"Amy": [5] * 18}}
    out = nz.coerce_scores_by_day(["Amy"], raw)
    assert out["day1"]["Amy"] == [None] * 18
    assert out["day2"]["Amy"] == [5] * 18


def test_players_for_day_prefers_per_day_roster():
    assert nz.players_for_day({"day2": ["Cy"]}, ["Amy"], "day2") == ["Cy"]
    assert nz.players_for_day({"day2": ["Cy"]}, ["Amy"], "day1") == ["Amy"]
    assert nz.players_for_day(None, None, "day1") == []


def test_uniq_preserve_order_is_case_insensitive():
    assert nz.uniq_preserve_order(["Amy", " amy", "Bo", "", None, "Bo "]) == ["Amy", "Bo"]


def test_find_player_key():
    assert nz.find_player_key(["Amy", "Bo"], " AMY ") == "Amy"
    assert nz.find_player_key(["Amy"], "Cy") is None


def test_legacy_closest_to_pin_maps_to_its_hole():
    out = nz.coerce_closest_to_pin_by_hole(
        {"closest_to_pin": {"hole": 7, "winner": "Amy", "note": "3' 2\""}}
    )
    assert out == {"7": {"winner": "Amy", "note": "3' 2\""}}


def test_per_hole_closest_to_pin_wins_over_legacy():
    out = nz.coerce_closest_to_pin_by_hole({
        "closest_to_pin_by_hole": {"3": {"winner": "Bo", "note": None}},
        "closest_to_pin": {"hole": 7, "winner": "Amy", "note": "1'"},
    })
    assert out == {"3": {"winner": "Bo", "note": ""}}


def test_normalize_contest_entry():
    assert nz.normalize_contest_entry("7", " Amy ", "") == {"hole": 7, "winner": "Amy", "note": None}
    assert nz.normalize_contest_entry("", "", "far")["hole"] is None
    assert nz.normalize_contest_entry("-2", None, None)["hole"] is None


def test_normalize_closest_to_pin_by_hole_drops_empty_entries():
    out = nz.normalize_closest_to_pin_by_hole({
        "3": {"winner": "", "note": ""},
        "7": {"winner": "Amy", "note": ""},
    })
    assert out == {"7": {"winner": "Amy", "note": None}}


def test_parse_pars_draft():
    assert nz.parse_pars_draft("4," * 17 + "5") == [4] * 17 + [5]
    assert nz.parse_pars_draft(" ".join(["3"] * 18)) == [3] * 18
    assert nz.parse_pars_draft("4," * 17) is None
    assert nz.parse_pars_draft("7," * 18) is None
    assert nz.parse_pars_draft("4,x" + ",4" * 16) is None


def test_parse_hcps_draft_requires_each_index_once():
    assert nz.parse_hcps_draft(",".join(str(i) for i in range(18, 0, -1))) == list(range(18, 0, -1))
    assert nz.parse_hcps_draft(",".join(["1"] * 18)) is None
    assert nz.parse_hcps_draft(",".join(str(i) for i in range(0, 18))) is None


def test_parse_players_and_int_drafts():
    assert nz.parse_players_draft("Amy, Bo\nCy\n\n") == ["Amy", "Bo", "Cy"]
    assert nz.parse_int_draft("7.9") == 7
    assert nz.parse_int_draft("") == 0
    assert nz.parse_int_draft("abc", default=3) == 3


def test_foursome_number():
    assert nz.foursome_number("Foursome 12") == 12
    assert nz.foursome_number("Group") is None


def test_group_view_defaults():
    view = nz.GroupView.from_group(_record())
    assert view.players == {"day1": ["Amy", "Bo"], "day2": ["Amy", "Bo"]}
    assert view.handicaps == {"Amy": 0, "Bo": 0}
    assert view.tees["day2"] == {"Amy": "combo", "Bo": "combo"}
    assert view.courses == nz.DEFAULT_COURSES
    assert view.pars == {"day1": None, "day2": None}
    assert view.par3_holes("day1") == []
    assert view.contests["day1"]["longest_drive"] == {"hole": "", "winner": "", "note": ""}


def test_group_view_drops_bad_tables_and_tees(pars):
    view = nz.GroupView.from_group(_record(
        tournament={"day1_pars": pars, "day1_hcps": [1, 2, 3], "day2_course": "Links"},
        tee_choices={"day1": {"Amy": "four", "Bo": "moon"}},
        handicaps={"Amy": 12, "Bo": "x"},
    ))
    assert view.pars["day1"] == pars
    assert view.hcps["day1"] is None
    assert view.courses["day2"] == "Links"
    assert view.tees["day1"] == {"Amy": "four", "Bo": "combo"}
    assert view.handicaps == {"Amy": 12, "Bo": 0}
    assert view.par3_holes("day1") == [3, 7, 12, 16]


def test_group_view_leaderboard_and_card(hcps):
    view = nz.GroupView.from_group(_record(
        scores={"day1": {"Amy": [4] * 18, "Bo": [5] + [None] * 17}},
        handicaps={"Amy": 18, "Bo": 1},
        tournament={"day1_pars": [4] * 18, "day1_hcps": hcps},
        charity_strokes={"Amy": 1},
    ))
    rows = view.leaderboard("day1")
    assert [r["player"] for r in rows] == ["Bo", "Amy"]
    assert rows[1]["net"] == 53
    assert view.net_to_par("day1") == {"Amy": -19, "Bo": None}

    card = view.card("day1")
    assert card["Amy"][0] == (4, 3, 1)
    assert card["Bo"][0] == (5, 4, 1)
    assert card["Bo"][1] == (None, None, 0)


def test_locked_only_applies_to_day_one():
    view = nz.GroupView.from_group(_record(day1_scores_locked=True))
    assert view.is_locked("day1")
    assert not view.is_locked("day2")
