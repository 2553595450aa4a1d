from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Boolean, DateTime, JSON
from .db import Base


def _new_id():
    return uuid4().hex


class Group(Base):
    """
    One foursome. Mirrors the group document the scoring pages read and
    write: rosters, per-player maps and per-day scores live in JSON columns
    and are always replaced as a whole, never mutated in place.
    """
    __tablename__ = "groups"

    id = Column(String(32), primary_key=True, default=_new_id)
    group_name = Column(String, nullable=True)
    pin = Column(String, nullable=False, index=True)
    tournament_id = Column(String, nullable=True, index=True)

    day1_scores_locked = Column(Boolean, nullable=False, default=False)

    # legacy flat roster; player_names_by_day wins when present
    player_names = Column(JSON, nullable=True)
    player_names_by_day = Column(JSON, nullable=True)     # {"day1": [...], "day2": [...]}

    # {"day1": {player: [18]}, "day2": {...}} (older records: {player: [18]})
    scores = Column(JSON, nullable=True)

    handicaps = Column(JSON, nullable=True)
    day2_handicap_adjustments = Column(JSON, nullable=True)
    tee_choices = Column(JSON, nullable=True)             # {"day1": {player: tee}, "day2": {...}}
    charity_strokes = Column(JSON, nullable=True)
    tree_strokes = Column(JSON, nullable=True)

    # {"day1": {"closest_to_pin_by_hole": {...}, "closest_to_pin": {...}, "longest_drive": {...}}}
    contest = Column(JSON, nullable=True)

    # course names, pars and stroke index per day
    tournament = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
