from pydantic import BaseModel, Field
from typing import Literal, Optional


DayKey = Literal["day1", "day2"]
TeeKey = Literal["combo", "three", "four", "stampede", "tips"]


class GroupCreate(BaseModel):
    number: int
    pin: str
    players: list[str]
    tournament_id: Optional[str] = None


class PlayerSettings(BaseModel):
    handicap: int = 0
    day2_adjustment: int = 0
    tee_day1: TeeKey = "combo"
    tee_day2: TeeKey = "stampede"
    charity: int = 0
    tree: int = 0


class PlayerAdd(PlayerSettings):
    name: str
    foursome: int


class PlayerEdit(PlayerSettings):
    player: str
    day: DayKey = "day1"
    name: Optional[str] = None
    move_to_group_id: Optional[str] = None


class ScorePatch(BaseModel):
    day: DayKey
    player: str
    hole: int = Field(ge=1, le=18)
    value: Optional[int] = None


class LeaderboardRow(BaseModel):
    player: str
    handicap: int
    adjustment: int
    gross: int
    net: int
    to_par: Optional[int] = None


class Leaderboard(BaseModel):
    group_id: str
    day: DayKey
    course: str
    rows: list[LeaderboardRow]
