# match_store_test.py

import copy

import pytest

from match_helpers import SINGLES, BEST_BALL
from match_scoring import TEAM_A
from match_store import (
    MatchClosedError,
    MatchNotFoundError,
    create_match,
    load_match,
    recompute_match,
    recompute_row,
    record_hole_input,
    save_match,
)
from handicap import CourseDataError
from handicap_test import COURSE

TABLE = "matches"


# --- In-memory stand-in for the supabase client ---
class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, rows):
        self.rows = rows
        self.filters = []
        self.limit_to = None
        self.pending = None

    def select(self, *_columns):
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def upsert(self, data, on_conflict="id"):
        self.pending = (data, on_conflict)
        return self

    def execute(self):
        if self.pending is not None:
            data, key = self.pending
            self.rows[data[key]] = copy.deepcopy(data)
            return FakeResponse([copy.deepcopy(data)])

        found = [
            copy.deepcopy(row) for row in self.rows.values()
            if all(row.get(column) == value for column, value in self.filters)
        ]
        if self.limit_to is not None:
            found = found[:self.limit_to]
        return FakeResponse(found)


class FakeSupabase:
    def __init__(self):
        self.tables = {}

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, {}))


class BrokenSupabase:
    def table(self, name):
        raise ConnectionError("supabase unreachable")


@pytest.fixture
def supabase():
    return FakeSupabase()


def new_singles(supabase, match_id="m1"):
    return create_match(
        supabase, match_id, SINGLES, COURSE,
        [{"playerId": "alice", "handicapIndex": 10.5}],
        [{"playerId": "bob", "handicapIndex": 5.0}],
        round_id="r1", table=TABLE,
    )


# --- Create / load ---
def test_create_match_allocates_strokes(supabase) -> None:
    row = new_singles(supabase)

    assert row["status"] == {"leader": None, "margin": 0, "thru": 0, "dormie": False, "closed": False}
    assert row["result"] is None
    assert "updated_at" in row

    match_data = row["match_data"]
    assert match_data["roundId"] == "r1"
    assert match_data["courseHandicaps"] == [13, 6]
    assert sum(match_data["teamAPlayers"][0]["strokesReceived"]) == 7
    assert sum(match_data["teamBPlayers"][0]["strokesReceived"]) == 0
    assert match_data["holes"]["18"]["input"] == {"teamAPlayerGross": None, "teamBPlayerGross": None}

    assert load_match(supabase, "m1", table=TABLE)["id"] == "m1"


def test_create_team_match(supabase) -> None:
    row = create_match(
        supabase, "bb", BEST_BALL, COURSE,
        [{"playerId": "a1", "handicapIndex": 10.0}, {"playerId": "a2", "handicapIndex": 12.0}],
        [{"playerId": "b1", "handicapIndex": 8.0}, {"playerId": "b2", "handicapIndex": 15.0}],
        table=TABLE,
    )

    assert [p["playerId"] for p in row["match_data"]["teamAPlayers"]] == ["a1", "a2"]
    assert [p["playerId"] for p in row["match_data"]["teamBPlayers"]] == ["b1", "b2"]
    assert row["match_data"]["holes"]["1"]["input"]["teamAPlayersGross"] == [None, None]


def test_create_match_rejects_unknown_format(supabase) -> None:
    with pytest.raises(ValueError, match="Unknown match format"):
        create_match(supabase, "x", "skins", COURSE, [], [], table=TABLE)


def test_create_match_rejects_bad_course(supabase) -> None:
    with pytest.raises(CourseDataError):
        create_match(supabase, "x", SINGLES, {"holes": COURSE["holes"][:9]}, [], [], table=TABLE)
    assert load_match(supabase, "x", table=TABLE) is None


def test_load_missing_match(supabase) -> None:
    assert load_match(supabase, "nope", table=TABLE) is None


def test_client_failures_propagate() -> None:
    with pytest.raises(ConnectionError):
        load_match(BrokenSupabase(), "m1", table=TABLE)
    with pytest.raises(ConnectionError):
        save_match(BrokenSupabase(), {"id": "m1"}, table=TABLE)


# --- Hole writes ---
def test_record_hole_recomputes_status(supabase) -> None:
    new_singles(supabase)

    # hole 1 carries one of alice's strokes, so her 5 nets a 4
    row = record_hole_input(supabase, "m1", 1, {"teamAPlayerGross": 5, "teamBPlayerGross": 5}, table=TABLE)

    assert row["status"]["thru"] == 1
    assert row["status"]["leader"] == TEAM_A
    assert row["result"] == {"winner": TEAM_A, "holesWonA": 1, "holesWonB": 0}
    assert row["badges"] is None
    assert load_match(supabase, "m1", table=TABLE)["status"]["thru"] == 1


def test_correction_to_played_hole_recomputes_from_scratch(supabase) -> None:
    new_singles(supabase)
    record_hole_input(supabase, "m1", 1, {"teamAPlayerGross": 5, "teamBPlayerGross": 5}, table=TABLE)

    row = record_hole_input(supabase, "m1", 1, {"teamAPlayerGross": 6, "teamBPlayerGross": 4}, table=TABLE)

    assert row["status"]["leader"] == "teamB"
    assert row["result"]["holesWonA"] == 0


def test_closed_match_refuses_later_holes(supabase) -> None:
    new_singles(supabase)
    for hole in range(1, 11):
        record_hole_input(supabase, "m1", hole, {"teamAPlayerGross": 3, "teamBPlayerGross": 6}, table=TABLE)

    row = load_match(supabase, "m1", table=TABLE)
    assert row["status"]["closed"] is True
    assert row["status"]["thru"] == 10
    assert row["badges"][TEAM_A]["neverBehindWin"] is True

    with pytest.raises(MatchClosedError):
        record_hole_input(supabase, "m1", 11, {"teamAPlayerGross": 4, "teamBPlayerGross": 4}, table=TABLE)

    # fixing a counted hole is still allowed; 8 up with 8 to play is dormie
    row = record_hole_input(supabase, "m1", 10, {"teamAPlayerGross": 6, "teamBPlayerGross": 3}, table=TABLE)
    assert row["status"]["closed"] is False
    assert row["status"]["dormie"] is True
    assert row["badges"] is None


def test_holes_entered_early_do_not_count_past_closeout(supabase) -> None:
    # level handicaps, so nobody gets strokes
    create_match(
        supabase, "m2", SINGLES, COURSE,
        [{"playerId": "carl", "handicapIndex": 10.0}],
        [{"playerId": "dana", "handicapIndex": 10.0}],
        table=TABLE,
    )
    scores = {n: (3, 5) for n in range(1, 4)}
    scores.update({n: (4, 4) for n in range(4, 16)})
    scores.update({17: (6, 4), 18: (6, 4)})
    for hole, (a, b) in scores.items():
        record_hole_input(supabase, "m2", hole, {"teamAPlayerGross": a, "teamBPlayerGross": b}, table=TABLE)

    row = load_match(supabase, "m2", table=TABLE)
    assert row["status"]["thru"] == 15
    assert row["status"]["dormie"] is True

    row = record_hole_input(supabase, "m2", 16, {"teamAPlayerGross": 4, "teamBPlayerGross": 4}, table=TABLE)

    assert row["status"]["thru"] == 16
    assert row["status"]["margin"] == 3
    assert row["status"]["closed"] is True
    assert row["result"] == {"winner": TEAM_A, "holesWonA": 3, "holesWonB": 0}
    assert row["badges"][TEAM_A]["clutchWin"] is False


@pytest.mark.parametrize("hole", [0, 19, "3", None])
def test_record_hole_rejects_bad_hole_number(supabase, hole) -> None:
    new_singles(supabase)
    with pytest.raises(ValueError):
        record_hole_input(supabase, "m1", hole, {}, table=TABLE)


def test_record_hole_on_missing_match(supabase) -> None:
    with pytest.raises(MatchNotFoundError):
        record_hole_input(supabase, "ghost", 1, {}, table=TABLE)


# --- Recompute ---
def test_recompute_row_normalizes_stale_data() -> None:
    row = {
        "id": "legacy",
        "format": SINGLES,
        "match_data": {
            "teamAPlayers": [],
            "holes": {"1": {"input": {"teamAPlayersGross": [3, 9], "teamBPlayersGross": [4, 2]}}},
        },
        "status": None,
    }
    updated = recompute_row(row)

    assert updated["match_data"]["teamAPlayers"][0]["playerId"] == ""
    assert updated["match_data"]["holes"]["1"]["input"] == {"teamAPlayerGross": 3, "teamBPlayerGross": 4}
    assert updated["status"]["thru"] == 1
    assert updated["result"]["winner"] == TEAM_A
    assert row["status"] is None


def test_recompute_match_writes_back(supabase) -> None:
    new_singles(supabase)
    stored = supabase.tables[TABLE]["m1"]
    stored["match_data"]["holes"]["1"]["input"] = {"teamAPlayerGross": 4, "teamBPlayerGross": 6}

    row = recompute_match(supabase, "m1", table=TABLE)

    assert row["status"]["thru"] == 1
    assert supabase.tables[TABLE]["m1"]["status"]["leader"] == TEAM_A


def test_recompute_missing_match(supabase) -> None:
    with pytest.raises(MatchNotFoundError):
        recompute_match(supabase, "ghost", table=TABLE)


# --- Configuration ---
def test_matches_table_from_secrets(monkeypatch) -> None:
    import match_store

    monkeypatch.setattr(match_store.st, "secrets", {"scoring": {"matches_table": "league_matches"}})
    assert match_store.matches_table() == "league_matches"


def test_matches_table_default(monkeypatch) -> None:
    import match_store

    monkeypatch.setattr(match_store.st, "secrets", {})
    assert match_store.matches_table() == "matches"


class MissingSecretsFile:
    def __getitem__(self, key):
        raise FileNotFoundError("No secrets.toml found")


def test_matches_table_default_without_secrets_file(monkeypatch) -> None:
    import match_store

    monkeypatch.setattr(match_store.st, "secrets", MissingSecretsFile())
    assert match_store.matches_table() == "matches"


def test_malformed_scoring_section_surfaces(monkeypatch) -> None:
    import match_store

    monkeypatch.setattr(match_store.st, "secrets", {"scoring": "matches"})
    with pytest.raises(TypeError):
        match_store.matches_table()
