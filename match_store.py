# match_store.py (Supabase-backed match records + recompute on every hole write)

import logging
from datetime import datetime, timezone

import streamlit as st
from supabase import create_client

from match_helpers import FORMATS, HOLE_COUNT, default_status, normalize_match, players_per_side, empty_holes_for
from match_scoring import compute_match
from handicap import allocate_match_strokes, validate_course
from badges import compute_match_badges

logger = logging.getLogger(__name__)

DEFAULT_MATCHES_TABLE = "matches"


class MatchNotFoundError(KeyError):
    pass


class MatchClosedError(Exception):
    pass


# --- Connect to Supabase ---
@st.cache_resource
def init_supabase():
    url = st.secrets["supabase"]["url"]
    key = st.secrets["supabase"]["key"]
    return create_client(url, key)


def matches_table():
    # streamlit's missing-secrets-file error subclasses FileNotFoundError
    try:
        return st.secrets["scoring"]["matches_table"]
    except (KeyError, FileNotFoundError):
        return DEFAULT_MATCHES_TABLE


def _now():
    return datetime.now(timezone.utc).isoformat()


# --- Reads / writes ---
def load_match(supabase, match_id, table=None):
    try:
        response = supabase.table(table or matches_table()) \
            .select("*") \
            .eq("id", match_id) \
            .limit(1) \
            .execute()
    except Exception:
        logger.exception("Could not load match %s", match_id)
        raise

    if response.data:
        return response.data[0]
    return None


def _require_match(supabase, match_id, table=None):
    row = load_match(supabase, match_id, table)
    if row is None:
        raise MatchNotFoundError(match_id)
    return row


def save_match(supabase, row, table=None):
    data = dict(row)
    data["updated_at"] = _now()
    try:
        response = supabase.table(table or matches_table()) \
            .upsert(data, on_conflict="id") \
            .execute()
    except Exception:
        logger.exception("Could not save match %s", row.get("id"))
        raise

    if not response.data:
        logger.warning("No response data returned for match %s", row.get("id"))
    return data


# --- Match lifecycle ---
def create_match(supabase, match_id, format, course, team_a, team_b, round_id=None, table=None):
    """
    Set up a new match with static, spun-down strokes for every player.

    Parameters:
    - format (str): one of FORMATS
    - course (dict): `rating`, `slope`, `par` and 18 `holes`; validated here
    - team_a / team_b (list): dicts with `playerId` and `handicapIndex`

    Raises CourseDataError for malformed course data and ValueError for an
    unknown format.
    """
    if format not in FORMATS:
        raise ValueError(f"Unknown match format: {format!r}")
    validate_course(course)

    size = players_per_side(format)
    allocated = allocate_match_strokes(list(team_a[:size]) + list(team_b[:size]), course)
    side_a, side_b = allocated[:len(team_a[:size])], allocated[len(team_a[:size]):]

    match_data = normalize_match({
        "roundId": round_id,
        "teamAPlayers": [{"playerId": p["playerId"], "strokesReceived": p["strokesReceived"]} for p in side_a],
        "teamBPlayers": [{"playerId": p["playerId"], "strokesReceived": p["strokesReceived"]} for p in side_b],
        "courseHandicaps": [p["courseHandicap"] for p in allocated],
        "courseHoles": [dict(h) for h in course["holes"]],
        "holes": empty_holes_for(format),
    }, format)

    row = {
        "id": match_id,
        "format": format,
        "match_data": match_data,
        "status": default_status(),
        "result": None,
        "badges": None,
    }
    logger.info("Creating %s match %s", format, match_id)
    return save_match(supabase, row, table)


def recompute_row(row):
    """Recompute status/result (and badges once closed) for a stored row. No I/O."""
    format = row.get("format")
    match_data = normalize_match(row.get("match_data"), format)
    computed = compute_match(format, match_data)

    updated = dict(row)
    updated["match_data"] = match_data
    updated["status"] = computed["status"]
    updated["result"] = computed["result"]
    if computed["status"]["closed"]:
        scored = dict(match_data, status=computed["status"], result=computed["result"])
        updated["badges"] = compute_match_badges(format, scored, match_data.get("courseHoles"))
    else:
        updated["badges"] = None
    return updated


def recompute_match(supabase, match_id, table=None):
    row = _require_match(supabase, match_id, table)
    updated = recompute_row(row)
    status = updated["status"]
    logger.info(
        "Match %s: leader=%s margin=%s thru=%s closed=%s",
        match_id, status["leader"], status["margin"], status["thru"], status["closed"],
    )
    return save_match(supabase, updated, table)


def record_hole_input(supabase, match_id, hole_number, hole_input, table=None):
    """
    Store one hole's raw input and recompute the whole match from hole 1.

    Corrections to holes already counted are always accepted. Once a match
    is closed, holes past the closing hole are refused.
    """
    if not isinstance(hole_number, int) or not 1 <= hole_number <= HOLE_COUNT:
        raise ValueError(f"Hole number must be 1-{HOLE_COUNT}, got {hole_number!r}")

    row = _require_match(supabase, match_id, table)
    status = row.get("status") or {}
    if status.get("closed") and hole_number > (status.get("thru") or 0):
        raise MatchClosedError(f"Match {match_id} closed after hole {status.get('thru')}")

    match_data = normalize_match(row.get("match_data"), row.get("format"))
    match_data["holes"][str(hole_number)] = {"input": dict(hole_input or {})}

    updated = recompute_row(dict(row, match_data=match_data))
    return save_match(supabase, updated, table)
