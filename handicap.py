# handicap.py (course handicap, stroke allocation + spin-down)

import math
from decimal import Decimal, ROUND_HALF_UP

from match_helpers import HOLE_COUNT, zeros18

DEFAULT_COURSE_PAR = 72
NEUTRAL_SLOPE = 113


class CourseDataError(ValueError):
    """Raised when course reference data breaks the 18-hole / unique hcpIndex layout."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def _to_number(value, default, zero_is_missing=False):
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or (zero_is_missing and number == 0):
        return default
    return number


def round_half_away(value):
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# --- Course handicap ---
def calculate_course_handicap(handicap_index, slope_rating=NEUTRAL_SLOPE, course_rating=None, par=DEFAULT_COURSE_PAR):
    """
    Course handicap = index × (slope ÷ 113) + (rating − par), rounded.

    Junk inputs fall back to safe defaults instead of raising: the index to 0,
    slope to 113, par to 72 and the rating to par. A zero slope or par
    counts as missing; a zero index or rating is used as given.
    """
    index = _to_number(handicap_index, 0.0)
    slope = _to_number(slope_rating, NEUTRAL_SLOPE, zero_is_missing=True)
    par_value = _to_number(par, DEFAULT_COURSE_PAR, zero_is_missing=True)
    rating = _to_number(course_rating, par_value)

    unrounded = index * (slope / NEUTRAL_SLOPE) + (rating - par_value)
    if not math.isfinite(unrounded):
        return 0
    return round_half_away(unrounded)


def _holes_by_difficulty(course_holes):
    return sorted(course_holes or [], key=lambda h: h["hcpIndex"])


def _mark_strokes(stroke_count, course_holes):
    strokes = zeros18()
    for hole in _holes_by_difficulty(course_holes)[:stroke_count]:
        number = hole["number"]
        if 1 <= number <= HOLE_COUNT:
            strokes[number - 1] = 1
    return strokes


def calculate_strokes_received(course_handicap, course_holes):
    """One stroke per hole on the hardest `course_handicap` holes (capped at 18)."""
    count = min(max(0, round_half_away(course_handicap)), HOLE_COUNT)
    return _mark_strokes(count, course_holes)


def calculate_skins_strokes(handicap_index, handicap_percent, slope_rating, course_rating, par, course_holes):
    course_handicap = calculate_course_handicap(handicap_index, slope_rating, course_rating, par)
    adjusted = course_handicap * (_to_number(handicap_percent, 0.0) / 100)
    count = min(max(0, round_half_away(adjusted)), HOLE_COUNT)
    return _mark_strokes(count, course_holes)


# --- Spin-down ---
def spin_down(course_handicaps):
    """Subtract the lowest course handicap from everyone so only the difference earns strokes."""
    if not course_handicaps:
        return {}
    lowest = min(course_handicaps.values())
    return {player_id: ch - lowest for player_id, ch in course_handicaps.items()}


def allocate_match_strokes(players, course):
    """
    Build the static strokesReceived arrays for every participant in a match.

    Parameters:
    - players (list): dicts with `playerId` and `handicapIndex`
    - course (dict): `rating`, `slope`, `par` and the 18 `holes`

    Returns:
    - list of dicts: `playerId`, `courseHandicap`, `strokesReceived`, in input order
    """
    course = course or {}
    course_handicaps = {
        p["playerId"]: calculate_course_handicap(
            p.get("handicapIndex"),
            course.get("slope", NEUTRAL_SLOPE),
            course.get("rating"),
            course.get("par", DEFAULT_COURSE_PAR),
        )
        for p in players
    }
    relative = spin_down(course_handicaps)

    return [
        {
            "playerId": p["playerId"],
            "courseHandicap": course_handicaps[p["playerId"]],
            "strokesReceived": calculate_strokes_received(relative[p["playerId"]], course.get("holes")),
        }
        for p in players
    ]


# --- Course validation (seeding time only) ---
def validate_course(course):
    holes = (course or {}).get("holes")
    if not isinstance(holes, list):
        raise CourseDataError(["course has no holes list"])

    problems = []
    if len(holes) != HOLE_COUNT:
        problems.append(f"expected {HOLE_COUNT} holes, found {len(holes)}")

    numbers, indexes = [], []
    for hole in holes:
        if not isinstance(hole, dict):
            problems.append(f"hole entry is not an object: {hole!r}")
            continue
        number, hcp_index, par = hole.get("number"), hole.get("hcpIndex"), hole.get("par")
        if par not in (3, 4, 5):
            problems.append(f"hole {number}: par must be 3, 4 or 5 (got {par!r})")
        numbers.append(number)
        indexes.append(hcp_index)

    expected = list(range(1, HOLE_COUNT + 1))
    if sorted(n for n in numbers if isinstance(n, int)) != expected:
        problems.append("hole numbers must cover 1-18 exactly once")
    if sorted(i for i in indexes if isinstance(i, int)) != expected:
        problems.append("hcpIndex values must cover 1-18 exactly once")

    if problems:
        raise CourseDataError(problems)
    return course
