# badges.py (post-round award calculators)

import numpy as np

from match_helpers import BEST_BALL, SHAMBLE, HOLE_COUNT
from match_scoring import TEAM_A, TEAM_B, ALL_SQUARE, get_hole_input, is_score, stroke_for

JEKYLL_AND_HYDE_GAP = 24

# Ham & Egg: one partner at par or better while the other is this far over
HAM_AND_EGG_STRUGGLE = 1

TEAM_BADGE_FORMATS = (BEST_BALL, SHAMBLE)


# --- Per-hole team scores ---
def team_hole_scores(format, match, side):
    """
    (hole, player0 score, player1 score) for every hole where both partners scored.

    Best ball scores are net (gross minus each player's own stroke),
    shamble scores stay gross.
    """
    rows = []
    for hole_number in range(1, HOLE_COUNT + 1):
        hole_input = get_hole_input(match, hole_number)
        if hole_input is None:
            continue
        scores = hole_input.get(f"{side}PlayersGross")
        if not isinstance(scores, list) or len(scores) < 2:
            continue
        s0, s1 = scores[0], scores[1]
        if not (is_score(s0) and is_score(s1)):
            continue
        if format == BEST_BALL:
            s0 -= stroke_for(match, side, 0, hole_number)
            s1 -= stroke_for(match, side, 1, hole_number)
        rows.append((hole_number, s0, s1))
    return rows


# --- Jekyll & Hyde ---
def jekyll_and_hyde_totals(hole_pairs):
    pairs = np.array(list(hole_pairs), dtype=float).reshape(-1, 2)
    best_total = int(pairs.min(axis=1).sum())
    worst_total = int(pairs.max(axis=1).sum())
    return {
        "bestBallTotal": best_total,
        "worstBallTotal": worst_total,
        "isJekyllAndHyde": (worst_total - best_total) >= JEKYLL_AND_HYDE_GAP,
    }


def calculate_jekyll_and_hyde(format, match, side):
    if format not in TEAM_BADGE_FORMATS:
        return None
    rows = team_hole_scores(format, match, side)
    return jekyll_and_hyde_totals((s0, s1) for _, s0, s1 in rows)


# --- Ham & Egg ---
def is_ham_and_egg(p1_vs_par, p2_vs_par, struggle_threshold=HAM_AND_EGG_STRUGGLE):
    return (
        (p1_vs_par <= 0 and p2_vs_par >= struggle_threshold) or
        (p2_vs_par <= 0 and p1_vs_par >= struggle_threshold)
    )


def count_ham_and_eggs(format, match, side, course_holes, struggle_threshold=HAM_AND_EGG_STRUGGLE):
    if format not in TEAM_BADGE_FORMATS:
        return None
    pars = {h["number"]: h["par"] for h in course_holes or []}

    count = 0
    for hole_number, s0, s1 in team_hole_scores(format, match, side):
        par = pars.get(hole_number)
        if par is None:
            continue
        if is_ham_and_egg(s0 - par, s1 - par, struggle_threshold):
            count += 1
    return count


# --- Match outcome badges ---
def match_outcome_badges(status, result):
    """
    Comeback / blown lead / never behind / clutch flags for each side.

    Works off the persisted status and result only, so it can run on any
    stored match. Nothing is awarded until the match is closed.
    """
    status = status or {}
    result = result or {}
    closed = bool(status.get("closed"))
    winner = result.get("winner", ALL_SQUARE)
    history = status.get("marginHistory") or []
    a_down = bool(status.get("wasTeamADown3PlusBack9"))
    a_up = bool(status.get("wasTeamAUp3PlusBack9"))

    badges = {}
    for side in (TEAM_A, TEAM_B):
        sign = 1 if side == TEAM_A else -1
        won = closed and winner == side
        was_down_3 = a_down if side == TEAM_A else a_up
        was_up_3 = a_up if side == TEAM_A else a_down
        badges[side] = {
            "comebackWin": won and was_down_3,
            "blownLead": closed and was_up_3 and winner != side,
            "neverBehindWin": won and all(sign * m >= 0 for m in history),
            "clutchWin": won and status.get("thru") == HOLE_COUNT,
        }
    return badges


def compute_match_badges(format, match, course_holes=None):
    status = (match or {}).get("status")
    result = (match or {}).get("result")
    badges = match_outcome_badges(status, result)

    for side in (TEAM_A, TEAM_B):
        jekyll = calculate_jekyll_and_hyde(format, match, side)
        badges[side]["jekyllAndHyde"] = bool(jekyll and jekyll["isJekyllAndHyde"])
        badges[side]["hamAndEggs"] = count_ham_and_eggs(format, match, side, course_holes) if course_holes else None
    return badges
