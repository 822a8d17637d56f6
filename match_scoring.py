# match_scoring.py (hole decisions + match summary)

import math

from match_helpers import SINGLES, BEST_BALL, SHAMBLE, SCRAMBLE, HOLE_COUNT

TEAM_A = "teamA"
TEAM_B = "teamB"
ALL_SQUARE = "AS"

# Momentum flags only count from the back nine
BACK_NINE_START = 10
MOMENTUM_LEAD = 3


def holes_range(holes):
    """Sorted hole numbers (1-18) present as keys; anything else is ignored."""
    numbers = []
    for key in (holes or {}):
        try:
            number = int(key)
        except (TypeError, ValueError):
            continue
        if 1 <= number <= HOLE_COUNT and str(number) == str(key):
            numbers.append(number)
    return sorted(numbers)


# --- Input accessors ---
def is_score(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def get_hole_input(match, hole_number):
    holes = (match or {}).get("holes")
    if not isinstance(holes, dict):
        return None
    entry = holes.get(str(hole_number))
    if not isinstance(entry, dict):
        return None
    hole_input = entry.get("input")
    return hole_input if isinstance(hole_input, dict) else None


def stroke_for(match, team, player_index, hole_number):
    players = (match or {}).get(f"{team}Players")
    if not isinstance(players, list) or player_index >= len(players):
        return 0
    player = players[player_index]
    strokes = player.get("strokesReceived") if isinstance(player, dict) else None
    if not isinstance(strokes, list) or hole_number > len(strokes):
        return 0
    stroke = strokes[hole_number - 1]
    return stroke if is_score(stroke) else 0


def _compare(score_a, score_b):
    if score_a < score_b:
        return TEAM_A
    if score_b < score_a:
        return TEAM_B
    return ALL_SQUARE


def _team_scores(hole_input, team):
    scores = hole_input.get(f"{team}PlayersGross")
    if not isinstance(scores, list) or len(scores) < 2:
        return None
    scores = scores[:2]
    if not all(is_score(s) for s in scores):
        return None
    return scores


# --- Hole decision ---
def decide_hole(format, hole_number, match):
    """
    Decide a single hole: "teamA", "teamB", "AS" or None.

    None means the hole is not complete for this format (any required
    score missing); it is never scored as a zero.
    """
    hole_input = get_hole_input(match, hole_number)
    if hole_input is None:
        return None

    if format == SCRAMBLE:
        a, b = hole_input.get("teamAGross"), hole_input.get("teamBGross")
        if not (is_score(a) and is_score(b)):
            return None
        return _compare(a, b)

    if format == SINGLES:
        a, b = hole_input.get("teamAPlayerGross"), hole_input.get("teamBPlayerGross")
        if not (is_score(a) and is_score(b)):
            return None
        net_a = a - stroke_for(match, TEAM_A, 0, hole_number)
        net_b = b - stroke_for(match, TEAM_B, 0, hole_number)
        return _compare(net_a, net_b)

    if format in (SHAMBLE, BEST_BALL):
        scores_a = _team_scores(hole_input, TEAM_A)
        scores_b = _team_scores(hole_input, TEAM_B)
        if scores_a is None or scores_b is None:
            return None
        if format == BEST_BALL:
            scores_a = [s - stroke_for(match, TEAM_A, i, hole_number) for i, s in enumerate(scores_a)]
            scores_b = [s - stroke_for(match, TEAM_B, i, hole_number) for i, s in enumerate(scores_b)]
        return _compare(min(scores_a), min(scores_b))

    return None


# --- Match summary ---
def summarize(format, match):
    """
    Fold hole decisions 1..18 into the running match state.

    Always recomputes from hole 1. Accumulation stops at the first
    undecided hole, so `thru` is a contiguous prefix even when later
    holes already have scores, and at the closing hole, so scores
    entered after a closeout never change the result.
    """
    holes_won_a = holes_won_b = thru = 0
    margin_history = []
    was_up_3 = was_down_3 = False

    for hole_number in range(1, HOLE_COUNT + 1):
        decision = decide_hole(format, hole_number, match)
        if decision is None:
            break

        thru += 1
        if decision == TEAM_A:
            holes_won_a += 1
        elif decision == TEAM_B:
            holes_won_b += 1

        signed_margin = holes_won_a - holes_won_b
        margin_history.append(signed_margin)

        if thru >= BACK_NINE_START:
            if signed_margin >= MOMENTUM_LEAD:
                was_up_3 = True
            if signed_margin <= -MOMENTUM_LEAD:
                was_down_3 = True

        # closed out: holes entered after this one never count
        if abs(signed_margin) > HOLE_COUNT - thru:
            break

    signed_margin = holes_won_a - holes_won_b
    margin = abs(signed_margin)
    leader = TEAM_A if signed_margin > 0 else TEAM_B if signed_margin < 0 else None
    holes_left = HOLE_COUNT - thru

    closed = thru == HOLE_COUNT or margin > holes_left
    dormie = not closed and margin > 0 and margin == holes_left

    return {
        "holesWonA": holes_won_a,
        "holesWonB": holes_won_b,
        "thru": thru,
        "leader": leader,
        "margin": margin,
        "dormie": dormie,
        "closed": closed,
        "winner": leader or ALL_SQUARE,
        "wasTeamADown3PlusBack9": was_down_3,
        "wasTeamAUp3PlusBack9": was_up_3,
        "marginHistory": margin_history,
    }


def build_status_and_result(summary):
    status = {
        "leader": summary["leader"],
        "margin": summary["margin"],
        "thru": summary["thru"],
        "dormie": summary["dormie"],
        "closed": summary["closed"],
        "wasTeamADown3PlusBack9": summary["wasTeamADown3PlusBack9"],
        "wasTeamAUp3PlusBack9": summary["wasTeamAUp3PlusBack9"],
        "marginHistory": list(summary["marginHistory"]),
    }
    result = {
        "winner": summary["winner"],
        "holesWonA": summary["holesWonA"],
        "holesWonB": summary["holesWonB"],
    }
    return {"status": status, "result": result}


def compute_match(format, match):
    return build_status_and_result(summarize(format, match))


# --- Display text ---
def format_match_status(status, team_a_name="Team A", team_b_name="Team B"):
    if not status:
        return "—"

    thru = status.get("thru") or 0
    margin = status.get("margin") or 0
    leader = status.get("leader")
    closed = status.get("closed")

    if thru == 0:
        return "Not started"

    if not leader:
        return "Halved" if closed else f"All Square ({thru})"

    name = team_a_name if leader == TEAM_A else team_b_name
    if closed:
        if thru < HOLE_COUNT:
            return f"{name} wins {margin} & {HOLE_COUNT - thru}"
        return f"{name} wins {margin} UP"
    return f"{name} {margin} UP ({thru})"
