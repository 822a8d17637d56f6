# reports.py (DataFrame views for the scoring display)

import pandas as pd

from match_helpers import HOLE_COUNT
from match_scoring import TEAM_A, TEAM_B, ALL_SQUARE, decide_hole, summarize

RESULT_LABELS = {TEAM_A: "Team A", TEAM_B: "Team B", ALL_SQUARE: "Halved"}


def _margin_text(signed_margin):
    if signed_margin > 0:
        return f"A {signed_margin} UP"
    if signed_margin < 0:
        return f"B {-signed_margin} UP"
    return "AS"


def scorecard_frame(format, match):
    """
    Hole-by-hole table: decision plus the running margin while it still counts.

    Holes past the first undecided one show their own decision (if any)
    but no running margin, matching how `summarize` counts `thru`.
    """
    history = summarize(format, match)["marginHistory"]
    rows = []
    for hole in range(1, HOLE_COUNT + 1):
        decision = decide_hole(format, hole, match)
        counted = hole <= len(history)
        rows.append({
            "Hole": hole,
            "Result": RESULT_LABELS.get(decision, "—"),
            "Margin": history[hole - 1] if counted else None,
            "Match": _margin_text(history[hole - 1]) if counted else "",
        })
    return pd.DataFrame(rows).set_index("Hole")


def vs_all_standings(records):
    """Rank vs-All records: a win is 1 point and a tie half a point."""
    columns = ["playerId", "playerName", "teamKey", "wins", "losses", "ties", "points"]
    if not records:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(records)
    df["points"] = df["wins"] + 0.5 * df["ties"]
    df = df.sort_values(by=["points", "wins", "playerId"], ascending=[False, False, True], kind="mergesort")
    df = df.reset_index(drop=True)
    df.index = [i + 1 for i in range(len(df))]
    return df[columns]
