# golf_simulator.py (vs-All: replay recorded holes as synthetic head-to-head matches)

from match_helpers import SINGLES, SCRAMBLE, HOLE_COUNT, empty_input_for, uses_net_scores
from match_scoring import TEAM_A, TEAM_B, decide_hole, is_score
from handicap import calculate_course_handicap, calculate_strokes_received, spin_down


def _gross_by_hole(player):
    scores = {}
    for row in player.get("holePerformance") or []:
        hole = row.get("hole")
        if isinstance(hole, int) and 1 <= hole <= HOLE_COUNT:
            scores[hole] = row.get("gross")
    return scores


def _side_strokes(side_a, side_b, course_holes, format, slope, rating, par):
    """Spin strokes down between exactly these participants, not their real opponents."""
    everyone = list(side_a) + list(side_b)
    if not uses_net_scores(format):
        return {p["playerId"]: [0] * HOLE_COUNT for p in everyone}

    course_handicaps = {
        p["playerId"]: calculate_course_handicap(p.get("playerHandicap"), slope, rating, par)
        for p in everyone
    }
    relative = spin_down(course_handicaps)
    return {pid: calculate_strokes_received(n, course_holes) for pid, n in relative.items()}


def _synthetic_hole(format, hole, grosses_a, grosses_b):
    hole_input = empty_input_for(format)
    if format == SINGLES:
        hole_input["teamAPlayerGross"] = grosses_a[0]
        hole_input["teamBPlayerGross"] = grosses_b[0]
    elif format == SCRAMBLE:
        # teammates share one scramble ball
        hole_input["teamAGross"] = min(grosses_a) if all(is_score(g) for g in grosses_a) else None
        hole_input["teamBGross"] = min(grosses_b) if all(is_score(g) for g in grosses_b) else None
    else:
        hole_input["teamAPlayersGross"] = list(grosses_a)
        hole_input["teamBPlayersGross"] = list(grosses_b)
    return {"input": hole_input}


def simulate_head_to_head(side_a, side_b, course_holes, format, slope_rating, course_rating, par):
    """
    Replay two sides' recorded holes against each other.

    `side_a` / `side_b` are a single player fact (singles) or a list of
    teammates' facts. Holes missing any score are skipped rather than
    scored, and play stops once the lead is bigger than the holes left.

    Returns {"holesWonA", "holesWonB", "winner"} with winner "A", "B" or "tie".
    """
    side_a = [side_a] if isinstance(side_a, dict) else list(side_a)
    side_b = [side_b] if isinstance(side_b, dict) else list(side_b)
    if format != SINGLES:
        # a lone player plays both balls for their side
        side_a = side_a * 2 if len(side_a) == 1 else side_a
        side_b = side_b * 2 if len(side_b) == 1 else side_b
    strokes = _side_strokes(side_a, side_b, course_holes, format, slope_rating, course_rating, par)

    match = {
        "teamAPlayers": [{"playerId": p["playerId"], "strokesReceived": strokes[p["playerId"]]} for p in side_a],
        "teamBPlayers": [{"playerId": p["playerId"], "strokesReceived": strokes[p["playerId"]]} for p in side_b],
        "holes": {},
    }
    scores_a = [_gross_by_hole(p) for p in side_a]
    scores_b = [_gross_by_hole(p) for p in side_b]
    played = sorted(set().union(*scores_a, *scores_b))

    holes_won_a = holes_won_b = 0
    for hole in played:
        grosses_a = [s.get(hole) for s in scores_a]
        grosses_b = [s.get(hole) for s in scores_b]
        if not all(is_score(g) for g in grosses_a + grosses_b):
            continue

        match["holes"][str(hole)] = _synthetic_hole(format, hole, grosses_a, grosses_b)
        decision = decide_hole(format, hole, match)
        if decision == TEAM_A:
            holes_won_a += 1
        elif decision == TEAM_B:
            holes_won_b += 1

        if abs(holes_won_a - holes_won_b) > HOLE_COUNT - hole:
            break

    if holes_won_a > holes_won_b:
        winner = "A"
    elif holes_won_b > holes_won_a:
        winner = "B"
    else:
        winner = "tie"
    return {"holesWonA": holes_won_a, "holesWonB": holes_won_b, "winner": winner}


# --- Team grouping ---
def group_teams(players):
    """
    Group player facts into teams through their partnerIds links.

    Teams come back in order of their first member's position in `players`,
    each as (teamKey, [facts]); the key is the sorted member ids joined by "|".
    """
    by_id = {p["playerId"]: p for p in players}
    seen = set()
    teams = []

    for player in players:
        if player["playerId"] in seen:
            continue
        members, queue = [], [player["playerId"]]
        while queue:
            pid = queue.pop(0)
            if pid in seen or pid not in by_id:
                continue
            seen.add(pid)
            members.append(by_id[pid])
            queue.extend(by_id[pid].get("partnerIds") or [])

        members.sort(key=lambda p: players.index(p))
        team_key = "|".join(sorted(p["playerId"] for p in members))
        teams.append((team_key, members))
    return teams


def compute_vs_all_for_round(players, course_holes, format, slope_rating, course_rating, par):
    """
    Everyone-versus-everyone records for one round.

    Singles pits every player against every other player. Team formats pit
    every team against every other team once, and teammates share the
    resulting record.
    """
    if format == SINGLES:
        teams = [(p["playerId"], [p]) for p in players]
    else:
        teams = group_teams(players)

    records = {key: {"wins": 0, "losses": 0, "ties": 0} for key, _ in teams}

    for i in range(len(teams)):
        for j in range(i + 1, len(teams)):
            key_a, members_a = teams[i]
            key_b, members_b = teams[j]
            outcome = simulate_head_to_head(
                members_a, members_b, course_holes, format, slope_rating, course_rating, par
            )
            if outcome["winner"] == "A":
                records[key_a]["wins"] += 1
                records[key_b]["losses"] += 1
            elif outcome["winner"] == "B":
                records[key_b]["wins"] += 1
                records[key_a]["losses"] += 1
            else:
                records[key_a]["ties"] += 1
                records[key_b]["ties"] += 1

    team_of = {p["playerId"]: key for key, members in teams for p in members}
    return [
        {
            "playerId": p["playerId"],
            "playerName": p.get("playerName", ""),
            "teamKey": team_of[p["playerId"]],
            **records[team_of[p["playerId"]]],
        }
        for p in players
    ]
