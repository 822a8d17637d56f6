# match_helpers.py (formats + match record normalization)

SINGLES = "singles"
BEST_BALL = "twoManBestBall"
SHAMBLE = "twoManShamble"
SCRAMBLE = "twoManScramble"

FORMATS = (SINGLES, BEST_BALL, SHAMBLE, SCRAMBLE)

HOLE_COUNT = 18

# Formats that track which player's drive was used
DRIVE_FORMATS = (SHAMBLE, SCRAMBLE)


def players_per_side(format):
    return 1 if format == SINGLES else 2


def uses_net_scores(format):
    return format in (SINGLES, BEST_BALL)


def zeros18():
    return [0] * HOLE_COUNT


def default_status():
    return {
        "leader": None,
        "margin": 0,
        "thru": 0,
        "dormie": False,
        "closed": False,
    }


# --- Empty hole inputs ---
def empty_input_for(format):
    if format == SINGLES:
        return {"teamAPlayerGross": None, "teamBPlayerGross": None}
    if format == SCRAMBLE:
        return {"teamAGross": None, "teamBGross": None, "teamADrive": None, "teamBDrive": None}

    hole_input = {"teamAPlayersGross": [None, None], "teamBPlayersGross": [None, None]}
    if format in DRIVE_FORMATS:
        hole_input["teamADrive"] = None
        hole_input["teamBDrive"] = None
    return hole_input


def empty_holes_for(format):
    return {str(n): {"input": empty_input_for(format)} for n in range(1, HOLE_COUNT + 1)}


# --- Player sides ---
def _empty_player():
    return {"playerId": "", "strokesReceived": zeros18()}


def _clean_player(player):
    if not isinstance(player, dict):
        return _empty_player()

    player_id = player.get("playerId")
    strokes = player.get("strokesReceived")
    if not isinstance(strokes, list) or len(strokes) != HOLE_COUNT:
        strokes = zeros18()

    return {
        "playerId": player_id if isinstance(player_id, str) else "",
        "strokesReceived": list(strokes),
    }


def ensure_side_size(side, size):
    """
    Pad or trim a team's player list to exactly `size` entries.

    Anything that is not a list is treated as an empty side. Placeholder
    players carry an empty id and no strokes.
    """
    players = side if isinstance(side, list) else []
    cleaned = [_clean_player(p) for p in players[:size]]
    while len(cleaned) < size:
        cleaned.append(_empty_player())
    return cleaned


# --- Holes ---
def _pair(value):
    values = list(value) if isinstance(value, list) else []
    values = values[:2]
    while len(values) < 2:
        values.append(None)
    return values


def _first_of(value):
    if isinstance(value, list):
        return value[0] if value else None
    return None


def _normalize_input(raw, format):
    raw = raw if isinstance(raw, dict) else {}
    hole_input = empty_input_for(format)

    if format == SINGLES:
        for team in ("teamA", "teamB"):
            key = f"{team}PlayerGross"
            if key in raw:
                hole_input[key] = raw.get(key)
            else:
                hole_input[key] = _first_of(raw.get(f"{team}PlayersGross"))
        return hole_input

    if format == SCRAMBLE:
        hole_input["teamAGross"] = raw.get("teamAGross")
        hole_input["teamBGross"] = raw.get("teamBGross")
    else:
        for team in ("teamA", "teamB"):
            players = raw.get(f"{team}PlayersGross")
            if not isinstance(players, list) and raw.get(f"{team}PlayerGross") is not None:
                players = [raw.get(f"{team}PlayerGross")]
            hole_input[f"{team}PlayersGross"] = _pair(players)

    if format in DRIVE_FORMATS:
        hole_input["teamADrive"] = raw.get("teamADrive")
        hole_input["teamBDrive"] = raw.get("teamBDrive")
    return hole_input


def normalize_holes(holes, format):
    """Return all 18 holes in the shape `format` expects, keeping any scores already entered."""
    holes = holes if isinstance(holes, dict) else {}
    normalized = {}
    for n in range(1, HOLE_COUNT + 1):
        entry = holes.get(str(n))
        raw = entry.get("input") if isinstance(entry, dict) else None
        normalized[str(n)] = {"input": _normalize_input(raw, format)}
    return normalized


def normalize_match(match, format):
    match = dict(match) if isinstance(match, dict) else {}
    size = players_per_side(format)
    match["teamAPlayers"] = ensure_side_size(match.get("teamAPlayers"), size)
    match["teamBPlayers"] = ensure_side_size(match.get("teamBPlayers"), size)
    match["holes"] = normalize_holes(match.get("holes"), format)
    return match
