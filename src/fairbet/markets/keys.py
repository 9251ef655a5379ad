"""Canonical key construction for bet groups, selections and games."""

from datetime import date

from fairbet.markets.models import SelectionSide


def format_line(line: float) -> str:
    """Format a line to exactly one decimal place, so 7 and 7.0 key identically."""
    return f"{line:.1f}"


def build_bet_group_key(
    game_id: str,
    market_key: str,
    subject_id: str | None = None,
    line: float | None = None,
) -> str:
    """Build ``{game_id}|{market_key}|{subject_id}|{line}`` with empty optional parts."""
    subject_part = subject_id or ""
    line_part = format_line(line) if line is not None else ""
    return f"{game_id}|{market_key}|{subject_part}|{line_part}"


def build_selection_key(bet_group_key: str, side: SelectionSide) -> str:
    """Build ``{bet_group_key}:{side}``."""
    return f"{bet_group_key}:{side.value}"


def normalize_team_code(team: str) -> str:
    return team.strip().upper()


def build_game_id(league: str, game_date: date, away_team: str, home_team: str) -> str:
    """Build ``{league}:{YYYY-MM-DD}:{AWAY}-{HOME}``."""
    away = normalize_team_code(away_team)
    home = normalize_team_code(home_team)
    return f"{league.lower()}:{game_date.strftime('%Y-%m-%d')}:{away}-{home}"


def normalize_player_id(name: str, disambiguation_id: str | None = None) -> str:
    """Slug a player name for use as a subject id, e.g. "D'Angelo Russell" -> "dangelo-russell"."""
    normalized = (
        name.strip()
        .lower()
        .replace(" ", "-")
        .replace("'", "")
        .replace(".", "")
    )
    if disambiguation_id:
        normalized += f"-{disambiguation_id}"
    return normalized
