"""Human-readable selection labels."""

from fairbet.markets.keys import format_line
from fairbet.markets.models import MarketKind, SelectionSide, parse_market_type


def build_label(
    market_key: str,
    side: SelectionSide,
    line: float | None = None,
    home_team: str | None = None,
    away_team: str | None = None,
    player_name: str | None = None,
) -> str:
    """Label a selection for display.

    Examples:
        spread home -> "BOS -5.5", totals over -> "Over 220.5",
        moneyline home -> "BOS", player prop -> "Jayson Tatum Over 27.5 Points"
    """
    kind = parse_market_type(market_key).kind
    fallback = side.value.capitalize()

    if kind is MarketKind.SPREAD:
        if line is None:
            return fallback
        if side is SelectionSide.HOME:
            return f"{home_team or 'Home'} -{format_line(abs(line))}"
        if side is SelectionSide.AWAY:
            return f"{away_team or 'Away'} +{format_line(abs(line))}"
        return fallback

    if kind is MarketKind.TOTAL:
        if line is None or side not in (SelectionSide.OVER, SelectionSide.UNDER):
            return fallback
        return f"{fallback} {format_line(line)}"

    if kind is MarketKind.MONEYLINE:
        if side is SelectionSide.HOME:
            return home_team or "Home"
        if side is SelectionSide.AWAY:
            return away_team or "Away"
        return fallback

    if player_name is not None and line is not None:
        prop_type = market_key.replace("player_", "").replace("_", " ").title()
        if side in (SelectionSide.OVER, SelectionSide.UNDER):
            return f"{player_name} {fallback} {format_line(line)} {prop_type}"
        return f"{player_name} {fallback}"

    return fallback
