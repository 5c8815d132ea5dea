"""
Sports-specific market matching.

Team-name normalisation, bet-type detection, sport / major-event / game-date
extraction, plus the sports compatibility check and sports match score.

Usage:
    from crossvenue.matching.sports import sports_profile, sports_match_score

    profile = sports_profile("Kansas City Chiefs @ Buffalo Bills Moneyline")
    profile.teams       # ('chiefs', 'bills')
    profile.bet.kind    # 'moneyline'
    sports_match_score("Chiefs vs Bills Winner?", profile.title)   # 0.75
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Pattern, Tuple

from .rules import (
    BET_TYPE_RULES,
    COMPATIBLE_BET_TYPES,
    GAME_DATE_RULES,
    MAJOR_EVENT_RULES,
    SPORT_RULES,
    first_match,
    first_outcome,
)


# ---------------------------------------------------------------------------
# Team database
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TeamInfo:
    aliases: Tuple[str, ...]
    sport: str
    city: Optional[str] = None
    conference: Optional[str] = None


def _team(aliases, sport, city=None, conference=None) -> TeamInfo:
    return TeamInfo(tuple(aliases), sport, city, conference)


SPORTS_TEAMS: Dict[str, TeamInfo] = {
    # NFL - AFC
    "chiefs": _team(["kansas city chiefs", "kc chiefs", "kc", "kansas city"], "nfl", "kansas city", "afc"),
    "bills": _team(["buffalo bills", "buffalo"], "nfl", "buffalo", "afc"),
    "dolphins": _team(["miami dolphins", "miami"], "nfl", "miami", "afc"),
    "patriots": _team(["new england patriots", "ne patriots", "pats"], "nfl", "new england", "afc"),
    "jets": _team(["new york jets", "ny jets", "nyj"], "nfl", "new york", "afc"),
    "ravens": _team(["baltimore ravens", "baltimore"], "nfl", "baltimore", "afc"),
    "bengals": _team(["cincinnati bengals", "cincinnati", "cincy"], "nfl", "cincinnati", "afc"),
    "browns": _team(["cleveland browns", "cleveland"], "nfl", "cleveland", "afc"),
    "steelers": _team(["pittsburgh steelers", "pittsburgh"], "nfl", "pittsburgh", "afc"),
    "texans": _team(["houston texans", "houston"], "nfl", "houston", "afc"),
    "colts": _team(["indianapolis colts", "indy colts", "indianapolis"], "nfl", "indianapolis", "afc"),
    "jaguars": _team(["jacksonville jaguars", "jacksonville", "jags"], "nfl", "jacksonville", "afc"),
    "titans": _team(["tennessee titans", "tennessee"], "nfl", "tennessee", "afc"),
    "broncos": _team(["denver broncos", "denver"], "nfl", "denver", "afc"),
    "chargers": _team(["los angeles chargers", "la chargers", "san diego chargers"], "nfl", "los angeles", "afc"),
    "raiders": _team(["las vegas raiders", "oakland raiders", "lv raiders"], "nfl", "las vegas", "afc"),
    # NFL - NFC
    "eagles": _team(["philadelphia eagles", "philly eagles", "philly", "philadelphia"], "nfl", "philadelphia", "nfc"),
    "cowboys": _team(["dallas cowboys", "dallas"], "nfl", "dallas", "nfc"),
    "giants": _team(["new york giants", "ny giants", "nyg"], "nfl", "new york", "nfc"),
    "commanders": _team(["washington commanders", "washington", "redskins"], "nfl", "washington", "nfc"),
    "bears": _team(["chicago bears", "chicago"], "nfl", "chicago", "nfc"),
    "lions": _team(["detroit lions", "detroit"], "nfl", "detroit", "nfc"),
    "packers": _team(["green bay packers", "green bay", "gb packers"], "nfl", "green bay", "nfc"),
    "vikings": _team(["minnesota vikings", "minnesota"], "nfl", "minnesota", "nfc"),
    "falcons": _team(["atlanta falcons", "atlanta"], "nfl", "atlanta", "nfc"),
    "panthers": _team(["carolina panthers", "carolina"], "nfl", "carolina", "nfc"),
    "saints": _team(["new orleans saints", "new orleans"], "nfl", "new orleans", "nfc"),
    "buccaneers": _team(["tampa bay buccaneers", "tampa bay", "bucs"], "nfl", "tampa bay", "nfc"),
    "cardinals": _team(["arizona cardinals", "arizona"], "nfl", "arizona", "nfc"),
    "rams": _team(["los angeles rams", "la rams"], "nfl", "los angeles", "nfc"),
    "niners": _team(["san francisco 49ers", "49ers", "sf 49ers", "san francisco", "forty niners"], "nfl", "san francisco", "nfc"),
    "seahawks": _team(["seattle seahawks", "seattle"], "nfl", "seattle", "nfc"),
    # NBA - Eastern
    "celtics": _team(["boston celtics", "boston"], "nba", "boston", "eastern"),
    "nets": _team(["brooklyn nets", "brooklyn"], "nba", "brooklyn", "eastern"),
    "knicks": _team(["new york knicks", "ny knicks"], "nba", "new york", "eastern"),
    "sixers": _team(["philadelphia 76ers", "76ers", "philly sixers"], "nba", "philadelphia", "eastern"),
    "raptors": _team(["toronto raptors", "toronto"], "nba", "toronto", "eastern"),
    "bulls": _team(["chicago bulls"], "nba", "chicago", "eastern"),
    "cavaliers": _team(["cleveland cavaliers", "cleveland cavs", "cavs"], "nba", "cleveland", "eastern"),
    "pistons": _team(["detroit pistons"], "nba", "detroit", "eastern"),
    "pacers": _team(["indiana pacers", "indiana"], "nba", "indiana", "eastern"),
    "bucks": _team(["milwaukee bucks", "milwaukee"], "nba", "milwaukee", "eastern"),
    "hawks": _team(["atlanta hawks"], "nba", "atlanta", "eastern"),
    "hornets": _team(["charlotte hornets", "charlotte"], "nba", "charlotte", "eastern"),
    "heat": _team(["miami heat"], "nba", "miami", "eastern"),
    "magic": _team(["orlando magic", "orlando"], "nba", "orlando", "eastern"),
    "wizards": _team(["washington wizards"], "nba", "washington", "eastern"),
    # NBA - Western
    "lakers": _team(["los angeles lakers", "la lakers"], "nba", "los angeles", "western"),
    "clippers": _team(["los angeles clippers", "la clippers"], "nba", "los angeles", "western"),
    "warriors": _team(["golden state warriors", "golden state", "gsw"], "nba", "golden state", "western"),
    "suns": _team(["phoenix suns", "phoenix"], "nba", "phoenix", "western"),
    "kings": _team(["sacramento kings", "sacramento"], "nba", "sacramento", "western"),
    "nuggets": _team(["denver nuggets"], "nba", "denver", "western"),
    "timberwolves": _team(["minnesota timberwolves", "wolves"], "nba", "minnesota", "western"),
    "thunder": _team(["oklahoma city thunder", "okc thunder", "okc"], "nba", "oklahoma city", "western"),
    "blazers": _team(["portland trail blazers", "trail blazers", "portland"], "nba", "portland", "western"),
    "jazz": _team(["utah jazz", "utah"], "nba", "utah", "western"),
    "mavericks": _team(["dallas mavericks", "dallas mavs", "mavs"], "nba", "dallas", "western"),
    "rockets": _team(["houston rockets"], "nba", "houston", "western"),
    "grizzlies": _team(["memphis grizzlies", "memphis"], "nba", "memphis", "western"),
    "pelicans": _team(["new orleans pelicans"], "nba", "new orleans", "western"),
    "spurs": _team(["san antonio spurs", "san antonio"], "nba", "san antonio", "western"),
    # MLB
    "yankees": _team(["new york yankees", "ny yankees", "nyy"], "mlb", "new york"),
    "redsox": _team(["boston red sox", "red sox", "boston"], "mlb", "boston"),
    "dodgers": _team(["los angeles dodgers", "la dodgers"], "mlb", "los angeles"),
    "astros": _team(["houston astros"], "mlb", "houston"),
    "braves": _team(["atlanta braves"], "mlb", "atlanta"),
    "cubs": _team(["chicago cubs"], "mlb", "chicago"),
    "whitesox": _team(["chicago white sox", "white sox"], "mlb", "chicago"),
    "phillies": _team(["philadelphia phillies"], "mlb", "philadelphia"),
    "mets": _team(["new york mets", "ny mets", "nym"], "mlb", "new york"),
    "padres": _team(["san diego padres", "san diego"], "mlb", "san diego"),
    # NHL
    "bruins": _team(["boston bruins"], "nhl", "boston"),
    "rangers": _team(["new york rangers", "ny rangers", "nyr"], "nhl", "new york"),
    "islanders": _team(["new york islanders", "ny islanders", "nyi"], "nhl", "new york"),
    "penguins": _team(["pittsburgh penguins", "pens"], "nhl", "pittsburgh"),
    "flyers": _team(["philadelphia flyers"], "nhl", "philadelphia"),
    "capitals": _team(["washington capitals", "caps"], "nhl", "washington"),
    "blackhawks": _team(["chicago blackhawks"], "nhl", "chicago"),
    "redwings": _team(["detroit red wings", "red wings"], "nhl", "detroit"),
    "leafs": _team(["toronto maple leafs", "maple leafs"], "nhl", "toronto"),
    "canadiens": _team(["montreal canadiens", "habs"], "nhl", "montreal"),
    "oilers": _team(["edmonton oilers", "edmonton"], "nhl", "edmonton"),
    "avalanche": _team(["colorado avalanche", "avs"], "nhl", "colorado"),
    "lightning": _team(["tampa bay lightning"], "nhl", "tampa bay"),
    "panthers_nhl": _team(["florida panthers"], "nhl", "florida"),
    # MLS
    "galaxy": _team(["la galaxy", "los angeles galaxy"], "mls", "los angeles"),
    "lafc": _team(["los angeles fc", "lafc"], "mls", "los angeles"),
    "sounders": _team(["seattle sounders", "seattle"], "mls", "seattle"),
    "atlanta_united": _team(["atlanta united", "atlutd"], "mls", "atlanta"),
    "inter_miami": _team(["inter miami", "miami cf"], "mls", "miami"),
}


def _build_alias_patterns() -> List[Tuple[Pattern[str], str]]:
    # Shared city aliases ("boston", "seattle") resolve to the first team listed
    alias_map: Dict[str, str] = {}
    for canonical, info in SPORTS_TEAMS.items():
        for alias in (canonical,) + info.aliases:
            if "_" in alias:
                continue
            alias_map.setdefault(alias.lower(), canonical)

    ordered = sorted(alias_map.items(), key=lambda item: len(item[0]), reverse=True)
    return [
        (re.compile(r"\b" + re.escape(alias) + r"\b"), canonical)
        for alias, canonical in ordered
    ]


_ALIAS_PATTERNS = _build_alias_patterns()


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SportsBet:
    kind: str  # moneyline, spread, over_under, prop, futures, winner
    line: Optional[float] = None
    total: Optional[float] = None


@dataclass(frozen=True)
class GameDate:
    kind: str  # date, week, round, game
    value: str


def extract_all_teams(title: str) -> List[str]:
    """All canonical teams named in a title, longest alias first."""
    text = title.lower()
    teams: List[str] = []
    for pattern, canonical in _ALIAS_PATTERNS:
        if canonical in teams:
            continue
        if pattern.search(text):
            teams.append(canonical)
    return teams


def extract_team(title: str) -> Optional[str]:
    text = title.lower()
    for pattern, canonical in _ALIAS_PATTERNS:
        if pattern.search(text):
            return canonical
    return None


def extract_sport(title: str) -> Optional[str]:
    sport = first_outcome(SPORT_RULES, title)
    if sport:
        return sport
    team = extract_team(title)
    return SPORTS_TEAMS[team].sport if team else None


def extract_bet_type(title: str) -> Optional[SportsBet]:
    found = first_match(BET_TYPE_RULES, title.lower())
    if found is None:
        return None
    rule, match = found
    groups = match.groupdict()
    if rule.outcome == "spread":
        return SportsBet("spread", line=float(groups["line"].replace("+", "")))
    if rule.outcome == "over_under":
        return SportsBet("over_under", total=float(groups["total"]))
    return SportsBet(rule.outcome)


def extract_major_event(title: str) -> Optional[str]:
    return first_outcome(MAJOR_EVENT_RULES, title)


def extract_game_date(title: str) -> Optional[GameDate]:
    found = first_match(GAME_DATE_RULES, title)
    if found is None:
        return None
    rule, match = found
    groups = match.groupdict()
    if groups.get("month"):
        # "Jan 15th" and "january 15" are the same day
        return GameDate("date", f"{groups['month'][:3].lower()} {int(groups['value'])}")
    if rule.outcome == "date":
        return GameDate("date", match.group(0))
    return GameDate(rule.outcome, str(int(groups["value"])))


def is_sports_market(title: str) -> bool:
    return bool(extract_sport(title) or extract_team(title) or extract_major_event(title))


@dataclass(frozen=True)
class SportsProfile:
    """Every sports signal of one title, extracted once."""

    title: str
    teams: Tuple[str, ...]
    sport: Optional[str]
    bet: Optional[SportsBet]
    major_event: Optional[str]
    game_date: Optional[GameDate]

    @property
    def is_sports(self) -> bool:
        return bool(self.sport or self.teams or self.major_event)


@lru_cache(maxsize=65536)
def sports_profile(title: str) -> SportsProfile:
    return SportsProfile(
        title=title,
        teams=tuple(extract_all_teams(title)),
        sport=extract_sport(title),
        bet=extract_bet_type(title),
        major_event=extract_major_event(title),
        game_date=extract_game_date(title),
    )


# ---------------------------------------------------------------------------
# Compatibility and scoring
# ---------------------------------------------------------------------------

def sports_markets_compatible(title_a: str, title_b: str) -> bool:
    """
    False when two sports titles describe different games or bets.

    Different sport, different major event, incompatible bet types, exactly
    opposite spreads, no shared team, or a different date/week/round/game.
    """
    a, b = sports_profile(title_a), sports_profile(title_b)

    if a.sport and b.sport and a.sport != b.sport:
        return False
    if a.major_event and b.major_event and a.major_event != b.major_event:
        return False

    if a.bet and b.bet:
        if a.bet.kind != b.bet.kind and not (
            a.bet.kind in COMPATIBLE_BET_TYPES and b.bet.kind in COMPATIBLE_BET_TYPES
        ):
            return False
        # Opposite lines are the two sides of one bet, not the same contract
        if a.bet.kind == "spread" and b.bet.kind == "spread":
            if a.bet.line is not None and b.bet.line is not None and abs(a.bet.line + b.bet.line) < 0.1:
                return False

    if a.teams and b.teams and not set(a.teams) & set(b.teams):
        return False

    if a.game_date and b.game_date:
        if a.game_date.kind == b.game_date.kind and a.game_date.value != b.game_date.value:
            return False

    return True


def sports_match_score(title_a: str, title_b: str) -> float:
    """
    Sports similarity in [0, 1].

    Teams 40%, sport 15%, bet type and line 20%, major event 15%,
    date/week 10%. A sport or major-event mismatch scores 0; a same-kind
    date mismatch is penalised. Normalised by the weight that applies.
    """
    a, b = sports_profile(title_a), sports_profile(title_b)
    score = 0.0
    max_score = 0.0

    max_score += 0.4
    if a.teams and b.teams:
        shared = [t for t in a.teams if t in b.teams]
        if shared:
            score += 0.4 * len(shared) / max(len(a.teams), len(b.teams))
    elif not a.teams and not b.teams:
        max_score -= 0.4

    max_score += 0.15
    if a.sport and b.sport:
        if a.sport != b.sport:
            return 0.0
        score += 0.15

    max_score += 0.2
    if a.bet and b.bet and a.bet.kind == b.bet.kind:
        score += 0.15
        if a.bet.kind == "spread" and a.bet.line is not None and b.bet.line is not None:
            if abs(a.bet.line + b.bet.line) < 0.5 or abs(a.bet.line - b.bet.line) < 0.5:
                score += 0.05
        elif a.bet.kind == "over_under" and a.bet.total is not None and b.bet.total is not None:
            if abs(a.bet.total - b.bet.total) < 1:
                score += 0.05
        else:
            score += 0.05

    max_score += 0.15
    if a.major_event and b.major_event:
        if a.major_event != b.major_event:
            return 0.0
        score += 0.15

    max_score += 0.1
    if a.game_date and b.game_date and a.game_date.kind == b.game_date.kind:
        if a.game_date.value == b.game_date.value:
            score += 0.1
        else:
            score -= 0.1

    if max_score <= 0:
        return 0.0
    return min(max(score / max_score, 0.0), 1.0)
