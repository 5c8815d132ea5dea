"""
Ordered regex rule tables used by the normalizer, gate and scorer.

Every family is a plain list of ``Rule(pattern, outcome)`` evaluated in order;
the first rule whose pattern matches wins. Adding a rule is a data change.

Families:
    BRACKET_RULES          numeric range / threshold shapes ("2.1 to 2.5", "3% or above")
    SEMANTIC_CONFLICTS     opposite-meaning pairs ("under" vs "over")
    TIME_PERIOD_RULES      sub-period markers (Q1, H2, "first half")
    BET_TYPE_RULES         sports bet shapes (spread, total, futures, prop, moneyline)
    SPORT_RULES            sport detection from keywords
    MAJOR_EVENT_RULES      championship events
    GAME_DATE_RULES        date / week / round / game markers
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple


@dataclass(frozen=True)
class Rule:
    """One ``{pattern, outcome}`` entry of a rule table."""

    pattern: Pattern[str]
    outcome: str


@dataclass(frozen=True)
class ConflictPair:
    """Two patterns with opposite meaning."""

    name: str
    left: Pattern[str]
    right: Pattern[str]

    def conflicts(self, text_a: str, text_b: str) -> bool:
        """True when one text says ``left`` and the other ``right``, but not vice versa."""
        forward = bool(self.left.search(text_a)) and bool(self.right.search(text_b))
        backward = bool(self.left.search(text_b)) and bool(self.right.search(text_a))
        return forward != backward


def _rule(pattern: str, outcome: str, flags: int = re.IGNORECASE) -> Rule:
    return Rule(re.compile(pattern, flags), outcome)


def _pair(name: str, left: str, right: str) -> ConflictPair:
    return ConflictPair(name, re.compile(left, re.IGNORECASE), re.compile(right, re.IGNORECASE))


def first_match(rules: Iterable[Rule], text: str) -> Optional[Tuple[Rule, "re.Match[str]"]]:
    """Return the first rule matching ``text`` with its match object."""
    for rule in rules:
        match = rule.pattern.search(text)
        if match:
            return rule, match
    return None


def first_outcome(rules: Iterable[Rule], text: str) -> Optional[str]:
    found = first_match(rules, text)
    return found[0].outcome if found else None


# ---------------------------------------------------------------------------
# Brackets (applied to lower-cased titles)
# ---------------------------------------------------------------------------

_NUM = r"(\d+(?:\.\d+)?)"

BRACKET_RULES: List[Rule] = [
    # "2.1 to 2.5", "2.0-2.5%"
    _rule(_NUM + r"\s*%?\s*(?:to|-)\s*" + _NUM + r"\s*%?", "range"),
    # "3% or above", "3 or more", "3%+"
    _rule(_NUM + r"\s*%?\s*(?:(?:or\s+)?(?:above|more|higher)\b|\+)", "above"),
    # ">3", "over 3", "above 3"
    _rule(r"(?:>|\bover\s+|\babove\s+)" + _NUM, "above"),
    # "2% or below", "2 or less", "2%-"
    _rule(_NUM + r"\s*%?\s*(?:(?:or\s+)?(?:below|less|lower)\b|-(?![\s\w]))", "below"),
    # "<2", "under 2", "below 2"
    _rule(r"(?:<|\bunder\s+|\bbelow\s+)" + _NUM, "below"),
]

# Substrings removed from a title to recover its base event
BASE_EVENT_STRIP: List[Pattern[str]] = [
    re.compile(r"\d+(?:\.\d+)?%?\s*(?:to|-)\s*\d+(?:\.\d+)?%?"),
    re.compile(r"\d+(?:\.\d+)?%?\s*(?:or\s+)?(?:above|below|more|less|higher|lower)\b"),
    re.compile(r"(?:[<>]|\bover\s+|\bunder\s+)\d+(?:\.\d+)?%?"),
]


# ---------------------------------------------------------------------------
# Semantic conflicts
# ---------------------------------------------------------------------------

SEMANTIC_CONFLICTS: List[ConflictPair] = [
    _pair("under_over", r"\bunder\b", r"\bover\b"),
    _pair("below_above", r"\bbelow\b", r"\babove\b"),
    _pair("lose_win", r"\b(?:lose|loses|losing|loss)\b", r"\b(?:win|wins|winning)\b"),
    _pair("fall_rise", r"\b(?:fall|falls|falling)\b", r"\b(?:rise|rises|rising)\b"),
    _pair("decline_increase", r"\b(?:decline|declines|declining)\b", r"\b(?:increase|increases|increasing)\b"),
    _pair("decrease_increase", r"\b(?:decrease|decreases|decreasing)\b", r"\b(?:increase|increases|increasing)\b"),
    _pair("recession_expansion", r"\brecession\b", r"\bexpansion\b"),
    _pair("negative_growth", r"\bnegative\b.*\bgrowth\b", r"\bgrowth\b"),
]


# ---------------------------------------------------------------------------
# Time periods
# ---------------------------------------------------------------------------

TIME_PERIOD_RULES: List[Rule] = [
    _rule(r"\bq[1-4]\b", "quarter"),
    _rule(r"\bh[12]\b", "half"),
    _rule(r"\b(?:first|second)\s+half\b", "half"),
    _rule(r"\b(?:first|second|third|fourth)\s+quarter\b", "quarter"),
]


# ---------------------------------------------------------------------------
# Sports
# ---------------------------------------------------------------------------

# Order matters: spread, total, futures, prop, moneyline.
BET_TYPE_RULES: List[Rule] = [
    _rule(r"(?P<line>[+-]\d+(?:\.\d+)?)\s*(?:spread|pts|points)?", "spread"),
    _rule(r"(?:spread|line|pts|points)\s*(?P<line>[+-]?\d+(?:\.\d+)?)", "spread"),
    _rule(r"(?:\bover|\bunder|\bo/u|\bou)\s*(?P<total>\d+(?:\.\d+)?)", "over_under"),
    _rule(r"(?P<total>\d+(?:\.\d+)?)\s*(?:total|combined|points)", "over_under"),
    _rule(r"\btotal\s*(?:over|under)?\s*(?P<total>\d+(?:\.\d+)?)", "over_under"),
    _rule(r"\b(?:win|wins?|winner)\s+(?:super bowl|championship|finals|world series|stanley cup|mvp)\b", "futures"),
    _rule(r"\b(?:super bowl|championship|finals|world series|stanley cup)\s+(?:winner|champion)\b", "futures"),
    _rule(r"\bto\s+(?:win|make)\s+(?:playoffs|finals|championship)\b", "futures"),
    _rule(r"(?:passing|rushing|receiving|scoring)\s*(?:yards|touchdowns|tds|points)", "prop"),
    _rule(r"\b(?:mvp|first\s+(?:td|touchdown|goal|point|score))\b", "prop"),
    _rule(r"\b(?:assists|rebounds|strikeouts|home\s*runs)\b", "prop"),
    _rule(r"\b(?:moneyline|ml|money\s*line|to\s+win)\b", "moneyline"),
    _rule(r"\bwin(?:s|ner)?\b(?!.*(?:spread|points|over|under))", "moneyline"),
    _rule(r"\b(?:win|wins?|winner|to\s+win)\b", "winner"),
]

COMPATIBLE_BET_TYPES = frozenset({"moneyline", "winner", "futures"})

SPORT_RULES: List[Rule] = [
    _rule(r"\bnfl\b", "nfl"),
    _rule(r"\bsuper\s*bowl\b", "nfl"),
    _rule(r"\bweek\s*\d+\b", "nfl"),
    _rule(r"\btouchdown", "nfl"),
    _rule(r"\bquarterback", "nfl"),
    _rule(r"\bnba\b", "nba"),
    _rule(r"\bbasketball\b", "nba"),
    _rule(r"\bwestern\s*conference", "nba"),
    _rule(r"\beastern\s*conference", "nba"),
    _rule(r"\bmlb\b", "mlb"),
    _rule(r"\bbaseball\b", "mlb"),
    _rule(r"\bworld\s*series\b", "mlb"),
    _rule(r"\bhome\s*run", "mlb"),
    _rule(r"\binning", "mlb"),
    _rule(r"\bnhl\b", "nhl"),
    _rule(r"\bhockey\b", "nhl"),
    _rule(r"\bstanley\s*cup\b", "nhl"),
    _rule(r"\bgoaltender", "nhl"),
    _rule(r"\bncaa\s*(?:football|fb)\b", "ncaaf"),
    _rule(r"\bcollege\s*football\b", "ncaaf"),
    _rule(r"\bcfp\b", "ncaaf"),
    _rule(r"\bplayoff\b.*\bfootball", "ncaaf"),
    _rule(r"\bncaa\s*(?:basketball|bb|hoops)\b", "ncaab"),
    _rule(r"\bmarch\s*madness\b", "ncaab"),
    _rule(r"\bfinal\s*four\b", "ncaab"),
    _rule(r"\bmls\b", "mls"),
    _rule(r"\bsoccer\b", "mls"),
    _rule(r"\bufc\b", "ufc"),
    _rule(r"\bmma\b", "ufc"),
    _rule(r"\bfight(?:er|ing)?\b", "ufc"),
    _rule(r"\bpga\b", "pga"),
    _rule(r"\bgolf\b", "pga"),
    _rule(r"\bmasters\b", "pga"),
    _rule(r"\batp\b", "tennis"),
    _rule(r"\bwta\b", "tennis"),
    _rule(r"\bwimbledon\b", "tennis"),
    _rule(r"\btennis\b", "tennis"),
    _rule(r"\bgrand\s*slam\b", "tennis"),
    _rule(r"\bf1\b", "f1"),
    _rule(r"\bformula\s*(?:1|one)\b", "f1"),
    _rule(r"\bgrand\s*prix\b", "f1"),
]

MAJOR_EVENT_RULES: List[Rule] = [
    _rule(r"\bsuper\s*bowl\b", "super_bowl"),
    _rule(r"\bsb\s*(?:lv?i{0,3}|[0-9]{1,2})\b", "super_bowl"),
    _rule(r"\bnba\s*finals\b", "nba_finals"),
    _rule(r"\bnba\s*championship\b", "nba_finals"),
    _rule(r"\bworld\s*series\b", "world_series"),
    _rule(r"\bmlb\s*championship\b", "world_series"),
    _rule(r"\bstanley\s*cup\b", "stanley_cup"),
    _rule(r"\bnhl\s*finals\b", "stanley_cup"),
    _rule(r"\bmarch\s*madness\b", "march_madness"),
    _rule(r"\bfinal\s*four\b", "march_madness"),
    _rule(r"\bncaa\s*tournament\b", "march_madness"),
    _rule(r"\bcfp\b", "cfp"),
    _rule(r"\bcollege\s*football\s*playoff\b", "cfp"),
    _rule(r"\bnational\s*championship\b.*\bfootball", "cfp"),
]

_MONTHS = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|jul(?:y)?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)

GAME_DATE_RULES: List[Rule] = [
    _rule(r"\b(?P<month>" + _MONTHS + r")\s*(?P<value>\d{1,2})(?:st|nd|rd|th)?\b", "date"),
    _rule(r"\b\d{1,2}/(?P<value>\d{1,2})\b", "date"),
    _rule(r"\bweek\s*(?P<value>\d{1,2})\b", "week"),
    _rule(r"\bround\s*(?P<value>\d{1,2})\b", "round"),
    _rule(r"\bgame\s*(?P<value>\d{1,2})\b", "game"),
]
