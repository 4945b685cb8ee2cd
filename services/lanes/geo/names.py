"""
City and market name normalisation.

Market names in the city store look like "Chicago Mkt", "Ft Wayne Mkt" or
"N. Platte Market" while the cities themselves are "Chicago", "Fort Wayne",
"North Platte". normalize_city_name() maps both forms onto the same token so
a market's own city can be detected, and so dedup keys survive spelling
variants such as "St. Louis" / "Saint Louis".

  "Chicago Mkt"     -> "chicago"
  "Ft. Wayne"       -> "fortwayne"
  "N. Platte"       -> "northplatte"
  "St Louis Market" -> "saintlouis"
"""

from __future__ import annotations

import re

from services.lanes.geo.states import normalize_state_code

_MARKET_SUFFIX = re.compile(r"\s+(mkt|market)\s*$", re.IGNORECASE)
_DIRECTIONAL_PREFIXES = (
    (re.compile(r"^n[.\s]+"), "north "),
    (re.compile(r"^s[.\s]+"), "south "),
    (re.compile(r"^e[.\s]+"), "east "),
    (re.compile(r"^w[.\s]+"), "west "),
)
_ABBREVIATIONS = (
    (re.compile(r"\b(ft\.?|fort)(?=\W|$)"), "fort"),
    (re.compile(r"\b(st\.?|saint)(?=\W|$)"), "saint"),
    (re.compile(r"\b(mt\.?|mount)(?=\W|$)"), "mount"),
)
_NON_ALNUM = re.compile(r"[^a-z0-9]")

# Display-form cleanup for querying a market's own city by name
_DISPLAY_DIRECTIONS = (
    (re.compile(r"^N[.\s]+"), "North "),
    (re.compile(r"^S[.\s]+"), "South "),
    (re.compile(r"^E[.\s]+"), "East "),
    (re.compile(r"^W[.\s]+"), "West "),
)
_DISPLAY_FORT = re.compile(r"^Ft[.\s]+")


def normalize_city_name(name: str | None) -> str:
    """Canonical lowercase token for matching city and market names."""
    text = (name or "").lower()
    text = _MARKET_SUFFIX.sub("", text)
    for pattern, replacement in _DIRECTIONAL_PREFIXES:
        text = pattern.sub(replacement, text)
    for pattern, replacement in _ABBREVIATIONS:
        text = pattern.sub(replacement, text)
    return _NON_ALNUM.sub("", text)


def candidate_key(name: str | None, state: str | None) -> tuple[str, str]:
    """Identity key for a city: normalised name plus 2-letter state code."""
    return normalize_city_name(name), normalize_state_code(state)


def overlay_key(city: str | None, state: str | None) -> str:
    """Key format used by the correction and blacklist tables: 'CITY, ST'."""
    return f"{(city or '').strip()}, {(state or '').strip()}".upper()


def clean_market_name(market_name: str | None) -> str:
    """
    Turn a market label into the city name to look up.

    "Ft Wayne Mkt" -> "Fort Wayne", "N. Platte Market" -> "North Platte".
    Only the first matching directional prefix is expanded.
    """
    name = _MARKET_SUFFIX.sub("", market_name or "")
    for pattern, replacement in _DISPLAY_DIRECTIONS:
        if pattern.match(name):
            name = pattern.sub(replacement, name)
            break
    name = _DISPLAY_FORT.sub("Fort ", name)
    return name.strip()


def market_city_variants(city_name: str) -> list[str]:
    """Spelling variants the store may hold for a market city ("St X" / "St. X" / "Saint X")."""
    variants = [city_name]
    if city_name.startswith("St "):
        rest = city_name[len("St "):]
        variants.append(f"St. {rest}")
        variants.append(f"Saint {rest}")
    return variants
