# -*- coding: utf-8 -*-
"""
tarot_core.py — The card deck offered to the user on the table.

Responsibilities:
- Define the RWS (Rider–Waite–Smith) 78-card deck (id / name / suit / rank)
- Define the past / present / future slots of the three-card spread
- Provide an unbiased Fisher–Yates shuffle for laying cards out
  (seed can be int or str; str is hashed)

Note:
- The reading proxy only needs card names; it does not check them against
  this registry, so any deck the front end shows can be read.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Union


class TarotCoreError(Exception):
    """Raised when a deck/shuffle parameter is invalid."""


Suit = Literal["major", "wands", "cups", "swords", "pentacles"]

THREE_CARD_POSITIONS: List[str] = ["past", "present", "future"]


@dataclass(frozen=True)
class CardDef:
    """Card definition (RWS)."""
    id: str              # e.g., "major_00_the_fool", "minor_wands_ace"
    name: str            # e.g., "The Fool", "Ace of Wands"
    suit: Suit
    rank: str            # major: "0".."21"; minor: "ace","2",...,"king"


# =========================
# RWS 78-card deck definition
# =========================

MAJOR_ARCANA = [
    "The Fool", "The Magician", "The High Priestess", "The Empress",
    "The Emperor", "The Hierophant", "The Lovers", "The Chariot",
    "Strength", "The Hermit", "Wheel of Fortune", "Justice",
    "The Hanged Man", "Death", "Temperance", "The Devil",
    "The Tower", "The Star", "The Moon", "The Sun",
    "Judgement", "The World",
]

_SUITS = [("cups", "Cups"), ("pentacles", "Pentacles"), ("swords", "Swords"), ("wands", "Wands")]
_RANKS = [
    ("ace", "Ace"), ("2", "Two"), ("3", "Three"), ("4", "Four"), ("5", "Five"),
    ("6", "Six"), ("7", "Seven"), ("8", "Eight"), ("9", "Nine"), ("10", "Ten"),
    ("page", "Page"), ("knight", "Knight"), ("queen", "Queen"), ("king", "King"),
]


def _slug(s: str) -> str:
    return s.lower().replace(" ", "_").replace("-", "_").replace("'", "")


def _build_rws_registry() -> List[CardDef]:
    """Build the 78-card registry in a stable order (majors, then suits)."""
    registry: List[CardDef] = [
        CardDef(id=f"major_{i:02d}_{_slug(name)}", name=name, suit="major", rank=str(i))
        for i, name in enumerate(MAJOR_ARCANA)
    ]
    for suit_key, suit_name in _SUITS:
        for rank_key, rank_name in _RANKS:
            registry.append(CardDef(
                id=f"minor_{suit_key}_{rank_key}",
                name=f"{rank_name} of {suit_name}",
                suit=suit_key,  # type: ignore[arg-type]
                rank=rank_key,
            ))
    return registry


CARD_REGISTRY: List[CardDef] = _build_rws_registry()
CARD_BY_NAME: Dict[str, CardDef] = {c.name: c for c in CARD_REGISTRY}


def card_names() -> List[str]:
    """All 78 card names in registry order."""
    return [c.name for c in CARD_REGISTRY]


# =========================
# Shuffling
# =========================

def _norm_seed(seed: Optional[Union[int, str]]) -> Optional[int]:
    """
    Normalize seed to int. A str is hashed with sha256 and the first 8 bytes
    are read as an unsigned 64-bit integer. None stays None.
    """
    if seed is None:
        return None
    if isinstance(seed, bool):
        raise TarotCoreError("seed must be int | str | None")
    if isinstance(seed, int):
        return seed
    if isinstance(seed, str):
        h = hashlib.sha256(seed.encode("utf-8")).digest()
        return int.from_bytes(h[:8], byteorder="big", signed=False)
    raise TarotCoreError("seed must be int | str | None")


def shuffle_deck(deck: List[str], seed: Optional[Union[int, str]] = None) -> List[str]:
    """
    Fisher–Yates (Knuth) shuffle. Returns a new list; the input is untouched.
    """
    rng = random.Random(_norm_seed(seed))
    arr = list(deck)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)  # inclusive
        arr[i], arr[j] = arr[j], arr[i]
    return arr
