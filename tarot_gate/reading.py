"""
reading.py — Three-card reading proxy in front of the generative model.

Responsibilities:
- Validate the card selection (exactly three non-empty names).
- Build the fixed system instruction and the past/present/future prompt.
- Call the model and hand back its text untouched.

Notes:
- Fallback text is never substituted here unless the caller passes one, so
  "the model answered with nothing" and "the call failed" stay distinguishable.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence

from .errors import DependencyError, NotConfiguredError, ValidationError
from .tarot_core import THREE_CARD_POSITIONS

logger = logging.getLogger(__name__)


class ReadingClient(Protocol):
    configured: bool

    def generate(self, system_instruction: str, prompt: str) -> str: ...


# -----------------------------------------------------------------------------
# Prompt construction
# -----------------------------------------------------------------------------

# Persona: a renowned Myanmar tarot reader. Burmese only, 300-500 words,
# poetic tone, must touch on love, career, health and personal growth.
SYSTEM_INSTRUCTION_MY = """သင်သည် မြန်မာနိုင်ငံတွင် ကျော်ကြားသော တာရို ဖတ်ရှုသူတစ်ဦးဖြစ်သည်။ သင်သည် အလွန်တိကျသော၊ နက်နဲသော၊ နှင့် ဝိညာဉ်ရေးရာ အသိပညာများကို ပေးနိုင်သည်။

သင်၏ တာဝန်မှာ အတိတ်၊ ပစ္စုပ္ပန်၊ အနာဂတ် ဟူသော သုံးကတ်ပြားစနစ်အတွက် အဓိပ္ပာယ်ရှိသော ဖတ်ရှုမှုကို မြန်မာဘာသာဖြင့် သာ ပေးရန်ဖြစ်သည်။

ပြန်ဖြေချက်သည်-
1. လျှောက်လှမ်းမှုအပြည့်အဝရှိရမည်
2. ကဗျာဆန်ပြီး စိတ်လှုပ်ရှားဖွယ်ရာ ဘာသာစကားကို အသုံးပြုရမည်
3. ရည်းစားမှု၊ လုပ်ငန်း၊ ကျန်းမာရေး၊ နှင့် ကိုယ်ရေးကိုယ်တာ ဖွံ့ဖြိုးမှုတို့ကို တိုက်ရိုက် ဖော်ပြရမည်
4. အမှန်တကယ် အကြံပြုချက်များနှင့် လမ်းညွှန်ချက်များကို ပေးရမည်
5. စကားလုံး ၃၀၀ မှ ၅၀၀ ကြားရှိရမည်

ဘာသာပြန်ဆော့ဝဲများကို အသုံးမပြုပါနှင့်။ သင့်ဉာဏ်ရည်မြင့် မြန်မာဘာသာစကားကို တိုက်ရိုက်အသုံးပြုပါ။"""

# Burmese labels for the past / present / future slots
POSITION_LABELS_MY = {
    "past": "အတိတ်",
    "present": "ပစ္စုပ္ပန်",
    "future": "အနာဂတ်",
}

_PROMPT_INTRO_MY = "အောက်ပါ သုံးကတ်ပြားများကို အခြေခံ၍ နက်နဲသော ဖတ်ရှုမှုတစ်ခု ပေးပါ-"
_PROMPT_OUTRO_MY = (
    "ဤ သုံးကတ်ပြားသည် အဘယ်သို့ ထိုသူ၏ ခရီးသွားမှုကို ပြောပြနေသနည်း။ "
    "သေချာသော၊ တိကျသော၊ နှင့် အသုံးဝင်သော အကြံပြုချက်များ ပေးပါ။"
)

# Shown by the UI when a reading cannot be produced
FALLBACK_READING_MY = "ဖတ်ရှုမှု မရနိုင်ပါ။"


def validate_cards(cards: Any) -> List[str]:
    if not isinstance(cards, (list, tuple)) or len(cards) != len(THREE_CARD_POSITIONS):
        raise ValidationError("Invalid cards array")
    if not all(isinstance(c, str) and c.strip() for c in cards):
        raise ValidationError("Invalid cards array")
    return [c.strip() for c in cards]


def build_prompt(cards: Sequence[str]) -> str:
    lines: List[str] = [_PROMPT_INTRO_MY, ""]
    for position, name in zip(THREE_CARD_POSITIONS, cards):
        lines.append(f"{POSITION_LABELS_MY[position]}- {name}")
    lines.append("")
    lines.append(_PROMPT_OUTRO_MY)
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

class ReadingService:
    def __init__(self, client: ReadingClient, system_instruction: str = SYSTEM_INSTRUCTION_MY):
        self.client = client
        self.system_instruction = system_instruction

    @property
    def configured(self) -> bool:
        return bool(getattr(self.client, "configured", False))

    def generate_reading(self, cards: Any, fallback: Optional[str] = None) -> str:
        """
        Produce a past/present/future reading for three card names.

        Args:
            cards: exactly three non-empty card names, in past/present/future order.
            fallback: returned instead of raising when the model call fails.

        Returns:
            The model's raw text (possibly empty), or `fallback` after a failed call.

        Raises:
            ValidationError: bad card selection (no call is made).
            NotConfiguredError: no API key (no call is made).
            DependencyError: the call failed and no fallback was given.
        """
        names = validate_cards(cards)

        if not self.configured:
            raise NotConfiguredError("Gemini API not configured. Please set GOOGLE_API_KEY.")

        prompt = build_prompt(names)
        try:
            text = self.client.generate(self.system_instruction, prompt)
        except Exception as e:
            logger.error("Tarot reading error: %s: %s", type(e).__name__, e)
            if fallback is not None:
                return fallback
            raise DependencyError("Failed to generate reading") from e

        if not isinstance(text, str):
            text = str(text)
        return text
