from __future__ import annotations

from typing import Optional

import google.generativeai as genai

from .config import DEFAULT_MODEL


def _extract_text(resp) -> str:
    """
    Pull plain text out of a Gemini response, even if only Parts are present.

    Raises ValueError when the response carries no text at all (e.g. a
    safety block), so a blocked reply is never mistaken for an empty one.
    """
    # 1) The SDK's aggregated .text raises ValueError when there are no text parts
    blocked = None
    try:
        t = getattr(resp, "text", None)
        if t:
            return t
    except ValueError as e:
        blocked = e

    # 2) Join candidate parts by hand
    texts = []
    for cand in getattr(resp, "candidates", []) or []:
        content = getattr(cand, "content", None)
        parts = getattr(content, "parts", None) if content else None
        for p in parts or []:
            pt = getattr(p, "text", None)
            if pt:
                texts.append(pt)
    if not texts and blocked is not None:
        raise blocked
    return "\n".join(texts).strip()


class GeminiClient:
    """
    Thin wrapper over google-generativeai used by the reading service.

    `configured` is False when no API key is present; callers check it before
    generating so a missing key never turns into a network round trip.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model_name = model
        self.timeout = timeout
        self.temperature = temperature
        if api_key:
            genai.configure(api_key=api_key)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, system_instruction: str, prompt: str) -> str:
        """Run one generation and return the plain text (may be empty)."""
        if not self.configured:
            raise RuntimeError("Missing GOOGLE_API_KEY in environment.")

        gmodel = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
        )

        kwargs = {"request_options": {"timeout": self.timeout}}
        if self.temperature is not None:
            kwargs["generation_config"] = {"temperature": float(self.temperature)}

        resp = gmodel.generate_content(prompt, **kwargs)
        return _extract_text(resp) or ""
