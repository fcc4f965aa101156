"""
prompt.py — instruction text for the daily couples prompt.

The model is asked for strict JSON with a single "prompt" key so the reply
can be parsed without guessing. Tone and the less-therapy flag only change
the last two lines.
"""

from dailyprompt.schemas import Tone


LESS_THERAPY_LINE = "Avoid therapy language or processing feelings. Keep it playful and casual."
HEARTFELT_LINE = "You can be thoughtful and heartfelt, but still simple."


def build_prompt(tone: Tone | str = Tone.cute, less_therapy: bool = False) -> str:
    tone_value = tone.value if isinstance(tone, Tone) else str(tone)
    lines = [
        "You are writing one short relationship prompt for couples.",
        "Return ONLY valid JSON with exactly:",
        '{ "prompt": "..." }',
        "No markdown, no extra keys.",
        "Prompt must be short, answerable in one sentence.",
        f"Tone: {tone_value}.",
        LESS_THERAPY_LINE if less_therapy else HEARTFELT_LINE,
    ]
    return "\n".join(lines)
