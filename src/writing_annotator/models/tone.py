"""Word-list tone estimate shown next to the readability statistics."""

from __future__ import annotations

from dataclasses import dataclass, field

MIN_TONE_LENGTH = 50

UNCERTAIN_WORDS = (
    "maybe", "perhaps", "might", "possibly", "probably",
    "i think", "i guess", "sort of", "kind of",
)
CONFIDENT_WORDS = (
    "will", "definitely", "certainly", "absolutely", "clearly", "obviously", "undoubtedly",
)
ABSOLUTE_WORDS = ("never", "impossible", "can't", "won't", "always", "perfect", "flawless")
HUMBLE_WORDS = ("hope", "try", "attempt", "learn", "grow", "improve", "develop")
FORMAL_WORDS = ("experience", "opportunity", "develop", "skills", "knowledge", "professional")


@dataclass
class ToneAnalysis:
    overall: str
    confident: list[str] = field(default_factory=list)
    uncertain: list[str] = field(default_factory=list)
    formal: list[str] = field(default_factory=list)
    absolute: list[str] = field(default_factory=list)
    humble: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        parts = [f"Your writing has a {self.overall} tone."]
        if self.strengths:
            parts.append(f"Strengths include: {', '.join(self.strengths).lower()}.")
        if self.weaknesses:
            parts.append(f"Areas for improvement: {', '.join(self.weaknesses).lower()}.")
        return " ".join(parts)


def _present(lowered: str, words: tuple[str, ...]) -> list[str]:
    return [w for w in words if w in lowered]


def analyze_tone(text: str) -> ToneAnalysis | None:
    """Estimate the overall tone of ``text`` from indicator word lists.

    Indicators are substring matches on the lowercased text, so "will" also
    counts inside "willing". Returns None for text shorter than
    ``MIN_TONE_LENGTH`` characters once stripped.
    """
    if len(text.strip()) <= MIN_TONE_LENGTH:
        return None

    lowered = text.lower()
    tone = ToneAnalysis(
        overall="neutral",
        confident=_present(lowered, CONFIDENT_WORDS),
        uncertain=_present(lowered, UNCERTAIN_WORDS),
        formal=_present(lowered, FORMAL_WORDS),
        absolute=_present(lowered, ABSOLUTE_WORDS),
        humble=_present(lowered, HUMBLE_WORDS),
    )
    confident, uncertain = len(tone.confident), len(tone.uncertain)
    humble = len(tone.humble)

    if len(tone.absolute) > 2:
        tone.overall = "arrogant"
        tone.weaknesses.append("Overconfident language that may seem arrogant")
        tone.recommendations.append("Balance confidence with humility and acknowledge room for growth")
    elif confident > uncertain and humble > 0:
        tone.overall = "confident"
        tone.strengths.append("Balanced confidence with humility")
    elif uncertain > confident:
        tone.overall = "uncertain"
        tone.weaknesses.append("Too much uncertain or hesitant language")
        tone.recommendations.append("Use more decisive language to show conviction in your ideas")
    elif humble > confident:
        tone.overall = "humble"
        tone.strengths.append("Shows willingness to learn and grow")

    if len(tone.formal) > 2:
        if tone.overall == "neutral":
            tone.overall = "professional"
        tone.strengths.append("Uses professional, academic language")

    if "never failed" in lowered or "perfect" in lowered:
        tone.recommendations.append("Avoid absolute statements; show how you learned from challenges")
    if len(text) < 100:
        tone.recommendations.append("Expand your writing to give a fuller picture of your ideas")

    return tone
