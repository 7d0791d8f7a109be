"""
Assistant Fallback Answers
==========================
Canned, keyword-matched answers returned when the assistant AI service is
unreachable.

French carries topic answers; Wolof and Pulaar only carry the generic
apology; any other language gets a bare generic string. Topics are checked
in declaration order and the first topic with a keyword found in the
lower-cased question wins, so a question about watering millet gets the
irrigation answer.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from agritech.enums import Language
from agritech.schemas.assistant import AssistantResult

# (topic, keywords, answer, audio_text); order matters
FRENCH_TOPICS: List[Tuple[str, Tuple[str, ...], str, str]] = [
    (
        "irrigation",
        ("arrosage", "arroser", "eau"),
        "Pour l'arrosage, il est recommandé d'arroser tôt le matin ou en fin de journée. "
        "La quantité dépend du type de culture et du sol. En général, 20-30 litres par m² "
        "par semaine pour la plupart des cultures.",
        "Arrosez tôt le matin ou en fin de journée. 20 à 30 litres par mètre carré par semaine.",
    ),
    (
        "fertilizer",
        ("engrais", "fertilisant"),
        "Les engrais organiques comme le compost ou le fumier sont excellents. Pour les cultures, "
        "l'engrais NPK (azote, phosphore, potassium) est souvent utilisé. Appliquez avant la "
        "saison des pluies.",
        "Utilisez du compost ou du fumier. L'engrais NPK est recommandé avant la saison des pluies.",
    ),
    (
        "millet",
        ("mil", "souna"),
        "Le mil (souna) nécessite un sol bien drainé et peu d'eau. Semez au début de la saison "
        "des pluies. Récolte après 90-120 jours. Résiste bien à la sécheresse.",
        "Le mil préfère les sols drainés. Semez au début de la saison des pluies. "
        "Récolte après 3 à 4 mois.",
    ),
]

# language -> (answer, audio_text)
GENERIC_APOLOGIES: Dict[str, Tuple[str, str]] = {
    Language.FRENCH.value: (
        "Je suis désolé, le service IA est temporairement indisponible. "
        "Veuillez réessayer plus tard ou reformuler votre question.",
        "Service temporairement indisponible. Veuillez réessayer plus tard.",
    ),
    Language.WOLOF.value: (
        "Damay jàppale, service IA bi dafa amul. Jëm tay ndax nga laaj ci mbind.",
        "Service bi amul. Jëm tay.",
    ),
    Language.PULAAR.value: (
        "Mi jaabii-mo. Service IA ngonɗii. Fuɗɗito kadi.",
        "Service ngonɗii. Fuɗɗito kadi.",
    ),
}

UNSUPPORTED_LANGUAGE_ANSWER = "Service temporairement indisponible."


def match_topic(question: str) -> str | None:
    """Return the first French topic whose keyword appears in *question*."""
    lowered = question.lower()
    for topic, keywords, _answer, _audio in FRENCH_TOPICS:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return None


def fallback_response(question: str, language: str) -> AssistantResult:
    """Offline answer for *question* in *language*."""
    if language == Language.FRENCH.value:
        topic = match_topic(question)
        for name, _keywords, answer, audio_text in FRENCH_TOPICS:
            if name == topic:
                return AssistantResult(answer=answer, audio_text=audio_text)

    apology = GENERIC_APOLOGIES.get(language)
    if apology is not None:
        answer, audio_text = apology
        return AssistantResult(answer=answer, audio_text=audio_text)

    return AssistantResult(answer=UNSUPPORTED_LANGUAGE_ANSWER)
