"""Translate action handler.

Languages may be given by English name ("Spanish") or ISO 639-1 code
("es").  When no source language is supplied it is guessed from the
text: script ranges for non-Latin languages, leading function words for
the common Latin-script ones, English otherwise.
"""

from __future__ import annotations

import re
from typing import Any

from museflow.models.actions import ActionKind
from museflow.models.results import TranslateOptions, TranslationResult
from museflow.services.handlers.base import BaseActionHandler
from museflow.services.prompt_builder import build_translate_prompt
from museflow.utils.errors import ValidationError
from museflow.utils.text_metrics import (
    clamp_score,
    confidence_to_level,
    count_paragraphs,
    count_sentences,
    count_words,
    strip_header_lines,
)

_TEMPERATURE = 0.3
_MAX_TOKENS_CAP = 3000
_HEADER_WORDS = ("translation", "translated")
_DEFAULT_LANGUAGE = "English"

SUPPORTED_LANGUAGES: dict[str, str] = {
    "English": "en",
    "Spanish": "es",
    "French": "fr",
    "German": "de",
    "Italian": "it",
    "Portuguese": "pt",
    "Russian": "ru",
    "Chinese": "zh",
    "Japanese": "ja",
    "Korean": "ko",
    "Arabic": "ar",
    "Hindi": "hi",
    "Dutch": "nl",
    "Swedish": "sv",
    "Norwegian": "no",
    "Danish": "da",
    "Finnish": "fi",
    "Polish": "pl",
    "Czech": "cs",
    "Hungarian": "hu",
    "Romanian": "ro",
    "Bulgarian": "bg",
    "Croatian": "hr",
    "Serbian": "sr",
    "Slovak": "sk",
    "Slovenian": "sl",
    "Greek": "el",
    "Turkish": "tr",
    "Hebrew": "he",
    "Thai": "th",
    "Vietnamese": "vi",
    "Indonesian": "id",
    "Malay": "ms",
    "Tagalog": "tl",
    "Ukrainian": "uk",
    "Catalan": "ca",
    "Basque": "eu",
    "Galician": "gl",
    "Welsh": "cy",
    "Irish": "ga",
    "Scottish Gaelic": "gd",
    "Icelandic": "is",
    "Maltese": "mt",
    "Latvian": "lv",
    "Lithuanian": "lt",
    "Estonian": "et",
}
_NAME_BY_CODE = {code: name for name, code in SUPPORTED_LANGUAGES.items()}

# Checked in order against the lower-cased, stripped text.  Kana is tested
# before CJK ideographs since Japanese mixes both.
_DETECTION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("English", re.compile(r"^(the|and|or|but|in|on|at|to|for|of|with|by)\s")),
    ("Spanish", re.compile(r"^(el|la|los|las|un|una|de|del|en|con|por|para)\s")),
    ("French", re.compile(r"^(le|la|les|un|une|de|du|des|en|avec|pour|par)\s")),
    ("German", re.compile(r"^(der|die|das|ein|eine|und|oder|aber|in|auf|mit|für)\s")),
    ("Italian", re.compile(r"^(il|la|lo|gli|le|un|una|di|del|della|in|con|per)\s")),
    ("Portuguese", re.compile(r"^(o|a|os|as|um|uma|de|do|da|em|com|para)\s")),
    ("Russian", re.compile(r"^[а-яё]")),
    ("Japanese", re.compile(r"[぀-ゟ゠-ヿ]")),
    ("Chinese", re.compile(r"[一-鿿]")),
    ("Korean", re.compile(r"[가-힯]")),
    ("Arabic", re.compile(r"[؀-ۿ]")),
)
_PUNCTUATION_RE = re.compile(r"[.,!?;:]")
_LATIN_RE = re.compile(r"[a-zA-Z]")


def detect_language(text: str) -> str:
    sample = text.strip().lower()
    for name, pattern in _DETECTION_PATTERNS:
        if pattern.search(sample):
            return name
    return _DEFAULT_LANGUAGE


def resolve_language(value: str) -> tuple[str, str]:
    """Return ``(name, code)`` for a language given by name or code.

    Raises:
        ValidationError: If the language is not supported.
    """
    if value in SUPPORTED_LANGUAGES:
        return value, SUPPORTED_LANGUAGES[value]
    code = value.lower()
    if code in _NAME_BY_CODE:
        return _NAME_BY_CODE[code], code
    raise ValidationError(f"Unsupported language: {value}")


def score_translation(original: str, translated: str) -> float:
    """Structural agreement between source and translation.

    0.5 base; +0.2 for a length ratio of 0.5-2.0; +0.2 when sentence
    counts differ by at most one; +0.1 for a word ratio of 0.7-1.5.
    """
    score = 0.5
    if original:
        if 0.5 <= len(translated) / len(original) <= 2.0:
            score += 0.2
    if abs(count_sentences(original) - count_sentences(translated)) <= 1:
        score += 0.2
    original_words = count_words(original)
    if original_words:
        if 0.7 <= count_words(translated) / original_words <= 1.5:
            score += 0.1
    return clamp_score(score)


def score_translation_quality(original: str, translated: str, target_language: str) -> float:
    score = 0.5
    if translated.strip():
        score += 0.2
    if target_language == "English" and _LATIN_RE.search(translated):
        score += 0.1
    if abs(count_paragraphs(original) - count_paragraphs(translated)) <= 1:
        score += 0.1
    original_punct = len(_PUNCTUATION_RE.findall(original))
    translated_punct = len(_PUNCTUATION_RE.findall(translated))
    if abs(original_punct - translated_punct) <= 2:
        score += 0.1
    return clamp_score(score)


class TranslateHandler(BaseActionHandler):
    action = ActionKind.TRANSLATE
    options_model = TranslateOptions

    def prepare(self, text: str, options: TranslateOptions) -> dict[str, Any]:
        target, target_code = resolve_language(options.target_language)
        if options.source_language:
            source, source_code = resolve_language(options.source_language)
            detected = False
        else:
            source, source_code = resolve_language(detect_language(text))
            detected = True
        # A detected source is a guess; only an explicit pair is rejected.
        if not detected and source_code == target_code:
            raise ValidationError(f"Source and target language are both {target}")
        return {
            "source_language": source,
            "source_code": source_code,
            "target_language": target,
            "target_code": target_code,
            "detected": detected,
        }

    def build_prompt(self, text: str, options: TranslateOptions, context: dict[str, Any]) -> str:
        resolved = options.model_copy(update={"target_language": context["target_language"]})
        return build_translate_prompt(text, resolved, context["source_language"])

    def sampling(self, text: str, options: TranslateOptions) -> tuple[int, float]:
        return max(1, min(len(text) * 2, _MAX_TOKENS_CAP)), _TEMPERATURE

    def parse_response(
        self,
        raw_text: str,
        text: str,
        options: TranslateOptions,
        context: dict[str, Any],
    ) -> TranslationResult:
        translated = strip_header_lines(raw_text, _HEADER_WORDS)
        confidence = score_translation(text, translated)
        return TranslationResult(
            translated_text=translated,
            original_text=text,
            source_language=context["source_language"],
            target_language=context["target_language"],
            source_language_code=context["source_code"],
            target_language_code=context["target_code"],
            source_language_detected=context["detected"],
            confidence=confidence,
            confidence_level=confidence_to_level(confidence).value,
            quality_score=score_translation_quality(text, translated, context["target_language"]),
            original_length=len(text),
            translated_length=len(translated),
            provider="",
        )
