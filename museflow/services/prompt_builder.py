"""Prompt templates for the four content actions.

Each builder turns (text, effective options) into one provider-agnostic
prompt string.  Every template carries the same safety footer asking the
model to answer ``INSUFFICIENT_CONTEXT`` rather than invent content; the
handlers recognise that sentinel and surface it as an input error.
"""

from __future__ import annotations

from museflow.models.results import (
    IdeateOptions,
    RewriteOptions,
    SummarizeOptions,
    TranslateOptions,
)

INSUFFICIENT_CONTEXT_SENTINEL = "INSUFFICIENT_CONTEXT"

_SAFETY_GUIDELINES = f"""\
SAFETY GUIDELINES:
- Do not invent facts or make assumptions
- If the context is insufficient, respond only with '{INSUFFICIENT_CONTEXT_SENTINEL}'
- Preserve the original intent and meaning"""

# ---------------------------------------------------------------------------
# Instruction tables
# ---------------------------------------------------------------------------

_SUMMARY_LENGTH = {
    "short": "Provide a concise summary (1-2 sentences).",
    "medium": "Provide a balanced summary (3-5 sentences).",
    "long": "Provide a comprehensive summary with key details and context.",
}

_REWRITE_TONE = {
    "formal": "Use a formal, professional tone with sophisticated vocabulary.",
    "casual": "Use a casual, conversational tone that is friendly and approachable.",
    "professional": "Use a professional, business-appropriate tone that is clear and authoritative.",
    "creative": "Use a creative, engaging tone with vivid language and compelling narrative.",
    "academic": "Use an academic tone with precise terminology and scholarly language.",
    "conversational": "Use a conversational tone that feels natural and easy to read.",
}

_REWRITE_AUDIENCE = {
    "general": "Write for a general audience that values clarity and accessibility.",
    "technical": "Write for a technical audience familiar with specialized terminology.",
    "academic": "Write for an academic audience with scholarly expectations.",
    "business": "Write for a business audience focused on results and professionalism.",
    "casual": "Write for a casual audience that prefers simple, friendly language.",
}

_IDEA_TYPE = {
    "creative": "Focus on highly creative, innovative, and out-of-the-box ideas.",
    "practical": "Focus on practical, implementable ideas with clear benefits.",
    "strategic": "Focus on strategic, long-term thinking and planning ideas.",
    "innovative": "Focus on breakthrough innovations and novel approaches.",
    "mixed": "Provide a mix of creative, practical, and strategic ideas.",
}

_IDEA_FRAMING = {
    "general": "",
    "scenario": "Treat the text as a starting point and explore 'what if' scenarios that could follow from it.",
    "problem": "Treat the text as describing a problem and propose concrete solutions to it.",
    "opportunity": "Identify opportunities the text reveals and how they could be pursued.",
}

_TRANSLATE_STYLE = {
    "formal": "Use formal language and register appropriate for official or academic contexts.",
    "informal": "Use informal, conversational language that sounds natural and casual.",
    "technical": "Use precise technical terminology and maintain technical accuracy.",
    "literary": "Preserve literary style, metaphors, and artistic expression.",
    "conversational": "Use conversational tone that feels natural and easy to read.",
}

_TRANSLATE_DOMAIN = {
    "business": "Use business-appropriate language and terminology.",
    "technical": "Maintain technical accuracy and use precise technical terminology.",
    "medical": "Use accurate medical terminology and maintain clinical precision.",
    "legal": "Use precise legal terminology and maintain legal accuracy.",
    "academic": "Use scholarly language and maintain academic rigor.",
}


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_summarize_prompt(text: str, options: SummarizeOptions) -> str:
    instructions = _join(
        _SUMMARY_LENGTH[options.summary_length],
        "Also provide key points as a bulleted list." if options.include_key_points else "",
        f"Focus specifically on: {', '.join(options.focus_areas)}." if options.focus_areas else "",
    )
    return f"""Summarize the following text clearly and concisely.

INSTRUCTIONS:
{instructions}
Focus on the main points and key information while maintaining accuracy and clarity.
Remove redundant information and present the core message effectively.

{_SAFETY_GUIDELINES}

TEXT TO SUMMARIZE:
{text}

Please provide a well-structured summary that captures the essential information."""


def build_rewrite_prompt(text: str, options: RewriteOptions) -> str:
    style = options.style
    instructions = _join(
        _REWRITE_TONE[options.tone],
        "Use active voice whenever possible." if style.active_voice else "",
        "Simplify complex sentences and use clear, straightforward language." if style.simplify else "",
        "Add descriptive language and vivid details where appropriate." if style.descriptive else "",
        "Prioritize clarity and eliminate any ambiguity." if style.clarity else "",
        _REWRITE_AUDIENCE[options.audience] if options.audience else "",
        f"Focus on these improvements: {', '.join(options.improvements)}." if options.improvements else "",
    )
    return f"""Rewrite the following text to improve its clarity, flow, and impact.

INSTRUCTIONS:
{instructions}
Maintain the core message and key information while enhancing the writing quality.
Return only the rewritten text.

{_SAFETY_GUIDELINES}

ORIGINAL TEXT:
{text}

Please provide a rewritten version that is clearer, more engaging, and better structured."""


def build_ideate_prompt(text: str, options: IdeateOptions) -> str:
    instructions = _join(
        f"Generate {options.idea_count} distinct ideas.",
        _IDEA_TYPE[options.idea_type],
        _IDEA_FRAMING[options.framing],
        f"Focus on ideas relevant to the {options.domain} domain." if options.domain else "",
        f"Pay special attention to: {', '.join(options.focus_areas)}." if options.focus_areas else "",
        f"Consider these constraints: {', '.join(options.constraints)}." if options.constraints else "",
        f"Tailor ideas for a {options.audience} audience." if options.audience else "",
        f"Focus on {options.timeframe}-term implementation ideas." if options.timeframe else "",
    )
    return f"""Generate creative, innovative ideas based on the following text.

INSTRUCTIONS:
{instructions}
Each idea should be specific, actionable, and build upon the content provided.

{_SAFETY_GUIDELINES}

SOURCE TEXT:
{text}

Format each idea as follows:
Idea N: <title>
Description: <what the idea is>
Implementation:
- <step>
Benefits:
- <benefit>
Challenges:
- <challenge>
Effort: low | medium | high
Impact: low | medium | high"""


def build_translate_prompt(
    text: str,
    options: TranslateOptions,
    source_language: str,
) -> str:
    target = options.target_language
    instructions = _join(
        _TRANSLATE_STYLE.get(options.style or "", "Use clear, natural language appropriate for general communication."),
        _TRANSLATE_DOMAIN.get(options.domain or "", ""),
        "Adapt cultural references and idioms appropriately for the target language and culture."
        if options.cultural_adaptation
        else "",
        "Preserve all formatting, including line breaks, punctuation, and special characters."
        if options.preserve_formatting
        else "",
    )
    return f"""Translate the following text from {source_language} to {target}.

INSTRUCTIONS:
{instructions}
Maintain the original meaning, tone, and context while ensuring the translation reads naturally in {target}.
Preserve any technical terms, proper nouns, or specialized vocabulary appropriately.
Return only the translation.

{_SAFETY_GUIDELINES}

TEXT TO TRANSLATE:
{text}"""
