"""Ideate action handler.

The prompt asks for a fixed block layout per idea; models follow it
loosely, so the parser is forgiving about markdown decoration, numbering
style ("1." or "Idea 1:") and whether section content is inline or on
the following lines.  A response with no recognisable idea headers is
split into paragraphs, one idea per paragraph.
"""

from __future__ import annotations

import re
from typing import Any

from museflow.models.actions import ActionKind
from museflow.models.results import Idea, IdeateOptions, IdeateResult
from museflow.services.handlers.base import BaseActionHandler
from museflow.services.prompt_builder import build_ideate_prompt
from museflow.utils.text_metrics import clamp_score, strip_list_marker

_MAX_TOKENS = 1500
_TEMPERATURE = 0.8

_IDEA_START_RE = re.compile(r"^(?:\d+\.|idea\s+\d+)", re.IGNORECASE)
_IDEA_PREFIX_RE = re.compile(r"^(?:\d+\.|idea\s+\d+\s*[:.)\-]?)\s*", re.IGNORECASE)
_MARKDOWN_CHARS = "*#- \t"
_PARAGRAPH_RE = re.compile(r"\n\s*\n")

# Header keyword -> section.  Checked in order; "difficulties" must be
# tried before "difficulty".
_SECTIONS: tuple[tuple[str, str], ...] = (
    ("description", "description"),
    ("explanation", "description"),
    ("implementation", "implementation"),
    ("steps", "implementation"),
    ("benefits", "benefits"),
    ("advantages", "benefits"),
    ("challenges", "challenges"),
    ("difficulties", "challenges"),
    ("effort", "effort"),
    ("difficulty", "effort"),
    ("impact", "impact"),
    ("effect", "impact"),
)
_SECTION_RE = re.compile(
    r"^(" + "|".join(keyword for keyword, _ in _SECTIONS) + r")\b[^:]*:?\s*(.*)$",
    re.IGNORECASE,
)
_SECTION_BY_KEYWORD = dict(_SECTIONS)
_LIST_SECTIONS = frozenset({"implementation", "benefits", "challenges"})


def level_from_text(text: str) -> str:
    lowered = text.lower()
    if "low" in lowered:
        return "low"
    if "high" in lowered:
        return "high"
    return "medium"


class _IdeaDraft:
    """Mutable accumulator for one idea while scanning lines."""

    def __init__(self, title: str) -> None:
        self.title = title
        self.description: list[str] = []
        self.lists: dict[str, list[str]] = {name: [] for name in _LIST_SECTIONS}
        self.effort: str | None = None
        self.impact: str | None = None

    def add(self, section: str, content: str) -> None:
        if not content:
            return
        if section == "description":
            self.description.append(content)
        elif section in _LIST_SECTIONS:
            item = strip_list_marker(content)
            if item:
                self.lists[section].append(item)
        elif section == "effort":
            self.effort = level_from_text(content)
        elif section == "impact":
            self.impact = level_from_text(content)

    def build(self) -> Idea:
        return Idea(
            title=self.title or "Untitled Idea",
            description=" ".join(self.description) or "No description provided",
            implementation=self.lists["implementation"],
            benefits=self.lists["benefits"],
            challenges=self.lists["challenges"],
            effort_level=self.effort or "medium",
            impact_level=self.impact or "medium",
        )

    @property
    def has_levels(self) -> bool:
        return self.effort is not None and self.impact is not None


def parse_ideas(raw_text: str) -> list[tuple[Idea, bool]]:
    """Parse ideas from a model response.

    Returns ``(idea, has_explicit_levels)`` pairs; the flag feeds the
    creativity score, which rewards ideas that rated their own effort
    and impact.
    """
    drafts: list[_IdeaDraft] = []
    current: _IdeaDraft | None = None
    section = "description"

    for raw_line in raw_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        bare = line.strip(_MARKDOWN_CHARS)

        if _IDEA_START_RE.match(bare):
            title = _IDEA_PREFIX_RE.sub("", bare, count=1).strip(_MARKDOWN_CHARS + ":")
            current = _IdeaDraft(title)
            drafts.append(current)
            section = "description"
            continue

        if current is None:
            continue

        header = _SECTION_RE.match(bare)
        if header:
            section = _SECTION_BY_KEYWORD[header.group(1).lower()]
            current.add(section, header.group(2).strip())
            continue

        current.add(section, line)

    if not drafts:
        for paragraph in _PARAGRAPH_RE.split(raw_text.strip()):
            lines = [ln.strip() for ln in paragraph.splitlines() if ln.strip()]
            if not lines:
                continue
            draft = _IdeaDraft(lines[0].strip(_MARKDOWN_CHARS))
            for line in lines[1:]:
                draft.add("description", line)
            drafts.append(draft)

    return [(draft.build(), draft.has_levels) for draft in drafts]


def score_idea(idea: Idea, has_levels: bool) -> float:
    score = 0.2
    if len(idea.title) > 10:
        score += 0.1
    if len(idea.description) > 50:
        score += 0.2
    if idea.implementation:
        score += 0.2
    if idea.benefits:
        score += 0.1
    if idea.challenges:
        score += 0.1
    if has_levels:
        score += 0.1
    return min(score, 1.0)


class IdeateHandler(BaseActionHandler):
    action = ActionKind.IDEATE
    options_model = IdeateOptions

    def build_prompt(self, text: str, options: IdeateOptions, context: dict[str, Any]) -> str:
        return build_ideate_prompt(text, options)

    def sampling(self, text: str, options: IdeateOptions) -> tuple[int, float]:
        return _MAX_TOKENS, _TEMPERATURE

    def parse_response(
        self,
        raw_text: str,
        text: str,
        options: IdeateOptions,
        context: dict[str, Any],
    ) -> IdeateResult:
        parsed = parse_ideas(raw_text)[: options.idea_count]
        ideas = [idea for idea, _ in parsed]
        creativity = (
            clamp_score(sum(score_idea(idea, levels) for idea, levels in parsed) / len(parsed))
            if parsed
            else 0.0
        )
        return IdeateResult(
            ideas=ideas,
            idea_count=len(ideas),
            creativity_score=creativity,
            domain=options.domain,
            focus_areas=list(options.focus_areas),
            constraints=list(options.constraints),
            provider="",
        )
