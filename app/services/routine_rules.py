"""
Rule-based routine deriver.

Turns an analysis' detected issues, the skin type and the premium flag into
morning / evening / weekly step lists. Pure and synchronous: every call folds
the rule table over fresh copies of the base templates.

Inserts always land at a fixed offset of the *template*, so when several
rules fire, the later rule's step ends up in front of the earlier one's.
Appends keep rule order. A removal applies to everything accumulated so far.
"""

import enum
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from app.schemas import IssueTag, RoutineSet, SkinType


class Slot(str, enum.Enum):
    MORNING = "morning"
    EVENING = "evening"
    WEEKLY = "weekly"


MORNING_TEMPLATE = ("cleanser", "toner", "moisturizer", "sunscreen")
EVENING_TEMPLATE = ("oil cleanser", "water cleanser", "toner", "moisturizer")
WEEKLY_TEMPLATE = ("exfoliation", "hydrating mask")

TEMPLATES = {
    Slot.MORNING: MORNING_TEMPLATE,
    Slot.EVENING: EVENING_TEMPLATE,
    Slot.WEEKLY: WEEKLY_TEMPLATE,
}

# Treatment steps go after cleanse + tone in the morning, before the
# moisturizer in the evening. Weekly steps are only ever appended.
INSERT_OFFSETS = {
    Slot.MORNING: 2,
    Slot.EVENING: 3,
}

DEFAULT_ROUTINE = {
    Slot.MORNING: (
        "Gentle cleanser",
        "Hydrating toner",
        "Lightweight moisturizer",
        "Broad-spectrum sunscreen SPF 30+",
    ),
    Slot.EVENING: (
        "Makeup remover or oil cleanser",
        "Gentle cleanser",
        "Hydrating toner",
        "Night moisturizer",
    ),
    Slot.WEEKLY: (
        "Gentle exfoliation (1-2x weekly)",
        "Hydrating mask",
    ),
}

# Matches start at a word boundary so "dry-eye" never reads as dryness.
# Inflections ("textured", "wrinkled") and "photoaging" still count.
ISSUE_PATTERNS: dict[IssueTag, str] = {
    IssueTag.ACNE: r"\bacne\b",
    IssueTag.DRYNESS: r"\bdryness",
    IssueTag.HYPERPIGMENTATION: r"\bhyperpigment\w*",
    IssueTag.TEXTURE: r"\btextur\w*",
    IssueTag.WRINKLES: r"\bwrinkl\w*",
    IssueTag.AGING: r"(?:\b|photo)aging",
    IssueTag.SENSITIVITY: r"\bsensitivit(?:y|ies)\b",
}

_ISSUE_REGEXES = {tag: re.compile(pattern, re.IGNORECASE) for tag, pattern in ISSUE_PATTERNS.items()}


def normalize_issues(detected_issues: Iterable[str | IssueTag]) -> frozenset[IssueTag]:
    """Map free-text issue labels ("mild acne", "some dryness") to well-known tags."""
    tags: set[IssueTag] = set()
    for issue in detected_issues:
        if isinstance(issue, IssueTag):
            tags.add(issue)
            continue
        for tag, regex in _ISSUE_REGEXES.items():
            if regex.search(issue):
                tags.add(tag)
    return frozenset(tags)


# ── Rule table ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RuleContext:
    issues: frozenset[IssueTag]
    skin_type: SkinType
    is_premium: bool


@dataclass(frozen=True)
class Insert:
    slot: Slot
    step: str


@dataclass(frozen=True)
class Append:
    slot: Slot
    step: str


@dataclass(frozen=True)
class RemoveContaining:
    slot: Slot
    text: str


Operation = Insert | Append | RemoveContaining


@dataclass(frozen=True)
class Rule:
    name: str
    condition: Callable[[RuleContext], bool]
    operations: tuple[Operation, ...]
    premium_only: bool = False

    def applies(self, ctx: RuleContext) -> bool:
        if self.premium_only and not ctx.is_premium:
            return False
        return self.condition(ctx)


def _has(*tags: IssueTag) -> Callable[[RuleContext], bool]:
    return lambda ctx: any(tag in ctx.issues for tag in tags)


RULES: tuple[Rule, ...] = (
    Rule(
        "acne",
        _has(IssueTag.ACNE),
        (
            Insert(Slot.MORNING, "niacinamide serum"),
            Insert(Slot.EVENING, "BHA treatment (2-3x weekly)"),
            Append(Slot.WEEKLY, "clay mask for T-zone"),
        ),
    ),
    Rule(
        "dryness",
        _has(IssueTag.DRYNESS),
        (
            Insert(Slot.MORNING, "hyaluronic acid serum"),
            Insert(Slot.EVENING, "rich hydrating serum"),
            Append(Slot.EVENING, "occlusive"),
            Append(Slot.WEEKLY, "overnight hydrating mask"),
        ),
    ),
    Rule(
        "hyperpigmentation",
        _has(IssueTag.HYPERPIGMENTATION),
        (
            Insert(Slot.MORNING, "vitamin C serum"),
            Insert(Slot.EVENING, "alpha arbutin or tranexamic acid"),
            Append(Slot.WEEKLY, "brightening mask"),
        ),
    ),
    Rule(
        "texture",
        _has(IssueTag.TEXTURE),
        (
            Insert(Slot.EVENING, "AHA treatment (2-3x weekly)"),
            Append(Slot.WEEKLY, "chemical exfoliation treatment"),
        ),
    ),
    Rule(
        "oil control",
        lambda ctx: ctx.skin_type in (SkinType.OILY, SkinType.COMBINATION),
        (
            Insert(Slot.MORNING, "oil-control toner with witch hazel"),
            Insert(Slot.EVENING, "azelaic acid treatment"),
        ),
        premium_only=True,
    ),
    Rule(
        "anti-aging",
        _has(IssueTag.WRINKLES, IssueTag.AGING),
        (
            Insert(Slot.MORNING, "peptide complex"),
            Insert(Slot.EVENING, "retinol serum (start 2x weekly)"),
            Append(Slot.WEEKLY, "firming mask"),
        ),
        premium_only=True,
    ),
    Rule(
        "sensitivity",
        _has(IssueTag.SENSITIVITY),
        (
            Insert(Slot.MORNING, "centella asiatica serum"),
            Insert(Slot.EVENING, "barrier repair concentrate"),
            RemoveContaining(Slot.WEEKLY, "exfoliation"),
            Append(Slot.WEEKLY, "cica mask"),
        ),
        premium_only=True,
    ),
)


# ── Materialization ─────────────────────────────────────────────────────────


@dataclass
class _SlotBuild:
    """A step list split around the template's insert offset."""

    head: list[str]
    inserted: list[str] = field(default_factory=list)
    tail: list[str] = field(default_factory=list)
    appended: list[str] = field(default_factory=list)

    @classmethod
    def from_template(cls, template: tuple[str, ...], offset: Optional[int]) -> "_SlotBuild":
        if offset is None:
            offset = len(template)
        return cls(head=list(template[:offset]), tail=list(template[offset:]))

    def apply(self, op: Operation) -> None:
        if isinstance(op, Insert):
            self.inserted.insert(0, op.step)
        elif isinstance(op, Append):
            self.appended.append(op.step)
        elif isinstance(op, RemoveContaining):
            for part in (self.head, self.inserted, self.tail, self.appended):
                part[:] = [step for step in part if op.text not in step]

    def steps(self) -> list[str]:
        return self.head + self.inserted + self.tail + self.appended


def parse_skin_type(value: SkinType | str | None) -> SkinType:
    """Unknown or missing skin types fall back to normal."""
    if isinstance(value, SkinType):
        return value
    try:
        return SkinType((value or "").strip().lower())
    except ValueError:
        return SkinType.NORMAL


def fired_rules(ctx: RuleContext, rules: Iterable[Rule] = RULES) -> list[Rule]:
    return [rule for rule in rules if rule.applies(ctx)]


def default_routine() -> RoutineSet:
    """Routine used when the user has no analysis yet."""
    return RoutineSet(
        morning=list(DEFAULT_ROUTINE[Slot.MORNING]),
        evening=list(DEFAULT_ROUTINE[Slot.EVENING]),
        weekly=list(DEFAULT_ROUTINE[Slot.WEEKLY]),
    )


def derive_routine(
    detected_issues: Iterable[str | IssueTag],
    skin_type: SkinType | str | None,
    is_premium: bool,
    rules: Iterable[Rule] = RULES,
) -> RoutineSet:
    """Build morning, evening and weekly steps for one analysis."""
    ctx = RuleContext(
        issues=normalize_issues(detected_issues),
        skin_type=parse_skin_type(skin_type),
        is_premium=is_premium,
    )
    builds = {
        slot: _SlotBuild.from_template(template, INSERT_OFFSETS.get(slot))
        for slot, template in TEMPLATES.items()
    }
    for rule in fired_rules(ctx, rules):
        for op in rule.operations:
            builds[op.slot].apply(op)

    return RoutineSet(
        morning=builds[Slot.MORNING].steps(),
        evening=builds[Slot.EVENING].steps(),
        weekly=builds[Slot.WEEKLY].steps(),
    )
