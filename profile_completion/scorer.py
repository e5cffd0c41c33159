"""Profile completion scoring.

A profile snapshot is scored against the fixed checklist of its cohort. Each
checklist item looks at exactly one field and is worth one unit; there is no
weighting and no partial credit. The score is the floored percentage of
items satisfied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, FrozenSet, Iterable, Mapping, Optional, Tuple

from .data_models import ChecklistVerdict, Cohort, CompletionResult, ImageRef, LanguageSkill, ProfileSnapshot
from .sentinels import (
    FIELD_SENTINELS,
    INLINE_IMAGE_PREFIX,
    LANGUAGE_SENTINELS,
    PLACEHOLDER_IMAGE_URLS,
    TEMPLATE_SELF_INTRODUCTIONS,
)


logger = logging.getLogger(__name__)

Predicate = Callable[[ProfileSnapshot], bool]
CompletionObserver = Callable[[Cohort, CompletionResult], None]


# ---- Presence rules ----
def _has_text(value: Optional[str], sentinels: FrozenSet[str]) -> bool:
    if not isinstance(value, str):
        return False
    return value.strip() not in sentinels


def _has_items(values: Iterable) -> bool:
    return len(tuple(values or ())) > 0


def _is_positive(value: Optional[float]) -> bool:
    # bool is an int subclass; True is not an age
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0


def is_valid_language_skill(skill: LanguageSkill) -> bool:
    """Both sides of the row are filled and neither is the "none" option."""
    language = (skill.language or "").strip()
    level = (skill.level or "").strip()
    return language not in LANGUAGE_SENTINELS and level not in LANGUAGE_SENTINELS


def is_template_self_introduction(text: Optional[str]) -> bool:
    return isinstance(text, str) and text.strip() in TEMPLATE_SELF_INTRODUCTIONS


def _is_inline_payload(value: str) -> bool:
    return value.startswith(INLINE_IMAGE_PREFIX)


def _has_stored_url(image: ImageRef) -> bool:
    url = (image.url or "").strip()
    if url in PLACEHOLDER_IMAGE_URLS:
        return False
    return not _is_inline_payload(url)


def _has_pending_file(image: ImageRef) -> bool:
    pending = image.pending_file
    if isinstance(pending, str):
        pending = pending.strip()
    if pending:
        return True
    # an inline payload sitting in url is an upload that has not happened yet
    return _is_inline_payload((image.url or "").strip())


def _has_pending_path(image: ImageRef) -> bool:
    return bool((image.storage_path or "").strip())


def image_is_present(image: ImageRef) -> bool:
    """An image counts if it is stored, waiting to upload, or uploaded without a URL yet."""
    return _has_stored_url(image) or _has_pending_file(image) or _has_pending_path(image)


def has_image(images: Iterable[ImageRef]) -> bool:
    return any(image_is_present(image) for image in images or ())


def _text_check(field_name: str) -> Predicate:
    sentinels = FIELD_SENTINELS[field_name]

    def check(profile: ProfileSnapshot) -> bool:
        return _has_text(getattr(profile, field_name), sentinels)

    return check


def _self_introduction_check(profile: ProfileSnapshot) -> bool:
    text = profile.self_introduction
    if is_template_self_introduction(text):
        return False
    return _has_text(text, FIELD_SENTINELS["self_introduction"])


def _language_skills_check(profile: ProfileSnapshot) -> bool:
    return any(is_valid_language_skill(skill) for skill in profile.language_skills or ())


# ---- Checklists ----
@dataclass(frozen=True)
class ChecklistItem:
    field: str
    check: Predicate


def _item(field_name: str, check: Optional[Predicate] = None) -> ChecklistItem:
    return ChecklistItem(field=field_name, check=check or _text_check(field_name))


_NICKNAME = _item("nickname")
_GENDER = _item("gender")
_AGE = _item("age", lambda p: _is_positive(p.age))
_BIRTH_DATE = _item("birth_date")
_SELF_INTRODUCTION = _item("self_introduction", _self_introduction_check)
_HOBBIES = _item("hobbies", lambda p: _has_items(p.hobbies))
_PERSONALITY = _item("personality", lambda p: _has_items(p.personality))
_LANGUAGE_SKILLS = _item("language_skills", _language_skills_check)
_OCCUPATION = _item("occupation")
_HEIGHT = _item("height", lambda p: _is_positive(p.height))
_BODY_TYPE = _item("body_type")
_MARITAL_STATUS = _item("marital_status")
_IMAGES = _item("images", lambda p: has_image(p.images))

COHORT_A_CHECKLIST: Tuple[ChecklistItem, ...] = (
    _NICKNAME,
    _GENDER,
    _AGE,
    _BIRTH_DATE,
    _item("residence"),
    _SELF_INTRODUCTION,
    _HOBBIES,
    _PERSONALITY,
    _LANGUAGE_SKILLS,
    _OCCUPATION,
    _HEIGHT,
    _BODY_TYPE,
    _MARITAL_STATUS,
    _IMAGES,
)

COHORT_B_CHECKLIST: Tuple[ChecklistItem, ...] = (
    _NICKNAME,
    _GENDER,
    _AGE,
    _BIRTH_DATE,
    _item("nationality"),
    _SELF_INTRODUCTION,
    _HOBBIES,
    _PERSONALITY,
    _LANGUAGE_SKILLS,
    _item("planned_regions", lambda p: _has_items(p.planned_regions)),
    _OCCUPATION,
    _HEIGHT,
    _BODY_TYPE,
    _MARITAL_STATUS,
    _item("visit_schedule"),
    _item("travel_companion"),
    _IMAGES,
)

CHECKLISTS: Mapping[Cohort, Tuple[ChecklistItem, ...]] = MappingProxyType({
    Cohort.A: COHORT_A_CHECKLIST,
    Cohort.B: COHORT_B_CHECKLIST,
})

# Denominators are product constants; editing a checklist must not move them silently.
CHECKLIST_SIZES: Mapping[Cohort, int] = MappingProxyType({
    Cohort.A: 14,
    Cohort.B: 17,
})

for _cohort, _checklist in CHECKLISTS.items():
    if len(_checklist) != CHECKLIST_SIZES[_cohort]:
        raise RuntimeError(
            f"{_cohort.value} checklist has {len(_checklist)} items, expected {CHECKLIST_SIZES[_cohort]}"
        )


def checklist_for(cohort: Cohort) -> Tuple[ChecklistItem, ...]:
    return CHECKLISTS[Cohort(cohort)]


# ---- Scoring ----
def score(
    profile: ProfileSnapshot,
    cohort: Cohort,
    observer: Optional[CompletionObserver] = None,
) -> CompletionResult:
    """
    Score a profile snapshot against its cohort checklist.

    Args:
        profile: Normalized snapshot (see ``ingest.build_snapshot``).
        cohort: Which checklist to apply.
        observer: Optional callback receiving ``(cohort, result)``, e.g. for
            debug tracing. Errors raised by the observer are logged and ignored.

    Returns:
        CompletionResult with counts, floored percentage, image flag and the
        per-item verdicts in checklist order.
    """
    cohort = Cohort(cohort)
    checklist = CHECKLISTS[cohort]
    verdicts = tuple(ChecklistVerdict(field=item.field, present=bool(item.check(profile))) for item in checklist)
    completed = sum(1 for verdict in verdicts if verdict.present)
    total = len(checklist)
    result = CompletionResult(
        completed_count=completed,
        total_count=total,
        percentage=completed * 100 // total,
        has_image=has_image(profile.images),
        items=verdicts,
    )

    if observer is not None:
        try:
            observer(cohort, result)
        except Exception:
            logger.warning("Completion observer failed; result is unaffected", exc_info=True)
    return result


def logging_observer(target: Optional[logging.Logger] = None, level: int = logging.DEBUG) -> CompletionObserver:
    """Build an observer that writes one trace line per scoring call."""
    log = target or logger

    def observe(cohort: Cohort, result: CompletionResult) -> None:
        log.log(
            level,
            "%s completion %d%% (%d/%d), missing: %s",
            cohort.value,
            result.percentage,
            result.completed_count,
            result.total_count,
            ", ".join(result.missing_fields) or "-",
        )

    return observe
