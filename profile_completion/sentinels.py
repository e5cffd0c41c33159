"""Values that mean "nothing entered yet" for each profile field.

Select inputs on the profile forms default to placeholder options, and the
signup flow pre-fills the self introduction so the form can be submitted.
Those values must score as absent. Everything here is compared with equality
against the whitespace-stripped value.
"""

from typing import Dict, FrozenSet


# Generic "not set" options shared by every select on the profile forms.
ABSENT_VALUES: FrozenSet[str] = frozenset({
    "",
    "none",
    "no-entry",
    "noEntry",
    "選択してください",
    "未選択",
})

NATIONALITY_SENTINELS: FrozenSet[str] = ABSENT_VALUES | {"国籍を選択"}
RESIDENCE_SENTINELS: FrozenSet[str] = ABSENT_VALUES | {"都道府県を選択"}
VISIT_SCHEDULE_SENTINELS: FrozenSet[str] = ABSENT_VALUES | {"訪問予定時期を選択"}
# "undecided" is a real schedule answer but not a real companion answer
TRAVEL_COMPANION_SENTINELS: FrozenSet[str] = ABSENT_VALUES | {"undecided", "同行者を選択"}

FIELD_SENTINELS: Dict[str, FrozenSet[str]] = {
    "nickname": ABSENT_VALUES,
    "gender": ABSENT_VALUES,
    "birth_date": ABSENT_VALUES,
    "nationality": NATIONALITY_SENTINELS,
    "residence": RESIDENCE_SENTINELS,
    "self_introduction": ABSENT_VALUES,
    "occupation": ABSENT_VALUES,
    "body_type": ABSENT_VALUES,
    "marital_status": ABSENT_VALUES,
    "visit_schedule": VISIT_SCHEDULE_SENTINELS,
    "travel_companion": TRAVEL_COMPANION_SENTINELS,
}

# Either side of a language/level row
LANGUAGE_SENTINELS: FrozenSet[str] = frozenset({"", "none"})

# Boilerplate written by signup and seed data before the user writes a bio.
TEMPLATE_SELF_INTRODUCTIONS: FrozenSet[str] = frozenset({
    "後でプロフィールを詳しく書きます。",
    "よろしくお願いします！",
})

PLACEHOLDER_IMAGE_URLS: FrozenSet[str] = frozenset({
    "",
    "null",
    "undefined",
    "/placeholder.svg",
    "/placeholder-user.jpg",
    "/default-avatar.png",
})

# Inline base64 payloads are a transitional upload format, not a stored image.
INLINE_IMAGE_PREFIX = "data:image/"

# String spellings of null that come out of CSV/JSON exports.
NULL_TOKENS: FrozenSet[str] = frozenset({"nan", "NaN", "None", "null", "NULL", "undefined"})
