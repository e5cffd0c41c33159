"""Turn raw profile records into ``ProfileSnapshot`` values.

Profile data reaches the scorer from three places: the persisted record in
the profile store, the in-progress edit buffer of the profile form, and the
image list held by the upload component. Each uses its own key spellings and
its own way of saying "nothing selected". This module resolves those
differences once so the scorer only ever sees the typed snapshot.

Bad values never raise here; they are logged at DEBUG and treated as absent.
"""

from __future__ import annotations

import json
import logging
import math
import os
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .data_models import Cohort, ImageRef, LanguageSkill, ProfileSnapshot
from .sentinels import LANGUAGE_SENTINELS, NATIONALITY_SENTINELS, NULL_TOKENS
from .settings import Settings, load_settings


logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

# Semantic field -> key spellings seen in the profile store and the edit form.
# The first alias holding a non-blank value wins.
FIELD_ALIASES: Dict[str, List[str]] = {
    "nickname": ["name", "nickname"],
    "gender": ["gender"],
    "age": ["age"],
    "birth_date": ["birth_date", "date_of_birth", "birthDate"],
    "nationality": ["nationality"],
    "residence": ["residence", "prefecture"],
    "self_introduction": ["bio", "self_introduction", "selfIntroduction"],
    "hobbies": ["culture_tags", "hobbies", "interests"],
    "personality": ["personality_tags", "personality"],
    "language_skills": ["language_skills", "languageSkills"],
    "planned_regions": ["planned_prefectures", "plannedPrefectures", "planned_regions"],
    "occupation": ["occupation"],
    "height": ["height"],
    "body_type": ["body_type", "bodyType"],
    "marital_status": ["marital_status", "maritalStatus"],
    "visit_schedule": ["visit_schedule", "visitSchedule"],
    "travel_companion": ["travel_companion", "travelCompanion"],
}

# Older single-language columns, used only when language_skills is empty.
LEGACY_LANGUAGE_COLUMNS: Dict[str, str] = {
    "japanese_level": "ja",
    "english_level": "en",
}

# Fields that used to live inside the `city` JSON blob before they got columns.
CITY_FALLBACK_FIELDS = ("occupation", "height", "body_type", "marital_status")

IMAGE_KEYS: Dict[str, List[str]] = {
    "id": ["id"],
    "url": ["url", "originalUrl", "original_url", "src"],
    "pending_file": ["pending_file", "pendingFile", "file"],
    "storage_path": ["storage_path", "storagePath", "pending_path", "path"],
    "is_main": ["is_main", "isMain"],
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        s = value.strip()
        return s == "" or s in NULL_TOKENS
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _clean_value(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        s = value.strip()
        return None if s in NULL_TOKENS else s
    return value


def clean_record(record: Optional[Record]) -> Dict[str, Any]:
    """Strip keys and string values; map exported null spellings to None."""
    if not record:
        return {}
    return {
        (key.strip() if isinstance(key, str) else key): _clean_value(value)
        for key, value in record.items()
    }


def get_alias_key(record: Record, key: str) -> Optional[str]:
    for candidate in FIELD_ALIASES.get(key, []):
        if candidate in record and not _is_blank(record[candidate]):
            return candidate
    return None


def get_alias_value(record: Record, key: str) -> Any:
    col = get_alias_key(record, key)
    return record[col] if col is not None else None


def resolve_aliases(record: Record) -> Dict[str, Optional[str]]:
    return {key: get_alias_key(record, key) for key in FIELD_ALIASES}


def merge_sources(persisted: Optional[Record], edits: Optional[Record] = None) -> Dict[str, Any]:
    """Overlay the edit buffer on the persisted record, field by field.

    When the edit buffer carries any spelling of a semantic field, that value
    replaces every spelling of the field in the persisted record. An explicit
    empty edit therefore clears the stored value.
    """
    merged = clean_record(persisted)
    buffer = clean_record(edits)
    consumed = set()
    for key, aliases in FIELD_ALIASES.items():
        present = [alias for alias in aliases if alias in buffer]
        if not present:
            continue
        for alias in aliases:
            merged.pop(alias, None)
        non_blank = [alias for alias in present if not _is_blank(buffer[alias])]
        merged[key] = buffer[(non_blank or present)[0]]
        consumed.update(present)
    for key, value in buffer.items():
        if key not in consumed:
            merged[key] = value
    return merged


# ---- Lenient coercion ----
def _coerce_text(value: Any, field_name: str) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    logger.debug("Dropping %s: unexpected %s", field_name, type(value).__name__)
    return None


def _coerce_number(value: Any, field_name: str) -> Optional[float]:
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug("Dropping %s: not a number (%r)", field_name, value)
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_int(value: Any, field_name: str) -> Optional[int]:
    number = _coerce_number(value, field_name)
    return int(number) if number is not None else None


def _maybe_parse_json(value: Any) -> Any:
    """Decode JSON arrays/objects stored as strings in export cells."""
    if not isinstance(value, str):
        return value
    s = value.strip()
    if (s.startswith("[") and s.endswith("]")) or (s.startswith("{") and s.endswith("}")):
        try:
            return json.loads(s)
        except ValueError:
            return value
    return value


def _coerce_list(value: Any, field_name: str) -> Tuple[str, ...]:
    value = _maybe_parse_json(value)
    if _is_blank(value):
        return ()
    if isinstance(value, str):
        parts = value.split("|") if "|" in value else value.split(",")
        return tuple(p.strip() for p in parts if p.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(item).strip() for item in value if not _is_blank(item))
    logger.debug("Dropping %s: unexpected %s", field_name, type(value).__name__)
    return ()


def _to_language_skill(entry: Any) -> Optional[LanguageSkill]:
    if isinstance(entry, LanguageSkill):
        return entry
    if isinstance(entry, Mapping):
        language, level = entry.get("language"), entry.get("level")
    elif isinstance(entry, (list, tuple)) and len(entry) == 2:
        language, level = entry
    else:
        logger.debug("Dropping language skill row: %r", entry)
        return None
    return LanguageSkill(
        language=_coerce_text(language, "language") or "",
        level=_coerce_text(level, "level") or "",
    )


def _coerce_language_skills(value: Any) -> Tuple[LanguageSkill, ...]:
    value = _maybe_parse_json(value)
    if _is_blank(value) or not isinstance(value, (list, tuple)):
        return ()
    skills = (_to_language_skill(entry) for entry in value)
    return tuple(skill for skill in skills if skill is not None)


def _legacy_language_skills(record: Record) -> Tuple[LanguageSkill, ...]:
    skills = []
    for column, language in LEGACY_LANGUAGE_COLUMNS.items():
        level = _coerce_text(record.get(column), column)
        if level is not None and level not in LANGUAGE_SENTINELS:
            skills.append(LanguageSkill(language=language, level=level))
    return tuple(skills)


def _city_data(record: Record) -> Dict[str, Any]:
    data = _maybe_parse_json(record.get("city"))
    return dict(data) if isinstance(data, Mapping) else {}


def derive_age(birth_date: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Age in whole years for a ``YYYY-MM-DD`` birth date, or None."""
    if not isinstance(birth_date, str) or len(birth_date.strip()) < 10:
        return None
    try:
        born = date.fromisoformat(birth_date.strip()[:10])
    except ValueError:
        logger.debug("Cannot derive age from birth_date %r", birth_date)
        return None
    today = today or date.today()
    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    return age if age >= 0 else None


# ---- Images ----
def _first_present(entry: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in entry and not _is_blank(entry[key]):
            return entry[key]
    return None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _pending_file_value(value: Any) -> Any:
    """Reduce path objects and open file handles to something ImageRef accepts."""
    if value is None or isinstance(value, (str, bytes)):
        return value
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    name = getattr(value, "name", None)
    if isinstance(name, (str, bytes)) and name:
        return name
    return value


def _to_image_ref(entry: Any) -> Optional[ImageRef]:
    if isinstance(entry, ImageRef):
        return entry
    if isinstance(entry, str):
        return ImageRef(url=entry)
    if not isinstance(entry, Mapping):
        logger.debug("Dropping image entry of type %s", type(entry).__name__)
        return None
    fields = {name: _first_present(entry, keys) for name, keys in IMAGE_KEYS.items()}
    fields["is_main"] = _parse_bool(fields["is_main"])
    fields["pending_file"] = _pending_file_value(fields["pending_file"])
    if fields["id"] is not None:
        fields["id"] = str(fields["id"])
    try:
        return ImageRef(**fields)
    except ValidationError:
        logger.debug("Dropping malformed image entry: %r", entry)
        return None


def coerce_images(images: Optional[Iterable[Any]]) -> Tuple[ImageRef, ...]:
    """Wrap the upload component's image list as ``ImageRef`` values, in order."""
    if images is None or isinstance(images, (str, bytes)):
        return ()
    if isinstance(images, (Mapping, ImageRef)):
        logger.debug("Treating a single image entry as a one-image list")
        images = [images]
    refs = (_to_image_ref(entry) for entry in images)
    return tuple(ref for ref in refs if ref is not None)


def images_from_record(record: Record) -> Tuple[ImageRef, ...]:
    """Images implied by the stored record when no live image list is available."""
    photos = _coerce_list(record.get("photo_urls"), "photo_urls")
    if photos:
        return tuple(
            ImageRef(id=f"photo_{i}", url=url, is_main=(i == 0)) for i, url in enumerate(photos)
        )
    storage_path = _coerce_text(record.get("avatar_path"), "avatar_path")
    if storage_path:
        return (ImageRef(id="1", storage_path=storage_path, is_main=True),)
    for column in ("avatar_url", "profile_image", "avatarUrl"):
        url = _coerce_text(record.get(column), column)
        if url:
            return (ImageRef(id="1", url=url, is_main=True),)
    return ()


# ---- Cohorts ----
def classify_cohort(record: Optional[Record], home_nationalities: Optional[Iterable[str]] = None) -> Cohort:
    """Cohort B for male users with a foreign nationality, cohort A otherwise."""
    record = clean_record(record)
    home = {n.strip().casefold() for n in (home_nationalities or load_settings().home_nationalities)}
    gender = (_coerce_text(get_alias_value(record, "gender"), "gender") or "").casefold()
    nationality = _coerce_text(get_alias_value(record, "nationality"), "nationality")
    if gender != "male" or nationality is None or nationality in NATIONALITY_SENTINELS:
        return Cohort.A
    return Cohort.A if nationality.casefold() in home else Cohort.B


# ---- Snapshot assembly ----
def build_snapshot(
    persisted: Optional[Record] = None,
    edits: Optional[Record] = None,
    images: Optional[Iterable[Any]] = None,
    cohort: Optional[Cohort] = None,
    today: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> ProfileSnapshot:
    """
    Assemble a ``ProfileSnapshot`` from the three profile sources.

    Args:
        persisted: Record as loaded from the profile store.
        edits: Unsaved form values; they take precedence per field.
        images: Live image list from the upload component. When None, images
            are read from the record's photo/avatar columns.
        cohort: Cohort to normalize for; classified from the record when None.
        today: Reference date for deriving age from birth date.
        settings: Home nationalities used when classifying the cohort.

    Returns:
        ProfileSnapshot ready for ``scorer.score``.
    """
    settings = settings or load_settings()
    record = merge_sources(persisted, edits)
    cohort = Cohort(cohort) if cohort is not None else classify_cohort(record, settings.home_nationalities)
    city = _city_data(record)

    def raw(key: str) -> Any:
        value = get_alias_value(record, key)
        if value is None and key in CITY_FALLBACK_FIELDS:
            value = city.get(key)
        return value

    def text(key: str) -> Optional[str]:
        return _coerce_text(raw(key), key)

    language_skills = _coerce_language_skills(raw("language_skills")) or _legacy_language_skills(record)
    birth_date = text("birth_date")
    age = _coerce_int(raw("age"), "age")
    if age is None:
        age = derive_age(birth_date, today)

    return ProfileSnapshot(
        nickname=text("nickname"),
        gender=text("gender"),
        age=age,
        birth_date=birth_date,
        nationality=text("nationality"),
        # the home-region column only means "residence" for local residents
        residence=text("residence") if cohort is Cohort.A else None,
        self_introduction=text("self_introduction"),
        hobbies=_coerce_list(raw("hobbies"), "hobbies"),
        personality=_coerce_list(raw("personality"), "personality"),
        language_skills=language_skills,
        planned_regions=_coerce_list(raw("planned_regions"), "planned_regions"),
        occupation=text("occupation"),
        height=_coerce_number(raw("height"), "height"),
        body_type=text("body_type"),
        marital_status=text("marital_status"),
        visit_schedule=text("visit_schedule"),
        travel_companion=text("travel_companion"),
        images=coerce_images(images) if images is not None else images_from_record(record),
    )
