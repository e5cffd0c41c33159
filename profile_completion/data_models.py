from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Cohort(str, Enum):
    """The two user groups, each with its own fixed profile checklist."""

    A = "cohort-A"  # local residents
    B = "cohort-B"  # visitors planning a trip


class LanguageSkill(BaseModel):
    """One language/level row from the profile form."""

    model_config = ConfigDict(frozen=True)

    language: str = ""
    level: str = ""


class ImageRef(BaseModel):
    """
    A profile image as the upload component currently sees it.

    An image may be committed (``url``), chosen locally but not uploaded
    (``pending_file``), or uploaded to storage without a public URL yet
    (``storage_path``).
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    url: Optional[str] = None
    pending_file: Optional[Union[bytes, str]] = None
    storage_path: Optional[str] = None
    is_main: bool = False


class ProfileSnapshot(BaseModel):
    """
    What we currently believe the user's profile contains.

    Built once by ``ingest.build_snapshot`` and read-only afterwards. Every
    field is optional; list fields are tuples and default to empty.
    """

    model_config = ConfigDict(frozen=True)

    nickname: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    birth_date: Optional[str] = None
    nationality: Optional[str] = None
    residence: Optional[str] = None
    self_introduction: Optional[str] = None
    hobbies: Tuple[str, ...] = ()
    personality: Tuple[str, ...] = ()
    language_skills: Tuple[LanguageSkill, ...] = ()
    planned_regions: Tuple[str, ...] = ()
    occupation: Optional[str] = None
    height: Optional[float] = None
    body_type: Optional[str] = None
    marital_status: Optional[str] = None
    visit_schedule: Optional[str] = None
    travel_companion: Optional[str] = None
    images: Tuple[ImageRef, ...] = ()


class ChecklistVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    present: bool


class CompletionResult(BaseModel):
    """Completeness of one profile snapshot.

    Fields:
        completed_count: Checklist items satisfied.
        total_count: Checklist size for the cohort (14 or 17).
        percentage: floor(completed_count / total_count * 100).
        has_image: Whether at least one image counts as present.
        items: Per-item verdicts in checklist order.
    """

    model_config = ConfigDict(frozen=True)

    completed_count: int = Field(ge=0)
    total_count: int = Field(gt=0)
    percentage: int = Field(ge=0, le=100, description="Floored completion percentage")
    has_image: bool
    items: Tuple[ChecklistVerdict, ...] = ()

    @property
    def missing_fields(self) -> Tuple[str, ...]:
        return tuple(item.field for item in self.items if not item.present)
