import pytest

from profile_completion.data_models import ImageRef, LanguageSkill, ProfileSnapshot


@pytest.fixture
def resident_profile():
    """A cohort-A profile with every checklist item filled."""
    return ProfileSnapshot(
        nickname="Hanako",
        gender="female",
        age=29,
        birth_date="1996-04-12",
        residence="東京都",
        self_introduction="茶道を十年続けています。週末は美術館巡りをしています。",
        hobbies=("tea_ceremony", "calligraphy"),
        personality=("calm",),
        language_skills=(LanguageSkill(language="ja", level="native"),),
        occupation="会社員",
        height=160,
        body_type="slim",
        marital_status="single",
        images=(ImageRef(id="1", url="https://cdn.example.com/avatars/1.jpg", is_main=True),),
    )


@pytest.fixture
def visitor_profile():
    """A cohort-B profile with every checklist item filled."""
    return ProfileSnapshot(
        nickname="Michael",
        gender="male",
        age=34,
        birth_date="1991-02-03",
        nationality="アメリカ",
        self_introduction="I love Japanese tea culture and want to learn calligraphy.",
        hobbies=("calligraphy",),
        personality=("curious", "friendly"),
        language_skills=(LanguageSkill(language="en", level="native"), LanguageSkill(language="ja", level="beginner")),
        planned_regions=("京都府", "奈良県"),
        occupation="engineer",
        height=182.5,
        body_type="average",
        marital_status="single",
        visit_schedule="spring-2026",
        travel_companion="alone",
        images=(ImageRef(id="1", storage_path="avatars/u1/avatar.jpg"),),
    )
