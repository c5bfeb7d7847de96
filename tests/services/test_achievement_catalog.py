import pytest
from pydantic import ValidationError

from app.core.constants import AchievementCategoryEnum, AchievementTypeEnum
from app.services.achievement_catalog import (
    DEFAULT_DEFINITIONS,
    AchievementCatalog,
    AchievementDefinition,
    default_catalog,
)


def test_default_catalog_covers_every_achievement_type():
    assert len(default_catalog) == 28
    assert set(default_catalog.types()) == {t.value for t in AchievementTypeEnum}


def test_definitions_are_grouped_by_category():
    for category in AchievementCategoryEnum:
        definitions = default_catalog.by_category(category)
        assert definitions, category
        assert all(d.category == category for d in definitions)

    progress_types = {d.type for d in default_catalog.by_category(AchievementCategoryEnum.PROGRESS)}
    assert {"LESSONS_10", "MODULE_FUNDAMENTALS"} <= progress_types


def test_lookup_by_type():
    definition = default_catalog.get("LESSONS_10")
    assert definition.points == 30
    assert definition.metric == "completed_lessons"
    assert definition.threshold == 10
    assert "LESSONS_10" in default_catalog
    assert "UNKNOWN" not in default_catalog


def test_get_unknown_type_returns_none():
    assert default_catalog.get("UNKNOWN") is None


def test_definitions_are_immutable():
    definition = default_catalog.get("FIRST_LESSON")
    with pytest.raises(ValidationError):
        definition.points = 1000


def test_catalog_mapping_cannot_be_modified():
    with pytest.raises(TypeError):
        default_catalog._definitions["FIRST_LESSON"] = None


def test_duplicate_definitions_are_rejected():
    duplicate = DEFAULT_DEFINITIONS[0]
    with pytest.raises(ValueError):
        AchievementCatalog([duplicate, duplicate])


def test_total_points_is_sum_of_definitions():
    assert default_catalog.total_points() == sum(d.points for d in DEFAULT_DEFINITIONS)


def test_definitions_validate_threshold():
    with pytest.raises(ValidationError):
        AchievementDefinition(
            type="BROKEN",
            title="Broken",
            description="Broken",
            icon="x",
            points=1,
            rarity="COMMON",
            category="SPECIAL",
            condition="never",
            metric="searches",
            threshold=0,
        )
