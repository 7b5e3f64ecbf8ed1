from __future__ import annotations

import copy

import pytest

from compliancedb.apps.training import catalog
from compliancedb.apps.training.errors import NotFoundError, ValidationError
from compliancedb.apps.training.track_content import TRACK_CONTENT


def test_every_track_is_defined():
    assert set(catalog.TRAINING_TRACKS) == set(catalog.TrainingTrack)


def test_sections_are_contiguous_and_quizzes_valid():
    for definition in catalog.TRAINING_TRACKS.values():
        assert [s.number for s in definition.sections] == list(range(1, definition.total_sections + 1))
        for section in definition.sections:
            assert section.quiz
            for question in section.quiz:
                assert 0 <= question.correct_answer < len(question.options)


def test_labels_and_prefixes():
    assert catalog.track_label("manager") == "Hiring Manager"
    assert catalog.CERTIFICATE_PREFIXES[catalog.TrainingTrack.EXECUTIVE] == "EXC"


def test_parse_track_normalises_and_rejects_unknown():
    assert catalog.parse_track(" Recruiter ") is catalog.TrainingTrack.RECRUITER
    with pytest.raises(ValidationError):
        catalog.parse_track("janitor")


def test_get_section_unknown_number():
    with pytest.raises(NotFoundError):
        catalog.get_section("recruiter", 99)


def test_load_catalog_rejects_gap_in_section_numbers():
    raw = copy.deepcopy(TRACK_CONTENT)
    raw["recruiter"]["sections"][1]["number"] = 5

    with pytest.raises(catalog.CatalogError):
        catalog.load_catalog(raw)


def test_load_catalog_rejects_answer_out_of_range():
    raw = copy.deepcopy(TRACK_CONTENT)
    raw["admin"]["sections"][0]["quiz"][0]["correct_answer"] = 42

    with pytest.raises(catalog.CatalogError):
        catalog.load_catalog(raw)


def test_load_catalog_rejects_duplicate_question_ids():
    raw = copy.deepcopy(TRACK_CONTENT)
    sections = raw["manager"]["sections"]
    sections[1]["quiz"][0]["id"] = sections[0]["quiz"][0]["id"]

    with pytest.raises(catalog.CatalogError):
        catalog.load_catalog(raw)


def test_load_catalog_rejects_missing_track():
    raw = copy.deepcopy(TRACK_CONTENT)
    raw.pop("executive")

    with pytest.raises(catalog.CatalogError):
        catalog.load_catalog(raw)


def test_load_catalog_rejects_empty_quiz():
    raw = copy.deepcopy(TRACK_CONTENT)
    raw["executive"]["sections"][0]["quiz"] = []

    with pytest.raises(catalog.CatalogError):
        catalog.load_catalog(raw)
