"""Tests for the affiliate program catalog."""

from __future__ import annotations

import pytest

from verdant.errors import InvalidParameter, ProgramNotFound
from verdant.programs.catalog import (
    SAMPLE_PROGRAMS,
    ProgramCatalog,
    extract_niches,
    map_application_status,
    summarize_program,
)
from verdant.storage.base import eq
from verdant.storage.sql import SqlStore


@pytest.mark.parametrize(
    "application_status, status, expected",
    [
        ("applied", None, "pending"),
        ("Joined", None, "approved"),
        ("declined", None, "rejected"),
        ("something-else", None, "not_applied"),
        (None, "Rejected!", "rejected"),
        (None, None, "not_applied"),
    ],
)
def test_map_application_status(application_status, status, expected) -> None:
    assert map_application_status(application_status, status) == expected


def test_extract_niches_from_flags_and_sector() -> None:
    assert extract_niches({"renewable_energy_match": True, "green_building_match": True}) == [
        "Renewable Energy",
        "Green Building",
    ]
    assert extract_niches({"primary_sector": "Fashion"}) == ["Fashion"]
    assert extract_niches({}) == ["General"]


def test_summarize_program_passes_priority_through() -> None:
    summary = summarize_program({**SAMPLE_PROGRAMS[0], "id": 1})

    assert summary["name"] == "EcoFlow Solar Generator Program"
    assert summary["relevance"] == 95
    assert summary["priority_score"] == 95
    assert summary["commission_rate"] == 8.5
    assert summary["status"] == "not_applied"


def test_get_programs_seeds_empty_catalog(store: SqlStore) -> None:
    catalog = ProgramCatalog(store).get_programs()

    assert catalog["summary"] == {"total": 6, "discovered": 4, "applied": 1, "joined": 1}
    relevances = [p["relevance"] for p in catalog["programs"]]
    assert relevances == sorted(relevances, reverse=True)
    assert len(store.select("awin_programs")) == 6


def test_get_programs_skips_inactive(store: SqlStore) -> None:
    store.insert(
        "awin_programs",
        [
            {"program_id": 1, "program_name": "Active", "niche_relevance_score": 0.5},
            {"program_id": 2, "program_name": "Retired", "is_active": False},
        ],
    )

    catalog = ProgramCatalog(store).get_programs()

    assert [p["name"] for p in catalog["programs"]] == ["Active"]


def test_apply_and_reject(store: SqlStore) -> None:
    catalog = ProgramCatalog(store)
    catalog.get_programs()

    applied = catalog.apply(1001)
    rejected = catalog.reject(1002)

    assert applied["program"]["status"] == "pending"
    assert applied["message"] == "Successfully applied to EcoFlow Solar Generator Program"
    assert rejected["program"]["status"] == "rejected"
    row = store.select("awin_programs", eq("program_id", 1002))[0]
    assert row["application_status"] == "rejected"
    assert row["rejection_reason"] == "Manually rejected by user"


def test_apply_requires_known_program(store: SqlStore) -> None:
    catalog = ProgramCatalog(store)

    with pytest.raises(InvalidParameter):
        catalog.apply(None)
    with pytest.raises(ProgramNotFound):
        catalog.apply(424242)
