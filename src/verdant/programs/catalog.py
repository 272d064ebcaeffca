"""Affiliate program catalog: list programs and record application decisions."""

from __future__ import annotations

import logging
import re

from verdant.errors import InvalidParameter, ProgramNotFound, StoreError
from verdant.storage.base import Store, eq, now_iso

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "pending": "pending",
    "applied": "pending",
    "approved": "approved",
    "accepted": "approved",
    "joined": "approved",
    "rejected": "rejected",
    "declined": "rejected",
}

_NICHE_FLAGS = (
    ("renewable_energy_match", "Renewable Energy"),
    ("sustainable_living_match", "Sustainable Living"),
    ("energy_efficiency_match", "Energy Efficiency"),
    ("electric_vehicle_match", "Electric Vehicles"),
    ("green_building_match", "Green Building"),
    ("water_conservation_match", "Water Conservation"),
)


def map_application_status(application_status: str | None, status: str | None = None) -> str:
    """Collapse the catalog's status vocabulary to not_applied/pending/approved/rejected."""
    if application_status:
        return _STATUS_ALIASES.get(application_status.lower(), "not_applied")
    if status:
        return re.sub(r"[^a-z_]", "", status.lower()) or "not_applied"
    return "not_applied"


def extract_niches(program: dict) -> list[str]:
    niches = [label for flag, label in _NICHE_FLAGS if program.get(flag)]
    if not niches and program.get("primary_sector"):
        niches.append(program["primary_sector"])
    return niches or ["General"]


def _commission(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def summarize_program(program: dict) -> dict:
    return {
        "id": program.get("id"),
        "program_id": program.get("program_id"),
        "name": program.get("program_name") or "Unknown Program",
        "merchant": program.get("merchant_name") or "Unknown Merchant",
        "description": program.get("description") or "",
        "status": map_application_status(program.get("application_status"), program.get("status")),
        "relevance": round((program.get("niche_relevance_score") or 0) * 100),
        "priority_score": program.get("priority_score"),
        "region": program.get("primary_region_name") or "Unknown",
        "sector": program.get("primary_sector") or "General",
        "logo_url": program.get("logo_url"),
        "website_url": program.get("display_url"),
        "click_through_url": program.get("click_through_url"),
        "commission_rate": _commission(program.get("commission_rate")),
        "currency_code": program.get("currency_code") or "USD",
        "niches": extract_niches(program),
    }


SAMPLE_PROGRAMS = [
    {
        "program_id": 1001,
        "program_name": "EcoFlow Solar Generator Program",
        "merchant_name": "EcoFlow",
        "description": "Portable solar power solutions and backup generators.",
        "application_status": "not_applied",
        "niche_relevance_score": 0.95,
        "primary_region_name": "Global",
        "primary_sector": "Renewable Energy",
        "commission_rate": "8.5",
        "currency_code": "USD",
        "renewable_energy_match": True,
        "sustainable_living_match": True,
        "is_active": True,
        "priority_score": 95,
    },
    {
        "program_id": 1002,
        "program_name": "Tesla Solar Roof Affiliate",
        "merchant_name": "Tesla Energy",
        "description": "Integrated solar roof tiles and home battery systems.",
        "application_status": "not_applied",
        "niche_relevance_score": 0.92,
        "primary_region_name": "North America",
        "primary_sector": "Renewable Energy",
        "commission_rate": "5.0",
        "currency_code": "USD",
        "renewable_energy_match": True,
        "electric_vehicle_match": True,
        "is_active": True,
        "priority_score": 92,
    },
    {
        "program_id": 1003,
        "program_name": "Patagonia Sustainable Apparel",
        "merchant_name": "Patagonia",
        "description": "Outdoor clothing and gear made from recycled materials.",
        "application_status": "not_applied",
        "niche_relevance_score": 0.88,
        "primary_region_name": "Global",
        "primary_sector": "Sustainable Fashion",
        "commission_rate": "4.0",
        "currency_code": "USD",
        "sustainable_living_match": True,
        "is_active": True,
        "priority_score": 88,
    },
    {
        "program_id": 1004,
        "program_name": "Bluetti Power Station Program",
        "merchant_name": "Bluetti",
        "description": "Portable power stations and solar panels.",
        "application_status": "pending",
        "niche_relevance_score": 0.89,
        "primary_region_name": "Global",
        "primary_sector": "Renewable Energy",
        "commission_rate": "7.0",
        "currency_code": "USD",
        "renewable_energy_match": True,
        "energy_efficiency_match": True,
        "is_active": True,
        "priority_score": 89,
    },
    {
        "program_id": 1005,
        "program_name": "Seventh Generation Eco Products",
        "merchant_name": "Seventh Generation",
        "description": "Plant-based household cleaning and personal care products.",
        "application_status": "approved",
        "niche_relevance_score": 0.82,
        "primary_region_name": "North America",
        "primary_sector": "Sustainable Living",
        "commission_rate": "6.5",
        "currency_code": "USD",
        "sustainable_living_match": True,
        "is_active": True,
        "priority_score": 82,
        "join_date": "2024-01-15",
    },
    {
        "program_id": 1006,
        "program_name": "Goal Zero Solar Equipment",
        "merchant_name": "Goal Zero",
        "description": "Portable solar panels, power banks and solar generators.",
        "application_status": "not_applied",
        "niche_relevance_score": 0.86,
        "primary_region_name": "Global",
        "primary_sector": "Renewable Energy",
        "commission_rate": "8.0",
        "currency_code": "USD",
        "renewable_energy_match": True,
        "energy_efficiency_match": True,
        "is_active": True,
        "priority_score": 86,
    },
]


class ProgramCatalog:
    def __init__(self, store: Store) -> None:
        self._store = store

    def get_programs(self) -> dict:
        programs = self._store.select(
            "awin_programs",
            eq("is_active", True),
            order="niche_relevance_score",
            descending=True,
        )
        if not programs:
            programs = self._seed()

        summaries = [summarize_program(p) for p in programs]
        return {
            "programs": summaries,
            "summary": {
                "total": len(summaries),
                "discovered": sum(1 for p in summaries if p["status"] == "not_applied"),
                "applied": sum(1 for p in summaries if p["status"] == "pending"),
                "joined": sum(1 for p in summaries if p["status"] == "approved"),
            },
            "last_updated": now_iso(),
        }

    def apply(self, program_id: int | str | None) -> dict:
        now = now_iso()
        program = self._set_status(
            program_id,
            {"application_status": "pending", "last_applied_date": now[:10], "updated_at": now},
        )
        return {
            "program": {**self._brief(program), "status": "pending"},
            "message": f"Successfully applied to {program.get('program_name') or 'program'}",
        }

    def reject(self, program_id: int | str | None) -> dict:
        program = self._set_status(
            program_id,
            {
                "application_status": "rejected",
                "rejection_reason": "Manually rejected by user",
                "updated_at": now_iso(),
            },
        )
        return {
            "program": {**self._brief(program), "status": "rejected"},
            "message": f"Successfully rejected {program.get('program_name') or 'program'}",
        }

    def _set_status(self, program_id, values: dict) -> dict:
        if program_id in (None, ""):
            raise InvalidParameter("program_id is required")
        updated = self._store.update("awin_programs", eq("program_id", program_id), values=values)
        if not updated:
            raise ProgramNotFound(f"Program {program_id} not found")
        return updated[0]

    @staticmethod
    def _brief(program: dict) -> dict:
        return {
            "id": program.get("id"),
            "program_id": program.get("program_id"),
            "name": program.get("program_name"),
            "merchant": program.get("merchant_name"),
            "application_status": program.get("application_status"),
        }

    def _seed(self) -> list[dict]:
        logger.info("No programs found, seeding with sample data")
        try:
            inserted = self._store.insert("awin_programs", SAMPLE_PROGRAMS)
        except StoreError:
            logger.exception("Failed to seed programs")
            return []
        return sorted(inserted, key=lambda p: p.get("niche_relevance_score") or 0, reverse=True)
