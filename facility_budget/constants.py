"""Reference data: projects, reporting periods and the facility map."""

from __future__ import annotations

from typing import Dict, List, Tuple

PROJECTS: Tuple[str, ...] = (
    "HIV NSP BUDGET SUPPORT",
    "MALARIA CONTROL",
    "TB PROGRAM",
)

# Program key used by the facility map for each project
PROJECT_PROGRAMS: Dict[str, str] = {
    "HIV NSP BUDGET SUPPORT": "HIV",
    "MALARIA CONTROL": "MALARIA",
    "TB PROGRAM": "TB",
}

REPORTING_PERIODS: Tuple[str, ...] = (
    "JULY - SEPTEMBER / 2023",
    "OCTOBER - DECEMBER / 2023",
    "JANUARY - MARCH / 2024",
    "APRIL - JUNE / 2024",
)

PERIOD_END_DATES: Dict[str, str] = {
    "JULY - SEPTEMBER / 2023": "30/09/2023",
    "OCTOBER - DECEMBER / 2023": "31/12/2023",
    "JANUARY - MARCH / 2024": "31/03/2024",
    "APRIL - JUNE / 2024": "30/06/2024",
}

# program -> hospital -> health centers
FACILITY_PROGRAM_MAP: Dict[str, Dict[str, List[str]]] = {
    "HIV": {
        "KIGEME Hospital": ["Cyanika", "KITABI", "Ngara", "Kibilizi", "Nyarusiza", "Uwinkingi"],
        "BUTARO HOSPITAL": ["BUTARO", "Kivuye", "RUSASA", "Rugarama", "Butaro", "Burera"],
        "MURUNDA HOSPITAL": ["Criza", "Gatumba", "Gihango", "Kibingo", "Musasa", "Nyabirasi"],
    },
    "MALARIA": {
        "KIGEME Hospital": ["Cyanika", "KITABI", "Kibilizi", "Nyarusiza"],
        "BUTARO HOSPITAL": ["BUTARO", "Kivuye", "RUSASA", "Rugarama"],
        "MURUNDA HOSPITAL": ["Criza", "Gatumba", "Gihango", "Kibingo"],
    },
    # TB is only managed at hospital level
    "TB": {
        "KIGEME Hospital": [],
        "BUTARO HOSPITAL": [],
        "MURUNDA HOSPITAL": [],
    },
}

HOSPITAL_DISTRICT_MAP: Dict[str, str] = {
    "KIGEME Hospital": "Nyamagabe",
    "BUTARO HOSPITAL": "Burera",
    "MURUNDA HOSPITAL": "Rutsiro",
}


def get_all_hospitals() -> List[str]:
    return list(FACILITY_PROGRAM_MAP["HIV"].keys())


def get_hospitals_by_program(program: str) -> List[str]:
    return list(FACILITY_PROGRAM_MAP.get(program, {}).keys())


def get_facilities(hospital: str, program: str) -> List[str]:
    """Health centers reporting under ``hospital`` for ``program``."""
    return list(FACILITY_PROGRAM_MAP.get(program, {}).get(hospital, []))


def get_district(hospital: str) -> str:
    return HOSPITAL_DISTRICT_MAP.get(hospital, "")


def period_end_date(period: str) -> str:
    """End date (dd/mm/yyyy) of a reporting period, or ``""`` if unknown."""
    return PERIOD_END_DATES.get(period, "")
