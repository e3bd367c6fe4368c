from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Callable, Dict, List, Optional

from core.config import Settings, get_settings
from core.normalizers import (
    clean_string,
    describe_rating,
    excel_date_to_iso,
    excel_time_to_string,
    is_present,
    normalize_gender,
    split_gender_age,
    to_number,
)
from core.records import Caretaker, Donation, MedicalRecord, Resident, Staff, Visitor
from core.workbook import WorkbookCache, get_workbook_cache


logger = logging.getLogger(__name__)

RESIDENTS_SHEET = "RESIDENT DETAILS"
STAFF_SHEET = "WORKING STAFF"
CARETAKERS_SHEET = "CARETAKERS"
VISITORS_SHEET = "Visitor Management system "
DONATIONS_SHEET = "Donation_Data"
MEDICAL_SHEET = "Sheet1"

# The caretaker sheet carries the foundation banner as its header row; the
# age column under it has no header of its own, so pandas names it "Unnamed: <n>".
CARETAKER_NAME_COLUMNS = ["AASTHA FOUNDATION ", "Name", "Name "]
CARETAKER_AGE_COLUMNS = ["Age", "Age "]
UNNAMED_PREFIX = "Unnamed:"

Row = Dict[str, object]


def first_of(row: Row, *columns: str) -> object:
    """Value of the first column present in ``row`` (header spelling varies)."""
    for col in columns:
        if col in row:
            return row[col]
    return ""


def first_text(row: Row, *columns: str) -> str:
    """First non-blank cleaned value among ``columns``."""
    for col in columns:
        text = clean_string(row.get(col))
        if text:
            return text
    return ""


def _caretaker_age(row: Row) -> object:
    for col in CARETAKER_AGE_COLUMNS:
        if col in row:
            return row[col]
    unnamed = next((col for col in row if str(col).startswith(UNNAMED_PREFIX)), None)
    return "" if unnamed is None else row[unnamed]


def _time_slot(value: object) -> str:
    if isinstance(value, (time, datetime)):
        return excel_time_to_string(value)
    return clean_string(value)


def _context(cache: Optional[WorkbookCache], settings: Optional[Settings]):
    if cache is None:
        cache = get_workbook_cache()
    if settings is None:
        settings = get_settings()
    return cache, settings


def verify_source_files(settings: Optional[Settings] = None) -> Dict[str, bool]:
    if settings is None:
        settings = get_settings()
    found: Dict[str, bool] = {}
    for name, path in settings.workbook_paths().items():
        found[name] = path.exists()
        if found[name]:
            logger.info("%s file found: %s", name, path)
        else:
            logger.error("%s file NOT found: %s (data dir: %s)", name, path, settings.data_dir)
    return found


# ---------------- Record builders ----------------
def get_residents(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[Resident]:
    cache, settings = _context(cache, settings)
    try:
        rows = [row for row in cache.rows(settings.cep_path, RESIDENTS_SHEET) if is_present(row.get("NAME"))]
        residents = [
            Resident(
                id=f"resident-{idx}",
                name=clean_string(row.get("NAME")),
                address=clean_string(row.get("ADDRESS")),
                gender=normalize_gender(row.get("GENDER")),
                dob=excel_date_to_iso(row.get("DOB")),
                aadhar_no=clean_string(row.get("AADHAR NO.")),
                pan_no=clean_string(row.get("PAN")),
                date_of_admission=excel_date_to_iso(row.get("DOA")),
                date_of_leaving=excel_date_to_iso(row.get("DOL")),
                remarks=clean_string(row.get("REMARKS")),
            )
            for idx, row in enumerate(rows, start=1)
        ]
        logger.info("Processed %d residents", len(residents))
        return residents
    except Exception:
        logger.exception("Error getting residents")
        return []


def get_staff(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[Staff]:
    cache, settings = _context(cache, settings)
    try:
        rows = [row for row in cache.rows(settings.cep_path, STAFF_SHEET) if is_present(row.get("Name"))]
        staff = [
            Staff(
                id=f"staff-{idx}",
                employee_id=clean_string(row.get("Employee ID")),
                name=clean_string(row.get("Name")),
                gender=normalize_gender(row.get("Gender")),
                age=to_number(row.get("Age")),
                department=clean_string(row.get("Department")),
                role=clean_string(row.get("Role")),
                date_of_joining=excel_date_to_iso(row.get("Date of Joining")),
                salary=to_number(row.get("Monthly Salary (₹)")),
                working_hours=clean_string(row.get("Working Hours")),
                status=clean_string(row.get("Status")) or "Active",
                performance_rating=describe_rating(to_number(row.get("Performance Rating"))),
            )
            for idx, row in enumerate(rows, start=1)
        ]
        logger.info("Processed %d staff members", len(staff))
        return staff
    except Exception:
        logger.exception("Error getting staff")
        return []


def get_caretakers(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[Caretaker]:
    cache, settings = _context(cache, settings)
    try:
        candidates = [
            (first_text(row, *CARETAKER_NAME_COLUMNS), to_number(_caretaker_age(row)))
            for row in cache.rows(settings.cep_path, CARETAKERS_SHEET)
        ]
        caretakers = [
            Caretaker(id=f"caretaker-{idx}", name=name, age=age)
            for idx, (name, age) in enumerate(((n, a) for n, a in candidates if n and a), start=1)
        ]
        logger.info("Processed %d caretakers", len(caretakers))
        return caretakers
    except Exception:
        logger.exception("Error getting caretakers")
        return []


def get_visitors(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[Visitor]:
    cache, settings = _context(cache, settings)
    try:
        rows = [row for row in cache.rows(settings.cep_path, VISITORS_SHEET) if is_present(row.get("Name"))]
        visitors = [
            Visitor(
                id=f"visitor-{idx}",
                name=clean_string(row.get("Name")),
                address=clean_string(first_of(row, "Address ", "Address")),
                contact_number=clean_string(first_of(row, "Contact number ", "Contact Number")),
                age=to_number(row.get("Age")),
                gender=normalize_gender(first_of(row, "Gender ", "Gender")),
                in_time=excel_time_to_string(row.get("In time")),
                out_time=excel_time_to_string(row.get("Out time")),
                visit_date=excel_date_to_iso(row.get("Date of visit ")),
                purpose=clean_string(first_of(row, "Purpose of visit ", "Purpose")),
            )
            for idx, row in enumerate(rows, start=1)
        ]
        logger.info("Processed %d visitors", len(visitors))
        return visitors
    except Exception:
        logger.exception("Error getting visitors")
        return []


def get_donations(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[Donation]:
    cache, settings = _context(cache, settings)
    try:
        rows = [
            row
            for row in cache.rows(settings.donations_path, DONATIONS_SHEET)
            if is_present(row.get("Donation Amount (₹)"))
        ]
        donations = [
            Donation(
                id=f"donation-{idx}",
                donor_name=clean_string(row.get("Name")),
                age=to_number(row.get("Age")),
                amount=to_number(row.get("Donation Amount (₹)")),
                payment_method=clean_string(row.get("Payment Method")),
                donation_date=excel_date_to_iso(row.get("Donation Date")),
                city=clean_string(row.get("City")),
            )
            for idx, row in enumerate(rows, start=1)
        ]
        logger.info("Processed %d donations", len(donations))
        return donations
    except Exception:
        logger.exception("Error getting donations")
        return []


def get_medical_records(cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None) -> List[MedicalRecord]:
    cache, settings = _context(cache, settings)
    try:
        rows = [row for row in cache.rows(settings.medical_path, MEDICAL_SHEET) if is_present(row.get("Name"))]
        records: List[MedicalRecord] = []
        for idx, row in enumerate(rows, start=1):
            age, gender = split_gender_age(row.get("Gender/Age"))
            records.append(
                MedicalRecord(
                    id=f"medical-{idx}",
                    patient_name=clean_string(row.get("Name")),
                    diagnosis=clean_string(row.get("Diagnosis/Condition")),
                    gender=gender,
                    age=age,
                    record_date=excel_date_to_iso(row.get("Date")),
                    time_slot=_time_slot(row.get("Time")),
                )
            )
        logger.info("Processed %d medical records", len(records))
        return records
    except Exception:
        logger.exception("Error getting medical records")
        return []


Loader = Callable[..., List[object]]

LOADERS: Dict[str, Loader] = {
    "residents": get_residents,
    "staff": get_staff,
    "caretakers": get_caretakers,
    "visitors": get_visitors,
    "donations": get_donations,
    "medical": get_medical_records,
}
