from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Tuple, Type


@dataclass(frozen=True)
class Resident:
    id: str
    name: str
    address: str = ""
    gender: str = ""
    dob: str = ""
    aadhar_no: str = ""
    pan_no: str = ""
    date_of_admission: str = ""
    date_of_leaving: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class Staff:
    id: str
    employee_id: str
    name: str
    gender: str = ""
    age: float = 0
    department: str = ""
    role: str = ""
    date_of_joining: str = ""
    salary: float = 0
    working_hours: str = ""
    status: str = "Active"
    performance_rating: str = "Unrated"


@dataclass(frozen=True)
class Caretaker:
    id: str
    name: str
    age: float = 0


@dataclass(frozen=True)
class Visitor:
    id: str
    name: str
    address: str = ""
    contact_number: str = ""
    age: float = 0
    gender: str = ""
    in_time: str = ""
    out_time: str = ""
    visit_date: str = ""
    purpose: str = ""


@dataclass(frozen=True)
class Donation:
    id: str
    donor_name: str
    age: float = 0
    amount: float = 0
    payment_method: str = ""
    donation_date: str = ""
    city: str = ""


@dataclass(frozen=True)
class MedicalRecord:
    id: str
    patient_name: str
    diagnosis: str = ""
    gender: str = ""
    age: Optional[int] = None
    record_date: str = ""
    time_slot: str = ""


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    kind: str = "text"  # text | number | date | time | select
    options: Tuple[str, ...] = field(default_factory=tuple)
    nullable: bool = False


GENDER_OPTIONS = ("Female", "Male", "Other")

FORM_FIELDS: Dict[str, List[FormField]] = {
    "residents": [
        FormField("name", "Full Name"),
        FormField("address", "Address"),
        FormField("gender", "Gender", "select", GENDER_OPTIONS),
        FormField("dob", "Date of Birth", "date"),
        FormField("aadhar_no", "Aadhar Number"),
        FormField("pan_no", "PAN Number"),
        FormField("date_of_admission", "Date of Admission", "date"),
        FormField("date_of_leaving", "Date of Leaving", "date"),
        FormField("remarks", "Remarks"),
    ],
    "staff": [
        FormField("employee_id", "Employee ID"),
        FormField("name", "Full Name"),
        FormField("gender", "Gender", "select", GENDER_OPTIONS),
        FormField("age", "Age", "number"),
        FormField("department", "Department"),
        FormField("role", "Role"),
        FormField("date_of_joining", "Date of Joining", "date"),
        FormField("salary", "Monthly Salary", "number"),
        FormField("working_hours", "Working Hours"),
        FormField("status", "Status", "select", ("Active", "Retired")),
        FormField(
            "performance_rating",
            "Performance Rating",
            "select",
            ("Unrated", "Excellent", "Good", "Needs Support"),
        ),
    ],
    "caretakers": [
        FormField("name", "Full Name"),
        FormField("age", "Age", "number"),
    ],
    "visitors": [
        FormField("name", "Visitor Name"),
        FormField("address", "Address"),
        FormField("contact_number", "Contact Number"),
        FormField("age", "Age", "number"),
        FormField("gender", "Gender", "select", GENDER_OPTIONS),
        FormField("in_time", "In Time", "time"),
        FormField("out_time", "Out Time", "time"),
        FormField("visit_date", "Visit Date", "date"),
        FormField("purpose", "Purpose"),
    ],
    "donations": [
        FormField("donor_name", "Donor Name"),
        FormField("age", "Age", "number"),
        FormField("amount", "Amount (INR)", "number"),
        FormField("payment_method", "Payment Method", "select", ("Cash", "Online", "Cheque")),
        FormField("donation_date", "Donation Date", "date"),
        FormField("city", "City"),
    ],
    "medical": [
        FormField("patient_name", "Patient Name"),
        FormField("diagnosis", "Diagnosis / Notes"),
        FormField("gender", "Gender", "select", GENDER_OPTIONS),
        FormField("age", "Age", "number", nullable=True),
        FormField("record_date", "Record Date", "date"),
        FormField("time_slot", "Time Slot", "time"),
    ],
}


def field_names(record_type: Type) -> List[str]:
    return [f.name for f in fields(record_type)]
