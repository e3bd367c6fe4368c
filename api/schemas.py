from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    message: str


class DashboardKpis(BaseModel):
    residents: int = 0
    active_staff: int = 0
    donations_this_month: float = 0.0
    todays_visitors: int = 0


class DashboardResponse(BaseModel):
    as_of: str
    kpis: DashboardKpis
    donations_by_month: List[Dict[str, object]] = Field(default_factory=list)
    visitors_by_day: List[Dict[str, object]] = Field(default_factory=list)
    staff_by_department: List[Dict[str, object]] = Field(default_factory=list)
    charts: Dict[str, Dict[str, object]] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    backend: str
    read_only: bool
    workbooks: Optional[Dict[str, bool]] = None
