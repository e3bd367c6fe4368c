from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.charts import bar_chart, donut_chart, line_chart
from core.formatters import format_date, month_label, parse_iso_date
from core.normalizers import to_number


Rows = Sequence[Mapping[str, Any]]


def donations_by_month(donations: Rows) -> List[Dict[str, Any]]:
    buckets: Dict[int, float] = defaultdict(float)
    for donation in donations:
        parsed = parse_iso_date(donation.get("donation_date"))
        if parsed is None:
            continue
        buckets[parsed.year * 100 + parsed.month] += to_number(donation.get("amount"))
    return [
        {"month": month_label(key // 100, key % 100), "amount": amount}
        for key, amount in sorted(buckets.items())
    ]


def visitors_by_day(visitors: Rows) -> List[Dict[str, Any]]:
    counts: Counter = Counter()
    for visitor in visitors:
        parsed = parse_iso_date(visitor.get("visit_date"))
        if parsed is not None:
            counts[parsed] += 1
    return [{"day": format_date(day.isoformat()), "visitors": n} for day, n in sorted(counts.items())]


def staff_by_department(staff: Rows) -> List[Dict[str, Any]]:
    counts: Counter = Counter(str(member.get("department") or "") for member in staff)
    return [{"department": department, "value": value} for department, value in counts.items()]


def compute_dashboard(
    residents: Rows,
    staff: Rows,
    donations: Rows,
    visitors: Rows,
    *,
    today: Optional[date] = None,
    include_charts: bool = True,
) -> Dict[str, Any]:
    today = today or date.today()

    month_total = 0.0
    for donation in donations:
        parsed = parse_iso_date(donation.get("donation_date"))
        if parsed is not None and parsed.year == today.year and parsed.month == today.month:
            month_total += to_number(donation.get("amount"))

    monthly = donations_by_month(donations)
    daily = visitors_by_day(visitors)
    departments = staff_by_department(staff)

    payload: Dict[str, Any] = {
        "as_of": today.isoformat(),
        "kpis": {
            "residents": len(residents),
            "active_staff": sum(1 for member in staff if member.get("status") == "Active"),
            "donations_this_month": month_total,
            "todays_visitors": sum(1 for v in visitors if parse_iso_date(v.get("visit_date")) == today),
        },
        "donations_by_month": monthly,
        "visitors_by_day": daily,
        "staff_by_department": departments,
        "charts": {},
    }
    if include_charts:
        payload["charts"] = {
            "monthly_donations": bar_chart(monthly, "month", "amount", x_title="Month", y_title="Amount (INR)"),
            "visitor_traffic": line_chart(daily, "day", "visitors", x_title="Day", y_title="Visitors"),
            "staff_distribution": donut_chart(departments, "department", "value", title="Department"),
        }
    return payload
