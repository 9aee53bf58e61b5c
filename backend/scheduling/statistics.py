"""Dashboard counts over the caller's visible appointments.

The monthly trend covers the current calendar month and the preceding ones up to
``STATS_TREND_MONTHS``. Months without appointments are left out rather than reported
as zero.
"""

from collections import Counter
from datetime import date, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.auth.caller import Caller
from backend.core import config
from backend.core.errors import ForbiddenError
from backend.models.appointment import Appointment
from backend.scheduling.scope import AppointmentScope


def shift_month_start(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month (negative goes back)."""
    month_index = day.year * 12 + (day.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def _count_by_status(query) -> dict[str, int]:
    rows = query.with_entities(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status).all()
    return {status: count for status, count in rows}


def monthly_trend(scope: AppointmentScope, db: Session, today: date, months: int) -> list[dict]:
    window_start = shift_month_start(today, -(months - 1))
    window_end = shift_month_start(today, 1)

    rows = scope.apply(db.query(Appointment.date)).filter(
        Appointment.date >= window_start,
        Appointment.date < window_end,
    ).all()
    counts = Counter((appointment_date.year, appointment_date.month) for (appointment_date,) in rows)

    return [
        {'month': f'{year}-{month:02d}', 'count': counts[(year, month)]}
        for year, month in sorted(counts)
    ]


def get_statistics(db: Session, caller: Caller) -> dict:
    if not (caller.is_doctor or caller.is_nurse):
        raise ForbiddenError('Only doctors and nurses can view appointment statistics.')

    scope = AppointmentScope.for_caller(caller)
    today = date.today()
    tomorrow = today + timedelta(days=1)
    visible = scope.apply(db.query(Appointment))

    today_by_status = _count_by_status(visible.filter(Appointment.date == today))
    upcoming = visible.filter(Appointment.date >= tomorrow).count()

    return {
        'today': {
            'total': sum(today_by_status.values()),
            'by_status': today_by_status,
        },
        'upcoming': upcoming,
        'status_breakdown': _count_by_status(visible),
        'monthly_trend': monthly_trend(scope, db, today, config.STATS_TREND_MONTHS),
    }
