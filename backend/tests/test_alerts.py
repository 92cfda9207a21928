from __future__ import annotations

from datetime import date, timedelta

from sukuk_tracker.domain.portfolio.enums import AlertSeverity, DistributionFrequency
from sukuk_tracker.domain.portfolio.services.alert_monitor import generate_payment_alerts, list_alerts, mark_alert_read

TODAY = date(2025, 3, 1)


def _scheduled(make_investment):
    return make_investment(
        start_date=TODAY - timedelta(days=60),
        end_date=TODAY + timedelta(days=365),
        distribution_frequency=DistributionFrequency.CUSTOM,
        custom_distributions=[
            {"due_date": TODAY - timedelta(days=5), "amount": "100"},
            {"due_date": TODAY + timedelta(days=2), "amount": "100"},
            {"due_date": TODAY + timedelta(days=6), "amount": "100"},
            {"due_date": TODAY + timedelta(days=30), "amount": "100"},
        ],
    )


def test_alerts_by_due_window(db_session, make_investment):
    _scheduled(make_investment)

    alerts = generate_payment_alerts(db_session, today=TODAY, days_before=7)

    by_title = sorted((a.title, a.severity) for a in alerts)
    assert by_title == [
        ("Late Payment Alert", AlertSeverity.ERROR),
        ("Upcoming Payment", AlertSeverity.INFO),
        ("Upcoming Payment", AlertSeverity.WARNING),
    ]
    late = next(a for a in alerts if a.severity == AlertSeverity.ERROR)
    assert "overdue by 5 days" in late.message


def test_alert_generation_is_idempotent_per_cashflow(db_session, make_investment):
    _scheduled(make_investment)
    generate_payment_alerts(db_session, today=TODAY, days_before=7)

    assert generate_payment_alerts(db_session, today=TODAY, days_before=7) == []
    # Later, the 30-day cashflow enters the window and gets its own alert.
    assert len(generate_payment_alerts(db_session, today=TODAY + timedelta(days=25), days_before=7)) == 1
    assert len(list_alerts(db_session)) == 4


def test_mark_alert_read(db_session, make_investment):
    _scheduled(make_investment)
    alert = generate_payment_alerts(db_session, today=TODAY)[0]

    assert mark_alert_read(db_session, alert_id=alert.id).read is True
    assert len(list_alerts(db_session, unread_only=True)) == 2
