from datetime import datetime

import pytest

from remodra import plan_limits
from remodra.models import AiUsageLog, Client


@pytest.mark.parametrize(
    "plan,expected",
    [("pro", "pro"), ("BUSINESS", "business"), ("gold", "basic"), (None, "basic"), ("", "basic")],
)
def test_normalize_plan(plan, expected):
    assert plan_limits.normalize_plan(plan) == expected


def test_feature_flags():
    assert plan_limits.has_feature("business", "hasBrandedPortal") is True
    assert plan_limits.has_feature("pro", "hasTimeClock") is True
    assert plan_limits.has_feature("basic", "hasAiCostAnalysis") is False
    assert plan_limits.has_feature("business", "hasTeleporter") is False


def test_client_limit(db, make_contractor):
    contractor = make_contractor(plan="basic")
    for i in range(10):
        db.add(Client(contractor_id=contractor.id, first_name=f"C{i}", last_name="X"))
    db.commit()

    allowed, message = plan_limits.can_add_client(contractor, db)
    assert allowed is False
    assert "10 clients" in message

    contractor.plan = "business"
    assert plan_limits.can_add_client(contractor, db) == (True, None)


def test_ai_allowance_counts_current_month_only(db, make_contractor):
    contractor = make_contractor(plan="pro")
    for _ in range(10):
        db.add(AiUsageLog(contractor_id=contractor.id, feature="analyze_project", usage_month="2001-01"))
    db.commit()
    assert plan_limits.can_use_ai(contractor, db) == (True, None)

    for _ in range(10):
        plan_limits.record_ai_usage(contractor, db, "job_description")
    allowed, message = plan_limits.can_use_ai(contractor, db)
    assert allowed is False
    assert "all 10 AI requests" in message


def test_basic_plan_has_no_ai(db, make_contractor):
    allowed, message = plan_limits.can_use_ai(make_contractor(plan="basic"), db)
    assert allowed is False
    assert "not included" in message


def test_usage_stats(db, make_contractor):
    contractor = make_contractor(plan="pro")
    db.add(Client(contractor_id=contractor.id, first_name="A", last_name="B"))
    db.commit()
    plan_limits.record_ai_usage(contractor, db, "analyze_project")

    stats = plan_limits.get_usage_stats(contractor, db)
    assert stats == {
        "currentClientCount": 1,
        "maxClients": 50,
        "clientsRemaining": 49,
        "currentAiUsage": 1,
        "maxAiUsage": 10,
        "aiUsageRemaining": 9,
    }


def test_usage_month_format():
    assert plan_limits.current_usage_month(datetime(2026, 2, 3)) == "2026-02"
