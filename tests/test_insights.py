from datetime import date
from decimal import Decimal

from debt_coach.engine import simulate_plan
from debt_coach.insights import (
    compare_plans,
    extra_payment_streak,
    milestones,
    only_minimums_plan,
    payoff_order,
    plan_progress,
    plan_summary,
    total_minimum,
)

START = date(2026, 1, 15)

EXAMPLE_DEBTS = [
    {"id": "visa", "name": "Visa", "balance": 5200, "apr": 22.99, "min": 110},
    {"id": "auto", "name": "Auto Loan", "balance": 9800, "apr": 6.5, "min": 275},
    {"id": "store", "name": "Store Card", "balance": 1350, "apr": 25.49, "min": 35},
]


def test_baseline_is_zero_extra_run():
    assert only_minimums_plan(EXAMPLE_DEBTS, START) == simulate_plan(EXAMPLE_DEBTS, 0, "avalanche", START)


def test_extra_payments_save_interest_and_time():
    plan = simulate_plan(EXAMPLE_DEBTS, 400, "avalanche", START)
    baseline = only_minimums_plan(EXAMPLE_DEBTS, START)
    comparison = compare_plans(plan, baseline)
    assert comparison["interest_saved"] > 0
    assert comparison["interest_saved"] == float(baseline.total_interest - plan.total_interest)
    assert comparison["months_saved"] == baseline.months - plan.months > 0


def test_interest_saved_never_negative():
    plan = simulate_plan(EXAMPLE_DEBTS, 400, "avalanche", START)
    baseline = only_minimums_plan(EXAMPLE_DEBTS, START)
    assert compare_plans(baseline, plan)["interest_saved"] == 0


def test_streak_counts_months_with_enough_extra():
    debts = [{"id": "a", "name": "Loan", "balance": 1000, "apr": 0, "min": 100}]
    with_extra = simulate_plan(debts, 300, "avalanche", START)
    assert with_extra.months == 3
    assert extra_payment_streak(debts, with_extra) == 3
    assert extra_payment_streak(debts, simulate_plan(debts, 0, "avalanche", START)) == 0


def test_streak_resets_on_short_month():
    debts = [{"id": "a", "name": "Loan", "balance": 1000, "apr": 0, "min": 100}]
    # The minimum alone closes the loan in month 3, so no extra is paid.
    result = simulate_plan(debts, 350, "avalanche", START)
    assert [row.payments[0] for row in result.plan] == [Decimal("450"), Decimal("450"), Decimal("100")]
    assert extra_payment_streak(debts, result) == 0


def test_progress_and_milestones_for_paid_off_plan():
    result = simulate_plan(EXAMPLE_DEBTS, 400, "snowball", START)
    progress = plan_progress(EXAMPLE_DEBTS, result)
    assert progress["total_principal"] == Decimal("16350")
    assert progress["progress"] == 1
    assert all(badge["hit"] for badge in milestones(progress["progress"]))
    assert [badge["label"] for badge in milestones(progress["progress"])] == [
        "25% paid",
        "50% paid",
        "75% paid",
        "100% paid",
    ]


def test_progress_is_clamped_when_balance_grows():
    debts = [{"id": "a", "name": "Loan", "balance": 10000, "apr": 24, "min": 10}]
    progress = plan_progress(debts, simulate_plan(debts, 0, "avalanche", START))
    assert progress["progress"] == 0
    assert not any(badge["hit"] for badge in milestones(progress["progress"]))


def test_progress_without_debts():
    progress = plan_progress([], simulate_plan([], 0, "avalanche", START))
    assert progress["progress"] == 0
    assert progress["paid_principal"] == 0


def test_milestones_partial():
    hits = [badge["hit"] for badge in milestones(Decimal("0.6"))]
    assert hits == [True, True, False, False]


def test_payoff_order_puts_unpaid_debts_last():
    debts = [
        {"id": "never", "name": "Never", "balance": 10000, "apr": 24, "min": 10},
        {"id": "small", "name": "Small", "balance": 100, "apr": 0, "min": 50},
    ]
    rows = payoff_order(simulate_plan(debts, 0, "avalanche", START))
    assert [r["id"] for r in rows] == ["small", "never"]
    assert rows[0]["payoff_date"] == date(2026, 3, 15)
    assert rows[1]["payoff_date"] is None


def test_total_minimum_coerces_values():
    debts = [{"min": "110"}, {"minimum_payment": 35}, {"min": "oops"}, {}]
    assert total_minimum(debts) == Decimal("145")


def test_plan_summary_fields():
    debts = [{"id": "a", "name": "Loan", "balance": 1000, "apr": 0, "min": 100}]
    result = simulate_plan(debts, 0, "avalanche", START)
    summary = plan_summary(result, only_minimums_plan(debts, START))
    assert summary["months"] == 10
    assert summary["paid_off"] is True
    assert summary["debt_free_date"] == "2026-11-15"
    assert summary["total_interest"] == 0
    assert summary["comparison"]["interest_saved"] == 0
    assert summary["comparison"]["months_saved"] == 0


def test_plan_summary_for_unpaid_plan():
    debts = [{"id": "a", "name": "Loan", "balance": 10000, "apr": 24, "min": 10}]
    summary = plan_summary(simulate_plan(debts, 0, "avalanche", START))
    assert summary["paid_off"] is False
    assert summary["final_balance"] > 10000
    assert "comparison" not in summary
