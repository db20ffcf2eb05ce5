import os
from datetime import date
from typing import Any, Dict, Optional
from uuid import uuid4

from flask import Flask, jsonify, render_template, request, session

from debt_coach.engine import simulate_plan
from debt_coach.formatter import plan_to_dict
from debt_coach.insights import (
    extra_payment_streak,
    milestones,
    only_minimums_plan,
    payoff_order,
    plan_progress,
    plan_summary,
    total_minimum,
)
from debt_coach.utils import new_debt_id, parse_start_date
from debt_coach_web.profile_store import (
    ProfileStore,
    clean_profile,
    create_store_from_env,
    example_profile,
)

DEBT_FIELDS = ("id", "name", "balance", "apr", "minimum_payment", "due_day")


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _form_to_profile(form) -> Dict[str, Any]:
    """Rebuild a profile from the dashboard's parallel debt field lists."""
    columns = {name: form.getlist(f"{name}[]") for name in DEBT_FIELDS}
    rows = max((len(values) for values in columns.values()), default=0)
    debts = []
    for i in range(rows):
        debt = {name: (values[i] if i < len(values) else "") for name, values in columns.items()}
        debt["name"] = debt["name"].strip()
        debts.append(debt)
    return {
        "debts": debts,
        "extra": form.get("extra", "0").strip() or "0",
        "what_if_extra": form.get("what_if_extra", "").strip() or None,
        "strategy": form.get("strategy", "avalanche"),
    }


def analyze_profile(profile: Dict[str, Any], start_date: Optional[date] = None) -> Dict[str, Any]:
    """Run the plan and minimums-only baseline for ``profile`` and derive KPIs.

    The plan pays the what-if extra; the monthly budget reflects the saved
    extra amount.
    """
    start = start_date or date.today()
    debts = profile["debts"]
    what_if_extra = profile.get("what_if_extra", profile["extra"])
    result = simulate_plan(debts, what_if_extra, profile["strategy"], start)
    baseline = only_minimums_plan(debts, start)
    progress = plan_progress(debts, result)
    minimums = total_minimum(debts)
    return {
        "summary": plan_summary(result, baseline),
        "result": plan_to_dict(result),
        "payoff_order": [
            {
                **row,
                "start_balance": float(row["start_balance"]),
                "payoff_date": row["payoff_date"].isoformat() if row["payoff_date"] else None,
            }
            for row in payoff_order(result)
        ],
        "progress": {key: float(value) for key, value in progress.items()},
        "streak": extra_payment_streak(debts, result),
        "milestones": milestones(progress["progress"]),
        "total_minimum": float(minimums),
        "monthly_budget": float(minimums) + float(profile["extra"]),
        "what_if_budget": float(minimums) + float(what_if_extra),
    }


def _start_date_from_request() -> Optional[date]:
    value = request.args.get("start_date")
    if value is None and request.is_json:
        value = (request.get_json(silent=True) or {}).get("start_date")
    return parse_start_date(value) if value else None


def create_app(store: Optional[ProfileStore] = None, config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-secret-key"),
        DATABASE_URL=os.environ.get("DEBT_COACH_DATABASE_URL"),
        LOG_LEVEL=os.environ.get("DEBT_COACH_LOG_LEVEL", "INFO"),
    )
    if config:
        app.config.update(config)
    app.logger.setLevel(app.config["LOG_LEVEL"].upper())
    profile_store = store or create_store_from_env(app.config["DATABASE_URL"])

    @app.errorhandler(ValueError)
    def handle_bad_input(exc):
        app.logger.info("Rejected request: %s", exc)
        return jsonify({"error": str(exc)}), 400

    @app.route("/", methods=["GET", "POST"])
    def index():
        error = None
        user_token = _ensure_user_token()
        profile = profile_store.load_profile(user_token)

        if request.method == "POST":
            action = request.form.get("action", "save")
            remove_id = request.form.get("remove_debt")
            try:
                if action == "reset":
                    profile_store.clear_profile(user_token)
                    profile = example_profile()
                else:
                    profile = _form_to_profile(request.form)
                    if action == "add_debt":
                        profile["debts"].append(
                            {"id": new_debt_id(), "name": "", "balance": 0, "apr": 0, "minimum_payment": 0, "due_day": 1}
                        )
                    elif remove_id:
                        profile["debts"] = [d for d in profile["debts"] if d.get("id") != remove_id]
                    profile = profile_store.save_profile(user_token, profile)
            except ValueError as exc:
                app.logger.info("Rejected profile update: %s", exc)
                error = str(exc)
                profile = profile_store.load_profile(user_token)

        return render_template(
            "index.html",
            profile=profile,
            analysis=analyze_profile(profile),
            error=error,
        )

    @app.get("/api/plan")
    def plan_for_profile():
        profile = profile_store.load_profile(_ensure_user_token())
        return jsonify(analyze_profile(profile, _start_date_from_request()))

    @app.post("/api/plan")
    def plan_for_payload():
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValueError("Request body must be JSON")
        profile = clean_profile(payload)
        return jsonify(analyze_profile(profile, _start_date_from_request()))

    @app.get("/api/profile")
    def get_profile():
        return jsonify(profile_store.load_profile(_ensure_user_token()))

    @app.put("/api/profile")
    def put_profile():
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValueError("Request body must be JSON")
        return jsonify(profile_store.save_profile(_ensure_user_token(), payload))

    @app.delete("/api/profile")
    def delete_profile():
        user_token = _ensure_user_token()
        profile_store.clear_profile(user_token)
        return jsonify(profile_store.load_profile(user_token))

    return app


if __name__ == "__main__":
    print("Starting Debt Payoff Coach web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
