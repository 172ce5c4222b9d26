from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.http import api_errors, current_user_id, login_required
from ..container import Container
from ..core.enums import TimecardStatus, ValidationCode
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.permissions import can_approve_timecards
from .service import CSV_FIELDS


def register(app: Flask, container: Container) -> None:
    def _status_filter():
        raw = (request.args.get("status") or "").strip()
        if not raw:
            return None
        try:
            return TimecardStatus(raw)
        except ValueError:
            raise ValidationError(f"Unknown status {raw}", code=ValidationCode.INVALID_REQUEST.value)

    def _report(project_id: str, **options):
        actor = container.profiles_repo.get_by_id(current_user_id())
        if not actor:
            raise AuthorizationError("Unknown user")
        settings = container.rate_rule_service.global_settings()
        return container.payroll_report_service.build_project_summary(
            project_id=project_id,
            actor_can_approve=can_approve_timecards(actor.role, settings),
            status=_status_filter(),
            **options,
        )

    @app.route("/api/projects/<project_id>/payroll", methods=["GET"], endpoint="api_project_payroll")
    @login_required
    @api_errors
    def project_payroll(project_id: str):
        data = _report(project_id)
        return jsonify({"rows": data.rows, "summary": data.summary, "truncated": data.truncated})

    @app.route("/api/projects/<project_id>/payroll.csv", methods=["GET"], endpoint="api_project_payroll_csv")
    @login_required
    @api_errors
    def project_payroll_csv(project_id: str):
        data = _report(project_id, row_limit=None)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=payroll_{project_id}.csv"},
        )
