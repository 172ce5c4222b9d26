from __future__ import annotations

from decimal import InvalidOperation
from typing import Optional

from flask import Flask, jsonify, request

from ..audit.model import AuditLogFilter
from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.decimal_utils import to_decimal
from ..common.http import api_errors, current_user_id, login_required
from ..container import Container
from ..core import constants
from ..core.enums import AuditActionType, BreakResolution, TimeType, ValidationCode, WorkerRole
from ..core.exceptions import ValidationError
from .model import TimeEntry
from .service import RULE_OVERRIDE_FIELDS


def _bad_request(message: str) -> ValidationError:
    return ValidationError(message, code=ValidationCode.INVALID_REQUEST.value)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise _bad_request("Request body must be a JSON object")
    return data


def _parse_date(value, field_name: str):
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise _bad_request(f"{field_name} must be YYYY-MM-DD")


def _parse_entry(raw, *, default_date=None) -> TimeEntry:
    if not isinstance(raw, dict):
        raise _bad_request("Each entry must be a JSON object")
    check_in = parse_iso_datetime(raw.get("check_in_time"), "check_in_time")
    if raw.get("work_date") is None and (check_in is not None or default_date is not None):
        work_date = check_in.date() if check_in is not None else default_date
    else:
        work_date = _parse_date(raw.get("work_date"), "work_date")
    return TimeEntry(
        work_date=work_date,
        check_in=check_in,
        check_out=parse_iso_datetime(raw.get("check_out_time"), "check_out_time"),
        break_start=parse_iso_datetime(raw.get("break_start_time"), "break_start_time"),
        break_end=parse_iso_datetime(raw.get("break_end_time"), "break_end_time"),
    )


def _parse_entries(raw) -> list[TimeEntry]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise _bad_request("entries must be a list")
    return [_parse_entry(e) for e in raw]


def _parse_overrides(raw) -> dict:
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise _bad_request("overrides must be an object")
    out: dict = {}
    try:
        for key in ("rate", "overtime_threshold_hours", "overtime_multiplier"):
            if raw.get(key) is not None:
                out[key] = to_decimal(raw[key])
        if raw.get("break_grace_period_minutes") is not None:
            out["break_grace_period_minutes"] = int(raw["break_grace_period_minutes"])
        if raw.get("time_type"):
            out["time_type"] = TimeType(raw["time_type"])
        if raw.get("worker_role"):
            out["worker_role"] = WorkerRole(raw["worker_role"])
    except (InvalidOperation, ValueError, TypeError):
        raise _bad_request("Invalid rate override value")
    unknown = set(raw) - RULE_OVERRIDE_FIELDS
    if unknown:
        raise _bad_request(f"Unknown rate overrides: {', '.join(sorted(unknown))}")
    return out


def _version(data: dict) -> Optional[int]:
    v = data.get("version")
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        raise _bad_request("version must be an integer")


def _timecard_id(data: dict) -> str:
    value = str(data.get("timecardId") or "").strip()
    if not value:
        raise _bad_request("timecardId is required")
    return value


def _audit_filter(args) -> AuditLogFilter:
    try:
        action_types = tuple(AuditActionType(a) for a in args.getlist("action_type"))
        limit = int(args.get("limit", constants.DEFAULT_AUDIT_LIMIT))
        offset = int(args.get("offset", 0))
    except ValueError:
        raise _bad_request("Invalid audit log filter")
    if limit <= 0 or offset < 0:
        raise _bad_request("limit must be positive and offset non-negative")
    return AuditLogFilter(
        action_types=action_types,
        field_names=tuple(args.getlist("field_name")),
        date_from=parse_iso_datetime(args.get("date_from"), "date_from"),
        date_to=parse_iso_datetime(args.get("date_to"), "date_to"),
        limit=limit,
        offset=offset,
    )


def register(app: Flask, container: Container) -> None:
    service = container.timecard_service

    @app.route("/api/timecards/calculate", methods=["POST"], endpoint="api_timecards_calculate")
    @login_required
    @api_errors
    def calculate():
        data = _json_body()
        result = service.calculate(
            _parse_entry(data.get("entry") or {}, default_date=now_local().date()),
            project_id=data.get("projectId"),
            role=data.get("role"),
            overrides=_parse_overrides(data.get("overrides")),
        )
        return jsonify(result.to_dict())

    @app.route("/api/timecards", methods=["POST"], endpoint="api_timecards_create")
    @login_required
    @api_errors
    def create():
        data = _json_body()
        project_id = str(data.get("projectId") or "").strip()
        if not project_id:
            raise _bad_request("projectId is required")
        timecard = service.create_timecard(
            actor_id=current_user_id(),
            project_id=project_id,
            entries=_parse_entries(data.get("entries")),
            user_id=data.get("userId"),
        )
        return jsonify(timecard.to_dict()), 201

    @app.route("/api/timecards/<timecard_id>", methods=["GET"], endpoint="api_timecards_get")
    @login_required
    @api_errors
    def get(timecard_id: str):
        timecard = service.get_timecard(actor_id=current_user_id(), timecard_id=timecard_id)
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/edit", methods=["POST"], endpoint="api_timecards_edit")
    @login_required
    @api_errors
    def edit():
        data = _json_body()
        result = service.edit(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            entries=_parse_entries(data.get("entries")),
            edit_comments=data.get("editComment"),
            admin_notes=data.get("adminNotes"),
            return_to_draft=bool(data.get("returnToDraft", False)),
            override_shift_limit=bool(data.get("overrideShiftLimit", False)),
            expected_version=_version(data),
        )
        return jsonify(
            {
                "timecard": result.timecard.to_dict(),
                "change_id": result.change_id,
                "changed_fields": [c.field_name for c in result.changes],
            }
        )

    @app.route("/api/timecards/submit", methods=["POST"], endpoint="api_timecards_submit")
    @login_required
    @api_errors
    def submit():
        data = _json_body()
        timecard = service.submit(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            expected_version=_version(data),
        )
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/approve", methods=["POST"], endpoint="api_timecards_approve")
    @login_required
    @api_errors
    def approve():
        data = _json_body()
        timecard = service.approve(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            expected_version=_version(data),
        )
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/reject", methods=["POST"], endpoint="api_timecards_reject")
    @login_required
    @api_errors
    def reject():
        data = _json_body()
        fields = data.get("rejectedFields") or []
        if not isinstance(fields, list):
            raise _bad_request("rejectedFields must be a list")
        timecard = service.reject(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            reason=str(data.get("reason") or ""),
            rejected_fields=[str(f) for f in fields],
            expected_version=_version(data),
        )
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/reopen", methods=["POST"], endpoint="api_timecards_reopen")
    @login_required
    @api_errors
    def reopen():
        data = _json_body()
        timecard = service.reopen(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            expected_version=_version(data),
        )
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/resolve-breaks", methods=["POST"], endpoint="api_timecards_resolve_breaks")
    @login_required
    @api_errors
    def resolve_breaks():
        data = _json_body()
        raw = data.get("resolutions")
        if not isinstance(raw, dict) or not raw:
            raise _bad_request("resolutions must be a non-empty object")
        try:
            resolutions = {_parse_date(day, "resolution date"): BreakResolution(value) for day, value in raw.items()}
        except ValueError:
            raise _bad_request("resolution must be add_break or no_break")
        timecard = service.resolve_breaks(
            actor_id=current_user_id(),
            timecard_id=_timecard_id(data),
            resolutions=resolutions,
            expected_version=_version(data),
        )
        return jsonify(timecard.to_dict())

    @app.route("/api/timecards/validate-submission", methods=["GET"], endpoint="api_timecards_validate_submission")
    @login_required
    @api_errors
    def validate_submission():
        raw_ids = request.args.get("timecardIds") or ""
        ids = [i.strip() for i in raw_ids.split(",") if i.strip()]
        check = service.validate_submission(
            actor_id=current_user_id(),
            timecard_ids=ids,
            project_id=request.args.get("projectId") or None,
        )
        return jsonify(check.to_dict())

    @app.route("/api/timecards/<timecard_id>/audit-logs", methods=["GET"], endpoint="api_timecards_audit_logs")
    @login_required
    @api_errors
    def audit_logs(timecard_id: str):
        # Visibility follows the timecard itself.
        service.get_timecard(actor_id=current_user_id(), timecard_id=timecard_id)

        audit = container.audit_service
        f = _audit_filter(request.args)
        if request.args.get("grouped") in {"1", "true", "yes"}:
            data = [g.to_dict() for g in audit.get_grouped_audit_logs(timecard_id, f)]
        else:
            data = [e.to_dict() for e in audit.get_audit_logs(timecard_id, f)]
        return jsonify(
            {
                "data": data,
                "pagination": {"limit": f.limit, "offset": f.offset, "count": len(data)},
                "statistics": audit.get_statistics(timecard_id).to_dict(),
            }
        )
