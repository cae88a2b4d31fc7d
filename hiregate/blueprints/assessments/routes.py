from flask import jsonify, request
from flask_login import login_required, current_user
from . import bp
from ...errors import ValidationError
from ...services import assessments as store
from ...services import pipeline
from ...services.unlock import unlock


@bp.post("")
def submit_assessment():
    """Candidate submission. Returns once the raw answers are stored; scoring runs in the background."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("A JSON body is required")
    assessment_id = pipeline.submit(payload.get("candidate"), payload.get("answers"), payload.get("job_id"))
    return jsonify({"id": assessment_id, "status": "PENDING"}), 201


@bp.get("")
@login_required
def list_assessments():
    return jsonify({"items": store.list_for_company(current_user.get_id())})


@bp.get("/activity")
@login_required
def weekly_activity():
    window_days = request.args.get("window_days", default=7, type=int)
    buckets = store.weekly_activity(current_user.get_id(), window_days=window_days)
    return jsonify({"items": [{"day": label, "count": count} for label, count in buckets]})


@bp.get("/<assessment_id>")
@login_required
def assessment_detail(assessment_id):
    return jsonify(store.get_for_company(current_user.get_id(), assessment_id))


@bp.post("/<assessment_id>/unlock")
@login_required
def unlock_assessment(assessment_id):
    result = unlock(current_user.get_id(), assessment_id)
    return jsonify(result)
