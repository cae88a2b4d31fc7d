from flask import jsonify, request
from flask_login import login_required, current_user
from . import bp
from .forms import JobForm
from ...errors import ValidationError
from ...services import postings
from ...utils.forms import validate_form


@bp.get("")
@login_required
def list_jobs():
    return jsonify({"items": postings.list_jobs(current_user.get_id())})


@bp.post("")
@login_required
def create_job():
    form = validate_form(JobForm())
    # tags is a list; MultiDict-backed form data cannot carry it
    tags = (request.get_json(silent=True) or {}).get("tags") or []
    if not isinstance(tags, list):
        raise ValidationError("tags must be a list")
    job = postings.create_job(current_user.get_id(), form.title.data, form.type.data,
                              location=form.location.data or None, salary=form.salary.data or None,
                              description=form.description.data or None,
                              tags=[str(t) for t in tags])
    return jsonify({"job": job.to_dict()}), 201


@bp.post("/<int:job_id>/active")
@login_required
def set_active(job_id):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload.get("active"), bool):
        raise ValidationError("active must be true or false")
    job = postings.set_job_active(current_user.get_id(), job_id, payload["active"])
    return jsonify({"job": job.to_dict()})
