from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, PersistenceError, ValidationError
from ..extensions import db
from ..models.candidate import CANDIDATE_TYPES
from ..models.company import PLAN_PREMIUM
from ..models.job import Job
from .ledger import get_company


def create_job(company_code: str, title: str, type: str, location: Optional[str] = None,
               salary: Optional[str] = None, description: Optional[str] = None,
               tags: Optional[List[str]] = None) -> Job:
    """Post a job. Only verified companies may post; PREMIUM posts are featured."""
    company = get_company(company_code)
    if not company.is_verified:
        raise ValidationError("Your company must be verified by an administrator before posting jobs.")
    title = (title or "").strip()
    job_type = (type or "").strip().upper()
    if not title:
        raise ValidationError("Job title is required")
    if job_type not in CANDIDATE_TYPES:
        raise ValidationError(f"Job type must be one of {', '.join(CANDIDATE_TYPES)}")

    job = Job(company_code=company.code, title=title, type=job_type, location=location, salary=salary,
              description=description, tags=[t for t in (tags or []) if t], active=True,
              is_featured=company.plan == PLAN_PREMIUM)
    db.session.add(job)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    current_app.logger.info('Job %s posted by %s (featured=%s)', job.id, company.code, job.is_featured)
    return job


def set_job_active(company_code: str, job_id: int, active: bool) -> Job:
    job = db.session.get(Job, job_id)
    if job is None or job.company_code != company_code:
        raise NotFoundError("Job not found")
    job.active = bool(active)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    return job


def list_jobs(company_code: str) -> List[Dict[str, Any]]:
    rows = Job.query.filter_by(company_code=company_code).order_by(Job.id.desc()).all()
    return [j.to_dict() for j in rows]
