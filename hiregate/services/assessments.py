"""Assessment store: the only writer of assessment status and report fields.

Lifecycle is PENDING -> ANALYZING -> COMPLETED, with ERROR reachable from
ANALYZING when the result itself could not be saved. Transitions are single
conditional UPDATEs so a record never moves backwards.
"""
from datetime import datetime, timedelta, time
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import NotFoundError, PersistenceError, ValidationError
from ..extensions import db
from ..models.assessment import (
    Assessment, STATUS_ANALYZING, STATUS_COMPLETED, STATUS_ERROR, STATUS_PENDING,
)
from ..models.candidate import CANDIDATE_TYPES, Candidate
from ..models.company import Company
from ..models.job import Job

REDACTED_EMAIL = "*****@*****"
REDACTED_PHONE = "**-****-****"
REDACTED_LOCATION = "LOCKED"
REDACTED_REPORT = "LOCKED"

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_candidate(candidate: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(candidate, dict):
        raise ValidationError("Candidate data is required")
    email = _clean(candidate.get("email")).lower()
    name = _clean(candidate.get("name"))
    company_code = _clean(candidate.get("company_code"))
    ctype = _clean(candidate.get("type")).upper()
    if not email or "@" not in email:
        raise ValidationError("Candidate email is required")
    if not name:
        raise ValidationError("Candidate name is required")
    if not company_code:
        raise ValidationError("Company code is required")
    if ctype not in CANDIDATE_TYPES:
        raise ValidationError(f"Candidate type must be one of {', '.join(CANDIDATE_TYPES)}")

    location = candidate.get("location")
    if location is not None:
        if not isinstance(location, dict):
            raise ValidationError("Location must be an object with lat and lng")
        try:
            location = {
                "lat": float(location["lat"]),
                "lng": float(location["lng"]),
                **({"address": _clean(location["address"])} if location.get("address") else {}),
            }
        except (KeyError, TypeError, ValueError):
            raise ValidationError("Location must be an object with lat and lng")

    return {
        "email": email,
        "name": name,
        "phone": _clean(candidate.get("phone")) or None,
        "role": _clean(candidate.get("role")) or None,
        "company_code": company_code,
        "type": ctype,
        "location": location,
    }


def validate_answers(answers) -> Dict[str, str]:
    if not isinstance(answers, dict) or not answers:
        raise ValidationError("Answers are required")
    out = {}
    for question, answer in answers.items():
        q = _clean(question)
        if not q:
            raise ValidationError("Every answer needs its question text")
        if answer is not None and not isinstance(answer, str):
            raise ValidationError("Answers must be text or media URLs")
        out[q] = answer or ""
    if not any(a.strip() for a in out.values()):
        raise ValidationError("Answers are required")
    return out


def _upsert_candidate(data: Dict[str, Any]) -> Candidate:
    cand = Candidate.query.filter_by(email=data["email"]).first()
    if cand is None:
        try:
            with db.session.begin_nested():
                cand = Candidate(**data)
                db.session.add(cand)
        except IntegrityError:
            # inserted by a concurrent submission under the same email
            cand = Candidate.query.filter_by(email=data["email"]).one()
    for key, value in data.items():
        setattr(cand, key, value)
    return cand


def create(candidate: Dict[str, Any], answers: Dict[str, str], job_id=None) -> str:
    """Upsert the candidate and insert a PENDING assessment. Returns its id."""
    data = validate_candidate(candidate)
    answers = validate_answers(answers)

    if job_id in ("", None):
        job_id = None
    else:
        try:
            job_id = int(job_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid job id")

    try:
        if Company.query.filter_by(code=data["company_code"]).first() is None:
            raise NotFoundError("Company not found")
        if job_id is not None:
            job = db.session.get(Job, job_id)
            if job is None:
                raise NotFoundError("Job not found")
            if job.company_code != data["company_code"]:
                raise ValidationError("Job does not belong to this company")

        _upsert_candidate(data)
        assessment_id = uuid4().hex
        db.session.add(Assessment(
            id=assessment_id,
            company_code=data["company_code"],
            candidate_email=data["email"],
            job_id=job_id,
            candidate_type=data["type"],
            answers=answers,
            status=STATUS_PENDING,
            is_unlocked=False,
        ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e

    current_app.logger.info('Assessment %s created for company %s', assessment_id, data["company_code"])
    return assessment_id


def get(assessment_id: str) -> Assessment:
    asm = db.session.get(Assessment, assessment_id)
    if asm is None:
        raise NotFoundError("Assessment not found")
    return asm


def claim_for_analysis(assessment_id: str, stale_minutes: Optional[int] = None) -> bool:
    """Move PENDING (or stale ANALYZING) to ANALYZING. False if someone else owns it."""
    if stale_minutes is None:
        stale_minutes = current_app.config.get("STALE_ANALYSIS_MINUTES", 30)
    now = datetime.utcnow()
    cutoff = now - timedelta(minutes=stale_minutes)
    stmt = (
        db.update(Assessment)
        .where(
            Assessment.id == assessment_id,
            db.or_(
                Assessment.status == STATUS_PENDING,
                db.and_(
                    Assessment.status == STATUS_ANALYZING,
                    db.or_(Assessment.analysis_started_at.is_(None), Assessment.analysis_started_at < cutoff),
                ),
            ),
        )
        .values(status=STATUS_ANALYZING, analysis_started_at=now)
        .execution_options(synchronize_session=False)
    )
    try:
        res = db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    return res.rowcount == 1


def attach_report(assessment_id: str, report: Dict[str, Any], source: str = "model") -> bool:
    """Set the report and move to COMPLETED. Repeating it overwrites (last write wins).

    Returns False when the record is in ERROR, which is terminal.
    """
    stmt = (
        db.update(Assessment)
        .where(
            Assessment.id == assessment_id,
            Assessment.status.in_((STATUS_PENDING, STATUS_ANALYZING, STATUS_COMPLETED)),
        )
        .values(report=report, report_source=source, status=STATUS_COMPLETED,
                completed_at=datetime.utcnow(), error=None)
        .execution_options(synchronize_session=False)
    )
    try:
        res = db.session.execute(stmt)
        if res.rowcount == 0:
            exists = db.session.execute(
                db.select(Assessment.id).where(Assessment.id == assessment_id)
            ).first()
            db.session.rollback()
            if exists is None:
                raise NotFoundError("Assessment not found")
            return False
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    return True


def mark_error(assessment_id: str, message: str, report=None, source=None) -> bool:
    """ANALYZING -> ERROR only; returns False for a record in any other state."""
    stmt = (
        db.update(Assessment)
        .where(
            Assessment.id == assessment_id,
            Assessment.status == STATUS_ANALYZING,
        )
        .values(status=STATUS_ERROR, error=(message or "")[:2000], report=report,
                report_source=source, completed_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    try:
        res = db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    return res.rowcount == 1


def to_read_model(asm: Assessment, include_answers: bool = False) -> Dict[str, Any]:
    """Dashboard row. Contact fields and report are placeholders until unlocked."""
    cand = asm.candidate
    unlocked = bool(asm.is_unlocked)
    row = {
        "id": asm.id,
        "company_code": asm.company_code,
        "job_id": asm.job_id,
        "job_title": asm.job.title if asm.job else "General",
        "candidate_name": cand.name if cand else "Unknown",
        "candidate_role": cand.role if cand else None,
        "candidate_type": asm.candidate_type,
        "status": asm.status,
        "is_unlocked": unlocked,
        "created_at": asm.created_at.isoformat() if asm.created_at else None,
    }
    if unlocked:
        row.update({
            "candidate_email": cand.email if cand else asm.candidate_email,
            "candidate_phone": (cand.phone if cand else None) or "Not provided",
            "candidate_location": cand.location if cand else None,
            "report": asm.report,
            "report_source": asm.report_source,
        })
        if include_answers:
            row["answers"] = asm.answers
    else:
        row.update({
            "candidate_email": REDACTED_EMAIL,
            "candidate_phone": REDACTED_PHONE,
            "candidate_location": REDACTED_LOCATION,
            "report": REDACTED_REPORT,
            "report_source": None,
        })
    return row


def list_for_company(company_code: str) -> List[Dict[str, Any]]:
    rows = (
        Assessment.query
        .filter_by(company_code=company_code)
        .order_by(Assessment.created_at.desc(), Assessment.id.desc())
        .all()
    )
    return [to_read_model(a) for a in rows]


def get_for_company(company_code: str, assessment_id: str) -> Dict[str, Any]:
    asm = db.session.get(Assessment, assessment_id)
    if asm is None or asm.company_code != company_code:
        raise NotFoundError("Assessment not found")
    return to_read_model(asm, include_answers=True)


def weekly_activity(company_code: str, window_days: int = 7, now: Optional[datetime] = None) -> List[Tuple[str, int]]:
    """Seven (day label, count) buckets ending today, zero-filled.

    Submissions since midnight of the first day of the window are counted into
    the bucket carrying their day-of-week label.
    """
    if window_days < 1:
        raise ValidationError("window_days must be at least 1")
    now = now or datetime.utcnow()
    today = now.date()
    labels = [DAY_LABELS[(today - timedelta(days=i)).weekday()] for i in range(6, -1, -1)]
    counts = {label: 0 for label in labels}

    start = datetime.combine(today - timedelta(days=window_days - 1), time.min)
    stamps = db.session.execute(
        db.select(Assessment.created_at).where(
            Assessment.company_code == company_code,
            Assessment.created_at >= start,
            Assessment.created_at <= now,
        )
    ).scalars()
    for ts in stamps:
        counts[DAY_LABELS[ts.weekday()]] += 1
    return [(label, counts[label]) for label in labels]


def list_stale(older_than_minutes: int, now: Optional[datetime] = None) -> List[str]:
    """Ids stuck in PENDING or ANALYZING for longer than the cutoff."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=older_than_minutes)
    q = db.select(Assessment.id).where(
        db.or_(
            db.and_(Assessment.status == STATUS_PENDING, Assessment.created_at < cutoff),
            db.and_(
                Assessment.status == STATUS_ANALYZING,
                db.or_(Assessment.analysis_started_at.is_(None), Assessment.analysis_started_at < cutoff),
            ),
        )
    ).order_by(Assessment.created_at)
    return list(db.session.execute(q).scalars())
