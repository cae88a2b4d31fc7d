from datetime import datetime
from uuid import uuid4
from ..extensions import db
from .base import CompanyScopedMixin

STATUS_PENDING = "PENDING"
STATUS_ANALYZING = "ANALYZING"
STATUS_COMPLETED = "COMPLETED"
STATUS_ERROR = "ERROR"

# report_source values
SOURCE_MODEL = "model"
SOURCE_PARTIAL = "partial"
SOURCE_FALLBACK = "fallback"


def _new_id():
    return uuid4().hex


class Assessment(db.Model, CompanyScopedMixin):
    __tablename__ = "assessments"
    __table_args__ = (
        db.Index("ix_assessments_company_created", "company_code", "created_at"),
    )

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    # CompanyScopedMixin: company_code
    candidate_email = db.Column(db.String(254), db.ForeignKey("candidates.email"), nullable=False, index=True)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), nullable=True)
    candidate_type = db.Column(db.String(20), nullable=False)
    answers = db.Column(db.JSON, nullable=False)  # {"question": "answer text or audio url"}

    # lifecycle: PENDING -> ANALYZING -> COMPLETED | ERROR
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    report = db.Column(db.JSON, nullable=True)
    report_source = db.Column(db.String(20), nullable=True)
    error = db.Column(db.Text, nullable=True)
    is_unlocked = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    analysis_started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)

    candidate = db.relationship("Candidate", lazy="joined")
    job = db.relationship("Job", lazy="joined")

    def __repr__(self) -> str:
        return f"<Assessment id={self.id} status={self.status}>"
