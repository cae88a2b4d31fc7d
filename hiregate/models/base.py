from ..extensions import db


class CompanyScopedMixin:
    company_code = db.Column(db.String(20), db.ForeignKey("companies.code"), nullable=False, index=True)


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
