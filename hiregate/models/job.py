from ..extensions import db
from .base import CompanyScopedMixin, TimestampMixin


class Job(db.Model, CompanyScopedMixin, TimestampMixin):
    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200))
    salary = db.Column(db.String(120))
    type = db.Column(db.String(20), nullable=False)  # ADMINISTRATIVE / FIELD
    description = db.Column(db.Text)
    tags = db.Column(db.JSON)
    active = db.Column(db.Boolean, nullable=False, default=True)
    # PREMIUM placement, maintained by the credit ledger
    is_featured = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            "id": self.id,
            "company_code": self.company_code,
            "title": self.title,
            "location": self.location,
            "salary": self.salary,
            "type": self.type,
            "description": self.description,
            "tags": self.tags or [],
            "active": bool(self.active),
            "is_featured": bool(self.is_featured),
        }
