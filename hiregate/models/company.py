from flask_login import UserMixin
from ..extensions import db
from .base import TimestampMixin

PLAN_FREE = "FREE"
PLAN_PREMIUM = "PREMIUM"


class Company(db.Model, UserMixin, TimestampMixin):
    """A tenant. ``code`` doubles as the access token for the company API."""
    __tablename__ = "companies"
    __table_args__ = (
        db.CheckConstraint("credits >= 0", name="ck_companies_credits_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(254), nullable=False)
    industry = db.Column(db.String(120))
    description = db.Column(db.Text)
    logo_url = db.Column(db.String(500))

    # owned by the credit ledger
    credits = db.Column(db.Integer, nullable=False, default=0)
    plan = db.Column(db.String(10), nullable=False, default=PLAN_FREE)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)

    def get_id(self):
        return self.code

    def to_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "email": self.email,
            "industry": self.industry,
            "description": self.description,
            "logo_url": self.logo_url,
            "credits": self.credits,
            "plan": self.plan,
            "is_verified": bool(self.is_verified),
        }

    def __repr__(self) -> str:
        return f"<Company code={self.code!r} plan={self.plan}>"
