from ..extensions import db
from .base import TimestampMixin


class CreditCode(db.Model, TimestampMixin):
    __tablename__ = "credit_codes"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    is_redeemed = db.Column(db.Boolean, nullable=False, default=False)
    redeemed_by = db.Column(db.String(20), db.ForeignKey("companies.code"))
    redeemed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            "code": self.code,
            "amount": self.amount,
            "is_redeemed": bool(self.is_redeemed),
            "redeemed_by": self.redeemed_by,
            "redeemed_at": self.redeemed_at.isoformat() if self.redeemed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
