from ..extensions import db
from .base import CompanyScopedMixin, TimestampMixin

KIND_UNLOCK = "unlock"
KIND_REDEEM = "redeem"
KIND_BOOTSTRAP = "bootstrap"
KIND_GRANT = "grant"
KIND_SIGNUP = "signup"


class LedgerEntry(db.Model, CompanyScopedMixin, TimestampMixin):
    """Append-only record of every committed balance change."""
    __tablename__ = "ledger_entries"
    # one unlock per assessment, one redemption per code, one bootstrap code per company
    __table_args__ = (
        db.UniqueConstraint("company_code", "kind", "reference", name="uq_ledger_entries_company_kind_ref"),
    )

    id = db.Column(db.Integer, primary_key=True)
    delta = db.Column(db.Integer, nullable=False)
    kind = db.Column(db.String(20), nullable=False)
    reference = db.Column(db.String(64))
    balance_after = db.Column(db.Integer, nullable=False)
