from ..extensions import db
from .base import CompanyScopedMixin, TimestampMixin

TYPE_ADMINISTRATIVE = "ADMINISTRATIVE"
TYPE_FIELD = "FIELD"
CANDIDATE_TYPES = (TYPE_ADMINISTRATIVE, TYPE_FIELD)


class Candidate(db.Model, CompanyScopedMixin, TimestampMixin):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    # identity key: re-submissions under the same email update this row
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    name = db.Column(db.String(160), nullable=False)
    phone = db.Column(db.String(40))
    role = db.Column(db.String(160))
    type = db.Column(db.String(20), nullable=False, default=TYPE_ADMINISTRATIVE)
    location = db.Column(db.JSON)  # {"lat": 19.43, "lng": -99.13, "address": "..."}

    def __repr__(self) -> str:
        return f"<Candidate email={self.email!r}>"
