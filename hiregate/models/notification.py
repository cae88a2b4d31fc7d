from ..extensions import db
from .base import CompanyScopedMixin, TimestampMixin


class Notification(db.Model, CompanyScopedMixin, TimestampMixin):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(50))  # registration/verified
    provider = db.Column(db.String(50))  # sendgrid/log
    sent_to = db.Column(db.String(255))
    subject = db.Column(db.String(255))
    body = db.Column(db.Text)
    provider_status = db.Column(db.String(255))
    sent_at = db.Column(db.DateTime)
