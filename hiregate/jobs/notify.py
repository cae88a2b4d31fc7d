from datetime import datetime
from flask import current_app
from . import run_with_app_context
from ..extensions import db
from ..models.company import Company
from ..models.notification import Notification
from ..services.mail import send_mail


def _notify(company_code: str, kind: str, subject: str, body_html: str):
    company = Company.query.filter_by(code=company_code).first()
    if company is None:
        current_app.logger.warning('Notification %s skipped, company %s not found', kind, company_code)
        return None
    provider, status = send_mail(company.email, subject, body_html)
    n = Notification(company_code=company.code, kind=kind, provider=provider, sent_to=company.email,
                     subject=subject, body=body_html, provider_status=str(status or ""),
                     sent_at=datetime.utcnow())
    db.session.add(n)
    db.session.commit()
    return n.id


def _run_notify_registration(company_code: str):
    company = Company.query.filter_by(code=company_code).first()
    name = company.name if company else company_code
    body = (f"<p>We received the registration of <strong>{name}</strong>.</p>"
            f"<p>Your company is under review. Your access code will be: <strong>{company_code}</strong></p>")
    return _notify(company_code, "registration", "Registration received", body)


def _run_notify_verified(company_code: str):
    body = (f"<p>Your company has been verified. You can now post jobs.</p>"
            f"<p>Log in with your access code <strong>{company_code}</strong>.</p>")
    return _notify(company_code, "verified", "Your company is verified", body)


def notify_registration(company_code: str):
    return run_with_app_context(_run_notify_registration, company_code)


def notify_verified(company_code: str):
    return run_with_app_context(_run_notify_verified, company_code)
