"""Credit ledger: company balances, plan tier and single-use credit codes.

Balance and redeemed-flag changes are single conditional UPDATE statements
(``credits >= n``, ``is_redeemed = false``), never read-modify-write, so
concurrent debit/credit/redeem calls on one company behave as if applied one
after the other. Every committed balance change appends a ``LedgerEntry``.
"""
import random
import re
import secrets
import string
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import (
    AlreadyRedeemedError, InsufficientCreditsError, InvalidCodeError, NotFoundError,
    PersistenceError, ValidationError,
)
from ..extensions import db, rq
from ..jobs.notify import notify_registration, notify_verified
from ..models.company import Company, PLAN_FREE, PLAN_PREMIUM
from ..models.credit_code import CreditCode
from ..models.job import Job
from ..models.ledger_entry import (
    KIND_BOOTSTRAP, KIND_GRANT, KIND_REDEEM, KIND_SIGNUP, LedgerEntry,
)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 10


def _require_positive(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise ValidationError("Amount must be a positive integer")
    return amount


def balance_and_plan(company_code: str) -> Optional[Tuple[int, str]]:
    row = db.session.execute(
        db.select(Company.credits, Company.plan).where(Company.code == company_code)
    ).first()
    if row is None:
        return None
    return row[0], row[1]


def record_entry(company_code: str, delta: int, kind: str, reference: Optional[str], balance_after: int):
    db.session.add(LedgerEntry(company_code=company_code, delta=delta, kind=kind,
                               reference=reference, balance_after=balance_after))
    db.session.flush()


def apply_debit(company_code: str, amount: int) -> int:
    """Conditional decrement inside the caller's transaction. Returns the new balance."""
    res = db.session.execute(
        db.update(Company)
        .where(Company.code == company_code, Company.credits >= amount)
        .values(credits=Company.credits - amount)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        if balance_and_plan(company_code) is None:
            raise NotFoundError("Company not found")
        raise InsufficientCreditsError("Insufficient credits")
    return balance_and_plan(company_code)[0]


def apply_credit(company_code: str, amount: int) -> Tuple[int, str]:
    """Increment inside the caller's transaction; upgrades and cascades the plan.

    Returns ``(new_balance, plan)``.
    """
    res = db.session.execute(
        db.update(Company)
        .where(Company.code == company_code)
        .values(credits=Company.credits + amount)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise NotFoundError("Company not found")

    if amount >= current_app.config.get("PREMIUM_THRESHOLD", 50):
        upgraded = db.session.execute(
            db.update(Company)
            .where(Company.code == company_code, Company.plan == PLAN_FREE)
            .values(plan=PLAN_PREMIUM)
            .execution_options(synchronize_session=False)
        )
        if upgraded.rowcount == 1:
            # FREE -> PREMIUM: every active job gets featured placement
            db.session.execute(
                db.update(Job)
                .where(Job.company_code == company_code, Job.active.is_(True))
                .values(is_featured=True)
                .execution_options(synchronize_session=False)
            )
            current_app.logger.info('Company %s upgraded to PREMIUM', company_code)
    return balance_and_plan(company_code)


def debit(company_code: str, amount: int = 1, kind: str = "debit", reference: Optional[str] = None) -> int:
    _require_positive(amount)
    try:
        balance = apply_debit(company_code, amount)
        record_entry(company_code, -amount, kind, reference, balance)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    except Exception:
        db.session.rollback()
        raise
    return balance


def credit(company_code: str, amount: int, kind: str = KIND_GRANT, reference: Optional[str] = None) -> Tuple[int, str]:
    """Add credits. Returns ``(new_balance, plan)``."""
    _require_positive(amount)
    try:
        balance, plan = apply_credit(company_code, amount)
        record_entry(company_code, amount, kind, reference, balance)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    except Exception:
        db.session.rollback()
        raise
    return balance, plan


def _find_code(code: str) -> Optional[CreditCode]:
    return CreditCode.query.filter_by(code=code).first()


def redeem(company_code: str, code: str) -> Dict[str, Any]:
    """Redeem a credit code for a company.

    Database codes win over the configured bootstrap codes. The redeemed flag is
    flipped with ``WHERE is_redeemed = false`` so of two racing redeemers only
    one sees a row updated; the other gets ``AlreadyRedeemedError``.
    """
    code = (code or "").strip().upper()
    if not code:
        raise InvalidCodeError("Invalid code")

    try:
        if balance_and_plan(company_code) is None:
            raise NotFoundError("Company not found")

        row = _find_code(code)
        if row is not None:
            if row.is_redeemed:
                raise AlreadyRedeemedError("Code already used")
            amount = row.amount
            res = db.session.execute(
                db.update(CreditCode)
                .where(CreditCode.code == code, CreditCode.is_redeemed.is_(False))
                .values(is_redeemed=True, redeemed_by=company_code, redeemed_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                raise AlreadyRedeemedError("Code already used")
            kind = KIND_REDEEM
        else:
            bootstrap = {k.upper(): v for k, v in (current_app.config.get("BOOTSTRAP_CREDIT_CODES") or {}).items()}
            amount = bootstrap.get(code)
            if not amount:
                raise InvalidCodeError("Invalid code")
            kind = KIND_BOOTSTRAP

        balance, plan = apply_credit(company_code, amount)
        try:
            record_entry(company_code, amount, kind, code, balance)
        except IntegrityError:
            # bootstrap code already used by this company
            raise AlreadyRedeemedError("Code already used")
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info('Company %s redeemed %s credits', company_code, amount)
    return {"amount": amount, "new_balance": balance, "new_plan": plan}


def _random_credit_code() -> str:
    chars = [secrets.choice(CODE_ALPHABET) for _ in range(8)]
    return "".join(chars[:4]) + "-" + "".join(chars[4:])


def generate_credit_code(amount: int) -> CreditCode:
    _require_positive(amount)
    for _ in range(MAX_CODE_ATTEMPTS):
        cc = CreditCode(code=_random_credit_code(), amount=amount, is_redeemed=False)
        db.session.add(cc)
        try:
            db.session.commit()
            return cc
        except IntegrityError:
            db.session.rollback()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e
    raise PersistenceError("Could not allocate a unique credit code")


def list_credit_codes():
    return CreditCode.query.order_by(CreditCode.created_at.desc(), CreditCode.id.desc()).all()


def company_code_prefix(name: str) -> str:
    letters = re.sub(r"[^A-Z]", "", (name or "")[:3].upper())
    return letters or current_app.config.get("COMPANY_CODE_FALLBACK_PREFIX", "MEX")


def _random_company_code(name: str) -> str:
    return f"{company_code_prefix(name)}-{random.randint(1000, 9999)}"


def balance(company_code: str) -> int:
    current = balance_and_plan(company_code)
    if current is None:
        raise NotFoundError("Company not found")
    return current[0]


def get_company(company_code: str) -> Company:
    company = Company.query.filter_by(code=(company_code or "").strip()).first()
    if company is None:
        raise NotFoundError("Company not found")
    return company


def register_company(name: str, email: str, industry: Optional[str] = None) -> Company:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email:
        raise ValidationError("Company name and email are required")
    signup_credits = int(current_app.config.get("SIGNUP_CREDITS", 3))

    for _ in range(MAX_CODE_ATTEMPTS):
        company = Company(code=_random_company_code(name), name=name, email=email, industry=industry,
                          plan=PLAN_FREE, credits=signup_credits, is_verified=False)
        db.session.add(company)
        try:
            db.session.flush()
            if signup_credits:
                record_entry(company.code, signup_credits, KIND_SIGNUP, None, signup_credits)
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e
    else:
        raise PersistenceError("Could not allocate a unique access code")

    current_app.logger.info('Company %s registered, pending verification', company.code)
    rq.enqueue(notify_registration, company.code)
    return company


def verify_company(company_code: str) -> Company:
    company = get_company(company_code)
    if not company.is_verified:
        company.is_verified = True
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e
        rq.enqueue(notify_verified, company.code)
    return company
