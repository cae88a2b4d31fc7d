"""Unlock gate: one credit reveals one assessment to its company.

The unlock flag flip and the debit share a transaction. The flag is flipped
with ``WHERE is_unlocked = false`` first, so of two concurrent unlocks of the
same assessment only one reaches the debit; a failed debit rolls the flag back.
"""
from typing import Any, Dict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, PersistenceError
from ..extensions import db
from ..models.assessment import Assessment
from ..models.ledger_entry import KIND_UNLOCK
from .ledger import apply_debit, balance_and_plan, record_entry


def unlock(company_code: str, assessment_id: str) -> Dict[str, Any]:
    try:
        owner = db.session.execute(
            db.select(Assessment.company_code).where(Assessment.id == assessment_id)
        ).scalar()
        if owner is None or owner != company_code:
            raise NotFoundError("Assessment not found")

        res = db.session.execute(
            db.update(Assessment)
            .where(
                Assessment.id == assessment_id,
                Assessment.company_code == company_code,
                Assessment.is_unlocked.is_(False),
            )
            .values(is_unlocked=True)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            db.session.rollback()
            current = balance_and_plan(company_code)
            if current is None:
                raise NotFoundError("Company not found")
            return {"already_unlocked": True, "new_balance": current[0]}

        balance = apply_debit(company_code, 1)
        record_entry(company_code, -1, KIND_UNLOCK, assessment_id, balance)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError() from e
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info('Assessment %s unlocked by %s, balance %s', assessment_id, company_code, balance)
    return {"already_unlocked": False, "new_balance": balance}
