from flask import jsonify
from . import bp
from .forms import CreditAmountForm
from ...services import ledger
from ...utils.decorators import admin_required
from ...utils.forms import validate_form


@bp.post("/credit-codes")
@admin_required
def create_credit_code():
    form = validate_form(CreditAmountForm())
    cc = ledger.generate_credit_code(form.amount.data)
    return jsonify({"credit_code": cc.to_dict()}), 201


@bp.get("/credit-codes")
@admin_required
def list_credit_codes():
    return jsonify({"items": [cc.to_dict() for cc in ledger.list_credit_codes()]})


@bp.post("/companies/<code>/verify")
@admin_required
def verify_company(code):
    company = ledger.verify_company(code)
    return jsonify({"company": company.to_dict()})


@bp.post("/companies/<code>/credits")
@admin_required
def grant_credits(code):
    """Manual grant, e.g. after an offline purchase."""
    form = validate_form(CreditAmountForm())
    balance, plan = ledger.credit(code, form.amount.data)
    return jsonify({"new_balance": balance, "new_plan": plan})
