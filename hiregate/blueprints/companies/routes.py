from flask import jsonify
from flask_login import login_required, current_user
from . import bp
from .forms import CompanyRegistrationForm, RedeemForm
from ...services import ledger
from ...utils.forms import validate_form


@bp.post("")
def register_company():
    form = validate_form(CompanyRegistrationForm())
    company = ledger.register_company(form.name.data, form.email.data, form.industry.data or None)
    return jsonify({"company": company.to_dict()}), 201


@bp.get("/me")
@login_required
def me():
    return jsonify({"company": current_user.to_dict()})


@bp.post("/me/redeem")
@login_required
def redeem():
    form = validate_form(RedeemForm())
    result = ledger.redeem(current_user.get_id(), form.code.data)
    return jsonify(result)
