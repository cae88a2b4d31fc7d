from flask_wtf import FlaskForm
from ..errors import ValidationError


class APIForm(FlaskForm):
    """FlaskForm fed from the JSON body; the API is token based, so no CSRF."""

    class Meta:
        csrf = False


def validate_form(form):
    if form.validate_on_submit():
        return form
    for field, errors in form.errors.items():
        if errors:
            raise ValidationError(f"{field}: {errors[0]}")
    raise ValidationError()
