from wtforms import IntegerField
from wtforms.validators import DataRequired, NumberRange
from ...utils.forms import APIForm


class CreditAmountForm(APIForm):
    amount = IntegerField("Credits", validators=[DataRequired(), NumberRange(min=1, max=100000)])
