from wtforms import StringField
from wtforms.validators import DataRequired, Email, Length, Optional
from ...utils.forms import APIForm


class CompanyRegistrationForm(APIForm):
    name = StringField("Company name", validators=[DataRequired(), Length(max=160)])
    email = StringField("Contact email", validators=[DataRequired(), Email()])
    industry = StringField("Industry", validators=[Optional(), Length(max=120)])


class RedeemForm(APIForm):
    code = StringField("Code", validators=[DataRequired(), Length(max=32)])
