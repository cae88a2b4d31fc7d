from wtforms import SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional
from ...models.candidate import CANDIDATE_TYPES
from ...utils.forms import APIForm


class JobForm(APIForm):
    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    type = SelectField("Profile", choices=[(t, t) for t in CANDIDATE_TYPES])
    location = StringField("Location", validators=[Optional(), Length(max=200)])
    salary = StringField("Salary", validators=[Optional(), Length(max=120)])
    description = TextAreaField("Description", validators=[Optional()])
