# taskflow/blueprints/proposals/forms.py
from flask_wtf import FlaskForm
from wtforms import DateField, FloatField
from wtforms.validators import NumberRange, Optional


class ProposalForm(FlaskForm):
    proposed_cost = FloatField(
        "Proposed cost",
        validators=[Optional(), NumberRange(min=0.01, message="Proposed cost must be a positive number.")],
    )
    proposed_due_date = DateField("Proposed due date", format="%Y-%m-%d", validators=[Optional()])
