# taskflow/blueprints/tasks/forms.py
from flask_wtf import FlaskForm
from wtforms import DateField, FloatField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional

from ...models.status import TaskStatus


class TaskForm(FlaskForm):
    title = StringField("Title", validators=[DataRequired(), Length(min=3, max=200)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(min=10)])
    customer_id = IntegerField("Customer", validators=[Optional()])
    category_id = IntegerField("Category", validators=[Optional()])


class TaskEditForm(FlaskForm):
    title = StringField("Title", validators=[Optional(), Length(min=3, max=200)])
    description = TextAreaField("Description", validators=[Optional(), Length(min=10)])
    status = SelectField(
        "Status",
        choices=[(s.value, s.value) for s in TaskStatus],
        validators=[Optional()],
        validate_choice=False,
    )
    customer_id = IntegerField("Customer", validators=[Optional()])
    executor_id = IntegerField("Executor", validators=[Optional()])
    category_id = IntegerField("Category", validators=[Optional()])
    cost = FloatField("Cost", validators=[Optional(), NumberRange(min=0.01, message="Cost must be positive.")])
    due_date = DateField("Due date", format="%Y-%m-%d", validators=[Optional()])

    def submitted_fields(self, formdata) -> dict:
        """Only the fields present in the request; an empty value clears the field."""
        return {
            name: field.data
            for name, field in self._fields.items()
            if name != "csrf_token" and name in formdata
        }
