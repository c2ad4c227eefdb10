# taskflow/blueprints/comments/forms.py
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Optional


class CommentForm(FlaskForm):
    text = TextAreaField("Comment", validators=[DataRequired(message="Comment text cannot be empty.")])
    # "none" or empty keeps the current status
    new_status = StringField("Change status", validators=[Optional()])
