# taskflow/blueprints/auth/forms.py
from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, EqualTo, Length, ValidationError

from ...models.user import ROLE_CUSTOMER, ROLE_EXECUTOR
from ...services import store


PASSWORD_VALIDATORS = [
    DataRequired(),
    Length(min=6, message="Password must be at least 6 characters."),
]


class RegisterForm(FlaskForm):
    name = StringField("Full name", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    # Admins are created with create.py, never self-registered
    role = SelectField(
        "Account type",
        choices=[(ROLE_CUSTOMER, "Customer"), (ROLE_EXECUTOR, "Executor")],
        validators=[DataRequired()],
        default=ROLE_CUSTOMER,
    )
    password = PasswordField("Password", validators=PASSWORD_VALIDATORS)
    password2 = PasswordField(
        "Confirm password", validators=[DataRequired(), EqualTo("password", message="Passwords must match.")]
    )

    def validate_email(self, field):
        if store.get_user_by_email(field.data):
            raise ValidationError("This email is already registered.")


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired()])
    remember = BooleanField("Keep me signed in")
