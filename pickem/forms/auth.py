from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, Length

from pickem.forms.base import JSONForm


class LoginForm(JSONForm):
    FIELD_ALIASES = {"rememberMe": "remember_me"}

    username = StringField(
        "Username", validators=[DataRequired(), Length(min=3, max=80)]
    )
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember Me", false_values=(False, "false", ""))
