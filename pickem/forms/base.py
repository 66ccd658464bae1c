from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict


class JSONForm(FlaskForm):
    """Form fed from a JSON request body

    The API is session authenticated and CSRF exempt, so form-level CSRF
    tokens are off. FIELD_ALIASES maps camelCase body keys to field names.
    """

    FIELD_ALIASES = {}

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        formdata = MultiDict(
            {cls.FIELD_ALIASES.get(key, key): value for key, value in data.items()}
        )
        return cls(formdata=formdata)
