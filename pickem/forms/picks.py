from wtforms import IntegerField
from wtforms.validators import DataRequired, NumberRange

from pickem.forms.base import JSONForm


class PickForm(JSONForm):
    """Body of POST /api/picks"""

    FIELD_ALIASES = {"gameId": "game_id", "pickedTeamId": "picked_team_id"}

    game_id = IntegerField("Game", validators=[DataRequired(), NumberRange(min=1)])
    picked_team_id = IntegerField(
        "Picked Team", validators=[DataRequired(), NumberRange(min=1)]
    )


class DeletePickForm(JSONForm):
    """Body of DELETE /api/picks"""

    FIELD_ALIASES = {"gameId": "game_id"}

    game_id = IntegerField("Game", validators=[DataRequired(), NumberRange(min=1)])
