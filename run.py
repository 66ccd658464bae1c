from pickem import create_app, db
from pickem.models import Game, Pick, Season, Sport, Team, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Sport": Sport,
        "Season": Season,
        "Team": Team,
        "Game": Game,
        "Pick": Pick,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True, use_reloader=False)
