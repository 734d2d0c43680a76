# backend/wsgi.py
# Entry point for `flask` CLI (FLASK_APP=wsgi.py), WSGI servers (wsgi:app) and local runs.
from foodtrack import create_app

app = create_app()


if __name__ == "__main__":
    app.logger.info("Starting server at http://%s:%s", app.config["HOST"], app.config["PORT"])
    app.run(host=app.config["HOST"], port=app.config["PORT"])
