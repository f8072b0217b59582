# WSGI entry point: `gunicorn app:app` or `flask --app app run`.
from rating_service.app import create_app

app = create_app()

if __name__ == "__main__":
    cfg = app.config["RATING_CONFIG"]
    app.run(host=cfg.host, port=cfg.port)
