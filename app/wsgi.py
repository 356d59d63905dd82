from app.frtu import create_app

app = create_app()
