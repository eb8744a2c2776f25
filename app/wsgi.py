from app.campusflow import create_app

app = create_app()
