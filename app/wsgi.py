from app.rdcpm import create_app

app = create_app()
