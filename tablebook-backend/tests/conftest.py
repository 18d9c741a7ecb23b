import pytest
from werkzeug.security import generate_password_hash

from tablebook.app import create_app
from tablebook.auth import issue_token
from tablebook.extensions import db
from tablebook.models import Restaurant, User

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET": "test-jwt-secret",
    "JWT_EXPIRES_MINUTES": 30,
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        db.session.add_all([
            Restaurant(restaurant_id=1, name="Trattoria Lucia", location="Downtown", description="Pasta"),
            Restaurant(restaurant_id=2, name="Sakura House", location="Riverside", description="Sushi"),
            Restaurant(restaurant_id=3, name="Downtown Diner", location="Harbor District", description=None),
            User(user_id=7, name="Seven", email="seven@example.com", password_hash=generate_password_hash("pw-seven")),
            User(user_id=8, name="Eight", email="eight@example.com", password_hash=generate_password_hash("pw-eight")),
        ])
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def auth_header(app):
    def make(user_id: int) -> dict:
        return {"Authorization": f"Bearer {issue_token(user_id)}"}
    return make
