import os
from unittest.mock import Mock

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault('ENCRYPTION_KEY', Fernet.generate_key().decode())

from distillpress import create_app, db  # noqa: E402
from distillpress.models.content import Category, Post  # noqa: E402
from distillpress.models.user import User  # noqa: E402
from distillpress.services.context import DistillContext  # noqa: E402
from helpers import make_response  # noqa: E402


@pytest.fixture
def app():
    app = create_app('config.TestingConfig')
    app.config.setdefault('TESTING', True)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def http_session(app):
    """Mock HTTP session used by every provider built from the app."""
    session = Mock()
    session.get.return_value = make_response(200, {'data': []})
    app.extensions['distillpress_http'] = session
    return session


@pytest.fixture
def ctx(app_ctx, http_session):
    return DistillContext.from_app()


def _make_user(username, role):
    user = User(username=username, email=f"{username}@example.com", role=role)
    user.set_password("password")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app_ctx):
    return _make_user("admin", "administrator")


@pytest.fixture
def editor_user(app_ctx):
    return _make_user("editor", "editor")


@pytest.fixture
def subscriber_user(app_ctx):
    return _make_user("reader", "subscriber")


@pytest.fixture
def categories(app_ctx):
    rows = [Category(name=name, slug=name.lower()) for name in ("Tech", "Sports", "Politics")]
    db.session.add_all(rows)
    db.session.commit()
    return {row.name: row for row in rows}


@pytest.fixture
def post(app_ctx, admin_user):
    row = Post(title="Launch", content="<p>The rocket launched on Monday.</p>", post_type="post", author_id=admin_user.id)
    db.session.add(row)
    db.session.commit()
    return row


def _login(client, user):
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def login_client(client, admin_user):
    return _login(client, admin_user)


@pytest.fixture
def editor_client(client, editor_user):
    return _login(client, editor_user)


@pytest.fixture
def subscriber_client(client, subscriber_user):
    return _login(client, subscriber_user)
