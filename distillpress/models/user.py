from distillpress import db, login
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime

# role -> capabilities granted by the host
ROLE_CAPABILITIES = {
    'administrator': {'read', 'edit_posts', 'manage_options'},
    'editor': {'read', 'edit_posts'},
    'author': {'read', 'edit_posts'},
    'subscriber': {'read'},
}


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), index=True, unique=True, nullable=False)
    email = db.Column(db.String(120), index=True, unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    role = db.Column(db.String(20), default='subscriber', nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def can(self, capability: str) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role or '', set())

    @property
    def is_admin(self) -> bool:
        return self.can('manage_options')

@login.user_loader
def load_user(id):
    try:
        return db.session.get(User, int(id))
    except Exception:
        return None
