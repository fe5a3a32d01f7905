import os
import secrets
import string

from distillpress import create_app, db
from distillpress.cli import install_plugin
from distillpress.models.content import Category, Post, PostMeta
from distillpress.models.options import Option
from distillpress.models.user import User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        'db': db,
        'User': User,
        'Post': Post,
        'PostMeta': PostMeta,
        'Category': Category,
        'Option': Option,
    }


if __name__ == '__main__':
    from flask import current_app

    def _gen_password(length=20):
        alphabet = string.ascii_letters + string.digits + "!@#$%^&*()_-+="
        return ''.join(secrets.choice(alphabet) for _ in range(length))

    with app.app_context():
        print('[init] Starting one-time initialization...')
        try:
            created = install_plugin()
            print(f'[init] Tables ensured, {created} default option(s) created')
        except Exception:
            current_app.logger.exception('[init] Failed to install DistillPress defaults')
            raise

        # Create administrator user if not exists (from ENV if provided)
        try:
            admin = User.query.filter_by(role='administrator').first()
            if not admin:
                email = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
                username = os.environ.get('ADMIN_USERNAME', 'admin')
                password = os.environ.get('ADMIN_PASSWORD') or _gen_password()
                admin = User(username=username, email=email, role='administrator')
                admin.set_password(password)
                db.session.add(admin)
                db.session.commit()
                print('[init] Administrator created:')
                print(f'       username: {username}')
                print(f'       email   : {email}')
                print(f'       password: {password}')
                print('       IMPORTANT: Change this password immediately.')
            else:
                print('[init] Administrator already exists, skipping creation')
        except Exception:
            db.session.rollback()
            current_app.logger.exception('[init] Failed to create or verify administrator user')

        print('[init] Done. This script does not start the web server.')
        print('[init] Serve the application with Gunicorn (run:app).')
