"""Seed the admin role and an admin user, then print an access token.

Usage:
    python -m encore.scripts.seed_admin --email admin@example.com
"""

from __future__ import annotations

import click
from flask_jwt_extended import create_access_token

from encore import create_app
from encore.core.auth.models import Role
from encore.core.users.models import User
from encore.extensions import db


def seed_admin_role(name: str = "admin") -> Role:
    role = Role.query.filter_by(name=name).first()
    if not role:
        role = Role(name=name, description="Administrator")
        db.session.add(role)
        db.session.commit()
    return role


def seed_admin_user(email: str, full_name: str | None = None, role_name: str = "admin") -> User:
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email, full_name=full_name or "Admin")
        db.session.add(user)
        db.session.flush()
    role = Role.query.filter_by(name=role_name).first()
    if role and role not in user.roles:
        user.roles.append(role)
    db.session.commit()
    return user


@click.command()
@click.option("--email", required=True, help="Admin email")
@click.option("--full-name", default="Admin", help="Admin display name")
def main(email: str, full_name: str) -> None:
    app = create_app()
    with app.app_context():
        role_name = app.config["FORECAST_ADMIN_ROLE"]
        seed_admin_role(role_name)
        user = seed_admin_user(email, full_name, role_name)
        token = create_access_token(identity=str(user.id))
        click.echo(f"Seeded admin user {user.email} with roles {user.role_codes}")
        click.echo(token)


if __name__ == "__main__":
    main()
