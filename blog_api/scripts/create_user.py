"""
Create a user directly (e.g. the first admin, bypassing the allow-list). Run from project root:
  python -m blog_api.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m blog_api.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import sys

from dotenv import load_dotenv

from blog_api.core.config import get_settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.errors import DuplicateEmailError
from blog_api.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from blog_api.models import UserRole
from blog_api.services.auth import USERNAME_MAX_ATTEMPTS, generate_username
from blog_api.services.credential_store import CredentialStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a blog user without self-registration.")
    parser.add_argument("email", help=f"Email (at most {EMAIL_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=[r.value for r in UserRole])
    args = parser.parse_args(argv)

    email = args.email.strip()
    if not email or "@" not in email or len(email) > EMAIL_MAX_LEN:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    load_dotenv()
    session_factory = build_session_factory(build_engine(get_settings().DATABASE_URL))
    db = session_factory()
    try:
        store = CredentialStore(db)
        for _ in range(USERNAME_MAX_ATTEMPTS):
            username = generate_username()
            if not store.username_exists(username):
                break
        else:
            print("Could not generate a unique username.", file=sys.stderr)
            return 1
        try:
            user = store.create(
                username=username,
                email=email,
                password=args.password,
                role=UserRole(args.role),
            )
        except DuplicateEmailError:
            print(f"User with email '{email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' <{user.email}> with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
