"""Utility script to create the first admin account in the user directory."""

from __future__ import annotations

import argparse
from getpass import getpass

from app.config import get_settings
from app.domain.entities import ROLE_ADMIN
from app.infrastructure.backend import BackendError, create_backend_clients
from app.infrastructure.security import get_password_hash
from app.application.use_cases.users.validators import (
    normalize_email,
    normalize_role,
    validate_password,
)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial account for the marketplace notifications service.",
    )
    parser.add_argument(
        "--name",
        default="Administrator",
        help="Full name stored in the user metadata (default: Administrator)",
    )
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Email address of the account (default: admin@example.com)",
    )
    parser.add_argument(
        "--role",
        default=ROLE_ADMIN,
        help="Metadata role of the account (default: admin)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Account password. Prompted for interactively when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("Password for the new account: ")
    try:
        email = normalize_email(args.email)
        role = normalize_role(args.role)
        validate_password(password)
    except ValueError as exc:
        raise SystemExit(f"Invalid input: {exc}") from exc

    clients = create_backend_clients(get_settings())
    try:
        user = clients.public.auth.create_user(
            email=email,
            password_hash=get_password_hash(password),
            user_metadata={"role": role, "name": args.name, "full_name": args.name},
        )
    except ValueError as exc:
        raise SystemExit(f"Could not create the account: {exc}") from exc
    except BackendError as exc:
        raise SystemExit(f"Error saving the account: {exc}") from exc
    else:
        print(
            "Account created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.display_name}\n"
            f"  Email: {user.email}\n"
            f"  Role: {user.role}"
        )
    finally:
        clients.dispose()


if __name__ == "__main__":
    main()
