"""Utility script to sign a bearer token for local development."""

from __future__ import annotations

import argparse
from datetime import timedelta

from important_info.domain.entities import ROLE_ADMIN, ROLE_STUDENT
from important_info.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for token creation."""

    parser = argparse.ArgumentParser(
        description="Sign a token accepted by the Important Information API.",
    )
    parser.add_argument("user_id", help="Identifier placed in the userId claim")
    parser.add_argument(
        "--role",
        default=ROLE_STUDENT,
        choices=[ROLE_STUDENT, ROLE_ADMIN],
        help="Role claim of the token (default: student)",
    )
    parser.add_argument("--name", default="User", help="Display name claim")
    parser.add_argument("--email", default=None, help="Email claim (optional)")
    parser.add_argument(
        "--hours",
        type=float,
        default=8.0,
        help="Token lifetime in hours (default: 8)",
    )
    return parser.parse_args()


def main() -> None:
    """Print a token signed with SECRET_KEY."""

    args = parse_args()
    claims = {"userId": args.user_id, "role": args.role, "name": args.name}
    if args.email:
        claims["email"] = args.email
    print(create_access_token(claims, expires_delta=timedelta(hours=args.hours)))


if __name__ == "__main__":
    main()
