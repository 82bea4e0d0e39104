"""Print a signed session token for an email (development helper).

Usage:
    python create_token.py student@example.com [--days 7]
"""
import argparse

from edu_learn_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an Edu-Learn API token.")
    ap.add_argument("email", help="Email to embed in the token")
    ap.add_argument("--days", type=int, default=1, help="Token lifetime in days")
    args = ap.parse_args()
    print(create_access_token({"email": args.email.lower()}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
