import argparse
from datetime import timedelta

from app import create_app
from decorators import ADMIN, PCOORD, TEACHER
from utils.auth_tokens import encode_token


def parse_args():
    p = argparse.ArgumentParser(description='Mint a bearer token for local testing against the attendance API')
    p.add_argument('--user-id', '-u', required=True, help='User id placed in the "sub" claim')
    p.add_argument('--role', '-r', required=True, choices=[ADMIN, PCOORD, TEACHER], help='Role of the caller')
    p.add_argument('--faculty-id', '-f', type=int, required=False, help='Faculty id (required for teachers)')
    p.add_argument('--hours', type=int, required=False, help='Lifetime in hours (defaults to JWT_EXPIRY_HOURS)')
    return p.parse_args()


def main():
    args = parse_args()
    if args.role == TEACHER and args.faculty_id is None:
        raise SystemExit('--faculty-id is required for TEACHER tokens')
    app = create_app()
    with app.app_context():
        expires_in = timedelta(hours=args.hours) if args.hours else None
        print(encode_token(args.user_id, args.role, args.faculty_id, expires_in=expires_in))


if __name__ == '__main__':
    main()
