"""
Signing CLI
===========
Print signed request headers for manual testing with curl or Postman.

Usage:
    mailer-security-sign --access-key AK --project-token PT --secret-key SK
    curl -H "X-Access-Key: ..." ... http://localhost:8000/api/v1/auth/verify

The secret key can also come from API_SECURITY_SECRET_KEY.
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from .hmac_auth import create_signed_headers, InvalidSignatureInput


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailer-security-sign",
        description="Generate HMAC-SHA512 authentication headers.",
    )
    parser.add_argument("--access-key", required=True, help="Value for X-Access-Key")
    parser.add_argument("--project-token", required=True, help="Value for X-Project-Token")
    parser.add_argument(
        "--secret-key",
        default=os.getenv("API_SECURITY_SECRET_KEY", ""),
        help="Shared secret (default: $API_SECURITY_SECRET_KEY)",
    )
    parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Epoch milliseconds to sign (default: now)",
    )
    parser.add_argument(
        "--curl",
        action="store_true",
        help="Print curl -H arguments instead of JSON",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        headers = create_signed_headers(
            access_key=args.access_key,
            project_token=args.project_token,
            secret_key=args.secret_key,
            timestamp_millis=args.timestamp,
        )
    except InvalidSignatureInput as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.curl:
        print(" ".join(f"-H '{name}: {value}'" for name, value in headers.items()))
    else:
        print(json.dumps(headers, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
