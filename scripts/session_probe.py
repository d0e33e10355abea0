#!/usr/bin/env python
"""Probe an API endpoint through the session client.

Operators can use this script to check that the backend accepts the
configured session: it optionally logs in, performs one authenticated
GET and prints the decoded response.  Expired access tokens are renewed
transparently exactly as they would be inside an application.

Example::

    AUTHSESSION_API_URL=https://backend.example/api \\
    AUTHSESSION_STORE_PATH=~/.authsession.json \\
        python scripts/session_probe.py --email me@example.com /auth/profile
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "client" / "src"))

from authsession import AuthService, AuthSessionError, SessionClient, configure_logging, load_settings  # noqa: E402

logger = logging.getLogger("session_probe")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", help="API path to GET, relative to AUTHSESSION_API_URL")
    parser.add_argument("--email", help="Log in with this email before probing")
    parser.add_argument("--password", help="Password for --email (prompted when omitted)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


async def probe(args: argparse.Namespace) -> int:
    settings = load_settings()
    async with SessionClient(settings) as client:
        auth = AuthService(client)
        try:
            if args.email:
                password = args.password or getpass.getpass("Password: ")
                await auth.login({"email": args.email, "password": password})
            data = await client.get(args.path)
        except AuthSessionError as exc:
            logger.error("Probe failed: %s", exc)
            return 1
    print(json.dumps(data, indent=2, default=str))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(probe(args))


if __name__ == "__main__":
    sys.exit(main())
