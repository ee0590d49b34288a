"""CLI entry point for cartsmash."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from cartsmash.backend import (
    BackendError,
    build_login_url,
    get_auth_status,
    get_user_auth_status,
    send_cart,
)
from cartsmash.config import (
    ConfigError,
    configure_logging,
    get_api_url,
    get_kroger_credentials,
    load_env_file,
)
from cartsmash.kroger import KROGER_ENVIRONMENTS, AuthError, probe_environments
from cartsmash.models import CartItem, CartSendRequest, Modality
from cartsmash.storage_policy import (
    DEFAULT_POLICIES,
    LintParseError,
    lint_paths,
    load_policies,
)

HERO_TITLE = "CARTSMASH"
HERO_SUBTITLE = "Shop Smarter, Save Faster"
HERO_TAGLINE = (
    "AI-powered grocery parsing that understands what you actually want to buy."
)

KROGER_CART_URL = "https://www.kroger.com/cart"
DEFAULT_USER_ID = "test-user-001"
DEFAULT_STORE_ID = "01400943"

logger = logging.getLogger(__name__)

SAMPLE_CART = [
    CartItem(product_name="Milk 2% Reduced Fat", quantity=1, unit="gallon"),
    CartItem(product_name="Wonder Bread White", quantity=2, unit="loaf"),
    CartItem(product_name="Large Eggs Grade A", quantity=1, unit="dozen"),
    CartItem(product_name="Bananas Yellow", quantity=5, unit="each"),
    CartItem(product_name="Chicken Breast Boneless", quantity=2, unit="lb"),
]


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        _print_banner()
        parser.print_usage()
        sys.exit(1)

    load_env_file()
    configure_logging(verbose=args.verbose)
    try:
        code = args.handler(args)
    except LintParseError as e:
        print(f"  Error: {e}")
        sys.exit(2)
    except (BackendError, AuthError, ConfigError, ValidationError, OSError) as e:
        print(f"  Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.debug("Unhandled error in %s", args.command, exc_info=True)
        print(f"  Error: {e}")
        sys.exit(1)
    sys.exit(code)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cartsmash")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.set_defaults(command=None)
    sub = parser.add_subparsers(dest="command")

    flow = sub.add_parser(
        "verify-flow", help="auth status check, then a test cart send"
    )
    flow.add_argument("--user-id", default=DEFAULT_USER_ID)
    flow.add_argument("--store-id", default=DEFAULT_STORE_ID)
    flow.add_argument(
        "--modality",
        choices=[m.value for m in Modality],
        default=Modality.PICKUP.value,
    )
    flow.add_argument("--base-url")
    flow.set_defaults(handler=_cmd_verify_flow)

    user = sub.add_parser("check-user", help="auth status for a real user")
    user.add_argument("--user-id", required=True)
    user.add_argument("--base-url")
    user.set_defaults(handler=_cmd_check_user)

    creds = sub.add_parser("check-creds", help="test Kroger client credentials")
    creds.set_defaults(handler=_cmd_check_creds)

    lint = sub.add_parser("lint", help="forbid recipe data in localStorage")
    lint.add_argument("paths", nargs="+", type=Path)
    lint.add_argument("--policy", type=Path, help="JSON policy list")
    lint.set_defaults(handler=_cmd_lint)

    return parser


def _print_banner() -> None:
    print()
    print(f"  {HERO_TITLE}")
    print(f"  {HERO_SUBTITLE}")
    print()
    print(f"  {HERO_TAGLINE}")
    print()


def _cmd_verify_flow(args: argparse.Namespace) -> int:
    return asyncio.run(
        verify_flow(args.user_id, args.store_id, Modality(args.modality), args.base_url)
    )


async def verify_flow(
    user_id: str,
    store_id: str = DEFAULT_STORE_ID,
    modality: Modality = Modality.PICKUP,
    base_url: str | None = None,
) -> int:
    """Check Kroger auth for ``user_id`` and, if connected, send a sample cart."""
    base = base_url or get_api_url()

    print("  1. Checking auth status...")
    status = await get_auth_status(user_id, base)
    print(f"  Auth status: {status.model_dump(mode='json', by_alias=True)}")

    if not status.authenticated:
        print()
        print("  User needs to authenticate first!")
        print("  Visit this URL to authenticate:")
        print(f"  {build_login_url(user_id, base)}")
        print()
        print("  After authenticating, run this command again.")
        return 1

    print("  User is authenticated!")

    print()
    print("  2. Sending test cart...")
    request = CartSendRequest(
        cart_items=SAMPLE_CART, store_id=store_id, modality=modality
    )
    result = await send_cart(user_id, request, base)
    print()
    print(f"  3. Cart result: {result.model_dump(mode='json', by_alias=True)}")

    if not result.success:
        print()
        print(f"  Failed: {result.message or result.error}")
        return 1

    print()
    print("  SUCCESS! Items sent to Kroger cart")
    print(f"  Items added: {result.items_added}")
    print(f"  Items failed: {result.items_failed}")
    print()
    print(f"  View your cart at: {KROGER_CART_URL}")
    return 0


def _cmd_check_user(args: argparse.Namespace) -> int:
    return asyncio.run(check_user(args.user_id, args.base_url))


async def check_user(user_id: str, base_url: str | None = None) -> int:
    """Report whether a real user has connected Kroger."""
    base = base_url or get_api_url()
    print("  Checking auth for real user...")
    status = await get_user_auth_status(user_id, base)
    print(f"  Auth status: {status.model_dump(mode='json', by_alias=True)}")

    if not status.authenticated:
        print()
        print("  Authenticate at:")
        print(f"  {build_login_url(user_id, base)}")
        return 1

    print("  User is authenticated and ready!")
    return 0


def _cmd_check_creds(args: argparse.Namespace) -> int:
    client_id, client_secret = get_kroger_credentials()
    return asyncio.run(check_credentials(client_id, client_secret))


async def check_credentials(client_id: str, client_secret: str) -> int:
    """Find which Kroger environment accepts these client credentials."""
    print()
    print("  Testing Kroger API Credentials")
    print("  ==============================")
    print(f"  Client ID: {client_id}")

    results = await probe_environments(client_id, client_secret)
    for name, outcome in results.items():
        if isinstance(outcome, AuthError):
            print(f"  {name}: FAILED")
            print(f"    {outcome}")
        else:
            print(f"  {name}: OK")
            print(f"    Token: {outcome.access_token[:20]}...")
            print(f"    Expires: {outcome.expires_in} seconds")

    print()
    print("  RESULTS:")
    if not isinstance(results["PRODUCTION"], AuthError):
        print("  Your app is registered for PRODUCTION")
        print(f"  Update .env: KROGER_BASE_URL={KROGER_ENVIRONMENTS['PRODUCTION']}")
        return 0
    if not isinstance(results["CERTIFICATION"], AuthError):
        print("  Your app is registered for CERTIFICATION (testing)")
        print(f"  Update .env: KROGER_BASE_URL={KROGER_ENVIRONMENTS['CERTIFICATION']}")
        print("  Note: certification uses test accounts, not real Kroger accounts.")
        return 0
    print("  Authentication failed for both environments!")
    print("  Check your KROGER_CLIENT_ID and KROGER_CLIENT_SECRET")
    return 1


def _cmd_lint(args: argparse.Namespace) -> int:
    policies = load_policies(args.policy) if args.policy else DEFAULT_POLICIES
    violations = lint_paths(args.paths, policies)
    for violation in violations:
        print(violation.format())
    if violations:
        print(f"\n{len(violations)} forbidden storage call(s)")
        return 1
    return 0
