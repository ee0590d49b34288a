"""Tests for the CLI module."""

import json
from pathlib import Path

import pytest
import respx
from httpx import Response

from cartsmash.cli import SAMPLE_CART, check_credentials, check_user, main, verify_flow

STATUS_URL = "https://x.test/api/kroger-orders/auth/status"
CART_URL = "https://x.test/api/kroger-orders/cart/send"
PROD_TOKEN_URL = "https://api.kroger.com/v1/connect/oauth2/token"
CERT_TOKEN_URL = "https://api-ce.kroger.com/v1/connect/oauth2/token"


@pytest.fixture(autouse=True)
def _isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # main() reads .env from the working directory
    monkeypatch.chdir(tmp_path)


@respx.mock
async def test_verify_flow_unauthenticated(base_url: str, user_id: str, capsys):
    respx.get(STATUS_URL).mock(
        return_value=Response(200, json={"authenticated": False})
    )
    cart = respx.post(CART_URL).mock(return_value=Response(200, json={}))

    code = await verify_flow(user_id, base_url=base_url)

    out = capsys.readouterr().out
    assert code == 1
    assert "https://x.test/api/auth/kroger/login?userId=test-user-001" in out
    assert not cart.called


@respx.mock
async def test_verify_flow_sends_cart(base_url: str, user_id: str, capsys):
    respx.get(STATUS_URL).mock(return_value=Response(200, json={"authenticated": True}))
    cart = respx.post(CART_URL).mock(
        return_value=Response(
            200, json={"success": True, "itemsAdded": 5, "itemsFailed": 0}
        )
    )

    code = await verify_flow(user_id, base_url=base_url)

    out = capsys.readouterr().out
    assert code == 0
    assert "Items added: 5" in out
    assert "Items failed: 0" in out
    body = json.loads(cart.calls.last.request.content)
    assert len(body["cartItems"]) == len(SAMPLE_CART)
    assert body["storeId"] == "01400943"
    assert body["modality"] == "PICKUP"


@respx.mock
async def test_verify_flow_cart_failure(base_url: str, user_id: str, capsys):
    respx.get(STATUS_URL).mock(return_value=Response(200, json={"authenticated": True}))
    respx.post(CART_URL).mock(
        return_value=Response(200, json={"success": False, "message": "No store"})
    )

    code = await verify_flow(user_id, base_url=base_url)

    assert code == 1
    assert "Failed: No store" in capsys.readouterr().out


@respx.mock
async def test_check_user(base_url: str, capsys):
    respx.get("https://x.test/api/auth/kroger/status").mock(
        return_value=Response(200, json={"authenticated": True})
    )
    assert await check_user("firebase-uid", base_url) == 0
    assert "authenticated and ready" in capsys.readouterr().out


@respx.mock
async def test_check_credentials_certification_only(
    client_id: str, client_secret: str, capsys
):
    respx.post("https://api.kroger.com/v1/connect/oauth2/token").mock(
        return_value=Response(401, text="Unauthorized")
    )
    respx.post("https://api-ce.kroger.com/v1/connect/oauth2/token").mock(
        return_value=Response(200, json={"access_token": "cert-token-0123456789abc"})
    )

    assert await check_credentials(client_id, client_secret) == 0

    out = capsys.readouterr().out
    assert "PRODUCTION: FAILED" in out
    assert "KROGER_BASE_URL=https://api-ce.kroger.com/v1" in out


@respx.mock
def test_main_reports_errors_without_traceback(monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setenv("CARTSMASH_API_URL", "https://x.test")
    respx.get(STATUS_URL).mock(return_value=Response(500, text="Internal Server Error"))

    with pytest.raises(SystemExit) as exc:
        main(["verify-flow"])

    assert exc.value.code == 1
    assert "Error: Backend returned a non-JSON body" in capsys.readouterr().out


def test_main_without_command_prints_banner(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "CARTSMASH" in capsys.readouterr().out


def test_main_check_creds_missing_config(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["check-creds"])
    assert exc.value.code == 1
    assert "KROGER_CLIENT_ID" in capsys.readouterr().out


def test_main_lint(tmp_path: Path, capsys):
    (tmp_path / "Saver.js").write_text('localStorage.setItem("recipeDraft", x);\n')
    (tmp_path / "Prefs.js").write_text('localStorage.setItem("userPrefs", x);\n')

    with pytest.raises(SystemExit) as exc:
        main(["lint", str(tmp_path)])

    out = capsys.readouterr().out
    assert exc.value.code == 1
    assert "Saver.js:1:1" in out
    assert "Prefs.js" not in out


def test_main_lint_clean(tmp_path: Path):
    (tmp_path / "Prefs.js").write_text('localStorage.setItem("userPrefs", x);\n')
    with pytest.raises(SystemExit) as exc:
        main(["lint", str(tmp_path)])
    assert exc.value.code == 0


def test_main_lint_parse_error(tmp_path: Path):
    (tmp_path / "Broken.js").write_text("function (\n")
    with pytest.raises(SystemExit) as exc:
        main(["lint", str(tmp_path)])
    assert exc.value.code == 2


@respx.mock
def test_main_check_creds_non_json_token_reply(
    monkeypatch: pytest.MonkeyPatch, client_id: str, client_secret: str, capsys
):
    monkeypatch.setenv("KROGER_CLIENT_ID", client_id)
    monkeypatch.setenv("KROGER_CLIENT_SECRET", client_secret)
    maintenance = Response(200, text="<html>maintenance</html>")
    respx.post(PROD_TOKEN_URL).mock(return_value=maintenance)
    respx.post(CERT_TOKEN_URL).mock(return_value=maintenance)

    with pytest.raises(SystemExit) as exc:
        main(["check-creds"])

    out = capsys.readouterr().out
    assert exc.value.code == 1
    assert "PRODUCTION: FAILED" in out
    assert "CERTIFICATION: FAILED" in out
    assert "Unexpected token response" in out


def test_main_lint_non_utf8_source(tmp_path: Path, capsys):
    (tmp_path / "Legacy.js").write_bytes(b'localStorage.setItem("caf\xe9", x);\n')
    with pytest.raises(SystemExit) as exc:
        main(["lint", str(tmp_path)])
    assert exc.value.code == 2
    assert "not valid UTF-8" in capsys.readouterr().out


def test_main_lint_invalid_policy_pattern(tmp_path: Path, capsys):
    policy_file = tmp_path / "policy.json"
    policy_file.write_text(json.dumps([{"key_pattern": "recipe(", "message": "m"}]))
    (tmp_path / "App.js").write_text('localStorage.setItem("recipe", x);\n')

    with pytest.raises(SystemExit) as exc:
        main(["lint", "--policy", str(policy_file), str(tmp_path / "App.js")])

    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().out


def test_main_unexpected_error_is_reported(monkeypatch: pytest.MonkeyPatch, capsys):
    def broken(args):
        raise RuntimeError("boom")

    monkeypatch.setattr("cartsmash.cli._cmd_check_creds", broken)
    monkeypatch.setenv("KROGER_CLIENT_ID", "id")
    monkeypatch.setenv("KROGER_CLIENT_SECRET", "secret")

    with pytest.raises(SystemExit) as exc:
        main(["check-creds"])

    assert exc.value.code == 1
    assert "Error: boom" in capsys.readouterr().out


@respx.mock
def test_main_reads_env_file_from_working_directory(tmp_path: Path, capsys):
    (tmp_path / ".env").write_text("CARTSMASH_API_URL=https://x.test\n")
    status = respx.get(STATUS_URL).mock(
        return_value=Response(200, json={"authenticated": False})
    )

    with pytest.raises(SystemExit) as exc:
        main(["verify-flow"])

    assert exc.value.code == 1
    assert status.called
    assert "https://x.test/api/auth/kroger/login" in capsys.readouterr().out
