# tests/test_cli_tools.py
from __future__ import annotations

from agency_crm.cli import reset_password, seed_demo
from agency_crm.services.auth_service import verify_password
from agency_crm.store.repository import unit_of_work

from conftest import KARA_EMAIL, auth_headers


def test_reset_password_cli(client, capsys):
    reset_password.main(["--email", KARA_EMAIL, "--new-password", "s3cret-new"])
    out = capsys.readouterr().out
    assert "[OK] Password reset for user_id=3" in out

    with unit_of_work() as uow:
        assert verify_password("s3cret-new", uow.users.find_by_email(KARA_EMAIL).password_hash)
    assert "Authorization" in auth_headers(client, KARA_EMAIL, "s3cret-new")


def test_seed_demo_reset_prints_counts(capsys):
    with unit_of_work() as uow:
        uow.clients.delete(13)
    seed_demo.main(["--reset"])
    out = capsys.readouterr().out
    assert "[OK] Database ready" in out
    assert "clients" in out
    with unit_of_work() as uow:
        assert uow.clients.find_by_id(13) is not None
