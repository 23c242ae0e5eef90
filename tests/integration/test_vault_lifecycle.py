"""End-to-end vault lifecycle on a real directory: setup, unlock, records, transfer, deletion."""

import csv

import pytest

from tinypm.core.exceptions import AuthenticationFailure, InvalidPasswordError
from tinypm.core.transfer import BITWARDEN_COLUMNS, CsvFormat
from tinypm.frontend.cli.context import build_context
from tinypm.security import decrypt
from tinypm.security.gate import CANARY_PLAINTEXT, GateState


@pytest.fixture
def ctx(tmp_path):
    context = build_context(
        base_dir=tmp_path / ".password-manager",
        export_dir=tmp_path / "Downloads",
        setup_logging=False,
    )
    yield context
    context.vault.close()


def test_full_lifecycle(ctx, tmp_path):
    vault = ctx.vault
    assert ctx.first_run

    # Setup writes a canary that only the master password opens
    vault.create_master_password("hunter2", "hunter2")
    canary = ctx.paths.lockfile.read_text(encoding="utf-8")
    assert "hunter2" not in canary
    assert decrypt("hunter2", canary) == CANARY_PLAINTEXT
    with pytest.raises(AuthenticationFailure):
        decrypt("wrong", canary)

    with pytest.raises(InvalidPasswordError):
        vault.unlock("wrong")
    assert vault.unlock("hunter2") == 0

    # Manual record
    rid = vault.add_record("GitHub", "octo", "s3cret", website="https://github.com")
    assert vault.reveal(rid) == "s3cret"

    # Bitwarden import: three rows, two sharing a password
    source = tmp_path / "bitwarden.csv"
    with open(source, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(BITWARDEN_COLUMNS)
        for name, pw in (("a", "same"), ("b", "same"), ("c", "other")):
            writer.writerow(["", "", "login", name, "", "", "0", f"https://{name}.example", "me", pw, ""])
    assert vault.import_csv(source, CsvFormat.BITWARDEN) == 3

    imported = [r for r in vault.records() if r.name in ("a", "b", "c")]
    assert len({r.password for r in imported}) == 3
    assert [vault.reveal(r.id) for r in imported] == ["same", "same", "other"]

    # Search, change, delete
    assert [r.name for r in vault.search("github")] == ["GitHub"]
    vault.change_password(rid, "rotated")
    assert vault.reveal(rid) == "rotated"
    vault.delete_record(imported[-1].id)
    assert len(vault.records()) == 3

    # Export lands in the configured directory as plaintext
    out = vault.export_csv()
    assert out.parent == tmp_path / "Downloads"
    with open(out, encoding="utf-8", newline="") as f:
        exported = {row[1]: row[3] for row in list(csv.reader(f))[1:]}
    assert exported == {"GitHub": "rotated", "a": "same", "b": "same"}

    # Lock, relock and delete
    vault.lock()
    assert vault.state is GateState.LOCKED
    vault.unlock("hunter2")
    vault.delete_vault("hunter2")
    assert not ctx.paths.base_dir.exists()


def test_records_survive_restart(tmp_path):
    home = tmp_path / "home"
    first = build_context(base_dir=home, setup_logging=False)
    first.vault.create_master_password("pw", "pw")
    first.vault.unlock("pw")
    first.vault.add_record("Mail", "me", "letmein")
    first.vault.lock()
    first.vault.close()

    second = build_context(base_dir=home, setup_logging=False)
    assert not second.first_run
    assert second.vault.unlock("pw") == 1
    record = second.vault.records()[0]
    assert second.vault.reveal(record.id) == "letmein"
    second.vault.close()
