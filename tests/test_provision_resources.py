"""
Tests for the provisioning command line script.
"""

from attachments_api.app.core.store import BucketStore
from attachments_api.app.services.namespace_service import ResourceNamespaceService
from provision_resources import main


def test_missing_db_without_create(db_path, capsys):
    assert main(["--db", db_path, "books"]) == 1
    assert "DB not found" in capsys.readouterr().err


def test_provision_and_list(db_path, capsys):
    assert main(["--db", db_path, "--create", "books", "authors"]) == 0
    assert main(["--db", db_path, "--list"]) == 0
    out = capsys.readouterr().out
    assert "[+] Provisioned: authors, books" in out
    assert out.strip().splitlines()[-2:] == ["authors", "books"]

    store = BucketStore(db_path).open()
    try:
        assert ResourceNamespaceService(store).exists("books")
    finally:
        store.close()


def test_empty_name_fails(db_path, capsys):
    assert main(["--db", db_path, "--create", ""]) == 2
    assert "Provisioning failed" in capsys.readouterr().err
