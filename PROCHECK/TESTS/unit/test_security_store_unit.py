# Руководство к файлу (TESTS/unit/test_security_store_unit.py)
# Назначение:
# - Unit-тесты хэширования паролей (SERVICES/security.py) и файлового хранилища документов.

from __future__ import annotations

import pytest

from PROCHECK.CORE.config import settings
from PROCHECK.CORE.errors import DocumentNotFoundError
from PROCHECK.SERVICES.document_store import DocumentStore
from PROCHECK.SERVICES.security import dummy_verify, hash_password, verify_password


def test_hash_is_salted_and_verifiable():
    first = hash_password("secret", method="pbkdf2:sha256:10")
    second = hash_password("secret", method="pbkdf2:sha256:10")

    assert first != second
    assert first.startswith("pbkdf2:sha256:10$")
    assert verify_password("secret", first)
    assert not verify_password("Secret", first)


@pytest.mark.parametrize("stored", ["", "plain", "md5$aa$bb", "pbkdf2:sha256:x$aa$bb"])
def test_malformed_hash_never_verifies(stored):
    assert verify_password("anything", stored) is False


def test_default_method_comes_from_settings():
    stored = hash_password("secret")

    assert stored.startswith(settings.password_hash_method.split(":")[0])
    assert verify_password("secret", stored)


def test_dummy_verify_does_not_raise():
    dummy_verify("anything")


def test_store_roundtrip_and_delete(tmp_path):
    store = DocumentStore(tmp_path / "docs")

    ref = store.put_text("report inspection-1/../x", "Текст отчёта")

    assert "/" not in ref
    assert ref.endswith(".txt")
    assert store.read_text(ref) == "Текст отчёта"
    assert store.delete(ref) is True
    assert store.delete(ref) is False
    with pytest.raises(DocumentNotFoundError):
        store.read_text(ref)


def test_store_refuses_paths_outside_root(tmp_path):
    (tmp_path / "secret.txt").write_text("x", encoding="utf-8")
    store = DocumentStore(tmp_path / "docs")

    with pytest.raises(DocumentNotFoundError):
        store.read_text("../secret.txt")
    assert store.delete("../secret.txt") is False
    assert (tmp_path / "secret.txt").exists()
