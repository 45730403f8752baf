"""Shared pytest fixtures for all tests."""

from typing import List

import pytest

from uploader.accounts.account import Account
from uploader.metadata_store import SqliteMetadataStore
from tests.fakes import make_account


@pytest.fixture
def test_db(tmp_path) -> str:
    """
    Path of a temporary SQLite database file.
    """
    return str(tmp_path / "metadata.db")


@pytest.fixture
def store(test_db) -> SqliteMetadataStore:
    return SqliteMetadataStore(test_db)


@pytest.fixture
def accounts() -> List[Account]:
    """
    Three accounts with 100, 50 and 10 bytes available.
    """
    return [
        make_account("a", limit=100),
        make_account("b", limit=60, usage=10),
        make_account("c", limit=10),
    ]
