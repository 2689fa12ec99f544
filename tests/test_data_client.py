# tests/test_data_client.py - Tests du client données (SQLite en mémoire)

import pytest

from db.data_client import DataAccessError, RecordNotFound


def test_insert_applies_defaults(data_client):
    row = data_client.insert("clients", {"name": "Kapoor Residence"})

    assert len(row["id"]) == 36
    assert row["isactive"] is True
    assert row["createdat"] is not None


def test_find_filters(data_client):
    data_client.insert("clients", {"name": "B", "company": "Acme"})
    data_client.insert("clients", {"name": "A", "company": "Acme"})
    data_client.insert("clients", {"name": "C"})

    acme = data_client.find("clients", {"company": "Acme"}, order_by="name")
    assert [r["name"] for r in acme] == ["A", "B"]

    no_company = data_client.find("clients", {"company": None})
    assert [r["name"] for r in no_company] == ["C"]

    by_names = data_client.find("clients", {"name": ["A", "C"]}, order_by="name", descending=True)
    assert [r["name"] for r in by_names] == ["C", "A"]


def test_find_one_missing(data_client):
    with pytest.raises(RecordNotFound) as exc_info:
        data_client.find_one("clients", {"id": "missing"})
    assert exc_info.value.table == "clients"


def test_update_and_delete(data_client):
    row = data_client.insert("clients", {"name": "Old"})

    updated = data_client.update("clients", {"id": row["id"]}, {"name": "New"})
    assert updated["name"] == "New"

    assert data_client.delete("clients", {"id": row["id"]}) == 1
    assert data_client.find("clients", {"id": row["id"]}) == []


def test_update_missing_raises(data_client):
    with pytest.raises(RecordNotFound):
        data_client.update("clients", {"id": "missing"}, {"name": "x"})
    with pytest.raises(RecordNotFound):
        data_client.delete("clients", {"id": "missing"})


def test_unknown_table_or_column(data_client):
    with pytest.raises(DataAccessError):
        data_client.find("invoices")
    with pytest.raises(DataAccessError):
        data_client.find("clients", {"nickname": "x"})


def test_constraint_violation_becomes_data_access_error(data_client):
    with pytest.raises(DataAccessError):
        data_client.insert("clients", {"email": "no-name@example.com"})


def test_transaction_commits_all_writes(data_client, test_db):
    with data_client.transaction():
        data_client.insert("clients", {"name": "A"})
        data_client.insert("clients", {"name": "B"})

    test_db.rollback()
    assert [r["name"] for r in data_client.find("clients", order_by="name")] == ["A", "B"]


def test_transaction_rolls_back_on_error(data_client):
    kept = data_client.insert("clients", {"name": "Kept"})

    with pytest.raises(DataAccessError):
        with data_client.transaction():
            data_client.update("clients", {"id": kept["id"]}, {"name": "Renamed"})
            data_client.insert("clients", {"name": "Lost"})
            data_client.insert("clients", {"email": "no-name@example.com"})

    assert [r["name"] for r in data_client.find("clients")] == ["Kept"]


def test_nested_transaction_joins_outer_block(data_client):
    with pytest.raises(RuntimeError):
        with data_client.transaction():
            with data_client.transaction():
                data_client.insert("clients", {"name": "Inner"})
            raise RuntimeError("abort")

    assert data_client.find("clients") == []
