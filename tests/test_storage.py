from __future__ import annotations

import itertools
import logging
from pathlib import Path

import pytest

import storage.repository as repository
from analysis.market import MarketComparable
from core.schema import AuctionType, DealParameters, PaymentMethod
from storage.records import PropertyDocument, PropertyRecord
from storage.repository import (
    LocalDealRepository,
    StorageError,
    SupabaseDealRepository,
    create_repository,
    stamp_record,
)
from storage.settings import StorageSettings


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch):
    ticks = itertools.count(1_700_000_000_000, 1000)
    monkeypatch.setattr(repository, "_now_ms", lambda: next(ticks))


def _record(**kwargs) -> PropertyRecord:
    deal = DealParameters(bid_value=95000, payment_method=PaymentMethod.FGTS, rent_revenue=1200)
    return PropertyRecord(city="Santos", address="Rua A, 10", content=deal, **kwargs)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
def test_record_defaults() -> None:
    record = PropertyRecord()
    assert record.content == DealParameters()
    assert record.auction_type is AuctionType.EXTRAJUDICIAL_BANKS
    assert [c.id for c in record.comparables] == [1, 2, 3, 4, 5]
    assert record.display_name == "Novo imóvel"


def test_record_json_round_trip() -> None:
    record = _record(
        id="abc",
        comparables=[MarketComparable(id=1, price=250000, link="https://example.com/1")],
        documents=[PropertyDocument(id="d1", name="Edital", type="pdf")],
    )
    restored = PropertyRecord.model_validate_json(record.model_dump_json())
    assert restored.model_dump() == record.model_dump()
    assert restored.content.payment_method is PaymentMethod.FGTS


def test_record_accepts_camel_case_content() -> None:
    record = PropertyRecord.model_validate({"id": "1", "content": {"bidValue": "70000", "marketValue": 150000}})
    assert record.content.bid_value == 70000
    assert record.content.market_value == 150000
    assert record.content.reforms == 0


def test_record_reads_flat_camel_case_form(caplog: pytest.LogCaptureFixture) -> None:
    flat = {
        "id": "1700000000000",
        "lastModified": 1700000000000,
        "city": "Santos",
        "auctionType": "Judicial - 2º Leilão",
        "bidValue": 200000,
        "marketValue": 400000,
        "paymentMethod": "FGTS",
        "marketResearchItems": [{"id": 1, "price": 390000, "link": "", "description": "vizinho"}],
        "images": [{"id": "img", "url": "data:", "isCover": True}],
        "documents": [],
    }
    with caplog.at_level(logging.WARNING, logger="storage.records"):
        record = PropertyRecord.model_validate(flat)

    assert record.last_modified == 1700000000000
    assert record.auction_type is AuctionType.JUDICIAL_SECOND
    assert record.content.bid_value == 200000
    assert record.content.market_value == 400000
    assert record.content.payment_method is PaymentMethod.FGTS
    assert record.content.reforms == 0
    assert [c.price for c in record.comparables] == [390000]
    assert caplog.records == []


def test_record_logs_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="storage.records"):
        record = PropertyRecord.model_validate({"id": "7", "content": {}, "colour": "red"})
    assert record.id == "7"
    assert "colour" in caplog.text


def test_record_with_comparables_fills_blank_cells() -> None:
    record = _record()
    rows = [
        {"id": 1, "price": 250000.0, "link": "https://example.com/1", "description": "Apto 2q"},
        {"id": 2, "price": float("nan"), "link": None, "description": float("nan")},
    ]
    updated = record.with_comparables(rows)
    assert [c.model_dump() for c in updated.comparables] == [
        {"id": 1, "price": 250000.0, "link": "https://example.com/1", "description": "Apto 2q"},
        {"id": 2, "price": 0.0, "link": "", "description": ""},
    ]
    assert updated.content == record.content
    assert [c.id for c in record.comparables] == [1, 2, 3, 4, 5]


def test_stamp_record_assigns_id_once(clock) -> None:
    first = stamp_record(_record())
    assert first.id == str(first.last_modified)
    second = stamp_record(first)
    assert second.id == first.id
    assert second.last_modified > first.last_modified


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------
def test_local_save_get_delete(tmp_path: Path, clock) -> None:
    repo = LocalDealRepository(tmp_path)
    saved = repo.save(_record())

    assert (tmp_path / f"{saved.id}.json").exists()
    assert repo.get(saved.id).model_dump() == saved.model_dump()

    assert repo.delete(saved.id) is True
    assert repo.delete(saved.id) is False
    with pytest.raises(KeyError):
        repo.get(saved.id)


def test_local_load_all_newest_first(tmp_path: Path, clock) -> None:
    repo = LocalDealRepository(tmp_path)
    older = repo.save(_record(id="older"))
    newer = repo.save(_record(id="newer"))
    older = repo.save(older)  # re-saving bumps last_modified

    assert [r.id for r in repo.load_all()] == ["older", "newer"]
    assert newer.last_modified < older.last_modified


def test_local_skips_unreadable_files(tmp_path: Path, clock) -> None:
    repo = LocalDealRepository(tmp_path)
    repo.save(_record(id="good"))
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    assert [r.id for r in repo.load_all()] == ["good"]


@pytest.mark.parametrize("bad_id", ["../escape", "a/b", "with space"])
def test_local_rejects_unsafe_ids(tmp_path: Path, bad_id: str) -> None:
    repo = LocalDealRepository(tmp_path)
    with pytest.raises(ValueError):
        repo.save(_record(id=bad_id))


def test_local_get_wraps_unreadable_file(tmp_path: Path) -> None:
    repo = LocalDealRepository(tmp_path)
    (tmp_path / "broken.json").write_text('{"id": 5, "comparables": "bad"}', encoding="utf-8")
    with pytest.raises(StorageError, match="broken"):
        repo.get("broken")


def test_local_check_connection(tmp_path: Path) -> None:
    ok, message = LocalDealRepository(tmp_path / "deals").check_connection()
    assert ok
    assert "deals" in message


# ---------------------------------------------------------------------------
# Supabase backend (fake client)
# ---------------------------------------------------------------------------
def test_supabase_round_trip(fake_supabase, clock) -> None:
    repo = SupabaseDealRepository(fake_supabase, table="properties")
    a = repo.save(_record(id="a"))
    b = repo.save(_record(id="b"))

    row = fake_supabase.tables["properties"]["a"]
    assert row["last_modified"] == a.last_modified
    assert row["content"]["content"]["bid_value"] == 95000

    assert [r.id for r in repo.load_all()] == ["b", "a"]
    assert repo.get("a").model_dump() == a.model_dump()
    assert repo.delete("b") is True
    assert repo.delete("b") is False
    with pytest.raises(KeyError):
        repo.get("b")
    assert b.id == "b"


def test_supabase_loads_flat_rows(fake_supabase) -> None:
    fake_supabase.tables["properties"] = {
        "1700000000000": {
            "id": "1700000000000",
            "content": {
                "id": "1700000000000",
                "lastModified": 1700000000000,
                "city": "Santos",
                "bidValue": 200000,
                "marketValue": 400000,
                "marketResearchItems": [{"id": 1, "price": 390000, "link": "", "description": ""}],
            },
            "last_modified": 1700000000000,
        },
    }
    repo = SupabaseDealRepository(fake_supabase)

    (record,) = repo.load_all()
    assert record.city == "Santos"
    assert record.last_modified == 1700000000000
    assert record.content.bid_value == 200000
    assert record.content.market_value == 400000
    assert record.comparables[0].price == 390000
    assert repo.get("1700000000000").content.bid_value == 200000


def test_supabase_takes_timestamp_from_row_column(fake_supabase) -> None:
    fake_supabase.tables["properties"] = {
        "x": {"id": "x", "content": {"id": "x", "content": {"bidValue": 90000}}, "last_modified": 42},
    }
    assert SupabaseDealRepository(fake_supabase).get("x").last_modified == 42


def test_supabase_skips_malformed_rows(fake_supabase, clock, caplog: pytest.LogCaptureFixture) -> None:
    repo = SupabaseDealRepository(fake_supabase)
    repo.save(_record(id="good"))
    rows = fake_supabase.tables["properties"]
    rows["bad"] = {"id": "bad", "content": {"id": 5, "comparables": "bad"}, "last_modified": 1}
    rows["empty"] = {"id": "empty", "content": None, "last_modified": 2}

    with caplog.at_level(logging.WARNING, logger="storage.repository"):
        assert [r.id for r in repo.load_all()] == ["good"]
    assert "bad" in caplog.text
    assert "empty" in caplog.text

    with pytest.raises(StorageError, match="bad"):
        repo.get("bad")
    with pytest.raises(StorageError):
        repo.get("empty")


def test_supabase_errors_become_storage_errors(fake_supabase) -> None:
    repo = SupabaseDealRepository(fake_supabase)
    fake_supabase.error = RuntimeError("network down")
    with pytest.raises(StorageError, match="network down"):
        repo.load_all()


def test_supabase_check_connection_reports_missing_table(fake_supabase) -> None:
    repo = SupabaseDealRepository(fake_supabase)
    assert repo.check_connection() == (True, "Connection OK.")

    err = RuntimeError("relation does not exist")
    err.code = "42P01"
    fake_supabase.error = err
    ok, message = repo.check_connection()
    assert not ok
    assert "not found" in message


def test_supabase_closed_repository(fake_supabase) -> None:
    with SupabaseDealRepository(fake_supabase) as repo:
        pass
    with pytest.raises(StorageError):
        repo.load_all()
    assert repo.check_connection() == (False, "Repository is closed.")


# ---------------------------------------------------------------------------
# Settings / factory
# ---------------------------------------------------------------------------
def test_settings_from_env(tmp_path: Path) -> None:
    settings = StorageSettings.from_env({
        "AUCTION_SIM_STORAGE": "Supabase",
        "SUPABASE_URL": "https://demo.supabase.co",
        "SUPABASE_KEY": "anon",
    })
    assert settings.backend == "supabase"
    assert settings.table == "properties"

    local = StorageSettings.from_env({"AUCTION_SIM_DATA_DIR": str(tmp_path)})
    assert local.backend == "local"
    assert local.root_dir == tmp_path

    with pytest.raises(ValueError):
        StorageSettings.from_env({"AUCTION_SIM_STORAGE": "s3"})


def test_create_local_repository(tmp_path: Path) -> None:
    repo = create_repository(StorageSettings(root_dir=tmp_path / "store"))
    assert isinstance(repo, LocalDealRepository)
    assert (tmp_path / "store").is_dir()


def test_create_supabase_repository_requires_credentials() -> None:
    with pytest.raises(ValueError):
        create_repository(StorageSettings(backend="supabase", supabase_url="https://demo.supabase.co"))


def test_create_supabase_repository_uses_client_factory(monkeypatch: pytest.MonkeyPatch, fake_supabase) -> None:
    import supabase

    calls = []

    def fake_create_client(url, key):
        calls.append((url, key))
        return fake_supabase

    monkeypatch.setattr(supabase, "create_client", fake_create_client)
    repo = create_repository(
        StorageSettings(backend="supabase", supabase_url="https://demo.supabase.co", supabase_key="anon", table="deals")
    )
    assert isinstance(repo, SupabaseDealRepository)
    assert repo.table == "deals"
    assert calls == [("https://demo.supabase.co", "anon")]
