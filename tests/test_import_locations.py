import argparse
import json

import pytest

from locator.jobs import import_locations


class FakeRepository:
    stored = 0

    def count(self, location_filter):
        return self.stored


@pytest.fixture
def dataset(tmp_path):
    path = tmp_path / "locations.json"
    path.write_text(
        json.dumps(
            [
                {"name": "McDonald's", "address": "34/35 Strand", "rating": 3.6, "latitude": 51.5, "longitude": -0.12},
                {"name": "McDonald's", "address": "Purley Way", "city": "Croydon"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_run_import_job_numbers_and_replaces_rows(monkeypatch, dataset, caplog):
    captured = {}

    def fake_replace_all(rows, batch_size):
        captured["rows"] = rows
        captured["batch_size"] = batch_size
        return len(rows)

    FakeRepository.stored = 2
    monkeypatch.setattr(import_locations, "init_pool", lambda: None)
    monkeypatch.setattr(import_locations, "replace_all_locations", fake_replace_all)
    monkeypatch.setattr(import_locations, "LocationRepository", FakeRepository)

    with caplog.at_level("WARNING"):
        stored = import_locations.run_import_job(path=dataset, batch_size=25, expected=2)

    assert stored == 2
    assert captured["batch_size"] == 25
    assert [row["id"] for row in captured["rows"]] == [1, 2]
    assert captured["rows"][1]["slug"] == "mcdonalds-purley-way-2"
    assert captured["rows"][1]["city"] == "Croydon"
    assert not caplog.messages


def test_run_import_job_warns_on_count_mismatch(monkeypatch, dataset, caplog):
    FakeRepository.stored = 1
    monkeypatch.setattr(import_locations, "init_pool", lambda: None)
    monkeypatch.setattr(import_locations, "replace_all_locations", lambda rows, batch_size: 1)
    monkeypatch.setattr(import_locations, "LocationRepository", FakeRepository)

    with caplog.at_level("WARNING"):
        import_locations.run_import_job(path=dataset, batch_size=50, expected=285)

    assert "Expected 285 locations, database holds 1" in " ".join(caplog.messages)


def test_load_records_requires_array(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"name": "McDonald's"}), encoding="utf-8")

    with pytest.raises(ValueError):
        import_locations.load_records(path)


def test_build_parser_defaults():
    parser = import_locations.build_parser()
    args = parser.parse_args(["data/locations.json"])

    assert isinstance(parser, argparse.ArgumentParser)
    assert args.batch_size == 50
    assert args.expected is None
    assert str(args.path) == "data/locations.json"


def test_run_import_job_fails_when_every_batch_is_skipped(monkeypatch, dataset):
    monkeypatch.setattr(import_locations, "init_pool", lambda: None)
    monkeypatch.setattr(import_locations, "replace_all_locations", lambda rows, batch_size: 0)
    monkeypatch.setattr(import_locations, "LocationRepository", FakeRepository)

    with pytest.raises(import_locations.ImportFailedError, match="none of the 2 locations"):
        import_locations.run_import_job(path=dataset, batch_size=50)


def test_main_exits_non_zero_when_import_fails(monkeypatch, dataset, caplog):
    def failing_job(**kwargs):
        raise import_locations.ImportFailedError("none of the 2 locations were inserted")

    monkeypatch.setattr("sys.argv", ["locator-import", str(dataset)])
    monkeypatch.setattr(import_locations, "run_import_job", failing_job)

    with caplog.at_level("ERROR"), pytest.raises(SystemExit) as excinfo:
        import_locations.main()

    assert excinfo.value.code == 1
    assert "Import failed" in " ".join(caplog.messages)


def test_empty_dataset_is_not_a_failure(monkeypatch, tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]", encoding="utf-8")
    FakeRepository.stored = 0
    monkeypatch.setattr(import_locations, "init_pool", lambda: None)
    monkeypatch.setattr(import_locations, "replace_all_locations", lambda rows, batch_size: 0)
    monkeypatch.setattr(import_locations, "LocationRepository", FakeRepository)

    assert import_locations.run_import_job(path=path, batch_size=50) == 0
