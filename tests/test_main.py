import pytest

from cliphistory.database import JsonHistoryBackend
from cliphistory.main import main
from cliphistory.schema import entry_to_record

pytestmark = pytest.mark.usefixtures("clean_env")


@pytest.fixture
def data_dir(monkeypatch, tmp_path, entry_a, entry_b):
    path = tmp_path / "data"
    monkeypatch.setenv("CLIPHISTORY_DATA_DIR", str(path))
    monkeypatch.setenv("CLIPHISTORY_CLIPBOARD", "memory")

    backend = JsonHistoryBackend(path)
    backend.prepend(entry_to_record(entry_b), max_entries=10)
    backend.prepend(entry_to_record(entry_a), max_entries=10)
    return path


def test_list_shows_newest_first(data_dir, capsys):
    assert main(["list"]) == 0
    lines = capsys.readouterr().out.splitlines()

    assert lines[0].split() == ["0", "10:00", "text", "hello"]
    assert lines[1].split() == ["1", "09:59", "url", "http://x.com"]


def test_list_limit(data_dir, capsys):
    main(["list", "--limit", "1"])
    assert len(capsys.readouterr().out.splitlines()) == 1


def test_copy_by_index_and_id(data_dir, entry_b, capsys):
    assert main(["copy", "1"]) == 0
    assert main(["copy", entry_b.id]) == 0
    assert capsys.readouterr().out.splitlines() == ["Copied!", "Copied!"]


def test_copy_unknown_entry(data_dir, capsys):
    assert main(["copy", "7"]) == 1
    assert "No history entry" in capsys.readouterr().err


def test_clear_then_list(data_dir, capsys):
    assert main(["clear"]) == 0
    assert main(["list"]) == 0
    assert "Clipboard history is empty." in capsys.readouterr().out


def test_export_writes_payload(data_dir, tmp_path, entry_a, capsys):
    dest = tmp_path / "out"
    assert main(["export", "0", str(dest)]) == 0

    written = dest / f"{entry_a.id}.txt"
    assert capsys.readouterr().out.strip() == str(written)
    assert written.read_text(encoding="utf-8") == "hello"


def test_bad_configuration_exits_with_2(monkeypatch, capsys):
    monkeypatch.setenv("CLIPHISTORY_BACKEND", "sqlite")
    assert main(["list"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_copy_with_non_ascii_digits_is_an_unknown_entry(data_dir, capsys):
    assert main(["copy", "²"]) == 1
    assert "No history entry" in capsys.readouterr().err
