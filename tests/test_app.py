from chatcal.app import main


def test_cli_writes_ics_with_stub(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("USE_STUB", "1")
    ics_path = tmp_path / "week.ics"

    assert main(["gym three times a week", "--ics", str(ics_path), "--links"]) == 0

    output = capsys.readouterr().out
    assert "Schedule (America/New_York):" in output
    assert "https://www.icloud.com/calendar/event?title=Gym" in output
    assert ics_path.read_bytes().count(b"BEGIN:VEVENT") == 3


def test_cli_reports_invalid_request(tmp_path):
    assert main(["   ", "--ics", str(tmp_path / "never.ics")]) == 1
    assert not (tmp_path / "never.ics").exists()
