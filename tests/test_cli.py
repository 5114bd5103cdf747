from unittest.mock import patch

import pytest

from video_queue.cli import main


def test_cli_help_displays():
    """Test --help works without errors."""
    with patch("sys.argv", ["video-queue", "--help"]):
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0


def test_cli_queue_help():
    with patch("sys.argv", ["video-queue", "queue", "--help"]):
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0


def test_cli_init_db_scan_and_queue(tmp_path, capsys):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    videos = tmp_path / "videos"
    videos.mkdir()
    (videos / "a.mp4").write_bytes(b"x" * 4)

    with patch("sys.argv", ["video-queue", "--db", db_url, "init-db"]):
        main()
    assert "tables created" in capsys.readouterr().out.lower()

    with patch("sys.argv", ["video-queue", "--db", db_url, "--videos-dir", str(videos), "scan"]):
        main()
    out = capsys.readouterr().out
    assert "a.mp4" in out
    assert "1 unprocessed video(s)" in out

    with patch("sys.argv", ["video-queue", "--db", db_url, "queue", "--page-size", "5"]):
        main()
    assert "0 total" in capsys.readouterr().out


def test_cli_scan_missing_directory_exits_nonzero(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    with patch("sys.argv", ["video-queue", "--db", db_url, "init-db"]):
        main()

    argv = ["video-queue", "--db", db_url, "--videos-dir", str(tmp_path / "missing"), "scan"]
    with patch("sys.argv", argv):
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1


def test_cli_queue_rejects_unknown_status(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    with patch("sys.argv", ["video-queue", "--db", db_url, "init-db"]):
        main()

    with patch("sys.argv", ["video-queue", "--db", db_url, "queue", "--status", "bogus"]):
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
