from __future__ import annotations

from app import main


def test_check_prints_directive(capsys) -> None:
    main(["check", "https://www.youtube.com/xml/feeds/videos.xml?channel_id=ABC#true"])

    out = capsys.readouterr().out
    assert "feed_url: https://www.youtube.com/xml/feeds/videos.xml?channel_id=ABC" in out
    assert "announce_all: True" in out


def test_check_reports_missing_directive(capsys) -> None:
    main(["check", "welcome to the channel"])

    assert "No directive found." in capsys.readouterr().out
