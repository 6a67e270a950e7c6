"""Tests for the timestamped console logger."""

from datetime import datetime

from actserver.infrastructure.log import log


def test_prefixes_iso_timestamp(capsys):
    log("Socket connected", "127.0.0.1:5000")
    line = capsys.readouterr().out.strip()

    assert line.startswith("[")
    stamp, _, rest = line[1:].partition("] ")
    datetime.fromisoformat(stamp)
    assert rest == "Socket connected 127.0.0.1:5000"
