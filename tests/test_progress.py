"""Tests for the logging progress observer."""

import logging

from shortwave.uploader.progress import LoggingProgressObserver


def test_completion_is_logged(caplog):
    observer = LoggingProgressObserver(label="Sunset")

    with caplog.at_level(logging.INFO, logger="shortwave.uploader.progress"):
        observer.on_progress(1024, 1024)
        observer.on_complete()

    assert "Video upload completed" in caplog.text


def test_progress_tracks_last_percent():
    observer = LoggingProgressObserver()

    observer.on_progress(256, 1024)
    assert observer.last_percent == 25

    observer.on_progress(0, 0)
    assert observer.last_percent == 100
