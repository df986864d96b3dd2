"""Tests for mapping cycle outcomes to UI signals."""

import logging

from br_recorder.gamestate.signals import (BulletFilling, CycleOutcome, IdentifyFailed,
                                           LoggingSink, ModelLoadFailed, OutcomeKind,
                                           ScreenshotFailed, signal_for_outcome)


def test_success_with_growth_emits_counts():
    assert signal_for_outcome(CycleOutcome.success((3, 1))) == BulletFilling(3, 1)


def test_success_without_growth_is_silent():
    assert signal_for_outcome(CycleOutcome.success()) is None


def test_skipped_is_silent():
    assert signal_for_outcome(CycleOutcome.skipped()) is None


def test_failures_map_to_failure_signals():
    assert signal_for_outcome(CycleOutcome(OutcomeKind.CAPTURE_FAILURE)) == ScreenshotFailed()
    assert signal_for_outcome(CycleOutcome(OutcomeKind.IDENTIFY_FAILURE)) == IdentifyFailed()
    signal = signal_for_outcome(CycleOutcome(OutcomeKind.MODEL_FAILURE, message="missing"))
    assert signal == ModelLoadFailed("missing")


def test_signal_names():
    assert BulletFilling(1, 1).name == "bullet-filling"
    assert ScreenshotFailed().name == "screenshot-failed"
    assert IdentifyFailed().name == "identify-failed"


def test_logging_sink(caplog):
    with caplog.at_level(logging.INFO, logger="br_recorder.gamestate.signals"):
        LoggingSink().emit(BulletFilling(2, 3))
        LoggingSink().emit(ScreenshotFailed())
    assert "2 real, 3 empty" in caplog.text
    assert "screenshot-failed" in caplog.text
