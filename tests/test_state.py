"""Tests for the peak-hold bullet stabilizer."""

from br_recorder.gamestate.state import BulletStabilizer


def run(stabilizer, cycles):
    return [stabilizer.update(c) for c in cycles]


def test_peak_hold_sequence():
    stabilizer = BulletStabilizer()
    emitted = run(stabilizer, [(1, 1), (3, 1), (2, 1)])
    assert emitted == [(1, 1), (3, 1), None]
    assert stabilizer.counts == (3, 1)

    # Display gone: reset without emitting
    assert stabilizer.update(None) is None
    assert stabilizer.counts == (0, 0)


def test_below_floor_resets():
    stabilizer = BulletStabilizer(max_real=3, max_empty=2)
    assert stabilizer.update((1, 0)) is None
    assert stabilizer.counts == (0, 0)


def test_floor_counts_both_classes():
    stabilizer = BulletStabilizer()
    assert stabilizer.update((1, 1)) == (1, 1)
    assert stabilizer.update((0, 2)) == (1, 2)


def test_growth_on_one_axis_emits_both_peaks():
    stabilizer = BulletStabilizer()
    stabilizer.update((2, 2))
    assert stabilizer.update((1, 4)) == (2, 4)


def test_repeated_counts_do_not_emit():
    stabilizer = BulletStabilizer()
    assert run(stabilizer, [(2, 2), (2, 2), (1, 2), (2, 1)]) == [(2, 2), None, None, None]


def test_new_session_after_reset_emits_again():
    stabilizer = BulletStabilizer()
    stabilizer.update((4, 2))
    stabilizer.reset()
    assert stabilizer.update((2, 1)) == (2, 1)
