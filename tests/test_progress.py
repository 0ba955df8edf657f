from hostops.cli.common.progress import _poll_label, _truncate, operation_progress
from hostops.core.backends import OperationStatus


def test_poll_label_reflects_operation_state():
    assert "RUNNING" in _poll_label(3, OperationStatus(name="op", done=False))
    assert "(poll 3)" in _poll_label(3, OperationStatus(name="op", done=False))
    assert "DONE" in _poll_label(1, OperationStatus(name="op", done=True))
    assert "FAILED" in _poll_label(
        1, OperationStatus(name="op", done=True, error={"message": "x"})
    )


def test_truncate_caps_long_labels():
    assert _truncate("x" * 70, 56).endswith("...")
    assert len(_truncate("x" * 70, 56)) == 56
    assert _truncate("short", 56) == "short"


def test_operation_progress_without_polls_is_silent():
    with operation_progress("Creating backend") as on_poll:
        assert callable(on_poll)
