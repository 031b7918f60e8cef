from unittest.mock import Mock

from datastore import DelegatingSaveHandle, SaveHandle


def test_save_calls_delegate_each_time():
    save = Mock(return_value=3)
    handle = DelegatingSaveHandle(save)
    assert isinstance(handle, SaveHandle)
    assert handle.save() == 3
    assert handle.save() == 3
    assert save.call_count == 2


def test_save_handle_is_lazy():
    save = Mock(return_value=1)
    DelegatingSaveHandle(save)
    save.assert_not_called()


def test_repr_names_target():
    def save_changes():
        return 0

    assert "save_changes" in repr(DelegatingSaveHandle(save_changes))
