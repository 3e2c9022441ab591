"""
Tests for the type-to-confirm gate model
"""
import pytest

from dbadmin.state.confirm_state import ConfirmRequest, TypeToConfirmState


@pytest.fixture
def gate():
    return TypeToConfirmState()


@pytest.fixture
def results():
    return []


def test_request_defaults():
    req = ConfirmRequest.from_options()
    assert req == ConfirmRequest(
        title="Confirm Action",
        message="This action cannot be undone.",
        details="",
        confirm_word="DELETE",
        confirm_button_text="Delete",
    )


def test_request_accepts_camel_case_and_skips_empty():
    req = ConfirmRequest.from_options(
        title="Delete User",
        message="",
        confirmWord="bob",
        confirmButtonText="Delete User",
        extra="ignored",
    )
    assert req.title == "Delete User"
    assert req.message == "This action cannot be undone."
    assert req.confirm_word == "bob"
    assert req.confirm_button_text == "Delete User"


def test_confirm_disabled_until_exact_match(gate, results):
    """Only byte-exact input enables confirm"""
    gate.request({"confirm_word": "users"}, results.append)

    for typed in ["", "user", "Users", "USERS", "users ", " users"]:
        assert gate.set_input(typed) is False
        assert gate.can_confirm is False

    assert gate.set_input("users") is True
    assert gate.can_confirm is True


def test_diverging_input_disables_again(gate, results):
    gate.request({"confirm_word": "users"}, results.append)
    gate.set_input("users")
    gate.set_input("users1")

    assert gate.can_confirm is False
    assert gate.confirm() is False
    assert results == []
    assert gate.is_pending


def test_confirm_after_match_resolves_true(gate, results):
    gate.request({"confirm_word": "users"}, results.append)
    gate.set_input("users")

    assert gate.confirm() is True
    assert results == [True]
    assert not gate.is_pending


def test_submit_behaves_like_confirm(gate, results):
    """Enter confirms only when the button would be enabled"""
    gate.request({"confirm_word": "x"}, results.append)
    assert gate.submit() is False
    gate.set_input("x")
    assert gate.submit() is True
    assert results == [True]


@pytest.mark.parametrize("typed", ["", "wrong", "DELETE"])
def test_cancel_always_resolves_false(gate, results, typed):
    """Cancel ignores whatever is in the field"""
    gate.request(ConfirmRequest(), results.append)
    gate.set_input(typed)
    gate.cancel()

    assert results == [False]
    assert not gate.is_pending


def test_settles_only_once(gate, results):
    gate.request(ConfirmRequest(), results.append)
    gate.set_input("DELETE")
    gate.confirm()
    gate.cancel()
    gate.settle(True)

    assert results == [True]


def test_settle_without_request_is_noop(gate):
    gate.settle(True)
    gate.cancel()
    assert gate.confirm() is False


def test_reentry_resets_content_and_input(gate, results):
    """A new request does not inherit anything from the previous one"""
    gate.request({"title": "First", "details": "d1", "confirm_word": "a"}, results.append)
    gate.set_input("a")
    gate.confirm()

    gate.request({"title": "Second", "confirm_word": "b"}, results.append)

    assert gate.current.title == "Second"
    assert gate.current.details == ""
    assert gate.typed == ""
    assert gate.can_confirm is False
    assert gate.confirm() is False


def test_new_request_while_pending_cancels_previous(gate):
    first, second = [], []
    gate.request({"confirm_word": "a"}, first.append)
    gate.request({"confirm_word": "b"}, second.append)

    assert first == [False]
    assert second == []
    assert gate.is_pending
