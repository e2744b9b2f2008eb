import pytest

from core.exceptions import (
    ClassNotFoundError,
    MessageNotFoundError,
    NotAuthorizedError,
    ValidationError,
)
from utils.ids import new_id


@pytest.fixture
def joined(class_manager, algebra, instructor_id, student_id, other_id):
    class_manager.add_member(algebra.class_id, instructor_id, student_id)
    class_manager.add_member(algebra.class_id, instructor_id, other_id)
    return algebra


def test_post_message_trims_and_defaults_channel(message_manager, joined, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "  hello  ")
    assert message.content == "hello"
    assert message.channel == "general"
    assert message.sender_id == student_id
    assert message.created_at == message.updated_at


def test_post_message_requires_member(message_manager, algebra):
    with pytest.raises(NotAuthorizedError):
        message_manager.post_message(algebra.class_id, new_id(), "hi")


def test_post_message_unknown_channel(message_manager, joined, student_id):
    with pytest.raises(ValidationError):
        message_manager.post_message(joined.class_id, student_id, "hi", channel="random")


def test_post_message_to_created_channel(message_manager, channel_registry, joined, instructor_id, student_id):
    channel_registry.create_channel(joined.class_id, instructor_id, "Lab")
    message = message_manager.post_message(joined.class_id, student_id, "hi", channel="lab")
    assert message.channel == "lab"


@pytest.mark.parametrize("content", ["", "   ", None, "x" * 2001])
def test_post_message_content_limits(message_manager, joined, student_id, content):
    with pytest.raises(ValidationError):
        message_manager.post_message(joined.class_id, student_id, content)


def test_post_message_keeps_assignment_reference(message_manager, joined, instructor_id):
    assignment_id = new_id()
    message = message_manager.post_message(
        joined.class_id, instructor_id, "Due Friday", channel="assignments", assignment_id=assignment_id
    )
    assert message.assignment_id == assignment_id


def test_list_messages_in_order_per_channel(message_manager, joined, instructor_id, student_id):
    message_manager.post_message(joined.class_id, student_id, "first")
    message_manager.post_message(joined.class_id, instructor_id, "question?", channel="questions")
    message_manager.post_message(joined.class_id, instructor_id, "second")

    general = message_manager.list_messages(joined.class_id, student_id)
    assert [m.content for m in general] == ["first", "second"]
    questions = message_manager.list_messages(joined.class_id, student_id, "questions")
    assert [m.content for m in questions] == ["question?"]


def test_list_messages_returns_latest_page(message_manager, joined, student_id, monkeypatch):
    monkeypatch.setattr("utils.message_manager.MESSAGE_PAGE_SIZE", 3)
    for i in range(5):
        message_manager.post_message(joined.class_id, student_id, f"m{i}")

    contents = [m.content for m in message_manager.list_messages(joined.class_id, student_id)]
    assert contents == ["m2", "m3", "m4"]


def test_list_messages_requires_member(message_manager, algebra):
    with pytest.raises(NotAuthorizedError):
        message_manager.list_messages(algebra.class_id, new_id())


def test_edit_message_by_sender(message_manager, joined, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    edited = message_manager.edit_message(joined.class_id, message.message_id, student_id, " hi there ")

    assert edited.content == "hi there"
    assert edited.updated_at >= message.updated_at
    assert edited.created_at == message.created_at
    stored = message_manager.list_messages(joined.class_id, student_id)[0]
    assert stored.content == "hi there"
    assert stored.sender_id == student_id


def test_edit_message_by_instructor_is_refused(message_manager, joined, instructor_id, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    with pytest.raises(NotAuthorizedError):
        message_manager.edit_message(joined.class_id, message.message_id, instructor_id, "changed")


def test_edit_message_by_other_member_is_refused(message_manager, joined, student_id, other_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    with pytest.raises(NotAuthorizedError):
        message_manager.edit_message(joined.class_id, message.message_id, other_id, "changed")


def test_edit_message_by_non_member_is_refused(message_manager, class_manager, joined, instructor_id, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    class_manager.remove_member(joined.class_id, instructor_id, student_id)
    with pytest.raises(NotAuthorizedError):
        message_manager.edit_message(joined.class_id, message.message_id, student_id, "changed")


def test_edit_message_empty_content(message_manager, joined, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    with pytest.raises(ValidationError):
        message_manager.edit_message(joined.class_id, message.message_id, student_id, "   ")


def test_edit_missing_message(message_manager, joined, student_id):
    with pytest.raises(MessageNotFoundError):
        message_manager.edit_message(joined.class_id, new_id(), student_id, "hi")


def test_edit_message_in_missing_class(message_manager, student_id):
    with pytest.raises(ClassNotFoundError):
        message_manager.edit_message(new_id(), new_id(), student_id, "hi")


def test_message_lookup_is_scoped_to_class(message_manager, class_manager, joined, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    elsewhere = class_manager.create_class(student_id, "Own", "Own class")
    with pytest.raises(MessageNotFoundError):
        message_manager.delete_message(elsewhere.class_id, message.message_id, student_id)


def test_delete_message_by_sender(message_manager, joined, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    message_manager.delete_message(joined.class_id, message.message_id, student_id)
    assert message_manager.list_messages(joined.class_id, student_id) == []


def test_delete_message_by_instructor(message_manager, joined, instructor_id, student_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    message_manager.delete_message(joined.class_id, message.message_id, instructor_id)
    assert message_manager.list_messages(joined.class_id, student_id) == []


def test_delete_message_by_other_member_is_refused(message_manager, joined, student_id, other_id):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    with pytest.raises(NotAuthorizedError):
        message_manager.delete_message(joined.class_id, message.message_id, other_id)
    assert len(message_manager.list_messages(joined.class_id, student_id)) == 1


def test_delete_missing_message(message_manager, joined, instructor_id):
    with pytest.raises(MessageNotFoundError):
        message_manager.delete_message(joined.class_id, new_id(), instructor_id)


def test_edit_message_deleted_meanwhile(message_manager, joined, instructor_id, student_id, monkeypatch):
    message = message_manager.post_message(joined.class_id, student_id, "hello")
    message_manager.delete_message(joined.class_id, message.message_id, instructor_id)
    monkeypatch.setattr(message_manager, "_get_message", lambda class_id, message_id: message)

    with pytest.raises(MessageNotFoundError):
        message_manager.edit_message(joined.class_id, message.message_id, student_id, "changed")
