"""Tests for thread reading and attachment lookup."""

import io
from unittest.mock import MagicMock

import pytest

from muchview.errors import NotFoundError, ValidationError
from muchview.notmuch import ShowClient
from muchview.read import (
    Attachment,
    AttachmentStream,
    open_attachment,
    read_thread,
    thread_subject,
)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=ShowClient)


@pytest.fixture
def thread_payload() -> list:
    """notmuch show output for one thread with a root and a reply."""
    return [
        [
            [
                {
                    "id": "root@example.com",
                    "headers": {"Subject": "Lunch?"},
                    "body": [{"id": 1, "content-type": "text/plain", "content": "Noon?"}],
                },
                [
                    [
                        {
                            "id": "reply@example.com",
                            "headers": {"Subject": "Re: Lunch?"},
                            "body": [{"id": 1, "content-type": "text/plain", "content": "Yes"}],
                        },
                        [],
                    ]
                ],
            ]
        ]
    ]


class TestReadThread:
    """Tests for read_thread()."""

    def test_builds_messages(self, client, thread_payload):
        client.show.return_value = thread_payload

        messages = read_thread(client, "0000abc")

        client.show.assert_called_once_with("thread:0000abc")
        assert [m.id for m in messages] == ["root@example.com"]
        assert messages[0].body == "Noon?"
        assert messages[0].children[0].id == "reply@example.com"
        assert thread_subject(messages) == "Lunch?"

    def test_accepts_unwrapped_entries(self, client, thread_payload):
        client.show.return_value = thread_payload[0]

        messages = read_thread(client, "0000abc")

        assert messages[0].id == "root@example.com"
        assert messages[0].children[0].id == "reply@example.com"

    def test_single_bare_message_pair(self, client):
        client.show.return_value = [[{"id": "a@x", "body": []}, []]]

        messages = read_thread(client, "t1")

        assert [m.id for m in messages] == ["a@x"]

    def test_empty_thread_wrapper(self, client):
        client.show.return_value = [[]]

        with pytest.raises(NotFoundError):
            read_thread(client, "t1")

    def test_strips_thread_id(self, client, thread_payload):
        client.show.return_value = thread_payload

        read_thread(client, "  0000abc \n")

        client.show.assert_called_once_with("thread:0000abc")

    def test_empty_thread_id(self, client):
        with pytest.raises(ValidationError):
            read_thread(client, "  ")

        client.show.assert_not_called()

    def test_no_messages(self, client):
        client.show.return_value = []

        with pytest.raises(NotFoundError):
            read_thread(client, "missing")

    def test_only_malformed_messages(self, client):
        client.show.return_value = [[["bogus"]]]

        with pytest.raises(NotFoundError):
            read_thread(client, "broken")


class TestThreadSubject:
    """Tests for thread_subject()."""

    def test_no_messages(self):
        assert thread_subject([]) is None

    def test_no_subject_header(self, client):
        client.show.return_value = [[[{"id": "m", "headers": {}}, []]]]

        assert thread_subject(read_thread(client, "t")) is None


class TestOpenAttachment:
    """Tests for open_attachment()."""

    def test_looks_up_part(self, client):
        client.show_part_metadata.return_value = {
            "id": 2,
            "content-type": "application/pdf",
            "filename": "report.pdf",
        }

        stream = open_attachment(client, "id:abc@example.com", "2")

        client.show_part_metadata.assert_called_once_with("id:abc@example.com", 2)
        assert stream.query == "id:abc@example.com"
        assert stream.attachment.part == 2
        assert stream.attachment.filename == "report.pdf"

    def test_id_prefix_is_optional(self, client):
        client.show_part_metadata.return_value = {"id": 1}

        stream = open_attachment(client, "abc@example.com", 1)

        assert stream.query == "id:abc@example.com"

    @pytest.mark.parametrize("part", [None, "", "abc", "-1", -1, "1.5", True])
    def test_invalid_part(self, client, part):
        with pytest.raises(ValidationError):
            open_attachment(client, "abc", part)

        client.show_part_metadata.assert_not_called()

    @pytest.mark.parametrize("message_id", ["", "  ", "id:", None])
    def test_missing_message_id(self, client, message_id):
        with pytest.raises(ValidationError):
            open_attachment(client, message_id, "1")

    def test_unknown_part(self, client):
        client.show_part_metadata.return_value = {}

        with pytest.raises(NotFoundError):
            open_attachment(client, "abc", "9")


class TestAttachmentStream:
    """Tests for AttachmentStream."""

    def test_headers(self, client):
        stream = AttachmentStream(
            Attachment("report.pdf", "application/pdf", "attachment", None, 2),
            client,
            "id:m",
        )

        assert stream.headers() == {
            "Content-Type": "application/pdf",
            "Content-Disposition": 'attachment; filename="report.pdf"',
        }

    def test_headers_without_filename(self, client):
        stream = AttachmentStream(
            Attachment("", "image/png\r\nX-Evil: 1", "inline", "<c>", 3), client, "id:m"
        )

        assert stream.headers() == {"Content-Type": "image/pngX-Evil: 1"}

    def test_non_ascii_filename(self, client):
        stream = AttachmentStream(Attachment("résumé.pdf", part=1), client, "id:m")

        assert stream.headers()["Content-Disposition"] == (
            "attachment; filename=\"r_sum_.pdf\"; filename*=UTF-8''r%C3%A9sum%C3%A9.pdf"
        )

    def test_iter_bytes(self, client):
        client.iter_part.return_value = iter([b"%PDF", b"-1.4"])
        stream = AttachmentStream(Attachment("a.pdf", part=2), client, "id:m")

        assert b"".join(stream.iter_bytes()) == b"%PDF-1.4"
        client.iter_part.assert_called_once_with("id:m", 2)

    def test_write_to(self, client):
        client.stream_part.return_value = 8
        sink = io.BytesIO()
        stream = AttachmentStream(Attachment("a.pdf", part=2), client, "id:m")

        assert stream.write_to(sink) == 8
        client.stream_part.assert_called_once_with("id:m", 2, sink)
