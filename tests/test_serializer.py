"""Tests for mbox and per-message exports."""

from __future__ import annotations

import mailbox
from datetime import datetime, timezone
from pathlib import Path

import pytest

from inbox_merge.core.interfaces import ExportError
from inbox_merge.core.models import EmailRecord
from inbox_merge.export import (
    ExportFormat,
    export_records,
    sanitize_filename,
)
from inbox_merge.export import serializer


def _status() -> EmailRecord:
    return EmailRecord(
        sender="Alice Example <alice@example.com>",
        subject="Status",
        date="Mon, 03 Mar 2025 09:00:00 +0000",
        sent_at=datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc),
        body="Line one\nFrom here on, things change",
        message_id="<s1@example.com>",
    )


def _reply() -> EmailRecord:
    return EmailRecord(
        sender="bob@example.com",
        to="team@example.com",
        subject="Re: Status",
        date="Mon, 03 Mar 2025 10:00:00 +0000",
        body="Thanks!\n",
        in_reply_to="<s1@example.com>",
    )


def test_mbox_export_writes_separator_headers_and_body(tmp_path: Path) -> None:
    destination = tmp_path / "merged.mbox"

    written = export_records([_status(), _reply()], destination, ExportFormat.MBOX)

    assert written == [destination]
    assert destination.read_text(encoding="utf-8") == (
        "From alice@example.com Mon Mar 03 09:00:00 2025\n"
        "From: Alice Example <alice@example.com>\n"
        "Subject: Status\n"
        "Date: Mon, 03 Mar 2025 09:00:00 +0000\n"
        "Message-ID: <s1@example.com>\n"
        "\n"
        "Line one\n"
        ">From here on, things change\n"
        "\n"
        "From bob@example.com Mon, 03 Mar 2025 10:00:00 +0000\n"
        "From: bob@example.com\n"
        "To: team@example.com\n"
        "Subject: Re: Status\n"
        "Date: Mon, 03 Mar 2025 10:00:00 +0000\n"
        "In-Reply-To: <s1@example.com>\n"
        "\n"
        "Thanks!\n"
        "\n"
    )


def test_mbox_export_is_readable_by_mailbox_readers(tmp_path: Path) -> None:
    destination = tmp_path / "merged.mbox"
    export_records([_status(), _reply()], destination, "mbox")

    box = mailbox.mbox(destination, create=False)
    try:
        messages = list(box)
    finally:
        box.close()

    assert [message["Subject"] for message in messages] == ["Status", "Re: Status"]
    assert messages[1]["In-Reply-To"] == "<s1@example.com>"


def test_mbox_export_to_missing_directory_names_path(tmp_path: Path) -> None:
    destination = tmp_path / "missing" / "merged.mbox"

    with pytest.raises(ExportError) as excinfo:
        export_records([_status()], destination, ExportFormat.MBOX)

    assert excinfo.value.path == destination
    assert str(destination) in str(excinfo.value)


def test_failed_export_keeps_previous_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    destination = tmp_path / "merged.mbox"
    export_records([_status()], destination, ExportFormat.MBOX)
    before = destination.read_bytes()

    def failing_replace(source: str, target: Path) -> None:
        raise PermissionError(13, "Permission denied", str(target))

    monkeypatch.setattr(serializer.os, "replace", failing_replace)

    with pytest.raises(ExportError) as excinfo:
        export_records([_reply()], destination, ExportFormat.MBOX)

    assert excinfo.value.path == destination
    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert destination.read_bytes() == before
    assert [path.name for path in tmp_path.iterdir()] == ["merged.mbox"]


def test_eml_export_sanitizes_and_truncates_filenames(tmp_path: Path) -> None:
    folder = tmp_path / "out"
    records = [
        EmailRecord(
            sender="carol@example.com",
            subject="Budget/Plan: Q4 review",
            date="Tue, 04 Mar 2025 10:00:00 +0000",
            body="First body",
        ),
        EmailRecord(
            sender="carol@example.com",
            subject="Re: " + "Very long subject line " * 5,
            date="Tue, 04 Mar 2025 11:00:00 +0000",
            body="Second body",
        ),
        EmailRecord(sender="carol@example.com", subject="", date="", body="Third"),
    ]

    written = export_records(records, folder, ExportFormat.EML)

    names = [path.name for path in written]
    assert names[0] == "1_Budget_Plan_ Q4 review.eml"
    assert names[2] == "3_untitled.eml"
    for index, name in enumerate(names, start=1):
        stem = name.removesuffix(".eml")
        prefix, _, subject_part = stem.partition("_")
        assert prefix == str(index)
        assert "/" not in subject_part and ":" not in subject_part
        assert len(subject_part) <= 50
    assert sorted(path.name for path in folder.iterdir()) == sorted(names)


def test_eml_export_uses_crlf_headers(tmp_path: Path) -> None:
    (path,) = export_records([_reply()], tmp_path, ExportFormat.EML)

    assert path.read_bytes() == (
        b"From: bob@example.com\r\n"
        b"To: team@example.com\r\n"
        b"Subject: Re: Status\r\n"
        b"Date: Mon, 03 Mar 2025 10:00:00 +0000\r\n"
        b"In-Reply-To: <s1@example.com>\r\n"
        b"\r\n"
        b"Thanks!\n"
    )


def test_eml_export_directory_failure_names_path(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied", encoding="utf-8")

    with pytest.raises(ExportError) as excinfo:
        export_records([_status()], blocker, ExportFormat.EML)

    assert excinfo.value.path == blocker


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('a/b\\c?d%e*f|g"h<i>j:k', "a_b_c_d_e_f_g_h_i_j_k"),
        ("  padded  ", "padded"),
        ("x" * 80, "x" * 50),
        ("", "untitled"),
    ],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert sanitize_filename(raw) == expected


def test_control_characters_in_subject_are_replaced(tmp_path: Path) -> None:
    record = EmailRecord(
        sender="carol@example.com",
        subject="bad\x00subject\twith\x7fcontrols",
        date="",
        body="body",
    )

    (path,) = export_records([record], tmp_path, ExportFormat.EML)

    assert path.name == "1_bad_subject_with_controls.eml"
    assert path.read_bytes().endswith(b"\r\n\r\nbody")


@pytest.mark.parametrize("fmt", [ExportFormat.MBOX, ExportFormat.EML])
def test_unencodable_text_raises_export_error(
    tmp_path: Path, fmt: ExportFormat
) -> None:
    record = EmailRecord(
        sender="carol@example.com", subject="Broken", date="", body="lone \udc80 half"
    )
    destination = tmp_path / ("out.mbox" if fmt is ExportFormat.MBOX else "out")

    with pytest.raises(ExportError) as excinfo:
        export_records([record], destination, fmt)

    assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)
    if fmt is ExportFormat.MBOX:
        assert excinfo.value.path == destination
    else:
        assert excinfo.value.path == destination / "1_Broken.eml"
    assert not any(path.is_file() for path in tmp_path.rglob("*"))
