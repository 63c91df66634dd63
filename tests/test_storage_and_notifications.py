"""Upload validation, local storage and email notification tests."""
import os
from unittest.mock import MagicMock, patch

import pytest

from core.errors import ValidationError
from core.storage import LocalFileStorage, build_object_name, folder_for, validate_upload
from services.email_service import EmailSender, render_template
from services.notification_service import NotificationService, NotificationType
from tests.fixtures import RecordingSender, make_file


class TestUploadValidation:
    def test_folders_by_field(self):
        assert folder_for("profilePicture") == "images"
        assert folder_for("logo") == "images"
        assert folder_for("kycDocument") == "documents"
        assert folder_for("proofFiles") == "misc"

    def test_rejects_oversized_files(self):
        with pytest.raises(ValidationError, match="too large"):
            validate_upload(make_file(data=b"x" * 11), max_size=10)

    def test_images_only_for_pictures(self):
        with pytest.raises(ValidationError):
            validate_upload(make_file(field="logo", filename="logo.pdf", content_type="application/pdf"))

    def test_kyc_accepts_pdf_not_text(self):
        validate_upload(make_file(field="kycDocument", filename="id.pdf", content_type="application/pdf"))
        with pytest.raises(ValidationError):
            validate_upload(make_file(field="kycDocument", filename="id.txt", content_type="text/plain"))

    def test_object_name_keeps_extension(self):
        name = build_object_name(make_file(field="logo", filename="Brand.PNG"))
        assert name.startswith("logo-")
        assert name.endswith(".png")


class TestLocalFileStorage:
    def test_writes_file_and_returns_relative_url(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        url = storage.store(make_file(field="profilePicture", data=b"image-bytes"))

        assert url.startswith("uploads/images/profilePicture-")
        stored = tmp_path / "images" / url.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"image-bytes"

    def test_explicit_folder(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        url = storage.store(make_file(), folder="chat")
        assert url.startswith("uploads/chat/")
        assert os.path.isdir(tmp_path / "chat")

    def test_delete_removes_stored_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        url = storage.store(make_file())

        storage.delete(url)

        assert os.listdir(tmp_path / "misc") == []
        storage.delete(url)


class TestEmailTemplates:
    def test_rejection_includes_reason(self):
        content = render_template("influencer_rejected", "Jane", "Blurry ID")
        assert content["subject"] == "Influencer Profile Review Update"
        assert "Blurry ID" in content["html"]

    def test_every_notification_type_has_a_template(self):
        arity = {"influencer_rejected": 2, "campaign_application": 2, "campaign_accepted": 2}
        for t in NotificationType:
            content = render_template(t.value, *["x"] * arity.get(t.value, 1))
            assert content["subject"]

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            render_template("newsletter")


class TestEmailSender:
    def test_disabled_without_host(self):
        sender = EmailSender(host="")
        assert sender.enabled is False
        assert sender.send("a@example.com", "Hi", "<p>Hi</p>") is False

    def test_sends_over_smtp(self):
        sender = EmailSender(host="smtp.example.com", port=587, user="bot@example.com", password="pw")
        smtp = MagicMock()
        with patch("services.email_service.smtplib.SMTP") as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = smtp
            assert sender.send_template("jane@example.com", "welcome", "Jane") is True

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("bot@example.com", "pw")
        args = smtp.sendmail.call_args[0]
        assert args[0] == "bot@example.com"
        assert args[1] == ["jane@example.com"]


class TestNotificationService:
    def test_skips_empty_address(self):
        sender = RecordingSender()
        assert NotificationService(sender).notify_welcome("", "Jane") is False
        assert sender.sent == []

    def test_failures_are_swallowed(self):
        service = NotificationService(RecordingSender(fail=True))
        assert service.notify_influencer_approved("jane@example.com", "Jane") is False

    def test_rejection_reason_defaults(self):
        sender = RecordingSender()
        NotificationService(sender).notify_influencer_rejected("jane@example.com", "Jane", None)
        assert sender.sent[0]["args"] == ("Jane", "Not specified")
