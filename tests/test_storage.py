import pytest

from hiregate.services import mail, storage

MARKER = "/storage/v1/object/public/audios/"


@pytest.mark.parametrize("value, expected", [
    (f"https://cdn.example.net{MARKER}a.webm", True),
    (f"  s3://bucket{MARKER}a.mp3 ", True),
    ("https://cdn.example.net/storage/v1/object/public/images/a.png", False),
    (f"see {MARKER}a.webm", False),
    ("I would return the wallet", False),
    (None, False),
])
def test_is_audio_reference(ctx, value, expected):
    assert storage.is_audio_reference(value) is expected


def test_guess_audio_mime():
    assert storage.guess_audio_mime("https://x/a.webm?token=1") == "audio/webm"
    assert storage.guess_audio_mime("https://x/a.mp3") == "audio/mpeg"
    assert storage.guess_audio_mime("https://x/recording") == "audio/webm"


def test_download_bytes_from_file(ctx, tmp_path):
    path = tmp_path / "answer.webm"
    path.write_bytes(b"\x1aE\xdf\xa3")
    assert storage.download_bytes(f"file://{path}") == b"\x1aE\xdf\xa3"
    with pytest.raises(ValueError):
        storage.download_bytes("ftp://host/file")


def test_send_mail_without_key_only_logs(ctx):
    assert mail.send_mail("rh@acme.mx", "Hi", "<p>Hi</p>") == ("log", None)


def test_send_mail_with_sendgrid(ctx, monkeypatch):
    sent = []

    class FakeClient:
        def __init__(self, api_key):
            self.api_key = api_key

        def send(self, message):
            sent.append(message)

            class Resp:
                status_code = 202
            return Resp()

    ctx.config["SENDGRID_API_KEY"] = "sg-key"
    monkeypatch.setattr(mail, "SendGridAPIClient", FakeClient)
    assert mail.send_mail("rh@acme.mx", "Hi", "<p>Hi</p>") == ("sendgrid", 202)
    assert len(sent) == 1
