import base64

import pytest


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("photo.png", "photo.png"),
        ("my holiday photo.JPG", "my-holiday-photo.JPG"),
        ("a/b\\c.png", "abc.png"),
        ("../../etc/passwd", "etcpasswd"),
        (".htaccess", "htaccess"),
        ("tab\tand\nnewline.txt", "tab-and-newline.txt"),
        ("what?*is|this<>.pdf", "whatisthis.pdf"),
        ("a - - b.png", "a-b.png"),
        ("..", ""),
        ("", ""),
    ],
)
def test_sanitize_file_name(app_ctx, raw, expected):
    from drive_sync.payload import sanitize_file_name

    assert sanitize_file_name(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "photo.png",
        " spaced  out name .png ",
        "__weird__--name--.tar.gz",
        "ünïcödé fïlé.jpg",
        "x" * 300 + ".jpeg",
        "-" * 10 + "y" * 250,
        "a.\x00.b\u200b.png",
        "写" * 150 + ".png",
    ],
)
def test_sanitize_file_name_is_idempotent(app_ctx, raw):
    from drive_sync.payload import sanitize_file_name

    once = sanitize_file_name(raw)
    assert sanitize_file_name(once) == once


def test_sanitize_file_name_keeps_extension_when_truncated(app_ctx):
    from drive_sync.payload import sanitize_file_name

    out = sanitize_file_name("x" * 300 + ".jpeg")
    assert out.endswith(".jpeg")
    assert len(out) == 200


def test_sanitize_text_field(app_ctx):
    from drive_sync.payload import sanitize_text_field

    assert sanitize_text_field("image/png") == "image/png"
    assert sanitize_text_field("  <script>x</script>events\t2024 ") == "xevents 2024"
    assert sanitize_text_field("a%20b") == "ab"
    assert sanitize_text_field("%%4141") == ""
    assert sanitize_text_field(None) == ""


def test_decode_returns_payload(app_ctx):
    from drive_sync.models import DecodedPayload, UploadRequest
    from drive_sync.payload import decode

    req = UploadRequest(
        fileName="photo.png",
        mimeType="image/png",
        fileData=base64.b64encode(b"PNGDATA").decode(),
        category="events",
    )
    out = decode(req)
    assert isinstance(out, DecodedPayload)
    assert out.content == b"PNGDATA"
    assert out.file_name == "photo.png"
    assert out.category == "events"


@pytest.mark.parametrize("data", ["not-base64!!", "UE5HREFUQQ", "UE5H REFUQQ==", "ü"])
def test_decode_rejects_invalid_base64(app_ctx, data):
    from drive_sync.errors import ValidationError
    from drive_sync.models import UploadRequest
    from drive_sync.payload import decode

    with pytest.raises(ValidationError) as e:
        decode(UploadRequest(fileName="a.png", mimeType="image/png", fileData=data))
    assert e.value.reason == "invalid-base64"
    assert e.value.code == "invalid-payload"
    assert e.value.status_code == 400


def test_decode_dry_run_skips_validation(app_ctx):
    from drive_sync.models import DryRunAck, UploadRequest
    from drive_sync.payload import decode

    out = decode(UploadRequest(fileData="not-base64!!", dryRun=True))
    assert isinstance(out, DryRunAck)


def test_decode_missing_fields(app_ctx):
    from drive_sync.errors import ValidationError
    from drive_sync.models import UploadRequest
    from drive_sync.payload import decode

    with pytest.raises(ValidationError) as e:
        decode(UploadRequest(fileName="a.png", fileData=""))
    assert e.value.code == "missing-param"
    assert "mimeType" in e.value.message
    assert "fileData" in e.value.message


def test_parse_upload_request_defaults(app_ctx):
    from drive_sync.payload import parse_upload_request

    req = parse_upload_request({"fileName": "a.png", "mimeType": "image/png", "fileData": "QQ=="})
    assert req.category == ""
    assert req.dryRun is False


def test_parse_upload_request_rejects_wrong_types(app_ctx):
    from drive_sync.errors import ValidationError
    from drive_sync.payload import parse_upload_request

    with pytest.raises(ValidationError) as e:
        parse_upload_request({"fileName": 5, "mimeType": "image/png", "fileData": "QQ=="})
    assert e.value.code == "invalid-request"
    with pytest.raises(ValidationError):
        parse_upload_request(["not", "an", "object"])


def test_parse_upload_request_dry_run_ignores_other_fields(app_ctx):
    from drive_sync.payload import parse_upload_request

    req = parse_upload_request({"dryRun": True, "fileName": 5, "fileData": None})
    assert req.dryRun is True


def test_sanitize_file_name_caps_multibyte_names_by_bytes(app_ctx):
    from drive_sync.payload import sanitize_file_name

    out = sanitize_file_name("写" * 150 + ".png")
    assert out.endswith(".png")
    assert len(out.encode("utf-8")) <= 200
    assert out == "写" * 65 + ".png"
