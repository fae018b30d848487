"""Upload body parsing, field sanitizing and strict base64 decoding.

Nothing in here touches the filesystem or the asset store.
"""
import base64
import binascii
import re
import unicodedata
from typing import Any

from pydantic import ValidationError as ModelValidationError

from drive_sync.errors import ValidationError
from drive_sync.models import DecodedPayload, DryRunAck, DryRunFlag, UploadRequest

REQUIRED_FIELDS = ("fileName", "mimeType", "fileData")

_FILENAME_SPECIAL = frozenset("?[]/\\=<>:;,'\"&$#*()|~`!{}%+’«»”“")
_MAX_NAME_BYTES = 200
_MAX_EXT = 16
_TAG_RE = re.compile(r"<[^>]*>?")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")


def _is_control(ch: str) -> bool:
    return unicodedata.category(ch).startswith("C")


def truncate_utf8(value: str, max_bytes: int) -> str:
    return value.encode("utf-8")[:max_bytes].decode("utf-8", "ignore")


def cap_name_bytes(name: str, max_bytes: int) -> str:
    if len(name.encode("utf-8")) <= max_bytes:
        return name
    stem, dot, ext = name.rpartition(".")
    if dot and stem and len(ext) <= _MAX_EXT:
        room = max_bytes - len(ext.encode("utf-8")) - 1
        return f"{truncate_utf8(stem, room)}.{ext}"
    return truncate_utf8(name, max_bytes)


def sanitize_file_name(name: str | None) -> str:
    """Reduce a client file name to a single safe path segment.

    Path separators, shell/URL special characters and control characters are
    dropped, whitespace and dash runs become one dash, and leading/trailing
    ``.-_`` are trimmed so the result can never be a hidden file or ``..``.
    Names are capped at 200 UTF-8 bytes, keeping the extension. Applying the
    function to its own output returns it unchanged.
    """
    name = unicodedata.normalize("NFC", name or "")
    name = re.sub(r"\s+", " ", name)
    name = "".join(ch for ch in name if ch not in _FILENAME_SPECIAL and not _is_control(ch))
    name = re.sub(r"[ -]+", "-", name)
    return cap_name_bytes(name, _MAX_NAME_BYTES).strip(".-_")


def sanitize_text_field(value: str | None) -> str:
    """Plain single-line text: no markup, control characters or %-octets."""
    value = _TAG_RE.sub("", value or "")
    value = "".join(" " if _is_control(ch) else ch for ch in value)
    value = re.sub(r"\s+", " ", value).strip()
    while _OCTET_RE.search(value):
        value = _OCTET_RE.sub("", value)
    return re.sub(r" +", " ", value).strip()


def decode_base64(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("invalid-base64", "fileData must be valid base64.") from e


def _describe(e: ModelValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_upload_request(raw: Any) -> UploadRequest:
    """Resolve the JSON body into an ``UploadRequest``.

    A dry run only looks at ``dryRun``; the remaining fields are not
    type-checked in that case.
    """
    if not isinstance(raw, dict):
        raise ValidationError("invalid-request", "Request body must be a JSON object.")
    try:
        if DryRunFlag.model_validate(raw).dryRun:
            return UploadRequest(dryRun=True)
        return UploadRequest.model_validate(raw)
    except ModelValidationError as e:
        raise ValidationError("invalid-request", _describe(e)) from e


def decode(request: UploadRequest) -> DryRunAck | DecodedPayload:
    if request.dryRun:
        return DryRunAck()
    missing = [f for f in REQUIRED_FIELDS if not getattr(request, f)]
    if missing:
        raise ValidationError("missing-param", f"Missing parameter(s): {', '.join(missing)}")
    content = decode_base64(request.fileData)
    return DecodedPayload(
        file_name=sanitize_file_name(request.fileName),
        mime_type=sanitize_text_field(request.mimeType),
        category=sanitize_text_field(request.category),
        content=content,
    )
