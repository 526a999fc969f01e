"""Upload helpers shared by the apps.

Public images (orphan photos) live in the default storage under MEDIA_ROOT.
Receipts uploaded by sponsors and staff live in ``private_storage`` and are
only reachable through short-lived signed links produced by
:func:`signed_file_url` and resolved by ``kafala.views.private_file``.
"""
import io
import logging
import os
import secrets

from django.conf import settings
from django.core import signing
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage
from django.urls import reverse
from django.utils import timezone
from django.utils.deconstruct import deconstructible
from django.utils.functional import cached_property
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
RECEIPT_CONTENT_TYPES = IMAGE_CONTENT_TYPES | {"application/pdf"}

MAX_IMAGE_SIDE = 1200
COMPRESS_TARGET_BYTES = 2 * 1024 * 1024

_SIGNER_SALT = "kafala.private-file"


class PrivateMediaStorage(FileSystemStorage):
    @cached_property
    def base_location(self):
        return self._value_or_setting(self._location, settings.PRIVATE_MEDIA_ROOT)


private_storage = PrivateMediaStorage()


def get_private_storage():
    # Callable form for FileField(storage=...) so migrations stay stable
    return private_storage


def max_upload_bytes() -> int:
    return getattr(settings, "UPLOAD_MAX_BYTES", 5 * 1024 * 1024)


def validate_upload(upload, allowed_types=RECEIPT_CONTENT_TYPES, max_bytes=None):
    """Reject files with an unexpected content type or above the size limit."""
    if upload is None:
        return upload
    content_type = getattr(upload, "content_type", None)
    if content_type and content_type not in allowed_types:
        raise ValidationError("Unsupported file type. Please upload a JPG, PNG, WebP image or a PDF.")
    limit = max_bytes or max_upload_bytes()
    if upload.size > limit:
        raise ValidationError(f"File is too large. The maximum size is {limit // (1024 * 1024)} MB.")
    return upload


@deconstructible
class UploadPath:
    """Build ``<prefix>/<yyyy>/<mm>/<random>.<ext>`` names for uploads."""

    def __init__(self, prefix):
        self.prefix = prefix

    def __call__(self, instance, filename):
        ext = os.path.splitext(filename)[1].lower() or ".bin"
        now = timezone.now()
        return f"{self.prefix}/{now:%Y/%m}/{secrets.token_hex(8)}{ext}"

    def __eq__(self, other):
        return isinstance(other, UploadPath) and other.prefix == self.prefix


def compress_image(upload, target_bytes=COMPRESS_TARGET_BYTES, max_side=MAX_IMAGE_SIDE):
    """Downscale and re-encode an image as JPEG until it fits ``target_bytes``.

    Quality starts at 80 and steps down by 10 while the result is still too
    large, stopping at 30. Returns a ``ContentFile`` named ``<stem>.jpg``.
    Raises ``ValidationError`` if the upload is not a readable image.
    """
    try:
        upload.seek(0)
        img = Image.open(upload)
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("The image could not be read. Please choose a smaller JPG or PNG file.") from exc

    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.thumbnail((max_side, max_side))

    quality = 80
    while True:
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality, optimize=True)
        if buf.tell() <= target_bytes or quality <= 30:
            break
        quality -= 10

    stem = os.path.splitext(os.path.basename(getattr(upload, "name", "") or "image"))[0] or "image"
    logger.info("Compressed image %s to %d bytes at quality %d", stem, buf.tell(), quality)
    return ContentFile(buf.getvalue(), name=f"{stem}.jpg")


def prepare_photo(upload):
    """Validate an orphan photo and compress it when it exceeds the upload limit."""
    if upload is None:
        return upload
    content_type = getattr(upload, "content_type", None)
    if content_type and content_type not in IMAGE_CONTENT_TYPES:
        raise ValidationError("Unsupported image type. Please upload a JPG, PNG or WebP image.")
    if upload.size > max_upload_bytes():
        return compress_image(upload)
    return upload


def signed_file_url(name: str) -> str:
    """Return a relative URL that serves a private file while the signature is valid."""
    token = signing.dumps(name, salt=_SIGNER_SALT)
    return reverse("private_file", kwargs={"token": token})


def resolve_signed_name(token: str, max_age: int) -> str:
    """Return the file name carried by ``token``; raises ``signing.BadSignature`` when invalid or expired."""
    return signing.loads(token, salt=_SIGNER_SALT, max_age=max_age)
