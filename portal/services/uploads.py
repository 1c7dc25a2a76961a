"""
Image upload validation and storage.

Admins upload images for articles, the site logo and the hero banner.
Only the declared MIME type is checked; the client's filename and
extension are ignored and the stored name is generated here.
"""
from __future__ import annotations

import enum
import secrets
import time
from dataclasses import dataclass

from django.conf import settings
from django.core.files.storage import FileSystemStorage

MB = 1024 * 1024

ALLOWED_CONTENT_TYPES = frozenset({'image/jpeg', 'image/jpg', 'image/png', 'image/webp'})


class UploadKind(str, enum.Enum):
    GENERIC = 'generic'
    ARTICLE = 'article'
    LOGO = 'logo'
    HERO = 'hero'

    @classmethod
    def parse(cls, value) -> 'UploadKind':
        if not value:
            return cls.GENERIC
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UploadValidationError(f"Unknown upload type: {value}")


MAX_SIZES = {
    UploadKind.GENERIC: 5 * MB,
    UploadKind.ARTICLE: 5 * MB,
    UploadKind.LOGO: 2 * MB,
    UploadKind.HERO: 5 * MB,
}


class UploadError(Exception):
    pass


class UploadValidationError(UploadError):
    """The file was rejected before anything touched the disk."""


class UploadIOError(UploadError):
    """The file was valid but could not be written."""


@dataclass(frozen=True)
class StoredUpload:
    url: str
    name: str
    original_name: str
    content_type: str
    size: int
    kind: UploadKind


def validate_upload(file, kind: UploadKind) -> None:
    if file is None:
        raise UploadValidationError('No file provided')
    content_type = (getattr(file, 'content_type', '') or '').lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadValidationError('Invalid file type. Only JPEG, PNG, and WebP images are allowed.')
    limit = MAX_SIZES[kind]
    if (file.size or 0) > limit:
        raise UploadValidationError(f"File size exceeds the {limit // MB}MB limit")


def generate_filename(content_type: str) -> str:
    """``<epoch-ms>-<random>.<subtype>``; unique without any locking."""
    subtype = content_type.split('/', 1)[1]
    return f"{int(time.time() * 1000)}-{secrets.token_hex(7)}.{subtype}"


def upload_storage() -> FileSystemStorage:
    return FileSystemStorage(location=settings.PORTAL_UPLOAD_ROOT, base_url=settings.PORTAL_UPLOAD_URL)


def store_upload(file, kind: UploadKind) -> StoredUpload:
    """Validate ``file`` and write it to the upload directory."""
    validate_upload(file, kind)
    content_type = file.content_type.lower()
    storage = upload_storage()
    try:
        name = storage.save(generate_filename(content_type), file)
    except OSError as exc:
        raise UploadIOError('Failed to save file') from exc
    return StoredUpload(
        url=storage.url(name),
        name=name,
        original_name=file.name,
        content_type=content_type,
        size=file.size,
        kind=kind,
    )
