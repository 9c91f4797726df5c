"""Filesystem-backed object storage for profile avatars.

Objects are addressed by keys of the form ``{user_id}/avatar`` relative to
``STORAGE_ROOT/avatars``.  Each upload overwrites the previous object; there
is no versioning.  Uploads are normalised with Pillow before they are written:

* EXIF orientation is applied and the image is shrunk to fit a square of
  ``AVATAR_MAX_DIMENSION`` pixels (never enlarged);
* PNG and GIF sources are stored as PNG, everything else as JPEG at
  ``AVATAR_JPEG_QUALITY``.

Decoding and disk access run in a worker thread so the event loop keeps
serving requests during an upload.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path, PurePosixPath

from PIL import Image, ImageOps, UnidentifiedImageError

from havbors.errors import InvalidImageError, NotFoundError
from havbors.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

AVATAR_OBJECT_NAME = "avatar"
_LOSSLESS_SOURCE_FORMATS = {"PNG", "GIF"}
_CONTENT_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


@dataclass(frozen=True, slots=True)
class StoredObject:
    key: str
    content_type: str
    size: int


def avatar_key(user_id: str) -> str:
    return f"{user_id}/{AVATAR_OBJECT_NAME}"


def encode_avatar(data: bytes, *, max_dimension: int, jpeg_quality: int) -> tuple[bytes, str]:
    """Return the re-encoded image bytes and their Pillow format name."""

    try:
        with Image.open(BytesIO(data)) as source:
            source_format = (source.format or "").upper()
            image = ImageOps.exif_transpose(source)
            image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            output = BytesIO()
            if source_format in _LOSSLESS_SOURCE_FORMATS:
                if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                    image = image.convert("RGBA")
                image.save(output, "PNG", optimize=True)
                return output.getvalue(), "PNG"

            if image.mode in ("RGBA", "LA", "P"):
                image = image.convert("RGBA")
                background = Image.new("RGB", image.size, (255, 255, 255))
                background.paste(image, mask=image.split()[-1])
                image = background
            elif image.mode != "RGB":
                image = image.convert("RGB")
            image.save(output, "JPEG", quality=jpeg_quality, optimize=True)
            return output.getvalue(), "JPEG"
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise InvalidImageError(f"Unsupported or corrupt image: {exc}") from exc


def sniff_content_type(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as image:
            return _CONTENT_TYPES.get((image.format or "").upper(), "application/octet-stream")
    except (UnidentifiedImageError, OSError):
        return "application/octet-stream"


class AvatarStorage:
    def __init__(
        self,
        root: Path,
        *,
        max_dimension: int = 500,
        jpeg_quality: int = 70,
    ) -> None:
        self._root = root
        self._max_dimension = max_dimension
        self._jpeg_quality = jpeg_quality

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "AvatarStorage":
        resolved = settings or get_settings()
        return cls(
            resolved.avatar_storage_path,
            max_dimension=resolved.avatar_max_dimension,
            jpeg_quality=resolved.avatar_jpeg_quality,
        )

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, key: str) -> Path:
        relative = PurePosixPath(key.strip("/"))
        if not relative.parts or any(part in ("", ".", "..") for part in relative.parts):
            raise NotFoundError("Avatar", key)
        return self._root.joinpath(*relative.parts)

    async def save_avatar(self, user_id: str, data: bytes) -> StoredObject:
        """Normalise ``data`` and write it to ``{user_id}/avatar``, replacing any previous upload."""

        if not data:
            raise InvalidImageError("Empty upload")
        key = avatar_key(user_id)
        target = self._resolve(key)
        encoded, image_format = await asyncio.to_thread(
            encode_avatar,
            data,
            max_dimension=self._max_dimension,
            jpeg_quality=self._jpeg_quality,
        )
        await asyncio.to_thread(self._write, target, encoded)
        logger.info("Stored %s avatar for %s (%d bytes)", image_format, user_id, len(encoded))
        return StoredObject(key=key, content_type=_CONTENT_TYPES[image_format], size=len(encoded))

    async def load(self, key: str) -> tuple[bytes, str]:
        """Return the object bytes and content type for ``key``.

        Clients sometimes append a file extension (``abc/avatar.jpg``); when the
        exact key is missing the extension is dropped and the lookup retried.
        """

        candidates = [key]
        stem = PurePosixPath(key)
        if stem.suffix:
            candidates.append(str(stem.with_suffix("")))

        for candidate in candidates:
            path = self._resolve(candidate)
            if path.is_file():
                data = await asyncio.to_thread(path.read_bytes)
                return data, sniff_content_type(data)
        raise NotFoundError("Avatar", key)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.tmp")
        tmp.write_bytes(data)
        tmp.replace(target)


__all__ = ["AvatarStorage", "StoredObject", "avatar_key", "encode_avatar"]
