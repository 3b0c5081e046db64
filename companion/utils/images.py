"""Loading image attachments"""

import base64
import mimetypes
from pathlib import Path

from companion.models.gemini import ImageData
from companion.utils.formatting import format_file_size


class ImageAttachmentError(Exception):
    """Raised when a file cannot be attached as an image"""

    pass


def load_image(path: Path, max_bytes: int) -> ImageData:
    """Read an image file into an inline payload, enforcing type and size"""
    path = Path(path).expanduser()

    if not path.is_file():
        raise ImageAttachmentError(f"Image file not found: {path}")

    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ImageAttachmentError(f"Not an image file: {path.name}")

    if path.stat().st_size > max_bytes:
        raise ImageAttachmentError(
            f"Image file size must be less than {format_file_size(max_bytes)}"
        )

    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return ImageData(mime_type=mime_type, base64_data=data)
