# app/core/storage_utils.py
import re
import time
import uuid

from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "media/brake_pads_1718000000000.jpg"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    bucket = supabase_admin().storage.from_(settings.STORAGE_BUCKET)
    bucket.upload(path, file_bytes, {"upsert": "true", "content-type": content_type})
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path
    (relative to the bucket).
    """
    supabase_admin().storage.from_(settings.STORAGE_BUCKET).remove([path])


def sanitize_filename(original_name: str) -> str:
    """
    Strip the extension and replace anything that is not a letter or
    digit with '_'.

        "Brake pads (front).JPG" -> "Brake_pads__front_"
    """
    stem = re.sub(r"\.[^/.]+$", "", original_name)
    return re.sub(r"[^a-zA-Z0-9]", "_", stem)


def generate_object_path(folder: str, original_name: str, ext: str) -> str:
    """
    Build a collision-resistant object path:

        <folder>/<sanitized name>_<epoch millis>_<8 hex>.<ext>
    """
    millis = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    return f"{folder}/{sanitize_filename(original_name)}_{millis}_{suffix}.{ext}"
