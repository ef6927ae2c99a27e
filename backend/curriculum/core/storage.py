import os
import time
import oss2
from curriculum.core.config import settings


class FileTooLarge(Exception):
    """Upload exceeded the configured size cap."""


def is_oss_enabled() -> bool:
    return bool(
        settings.STORAGE_BACKEND.lower() == "oss"
        and settings.OSS_ENDPOINT
        and settings.OSS_BUCKET
        and settings.OSS_ACCESS_KEY
        and settings.OSS_SECRET
    )


_oss_bucket = None


def _get_oss_bucket():
    global _oss_bucket
    if _oss_bucket is None:
        auth = oss2.Auth(settings.OSS_ACCESS_KEY, settings.OSS_SECRET)
        _oss_bucket = oss2.Bucket(auth, settings.OSS_ENDPOINT, settings.OSS_BUCKET)
    return _oss_bucket


def safe_filename(name: str) -> str:
    cleaned = os.path.basename(name.replace("\\", "/")).replace("..", "_").replace(" ", "_")
    return cleaned.strip() or "file"


def timestamped_name(original: str) -> str:
    """Storage name for an upload: ``<unix-ms>-<sanitized original name>``."""
    return f"{int(time.time() * 1000)}-{safe_filename(original)}"


def save_file_local(file_obj, storage_path: str, max_bytes: int) -> int:
    size = 0
    os.makedirs(os.path.dirname(storage_path) or ".", exist_ok=True)
    with open(storage_path, "wb") as f:
        while True:
            chunk = file_obj.read(1024 * 1024)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                f.close()
                os.remove(storage_path)
                raise FileTooLarge(storage_path)
            f.write(chunk)
    return size


def save_file_oss(file_obj, key: str, max_bytes: int) -> int:
    data = file_obj.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise FileTooLarge(key)
    _get_oss_bucket().put_object(key, data)
    return len(data)


def build_oss_url(key: str) -> str:
    if settings.OSS_BASE_URL:
        return f"{settings.OSS_BASE_URL.rstrip('/')}/{key}"
    bucket = _get_oss_bucket()
    return f"https://{bucket.bucket_name}.{bucket.endpoint.replace('http://', '').replace('https://', '')}/{key}"
