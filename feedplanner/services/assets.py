"""Helpers for a post's parallel ``asset_urls`` / ``asset_types`` lists.

``asset_types[i]`` always describes ``asset_urls[i]``. Every helper returns
fresh lists of equal length and rejects mismatched input with ``ValueError``.
"""
import time
import uuid

from feedplanner.models.post import AssetType
from feedplanner.utils.helpers import sanitize_filename


def check_assets(urls: list[str], types: list[str]) -> None:
    if len(urls) != len(types):
        raise ValueError(
            f"asset_urls and asset_types differ in length ({len(urls)} != {len(types)})"
        )
    for t in types:
        AssetType(t)


def asset_type_for_mime(mime_type: str | None) -> AssetType:
    """``video/*`` is a video; anything else is treated as an image."""
    if mime_type and mime_type.lower().startswith("video/"):
        return AssetType.VIDEO
    return AssetType.IMAGE


def append_asset(
    urls: list[str], types: list[str], url: str, asset_type: AssetType
) -> tuple[list[str], list[str]]:
    check_assets(urls, types)
    return [*urls, url], [*types, AssetType(asset_type).value]


def remove_asset(urls: list[str], types: list[str], index: int) -> tuple[list[str], list[str]]:
    check_assets(urls, types)
    if not 0 <= index < len(urls):
        raise ValueError(f"Asset index {index} out of range")
    return urls[:index] + urls[index + 1:], types[:index] + types[index + 1:]


def move_asset(
    urls: list[str], types: list[str], from_index: int, to_index: int
) -> tuple[list[str], list[str]]:
    check_assets(urls, types)
    size = len(urls)
    if not (0 <= from_index < size and 0 <= to_index < size):
        raise ValueError("Asset index out of range")
    new_urls, new_types = list(urls), list(types)
    new_urls.insert(to_index, new_urls.pop(from_index))
    new_types.insert(to_index, new_types.pop(from_index))
    return new_urls, new_types


def build_storage_path(
    workspace_id: uuid.UUID, account_id: uuid.UUID, filename: str, timestamp_ms: int | None = None
) -> str:
    """Object storage key: ``{workspace}/{account}/{epoch_ms}-{safe_name}``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{workspace_id}/{account_id}/{timestamp_ms}-{sanitize_filename(filename)}"
