"""
Merging uploaded photos into bobina records.

The upload itself belongs to object storage; these functions only decide what
happens to a record's photo_url. Records are never mutated in place.
"""
from typing import Optional, TypeVar, Union

from . import errors, schemas

RecordT = TypeVar("RecordT", bound=schemas.BobinaData)


def attach_photo(record: RecordT, uploaded: Union[str, None, errors.UploadError]) -> RecordT:
    """
    Merge an upload outcome into a record.

    Args:
        record: The current record (persisted or not)
        uploaded: The public URL of the uploaded photo, None to clear the
            photo, or the UploadError of a failed upload

    Returns:
        A copy of the record with photo_url replaced or cleared

    Raises:
        errors.UploadError: The failed upload, unchanged; the caller keeps its
            record with the previous photo_url
    """
    if isinstance(uploaded, errors.UploadError):
        raise uploaded
    return record.model_copy(update={"photo_url": uploaded or None})


def clear_photo(record: RecordT) -> RecordT:
    """Return a copy of the record without a photo."""
    return attach_photo(record, None)


def upload_and_attach(
    record: RecordT,
    storage,
    data: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> RecordT:
    """
    Upload a photo and merge its URL into a copy of the record.

    Args:
        record: The current record
        storage: Object storage client with upload(data, filename, content_type) -> url
        data: Image bytes
        filename: Original file name
        content_type: Content type hint

    Returns:
        A copy of the record pointing at the new photo

    Raises:
        errors.UploadError: If the upload failed; record is left as it was
    """
    try:
        url = storage.upload(data, filename, content_type)
    except errors.UploadError as e:
        return attach_photo(record, e)
    return attach_photo(record, url)
