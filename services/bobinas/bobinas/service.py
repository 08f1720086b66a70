"""
Inventory operations over a record store.

InventoryService validates candidates, stamps ownership on create, and turns
record store signals into domain errors. It keeps no state between calls:
every read goes to the store, so statistics and filtered views are always
derived from a fresh listing.
"""
import logging
from typing import Any, List, Mapping, Optional

from . import errors, schemas
from .analytics import summarize
from .filters import filter_bobinas, filter_options
from .photos import upload_and_attach
from .stores import RecordStore
from .validators import validate_bobina

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, store: RecordStore):
        self.store = store

    def list_bobinas(self) -> List[schemas.Bobina]:
        """Return every bobina, newest first."""
        return self.store.list_records()

    def get_bobina(self, bobina_id: str) -> schemas.Bobina:
        bobina = self.store.get(bobina_id)
        if bobina is None:
            raise errors.NotFoundError(bobina_id)
        return bobina

    def create_bobina(self, candidate: Mapping[str, Any], owner_id: str) -> schemas.Bobina:
        """
        Validate and persist a new bobina owned by owner_id.

        Raises:
            errors.ValidationError: Candidate rejected; nothing is sent to the store
            errors.ConflictError: The code is already taken
            errors.TransportError: The store is unavailable
        """
        data = validate_bobina(candidate)
        payload = data.model_dump()
        payload["owner_id"] = owner_id
        try:
            bobina = self.store.insert(payload)
        except errors.UniqueViolation as e:
            logger.warning(f"Duplicate bobina code '{data.code}' rejected by store: {e.detail}")
            raise errors.ConflictError("code", data.code) from e
        logger.info(f"Created bobina {bobina.id} ({bobina.code}) for user {owner_id}")
        return bobina

    def update_bobina(self, bobina_id: str, candidate: Mapping[str, Any]) -> schemas.Bobina:
        """
        Validate and replace the editable fields of a bobina.

        id and owner_id are never taken from the candidate.

        Raises:
            errors.ValidationError: Candidate rejected; stored record unchanged
            errors.NotFoundError: No bobina with this id
            errors.ConflictError: The new code is already taken
            errors.TransportError: The store is unavailable
        """
        data = validate_bobina(candidate)
        try:
            bobina = self.store.update(bobina_id, data.model_dump())
        except errors.UniqueViolation as e:
            logger.warning(f"Update of bobina {bobina_id} to code '{data.code}' rejected by store: {e.detail}")
            raise errors.ConflictError("code", data.code) from e
        if bobina is None:
            logger.warning(f"Update of unknown bobina {bobina_id}")
            raise errors.NotFoundError(bobina_id)
        logger.info(f"Updated bobina {bobina.id} ({bobina.code})")
        return bobina

    def delete_bobina(self, bobina_id: str) -> None:
        """
        Permanently delete a bobina.

        Raises:
            errors.NotFoundError: No bobina with this id
            errors.TransportError: The store is unavailable
        """
        if not self.store.delete(bobina_id):
            logger.warning(f"Delete of unknown bobina {bobina_id}")
            raise errors.NotFoundError(bobina_id)
        logger.info(f"Deleted bobina {bobina_id}")

    def set_photo(self, bobina_id: str, photo_url: Optional[str]) -> schemas.Bobina:
        """
        Persist a new photo URL (None clears it) for an existing bobina.

        Only photo_url is written; other fields keep whatever the store holds.

        Raises:
            errors.NotFoundError: No bobina with this id
            errors.TransportError: The store is unavailable
        """
        bobina = self.store.set_photo(bobina_id, photo_url or None)
        if bobina is None:
            logger.warning(f"Photo change for unknown bobina {bobina_id}")
            raise errors.NotFoundError(bobina_id)
        logger.info(f"{'Attached' if bobina.photo_url else 'Cleared'} photo of bobina {bobina_id}")
        return bobina

    def upload_photo(
        self,
        bobina_id: str,
        storage,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> schemas.Bobina:
        """
        Upload a photo to object storage and attach it to an existing bobina.

        Raises:
            errors.NotFoundError: No bobina with this id; nothing is uploaded
            errors.UploadError: The upload failed; the previous photo is kept
            errors.TransportError: The store is unavailable
        """
        current = self.get_bobina(bobina_id)
        try:
            attached = upload_and_attach(current, storage, data, filename, content_type)
        except errors.UploadError as e:
            logger.warning(f"Photo upload for bobina {bobina_id} failed: {e}")
            raise
        return self.set_photo(bobina_id, attached.photo_url)

    def snapshot(self, criteria: Optional[schemas.FilterCriteria] = None) -> schemas.InventorySnapshot:
        """
        Build the dashboard read model from one fresh listing.

        Statistics and filter options cover the whole collection; the bobina
        list is the filtered subset.
        """
        criteria = criteria or schemas.FilterCriteria()
        bobinas = self.list_bobinas()
        return schemas.InventorySnapshot(
            summary=summarize(bobinas),
            bobinas=filter_bobinas(bobinas, criteria),
            options=filter_options(bobinas),
            criteria=criteria,
        )
