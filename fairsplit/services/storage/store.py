"""
Persistence Store

Saves and loads the calculator's last state as two independent records:

- `inputs`: {"partyASalary", "partyBSalary", "expense"}
- `contributions`: {"partyAContribution", "partyBContribution"}

IMPORTANT: The two records are separate writes. A crash between them can
leave one stale; the controller always recomputes the allocation from
persisted inputs, so a stale `contributions` record is never shown next
to fresh inputs.

Storage problems never reach the caller. `save` reports False and `load`
reports nothing stored, so the calculator keeps working for the session.
"""

from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from fairsplit.audit import AuditLogger
from fairsplit.config import get_settings
from fairsplit.config.settings import StorageSettings
from fairsplit.models.split import (
    PersistedContributions,
    PersistedInputs,
    PersistedState,
)
from fairsplit.services.storage.interface import (
    CorruptRecordError,
    KeyValueBackend,
    StorageError,
)


RecordT = TypeVar("RecordT", bound=BaseModel)


class PersistenceStore:
    """
    Reads and writes PersistedState through a key-value backend.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._settings = settings or get_settings().storage
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    @property
    def inputs_key(self) -> str:
        return self._settings.inputs_key

    @property
    def contributions_key(self) -> str:
        return self._settings.contributions_key

    def save(self, state: PersistedState) -> bool:
        """
        Overwrite the stored records with `state`.

        Records that are None in `state` are left untouched.

        Returns:
            True if every record was written
        """
        ok = True

        for key, record in (
            (self.inputs_key, state.inputs),
            (self.contributions_key, state.contributions),
        ):
            if record is None:
                continue
            try:
                self._backend.set(key, record.model_dump_json(by_alias=True))
            except StorageError as e:
                self._audit_logger.log_state_save_failed(key, str(e))
                ok = False

        return ok

    def load(self) -> Optional[PersistedState]:
        """
        Read the stored records.

        Returns:
            The stored state, or None if nothing usable was stored or the
            medium is unavailable
        """
        try:
            inputs = self._load_record(self.inputs_key, PersistedInputs)
            contributions = self._load_record(
                self.contributions_key, PersistedContributions
            )
        except StorageError as e:
            self._audit_logger.log_state_load_failed("*", str(e))
            return None

        state = PersistedState(inputs=inputs, contributions=contributions)
        if state.is_empty:
            return None

        self._audit_logger.log_state_loaded(
            has_inputs=inputs is not None,
            has_contributions=contributions is not None,
        )
        return state

    def clear(self) -> bool:
        """
        Remove both records.

        Returns:
            True if both removals succeeded
        """
        ok = True
        for key in (self.inputs_key, self.contributions_key):
            try:
                self._backend.remove(key)
            except StorageError as e:
                self._audit_logger.log_state_save_failed(key, str(e))
                ok = False
        return ok

    def _load_record(self, key: str, model: type[RecordT]) -> Optional[RecordT]:
        """
        Read and validate one record.

        A record that cannot be parsed is treated as never written.
        Unavailable-medium errors propagate to `load`.
        """
        try:
            text = self._backend.get(key)
            if text is None:
                return None
            try:
                return model.model_validate_json(text)
            except ValidationError as e:
                raise CorruptRecordError(f"Invalid {key} record: {e}") from e
        except CorruptRecordError as e:
            self._audit_logger.log_state_load_failed(key, str(e))
            return None
