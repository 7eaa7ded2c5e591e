"""
State Controller for FairSplit

This module ties together the sanitizer, the allocation engine and the
persistence store, and defines the one flow the app has:

    raw text → sanitize → update entry → allocate → save → ViewModel

DESIGN DECISION: Every edit recomputes from the full input set.
There is no incremental update and no state machine beyond
"constructed = ready", so the order of edits never matters.

The controller is the only owner of the in-memory entries. The page gets
a fresh frozen ViewModel per render and the store gets serialized copies,
so neither can mutate controller state.
"""

from typing import Optional, Union

from fairsplit.allocation import AllocationEngine
from fairsplit.audit import AuditLogger
from fairsplit.config import get_settings
from fairsplit.config.settings import Settings, SplitSettings
from fairsplit.models.split import (
    AllocationResult,
    ExpenseEntry,
    FieldRole,
    IncomeEntry,
    PersistedContributions,
    PersistedInputs,
    PersistedState,
    ViewModel,
)
from fairsplit.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    PersistenceStore,
    StorageError,
)
from fairsplit.validation import InputSanitizer


class StateController:
    """
    Owns the two income entries, the expense and the current allocation.

    Construction loads persisted state, so a valid ViewModel is available
    before the user touches anything:
    1. Persisted inputs → seed from them and recompute the allocation
       (a persisted allocation is never trusted over a fresh one)
    2. Only a persisted allocation → default inputs, show the persisted
       allocation until the first edit
    3. Nothing persisted → defaults
    """

    def __init__(
        self,
        store: Optional[PersistenceStore] = None,
        sanitizer: Optional[InputSanitizer] = None,
        engine: Optional[AllocationEngine] = None,
        settings: Optional[SplitSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            store: Where state is saved. If None, the controller is
                    session-only.
        """
        self._settings = settings or get_settings().split
        self._store = store
        self._sanitizer = sanitizer or InputSanitizer(self._settings)
        self._engine = engine or AllocationEngine()
        self._audit_logger = audit_logger or AuditLogger()

        self._party_a = IncomeEntry(role=FieldRole.PARTY_A)
        self._party_b = IncomeEntry(role=FieldRole.PARTY_B)
        self._expense = ExpenseEntry()
        self._allocation = AllocationResult()
        self._restored = False

        self._initialize()

    @property
    def store(self) -> Optional[PersistenceStore]:
        return self._store

    @property
    def allocation(self) -> AllocationResult:
        return self._allocation

    def _initialize(self) -> None:
        state = self._store.load() if self._store else None

        self._apply_defaults()

        if state is not None and state.inputs is not None:
            inputs = state.inputs
            whole = self._sanitizer.whole_number
            if inputs.party_a_salary is not None:
                self._party_a.salary = whole(inputs.party_a_salary)
            if inputs.party_b_salary is not None:
                self._party_b.salary = whole(inputs.party_b_salary)
            if inputs.expense is not None:
                self._expense.amount = whole(inputs.expense)
            self._restored = True
            self._allocation = self._recompute()
            return

        self._audit_logger.log_defaults_applied(
            party_a_salary=self._party_a.salary,
            party_b_salary=self._party_b.salary,
            expense=self._expense.amount,
        )
        self._allocation = self._recompute()

        if state is not None and state.contributions is not None:
            # Held until the user supplies new inputs
            self._allocation = self._allocation.model_copy(update={
                "share_a": state.contributions.party_a_contribution,
                "share_b": state.contributions.party_b_contribution,
            })

    def _apply_defaults(self) -> None:
        whole = self._sanitizer.whole_number
        self._party_a.salary = whole(self._settings.default_party_a_salary)
        self._party_b.salary = whole(self._settings.default_party_b_salary)
        self._expense.amount = whole(self._settings.default_expense)

    def _value_of(self, role: FieldRole) -> float:
        if role is FieldRole.PARTY_A:
            return self._party_a.salary
        if role is FieldRole.PARTY_B:
            return self._party_b.salary
        return self._expense.amount

    def _set_value(self, role: FieldRole, value: float) -> None:
        if role is FieldRole.PARTY_A:
            self._party_a.salary = value
        elif role is FieldRole.PARTY_B:
            self._party_b.salary = value
        else:
            self._expense.amount = value

    def _recompute(self) -> AllocationResult:
        allocation = self._engine.allocate(
            self._party_a.salary,
            self._party_b.salary,
            self._expense.amount,
        )
        self._audit_logger.log_allocation_computed(
            party_a_salary=self._party_a.salary,
            party_b_salary=self._party_b.salary,
            expense=self._expense.amount,
            share_a=allocation.share_a,
            share_b=allocation.share_b,
        )
        return allocation

    def _persist(self) -> None:
        if self._store is None:
            return
        if self._store.save(self.snapshot()):
            self._audit_logger.log_state_saved()

    def on_field_edit(self, role: Union[FieldRole, str], raw_text: str) -> ViewModel:
        """
        Apply one keystroke event to a field.

        Args:
            role: partyA, partyB or expense
            raw_text: Full text of the field after the keystroke

        Returns:
            The ViewModel after recomputing and saving

        Raises:
            ValueError: If role is not one of the three fields
        """
        try:
            role = FieldRole(role)
        except ValueError:
            raise ValueError(
                f"Unknown field {role!r}; expected one of "
                f"{[r.value for r in FieldRole]}"
            ) from None

        previous_digits = self._sanitizer.digits_of(self._value_of(role))
        cleaned = self._sanitizer.clean(raw_text, previous_digits)

        if cleaned.truncated:
            self._audit_logger.log_input_truncated(
                digits=cleaned.digits + cleaned.discarded,
                kept=cleaned.digits,
                previous_digits=previous_digits,
            )

        self._set_value(role, cleaned.value)
        self._audit_logger.log_field_edited(role.value, raw_text, cleaned.value)

        self._allocation = self._recompute()
        self._persist()

        return self.view_model()

    def reset(self) -> ViewModel:
        """Restore the default inputs and forget the persisted state."""
        self._apply_defaults()
        self._restored = False
        self._allocation = self._recompute()

        if self._store is not None:
            self._store.clear()
        self._audit_logger.log_state_cleared()

        return self.view_model()

    def snapshot(self) -> PersistedState:
        """Current inputs and allocation as a detached PersistedState."""
        return PersistedState(
            inputs=PersistedInputs(
                party_a_salary=self._party_a.salary,
                party_b_salary=self._party_b.salary,
                expense=self._expense.amount,
            ),
            contributions=PersistedContributions.from_allocation(self._allocation),
        )

    def view_model(self) -> ViewModel:
        """Formatted snapshot for the presentation layer."""
        fmt = self._sanitizer
        allocation = self._allocation

        return ViewModel(
            party_a_salary=self._party_a.salary,
            party_b_salary=self._party_b.salary,
            expense=self._expense.amount,
            share_a=allocation.share_a,
            share_b=allocation.share_b,
            party_a_salary_text=fmt.format_amount(self._party_a.salary),
            party_b_salary_text=fmt.format_amount(self._party_b.salary),
            expense_text=fmt.format_amount(self._expense.amount),
            share_a_text=fmt.format_share(allocation.share_a),
            share_b_text=fmt.format_share(allocation.share_b),
            party_a_percent_text=fmt.format_percent(allocation.ratio_a),
            party_b_percent_text=fmt.format_percent(allocation.ratio_b),
            restored=self._restored,
        )


def create_backend(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> KeyValueBackend:
    """
    Build the configured key-value backend.

    Falls back to session-only memory if the file backend cannot be set up.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryBackend()

    try:
        return JsonFileBackend(storage_settings.file_path)
    except StorageError as e:
        (audit_logger or AuditLogger()).log_storage_fallback(
            backend=storage_settings.backend,
            error_message=str(e),
        )
        return InMemoryBackend()


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> StateController:
    """
    Factory function to create a ready controller.

    Args:
        use_storage: Set to False for a session-only calculator.
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger()

    store = None
    if use_storage:
        store = PersistenceStore(
            create_backend(settings, audit_logger),
            settings=settings.storage,
            audit_logger=audit_logger,
        )

    return StateController(
        store=store,
        settings=settings.split,
        audit_logger=audit_logger,
    )
