"""
Tests for the state controller.

Test strategy:
1. Cold start from each kind of persisted state
2. The edit pipeline end to end over an in-memory store
3. Degraded operation with unavailable storage
"""

import json

import pytest

from fairsplit.audit import AuditLogger
from fairsplit.config import get_settings
from fairsplit.config.settings import SplitSettings, StorageSettings
from fairsplit.controller import StateController, create_app_components, create_backend
from fairsplit.models.audit import AuditEvent, AuditEventType, AuditSeverity
from fairsplit.models.split import (
    FieldRole,
    PersistedContributions,
    PersistedInputs,
    PersistedState,
)
from fairsplit.services.storage import InMemoryBackend, JsonFileBackend, PersistenceStore

from tests.test_storage import BrokenBackend


class TestInitialization:
    """Tests for building the first ViewModel."""

    def test_defaults_without_persisted_state(self, controller):
        """Test the stock figures on a first visit."""
        view = controller.view_model()
        assert view.party_a_salary == 36000
        assert view.party_b_salary == 21000
        assert view.expense == 0
        assert view.party_a_salary_text == "36,000"
        assert view.party_b_salary_text == "21,000"
        assert view.expense_text == "0"
        assert view.share_a_text == "0.00"
        assert view.share_b_text == "0.00"
        assert view.restored is False

    def test_construction_does_not_write(self, controller, backend):
        """Test that a cold start leaves the store untouched."""
        assert backend.keys() == []

    def test_seeds_from_persisted_inputs(self, store):
        """Test that persisted inputs replace the defaults."""
        store.save(PersistedState(inputs=PersistedInputs(
            party_a_salary=50000, party_b_salary=50000, expense=800,
        )))
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.party_a_salary == 50000
        assert view.share_a == 400
        assert view.share_b == 400
        assert view.restored is True

    def test_recomputes_over_stale_contributions(self, store):
        """Test that a persisted allocation never wins over persisted inputs."""
        store.save(PersistedState(
            inputs=PersistedInputs(party_a_salary=36000, party_b_salary=21000, expense=5000),
            contributions=PersistedContributions(
                party_a_contribution=1.0, party_b_contribution=2.0,
            ),
        ))
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.share_a_text == "3,157.89"
        assert view.share_b_text == "1,842.11"

    def test_partial_inputs_fall_back_per_field(self, store, backend):
        """Test that missing persisted fields use their own default."""
        backend.set("inputs", '{"expense": 570}')
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.party_a_salary == 36000
        assert view.party_b_salary == 21000
        assert view.expense == 570
        assert view.share_a == pytest.approx(360)

    def test_holds_contributions_without_inputs(self, store):
        """Test that a lone persisted allocation is shown until the first edit."""
        store.save(PersistedState(contributions=PersistedContributions(
            party_a_contribution=12.5, party_b_contribution=7.5,
        )))
        controller = StateController(store=store, settings=SplitSettings())
        view = controller.view_model()
        assert view.party_a_salary == 36000
        assert view.share_a == 12.5
        assert view.share_b == 7.5
        assert view.restored is False

        view = controller.on_field_edit(FieldRole.EXPENSE, "0")
        assert view.share_a == 0
        assert view.share_b == 0

    def test_configured_defaults(self, store):
        """Test that defaults come from settings."""
        settings = SplitSettings(default_party_a_salary=1000, default_party_b_salary=3000,
                                 default_expense=400)
        view = StateController(store=store, settings=settings).view_model()
        assert view.share_a == 100
        assert view.share_b == 300

    def test_session_only_controller(self):
        """Test a controller with no store at all."""
        controller = StateController(settings=SplitSettings())
        view = controller.on_field_edit("expense", "5000")
        assert view.share_a_text == "3,157.89"


class TestFieldEdit:
    """Tests for the per-keystroke pipeline."""

    def test_reference_scenario(self, controller):
        """Test 36,000 / 21,000 splitting 5,000."""
        view = controller.on_field_edit(FieldRole.EXPENSE, "5,000")
        assert view.share_a_text == "3,157.89"
        assert view.share_b_text == "1,842.11"
        assert view.party_a_percent_text == "63.2%"
        assert view.party_b_percent_text == "36.8%"

    def test_edit_mid_session_updates_view_and_store(self, controller, store):
        """Test changing party A from 36,000 to 40,000."""
        controller.on_field_edit(FieldRole.EXPENSE, "5000")
        view = controller.on_field_edit(FieldRole.PARTY_A, "40,000")

        assert view.party_a_salary == 40000
        assert view.party_a_salary_text == "40,000"
        assert view.share_a_text == "3,278.69"
        assert view.share_b_text == "1,721.31"

        saved = store.load()
        assert saved.inputs.party_a_salary == 40000
        assert saved.contributions.party_a_contribution == view.share_a
        assert saved.contributions.party_b_contribution == view.share_b

    def test_zero_incomes(self, controller):
        """Test that zero total income gives zero shares without raising."""
        controller.on_field_edit(FieldRole.PARTY_A, "0")
        controller.on_field_edit(FieldRole.PARTY_B, "")
        view = controller.on_field_edit(FieldRole.EXPENSE, "1000")
        assert view.share_a == 0
        assert view.share_b == 0
        assert view.party_a_percent_text == "0.0%"

    def test_garbage_entry_becomes_number(self, controller):
        """Test fail-soft entry."""
        view = controller.on_field_edit(FieldRole.PARTY_B, "12,,000abc")
        assert view.party_b_salary == 12000
        assert view.party_b_salary_text == "12,000"

    def test_overlong_entry_is_truncated(self, controller):
        """Test that the eighth digit is discarded."""
        view = controller.on_field_edit(FieldRole.EXPENSE, "12345678")
        assert view.expense == 1234567
        assert view.expense_text == "1,234,567"

    def test_role_accepts_plain_string(self, controller):
        """Test that the role tag can be passed as text."""
        view = controller.on_field_edit("partyB", "1")
        assert view.party_b_salary == 1

    def test_unknown_role_rejected(self, controller):
        """Test that a bad role tag is a programming error."""
        with pytest.raises(ValueError, match="Unknown field"):
            controller.on_field_edit("partyC", "1")

    def test_order_independent(self, store):
        """Test that the same inputs give the same view in any edit order."""
        first = StateController(store=store, settings=SplitSettings())
        first.on_field_edit(FieldRole.EXPENSE, "900")
        first.on_field_edit(FieldRole.PARTY_A, "100")
        first.on_field_edit(FieldRole.PARTY_B, "200")

        second = StateController(store=PersistenceStore(InMemoryBackend(), settings=StorageSettings()),
                                 settings=SplitSettings())
        second.on_field_edit(FieldRole.PARTY_B, "200")
        second.on_field_edit(FieldRole.PARTY_A, "100")
        second.on_field_edit(FieldRole.EXPENSE, "900")

        assert first.view_model() == second.view_model()

    def test_repeating_an_edit_is_idempotent(self, controller):
        """Test that re-applying the echoed text changes nothing."""
        view = controller.on_field_edit(FieldRole.PARTY_A, "98,765")
        again = controller.on_field_edit(FieldRole.PARTY_A, view.party_a_salary_text)
        assert again == view

    def test_view_model_is_detached(self, controller):
        """Test that the ViewModel cannot change controller state."""
        view = controller.on_field_edit(FieldRole.EXPENSE, "100")
        with pytest.raises(ValueError):
            view.expense = 5
        assert controller.view_model().expense == 100

    def test_input_text_lookup(self, controller):
        """Test the per-field echo helper."""
        view = controller.on_field_edit(FieldRole.EXPENSE, "2500")
        assert view.input_text(FieldRole.EXPENSE) == "2,500"
        assert view.input_text("partyA") == "36,000"

    def test_restart_restores_last_edit(self, store):
        """Test that a new controller over the same store resumes."""
        StateController(store=store, settings=SplitSettings()).on_field_edit(
            FieldRole.EXPENSE, "5000"
        )
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.expense == 5000
        assert view.share_a_text == "3,157.89"
        assert view.restored is True


class TestReset:
    """Tests for restoring defaults."""

    def test_reset_restores_defaults_and_clears_store(self, controller, store):
        """Test the reset action."""
        controller.on_field_edit(FieldRole.EXPENSE, "5000")
        view = controller.reset()
        assert view.expense == 0
        assert view.party_a_salary == 36000
        assert store.load() is None


class TestDegradedStorage:
    """Tests for operating without working storage."""

    def test_cold_start_uses_defaults(self):
        """Test that an unavailable store means defaults."""
        store = PersistenceStore(BrokenBackend(), settings=StorageSettings())
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.party_a_salary == 36000

    def test_edits_still_work(self):
        """Test that a failing save does not break the edit."""
        store = PersistenceStore(BrokenBackend(), settings=StorageSettings())
        controller = StateController(store=store, settings=SplitSettings())
        view = controller.on_field_edit(FieldRole.EXPENSE, "5000")
        assert view.share_a_text == "3,157.89"

    def test_reset_still_works(self):
        """Test that a failing clear does not break reset."""
        store = PersistenceStore(BrokenBackend(), settings=StorageSettings())
        controller = StateController(store=store, settings=SplitSettings())
        assert controller.reset().expense == 0


class TestFactory:
    """Tests for create_app_components and create_backend."""

    def test_memory_backend_from_env(self, monkeypatch):
        """Test STORAGE_BACKEND=memory."""
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        get_settings.cache_clear()
        assert isinstance(create_backend(), InMemoryBackend)

    def test_file_backend_by_default(self, tmp_path):
        """Test the default file backend under the working directory."""
        backend = create_backend()
        assert isinstance(backend, JsonFileBackend)

    def test_unusable_path_falls_back_to_memory(self, tmp_path, monkeypatch):
        """Test that a directory path degrades to session-only storage."""
        monkeypatch.setenv("STORAGE_FILE_PATH", str(tmp_path))
        get_settings.cache_clear()
        assert isinstance(create_backend(), InMemoryBackend)

    def test_components_persist_to_file(self, tmp_path, monkeypatch):
        """Test the full app wiring over a file."""
        path = tmp_path / "store" / "state.json"
        monkeypatch.setenv("STORAGE_FILE_PATH", str(path))
        get_settings.cache_clear()

        create_app_components().on_field_edit(FieldRole.EXPENSE, "5000")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert json.loads(data["inputs"])["expense"] == 5000
        assert create_app_components().view_model().share_a_text == "3,157.89"

    def test_components_without_storage(self):
        """Test a session-only app."""
        controller = create_app_components(use_storage=False)
        assert controller.store is None
        assert controller.view_model().party_b_salary == 21000

    def test_fallback_is_audited_with_session_id(self, tmp_path, monkeypatch):
        """Test that the switch to memory is logged through the audit logger."""
        monkeypatch.setenv("STORAGE_FILE_PATH", str(tmp_path))
        get_settings.cache_clear()
        audit_logger = RecordingAuditLogger()

        assert isinstance(create_backend(audit_logger=audit_logger), InMemoryBackend)

        assert [e.event_type for e in audit_logger.events] == [
            AuditEventType.STORAGE_FALLBACK
        ]
        event = audit_logger.events[0]
        assert event.severity == AuditSeverity.WARNING
        assert event.correlation_id == audit_logger.correlation_id
        assert event.details == {"backend": "file", "fallback": "memory"}


class RecordingAuditLogger(AuditLogger):
    """Audit logger that keeps every event it writes."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event: AuditEvent) -> bool:
        if event.correlation_id is None:
            event = event.model_copy(update={"correlation_id": self.correlation_id})
        self.events.append(event)
        return super().log(event)


class TestDamagedStorage:
    """Tests for stores holding undecodable or non-finite data."""

    def test_undecodable_file_cold_start(self, tmp_path):
        """Test that a non-UTF-8 store file starts from defaults and is replaced."""
        path = tmp_path / "state.json"
        path.write_bytes(b"\xff\xfe")
        store = PersistenceStore(JsonFileBackend(path), settings=StorageSettings())

        controller = StateController(store=store, settings=SplitSettings())
        assert controller.view_model().party_a_salary == 36000

        view = controller.on_field_edit(FieldRole.EXPENSE, "5000")
        assert view.share_a_text == "3,157.89"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert json.loads(data["inputs"])["expense"] == 5000

    def test_file_damaged_mid_session(self, tmp_path):
        """Test that edits keep saving after the file is overwritten with garbage."""
        path = tmp_path / "state.json"
        store = PersistenceStore(JsonFileBackend(path), settings=StorageSettings())
        controller = StateController(store=store, settings=SplitSettings())
        controller.on_field_edit(FieldRole.EXPENSE, "1000")

        path.write_bytes(b'{"inputs": "\xff\xfe"}')
        view = controller.on_field_edit(FieldRole.EXPENSE, "5000")

        assert view.share_b_text == "1,842.11"
        assert store.load().inputs.expense == 5000

    @pytest.mark.parametrize("text", [
        '{"partyASalary": Infinity}',
        '{"partyASalary": NaN, "expense": 5000}',
    ])
    def test_non_finite_inputs_use_defaults(self, text):
        """Test that a non-finite stored salary is ignored at startup."""
        store = PersistenceStore(
            InMemoryBackend({"inputs": text}),
            settings=StorageSettings(),
        )
        view = StateController(store=store, settings=SplitSettings()).view_model()
        assert view.party_a_salary == 36000
        assert view.party_a_salary_text == "36,000"
        assert view.share_a_text == "0.00"
        assert view.restored is False

    def test_fractional_inputs_load_as_whole_numbers(self, store, backend):
        """Test that a hand-edited fractional salary is rounded on load."""
        backend.set("inputs", '{"partyASalary": 1234.6, "partyBSalary": 0, "expense": 100}')
        controller = StateController(store=store, settings=SplitSettings())

        view = controller.view_model()
        assert view.party_a_salary == 1235
        assert view.party_a_salary_text == "1,235"
        assert view.share_a_text == "100.00"

        again = controller.on_field_edit(FieldRole.PARTY_A, view.party_a_salary_text)
        assert again.party_a_salary == 1235
        assert again.party_a_salary_text == "1,235"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
