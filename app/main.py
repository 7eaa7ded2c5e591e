"""
Streamlit Frontend for FairSplit

One page: two salary fields, one expense field, and each person's
contribution to the expense in proportion to their salary.

DESIGN PRINCIPLES:
1. The page holds no numbers of its own: every keystroke goes to the
   controller and the fields are re-rendered from the ViewModel it returns
2. Remarks and date are page-only state, never saved
3. Storage problems are never shown; the calculator keeps working
"""

from datetime import date

import streamlit as st

from fairsplit.audit import configure_logging
from fairsplit.config import get_settings, validate_all_settings
from fairsplit.controller import StateController, create_app_components
from fairsplit.models.split import FieldRole, ViewModel


# Page configuration
st.set_page_config(
    page_title="Calculation",
    page_icon="💸",
    layout="centered",
)

# Custom CSS
st.markdown("""
<style>
    .contribution {
        font-size: 1.1em;
        margin: 0.2em 0;
    }
    .contribution .amount {
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


FIELD_KEYS = {
    FieldRole.PARTY_A: "field_party_a",
    FieldRole.PARTY_B: "field_party_b",
    FieldRole.EXPENSE: "field_expense",
}


def get_controller() -> StateController:
    """Get or create this browser session's controller."""
    if "controller" not in st.session_state:
        configure_logging(get_settings().app.log_level)
        st.session_state.controller = create_app_components(use_storage=True)
    return st.session_state.controller


def sync_fields(view: ViewModel) -> None:
    """Echo the formatted values back into the text fields."""
    for role, key in FIELD_KEYS.items():
        st.session_state[key] = view.input_text(role)
    st.session_state.view = view


def on_field_change(role: FieldRole) -> None:
    """Forward the raw field text to the controller."""
    controller = get_controller()
    view = controller.on_field_edit(role, st.session_state[FIELD_KEYS[role]])
    sync_fields(view)


def on_reset() -> None:
    sync_fields(get_controller().reset())


def clear_remarks() -> None:
    st.session_state.remarks = ""


def render_field(role: FieldRole, label: str) -> None:
    st.text_input(
        label,
        key=FIELD_KEYS[role],
        on_change=on_field_change,
        args=(role,),
        autocomplete="off",
    )


def main():
    """Main application entry point."""
    controller = get_controller()
    labels = get_settings().split

    if "view" not in st.session_state:
        sync_fields(controller.view_model())
    if "remarks" not in st.session_state:
        st.session_state.remarks = ""

    st.title("Calculation")

    col1, col2 = st.columns(2)
    with col1:
        render_field(FieldRole.PARTY_A, labels.party_a_label)
    with col2:
        render_field(FieldRole.PARTY_B, labels.party_b_label)

    render_field(FieldRole.EXPENSE, labels.expense_label)

    view: ViewModel = st.session_state.view

    st.markdown(f"""
    <p class="contribution">Person 1's Contributions:
        <span class="amount">{view.share_a_text}</span> ({view.party_a_percent_text})</p>
    <p class="contribution">Person 2's Contributions:
        <span class="amount">{view.share_b_text}</span> ({view.party_b_percent_text})</p>
    """, unsafe_allow_html=True)

    if view.restored:
        st.caption("Restored from your last visit.")

    st.markdown("---")

    # Remarks and date never reach the controller
    remarks_col, date_col = st.columns([3, 2])
    with remarks_col:
        st.text_input("Remarks:", key="remarks", placeholder="e.g., Groceries")
        if st.session_state.remarks:
            st.button("Clear", on_click=clear_remarks)
    with date_col:
        st.date_input("Date", value=date.today(), key="remarks_date")

    st.markdown("---")
    st.button("Reset to defaults", on_click=on_reset)

    if get_settings().app.debug_mode:
        with st.expander("⚙️ Configuration"):
            st.json(validate_all_settings())


if __name__ == "__main__":
    main()
