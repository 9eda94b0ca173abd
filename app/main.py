"""
Streamlit Frontend for CashBuddy

This is the user interface students interact with daily.

DESIGN PRINCIPLES:
1. The UI only calls store operations, it never edits data itself
2. Forms are validated before the store is called
3. Destructive actions ask for confirmation
4. Chat failures show up as a chat message, never as a crash

Each browser session gets its own store (kept in st.session_state),
so data resets when the session ends.
"""

import asyncio
from decimal import Decimal
from datetime import date

import streamlit as st

from src.audit import configure_logging
from src.config import get_settings
from src.ledger import InvalidAmountError
from src.models.chat import ChatRole
from src.models.ledger import TransactionType
from src.orchestrator import AppComponents, create_app_components
from src.validation import PROFILE_FORM_FIELDS, FormValidator


# Page configuration
st.set_page_config(
    page_title="CashBuddy",
    page_icon="💸",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .balance-box {
        padding: 20px;
        background: linear-gradient(90deg, #2563eb, #4f46e5);
        color: white;
        border-radius: 12px;
        margin: 10px 0;
    }
    .goal-complete {
        color: #16a34a;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


validator = FormValidator()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> AppComponents:
    """Get or create this session's components."""
    if "components" not in st.session_state:
        configure_logging(get_settings().app.log_level)
        st.session_state.components = create_app_components()
    return st.session_state.components


def money(amount: Decimal) -> str:
    """Format an amount the Swedish way: 12 000,50 SEK."""
    currency = get_settings().app.currency_code
    text = f"{amount:,.2f}".replace(",", " ").replace(".", ",")
    if text.endswith(",00"):
        text = text[:-3]
    return f"{text} {currency}"


def show_issues(result) -> None:
    st.error(validator.get_user_friendly_summary(result))


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("💸 CashBuddy")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💰 Budget", "👥 Community", "✨ CashBuddy", "🏷️ Deals", "👤 Profile"],
        index=0,
    )

    if page == "💰 Budget":
        render_budget_page(components)
    elif page == "👥 Community":
        render_community_page(components)
    elif page == "✨ CashBuddy":
        render_chat_page(components)
    elif page == "🏷️ Deals":
        render_deals_page(components)
    elif page == "👤 Profile":
        render_profile_page(components)


# =============================================================================
# BUDGET
# =============================================================================

def render_budget_page(components: AppComponents):
    store = components.store
    st.title("💰 Budget")

    summary = store.compute_summary()
    st.markdown(f"""
    <div class="balance-box">
        <p>Current balance</p>
        <h2>{money(summary.balance)}</h2>
    </div>
    """, unsafe_allow_html=True)
    col1, col2 = st.columns(2)
    col1.metric("Income", money(summary.income))
    col2.metric("Expenses", money(summary.expenses))

    render_goal_funding(components)

    st.subheader("Add transaction")
    with st.form("add_transaction", clear_on_submit=True):
        transaction_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.title(),
            horizontal=True,
        )
        amount = st.text_input("Amount", placeholder="e.g. 120")
        category = st.text_input("Category", placeholder="e.g. Food")
        note = st.text_input("Note (optional)")
        if st.form_submit_button("Add", type="primary"):
            result = validator.validate_transaction(amount, transaction_type, category, note)
            if result.is_valid:
                store.add_transaction(result.value)
                st.rerun()
            else:
                show_issues(result)

    st.subheader("Transactions")
    transactions = store.transactions
    if not transactions:
        st.info("No transactions yet. Add your first one above!")

    for transaction in transactions:
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        with st.expander(
            f"{transaction.category}: {sign}{money(transaction.amount)}"
        ):
            st.caption(transaction.date.strftime("%Y-%m-%d %H:%M"))
            if transaction.note:
                st.write(transaction.note)

            with st.form(f"edit_{transaction.id}"):
                new_amount = st.text_input("Amount", value=str(transaction.amount))
                new_category = st.text_input("Category", value=transaction.category)
                new_note = st.text_input("Note", value=transaction.note)
                if st.form_submit_button("Save changes"):
                    result = validator.validate_transaction(
                        new_amount, transaction.type, new_category, new_note
                    )
                    if result.is_valid:
                        store.edit_transaction(transaction.model_copy(
                            update=result.value.model_dump(exclude={"type"})
                        ))
                        st.rerun()
                    else:
                        show_issues(result)

            confirm_key = f"confirm_delete_{transaction.id}"
            if st.session_state.get(confirm_key):
                st.warning("Delete this transaction? This cannot be undone.")
                yes, no = st.columns(2)
                if yes.button("Delete", key=f"yes_{transaction.id}"):
                    store.delete_transaction(transaction.id)
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
                if no.button("Cancel", key=f"no_{transaction.id}"):
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
            elif st.button("🗑️ Delete", key=f"delete_{transaction.id}"):
                st.session_state[confirm_key] = True
                st.rerun()


def render_goal_funding(components: AppComponents):
    store = components.store
    goals = store.saving_goals
    if not goals:
        return

    st.subheader("Saving Goals")
    for goal in goals:
        st.markdown(f"**{goal.name}**")
        st.progress(goal.progress_percent / 100)
        st.caption(f"{money(goal.saved_amount)} / {money(goal.target_amount)}")
        if goal.is_complete:
            st.markdown(
                '<p class="goal-complete">Grattis! Målet uppnått! 🎉</p>',
                unsafe_allow_html=True,
            )
            continue

        with st.form(f"fund_{goal.id}", clear_on_submit=True):
            amount = st.text_input("Amount to add", key=f"fund_amount_{goal.id}")
            if st.form_submit_button("Add Funds"):
                result = validator.validate_funding(amount)
                if not result.is_valid:
                    show_issues(result)
                    continue
                try:
                    store.add_to_saving_goal(goal.id, result.value)
                except InvalidAmountError as e:
                    st.error(str(e))
                else:
                    st.rerun()


# =============================================================================
# COMMUNITY
# =============================================================================

def render_community_page(components: AppComponents):
    st.title("👥 Community")
    profile = components.store.profile

    with st.form("new_post", clear_on_submit=True):
        text = st.text_area("Share a saving win or ask a question")
        image_url = st.text_input("Image URL (optional)")
        if st.form_submit_button("Post", type="primary"):
            result = validator.validate_post(text, image_url)
            if result.is_valid:
                components.feed.add_post(
                    text=result.value.text,
                    profile=profile,
                    image_url=result.value.image_url,
                )
                st.rerun()
            else:
                show_issues(result)

    for post in components.feed.posts:
        with st.container(border=True):
            col1, col2 = st.columns([1, 6])
            if post.author_avatar:
                col1.image(post.author_avatar, width=48)
            col2.markdown(f"**{post.author}** · {post.created_at}")
            st.write(post.text)
            if post.image_url:
                st.image(post.image_url)
            if st.button(f"❤️ {post.likes}", key=f"like_{post.id}"):
                components.feed.like_post(post.id)
                st.rerun()
            st.caption(f"💬 {post.comments} comments")


# =============================================================================
# CASHBUDDY CHAT
# =============================================================================

def render_chat_page(components: AppComponents):
    st.title("✨ CashBuddy AI")
    st.caption("Din personliga ekonomi-assistent.")

    chat = components.chat
    if st.button("🗑️ Clear chat"):
        chat.clear()
        st.rerun()

    for message in chat.messages:
        role = "user" if message.role == ChatRole.USER else "assistant"
        with st.chat_message(role):
            st.markdown(message.text)

    prompt = st.chat_input("Ask for savings tips...")
    if prompt:
        with st.spinner("CashBuddy is thinking..."):
            run_async(chat.send_message(prompt))
        st.rerun()


# =============================================================================
# DEALS
# =============================================================================

def render_deals_page(components: AppComponents):
    st.title("🏷️ Student Deals")
    st.caption("Exclusive discounts to help you save.")

    catalog = components.deals
    tag = st.selectbox("Filter by tag", options=["All"] + catalog.tags())
    only_active = st.checkbox("Hide expired deals", value=False)

    deals = catalog.filter(
        tag=None if tag == "All" else tag,
        active_on=date.today() if only_active else None,
    )
    if not deals:
        st.info("No deals match right now.")

    for deal in deals:
        with st.container(border=True):
            st.markdown(f"### {deal.title}")
            st.caption(" · ".join(deal.tags))
            st.write(deal.description)
            st.caption(f"Expires: {deal.expires_at.isoformat()}")
            st.link_button("Get", deal.link)


# =============================================================================
# PROFILE
# =============================================================================

def render_profile_page(components: AppComponents):
    store = components.store
    profile = store.profile
    st.title("👤 Profile")

    col1, col2 = st.columns([1, 3])
    if profile.photo_url:
        col1.image(profile.photo_url, width=96)
    col2.markdown(f"### {profile.display_name}")
    col2.caption(profile.school)
    st.write(profile.bio)

    if profile.badges:
        st.markdown(" ".join(f"{b.icon} {b.title}" for b in profile.badges))

    with st.expander("✏️ Edit profile"):
        with st.form("edit_profile"):
            display_name = st.text_input("Name", value=profile.display_name)
            school = st.text_input("School", value=profile.school)
            bio = st.text_area("Bio", value=profile.bio)
            photo_url = st.text_input("Photo URL", value=profile.photo_url)
            if st.form_submit_button("Save"):
                result = validator.validate_profile(display_name, school, bio, photo_url)
                if result.is_valid:
                    store.update_profile(result.value.model_dump(include=PROFILE_FORM_FIELDS))
                    st.rerun()
                else:
                    show_issues(result)

    st.subheader("Saving Goals")
    if not profile.saving_goals:
        st.info("Set a goal to stay motivated!")

    for goal in profile.saving_goals:
        with st.container(border=True):
            st.markdown(f"**{goal.name}**")
            if goal.is_complete:
                st.markdown(
                    '<p class="goal-complete">Grattis! Du har nått ditt mål! 🥳</p>',
                    unsafe_allow_html=True,
                )
            st.progress(goal.progress_percent / 100)
            st.caption(f"{money(goal.saved_amount)} / {money(goal.target_amount)}")

            confirm_key = f"confirm_delete_goal_{goal.id}"
            if st.session_state.get(confirm_key):
                st.warning(f'Delete "{goal.name}"? Its past transactions stay in your budget.')
                yes, no = st.columns(2)
                if yes.button("Delete", key=f"yes_goal_{goal.id}"):
                    store.delete_saving_goal(goal.id)
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
                if no.button("Cancel", key=f"no_goal_{goal.id}"):
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
            elif st.button("🗑️ Delete goal", key=f"delete_goal_{goal.id}"):
                st.session_state[confirm_key] = True
                st.rerun()

    with st.form("new_goal", clear_on_submit=True):
        st.markdown("**+ Add New Goal**")
        name = st.text_input("What are you saving for?")
        target = st.text_input("How much does it cost? (SEK)")
        saved = st.text_input("How much have you saved? (SEK)", value="0")
        if st.form_submit_button("Save goal", type="primary"):
            result = validator.validate_goal(name, target, saved)
            if result.is_valid:
                store.add_saving_goal(result.value)
                st.rerun()
            else:
                show_issues(result)

    st.subheader("Recent activity")
    storage = components.audit_logger.storage
    events = storage.get_recent_events(limit=10) if storage is not None else []
    for event in events:
        st.caption(f"{event.timestamp:%H:%M} · {event.description}")


if __name__ == "__main__":
    main()
