import asyncio

import streamlit as st

from seller_dashboard.config import settings, configure_logging
from seller_dashboard.db import get_store
from seller_dashboard.errors import AuthError, NetworkError, ValidationError
from seller_dashboard.hooks import DashboardHook, DashboardCache
from seller_dashboard.models import AnalyticsFilters, Period
from seller_dashboard.state import SessionManager
from seller_dashboard.utils.api_client import get_client

st.set_page_config(
    page_title=settings.PROJECT_NAME,
    layout="wide",
    initial_sidebar_state="expanded"
)

configure_logging()


def reload_app() -> None:
    """Throw away every piece of per-identity client state and rerun"""
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    get_dashboard_cache().clear()
    st.rerun()


@st.cache_resource
def get_session() -> SessionManager:
    session = SessionManager(get_store(), get_client().login, reload=reload_app)
    session.initialize()
    return session


@st.cache_resource
def get_dashboard_cache() -> DashboardCache:
    return DashboardCache(ttl=settings.DASHBOARD_CACHE_TTL)


def load_dashboard(period: Period) -> DashboardHook:
    async def _load():
        hook = DashboardHook(get_client(), AnalyticsFilters(period=period), cache=get_dashboard_cache())
        hook.mount()
        await hook.wait()
        return hook

    return asyncio.run(_load())


def render_login(session: SessionManager):
    st.title(settings.PROJECT_NAME)
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if submitted:
        try:
            session.login(email, password)
        except (AuthError, ValidationError) as e:
            st.error(str(e))
            return
        except NetworkError:
            st.error(f"Backend not connected: {settings.API_BASE_URL}")
            return
        st.rerun()


def render_sidebar(session: SessionManager) -> Period:
    with st.sidebar:
        active = session.active_account
        st.caption("Signed in as")
        st.subheader(active.display_name)

        others = [a for a in session.accounts if a.id != active.id]
        if others:
            target = st.selectbox(
                "Switch account",
                others,
                format_func=lambda a: a.display_name,
            )
            if st.button("Switch"):
                session.switch_account(target.id)

        period = st.selectbox("Period", list(Period), index=list(Period).index(Period.WEEK),
                              format_func=lambda p: p.value.title())

        if st.button("Log out"):
            session.logout()
            st.rerun()
        if st.button("Log out of all accounts"):
            session.logout_all()
            reload_app()
    return period


def render_dashboard(period: Period):
    hook = load_dashboard(period)
    if hook.error:
        st.error(hook.error)
    if hook.data is None:
        return

    data = hook.data
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Revenue today", data.kpi("revenue", "today"),
                f"{data.kpi('revenue', 'change_percent')}%")
    col2.metric("Orders today", data.kpi("orders", "today"),
                data.kpi("orders", "change_count"))
    col3.metric("Active products", data.kpi("products", "total_active"))
    col4.metric("Low stock", data.kpi("products", "low_stock"))

    if data.recent_orders:
        st.subheader("Recent orders")
        st.dataframe(data.recent_orders, use_container_width=True)


def main():
    session = get_session()
    if not session.is_initialized:
        st.stop()

    if not session.is_authenticated:
        render_login(session)
        return

    period = render_sidebar(session)
    render_dashboard(period)


if __name__ == "__main__":
    main()
