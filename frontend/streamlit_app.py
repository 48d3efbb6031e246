"""A Streamlit web frontend for demonstrating the BuddhaBot API."""

import json
import streamlit as st
import requests

# --- Page and API Configuration ---
st.set_page_config(page_title="BuddhaBot Demo", page_icon="🪷", layout="wide")
API_BASE = "http://localhost:8000"
TEST_CREDS = {
    "email": "test@buddhabot.dev",
    "password": "buddhabot-test-password",
}
MAX_HISTORY = 20


def get_api_session():
    """Gets the requests.Session object from streamlit's session state."""
    if "api_session" not in st.session_state:
        st.session_state.api_session = requests.Session()
    return st.session_state.api_session


def refresh_user():
    """Refreshes the signed-in user from the API."""
    try:
        response = get_api_session().get(f"{API_BASE}/api/auth/session", timeout=5)
        st.session_state.user = response.json().get("user") if response.ok else None
    except requests.exceptions.RequestException:
        st.session_state.user = None


def stream_reply(messages):
    """Posts the conversation and yields text deltas as they arrive."""
    response = get_api_session().post(
        f"{API_BASE}/api/chat",
        json={"messages": messages},
        stream=True,
        timeout=60,
    )
    if response.status_code != 200:
        error = response.json().get("error", {})
        raise RuntimeError(
            f"{error.get('code', 'error')} ({response.status_code}): {error.get('message', response.text)}"
        )

    for line in response.iter_lines(decode_unicode=True):
        if not line or not line.startswith("data: "):
            continue
        data = line[len("data: ") :]
        if data == "[DONE]":
            break
        part = json.loads(data)
        if part["type"] == "text-delta":
            yield part["delta"]
        elif part["type"] == "error":
            raise RuntimeError(part.get("errorText", "Stream interrupted"))


# --- Main App ---
st.title("🪷 BuddhaBot Demo")
st.caption("Spiritual wisdom through AI guidance.")

# --- API Health Check ---
# /health needs a session, so check the public session endpoint instead.
try:
    health_response = get_api_session().get(f"{API_BASE}/api/auth/session", timeout=3)
    if health_response.status_code != 200:
        st.error(
            "API is not running or is unhealthy. Please start the backend server.",
            icon="🚨",
        )
        st.stop()
except requests.exceptions.ConnectionError:
    st.error(
        "Could not connect to the API. Please ensure the backend server is running.",
        icon="🚨",
    )
    st.stop()

# --- Initialize Session State ---
if "messages" not in st.session_state:
    st.session_state.messages = []
if "user" not in st.session_state:
    refresh_user()

# --- Sidebar: authentication ---
with st.sidebar:
    st.header("Account")
    user = st.session_state.user
    if user:
        st.success(f"Signed in as: {user.get('email', 'N/A')}", icon="✅")
        if st.button("Sign out", type="primary", use_container_width=True):
            get_api_session().post(f"{API_BASE}/api/auth/signout")
            st.session_state.messages = []
            refresh_user()
            st.rerun()
        if st.button("New conversation", use_container_width=True):
            st.session_state.messages = []
            st.rerun()
    else:
        st.warning("Not signed in", icon="❌")
        st.markdown(f"[Continue with Google]({API_BASE}/login)")
        st.caption("Test account (development only)")
        email = st.text_input("Email", value=TEST_CREDS["email"])
        password = st.text_input("Password", type="password", value=TEST_CREDS["password"])
        if st.button("Sign in", use_container_width=True):
            response = get_api_session().post(
                f"{API_BASE}/api/auth/callback/credentials",
                json={"email": email, "password": password},
                timeout=10,
            )
            if response.status_code == 200:
                st.toast("Signed in!", icon="🎉")
            elif response.status_code == 404:
                st.error("The test account is disabled on this server.")
            else:
                st.error("Invalid credentials")
            refresh_user()
            st.rerun()

# --- Conversation ---
for message in st.session_state.messages:
    with st.chat_message(message["role"]):
        st.markdown(message["content"])

if prompt := st.chat_input("Ask the panel...", disabled=not st.session_state.user):
    st.session_state.messages.append({"role": "user", "content": prompt})
    with st.chat_message("user"):
        st.markdown(prompt)

    # Only the most recent turns are sent
    history = st.session_state.messages[-MAX_HISTORY:]
    with st.chat_message("assistant"):
        try:
            reply = st.write_stream(stream_reply(history))
            st.session_state.messages.append({"role": "assistant", "content": reply})
        except RuntimeError as e:
            st.error(str(e))
