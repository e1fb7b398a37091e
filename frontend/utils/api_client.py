import os

import requests
import streamlit as st

BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class ApiClient:
    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url

    def generate_report(self, patient: dict, tool: str):
        return requests.post(
            f"{self.base_url}/api/reports/generate",
            json={"patient": patient, "tool": tool},
            timeout=300,
        )


# ---------------------------------------------------------------------------
# Cached data fetchers. Standalone functions so @st.cache_data can hash the arguments.
# ---------------------------------------------------------------------------

@st.cache_data(ttl=300, show_spinner=False)
def cached_tools(base_url: str = BASE_URL) -> tuple[bool, dict]:
    try:
        res = requests.get(f"{base_url}/api/reports/tools", timeout=30)
    except requests.RequestException:
        return False, {}
    if not res.ok:
        return False, {}
    try:
        return True, res.json().get("data", {})
    except ValueError:
        return False, {}
