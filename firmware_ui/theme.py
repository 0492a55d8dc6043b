# firmware_ui/theme.py
import streamlit as st

# Shared layout rules for the firmware table; colors come from the palettes below
_TABLE_CSS = """
    .fw-table-header {
        font-size: 0.78rem;
        font-weight: 700;
        letter-spacing: 0.04em;
        text-transform: uppercase;
        color: var(--fw-muted) !important;
    }
    .fw-cell-version { font-weight: 600; }
    .fw-cell-muted { color: var(--fw-muted) !important; }
    .fw-empty-row {
        text-align: center;
        padding: 2rem 0;
        color: var(--fw-muted) !important;
    }
    .fw-filter-indicator {
        background-color: var(--fw-filter-bg);
        border: 1px solid var(--fw-filter-border);
        border-radius: 8px;
        padding: 0.6rem 0.9rem;
        margin-bottom: 0.8rem;
        font-size: 0.9rem;
    }
    .fw-filter-chip {
        background-color: var(--fw-chip-bg);
        border-radius: 4px;
        padding: 0.1rem 0.5rem;
        margin-left: 0.4rem;
        font-size: 0.8rem;
    }
    .fw-pagination-text {
        color: var(--fw-muted) !important;
        font-size: 0.9rem;
        padding-top: 0.4rem;
    }
"""


def _apply_theme(palette: dict):
    variables = "\n".join(f"        --fw-{name}: {value};" for name, value in palette.items())
    st.markdown(f"""
    <style>
    :root {{
{variables}
    }}

    /* ---- Global Colors ---- */
    body, .stApp, [data-testid="stAppViewContainer"] {{
        background-color: var(--fw-bg) !important;
        color: var(--fw-text) !important;
        font-family: "Inter", "Roboto", sans-serif;
    }}
    .block-container {{
        padding-top: 2rem;
        padding-bottom: 2rem;
    }}
    .stMarkdown, .stText, [data-testid="stMarkdownContainer"], p, h1, h2, h3, h4, h5, h6 {{
        color: var(--fw-text) !important;
    }}

    /* ---- Sidebar ---- */
    [data-testid="stSidebar"], [data-testid="stSidebar"] > div {{
        background-color: var(--fw-panel) !important;
        color: var(--fw-text) !important;
    }}

    /* ---- Buttons ---- */
    .stButton>button {{
        background-color: var(--fw-primary) !important;
        color: #FFFFFF !important;
        border-radius: 8px !important;
        border: none !important;
        font-weight: 600 !important;
        transition: 0.15s ease-in-out;
    }}
    .stButton>button:hover {{
        background-color: var(--fw-primary-hover) !important;
    }}
    .stButton>button:disabled {{
        opacity: 0.45 !important;
    }}
    .stDownloadButton > button, [data-testid="stDownloadButton"] > button {{
        background-color: var(--fw-export) !important;
        color: #FFFFFF !important;
        border: none !important;
        border-radius: 8px !important;
    }}

    /* ---- Inputs ---- */
    input, textarea, .stTextInput>div>div>input {{
        background-color: var(--fw-input) !important;
        color: var(--fw-text) !important;
        border-radius: 8px !important;
        border: 1px solid var(--fw-border) !important;
    }}
    [data-testid="stFileUploader"] {{
        background-color: var(--fw-panel) !important;
        border: 1px solid var(--fw-border) !important;
        border-radius: 8px !important;
    }}
{_TABLE_CSS}
    </style>
    """, unsafe_allow_html=True)


def apply_dark_theme():
    _apply_theme({
        "bg": "#111827",
        "panel": "#1F2937",
        "input": "#374151",
        "text": "#F9FAFB",
        "muted": "#9CA3AF",
        "border": "#374151",
        "primary": "#2563EB",
        "primary-hover": "#1D4ED8",
        "export": "#16A34A",
        "filter-bg": "rgba(30, 58, 138, 0.15)",
        "filter-border": "#1E40AF",
        "chip-bg": "rgba(30, 58, 138, 0.3)",
    })


def apply_light_theme():
    _apply_theme({
        "bg": "#F9FAFB",
        "panel": "#FFFFFF",
        "input": "#FFFFFF",
        "text": "#111827",
        "muted": "#6B7280",
        "border": "#E5E7EB",
        "primary": "#2563EB",
        "primary-hover": "#1D4ED8",
        "export": "#16A34A",
        "filter-bg": "#EFF6FF",
        "filter-border": "#BFDBFE",
        "chip-bg": "#DBEAFE",
    })


def render_theme_toggle():
    """Theme toggle switch at the top right, applied to the whole page."""
    if "theme" not in st.session_state:
        st.session_state["theme"] = "dark"

    _, col_theme_right = st.columns([10, 1])
    with col_theme_right:
        theme_icon = "🌙" if st.session_state["theme"] == "dark" else "☀️"
        theme_label = "Dark" if st.session_state["theme"] == "dark" else "Light"
        if st.button(f"{theme_icon} {theme_label}", key="theme_toggle", help="Toggle between dark and light theme"):
            st.session_state["theme"] = "light" if st.session_state["theme"] == "dark" else "dark"
            st.rerun()

    if st.session_state["theme"] == "dark":
        apply_dark_theme()
    else:
        apply_light_theme()
