# compare.py
import io
import pandas as pd
import streamlit as st
from gobi_scorers import SCORER_REGISTRY, RegisterWeights
from gobi_scorers.frame import score_frame, summarize_scores

st.set_page_config(page_title="Register score comparer", layout="wide")
st.title("📒 Register score comparer")

st.write("Upload an .xlsx, .xls or .csv file with prompts and persona responses.")

with st.sidebar:
    st.write("Loaded scorers:", list(SCORER_REGISTRY.keys()))
    st.header("🛠️ Weights")
    w_endings = st.slider("Sentence endings", min_value=0.0, max_value=1.0, value=0.4, step=0.05)
    w_phrases = st.slider("Characteristic phrases", min_value=0.0, max_value=1.0, value=0.3, step=0.05)
    phrase_cap = st.number_input("Phrases for full credit", min_value=1, max_value=20, value=5, step=1)
    w_first = st.slider("First-person pronoun", min_value=0.0, max_value=1.0, value=0.1, step=0.05)
    w_second = st.slider("Second-person pronoun", min_value=0.0, max_value=1.0, value=0.1, step=0.05)
    w_clean = st.slider("No slang", min_value=0.0, max_value=1.0, value=0.1, step=0.05)
    st.divider()
    threshold = st.slider("Acceptance threshold", min_value=0.0, max_value=1.0, value=0.5, step=0.05)

weights = RegisterWeights(
    endings=w_endings,
    phrases=w_phrases,
    phrase_cap=int(phrase_cap),
    first_person=w_first,
    second_person=w_second,
    clean=w_clean,
)
if weights.total > 1.0 + 1e-9:
    st.sidebar.warning(f"Weights add up to {weights.total:.2f}; scores are capped at 1.0.")

uploaded = st.file_uploader("Choose a file", type=["xlsx", "xls", "csv"])


@st.cache_data(show_spinner=False)
def list_sheets(bytes_data: bytes):
    # Sheet names only (pickle-serializable)
    xls = pd.ExcelFile(io.BytesIO(bytes_data))
    return xls.sheet_names


@st.cache_data(show_spinner=False)
def read_sheet(bytes_data: bytes, sheet: str, header_row: int) -> pd.DataFrame:
    return pd.read_excel(
        io.BytesIO(bytes_data), sheet_name=sheet, header=header_row, engine="openpyxl"
    )


@st.cache_data(show_spinner=False)
def read_csv_file(bytes_data: bytes, header_row: int) -> pd.DataFrame:
    return pd.read_csv(io.BytesIO(bytes_data), header=header_row)


def _highlight_pass(row: pd.Series):
    styles = pd.Series("", index=row.index)
    for col in row.index:
        if not str(col).startswith("score_") and col != "best_score":
            continue
        val = pd.to_numeric(row.get(col), errors="coerce")
        if pd.isna(val):
            continue
        if float(val) >= threshold:
            styles[col] = "background-color: #d4edda"  # green: passes
        else:
            styles[col] = "background-color: #f8d7da"  # red: below threshold
    return styles


if uploaded is not None:
    try:
        bytes_data = uploaded.getvalue()
        header_row = st.number_input("Header row (0-index)", min_value=0, value=0, step=1)
        if uploaded.name.lower().endswith(".csv"):
            df = read_csv_file(bytes_data, int(header_row))
            sheet = uploaded.name
        else:
            sheets = list_sheets(bytes_data)
            sheet = st.selectbox("Select sheet", sheets, index=0)
            df = read_sheet(bytes_data, sheet, int(header_row))

        st.caption(f"Sheet **{sheet}**: {df.shape[0]:,} rows × {df.shape[1]:,} columns")
        max_rows = st.number_input("Rows to show", min_value=5, max_value=10000, value=100, step=5)

        cols = list(df.columns.astype(str))
        df.columns = cols
        c1, c2 = st.columns([1, 2])
        with c1:
            col_prompt = st.selectbox("Prompt column (optional)", options=["(none)"] + cols, index=0)
        with c2:
            cols_resp = st.multiselect("Response columns (1+)", options=cols, default=cols[-1:] if cols else [])

        if not cols_resp:
            st.info("Select at least one response column to score.")
        else:
            input_col = None if col_prompt == "(none)" else col_prompt
            with st.spinner("Scoring responses..."):
                df_out = score_frame(df, cols_resp, input_col=input_col, weights=weights)

            view_cols = []
            for c in ([input_col] if input_col else []) + cols_resp:
                if c not in view_cols:
                    view_cols.append(c)
            for c in cols_resp:
                view_cols.extend([f"score_{c}", f"endings_{c}", f"phrases_{c}", f"slang_{c}"])
            if "best_response_col" in df_out.columns:
                view_cols.extend(["best_response_col", "best_score"])
            df_view = df_out[view_cols]

            st.caption("Scores at or above the threshold in green, below in red")
            try:
                st.dataframe(
                    df_view.head(int(max_rows)).style.apply(_highlight_pass, axis=1),
                    use_container_width=True,
                )
            except Exception:
                st.dataframe(df_view.head(int(max_rows)), use_container_width=True)

            st.subheader(f"Summary at threshold {threshold:.2f}")
            df_summary = summarize_scores(df_out, cols_resp, threshold)
            st.dataframe(df_summary, use_container_width=True)

            if "best_response_col" in df_out.columns:
                st.subheader("Best response column per row")
                counts = df_out["best_response_col"].value_counts()
                metric_cols = st.columns(len(counts)) if len(counts) else []
                for mc, (name, n) in zip(metric_cols, counts.items()):
                    with mc:
                        st.metric(str(name), f"{int(n)}")

            csv = df_out.to_csv(index=False).encode("utf-8")
            st.download_button("Download scored table", csv, file_name="register_scores.csv")
    except Exception as e:
        st.error(f"Error reading the file: {e}")
else:
    st.info("👆 Drag or select a file to start.")
