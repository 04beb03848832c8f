"""
Streamlit Demo Application for RFQ Extractor

Upload an RFQ PDF, preview the extracted items and their review flags,
and download the result as JSON.
Run with: streamlit run demo_streamlit.py
"""
import json
from pathlib import Path

import streamlit as st

from rfq_extractor.config import ExtractionConfig
from rfq_extractor.services import ExtractionServiceFactory


def render_item(index: int, item: dict) -> None:
    """Show one extracted item inside an expander."""
    flag = "⚠️" if item['status'] == 'needs_review' else "✅"
    with st.expander(f"{flag} Item {index}: {item['title']}"):
        if item['review_reason']:
            st.warning(f"Needs review: {item['review_reason']}")
        col1, col2 = st.columns(2)
        with col1:
            st.write(f"**Length (in):** {item['length']}")
            st.write(f"**Depth (in):** {item['depth']}")
            st.write(f"**Height (in):** {item['height']}")
            st.write(f"**Quantity:** {item['quantity']}")
        with col2:
            st.write(f"**Primary Material:** {item['primary_material'] or 'N/A'}")
            st.write(f"**Finishes:** {item['finishes'] or 'N/A'}")
        if item['construction_notes']:
            st.write(f"**Construction Notes:** {item['construction_notes']}")


def main():
    st.set_page_config(
        page_title="RFQ Extractor - PDF Line Items",
        page_icon="📄",
        layout="wide"
    )

    st.title("📄 RFQ Extractor")
    st.markdown("Extract line items (dimensions, quantity, materials, finishes) from RFQ PDFs")

    with st.sidebar:
        st.header("⚙️ Configuration")
        timeout = st.number_input(
            "Command timeout (seconds)", min_value=1.0, value=30.0, step=5.0,
            help="Upper bound for each external text extraction command"
        )
        min_text_length = st.number_input(
            "Minimum text length", min_value=0, value=50, step=10,
            help="Backends returning less text than this are skipped"
        )

    uploaded_file = st.file_uploader(
        "Upload an RFQ PDF",
        type=["pdf"],
        help="Labeled fields, numbered items, tables or simple lists work best"
    )

    if uploaded_file is None:
        st.info("👆 Upload a PDF file to get started")
        with st.expander("📖 How it works"):
            st.markdown("""
            1. **Text acquisition**: pdftotext, pdfplumber, a pdfminer script, then a raw stream scan
            2. **Normalization**: repairs character-fragmented text ("P r o d u c t")
            3. **Segmentation**: item markers, separator lines, blank lines, table/list formats
            4. **Field extraction**: title, dimensions, quantity, material, finishes, notes
            5. **Validation**: items missing a critical field are flagged for review
            """)
        return

    if st.button("🚀 Extract Items", type="primary"):
        with st.spinner("Processing PDF..."):
            config = ExtractionConfig(subprocess_timeout=timeout, min_text_length=int(min_text_length))
            service = ExtractionServiceFactory.create_rfq_service(config=config)
            outcome = service.extract(uploaded_file.getvalue())
            st.session_state['ok'] = outcome.ok
            st.session_state['outcome'] = outcome.model_dump(mode='json')
            st.session_state['pdf_name'] = uploaded_file.name

    if 'outcome' not in st.session_state:
        return

    outcome = st.session_state['outcome']
    pdf_name = st.session_state['pdf_name']

    if not st.session_state['ok']:
        st.error(f"❌ {outcome['message']}")
        with st.expander("Attempts"):
            for attempt in outcome['attempts']:
                st.write(f"- {attempt}")
        return

    st.header("📊 Extraction Results")
    items = outcome['items']
    needs_review = sum(1 for item in items if item['status'] == 'needs_review')

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Items Detected", outcome['items_detected'])
    with col2:
        st.metric("Extracted", len(items) - needs_review)
    with col3:
        st.metric("Needs Review", needs_review)

    if outcome['status'] == 'success':
        st.success(outcome['message'])
    else:
        st.warning(outcome['message'])

    tab1, tab2, tab3 = st.tabs(["🔍 Items", "📑 Raw JSON", "💾 Download"])

    with tab1:
        for index, item in enumerate(items, start=1):
            render_item(index, item)

    with tab2:
        st.json(outcome)

    with tab3:
        st.download_button(
            label="💾 Download JSON",
            data=json.dumps(outcome, indent=2),
            file_name=f"{Path(pdf_name).stem}_extracted.json",
            mime="application/json"
        )
        st.info(f"💡 Tip: You can also use the CLI command: `rfqx {pdf_name}`")


if __name__ == "__main__":
    main()
