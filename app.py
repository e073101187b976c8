"""
Feedback Sentiment Dashboard
Classify customer feedback, correct the model, and draft AI insights.
"""

import json

import streamlit as st

from feedback_sentiment import CATEGORIES, Category, FeedbackAnalyzer
from feedback_sentiment.assistant import FeedbackAssistant
from feedback_sentiment.config import get_settings
from feedback_sentiment.parsers import get_parser

settings = get_settings()

# Page configuration
st.set_page_config(
    page_title="Feedback Sentiment",
    page_icon="💬",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS
st.markdown(
    """
<style>
    .main-header {
        font-size: 2.2rem;
        font-weight: 700;
        color: #3730A3;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }
    .stat-box {
        border-radius: 8px;
        padding: 1rem;
        text-align: center;
    }
    .stat-Positive { background-color: #ECFDF5; color: #047857; }
    .stat-Negative { background-color: #FFF1F2; color: #BE123C; }
    .stat-Neutral { background-color: #F8FAFC; color: #334155; }
    .stat-number {
        font-size: 2rem;
        font-weight: 700;
    }
</style>
""",
    unsafe_allow_html=True,
)

LABEL_ICONS = {
    Category.POSITIVE: "🙂",
    Category.NEGATIVE: "🙁",
    Category.NEUTRAL: "😐",
}


def init_session_state():
    """Initialize session state variables."""
    if "analyzer" not in st.session_state:
        st.session_state.analyzer = FeedbackAnalyzer()
    if "replies" not in st.session_state:
        st.session_state.replies = {}
    if "report" not in st.session_state:
        st.session_state.report = None
    if "saved_message" not in st.session_state:
        st.session_state.saved_message = None
    if "chat" not in st.session_state:
        st.session_state.chat = [
            {"role": "assistant", "content": "Hi! I'm your AI Analyst. Ask me anything about the current reviews."}
        ]


def get_assistant(model: str):
    """Build the LLM assistant, or None when no API key is configured."""
    try:
        return FeedbackAssistant(model=model, settings=settings)
    except ValueError:
        return None


def save_feedback(label: Category):
    """Save the typed feedback and clear the input (runs as a button callback)."""
    text = st.session_state.feedback_text
    if not text.strip():
        return
    item = st.session_state.analyzer.add(text, label=label)
    st.session_state.feedback_text = ""
    st.session_state.saved_message = f"Saved #{item.id} as {item.label.value}"


def render_sidebar():
    """Render the sidebar with settings and file import."""
    analyzer: FeedbackAnalyzer = st.session_state.analyzer

    with st.sidebar:
        st.markdown("### ⚙️ Settings")
        model = st.selectbox(
            "AI Model",
            [settings.model, "gpt-4o", "claude-3-5-sonnet-latest"],
            index=0,
            help="Model used for reports, replies and second opinions",
        )

        st.markdown("---")
        st.markdown("### 📁 Import Feedback")
        uploaded = st.file_uploader(
            "Text, CSV, Excel or Word",
            type=["txt", "csv", "xlsx", "xls", "docx"],
        )
        if uploaded is not None and st.button("Import lines", use_container_width=True):
            with st.spinner("📄 Extracting feedback..."):
                try:
                    parsed = get_parser(uploaded.name).parse_stream(uploaded, uploaded.name)
                    imported = analyzer.import_lines(parsed.lines)
                    st.success(f"Imported {len(imported)} item(s) from {uploaded.name}")
                except Exception as e:
                    st.error(f"Import failed: {str(e)}")

        st.markdown("---")
        st.markdown("### 🧪 Synthetic Data")
        if st.button("✨ Generate examples", use_container_width=True):
            assistant = get_assistant(model)
            if assistant is None:
                st.error("Set OPENAI_API_KEY or ANTHROPIC_API_KEY to use AI features.")
            else:
                with st.spinner("Generating reviews..."):
                    try:
                        added = analyzer.add_examples(assistant.generate_examples())
                        st.success(f"Added {len(added)} example(s)")
                    except Exception as e:
                        st.error(f"Generation failed: {str(e)}")

        return model


def render_stats():
    """Render per-category counters."""
    stats = st.session_state.analyzer.stats()
    cols = st.columns(len(CATEGORIES))
    for col, category in zip(cols, CATEGORIES):
        with col:
            st.markdown(
                f"""
            <div class="stat-box stat-{category.value}">
                <div class="stat-number">{stats.count(category)}</div>
                <div>{LABEL_ICONS[category]} {category.value}</div>
            </div>
            """,
                unsafe_allow_html=True,
            )


def render_dashboard(model: str):
    """Input area with live prediction, save and AI second opinion."""
    analyzer: FeedbackAnalyzer = st.session_state.analyzer

    col_left, col_right = st.columns([3, 2])

    with col_left:
        st.markdown("### 💬 Analyze Feedback")
        text = st.text_area(
            "Feedback",
            placeholder="Type a review to classify it (e.g., 'The shipping was super fast')...",
            label_visibility="collapsed",
            height=140,
            key="feedback_text",
        )

        if st.session_state.saved_message:
            st.success(st.session_state.saved_message)
            st.session_state.saved_message = None

        if text.strip():
            prediction = analyzer.classify(text)
            st.markdown(
                f"**Prediction:** {LABEL_ICONS[prediction.label]} {prediction.label.value} "
                f"({prediction.confidence:.0%})"
            )
            st.dataframe(
                [
                    {
                        "Category": c.value,
                        "Log score": round(prediction.scores[c], 3),
                        "Probability": f"{prediction.probabilities[c]:.0%}",
                    }
                    for c in CATEGORIES
                ],
                use_container_width=True,
                hide_index=True,
            )

            btn_save, btn_verify = st.columns(2)
            with btn_save:
                st.button(
                    "💾 Save",
                    type="primary",
                    use_container_width=True,
                    key="save_feedback",
                    on_click=save_feedback,
                    args=(prediction.label,),
                )
            with btn_verify:
                if st.button("🛡️ AI second opinion", use_container_width=True):
                    assistant = get_assistant(model)
                    if assistant is None:
                        st.error("Set OPENAI_API_KEY or ANTHROPIC_API_KEY to use AI features.")
                    else:
                        with st.spinner("Asking the sentiment expert..."):
                            try:
                                verification = assistant.verify_sentiment(text)
                                st.info(verification.raw)
                            except Exception as e:
                                st.error(f"Verification failed: {str(e)}")

    with col_right:
        st.markdown("### 📊 Overview")
        render_stats()

        st.markdown("### 📝 Insight Report")
        if st.button("Generate report", use_container_width=True):
            assistant = get_assistant(model)
            if assistant is None:
                st.error("Set OPENAI_API_KEY or ANTHROPIC_API_KEY to use AI features.")
            else:
                with st.spinner("Writing report..."):
                    try:
                        st.session_state.report = assistant.insight_report(analyzer.items)
                    except Exception as e:
                        st.error(f"Report failed: {str(e)}")
        if st.session_state.report:
            st.markdown(st.session_state.report)


def render_results(model: str):
    """Items grouped by category, with correction and reply drafting."""
    analyzer: FeedbackAnalyzer = st.session_state.analyzer
    groups = analyzer.categorized()
    options = [c.value for c in CATEGORIES]

    columns = st.columns(len(CATEGORIES))
    for col, category in zip(columns, CATEGORIES):
        with col:
            st.markdown(f"### {LABEL_ICONS[category]} {category.value} ({len(groups[category])})")
            for item in groups[category]:
                with st.container(border=True):
                    st.write(item.text)
                    st.caption(f"#{item.id} · {item.source}")
                    new_label = st.selectbox(
                        "Label",
                        options,
                        index=options.index(item.label.value),
                        key=f"label-{item.id}",
                        label_visibility="collapsed",
                    )
                    if new_label != item.label.value:
                        analyzer.correct(item.id, new_label)
                        st.rerun()

                    if st.button("✉️ Draft reply", key=f"reply-{item.id}"):
                        assistant = get_assistant(model)
                        if assistant is None:
                            st.error("Set an API key to draft replies.")
                        else:
                            try:
                                st.session_state.replies[item.id] = assistant.draft_reply(item)
                            except Exception as e:
                                st.error(f"Reply failed: {str(e)}")
                    if item.id in st.session_state.replies:
                        st.code(st.session_state.replies[item.id], language=None)

    st.download_button(
        "📥 Download History (JSON)",
        data=json.dumps([item.to_dict() for item in analyzer.items], indent=2),
        file_name="feedback_history.json",
        mime="application/json",
    )


def render_chat(model: str):
    """Q&A over the current feedback history."""
    for message in st.session_state.chat:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

    question = st.chat_input("Ask about trends, issues...")
    if question:
        st.session_state.chat.append({"role": "user", "content": question})
        assistant = get_assistant(model)
        if assistant is None:
            answer = "Set OPENAI_API_KEY or ANTHROPIC_API_KEY to chat with the analyst."
        else:
            try:
                answer = assistant.ask(question, st.session_state.analyzer.items)
            except Exception as e:
                answer = f"Error generating AI response: {str(e)}"
        st.session_state.chat.append({"role": "assistant", "content": answer})
        st.rerun()


def main():
    """Main application entry point."""
    init_session_state()

    st.markdown('<p class="main-header">💬 Feedback Sentiment</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Classify feedback, correct mistakes, and the model learns instantly</p>',
        unsafe_allow_html=True,
    )

    model = render_sidebar()

    tab1, tab2, tab3 = st.tabs(["📊 Dashboard", "🗂️ Detailed Results", "🤖 Ask AI Analyst"])
    with tab1:
        render_dashboard(model)
    with tab2:
        render_results(model)
    with tab3:
        render_chat(model)


if __name__ == "__main__":
    main()
