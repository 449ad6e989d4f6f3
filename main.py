# main.py

"""Streamlit web UI for keyscrub.

Lets a user upload several text files, sanitizes them together so shared
values get shared placeholders, and offers the sanitized files and the
keylist for download.
"""

import streamlit as st
import logging
from pathlib import PurePath

from keyscrub.core.exceptions import ScrubError
from keyscrub.logging_config import configure_logging
from keyscrub.service.config import settings
from keyscrub.service.keylist import render_keylist
from keyscrub.service.pipeline import ScrubOrchestrator

logger = logging.getLogger(__name__)


def _decode_uploads(uploads):
    """Decodes uploaded files.

    Uploads that are not text are skipped. Repeated file names get ``-2``,
    ``-3``, ... before the extension so every document has its own path.

    Returns:
        (documents, notices): (name, text) pairs and messages for the user
    """
    documents, notices = [], []
    taken = set()
    for upload in uploads:
        try:
            text = upload.getvalue().decode(settings.encoding)
        except UnicodeDecodeError:
            notices.append(f"Skipping {upload.name}: not valid {settings.encoding} text.")
            logger.warning("Upload is not decodable", extra={"upload": upload.name})
            continue

        name, n = upload.name, 1
        while name in taken:
            n += 1
            original = PurePath(upload.name)
            name = f"{original.stem}-{n}{original.suffix}"
        if name != upload.name:
            notices.append(f"Another upload is named {upload.name}; showing this one as {name}.")
        taken.add(name)
        documents.append((name, text))
    return documents, notices


def main():
    """Run the Streamlit application UI.

    Configures the page, accepts uploaded files, runs the scout, merge and
    sanitize phases over them, and shows the key table alongside each
    sanitized document.
    """
    configure_logging(settings.log_level)
    st.set_page_config(layout="wide", page_title="keyscrub", page_icon="🔑")

    st.title("keyscrub")
    st.markdown(
        "Replace addresses, hostnames, and account names in text files with "
        "stable placeholders. Values shared between files get the same placeholder."
    )
    st.markdown("---")

    uploads = st.file_uploader(
        "Files to sanitize", accept_multiple_files=True, type=None
    )

    if not st.button("Sanitize", type="primary"):
        return

    if not uploads:
        st.warning("Please upload at least one file.")
        logger.warning("Sanitize attempted with no uploads")
        return

    documents, notices = _decode_uploads(uploads)
    for notice in notices:
        st.warning(notice)

    progress = st.progress(0.0, text="Scouting...")

    def on_progress(event):
        # Scout and sanitize each fill half the bar
        offset = 0.0 if event.phase == "scout" else 0.5
        progress.progress(
            offset + 0.5 * event.completed / event.total,
            text=f"{event.phase.capitalize()}: {event.path}",
        )

    try:
        orchestrator = ScrubOrchestrator(on_progress=on_progress)
        report = orchestrator.run_documents(documents)
    except (ScrubError, ValueError) as e:
        st.error(f"Sanitizing failed: {e}")
        logger.error("Sanitize run failed", exc_info=True)
        return

    progress.empty()

    if report.metadata.get("status") == "empty":
        st.error(report.metadata.get("error", "Nothing to sanitize."))
        return

    for failure in report.failures:
        st.warning(f"{failure.path}: {failure.message}")

    st.success(
        f"Sanitized {len(report.records)} file(s) using {len(report.global_table)} key(s)."
    )

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Keys")
        st.table(
            [
                {"Placeholder": e.placeholder, "Value": e.original_value, "Label": e.label}
                for e in report.global_table
            ]
        )
        st.download_button(
            "Download keylist",
            data=render_keylist(
                orchestrator.expanded_keylist_banner(), report.global_table, report.records
            ),
            file_name=settings.keylist_name,
        )

    with col2:
        st.subheader("Sanitized Files")
        for name, text in report.outputs.items():
            with st.expander(name):
                st.text_area(name, value=text, height=300, label_visibility="collapsed")
                st.download_button(
                    f"Download {name}", data=text, file_name=name, key=f"dl-{name}"
                )

    with st.sidebar:
        st.header("Indicators")
        for label in orchestrator.loader.get_labels():
            st.markdown(f"- **{label}**")
        st.header("Ignored Values")
        st.markdown(", ".join(sorted(orchestrator.loader.get_ignore_list())) or "None")


if __name__ == "__main__":
    main()
