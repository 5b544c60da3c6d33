import streamlit as st
import sys
from dataclasses import asdict, dataclass
from typing import List, Optional

sys.path.append(".")
from config import load_config
from models.circular import (
    Annexure,
    AnnexureType,
    Chapter,
    CircularMode,
    CircularType,
    Clause,
)
from models.uploads import ImageFile
from services.circulars import CircularDataService
from services.ocr import OcrClient
from services.storage import FileDocumentStore
from utils.logging_utils import setup_logging

GENERIC_ERROR = "The change could not be saved. Check that the number is unique and try again."
IMAGE_TYPES = ["png", "jpg", "jpeg", "gif", "bmp", "webp", "tif", "tiff"]


@dataclass
class ClauseTarget:
    """Where a clause list lives: a chapter, a normal circular root or an annexure"""

    kind: str  # "chapter" | "normal" | "annexure"
    index: Optional[int] = None


@st.cache_resource
def get_services():
    config = load_config()
    setup_logging(config.log_directory)
    store = FileDocumentStore(config.storage.directory)
    return CircularDataService(store, config.storage.storage_key), OcrClient(config.ocr)


def set_action(**action):
    st.session_state["action"] = action


def clear_action():
    st.session_state.pop("action", None)
    for key in [k for k in st.session_state if str(k).endswith("_ocr_text")]:
        del st.session_state[key]


def report(success: bool, message: str = GENERIC_ERROR):
    if success:
        clear_action()
        st.rerun()
    else:
        st.error(message)


# ---------------------------------------------------------------------------
# Clause operations routed by target
# ---------------------------------------------------------------------------


def add_clause(service, mode, circular, target: ClauseTarget, clause, parent_path):
    if target.kind == "chapter":
        return service.add_clause_to_chapter(circular, target.index, clause, parent_path)
    if target.kind == "annexure":
        return service.add_clause_to_annexure(mode, circular, target.index, clause, parent_path)
    return service.add_clause_to_normal_circular(circular, clause, parent_path)


def update_clause(service, mode, circular, target: ClauseTarget, path, clause):
    if target.kind == "chapter":
        return service.update_clause(circular, target.index, path, clause)
    if target.kind == "annexure":
        return service.update_annexure_clause(mode, circular, target.index, path, clause)
    return service.update_clause_in_normal_circular(circular, path, clause)


def delete_clause(service, mode, circular, target: ClauseTarget, path):
    if target.kind == "chapter":
        return service.delete_clause(circular, target.index, path)
    if target.kind == "annexure":
        return service.delete_annexure_clause(mode, circular, target.index, path)
    return service.delete_clause_from_normal_circular(circular, path)


def find_clause(service, mode, circular, target: ClauseTarget, path):
    if target.kind == "chapter":
        return service.find_clause(mode, circular, path, chapter_index=target.index)
    if target.kind == "annexure":
        return service.find_clause(mode, circular, path, annexure_index=target.index)
    return service.find_clause(mode, circular, path)


# ---------------------------------------------------------------------------
# OCR
# ---------------------------------------------------------------------------


def ocr_upload(ocr_client: OcrClient, key: str) -> str:
    """File uploader + extract button. Returns the text extracted so far."""
    text_key = f"{key}_ocr_text"
    with st.expander("Upload Images for OCR"):
        uploads = st.file_uploader(
            "Images", type=IMAGE_TYPES, accept_multiple_files=True, key=f"{key}_uploads"
        )
        if uploads and st.button("Extract text", key=f"{key}_extract"):
            images = [
                ImageFile(filename=u.name, content=u.getvalue(), content_type=u.type or "")
                for u in uploads
            ]
            bars = [st.progress(0, text=image.filename) for image in images]

            def on_progress(index: int, value: float):
                bars[index].progress(int(value), text=images[index].filename)

            batch = ocr_client.process_images(images, on_progress=on_progress)
            for item in batch.results:
                if not item.result.success:
                    st.error(f"{item.filename}: {item.result.error}")
            if batch.combined_text:
                st.session_state[text_key] = batch.combined_text
                st.success(f"Extracted text from {batch.succeeded} of {len(images)} image(s)")
    return st.session_state.get(text_key, "")


def merge_ocr_text(existing: str, extracted: str) -> str:
    if not extracted:
        return existing
    if not existing:
        return extracted
    return f"{existing}\n\n{extracted}"


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


def clause_form(service, ocr_client, mode, circular, action):
    target = ClauseTarget(**action["target"])
    editing = action["name"] == "edit_clause"
    path: List[str] = action.get("path") or []
    existing = find_clause(service, mode, circular, target, path) if editing else None
    if editing and existing is None:
        st.error("Clause not found")
        clear_action()
        return

    if editing:
        st.subheader(f"Edit Clause {' → '.join(path)}")
    elif path:
        st.subheader("Add New Sub-Clause")
        st.caption(f"Parent clause: {' → '.join(path)}")
    else:
        st.subheader("Add New Clause")

    form_key = f"clause_form_{action['name']}_{target.kind}_{target.index}_{'_'.join(path)}"
    extracted = ocr_upload(ocr_client, form_key)

    with st.form(form_key):
        number = st.text_input("Clause Number *", value=existing.clause_number if existing else "")
        title = st.text_input("Clause Title", value=existing.clause_title if existing else "")
        content = st.text_area(
            "Clause Content",
            value=merge_ocr_text(existing.clause_content if existing else "", extracted),
            height=240,
        )
        submitted = st.form_submit_button("Save")
        cancelled = st.form_submit_button("Cancel")

    if cancelled:
        clear_action()
        st.rerun()
    if not submitted:
        return
    if not number.strip():
        st.error("Please enter a clause number")
        return

    clause = Clause(
        clause_number=number.strip(),
        clause_title=title.strip(),
        clause_content=content.strip(),
        # Existing subclauses are carried forward on edit
        clauses=existing.clauses if existing else [],
    )
    if editing:
        report(update_clause(service, mode, circular, target, path, clause))
    else:
        report(add_clause(service, mode, circular, target, clause, path or None))


def chapter_form(service, circular_type: CircularType, action):
    index = action.get("index")
    existing = None
    if index is not None:
        chapters = service.get_master_circular(circular_type).content
        existing = chapters[index] if 0 <= index < len(chapters) else None

    st.subheader("Edit Chapter" if existing else "Add New Chapter")
    with st.form(f"chapter_form_{index}"):
        number = st.text_input("Chapter Number *", value=existing.chapter_number if existing else "")
        title = st.text_input("Chapter Title *", value=existing.chapter_title if existing else "")
        content = st.text_area(
            "Chapter Content", value=existing.chapter_content if existing else ""
        )
        submitted = st.form_submit_button("Save")
        cancelled = st.form_submit_button("Cancel")

    if cancelled:
        clear_action()
        st.rerun()
    if not submitted:
        return
    if not number.strip() or not title.strip():
        st.error("Please fill in all required fields")
        return

    chapter = Chapter(
        chapter_number=number.strip(),
        chapter_title=title.strip(),
        chapter_content=content.strip(),
        clauses=existing.clauses if existing else [],
    )
    if existing:
        report(service.update_chapter(circular_type, index, chapter))
    else:
        report(service.add_chapter(circular_type, chapter))


def annexure_form(service, ocr_client, mode, circular, annexures: List[Annexure], action):
    index = action.get("index")
    existing = annexures[index] if index is not None and 0 <= index < len(annexures) else None

    st.subheader("Edit Annexure" if existing else "Add New Annexure")
    form_key = f"annexure_form_{index}"
    extracted = ocr_upload(ocr_client, form_key)

    type_options = [t.value for t in AnnexureType]
    with st.form(form_key):
        title = st.text_input("Annexure Title *", value=existing.annexure_title if existing else "")
        annexure_type = st.selectbox(
            "Annexure Type",
            type_options,
            index=type_options.index(existing.annexure_type.value) if existing else 0,
        )
        content = st.text_area(
            "Annexure Content",
            value=merge_ocr_text(existing.annexure_content if existing else "", extracted),
            height=240,
        )
        submitted = st.form_submit_button("Save")
        cancelled = st.form_submit_button("Cancel")

    if cancelled:
        clear_action()
        st.rerun()
    if not submitted:
        return
    if not title.strip():
        st.error("Please enter an annexure title")
        return

    new_type = AnnexureType(annexure_type)
    if existing and existing.clauses and new_type == AnnexureType.FORM:
        st.error("Delete this annexure's clauses before changing it to a form annexure")
        return

    annexure = Annexure(
        annexure_title=title.strip(),
        annexure_content=content.strip(),
        annexure_type=new_type,
        clauses=existing.clauses if existing else [],
    )
    if mode == CircularMode.MASTER:
        if existing:
            report(service.update_annexure(circular, index, annexure))
        else:
            report(service.add_annexure(circular, annexure))
    else:
        if existing:
            report(service.update_annexure_in_normal_circular(circular, index, annexure))
        else:
            report(service.add_annexure_to_normal_circular(circular, annexure))


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def render_clauses(service, mode, circular, target: ClauseTarget, clauses: List[Clause], parent_path=None, depth=0):
    parent_path = parent_path or []
    for clause in clauses:
        path = parent_path + [clause.clause_number]
        key = f"{target.kind}_{target.index}_{'_'.join(path)}"
        indent = "&nbsp;" * 4 * depth
        st.markdown(f"{indent}**{clause.clause_number}** {clause.clause_title}", unsafe_allow_html=True)
        if clause.clause_content:
            st.markdown(clause.clause_content)

        cols = st.columns([1, 1, 1, 6])
        if cols[0].button("Add sub-clause", key=f"add_{key}"):
            set_action(name="add_clause", target=asdict(target), path=path)
            st.rerun()
        if cols[1].button("Edit", key=f"edit_{key}"):
            set_action(name="edit_clause", target=asdict(target), path=path)
            st.rerun()
        if cols[2].button("Delete", key=f"delete_{key}"):
            report(delete_clause(service, mode, circular, target, path))

        if clause.clauses:
            render_clauses(service, mode, circular, target, clause.clauses, path, depth + 1)


def render_chapters(service, circular_type: CircularType):
    chapters = service.get_master_circular(circular_type).content
    if not chapters:
        st.info(f"No chapters yet. Start by adding your first chapter to the {circular_type.value} circular.")
        return

    for index, chapter in enumerate(chapters):
        with st.expander(f"Chapter {chapter.chapter_number}: {chapter.chapter_title}"):
            if chapter.chapter_content:
                st.markdown(chapter.chapter_content)
            cols = st.columns([1, 1, 1, 6])
            target = ClauseTarget(kind="chapter", index=index)
            if cols[0].button("Add clause", key=f"add_clause_ch_{index}"):
                set_action(name="add_clause", target=asdict(target), path=[])
                st.rerun()
            if cols[1].button("Edit", key=f"edit_ch_{index}"):
                set_action(name="chapter", index=index)
                st.rerun()
            if cols[2].button("Delete", key=f"delete_ch_{index}"):
                report(service.delete_chapter(circular_type, index))
            render_clauses(service, CircularMode.MASTER, circular_type, target, chapter.clauses)


def render_annexures(service, mode, circular, annexures: List[Annexure]):
    if not annexures:
        st.info("No annexures yet.")
        return

    for index, annexure in enumerate(annexures):
        label = "Form" if annexure.annexure_type == AnnexureType.FORM else "Non-Form"
        with st.expander(f"[{label}] {annexure.annexure_title}"):
            if annexure.annexure_content:
                st.markdown(annexure.annexure_content)
            cols = st.columns([1, 1, 1, 6])
            target = ClauseTarget(kind="annexure", index=index)
            if annexure.accepts_clauses and cols[0].button("Add clause", key=f"add_clause_an_{index}"):
                set_action(name="add_clause", target=asdict(target), path=[])
                st.rerun()
            if cols[1].button("Edit", key=f"edit_an_{index}"):
                set_action(name="annexure", index=index)
                st.rerun()
            if cols[2].button("Delete", key=f"delete_an_{index}"):
                if mode == CircularMode.MASTER:
                    report(service.delete_annexure(circular, index))
                else:
                    report(service.delete_annexure_from_normal_circular(circular, index))
            if annexure.accepts_clauses:
                render_clauses(service, mode, circular, target, annexure.clauses)


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------


def sidebar(service):
    with st.sidebar:
        st.header("Circular")
        mode = CircularMode(
            st.radio(
                "Mode",
                [m.value for m in CircularMode],
                format_func=lambda m: "Master circulars" if m == "master" else "Normal circulars",
            )
        )

        circular = None
        if mode == CircularMode.MASTER:
            circular = CircularType(
                st.selectbox("Master circular", [ct.value for ct in CircularType])
            )
        else:
            names = service.get_normal_circular_names()
            if names:
                circular = st.selectbox("Normal circular", names)
            with st.form("new_normal_circular", clear_on_submit=True):
                new_name = st.text_input("Circular name")
                if st.form_submit_button("Create circular"):
                    if not new_name.strip():
                        st.error("Please enter a circular name")
                    elif any(n.lower() == new_name.strip().lower() for n in names):
                        st.error("A circular with this name already exists")
                    else:
                        report(service.add_normal_circular(new_name))
            if circular and st.button(f'Delete "{circular}"'):
                report(service.delete_normal_circular(circular))

        st.header("Data")
        st.download_button(
            label="Export JSON",
            data=service.export_data(),
            file_name="all_circulars_data.json",
            mime="application/json",
        )
        imported = st.file_uploader("Import JSON", type=["json"])
        if imported is not None and st.button("Import"):
            if service.import_data(imported.getvalue().decode("utf-8")):
                st.success("Data imported")
                st.rerun()
            else:
                st.error("Invalid file: expected an exported circulars document")
        confirm = st.checkbox("I understand this deletes everything")
        if st.button("Clear all data", disabled=not confirm):
            report(service.clear_all_data())

    return mode, circular


def main():
    st.set_page_config(page_title="Master Circular Manager", page_icon="📑", layout="wide")
    service, ocr_client = get_services()

    st.title("📑 Master Circular Manager")
    st.write("Manage chapters, clauses, and annexures for master and normal circulars.")

    mode, circular = sidebar(service)
    if circular is None:
        st.info("Create a normal circular from the sidebar to get started.")
        return

    stats = service.get_stats(circular, mode)
    cols = st.columns(3)
    cols[0].metric("Total Chapters", stats.chapters_count)
    cols[1].metric("Total Clauses", stats.clauses_count)
    cols[2].metric("Total Annexures", stats.annexures_count)

    if mode == CircularMode.MASTER:
        annexures = service.get_master_circular(circular).annexures
    else:
        annexures = service.get_normal_circular(circular).annexures

    action = st.session_state.get("action")
    if action:
        if action["name"] in ("add_clause", "edit_clause"):
            clause_form(service, ocr_client, mode, circular, action)
        elif action["name"] == "chapter":
            chapter_form(service, circular, action)
        elif action["name"] == "annexure":
            annexure_form(service, ocr_client, mode, circular, annexures, action)
        st.divider()

    if mode == CircularMode.MASTER:
        chapters_tab, annexures_tab = st.tabs(
            [f"Chapters ({stats.chapters_count})", f"Annexures ({stats.annexures_count})"]
        )
        with chapters_tab:
            if st.button("Add Chapter"):
                set_action(name="chapter", index=None)
                st.rerun()
            render_chapters(service, circular)
    else:
        clauses_tab, annexures_tab = st.tabs(
            [f"Clauses ({stats.clauses_count})", f"Annexures ({stats.annexures_count})"]
        )
        with clauses_tab:
            target = ClauseTarget(kind="normal")
            if st.button("Add Clause"):
                set_action(name="add_clause", target=asdict(target), path=[])
                st.rerun()
            clauses = service.get_normal_circular(circular).clauses
            if not clauses:
                st.info("No clauses yet.")
            render_clauses(service, mode, circular, target, clauses)

    with annexures_tab:
        if st.button("Add Annexure"):
            set_action(name="annexure", index=None)
            st.rerun()
        render_annexures(service, mode, circular, annexures)


if __name__ == "__main__":
    main()
