# services/circulars/circular_service.py

import json
import logging
from typing import Callable, List, Optional, Sequence, Union

from config import DEFAULT_STORAGE_KEY
from models.circular import (
    AllCircularsData,
    Annexure,
    Chapter,
    CircularContent,
    CircularMode,
    CircularStats,
    CircularType,
    Clause,
    NormalCircularContent,
)
from services.storage.base import BaseDocumentStore, StorageError
from services.storage.migrations import (
    InvalidSchemaError,
    SchemaVersion,
    detect_schema_version,
    migrate_to_current,
)
from . import clause_tree
from .stats import calculate_master_stats, calculate_normal_stats

logger = logging.getLogger(__name__)

CircularKey = Union[CircularType, str]


class CircularDataService:
    """
    Reads, mutates and writes the single circulars document.

    Every mutating method loads the whole document, applies one change in
    memory and saves it back, returning True only when the change was valid
    and the save succeeded.
    """

    def __init__(self, store: BaseDocumentStore, storage_key: str = DEFAULT_STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def get_default_structure(self) -> AllCircularsData:
        return AllCircularsData()

    def _read_document(self) -> AllCircularsData:
        """Load the stored document, creating or migrating it as needed.

        Raises:
            StorageError: If the stored value exists but cannot be read or parsed
        """
        raw_text = self.store.get_item(self.storage_key)
        if raw_text is None:
            data = self.get_default_structure()
            self.save_all_circulars_data(data)
            return data

        try:
            raw = json.loads(raw_text)
            version = detect_schema_version(raw)
            data = AllCircularsData.from_dict(migrate_to_current(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StorageError(f"Stored document is unreadable: {str(e)}", self.storage_key) from e

        if version != SchemaVersion.CURRENT:
            self.save_all_circulars_data(data)
        return data

    def get_all_circulars_data(self) -> AllCircularsData:
        try:
            return self._read_document()
        except StorageError as e:
            logger.error(f"Error reading from storage: {str(e)}")
            return self.get_default_structure()

    load = get_all_circulars_data

    def save_all_circulars_data(self, data: AllCircularsData) -> bool:
        try:
            self.store.set_item(
                self.storage_key,
                json.dumps(data.to_dict(), indent=2, ensure_ascii=False),
            )
            return True
        except StorageError as e:
            logger.error(f"Error saving to storage: {str(e)}")
            return False

    save = save_all_circulars_data

    def _mutate(self, action: str, change: Callable[[AllCircularsData], bool]) -> bool:
        try:
            # An unreadable stored document is never replaced by a mutation
            data = self._read_document()
        except StorageError as e:
            logger.error(f"Error {action.lower()}: {str(e)}")
            return False

        try:
            if not change(data):
                logger.warning(f"{action} rejected")
                return False
            return self.save_all_circulars_data(data)
        except Exception as e:
            logger.error(f"Error {action.lower()}: {str(e)}")
            return False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_master_circular(self, circular_type: CircularType) -> CircularContent:
        return self.get_all_circulars_data().master(circular_type)

    def get_normal_circular(self, circular_name: str) -> Optional[NormalCircularContent]:
        return self.get_all_circulars_data().normal_circulars.get(circular_name)

    def get_normal_circular_names(self) -> List[str]:
        return list(self.get_all_circulars_data().normal_circulars.keys())

    def find_clause(
        self,
        mode: CircularMode,
        circular: CircularKey,
        clause_path: Sequence[str],
        chapter_index: Optional[int] = None,
        annexure_index: Optional[int] = None,
    ) -> Optional[Clause]:
        """Look up a clause in a chapter, a normal circular root or an annexure.

        Pass annexure_index to search an annexure's clauses, chapter_index to
        search a master circular chapter. A normal circular with neither
        searches its root clause list.
        """
        data = self.get_all_circulars_data()
        if annexure_index is not None:
            clauses = self._annexure_clauses(data, mode, circular, annexure_index)
        elif CircularMode(mode) == CircularMode.MASTER:
            chapter = self._chapter(data, CircularType(circular), chapter_index)
            clauses = chapter.clauses if chapter else None
        else:
            normal = data.normal_circulars.get(circular)
            clauses = normal.clauses if normal else None
        if clauses is None:
            return None
        return clause_tree.find_clause(clauses, clause_path)

    @staticmethod
    def _chapter(
        data: AllCircularsData, circular_type: CircularType, chapter_index: Optional[int]
    ) -> Optional[Chapter]:
        chapters = data.master(circular_type).content
        if chapter_index is None or not 0 <= chapter_index < len(chapters):
            logger.error(f"Chapter index {chapter_index} out of range")
            return None
        return chapters[chapter_index]

    @staticmethod
    def _annexures(
        data: AllCircularsData, mode: CircularMode, circular: CircularKey
    ) -> Optional[List[Annexure]]:
        if CircularMode(mode) == CircularMode.MASTER:
            return data.master(CircularType(circular)).annexures
        normal = data.normal_circulars.get(circular)
        if normal is None:
            logger.error(f'Normal circular "{circular}" not found')
            return None
        return normal.annexures

    def _annexure_clauses(
        self,
        data: AllCircularsData,
        mode: CircularMode,
        circular: CircularKey,
        annexure_index: int,
    ) -> Optional[List[Clause]]:
        annexures = self._annexures(data, mode, circular)
        if annexures is None or not 0 <= annexure_index < len(annexures):
            logger.error(f"Annexure index {annexure_index} out of range")
            return None
        annexure = annexures[annexure_index]
        if not annexure.accepts_clauses:
            logger.error(f'Form annexure "{annexure.annexure_title}" cannot hold clauses')
            return None
        return annexure.clauses

    # ------------------------------------------------------------------
    # Normal circulars
    # ------------------------------------------------------------------

    def add_normal_circular(self, circular_name: str) -> bool:
        name = (circular_name or "").strip()

        def change(data: AllCircularsData) -> bool:
            if not name:
                logger.error("Normal circular name must not be empty")
                return False
            if any(existing.lower() == name.lower() for existing in data.normal_circulars):
                logger.error(f'Normal circular "{name}" already exists')
                return False
            data.normal_circulars[name] = NormalCircularContent()
            return True

        return self._mutate("Adding normal circular", change)

    def delete_normal_circular(self, circular_name: str) -> bool:
        def change(data: AllCircularsData) -> bool:
            if circular_name not in data.normal_circulars:
                logger.error(f'Normal circular "{circular_name}" not found')
                return False
            del data.normal_circulars[circular_name]
            return True

        return self._mutate("Deleting normal circular", change)

    def _normal_clauses(self, data: AllCircularsData, circular_name: str) -> Optional[List[Clause]]:
        circular = data.normal_circulars.get(circular_name)
        if circular is None:
            logger.error(f'Normal circular "{circular_name}" not found')
            return None
        return circular.clauses

    def add_clause_to_normal_circular(
        self,
        circular_name: str,
        clause: Clause,
        parent_clause_path: Optional[Sequence[str]] = None,
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._normal_clauses(data, circular_name)
            return clauses is not None and clause_tree.insert_clause(
                clauses, clause, parent_clause_path
            )

        return self._mutate("Adding clause to normal circular", change)

    def update_clause_in_normal_circular(
        self, circular_name: str, clause_path: Sequence[str], updated_clause: Clause
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._normal_clauses(data, circular_name)
            return clauses is not None and clause_tree.update_clause(
                clauses, clause_path, updated_clause
            )

        return self._mutate("Updating clause in normal circular", change)

    def delete_clause_from_normal_circular(
        self, circular_name: str, clause_path: Sequence[str]
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._normal_clauses(data, circular_name)
            return clauses is not None and clause_tree.delete_clause(clauses, clause_path)

        return self._mutate("Deleting clause from normal circular", change)

    def add_annexure_to_normal_circular(self, circular_name: str, annexure: Annexure) -> bool:
        return self._add_annexure(CircularMode.NORMAL, circular_name, annexure)

    def update_annexure_in_normal_circular(
        self, circular_name: str, annexure_index: int, annexure: Annexure
    ) -> bool:
        return self._update_annexure(CircularMode.NORMAL, circular_name, annexure_index, annexure)

    def delete_annexure_from_normal_circular(self, circular_name: str, annexure_index: int) -> bool:
        return self._delete_annexure(CircularMode.NORMAL, circular_name, annexure_index)

    # ------------------------------------------------------------------
    # Master circular chapters and clauses
    # ------------------------------------------------------------------

    def add_chapter(self, circular_type: CircularType, chapter: Chapter) -> bool:
        def change(data: AllCircularsData) -> bool:
            circular = data.master(circular_type)
            if not chapter.chapter_number:
                logger.error("Chapter number must not be empty")
                return False
            if circular.find_chapter_index(chapter.chapter_number) != -1:
                logger.error(f"Chapter {chapter.chapter_number} already exists")
                return False
            circular.content.append(chapter)
            return True

        return self._mutate("Adding chapter", change)

    def update_chapter(
        self, circular_type: CircularType, chapter_index: int, chapter: Chapter
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            circular = data.master(circular_type)
            if self._chapter(data, circular_type, chapter_index) is None:
                return False
            clash = circular.find_chapter_index(chapter.chapter_number)
            if clash not in (-1, chapter_index):
                logger.error(f"Chapter {chapter.chapter_number} already exists")
                return False
            circular.content[chapter_index] = chapter
            return True

        return self._mutate("Updating chapter", change)

    def delete_chapter(self, circular_type: CircularType, chapter_index: int) -> bool:
        def change(data: AllCircularsData) -> bool:
            if self._chapter(data, circular_type, chapter_index) is None:
                return False
            del data.master(circular_type).content[chapter_index]
            return True

        return self._mutate("Deleting chapter", change)

    def add_clause_to_chapter(
        self,
        circular_type: CircularType,
        chapter_index: int,
        clause: Clause,
        parent_clause_path: Optional[Sequence[str]] = None,
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            chapter = self._chapter(data, circular_type, chapter_index)
            return chapter is not None and clause_tree.insert_clause(
                chapter.clauses, clause, parent_clause_path
            )

        return self._mutate("Adding clause", change)

    def update_clause(
        self,
        circular_type: CircularType,
        chapter_index: int,
        clause_path: Sequence[str],
        updated_clause: Clause,
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            chapter = self._chapter(data, circular_type, chapter_index)
            return chapter is not None and clause_tree.update_clause(
                chapter.clauses, clause_path, updated_clause
            )

        return self._mutate("Updating clause", change)

    def delete_clause(
        self, circular_type: CircularType, chapter_index: int, clause_path: Sequence[str]
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            chapter = self._chapter(data, circular_type, chapter_index)
            return chapter is not None and clause_tree.delete_clause(chapter.clauses, clause_path)

        return self._mutate("Deleting clause", change)

    # ------------------------------------------------------------------
    # Annexures (both modes)
    # ------------------------------------------------------------------

    def add_annexure(self, circular_type: CircularType, annexure: Annexure) -> bool:
        return self._add_annexure(CircularMode.MASTER, circular_type, annexure)

    def update_annexure(
        self, circular_type: CircularType, annexure_index: int, annexure: Annexure
    ) -> bool:
        return self._update_annexure(CircularMode.MASTER, circular_type, annexure_index, annexure)

    def delete_annexure(self, circular_type: CircularType, annexure_index: int) -> bool:
        return self._delete_annexure(CircularMode.MASTER, circular_type, annexure_index)

    @staticmethod
    def _check_annexure_shape(annexure: Annexure) -> bool:
        if not annexure.accepts_clauses and annexure.clauses:
            logger.error(
                f'Form annexure "{annexure.annexure_title}" cannot hold clauses '
                f"({len(annexure.clauses)} given)"
            )
            return False
        return True

    def _add_annexure(self, mode: CircularMode, circular: CircularKey, annexure: Annexure) -> bool:
        def change(data: AllCircularsData) -> bool:
            if not self._check_annexure_shape(annexure):
                return False
            annexures = self._annexures(data, mode, circular)
            if annexures is None:
                return False
            annexures.append(annexure)
            return True

        return self._mutate("Adding annexure", change)

    def _update_annexure(
        self, mode: CircularMode, circular: CircularKey, annexure_index: int, annexure: Annexure
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            if not self._check_annexure_shape(annexure):
                return False
            annexures = self._annexures(data, mode, circular)
            if annexures is None or not 0 <= annexure_index < len(annexures):
                logger.error(f"Annexure index {annexure_index} out of range")
                return False
            annexures[annexure_index] = annexure
            return True

        return self._mutate("Updating annexure", change)

    def _delete_annexure(self, mode: CircularMode, circular: CircularKey, annexure_index: int) -> bool:
        def change(data: AllCircularsData) -> bool:
            annexures = self._annexures(data, mode, circular)
            if annexures is None or not 0 <= annexure_index < len(annexures):
                logger.error(f"Annexure index {annexure_index} out of range")
                return False
            del annexures[annexure_index]
            return True

        return self._mutate("Deleting annexure", change)

    def add_clause_to_annexure(
        self,
        mode: CircularMode,
        circular: CircularKey,
        annexure_index: int,
        clause: Clause,
        parent_clause_path: Optional[Sequence[str]] = None,
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._annexure_clauses(data, mode, circular, annexure_index)
            return clauses is not None and clause_tree.insert_clause(
                clauses, clause, parent_clause_path
            )

        return self._mutate("Adding clause to annexure", change)

    def update_annexure_clause(
        self,
        mode: CircularMode,
        circular: CircularKey,
        annexure_index: int,
        clause_path: Sequence[str],
        updated_clause: Clause,
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._annexure_clauses(data, mode, circular, annexure_index)
            return clauses is not None and clause_tree.update_clause(
                clauses, clause_path, updated_clause
            )

        return self._mutate("Updating annexure clause", change)

    def delete_annexure_clause(
        self,
        mode: CircularMode,
        circular: CircularKey,
        annexure_index: int,
        clause_path: Sequence[str],
    ) -> bool:
        def change(data: AllCircularsData) -> bool:
            clauses = self._annexure_clauses(data, mode, circular, annexure_index)
            return clauses is not None and clause_tree.delete_clause(clauses, clause_path)

        return self._mutate("Deleting annexure clause", change)

    # ------------------------------------------------------------------
    # Stats, export / import
    # ------------------------------------------------------------------

    def get_stats(self, circular: CircularKey, mode: CircularMode = CircularMode.MASTER) -> CircularStats:
        data = self.get_all_circulars_data()
        if CircularMode(mode) == CircularMode.MASTER:
            return calculate_master_stats(data.master(CircularType(circular)))
        return calculate_normal_stats(data.normal_circulars.get(circular))

    def export_data(self) -> str:
        return json.dumps(self.get_all_circulars_data().to_dict(), indent=2, ensure_ascii=False)

    def import_data(self, json_string: str) -> bool:
        try:
            raw = json.loads(json_string)
            data = AllCircularsData.from_dict(migrate_to_current(raw))
        except InvalidSchemaError as e:
            logger.error(f"Error importing data: {str(e)}")
            return False
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error importing data: malformed document ({str(e)})")
            return False
        if not all(self._check_annexure_shape(annexure) for annexure in data.iter_annexures()):
            logger.error("Error importing data: form annexures cannot hold clauses")
            return False
        return self.save_all_circulars_data(data)

    def clear_all_data(self) -> bool:
        try:
            self.store.remove_item(self.storage_key)
            return True
        except StorageError as e:
            logger.error(f"Error clearing data: {str(e)}")
            return False
