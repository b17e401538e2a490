"""Ingestion pipeline: raw markdown payloads into stored notes."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from notetwin.database.repository import ReadOnlyStoreError, Repository
from notetwin.models.note import ImportResult
from notetwin.services.markdown_parser import (
    is_multi_note,
    parse_markdown_note,
    parse_markdown_notes,
)

logger = logging.getLogger(__name__)


class ImportPayloadError(ValueError):
    """The import request did not carry any markdown to import."""

    pass


def _decode(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if hasattr(value, "read"):
        data = value.read()
        return data.decode("utf-8") if isinstance(data, bytes) else data
    return value


def resolve_payload(
    form: Optional[Mapping[str, Any]] = None,
    json_body: Optional[Any] = None,
) -> str:
    """Extract the raw markdown from an import request.

    Form payloads use a ``file`` field (its text, bytes or a readable
    object) or a non-blank ``text`` field; ``file`` wins. JSON payloads use
    a ``content`` or ``text`` string field; ``content`` wins.

    Raises:
        ImportPayloadError: If no usable field is present
    """
    if form is not None:
        file = form.get("file")
        text = form.get("text")
        if file is not None:
            return _decode(file)
        if isinstance(text, str) and text.strip():
            return text
        raise ImportPayloadError("Provide 'file' or 'text' in the request")

    if isinstance(json_body, Mapping):
        content = json_body.get("content")
        text = json_body.get("text")
        if isinstance(content, str):
            return content
        if isinstance(text, str):
            return text
    raise ImportPayloadError("Provide 'content' or 'text' in the request body")


class IngestionPipeline:
    """Parses markdown documents and inserts the resulting notes."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def _require_local(self) -> None:
        if not self.repository.is_local_mode:
            raise ReadOnlyStoreError(
                "Upload not available when using vault. "
                "Remove DIGITAL_TWIN_DB_PATH to use in-app storage."
            )

    def import_text(self, raw: str) -> ImportResult:
        """Import one note, or several separated by a blank-line-padded ``---``.

        Fragments whose content is blank are skipped.

        Raises:
            ReadOnlyStoreError: If the store is a vault database
        """
        self._require_local()

        parsed = parse_markdown_notes(raw) if is_multi_note(raw) else [parse_markdown_note(raw)]

        result = ImportResult()
        for note in parsed:
            if not note.content.strip():
                logger.debug("Skipping note fragment with empty content")
                continue
            note_id = self.repository.insert_note(
                title=note.title,
                content=note.content,
                tags=note.tags,
                folder_path=note.folder_path,
                frontmatter=note.frontmatter,
            )
            result.ids.append(note_id)

        logger.info("Imported %d of %d parsed note(s)", result.imported, len(parsed))
        return result

    def import_file(self, path: Union[str, Path]) -> ImportResult:
        """Import a markdown file (UTF-8)."""
        self._require_local()
        return self.import_text(Path(path).read_text(encoding="utf-8"))

    def import_payload(
        self,
        form: Optional[Mapping[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> ImportResult:
        """Resolve an import request payload and import it.

        Raises:
            ReadOnlyStoreError: If the store is a vault database
            ImportPayloadError: If the payload carries no markdown
        """
        self._require_local()
        return self.import_text(resolve_payload(form=form, json_body=json_body))
