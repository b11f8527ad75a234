# Руководство к файлу (SERVICES/document_store.py)
# Назначение:
# - Файловое хранилище документов отчётов: сохранить текст -> ссылка, прочитать по ссылке.
# - «Не найден» (DocumentNotFoundError) отличается от сбоя ввода-вывода (DocumentStoreError).
# Важно:
# - Ссылка: имя файла внутри root_dir; чтение за пределами root_dir запрещено.

from __future__ import annotations

import logging
import re
from pathlib import Path
from uuid import uuid4

from PROCHECK.CORE.errors import DocumentNotFoundError, DocumentStoreError


logger = logging.getLogger("procheck.documents")

_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]+")


class DocumentStore:
    def __init__(self, root_dir: str | Path) -> None:
        self.root = Path(root_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if self.root not in path.parents:
            raise DocumentNotFoundError(ref)
        return path

    def put_text(self, name_hint: str, text: str) -> str:
        """Сохранить текст, вернуть ссылку на документ."""

        stem = _SAFE_NAME.sub("_", name_hint).strip("._") or "document"
        ref = f"{stem}_{uuid4().hex[:12]}.txt"
        path = self.root / ref
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to write document %s", path)
            raise DocumentStoreError(f"Не удалось сохранить документ: {exc}") from exc
        logger.info("Document saved ref=%s size=%d", ref, len(text))
        return ref

    def read_text(self, ref: str) -> str:
        path = self._resolve(ref)
        if not path.is_file():
            raise DocumentNotFoundError(ref)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to read document %s", path)
            raise DocumentStoreError(f"Не удалось прочитать документ: {exc}") from exc

    def delete(self, ref: str) -> bool:
        try:
            path = self._resolve(ref)
        except DocumentNotFoundError:
            return False
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise DocumentStoreError(f"Не удалось удалить документ: {exc}") from exc
        return True
