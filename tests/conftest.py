"""Shared fixtures: a throwaway SQLite database, a temp-dir file store and real PDFs."""

import io
import threading
import time
from typing import Iterable, List

import pytest
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base
from signflow.documents.exceptions import StorageFailureError
from signflow.documents.models import Document, SigningEvent  # noqa: F401  (table registration)
from signflow.documents.repositories import (
    ORIGINAL_PDF, QR_IMAGE, SIGNED_PDF, DocumentRepository, DocumentStore, LocalFileStore
)
from signflow.documents.services.hash_engine import hash_engine


def create_dummy_pdf_bytes(text: str = "PDF para test (service)") -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.drawString(50, 750, text)
    c.save()
    buf.seek(0)
    return buf.read()


class FailingFileStore(LocalFileStore):
    """Local store that fails writes or deletes of selected keys."""

    def __init__(self, root: str, public_base_url: str = "http://testserver"):
        super().__init__(root, public_base_url)
        self.fail_puts = set()
        self.fail_deletes = set()

    def put(self, key: str, data: bytes) -> str:
        if key in self.fail_puts:
            raise StorageFailureError(f"Simulated write failure for {key}")
        return super().put(key, data)

    def delete(self, keys: Iterable[str]) -> List[str]:
        keys = list(keys)
        failed = [k for k in keys if k in self.fail_deletes]
        failed += super().delete(k for k in keys if k not in self.fail_deletes)
        return failed


class CountingDocumentStore(DocumentStore):
    """Records how many ``get`` calls run at the same time."""

    def __init__(self, repository, file_store, delay: float = 0.05):
        super().__init__(repository, file_store)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, document_id):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            return super().get(document_id)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_store(tmp_path):
    return FailingFileStore(str(tmp_path / "storage"))


@pytest.fixture
def store(session_factory, file_store):
    return DocumentStore(DocumentRepository(session_factory), file_store)


@pytest.fixture
def pdf_bytes():
    return create_dummy_pdf_bytes()


@pytest.fixture
def make_pending(store):
    """Factory creating a pending document with its original PDF stored."""

    def _make(owner_id: str = "user-1", text: str = "Documento pendiente", **kwargs) -> Document:
        document = store.create_pending(owner_id, original_name="doc.pdf", **kwargs)
        store.put_artifact(document.id, ORIGINAL_PDF, create_dummy_pdf_bytes(text))
        return document

    return _make


@pytest.fixture
def make_signed(store, make_pending):
    """Factory returning ``(document, signed_bytes)`` for a signed document."""

    def _make(owner_id: str = "user-1", text: str = "Documento firmado", **kwargs):
        document = make_pending(owner_id, text, **kwargs)
        signed_bytes = create_dummy_pdf_bytes(text + " (firmado)")
        signed_key = store.put_artifact(document.id, SIGNED_PDF, signed_bytes)
        qr_key = store.put_artifact(document.id, QR_IMAGE, b"\x89PNG fake")
        document = store.attach_signed_artifact(
            document.id, hash_engine.fingerprint(signed_bytes), signed_key, qr_key
        )
        return document, signed_bytes

    return _make


@pytest.fixture
def make_pdf():
    return create_dummy_pdf_bytes


@pytest.fixture
def counting_store(session_factory, file_store):
    return CountingDocumentStore(DocumentRepository(session_factory), file_store)
