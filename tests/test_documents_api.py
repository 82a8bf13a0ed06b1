import hashlib
import logging

import pytest
from fastapi.testclient import TestClient

from main import app
from signflow.auth.services.auth_service import AuthService
from signflow.config import Config
from signflow.documents.dependencies import get_document_store, get_validation_limiter
from signflow.rate_limit import InMemoryRateLimiter, RateLimit


@pytest.fixture
def limiter():
    return InMemoryRateLimiter(
        limit=RateLimit(Config.VALIDATION_RATE_LIMIT, Config.VALIDATION_RATE_WINDOW_SECONDS)
    )


@pytest.fixture
def client(store, limiter):
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_validation_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def non_pdf():
    return b'This is not a PDF docx'


def get_token(user_id="user-1"):
    return AuthService.create_access_token({"sub": user_id})


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def upload(client, pdf_bytes, filename="documento_valido.pdf", user_id="user-1", **form):
    files = {"file": (filename, pdf_bytes, "application/pdf")}
    resp = client.post(
        "/documents/upload",
        files=files,
        data=form,
        headers=auth_headers(get_token(user_id))
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["document_id"]


def sign(client, docid, user_id="user-1", **body):
    return client.post(
        f"/documents/{docid}/sign",
        json=body,
        headers=auth_headers(get_token(user_id))
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_upload_non_pdf_rejected(client, non_pdf):
    files = {"file": ("documento.docx", non_pdf, "application/vnd.openxmlformats-officedocument.wordprocessingml.document")}
    resp = client.post(
        "/documents/upload",
        files=files,
        headers=auth_headers(get_token())
    )
    assert resp.status_code == 400
    assert "pdf" in resp.text.lower()


def test_upload_pdf_accepted(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    resp = client.get(f"/documents/{docid}", headers=auth_headers(get_token()))
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "pending"
    assert data["hash"] is None
    assert data["original_name"] == "documento_valido.pdf"


def test_upload_empty_pdf_rejected(client):
    files = {"file": ("vacio.pdf", b"", "application/pdf")}
    resp = client.post(
        "/documents/upload",
        files=files,
        headers=auth_headers(get_token())
    )
    assert resp.status_code == 400
    assert "vacío" in resp.text.lower()


def test_upload_requires_token(client, pdf_bytes):
    files = {"file": ("documento.pdf", pdf_bytes, "application/pdf")}
    assert client.post("/documents/upload", files=files).status_code in {401, 403}
    resp = client.post("/documents/upload", files=files, headers=auth_headers("not-a-token"))
    assert resp.status_code == 401


def test_sign_document(client, pdf_bytes):
    docid = upload(client, pdf_bytes)

    resp = sign(client, docid, signerName="Ana García")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert len(data["sha256_hash"]) == 64
    assert data["validate_url"].endswith(f"/validate/{docid}")
    document = client.get(f"/documents/{docid}", headers=auth_headers(get_token())).json()
    assert document["status"] == "signed"
    assert document["hash"] == data["sha256_hash"]


def test_sign_nonexistent_document(client):
    resp = sign(client, "999999999")
    assert resp.status_code == 404
    assert "not found" in resp.text.lower()


def test_sign_document_of_other_user(client, pdf_bytes):
    docid = upload(client, pdf_bytes, user_id="user-2")
    assert sign(client, docid, user_id="user-1").status_code == 404


def test_sign_twice_rejected(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    assert sign(client, docid).status_code == 200
    assert sign(client, docid).status_code == 400


def test_download_pdf_before_signing(client, pdf_bytes):
    docid = upload(client, pdf_bytes, filename="sin_firmar.pdf")
    resp = client.get(f"/documents/{docid}/download", headers=auth_headers(get_token()))
    assert resp.status_code == 400


def test_download_signed_pdf_and_verify_hash(client, pdf_bytes):
    docid = upload(client, pdf_bytes, filename="descarga.pdf")
    assert sign(client, docid).status_code == 200

    download = client.get(f"/documents/{docid}/download", headers=auth_headers(get_token()))

    assert download.status_code == 200
    assert download.headers["content-type"].startswith("application/pdf")
    assert hashlib.sha256(download.content).hexdigest() == download.headers["X-Document-Hash"]


def test_download_tampered_artifact(client, pdf_bytes, file_store):
    docid = upload(client, pdf_bytes)
    assert sign(client, docid).status_code == 200
    key = f"{docid}/signed.pdf"
    file_store.put(key, file_store.get(key) + b"MODIFICACION")

    resp = client.get(f"/documents/{docid}/download", headers=auth_headers(get_token()))
    assert resp.status_code == 400


def test_public_files_of_signed_document(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    signed = sign(client, docid).json()

    pdf = client.get(signed["signed_pdf_url"])
    assert pdf.status_code == 200
    assert hashlib.sha256(pdf.content).hexdigest() == signed["sha256_hash"]
    qr = client.get(f"/documents/files/{docid}/qr.png")
    assert qr.headers["content-type"] == "image/png"
    assert client.get(f"/documents/files/{docid}/original.pdf").status_code == 404


def test_public_files_hidden_before_signing(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    assert client.get(f"/documents/files/{docid}/signed.pdf").status_code == 404


def test_validate_page(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    sign(client, docid, signerName="Ana García")

    resp = client.get(f"/validate/{docid}")

    assert resp.status_code == 200
    data = resp.json()
    assert data["requires_code"] is False
    assert data["document"]["status"] == "signed"
    assert [e["signer_name"] for e in data["events"]] == ["Ana García"]


def test_validate_unknown_document(client):
    assert client.get("/validate/no-existe").status_code == 404


def test_verify_uploaded_file(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    sign(client, docid)
    signed_bytes = client.get(f"/documents/files/{docid}/signed.pdf").content

    valid = client.post(f"/validate/{docid}/verify", files={"file": ("f.pdf", signed_bytes, "application/pdf")})
    tampered = client.post(
        f"/validate/{docid}/verify", files={"file": ("f.pdf", signed_bytes + b"\n", "application/pdf")}
    )
    not_pdf = client.post(f"/validate/{docid}/verify", files={"file": ("f.pdf", b"no pdf", "text/plain")})

    assert valid.json() == {"document_id": docid, "status": "valid"}
    assert tampered.json()["status"] == "tampered"
    assert not_pdf.json()["status"] == "tampered"


def test_validation_attempts_are_rate_limited(client, pdf_bytes):
    docid = upload(client, pdf_bytes, validation_code="AB12CD")

    for _ in range(Config.VALIDATION_RATE_LIMIT):
        assert client.post(f"/validate/{docid}", json={"code": "ZZZZZZ"}).status_code == 403

    blocked = client.post(f"/validate/{docid}", json={"code": "AB12CD"})
    assert blocked.status_code == 429
    assert blocked.headers["Retry-After"] == str(Config.VALIDATION_RATE_WINDOW_SECONDS)
    assert client.get(f"/validate/{docid}").status_code == 429


def test_rejected_validations_are_logged(client, pdf_bytes, caplog):
    docid = upload(client, pdf_bytes, validation_code="AB12CD")

    with caplog.at_level(logging.WARNING):
        client.get("/validate/no-existe")
        client.post(f"/validate/{docid}", json={"code": "ZZZZZZ"})

    assert "unknown document no-existe" in caplog.text
    assert f"Validation of {docid} rejected" in caplog.text


def test_protected_document_access_code(client, pdf_bytes):
    docid = upload(client, pdf_bytes, validation_code="AB12CD")
    sign(client, docid)

    locked = client.get(f"/validate/{docid}").json()
    assert locked == {"requires_code": True, "document": None, "events": []}
    assert client.post(f"/validate/{docid}", json={"code": "ZZZZZZ"}).status_code == 403
    unlocked = client.post(f"/validate/{docid}", json={"code": " ab12cd "})
    assert unlocked.status_code == 200
    assert unlocked.json()["document"]["id"] == docid


def test_batch_sign(client, pdf_bytes):
    ids = [upload(client, pdf_bytes), upload(client, pdf_bytes)]

    resp = client.post(
        "/batch-sign",
        json={"documentIds": [ids[0], "no-existe", ids[1]], "signerName": "Ana"},
        headers=auth_headers(get_token())
    )

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert (data["total"], data["successful"], data["failed"]) == (3, 2, 1)
    assert [r["documentId"] for r in data["results"]["successful"]] == ids
    assert data["results"]["failed"][0]["documentId"] == "no-existe"


def test_batch_sign_empty_list(client):
    resp = client.post("/batch-sign", json={"documentIds": []}, headers=auth_headers(get_token()))
    assert resp.status_code == 400


def test_generate_qr(client):
    resp = client.post(
        "/documents/generate-qr",
        json={"documentId": "doc-1", "validationUrl": "https://signflow.app/validate/doc-1", "hash": "a" * 64},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["qrCode"].startswith("data:image/png;base64,")
    assert data["data"]["documentId"] == "doc-1"
    assert data["data"]["protected"] is False


def test_generate_qr_missing_field(client):
    resp = client.post("/documents/generate-qr", json={"validationUrl": "https://signflow.app/validate/x"})
    assert resp.status_code == 400
    assert "documentId" in resp.text


def test_generate_qr_oversized_payload(client):
    resp = client.post(
        "/documents/generate-qr",
        json={"documentId": "doc-1", "validationUrl": "https://signflow.app/validate/doc-1", "hash": "x" * 2000},
    )
    assert resp.status_code == 422
    assert "limit" in resp.text


def test_delete_pending_document(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    assert client.delete(f"/documents/{docid}", headers=auth_headers(get_token())).status_code == 200
    assert client.get(f"/documents/{docid}", headers=auth_headers(get_token())).status_code == 404


def test_delete_signed_document_forbidden(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    sign(client, docid)
    assert client.delete(f"/documents/{docid}", headers=auth_headers(get_token())).status_code == 403


def test_update_expiry(client, pdf_bytes):
    docid = upload(client, pdf_bytes)
    resp = client.patch(
        f"/documents/{docid}/expiry",
        json={"expires_at": "2030-01-01T00:00:00"},
        headers=auth_headers(get_token())
    )
    assert resp.status_code == 200
    assert resp.json()["expires_at"] == "2030-01-01T00:00:00"


def test_cleanup_requires_secret(client, monkeypatch):
    monkeypatch.setattr(Config, "CRON_SECRET", "")
    assert client.get("/cleanup").status_code == 401
    monkeypatch.setattr(Config, "CRON_SECRET", "s3cret")
    assert client.get("/cleanup", headers={"Authorization": "Bearer otro"}).status_code == 401


def test_cleanup_purges_expired_documents(client, pdf_bytes, monkeypatch):
    monkeypatch.setattr(Config, "CRON_SECRET", "s3cret")
    expired = upload(client, pdf_bytes)
    live = upload(client, pdf_bytes, expires_in_days="30")
    sign(client, expired)
    client.patch(
        f"/documents/{expired}/expiry",
        json={"expires_at": "2000-01-01T00:00:00"},
        headers=auth_headers(get_token())
    )

    resp = client.get("/cleanup", headers={"Authorization": "Bearer s3cret"})

    assert resp.json() == {"ok": True, "removed": 1}
    assert client.get(f"/validate/{expired}").status_code == 404
    assert client.get(f"/validate/{live}").status_code == 200
