import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from docscan.api.models import DocumentValidation
from docscan.config import settings
from docscan.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

_db_client = None


def _db():
    global _db_client
    if _db_client is None:
        try:
            app = firebase_admin.get_app()
        except ValueError:
            cred = (
                credentials.Certificate(settings.firebase_credentials_path)
                if settings.firebase_credentials_path
                else credentials.ApplicationDefault()
            )
            options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
            app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase app initialized")
        _db_client = firestore.client(app)
    return _db_client


def _student_ref(user_id: str):
    return _db().collection(settings.students_collection).document(user_id)


def stored_scan_version(entry: Dict[str, Any]) -> int:
    try:
        return int(entry.get("scanVersion") or 0)
    except (TypeError, ValueError):
        return 0


def load_student(user_id: str) -> Optional[Dict[str, Any]]:
    """Return the students/{userId} record, or None when it does not exist."""
    snapshot = _student_ref(user_id).get()
    if not snapshot.exists:
        logger.warning(f"Student record not found: {user_id}")
        return None
    return snapshot.to_dict() or {}


def merge_validation(
    documents: Dict[str, Any], document_id: str, record: DocumentValidation
) -> Dict[str, Any]:
    """Return a copy of the documents map with the validation record merged into one entry."""
    merged = dict(documents)
    merged[document_id] = {**(documents.get(document_id) or {}), **record.model_dump(by_alias=True)}
    return merged


@firestore.transactional
def _write_validation(transaction, ref, document_id: str, record: DocumentValidation) -> DocumentValidation:
    snapshot = ref.get(transaction=transaction)
    if not snapshot.exists:
        raise PersistenceError(f"Student record {ref.id} disappeared before the scan was saved")

    documents = (snapshot.to_dict() or {}).get("documents") or {}
    if document_id not in documents:
        raise PersistenceError(f"Document {document_id} disappeared before the scan was saved")

    # Another scan may have committed since the version was read
    expected_version = stored_scan_version(documents[document_id]) + 1
    if record.scan_version != expected_version:
        logger.warning(
            f"scanVersion for {ref.id}/{document_id} moved to {expected_version - 1} "
            f"during the scan; writing {expected_version}"
        )
        record = record.model_copy(update={"scan_version": expected_version})

    transaction.update(ref, {
        "documents": merge_validation(documents, document_id, record),
        "updatedAt": firestore.SERVER_TIMESTAMP,
    })
    return record


def save_validation(user_id: str, document_id: str, record: DocumentValidation) -> DocumentValidation:
    """
    Merge a validation record into students/{userId}.documents.{documentId}.

    Runs as a Firestore transaction so concurrent scans of the same document
    each get their own scanVersion.

    Returns:
        The record as written (scanVersion may differ from the input after a race)

    Raises:
        PersistenceError: If the student or document no longer exists
    """
    ref = _student_ref(user_id)
    written = _write_validation(_db().transaction(), ref, document_id, record)
    logger.info(f"Saved validation for {user_id}/{document_id} (scanVersion {written.scan_version})")
    return written
