# errors.py – Taxonomie des erreurs remontées par le store et l'API

from typing import Any, Dict, List, Optional


class DraftroomError(Exception):
    """Base exception for every failure surfaced to API callers."""

    code = "ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DraftroomError):
    """Raised when input is malformed or out of range, before any write."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, {"fields": fields or []})
        self.fields = fields or []


class NotFoundError(DraftroomError):
    """Raised when an update/delete addresses an id that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found: {key}", {"entity": entity, "id": key})
        self.entity = entity
        self.key = key


class StoreError(DraftroomError):
    """Raised when the backing store call fails (connectivity, constraint...)."""

    code = "STORE_ERROR"
