# core/errors.py

class CatalogMismatchError(RuntimeError):
    """Raised at startup when the tool catalog and the handler set disagree."""

    def __init__(self, missing_handlers, missing_entries):
        self.missing_handlers = sorted(missing_handlers)
        self.missing_entries = sorted(missing_entries)
        parts = []
        if self.missing_handlers:
            parts.append(f"no handler for: {', '.join(self.missing_handlers)}")
        if self.missing_entries:
            parts.append(f"no catalog entry for: {', '.join(self.missing_entries)}")
        super().__init__("Tool catalog and handlers are out of sync (" + "; ".join(parts) + ")")


class DocumentNotFoundError(LookupError):
    """Raised when a patch targets a document that does not exist."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"No document '{key}' in collection '{collection}' to update")
