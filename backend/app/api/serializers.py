from beanie import Document


def serialize(document: Document) -> dict:
    """JSON-ready dict for a Beanie document (ObjectId and datetimes as strings)."""
    return document.model_dump(mode="json", exclude={"revision_id"})
