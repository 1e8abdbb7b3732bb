from reworkit.api.schemas.request_schemas import LogSubmission, REQUIRED_FIELDS

__all__ = [
    "LogSubmission",
    "REQUIRED_FIELDS",
]
