import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .enums import MODE_VALUES, STATUS_VALUES
from .errors import FieldError, ValidationError

# wire name -> model attribute
REQUIRED_STR_FIELDS = {
    "position": "position",
    "company": "company",
    "location": "location",
}
URL_FIELDS = {
    "jobUrl": "job_url",
    "website": "website",
    "coverLetterUrl": "cover_letter_url",
}
DATE_FIELDS = {
    "appliedDate": "applied_date",
    "lastContact": "last_contact",
    "nextFollowUp": "next_follow_up",
}
OPTIONAL_FIELDS = [
    "salary_range",
    "job_url",
    "website",
    "resume_id",
    "cover_letter_url",
    "notes",
    "applied_date",
    "last_contact",
    "next_follow_up",
]

MIN_TEXT_LENGTH = 2
MAX_TEXT_LENGTH = 200
MAX_SALARY_LENGTH = 100
MAX_URL_LENGTH = 500
MAX_NOTES_LENGTH = 5000


def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except ValueError:
        return False


def _valid_uuid(v: str) -> bool:
    try:
        uuid.UUID(v)
        return True
    except ValueError:
        return False


def _parse_date(v: Any) -> Optional[datetime]:
    if isinstance(v, datetime):
        parsed = v
    elif isinstance(v, date):
        parsed = datetime(v.year, v.month, v.day)
    elif isinstance(v, str):
        try:
            parsed = datetime.fromisoformat(v.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _check_optional_text(data: Dict[str, Any], field: str, max_length: int, errors: List[FieldError]) -> None:
    v = data.get(field)
    if v is None:
        return
    if not isinstance(v, str):
        errors.append(FieldError(field, f"{field} must be a string"))
    elif len(v.strip()) > max_length:
        errors.append(FieldError(field, f"{field} must be at most {max_length} characters"))


def validate_job(data: Dict[str, Any]) -> List[FieldError]:
    """
    Returns a list of field errors for raw job input. Empty list means valid.
    """
    if not isinstance(data, dict):
        return [FieldError("body", "job input must be an object")]

    errors: List[FieldError] = []

    for f in REQUIRED_STR_FIELDS:
        v = data.get(f)
        if v is None:
            errors.append(FieldError(f, f"{f} is required"))
        elif not isinstance(v, str):
            errors.append(FieldError(f, f"{f} must be a string"))
        elif len(v.strip()) < MIN_TEXT_LENGTH:
            errors.append(FieldError(f, f"{f} must be at least {MIN_TEXT_LENGTH} characters"))
        elif len(v.strip()) > MAX_TEXT_LENGTH:
            errors.append(FieldError(f, f"{f} must be at most {MAX_TEXT_LENGTH} characters"))

    if data.get("status") not in STATUS_VALUES:
        errors.append(FieldError("status", f"status must be one of: {', '.join(STATUS_VALUES)}"))
    if data.get("mode") not in MODE_VALUES:
        errors.append(FieldError("mode", f"mode must be one of: {', '.join(MODE_VALUES)}"))

    _check_optional_text(data, "salaryRange", MAX_SALARY_LENGTH, errors)
    _check_optional_text(data, "notes", MAX_NOTES_LENGTH, errors)

    for f in URL_FIELDS:
        v = data.get(f)
        if v is None or v == "":
            continue
        if not isinstance(v, str):
            errors.append(FieldError(f, f"{f} must be a string"))
        elif len(v.strip()) > MAX_URL_LENGTH:
            errors.append(FieldError(f, f"{f} must be at most {MAX_URL_LENGTH} characters"))
        elif not _valid_url(v.strip()):
            errors.append(FieldError(f, f"{f} must be a valid URL"))

    v = data.get("resumeId")
    if v is not None and v != "":
        if not isinstance(v, str) or not _valid_uuid(v.strip()):
            errors.append(FieldError("resumeId", "resumeId must be a valid UUID"))

    for f in DATE_FIELDS:
        v = data.get(f)
        if _is_blank(v):
            continue
        if _parse_date(v) is None:
            errors.append(FieldError(f, f"{f} must be an ISO 8601 date"))

    return errors


def sanitize_job_input(validated: Dict[str, Any]) -> Dict[str, Any]:
    """Convert empty-string optional fields to None."""
    sanitized = dict(validated)
    for f in OPTIONAL_FIELDS:
        if sanitized.get(f) == "":
            sanitized[f] = None
    return sanitized


def parse_job_input(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate raw job input and return it keyed by model attribute.

    Every optional field comes back either as a non-empty value or None,
    on both the create and the update path.

    Raises:
        ValidationError: listing every offending field
    """
    errors = validate_job(data)
    if errors:
        raise ValidationError(errors)

    validated: Dict[str, Any] = {}
    for wire, attr in REQUIRED_STR_FIELDS.items():
        validated[attr] = data[wire].strip()
    validated["status"] = data["status"]
    validated["mode"] = data["mode"]

    def text(key: str) -> Optional[str]:
        v = data.get(key)
        return v.strip() if isinstance(v, str) else v

    validated["salary_range"] = text("salaryRange")
    validated["notes"] = text("notes")
    resume_id = text("resumeId")
    # stored ids are canonical lowercase
    validated["resume_id"] = str(uuid.UUID(resume_id)) if resume_id else resume_id
    for wire, attr in URL_FIELDS.items():
        validated[attr] = text(wire)
    for wire, attr in DATE_FIELDS.items():
        v = data.get(wire)
        validated[attr] = "" if _is_blank(v) else _parse_date(v)

    return sanitize_job_input(validated)


def validate_resume(data: Dict[str, Any]) -> List[FieldError]:
    if not isinstance(data, dict):
        return [FieldError("body", "resume input must be an object")]
    errors: List[FieldError] = []
    name = data.get("name")
    if not isinstance(name, str) or len(name.strip()) < MIN_TEXT_LENGTH:
        errors.append(FieldError("name", f"name must be at least {MIN_TEXT_LENGTH} characters"))
    elif len(name.strip()) > MAX_TEXT_LENGTH:
        errors.append(FieldError("name", f"name must be at most {MAX_TEXT_LENGTH} characters"))
    _check_optional_text(data, "version", 50, errors)
    _check_optional_text(data, "focusArea", 100, errors)
    url = data.get("fileUrl")
    if url not in (None, ""):
        if not isinstance(url, str) or not _valid_url(url.strip()) or len(url.strip()) > MAX_URL_LENGTH:
            errors.append(FieldError("fileUrl", "fileUrl must be a valid URL"))
    return errors


def parse_resume_input(data: Dict[str, Any]) -> Dict[str, Any]:
    errors = validate_resume(data)
    if errors:
        raise ValidationError(errors)

    def text(key: str) -> Optional[str]:
        v = data.get(key)
        if isinstance(v, str):
            v = v.strip()
        return v or None

    return {
        "name": data["name"].strip(),
        "version": text("version"),
        "focus_area": text("focusArea"),
        "file_url": text("fileUrl"),
    }
