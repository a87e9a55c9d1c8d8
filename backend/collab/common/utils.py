import datetime


def utcnow() -> datetime.datetime:
    """
    Naive UTC timestamp, matching how DateTime columns are stored
    """
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime.datetime) -> datetime.datetime:
    """
    Normalise aware datetimes (e.g. ISO strings with an offset) to naive UTC
    so they compare against utcnow()
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    return email.strip().lower()
