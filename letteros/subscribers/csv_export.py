# letteros/subscribers/csv_export.py
from typing import Iterable, Optional
from letteros.models.subscriber import Subscriber

EXPORT_HEADER = "email,name,tags"
TAG_SEPARATOR = ";"

def quote_field(value: Optional[str]) -> str:
    text = value or ""
    return '"' + text.replace('"', '""') + '"'

def export_subscribers_csv(subscribers: Iterable[Subscriber]) -> str:
    """CSV with a fixed header; every field is quoted"""
    rows = [EXPORT_HEADER]
    for subscriber in subscribers:
        rows.append(",".join([
            quote_field(subscriber.email),
            quote_field(subscriber.name),
            quote_field(TAG_SEPARATOR.join(subscriber.tags)),
        ]))
    return "\n".join(rows) + "\n"
