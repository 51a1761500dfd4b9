# letteros/subscribers/__init__.py
from .csv_import import dedupe_candidates, parse_csv_line, parse_subscriber_csv, SubscriberCsvError
from .csv_export import export_subscribers_csv
from .importer import commit_in_batches

__all__ = [
    'dedupe_candidates',
    'parse_csv_line',
    'parse_subscriber_csv',
    'SubscriberCsvError',
    'export_subscribers_csv',
    'commit_in_batches'
]
