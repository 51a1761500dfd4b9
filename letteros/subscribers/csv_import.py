# letteros/subscribers/csv_import.py
"""CSV subscriber import parsing.

The header row decides the columns: the first header mentioning an email
becomes the address column, the first other header mentioning a name becomes
the name column, and every remaining header turns into tags.
"""
import re
import logging
from typing import Iterable, List, NamedTuple, Optional, Set

from letteros.config import settings
from letteros.models.subscriber import ImportPreview, SubscriberCandidate

logger = logging.getLogger(__name__)

EMAIL_HEADER_TOKENS = ("email", "mail", "メール")
NAME_HEADER_TOKENS = ("name", "名前")
TAG_LIST_HEADERS = ("tags", "tag", "タグ")
TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0", "")

_TAG_LIST_SPLIT = re.compile(r"[;|]")

class SubscriberCsvError(ValueError):
    """The file cannot be imported at all; the message is shown to the user"""

def parse_csv_line(line: str) -> List[str]:
    """Split one line on commas outside double quotes.

    Quotes toggle the in-quotes state and are dropped; a doubled quote inside
    a quoted field is a literal quote. Fields are trimmed.
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current).strip())
    return fields

def _find_column(headers: List[str], tokens: Iterable[str], skip: Optional[int] = None) -> Optional[int]:
    for index, header in enumerate(headers):
        if index == skip:
            continue
        lowered = header.lower()
        if any(token in lowered for token in tokens):
            return index
    return None

def column_tags(column: str, value: str) -> List[str]:
    """Tags contributed by one cell of a tag column"""
    # A column named like a tag list carries the tags themselves, so its
    # cells are split rather than run through the true/false/value rule
    if column.lower() in TAG_LIST_HEADERS:
        return [tag.strip() for tag in _TAG_LIST_SPLIT.split(value) if tag.strip()]

    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return [column]
    if lowered in FALSE_VALUES:
        return []
    return [f"{column}:{value}"]

class DedupeResult(NamedTuple):
    kept: List[SubscriberCandidate]
    skipped_invalid: int
    duplicates_in_file: int
    duplicates_existing: int

def dedupe_candidates(
    candidates: Iterable[SubscriberCandidate],
    existing_emails: Iterable[str] = ()
) -> DedupeResult:
    """Lowercase emails, drop rows without an '@', then drop repeats.

    A repeat of an earlier candidate counts as an in-file duplicate even when
    the address is also already subscribed; only the first occurrence is
    checked against existing_emails.
    """
    existing: Set[str] = {email.lower() for email in existing_emails}
    seen: Set[str] = set()
    kept: List[SubscriberCandidate] = []
    skipped_invalid = 0
    duplicates_in_file = 0
    duplicates_existing = 0

    for candidate in candidates:
        email = candidate.email.strip().lower()
        if "@" not in email:
            skipped_invalid += 1
            continue
        if email in seen:
            duplicates_in_file += 1
            continue
        seen.add(email)
        if email in existing:
            duplicates_existing += 1
            continue
        if email != candidate.email:
            candidate = candidate.model_copy(update={"email": email})
        kept.append(candidate)

    return DedupeResult(kept, skipped_invalid, duplicates_in_file, duplicates_existing)

def parse_subscriber_csv(
    text: str,
    existing_emails: Iterable[str] = (),
    preview_rows: Optional[int] = None
) -> ImportPreview:
    """Turn CSV text into deduplicated import candidates without writing anything"""
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise SubscriberCsvError("The CSV file is empty")

    headers = parse_csv_line(lines[0])
    email_index = _find_column(headers, EMAIL_HEADER_TOKENS)
    if email_index is None:
        raise SubscriberCsvError("No email column found (the header must contain 'email' or 'mail')")
    name_index = _find_column(headers, NAME_HEADER_TOKENS, skip=email_index)
    tag_columns = [
        (index, header) for index, header in enumerate(headers)
        if index not in (email_index, name_index) and header
    ]

    rows: List[SubscriberCandidate] = []
    for line in lines[1:]:
        values = parse_csv_line(line)
        email = values[email_index] if email_index < len(values) else ""
        if "@" not in email:
            continue

        name = None
        if name_index is not None and name_index < len(values) and values[name_index]:
            name = values[name_index]

        tags: List[str] = []
        for index, column in tag_columns:
            value = values[index] if index < len(values) else ""
            for tag in column_tags(column, value):
                if tag not in tags:
                    tags.append(tag)

        rows.append(SubscriberCandidate(email=email, name=name, tags=tags))

    candidates, _, duplicates_in_file, duplicates_existing = dedupe_candidates(rows, existing_emails)

    limit = settings.import_preview_rows if preview_rows is None else preview_rows
    logger.info(
        f"Parsed subscriber CSV: candidates={len(candidates)} "
        f"dup_in_file={duplicates_in_file} dup_existing={duplicates_existing}"
    )
    return ImportPreview(
        total=len(candidates),
        preview=candidates[:limit],
        candidates=candidates,
        duplicates=duplicates_in_file + duplicates_existing,
        duplicates_in_file=duplicates_in_file,
        duplicates_existing=duplicates_existing
    )
