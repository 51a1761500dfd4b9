import pytest

from letteros.subscribers.csv_import import (
    SubscriberCsvError, column_tags, dedupe_candidates, parse_csv_line, parse_subscriber_csv
)
from letteros.subscribers.csv_export import export_subscribers_csv
from letteros.models.subscriber import Subscriber, SubscriberCandidate


def test_parse_csv_line_keeps_commas_inside_quotes():
    assert parse_csv_line('a@example.com,"Doe, Jane", vip ') == ["a@example.com", "Doe, Jane", "vip"]


def test_parse_csv_line_doubled_quote_is_literal():
    assert parse_csv_line('"say ""hi""",x') == ['say "hi"', "x"]


def test_detects_email_and_name_columns_and_lowercases():
    preview = parse_subscriber_csv("Name,E-mail Address\nJane,JANE@Example.com\n")

    assert preview.total == 1
    candidate = preview.candidates[0]
    assert candidate.email == "jane@example.com"
    assert candidate.name == "Jane"
    assert candidate.tags == []


def test_rows_without_at_sign_are_skipped():
    preview = parse_subscriber_csv("email\nnot-an-address\n\nok@example.com\n")

    assert [c.email for c in preview.candidates] == ["ok@example.com"]


def test_duplicates_in_file_and_existing_are_counted_separately():
    text = "email\na@example.com\nA@example.com\nb@example.com\nc@example.com\n"
    preview = parse_subscriber_csv(text, existing_emails=["B@EXAMPLE.COM"])

    assert [c.email for c in preview.candidates] == ["a@example.com", "c@example.com"]
    assert preview.duplicates_in_file == 1
    assert preview.duplicates_existing == 1
    assert preview.duplicates == 2


def test_no_candidate_repeats_an_email():
    text = "email\n" + "\n".join(f"user{i % 7}@example.com" for i in range(50))
    preview = parse_subscriber_csv(text)

    emails = [c.email for c in preview.candidates]
    assert len(emails) == len(set(emails)) == 7


def test_other_columns_become_tags():
    text = (
        "email,name,vip,plan,tags\n"
        "a@example.com,Ann,true,pro,early;beta\n"
        "b@example.com,Bob,0,,\n"
    )
    preview = parse_subscriber_csv(text)

    assert preview.candidates[0].tags == ["vip", "plan:pro", "early", "beta"]
    assert preview.candidates[1].tags == []


def test_column_tags_boolean_values():
    assert column_tags("vip", "1") == ["vip"]
    assert column_tags("vip", "FALSE") == []
    assert column_tags("Tags", "a | b") == ["a", "b"]


def test_preview_is_limited_but_candidates_are_complete():
    text = "email\n" + "\n".join(f"user{i}@example.com" for i in range(25))
    preview = parse_subscriber_csv(text, preview_rows=10)

    assert len(preview.preview) == 10
    assert preview.total == 25
    assert len(preview.candidates) == 25


def test_byte_order_mark_is_ignored():
    preview = parse_subscriber_csv("\ufeffemail\nx@example.com\n")
    assert preview.total == 1


def test_missing_email_column_is_rejected():
    with pytest.raises(SubscriberCsvError):
        parse_subscriber_csv("name,company\nJane,Acme\n")


def test_empty_file_is_rejected():
    with pytest.raises(SubscriberCsvError):
        parse_subscriber_csv("   \n\n")


def test_header_only_file_gives_empty_preview():
    preview = parse_subscriber_csv("email,name\n")
    assert preview.total == 0
    assert preview.preview == []


def test_export_quotes_every_field():
    subscribers = [
        Subscriber(id="1", user_id="u", email="a@example.com", name='Jo "JJ" Smith', tags=["vip", "beta"]),
        Subscriber(id="2", user_id="u", email="b@example.com"),
    ]

    assert export_subscribers_csv(subscribers) == (
        "email,name,tags\n"
        '"a@example.com","Jo ""JJ"" Smith","vip;beta"\n'
        '"b@example.com","",""\n'
    )


def test_reimporting_the_same_file_yields_nothing_new():
    text = "email,name\na@example.com,Ann\nb@example.com,Bob\nA@EXAMPLE.com,Ann again\nc@example.com,Cy\nno-address,Nobody\n"
    first = parse_subscriber_csv(text)
    assert [c.email for c in first.candidates] == ["a@example.com", "b@example.com", "c@example.com"]

    second = parse_subscriber_csv(text, existing_emails=[c.email for c in first.candidates])

    assert second.total == 0
    assert second.candidates == []
    assert second.duplicates == 4
    assert second.duplicates_in_file == 1
    assert second.duplicates_existing == 3


def test_plan_column_values_follow_the_tag_rule():
    text = (
        "email,name,plan\n"
        "x@example.com,X,true\n"
        "y@example.com,Y,pro\n"
        "z@example.com,Z,false\n"
    )
    preview = parse_subscriber_csv(text)

    assert [c.tags for c in preview.candidates] == [["plan"], ["plan:pro"], []]


def test_tag_list_column_splits_instead_of_presence_rule():
    assert column_tags("tags", "true") == ["true"]
    assert column_tags("tags", "false") == ["false"]
    assert column_tags("tags", "") == []
    assert column_tags("segment", "true") == ["segment"]


def test_dedupe_candidates_reports_what_it_dropped():
    candidates = [
        SubscriberCandidate(email="New@Example.com", name="New"),
        SubscriberCandidate(email="not-an-address"),
        SubscriberCandidate(email="new@example.com"),
        SubscriberCandidate(email="taken@example.com"),
    ]

    result = dedupe_candidates(candidates, existing_emails=["TAKEN@example.com"])

    assert [c.email for c in result.kept] == ["new@example.com"]
    assert result.kept[0].name == "New"
    assert result.skipped_invalid == 1
    assert result.duplicates_in_file == 1
    assert result.duplicates_existing == 1
