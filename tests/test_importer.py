import asyncio

import pytest

from letteros.models.subscriber import ImportStatus, SubscriberCandidate
from letteros.subscribers.importer import commit_in_batches, split_batches


def make_candidates(count):
    return [SubscriberCandidate(email=f"user{i}@example.com") for i in range(count)]


class RecordingWriter:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.batches = []

    async def __call__(self, batch):
        if self.fail_on is not None and len(self.batches) + 1 == self.fail_on:
            raise RuntimeError("connection reset")
        self.batches.append(batch)


def test_split_batches_sizes():
    batches = split_batches(make_candidates(1200), 500)
    assert [len(b) for b in batches] == [500, 500, 200]


def test_split_batches_rejects_zero():
    with pytest.raises(ValueError):
        split_batches(make_candidates(3), 0)


def test_all_batches_commit_in_order():
    writer = RecordingWriter()
    result = asyncio.run(commit_in_batches(make_candidates(1200), writer, batch_size=500))

    assert result.status == ImportStatus.COMPLETED
    assert result.imported == 1200
    assert result.batches_committed == 3
    assert [p.imported for p in result.progress] == [500, 1000, 1200]
    assert writer.batches[0][0].email == "user0@example.com"
    assert writer.batches[2][-1].email == "user1199@example.com"


def test_failing_second_batch_keeps_first_and_reports_error():
    writer = RecordingWriter(fail_on=2)
    result = asyncio.run(commit_in_batches(make_candidates(1200), writer, batch_size=500))

    assert result.status == ImportStatus.ERROR
    assert result.imported == 500
    assert result.total == 1200
    assert result.batches_committed == 1
    assert "connection reset" in result.error
    assert len(writer.batches) == 1


def test_empty_import_completes():
    result = asyncio.run(commit_in_batches([], RecordingWriter(), batch_size=500))
    assert result.status == ImportStatus.COMPLETED
    assert result.imported == 0
