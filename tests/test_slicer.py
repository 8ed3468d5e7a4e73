"""
Tests for the batch slicing functions.
"""

from diffbot.batching.slicer import slice_concurrent, slice_single


class Item:
    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name


def make_items(count: int) -> list[Item]:
    return [Item(f"item{index}") for index in range(1, count + 1)]


def test_slice_single_takes_initiator_and_front_items():
    items = make_items(7)

    batches = slice_single(items=items, initiator=items[0], max_batch_request=5)

    assert batches == [items[:5]]


def test_slice_single_puts_initiator_first_when_not_at_front():
    items = make_items(7)

    batches = slice_single(items=items, initiator=items[6], max_batch_request=3)

    assert batches == [[items[6], items[0], items[1]]]


def test_slice_single_drains_remaining_items():
    items = make_items(2)

    batches = slice_single(items=items, initiator=items[0], max_batch_request=5)

    assert batches == [items]


def test_slice_single_with_batch_of_one():
    items = make_items(3)

    assert slice_single(items=items, initiator=items[1], max_batch_request=1) == [[items[1]]]


def test_slice_returns_nothing_when_initiator_is_gone():
    items = make_items(3)
    gone = Item("gone")

    assert slice_single(items=items, initiator=gone, max_batch_request=5) == []
    assert (
        slice_concurrent(
            items=items, initiator=gone, max_batch_request=5, concurrent_batch_request=2
        )
        == []
    )


def test_slice_concurrent_places_initiator_last_in_first_batch():
    items = make_items(15)
    initiator = items[0]

    batches = slice_concurrent(
        items=items, initiator=initiator, max_batch_request=5, concurrent_batch_request=2
    )

    assert len(batches) == 2
    assert batches[0] == [*items[1:5], initiator]
    assert batches[1] == items[5:10]


def test_slice_concurrent_stops_when_queue_is_empty():
    items = make_items(7)

    batches = slice_concurrent(
        items=items, initiator=items[3], max_batch_request=5, concurrent_batch_request=4
    )

    assert batches == [
        [items[0], items[1], items[2], items[4], items[3]],
        [items[5], items[6]],
    ]


def test_slice_concurrent_never_duplicates_items():
    items = make_items(23)

    batches = slice_concurrent(
        items=items, initiator=items[10], max_batch_request=4, concurrent_batch_request=3
    )

    claimed = [item for batch in batches for item in batch]
    assert len(claimed) == len({id(item) for item in claimed}) == 12
    assert all(len(batch) <= 4 for batch in batches)
    assert items[10] in batches[0]
