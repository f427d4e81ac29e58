import pytest

from smartmerge.core.errors import ValidationError
from smartmerge.services.collection import IncomingFile, OrderedFileCollection


def _incoming(name: str, content_type: str = "application/pdf") -> IncomingFile:
    return IncomingFile(filename=name, content_type=content_type, content=name.encode())


def _names(collection: OrderedFileCollection) -> list[str]:
    return [entry.filename for entry in collection]


@pytest.fixture
def collection() -> OrderedFileCollection:
    items = OrderedFileCollection()
    items.add([_incoming("a.pdf"), _incoming("b.pdf"), _incoming("c.pdf"), _incoming("d.pdf")])
    return items


def test_add_keeps_order_and_skips_non_pdf():
    collection = OrderedFileCollection()
    added = collection.add(
        [_incoming("a.pdf"), _incoming("notes.txt", "text/plain"), _incoming("b.pdf")]
    )

    assert [entry.filename for entry in added] == ["a.pdf", "b.pdf"]
    assert _names(collection) == ["a.pdf", "b.pdf"]
    assert collection.first().content == b"a.pdf"


def test_add_appends_after_existing_entries(collection):
    collection.add([_incoming("e.pdf")])
    assert _names(collection) == ["a.pdf", "b.pdf", "c.pdf", "d.pdf", "e.pdf"]


def test_add_accepts_media_type_parameters_and_case():
    collection = OrderedFileCollection()
    collection.add([_incoming("a.pdf", "Application/PDF; charset=binary")])
    assert len(collection) == 1


@pytest.mark.parametrize(
    "files",
    [
        [],
        [_incoming("notes.txt", "text/plain"), _incoming("photo.png", "image/png")],
        [_incoming("missing-type.pdf", None)],
    ],
)
def test_add_without_valid_pdf_raises_and_changes_nothing(collection, files):
    before = collection.files
    with pytest.raises(ValidationError):
        collection.add(files)
    assert collection.files == before


def test_ids_are_unique_and_never_reused(collection):
    ids = [entry.file_id for entry in collection]
    assert len(set(ids)) == len(ids)

    removed_id = ids[0]
    collection.remove(removed_id)
    added = collection.add([_incoming("e.pdf")])
    assert added[0].file_id not in ids


def test_remove_existing_and_missing(collection):
    target = collection.files[1]
    assert collection.remove(target.file_id) is True
    assert _names(collection) == ["a.pdf", "c.pdf", "d.pdf"]

    assert collection.remove("does-not-exist") is False
    assert _names(collection) == ["a.pdf", "c.pdf", "d.pdf"]


def test_move_up_from_first_position_is_noop(collection):
    assert collection.move_adjacent(0, "up") is False
    assert _names(collection) == ["a.pdf", "b.pdf", "c.pdf", "d.pdf"]


def test_move_down_from_last_position_is_noop(collection):
    assert collection.move_adjacent(3, "down") is False
    assert _names(collection) == ["a.pdf", "b.pdf", "c.pdf", "d.pdf"]


def test_move_swaps_only_adjacent_entries(collection):
    assert collection.move_adjacent(1, "down") is True
    assert _names(collection) == ["a.pdf", "c.pdf", "b.pdf", "d.pdf"]

    assert collection.move_adjacent(3, "up") is True
    assert _names(collection) == ["a.pdf", "c.pdf", "d.pdf", "b.pdf"]


def test_move_with_index_outside_list_is_noop(collection):
    assert collection.move_adjacent(7, "up") is False
    assert collection.move_adjacent(-1, "down") is False
    assert _names(collection) == ["a.pdf", "b.pdf", "c.pdf", "d.pdf"]


def test_move_with_unknown_direction_raises(collection):
    with pytest.raises(ValidationError):
        collection.move_adjacent(1, "sideways")


def test_clear_and_lookup(collection):
    first = collection.first()
    assert collection.get(first.file_id) == first
    assert collection.contents()[0] == b"a.pdf"

    collection.clear()
    assert len(collection) == 0
    assert collection.first() is None
    assert collection.get(first.file_id) is None
