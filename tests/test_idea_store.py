import pytest

from vibes_served.services.idea_store import (
    DuplicateIdError,
    IdeaStore,
    InvalidArgument,
    ValidationError,
)


def _idea(i, **overrides):
    data = {"id": f"i{i}", "title": f"T{i}", "summary": f"S{i}", "objective": f"O{i}", "tags": [str(i)]}
    data.update(overrides)
    return data


def test_in_memory_crud():
    store = IdeaStore()
    idea = {"id": "idea-1", "title": "Title", "summary": "Summary", "objective": "Objective", "tags": ["a", "b"]}

    created = store.create(idea)
    assert created.model_dump() == idea
    assert store.get_by_id("idea-1").model_dump() == idea
    assert [i.model_dump() for i in store.list()] == [idea]

    assert store.delete_by_id("idea-1") is True
    assert store.get_by_id("idea-1") is None
    assert store.delete_by_id("idea-1") is False
    store.close()


def test_tags_default_to_empty():
    with IdeaStore() as store:
        store.create({"id": "x", "title": "t", "summary": "s", "objective": "o"})
        assert store.get_by_id("x").tags == []


def test_duplicate_id_leaves_original():
    with IdeaStore() as store:
        store.create(_idea(1))
        with pytest.raises(DuplicateIdError) as exc:
            store.create(_idea(1, title="Changed"))
        assert exc.value.idea_id == "i1"
        assert store.get_by_id("i1").title == "T1"
        assert len(store.list()) == 1


@pytest.mark.parametrize(
    "bad",
    [
        "not an object",
        {"title": "t", "summary": "s", "objective": "o", "tags": []},
        {"id": "", "title": "t", "summary": "s", "objective": "o", "tags": []},
        {"id": "a", "title": 5, "summary": "s", "objective": "o", "tags": []},
        {"id": "a", "title": "t", "summary": "", "objective": "o", "tags": []},
        {"id": "a", "title": "t", "summary": "s", "tags": []},
        {"id": "a", "title": "t", "summary": "s", "objective": "o", "tags": "x"},
        {"id": "a", "title": "t", "summary": "s", "objective": "o", "tags": ["ok", 1]},
    ],
)
def test_create_rejects_invalid(bad):
    with IdeaStore() as store:
        with pytest.raises(ValidationError):
            store.create(bad)
        assert store.list() == []


@pytest.mark.parametrize("bad_id", ["", None, 7])
def test_invalid_id_arguments(bad_id):
    with IdeaStore() as store:
        with pytest.raises(InvalidArgument):
            store.get_by_id(bad_id)
        with pytest.raises(InvalidArgument):
            store.delete_by_id(bad_id)


def test_persist_and_reload(tmp_path):
    path = tmp_path / "nested" / "ideas.sqlite"
    store = IdeaStore(storage_file_path=path)
    idea = _idea(1, tags=["x"])
    store.create(idea)
    # auto-persist already wrote the file
    assert path.exists()
    store.close()

    with IdeaStore(storage_file_path=path) as reopened:
        assert reopened.get_by_id("i1").model_dump() == idea


def test_close_does_not_persist_without_auto_persist(tmp_path):
    path = tmp_path / "ideas.sqlite"
    store = IdeaStore(storage_file_path=path, auto_persist=False)
    store.create(_idea(1))
    store.close()
    assert not path.exists()

    store = IdeaStore(storage_file_path=path, auto_persist=False)
    store.create(_idea(2))
    store.persist()
    store.close()
    with IdeaStore(storage_file_path=path) as reopened:
        assert [i.id for i in reopened.list()] == ["i2"]


def test_persist_without_path_is_noop(tmp_path):
    with IdeaStore() as store:
        store.create(_idea(1))
        store.persist()
    assert list(tmp_path.iterdir()) == []


def test_delete_is_persisted(tmp_path):
    path = tmp_path / "ideas.sqlite"
    with IdeaStore(storage_file_path=path) as store:
        store.create(_idea(1))
        store.create(_idea(2))
        assert store.delete_by_id("i1") is True
    with IdeaStore(storage_file_path=path) as reopened:
        assert [i.id for i in reopened.list()] == ["i2"]


@pytest.mark.parametrize("batch_size", [1, 2, 3, 7, 10])
def test_iterate_matches_list(batch_size):
    with IdeaStore() as store:
        for i in range(1, 8):
            store.create(_idea(i))
        everything = store.list()
        assert len(everything) == 7

        collected = []
        for batch in store.iterate(batch_size=batch_size):
            assert 0 < len(batch) <= batch_size
            collected.extend(batch)
        assert collected == everything

        # a second pass starts over
        assert sum(len(b) for b in store.iterate(batch_size=batch_size)) == 7


def test_iterate_default_batch_and_empty_store():
    with IdeaStore() as store:
        assert list(store.iterate()) == []
        store.create(_idea(1))
        assert [len(b) for b in store.iterate(batch_size=0)] == [1]
