import datetime

import pytest

from app.core.exceptions import ImageNotFoundError, UnauthenticatedError
from app.schemas.generated_image import GeneratedImageCreate
from app.schemas.generation import GenerationSettings
from app.services.image_store import DatabaseImageStore, InMemoryImageStore, get_image_store


def make_image(prompt, minutes_ago=0, **kwargs):
    timestamp = datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc) - datetime.timedelta(minutes=minutes_ago)
    return GeneratedImageCreate(
        prompt=prompt,
        image_url="data:image/png;base64,AAAA",
        timestamp=timestamp,
        settings=GenerationSettings(outputType="Image Ads", aspectRatio="1:1"),
        **kwargs,
    )


@pytest.fixture(params=["database", "memory"])
def store(request, db_session):
    if request.param == "database":
        return DatabaseImageStore(db_session)
    return InMemoryImageStore(records={})


def test_calls_before_owner_is_set_are_unauthenticated(store):
    with pytest.raises(UnauthenticatedError):
        store.save(make_image("a cat"))
    with pytest.raises(UnauthenticatedError):
        store.list()
    with pytest.raises(UnauthenticatedError):
        store.delete("missing")


def test_list_returns_newest_first(store, user_id):
    store.set_owner(user_id)
    older = store.save(make_image("first", minutes_ago=5))
    newer = store.save(make_image("second", minutes_ago=1))

    images = store.list()

    assert [image.id for image in images] == [newer.id, older.id]
    assert images[0].prompt == "second"
    assert images[0].settings.aspect_ratio == "1:1"


def test_save_assigns_store_id_and_keeps_fields(store, user_id):
    store.set_owner(user_id)
    saved = store.save(make_image("a cat", session_id="session-1", text_content="a cat"))
    assert saved.id
    assert saved.session_id == "session-1"
    assert saved.text_content == "a cat"
    assert saved.image_url == "data:image/png;base64,AAAA"


def test_records_are_scoped_to_their_owner(store):
    store.set_owner("alice")
    alice_image = store.save(make_image("alice's image"))

    store.set_owner("bob")
    assert store.list() == []
    with pytest.raises(ImageNotFoundError):
        store.delete(alice_image.id)

    store.set_owner("alice")
    assert [image.id for image in store.list()] == [alice_image.id]


def test_delete_removes_record(store, user_id):
    store.set_owner(user_id)
    image = store.save(make_image("a cat"))
    store.delete(image.id)
    assert store.list() == []
    with pytest.raises(ImageNotFoundError):
        store.delete(image.id)


def test_settings_are_stored_with_camel_case_keys(db_session, user_id):
    from app.models.generated_image import GeneratedImage as GeneratedImageRow

    store = DatabaseImageStore(db_session, owner_id=user_id)
    image = store.save(make_image("a cat"))
    row = db_session.get(GeneratedImageRow, image.id)
    assert row.settings == {"temperature": 1.0, "outputType": "Image Ads", "aspectRatio": "1:1"}
    assert row.user_id == user_id


def test_get_image_store_selects_backend(db_session):
    assert isinstance(get_image_store(db=db_session, owner_id="u", backend="database"), DatabaseImageStore)
    assert isinstance(get_image_store(owner_id="u", backend="memory"), InMemoryImageStore)
    with pytest.raises(ValueError):
        get_image_store(backend="firestore")


def test_list_orders_by_instant_across_utc_offsets(store, user_id):
    store.set_owner(user_id)
    # 10:00+05:00 is 05:00Z, an hour before the second record
    store.save(GeneratedImageCreate(prompt="older", image_url="x", timestamp="2026-10-19T10:00:00+05:00"))
    store.save(GeneratedImageCreate(prompt="newer", image_url="x", timestamp="2026-10-19T06:00:00Z"))

    images = store.list()

    assert [image.prompt for image in images] == ["newer", "older"]
    assert images[1].timestamp == datetime.datetime(2026, 10, 19, 5, 0, tzinfo=datetime.timezone.utc)
    assert all(image.timestamp.utcoffset() == datetime.timedelta(0) for image in images)


def test_timestamps_without_offset_are_treated_as_utc(store, user_id):
    store.set_owner(user_id)
    store.save(GeneratedImageCreate(prompt="with offset", image_url="x", timestamp="2026-10-19T06:00:00Z"))
    store.save(GeneratedImageCreate(prompt="without offset", image_url="x", timestamp="2026-10-19T07:00:00"))
    store.save(GeneratedImageCreate(prompt="default", image_url="x"))

    images = store.list()

    prompts = [image.prompt for image in images if image.prompt != "default"]
    assert len(images) == 3
    assert prompts == ["without offset", "with offset"]
    by_prompt = {image.prompt: image for image in images}
    assert by_prompt["without offset"].timestamp == datetime.datetime(2026, 10, 19, 7, 0, tzinfo=datetime.timezone.utc)
