import asyncio
import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from app.core.exceptions import UpstreamProviderError
from app.schemas.generated_image import GeneratedImage, GeneratedImageCreate
from app.services.gallery_service import GalleryState, GenerationSession
from app.services.image_generation_service import ImageResult
from app.services.image_store import InMemoryImageStore


def run(coro):
    return asyncio.run(coro)


def local_image(image_id, prompt="a cat", minutes_ago=0):
    timestamp = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=minutes_ago)
    return GeneratedImage(id=image_id, prompt=prompt, image_url="data:image/png;base64,AAAA", timestamp=timestamp)


@pytest.fixture
def store(user_id):
    return InMemoryImageStore(owner_id=user_id, records={})


@pytest.fixture
def generator():
    generator = Mock()
    generator.generate_image = AsyncMock(side_effect=lambda composed: ImageResult(
        image_url="data:image/png;base64,AAAA",
        prompt=composed.original,
        text_content=composed.original,
    ))
    return generator


def test_add_puts_image_at_head_of_both_views(store):
    gallery = GalleryState(store)
    gallery.add(local_image("1", "first"))
    gallery.add(local_image("2", "second"))

    assert [image.prompt for image in gallery.generate_view()] == ["second", "first"]
    assert [image.prompt for image in gallery.history_view()] == ["second", "first"]


def test_add_swaps_in_store_record(store):
    gallery = GalleryState(store)
    saved = gallery.add(local_image("1700000000000"))

    assert saved.id != "1700000000000"
    assert gallery.images[0].id == saved.id
    assert [image.id for image in store.list()] == [saved.id]


def test_failed_save_keeps_local_record():
    store = Mock()
    store.save.side_effect = RuntimeError("network down")
    gallery = GalleryState(store)

    image = gallery.add(local_image("1"))

    assert image.id == "1"
    assert gallery.get("1") is image


def test_remove_updates_local_state_before_store_delete(store):
    gallery = GalleryState(store)
    saved = gallery.add(local_image("1"))
    seen_during_delete = []
    original_delete = store.delete

    def delete(image_id):
        seen_during_delete.extend(image.id for image in gallery.images)
        original_delete(image_id)

    store.delete = delete
    gallery.remove(saved.id)

    assert seen_during_delete == []
    assert gallery.images == []
    assert store.list() == []


def test_failed_remote_delete_reloads_true_state(store):
    gallery = GalleryState(store)
    saved = gallery.add(local_image("1"))
    store.delete = Mock(side_effect=RuntimeError("permission denied"))

    gallery.remove(saved.id)

    assert [image.id for image in gallery.images] == [saved.id]


def test_reload_reads_store_newest_first(store):
    for prompt, minutes_ago in (("older", 10), ("newer", 1)):
        image = local_image("local", prompt, minutes_ago=minutes_ago)
        store.save(GeneratedImageCreate(**image.model_dump(exclude={"id"})))
    gallery = GalleryState(store)

    assert [image.prompt for image in gallery.reload()] == ["newer", "older"]


def test_submit_adds_generated_image(store, generator):
    session = GenerationSession(generator, GalleryState(store))
    session.select_output_type("Image Ads")

    image = run(session.submit("  summer sale  "))

    assert image.prompt == "summer sale"
    assert image.session_id == session.session_id
    assert image.settings.aspect_ratio == "1:1"
    assert session.gallery.generate_view()[0].id == image.id
    composed = generator.generate_image.await_args.args[0]
    assert composed.settings.output_type == "Image Ads"
    assert session.is_generating is False


@pytest.mark.parametrize("prompt", [None, "", "   "])
def test_blank_prompt_never_reaches_generator(store, generator, prompt):
    session = GenerationSession(generator, GalleryState(store))
    assert session.can_submit(prompt) is False
    assert run(session.submit(prompt)) is None
    generator.generate_image.assert_not_awaited()


def test_submission_refused_while_pending(store, generator):
    session = GenerationSession(generator, GalleryState(store))
    session.is_generating = True

    assert session.can_submit("a cat") is False
    assert run(session.submit("a cat")) is None
    generator.generate_image.assert_not_awaited()


def test_generation_failure_is_recorded_and_reraised(store, generator):
    generator.generate_image = AsyncMock(side_effect=UpstreamProviderError("Resource has been exhausted", status_code=429))
    session = GenerationSession(generator, GalleryState(store))

    with pytest.raises(UpstreamProviderError):
        run(session.submit("a cat"))

    assert session.last_error.status_code == 429
    assert session.is_generating is False
    assert session.gallery.images == []


def test_output_type_selection_sets_aspect_ratio(store, generator):
    session = GenerationSession(generator, GalleryState(store))

    assert session.select_output_type("General").aspect_ratio == "Auto"
    assert session.select_output_type("Image Ads").aspect_ratio == "1:1"
    assert session.set_aspect_ratio("4:5").aspect_ratio == "4:5"
    assert session.settings.output_type == "Image Ads"
    assert session.set_temperature(0.3).temperature == 0.3
