from concurrent.futures import ThreadPoolExecutor
import pytest
from videosvc.core.errors import InvalidOperationError, VideoNotFoundError
from videosvc.schemas.video import VideoCreate


def make_video(title="cat", duration=30, **kwargs):
    return VideoCreate(title=title, duration=duration, **kwargs)


def test_add_assigns_increasing_ids(store):
    ids = [store.add(make_video(title=f"video {i}")).id for i in range(5)]
    assert ids == [1, 2, 3, 4, 5]


def test_add_sets_data_url_and_no_likes(store):
    video = store.add(make_video())

    assert video.data_url == "http://testserver/video/1/data"
    assert video.likes == 0
    assert video.users_who_liked == set()


def test_add_ignores_client_supplied_likes(store):
    payload = VideoCreate.model_validate(
        {
            "title": "cat",
            "duration": 30,
            "dataUrl": "http://elsewhere/video.mpg",
            "likes": 7,
            "usersWhoLiked": ["mallory"],
        }
    )

    video = store.add(payload)

    stored = store.get(video.id)
    assert stored.users_who_liked == set()
    assert stored.likes == 0
    assert stored.data_url == "http://testserver/video/1/data"


def test_get_returns_stored_video(store):
    added = store.add(make_video(title="dog", duration=12, subject="pets"))

    fetched = store.get(added.id)
    assert fetched == added
    assert fetched.subject == "pets"
    assert fetched.content_type == "video/mpeg"


def test_get_missing_video_raises(store):
    with pytest.raises(VideoNotFoundError) as exc_info:
        store.get(999)
    assert exc_info.value.video_id == 999


def test_list_videos(store):
    assert store.list_videos() == []

    store.add(make_video(title="a"))
    store.add(make_video(title="b"))

    assert [video.title for video in store.list_videos()] == ["a", "b"]


def test_find_by_title_is_exact(store):
    store.add(make_video(title="cat"))
    store.add(make_video(title="cats"))
    store.add(make_video(title="Cat"))
    store.add(make_video(title="cat"))

    matches = store.find_by_title("cat")
    assert [video.id for video in matches] == [1, 4]
    assert store.find_by_title("dog") == []


def test_find_by_duration_less_than_excludes_boundary(store):
    for duration in (10, 29, 30, 31):
        store.add(make_video(duration=duration))

    matches = store.find_by_duration_less_than(30)
    assert sorted(video.duration for video in matches) == [10, 29]
    assert store.find_by_duration_less_than(10) == []


def test_client_supplied_id_is_used_and_counter_skips_past_it(store):
    explicit = store.add(make_video(id=10))
    assert explicit.id == 10
    assert explicit.data_url == "http://testserver/video/10/data"

    assert store.add(make_video()).id == 11


def test_readding_existing_id_is_rejected_and_leaves_record(store):
    video = store.add(make_video())
    store.update_likers(video.id, lambda likers: likers | {"alice"})

    with pytest.raises(InvalidOperationError, match="already exists"):
        store.add(make_video(id=video.id, title="renamed", duration=5))

    stored = store.get(video.id)
    assert stored.title == "cat"
    assert stored.duration == 30
    assert stored.users_who_liked == {"alice"}
    assert len(store.list_videos()) == 1


def test_update_likers_missing_video_raises(store):
    with pytest.raises(VideoNotFoundError):
        store.update_likers(42, lambda likers: likers)


def test_update_likers_aborted_mutation_leaves_state(store):
    video = store.add(make_video())
    store.update_likers(video.id, lambda likers: likers | {"alice"})

    def fail(likers):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        store.update_likers(video.id, fail)
    assert store.get(video.id).users_who_liked == {"alice"}


def test_returned_videos_are_copies(memory_store):
    video = memory_store.add(make_video())
    video.users_who_liked.add("mallory")

    assert memory_store.get(video.id).users_who_liked == set()


def test_concurrent_adds_get_distinct_ids(store):
    with ThreadPoolExecutor(max_workers=8) as pool:
        videos = list(pool.map(lambda i: store.add(make_video(title=str(i))), range(40)))

    ids = [video.id for video in videos]
    assert len(set(ids)) == 40
    assert sorted(ids) == list(range(1, 41))
