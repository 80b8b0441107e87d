"""Tests for video routes.

Tests cover:
- Publishing: validation before upload, mime checks, compensation
- Public feed: published only, search, sort, pagination, empty feed
- Fetching: view counting, unpublished visibility
- Ownership guard on update, delete and publish toggling
- Deletion: asset release, cascade to comments and likes, retryable failure
"""

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tests.factories import (
    create_test_comment,
    create_test_like,
    create_test_user,
    create_test_video,
)
from tests.helpers import auth_headers, create_test_user_id, image_upload, video_upload
from vidtube.db.models import Comment, Like, LikeTargetKind, Video
from vidtube.storage import FakeStorageClient, parse_remote_reference


def _storage_id(url: str) -> str:
    return parse_remote_reference(url).storage_id


def _publish(client: TestClient, headers: dict, title: str = "My first video") -> dict:
    response = client.post(
        "/videos",
        data={"title": title, "description": "Watch this"},
        files={"video_file": video_upload(), "thumbnail": image_upload()},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestPublishVideo:
    """Tests for POST /videos"""

    def test_publish_uploads_both_assets(self, client: TestClient, fake_storage):
        headers = auth_headers(create_test_user_id(), "creator")

        data = _publish(client, headers)

        assert data["title"] == "My first video"
        assert data["duration_seconds"] == 42.0
        assert data["views"] == 0
        assert data["is_published"] is True
        assert data["owner"]["username"] == "creator"
        assert fake_storage.has_object(_storage_id(data["video_url"]))
        assert fake_storage.has_object(_storage_id(data["thumbnail_url"]))

    def test_envelope_reports_201(self, client: TestClient):
        response = client.post(
            "/videos",
            data={"title": "t", "description": "d"},
            files={"video_file": video_upload(), "thumbnail": image_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        body = response.json()
        assert body["statusCode"] == 201
        assert body["success"] is True
        assert body["message"] == "Video published successfully"

    def test_missing_title_rejected_before_upload(self, client: TestClient, fake_storage):
        response = client.post(
            "/videos",
            data={"title": "   ", "description": "d"},
            files={"video_file": video_upload(), "thumbnail": image_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Title and description are required"
        assert fake_storage.calls == []

    def test_missing_thumbnail_rejected(self, client: TestClient, fake_storage):
        response = client.post(
            "/videos",
            data={"title": "t", "description": "d"},
            files={"video_file": video_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Thumbnail is required"
        assert fake_storage.calls == []

    def test_wrong_mime_type_rejected_without_storage_calls(
        self, client: TestClient, fake_storage
    ):
        response = client.post(
            "/videos",
            data={"title": "t", "description": "d"},
            files={
                "video_file": ("notes.txt", b"hello", "text/plain"),
                "thumbnail": image_upload(),
            },
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 400
        assert response.json()["data"] is None
        assert fake_storage.calls == []

    def test_upload_failure_returns_500(self, client: TestClient, fake_storage, db_session):
        fake_storage.fail_uploads = True

        response = client.post(
            "/videos",
            data={"title": "t", "description": "d"},
            files={"video_file": video_upload(), "thumbnail": image_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to upload video file"
        assert db_session.execute(select(func.count()).select_from(Video)).scalar_one() == 0

    def test_missing_duration_releases_committed_assets(
        self, client: TestClient, fake_storage: FakeStorageClient
    ):
        """Assets committed before the failure are released again."""
        fake_storage.video_duration_seconds = None

        response = client.post(
            "/videos",
            data={"title": "t", "description": "d"},
            files={"video_file": video_upload(), "thumbnail": image_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 500
        assert fake_storage.object_count == 0
        assert [op for op, _ in fake_storage.calls] == ["upload", "upload", "delete", "delete"]


class TestListVideos:
    """Tests for GET /videos"""

    def test_empty_feed_is_200(self, client: TestClient):
        response = client.get("/videos", headers=auth_headers(create_test_user_id()))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["total"] == 0
        assert data["has_next"] is False

    def test_huge_page_number_is_empty_page(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        create_test_video(db_session, owner.id)

        response = client.get(
            "/videos", params={"page": str(10**20)}, headers=auth_headers(owner.id)
        )

        assert response.status_code == 200
        assert response.json()["data"]["items"] == []
        assert response.json()["data"]["total"] == 1

    def test_query_wildcards_match_literally(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        create_test_video(db_session, owner.id, "100% real")
        create_test_video(db_session, owner.id, "1000 real")
        create_test_video(db_session, owner.id, "snake_case tips")
        create_test_video(db_session, owner.id, "snakeXcase tips")

        percent = client.get("/videos", params={"query": "0%"}, headers=auth_headers(owner.id))
        underscore = client.get(
            "/videos", params={"query": "snake_"}, headers=auth_headers(owner.id)
        )

        assert [v["title"] for v in percent.json()["data"]["items"]] == ["100% real"]
        assert [v["title"] for v in underscore.json()["data"]["items"]] == ["snake_case tips"]

    def test_only_published_videos_listed(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        create_test_video(db_session, owner.id, "Public")
        create_test_video(db_session, owner.id, "Draft", is_published=False)

        response = client.get("/videos", headers=auth_headers(owner.id))

        titles = [v["title"] for v in response.json()["data"]["items"]]
        assert titles == ["Public"]

    def test_search_is_case_insensitive(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        create_test_video(db_session, owner.id, "Learning Python")
        create_test_video(db_session, owner.id, "Cooking pasta")

        response = client.get("/videos?query=PYTHON", headers=auth_headers(owner.id))

        items = response.json()["data"]["items"]
        assert [v["title"] for v in items] == ["Learning Python"]
        assert items[0]["owner"]["username"] == "owner"

    def test_sort_by_views_ascending(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        for views in (30, 10, 20):
            create_test_video(db_session, owner.id, f"v{views}", views=views)

        response = client.get("/videos?sortBy=views&sortType=asc", headers=auth_headers(owner.id))

        assert [v["views"] for v in response.json()["data"]["items"]] == [10, 20, 30]

    def test_invalid_sort_field_rejected(self, client: TestClient):
        response = client.get(
            "/videos?sortBy=owner_id", headers=auth_headers(create_test_user_id())
        )

        assert response.status_code == 400

    def test_filter_by_user(self, client: TestClient, db_session: Session):
        alice = create_test_user(db_session, "alice")
        bob = create_test_user(db_session, "bob")
        create_test_video(db_session, alice.id, "A")
        create_test_video(db_session, bob.id, "B")

        response = client.get(f"/videos?userId={bob.id}", headers=auth_headers(alice.id))

        assert [v["title"] for v in response.json()["data"]["items"]] == ["B"]

    def test_pagination_window(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        for i in range(5):
            create_test_video(db_session, owner.id, f"v{i}")

        response = client.get("/videos?page=3&limit=2", headers=auth_headers(owner.id))

        data = response.json()["data"]
        assert len(data["items"]) == 1
        assert data["total"] == 5
        assert data["total_pages"] == 3
        assert data["has_next"] is False
        assert data["has_prev"] is True


class TestGetVideo:
    """Tests for GET /videos/{video_id}"""

    def test_fetch_counts_view(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id, views=4)
        headers = auth_headers(create_test_user_id())

        first = client.get(f"/videos/{video.id}", headers=headers)
        second = client.get(f"/videos/{video.id}", headers=headers)

        assert first.json()["data"]["views"] == 5
        assert second.json()["data"]["views"] == 6
        assert second.json()["data"]["owner"]["id"] == owner.id

    def test_invalid_id_is_400(self, client: TestClient):
        response = client.get("/videos/not-an-id", headers=auth_headers(create_test_user_id()))

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid video id"

    def test_unknown_video_is_404(self, client: TestClient):
        response = client.get(
            f"/videos/{create_test_user_id()}", headers=auth_headers(create_test_user_id())
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    def test_unpublished_visible_to_owner_only(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id, is_published=False)

        assert client.get(f"/videos/{video.id}", headers=auth_headers(owner.id)).status_code == 200
        response = client.get(f"/videos/{video.id}", headers=auth_headers(create_test_user_id()))
        assert response.status_code == 404


class TestUpdateVideo:
    """Tests for PATCH /videos/{video_id}"""

    def test_owner_updates_title(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id, "Old title")

        response = client.patch(
            f"/videos/{video.id}", data={"title": "New title"}, headers=auth_headers(owner.id)
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "New title"
        assert response.json()["data"]["description"] == "A test video"

    def test_non_owner_forbidden(self, client: TestClient, db_session: Session, fake_storage):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id, "Mine")

        response = client.patch(
            f"/videos/{video.id}",
            data={"title": "Hijacked"},
            files={"thumbnail": image_upload()},
            headers=auth_headers(create_test_user_id()),
        )

        assert response.status_code == 403
        assert fake_storage.calls == []
        db_session.expire_all()
        assert db_session.get(Video, video.id).title == "Mine"

    def test_nothing_to_update_rejected(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id)

        response = client.patch(
            f"/videos/{video.id}", data={"title": "  "}, headers=auth_headers(owner.id)
        )

        assert response.status_code == 400

    def test_failed_thumbnail_upload_keeps_text_fields(
        self, client: TestClient, db_session: Session, fake_storage
    ):
        """Title and description only change together with a stored thumbnail."""
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id, "Old title")
        old_thumbnail = video.thumbnail_url
        fake_storage.fail_uploads = True

        response = client.patch(
            f"/videos/{video.id}",
            data={"title": "New title", "description": "New description"},
            files={"thumbnail": image_upload()},
            headers=auth_headers(owner.id),
        )

        assert response.status_code == 500
        db_session.expire_all()
        stored = db_session.get(Video, video.id)
        assert stored.title == "Old title"
        assert stored.description == "A test video"
        assert stored.thumbnail_url == old_thumbnail

    def test_thumbnail_replaced_new_first(self, client: TestClient, fake_storage):
        """The new thumbnail is stored before the old one is released."""
        headers = auth_headers(create_test_user_id(), "owner")
        video = _publish(client, headers)
        old_id = _storage_id(video["thumbnail_url"])
        fake_storage.calls.clear()

        response = client.patch(
            f"/videos/{video['id']}",
            files={"thumbnail": image_upload("new.png")},
            headers=headers,
        )

        assert response.status_code == 200
        new_id = _storage_id(response.json()["data"]["thumbnail_url"])
        assert new_id != old_id
        assert fake_storage.calls == [("upload", new_id), ("delete", old_id)]
        assert fake_storage.has_object(new_id)
        assert not fake_storage.has_object(old_id)


class TestDeleteVideo:
    """Tests for DELETE /videos/{video_id}"""

    def test_non_owner_gets_403_and_nothing_changes(
        self, client: TestClient, fake_storage, db_session: Session
    ):
        headers_a = auth_headers(create_test_user_id(), "alice")
        video = _publish(client, headers_a)
        fake_storage.calls.clear()

        response = client.delete(
            f"/videos/{video['id']}", headers=auth_headers(create_test_user_id(), "bob")
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You can only delete your own videos"
        assert fake_storage.calls == []
        assert db_session.get(Video, video["id"]) is not None

    def test_owner_delete_releases_assets_and_record(
        self, client: TestClient, fake_storage, db_session: Session
    ):
        headers = auth_headers(create_test_user_id(), "alice")
        video = _publish(client, headers)

        response = client.delete(f"/videos/{video['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Video deleted successfully"
        assert fake_storage.object_count == 0
        deleted = {sid for op, sid in fake_storage.calls if op == "delete"}
        assert deleted == {_storage_id(video["video_url"]), _storage_id(video["thumbnail_url"])}
        assert db_session.get(Video, video["id"]) is None

    def test_delete_removes_comments_and_likes(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        fan = create_test_user(db_session, "fan")
        video = create_test_video(db_session, owner.id)
        comment = create_test_comment(db_session, fan.id, video.id)
        create_test_like(db_session, fan.id, LikeTargetKind.video, video.id)
        create_test_like(db_session, owner.id, LikeTargetKind.comment, comment.id)

        response = client.delete(f"/videos/{video.id}", headers=auth_headers(owner.id))

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.execute(select(func.count()).select_from(Comment)).scalar_one() == 0
        assert db_session.execute(select(func.count()).select_from(Like)).scalar_one() == 0

    def test_storage_failure_keeps_record(
        self, client: TestClient, fake_storage, db_session: Session
    ):
        headers = auth_headers(create_test_user_id(), "alice")
        video = _publish(client, headers)
        fake_storage.fail_deletes = True

        response = client.delete(f"/videos/{video['id']}", headers=headers)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to delete video assets"
        assert db_session.get(Video, video["id"]) is not None

        fake_storage.fail_deletes = False
        assert client.delete(f"/videos/{video['id']}", headers=headers).status_code == 200

    def test_unknown_video_is_404_before_ownership(self, client: TestClient):
        response = client.delete(
            f"/videos/{create_test_user_id()}", headers=auth_headers(create_test_user_id())
        )

        assert response.status_code == 404


class TestTogglePublish:
    """Tests for PATCH /videos/{video_id}/publish"""

    def test_owner_toggles(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id)

        first = client.patch(f"/videos/{video.id}/publish", headers=auth_headers(owner.id))
        second = client.patch(f"/videos/{video.id}/publish", headers=auth_headers(owner.id))

        assert first.json()["data"]["is_published"] is False
        assert second.json()["data"]["is_published"] is True

    def test_non_owner_forbidden(self, client: TestClient, db_session: Session):
        owner = create_test_user(db_session, "owner")
        video = create_test_video(db_session, owner.id)

        response = client.patch(
            f"/videos/{video.id}/publish", headers=auth_headers(create_test_user_id())
        )

        assert response.status_code == 403
