"""Like toggle tests."""

from imageshare.models.image import ImageLike
from imageshare.services.images import ImageService
from imageshare.services.storage import UploadStorage


def test_like_image(client, auth_headers, uploaded_image):
    """Test liking an image."""
    response = client.post(f"/api/images/{uploaded_image['id']}/like", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"liked": True, "totalLikes": 1}


def test_unlike_image(client, auth_headers, uploaded_image):
    """Test that a second toggle removes the like."""
    url = f"/api/images/{uploaded_image['id']}/like"
    client.post(url, headers=auth_headers)
    response = client.post(url, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"liked": False, "totalLikes": 0}


def test_toggle_parity_and_single_membership(client, db, auth_headers, uploaded_image):
    """After N toggles the user likes the image iff N is odd, never twice."""
    url = f"/api/images/{uploaded_image['id']}/like"
    for n in range(1, 8):
        response = client.post(url, headers=auth_headers)
        assert response.json()["liked"] is (n % 2 == 1)
        rows = (
            db.query(ImageLike)
            .filter(
                ImageLike.image_id == uploaded_image["id"],
                ImageLike.user_id == auth_headers.user_id,
            )
            .count()
        )
        assert rows <= 1
        assert rows == n % 2


def test_likes_from_several_users(client, auth_headers, other_auth_headers, uploaded_image):
    url = f"/api/images/{uploaded_image['id']}/like"
    client.post(url, headers=auth_headers)
    response = client.post(url, headers=other_auth_headers)
    assert response.json() == {"liked": True, "totalLikes": 2}

    image = client.get(f"/api/images/{uploaded_image['id']}").json()
    assert image["likes"] == [auth_headers.user_id, other_auth_headers.user_id]
    assert image["totalLikes"] == 2

    response = client.post(url, headers=auth_headers)
    assert response.json() == {"liked": False, "totalLikes": 1}
    image = client.get(f"/api/images/{uploaded_image['id']}").json()
    assert image["likes"] == [other_auth_headers.user_id]


def test_like_invalid_id(client, auth_headers):
    response = client.post("/api/images/not-an-id/like", headers=auth_headers)
    assert response.status_code == 400


def test_like_missing_image(client, auth_headers):
    response = client.post("/api/images/424242/like", headers=auth_headers)
    assert response.status_code == 404


def test_like_lost_insert_race_removes_like(db, settings, auth_headers, uploaded_image, monkeypatch):
    """A toggle whose insert collides with a concurrent like ends up unliked."""
    service = ImageService(db, UploadStorage(settings))
    image_id = uploaded_image["id"]
    db.add(ImageLike(image_id=image_id, user_id=auth_headers.user_id))
    db.commit()

    real_delete = ImageService._delete_like
    calls = []

    def delete_after_race(self, image_id, user_id):
        # The first delete runs before the concurrent like committed
        calls.append(image_id)
        if len(calls) == 1:
            return 0
        return real_delete(self, image_id, user_id)

    monkeypatch.setattr(ImageService, "_delete_like", delete_after_race)

    result = service.toggle_like(str(image_id), auth_headers.user_id)
    assert result.liked is False
    assert result.total_likes == 0
    assert db.query(ImageLike).filter(ImageLike.image_id == image_id).count() == 0


def test_liked_images(client, auth_headers, other_auth_headers, upload_image):
    """Test listing images the caller liked."""
    first = upload_image(other_auth_headers, description="first").json()["image"]
    upload_image(other_auth_headers, description="second")
    third = upload_image(other_auth_headers, description="third").json()["image"]

    client.post(f"/api/images/{first['id']}/like", headers=auth_headers)
    client.post(f"/api/images/{third['id']}/like", headers=auth_headers)

    response = client.get("/api/user/liked-images", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["totalItems"] == 2
    assert [image["description"] for image in data["data"]] == ["third", "first"]
    assert data["data"][0]["owner"]["name"] == "Other User"

    other = client.get("/api/user/liked-images", headers=other_auth_headers).json()
    assert other["totalItems"] == 0


def test_liked_images_drops_unliked(client, auth_headers, uploaded_image):
    url = f"/api/images/{uploaded_image['id']}/like"
    client.post(url, headers=auth_headers)
    client.post(url, headers=auth_headers)

    data = client.get("/api/user/liked-images", headers=auth_headers).json()
    assert data["totalItems"] == 0
    assert data["data"] == []
