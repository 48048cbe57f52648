import pytest


@pytest.fixture
def post(alice, post_of):
    return post_of(alice, "Post with comments")


def comment_on(client, user, post_id, content="Nice post"):
    response = client.post(f'/comments/post/{post_id}', json={"content": content}, headers=user["headers"])
    assert response.status_code == 201, response.get_json()
    return response.get_json()["comment"]


def test_create_comment(client, bob, post):
    response = client.post(f'/comments/post/{post["id"]}', json={"content": "Great"}, headers=bob["headers"])

    assert response.status_code == 201
    comment = response.get_json()["comment"]
    assert comment["content"] == "Great"
    assert comment["post"] == post["id"]
    assert comment["author"]["username"] == "bob_smith"
    assert comment["likes"] == []


def test_create_comment_on_missing_post(client, bob):
    response = client.post('/comments/post/999', json={"content": "Hello"}, headers=bob["headers"])

    assert response.status_code == 404
    assert response.get_json()["message"] == "Post not found"


def test_create_comment_validation(client, bob, post):
    response = client.post(f'/comments/post/{post["id"]}', json={"content": "x" * 501}, headers=bob["headers"])
    assert response.status_code == 400


def test_post_comment_sequence_references_post(client, alice, bob, post):
    first = comment_on(client, bob, post["id"], "first")
    second = comment_on(client, alice, post["id"], "second")

    body = client.get(f'/posts/{post["id"]}').get_json()["post"]
    assert [c["id"] for c in body["comments"]] == [first["id"], second["id"]]
    assert all(c["post"] == post["id"] for c in body["comments"])


def test_list_comments_newest_first(client, alice, bob, post):
    comment_on(client, bob, post["id"], "older")
    comment_on(client, alice, post["id"], "newer")

    response = client.get(f'/comments/post/{post["id"]}')

    assert response.status_code == 200
    comments = response.get_json()["comments"]
    assert [c["content"] for c in comments] == ["newer", "older"]


def test_update_comment(client, bob, post):
    comment = comment_on(client, bob, post["id"])

    response = client.put(f'/comments/{comment["id"]}', json={"content": "Edited"}, headers=bob["headers"])

    assert response.status_code == 200
    assert response.get_json()["comment"]["content"] == "Edited"


def test_update_comment_forbidden(client, alice, bob, post):
    comment = comment_on(client, bob, post["id"])

    response = client.put(f'/comments/{comment["id"]}', json={"content": "Edited"}, headers=alice["headers"])

    assert response.status_code == 403
    assert response.get_json()["message"] == "You are not authorized to update this comment"


def test_delete_comment_removes_it_from_post(client, alice, bob, post):
    comment = comment_on(client, bob, post["id"])

    response = client.delete(f'/comments/{comment["id"]}', headers=bob["headers"])

    assert response.status_code == 200
    body = client.get(f'/posts/{post["id"]}').get_json()["post"]
    assert body["comments"] == []
    assert body["commentsCount"] == 0


def test_delete_comment_forbidden(client, alice, bob, post):
    comment = comment_on(client, bob, post["id"])

    response = client.delete(f'/comments/{comment["id"]}', headers=alice["headers"])

    assert response.status_code == 403
    assert response.get_json()["message"] == "You are not authorized to delete this comment"


def test_delete_missing_comment(client, bob):
    response = client.delete('/comments/321', headers=bob["headers"])

    assert response.status_code == 404
    assert response.get_json()["message"] == "Comment not found"


def test_toggle_comment_like(client, alice, bob, post):
    comment = comment_on(client, bob, post["id"])

    response = client.post(f'/comments/{comment["id"]}/like', headers=alice["headers"])
    body = response.get_json()
    assert body["isLiked"] is True
    assert body["message"] == "Comment liked"
    assert body["comment"]["likes"] == [{"id": alice["id"], "username": "alice99", "profilePicture": ""}]
    assert body["comment"]["likesCount"] == 1

    body = client.post(f'/comments/{comment["id"]}/like', headers=alice["headers"]).get_json()
    assert body["isLiked"] is False
    assert body["comment"]["likes"] == []


def test_like_missing_comment(client, alice):
    assert client.post('/comments/77/like', headers=alice["headers"]).status_code == 404
