def test_register_issues_token(client):
    response = client.post('/auth/register', json={
        "username": "alice99",
        "email": "Alice@X.com",
        "password": "Passw0rd"
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["username"] == "alice99"
    assert body["user"]["email"] == "alice@x.com"
    assert body["user"]["followers"] == []
    assert body["user"]["following"] == []
    assert "password_hash" not in body["user"]


def test_register_duplicate_email(client, alice):
    response = client.post('/auth/register', json={
        "username": "another",
        "email": "alice@x.com",
        "password": "Passw0rd"
    })

    assert response.status_code == 400
    assert "already exists" in response.get_json()["message"]


def test_register_duplicate_username(client, alice):
    response = client.post('/auth/register', json={
        "username": "alice99",
        "email": "other@x.com",
        "password": "Passw0rd"
    })

    assert response.status_code == 400
    assert "already exists" in response.get_json()["message"]


def test_register_validation_errors(client):
    response = client.post('/auth/register', json={
        "username": "alice12345",
        "email": "alice@x.com",
        "password": "password"
    })

    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Validation failed"
    assert {error["field"] for error in body["errors"]} == {"username", "password"}


def test_register_rejects_username_with_trailing_newline(client, alice):
    response = client.post('/auth/register', json={
        "username": "alice99\n",
        "email": "other@x.com",
        "password": "Passw0rd"
    })

    assert response.status_code == 400
    assert [error["field"] for error in response.get_json()["errors"]] == ["username"]


def test_register_without_body(client):
    response = client.post('/auth/register', data="not json")
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_login(client, alice):
    response = client.post('/auth/login', json={"email": "alice@x.com", "password": "Passw0rd"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == alice["id"]
    assert body["token"]


def test_login_wrong_password(client, alice):
    response = client.post('/auth/login', json={"email": "alice@x.com", "password": "Wr0ngpass"})

    assert response.status_code == 400
    assert response.get_json() == {"success": False, "message": "Invalid credentials"}


def test_login_unknown_email(client):
    response = client.post('/auth/login', json={"email": "nobody@x.com", "password": "Passw0rd"})

    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid credentials"


def test_login_requires_password(client):
    response = client.post('/auth/login', json={"email": "alice@x.com"})

    assert response.status_code == 400
    assert response.get_json()["errors"][0]["field"] == "password"


def test_me_populates_graph(client, alice, bob):
    client.post(f'/users/{bob["id"]}/follow', headers=alice["headers"])

    response = client.get('/auth/me', headers=alice["headers"])

    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["username"] == "alice99"
    assert user["following"] == [{"id": bob["id"], "username": "bob_smith", "profilePicture": ""}]
    assert user["followers"] == []


def test_update_profile(client, alice):
    response = client.put('/auth/profile', json={
        "username": "alice_new",
        "bio": "Hello there",
        "profilePicture": "https://cdn.example.com/a.png"
    }, headers=alice["headers"])

    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["username"] == "alice_new"
    assert user["bio"] == "Hello there"
    assert user["profilePicture"] == "https://cdn.example.com/a.png"


def test_update_profile_can_clear_bio(client, alice):
    client.put('/auth/profile', json={"bio": "something"}, headers=alice["headers"])
    response = client.put('/auth/profile', json={"bio": ""}, headers=alice["headers"])

    assert response.get_json()["user"]["bio"] == ""


def test_update_profile_keeps_own_username(client, alice):
    response = client.put('/auth/profile', json={"username": "alice99"}, headers=alice["headers"])
    assert response.status_code == 200


def test_update_profile_username_taken(client, alice, bob):
    response = client.put('/auth/profile', json={"username": "bob_smith"}, headers=alice["headers"])

    assert response.status_code == 400
    assert response.get_json()["message"] == "Username is already taken"


def test_update_profile_username_is_case_sensitive(client, alice, bob):
    response = client.put('/auth/profile', json={"username": "Bob_Smith"}, headers=alice["headers"])
    assert response.status_code == 200


def test_update_profile_invalid_username(client, alice):
    response = client.put('/auth/profile', json={"username": "al"}, headers=alice["headers"])

    assert response.status_code == 400
    assert response.get_json()["message"] == "Username must be between 3 and 30 characters"


def test_update_profile_bio_too_long(client, alice):
    response = client.put('/auth/profile', json={"bio": "x" * 201}, headers=alice["headers"])
    assert response.status_code == 400
