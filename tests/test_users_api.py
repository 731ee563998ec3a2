from fakes import API

NEW_USER = {"Authorization": "Bearer token-u-42"}


def test_register_student(client):
    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "student", "class": "7A"}, headers=NEW_USER)
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user == {"id": "u-42", "email": "u-42@school.test", "name": "Dana", "role": "student", "classLabel": "7A"}

    profile = client.get(f"{API}/users/profile", headers=NEW_USER).json()
    assert profile["classLabel"] == "7A"


def test_student_needs_class(client):
    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "student"}, headers=NEW_USER)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Class is required for students"


def test_register_again_same_role_is_ok_other_role_is_not(client):
    client.post(f"{API}/users", json={"name": "Dana", "role": "teacher"}, headers=NEW_USER)

    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "teacher"}, headers=NEW_USER)
    assert resp.status_code == 200
    assert resp.json()["message"] == "User already exists"

    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "student", "class": "7A"}, headers=NEW_USER)
    assert resp.status_code == 400
    assert "Cannot change role" in resp.json()["detail"]


def test_teachers_have_no_class(client):
    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "teacher", "class": "7A"}, headers=NEW_USER)
    assert resp.json()["user"]["classLabel"] is None


def test_invalid_role(client):
    resp = client.post(f"{API}/users", json={"name": "Dana", "role": "admin"}, headers=NEW_USER)
    assert resp.status_code == 400


def test_bad_token(client):
    resp = client.get(f"{API}/users/profile", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_update_profile(client):
    client.post(f"{API}/users", json={"name": "Dana", "role": "student", "class": "7A"}, headers=NEW_USER)
    resp = client.put(f"{API}/users/profile", json={"name": "Dana S.", "class": "8B"}, headers=NEW_USER)
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Dana S."
    assert resp.json()["user"]["classLabel"] == "8B"


def test_list_users_teacher_only(client, profiles):
    resp = client.get(f"{API}/users", headers={"Authorization": "Bearer token-s-1"})
    assert resp.status_code == 403
    resp = client.get(f"{API}/users", headers={"Authorization": "Bearer token-t-1"})
    assert resp.status_code == 200
    assert {u["name"] for u in resp.json()["users"]} == {"Ms Frizzle", "Mr Keating", "Alice", "Bob", "Carol"}
