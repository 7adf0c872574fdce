from datetime import datetime, timedelta, timezone

from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from portal.backend.core.security import hash_password, verify_password
from portal.backend.db.init_db import init_db
from portal.backend.db.session import make_engine


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_assignment(client, token, **overrides) -> dict:
    body = {
        "title": "HW1",
        "description": "desc",
        "dueDate": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    }
    body.update(overrides)
    r = client.post("/assignments", headers=auth_header(token), json=body)
    assert r.status_code == 201, r.text
    return r.json()


def published_assignment(client, token) -> dict:
    a = create_assignment(client, token)
    r = client.put(f"/assignments/{a['_id']}/publish", headers=auth_header(token))
    assert r.status_code == 200, r.text
    return r.json()


def test_login_returns_token_and_user(client):
    r = client.post("/auth/login", json={"email": "student1@example.com", "password": "password123"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["token"]
    assert body["user"]["role"] == "student"
    assert body["user"]["name"] == "Student One"

    me = client.get("/auth/me", headers=auth_header(body["token"]))
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "student1@example.com"


def test_login_rejects_bad_password_with_message(client):
    r = client.post("/auth/login", json={"email": "student1@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid email or password"}


def test_passwords_are_stored_as_bcrypt_hashes():
    hashed = hash_password("password123")
    assert hashed.startswith("$2")
    assert "password123" not in hashed
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)
    assert not verify_password("x" * 100, hashed)


def test_overlong_password_is_just_a_failed_login(client):
    r = client.post("/auth/login", json={"email": "student1@example.com", "password": "x" * 100})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid email or password"}


def test_me_rejects_unknown_token(client):
    r = client.get("/auth/me", headers=auth_header("not-a-token"))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token"


def test_new_assignment_starts_as_draft(client, seed):
    a = create_assignment(client, seed.teacher_token)
    assert a["status"] == "draft"
    assert a["teacher"]["_id"] == seed.teacher_id
    assert a["createdAt"]


def test_students_cannot_create_assignments(client, seed):
    r = client.post(
        "/assignments",
        headers=auth_header(seed.student_token),
        json={"title": "x", "description": "y", "dueDate": datetime.now(timezone.utc).isoformat()},
    )
    assert r.status_code == 403


def test_create_rejects_past_due_date_and_long_title(client, seed):
    past = (datetime.now(timezone.utc) - timedelta(days=2)).isoformat()
    r = client.post(
        "/assignments",
        headers=auth_header(seed.teacher_token),
        json={"title": "HW", "description": "d", "dueDate": past},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Due date must be in the future"

    r = client.post(
        "/assignments",
        headers=auth_header(seed.teacher_token),
        json={"title": "x" * 101, "description": "d", "dueDate": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()},
    )
    assert r.status_code == 400
    assert r.json()["message"].startswith("title")


def test_status_moves_forward_only(client, seed):
    headers = auth_header(seed.teacher_token)
    a = create_assignment(client, seed.teacher_token)

    r = client.put(f"/assignments/{a['_id']}/complete", headers=headers)
    assert r.status_code == 409
    assert r.json()["message"] == "Only published assignments can be completed"

    r = client.put(f"/assignments/{a['_id']}/publish", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "published"

    r = client.put(f"/assignments/{a['_id']}/publish", headers=headers)
    assert r.status_code == 409

    r = client.put(f"/assignments/{a['_id']}/complete", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "completed"

    for action in ("publish", "complete"):
        r = client.put(f"/assignments/{a['_id']}/{action}", headers=headers)
        assert r.status_code == 409


def test_only_owner_can_transition(client, seed):
    a = create_assignment(client, seed.teacher_token)
    r = client.put(f"/assignments/{a['_id']}/publish", headers=auth_header(seed.other_teacher_token))
    assert r.status_code == 403

    r = client.get("/assignments", headers=auth_header(seed.teacher_token))
    assert r.json()[0]["status"] == "draft"


def test_assignment_listing_is_role_scoped(client, seed):
    create_assignment(client, seed.teacher_token, title="draft one")
    published_assignment(client, seed.teacher_token)
    create_assignment(client, seed.other_teacher_token, title="someone else")

    teacher_view = client.get("/assignments", headers=auth_header(seed.teacher_token)).json()
    assert {a["title"] for a in teacher_view} == {"draft one", "HW1"}

    student_view = client.get("/assignments", headers=auth_header(seed.student_token)).json()
    assert [a["status"] for a in student_view] == ["published"]


def test_only_drafts_can_be_edited_or_deleted(client, seed):
    headers = auth_header(seed.teacher_token)
    draft = create_assignment(client, seed.teacher_token)

    r = client.put(f"/assignments/{draft['_id']}", headers=headers, json={"title": "HW1 (v2)"})
    assert r.status_code == 200
    assert r.json()["title"] == "HW1 (v2)"
    assert r.json()["description"] == "desc"

    published = published_assignment(client, seed.teacher_token)
    r = client.put(f"/assignments/{published['_id']}", headers=headers, json={"title": "late edit"})
    assert r.status_code == 409
    r = client.delete(f"/assignments/{published['_id']}", headers=headers)
    assert r.status_code == 409

    r = client.delete(f"/assignments/{draft['_id']}", headers=headers)
    assert r.status_code == 204
    titles = [a["title"] for a in client.get("/assignments", headers=headers).json()]
    assert titles == ["HW1"]


def test_one_submission_per_student_and_assignment(client, seed):
    a = published_assignment(client, seed.teacher_token)
    headers = auth_header(seed.student_token)

    r1 = client.post("/submissions", headers=headers, json={"assignmentId": a["_id"], "answer": "42"})
    assert r1.status_code == 201, r1.text
    body = r1.json()
    assert body["isReviewed"] is False
    assert body["reviewedAt"] is None
    assert body["assignment"]["_id"] == a["_id"]

    r2 = client.post("/submissions", headers=headers, json={"assignmentId": a["_id"], "answer": "43"})
    assert r2.status_code == 409
    assert r2.json()["message"] == "You have already submitted this assignment"

    # another student is unaffected
    r3 = client.post(
        "/submissions",
        headers=auth_header(seed.other_student_token),
        json={"assignmentId": a["_id"], "answer": "7"},
    )
    assert r3.status_code == 201

    mine = client.get("/submissions", headers=headers).json()
    assert [s["answer"] for s in mine] == ["42"]


def test_overdue_submission_is_rejected(client, seed, force_due_date):
    a = published_assignment(client, seed.teacher_token)
    force_due_date(a["_id"], datetime.now(timezone.utc) - timedelta(minutes=1))

    r = client.post(
        "/submissions",
        headers=auth_header(seed.student_token),
        json={"assignmentId": a["_id"], "answer": "too late"},
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Assignment is overdue"


def test_draft_and_completed_assignments_take_no_submissions(client, seed):
    headers = auth_header(seed.student_token)
    draft = create_assignment(client, seed.teacher_token)
    r = client.post("/submissions", headers=headers, json={"assignmentId": draft["_id"], "answer": "x"})
    assert r.status_code == 404

    done = published_assignment(client, seed.teacher_token)
    client.put(f"/assignments/{done['_id']}/complete", headers=auth_header(seed.teacher_token))
    r = client.post("/submissions", headers=headers, json={"assignmentId": done["_id"], "answer": "x"})
    assert r.status_code == 409


def test_answer_length_is_enforced(client, seed):
    a = published_assignment(client, seed.teacher_token)
    r = client.post(
        "/submissions",
        headers=auth_header(seed.student_token),
        json={"assignmentId": a["_id"], "answer": "x" * 2001},
    )
    assert r.status_code == 400


def test_review_is_stamped_once(client, seed):
    a = published_assignment(client, seed.teacher_token)
    sub = client.post(
        "/submissions",
        headers=auth_header(seed.student_token),
        json={"assignmentId": a["_id"], "answer": "42"},
    ).json()

    r = client.put(f"/submissions/{sub['_id']}/review", headers=auth_header(seed.other_teacher_token))
    assert r.status_code == 403

    first = client.put(f"/submissions/{sub['_id']}/review", headers=auth_header(seed.teacher_token))
    assert first.status_code == 200
    assert first.json()["isReviewed"] is True
    assert first.json()["reviewedAt"] is not None

    second = client.put(f"/submissions/{sub['_id']}/review", headers=auth_header(seed.teacher_token))
    assert second.status_code == 200
    assert second.json()["reviewedAt"] == first.json()["reviewedAt"]

    listed = client.get(f"/assignments/{a['_id']}/submissions", headers=auth_header(seed.teacher_token)).json()
    assert len(listed) == 1
    assert listed[0]["student"]["name"] == "Student One"


def test_teacher_has_no_own_submissions_list(client, seed):
    r = client.get("/submissions", headers=auth_header(seed.teacher_token))
    assert r.status_code == 403
    assert r.json()["message"] == "Student role required"


def test_init_db_builds_every_table_on_a_fresh_engine():
    fresh = make_engine("sqlite://", poolclass=StaticPool)
    init_db(fresh)
    assert {"users", "assignments", "submissions", "auth_tokens"} <= set(inspect(fresh).get_table_names())
    fresh.dispose()
