from tests.conftest import SAMPLE_QUESTIONS, SAMPLE_TEMPLATE, approve, create_template


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "message" in resp.json()


def test_question_types(client):
    resp = client.get("/api/question-types")
    assert resp.status_code == 200
    types = [entry["type"] for entry in resp.json()]
    assert types[0] == "string"
    assert "url" in types and len(types) == 10


class TestCreate:
    def test_new_template_is_pending(self, client, user_headers):
        template = create_template(client, user_headers)
        assert template["status"] == "pending"
        assert template["author_name"] == "Alice"
        assert template["tags"] == ["feedback", "product"]
        assert [q["position"] for q in template["questions"]] == [0, 1, 2, 3, 4]
        assert template["questions"][3]["options"] == ["Red", "Blue"]
        assert template["questions"][1]["min"] == 1

    def test_requires_login(self, client):
        resp = client.post("/api/templates", json=SAMPLE_TEMPLATE)
        assert resp.status_code == 401

    def test_unknown_question_type(self, client, user_headers):
        payload = {**SAMPLE_TEMPLATE, "questions": [{"title": "Slide me", "type": "slider"}]}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422

    def test_choice_without_options(self, client, user_headers):
        payload = {**SAMPLE_TEMPLATE, "questions": [{"title": "Pick one", "type": "radio"}]}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422

    def test_inverted_bounds(self, client, user_headers):
        question = {"title": "How many", "type": "number", "min": 10, "max": 1}
        payload = {**SAMPLE_TEMPLATE, "questions": [question]}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422

    def test_needs_at_least_one_question(self, client, user_headers):
        payload = {**SAMPLE_TEMPLATE, "questions": []}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422

    def test_too_many_questions(self, client, user_headers):
        questions = [{"title": f"Question {i}", "type": "string"} for i in range(17)]
        payload = {**SAMPLE_TEMPLATE, "questions": questions}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422

    def test_unknown_topic(self, client, user_headers):
        payload = {**SAMPLE_TEMPLATE, "topic": "Gardening"}
        resp = client.post("/api/templates", json=payload, headers=user_headers)
        assert resp.status_code == 422


class TestVisibility:
    def test_pending_hidden_from_others(self, client, user_headers, other_headers):
        template = create_template(client, user_headers)
        url = f"/api/templates/{template['id']}"
        assert client.get(url).status_code == 404
        assert client.get(url, headers=other_headers).status_code == 404
        assert client.get(url, headers=user_headers).status_code == 200

    def test_active_public_visible_to_anyone(self, client, active_template):
        resp = client.get(f"/api/templates/{active_template['id']}")
        assert resp.status_code == 200
        assert resp.json()["status"] == "active"

    def test_private_template(self, client, user_headers, other_headers, admin_headers):
        template = create_template(client, user_headers, is_public=False)
        approve(client, admin_headers, template["id"])
        url = f"/api/templates/{template['id']}"
        assert client.get(url, headers=other_headers).status_code == 404
        assert client.get(url, headers=admin_headers).status_code == 200

    def test_listing_only_shows_public_active(self, client, user_headers, admin_headers):
        create_template(client, user_headers, title="Still pending")
        live = create_template(client, user_headers, title="Live form")
        approve(client, admin_headers, live["id"])
        page = client.get("/api/templates").json()
        assert page["total"] == 1
        assert [item["title"] for item in page["items"]] == ["Live form"]
        assert page["items"][0]["question_count"] == len(SAMPLE_QUESTIONS)

    def test_missing(self, client):
        assert client.get("/api/templates/999").status_code == 404


class TestApprove:
    def test_only_admin(self, client, user_headers):
        template = create_template(client, user_headers)
        resp = client.post(f"/api/templates/{template['id']}/approve", headers=user_headers)
        assert resp.status_code == 403

    def test_approval_queue(self, client, user_headers, admin_headers):
        pending = create_template(client, user_headers, title="Waiting")
        live = create_template(client, user_headers, title="Approved")
        approve(client, admin_headers, live["id"])
        resp = client.get("/api/admin/templates?status=pending", headers=admin_headers)
        assert resp.status_code == 200
        assert [item["id"] for item in resp.json()] == [pending["id"]]
        everything = client.get("/api/admin/templates", headers=admin_headers).json()
        assert len(everything) == 2


class TestUpdateDelete:
    def test_owner_updates(self, client, user_headers):
        template = create_template(client, user_headers)
        payload = {
            **SAMPLE_TEMPLATE,
            "title": "Renamed survey",
            "tags": ["new"],
            "questions": [{"title": "Only question", "type": "text", "required": True}],
        }
        resp = client.put(f"/api/templates/{template['id']}", json=payload, headers=user_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Renamed survey"
        assert data["tags"] == ["new"]
        assert [q["title"] for q in data["questions"]] == ["Only question"]

    def test_others_cannot_update(self, client, user_headers, other_headers):
        template = create_template(client, user_headers)
        resp = client.put(
            f"/api/templates/{template['id']}", json=SAMPLE_TEMPLATE, headers=other_headers
        )
        assert resp.status_code == 403
        assert resp.json()["error_code"] == "forbidden"

    def test_owner_deletes(self, client, user_headers, other_headers):
        template = create_template(client, user_headers)
        url = f"/api/templates/{template['id']}"
        assert client.delete(url, headers=other_headers).status_code == 403
        assert client.delete(url, headers=user_headers).status_code == 204
        assert client.get(url, headers=user_headers).status_code == 404

    def test_admin_deletes_with_responses(
        self, client, active_template, valid_answers, admin_headers
    ):
        url = f"/api/templates/{active_template['id']}"
        client.post(f"{url}/responses", json={"answers": valid_answers})
        assert client.delete(url, headers=admin_headers).status_code == 204
        assert client.get(url, headers=admin_headers).status_code == 404


def test_my_templates(client, user_headers, other_headers):
    mine = create_template(client, user_headers, title="Mine pending")
    create_template(client, other_headers, title="Not mine")
    resp = client.get("/api/users/me/templates", headers=user_headers)
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [mine["id"]]
    assert resp.json()[0]["status"] == "pending"
