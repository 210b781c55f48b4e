"""
Custom design request tests — intake, workflow, iterations, comments, uploads.
"""

import os

from backend.config import settings


def _create(client, headers, **overrides):
    payload = {
        "full_name": "Priya Shah",
        "email": "priya@example.com",
        "country": "IN",
        "metal_type": "22k Gold",
        "primary_stones": ["Natural Polki", "Emerald"],
        "notes": "Bridal choker, temple style",
        "image_urls": ["/uploads/designs/ref1.jpg", "/uploads/designs/ref2.jpg"],
    }
    payload.update(overrides)
    return client.post("/api/custom-designs", json=payload, headers=headers)


def test_create_design_request(client, auth_headers):
    response = _create(client, auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending_acceptance"
    assert data["image_url"] == "/uploads/designs/ref1.jpg"
    assert data["primary_stones"] == ["Natural Polki", "Emerald"]
    assert data["consultation_fee_paid"] is False
    assert data["iterations_count"] == 0


def test_create_requires_reference_image(client, auth_headers):
    assert _create(client, auth_headers, image_urls=[]).status_code == 400


def test_list_mine_and_admin_list(client, auth_headers, other_headers, admin_headers):
    _create(client, auth_headers)
    _create(client, other_headers)
    assert len(client.get("/api/custom-designs/mine", headers=auth_headers).json()) == 1
    assert len(client.get("/api/custom-designs", headers=admin_headers).json()) == 2
    assert client.get("/api/custom-designs", headers=auth_headers).status_code == 403


def test_other_customer_cannot_view(client, auth_headers, other_headers):
    design_id = _create(client, auth_headers).json()["id"]
    assert client.get(f"/api/custom-designs/{design_id}", headers=other_headers).status_code == 403


def test_workflow_counts_iterations(client, auth_headers, admin_headers):
    design_id = _create(client, auth_headers).json()["id"]

    def move(status):
        response = client.patch(f"/api/custom-designs/{design_id}", json={"status": status}, headers=admin_headers)
        assert response.status_code == 200
        return response.json()

    move("design_started")
    move("design_ready_for_review")
    assert move("design_in_progress")["iterations_count"] == 1
    move("design_ready_for_review")
    assert move("design_in_progress")["iterations_count"] == 2
    # in_progress → in_progress is not a new iteration
    assert move("design_in_progress")["iterations_count"] == 2


def test_fee_paid_status_marks_fee_paid(client, auth_headers, admin_headers):
    design_id = _create(client, auth_headers).json()["id"]
    data = client.patch(f"/api/custom-designs/{design_id}", json={
        "status": "design_fee_paid", "initial_estimate": 240000,
    }, headers=admin_headers).json()
    assert data["consultation_fee_paid"] is True
    assert data["initial_estimate"] == 240000


def test_invalid_status(client, auth_headers, admin_headers):
    design_id = _create(client, auth_headers).json()["id"]
    response = client.patch(f"/api/custom-designs/{design_id}", json={"status": "done"}, headers=admin_headers)
    assert response.status_code == 400


def test_comments_thread(client, auth_headers, admin_headers):
    design_id = _create(client, auth_headers).json()["id"]

    customer = client.post(f"/api/custom-designs/{design_id}/comments", json={
        "content": "Can the pendant be slightly smaller?",
    }, headers=auth_headers)
    assert customer.status_code == 200
    assert customer.json()["is_admin"] is False
    assert customer.json()["created_by"] == "priya"

    admin = client.post(f"/api/custom-designs/{design_id}/comments", json={
        "content": "Updated CAD attached.",
        "image_urls": ["/uploads/comments/cad-v2.jpg"],
    }, headers=admin_headers)
    assert admin.json()["is_admin"] is True

    detail = client.get(f"/api/custom-designs/{design_id}", headers=auth_headers).json()
    assert [c["content"] for c in detail["comments"]] == [
        "Can the pendant be slightly smaller?",
        "Updated CAD attached.",
    ]


def test_empty_comment_rejected(client, auth_headers):
    design_id = _create(client, auth_headers).json()["id"]
    response = client.post(f"/api/custom-designs/{design_id}/comments", json={"content": "   "}, headers=auth_headers)
    assert response.status_code == 400


# --- Uploads ---

def test_upload_saves_locally(client, auth_headers):
    response = client.post(
        "/api/uploads",
        data={"folder": "designs"},
        files={"file": ("sketch.png", b"\x89PNG fake image bytes", "image/png")},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["url"].startswith("/uploads/designs/")
    assert data["filename"].endswith(".png")
    assert os.path.exists(os.path.join(settings.UPLOAD_DIR, "designs", data["filename"]))


def test_upload_rejects_bad_extension(client, auth_headers):
    response = client.post(
        "/api/uploads",
        files={"file": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_upload_rejects_unknown_folder(client, auth_headers):
    response = client.post(
        "/api/uploads",
        data={"folder": "secrets"},
        files={"file": ("a.jpg", b"jpeg", "image/jpeg")},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_upload_requires_login(client):
    response = client.post("/api/uploads", files={"file": ("a.jpg", b"jpeg", "image/jpeg")})
    assert response.status_code == 401
