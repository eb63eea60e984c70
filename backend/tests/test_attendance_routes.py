"""
Attendance API tests: issue a token, scan it, review the results.
"""

from datetime import timedelta

from app.time_utils import to_utc_z, utcnow


def _issue(client, headers, event_id, **extra):
    body = {"event_id": event_id, "expires_at": to_utc_z(utcnow() + timedelta(hours=1))}
    body.update(extra)
    return client.post("/api/attendance-tokens", json=body, headers=headers)


class TestTokenRoutes:

    def test_issue_returns_qr(self, client, organizer_headers, event):
        resp = _issue(client, organizer_headers, event.id, label="Session 1")

        assert resp.status_code == 201
        token = resp.json["token"]
        assert len(token["token"]) == 8
        assert token["label"] == "Session 1"
        assert token["event_name"] == "General Assembly"
        assert token["qr_code"].startswith("data:image/png;base64,")
        assert token["token"] in token["payload"]

    def test_issue_requires_expiry(self, client, organizer_headers, event):
        resp = client.post(
            "/api/attendance-tokens",
            json={"event_id": event.id},
            headers=organizer_headers,
        )
        assert resp.status_code == 400
        assert resp.json["errors"][0]["field"] == "expires_at"

    def test_issue_unknown_event(self, client, organizer_headers, db_session):
        resp = _issue(client, organizer_headers, 404)
        assert resp.status_code == 404

    def test_regenerate_qr(self, client, organizer_headers, event):
        issued = _issue(client, organizer_headers, event.id).json["token"]

        resp = client.post(f"/api/attendance-tokens/{issued['id']}/regenerate-qr", headers=organizer_headers)
        assert resp.status_code == 200
        assert resp.json["token"]["token"] == issued["token"]

    def test_deactivate(self, client, organizer_headers, member_headers, event):
        issued = _issue(client, organizer_headers, event.id).json["token"]

        resp = client.patch(
            f"/api/attendance-tokens/{issued['id']}",
            json={"is_active": False},
            headers=organizer_headers,
        )
        assert resp.status_code == 200
        assert resp.json["token"]["is_active"] is False

        scan = client.post("/api/attendance/scan", json={"token": issued["token"]}, headers=member_headers)
        assert scan.status_code == 400
        assert scan.json["code"] == "INVALID_TOKEN"

    def test_admin_deletes_token(self, client, admin_headers, event):
        issued = _issue(client, admin_headers, event.id).json["token"]

        resp = client.delete(f"/api/attendance-tokens/{issued['id']}", headers=admin_headers)
        assert resp.status_code == 200

        missing = client.get(f"/api/attendance-tokens/{issued['id']}", headers=admin_headers)
        assert missing.status_code == 404


class TestScan:

    def test_scan_then_duplicate(self, client, organizer_headers, member, member_headers, event):
        secret = _issue(client, organizer_headers, event.id).json["token"]["token"]

        first = client.post("/api/attendance/scan", json={"token": f" {secret.lower()} "}, headers=member_headers)
        assert first.status_code == 201
        assert first.json["record"]["person_id"] == member.id
        assert first.json["record"]["status"] == "present"

        second = client.post("/api/attendance/scan", json={"token": secret}, headers=member_headers)
        assert second.status_code == 409
        assert second.json["code"] == "DUPLICATE_CHECK_IN"

    def test_scan_missing_token(self, client, member_headers, event):
        resp = client.post("/api/attendance/scan", json={}, headers=member_headers)
        assert resp.status_code == 400

    def test_scan_non_string_token(self, client, member_headers, event):
        resp = client.post("/api/attendance/scan", json={"token": 12345678}, headers=member_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "INVALID_TOKEN"

    def test_scan_expired_token(self, client, organizer_headers, member_headers, event):
        past = to_utc_z(utcnow() - timedelta(seconds=1))
        secret = _issue(client, organizer_headers, event.id, expires_at=past).json["token"]["token"]

        resp = client.post("/api/attendance/scan", json={"token": secret}, headers=member_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "INVALID_TOKEN"

    def test_scan_after_event_deleted(self, client, admin_headers, organizer_headers, member_headers, event):
        issued = _issue(client, organizer_headers, event.id).json["token"]
        assert client.delete(f"/api/events/{event.id}", headers=admin_headers).status_code == 200

        reactivate = client.patch(
            f"/api/attendance-tokens/{issued['id']}",
            json={"is_active": True},
            headers=organizer_headers,
        )
        assert reactivate.status_code == 400

        scan = client.post("/api/attendance/scan", json={"token": issued["token"]}, headers=member_headers)
        assert scan.status_code == 400
        assert scan.json["code"] == "INVALID_TOKEN"

    def test_history_and_summary(self, client, organizer_headers, member, member_headers, event):
        secret = _issue(client, organizer_headers, event.id).json["token"]["token"]
        client.post("/api/attendance/scan", json={"token": secret}, headers=member_headers)

        mine = client.get(f"/api/attendance/person/{member.id}", headers=member_headers)
        assert mine.status_code == 200
        assert mine.json["total"] == 1
        assert mine.json["items"][0]["event_id"] == event.id

        summary = client.get(f"/api/attendance/event/{event.id}/summary", headers=organizer_headers)
        assert summary.status_code == 200
        assert summary.json["summary"]["counts"]["present"] == 1
        assert summary.json["summary"]["unique_members"] == 1


class TestManual:

    def test_manual_and_edit(self, client, organizer_headers, member, event):
        created = client.post(
            "/api/attendance/manual",
            json={"person_id": member.id, "event_id": event.id, "status": "sick", "note": "fever"},
            headers=organizer_headers,
        )
        assert created.status_code == 201
        record = created.json["record"]
        assert record["source"] == "manual"

        duplicate = client.post(
            "/api/attendance/manual",
            json={"person_id": member.id, "event_id": event.id},
            headers=organizer_headers,
        )
        assert duplicate.status_code == 409

        edited = client.patch(
            f"/api/attendance/{record['id']}",
            json={"status": "excused", "note": None},
            headers=organizer_headers,
        )
        assert edited.status_code == 200
        assert edited.json["record"]["status"] == "excused"
        assert edited.json["record"]["note"] is None

    def test_manual_rejects_unhashable_status(self, client, organizer_headers, member, event):
        resp = client.post(
            "/api/attendance/manual",
            json={"person_id": member.id, "event_id": event.id, "status": ["present"]},
            headers=organizer_headers,
        )
        assert resp.status_code == 400
        assert resp.json["errors"][0]["field"] == "status"

    def test_edit_rejects_immutable_fields(self, client, organizer_headers, member, event):
        record = client.post(
            "/api/attendance/manual",
            json={"person_id": member.id, "event_id": event.id},
            headers=organizer_headers,
        ).json["record"]

        resp = client.patch(
            f"/api/attendance/{record['id']}",
            json={"event_id": 99},
            headers=organizer_headers,
        )
        assert resp.status_code == 400

    def test_organizer_cannot_delete_records(self, client, organizer_headers, admin_headers, member, event):
        record = client.post(
            "/api/attendance/manual",
            json={"person_id": member.id, "event_id": event.id},
            headers=organizer_headers,
        ).json["record"]

        denied = client.delete(f"/api/attendance/{record['id']}", headers=organizer_headers)
        assert denied.status_code == 403

        allowed = client.delete(f"/api/attendance/{record['id']}", headers=admin_headers)
        assert allowed.status_code == 200
