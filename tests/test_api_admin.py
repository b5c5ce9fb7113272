"""/api/admin/clients"""

from tests.conftest import SUBDOMAIN

NEW = {"businessName": "Beta Bistro", "contactEmail": "Owner@Beta.test",
       "subdomain": "beta", "managerPin": "4321"}


class TestListing:

    def test_list_counts_employees(self, admin, tenant):
        rows = admin.get("/api/admin/clients").get_json()["clients"]
        assert [(c["subdomain"], c["employee_count"]) for c in rows] == [(SUBDOMAIN, 2)]
        assert "manager_pin" not in rows[0]

    def test_head(self, admin):
        assert admin.head("/api/admin/clients").status_code == 200

    def test_requires_admin(self, manager, anon):
        assert manager.get("/api/admin/clients").status_code == 401
        r = anon.get("/api/admin/clients")
        assert r.status_code == 401
        assert r.get_json()["error"] == "admin_access_required"


class TestProvisioning:

    def test_create(self, app, admin):
        r = admin.post("/api/admin/clients", json=NEW)
        assert r.status_code == 201
        c = r.get_json()["client"]
        assert (c["subdomain"], c["contact_email"], c["employee_count"]) == ("beta", "owner@beta.test", 0)

        m = app.test_client()
        m.environ_base["HTTP_X_SUBDOMAIN"] = "beta"
        assert m.post("/api/client/auth/manager", json={"pin": "4321"}).status_code == 200
        rules = m.get("/api/client/break-rules").get_json()["rules"]
        assert [(x["min_hours"], x["break_minutes"]) for x in rules] == [("0.00", 0), ("5.00", 30)]

    def test_generated_subdomain(self, admin):
        body = {**NEW, "businessName": "Joe's Café & Bar"}
        del body["subdomain"]
        r = admin.post("/api/admin/clients", json=body)
        assert r.get_json()["client"]["subdomain"] == "joes-caf-bar"

    def test_taken_subdomain(self, admin):
        r = admin.post("/api/admin/clients", json={**NEW, "subdomain": SUBDOMAIN})
        assert r.status_code == 409
        assert r.get_json()["error"] == "subdomain_exists"

    def test_reserved_subdomain(self, admin):
        r = admin.post("/api/admin/clients", json={**NEW, "subdomain": "www"})
        assert r.status_code == 400
        assert r.get_json()["error"] == "invalid_subdomain"

    def test_bad_email(self, admin):
        r = admin.post("/api/admin/clients", json={**NEW, "contactEmail": "nope"})
        assert r.status_code == 400
        assert r.get_json()["field"] == "contact_email"


class TestChanges:

    def test_suspend_blocks_manager(self, admin, anon, tenant):
        r = admin.patch(f"/api/admin/clients/{tenant.client_id}", json={"status": "suspended"})
        assert r.status_code == 200
        assert r.get_json()["client"]["status"] == "suspended"
        r = anon.post("/api/client/auth/manager", json={"pin": "1234"})
        assert r.status_code == 403
        assert r.get_json()["error"] == "client_inactive"

    def test_suspend_locks_out_signed_in_manager(self, admin, manager, tenant):
        admin.patch(f"/api/admin/clients/{tenant.client_id}", json={"status": "inactive"})
        assert manager.get("/api/client/employees").status_code == 403

    def test_reset_manager_pin(self, admin, anon, tenant):
        admin.patch(f"/api/admin/clients/{tenant.client_id}", json={"managerPin": "5678"})
        assert anon.post("/api/client/auth/manager", json={"pin": "1234"}).status_code == 401
        assert anon.post("/api/client/auth/manager", json={"pin": "5678"}).status_code == 200

    def test_bad_status(self, admin, tenant):
        r = admin.patch(f"/api/admin/clients/{tenant.client_id}", json={"status": "gone"})
        assert r.status_code == 400

    def test_delete(self, admin, tenant, week):
        assert admin.delete(f"/api/admin/clients/{tenant.client_id}").status_code == 200
        assert admin.get(f"/api/admin/clients/{tenant.client_id}").status_code == 404
        assert admin.get("/api/admin/clients").get_json()["clients"] == []

    def test_unknown(self, admin):
        assert admin.patch("/api/admin/clients/999", json={"status": "active"}).status_code == 404
