"""
Integration tests for user administration and file uploads.
"""

from tests.helpers import API, TEST_PASSWORD, auth_headers, create_member


USERS = f"{API}/users"
FILES = f"{API}/files"


class TestUserAdministration:
    """Test cases for the admin-only user endpoints."""

    def test_create_user_returns_temporary_password(self, client, admin):
        response = client.post(USERS, headers=auth_headers(admin["token"]), json={
            "email": "New.Biller@Clinic.com",
            "firstName": "Nina",
            "lastName": "New",
        })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "new.biller@clinic.com"
        assert data["user"]["role"] == "biller"
        assert data["user"]["organizationId"] == admin["organization"]["id"]
        assert len(data["temporaryPassword"]) >= 8

    def test_duplicate_user(self, client, admin):
        response = client.post(USERS, headers=auth_headers(admin["token"]), json={
            "email": "admin@clinic.com",
            "firstName": "Dup",
            "lastName": "Licate",
        })

        assert response.status_code == 409
        assert response.json()["message"] == "User with this email already exists"

    def test_list_users(self, client, admin):
        create_member(client, admin["token"], "biller@clinic.com")
        create_member(client, admin["token"], "manager@clinic.com", role="manager")

        everyone = client.get(USERS, headers=auth_headers(admin["token"])).json()
        managers = client.get(USERS, headers=auth_headers(admin["token"]), params={"role": "manager"}).json()

        assert everyone["meta"]["total"] == 3
        assert [u["email"] for u in managers["data"]] == ["manager@clinic.com"]

    def test_non_admin_is_forbidden(self, client, admin):
        manager = create_member(client, admin["token"], "manager@clinic.com", role="manager")

        response = client.get(USERS, headers=auth_headers(manager["token"]))

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Insufficient permissions"}

    def test_role_change_applies_to_existing_tokens(self, client, admin):
        """Test roles are read from the user row on every request."""
        biller = create_member(client, admin["token"], "biller@clinic.com")
        headers = auth_headers(biller["token"])
        assert client.get(USERS, headers=headers).status_code == 403

        response = client.put(f"{USERS}/{biller['user']['id']}", headers=auth_headers(admin["token"]), json={
            "role": "admin",
        })

        assert response.status_code == 200
        assert client.get(USERS, headers=headers).status_code == 200

    def test_cannot_demote_self(self, client, admin):
        response = client.put(f"{USERS}/{admin['user']['id']}", headers=auth_headers(admin["token"]), json={
            "role": "biller",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot change your own role or deactivate yourself"

    def test_deactivate_user(self, client, admin):
        biller = create_member(client, admin["token"], "biller@clinic.com")

        response = client.delete(f"{USERS}/{biller['user']['id']}", headers=auth_headers(admin["token"]))

        assert response.status_code == 200
        assert response.json()["message"] == "User deactivated successfully"
        me = client.get(f"{API}/auth/me", headers=auth_headers(biller["token"]))
        assert me.status_code == 401
        login = client.post(f"{API}/auth/login", json={"email": "biller@clinic.com", "password": TEST_PASSWORD})
        assert login.status_code == 401

    def test_cannot_deactivate_self(self, client, admin):
        response = client.delete(f"{USERS}/{admin['user']['id']}", headers=auth_headers(admin["token"]))

        assert response.status_code == 400


class TestFiles:
    """Test cases for claim document uploads."""

    def _upload(self, client, token, name="eob.pdf", content=b"%PDF-1.4 test", content_type="application/pdf"):
        return client.post(
            f"{FILES}/upload",
            headers=auth_headers(token),
            files={"file": (name, content, content_type)},
        )

    def test_upload_download_delete(self, client, admin):
        headers = auth_headers(admin["token"])

        response = self._upload(client, admin["token"])
        assert response.status_code == 201
        stored = response.json()["data"]
        assert stored["originalName"] == "eob.pdf"
        assert stored["sizeBytes"] == len(b"%PDF-1.4 test")
        assert stored["uploadedBy"] == admin["user"]["id"]

        meta = client.get(f"{FILES}/{stored['id']}", headers=headers)
        assert meta.json()["data"]["id"] == stored["id"]

        download = client.get(f"{FILES}/{stored['id']}/download", headers=headers)
        assert download.status_code == 200
        assert download.content == b"%PDF-1.4 test"
        assert download.headers["content-type"].startswith("application/pdf")

        assert client.delete(f"{FILES}/{stored['id']}", headers=headers).status_code == 200
        assert client.get(f"{FILES}/{stored['id']}", headers=headers).status_code == 404

    def test_disallowed_extension(self, client, admin):
        response = self._upload(client, admin["token"], name="payload.exe", content_type="application/octet-stream")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "file"

    def test_empty_file(self, client, admin):
        response = self._upload(client, admin["token"], content=b"")

        assert response.status_code == 400
        assert response.json()["message"] == "File is empty"

    def test_files_are_scoped_to_organization(self, client, admin):
        stored = self._upload(client, admin["token"]).json()["data"]
        other = client.post(f"{API}/auth/register", json={
            "email": "other@elsewhere.com",
            "password": TEST_PASSWORD,
            "firstName": "Otto",
            "lastName": "Other",
            "organizationName": "Elsewhere",
        }).json()["data"]
        client.cookies.clear()

        response = client.get(f"{FILES}/{stored['id']}/download", headers=auth_headers(other["token"]))

        assert response.status_code == 404
