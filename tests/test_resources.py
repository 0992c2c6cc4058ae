"""Tests for the budget and expense endpoints and family-scoped authorization."""

import pytest

from finfam_api import models

RESOURCES = ["budgets", "expenses"]


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com", name="Owner")


@pytest.fixture
def stranger(make_user):
    return make_user(email="stranger@example.com", name="Stranger")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", name="Admin", role=models.ROLE_ADMIN)


@pytest.fixture
def family(make_family, owner):
    return make_family(owner, name="Owner Family")


def payload(family, **overrides):
    data = {"category": "Food", "value": 500, "date": "2025-01-01", "familyId": family.id}
    data.update(overrides)
    return data


@pytest.mark.parametrize("resource", RESOURCES)
class TestCreate:
    def test_create(self, client, owner, family, headers_for, resource):
        res = client.post(f"/api/{resource}", json=payload(family), headers=headers_for(owner))
        assert res.status_code == 201
        body = res.json()
        assert body["id"] > 0
        assert body["familyId"] == family.id
        assert body["category"] == "Food"
        assert body["value"] == 500
        assert body["date"].startswith("2025-01-01T00:00:00")

    @pytest.mark.parametrize("missing", ["category", "value", "date", "familyId"])
    def test_missing_field(self, client, owner, family, headers_for, resource, missing):
        data = payload(family)
        del data[missing]
        res = client.post(f"/api/{resource}", json=data, headers=headers_for(owner))
        assert res.status_code == 400
        assert missing in res.json()["errors"]

    @pytest.mark.parametrize("field,value", [
        ("value", 0),
        ("value", -10),
        ("value", "lots"),
        ("value", "500"),
        ("value", True),
        ("value", 10.5),
        ("value", 2**31),
        ("category", ""),
        ("category", "   "),
        ("date", "not a date"),
        ("familyId", 0),
    ])
    def test_invalid_field(self, client, owner, family, headers_for, resource, field, value):
        res = client.post(f"/api/{resource}", json=payload(family, **{field: value}), headers=headers_for(owner))
        assert res.status_code == 400
        assert field in res.json()["errors"]

    def test_iso_datetime_with_timezone(self, client, owner, family, headers_for, resource):
        res = client.post(
            f"/api/{resource}",
            json=payload(family, date="2025-03-10T12:30:00.000Z"),
            headers=headers_for(owner),
        )
        assert res.status_code == 201
        assert res.json()["date"].startswith("2025-03-10T12:30:00")

    def test_unauthenticated(self, client, family, resource):
        res = client.post(f"/api/{resource}", json=payload(family))
        assert res.status_code == 401

    def test_stranger_forbidden(self, client, stranger, family, headers_for, resource):
        res = client.post(f"/api/{resource}", json=payload(family), headers=headers_for(stranger))
        assert res.status_code == 403
        assert res.json()["message"] == "Access denied to this family"

    def test_admin_allowed_for_any_family(self, client, admin, family, headers_for, resource):
        res = client.post(f"/api/{resource}", json=payload(family), headers=headers_for(admin))
        assert res.status_code == 201

    def test_admin_unknown_family(self, client, admin, headers_for, resource):
        res = client.post(
            f"/api/{resource}",
            json={"category": "Food", "value": 1, "date": "2025-01-01", "familyId": 999},
            headers=headers_for(admin),
        )
        assert res.status_code == 404

    def test_user_unknown_family(self, client, owner, headers_for, resource):
        res = client.post(
            f"/api/{resource}",
            json={"category": "Food", "value": 1, "date": "2025-01-01", "familyId": 999},
            headers=headers_for(owner),
        )
        assert res.status_code == 403


@pytest.mark.parametrize("resource", RESOURCES)
class TestReadUpdateDelete:
    def create(self, client, family, headers, resource, **overrides):
        res = client.post(f"/api/{resource}", json=payload(family, **overrides), headers=headers)
        assert res.status_code == 201
        return res.json()

    def test_list_by_family(self, client, owner, family, make_family, headers_for, resource):
        headers = headers_for(owner)
        other = make_family(owner, name="Second")
        self.create(client, family, headers, resource, category="Food")
        self.create(client, family, headers, resource, category="Rent")
        self.create(client, other, headers, resource, category="Other")

        res = client.get(f"/api/{resource}/family/{family.id}", headers=headers)
        assert res.status_code == 200
        assert [r["category"] for r in res.json()] == ["Food", "Rent"]

    def test_list_empty(self, client, owner, family, headers_for, resource):
        res = client.get(f"/api/{resource}/family/{family.id}", headers=headers_for(owner))
        assert res.status_code == 200
        assert res.json() == []

    def test_list_forbidden(self, client, stranger, family, headers_for, resource):
        res = client.get(f"/api/{resource}/family/{family.id}", headers=headers_for(stranger))
        assert res.status_code == 403

    def test_list_invalid_family_id(self, client, owner, headers_for, resource):
        res = client.get(f"/api/{resource}/family/abc", headers=headers_for(owner))
        assert res.status_code == 400
        assert "family_id" in res.json()["errors"]

    def test_get(self, client, owner, family, headers_for, resource):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.get(f"/api/{resource}/{created['id']}", headers=headers)
        assert res.status_code == 200
        assert res.json() == created

    def test_get_missing(self, client, owner, headers_for, resource):
        res = client.get(f"/api/{resource}/9999", headers=headers_for(owner))
        assert res.status_code == 404
        assert res.json()["status"] == "error"

    def test_get_invalid_id(self, client, owner, headers_for, resource):
        assert client.get(f"/api/{resource}/0", headers=headers_for(owner)).status_code == 400
        assert client.get(f"/api/{resource}/abc", headers=headers_for(owner)).status_code == 400

    def test_get_forbidden(self, client, owner, stranger, family, headers_for, resource):
        created = self.create(client, family, headers_for(owner), resource)
        res = client.get(f"/api/{resource}/{created['id']}", headers=headers_for(stranger))
        assert res.status_code == 403

    def test_update_partial(self, client, owner, family, headers_for, resource):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.put(f"/api/{resource}/{created['id']}", json={"value": 750}, headers=headers)
        assert res.status_code == 200
        body = res.json()
        assert body["value"] == 750
        assert body["category"] == created["category"]
        assert body["date"] == created["date"]

    def test_update_all_fields(self, client, owner, family, headers_for, resource):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.put(
            f"/api/{resource}/{created['id']}",
            json={"category": "Housing", "value": 2000, "date": "2025-02-01"},
            headers=headers,
        )
        assert res.status_code == 200
        assert res.json()["category"] == "Housing"
        assert res.json()["value"] == 2000
        assert res.json()["date"].startswith("2025-02-01")

    @pytest.mark.parametrize("value", [-1, True, "750", 2**31])
    def test_update_invalid(self, client, owner, family, headers_for, resource, value):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.put(f"/api/{resource}/{created['id']}", json={"value": value}, headers=headers)
        assert res.status_code == 400
        assert client.get(f"/api/{resource}/{created['id']}", headers=headers).json()["value"] == 500

    def test_update_missing(self, client, owner, headers_for, resource):
        res = client.put(f"/api/{resource}/9999", json={"value": 1}, headers=headers_for(owner))
        assert res.status_code == 404

    def test_update_forbidden(self, client, owner, stranger, family, headers_for, resource):
        created = self.create(client, family, headers_for(owner), resource)
        res = client.put(f"/api/{resource}/{created['id']}", json={"value": 1}, headers=headers_for(stranger))
        assert res.status_code == 403

    def test_move_to_foreign_family_forbidden(
        self, client, owner, stranger, family, make_family, headers_for, resource
    ):
        foreign = make_family(stranger, name="Stranger Family")
        created = self.create(client, family, headers_for(owner), resource)
        res = client.put(
            f"/api/{resource}/{created['id']}",
            json={"familyId": foreign.id},
            headers=headers_for(owner),
        )
        assert res.status_code == 403

    def test_move_between_own_families(self, client, owner, family, make_family, headers_for, resource):
        second = make_family(owner, name="Second")
        created = self.create(client, family, headers_for(owner), resource)
        res = client.put(
            f"/api/{resource}/{created['id']}",
            json={"familyId": second.id},
            headers=headers_for(owner),
        )
        assert res.status_code == 200
        assert res.json()["familyId"] == second.id

    def test_delete_then_get(self, client, owner, family, headers_for, resource):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.delete(f"/api/{resource}/{created['id']}", headers=headers)
        assert res.status_code == 200
        assert "deleted" in res.json()["message"]
        assert client.get(f"/api/{resource}/{created['id']}", headers=headers).status_code == 404

    def test_delete_missing(self, client, owner, headers_for, resource):
        assert client.delete(f"/api/{resource}/9999", headers=headers_for(owner)).status_code == 404

    def test_delete_forbidden(self, client, owner, stranger, family, headers_for, resource):
        headers = headers_for(owner)
        created = self.create(client, family, headers, resource)
        res = client.delete(f"/api/{resource}/{created['id']}", headers=headers_for(stranger))
        assert res.status_code == 403
        assert client.get(f"/api/{resource}/{created['id']}", headers=headers).status_code == 200

    def test_admin_full_access(self, client, owner, admin, family, headers_for, resource):
        created = self.create(client, family, headers_for(owner), resource)
        headers = headers_for(admin)
        assert client.get(f"/api/{resource}/family/{family.id}", headers=headers).status_code == 200
        assert client.get(f"/api/{resource}/{created['id']}", headers=headers).status_code == 200
        assert client.put(f"/api/{resource}/{created['id']}", json={"value": 9}, headers=headers).status_code == 200
        assert client.delete(f"/api/{resource}/{created['id']}", headers=headers).status_code == 200


def test_budgets_and_expenses_are_separate(client, owner, family, headers_for):
    headers = headers_for(owner)
    client.post("/api/budgets", json=payload(family), headers=headers)
    res = client.get(f"/api/expenses/family/{family.id}", headers=headers)
    assert res.json() == []


def test_registered_user_refused_on_foreign_family(client, make_user, make_family):
    """Registered user is refused on a family administered by someone else."""
    other = make_user(email="someone@example.com")
    family = make_family(other)

    res = client.post("/api/auth/register", json={"name": "Ana", "email": "ana@x.com", "password": "password1"})
    assert res.status_code == 201
    res = client.post("/api/auth/login", json={"email": "ana@x.com", "password": "password1"})
    assert res.status_code == 200
    token = res.json()["token"]

    res = client.post(
        "/api/budgets",
        json={"category": "Alimentação", "value": 500, "date": "2025-01-01", "familyId": family.id},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 403
