"""HTTP tests against a fresh in-memory SQLite database"""
API = "/api/v1"
ADMIN = {"X-Actor-Id": "admin-1"}


def _employee(client, name="Margaret Hamilton", email=None):
    response = client.post(f"{API}/employees/", json={
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@example.com",
        "department": "Apollo",
    })
    assert response.status_code == 201, response.text
    return response.json()


def _resource(client, **overrides):
    body = {"name": "Dell XPS", "type": "HARDWARE", "allocation_mode": "EXCLUSIVE"}
    body.update(overrides)
    response = client.post(f"{API}/resources/", json=body, headers=ADMIN)
    assert response.status_code == 201, response.text
    return response.json()


def _item(client, resource_id, serial_number):
    response = client.post(
        f"{API}/resources/items", json={"resource_id": resource_id, "serial_number": serial_number}, headers=ADMIN,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_employee_crud(client):
    created = _employee(client)

    assert client.get(f"{API}/employees/{created['id']}").json()["name"] == "Margaret Hamilton"
    assert len(client.get(f"{API}/employees/").json()) == 1
    assert client.get(f"{API}/employees/missing").status_code == 404

    duplicate = client.post(f"{API}/employees/", json={"name": "Other", "email": created["email"]})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["error_code"] == "DUPLICATE_EMAIL"


def test_invalid_email_is_rejected(client):
    response = client.post(f"{API}/employees/", json={"name": "Nobody", "email": "not-an-email"})
    assert response.status_code == 422


def test_exclusive_assignment_flow(client):
    employee = _employee(client)
    other = _employee(client, "Dorothy Vaughan")
    resource = _resource(client)
    item = _item(client, resource["id"], "XPS-001")

    created = client.post(f"{API}/assignments/", json={
        "resource_id": resource["id"], "employee_id": employee["id"], "item_id": item["id"],
    }, headers=ADMIN)
    assert created.status_code == 201, created.text
    assignment = created.json()["assignment"]
    assert assignment["assigned_by"] == "admin-1"
    assert assignment["assignment_type"] == "INDIVIDUAL"

    conflict = client.post(f"{API}/assignments/", json={
        "resource_id": resource["id"], "employee_id": other["id"], "item_id": item["id"],
    })
    assert conflict.status_code == 409
    assert conflict.json()["detail"]["error_code"] == "ITEM_ALREADY_ASSIGNED"

    assert client.get(f"{API}/resources/items/{item['id']}").json()["status"] == "ASSIGNED"
    assert client.get(f"{API}/resources/items/{item['id']}/can-assign").json()["can_assign"] is False

    returned = client.post(
        f"{API}/assignments/{assignment['id']}/return",
        json={"reason": "No longer needed", "condition": "GOOD"},
        headers=ADMIN,
    )
    assert returned.status_code == 200, returned.text
    assert returned.json()["assignment"]["status"] == "RETURNED"
    assert returned.json()["assignment"]["returned_at"] is not None
    assert client.get(f"{API}/resources/items/{item['id']}").json()["status"] == "AVAILABLE"

    again = client.patch(f"{API}/assignments/{assignment['id']}/status", json={"status": "LOST"})
    assert again.status_code == 409
    assert again.json()["detail"]["error_code"] == "INVALID_STATUS_TRANSITION"


def test_shared_capacity_over_http(client):
    resource = _resource(client, name="Zoom", type="SOFTWARE", allocation_mode="SHARED", quantity=2)
    employees = [_employee(client, f"User {n}") for n in range(3)]

    for employee in employees[:2]:
        response = client.post(f"{API}/assignments/", json={"resource_id": resource["id"], "employee_id": employee["id"]})
        assert response.status_code == 201, response.text

    full = client.post(f"{API}/assignments/", json={"resource_id": resource["id"], "employee_id": employees[2]["id"]})
    assert full.status_code == 409
    detail = full.json()["detail"]
    assert detail["error_code"] == "CAPACITY_REACHED"
    assert detail["current_assignments"] == 2
    assert detail["max_capacity"] == 2

    availability = client.get(f"{API}/resources/{resource['id']}/availability").json()
    assert availability["availability"] == {"capacity": 2, "used": 2, "available": 0, "unlimited": False}

    users = client.get(f"{API}/resources/{resource['id']}/users").json()
    assert {u["id"] for u in users} == {employees[0]["id"], employees[1]["id"]}

    shrink = client.put(f"{API}/resources/{resource['id']}", json={"quantity": 1})
    assert shrink.status_code == 409
    assert shrink.json()["detail"]["error_code"] == "CAPACITY_BELOW_ALLOCATED"


def test_validate_endpoint_reports_without_writing(client):
    resource = _resource(client)
    _item(client, resource["id"], "XPS-002")
    employee = _employee(client)

    response = client.post(f"{API}/assignments/validate", json={
        "resource_id": resource["id"], "employee_id": employee["id"],
    })

    assert response.status_code == 200
    assert response.json()["is_valid"] is False
    assert response.json()["error_code"] == "ITEM_REQUIRED"
    assert client.get(f"{API}/assignments/").json()["pagination"]["total"] == 0


def test_missing_resource_is_404(client):
    employee = _employee(client)
    response = client.post(f"{API}/assignments/", json={"resource_id": "missing", "employee_id": employee["id"]})
    assert response.status_code == 404
    assert response.json()["detail"]["error_code"] == "RESOURCE_NOT_FOUND"


def test_revoke_requires_reason(client):
    resource = _resource(client, name="Notion", type="CLOUD", allocation_mode="SHARED", quantity=-1)
    employee = _employee(client)
    created = client.post(f"{API}/assignments/", json={"resource_id": resource["id"], "employee_id": employee["id"]})
    assignment_id = created.json()["assignment"]["id"]

    missing_reason = client.post(f"{API}/assignments/{assignment_id}/revoke", json={})
    assert missing_reason.status_code == 400
    assert missing_reason.json()["detail"]["error_code"] == "REASON_REQUIRED"

    revoked = client.post(f"{API}/assignments/{assignment_id}/revoke", json={"reason": "Offboarding"}, headers=ADMIN)
    assert revoked.status_code == 200
    assert revoked.json()["assignment"]["return_reason"] == "Offboarding"


def test_items_require_exclusive_resource(client):
    resource = _resource(client, name="Miro", type="SOFTWARE", allocation_mode="SHARED", quantity=5)
    response = client.post(f"{API}/resources/items", json={"resource_id": resource["id"], "license_key": "K"})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "INVALID_ALLOCATION_MODE"


def test_item_listing_and_delete(client):
    resource = _resource(client)
    first = _item(client, resource["id"], "XPS-010")
    _item(client, resource["id"], "XPS-011")

    listing = client.get(f"{API}/resources/items", params={"resource_id": resource["id"], "search": "010"}).json()
    assert [i["id"] for i in listing["items"]] == [first["id"]]

    duplicate = client.post(f"{API}/resources/items", json={"resource_id": resource["id"], "serial_number": "XPS-010"})
    assert duplicate.status_code == 409

    assert client.delete(f"{API}/resources/items/{first['id']}").status_code == 204
    assert client.get(f"{API}/resources/items/{first['id']}").status_code == 404


def test_assignment_list_filters(client):
    resource = _resource(client, name="Figma", type="SOFTWARE", allocation_mode="SHARED", quantity=10)
    for n in range(3):
        employee = _employee(client, f"Designer {n}")
        client.post(f"{API}/assignments/", json={"resource_id": resource["id"], "employee_id": employee["id"]})

    page = client.get(f"{API}/assignments/", params={"resource_id": resource["id"], "limit": 2}).json()
    assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert client.get(f"{API}/assignments/", params={"status": "RETURNED"}).json()["pagination"]["total"] == 0


def test_approval_workflow_over_http(client):
    custodian = _employee(client, "Grace Hopper")
    employee = _employee(client)
    resource = _resource(client, name="ThinkPad X1", custodian_id=custodian["id"])
    item = _item(client, resource["id"], "X1-100")

    requested = client.post(f"{API}/approvals/", json={
        "resource_id": resource["id"], "employee_id": employee["id"], "item_id": item["id"],
        "justification": "New hire",
    }, headers={"X-Actor-Id": employee["id"]})
    assert requested.status_code == 201, requested.text
    approval = requested.json()["approval"]
    assert approval["status"] == "PENDING"
    assert approval["approver_id"] == custodian["id"]

    pending = client.get(f"{API}/approvals/", params={"approver_id": custodian["id"]}).json()
    assert [a["id"] for a in pending] == [approval["id"]]
    assert client.get(f"{API}/approvals/{approval['id']}").json()["justification"] == "New hire"
    assert client.get(f"{API}/approvals/missing").status_code == 404

    forbidden = client.post(
        f"{API}/approvals/{approval['id']}/decision",
        json={"action": "approve"},
        headers={"X-Actor-Id": employee["id"]},
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"]["error_code"] == "NOT_APPROVER"

    approved = client.post(
        f"{API}/approvals/{approval['id']}/decision",
        json={"action": "approve", "comments": "Welcome aboard"},
        headers={"X-Actor-Id": custodian["id"]},
    )
    assert approved.status_code == 200, approved.text
    body = approved.json()
    assert body["approval"]["status"] == "APPROVED"
    assert body["approval"]["assignment_id"] == body["assignment"]["id"]
    assert body["assignment"]["notes"] == f"Approved via workflow {approval['id']}. Welcome aboard"
    assert client.get(f"{API}/resources/items/{item['id']}").json()["status"] == "ASSIGNED"
    assert client.get(f"{API}/approvals/", params={"approver_id": custodian["id"]}).json() == []

    again = client.post(
        f"{API}/approvals/{approval['id']}/decision",
        json={"action": "reject"},
        headers={"X-Actor-Id": custodian["id"]},
    )
    assert again.status_code == 409
    assert again.json()["detail"]["error_code"] == "APPROVAL_NOT_PENDING"


def test_approval_request_needs_an_approver(client):
    employee = _employee(client)
    resource = _resource(client, name="Slack", type="SOFTWARE", allocation_mode="SHARED", quantity=-1)

    response = client.post(f"{API}/approvals/", json={"resource_id": resource["id"], "employee_id": employee["id"]})

    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "APPROVER_REQUIRED"


def test_rejected_approval_over_http(client):
    employee = _employee(client)
    resource = _resource(client, name="Jira", type="SOFTWARE", allocation_mode="SHARED", quantity=5)

    approval = client.post(f"{API}/approvals/", json={
        "resource_id": resource["id"], "employee_id": employee["id"], "approver_id": "mgr-1",
    }).json()["approval"]
    rejected = client.post(
        f"{API}/approvals/{approval['id']}/decision",
        json={"action": "reject", "comments": "Use the shared board"},
        headers={"X-Actor-Id": "mgr-1"},
    )

    assert rejected.status_code == 200, rejected.text
    assert rejected.json()["approval"]["status"] == "REJECTED"
    assert rejected.json()["assignment"] is None
    assert client.get(f"{API}/assignments/").json()["pagination"]["total"] == 0
