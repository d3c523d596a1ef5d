"""
Smoke Test for the Task Manager API - Ownership Isolation & Admin Override

Tests:
1. Owner creates a project and a task
2. Another user cannot see, update or delete the owner's project (403)
3. Another user cannot add a task to the owner's project (403)
4. Admin sees and updates every project
5. Task status can be patched and a task cannot be reached through a
   different project (404)
6. Deleting a project removes its tasks

Run: python smoke_test_api.py [BASE_URL]

Requirements:
- Backend running on localhost:8000 in dev token mode (no Cognito), with
  the same SECRET_KEY as this script
"""

import os
import sys
from typing import Dict, List, Optional, Tuple

import jwt
import requests

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me-before-deploying")  # must match the server


class SmokeReport:
    """Collects (ok, check name) outcomes and prints each one as it lands."""

    def __init__(self):
        self.outcomes: List[Tuple[bool, str]] = []

    def record(self, ok: bool, name: str, detail: str = "") -> bool:
        self.outcomes.append((ok, name))
        line = f"{'✅ PASS' if ok else '❌ FAIL'}: {name}"
        print(f"{line}  ({detail})" if detail else line)
        return ok

    def add_pass(self, name: str, detail: str = "") -> bool:
        return self.record(True, name, detail)

    def add_fail(self, name: str, detail: str = "") -> bool:
        return self.record(False, name, detail)

    def check(self, name: str, resp: requests.Response, expected: int) -> bool:
        got = resp.status_code
        if got == expected:
            return self.record(True, name, f"{resp.request.method} {resp.request.path_url} -> {got}")
        return self.record(False, name, f"wanted {expected}, got {got}: {resp.text[:200]}")

    def summary(self) -> bool:
        failed = [name for ok, name in self.outcomes if not ok]
        print(f"\nSMOKE TEST: {len(self.outcomes) - len(failed)}/{len(self.outcomes)} checks passed")
        for name in failed:
            print(f"  failed: {name}")
        return not failed


def headers_for(username: str, groups: Optional[List[str]] = None) -> Dict[str, str]:
    """Mint a dev token with Cognito-style claims."""
    claims = {"username": username}
    if groups:
        claims["cognito:groups"] = groups
    token = jwt.encode(claims, SECRET_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def main():
    result = SmokeReport()

    owner = headers_for("smoke_owner")
    other = headers_for("smoke_other")
    admin = headers_for("smoke_admin", ["admin"])

    print("="*60)
    print("SMOKE TEST: Task Manager API - Ownership & Admin Override")
    print("="*60)
    print()

    # Test 1: Owner creates a project and a task
    print("📋 TEST 1: Owner creates a project and a task")
    print("-"*60)

    resp = requests.post(f"{BASE_URL}/projects", json={"name": "Smoke Project", "description": "smoke"}, headers=owner)
    result.check("Create project", resp, 201)
    if resp.status_code != 201:
        result.summary()
        return 1
    project_id = resp.json()["id"]

    resp = requests.post(
        f"{BASE_URL}/projects/{project_id}/tasks",
        json={"name": "Smoke Task", "description": "", "status": "Todo"},
        headers=owner,
    )
    result.check("Create task", resp, 200)
    if resp.status_code != 200:
        result.summary()
        return 1
    task_id = resp.json()["id"]
    print()

    # Test 2: Other user is isolated from the owner's project
    print("📋 TEST 2: Ownership isolation")
    print("-"*60)

    resp = requests.get(f"{BASE_URL}/projects", params={"pageSize": 1000}, headers=other)
    if resp.status_code == 200 and all(p["id"] != project_id for p in resp.json()):
        result.add_pass("Isolation - List", "Other user cannot see the owner's project")
    else:
        result.add_fail("Isolation - List", f"Status {resp.status_code}, project visible or listing failed")

    result.check("Isolation - Update", requests.put(f"{BASE_URL}/projects/{project_id}", json={"name": "hijack"}, headers=other), 403)
    result.check("Isolation - Delete", requests.delete(f"{BASE_URL}/projects/{project_id}", headers=other), 403)
    print()

    # Test 3: Other user cannot add tasks
    print("📋 TEST 3: Task creation requires ownership")
    print("-"*60)
    result.check(
        "Isolation - Add task",
        requests.post(f"{BASE_URL}/projects/{project_id}/tasks", json={"name": "x", "status": "Todo"}, headers=other),
        403,
    )
    print()

    # Test 4: Admin override
    print("📋 TEST 4: Admin override")
    print("-"*60)

    resp = requests.get(f"{BASE_URL}/projects", params={"pageSize": 1000}, headers=admin)
    if resp.status_code == 200 and any(p["id"] == project_id for p in resp.json()):
        result.add_pass("Admin - List", "Admin sees the owner's project")
    else:
        result.add_fail("Admin - List", f"Status {resp.status_code}, project missing from admin listing")

    result.check(
        "Admin - Update",
        requests.put(f"{BASE_URL}/projects/{project_id}", json={"name": "Smoke Project (admin)"}, headers=admin),
        200,
    )
    print()

    # Test 5: Status patch and composite addressing
    print("📋 TEST 5: Task status and project scoping")
    print("-"*60)

    resp = requests.patch(f"{BASE_URL}/projects/{project_id}/tasks/{task_id}/status", params={"status": "Done"}, headers=owner)
    result.check("Status - Patch", resp, 200)

    resp = requests.post(f"{BASE_URL}/projects", json={"name": "Smoke Other Project"}, headers=owner)
    other_project_id = resp.json().get("id") if resp.status_code == 201 else None
    if other_project_id:
        result.check(
            "Scoping - Wrong project",
            requests.delete(f"{BASE_URL}/projects/{other_project_id}/tasks/{task_id}", headers=owner),
            404,
        )
        requests.delete(f"{BASE_URL}/projects/{other_project_id}", headers=owner)
    else:
        result.add_fail("Scoping - Setup", "Failed to create second project")
    print()

    # Test 6: Cascade delete
    print("📋 TEST 6: Project delete removes tasks")
    print("-"*60)

    result.check("Delete project", requests.delete(f"{BASE_URL}/projects/{project_id}", headers=owner), 204)
    resp = requests.get(f"{BASE_URL}/projects/{project_id}/tasks", headers=admin)
    if resp.status_code == 200 and resp.json() == []:
        result.add_pass("Cascade", "No tasks left for the deleted project")
    else:
        result.add_fail("Cascade", f"Status {resp.status_code}, body {resp.text[:200]}")
    print()

    # Summary
    success = result.summary()
    return 0 if success else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nTest interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\n\n❌ ERROR: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
