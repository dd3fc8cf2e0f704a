import unittest
from datetime import date
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient

from main import app
from core.clock import get_today
from core.database import get_db
from employee.schema import LeaveBalanceSchema


def _employee(**overrides):
    base = dict(
        id=1,
        name="Kalli",
        department="Engineering",
        role="Developer",
        email="kalli@acme.com",
        phone=None,
        annual_leave_entitlement=25,
        current_status="available",
        current_leave=None,
        created_at=None,
        leave_records=[],
    )
    base.update(overrides)
    return Obj(**base)


def _leave(start, end, *, id=5, type="ANNUAL", status="APPROVED"):
    return Obj(
        id=id, employee_id=1, start_date=start, end_date=end,
        total_days=(end - start).days + 1, working_days=5, type=type, status=status,
        year=start.year, notes=None, bonus=None, created_at=None, updated_at=None, employee=None,
    )


class EmployeeRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_today] = lambda: date(2024, 6, 12)

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_today, None)

    # --- LIST ---

    @patch("employee.router.service.get_employees")
    def test_list_employees(self, mock_get):
        mock_get.return_value = [_employee()]
        resp = self.client.get("/api/employees")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()[0]["email"], "kalli@acme.com")
        self.assertIsNone(resp.json()[0]["current_leave"])

    @patch("employee.router.service.get_employees")
    def test_list_employees_filters(self, mock_get):
        mock_get.return_value = []
        resp = self.client.get("/api/employees?department=Engineering&current_status=on_leave")
        self.assertEqual(resp.status_code, 200)
        kwargs = mock_get.call_args.kwargs
        self.assertEqual(kwargs["department"], "Engineering")
        self.assertEqual(kwargs["current_status"].value, "on_leave")

    # --- CREATE ---

    @patch("employee.router.service.create_employee")
    def test_create_employee_201(self, mock_create):
        mock_create.return_value = _employee(id=10, name="Jonas", email="jonas@acme.com")
        resp = self.client.post("/api/employees", json={
            "name": "Jonas", "department": "Engineering", "role": "Developer", "email": "jonas@acme.com",
        })
        self.assertEqual(resp.status_code, 201, resp.text)

    def test_create_employee_422_if_client_sends_status(self):
        # availability is derived, never accepted from clients
        resp = self.client.post("/api/employees", json={
            "name": "Jonas", "department": "Engineering", "role": "Developer",
            "email": "jonas@acme.com", "current_status": "on_leave",
        })
        self.assertEqual(resp.status_code, 422)

    def test_create_employee_422_bad_email(self):
        resp = self.client.post("/api/employees", json={
            "name": "Jonas", "department": "Engineering", "role": "Developer", "email": "nope",
        })
        self.assertEqual(resp.status_code, 422)

    @patch("employee.router.service.create_employee")
    def test_create_employee_409_duplicate_email(self, mock_create):
        from sqlalchemy.exc import IntegrityError
        mock_create.side_effect = IntegrityError("stmt", "params", Exception("dup"))

        resp = self.client.post("/api/employees", json={
            "name": "Jonas", "department": "Engineering", "role": "Developer", "email": "kalli@acme.com",
        })
        self.assertEqual(resp.status_code, 409, resp.text)
        self.assertEqual(resp.json()["detail"], "employee with this email already exists")

    # --- GET /{id} ---

    @patch("employee.router.service.get_leave_balance")
    @patch("employee.router.service.get_employee")
    def test_get_employee_detail_with_balance(self, mock_get, mock_balance):
        leave = _leave(date(2024, 6, 10), date(2024, 6, 20))
        mock_get.return_value = _employee(
            current_status="on_leave",
            current_leave={"start_date": date(2024, 6, 10), "end_date": date(2024, 6, 20), "type": "ANNUAL"},
            leave_records=[leave],
        )
        mock_balance.return_value = LeaveBalanceSchema(employee_id=1, year=2024, entitlement=25, used=6, remaining=19)

        resp = self.client.get("/api/employees/1")
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["current_leave"]["end_date"], "2024-06-20")
        self.assertEqual(body["balance"]["remaining"], 19)
        self.assertEqual(body["current_status"], "on_leave")
        self.assertEqual([r["id"] for r in body["leave_records"]], [leave.id])
        # year defaults to the injected today
        self.assertEqual(mock_balance.call_args.args[2], 2024)

    @patch("employee.router.service.get_leave_balance")
    @patch("employee.router.service.get_employee")
    def test_get_employee_detail_reports_status_as_of_today(self, mock_get, mock_balance):
        # stored snapshot still says on leave, but the leave ended yesterday
        mock_get.return_value = _employee(
            current_status="on_leave",
            current_leave={"start_date": date(2024, 6, 3), "end_date": date(2024, 6, 11), "type": "ANNUAL"},
            leave_records=[_leave(date(2024, 6, 3), date(2024, 6, 11))],
        )
        mock_balance.return_value = LeaveBalanceSchema(employee_id=1, year=2024, entitlement=25, used=7, remaining=18)

        body = self.client.get("/api/employees/1").json()
        self.assertEqual(body["current_status"], "available")
        self.assertIsNone(body["current_leave"])

    @patch("employee.router.service.get_leave_balance")
    @patch("employee.router.service.get_employee")
    def test_get_employee_detail_returning_soon_as_of_today(self, mock_get, mock_balance):
        # stored snapshot is stale: booked before the leave began
        mock_get.return_value = _employee(leave_records=[_leave(date(2024, 6, 10), date(2024, 6, 14), type="SICK")])
        mock_balance.return_value = LeaveBalanceSchema(employee_id=1, year=2024, entitlement=25, used=0, remaining=25)

        body = self.client.get("/api/employees/1").json()
        self.assertEqual(body["current_status"], "returning_soon")
        self.assertEqual(body["current_leave"], {"start_date": "2024-06-10", "end_date": "2024-06-14", "type": "SICK"})

    @patch("employee.router.service.get_leave_balance")
    @patch("employee.router.service.get_employee")
    def test_get_employee_detail_explicit_year(self, mock_get, mock_balance):
        mock_get.return_value = _employee()
        mock_balance.return_value = LeaveBalanceSchema(employee_id=1, year=2023, entitlement=25, used=0, remaining=25)
        resp = self.client.get("/api/employees/1?year=2023")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(mock_balance.call_args.args[2], 2023)

    @patch("employee.router.service.get_employee")
    def test_get_employee_404(self, mock_get):
        mock_get.return_value = None
        resp = self.client.get("/api/employees/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"]["error"], "not_found")

    @patch("employee.router.service.get_leave_balance")
    @patch("employee.router.service.get_employee")
    def test_get_balance(self, mock_get, mock_balance):
        mock_get.return_value = _employee()
        mock_balance.return_value = LeaveBalanceSchema(employee_id=1, year=2024, entitlement=25, used=11, remaining=14)
        resp = self.client.get("/api/employees/1/balance")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["remaining"], 14)

    # --- PATCH ---

    @patch("employee.router.service.update_employee")
    @patch("employee.router.service.get_employee")
    def test_patch_employee_200(self, mock_get, mock_update):
        mock_get.return_value = _employee()
        mock_update.return_value = _employee(role="Lead")
        resp = self.client.patch("/api/employees/1", json={"role": "Lead"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["role"], "Lead")

    @patch("employee.router.service.get_employee")
    def test_patch_employee_404(self, mock_get):
        mock_get.return_value = None
        resp = self.client.patch("/api/employees/1", json={"role": "Lead"})
        self.assertEqual(resp.status_code, 404)

    # --- DELETE ---

    @patch("employee.router.service.delete_employee")
    @patch("employee.router.service.get_employee")
    def test_delete_employee(self, mock_get, mock_delete):
        mock_get.return_value = _employee()
        mock_delete.return_value = True
        resp = self.client.delete("/api/employees/1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "employee deleted"})

    # --- REFRESH ---

    @patch("employee.router.refresh_all_availability")
    def test_refresh_availability(self, mock_refresh):
        mock_refresh.return_value = {"refreshed": 3, "changed": 1}
        resp = self.client.post("/api/employees/availability/refresh")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"refreshed": 3, "changed": 1})
        self.assertEqual(mock_refresh.call_args.args[1], date(2024, 6, 12))


if __name__ == "__main__":
    unittest.main()
