# fleetrecon/tests/test_routers.py

from decimal import Decimal
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from fleetrecon.tests.conftest import (
    SESSION_ID, UBER_PAYMENTS_HEADER, UBER_TRIPS_HEADER, build_csv, uber_trip_rows,
)


def upload(client, *files):
    return client.post(
        "/ingest/upload",
        files=[("files", (name, content, "text/csv")) for name, content in files],
    )


def bonus_files():
    trips = build_csv(UBER_TRIPS_HEADER, uber_trip_rows(700))
    payments = build_csv(UBER_PAYMENTS_HEADER, [
        ["Muster Taxi GmbH", "", "Max", "Mustermann", "2024-06-30 12:00:00",
         "Prämie 700 Fahrten B-MU 1234", "300,00", "", "", ""],
        ["Muster Taxi GmbH", "uuid-1", "Max", "Mustermann", "2024-06-01 08:20:00",
         "Fahrt", "12,50", "2024-06-01 08:00:00", "2024-06-01 08:20:00", "5,2"],
    ])
    return ("trips.csv", trips), ("payments.csv", payments)


class TestSessionHeader:

    def test_missing_header(self, client):
        """Test every session scoped route requires X-Session-Id"""
        response = client.get("/sessions/current", headers={"X-Session-Id": ""})

        assert response.status_code == 400

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestIngestRouter:

    def test_upload(self, client):
        response = upload(client, *bonus_files())

        assert response.status_code == 200
        body = response.json()
        assert body["trips_added"] == 700
        assert body["transactions_added"] == 2
        assert body["company_name"] == "Muster Taxi GmbH"
        assert body["date_range"]["min_date"].startswith("2024-06-01T08:00")
        assert [entry["file_type"] for entry in body["files"]] == ["trips", "payments"]
        assert body["platform_totals"] == {"uber": {"trips": 700, "transactions": 2}}
        assert body["files"][1]["company_name"] == "Muster Taxi GmbH"
        assert body["files"][0]["date_range"]["min_date"].startswith("2024-06-01T08:00")

    def test_upload_without_files(self, client):
        response = client.post("/ingest/upload")

        assert response.status_code == 400

    def test_upload_reports_unclassified(self, client):
        response = upload(client, ("notes.csv", b"foo;bar\n"))

        assert response.status_code == 200
        assert response.json()["unclassified_files"] == 1

    def test_failed_ingest_hides_database_error(self, client):
        """Test a store error is reported by file name without SQL or row values"""
        error = OperationalError(
            "INSERT INTO trips (driver_name) VALUES (?)", [("Max Mustermann",)], Exception("disk I/O error")
        )
        with patch(
            "fleetrecon.ingest.services.RecordRepository.insert_trips", side_effect=error
        ):
            response = upload(client, *bonus_files())

        assert response.status_code == 500
        body = response.json()
        assert "trips.csv" in body["detail"]
        assert body["filename"] == "trips.csv"
        for leaked in ("INSERT", "Mustermann", "disk I/O", "OperationalError"):
            assert leaked not in body["detail"]

    def test_reprocess_is_queued(self, client):
        """Test reprocessing is handed to the worker"""
        task = MagicMock(id="task-1")
        with patch("fleetrecon.ingest.router.reprocess_session_task") as mock_task:
            mock_task.delay.return_value = task
            response = client.post("/ingest/reprocess")

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-1"
        mock_task.delay.assert_called_once_with(SESSION_ID)


class TestUploadsAndSessions:

    def test_list_and_download(self, client):
        upload(client, ("notes.csv", b"foo;bar\n1;2\n"))

        listing = client.get("/uploads").json()
        assert len(listing) == 1
        assert listing[0]["file_type"] == "other"

        download = client.get(f"/uploads/{listing[0]['id']}/download")
        assert download.status_code == 200
        assert download.content == b"foo;bar\n1;2\n"

    def test_download_other_session(self, client):
        upload(client, ("notes.csv", b"foo;bar\n"))
        upload_id = client.get("/uploads").json()[0]["id"]

        response = client.get(f"/uploads/{upload_id}/download", headers={"X-Session-Id": "someone-else"})

        assert response.status_code == 404

    def test_reset(self, client):
        upload(client, *bonus_files())

        response = client.post("/sessions/reset")

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "trips_deleted": 700,
            "transactions_deleted": 2,
            "uploads_deleted": 2,
        }
        current = client.get("/sessions/current").json()
        assert current["current_step"] == 1
        assert current["company_name"] is None


class TestReconciliationRouter:

    def test_summaries(self, client):
        upload(client, *bonus_files())

        body = client.get("/reconciliation/summaries").json()

        assert body[0]["license_plate"] == "B-MU1234"
        june = body[0]["stats"]["2024-06"]
        assert june["count"] == 700
        assert Decimal(str(june["bonus"])) == Decimal("400")
        assert Decimal(str(june["paid_amount"])) == Decimal("300")
        assert Decimal(str(june["difference"])) == Decimal("100")

    def test_promo_export(self, client):
        upload(client, *bonus_files())

        response = client.get("/reconciliation/promo/export", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "B-MU1234" in response.content.decode("utf-8-sig")

    def test_promo_export_bad_format(self, client):
        response = client.get("/reconciliation/promo/export", params={"format": "pdf"})

        assert response.status_code == 400


class TestPerformanceRouter:

    def test_kpis(self, client):
        upload(client, *bonus_files())

        response = client.get("/performance/kpis")

        assert response.status_code == 200
        assert response.json()["totals"]["revenue"] == 1250
        assert response.json()["totals"]["trip_count"] == 1

    def test_inverted_range(self, client):
        response = client.get(
            "/performance/kpis", params={"start_date": "2024-06-05", "end_date": "2024-06-01"}
        )

        assert response.status_code == 400
