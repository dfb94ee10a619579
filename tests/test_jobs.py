"""
Test suite for job endpoints.

Tests cover:
- Job creation
- Job retrieval
- Merge updates and the upsert policy
- Deletion
- Payload and identifier validation
"""

import uuid

import pytest

from app.core.config import settings
from app.models.job import Job


class TestJobCreation:
    """Tests for POST /job"""

    def test_create_job_success(self, client, sample_job_data):
        """Test successful job creation"""
        response = client.post("/job", json=sample_job_data)

        assert response.status_code == 201
        data = response.json()
        assert data["acknowledged"] is True
        uuid.UUID(data["insertedId"])

    def test_created_job_round_trips(self, client, sample_job_data, create_job):
        """A fetched job equals the posted job plus its identifier"""
        job_id = create_job()

        data = client.get(f"/job/{job_id}").json()

        assert data["_id"] == job_id
        for field in ("title", "category", "deadline", "description", "min_price", "max_price"):
            assert data[field] == sample_job_data[field]
        assert data["buyer"]["email"] == sample_job_data["buyer"]["email"]
        assert data["buyer"]["name"] == sample_job_data["buyer"]["name"]

    def test_extra_posting_fields_are_kept(self, client, create_job):
        """Fields without a dedicated column are stored and returned"""
        job_id = create_job(skills=["python", "sql"], remote=True)

        data = client.get(f"/job/{job_id}").json()

        assert data["skills"] == ["python", "sql"]
        assert data["remote"] is True

    def test_client_supplied_id_is_not_stored(self, client, create_job):
        job_id = create_job(id="spoof")

        data = client.get(f"/job/{job_id}").json()

        assert data["_id"] == job_id
        assert "id" not in data

    def test_job_title_alias(self, client, sample_job_data):
        """The web client's job_title field is accepted as the title"""
        payload = {k: v for k, v in sample_job_data.items() if k != "title"}
        payload["job_title"] = "Logo Designer"

        job_id = client.post("/job", json=payload).json()["insertedId"]

        data = client.get(f"/job/{job_id}").json()
        assert data["title"] == "Logo Designer"
        assert "job_title" not in data

    def test_iso_timestamp_deadline(self, client, create_job):
        """A full timestamp is stored as its calendar date"""
        job_id = create_job(deadline="2030-01-15T18:30:00.000Z")

        assert client.get(f"/job/{job_id}").json()["deadline"] == "2030-01-15"

    def test_create_job_missing_title(self, client, sample_job_data):
        """Test job creation with missing required fields"""
        del sample_job_data["title"]

        response = client.post("/job", json=sample_job_data)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"

    def test_create_job_missing_buyer(self, client, sample_job_data):
        del sample_job_data["buyer"]

        response = client.post("/job", json=sample_job_data)

        assert response.status_code == 400

    def test_create_job_inverted_price_range(self, client, sample_job_data):
        response = client.post("/job", json={**sample_job_data, "min_price": 2000, "max_price": 100})

        assert response.status_code == 400


class TestJobRetrieval:
    """Tests for job retrieval endpoints"""

    def test_get_nonexistent_job(self, client):
        """Test retrieving a job that doesn't exist"""
        response = client.get(f"/job/{uuid.uuid4()}")

        assert response.status_code == 404
        assert "not found" in response.json()["message"].lower()

    def test_get_job_malformed_id(self, client):
        """A malformed identifier is a client error, not a server fault"""
        response = client.get("/job/not-an-id")

        assert response.status_code == 400
        assert "not a valid identifier" in response.json()["message"]

    def test_list_jobs(self, client, create_job):
        """Test listing all jobs"""
        for i in range(3):
            create_job(title=f"Job {i}")

        response = client.get("/jobs")

        assert response.status_code == 200
        data = response.json()
        assert isinstance(data, list)
        assert [job["title"] for job in data] == ["Job 0", "Job 1", "Job 2"]


class TestJobUpdate:
    """Tests for PUT /job/{id}"""

    def test_update_merges_fields(self, client, create_job, sample_job_data):
        job_id = create_job()

        response = client.put(f"/job/{job_id}", json={"title": "Staff Python Developer", "urgent": True})

        assert response.status_code == 200
        assert response.json()["matchedCount"] == 1
        assert response.json()["modifiedCount"] == 1

        data = client.get(f"/job/{job_id}").json()
        assert data["title"] == "Staff Python Developer"
        assert data["urgent"] is True
        # Untouched fields survive the merge
        assert data["category"] == sample_job_data["category"]
        assert data["buyer"]["email"] == sample_job_data["buyer"]["email"]

    def test_update_with_same_values_is_not_a_modification(self, client, create_job, sample_job_data):
        job_id = create_job()

        response = client.put(f"/job/{job_id}", json={"title": sample_job_data["title"]})

        assert response.json()["matchedCount"] == 1
        assert response.json()["modifiedCount"] == 0

    def test_update_buyer_changes_owner(self, client, login, create_job):
        job_id = create_job()

        client.put(f"/job/{job_id}", json={"buyer": {"email": "carol@example.com"}})

        login("carol@example.com")
        data = client.get("/jobs/carol@example.com").json()
        assert [job["_id"] for job in data] == [job_id]

    def test_update_nonexistent_job_is_not_found_by_default(self, client, db_session):
        """Default policy: updating a missing job does not create it"""
        missing_id = str(uuid.uuid4())

        response = client.put(f"/job/{missing_id}", json={"title": "X"})

        assert response.status_code == 404
        assert db_session.query(Job).count() == 0

    def test_update_nonexistent_job_upserts_when_enabled(self, client, monkeypatch, sample_job_data):
        """Upsert policy: the missing job is created under the requested id"""
        monkeypatch.setattr(settings, "JOB_UPDATE_UPSERT", True)
        missing_id = str(uuid.uuid4())

        response = client.put(f"/job/{missing_id}", json={**sample_job_data, "title": "X"})

        assert response.status_code == 200
        assert response.json()["matchedCount"] == 0
        assert response.json()["upsertedId"] == missing_id
        assert client.get(f"/job/{missing_id}").json()["title"] == "X"

    def test_upsert_requires_a_complete_job(self, client, monkeypatch):
        """An upsert cannot create a job without a buyer"""
        monkeypatch.setattr(settings, "JOB_UPDATE_UPSERT", True)

        response = client.put(f"/job/{uuid.uuid4()}", json={"title": "X"})

        assert response.status_code == 400

    def test_update_malformed_id(self, client):
        response = client.put("/job/12345", json={"title": "X"})

        assert response.status_code == 400

    def test_update_rejects_empty_title(self, client, create_job):
        job_id = create_job()

        response = client.put(f"/job/{job_id}", json={"title": ""})

        assert response.status_code == 400

    def test_update_rejects_null_title(self, client, create_job, sample_job_data):
        job_id = create_job()

        response = client.put(f"/job/{job_id}", json={"title": None})

        assert response.status_code == 400
        assert client.get(f"/job/{job_id}").json()["title"] == sample_job_data["title"]

    def test_update_rejects_null_buyer(self, client, login, create_job):
        """The owner cannot be erased by a merge"""
        job_id = create_job()

        response = client.put(f"/job/{job_id}", json={"buyer": None})

        assert response.status_code == 400
        login("alice@example.com")
        data = client.get("/jobs/alice@example.com").json()
        assert [job["_id"] for job in data] == [job_id]

    def test_update_rejects_inverted_merged_price_range(self, client, create_job):
        """min_price is checked against the stored max_price"""
        job_id = create_job(min_price=500, max_price=1500)

        response = client.put(f"/job/{job_id}", json={"min_price": 2000, "note": "raised"})

        assert response.status_code == 400
        assert response.json()["message"] == "min_price cannot exceed max_price"
        data = client.get(f"/job/{job_id}").json()
        assert data["min_price"] == 500
        assert "note" not in data

    def test_update_can_widen_the_range(self, client, create_job):
        job_id = create_job(min_price=500, max_price=1500)

        response = client.put(f"/job/{job_id}", json={"min_price": 2000, "max_price": 3000})

        assert response.status_code == 200
        assert client.get(f"/job/{job_id}").json()["min_price"] == 2000

    def test_update_ignores_reserved_keys(self, client, create_job):
        job_id = create_job()

        client.put(f"/job/{job_id}", json={"id": "spoof", "created_at": "1999-01-01T00:00:00Z"})

        data = client.get(f"/job/{job_id}").json()
        assert data["_id"] == job_id
        assert "id" not in data
        assert not data["created_at"].startswith("1999")


class TestJobDeletion:
    """Tests for job deletion"""

    def test_delete_job(self, client, create_job):
        """Test deleting a job"""
        job_id = create_job()

        response = client.delete(f"/job/{job_id}")
        assert response.status_code == 200
        assert response.json() == {"acknowledged": True, "deletedCount": 1}

        # Verify it's gone
        get_response = client.get(f"/job/{job_id}")
        assert get_response.status_code == 404

    def test_delete_nonexistent_job(self, client):
        """Test deleting a job that doesn't exist"""
        response = client.delete(f"/job/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_delete_keeps_bids(self, client, login, create_job, sample_bid_data):
        """Deleting a job does not cascade to its bids"""
        job_id = create_job()
        client.post("/bid", json={**sample_bid_data, "jobId": job_id})

        client.delete(f"/job/{job_id}")

        login("bob@example.com")
        bids = client.get("/my-bids/bob@example.com").json()
        assert [bid["jobId"] for bid in bids] == [job_id]

    @pytest.mark.parametrize("bad_id", ["abc", "0000", "64b7f0c2e4b0a1a2b3c4d5e6"])
    def test_delete_malformed_id(self, client, bad_id):
        response = client.delete(f"/job/{bad_id}")

        assert response.status_code == 400
