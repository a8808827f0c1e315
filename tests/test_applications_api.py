from conftest import RESUME, auth, run


def apply(client, user, job_id, **extra):
    body = {"job_id": job_id, "resume": RESUME}
    body.update(extra)
    return client.post("/api/applications", json=body, headers=auth(user))


class TestApply:
    def test_created(self, client, seeker, job, notifier):
        response = apply(client, seeker, job.id, cover_letter="I'd love to join")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "pending"
        assert body["data"]["cover_letter"] == "I'd love to join"
        assert body["data"]["job"]["title"] == job.title
        assert notifier.kinds() == ["application_received"]

    def test_duplicate(self, client, seeker, job):
        apply(client, seeker, job.id)

        response = apply(client, seeker, job.id)

        assert response.status_code == 409
        body = response.json()
        assert body["status"] == "fail"
        assert body["message"] == "You have already applied for this job"

    def test_reapply_after_withdraw_returns_200(self, client, seeker, job, jobs):
        first = apply(client, seeker, job.id).json()["data"]
        client.delete(f"/api/applications/{first['id']}", headers=auth(seeker))

        response = apply(client, seeker, job.id, cover_letter="Trying again")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "You have successfully re-applied for this job"
        assert body["data"]["id"] == first["id"]
        assert body["data"]["status"] == "pending"
        assert run(jobs.get(job.id)).applications_count == 1

    def test_recruiter_cannot_apply(self, client, recruiter, job):
        response = apply(client, recruiter, job.id)

        assert response.status_code == 403
        assert response.json()["message"] == "Role recruiter is not authorized to access this resource"

    def test_anonymous(self, client, job):
        response = client.post("/api/applications", json={"job_id": job.id, "resume": RESUME})

        assert response.status_code == 401
        assert response.json()["message"] == "You are not logged in! Please log in to get access."

    def test_invalid_job_id(self, client, seeker):
        response = apply(client, seeker, "not-an-id")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid job ID: not-an-id"

    def test_missing_resume(self, client, seeker, job):
        response = client.post(
            "/api/applications", json={"job_id": job.id, "resume": "  "}, headers=auth(seeker)
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Validation Error:")

    def test_cover_letter_too_long(self, client, seeker, job):
        response = apply(client, seeker, job.id, cover_letter="x" * 1001)
        assert response.status_code == 400

    def test_closed_job(self, client, seeker, make_job, recruiter, applications):
        closed = make_job(recruiter, is_active=False)

        response = apply(client, seeker, closed.id)

        assert response.status_code == 409
        assert response.json()["message"] == "Job is no longer accepting applications"
        assert applications.items == {}


class TestWithdraw:
    def test_withdraw(self, client, seeker, job, jobs):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.delete(f"/api/applications/{data['id']}", headers=auth(seeker))

        assert response.status_code == 200
        assert response.json()["message"] == "Application withdrawn successfully"
        assert run(jobs.get(job.id)).applications_count == 0

    def test_withdraw_someone_elses(self, client, make_user, seeker, job):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.delete(f"/api/applications/{data['id']}", headers=auth(make_user("job_seeker")))

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to withdraw this application"

    def test_withdraw_after_offer(self, client, seeker, recruiter, job):
        data = apply(client, seeker, job.id).json()["data"]
        client.patch(
            f"/api/applications/{data['id']}/status", json={"status": "offered"}, headers=auth(recruiter)
        )

        response = client.delete(f"/api/applications/{data['id']}", headers=auth(seeker))

        assert response.status_code == 409
        assert response.json()["message"] == "Cannot withdraw application in current status"

    def test_withdraw_unknown(self, client, seeker):
        response = client.delete("/api/applications/5f2b6c1e9d3a4b0012345678", headers=auth(seeker))
        assert response.status_code == 404


class TestStatusUpdate:
    def test_owner_updates(self, client, seeker, recruiter, job, notifier):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.patch(
            f"/api/applications/{data['id']}/status",
            json={"status": "interviewed", "feedback": "See you Tuesday"},
            headers=auth(recruiter),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Application status updated successfully"
        assert body["data"]["status"] == "interviewed"
        assert body["data"]["feedback"] == "See you Tuesday"
        assert body["data"]["reviewed_by"] == recruiter.id
        assert notifier.kinds()[-1] == "application_status"

    def test_invalid_status(self, client, seeker, recruiter, job):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.patch(
            f"/api/applications/{data['id']}/status", json={"status": "hired"}, headers=auth(recruiter)
        )

        assert response.status_code == 400

    def test_other_recruiter(self, client, make_user, seeker, job):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.patch(
            f"/api/applications/{data['id']}/status",
            json={"status": "rejected"},
            headers=auth(make_user("recruiter")),
        )

        assert response.status_code == 403

    def test_job_seeker_cannot_update(self, client, seeker, job):
        data = apply(client, seeker, job.id).json()["data"]

        response = client.patch(
            f"/api/applications/{data['id']}/status", json={"status": "offered"}, headers=auth(seeker)
        )

        assert response.status_code == 403


class TestListings:
    def test_my_applications(self, client, seeker, make_job, recruiter):
        for i in range(3):
            apply(client, seeker, make_job(recruiter, title=f"Role {i}").id)

        response = client.get("/api/applications/my-applications?page=2&limit=2", headers=auth(seeker))

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
        assert [a["job"]["title"] for a in body["data"]] == ["Role 0"]

    def test_my_applications_bad_status_filter(self, client, seeker):
        response = client.get("/api/applications/my-applications?status=hired", headers=auth(seeker))
        assert response.status_code == 400

    def test_limit_bounds(self, client, seeker):
        response = client.get("/api/applications/my-applications?limit=101", headers=auth(seeker))
        assert response.status_code == 400

    def test_job_applications_for_owner(self, client, make_user, recruiter, job):
        for _ in range(2):
            apply(client, make_user("job_seeker"), job.id)

        response = client.get(f"/api/applications/job/{job.id}", headers=auth(recruiter))

        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 2

    def test_job_applications_for_stranger(self, client, make_user, job):
        response = client.get(f"/api/applications/job/{job.id}", headers=auth(make_user("recruiter")))
        assert response.status_code == 403

    def test_stats(self, client, make_user, recruiter, job):
        for _ in range(3):
            apply(client, make_user("job_seeker"), job.id)

        response = client.get("/api/applications/stats", headers=auth(recruiter))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_applications"] == 3
        assert data["stats"] == [{"status": "pending", "count": 3}]
        assert len(data["recent_applications"]) == 3

    def test_stats_for_recruiter_without_jobs(self, client, make_user):
        response = client.get("/api/applications/stats", headers=auth(make_user("recruiter")))

        assert response.json()["data"] == {"stats": [], "total_applications": 0, "recent_applications": []}

    def test_all_applications_admin(self, client, seeker, admin, recruiter, job):
        apply(client, seeker, job.id)

        response = client.get("/api/applications", headers=auth(admin))
        assert response.status_code == 200
        assert response.json()["count"] == 1

        assert client.get("/api/applications", headers=auth(recruiter)).status_code == 403

    def test_details_visibility(self, client, make_user, seeker, recruiter, job):
        data = apply(client, seeker, job.id).json()["data"]
        url = f"/api/applications/{data['id']}"

        assert client.get(url, headers=auth(seeker)).status_code == 200
        assert client.get(url, headers=auth(recruiter)).status_code == 200
        assert client.get(url, headers=auth(make_user("job_seeker"))).status_code == 403
