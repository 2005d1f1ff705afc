"""
HTTP-level tests: routing, auth gates, status codes and response envelopes.

Business rules are covered by the service tests; these check that the
routes wire them up and that errors come back as
{"success": false, "error": ..., "request_id": ...}.
"""

import logging
import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest

from app.security import create_access_token
from app.services.file_service import file_service
from conftest import auth_header

BOOTCAMPS = "/api/v1/bootcamps"
COURSES = "/api/v1/courses"

NEW_BOOTCAMP = {
    "name": "ModernTech Bootcamp",
    "description": "ModernTech has one goal, and that is to make you a rockstar developer",
    "website": "https://moderntech.com",
    "phone": "(222) 222-2222",
    "email": "enroll@moderntech.com",
    "address": "233 Bay State Rd Boston MA 02215",
    "careers": ["Web Development", "UI/UX", "Mobile Development"],
    "housing": False,
    "job_assistance": True,
}

NEW_COURSE = {
    "title": "Front End Web Development",
    "description": "This course will provide you with all of the essentials",
    "weeks": "8",
    "tuition": 8000,
    "minimum_skill": "beginner",
}


def _assert_error(response, status_code, fragment=None):
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert "request_id" in body
    if fragment is not None:
        assert fragment in body["error"]


class TestBootcampRoutes:

    @pytest.mark.asyncio
    async def test_create_returns_201(self, test_client, publisher):
        response = await test_client.post(BOOTCAMPS, json=NEW_BOOTCAMP, headers=auth_header(publisher))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["slug"] == "moderntech-bootcamp"
        assert body["data"]["user_id"] == str(publisher.id)
        assert body["data"]["location"]["zipcode"] == "02215"
        assert "address" not in body["data"]

    @pytest.mark.asyncio
    async def test_create_without_token(self, test_client):
        response = await test_client.post(BOOTCAMPS, json=NEW_BOOTCAMP)
        _assert_error(response, 401, "Not authorized to access this route")

    @pytest.mark.asyncio
    async def test_create_with_expired_token(self, test_client, publisher):
        token = create_access_token(publisher.id, publisher.role, expires_delta=timedelta(minutes=-5))
        response = await test_client.post(
            BOOTCAMPS, json=NEW_BOOTCAMP, headers={"Authorization": f"Bearer {token}"}
        )
        _assert_error(response, 401)

    @pytest.mark.asyncio
    async def test_create_as_plain_user_is_forbidden(self, test_client, plain_user):
        response = await test_client.post(BOOTCAMPS, json=NEW_BOOTCAMP, headers=auth_header(plain_user))
        _assert_error(response, 403, "User role user is not authorized")

    @pytest.mark.asyncio
    async def test_create_with_invalid_body(self, test_client, publisher):
        body = dict(NEW_BOOTCAMP, careers=["Underwater Basket Weaving"], email="not-an-email")
        response = await test_client.post(BOOTCAMPS, json=body, headers=auth_header(publisher))
        _assert_error(response, 400, "careers")

    @pytest.mark.asyncio
    async def test_create_with_unresolvable_address(self, test_client, publisher):
        body = dict(NEW_BOOTCAMP, address="Nowhere at all")
        response = await test_client.post(BOOTCAMPS, json=body, headers=auth_header(publisher))
        _assert_error(response, 503, "Could not geocode")

    @pytest.mark.asyncio
    async def test_list_with_query(self, test_client, make_bootcamp):
        await make_bootcamp(name="Alpha", careers=["Business"])
        await make_bootcamp(name="Bravo", careers=["UI/UX"])
        await make_bootcamp(name="Charlie", careers=["Business", "UI/UX"])

        response = await test_client.get(
            BOOTCAMPS, params={"careers": "Business", "select": "name", "sort": "-name", "limit": "1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"] == [{"id": body["data"][0]["id"], "name": "Charlie"}]
        assert body["pagination"] == {"next": {"page": 2, "limit": 1}}

    @pytest.mark.asyncio
    async def test_list_with_bracket_operator(self, test_client, make_bootcamp):
        await make_bootcamp(name="Cheap", average_cost=5000)
        await make_bootcamp(name="Pricey", average_cost=15000)

        response = await test_client.get(f"{BOOTCAMPS}?average_cost[lte]=10000&select=name")

        assert [doc["name"] for doc in response.json()["data"]] == ["Cheap"]

    @pytest.mark.asyncio
    async def test_list_keeps_null_fields(self, test_client, make_bootcamp):
        await make_bootcamp()
        response = await test_client.get(BOOTCAMPS)
        doc = response.json()["data"][0]
        assert doc["average_cost"] is None
        assert doc["courses"] == []

    @pytest.mark.asyncio
    async def test_list_with_unknown_field(self, test_client):
        response = await test_client.get(BOOTCAMPS, params={"colour": "red"})
        _assert_error(response, 400, "Unknown field")

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, test_client):
        response = await test_client.get(f"{BOOTCAMPS}/not-a-valid-id")
        _assert_error(response, 404, "Bootcamp not found with id of not-a-valid-id")

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, test_client):
        response = await test_client.get(f"{BOOTCAMPS}/{uuid.uuid4()}")
        _assert_error(response, 404)

    @pytest.mark.asyncio
    async def test_update_by_non_owner(self, test_client, make_bootcamp, publisher, other_publisher):
        bootcamp = await make_bootcamp(user_id=publisher.id)
        response = await test_client.put(
            f"{BOOTCAMPS}/{bootcamp.id}", json={"housing": True}, headers=auth_header(other_publisher)
        )
        _assert_error(response, 403)

    @pytest.mark.asyncio
    async def test_delete_envelope(self, test_client, make_bootcamp, make_course, publisher):
        bootcamp = await make_bootcamp(user_id=publisher.id)
        await make_course(bootcamp)

        response = await test_client.delete(f"{BOOTCAMPS}/{bootcamp.id}", headers=auth_header(publisher))

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert (await test_client.get(f"{BOOTCAMPS}/{bootcamp.id}")).status_code == 404
        assert (await test_client.get(COURSES)).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_radius(self, test_client, make_bootcamp):
        await make_bootcamp(name="Nearby")
        response = await test_client.get(f"{BOOTCAMPS}/radius/02215/10")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert "pagination" not in body

    @pytest.mark.asyncio
    async def test_radius_unknown_zipcode(self, test_client):
        response = await test_client.get(f"{BOOTCAMPS}/radius/99999/10")
        _assert_error(response, 404, "No location found")

    @pytest.mark.asyncio
    async def test_radius_negative_distance(self, test_client):
        response = await test_client.get(f"{BOOTCAMPS}/radius/02215/-1")
        _assert_error(response, 400)


class TestPhotoRoutes:

    @pytest.mark.asyncio
    async def test_upload_without_file(self, test_client, make_bootcamp, publisher):
        bootcamp = await make_bootcamp(user_id=publisher.id)
        response = await test_client.put(f"{BOOTCAMPS}/{bootcamp.id}/photo", headers=auth_header(publisher))
        _assert_error(response, 400, "Please upload a file")

    @pytest.mark.asyncio
    async def test_upload_non_image(self, test_client, make_bootcamp, publisher):
        bootcamp = await make_bootcamp(user_id=publisher.id)
        response = await test_client.put(
            f"{BOOTCAMPS}/{bootcamp.id}/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_header(publisher),
        )
        _assert_error(response, 400, "Please upload an image file")

    @pytest.mark.asyncio
    async def test_upload_and_download(self, test_client, make_bootcamp, publisher, sample_image_bytes):
        bootcamp = await make_bootcamp(user_id=publisher.id)

        with patch.object(file_service, "detect_mime_type", return_value="image/jpeg"):
            response = await test_client.put(
                f"{BOOTCAMPS}/{bootcamp.id}/photo",
                files={"file": ("campus.jpg", sample_image_bytes, "image/jpeg")},
                headers=auth_header(publisher),
            )

        assert response.status_code == 200
        name = response.json()["data"]
        assert name == f"photo_{bootcamp.id}.jpg"

        download = await test_client.get(f"/uploads/{name}")
        assert download.status_code == 200
        assert download.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_download_missing(self, test_client):
        response = await test_client.get("/uploads/photo_nothing.jpg")
        _assert_error(response, 404, "File not found")


class TestCourseRoutes:

    @pytest.mark.asyncio
    async def test_add_course_and_average_cost(self, test_client, make_bootcamp, publisher):
        bootcamp = await make_bootcamp(user_id=publisher.id)

        response = await test_client.post(
            f"{BOOTCAMPS}/{bootcamp.id}/courses",
            json=dict(NEW_COURSE, tuition=1000),
            headers=auth_header(publisher),
        )

        assert response.status_code == 201
        assert response.json()["data"]["bootcamp_id"] == str(bootcamp.id)
        refreshed = (await test_client.get(f"{BOOTCAMPS}/{bootcamp.id}")).json()["data"]
        assert refreshed["average_cost"] == 1000

    @pytest.mark.asyncio
    async def test_add_course_to_foreign_bootcamp(
        self, test_client, make_bootcamp, publisher, other_publisher
    ):
        bootcamp = await make_bootcamp(user_id=publisher.id)
        response = await test_client.post(
            f"{BOOTCAMPS}/{bootcamp.id}/courses", json=NEW_COURSE, headers=auth_header(other_publisher)
        )
        _assert_error(response, 403)

    @pytest.mark.asyncio
    async def test_list_bootcamp_courses(self, test_client, make_bootcamp, make_course):
        bootcamp = await make_bootcamp()
        await make_course(bootcamp)

        response = await test_client.get(f"{BOOTCAMPS}/{bootcamp.id}/courses")

        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert "pagination" not in body

    @pytest.mark.asyncio
    async def test_list_courses_populates_bootcamp(self, test_client, make_bootcamp, make_course):
        bootcamp = await make_bootcamp(name="Devworks")
        await make_course(bootcamp)

        response = await test_client.get(COURSES)

        course = response.json()["data"][0]
        assert course["bootcamp"]["name"] == "Devworks"
        assert set(course["bootcamp"]) == {"id", "name", "description"}

    @pytest.mark.asyncio
    async def test_delete_course_requires_token(self, test_client, make_bootcamp, make_course):
        bootcamp = await make_bootcamp()
        course = await make_course(bootcamp)
        response = await test_client.delete(f"{COURSES}/{course.id}")
        _assert_error(response, 401)


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["geocoder"] == "configured"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get(BOOTCAMPS, headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("supplied", ["x" * 65, "has spaces", "semi;colon"])
    async def test_malformed_request_id_is_replaced(self, test_client, supplied):
        response = await test_client.get(BOOTCAMPS, headers={"X-Request-ID": supplied})

        rid = response.headers["X-Request-ID"]
        assert rid != supplied
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_access_log_record(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="devcamper.access"):
            await test_client.get(
                f"{BOOTCAMPS}/{uuid.uuid4()}",
                params={"select": "name"},
                headers={"X-Request-ID": "trace-42", "User-Agent": "devcamper-tests"},
            )

        [record] = [r for r in caplog.records if r.name == "devcamper.access"]
        assert record.levelno == logging.WARNING
        assert record.status == 404
        assert record.request_id == "trace-42"
        assert record.query == "select=name"
        assert record.user_agent == "devcamper-tests"

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/v1/unknown")
        _assert_error(response, 404)
