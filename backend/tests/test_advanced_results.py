"""
Tests for the advanced listing pipeline against a real (SQLite) database.

Covers:
    - filter / select / sort / page / limit together
    - pagination computed from the unfiltered total
    - list-column membership, dotted location fields, value coercion
    - populate (bootcamp → courses, course → bootcamp name/description)
    - rejected queries (unknown field, bad value, ordering on a list)
"""

import pytest
import pytest_asyncio

from app.exceptions import ValidationError
from app.models import Bootcamp, Course
from app.services.advanced_results import advanced_results
from app.services.bootcamp_service import BOOTCAMP_POPULATE
from app.services.course_service import COURSE_POPULATE
from app.services.query_parser import parse_resource_query
from conftest import CAMBRIDGE, NEW_YORK


@pytest_asyncio.fixture
async def reader(session_factory):
    """A session separate from the one the factories write through."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def five_bootcamps(make_bootcamp):
    return [
        await make_bootcamp(name="Alpha", careers=["Business", "Web Development"], average_cost=5000),
        await make_bootcamp(name="Bravo", careers=["UI/UX"], average_cost=12000, housing=True),
        await make_bootcamp(name="Charlie", careers=["Business"], average_cost=9000, location=CAMBRIDGE),
        await make_bootcamp(name="Delta", careers=["Data Science"], location=NEW_YORK),
        await make_bootcamp(name="Echo", careers=["Other", "Business"], average_cost=15000),
    ]


async def _list(db, model, params, populate=None):
    return await advanced_results(db, model, parse_resource_query(params), populate=populate)


class TestListing:

    @pytest.mark.asyncio
    async def test_filter_select_sort_and_page(self, reader, five_bootcamps):
        result = await _list(
            reader,
            Bootcamp,
            [
                ("careers", "Business"),
                ("select", "name,careers"),
                ("sort", "-name"),
                ("page", "2"),
                ("limit", "2"),
            ],
            populate=BOOTCAMP_POPULATE,
        )

        assert result["success"] is True
        assert result["count"] == 1
        assert [doc["name"] for doc in result["data"]] == ["Alpha"]
        assert set(result["data"][0]) == {"id", "name", "careers"}
        # three bootcamps match, but the boundaries come from all five
        assert result["pagination"] == {
            "next": {"page": 3, "limit": 2},
            "prev": {"page": 1, "limit": 2},
        }

    @pytest.mark.asyncio
    async def test_defaults_return_everything(self, reader, five_bootcamps):
        result = await _list(reader, Bootcamp, [], populate=BOOTCAMP_POPULATE)
        assert result["count"] == 5
        assert result["pagination"] == {}
        doc = result["data"][0]
        assert "courses" in doc and "location" in doc
        assert "latitude" not in doc and "address" not in doc

    @pytest.mark.asyncio
    async def test_select_always_keeps_id(self, reader, five_bootcamps):
        result = await _list(reader, Bootcamp, [("select", "slug")])
        assert all(set(doc) == {"id", "slug"} for doc in result["data"])

    @pytest.mark.asyncio
    async def test_range_filter_is_numeric(self, reader, five_bootcamps):
        result = await _list(
            reader,
            Bootcamp,
            [("average_cost[gte]", "9000"), ("average_cost[lt]", "15000"), ("sort", "name")],
        )
        assert [doc["name"] for doc in result["data"]] == ["Bravo", "Charlie"]

    @pytest.mark.asyncio
    async def test_in_on_list_column(self, reader, five_bootcamps):
        result = await _list(
            reader, Bootcamp, [("careers[in]", "UI/UX,Data Science"), ("sort", "name")]
        )
        assert [doc["name"] for doc in result["data"]] == ["Bravo", "Delta"]

    @pytest.mark.asyncio
    async def test_boolean_filter(self, reader, five_bootcamps):
        result = await _list(reader, Bootcamp, [("housing", "true")])
        assert [doc["name"] for doc in result["data"]] == ["Bravo"]

    @pytest.mark.asyncio
    async def test_location_field(self, reader, five_bootcamps):
        result = await _list(
            reader, Bootcamp, [("location.city", "Cambridge"), ("select", "name,location")]
        )
        assert [doc["name"] for doc in result["data"]] == ["Charlie"]
        assert result["data"][0]["location"]["coordinates"] == [
            CAMBRIDGE.longitude,
            CAMBRIDGE.latitude,
        ]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, reader, five_bootcamps):
        result = await _list(reader, Bootcamp, [("page", "9"), ("limit", "2")])
        assert result["count"] == 0
        assert result["data"] == []
        assert result["pagination"] == {"prev": {"page": 8, "limit": 2}}


class TestRejectedQueries:

    @pytest.mark.asyncio
    async def test_unknown_filter_field(self, reader, five_bootcamps):
        with pytest.raises(ValidationError, match="Unknown field 'colour'"):
            await _list(reader, Bootcamp, [("colour", "red")])

    @pytest.mark.asyncio
    async def test_unknown_select_field(self, reader):
        with pytest.raises(ValidationError, match="select"):
            await _list(reader, Bootcamp, [("select", "name,secret")])

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, reader):
        with pytest.raises(ValidationError):
            await _list(reader, Bootcamp, [("sort", "-popularity")])

    @pytest.mark.asyncio
    async def test_non_numeric_value(self, reader):
        with pytest.raises(ValidationError, match="Invalid value 'cheap'"):
            await _list(reader, Bootcamp, [("average_cost[lte]", "cheap")])

    @pytest.mark.asyncio
    async def test_ordering_on_list_field(self, reader):
        with pytest.raises(ValidationError, match="not supported on list field"):
            await _list(reader, Bootcamp, [("careers[gt]", "Business")])

    @pytest.mark.asyncio
    async def test_sorting_on_list_field(self, reader, five_bootcamps):
        with pytest.raises(ValidationError, match="Sorting is not supported on list field 'careers'"):
            await _list(reader, Bootcamp, [("sort", "-careers")])

    @pytest.mark.asyncio
    async def test_hidden_column_is_not_queryable(self, reader):
        with pytest.raises(ValidationError):
            await _list(reader, Bootcamp, [("latitude[gt]", "10")])


class TestPopulate:

    @pytest.mark.asyncio
    async def test_bootcamp_includes_courses(self, reader, make_bootcamp, make_course):
        bootcamp = await make_bootcamp(name="Devworks")
        await make_course(bootcamp, title="Front End")
        await make_course(bootcamp, title="Full Stack")

        result = await _list(reader, Bootcamp, [], populate=BOOTCAMP_POPULATE)
        courses = result["data"][0]["courses"]
        assert sorted(course["title"] for course in courses) == ["Front End", "Full Stack"]
        assert all(course["bootcamp_id"] == bootcamp.id for course in courses)

    @pytest.mark.asyncio
    async def test_course_includes_bootcamp_name_and_description(
        self, reader, make_bootcamp, make_course
    ):
        bootcamp = await make_bootcamp(name="Devworks", description="Devworks is a full stack camp")
        await make_course(bootcamp, tuition=10000)

        result = await _list(reader, Course, [("tuition[gte]", "10000")], populate=COURSE_POPULATE)
        assert result["count"] == 1
        assert result["data"][0]["bootcamp"] == {
            "id": bootcamp.id,
            "name": "Devworks",
            "description": "Devworks is a full stack camp",
        }

    @pytest.mark.asyncio
    async def test_select_without_relation_skips_populate(self, reader, make_bootcamp, make_course):
        bootcamp = await make_bootcamp()
        await make_course(bootcamp)

        result = await _list(reader, Course, [("select", "title")], populate=COURSE_POPULATE)
        assert set(result["data"][0]) == {"id", "title"}
