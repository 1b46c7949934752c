from datetime import datetime

import pytest

from comments import service
from comments.validation import ANONYMOUS_NAME, ValidationError
from core.db import Database


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (None, None, (20, 0)),
        ("", "", (20, 0)),
        ("abc", "xyz", (20, 0)),
        ("1.5", "2.5", (20, 0)),
        ("500", "0", (100, 0)),
        ("0", "0", (1, 0)),
        ("-3", "-7", (1, 0)),
        ("50", "10", (50, 10)),
        (" 7 ", " 3 ", (7, 3)),
        ("+5", "+3", (5, 3)),
        ("1_000", "1_000", (20, 0)),
        ("١٢", "١٢", (20, 0)),
        (None, "100000000000000000000", (20, 2**63 - 1)),
        (5, 2, (5, 2)),
    ],
)
def test_resolve_paging(limit: object, offset: object, expected: tuple[int, int]) -> None:
    assert service.resolve_paging(limit, offset) == expected


async def test_create_comment_returns_view_without_email(database: Database) -> None:
    item = await service.create_comment(
        database, name="  Ana ", email="ana@example.com", message="<b>Hola</b> mundo"
    )
    assert item.id > 0
    assert item.name == "Ana"
    assert item.message == "&lt;b&gt;Hola&lt;/b&gt; mundo"
    assert "email" not in item.model_dump()
    assert item.date.endswith("Z")
    datetime.fromisoformat(item.date.replace("Z", "+00:00"))


async def test_create_comment_stores_raw_message(database: Database) -> None:
    item = await service.create_comment(database, name=None, email=None, message="a < b & c")
    rows = await database.fetch_all("SELECT message, email FROM comments WHERE id = ?", (item.id,))
    assert rows == [{"message": "a < b & c", "email": None}]


async def test_create_comment_uses_placeholder_name(database: Database) -> None:
    item = await service.create_comment(database, name="   ", email=None, message="hello")
    assert item.name == ANONYMOUS_NAME


async def test_create_comment_rejects_before_writing(database: Database) -> None:
    with pytest.raises(ValidationError):
        await service.create_comment(database, name="", email="not-an-email", message="hello")
    assert await database.fetch_all("SELECT id FROM comments") == []


async def test_create_comment_ids_increase(database: Database) -> None:
    ids = [
        (await service.create_comment(database, name="", email="", message=f"comment {i}")).id
        for i in range(4)
    ]
    assert all(a < b for a, b in zip(ids, ids[1:]))


async def test_list_comments_maps_rows(database: Database) -> None:
    await service.create_comment(database, name="", email="x@y.io", message="first 'quoted'")
    await service.create_comment(database, name="Bea", email="", message='second "quoted"')

    page = await service.list_comments(database)
    assert page.limit == 20
    assert page.offset == 0
    assert [i.name for i in page.items] == ["Bea", ANONYMOUS_NAME]
    assert [i.message for i in page.items] == ["second &quot;quoted&quot;", "first &#39;quoted&#39;"]
    assert all(i.created_at for i in page.items)
    assert all("email" not in i.model_dump() for i in page.items)


async def test_list_comments_clamps_limit(database: Database) -> None:
    for i in range(105):
        await database.insert(
            "INSERT INTO comments (message, date) VALUES (?, ?)", (f"bulk {i}", "d")
        )
    page = await service.list_comments(database, limit="500")
    assert page.limit == 100
    assert len(page.items) == 100

    default_page = await service.list_comments(database)
    assert len(default_page.items) == 20
    assert [i.id for i in default_page.items] == sorted((i.id for i in default_page.items), reverse=True)
