import pytest
from httpx import AsyncClient

from eduwise.core.pagination import page_meta


def test_page_meta_rounds_up() -> None:
    meta = page_meta(total=41, page=2, limit=20)
    assert meta.total_pages == 3
    assert meta.model_dump(by_alias=True) == {"total": 41, "page": 2, "limit": 20, "totalPages": 3}


def test_page_meta_empty() -> None:
    assert page_meta(total=0, page=1, limit=20).total_pages == 0


@pytest.mark.asyncio
async def test_list_envelope_and_paging(client: AsyncClient, admin_headers, school) -> None:
    for i in range(5):
        await school.course(f"C{i:03d}")

    response = await client.get("/api/v1/courses", params={"page": 2, "limit": 2}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["meta"] == {"total": 5, "page": 2, "limit": 2, "totalPages": 3}
    assert [c["code"] for c in body["data"]] == ["C002", "C003"]


@pytest.mark.asyncio
async def test_page_past_the_end_is_empty(client: AsyncClient, admin_headers, school) -> None:
    await school.course("ONLY1")
    response = await client.get("/api/v1/courses", params={"page": 5}, headers=admin_headers)
    assert response.json()["data"] == []
    assert response.json()["meta"]["total"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
async def test_invalid_paging_rejected(client: AsyncClient, admin_headers, params) -> None:
    response = await client.get("/api/v1/courses", params=params, headers=admin_headers)
    assert response.status_code == 422
