import pytest

from fieldroute.models.domain import Company, Employee, Store
from fieldroute.persistence.memory import InMemoryRepository


def _store(sid: str, lat: float, lng: float, tier: str | None = "A", company_id: str = "co1") -> Store:
    return Store(
        id=sid,
        company_id=company_id,
        name=f"Store {sid}",
        latitude=lat,
        longitude=lng,
        tier=tier,
        store_type="supermarket",
    )


@pytest.fixture
def repository() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add_company(Company(id="co1", name="Acme Beverages", tier_config=None))
    repo.add_employee(Employee(id="rep1", company_id="co1", name="Li Wei", role="rep"))
    repo.add_employee(Employee(id="mgr1", company_id="co1", name="Zhang Min", role="area_manager"))
    return repo


@pytest.fixture
def make_store():
    return _store
