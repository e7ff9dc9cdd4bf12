import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _reset_collaborators():
    """Restore default adapters and forget checkout locks/keys after every test."""
    yield

    from ordering.api.auth import reset_auth_resolver
    from ordering.catalog import reset_catalog
    from ordering.order.guard import checkout_guard

    reset_catalog()
    reset_auth_resolver()
    checkout_guard.reset()


@pytest.fixture()
def catalog():
    """An empty in-memory catalog installed as the active adapter."""
    from ordering.catalog import InMemoryCatalog, set_catalog

    catalog = InMemoryCatalog()
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def priced_catalog(catalog):
    catalog.add_product("P1", offer_price=10.00, name="Wireless Mouse", price=12.00, category="Accessories")
    catalog.add_product("P2", offer_price=5.00, name="Mouse Pad", price=6.50, category="Accessories")
    return catalog
