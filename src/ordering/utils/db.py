from protean.domain import Domain
from sqlalchemy import create_engine

_RDBMS_PROVIDERS = ("sqlite", "postgresql")


def setup_db(domain: Domain):
    """Create RDBMS tables for every aggregate, entity and projection the domain stores."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _RDBMS_PROVIDERS:
                continue

            engine = create_engine(provider.conn_info["database_uri"])

            # Accessing a repository's _dao registers its model with SQLAlchemy
            for _, aggregate_record in domain.registry.aggregates.items():
                if aggregate_record.cls.meta_.is_event_sourced:
                    continue
                if aggregate_record.cls.meta_.provider == provider.name:
                    domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

            for _, entity_record in domain.registry.entities.items():
                if entity_record.cls.meta_.provider == provider.name:
                    domain.repository_for(entity_record.cls)._dao  # noqa: B018

            for _, projection_record in domain.registry.projections.items():
                if projection_record.cls.meta_.provider == provider.name:
                    domain.repository_for(projection_record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop RDBMS tables."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RDBMS_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
