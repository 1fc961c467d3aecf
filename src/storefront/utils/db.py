from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider_name: str) -> None:
    """Touch each repository's DAO so its table is registered with SQLAlchemy."""
    for registry in (domain.registry.aggregates, domain.registry.entities):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Create tables for every SQL-backed provider."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                _register_models(domain, provider.name)
                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop tables for every SQL-backed provider."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
