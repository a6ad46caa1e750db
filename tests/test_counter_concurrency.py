import asyncio
from concurrent.futures import ThreadPoolExecutor
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from marketplace.core.database import Base
from marketplace.db.models import User
from marketplace.modules.properties.service import PropertyService


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file database so each thread gets its own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'counters.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


def test_concurrent_increments_are_not_lost(file_session_factory, make_payload):
    setup_session = file_session_factory()
    owner = User(email="owner@example.com", name="Ada Owner", roles=["agent"], active_role="agent")
    setup_session.add(owner)
    setup_session.commit()
    created = asyncio.run(PropertyService(setup_session).create(make_payload(), str(owner.id)))
    setup_session.close()

    def view_once(_):
        session = file_session_factory()
        try:
            asyncio.run(PropertyService(session).increment_counter(created.property_id, "views"))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(view_once, range(100)))

    check_session = file_session_factory()
    try:
        fetched = asyncio.run(PropertyService(check_session).get(created.property_id))
    finally:
        check_session.close()
    assert fetched.views == 100
