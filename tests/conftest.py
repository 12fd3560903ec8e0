import pytest

from tf_idf_search import Document, build_index


@pytest.fixture
def scenario_docs():
    return [
        Document("doc1", "Charging Network", "Rivian operates the Adventure Network of chargers for road trips.",
                 "https://example.com/charging"),
        Document("doc2", "Battery", "The R1T battery pack provides long range.", "https://example.com/battery"),
    ]


@pytest.fixture
def scenario_index(scenario_docs):
    return build_index(scenario_docs)


@pytest.fixture
def knowledge_base(scenario_docs):
    from app import knowledge_base
    knowledge_base.refresh(scenario_docs)
    yield knowledge_base
    knowledge_base.refresh([])


@pytest.fixture
def client(knowledge_base):
    from app import app
    app.config.update(TESTING=True)
    with app.test_client() as client:
        yield client
