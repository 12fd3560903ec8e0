import json

import config


def test_search(client):
    response = client.post('/api/search', json={'query': 'charger'})
    assert response.status_code == 200
    data = response.get_json()
    assert data['count'] == 1
    [result] = data['results']
    assert result['identifier'] == 'doc1'
    assert result['title'] == 'Charging Network'
    assert result['source_reference'] == 'https://example.com/charging'
    assert result['score'] > 0


def test_search_with_typo(client):
    data = client.post('/api/search', json={'query': 'bateries'}).get_json()
    assert [r['identifier'] for r in data['results']] == ['doc2']


def test_search_stopwords_only(client):
    data = client.post('/api/search', json={'query': 'what is the'}).get_json()
    assert data['count'] == 0
    assert data['results'] == []


def test_search_requires_json(client):
    response = client.post('/api/search', data='charger')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No JSON data provided'
    for body in (["charger"], "charger", 3):
        response = client.post('/api/search', json=body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No JSON data provided'


def test_search_requires_query(client):
    for body in ({'query': ''}, {'query': '   '}, {'query': 5}, {'other': 'x'}):
        response = client.post('/api/search', json=body)
        assert response.status_code == 400
        assert response.get_json()['results'] == []


def test_context(client):
    data = client.post('/api/context', json={'query': 'battery range'}).get_json()
    assert data['count'] == 1
    assert data['context'].startswith('## Battery\n')


def test_context_without_matches(client):
    data = client.post('/api/context', json={'query': 'zzqxw'}).get_json()
    assert data['count'] == 0
    assert data['context'] == config.NO_CONTEXT_TEXT


def test_documents(client):
    data = client.get('/api/documents').get_json()
    assert data['count'] == 2
    assert data['documents'][0] == {
        'identifier': 'doc1',
        'title': 'Charging Network',
        'source_reference': 'https://example.com/charging',
    }
    assert client.get('/api/documents?limit=1').get_json()['count'] == 1


def test_document_detail(client):
    data = client.get('/api/documents/doc2').get_json()
    assert data['document']['body'] == 'The R1T battery pack provides long range.'
    assert client.get('/api/documents/nope').status_code == 404


def test_health(client):
    data = client.get('/api/health').get_json()
    assert data['status'] == 'healthy'
    assert data['documents_indexed'] == 2
    assert data['vocabulary_size'] > 0


def test_refresh_reloads_data_dir(client, tmp_path, monkeypatch):
    page = {'url': 'https://example.com/service', 'title': 'Service', 'text': 'Mobile service vans'}
    (tmp_path / 'service.json').write_text(json.dumps(page), encoding='utf-8')
    monkeypatch.setattr(config, 'DATA_DIR', tmp_path)

    data = client.post('/api/refresh').get_json()
    assert data == {'status': 'refreshed', 'documents': 1}
    results = client.post('/api/search', json={'query': 'servce'}).get_json()['results']
    assert [r['identifier'] for r in results] == ['service']


def test_cli_search(knowledge_base):
    from app import app
    result = app.test_cli_runner().invoke(args=['search', 'charger'])
    assert result.exit_code == 0
    assert "Your query 'charger' matches the following documents:" in result.output
    assert 'Charging Network' in result.output


def test_cli_search_without_matches(knowledge_base):
    from app import app
    result = app.test_cli_runner().invoke(args=['search', 'zzqxw'])
    assert "matches no documents" in result.output


def test_cli_context(knowledge_base):
    from app import app
    result = app.test_cli_runner().invoke(args=['search', 'battery', '--context'])
    assert result.output.startswith('## Battery\n')


def test_context_requires_json_object(client):
    response = client.post('/api/context', json=['battery'])
    assert response.status_code == 400


def test_term_detail(client):
    data = client.get('/api/terms/Battery').get_json()
    assert data['term'] == 'battery'
    assert data['idf'] > 1
    assert list(data['documents']) == ['doc2']
    assert client.get('/api/terms/zzqxw').status_code == 404
