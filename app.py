import logging

import click
from flask import Flask, request, jsonify

import config
import data_processing as dp


logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = Flask(__name__)
knowledge_base = dp.KnowledgeBase()


def init_knowledge_base():
    knowledge_base.refresh()
    if knowledge_base.start_refresh_timer(config.REFRESH_INTERVAL_SECONDS):
        app.logger.info("Knowledge base reloads every %d seconds", config.REFRESH_INTERVAL_SECONDS)


def first_words_in_doc(text, n=50):
    words = text.split()
    return " ".join(words[:n]) + (" ..." if len(words) > n else "")


def get_query():
    """Return (query, error response) from the JSON request body."""
    data_json = request.get_json(silent=True)
    if not isinstance(data_json, dict) or not data_json:
        return None, (jsonify({'error': 'No JSON data provided', 'results': []}), 400)
    query = data_json.get('query', '')
    if not isinstance(query, str) or not query.strip():
        return None, (jsonify({'error': 'No query provided', 'results': []}), 400)
    return query, None


# ============== API ENDPOINTS ==============

@app.route('/api/search', methods=['POST'])
def api_search():
    """
    JSON API endpoint for search

    Request body (JSON):
    {
        "query": "free text question"
    }

    Returns: JSON with at most 5 documents, most relevant first
    """
    query, error = get_query()
    if error:
        return error

    results = []
    for doc, score in knowledge_base.ranked(query):
        entry = doc.to_dict()
        entry['score'] = score
        results.append(entry)
    app.logger.info('Question: "%s" matched %d/%d pages', query, len(results), len(knowledge_base.documents()))

    return jsonify({
        'query': query,
        'count': len(results),
        'results': results
    })


@app.route('/api/context', methods=['POST'])
def api_context():
    """
    Grounding context for a language-model call

    Request body (JSON): {"query": "free text question"}
    Returns: the knowledge-base block built from the matching documents
    """
    query, error = get_query()
    if error:
        return error

    documents = knowledge_base.search(query)
    return jsonify({
        'query': query,
        'count': len(documents),
        'context': dp.compose_context(documents)
    })


@app.route('/api/documents', methods=['GET'])
def api_documents():
    """
    List the documents of the current knowledge base

    Query parameters:
    - limit: Max number of results (default: 50)
    """
    limit = request.args.get('limit', 50, type=int)
    documents = knowledge_base.documents()[:max(0, limit)]
    results = [
        {'identifier': doc.identifier, 'title': doc.title, 'source_reference': doc.source_reference}
        for doc in documents
    ]
    return jsonify({
        'count': len(results),
        'documents': results
    })


@app.route('/api/documents/<identifier>', methods=['GET'])
def api_document_detail(identifier):
    """
    Get a single document by identifier
    """
    doc = knowledge_base.get_document(identifier)
    if doc is None:
        return jsonify({'error': 'Document not found'}), 404
    return jsonify({'document': doc.to_dict()})


@app.route('/api/terms/<term>', methods=['GET'])
def api_term_detail(term):
    """
    IDF of a vocabulary term and its TF-IDF weight per document
    """
    stats = knowledge_base.term_weights(term.lower())
    if stats is None:
        return jsonify({'error': 'Term not in vocabulary'}), 404
    return jsonify(stats)


@app.route('/api/refresh', methods=['POST'])
def api_refresh():
    """Reload the corpus from the data directory and publish a new index"""
    count = knowledge_base.refresh()
    return jsonify({
        'status': 'refreshed',
        'documents': count
    })


@app.route('/api/health', methods=['GET'])
def api_health():
    """Health check endpoint"""
    index = knowledge_base.snapshot
    return jsonify({
        'status': 'healthy',
        'documents_indexed': 0 if index is None else len(index),
        'vocabulary_size': 0 if index is None else len(index.terms)
    })


# ============== CLI ==============

@app.cli.command('search')
@click.argument('query')
@click.option('--context', 'show_context', is_flag=True, help='Print the composed grounding context instead.')
def search_command(query, show_context):
    """Search the knowledge base from the terminal."""
    if show_context:
        click.echo(knowledge_base.context(query))
        return

    results = knowledge_base.ranked(query)
    if not results:
        click.echo("Your query '{:s}' matches no documents.".format(query))
        return
    click.echo("Your query '{:s}' matches the following documents:".format(query))
    for i, (doc, score) in enumerate(results):
        click.echo("Doc #{:d} (score: {:.4f}) {:s}".format(i, score, doc.title))
        click.echo(first_words_in_doc(doc.body) + "\n")


init_knowledge_base()

"""
=============================================================================
API TESTING COMMANDS (run in terminal while Flask is running)
=============================================================================

# Health Check
curl http://localhost:5001/api/health

# Search
curl -X POST http://localhost:5001/api/search \
  -H "Content-Type: application/json" \
  -d '{"query": "where can I charge on a road trip"}'

# Grounding context for the model prompt
curl -X POST http://localhost:5001/api/context \
  -H "Content-Type: application/json" \
  -d '{"query": "R1T battery range"}'

# Term statistics
curl http://localhost:5001/api/terms/battery

# Reload after a crawl
curl -X POST http://localhost:5001/api/refresh

# Terminal search
flask --app app search "charger"

=============================================================================
"""

if __name__ == "__main__":
    #Change the Flask app to run on a different port than 5000 to prevent port 5000 being used by AirTunes problem
    app.run(port=config.PORT)
