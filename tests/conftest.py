"""
Pytest fixtures for the code analyzer tests.
"""
import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

# Set test environment variables before importing app
os.environ['FLASK_ENV'] = 'testing'


def make_gemini_response(text):
    """A minimal stand-in for a Gemini GenerateContentResponse carrying ``text``."""
    part = SimpleNamespace(text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


@pytest.fixture
def app():
    """Create and configure a test application instance with a dummy key."""
    from codefix import create_app

    flask_app = create_app('testing')
    flask_app.config.update({
        'TESTING': True,
        'GEMINI_API_KEY': 'test-key',
    })
    yield flask_app


@pytest.fixture
def client(app):
    """Create a test client for the application."""
    return app.test_client()


@pytest.fixture
def mock_genai():
    """Replaces the Gemini SDK inside the analysis service."""
    with patch('codefix.services.analysis_service.genai') as genai_mock:
        yield genai_mock


@pytest.fixture
def gemini_model(mock_genai):
    """The model object ``generate_content`` is called on."""
    return mock_genai.GenerativeModel.return_value


@pytest.fixture
def gemini_replies(gemini_model):
    """Makes Gemini answer with the given text."""
    def _reply(text):
        gemini_model.generate_content.return_value = make_gemini_response(text)
        return gemini_model
    return _reply


@pytest.fixture
def python_syntax_error_request():
    """Scenario A request: unclosed parenthesis."""
    return {'language': 'python', 'code': "print('hi'"}


@pytest.fixture
def python_syntax_error_reply():
    """Scenario A model reply."""
    return (
        '{"hasError": true, "error": {"type": "SyntaxError", '
        '"reason": "Missing closing parenthesis", "line": 1}, '
        '"correctedCode": "print(\'hi\')"}'
    )
