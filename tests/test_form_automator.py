"""
Tests for plain HTTP form submission.

requests.post is patched and the page classifier is stubbed.
"""

import json

import pytest
from unittest.mock import Mock, patch

from unsubscriber.engine.classifier import UnsubscribeClassifier
from unsubscriber.engine.form_automator import FormAutomator, parse_form_fields, find_form_action
from unsubscriber.engine.page_classifier import PageClassifier
from unsubscriber.engine.types import PageAnalysis


FORM_PAGE = """
<html><body>
  <form method="post" action="/unsubscribe/confirm">
    <input type="hidden" name="token" value="abc123">
    <input type="email" name="email" value="reader@example.com">
    <button type="submit">Unsubscribe</button>
  </form>
</body></html>
"""


@pytest.fixture
def classifier():
    classifier = Mock(spec=UnsubscribeClassifier)
    classifier.extract_form_fields.return_value = json.dumps({
        'token': 'abc123', 'email': 'reader@example.com'
    })
    return classifier


@pytest.fixture
def page_classifier():
    page_classifier = Mock(spec=PageClassifier)
    page_classifier.analyze.return_value = PageAnalysis('success', 'Unsubscribed')
    return page_classifier


class TestParseFormFields:
    """Test parsing of the classifier's field map."""

    def test_scalar_values(self):
        fields = parse_form_fields('{"token": "abc", "list_id": 7, "all": true}')

        assert fields == {'token': 'abc', 'list_id': '7', 'all': 'true'}

    def test_nested_and_null_values_dropped(self):
        fields = parse_form_fields('{"token": "abc", "meta": {"a": 1}, "x": null, "y": [1]}')

        assert fields == {'token': 'abc'}

    @pytest.mark.parametrize('raw', [None, '', 'nonsense', '[1, 2]', '{}'])
    def test_nothing_usable(self, raw):
        assert parse_form_fields(raw) == {}


class TestFindFormAction:

    def test_first_form_with_action(self):
        html = '<form id="search"></form><form action="/u/confirm"></form>'
        assert find_form_action(html) == '/u/confirm'

    def test_no_form(self):
        assert find_form_action('<p>No form here</p>') is None


class TestFormAutomator:
    """Test submission outcomes."""

    @patch('requests.post')
    def test_successful_submission(self, mock_post, classifier, page_classifier):
        mock_post.return_value = Mock(
            status_code=200, text='<p>You are unsubscribed</p>', url='https://example.com/unsubscribe/done'
        )

        automator = FormAutomator(classifier, page_classifier)
        assert automator.submit('https://example.com/unsubscribe?id=9', FORM_PAGE) is True

        page_classifier.analyze.assert_called_once_with(
            'https://example.com/unsubscribe/done', '<p>You are unsubscribed</p>'
        )

    @patch('requests.post')
    def test_posts_fields_with_confirmation_flags(self, mock_post, classifier, page_classifier):
        mock_post.return_value = Mock(status_code=200, text='', url='')

        FormAutomator(classifier, page_classifier, timeout=5).submit(
            'https://example.com/unsubscribe?id=9', FORM_PAGE
        )

        args, kwargs = mock_post.call_args
        assert args[0] == 'https://example.com/unsubscribe/confirm'
        assert ('token', 'abc123') in kwargs['data']
        assert ('email', 'reader@example.com') in kwargs['data']
        assert ('confirm', '1') in kwargs['data']
        assert ('confirmed', 'yes') in kwargs['data']
        assert ('unsubscribe', 'true') in kwargs['data']
        assert kwargs['headers']['Content-Type'] == 'application/x-www-form-urlencoded'
        assert 'Mozilla' in kwargs['headers']['User-Agent']
        assert kwargs['timeout'] == 5

    @patch('requests.post')
    def test_absolute_action_url_kept(self, mock_post, classifier, page_classifier):
        mock_post.return_value = Mock(status_code=200, text='', url='')
        html = '<form action="https://lists.example.org/out"><input name="t"></form>'

        FormAutomator(classifier, page_classifier).submit('https://example.com/u', html)

        assert mock_post.call_args[0][0] == 'https://lists.example.org/out'

    @patch('requests.post')
    def test_no_fields_means_no_post(self, mock_post, classifier, page_classifier):
        classifier.extract_form_fields.return_value = '{}'

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', FORM_PAGE) is False
        mock_post.assert_not_called()

    @patch('requests.post')
    def test_no_form_action_means_no_post(self, mock_post, classifier, page_classifier):
        html = '<div><input name="token" value="abc123"></div>'

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', html) is False
        mock_post.assert_not_called()

    @patch('requests.post')
    def test_error_status_is_failure(self, mock_post, classifier, page_classifier):
        mock_post.return_value = Mock(status_code=403, text='Forbidden', url='')

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', FORM_PAGE) is False
        page_classifier.analyze.assert_not_called()

    @patch('requests.post')
    def test_response_not_success_is_failure(self, mock_post, classifier, page_classifier):
        mock_post.return_value = Mock(status_code=200, text='<form/>', url='https://example.com/u2')
        page_classifier.analyze.return_value = PageAnalysis('form', 'Still a form')

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', FORM_PAGE) is False

    @patch('requests.post')
    def test_exceptions_become_false(self, mock_post, classifier, page_classifier):
        import requests
        mock_post.side_effect = requests.exceptions.ConnectionError('reset by peer')

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', FORM_PAGE) is False

    def test_classifier_failure_becomes_false(self, classifier, page_classifier):
        classifier.extract_form_fields.side_effect = RuntimeError('model unavailable')

        assert FormAutomator(classifier, page_classifier).submit('https://example.com/u', FORM_PAGE) is False
