"""
Tests for page classification and its empty-response retry policy.
"""

import json

import pytest
from unittest.mock import Mock

from unsubscriber.engine.classifier import UnsubscribeClassifier
from unsubscriber.engine.exceptions import ClassifierError
from unsubscriber.engine.page_classifier import (
    PageClassifier, parse_page_analysis, truncate_page_html
)


@pytest.fixture
def classifier():
    return Mock(spec=UnsubscribeClassifier)


@pytest.fixture
def sleeps():
    return []


def verdict(status, message='ok'):
    return json.dumps({'status': status, 'message': message})


class TestParsePageAnalysis:
    """Test mapping of classifier JSON onto action buckets."""

    @pytest.mark.parametrize('status,action', [
        ('success', 'success'),
        ('needs_form', 'form'),
        ('needs_captcha', 'captcha'),
        ('needs_login', 'login'),
        ('SUCCESS', 'success'),
        ('something_else', 'unknown'),
    ])
    def test_status_mapping(self, status, action):
        assert parse_page_analysis(verdict(status)).action_type == action

    def test_malformed_json(self):
        assert parse_page_analysis('not json').action_type == 'unknown'

    def test_missing_status(self):
        assert parse_page_analysis('{"message": "hi"}').action_type == 'unknown'

    def test_non_object(self):
        assert parse_page_analysis('["success"]').action_type == 'unknown'

    def test_default_message(self):
        assert parse_page_analysis('{"status": "success"}').message == 'Analysis complete'


class TestTruncatePageHtml:

    def test_prefix_with_marker(self):
        truncated = truncate_page_html('a' * 50, max_length=10)

        assert truncated == 'a' * 10 + '...[truncated]'

    def test_short_html_untouched(self):
        assert truncate_page_html('<p>x</p>') == '<p>x</p>'


class TestPageClassifier:
    """Test analyze() against a stub classifier."""

    def test_single_call_on_valid_response(self, classifier, sleeps):
        classifier.classify_page.return_value = verdict('success', 'You are unsubscribed')

        analysis = PageClassifier(classifier, sleep=sleeps.append).analyze('https://example.com', '<p/>')

        assert analysis.action_type == 'success'
        assert analysis.message == 'You are unsubscribed'
        assert classifier.classify_page.call_count == 1
        assert sleeps == []

    def test_retries_empty_responses_with_backoff(self, classifier, sleeps):
        classifier.classify_page.side_effect = ['', None, verdict('needs_form')]

        analysis = PageClassifier(classifier, sleep=sleeps.append).analyze('https://example.com', '<form/>')

        assert analysis.action_type == 'form'
        assert classifier.classify_page.call_count == 3
        assert sleeps == [2.0, 4.0]

    def test_exhausted_retries_are_unknown(self, classifier, sleeps):
        classifier.classify_page.return_value = '   '

        analysis = PageClassifier(classifier, sleep=sleeps.append).analyze('https://example.com', '<p/>')

        assert analysis.action_type == 'unknown'
        assert classifier.classify_page.call_count == 3

    def test_malformed_response_is_not_retried(self, classifier, sleeps):
        classifier.classify_page.return_value = 'definitely not json'

        analysis = PageClassifier(classifier, sleep=sleeps.append).analyze('https://example.com', '<p/>')

        assert analysis.action_type == 'unknown'
        assert classifier.classify_page.call_count == 1

    def test_classifier_error_is_unknown(self, classifier, sleeps):
        classifier.classify_page.side_effect = ClassifierError('classify_page request failed')

        analysis = PageClassifier(classifier, sleep=sleeps.append).analyze('https://example.com', '<p/>')

        assert analysis.action_type == 'unknown'
        assert classifier.classify_page.call_count == 1

    def test_sends_truncated_html(self, classifier, sleeps):
        classifier.classify_page.return_value = verdict('success')

        PageClassifier(classifier, max_html_length=100, sleep=sleeps.append).analyze(
            'https://example.com/u', 'x' * 1000
        )

        url, html = classifier.classify_page.call_args[0]
        assert url == 'https://example.com/u'
        assert html == 'x' * 100 + '...[truncated]'
