import json

import pytest
import requests

from services.errors import Timeout, UpstreamFailure
from services.llm import ChatClient, extract_json
from services.merging import LLMIngredientMerger, build_prompt, unwrap_categories


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=''):
        self.status_code = status_code
        self._body = body
        self.text = text or json.dumps(body)

    def json(self):
        if self._body is None:
            raise ValueError('no json')
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def chat_reply(content):
    return FakeResponse(body={'choices': [{'message': {'content': content}}]})


def make_client(session, api_key='test-key'):
    return ChatClient(api_key, base_url='https://llm.example/v1/', model='test-model',
                      timeout=5, session=session)


def test_extract_json_plain_and_fenced():
    assert extract_json('[1, 2]') == [1, 2]
    assert extract_json('```json\n{"meals": []}\n```') == {'meals': []}
    assert extract_json('Here you go: [{"a": 1}] enjoy!') == [{'a': 1}]


def test_extract_json_garbage():
    with pytest.raises(UpstreamFailure):
        extract_json('I cannot help with that.')


def test_complete_json_request_shape():
    session = FakeSession(chat_reply('{"ok": true}'))
    assert make_client(session).complete_json('system', 'prompt', temperature=0.3) == {'ok': True}

    url, kwargs = session.requests[0]
    assert url == 'https://llm.example/v1/chat/completions'
    assert kwargs['timeout'] == 5
    assert kwargs['headers']['Authorization'] == 'Bearer test-key'
    assert kwargs['json']['model'] == 'test-model'
    assert kwargs['json']['response_format'] == {'type': 'json_object'}
    assert [m['role'] for m in kwargs['json']['messages']] == ['system', 'user']


def test_timeout_maps_to_timeout():
    session = FakeSession(error=requests.Timeout('slow'))
    with pytest.raises(Timeout) as exc:
        make_client(session).complete_json('s', 'p')
    assert exc.value.status_code == 504


def test_connection_error_maps_to_upstream():
    session = FakeSession(error=requests.ConnectionError('down'))
    with pytest.raises(UpstreamFailure) as exc:
        make_client(session).complete_json('s', 'p')
    assert not isinstance(exc.value, Timeout)


def test_http_error_status():
    session = FakeSession(FakeResponse(status_code=500, body={'error': 'oops'}))
    with pytest.raises(UpstreamFailure) as exc:
        make_client(session).complete_json('s', 'p')
    assert 'HTTP 500' in exc.value.message


@pytest.mark.parametrize('response', [
    FakeResponse(body={'choices': []}),
    FakeResponse(body=None, text='<html>'),
    chat_reply(''),
])
def test_malformed_reply(response):
    with pytest.raises(UpstreamFailure):
        make_client(FakeSession(response)).complete_json('s', 'p')


def test_missing_api_key():
    session = FakeSession(chat_reply('[]'))
    with pytest.raises(UpstreamFailure):
        make_client(session, api_key=None).complete_json('s', 'p')
    assert session.requests == []


@pytest.mark.parametrize('parsed', [
    [{'category': 'Oils', 'items': ['olive oil']}],
    {'groceryList': [{'category': 'Oils', 'items': ['olive oil']}]},
    {'categories': [{'category': 'Oils', 'items': ['olive oil']}]},
])
def test_unwrap_categories_shapes(parsed):
    assert unwrap_categories(parsed)[0]['category'] == 'Oils'


def test_unwrap_categories_rejects_other_shapes():
    with pytest.raises(UpstreamFailure):
        unwrap_categories({'list': 'olive oil'})


def test_merge_prompt_lists_every_meal():
    prompt = build_prompt([
        {'title': 'Salad', 'ingredients': ['2 tbsp olive oil', '1 cucumber']},
        {'title': 'Pasta', 'ingredients': ['extra virgin olive oil']},
    ])
    assert 'Salad: 2 tbsp olive oil, 1 cucumber' in prompt
    assert 'Pasta: extra virgin olive oil' in prompt


def test_llm_merger_unwraps_reply():
    reply = json.dumps({'groceryList': [{'category': 'Oils', 'items': ['5 tbsp olive oil']}]})
    merger = LLMIngredientMerger(make_client(FakeSession(chat_reply(reply))))
    assert merger.merge([{'title': 'Salad', 'ingredients': ['olive oil']}]) == [
        {'category': 'Oils', 'items': ['5 tbsp olive oil']},
    ]
