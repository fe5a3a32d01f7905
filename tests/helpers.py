from unittest.mock import Mock


def make_response(status_code=200, payload=None, text=''):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def chat_payload(content, usage=None):
    payload = {'choices': [{'message': {'role': 'assistant', 'content': content}}]}
    if usage is not None:
        payload['usage'] = usage
    return payload
