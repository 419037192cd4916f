from codex_compat import SSEParser, collect_completed_response


TRANSCRIPT = (
    'event: response.created\n'
    'data: {"type":"response.created","response":{"id":"r1","status":"in_progress"}}\n'
    '\n'
    'event: response.output_text.delta\n'
    'data: {"type":"response.output_text.delta","delta":"Hel"}\n'
    '\n'
    'event: response.completed\n'
    'data: {"type":"response.completed","response":{"id":"r1"}}\n'
    '\n'
    'data: [DONE]\n'
    '\n'
)


def test_returns_nested_completed_response() -> None:
    assert collect_completed_response(TRANSCRIPT) == {"id": "r1"}


def test_last_completed_event_wins() -> None:
    body = (
        'data: {"type":"response.completed","response":{"id":"first"}}\n\n'
        'data: not json\n\n'
        'data: {"type":"response.completed","response":{"id":"second"}}\n\n'
    )
    assert collect_completed_response(body) == {"id": "second"}


def test_completed_event_without_nested_response() -> None:
    body = 'data: {"type":"response.completed","id":"flat"}\n\n'
    assert collect_completed_response(body) == {"type": "response.completed", "id": "flat"}


def test_missing_completed_event_returns_raw_body() -> None:
    body = 'data: {"type":"response.created","response":{"id":"r1"}}\n\ndata: [DONE]\n\n'
    assert collect_completed_response(body) is body


def test_empty_body() -> None:
    assert collect_completed_response("") == ""


def test_parser_handles_split_chunks_and_crlf() -> None:
    parser = SSEParser()
    events = []
    for chunk in ['event: a\r\nda', 'ta: {"x":', ' 1}\r\n', '\r\n: keepalive\n', 'data: tail']:
        events.extend(parser.feed(chunk))
    events.extend(parser.flush())

    assert [(e.event, e.data) for e in events] == [("a", '{"x": 1}'), (None, "tail")]


def test_parser_joins_multiline_data() -> None:
    events = SSEParser().feed("data: one\ndata: two\n\n")
    assert events[0].data == "one\ntwo"


def test_parser_ignores_id_and_retry_fields() -> None:
    events = SSEParser().feed("id: 7\nretry: 100\nevent: ping\ndata\n\n")
    assert [(e.event, e.data) for e in events] == [("ping", "")]
