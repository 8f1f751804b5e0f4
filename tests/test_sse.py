from src.utils.sse import format_sse, iter_sse_data


def test_format_sse_frames_single_line():
    assert format_sse('{"answer": "hi"}') == 'data: {"answer": "hi"}\n\n'


def test_format_sse_splits_multiline_payload():
    assert format_sse("a\nb") == "data: a\ndata: b\n\n"


def test_iter_sse_data_yields_each_event():
    lines = ["data: one", "", "data: two", ""]
    assert list(iter_sse_data(lines)) == ["one", "two"]


def test_iter_sse_data_joins_multiline_and_skips_other_fields():
    lines = [": keep-alive", "event: message", "id: 7", "data: a", "data: b", "", ""]
    assert list(iter_sse_data(lines)) == ["a\nb"]


def test_iter_sse_data_accepts_bytes_and_drops_unterminated_tail():
    lines = [b"data: one", b"", b"data:two"]
    assert list(iter_sse_data(lines)) == ["one"]


def test_iter_sse_data_round_trips_formatted_messages():
    text = format_sse('{"answer": "x"}') + format_sse('{"done": true}')
    assert list(iter_sse_data(text.splitlines())) == ['{"answer": "x"}', '{"done": true}']
