from cs_agent.streaming.accumulator import ToolCallAccumulator


def _delta(arguments, name=None, call_id=None, index=0):
    function = {"arguments": arguments}
    if name is not None:
        function["name"] = name
    delta = {"index": index, "function": function}
    if call_id is not None:
        delta["id"] = call_id
    return delta


def test_fragmented_arguments_complete_once():
    acc = ToolCallAccumulator()
    results = [
        acc.feed(_delta('{"customerQuery"', name="call_sports_dept", call_id="call_1")),
        acc.feed(_delta(':"wh')),
        acc.feed(_delta('at?"}')),
    ]
    completed = [r for r in results if r is not None]
    assert len(completed) == 1
    inv = completed[0]
    assert inv.arguments == {"customerQuery": "what?"}
    assert inv.name == "call_sports_dept"
    assert inv.id == "call_1"
    assert inv.completed
    assert not acc.in_flight


def test_inner_brace_does_not_finish_call():
    acc = ToolCallAccumulator()
    assert acc.feed(_delta('{"order": {"id": 7}', name="call_travel_dept", call_id="c")) is None
    assert acc.in_flight
    inv = acc.feed(_delta("}"))
    assert inv is not None
    assert inv.arguments == {"order": {"id": 7}}


def test_later_fragments_cannot_rename_call():
    acc = ToolCallAccumulator()
    acc.feed(_delta("{", name="call_sports_dept", call_id="first", index=0))
    inv = acc.feed(_delta('"customerQuery": "x"}', name="call_travel_dept", call_id="second", index=3))
    assert inv.name == "call_sports_dept"
    assert inv.id == "first"
    assert inv.index == 0


def test_single_fragment_call():
    acc = ToolCallAccumulator()
    inv = acc.feed(_delta('{"customerQuery": "hi"}', name="call_sports_dept", call_id="c"))
    assert inv.arguments == {"customerQuery": "hi"}


def test_flush_returns_raw_arguments():
    acc = ToolCallAccumulator()
    acc.feed(_delta('{"customerQuery": "wh', name="call_sports_dept", call_id="c"))
    inv = acc.flush()
    assert inv.arguments == '{"customerQuery": "wh'
    assert not inv.completed
    assert acc.flush() is None


def test_missing_arguments_treated_as_empty():
    acc = ToolCallAccumulator()
    assert acc.feed({"index": 0, "id": "c", "function": {"name": "call_sports_dept"}}) is None
    inv = acc.feed(_delta("{}"))
    assert inv.arguments == {}


def test_non_object_function_is_treated_as_empty():
    acc = ToolCallAccumulator()
    assert acc.feed({"index": 0, "id": "c", "function": "call_sports_dept"}) is None
    inv = acc.feed(_delta('{"customerQuery": "x"}'))
    assert inv.name == ""
    assert inv.arguments == {"customerQuery": "x"}
