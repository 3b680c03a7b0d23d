import json

from web.websocket import ConnectionManager, encode_message


def test_encode_message_envelope():
    message = json.loads(encode_message("new_event", {"id": "horror_1_1"}))
    assert message == {"event": "new_event", "data": {"id": "horror_1_1"}}
    assert json.loads(encode_message("log_entry"))["data"] == {}


def test_broadcast_sync_without_loop_is_noop():
    manager = ConnectionManager()
    manager.broadcast_sync("state_update", {"week": 1})
    assert manager.client_count == 0
