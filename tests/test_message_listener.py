# tests/test_message_listener.py

import asyncio

from core.dispatcher import Dispatcher
from core.scheduler import MessageListener
from core.session_bridge import SessionBridge


def message(sender, recipient, content):
    return {"sender_id": sender, "recipient_id": recipient, "content": content, "is_ai_message": False}


def test_only_messages_arriving_after_start_are_read(store, channel, handlers):
    bridge = SessionBridge(channel, Dispatcher(handlers, store), "farmer-1")
    listener = MessageListener(store, bridge, "farmer-1")

    async def scenario():
        await store.append("messages", message("farmer-2", "farmer-1", "old news"))
        await bridge.connect()
        await listener.start()
        await store.append("messages", message("farmer-2", "farmer-1", "Rain tomorrow, cover the hay"))
        await store.append("messages", message("farmer-2", "farmer-3", "not for you"))
        await listener.stop()
        await store.append("messages", message("farmer-2", "farmer-1", "after stop"))

    asyncio.run(scenario())

    assert channel.sent_texts == [
        "Please read this message to the user: "
        'You\'ve received a new message from farmer-2: "Rain tomorrow, cover the hay"'
    ]
    assert [m.content for m in listener.history] == ["Rain tomorrow, cover the hay"]


def test_message_sent_through_the_session_reaches_the_friend(store, handlers, make_channel):
    alice_channel, bob_channel = make_channel(), make_channel()
    alice = SessionBridge(alice_channel, Dispatcher(handlers, store), "alice")
    bob = SessionBridge(bob_channel, Dispatcher(handlers, store), "bob")
    bob_listener = MessageListener(store, bob, "bob")

    async def scenario():
        await alice.connect()
        await bob.connect()
        await bob_listener.start()
        await alice_channel.deliver([
            {"id": "1", "name": "connect_user", "args": {"userid": "bob", "friendName": "Bob"}},
            {"id": "2", "name": "send_message", "args": {"name": "Bob", "content": "Tractor is free today"}},
        ])

    asyncio.run(scenario())

    assert [r.result for r in alice_channel.sent_responses[0]] == ["Bob added to your friends.", "Message sent to Bob."]
    assert bob_channel.sent_texts[0].endswith('new message from alice: "Tractor is free today"')
