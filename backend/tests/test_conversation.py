import asyncio
import threading

import conversation
from policy import REFUSAL_TEXT


def record_storage_threads(monkeypatch):
    threads = []
    load, save = conversation.load_conversation, conversation.save_conversation

    def tracked_load():
        threads.append(threading.get_ident())
        return load()

    def tracked_save(convo):
        threads.append(threading.get_ident())
        save(convo)

    monkeypatch.setattr(conversation, "load_conversation", tracked_load)
    monkeypatch.setattr(conversation, "save_conversation", tracked_save)
    return threads


async def send_and_note_loop_thread(text, loop_threads):
    loop_threads.append(threading.get_ident())
    return await conversation.send_message(text)


def test_state_file_io_runs_off_the_event_loop(fake_llm, fake_store, monkeypatch):
    io_threads = record_storage_threads(monkeypatch)
    loop_threads = []

    reply = asyncio.run(send_and_note_loop_thread("walk more?", loop_threads))

    assert reply == "Stay hydrated."
    # load, save the user turn, save the reply
    assert len(io_threads) == 3
    assert loop_threads[0] not in io_threads


def test_local_refusal_is_saved(fake_llm, monkeypatch):
    io_threads = record_storage_threads(monkeypatch)

    assert asyncio.run(conversation.send_message("tell me a joke")) == REFUSAL_TEXT
    assert len(io_threads) == 2
    assert fake_llm.requests == []

    visible = conversation.visible_messages(conversation.load_conversation())
    assert visible[-1] == {"role": "assistant", "content": REFUSAL_TEXT}
