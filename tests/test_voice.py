# tests/test_voice.py

from __future__ import annotations

from datetime import date

from vita_companion.analysis.voice import interpret_transcript
from vita_companion.core import chat

from .fakes import FakeLLMClient


def test_blank_transcript_skips_the_model() -> None:
    llm = FakeLLMClient()
    intent = interpret_transcript(llm, "   ", date(2025, 3, 5))
    assert intent.kind == "unknown"
    assert llm.calls == []


def test_unexpected_type_is_unknown() -> None:
    intent = interpret_transcript(FakeLLMClient('{"type": "poem"}'), "hola", date(2025, 3, 5))
    assert intent.kind == "unknown"


def test_voice_meal_with_calories_is_saved_directly(state, llm, transcriber) -> None:
    transcriber.text = "comí una ensalada"
    llm.queue('{"type": "meal", "name": "ensalada", "calories": "100"}')
    notes: list[str] = []

    reply = chat.handle_voice(state, b"OggS...", emit=notes.append)

    assert notes == ["Procesando tu nota de voz..."]
    assert reply == "✅ Registré tu comida:\nensalada - 100 calorías"
    assert len(llm.calls) == 1
    assert transcriber.calls[0][1:] == ("voice.ogg", "audio/ogg")


def test_failed_progress_message_does_not_drop_the_note(state, llm, transcriber) -> None:
    transcriber.text = "comí una manzana"
    llm.queue('{"type": "meal", "name": "manzana", "calories": "80"}')

    def broken_emit(text: str) -> None:
        raise TimeoutError("send timed out")

    reply = chat.handle_voice(state, b"audio", emit=broken_emit)

    assert reply == "✅ Registré tu comida:\nmanzana - 80 calorías"
    assert state.journal.list_meals()[0].name == "manzana"


def test_voice_meal_without_calories_is_reanalysed(state, llm, transcriber) -> None:
    transcriber.text = "comí una milanesa"
    llm.queue(
        '{"type": "meal", "name": "milanesa", "calories": "unknown"}',
        '{"name": "milanesa", "calories": "500"}',
    )

    reply = chat.handle_voice(state, b"audio")

    assert "milanesa - 500 calorías" in reply
    assert len(llm.calls) == 2
    assert state.journal.list_meals()[0].calories == 500


def test_voice_exercise_keeps_spoken_duration(state, llm, transcriber) -> None:
    transcriber.text = "salí a correr 45 minutos"
    llm.queue(
        '{"type": "exercise", "name": "correr", "duration": "45"}',
        '{"name": "correr", "calories": "400", "duration": "30"}',
    )

    chat.handle_voice(state, b"audio")

    ex = state.journal.list_exercises()[0]
    assert (ex.name, ex.calories, ex.duration_minutes) == ("correr", 400, 45)


def test_voice_todo_goes_through_todo_analysis(state, llm, transcriber) -> None:
    transcriber.text = "recordar comprar leche para mañana"
    today = chat.today_for(state)
    llm.queue(
        '{"type": "todo", "name": "comprar leche", "due_date": "mañana"}',
        '{"task": "comprar leche", "due_date": "2030-01-02"}',
    )

    reply = chat.handle_voice(state, b"audio")

    assert "✅ Tarea agregada:\ncomprar leche" in reply
    task = state.todos.list_all_tasks()[0]
    assert task.due_date == "2030-01-02"
    assert today.isoformat() in llm.prompts[1]


def test_voice_not_understood(state, llm, transcriber) -> None:
    transcriber.text = "bla bla"
    llm.queue('{"type": "unknown"}')
    assert chat.handle_voice(state, b"audio") == chat.VOICE_NOT_UNDERSTOOD


def test_voice_without_transcriber_config(state) -> None:
    class Offline:
        def transcribe(self, audio, *, filename, mime_type):
            raise RuntimeError("Transcription API key is not set. Set VITA_TRANSCRIPTION_API_KEY.")

    state.transcriber = Offline()
    reply = chat.handle_voice(state, b"audio")
    assert "VITA_TRANSCRIPTION_API_KEY" in reply
