from faqcore.models import FAQRecord, ScoredRecord
from faqcore.prompts import DefaultPromptFactory
from faqcore.prompts.common import history_turns


def _scored(*pairs):
    return [ScoredRecord(FAQRecord(q, a), 1.0, i) for i, (q, a) in enumerate(pairs)]


def test_system_prompt_sets_persona_and_word_limit():
    system = DefaultPromptFactory(max_words=15).build_system()
    assert system.startswith("You are a knowledgeable Thai food and cuisine specialist.")
    assert "Keep all responses to 15 words or less" in system


def test_answer_instruction_lists_records_in_order():
    text = DefaultPromptFactory().answer_instruction(
        question="Is it spicy?",
        records=_scored(("Q1", "A1"), ("Q2", "A2")),
    )
    assert '"Is it spicy?"' in text
    assert "FAQ 1:\nQuestion: Q1\nAnswer: A1\n\nFAQ 2:\nQuestion: Q2\nAnswer: A2" in text
    assert "20 words or less" in text


def test_answer_instruction_without_records():
    text = DefaultPromptFactory().answer_instruction(question="?", records=[])
    assert "No matching FAQ entries." in text


def test_assemble_places_history_between_system_and_question():
    messages = DefaultPromptFactory().assemble(
        system="S",
        history=[{"role": "user", "content": "hi"}],
        user_text="Q",
    )
    assert messages == [
        {"role": "system", "content": "S"},
        {"role": "user", "content": "hi"},
        {"role": "user", "content": "Q"},
    ]


def test_history_turns_drop_malformed_entries():
    turns = history_turns(
        [
            {"role": "user", "content": " hi "},
            {"role": "tool", "content": "x"},
            {"role": "assistant", "content": ""},
            {"content": "no role"},
        ]
    )
    assert turns == [{"role": "user", "content": "hi"}]
    assert history_turns(None) == []
