import asyncio

from conftest import FailingEmbedder, FakeGenerator, FakeLoader, FakePrimary, SlowLoader
from faqcore.controller import FAQAssistantController
from faqcore.models import BackendStatus, GeneratorAvailability
from faqcore.persistence.kv_store import InMemoryKeyValueStore
from faqcore.persistence.vector_store import STORAGE_KEY
from faqcore.selector import AnswerSourceSelector, SecondaryBackendState


def _controller(entries, embedder, selector=None, **kwargs):
    return FAQAssistantController(
        embedder=embedder,
        store=InMemoryKeyValueStore(),
        entries=entries,
        selector=selector,
        **kwargs,
    )


def test_search_without_generators_returns_raw_answers_in_score_order(entries, embedder):
    controller = _controller(entries, embedder)

    answers = asyncio.run(controller.search("noodles"))

    # query [1,0,0]: Pad Thai 1.0, spicy 0.6, Tom Yum 0, Som Tam 0, mango -1
    assert answers == [
        "Stir-fried rice noodles.",
        "Mild to very hot.",
        "Hot and sour soup.",
        "Green papaya salad.",
        "A coconut rice dessert.",
    ]
    assert controller.last_availability is GeneratorAvailability.UNAVAILABLE


def test_search_respects_result_limit(entries, embedder):
    controller = _controller(entries, embedder, result_limit=2)
    assert len(asyncio.run(controller.search("noodles"))) == 2


def test_search_with_primary_returns_single_generated_answer(entries, embedder):
    primary = FakePrimary(reply="**Pad Thai**: sweet, sour noodles!")
    controller = _controller(entries, embedder, AnswerSourceSelector(primary=primary))

    answers = asyncio.run(controller.search("noodles"))

    assert answers == ["**Pad Thai**: sweet, sour noodles!"]
    assert controller.last_availability is GeneratorAvailability.PRIMARY
    prompt = primary.sessions[0].prompts[0]
    assert "FAQ 3:" in prompt and "FAQ 4:" not in prompt
    assert "Question: What is Pad Thai?" in prompt


def test_search_falls_back_to_local_model(entries, embedder):
    selector = AnswerSourceSelector(
        primary=FakePrimary(status=BackendStatus.UNAVAILABLE),
        secondary_loader=FakeLoader(FakeGenerator("Tom Yum is a hot and sour soup.")),
    )
    controller = _controller(entries, embedder, selector)

    assert asyncio.run(controller.search("soup")) == ["Tom Yum is a hot and sour soup."]
    assert controller.last_availability is GeneratorAvailability.FALLBACK


def test_search_returns_raw_answers_when_every_generator_fails(entries, embedder):
    selector = AnswerSourceSelector(
        primary=FakePrimary(prompt_error=RuntimeError("quota")),
        secondary_loader=FakeLoader(error=OSError("no weights")),
    )
    controller = _controller(entries, embedder, selector)
    answers = asyncio.run(controller.search("soup"))
    assert answers[0] == "Hot and sour soup."
    assert len(answers) == len(entries)


def test_search_blank_query(entries, embedder):
    controller = _controller(entries, embedder)
    assert asyncio.run(controller.search("   \x00 ")) == []
    assert embedder.calls == []


def test_search_embedder_failure_returns_empty(entries):
    controller = _controller(entries, FailingEmbedder())
    assert asyncio.run(controller.search("noodles")) == []


def test_search_empty_corpus(embedder):
    controller = _controller([], embedder)
    assert asyncio.run(controller.search("noodles")) == []


def test_search_recovers_from_corrupt_storage(entries, embedder):
    store = InMemoryKeyValueStore()
    store.set(STORAGE_KEY, "not-json")
    controller = FAQAssistantController(embedder=embedder, store=store, entries=entries)
    assert asyncio.run(controller.search("noodles"))[0] == "Stir-fried rice noodles."


def test_search_redacts_pii_before_generation(entries, embedder):
    primary = FakePrimary()
    controller = _controller(entries, embedder, AnswerSourceSelector(primary=primary))
    asyncio.run(controller.search("noodles for me@example.com"))
    prompt = primary.sessions[0].prompts[0]
    assert "me@example.com" not in prompt
    assert "[EMAIL]" in prompt


def test_ask_keeps_pii_out_of_later_seed_turns(entries, embedder):
    primary = FakePrimary(reply="Pad Thai!")
    controller = _controller(entries, embedder, AnswerSourceSelector(primary=primary))

    asyncio.run(controller.ask("noodles for me@example.com"))
    asyncio.run(controller.ask("soup"))

    seed = primary.sessions[1].initial_prompts
    assert {"role": "user", "content": "noodles for [EMAIL]"} in seed
    assert all("me@example.com" not in m["content"] for m in seed)
    assert controller.get_history()[0] == {
        "role": "user",
        "content": "noodles for [EMAIL]",
    }


def test_search_redacts_caller_supplied_history(entries, embedder):
    primary = FakePrimary()
    controller = _controller(entries, embedder, AnswerSourceSelector(primary=primary))
    history = [{"role": "user", "content": "call me at +1 (555) 123-4567"}]

    asyncio.run(controller.search("noodles", history))

    seed = primary.sessions[0].initial_prompts
    assert seed[1] == {"role": "user", "content": "call me at [PHONE]"}
    assert history[0]["content"] == "call me at +1 (555) 123-4567"


def test_ask_records_history_and_passes_it_on(entries, embedder):
    primary = FakePrimary(reply="Pad Thai!")
    controller = _controller(entries, embedder, AnswerSourceSelector(primary=primary))

    asyncio.run(controller.ask("noodles"))
    asyncio.run(controller.ask("soup"))

    assert controller.get_history() == [
        {"role": "user", "content": "noodles"},
        {"role": "assistant", "content": "Pad Thai!"},
        {"role": "user", "content": "soup"},
        {"role": "assistant", "content": "Pad Thai!"},
    ]
    second_seed = primary.sessions[1].initial_prompts
    assert second_seed[1:] == [
        {"role": "user", "content": "noodles"},
        {"role": "assistant", "content": "Pad Thai!"},
    ]


def test_reset_clears_history_but_keeps_embeddings(entries, embedder):
    controller = _controller(entries, embedder)
    asyncio.run(controller.ask("noodles"))
    controller.reset()
    assert controller.get_history() == []
    assert controller.last_availability is None
    assert controller.vectors.is_initialized()

    controller.clear_storage()
    assert not controller.vectors.is_initialized()


def test_concurrent_searches_in_new_event_loop_keep_raw_answers(entries, embedder):
    state = SecondaryBackendState()
    loader = SlowLoader(error=OSError("download in progress"))
    controller = _controller(
        entries,
        embedder,
        AnswerSourceSelector(secondary_loader=loader, state=state),
    )

    async def two_searches():
        return await asyncio.gather(
            controller.search("noodles"), controller.search("noodles")
        )

    first = asyncio.run(two_searches())
    second = asyncio.run(two_searches())

    for answers in [*first, *second]:
        assert answers[0] == "Stir-fried rice noodles."
        assert len(answers) == len(entries)
