import asyncio

import pytest

from faqcore.models import BackendStatus, FAQEntry, FAQRecord


class FakeEmbedder:
    """Maps known texts to fixed vectors; unknown texts get a default."""

    def __init__(self, vectors=None, default=(0.0, 0.0, 1.0)):
        self.vectors = dict(vectors or {})
        self.default = list(default)
        self.calls = []

    async def embed(self, text):
        self.calls.append(text)
        await asyncio.sleep(0)
        return list(self.vectors.get(text, self.default))


class FailingEmbedder:
    async def embed(self, text):
        raise RuntimeError("embedding model unavailable")


class FakeSession:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []
        self.destroyed = False

    async def prompt(self, text):
        self.prompts.append(text)
        if self.error:
            raise self.error
        return self.reply

    def destroy(self):
        self.destroyed = True


class FakePrimary:
    def __init__(
        self,
        *,
        present=True,
        status=BackendStatus.AVAILABLE,
        probe_error=None,
        reply="Try **Pad Thai**!",
        prompt_error=None,
    ):
        self.present = present
        self.status = status
        self.probe_error = probe_error
        self.reply = reply
        self.prompt_error = prompt_error
        self.sessions = []
        self.probes = 0

    def is_present(self):
        return self.present

    async def availability(self):
        self.probes += 1
        if self.probe_error:
            raise self.probe_error
        return self.status

    async def create_session(self, *, initial_prompts):
        session = FakeSession(self.reply, self.prompt_error)
        session.initial_prompts = initial_prompts
        self.sessions.append(session)
        return session


class FakeGenerator:
    def __init__(self, reply="Local answer.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


class FakeLoader:
    def __init__(self, generator=None, error=None):
        self.generator = generator or FakeGenerator()
        self.error = error
        self.loads = 0

    async def load(self):
        self.loads += 1
        if self.error:
            raise self.error
        return self.generator



class SlowLoader(FakeLoader):
    """Yields to the event loop before loading, so concurrent callers contend."""

    async def load(self):
        await asyncio.sleep(0)
        return await super().load()


@pytest.fixture
def entries():
    return [
        FAQEntry("What is Pad Thai?", "Stir-fried rice noodles."),
        FAQEntry("What is Tom Yum?", "Hot and sour soup."),
        FAQEntry("How spicy is Thai food?", "Mild to very hot."),
        FAQEntry("What is Som Tam?", "Green papaya salad."),
        FAQEntry("What is mango sticky rice?", "A coconut rice dessert."),
    ]


@pytest.fixture
def entry_vectors():
    return [
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.6, 0.8, 0.0],
        [0.0, 0.0, 1.0],
        [-1.0, 0.0, 0.0],
    ]


@pytest.fixture
def embedder(entries, entry_vectors):
    vectors = {
        e.question + " " + e.answer: v for e, v in zip(entries, entry_vectors)
    }
    vectors["noodles"] = [1.0, 0.0, 0.0]
    vectors["soup"] = [0.0, 1.0, 0.0]
    return FakeEmbedder(vectors)


@pytest.fixture
def records(entries, entry_vectors):
    return [
        FAQRecord(e.question, e.answer, tuple(v))
        for e, v in zip(entries, entry_vectors)
    ]
