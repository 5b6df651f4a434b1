"""
Unit tests for SectionNarrator.
"""

import pytest

from favcast.synthesis.section_narrator import PLACEHOLDER_TEXT, SectionNarrator


def numbered_responder():
    """Responder that answers 'Narration N.' for the Nth call."""
    counter = {"n": 0}

    def respond(prompt, system):
        counter["n"] += 1
        return f"Narration {counter['n']}."

    return respond


@pytest.mark.unit
class TestChunking:
    """Tests for item chunking."""

    def test_chunk_items(self, fake_generator, make_summarized):
        narrator = SectionNarrator(fake_generator, chunk_size=5)
        items = [make_summarized(i) for i in range(12)]

        chunks = narrator.chunk_items(items)

        assert [len(c) for c in chunks] == [5, 5, 2]
        assert [i for c in chunks for i in c] == items

    def test_invalid_chunk_size(self, fake_generator):
        with pytest.raises(ValueError):
            SectionNarrator(fake_generator, chunk_size=0)


@pytest.mark.unit
class TestNarrate:
    """Tests for narrate."""

    @pytest.mark.asyncio
    async def test_one_call_per_chunk_in_order(self, generator_factory, make_summarized, no_retry):
        generator = generator_factory(numbered_responder())
        narrator = SectionNarrator(generator, chunk_size=5, retry_policy=no_retry)
        items = [make_summarized(i) for i in range(7)]

        text = await narrator.narrate(items, "AI and Machine Learning")

        assert len(generator.calls) == 2
        assert text == "Narration 1.\n\nNarration 2."
        assert "part 1 of 2" in generator.calls[0]
        assert "part 2 of 2" in generator.calls[1]

    @pytest.mark.asyncio
    async def test_failed_chunk_becomes_placeholder(self, generator_factory, make_summarized, no_retry):
        """Test a chunk that exhausts retries is replaced and later chunks still run."""

        def respond(prompt, system):
            if "part 1 of 2" in prompt:
                raise ConnectionError("model unavailable")
            return "Second chunk narration."

        generator = generator_factory(respond)
        narrator = SectionNarrator(generator, chunk_size=5, retry_policy=no_retry)
        items = [make_summarized(i) for i in range(7)]

        text = await narrator.narrate(items, "Developer Tools")

        assert text == f"{PLACEHOLDER_TEXT}\n\nSecond chunk narration."
        # two attempts for the failing chunk, one for the second
        assert len(generator.calls) == 3

    @pytest.mark.asyncio
    async def test_all_chunks_failing_never_raises(self, generator_factory, make_summarized, no_retry):
        def respond(prompt, system):
            raise RuntimeError("down")

        narrator = SectionNarrator(generator_factory(respond), chunk_size=5, retry_policy=no_retry)

        text = await narrator.narrate([make_summarized(i) for i in range(7)], "News")

        assert text == f"{PLACEHOLDER_TEXT}\n\n{PLACEHOLDER_TEXT}"

    @pytest.mark.asyncio
    async def test_every_prompt_forbids_closing_phrases(self, fake_generator, make_summarized, no_retry):
        narrator = SectionNarrator(fake_generator, chunk_size=2, retry_policy=no_retry)

        await narrator.narrate([make_summarized(i) for i in range(6)], "Frameworks")

        assert len(fake_generator.calls) == 3
        for prompt in fake_generator.calls:
            assert '"in conclusion"' in prompt
            assert "Do not greet" in prompt

    @pytest.mark.asyncio
    async def test_position_hints(self, fake_generator, make_summarized, no_retry):
        narrator = SectionNarrator(fake_generator, chunk_size=1, retry_policy=no_retry)

        await narrator.narrate([make_summarized(i) for i in range(3)], "Hobbies")

        first, middle, last = fake_generator.calls
        assert "opening part" in first
        assert "continues the segment" in middle
        assert "last part" in last

    @pytest.mark.asyncio
    async def test_prompt_names_authors_and_summaries(self, fake_generator, make_summarized, no_retry):
        narrator = SectionNarrator(fake_generator, retry_policy=no_retry)
        item = make_summarized(1, author="@guido", summary="Python 3.14 removes the GIL by default.")

        await narrator.narrate([item], "Programming Languages")

        assert "@guido: Python 3.14 removes the GIL by default." in fake_generator.calls[0]
        assert '"Programming Languages"' in fake_generator.calls[0]

    @pytest.mark.asyncio
    async def test_output_is_cleaned(self, generator_factory, make_summarized, no_retry):
        generator = generator_factory(
            lambda prompt, system: "Hello everyone, Zed added AI agents. In conclusion, nice week."
        )
        narrator = SectionNarrator(generator, retry_policy=no_retry)

        text = await narrator.narrate([make_summarized(1)], "Developer Tools")

        assert text == "Zed added AI agents."

    @pytest.mark.asyncio
    async def test_news_opening_with_finally_is_kept(self, generator_factory, make_summarized, no_retry):
        generator = generator_factory(
            lambda prompt, system: "Finally, Anthropic shipped Claude 5 to every developer."
        )
        narrator = SectionNarrator(generator, retry_policy=no_retry)

        text = await narrator.narrate([make_summarized(1)], "AI and Machine Learning")

        assert text == "Anthropic shipped Claude 5 to every developer."
        assert text != PLACEHOLDER_TEXT

    @pytest.mark.asyncio
    async def test_long_chunk_is_split_by_character_budget(self, fake_generator, make_summarized, no_retry):
        narrator = SectionNarrator(fake_generator, chunk_size=5, max_chars=120, retry_policy=no_retry)
        items = [make_summarized(i, summary="A fairly long summary sentence. " * 3) for i in range(5)]

        await narrator.narrate(items, "AI and Machine Learning")

        assert len(fake_generator.calls) > 1

    @pytest.mark.asyncio
    async def test_empty_bucket(self, fake_generator):
        narrator = SectionNarrator(fake_generator)

        assert await narrator.narrate([], "News") == ""
        assert fake_generator.calls == []
