"""Unit tests for PublishSource."""

import asyncio
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fakes import FakeProvider, FakePublisher, make_issue

from tweetboard.board import Board, ProviderError, PublishState
from tweetboard.config import TweetboardConfig
from tweetboard.sources import PublishSource


@pytest_asyncio.fixture
async def source(
    board: Board, publisher: FakePublisher, config: TweetboardConfig
) -> AsyncGenerator[PublishSource, None]:
    source = PublishSource(board, publisher, config)
    source.start()
    yield source
    await source.stop()


@pytest.fixture
def idle_source(
    board: Board, publisher: FakePublisher, config: TweetboardConfig
) -> PublishSource:
    """A source that is not subscribed, driven by direct calls."""
    return PublishSource(board, publisher, config)


@pytest.mark.unit
class TestPublishing:
    """Tests for publishing eligible cards."""

    @pytest.mark.asyncio
    async def test_card_moved_to_outbound_is_tweeted(
        self,
        source: PublishSource,
        board: Board,
        publisher: FakePublisher,
        provider: FakeProvider,
    ) -> None:
        columns = await board.columns()
        card = await board.add_card(make_issue(1, body="Launch day!"), columns["ideas"])
        await board.events.wait_idle()
        assert publisher.posts == []

        await board.move_card(card, columns["toTweet"])
        await board.events.wait_idle()

        assert publisher.posts == [("Launch day!", None)]
        assert card.published
        assert card.url == "https://twitter.com/i/web/status/1"
        assert provider.annotations == [(card.card_id, 1, card.url, "tweeted")]

    @pytest.mark.asyncio
    async def test_reply_and_retweet(
        self, source: PublishSource, board: Board, publisher: FakePublisher
    ) -> None:
        columns = await board.columns()
        await board.add_card(make_issue(1, body="reply-to: 55\nGood point"), columns["toTweet"])
        await board.add_card(make_issue(2, body="retweet: 66"), columns["toTweet"])
        await board.events.wait_idle()

        assert publisher.posts == [("Good point", "55")]
        assert publisher.reposts == ["66"]

    @pytest.mark.asyncio
    async def test_invalid_and_published_cards_are_skipped(
        self, source: PublishSource, board: Board, publisher: FakePublisher
    ) -> None:
        columns = await board.columns()
        await board.add_card(make_issue(1, body="x" * 300), columns["toTweet"])
        await board.add_card(make_issue(2, labels=("tweeted",)), columns["toTweet"])
        await board.events.wait_idle()

        assert publisher.posts == []

    @pytest.mark.asyncio
    async def test_overlapping_updates_publish_once(
        self,
        source: PublishSource,
        board: Board,
        publisher: FakePublisher,
        provider: FakeProvider,
    ) -> None:
        """Two updates while card C is being published lead to one tweet."""
        columns = await board.columns()
        publisher.gate = asyncio.Event()
        card = await board.add_card(make_issue(1), columns["toTweet"], first_run=True)

        board.notify_updated()
        board.notify_updated()
        await asyncio.sleep(0.01)
        assert card.publish_state == PublishState.PUBLISHING

        publisher.gate.set()
        await board.events.wait_idle()

        assert publisher.posts == [("Hello world", None)]
        assert card.published
        assert provider.call_count("annotate_card") == 1

    @pytest.mark.asyncio
    async def test_failure_is_isolated(
        self, idle_source: PublishSource, board: Board, publisher: FakePublisher
    ) -> None:
        """One failing card does not keep the others from being tweeted."""
        columns = await board.columns()
        publisher.fail_texts = {"Broken"}
        bad = await board.add_card(make_issue(1, body="Broken"), columns["toTweet"], True)
        good = await board.add_card(make_issue(2, body="Fine"), columns["toTweet"], True)

        published = await idle_source.publish_eligible()

        assert published == [good]
        assert good.published
        assert bad.publish_state == PublishState.PENDING
        assert bad.can_tweet

    @pytest.mark.asyncio
    async def test_failed_card_is_retried_on_next_update(
        self, idle_source: PublishSource, board: Board, publisher: FakePublisher
    ) -> None:
        columns = await board.columns()
        publisher.fail_texts = {"Flaky"}
        card = await board.add_card(make_issue(1, body="Flaky"), columns["toTweet"], True)
        await idle_source.publish_eligible()

        publisher.fail_texts = set()
        await idle_source.publish_eligible()

        assert card.published
        assert len(publisher.posts) == 2

    @pytest.mark.asyncio
    async def test_annotation_failure_never_republishes(
        self,
        idle_source: PublishSource,
        board: Board,
        publisher: FakePublisher,
        provider: FakeProvider,
    ) -> None:
        columns = await board.columns()
        provider.fail["annotate_card"] = ProviderError("boom", status_code=500)
        card = await board.add_card(make_issue(1), columns["toTweet"], True)

        assert await idle_source.publish_eligible() == [card]
        assert await idle_source.publish_eligible() == []

        assert len(publisher.posts) == 1
        assert card.published

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(
        self, board: Board, publisher: FakePublisher, config: TweetboardConfig
    ) -> None:
        source = PublishSource(board, publisher, config)
        source.start()
        await source.stop()
        columns = await board.columns()

        await board.add_card(make_issue(1), columns["toTweet"])
        await board.events.wait_idle()

        assert publisher.posts == []
