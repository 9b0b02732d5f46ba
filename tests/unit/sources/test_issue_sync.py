"""Unit tests for IssueSyncSource."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fakes import FakeProvider, FakeTracker, make_issue

from tweetboard.board import Board, IssueState, ProviderError
from tweetboard.config import TweetboardConfig
from tweetboard.events import EventType
from tweetboard.sources import IssueSyncSource


async def restarted_board(provider: FakeProvider, config: TweetboardConfig) -> Board:
    """Provision the provider, then return a fresh Board over it, as after a restart."""
    first = Board(provider, config)
    await first.setup()
    await first.close()
    board = Board(provider, config)
    await board.setup()
    return board


async def start_source(
    board: Board, tracker: FakeTracker, config: TweetboardConfig
) -> IssueSyncSource:
    source = IssueSyncSource(board, tracker, config)
    await source.start()
    await board.events.wait_idle()
    return source


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest_asyncio.fixture
async def source(
    board: Board, tracker: FakeTracker, config: TweetboardConfig
) -> AsyncGenerator[IssueSyncSource, None]:
    source = await start_source(board, tracker, config)
    yield source
    await source.stop()


async def deliver(tracker: FakeTracker, event: EventType, issue) -> None:
    tracker.events.emit(event, issue)
    await tracker.events.wait_idle()


@pytest.mark.unit
class TestIssueLifecycle:
    """Tests for opened/updated/closed handling."""

    @pytest.mark.asyncio
    async def test_issue_42_lifecycle(
        self,
        source: IssueSyncSource,
        board: Board,
        tracker: FakeTracker,
        provider: FakeProvider,
    ) -> None:
        """Opened, updated, closed: created in ideas, refreshed there, removed."""
        columns = await board.columns()

        await deliver(tracker, EventType.OPENED, make_issue(42, body="First draft"))
        card = columns["ideas"].cards[42]
        assert card.content.tweet == "First draft"

        await deliver(tracker, EventType.UPDATED, make_issue(42, body="Second draft"))
        assert columns["ideas"].cards[42] is card
        assert card.content.tweet == "Second draft"

        closed = make_issue(42, state=IssueState.CLOSED)
        await deliver(tracker, EventType.CLOSED, closed)

        assert await board.find_card(42) is None
        assert provider.issues_in("Ideas") == []

    @pytest.mark.asyncio
    async def test_opened_existing_card_is_refreshed_in_place(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker
    ) -> None:
        columns = await board.columns()
        card = await board.add_card(make_issue(3, body="Old"), columns["tweeted"])

        await deliver(tracker, EventType.OPENED, make_issue(3, body="New"))

        assert card.column is columns["tweeted"]
        assert card.content.tweet == "New"
        assert 3 not in columns["ideas"].cards

    @pytest.mark.asyncio
    async def test_updated_revalidates(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker
    ) -> None:
        columns = await board.columns()
        card = await board.add_card(make_issue(3), columns["toTweet"])

        await deliver(tracker, EventType.UPDATED, make_issue(3, body="x" * 500))

        assert not card.valid
        assert not card.can_tweet
        assert card.column is columns["toTweet"]

    @pytest.mark.asyncio
    async def test_updated_untracked_issue_is_ignored(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker, provider: FakeProvider
    ) -> None:
        await deliver(tracker, EventType.UPDATED, make_issue(77))

        assert await board.find_card(77) is None
        assert provider.call_count("create_card") == 0

    @pytest.mark.asyncio
    async def test_updated_in_unmanaged_column_is_ignored(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker
    ) -> None:
        columns = await board.columns()
        card = await board.add_card(make_issue(3, body="Kept"), columns["tweeted"])

        await deliver(tracker, EventType.UPDATED, make_issue(3, body="Changed"))

        assert card.content.tweet == "Kept"

    @pytest.mark.asyncio
    async def test_closed_in_unmanaged_column_is_kept(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker
    ) -> None:
        columns = await board.columns()
        card = await board.add_card(make_issue(3), columns["tweeted"])

        await deliver(tracker, EventType.CLOSED, make_issue(3, state=IssueState.CLOSED))

        assert columns["tweeted"].cards[3] is card

    @pytest.mark.asyncio
    async def test_same_issue_events_keep_order(
        self, source: IssueSyncSource, board: Board, tracker: FakeTracker
    ) -> None:
        """A close delivered right after an open is applied after it."""
        tracker.events.emit(EventType.OPENED, make_issue(5))
        tracker.events.emit(EventType.CLOSED, make_issue(5, state=IssueState.CLOSED))
        await tracker.events.wait_idle()

        assert await board.find_card(5) is None

    @pytest.mark.asyncio
    async def test_issue_locks_released_after_events(
        self,
        source: IssueSyncSource,
        tracker: FakeTracker,
        provider: FakeProvider,
    ) -> None:
        """Per-issue ordering state does not grow with every issue ever seen."""
        for number in range(1, 6):
            tracker.events.emit(EventType.OPENED, make_issue(number))
            tracker.events.emit(EventType.UPDATED, make_issue(number, body="Edited"))
        provider.fail["create_card"] = ProviderError("boom", status_code=502)
        tracker.events.emit(EventType.OPENED, make_issue(6))
        await tracker.events.wait_idle()

        assert source._locks == {}
        assert source._lock_users == {}

    @pytest.mark.asyncio
    async def test_managed_columns_follow_config(
        self, provider: FakeProvider, config: TweetboardConfig
    ) -> None:
        custom = config.model_copy(update={"unmanaged_columns": ["tweeted", "events"]})
        board = Board(provider, custom)
        await board.setup()
        source = IssueSyncSource(board, FakeTracker(), custom)

        managed = await source.managed_columns()

        assert [column.name for column in managed] == ["ideas", "reactions", "toTweet"]

    @pytest.mark.asyncio
    async def test_failed_event_does_not_stop_processing(
        self,
        source: IssueSyncSource,
        board: Board,
        tracker: FakeTracker,
        provider: FakeProvider,
    ) -> None:
        provider.fail["create_card"] = ProviderError("boom", status_code=502)
        await deliver(tracker, EventType.OPENED, make_issue(1))
        assert await board.find_card(1) is None

        del provider.fail["create_card"]
        await deliver(tracker, EventType.OPENED, make_issue(2))

        assert await board.find_card(2) is not None
        assert tracker.events.handler_count(EventType.OPENED) == 1

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, board: Board, config: TweetboardConfig) -> None:
        tracker = FakeTracker()
        source = await start_source(board, tracker, config)

        await source.stop()

        for event in (EventType.OPENED, EventType.UPDATED, EventType.CLOSED):
            assert tracker.events.handler_count(event) == 0


@pytest.mark.unit
class TestStartupReconciliation:
    """Tests for the initial backlog load."""

    @pytest.mark.asyncio
    async def test_open_issues_are_added_silently(
        self, board: Board, config: TweetboardConfig
    ) -> None:
        tracker = FakeTracker(open_issues=[make_issue(1), make_issue(2)])
        updates: list[str] = []

        async def on_updated() -> None:
            updates.append("updated")

        board.events.on(EventType.UPDATED, on_updated)

        source = await start_source(board, tracker, config)

        columns = await board.columns()
        assert list(columns["ideas"].cards) == [1, 2]
        assert updates == []
        await source.stop()

    @pytest.mark.asyncio
    async def test_existing_cards_are_not_duplicated(
        self, provider: FakeProvider, config: TweetboardConfig
    ) -> None:
        board = await restarted_board(provider, config)
        provider.add_card(provider.column_id("To Tweet"), 3)
        tracker = FakeTracker(open_issues=[make_issue(3, body="Ready to go")])

        source = await start_source(board, tracker, config)

        columns = await board.columns()
        assert columns["toTweet"].cards[3].content.tweet == "Ready to go"
        assert 3 not in columns["ideas"].cards
        assert provider.call_count("create_card") == 0
        await source.stop()
        await board.close()

    @pytest.mark.asyncio
    async def test_issues_closed_while_offline_are_removed(
        self, provider: FakeProvider, config: TweetboardConfig
    ) -> None:
        """Closed issues leave managed columns; unmanaged and untracked ones stay."""
        board = await restarted_board(provider, config)
        provider.add_card(provider.column_id("Ideas"), 9)
        provider.add_card(provider.column_id("Tweeted"), 10)
        tracker = FakeTracker(
            closed_issues=[
                make_issue(9, state=IssueState.CLOSED),
                make_issue(10, state=IssueState.CLOSED),
                make_issue(11, state=IssueState.CLOSED),
            ]
        )

        source = await start_source(board, tracker, config)

        assert provider.issues_in("Ideas") == []
        assert provider.issues_in("Tweeted") == [10]
        assert await board.find_card(11) is None
        assert provider.call_count("create_card") == 0
        await source.stop()
        await board.close()
