"""Unit tests for scheduler jobs module.

Tests the token sync job and scheduling functions.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


class TestSyncTokensJob:
    """Tests for sync_tokens_job function."""

    @pytest.mark.asyncio
    async def test_sync_tokens_job_runs_pass(self, mocker):
        """Job should call TokenSyncService.run_sync_pass()."""
        from hypurrspot.data.models.sync import SyncPassResult

        mock_service = MagicMock()
        mock_service.run_sync_pass = AsyncMock(return_value=SyncPassResult(inserted=2))

        mocker.patch(
            "hypurrspot.core.sync.token_sync.get_token_sync_service",
            new_callable=AsyncMock,
            return_value=mock_service,
        )

        from hypurrspot.scheduler.jobs import sync_tokens_job

        await sync_tokens_job()

        mock_service.run_sync_pass.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sync_tokens_job_handles_errors(self, mocker):
        """Job should handle errors gracefully without raising."""
        mock_service = MagicMock()
        mock_service.run_sync_pass = AsyncMock(side_effect=TimeoutError())

        mocker.patch(
            "hypurrspot.core.sync.token_sync.get_token_sync_service",
            new_callable=AsyncMock,
            return_value=mock_service,
        )

        from hypurrspot.scheduler.jobs import sync_tokens_job

        # Should not raise
        await sync_tokens_job()


class TestScheduleTokenSyncJob:
    """Tests for schedule_token_sync_job function."""

    def test_validates_interval(self):
        """Should raise ValueError for intervals under 5 seconds."""
        from hypurrspot.scheduler.jobs import schedule_token_sync_job

        with pytest.raises(ValueError, match="Invalid interval"):
            schedule_token_sync_job(interval_seconds=1)

    def test_adds_job_without_overlap(self, mocker):
        """
        Given: A scheduler without the job
        When: schedule_token_sync_job is called
        Then: The job is added with max_instances=1 and coalesce
        """
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = None
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import JOB_ID_TOKEN_SYNC, schedule_token_sync_job

        schedule_token_sync_job(interval_seconds=60)

        kwargs = mock_scheduler.add_job.call_args.kwargs
        assert kwargs["id"] == JOB_ID_TOKEN_SYNC
        assert kwargs["max_instances"] == 1
        assert kwargs["coalesce"] is True
        assert kwargs["trigger"].interval.total_seconds() == 60
        assert "next_run_time" not in kwargs
        mock_scheduler.remove_job.assert_not_called()

    def test_run_immediately_sets_next_run_time(self, mocker):
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = None
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import schedule_token_sync_job

        schedule_token_sync_job(interval_seconds=60, run_immediately=True)

        assert mock_scheduler.add_job.call_args.kwargs["next_run_time"] is not None

    def test_replaces_existing_job(self, mocker):
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = MagicMock()
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import JOB_ID_TOKEN_SYNC, schedule_token_sync_job

        schedule_token_sync_job(interval_seconds=120)

        mock_scheduler.remove_job.assert_called_once_with(JOB_ID_TOKEN_SYNC)
        mock_scheduler.add_job.assert_called_once()


class TestUnscheduleAndNextRun:
    """Tests for unschedule_token_sync_job and get_next_run_time."""

    def test_unschedule_is_safe_without_job(self, mocker):
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = None
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import unschedule_token_sync_job

        unschedule_token_sync_job()

        mock_scheduler.remove_job.assert_not_called()

    def test_next_run_time_iso(self, mocker):
        from datetime import UTC, datetime

        run_at = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = MagicMock(next_run_time=run_at)
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import get_next_run_time

        assert get_next_run_time() == run_at.isoformat()

    def test_next_run_time_none_when_unscheduled(self, mocker):
        mock_scheduler = MagicMock()
        mock_scheduler.get_job.return_value = None
        mocker.patch("hypurrspot.scheduler.jobs.get_scheduler", return_value=mock_scheduler)

        from hypurrspot.scheduler.jobs import get_next_run_time

        assert get_next_run_time() is None
