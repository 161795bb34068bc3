"""
Tests for the background job registry.
"""

from unittest.mock import AsyncMock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from admissions.core import scheduler


@pytest.fixture(autouse=True)
def empty_registry():
    with patch.dict(scheduler._job_registry, clear=True):
        yield


class TestJobRegistry:
    def test_register_before_start_is_kept(self):
        job = AsyncMock()

        with patch.object(scheduler, "_scheduler", None):
            scheduler.register_job("cleanup", job, IntervalTrigger(minutes=5))
            jobs = scheduler.list_registered_jobs()

        assert jobs == [{"job_id": "cleanup", "registered": True}]

    @pytest.mark.asyncio
    async def test_trigger_job_manually_runs_job(self):
        job = AsyncMock()
        scheduler._job_registry["cleanup"] = (job, IntervalTrigger(minutes=5))

        result = await scheduler.trigger_job_manually("cleanup")

        job.assert_awaited_once()
        assert result["status"] == "success"

    @pytest.mark.asyncio
    async def test_trigger_job_manually_reports_failure(self):
        job = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler._job_registry["cleanup"] = (job, IntervalTrigger(minutes=5))

        result = await scheduler.trigger_job_manually("cleanup")

        assert result["status"] == "error"
        assert result["error"] == "boom"

    @pytest.mark.asyncio
    async def test_trigger_unknown_job(self):
        with pytest.raises(ValueError):
            await scheduler.trigger_job_manually("missing")
