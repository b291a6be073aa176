"""ARQ worker entrypoint."""

from arq import cron
from arq.connections import RedisSettings

from imprint.core.config import get_settings
from imprint.core.logging import configure_logging
from imprint.workers.outbox import process_outbox


def _redis_settings() -> RedisSettings:
    """Build ARQ RedisSettings from REDIS_URL."""
    return RedisSettings.from_dsn(get_settings().redis_url)


async def startup(ctx: dict) -> None:
    configure_logging(get_settings().log_level)


async def shutdown(ctx: dict) -> None:
    from imprint.core.database import engine
    await engine.dispose()


class WorkerSettings:
    """ARQ worker configuration."""
    functions = [process_outbox]
    cron_jobs = [
        cron(process_outbox, second={0, 15, 30, 45}, run_at_startup=True),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = _redis_settings()
    max_jobs = 10
    job_timeout = 120


if __name__ == "__main__":
    from arq import run_worker
    run_worker(WorkerSettings)  # type: ignore[arg-type]
