"""Run the API with uvicorn: ``python -m music_library`` or ``music-library``."""

import uvicorn

from music_library.config import settings


def run() -> None:
    uvicorn.run(
        "music_library.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
