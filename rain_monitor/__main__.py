import os

import uvicorn

from .core.config import settings


def main():
    uvicorn.run(
        "rain_monitor.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 3000)),
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
