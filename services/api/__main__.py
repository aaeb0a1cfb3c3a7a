import uvicorn

from core.settings import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "services.api.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
