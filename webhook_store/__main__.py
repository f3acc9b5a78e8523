import uvicorn

from webhook_store.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "webhook_store.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
