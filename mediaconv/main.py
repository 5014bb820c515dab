import uvicorn

from mediaconv.core.config.settings import settings


def main() -> None:
    uvicorn.run("mediaconv.web.app:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
