import uvicorn

from config.logging_config import build_logging_config
from config.settings import get_settings
from spice.main import create_app

app = create_app(get_settings())


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_config=build_logging_config(settings.log_level),
    )
