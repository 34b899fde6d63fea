"""Entry point for running the HTTP API with uvicorn."""

import uvicorn

from payroll_vault.config import get_settings
from payroll_vault.logging_config import configure_logging


def main() -> None:
    """Run the application."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    uvicorn.run(
        "payroll_vault.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
