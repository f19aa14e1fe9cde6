"""Run the service with ``python -m email_otp``."""

import uvicorn

from email_otp.config import settings


def main() -> None:
    uvicorn.run(
        "email_otp.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
