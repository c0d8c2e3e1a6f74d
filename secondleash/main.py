"""SecondLeash entrypoint."""

import uvicorn


def cli() -> None:
    """CLI entrypoint."""
    uvicorn.run(
        "secondleash.web.app:create_app",
        factory=True,
        host="0.0.0.0",  # nosec B104
        port=8000,
    )


if __name__ == "__main__":
    cli()
