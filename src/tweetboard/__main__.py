"""Run the tweetboard service with uvicorn."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "tweetboard.api.app:app",
        host=os.environ.get("TWEETBOARD_HOST", "127.0.0.1"),
        port=int(os.environ.get("TWEETBOARD_PORT", "8000")),
        log_level="info",
    )


if __name__ == "__main__":
    main()
