"""Entry point for running the ActionGraph HTTP API."""

import uvicorn

from actiongraph.backend.app import create_app
from actiongraph.config import Config


def main() -> None:
    """Run the API server with uvicorn."""
    config = Config()

    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
