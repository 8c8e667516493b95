"""Serve the image-finder API with uvicorn: ``python -m image_finder.web``."""

import click
import uvicorn

from image_finder import __version__


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=8000, show_default=True, help="Port to listen on.")
@click.option("--log-level", default="info", show_default=True, help="uvicorn log level.")
def main(host: str, port: int, log_level: str) -> None:
    """Start the image-finder search API."""
    click.echo(f"image-finder {__version__} API on http://{host}:{port} (docs at /docs)")
    uvicorn.run("image_finder.web.api:app", host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
