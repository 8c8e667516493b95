"""CLI interface for image-finder."""

import sys
import json
import logging
from datetime import datetime
from pathlib import Path

import click
from . import __version__
from .config import FinderConfig, default_config_path
from .image_search.criteria import FilterCriteria, NumericRange
from .image_search.errors import InvalidCriteriaError

logger = logging.getLogger(__name__)


class RangeType(click.ParamType):
    """A single value or a ``min,max`` pair."""

    name = "range"

    def __init__(self, value_type=float):
        self.value_type = value_type

    def _parse(self, text: str):
        if self.value_type is datetime:
            return datetime.fromisoformat(text)
        return self.value_type(text)

    def convert(self, value, param, ctx):
        if isinstance(value, NumericRange):
            return value
        try:
            bounds = [self._parse(part.strip()) for part in str(value).split(",")]
            return NumericRange.from_values(bounds)
        except (ValueError, InvalidCriteriaError) as e:
            self.fail(f"{value!r} is not a valid value or min,max range: {e}", param, ctx)


FLOAT_RANGE = RangeType(float)
INT_RANGE = RangeType(int)
DATE_RANGE = RangeType(datetime)


@click.group()
@click.version_option(version=__version__, prog_name="image-finder")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug mode.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Configuration file (default: ~/.image-finder/config.json).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, config_path) -> None:
    """image-finder - search images by their AI generated metadata."""
    # Ensure ctx.obj exists
    if ctx.obj is None:
        ctx.obj = {}

    # Configure logging
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else default_config_path()

    if debug:
        logger.debug("Debug mode enabled")
    elif verbose:
        logger.info("Verbose mode enabled")


def _load_config(ctx: click.Context) -> FinderConfig:
    return FinderConfig.load_from_file(ctx.obj["config_path"])


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Display system and package information."""
    import platform
    click.echo(f"image-finder v{__version__}")
    click.echo(f"Python {platform.python_version()} on {platform.system()} {platform.release()}")
    click.echo(f"Config file: {ctx.obj['config_path']}")


@cli.command()
@click.argument("any_terms", nargs=-1)
@click.option("--image-directories", "-d", multiple=True, help="Directory to search (repeatable; defaults to configured directories)")
@click.option("--keywords", multiple=True, help="Keyword pattern (repeatable, wildcards allowed)")
@click.option("--people", multiple=True, help="Person name pattern")
@click.option("--objects", multiple=True, help="Detected object pattern")
@click.option("--scenes", multiple=True, help="Scene pattern")
@click.option("--picture-type", multiple=True, help="Picture type pattern")
@click.option("--style-type", multiple=True, help="Style type pattern")
@click.option("--overall-mood", multiple=True, help="Overall mood pattern")
@click.option("--description-search", multiple=True, help="Pattern matched against the descriptions")
@click.option("--has-nudity", is_flag=True, help="Only images flagged for nudity")
@click.option("--no-nudity", is_flag=True, help="Only images not flagged for nudity")
@click.option("--has-explicit-content", is_flag=True, help="Only images flagged as explicit")
@click.option("--no-explicit-content", is_flag=True, help="Only images not flagged as explicit")
@click.option("--meta-camera-make", multiple=True, help="Camera make pattern")
@click.option("--meta-camera-model", multiple=True, help="Camera model pattern")
@click.option("--meta-width", type=INT_RANGE, help="Width in pixels, exact or min,max")
@click.option("--meta-height", type=INT_RANGE, help="Height in pixels, exact or min,max")
@click.option("--meta-gps-latitude", type=FLOAT_RANGE, help="GPS latitude, exact or min,max")
@click.option("--meta-gps-longitude", type=FLOAT_RANGE, help="GPS longitude, exact or min,max")
@click.option("--meta-gps-altitude", type=FLOAT_RANGE, help="GPS altitude in meters, exact or min,max")
@click.option("--meta-exposure-time", type=FLOAT_RANGE, help="Exposure time in seconds, exact or min,max")
@click.option("--meta-f-number", type=FLOAT_RANGE, help="F-number, exact or min,max")
@click.option("--meta-iso", type=INT_RANGE, help="ISO, exact or min,max")
@click.option("--meta-focal-length", type=FLOAT_RANGE, help="Focal length in mm, exact or min,max")
@click.option("--meta-date-taken", type=DATE_RANGE, help="Date taken (ISO format), exact or min,max")
@click.option("--geo-location", type=(float, float), default=None, help="Latitude and longitude to search around")
@click.option("--geo-distance-in-meters", type=float, default=1000.0, show_default=True, help="Radius around --geo-location")
@click.option("--min-confidence-ratio", type=float, default=None, help="Minimum detection confidence (0.0-1.0)")
@click.option("--language", default=None, help="Description language (defaults to configured language)")
@click.option("--recursive/--no-recursive", default=None, help="Scan subdirectories recursively")
@click.option("--use-index/--no-use-index", default=None, help="Search the SQLite index instead of scanning")
@click.option("--index-path", default=None, help="SQLite index file")
@click.option("--max-workers", type=int, default=None, help="Number of worker threads")
@click.option("--input-json", type=click.File("r"), default=None, help="Prior results as JSON ('-' for stdin)")
@click.option("--append", is_flag=True, help="Emit --input-json results first instead of re-filtering them")
@click.option("--output-format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def find(ctx, any_terms, image_directories, language, recursive, use_index, index_path,
         max_workers, input_json, append, output_format, **filters):
    """Find images whose metadata matches all given filters.

    ANY terms are matched against every metadata field; terms naming an
    existing file are searched directly.
    """
    from .image_search.finder import ImageFinder, SearchContext
    from .image_search.metadata_store import SqliteSidecarStore
    from .image_search.models import MediaItem
    from .image_search.sidecar_store import StreamSidecarStore

    config = _load_config(ctx)
    use_index = config.use_index if use_index is None else use_index

    try:
        criteria = FilterCriteria(any=list(any_terms), **filters).validate()
    except InvalidCriteriaError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    input_items = []
    if input_json is not None:
        try:
            data = json.load(input_json)
            if isinstance(data, dict):
                data = [data]
            input_items = [MediaItem.from_dict(entry) for entry in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            click.echo(f"Error: Invalid input JSON: {e}", err=True)
            ctx.exit(2)

    context = SearchContext(
        image_directories=list(image_directories) or list(config.image_directories),
        language=config.get_language(language),
        recursive=config.recursive if recursive is None else recursive,
        max_workers=max_workers or config.max_workers,
        use_index=use_index,
    )
    store = SqliteSidecarStore(index_path or config.index_path) if use_index else StreamSidecarStore()

    if ctx.obj.get("verbose"):
        click.echo(f"Searching: {', '.join(context.image_directories) or '(no directories)'}", err=True)
        click.echo(f"Language: {context.language}", err=True)

    finder = ImageFinder(store=store)
    try:
        results = finder.find(criteria, context, input_items=input_items, append=append)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    if output_format == "json":
        click.echo(json.dumps([item.to_dict() for item in results], indent=2, default=str))
        return

    if not results:
        click.echo("No images found.")
        return

    click.echo(f"Found {len(results)} images:")
    for i, item in enumerate(results, 1):
        click.echo(f"\n{i}. {item.filename}")
        click.echo(f"   Path: {item.path}")
        if item.width and item.height:
            click.echo(f"   Size: {item.width}x{item.height}")
        if item.description is not None:
            if item.description.short_description:
                click.echo(f"   Description: {item.description.short_description[:200]}")
            if item.description.keywords:
                click.echo(f"   Keywords: {', '.join(item.description.keywords[:10])}")
        if item.people.faces:
            click.echo(f"   People: {', '.join(item.people.faces)}")
        if item.objects.object_counts:
            counts = ", ".join(f"{label} ({count})" for label, count in item.objects.object_counts.items())
            click.echo(f"   Objects: {counts}")
        if not item.scenes.is_unknown:
            click.echo(f"   Scene: {item.scenes.scene} ({item.scenes.confidence:.0%})")


@cli.group("config")
def config_group():
    """Manage image directories and the metadata language."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Show the current configuration."""
    config = _load_config(ctx)
    click.echo(json.dumps(config.to_dict(), indent=2, ensure_ascii=False))


@config_group.command("add-dirs")
@click.argument("directories", nargs=-1, required=True)
@click.pass_context
def config_add_dirs(ctx, directories):
    """Add directories to the configured image collection."""
    config = _load_config(ctx)
    added = config.add_image_directories(directories)
    config.save_to_file(ctx.obj["config_path"])
    for directory in added:
        click.echo(f"Added: {directory}")
    click.echo(f"Image directories: {len(config.image_directories)}")


@config_group.command("set-language")
@click.argument("language")
@click.pass_context
def config_set_language(ctx, language):
    """Set the default language for image descriptions."""
    config = _load_config(ctx)
    config.set_language(language)
    config.save_to_file(ctx.obj["config_path"])
    click.echo(f"Language: {config.language}")


@cli.group()
def index():
    """Manage the SQLite sidecar index."""
    pass


@index.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--index-path", default=None, help="SQLite index file")
@click.option("--recursive/--no-recursive", default=True, help="Scan subdirectories recursively")
@click.pass_context
def build(ctx, directory, index_path, recursive):
    """Copy the sidecars of every image in DIRECTORY into the index."""
    from .image_search.config import is_default_language
    from .image_search.metadata_store import SqliteSidecarStore
    from .image_search.scanner import ImageScanner
    from .image_search.sidecar_store import StreamSidecarStore

    config = _load_config(ctx)
    store = SqliteSidecarStore(index_path or config.index_path)
    source = StreamSidecarStore()
    languages = [] if is_default_language(config.language) else [config.language]

    scanner = ImageScanner(recursive=recursive)
    indexed = 0
    for path in scanner.iter_directory(directory):
        store.import_sidecars(path, source, languages=languages)
        indexed += 1
        if ctx.obj.get("verbose"):
            click.echo(f"Indexed: {path}")
    click.echo(f"Indexed {indexed} images into {store.db_path}")


@index.command()
@click.option("--index-path", default=None, help="SQLite index file")
@click.pass_context
def stats(ctx, index_path):
    """Show index statistics."""
    from .image_search.metadata_store import SqliteSidecarStore

    config = _load_config(ctx)
    store = SqliteSidecarStore(index_path or config.index_path)
    stats = store.get_stats()

    click.echo("Image Index Statistics:")
    click.echo(f"  Index file: {store.db_path}")
    click.echo(f"  Total images: {stats.get('total_images', 0)}")
    click.echo(f"  Total sidecars: {stats.get('total_sidecars', 0)}")

    # Additional stats if verbose
    if ctx.obj.get("verbose"):
        for name, count in stats.get("sidecars_by_name", {}).items():
            click.echo(f"    {name}: {count}")


def main() -> None:
    """Entry point for the CLI."""
    try:
        cli(obj={})
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
